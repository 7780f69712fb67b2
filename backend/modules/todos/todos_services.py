"""
待办业务逻辑
"""

import logging
from typing import Dict, List, Optional
from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from core.associations import AssociationWriter
from core.references import ReferenceResolver
from modules.tags.tags_models import Tag
from modules.tags.tags_schemas import TagInfo
from modules.terms.terms_models import Term
from modules.terms.terms_schemas import TermBrief

from .todos_models import Todo, TodoTagMap
from .todos_schemas import TodoCreate, TodoInfo

logger = logging.getLogger(__name__)

tag_resolver = ReferenceResolver(Tag, "Tag")
term_resolver = ReferenceResolver(Term, "Term")


def build_todo_info(todo: Todo, tags: List[Tag], term: Optional[Term]) -> TodoInfo:
    return TodoInfo(
        id=todo.id,
        name=todo.name,
        description=todo.description,
        date=todo.date,
        time=todo.time,
        execution_time=todo.execution_time,
        tags=[TagInfo.model_validate(t) for t in tags],
        term=TermBrief.model_validate(term) if term is not None else None
    )


class TodosService:
    """待办服务"""

    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id

    async def create_todo(
        self,
        data: TodoCreate,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> TodoInfo:
        """创建待办，先解析期间再解析标签"""
        term = None
        if data.term_id is not None:
            term = await term_resolver.resolve_one(self.db, self.user_id, data.term_id)
        tags = await tag_resolver.resolve(self.db, self.user_id, data.tag_ids)

        todo = Todo(
            user_id=self.user_id,
            name=data.name,
            description=data.description,
            date=data.date,
            time=data.time,
            execution_time=data.execution_time,
            term_id=data.term_id
        )
        self.db.add(todo)
        await self.db.flush()

        writer = AssociationWriter(self.db, background_tasks)
        await writer.stage(TodoTagMap, [{"todo_id": todo.id, "tag_id": t.id} for t in tags])
        await self.db.commit()
        writer.dispatch()

        logger.info(f"待办已创建: id={todo.id}, user_id={self.user_id}")
        return build_todo_info(todo, tags, term)

    async def get_todos(self) -> List[TodoInfo]:
        """获取待办列表，附带标签与所属期间"""
        result = await self.db.execute(
            select(Todo).where(Todo.user_id == self.user_id)
            .order_by(Todo.date, Todo.time, Todo.id)
        )
        todos = list(result.scalars().all())

        tags = await tag_resolver.fetch_linked(
            self.db, self.user_id, TodoTagMap, "todo_id", "tag_id", [t.id for t in todos]
        )
        term_ids = sorted({t.term_id for t in todos if t.term_id is not None})
        terms: Dict[int, Term] = {
            term.id: term
            for term in await term_resolver.fetch_owned(self.db, self.user_id, term_ids)
        }

        return [
            build_todo_info(todo, tags.get(todo.id, []), terms.get(todo.term_id))
            for todo in todos
        ]
