"""
业务模块
导入各模块的数据模型，确保建表时全部注册到 Base.metadata
"""

from .tags import tags_models  # noqa: F401
from .documents import documents_models  # noqa: F401
from .terms import terms_models  # noqa: F401
from .todos import todos_models  # noqa: F401
