"""
Flow Firmer - 主入口
基于FastAPI的个人效率后端：标签、期间、待办与文档

功能：
- 请求日志中间件
- 健康检查端点
- 标准化错误处理
- Cookie 令牌认证
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.database import init_db, close_db
from core.middleware import RequestLoggingMiddleware
from core.errors import ErrorCode, ERROR_MESSAGES, register_exception_handlers

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# 减少第三方库的日志输出
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # ==================== 启动阶段 ====================
    current_settings = get_settings()
    logger.info(f"🚀 正在启动 {current_settings.app_name} v{current_settings.app_version}...")

    if not current_settings.jwt_secret:
        logger.warning("⚠️  未配置 JWT_SECRET，所有需要认证的请求将返回 500")

    await init_db()
    logger.info(f"✅ 关联记录写入方式: {current_settings.association_write_mode}")
    logger.info(f"🎉 {current_settings.app_name} 启动完成!")

    yield

    # ==================== 关闭阶段 ====================
    logger.info("🛑 系统关闭中...")
    await close_db()
    logger.info("👋 系统已关闭")


# ==================== 创建应用 ====================

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="个人效率后端：标签、期间、待办与文档",
    lifespan=lifespan
)

# ==================== 中间件配置（顺序重要，后添加的先执行） ====================

# 1. CORS 跨域配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# 2. 请求日志中间件
app.add_middleware(
    RequestLoggingMiddleware,
    slow_request_threshold=1.0  # 超过1秒的请求记录为慢请求
)

# ==================== 异常处理器 ====================

register_exception_handlers(app)


# 全局未捕获异常处理
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """全局异常捕获"""
    logger.error(f"未处理异常: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "code": ErrorCode.INTERNAL_ERROR,
            "message": ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR],
            "data": None
        }
    )


# ==================== 注册路由 ====================

from routers import auth, health
from modules.tags.tags_router import router as tags_router
from modules.documents.documents_router import router as documents_router, document_tags_router
from modules.terms.terms_router import router as terms_router
from modules.todos.todos_router import router as todos_router

# 系统路由
app.include_router(health.router)
app.include_router(auth.router)

# 业务路由
app.include_router(tags_router, prefix="/api/tags", tags=["标签"])
app.include_router(documents_router, prefix="/api/documents", tags=["文档"])
app.include_router(document_tags_router, prefix="/api/document_tags", tags=["文档标签"])
app.include_router(terms_router, prefix="/api/terms", tags=["期间"])
app.include_router(todos_router, prefix="/api/todos", tags=["待办"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
