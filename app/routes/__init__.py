from app.routes.blog import router as blog_router
from app.routes.root import router as root_router
from app.routes.upload import router as upload_router

__all__ = [
    "blog_router",
    "root_router",
    "upload_router",
]
