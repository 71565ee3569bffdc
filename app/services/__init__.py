from app.services.blog import BlogService, ImageReconciliation
from app.services.media import MediaService

__all__ = ["BlogService", "ImageReconciliation", "MediaService"]
