from press.routes.admin import router as admin_router
from press.routes.posts import router as posts_router

__all__ = ["admin_router", "posts_router"]
