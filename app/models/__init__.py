# Import all models to register them with SQLModel
from app.models.admin_user import AdminUser
from app.models.blog import Post, Category, Tag
from app.models.site_setting import SiteSetting

__all__ = [
    "AdminUser",
    "Post",
    "Category",
    "Tag",
    "SiteSetting",
]
