from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
from fastapi import APIRouter, Depends
from sqlmodel import Session
from pydantic import BaseModel, field_validator
from app.db.session import get_session
from app.models.admin_user import AdminUser
from app.models.blog import Post
from app.routers.auth import get_current_admin
from app.services.categories import CategoryService
from app.services.filters import PostsFilterState, SortField, SortOrder, StatusFilter, compute_view
from app.services.posts import PostService
from app.services.tags import TagService

router = APIRouter()

# Pydantic models for requests/responses
class DashboardStats(BaseModel):
    totalPosts: int
    publishedPosts: int
    draftPosts: int
    categoriesCount: int
    tagsCount: int
    recentPosts: List[Dict[str, Any]]

class PostForm(BaseModel):
    title: str
    slug: Optional[str] = None
    content_markdown: str = ""
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    category_id: str = ""
    tags: List[str] = []
    featured_image_url: Optional[str] = None
    published: bool = False
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("published_at", "created_at")
    @classmethod
    def to_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

class PostUpdate(PostForm):
    title: Optional[str] = None
    content_markdown: Optional[str] = None
    category_id: Optional[str] = None
    tags: Optional[List[str]] = None
    published: Optional[bool] = None

class BulkIds(BaseModel):
    ids: List[str]

class BulkPublish(BulkIds):
    published: bool

def get_post_service(session: Session = Depends(get_session)) -> PostService:
    return PostService(session)

@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard_stats(
    current_admin: AdminUser = Depends(get_current_admin),
    service: PostService = Depends(get_post_service),
    session: Session = Depends(get_session)
):
    """Get dashboard statistics"""
    counts = service.counts()
    recent_posts = [
        {
            "id": post.id,
            "title": post.title,
            "slug": post.slug,
            "published": post.published,
            "updated_at": post.updated_at.isoformat() if post.updated_at else None,
        }
        for post in service.recently_updated(6)
    ]
    return DashboardStats(
        totalPosts=counts["total"],
        publishedPosts=counts["published"],
        draftPosts=counts["draft"],
        categoriesCount=CategoryService(session).count(),
        tagsCount=TagService(session).count(),
        recentPosts=recent_posts,
    )

@router.get("/posts")
def list_posts(
    search: str = "",
    status: StatusFilter = StatusFilter.ALL,
    category_id: str = "",
    sort_field: SortField = SortField.UPDATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
    current_admin: AdminUser = Depends(get_current_admin),
    service: PostService = Depends(get_post_service)
):
    """All posts, filtered and sorted, with counts for "X of Y" display"""
    state = PostsFilterState(
        search=search,
        status=status,
        category_id=category_id,
        sort_field=sort_field,
        sort_order=sort_order,
    )
    view = compute_view(service.list_all(), state)
    return {
        "posts": view.posts,
        "stats": view.stats,
        "filters": state,
        "has_active_filters": state.has_active_filters,
    }

@router.get("/posts/{post_id}", response_model=Post)
def get_post(
    post_id: str,
    current_admin: AdminUser = Depends(get_current_admin),
    service: PostService = Depends(get_post_service)
):
    return service.get_or_404(post_id)

@router.post("/posts", response_model=Post, status_code=201)
def create_post(
    form: PostForm,
    current_admin: AdminUser = Depends(get_current_admin),
    service: PostService = Depends(get_post_service)
):
    return service.create(form.model_dump())

@router.put("/posts/{post_id}", response_model=Post)
def update_post(
    post_id: str,
    form: PostUpdate,
    current_admin: AdminUser = Depends(get_current_admin),
    service: PostService = Depends(get_post_service)
):
    return service.update(post_id, form.model_dump(exclude_unset=True))

@router.delete("/posts/{post_id}")
def delete_post(
    post_id: str,
    current_admin: AdminUser = Depends(get_current_admin),
    service: PostService = Depends(get_post_service)
):
    service.delete(post_id)
    return {"message": "Post deleted successfully"}

@router.post("/posts/{post_id}/toggle-publish")
def toggle_publish(
    post_id: str,
    current_admin: AdminUser = Depends(get_current_admin),
    service: PostService = Depends(get_post_service)
):
    """Flip the published flag. The patch is returned so the client can apply it locally."""
    patch = service.toggle_publish(post_id)
    return {"id": post_id, "patch": patch}

@router.post("/posts/bulk-delete")
def bulk_delete_posts(
    data: BulkIds,
    current_admin: AdminUser = Depends(get_current_admin),
    service: PostService = Depends(get_post_service)
):
    """Delete the selected posts in a single commit: all of them or none"""
    deleted = service.bulk_delete(data.ids)
    return {"deleted": deleted}

@router.post("/posts/bulk-publish")
def bulk_publish_posts(
    data: BulkPublish,
    current_admin: AdminUser = Depends(get_current_admin),
    service: PostService = Depends(get_post_service)
):
    """Publish or unpublish the selected posts in a single commit: all of them or none"""
    patches = service.bulk_set_published(data.ids, data.published)
    return {"patches": patches}
