from typing import List, Optional, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session
from pydantic import BaseModel
from app.db.session import get_session
from app.models.blog import Post, Category, Tag
from app.services.categories import CategoryService
from app.services.dates import isoformat
from app.services.posts import PostService
from app.services.site_settings import SettingsSection, SiteSettingsService
from app.services.tags import TagService

router = APIRouter()

HOME_POSTS_LIMIT = 12

class HomepageData(BaseModel):
    home: Dict[str, Any]
    system: Dict[str, Any]
    latest_posts: List[Dict[str, Any]]

def post_summary(post: Post) -> Dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "seo_description": post.seo_description,
        "category_id": post.category_id,
        "tags": post.tags or [],
        "featured_image_url": post.featured_image_url,
        "published_at": isoformat(post.published_at),
    }

def summarize(page: Dict[str, Any]) -> Dict[str, Any]:
    return {**page, "posts": [post_summary(p) for p in page["posts"]]}

def get_post_service(session: Session = Depends(get_session)) -> PostService:
    return PostService(session)

def get_settings_service(session: Session = Depends(get_session)) -> SiteSettingsService:
    return SiteSettingsService(session)

@router.get("/home", response_model=HomepageData)
def get_homepage_data(
    service: PostService = Depends(get_post_service),
    settings_service: SiteSettingsService = Depends(get_settings_service)
):
    """Home page: profile/hero settings, site identity, and the latest published posts"""
    return HomepageData(
        home=settings_service.get(SettingsSection.HOME).model_dump(),
        system=settings_service.get(SettingsSection.SYSTEM).model_dump(),
        latest_posts=[post_summary(p) for p in service.latest(HOME_POSTS_LIMIT)],
    )

@router.get("/posts")
def list_posts(
    page: int = Query(1, ge=1),
    service: PostService = Depends(get_post_service),
    settings_service: SiteSettingsService = Depends(get_settings_service)
):
    """Published posts, newest first"""
    return summarize(service.list_published(page, settings_service.posts_per_page()))

@router.get("/search")
def search_posts(
    q: str = "",
    page: int = Query(1, ge=1),
    service: PostService = Depends(get_post_service),
    settings_service: SiteSettingsService = Depends(get_settings_service)
):
    """Published posts whose title, description or tags contain `q`"""
    return summarize(service.search_published(q, page, settings_service.posts_per_page()))

@router.get("/posts/{path:path}")
def read_post(path: str, service: PostService = Depends(get_post_service), session: Session = Depends(get_session)):
    """A post by slug, legacy path (e.g. 2023/05/my-post) or id, with suggestions"""
    post = service.resolve_public(path)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    category = CategoryService(session).get(post.category_id) if post.category_id else None
    return {
        "post": post,
        "category": category,
        "suggested_posts": [post_summary(p) for p in service.suggested(post)],
    }

@router.get("/categories", response_model=List[Category])
def list_categories(session: Session = Depends(get_session)):
    return CategoryService(session).list_all()

@router.get("/categories/{category_id}")
def category_archive(
    category_id: str,
    page: int = Query(1, ge=1),
    service: PostService = Depends(get_post_service),
    settings_service: SiteSettingsService = Depends(get_settings_service),
    session: Session = Depends(get_session)
):
    # May commit default settings, which would expire rows loaded before it
    per_page = settings_service.posts_per_page()
    category = CategoryService(session).get_or_404(category_id)
    result = summarize(service.list_by_category(category.id, page, per_page))
    return {"category": category, **result}

@router.get("/tags", response_model=List[Tag])
def list_tags(session: Session = Depends(get_session)):
    return TagService(session).list_all()

@router.get("/tags/{tag_id}")
def tag_archive(
    tag_id: str,
    page: int = Query(1, ge=1),
    service: PostService = Depends(get_post_service),
    settings_service: SiteSettingsService = Depends(get_settings_service),
    session: Session = Depends(get_session)
):
    """Posts carrying a tag; `tag_id` may also be the tag name itself"""
    per_page = settings_service.posts_per_page()
    tag: Optional[Tag] = TagService(session).get(tag_id)
    tag_name = tag.name if tag else tag_id
    result = summarize(service.list_by_tag(tag_name, page, per_page))
    return {"tag": tag, "tag_name": tag_name, **result}
