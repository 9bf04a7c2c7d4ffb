import logging
import math
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import unquote

from fastapi import HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from app.core.clock import utcnow
from app.models.blog import Post
from app.services.categories import CategoryService
from app.services.errors import store_errors
from app.services.filters import matches_search
from app.services.images import is_valid_image_url
from app.services.seo import default_seo_description
from app.services.slug import generate_slug, is_slug_unique
from app.services.tags import TagService

logger = logging.getLogger(__name__)

SUGGESTED_LIMIT = 4
SUGGESTED_PER_TAG = 5
SUGGESTED_CATEGORY_LIMIT = 6

EDITABLE_FIELDS = (
    "title",
    "slug",
    "content_markdown",
    "seo_title",
    "seo_description",
    "category_id",
    "tags",
    "featured_image_url",
    "published",
    "published_at",
    "created_at",
)


def paginate(items: Sequence[Any], page: int, per_page: int) -> Dict[str, Any]:
    total = len(items)
    start = (page - 1) * per_page
    return {
        "posts": list(items[start:start + per_page]),
        "total": total,
        "page": page,
        "pages": max(1, math.ceil(total / per_page)),
        "has_more": start + per_page < total,
    }


class PostService:
    def __init__(self, session: Session):
        self.session = session

    # --- Reads ---

    def list_all(self) -> List[Post]:
        return self.session.exec(select(Post).order_by(Post.updated_at.desc())).all()

    def get(self, post_id: str) -> Optional[Post]:
        return self.session.get(Post, post_id)

    def get_or_404(self, post_id: str) -> Post:
        post = self.get(post_id)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        return post

    def get_by_slug(self, slug: str) -> Optional[Post]:
        return self.session.exec(select(Post).where(Post.slug == slug)).first()

    def counts(self) -> Dict[str, int]:
        total = self.session.exec(select(func.count(Post.id))).one()
        published = self.session.exec(select(func.count(Post.id)).where(Post.published == True)).one()
        return {"total": total, "published": published, "draft": total - published}

    def recently_updated(self, limit: int = 6) -> List[Post]:
        return self.session.exec(select(Post).order_by(Post.updated_at.desc()).limit(limit)).all()

    def _published(self):
        return select(Post).where(Post.published == True).order_by(Post.published_at.desc())

    def all_published(self) -> List[Post]:
        return self.session.exec(self._published()).all()

    def latest(self, limit: int = 12) -> List[Post]:
        return self.session.exec(self._published().limit(limit)).all()

    def list_published(self, page: int, per_page: int) -> Dict[str, Any]:
        return paginate(self.all_published(), page, per_page)

    def search_published(self, query: str, page: int, per_page: int) -> Dict[str, Any]:
        posts = self.all_published()
        query = (query or "").strip().lower()
        if query:
            posts = [p for p in posts if matches_search(p, query)]
        return paginate(posts, page, per_page)

    def list_by_category(self, category_id: str, page: int, per_page: int) -> Dict[str, Any]:
        posts = self.session.exec(self._published().where(Post.category_id == category_id)).all()
        return paginate(posts, page, per_page)

    def _with_tag(self, tag_name: str) -> List[Post]:
        # tags is a JSON list, filter here rather than per-dialect JSON SQL
        return [p for p in self.all_published() if tag_name in (p.tags or [])]

    def list_by_tag(self, tag_name: str, page: int, per_page: int) -> Dict[str, Any]:
        return paginate(self._with_tag(tag_name), page, per_page)

    def resolve_public(self, path: str) -> Optional[Post]:
        """Find a published post by full legacy path, last path segment, or id."""
        segments = [unquote(s) for s in path.strip("/").split("/") if s]
        if not segments:
            return None
        full_slug = "/".join(segments)
        last_segment = segments[-1]

        post = self.get_by_slug(full_slug)
        if not post and full_slug != last_segment:
            post = self.get_by_slug(last_segment)
        if not post:
            post = self.get(last_segment)

        if post and post.published:
            return post
        return None

    def suggested(self, post: Post) -> List[Post]:
        """Posts sharing a tag, falling back to the same category."""
        if post.tags:
            seen = set()
            candidates = []
            for tag in post.tags:
                for other in self._with_tag(tag)[:SUGGESTED_PER_TAG]:
                    if other.id != post.id and other.id not in seen:
                        seen.add(other.id)
                        candidates.append(other)
            if len(candidates) >= 2:
                return candidates[:SUGGESTED_LIMIT]

        same_category = self.session.exec(
            select(Post)
            .where(Post.category_id == post.category_id, Post.published == True)
            .limit(SUGGESTED_CATEGORY_LIMIT)
        ).all()
        return [p for p in same_category if p.id != post.id][:SUGGESTED_LIMIT]

    # --- Writes ---

    def _prepare(self, data: Dict[str, Any], post: Optional[Post] = None) -> Dict[str, Any]:
        """Validate form data and fill derived fields; raises before any write."""
        title = (data.get("title") or "").strip()
        if not title:
            raise HTTPException(status_code=400, detail="Title is required")
        data["title"] = title

        slug = (data.get("slug") or "").strip() or generate_slug(title)
        if not slug:
            raise HTTPException(status_code=400, detail="Slug is required")
        if not is_slug_unique(self.session, Post, slug, exclude_id=post.id if post else None):
            raise HTTPException(status_code=409, detail="This slug is already used by another post")
        data["slug"] = slug

        category_id = data.get("category_id") or ""
        if category_id and not CategoryService(self.session).get(category_id):
            raise HTTPException(status_code=400, detail="Category does not exist")
        data["category_id"] = category_id

        image_url = data.get("featured_image_url") or None
        if image_url and not is_valid_image_url(image_url):
            raise HTTPException(status_code=400, detail="Featured image URL is not a valid image")
        data["featured_image_url"] = image_url

        content = data.get("content_markdown") or ""
        data["content_markdown"] = content
        if not data.get("seo_title"):
            data["seo_title"] = title
        if not data.get("seo_description"):
            data["seo_description"] = default_seo_description(content)

        tag_service = TagService(self.session)
        tags = [t.strip() for t in data.get("tags") or [] if t and t.strip()]
        for name in tags:
            tag_service.get_or_create(name)
        data["tags"] = tags

        if data.get("published") and not data.get("published_at"):
            data["published_at"] = (post.published_at if post else None) or utcnow()
        return data

    def create(self, data: Dict[str, Any]) -> Post:
        data = self._prepare(dict(data))
        now = utcnow()
        post = Post(**{k: v for k, v in data.items() if k in EDITABLE_FIELDS})
        post.created_at = data.get("created_at") or now
        post.updated_at = now
        with store_errors(self.session):
            self.session.add(post)
            self.session.commit()
            self.session.refresh(post)
        logger.info("Created post %s (%s)", post.slug, post.id)
        return post

    def update(self, post_id: str, data: Dict[str, Any]) -> Post:
        post = self.get_or_404(post_id)
        merged = {field: getattr(post, field) for field in EDITABLE_FIELDS}
        merged.update(data)
        merged = self._prepare(merged, post=post)
        for field in EDITABLE_FIELDS:
            if field == "created_at" and not merged.get(field):
                continue
            setattr(post, field, merged.get(field))
        post.updated_at = utcnow()
        with store_errors(self.session):
            self.session.add(post)
            self.session.commit()
            self.session.refresh(post)
        return post

    def delete(self, post_id: str) -> None:
        post = self.get_or_404(post_id)
        with store_errors(self.session):
            self.session.delete(post)
            self.session.commit()
        logger.info("Deleted post %s", post_id)

    def _publish_patch(self, post: Post, published: bool) -> Dict[str, Any]:
        patch: Dict[str, Any] = {"published": published}
        if published and not post.published_at:
            patch["published_at"] = utcnow()
        return patch

    def toggle_publish(self, post_id: str) -> Dict[str, Any]:
        """Flip published; returns the applied patch for the client's local copy."""
        post = self.get_or_404(post_id)
        patch = self._publish_patch(post, not post.published)
        for field, value in patch.items():
            setattr(post, field, value)
        with store_errors(self.session):
            self.session.add(post)
            self.session.commit()
        return patch

    def _get_many_or_404(self, ids: List[str]) -> List[Post]:
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            raise HTTPException(status_code=400, detail="No posts selected")
        posts = self.session.exec(select(Post).where(Post.id.in_(unique_ids))).all()
        found = {p.id for p in posts}
        missing = [i for i in unique_ids if i not in found]
        if missing:
            raise HTTPException(status_code=404, detail=f"Posts not found: {', '.join(missing)}")
        return posts

    def bulk_delete(self, ids: List[str]) -> List[str]:
        """Delete all posts in one commit, or none of them."""
        posts = self._get_many_or_404(ids)
        deleted = [p.id for p in posts]
        with store_errors(self.session):
            for post in posts:
                self.session.delete(post)
            self.session.commit()
        logger.info("Bulk deleted %d posts", len(deleted))
        return deleted

    def bulk_set_published(self, ids: List[str], published: bool) -> Dict[str, Dict[str, Any]]:
        """Set published on all posts in one commit; returns per-post patches."""
        posts = self._get_many_or_404(ids)
        patches: Dict[str, Dict[str, Any]] = {}
        with store_errors(self.session):
            for post in posts:
                patch = self._publish_patch(post, published)
                for field, value in patch.items():
                    setattr(post, field, value)
                self.session.add(post)
                patches[post.id] = patch
            self.session.commit()
        logger.info("Bulk set published=%s on %d posts", published, len(patches))
        return patches

    # --- Import helpers ---

    def create_imported(self, **fields) -> Post:
        now = utcnow()
        post = Post(created_at=now, updated_at=now, **fields)
        with store_errors(self.session):
            self.session.add(post)
            self.session.commit()
            self.session.refresh(post)
        return post
