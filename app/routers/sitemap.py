from typing import List, Optional
from urllib.parse import quote
from xml.sax.saxutils import escape

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from app.core.clock import utcnow
from app.core.config import settings
from app.db.session import get_session
from app.services.categories import CategoryService
from app.services.posts import PostService

router = APIRouter()


def url_entry(base_url: str, path: str, priority: str, changefreq: str, lastmod: Optional[str] = None) -> str:
    lines = [
        "  <url>",
        f"    <loc>{escape(base_url + path)}</loc>",
    ]
    if lastmod:
        lines.append(f"    <lastmod>{lastmod}</lastmod>")
    lines += [
        f"    <changefreq>{changefreq}</changefreq>",
        f"    <priority>{priority}</priority>",
        "  </url>",
    ]
    return "\n".join(lines)


@router.get("/sitemap.xml")
def sitemap(session: Session = Depends(get_session)):
    base_url = settings.SITE_URL.rstrip("/")
    now = utcnow().isoformat() + "Z"
    posts = PostService(session).all_published()
    categories = CategoryService(session).list_all()

    # Unique tags of published posts, first-seen order
    tags: List[str] = list(dict.fromkeys(tag for post in posts for tag in (post.tags or [])))

    entries = [
        url_entry(base_url, "/", "1.0", "daily"),
        url_entry(base_url, "/blog", "0.9", "daily"),
    ]
    for post in posts:
        lastmod = post.updated_at.isoformat() + "Z" if post.updated_at else now
        entries.append(url_entry(base_url, f"/blog/{quote(post.slug or post.id)}", "0.8", "weekly", lastmod))
    for category in categories:
        lastmod = category.created_at.isoformat() + "Z" if category.created_at else now
        entries.append(url_entry(base_url, f"/blog/category/{category.id}", "0.7", "monthly", lastmod))
    for tag in tags:
        entries.append(url_entry(base_url, f"/blog/tag/{quote(tag)}", "0.6", "monthly"))

    body = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        + "\n".join(entries)
        + "\n</urlset>\n"
    )
    return Response(content=body, media_type="application/xml")
