import re
from typing import Optional, Type
from urllib.parse import unquote

from sqlmodel import Session, SQLModel, select

ARABIC_DIACRITICS = re.compile(r"[\u064B-\u065F\u0670]")
DISALLOWED = re.compile(r"[^a-z0-9\-\u0621-\u064A]")


def generate_slug(text: str) -> str:
    """URL slug from a title, keeping Arabic letters, a-z, digits and dashes."""
    if not text:
        return ""

    slug = text.strip()
    slug = ARABIC_DIACRITICS.sub("", slug)
    slug = slug.lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = DISALLOWED.sub("", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def simple_slug(name: str) -> str:
    """Lower-case and dash-join words; used for imported categories and tags."""
    return re.sub(r"\s+", "-", name.strip().lower())


def normalize_slug(raw: Optional[str]) -> str:
    """Clean a legacy slug: trim, lower-case, strip slashes, URL-decode."""
    slug = (raw or "").strip().lower()
    if not slug:
        return ""
    slug = slug.strip("/")
    try:
        slug = unquote(slug, errors="strict")
    except UnicodeDecodeError:
        # Keep the undecoded value
        pass
    return slug


def is_slug_unique(session: Session, model: Type[SQLModel], slug: str, exclude_id: Optional[str] = None) -> bool:
    """True when no other row of `model` uses `slug`."""
    rows = session.exec(select(model).where(model.slug == slug)).all()
    if not rows:
        return True
    if exclude_id:
        return len(rows) == 1 and rows[0].id == exclude_id
    return False
