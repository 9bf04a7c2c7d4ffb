import logging
import re
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from app.models.blog import Tag
from app.services.errors import store_errors

logger = logging.getLogger(__name__)


def tag_slug(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.strip().lower())
    return re.sub(r"[^\w\-\u0600-\u06FF]", "", slug)


class TagService:
    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> List[Tag]:
        return self.session.exec(select(Tag).order_by(Tag.name)).all()

    def get(self, tag_id: str) -> Optional[Tag]:
        return self.session.get(Tag, tag_id)

    def get_or_404(self, tag_id: str) -> Tag:
        tag = self.get(tag_id)
        if not tag:
            raise HTTPException(status_code=404, detail="Tag not found")
        return tag

    def get_by_name(self, name: str) -> Optional[Tag]:
        return self.session.exec(select(Tag).where(Tag.name == name)).first()

    def find_by_name_ignoring_case(self, name: str) -> Optional[Tag]:
        key = name.casefold()
        return next((t for t in self.list_all() if t.name.casefold() == key), None)

    def count(self) -> int:
        return self.session.exec(select(func.count(Tag.id))).one()

    def _save(self, tag: Tag) -> Tag:
        with store_errors(self.session):
            self.session.add(tag)
            self.session.commit()
            self.session.refresh(tag)
        return tag

    def create(self, name: str, slug: Optional[str] = None) -> Tag:
        name = (name or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Tag name cannot be empty")
        if self.get_by_name(name):
            raise HTTPException(status_code=409, detail="A tag with this name already exists")
        tag = self._save(Tag(name=name, slug=slug or tag_slug(name)))
        logger.info("Created tag %s (%s)", tag.name, tag.id)
        return tag

    def get_or_create(self, name: str) -> Tag:
        """Existing tag with this name (ignoring case), or a new one."""
        name = (name or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Tag name cannot be empty")
        existing = self.find_by_name_ignoring_case(name)
        if existing:
            return existing
        return self._save(Tag(name=name, slug=tag_slug(name)))

    def update(self, tag_id: str, name: Optional[str] = None, slug: Optional[str] = None) -> Tag:
        # Posts store tag names, a rename is not propagated to them
        tag = self.get_or_404(tag_id)
        if name is not None:
            name = name.strip()
            if not name:
                raise HTTPException(status_code=400, detail="Tag name cannot be empty")
            existing = self.get_by_name(name)
            if existing and existing.id != tag.id:
                raise HTTPException(status_code=409, detail="A tag with this name already exists")
            tag.name = name
        if slug:
            tag.slug = slug
        return self._save(tag)

    def delete(self, tag_id: str) -> None:
        tag = self.get_or_404(tag_id)
        with store_errors(self.session):
            self.session.delete(tag)
            self.session.commit()
        logger.info("Deleted tag %s", tag_id)
