import logging
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from app.models.blog import Category
from app.services.errors import store_errors
from app.services.slug import generate_slug

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> List[Category]:
        return self.session.exec(select(Category).order_by(Category.name)).all()

    def get(self, category_id: str) -> Optional[Category]:
        return self.session.get(Category, category_id)

    def get_or_404(self, category_id: str) -> Category:
        category = self.get(category_id)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")
        return category

    def find_by_name(self, name: str) -> Optional[Category]:
        """Case-insensitive name lookup; names are the natural key."""
        # SQL lower() folds ASCII only on SQLite, so compare here
        key = name.casefold()
        return next((c for c in self.list_all() if c.name.casefold() == key), None)

    def count(self) -> int:
        return self.session.exec(select(func.count(Category.id))).one()

    def _check_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Category name is required")
        existing = self.find_by_name(name)
        if existing and existing.id != exclude_id:
            raise HTTPException(status_code=409, detail="A category with this name already exists")
        return name

    def create(self, name: str, slug: Optional[str] = None, description: Optional[str] = None) -> Category:
        name = self._check_name(name)
        category = Category(name=name, slug=slug or generate_slug(name), description=description)
        with store_errors(self.session):
            self.session.add(category)
            self.session.commit()
            self.session.refresh(category)
        logger.info("Created category %s (%s)", category.name, category.id)
        return category

    def update(self, category_id: str, **changes) -> Category:
        category = self.get_or_404(category_id)
        if changes.get("name") is not None:
            category.name = self._check_name(changes["name"], exclude_id=category.id)
        if changes.get("slug"):
            category.slug = changes["slug"]
        if "description" in changes:
            category.description = changes["description"]
        with store_errors(self.session):
            self.session.add(category)
            self.session.commit()
            self.session.refresh(category)
        return category

    def delete(self, category_id: str) -> None:
        # Posts keep their category_id; archives simply stop resolving it
        category = self.get_or_404(category_id)
        with store_errors(self.session):
            self.session.delete(category)
            self.session.commit()
        logger.info("Deleted category %s", category_id)
