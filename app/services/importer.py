"""Bulk import of legacy posts from a CSV export.

Rows are processed one at a time, in file order. Each row reuses or
creates its category and tags by name, then creates the post unless a
post with the same slug already exists. Every write commits on its own,
so an aborted import leaves whatever it already created in place.
"""
import csv
import io
import json
import logging
import math
import re
from typing import Dict, Iterator, List, Literal, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.clock import utcnow
from app.models.blog import Category
from app.services.categories import CategoryService
from app.services.dates import parse_date
from app.services.errors import StoreError
from app.services.posts import PostService
from app.services.seo import import_seo_description
from app.services.slug import normalize_slug, simple_slug
from app.services.tags import TagService

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Uncategorized"
QUOTES = re.compile(r"^[\"']|[\"']$")


class ImportParseError(Exception):
    pass


class ImportEvent(BaseModel):
    type: Literal["log", "progress", "done", "error"]
    message: Optional[str] = None
    progress: Optional[int] = None


def clean_category_name(raw: Optional[str]) -> str:
    name = QUOTES.sub("", (raw or "").strip())
    name = re.sub(r"\s+", " ", name).strip()
    return name or DEFAULT_CATEGORY


def split_tags(raw: Optional[str]) -> List[str]:
    """Comma-separated tag names, quotes stripped, empties dropped, duplicates kept."""
    if not raw:
        return []
    names = [QUOTES.sub("", part.strip()).strip() for part in raw.split(",")]
    return [name for name in names if name]


def parse_csv(content: bytes) -> List[Dict[str, str]]:
    """Header-row CSV into dicts, skipping rows whose cells are all blank."""
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ImportParseError(f"The file is not valid UTF-8: {e}")

    reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
    try:
        if not reader.fieldnames:
            raise ImportParseError("The CSV file is empty.")
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
        rows = []
        for row in reader:
            cells = [v for v in row.values() if isinstance(v, str)]
            if all(not cell.strip() for cell in cells):
                continue
            rows.append(row)
    except csv.Error as e:
        raise ImportParseError(f"Malformed CSV at line {reader.line_num}: {e}")
    return rows


def _percent(processed: int, total: int) -> int:
    return math.floor(processed / total * 100 + 0.5)


class CsvImporter:
    def __init__(self, session: Session):
        self.session = session
        self.categories = CategoryService(session)
        self.tags = TagService(session)
        self.posts = PostService(session)

    def _log(self, message: str) -> ImportEvent:
        logger.info("Import: %s", message)
        return ImportEvent(type="log", message=message)

    def import_csv(self, content: bytes) -> Iterator[ImportEvent]:
        try:
            rows = parse_csv(content)
        except ImportParseError as e:
            logger.error("CSV import aborted: %s", e)
            yield ImportEvent(type="error", message=f"Could not read the CSV file: {e}")
            return
        yield from self.import_rows(rows)

    def import_rows(self, rows: List[Dict[str, str]]) -> Iterator[ImportEvent]:
        total = len(rows)
        yield self._log(f"Found {total} posts in the file.")

        processed = 0
        try:
            for row in rows:
                yield from self._import_row(row)
                processed += 1
                yield ImportEvent(type="progress", progress=_percent(processed, total))
        except (StoreError, SQLAlchemyError) as e:
            if isinstance(e, StoreError):
                error = e
            else:
                self.session.rollback()
                error = StoreError.from_exception(e)
            logger.error("CSV import aborted after %d of %d rows: %s", processed, total, error.message)
            yield ImportEvent(type="error", message=error.message)
            return

        yield ImportEvent(type="done", message="Import completed successfully.")

    def _resolve_category(self, name: str) -> Tuple[Category, bool]:
        category = self.categories.find_by_name(name)
        if category:
            return category, False
        category = self.categories.create(
            name,
            slug=simple_slug(name),
            description=f"Imported category: {name}",
        )
        return category, True

    def _import_row(self, row: Dict[str, str]) -> Iterator[ImportEvent]:
        slug = normalize_slug(row.get("slug"))
        title = (row.get("title") or "").strip()
        if not title or not slug:
            yield self._log(f"Skipped invalid row (missing title or slug): {json.dumps(row, ensure_ascii=False, default=str)}")
            return

        category, created = self._resolve_category(clean_category_name(row.get("category")))
        if created:
            yield self._log(f"Created new category: {category.name}")
        category_id = category.id

        tag_names = []
        for name in split_tags(row.get("tags")):
            if not self.tags.get_by_name(name):
                self.tags.create(name, slug=simple_slug(name))
                yield self._log(f"Created new tag: {name}")
            tag_names.append(name)

        if self.posts.get_by_slug(slug):
            yield self._log(f'Post with slug "{slug}" already exists. Skipped.')
            return

        content = row.get("content") or ""
        self.posts.create_imported(
            title=title,
            slug=slug,
            content_markdown=content,
            category_id=category_id,
            tags=tag_names,
            published=True,
            published_at=parse_date(row.get("date")) or utcnow(),
            seo_title=row.get("title"),
            seo_description=import_seo_description(content),
            featured_image_url=None,
        )
        yield self._log(f"Imported: {title}")
