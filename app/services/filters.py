"""Admin post list filtering, searching and sorting.

The pipeline runs in a fixed order over an in-memory list of posts:
status, category, search, then a stable sort. It never mutates its input
and never raises for posts with missing optional fields.
"""
from enum import Enum
from functools import lru_cache
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict
from pyuca import Collator

from app.services.dates import to_seconds


class StatusFilter(str, Enum):
    ALL = "all"
    PUBLISHED = "published"
    DRAFT = "draft"


class SortField(str, Enum):
    UPDATED_AT = "updatedAt"
    CREATED_AT = "createdAt"
    PUBLISHED_AT = "publishedAt"
    TITLE = "title"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


TIMESTAMP_ATTRIBUTES = {
    SortField.UPDATED_AT: "updated_at",
    SortField.CREATED_AT: "created_at",
    SortField.PUBLISHED_AT: "published_at",
}


class PostsFilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    search: str = ""
    status: StatusFilter = StatusFilter.ALL
    category_id: str = ""
    sort_field: SortField = SortField.UPDATED_AT
    sort_order: SortOrder = SortOrder.DESC

    @property
    def has_active_filters(self) -> bool:
        return self.search != "" or self.status != StatusFilter.ALL or self.category_id != ""


class PostsStats(BaseModel):
    total: int
    published: int
    draft: int
    filtered: int


class PostsView(BaseModel):
    posts: List[Any]
    stats: PostsStats


@lru_cache(maxsize=1)
def get_collator() -> Collator:
    # Loading the collation table is slow, do it once
    return Collator()


def title_sort_key(title: Optional[str]):
    title = title or ""
    # Raw string breaks ties between titles the collation treats as equal
    return (get_collator().sort_key(title), title)


def matches_search(post: Any, query: str) -> bool:
    """Case-insensitive substring match on title, SEO description or any tag."""
    title = getattr(post, "title", None) or ""
    description = getattr(post, "seo_description", None) or ""
    tags = getattr(post, "tags", None) or []
    return (
        query in title.lower()
        or query in description.lower()
        or any(query in (tag or "").lower() for tag in tags)
    )


def compute_stats(posts: Sequence[Any], filtered: int) -> PostsStats:
    published = sum(1 for p in posts if getattr(p, "published", False))
    return PostsStats(
        total=len(posts),
        published=published,
        draft=len(posts) - published,
        filtered=filtered,
    )


def filter_posts(posts: Sequence[Any], state: PostsFilterState) -> List[Any]:
    result = list(posts)

    if state.status == StatusFilter.PUBLISHED:
        result = [p for p in result if getattr(p, "published", False)]
    elif state.status == StatusFilter.DRAFT:
        result = [p for p in result if not getattr(p, "published", False)]

    if state.category_id:
        result = [p for p in result if getattr(p, "category_id", None) == state.category_id]

    query = state.search.strip().lower()
    if query:
        result = [p for p in result if matches_search(p, query)]

    return result


def sort_posts(posts: Sequence[Any], field: SortField, order: SortOrder) -> List[Any]:
    if field == SortField.TITLE:
        key = lambda p: title_sort_key(getattr(p, "title", None))
    else:
        attribute = TIMESTAMP_ATTRIBUTES[field]
        key = lambda p: to_seconds(getattr(p, attribute, None))
    # sorted() stays stable with reverse=True
    return sorted(posts, key=key, reverse=order == SortOrder.DESC)


def compute_view(posts: Sequence[Any], state: PostsFilterState) -> PostsView:
    filtered = filter_posts(posts, state)
    ordered = sort_posts(filtered, state.sort_field, state.sort_order)
    return PostsView(posts=ordered, stats=compute_stats(posts, len(ordered)))


class PostsFilters:
    """Holds the current filter state and memoizes the derived view."""

    def __init__(self, state: Optional[PostsFilterState] = None):
        self.state = state or PostsFilterState()
        self._cached_posts: Optional[Sequence[Any]] = None
        self._cached_state: Optional[PostsFilterState] = None
        self._cached_view: Optional[PostsView] = None

    def _update(self, **changes) -> None:
        self.state = self.state.model_copy(update=changes)

    def set_search(self, search: str) -> None:
        self._update(search=search)

    def set_status(self, status: StatusFilter) -> None:
        self._update(status=StatusFilter(status))

    def set_category_id(self, category_id: str) -> None:
        self._update(category_id=category_id)

    def set_sort_field(self, sort_field: SortField) -> None:
        self._update(sort_field=SortField(sort_field))

    def set_sort_order(self, sort_order: SortOrder) -> None:
        self._update(sort_order=SortOrder(sort_order))

    def reset(self) -> None:
        self.state = PostsFilterState()

    @property
    def has_active_filters(self) -> bool:
        return self.state.has_active_filters

    def view(self, posts: Sequence[Any]) -> PostsView:
        if self._cached_view is not None and self._cached_posts is posts and self._cached_state == self.state:
            return self._cached_view
        self._cached_view = compute_view(posts, self.state)
        self._cached_posts = posts
        self._cached_state = self.state
        return self._cached_view
