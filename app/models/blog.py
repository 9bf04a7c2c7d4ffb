from typing import Optional, List
from datetime import datetime
from uuid import uuid4
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import JSON, DateTime, Text

from app.core.clock import utcnow


def new_id() -> str:
    return uuid4().hex


class Post(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)

    # Content
    title: str = Field(index=True)
    slug: str = Field(unique=True, index=True)  # URL-friendly title
    content_markdown: str = Field(default="", sa_column=Column(Text))

    # SEO
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None

    # Categorization
    category_id: str = Field(default="", index=True)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))  # tag names, not ids

    featured_image_url: Optional[str] = None

    # Status
    published: bool = Field(default=False, index=True)
    published_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    # Timestamps
    created_at: Optional[datetime] = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: Optional[datetime] = Field(default_factory=utcnow, sa_type=DateTime)


class Category(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True)
    slug: str = Field(index=True)
    description: Optional[str] = None
    created_at: Optional[datetime] = Field(default_factory=utcnow, sa_type=DateTime)


class Tag(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(unique=True, index=True)
    slug: str = Field(index=True)
