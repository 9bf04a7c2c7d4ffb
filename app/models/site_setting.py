from datetime import datetime
from typing import Any, Dict

from sqlmodel import Field, SQLModel, Column
from sqlalchemy import JSON, DateTime

from app.core.clock import utcnow


class SiteSetting(SQLModel, table=True):
    # One row per settings document: home, appearance, account, system
    key: str = Field(primary_key=True)
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
