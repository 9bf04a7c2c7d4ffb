import logging
from enum import Enum
from typing import Any, Dict, Optional, Type

from fastapi import HTTPException
from pydantic import BaseModel, ValidationError, field_validator
from sqlmodel import Session

from app.core.clock import utcnow
from app.models.site_setting import SiteSetting
from app.services.errors import store_errors

logger = logging.getLogger(__name__)

DEFAULT_POSTS_PER_PAGE = 12


class AuthorInfo(BaseModel):
    name: str = "Blog Author"
    photo: Optional[str] = ""
    bio: str = "Notes on reading, travel and the things I pick up along the way."
    role: str = "Writer"


class HomeVisibility(BaseModel):
    show_hero: bool = True
    show_latest_posts_section: bool = True


class CtaButton(BaseModel):
    text: str = "Explore the articles"
    url: str = "/blog"


class HeroContent(BaseModel):
    hero_title: str = "Welcome to my blog"
    hero_subtitle: str = "Notes on reading, travel and the things I pick up along the way."
    cta_button: Optional[CtaButton] = CtaButton()


class SocialLinks(BaseModel):
    twitter: Optional[str] = ""
    facebook: Optional[str] = ""
    linkedin: Optional[str] = ""
    github: Optional[str] = ""


class HomeSettings(BaseModel):
    author_info: AuthorInfo = AuthorInfo()
    home_visibility: HomeVisibility = HomeVisibility()
    hero_content: HeroContent = HeroContent()
    social_links: Optional[SocialLinks] = SocialLinks()


class AppearanceSettings(BaseModel):
    primary_color: str = "#d97706"
    secondary_color: Optional[str] = "#78716c"
    posts_per_page: int = DEFAULT_POSTS_PER_PAGE

    @field_validator("posts_per_page")
    @classmethod
    def default_when_not_positive(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_POSTS_PER_PAGE


class AccountSettings(BaseModel):
    name: str = ""
    email: str = ""


class SystemSettings(BaseModel):
    site_title: str = "My Blog"
    site_description: str = "A personal blog"
    contact_email: str = ""
    notification_email: Optional[str] = ""


class SettingsSection(str, Enum):
    HOME = "home"
    APPEARANCE = "appearance"
    ACCOUNT = "account"
    SYSTEM = "system"


SECTION_MODELS: Dict[SettingsSection, Type[BaseModel]] = {
    SettingsSection.HOME: HomeSettings,
    SettingsSection.APPEARANCE: AppearanceSettings,
    SettingsSection.ACCOUNT: AccountSettings,
    SettingsSection.SYSTEM: SystemSettings,
}

# Sections created from defaults on first read
DEFAULTED_SECTIONS = (SettingsSection.HOME, SettingsSection.APPEARANCE, SettingsSection.SYSTEM)


class SiteSettingsService:
    def __init__(self, session: Session):
        self.session = session

    def _load(self, section: SettingsSection) -> Optional[SiteSetting]:
        return self.session.get(SiteSetting, section.value)

    def get(self, section: SettingsSection) -> Optional[BaseModel]:
        """Stored settings for a section, creating defaults where the section has them."""
        model = SECTION_MODELS[section]
        row = self._load(section)
        if row:
            return model.model_validate(row.data)
        if section not in DEFAULTED_SECTIONS:
            return None

        settings = model()
        with store_errors(self.session):
            self.session.add(SiteSetting(key=section.value, data=settings.model_dump()))
            self.session.commit()
        logger.info("Created default %s settings", section.value)
        return settings

    def update(self, section: SettingsSection, patch: Dict[str, Any]) -> BaseModel:
        """Shallow-merge `patch` into the section and store it."""
        model = SECTION_MODELS[section]
        row = self._load(section)
        current = dict(row.data) if row else model().model_dump()
        current.update(patch)
        try:
            settings = model.model_validate(current)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=e.errors(include_url=False, include_context=False))

        with store_errors(self.session):
            if row is None:
                row = SiteSetting(key=section.value)
            # Reassign so the JSON column is flagged dirty
            row.data = settings.model_dump()
            row.updated_at = utcnow()
            self.session.add(row)
            self.session.commit()
        return settings

    def posts_per_page(self) -> int:
        return self.get(SettingsSection.APPEARANCE).posts_per_page
