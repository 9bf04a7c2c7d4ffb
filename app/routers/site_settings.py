from typing import Any, Dict
from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.db.session import get_session
from app.models.admin_user import AdminUser
from app.routers.auth import get_current_admin
from app.services.site_settings import SettingsSection, SiteSettingsService

router = APIRouter()

def get_settings_service(session: Session = Depends(get_session)) -> SiteSettingsService:
    return SiteSettingsService(session)

@router.get("/{section}")
def get_settings(
    section: SettingsSection,
    current_admin: AdminUser = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    """Settings document for a section; account settings are null until first saved"""
    return service.get(section)

@router.put("/{section}")
def update_settings(
    section: SettingsSection,
    patch: Dict[str, Any],
    current_admin: AdminUser = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    return service.update(section, patch)
