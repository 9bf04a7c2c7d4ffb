from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session
from app.db.session import get_session
from app.models.admin_user import AdminUser
from app.models.blog import Tag
from app.routers.auth import get_current_admin
from app.services.tags import TagService

router = APIRouter()

class TagForm(BaseModel):
    name: str
    slug: Optional[str] = None

class TagUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None

def get_tag_service(session: Session = Depends(get_session)) -> TagService:
    return TagService(session)

@router.get("/", response_model=List[Tag])
def list_tags(
    current_admin: AdminUser = Depends(get_current_admin),
    service: TagService = Depends(get_tag_service)
):
    return service.list_all()

@router.get("/{tag_id}", response_model=Tag)
def get_tag(
    tag_id: str,
    current_admin: AdminUser = Depends(get_current_admin),
    service: TagService = Depends(get_tag_service)
):
    return service.get_or_404(tag_id)

@router.post("/", response_model=Tag, status_code=201)
def create_tag(
    form: TagForm,
    current_admin: AdminUser = Depends(get_current_admin),
    service: TagService = Depends(get_tag_service)
):
    return service.create(form.name, slug=form.slug)

@router.put("/{tag_id}", response_model=Tag)
def update_tag(
    tag_id: str,
    form: TagUpdate,
    current_admin: AdminUser = Depends(get_current_admin),
    service: TagService = Depends(get_tag_service)
):
    return service.update(tag_id, name=form.name, slug=form.slug)

@router.delete("/{tag_id}")
def delete_tag(
    tag_id: str,
    current_admin: AdminUser = Depends(get_current_admin),
    service: TagService = Depends(get_tag_service)
):
    service.delete(tag_id)
    return {"message": "Tag deleted successfully"}
