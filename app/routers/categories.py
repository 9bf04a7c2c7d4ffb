from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session
from app.db.session import get_session
from app.models.admin_user import AdminUser
from app.models.blog import Category
from app.routers.auth import get_current_admin
from app.services.categories import CategoryService

router = APIRouter()

class CategoryForm(BaseModel):
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None

class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None

def get_category_service(session: Session = Depends(get_session)) -> CategoryService:
    return CategoryService(session)

@router.get("/", response_model=List[Category])
def list_categories(
    current_admin: AdminUser = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service)
):
    return service.list_all()

@router.get("/{category_id}", response_model=Category)
def get_category(
    category_id: str,
    current_admin: AdminUser = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service)
):
    return service.get_or_404(category_id)

@router.post("/", response_model=Category, status_code=201)
def create_category(
    form: CategoryForm,
    current_admin: AdminUser = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service)
):
    return service.create(form.name, slug=form.slug, description=form.description)

@router.put("/{category_id}", response_model=Category)
def update_category(
    category_id: str,
    form: CategoryUpdate,
    current_admin: AdminUser = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service)
):
    return service.update(category_id, **form.model_dump(exclude_unset=True))

@router.delete("/{category_id}")
def delete_category(
    category_id: str,
    current_admin: AdminUser = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service)
):
    service.delete(category_id)
    return {"message": "Category deleted successfully"}
