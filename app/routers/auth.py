from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError
from pydantic import BaseModel
from sqlmodel import Session

from app.core.security import decode_access_token
from app.db.session import get_session
from app.models.admin_user import AdminUser
from app.services.auth import AuthService

router = APIRouter()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/token")


class Token(BaseModel):
    access_token: str
    token_type: str

class AdminProfile(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class PasswordChange(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str

def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(session)

async def get_current_admin(token: str = Depends(oauth2_scheme), service: AuthService = Depends(get_auth_service)) -> AdminUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        email: str = payload.get("sub")
        if email is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    user = service.get_user_by_email(email)
    if user is None or not user.is_active:
        raise credentials_exception
    return user

@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AuthService = Depends(get_auth_service),
):
    user, error_message = service.authenticate_user(form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"access_token": service.issue_token(user), "token_type": "bearer"}

@router.get("/me", response_model=AdminProfile)
def read_current_admin(current_admin: AdminUser = Depends(get_current_admin)):
    return current_admin

@router.post("/logout")
def logout(current_admin: AdminUser = Depends(get_current_admin)):
    # Tokens are stateless; the client discards its copy
    return {"message": "Signed out"}

@router.post("/change-password")
def change_password(
    data: PasswordChange,
    current_admin: AdminUser = Depends(get_current_admin),
    service: AuthService = Depends(get_auth_service),
):
    service.change_password(current_admin, data.current_password, data.new_password, data.confirm_password)
    return {"message": "Password changed successfully"}
