"""Login plus the current user's profile and permissions"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from print_erp.core.database import get_db
from print_erp.core.security import verify_password, create_access_token
from print_erp.core.permissions import get_user_permissions, role_name
from print_erp.core.logging_config import get_logger
from print_erp.models.user import User, Role
from print_erp.schemas.auth import PermissionsResponse, RoleResponse, Token, UserResponse
from print_erp.api.v1.dependencies import get_current_user, load_user

router = APIRouter()
logger = get_logger(__name__)

def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = load_user(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user

@router.get("/roles", response_model=List[RoleResponse])
def list_roles(db: Session = Depends(get_db)):
    """Public: the roles an account can hold"""
    return db.query(Role).order_by(Role.id).all()

@router.post("/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """OAuth2 password flow; the form's ``username`` field carries the email"""
    user = authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        logger.warning(f"Failed login for {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")

    logger.info(f"{user.email} logged in as {role_name(user)}")
    return Token(
        access_token=create_access_token(user.email, role=role_name(user)),
        token_type="bearer",
    )

@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: User = Depends(get_current_user)):
    profile = UserResponse.from_orm(current_user)
    profile.role_name = role_name(current_user)
    return profile

@router.get("/permissions", response_model=PermissionsResponse)
def read_permissions(current_user: User = Depends(get_current_user)):
    return PermissionsResponse(
        user_id=current_user.id,
        email=current_user.email,
        role=role_name(current_user),
        permissions=get_user_permissions(current_user),
    )
