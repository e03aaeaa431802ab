"""Request dependencies: the authenticated user and per-module permission guards"""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session, joinedload
from print_erp.core.database import get_db
from print_erp.core.logging_config import get_logger
from print_erp.core.permissions import has_permission, role_name
from print_erp.core.security import decode_access_token
from print_erp.models.user import User

logger = get_logger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

def load_user(db: Session, email: str) -> Optional[User]:
    return db.query(User).options(joinedload(User.role)).filter(User.email == email).first()

def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    email = decode_access_token(token)
    user = load_user(db, email) if email else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    if user.role is None:
        raise HTTPException(status_code=400, detail="User role not found")
    return user

def require_permission_dependency(module: str, action: str):
    """Dependency factory: the current user, provided their role may ``action`` in ``module``"""
    def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        if not has_permission(current_user, module, action):
            logger.warning(
                f"{current_user.email} ({role_name(current_user)}) denied {action} on {module}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: your role cannot {action} {module} records"
            )
        return current_user
    return permission_checker
