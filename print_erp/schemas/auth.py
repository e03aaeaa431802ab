from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime

class Token(BaseModel):
    access_token: str
    token_type: str

class RoleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]

    class Config:
        from_attributes = True

class UserResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str]
    is_active: bool
    role_id: int
    role_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class PermissionsResponse(BaseModel):
    user_id: int
    email: str
    role: str
    permissions: Dict[str, List[str]]
