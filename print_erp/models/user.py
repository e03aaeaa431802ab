from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from print_erp.core.database import Base

class Role(Base):
    """
    Procurement role: Admin, Manager or Staff.

    The name is the key into ``core.permissions.ROLE_PERMISSIONS``; the
    description is only shown on the public roles list.
    """
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    users = relationship("User", back_populates="role", order_by="User.email")

class User(Base):
    """Shop employee; the id is stamped as actor on manual stock moves"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # login name and JWT subject
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String)
    is_active = Column(Boolean, default=True)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    role = relationship("Role", back_populates="users")
