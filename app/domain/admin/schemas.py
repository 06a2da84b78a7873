"""Admin schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class UserResponse(BaseModel):
    id: int
    fullName: str
    email: str
    mobile: Optional[str] = None
    role: str
    status: str
    isEmailVerified: bool
    createdAt: Optional[datetime] = None


class UserStatusUpdate(BaseModel):
    status: str


class UserStatusResponse(BaseModel):
    message: str
    user: UserResponse
    notificationSent: bool


class AdminClientResponse(BaseModel):
    id: int
    clientId: int
    name: str
    email: str
    company: str
    phone: Optional[str] = None
    status: str
    joinedDate: Optional[datetime] = None
    totalProjects: int
    activeProjects: int
    totalRequests: int


class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Category name is required")
        return v.strip()


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    createdAt: Optional[datetime] = None
