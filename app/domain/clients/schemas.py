"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class ClientProfileUpdate(BaseModel):
    """Schema for a client updating their own profile"""

    companyName: Optional[str] = None
    industry: Optional[str] = None
    websiteUrl: Optional[str] = None
    technicalVault: Optional[str] = None

    @field_validator("websiteUrl")
    @classmethod
    def validate_website(cls, v):
        if v and not v.strip().lower().startswith(("http://", "https://")):
            raise ValueError("websiteUrl must start with http:// or https://")
        return v.strip() if v else v


class ClientProfileResponse(BaseModel):
    """Schema for client profile response; technicalVault is decrypted"""

    id: int
    userId: int
    fullName: Optional[str] = None
    email: Optional[str] = None
    companyName: Optional[str] = None
    industry: Optional[str] = None
    websiteUrl: Optional[str] = None
    technicalVault: Optional[str] = None
    createdAt: Optional[datetime] = None


class AgentClientResponse(BaseModel):
    """A client as listed for the agent working on their projects"""

    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None
    projectsCount: int
    activeProjects: int
    joinedDate: Optional[datetime] = None
