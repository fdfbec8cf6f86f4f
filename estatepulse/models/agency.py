"""Agency and User models - tenants and the people working in them."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    ADMIN = "admin"
    AGENT = "agent"
    TEAM_MEMBER = "team_member"


class Agency(BaseModel):
    """Agency (tenant) model."""
    id: str = Field(..., description="Agency ID (text)")
    name: str = Field(..., description="Agency name")
    plan: str = Field(default="Basic", description="Plan: Basic, Pro, Enterprise")
    logo: Optional[str] = Field(None, description="Logo URL")
    ai_credits: int = Field(default=0, ge=0, description="Remaining AI credits")
    ai_limits: int = Field(default=0, ge=0, description="AI credit allowance")


class User(BaseModel):
    """User model - agency staff member."""
    id: str = Field(..., description="User ID (text)")
    agency_id: str = Field(..., description="Agency ID (text FK)")
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Email address")
    role: UserRole = Field(default=UserRole.AGENT, description="Role: admin, agent, team_member")
    avatar: Optional[str] = Field(None, description="Avatar URL")
    status: str = Field(default="Active", description="Status: Active, Inactive")
    ai_usage: int = Field(default=0, ge=0, description="AI calls made by this user")
    created_at: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
