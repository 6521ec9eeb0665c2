"""
tierboard/schemas/admin.py
Request models for admin login, onboarding and staff management
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from tierboard.constants import AdminRole


class LoginRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=256)


class ApplicationRequest(BaseModel):
    """Staff application filed with an onboarding token."""
    discord: str = Field(..., min_length=2, max_length=100)
    secret_key: str = Field(..., min_length=8, max_length=128)
    requested_role: AdminRole

    @field_validator("discord")
    @classmethod
    def validate_discord(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Discord username cannot be blank")
        return v.strip()


class ReviewRequest(BaseModel):
    action: Literal["approve", "deny"]
    role: Optional[AdminRole] = None


class StaffRoleUpdate(BaseModel):
    role: AdminRole


class KnowledgeEntryRequest(BaseModel):
    question: str = Field(..., min_length=3, max_length=255)
    answer: str = Field(..., min_length=1, max_length=4000)
    keywords: List[str] = Field(..., min_length=1, max_length=30)

    @field_validator("keywords")
    @classmethod
    def validate_keywords(cls, v: List[str]) -> List[str]:
        cleaned = [k.strip().lower() for k in v if k and k.strip()]
        if not cleaned:
            raise ValueError("At least one keyword is required")
        return cleaned
