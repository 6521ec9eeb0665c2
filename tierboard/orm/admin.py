"""
tierboard/orm/admin.py
Staff onboarding applications, approved staff and auth configuration
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from tierboard.constants import ApplicationStatus
from tierboard.orm.base import Base, TimestampedModel, utcnow


class AdminApplication(TimestampedModel):
    """
    A request for staff access, filed after logging in with the general password.

    The secret key chosen by the applicant becomes their login credential once
    approved; only its hash is stored.
    """
    __tablename__ = "admin_applications"

    discord = Column(String(100), nullable=False)
    ip_address = Column(String(64), nullable=False, default="unknown")
    secret_key_hash = Column(String(255), nullable=False)
    requested_role = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default=ApplicationStatus.pending.value, index=True)

    submitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String(32), nullable=True)

    staff = relationship("AdminUser", back_populates="application", uselist=False)

    def to_dict(self):
        return {
            "id": self.id,
            "discord": self.discord,
            "ip_address": self.ip_address,
            "requested_role": self.requested_role,
            "status": self.status,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "reviewed_by": self.reviewed_by,
        }


class AdminUser(TimestampedModel):
    """Approved staff member."""
    __tablename__ = "admin_users"

    application_id = Column(
        Integer,
        ForeignKey("admin_applications.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    discord = Column(String(100), nullable=False)
    role = Column(String(16), nullable=False, index=True)
    approved_by = Column(String(32), nullable=False)
    approved_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    ip_address = Column(String(64), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    application = relationship("AdminApplication", back_populates="staff")

    def to_dict(self):
        return {
            "id": self.id,
            "discord": self.discord,
            "role": self.role,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "is_active": bool(self.is_active),
        }


class AuthConfig(Base):
    """Key/value store for owner/general password hashes and the session epoch."""
    __tablename__ = "auth_config"

    config_key = Column(String(64), primary_key=True)
    config_value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
