# ============================================================================
# FILE: courtside/models/user.py
# Platform role decides who may manage facilities and see their bookings
# ============================================================================
from sqlalchemy import Column, String, Boolean, DateTime, Integer, LargeBinary, Enum as SQLEnum
from sqlalchemy.sql import func
import enum
from courtside.models.base import Base


class PlatformRole(str, enum.Enum):
    """Platform-level user roles."""
    ADMIN = "admin"      # Verifies and activates facilities
    MANAGER = "manager"  # Owns facility listings
    USER = "user"        # Books facilities


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)

    role = Column(
        SQLEnum(PlatformRole),
        default=PlatformRole.USER,
        nullable=False,
        index=True
    )

    # Status flags
    is_active = Column(Boolean, default=True, nullable=False)

    # Linked Google account (Fernet-encrypted OAuth tokens)
    google_access_token_encrypted = Column(LargeBinary, nullable=True)
    google_refresh_token_encrypted = Column(LargeBinary, nullable=True)
    google_token_expires_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def has_calendar_link(self) -> bool:
        return bool(self.google_access_token_encrypted and self.google_refresh_token_encrypted)

    def can_manage(self, facility) -> bool:
        """Admins see every facility, managers only their own."""
        if self.role == PlatformRole.ADMIN:
            return True
        return self.role == PlatformRole.MANAGER and facility.manager_id == self.id

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
