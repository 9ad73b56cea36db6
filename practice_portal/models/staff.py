from sqlalchemy import Boolean, Column, DateTime, String, true
from sqlalchemy.sql import func

from ..core.database import Base


class Staff(Base):
    __tablename__ = "staff"

    id = Column(String(64), primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)

    # Stored lowercase; the unique index is the authoritative duplicate guard
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    role = Column(String(50), nullable=False, default="staff", server_default="staff")
    organization = Column(String(255), nullable=False, default="", server_default="")
    phone = Column(String(50), nullable=False, default="", server_default="")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Staff(id={self.id}, email='{self.email}', role='{self.role}')>"
