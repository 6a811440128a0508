"""SQLAlchemy models for accounts, health profiles and API keys."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Date,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(150), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    verification_token = Column(String(128), nullable=True, index=True)
    verification_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    reset_token = Column(String(128), nullable=True, index=True)
    reset_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    api_keys = relationship("ApiKey", back_populates="owner", cascade="all,delete-orphan")
    profile = relationship("Profile", uselist=False, back_populates="user", cascade="all,delete-orphan")


class ApiKey(Base):
    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    key = Column(String(64), unique=True, nullable=False)
    permissions = Column(JSON, nullable=False, default=list)
    status = Column(String(16), default="active", nullable=False)
    last_used = Column(DateTime(timezone=True), nullable=True)
    requests_this_month = Column(Integer, default=0, nullable=False)
    rate_limit = Column(String(32), default="1000/hour", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    owner = relationship("User", back_populates="api_keys")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False, default="")
    date_of_birth = Column(Date, nullable=False)
    sex = Column(String(16), nullable=False)
    height = Column(Float, nullable=False)
    weight = Column(Float, nullable=False)
    unit = Column(String(16), default="metric", nullable=False)
    blood_group = Column(String(4), nullable=True)
    allergies = Column(JSON, nullable=False, default=list)
    medications = Column(JSON, nullable=False, default=list)
    emergency_contact = Column(JSON, nullable=False, default=dict)
    activity_level = Column(String(16), default="moderate", nullable=False)
    bmi = Column(Float, default=0, nullable=False)
    bmi_category = Column(String(16), default="normal", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="profile")
