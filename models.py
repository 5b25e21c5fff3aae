"""SQLAlchemy models defining User and Post for the application."""
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from database import Base

UPLOAD_URL_PREFIX = "/uploads"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


class User(Base):
    """User model representing registered authors."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    posts = relationship("Post", back_populates="owner")


class Post(Base):
    """Post model representing blog posts created by users."""
    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            "(image_filename IS NULL) = (image_mime_type IS NULL)",
            name="ck_posts_image_pair",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    image_filename = Column(String(255), nullable=True)
    image_mime_type = Column(String(50), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    owner = relationship("User", back_populates="posts")

    @property
    def image_url(self) -> str | None:
        if not self.image_filename:
            return None
        return f"{UPLOAD_URL_PREFIX}/{self.image_filename}"
