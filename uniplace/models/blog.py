"""
Blog models for the senior-blogs section of the student portal.

- Blog: an interview-experience post that goes through admin approval
- BlogStatusAck: which approval outcome an author has already been told about
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from uniplace.database import Base
import enum


class BlogStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Blog(Base):
    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True)

    # ============ AUTHOR ============
    author_id = Column(String(64), nullable=False, index=True)
    author_name = Column(String(255))
    author_avatar_fallback = Column(String(4))  # initials, e.g. "AR"

    # ============ CONTENT ============
    title = Column(String(512), nullable=False)
    content_html = Column(Text, nullable=False)
    cover_image_url = Column(String(1024))

    # ============ MODERATION ============
    status = Column(String(20), default=BlogStatus.PENDING.value, index=True)
    rejection_reason = Column(Text)

    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Blog(id={self.id}, status={self.status}, title={self.title[:30] if self.title else ''})>"


class BlogStatusAck(Base):
    """
    Records that an author has been notified of a blog's moderation outcome.

    One row per (author, blog); the stored status is the outcome last shown.
    """
    __tablename__ = "blog_status_acks"

    id = Column(Integer, primary_key=True)
    author_id = Column(String(64), nullable=False, index=True)
    blog_id = Column(Integer, ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False)
    acknowledged_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("author_id", "blog_id", name="uq_blog_ack_author_blog"),
    )
