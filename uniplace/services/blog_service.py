"""
Senior blogs: submission, moderation and author notifications.

Students write posts that stay "pending" until an admin approves or
rejects them. Authors are told once about each moderation outcome;
what they have already seen is tracked in blog_status_acks.
"""

import logging
import re
from typing import Dict, List, Optional

from bs4 import BeautifulSoup
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from uniplace.database import store_read
from uniplace.exceptions import ValidationError, StoreError
from uniplace.models import Blog, BlogStatus, BlogStatusAck

logger = logging.getLogger(__name__)

EXCERPT_CHARS = 200


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("%s failed: %s", action, e)
        raise StoreError(str(e))


def author_initials(name: str) -> str:
    """First letters of the first two words, upper-cased ("Arisha Rizwan" -> "AR")."""
    return "".join(part[0] for part in name.split() if part)[:2].upper()


def html_excerpt(content_html: str, limit: int = EXCERPT_CHARS) -> str:
    """Plain-text preview of a post body."""
    if not content_html:
        return ""
    soup = BeautifulSoup(content_html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    text = re.sub(r"\s+", " ", soup.get_text(separator=" ")).strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def _require_content(title: Optional[str], content_html: Optional[str]) -> None:
    if not (title or "").strip() or not (content_html or "").strip():
        raise ValidationError("Title and content are required.")


# ============ AUTHOR OPERATIONS ============

def create_blog(
    db: Session,
    author_id: str,
    author_name: str,
    title: str,
    content_html: str,
    cover_image_url: Optional[str] = None,
) -> Blog:
    """Submit a new post for approval."""
    _require_content(title, content_html)

    blog = Blog(
        author_id=author_id,
        author_name=author_name,
        author_avatar_fallback=author_initials(author_name),
        title=title.strip(),
        content_html=content_html.strip(),
        cover_image_url=cover_image_url or None,
        status=BlogStatus.PENDING.value,
    )
    db.add(blog)
    _commit(db, "Submitting blog")
    db.refresh(blog)
    logger.info("Blog %s submitted by %s", blog.id, author_id)
    return blog


@store_read("Listing author blogs")
def list_author_blogs(db: Session, author_id: str) -> List[Blog]:
    return (
        db.query(Blog)
        .filter(Blog.author_id == author_id)
        .order_by(Blog.created_at.desc(), Blog.id.desc())
        .all()
    )


def update_author_blog(
    db: Session,
    blog: Blog,
    title: str,
    content_html: str,
    cover_image_url: Optional[str] = None,
) -> Blog:
    """
    Edit an author's own post.

    A rejected post is resubmitted: status goes back to pending and the
    rejection reason is cleared.
    """
    _require_content(title, content_html)

    blog.title = title.strip()
    blog.content_html = content_html.strip()
    blog.cover_image_url = cover_image_url or blog.cover_image_url
    if blog.status == BlogStatus.REJECTED.value:
        blog.status = BlogStatus.PENDING.value
        blog.rejection_reason = None

    _commit(db, f"Updating blog {blog.id}")
    db.refresh(blog)
    return blog


@store_read("Loading blog updates")
def pop_status_updates(db: Session, author_id: str) -> List[Dict[str, str]]:
    """
    Moderation outcomes the author has not been told about yet.

    Returns approved/rejected posts whose current status differs from the
    last acknowledged one, and records them as acknowledged.
    """
    acks = {
        ack.blog_id: ack
        for ack in db.query(BlogStatusAck).filter(BlogStatusAck.author_id == author_id).all()
    }

    updates = []
    for blog in list_author_blogs(db, author_id):
        if blog.status not in (BlogStatus.APPROVED.value, BlogStatus.REJECTED.value):
            continue
        ack = acks.get(blog.id)
        if ack is not None and ack.status == blog.status:
            continue

        updates.append({"blog_id": blog.id, "title": blog.title, "status": blog.status})
        if ack is None:
            db.add(BlogStatusAck(author_id=author_id, blog_id=blog.id, status=blog.status))
        else:
            ack.status = blog.status

    if updates:
        _commit(db, "Acknowledging blog updates")
    return updates


def status_update_message(updates: List[Dict[str, str]]) -> Optional[str]:
    if not updates:
        return None
    if len(updates) == 1:
        return f'Your blog "{updates[0]["title"]}" was {updates[0]["status"]}.'
    return f"You have {len(updates)} blog updates."


# ============ PUBLIC READS ============

@store_read("Listing approved blogs")
def list_approved(db: Session, search: Optional[str] = None) -> List[Blog]:
    """Approved posts, newest first, optionally matching title or author."""
    query = db.query(Blog).filter(Blog.status == BlogStatus.APPROVED.value)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Blog.title.ilike(pattern), Blog.author_name.ilike(pattern)))
    return query.order_by(Blog.created_at.desc(), Blog.id.desc()).all()


@store_read("Loading blog")
def get_blog(db: Session, blog_id: int) -> Optional[Blog]:
    return db.query(Blog).filter(Blog.id == blog_id).first()


# ============ MODERATION ============

@store_read("Listing pending blogs")
def list_pending(db: Session) -> List[Blog]:
    return (
        db.query(Blog)
        .filter(Blog.status == BlogStatus.PENDING.value)
        .order_by(Blog.created_at.desc(), Blog.id.desc())
        .all()
    )


def approve(db: Session, blog: Blog) -> Blog:
    blog.status = BlogStatus.APPROVED.value
    blog.rejection_reason = None
    _commit(db, f"Approving blog {blog.id}")
    db.refresh(blog)
    return blog


def reject(db: Session, blog: Blog, reason: Optional[str] = None) -> Blog:
    blog.status = BlogStatus.REJECTED.value
    blog.rejection_reason = reason or None
    _commit(db, f"Rejecting blog {blog.id}")
    db.refresh(blog)
    return blog


def admin_edit(db: Session, blog: Blog, title: str, content_html: str) -> Blog:
    """Admin correction of title/content; status is left alone."""
    _require_content(title, content_html)
    blog.title = title.strip()
    blog.content_html = content_html.strip()
    _commit(db, f"Editing blog {blog.id}")
    db.refresh(blog)
    return blog
