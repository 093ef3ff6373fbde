"""
Senior blog endpoints.

- Public: approved posts
- Students: submit, edit and track their own posts
- Admins: moderation queue under /admin/blogs
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from uniplace.api.errors import to_http
from uniplace.core.auth import CurrentUser, get_current_admin, get_current_user
from uniplace.database import get_db
from uniplace.exceptions import UniPlaceError
from uniplace.models import BlogStatus
from uniplace.services import blog_service


router = APIRouter(prefix="/blogs", tags=["Blogs"])
admin_router = APIRouter(prefix="/admin/blogs", tags=["Blog Moderation"], dependencies=[Depends(get_current_admin)])


# ============ Schemas ============

class BlogCreate(BaseModel):
    title: str
    content_html: str
    cover_image_url: Optional[str] = None


class BlogAdminEdit(BaseModel):
    title: str
    content_html: str


class RejectRequest(BaseModel):
    reason: Optional[str] = None


class BlogResponse(BaseModel):
    id: int
    author_id: str
    author_name: Optional[str]
    author_avatar_fallback: Optional[str]
    title: str
    content_html: str
    cover_image_url: Optional[str]
    status: str
    rejection_reason: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class BlogCardResponse(BaseModel):
    """Approved post as shown in the public list."""
    id: int
    title: str
    author_name: Optional[str]
    author_avatar_fallback: Optional[str]
    cover_image_url: Optional[str]
    excerpt: str
    created_at: Optional[datetime]


class StatusUpdate(BaseModel):
    blog_id: int
    title: str
    status: str


class NotificationsResponse(BaseModel):
    message: Optional[str]
    updates: list[StatusUpdate]


def _get_or_404(db: Session, blog_id: int):
    try:
        blog = blog_service.get_blog(db, blog_id)
    except UniPlaceError as e:
        raise to_http(e)
    if not blog:
        raise HTTPException(status_code=404, detail=f"Blog with ID {blog_id} not found")
    return blog


# ============ PUBLIC ============

@router.get("", response_model=list[BlogCardResponse])
def list_blogs(
    search: Optional[str] = Query(None, description="Title or author (partial match)"),
    db: Session = Depends(get_db),
):
    """Approved posts, newest first."""
    try:
        blogs = blog_service.list_approved(db, search=search)
    except UniPlaceError as e:
        raise to_http(e)

    return [
        BlogCardResponse(
            id=b.id,
            title=b.title,
            author_name=b.author_name,
            author_avatar_fallback=b.author_avatar_fallback,
            cover_image_url=b.cover_image_url,
            excerpt=blog_service.html_excerpt(b.content_html),
            created_at=b.created_at,
        )
        for b in blogs
    ]


# ============ AUTHOR ============

@router.get("/mine", response_model=list[BlogResponse])
def my_blogs(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return blog_service.list_author_blogs(db, user.id)
    except UniPlaceError as e:
        raise to_http(e)


@router.get("/notifications", response_model=NotificationsResponse)
def my_notifications(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Approval outcomes not shown to the author yet.

    Each outcome is returned once; calling again returns only newer changes.
    """
    try:
        updates = blog_service.pop_status_updates(db, user.id)
    except UniPlaceError as e:
        raise to_http(e)
    return NotificationsResponse(
        message=blog_service.status_update_message(updates),
        updates=updates,
    )


@router.post("", response_model=BlogResponse, status_code=201)
def submit_blog(
    payload: BlogCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Submit a post; it stays pending until an admin approves it."""
    try:
        return blog_service.create_blog(
            db,
            author_id=user.id,
            author_name=user.name,
            title=payload.title,
            content_html=payload.content_html,
            cover_image_url=payload.cover_image_url,
        )
    except UniPlaceError as e:
        raise to_http(e)


@router.put("/{blog_id}", response_model=BlogResponse)
def edit_my_blog(
    blog_id: int,
    payload: BlogCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Edit one of your own posts. Rejected posts go back to pending."""
    blog = _get_or_404(db, blog_id)
    if blog.author_id != user.id:
        raise HTTPException(status_code=403, detail="You can only edit your own blogs")
    try:
        return blog_service.update_author_blog(
            db, blog, payload.title, payload.content_html, payload.cover_image_url
        )
    except UniPlaceError as e:
        raise to_http(e)


@router.get("/{blog_id}", response_model=BlogResponse)
def get_blog(blog_id: int, db: Session = Depends(get_db)):
    """A single approved post."""
    blog = _get_or_404(db, blog_id)
    if blog.status != BlogStatus.APPROVED.value:
        raise HTTPException(status_code=404, detail=f"Blog with ID {blog_id} not found")
    return blog


# ============ MODERATION ============

@admin_router.get("/pending", response_model=list[BlogResponse])
def pending_blogs(db: Session = Depends(get_db)):
    try:
        return blog_service.list_pending(db)
    except UniPlaceError as e:
        raise to_http(e)


@admin_router.post("/{blog_id}/approve", response_model=BlogResponse)
def approve_blog(blog_id: int, db: Session = Depends(get_db)):
    blog = _get_or_404(db, blog_id)
    try:
        return blog_service.approve(db, blog)
    except UniPlaceError as e:
        raise to_http(e)


@admin_router.post("/{blog_id}/reject", response_model=BlogResponse)
def reject_blog(blog_id: int, payload: RejectRequest, db: Session = Depends(get_db)):
    blog = _get_or_404(db, blog_id)
    try:
        return blog_service.reject(db, blog, payload.reason)
    except UniPlaceError as e:
        raise to_http(e)


@admin_router.put("/{blog_id}", response_model=BlogResponse)
def edit_blog(blog_id: int, payload: BlogAdminEdit, db: Session = Depends(get_db)):
    """Correct a post's title or content without changing its status."""
    blog = _get_or_404(db, blog_id)
    try:
        return blog_service.admin_edit(db, blog, payload.title, payload.content_html)
    except UniPlaceError as e:
        raise to_http(e)
