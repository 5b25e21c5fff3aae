"""Post lifecycle: ownership guard, CRUD and offset pagination."""
import math
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

import models
from errors import AuthorizationError, NotFoundError, ValidationError
from logger import get_logger
from storage import ImageStore, ImageUpload

logger = get_logger("posts")

DEFAULT_PAGE_SIZE = 5
MAX_PAGE_SIZE = 100


@dataclass
class Page:
    """One page of posts from an offset-paginated listing"""
    posts: List[models.Post]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value


def _paginate(query, page: int, page_size: int) -> Page:
    if page < 1:
        raise ValidationError("page must be at least 1")
    if page_size < 1:
        raise ValidationError("limit must be at least 1")
    page_size = min(page_size, MAX_PAGE_SIZE)

    total = query.count()
    posts = (
        query.order_by(models.Post.created_at.desc(), models.Post.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return Page(posts=posts, total=total, page=page, page_size=page_size)


def get_post(db: Session, post_id: int) -> models.Post:
    """Retrieve a post by its ID or raise NotFoundError"""
    post = db.query(models.Post).filter(models.Post.id == post_id).first()
    if post is None:
        raise NotFoundError("Post not found")
    return post


def check_ownership(db: Session, post_id: int, requester_id: int) -> models.Post:
    """Load a post and make sure the requester owns it"""
    post = get_post(db, post_id)
    if post.owner_id != requester_id:
        logger.warning("User %s denied access to post %s", requester_id, post_id)
        raise AuthorizationError("Forbidden")
    return post


def create_post(db: Session,
                images: ImageStore,
                title: Optional[str],
                content: Optional[str],
                owner_id: Optional[int],
                image: Optional[ImageUpload] = None) -> models.Post:
    """Create a new post owned by owner_id, storing the image if one was given"""
    title = _require_text(title, "Title")
    content = _require_text(content, "Content")
    if owner_id is None:
        raise ValidationError("An authenticated owner is required")

    image_filename = images.save(image) if image is not None else None
    post = models.Post(
        title=title,
        content=content,
        image_filename=image_filename,
        image_mime_type=image.mime_type if image is not None else None,
        owner_id=owner_id,
    )
    db.add(post)
    try:
        db.commit()
    except Exception:
        db.rollback()
        images.delete(image_filename)
        raise
    db.refresh(post)

    logger.info("User %s created post %s", owner_id, post.id)
    return post


def list_posts(db: Session, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    """List all posts, newest first"""
    return _paginate(db.query(models.Post), page, page_size)


def list_posts_by_owner(db: Session,
                        owner_id: Optional[int],
                        page: int = 1,
                        page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    """List the posts of a single owner, newest first"""
    if owner_id is None:
        raise ValidationError("An authenticated user is required")
    query = db.query(models.Post).filter(models.Post.owner_id == owner_id)
    return _paginate(query, page, page_size)


def update_post(db: Session,
                images: ImageStore,
                post_id: int,
                requester_id: int,
                title: Optional[str] = None,
                content: Optional[str] = None,
                image: Optional[ImageUpload] = None) -> models.Post:
    """Update the supplied fields of a post owned by the requester"""
    post = check_ownership(db, post_id, requester_id)

    if title is not None:
        post.title = _require_text(title, "Title")
    if content is not None:
        post.content = _require_text(content, "Content")

    old_filename = None
    new_filename = None
    if image is not None:
        new_filename = images.save(image)
        old_filename = post.image_filename
        post.image_filename = new_filename
        post.image_mime_type = image.mime_type

    post.updated_at = models.utc_now()
    try:
        db.commit()
    except StaleDataError:
        # deleted by a concurrent request after check_ownership loaded it
        db.rollback()
        images.delete(new_filename)
        raise NotFoundError("Post not found")
    except Exception:
        db.rollback()
        images.delete(new_filename)
        raise
    db.refresh(post)

    images.delete(old_filename)
    logger.info("User %s updated post %s", requester_id, post_id)
    return post


def delete_post(db: Session, images: ImageStore, post_id: int, requester_id: int) -> None:
    """Permanently delete a post owned by the requester"""
    post = check_ownership(db, post_id, requester_id)
    image_filename = post.image_filename

    db.delete(post)
    db.commit()

    images.delete(image_filename)
    logger.info("User %s deleted post %s", requester_id, post_id)
