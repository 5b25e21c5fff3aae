"""Signup, login and user lookups over the users table."""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models
from errors import ConflictError, InvalidCredentialsError, NotFoundError
from logger import get_logger
from security import TokenService, dummy_verify, hash_password, verify_password

logger = get_logger("accounts")

DUPLICATE_EMAIL_MESSAGE = "Email is already registered"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    """Retrieve a user from the database by their email address"""
    return db.query(models.User).filter(models.User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: int) -> models.User:
    """Retrieve a user by ID or raise NotFoundError"""
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def signup(db: Session, email: str, password: str) -> models.User:
    """Create and store a new user; the email must not be registered yet"""
    email = normalize_email(email)
    if get_user_by_email(db, email) is not None:
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

    user = models.User(email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent signup for the same address
        db.rollback()
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
    db.refresh(user)

    logger.info("Registered user %s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> models.User:
    """Return the user owning these credentials or raise InvalidCredentialsError"""
    user = get_user_by_email(db, email)
    if user is None:
        dummy_verify()
        logger.warning("Failed login attempt")
        raise InvalidCredentialsError()

    if not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise InvalidCredentialsError()

    return user


def login(db: Session, email: str, password: str, tokens: TokenService) -> str:
    """Authenticate a user and issue a bearer token"""
    user = authenticate(db, email, password)
    logger.info("User %s logged in", user.id)
    return tokens.issue(user.id)
