# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Credential store: users and bcrypt password hashes.

Session tokens are managed separately (see session_service.py).
"""

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User
from posadmin.time_utils import server_now


class AuthError(Exception):
    """Raised when credentials are rejected. status is the HTTP code to return."""
    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status


def hash_password(password: str) -> str:
    """Hash password using bcrypt; cost factor comes from BCRYPT_ROUNDS."""
    if not password:
        raise ValueError("Password is required")
    salt = bcrypt.gensalt(rounds=current_app.config["BCRYPT_ROUNDS"])
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Malformed hashes verify as False rather than raising.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(name: str, email: str, password: str) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises ValueError if the email is already taken.
    """
    email = normalize_email(email)
    if db.session.query(User).filter_by(email=email).first():
        raise ValueError(f"Email {email} already exists")

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate_by_email(email: str, password: str) -> User:
    """
    Check an email/password pair.

    Raises AuthError(404) for an unknown email and AuthError(401) for a
    wrong password or a deactivated account.
    """
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()
    if not user:
        raise AuthError("Email not found", status=404)

    if not user.is_active or not verify_password(password, user.password_hash):
        raise AuthError("Invalid password", status=401)

    user.last_login_at = server_now()
    db.session.commit()
    return user


def user_exists(user_id: int) -> bool:
    return db.session.get(User, user_id) is not None
