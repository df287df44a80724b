"""Session-based authentication.

The Flask session stores the user's id under ``user_id``. Login clears the
session before writing the new identity, so anything that has to survive the
handshake (the ``return_to`` path) is copied into ``g`` first.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from flask import flash, g, redirect, session, url_for
from werkzeug.security import check_password_hash, generate_password_hash

from restofind.app.common.errors import AppError
from restofind.app.common.request_context import original_url
from restofind.app.extensions import db
from restofind.app.models import User

logger = logging.getLogger(__name__)

LOGIN_REQUIRED = "You must be logged in!"
BAD_CREDENTIALS = "Password or username is incorrect!"


@dataclass
class LoginResult:
    ok: bool
    user: Optional[User] = None
    message: Optional[str] = None


def load_current_user() -> None:
    """Resolve ``session['user_id']`` into ``g.user`` (None when anonymous)."""
    g.user = None
    uid = session.get("user_id")
    if not uid:
        return
    try:
        g.user = db.session.get(User, uuid.UUID(str(uid)))
    except ValueError:
        logger.warning("Dropping malformed session user id %r", uid)
        session.pop("user_id", None)


def current_user() -> User | None:
    return g.get("user")


def require_login():
    """Guard: redirect anonymous visitors to the login page."""
    if current_user() is None:
        session["return_to"] = original_url()
        flash(LOGIN_REQUIRED, "error")
        return redirect(url_for("users.login"))
    return None


def capture_return_to():
    """Guard: keep the pre-login destination before the session is cleared."""
    return_to = session.get("return_to")
    if return_to:
        g.return_to = return_to
    return None


def _is_local_path(target: str) -> bool:
    parts = urlsplit(target)
    return target.startswith("/") and not target.startswith("//") and not parts.netloc and not parts.scheme


def post_login_redirect():
    target = g.pop("return_to", None)
    if target and _is_local_path(target):
        return redirect(target)
    return redirect(url_for("restaurants.index"))


def authenticate(username: str, password: str) -> LoginResult:
    user = User.query.filter_by(username=username).first()
    if not user or not check_password_hash(user.password_hash, password):
        return LoginResult(ok=False, message=BAD_CREDENTIALS)
    return LoginResult(ok=True, user=user)


def login_user(user: User) -> None:
    session.clear()
    session.permanent = True
    session["user_id"] = str(user.id)
    g.user = user


def logout_user() -> bool:
    had_user = session.pop("user_id", None) is not None
    g.user = None
    return had_user


def register_user(username: str, email: str, password: str) -> User:
    if User.query.filter_by(username=username).first():
        raise AppError.client("A user with the given username is already registered")
    if User.query.filter_by(email=email).first():
        raise AppError.client("A user with the given email is already registered")

    user = User(username=username, email=email, password_hash=generate_password_hash(password))
    db.session.add(user)
    db.session.commit()
    return user
