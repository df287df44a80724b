"""Per-route guard chains.

A guard is a zero-argument callable run before the view. It returns ``None``
to let the next guard run, returns a response to stop the chain with that
response, or raises ``AppError`` to hand the request to the error handlers.
Resolved entities are kept on ``g`` for the guards and view that follow.
"""

from __future__ import annotations

import logging
import uuid
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from flask import flash, g, redirect, request, url_for

from restofind.app.common.auth import current_user
from restofind.app.common.errors import AppError, ErrorKind
from restofind.app.extensions import db
from restofind.app.models import Restaurant, Review

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])
Guard = Callable[[], Optional[Any]]

RESTAURANT_NOT_FOUND = "Couldn't find that restaurant!"
REVIEW_NOT_FOUND = "Couldn't find that review!"
NO_PERMISSION = "You do not have permission to do that!"


def guarded(*guards: Guard) -> Callable[[F], F]:
    def decorator(view: F) -> F:
        @wraps(view)
        def wrapper(*args, **kwargs):
            for guard in guards:
                outcome = guard()
                if outcome is not None:
                    logger.debug("%s stopped %s %s", guard.__name__, request.method, request.path)
                    return outcome
            return view(*args, **kwargs)

        wrapper.guards = guards  # type: ignore[attr-defined]
        return wrapper  # type: ignore

    return decorator


def parse_id(raw: Any, kind: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except ValueError as exc:
        raise AppError.internal(f'Cast to id failed for value "{raw}" at path "{kind}"') from exc


def redirect_to_restaurant(restaurant: Restaurant | None):
    if restaurant is None:
        return redirect(url_for("restaurants.index"))
    return redirect(url_for("restaurants.show", restaurant_id=restaurant.id))


def resolve_restaurant():
    restaurant_id = parse_id((request.view_args or {}).get("restaurant_id"), "restaurant")
    restaurant = db.session.get(Restaurant, restaurant_id)
    if restaurant is None:
        flash(RESTAURANT_NOT_FOUND, "error")
        return redirect(url_for("restaurants.index"))
    g.restaurant = restaurant
    return None


def resolve_review():
    # Reviews are only looked up inside the restaurant resolved before them
    restaurant = g.get("restaurant")
    if restaurant is None:
        raise AppError.internal("resolve_review must run after resolve_restaurant")

    review_id = parse_id((request.view_args or {}).get("review_id"), "review")
    review = Review.query.filter_by(id=review_id, restaurant_id=restaurant.id).first()
    if review is None:
        flash(REVIEW_NOT_FOUND, "error")
        return redirect(url_for("restaurants.index"))
    g.review = review
    return None


def require_owner(kind: str) -> Guard:
    """Only the author of ``g.<kind>`` may continue."""

    def guard():
        user = current_user()
        entity = g.get(kind)
        # author_id is the raw foreign key; no need to load the author row
        if user is None or entity is None or entity.author_id != user.id:
            logger.info(
                "%s: %s %s on %s",
                ErrorKind.AUTH_DENIED.value,
                getattr(user, "id", None),
                request.method,
                request.path,
            )
            flash(NO_PERMISSION, "error")
            return redirect_to_restaurant(g.get("restaurant"))
        return None

    guard.__name__ = f"require_{kind}_owner"
    return guard
