from __future__ import annotations

from flask import Blueprint, flash, g, redirect, url_for

from restofind.app.common.auth import require_login
from restofind.app.common.guards import (
    REVIEW_NOT_FOUND,
    guarded,
    require_owner,
    resolve_restaurant,
    resolve_review,
)
from restofind.app.common.validation import validate_review
from restofind.app import services

bp = Blueprint("reviews", __name__)


@bp.post("/restaurants/<restaurant_id>/reviews")
@guarded(require_login, resolve_restaurant, validate_review)
def create(restaurant_id: str):
    services.create_review(g.restaurant, g.user, g.payload["review"])
    flash("Successfully created a new review!", "success")
    return redirect(url_for("restaurants.show", restaurant_id=g.restaurant.id))


@bp.delete("/restaurants/<restaurant_id>/reviews/<review_id>")
@guarded(require_login, resolve_restaurant, resolve_review, require_owner("review"))
def delete(restaurant_id: str, review_id: str):
    target_id = g.restaurant.id
    if services.delete_review(target_id, g.review.id):
        flash("Successfully deleted the review!", "success")
    else:
        flash(REVIEW_NOT_FOUND, "error")
    return redirect(url_for("restaurants.show", restaurant_id=target_id))
