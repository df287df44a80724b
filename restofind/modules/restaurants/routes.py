from __future__ import annotations

from flask import Blueprint, flash, g, redirect, render_template, url_for

from restofind.app.common.auth import require_login
from restofind.app.common.guards import (
    RESTAURANT_NOT_FOUND,
    guarded,
    require_owner,
    resolve_restaurant,
)
from restofind.app.common.images import parse_image_uploads
from restofind.app.common.validation import validate_restaurant
from restofind.app.models import Restaurant
from restofind.app import services

bp = Blueprint("restaurants", __name__)


@bp.get("/restaurants")
def index():
    restaurants = Restaurant.query.order_by(Restaurant.created_at.desc()).all()
    return render_template("restaurants/index.html", restaurants=restaurants)


@bp.get("/restaurants/new")
@guarded(require_login)
def new():
    return render_template("restaurants/new.html")


@bp.post("/restaurants")
@guarded(require_login, parse_image_uploads, validate_restaurant)
def create():
    restaurant = services.create_restaurant(g.payload["restaurant"], g.user, g.uploads)
    flash("Successfully created a new restaurant!", "success")
    return redirect(url_for("restaurants.show", restaurant_id=restaurant.id))


@bp.get("/restaurants/<restaurant_id>")
@guarded(resolve_restaurant)
def show(restaurant_id: str):
    return render_template("restaurants/show.html", restaurant=g.restaurant)


@bp.get("/restaurants/<restaurant_id>/edit")
@guarded(require_login, resolve_restaurant, require_owner("restaurant"))
def edit(restaurant_id: str):
    return render_template("restaurants/edit.html", restaurant=g.restaurant)


@bp.put("/restaurants/<restaurant_id>")
@guarded(require_login, resolve_restaurant, require_owner("restaurant"), validate_restaurant)
def update(restaurant_id: str):
    target_id = g.restaurant.id
    if not services.update_restaurant(target_id, g.payload["restaurant"]):
        flash(RESTAURANT_NOT_FOUND, "error")
        return redirect(url_for("restaurants.index"))
    flash("Successfully updated the restaurant!", "success")
    return redirect(url_for("restaurants.show", restaurant_id=target_id))


@bp.delete("/restaurants/<restaurant_id>")
@guarded(require_login, resolve_restaurant, require_owner("restaurant"))
def delete(restaurant_id: str):
    if services.delete_restaurant(g.restaurant.id) is None:
        flash(RESTAURANT_NOT_FOUND, "error")
    else:
        flash("Successfully deleted the restaurant!", "success")
    return redirect(url_for("restaurants.index"))
