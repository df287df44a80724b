from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, url_for

from restofind.app.common.auth import (
    authenticate,
    capture_return_to,
    login_user,
    logout_user,
    post_login_redirect,
    register_user,
)
from restofind.app.common.errors import AppError
from restofind.app.common.guards import guarded
from restofind.app.common.validation import RegistrationSchema, load_or_abort, request_payload

bp = Blueprint("users", __name__)

registration_schema = RegistrationSchema()


@bp.get("/register")
def register():
    return render_template("users/register.html")


@bp.post("/register")
def register_post():
    try:
        fields = load_or_abort(registration_schema, request_payload())
        user = register_user(fields["username"], fields["email"], fields["password"])
    except AppError as err:
        flash(err.message, "error")
        return redirect(url_for("users.register"))

    login_user(user)
    flash("Successfully created a new user! Welcome to RestoFind!", "success")
    return redirect(url_for("restaurants.index"))


@bp.get("/login")
def login():
    return render_template("users/login.html")


@bp.post("/login")
@guarded(capture_return_to)
def login_post():
    data = request_payload()
    if not isinstance(data, dict):
        data = {}
    result = authenticate(str(data.get("username") or ""), str(data.get("password") or ""))
    if not result.ok:
        flash(result.message, "error")
        return redirect(url_for("users.login"))

    login_user(result.user)
    flash("Successfully logged you in! Welcome back to RestoFind!", "success")
    return post_login_redirect()


@bp.get("/logout")
def logout():
    logout_user()
    flash("Successfully logged you out!", "success")
    return redirect(url_for("restaurants.index"))
