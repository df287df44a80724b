from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Index

from restofind.app.extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    username = db.Column(db.String(100), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class Restaurant(db.Model):
    __tablename__ = "restaurants"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    title = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Float, nullable=False, default=0)
    description = db.Column(db.Text, nullable=False)
    # Set once at creation; updates never touch it
    author_id = db.Column(db.Uuid, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    author = db.relationship("User", lazy="select")
    images = db.relationship("Image", backref="restaurant", lazy="select", order_by="Image.position")
    reviews = db.relationship("Review", backref="restaurant", lazy="select", order_by="Review.created_at")

    # Fields a client is allowed to change
    EDITABLE_FIELDS = ("title", "location", "price", "description")


class Image(db.Model):
    __tablename__ = "images"

    id = db.Column(db.Integer, primary_key=True)
    restaurant_id = db.Column(db.Uuid, db.ForeignKey("restaurants.id"), nullable=False, index=True)
    url = db.Column(db.String(1024), nullable=False)
    key = db.Column(db.String(512), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)


class Review(db.Model):
    __tablename__ = "reviews"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = db.Column(db.Uuid, db.ForeignKey("restaurants.id"), nullable=False)
    author_id = db.Column(db.Uuid, db.ForeignKey("users.id"), nullable=False, index=True)

    rating = db.Column(db.Integer, nullable=False)  # 1..5
    body = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    author = db.relationship("User", lazy="select")

    __table_args__ = (
        Index("ix_reviews_restaurant_created", "restaurant_id", "created_at"),
    )
