import os
import sys
import uuid

import pytest
from werkzeug.security import generate_password_hash

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from restofind.app.common.images import ImageStoreError, StoredImage
from restofind.app.config import TestConfig
from restofind.app.extensions import db
from restofind.app.factory import create_app
from restofind.app.models import Image, Restaurant, Review, User

PASSWORD = "Password123!"


class RecordingImageStore:
    """In-memory image store that remembers every call."""

    def __init__(self):
        self.uploaded = []
        self.destroyed = []
        self.fail_on_destroy = False

    def upload(self, file):
        key = f"RestoFind/{uuid.uuid4().hex}"
        self.uploaded.append((file.filename, key))
        return StoredImage(url=f"https://images.test/{key}", key=key)

    def destroy(self, key, invalidate=True):
        if self.fail_on_destroy:
            raise ImageStoreError(f"Image delete failed: {key}")
        self.destroyed.append((key, invalidate))


@pytest.fixture()
def image_store():
    return RecordingImageStore()


@pytest.fixture()
def app(image_store):
    app = create_app(TestConfig, image_store=image_store)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    # No `with` block: each request gets its own app context and `g`
    return app.test_client()


def make_user(app, username, email=None):
    with app.app_context():
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=generate_password_hash(PASSWORD),
        )
        db.session.add(user)
        db.session.commit()
        return user.id


def login(client, username, password=PASSWORD):
    return client.post("/login", data={"username": username, "password": password})


def flashes(client):
    with client.session_transaction() as sess:
        return list(sess.get("_flashes", []))


@pytest.fixture()
def owner_id(app):
    return make_user(app, "owner")


@pytest.fixture()
def other_id(app):
    return make_user(app, "other")


@pytest.fixture()
def restaurant_id(app, owner_id):
    with app.app_context():
        restaurant = Restaurant(
            title="Golden Bistro",
            location="Austin, Texas",
            price=25,
            description="Tacos and more.",
            author_id=owner_id,
        )
        restaurant.images.append(Image(url="https://images.test/RestoFind/a", key="RestoFind/a", position=0))
        restaurant.images.append(Image(url="https://images.test/RestoFind/b", key="RestoFind/b", position=1))
        db.session.add(restaurant)
        db.session.commit()
        return restaurant.id


def add_review(app, restaurant_id, author_id, rating=4, body="Great food"):
    with app.app_context():
        review = Review(restaurant_id=restaurant_id, author_id=author_id, rating=rating, body=body)
        db.session.add(review)
        db.session.commit()
        return review.id
