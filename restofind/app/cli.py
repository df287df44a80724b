from __future__ import annotations

import random

import click
from flask import Blueprint
from werkzeug.security import generate_password_hash

from restofind.app.extensions import db
from restofind.app.models import Image, Restaurant, Review, User

cli_bp = Blueprint("cli", __name__, cli_group=None)

CITIES = [
    ("New York", "New York"), ("Los Angeles", "California"), ("Chicago", "Illinois"),
    ("Houston", "Texas"), ("Phoenix", "Arizona"), ("Philadelphia", "Pennsylvania"),
    ("San Antonio", "Texas"), ("San Diego", "California"), ("Dallas", "Texas"),
    ("Austin", "Texas"), ("Seattle", "Washington"), ("Denver", "Colorado"),
    ("Boston", "Massachusetts"), ("Portland", "Oregon"), ("Nashville", "Tennessee"),
]
PREFIXES = ["Golden", "Rustic", "Little", "Blue", "Smoky", "Urban", "Old Town", "Hidden", "Lucky", "Crimson"]
SUFFIXES = ["Bistro", "Diner", "Kitchen", "Grill", "Trattoria", "Noodle Bar", "Taqueria", "Cafe", "Steakhouse", "Eatery"]
DESCRIPTION = (
    "Lorem ipsum dolor sit amet consectetur adipisicing elit. Sit fuga praesentium recusandae, "
    "provident ex aut libero quaerat."
)


@cli_bp.cli.command("init-db")
def init_db() -> None:
    """Create tables."""
    db.create_all()
    click.echo("DB initialized (tables created).")


@cli_bp.cli.command("seed")
@click.option("--count", default=50, show_default=True, help="Number of restaurants to create.")
def seed_data(count: int) -> None:
    """Replace all restaurants with random demo data owned by the demo user."""
    db.create_all()

    user = User.query.filter_by(username="demo").first()
    if not user:
        user = User(username="demo", email="demo@example.com", password_hash=generate_password_hash("Password123!"))
        db.session.add(user)
        db.session.flush()

    Review.query.delete()
    Image.query.delete()
    Restaurant.query.delete()

    for _ in range(count):
        city, state = random.choice(CITIES)
        db.session.add(
            Restaurant(
                title=f"{random.choice(PREFIXES)} {random.choice(SUFFIXES)}",
                location=f"{city}, {state}",
                price=random.randint(100, 999),
                description=DESCRIPTION,
                author_id=user.id,
            )
        )

    db.session.commit()
    click.echo(f"Seeded {count} restaurants. Login: demo / Password123!")
