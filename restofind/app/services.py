"""Write operations on restaurants and reviews.

Deleting a restaurant is done here rather than through ORM cascades so the
dependent reviews, image rows and remote image files are removed in one
explicit sequence.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from werkzeug.datastructures import FileStorage

from restofind.app.common.images import get_image_store
from restofind.app.extensions import db
from restofind.app.models import Image, Restaurant, Review, User

logger = logging.getLogger(__name__)


@dataclass
class DeletionReport:
    restaurant_id: uuid.UUID
    review_ids: List[uuid.UUID] = field(default_factory=list)
    image_keys: List[str] = field(default_factory=list)


def _editable(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {name: fields[name] for name in Restaurant.EDITABLE_FIELDS if name in fields}


def create_restaurant(fields: Dict[str, Any], author: User, uploads: Iterable[FileStorage] = ()) -> Restaurant:
    store = get_image_store()
    restaurant = Restaurant(author_id=author.id, **_editable(fields))
    for position, upload in enumerate(uploads):
        stored = store.upload(upload)
        restaurant.images.append(Image(url=stored.url, key=stored.key, position=position))

    db.session.add(restaurant)
    db.session.commit()
    logger.info("Created restaurant %s with %d image(s)", restaurant.id, len(restaurant.images))
    return restaurant


def update_restaurant(restaurant_id: uuid.UUID, fields: Dict[str, Any]) -> bool:
    """False when the row disappeared in the meantime."""
    updated = Restaurant.query.filter_by(id=restaurant_id).update(_editable(fields))
    db.session.commit()
    return updated > 0


def delete_restaurant(restaurant_id: uuid.UUID) -> Optional[DeletionReport]:
    """Remove a restaurant, its reviews and its images.

    Returns None if another request already deleted it. Rows go in a single
    transaction; remote image deletes follow the commit and are not rolled
    back or retried, so a failing image store surfaces as ``ImageStoreError``.
    """
    review_ids = [rid for (rid,) in db.session.query(Review.id).filter_by(restaurant_id=restaurant_id)]
    image_keys = [
        key
        for (key,) in db.session.query(Image.key).filter_by(restaurant_id=restaurant_id).order_by(Image.position)
    ]

    if review_ids:
        Review.query.filter(Review.id.in_(review_ids)).delete(synchronize_session=False)
    Image.query.filter_by(restaurant_id=restaurant_id).delete(synchronize_session=False)
    removed = Restaurant.query.filter_by(id=restaurant_id).delete(synchronize_session=False)
    if not removed:
        db.session.rollback()
        return None
    db.session.commit()

    store = get_image_store()
    for key in image_keys:
        store.destroy(key, invalidate=True)

    logger.info(
        "Deleted restaurant %s (%d review(s), %d image(s))", restaurant_id, len(review_ids), len(image_keys)
    )
    return DeletionReport(restaurant_id=restaurant_id, review_ids=review_ids, image_keys=image_keys)


def create_review(restaurant: Restaurant, author: User, fields: Dict[str, Any]) -> Review:
    review = Review(
        restaurant_id=restaurant.id,
        author_id=author.id,
        rating=fields["rating"],
        body=fields["body"],
    )
    db.session.add(review)
    db.session.commit()
    return review


def delete_review(restaurant_id: uuid.UUID, review_id: uuid.UUID) -> bool:
    """False when the review was already gone."""
    deleted = Review.query.filter_by(id=review_id, restaurant_id=restaurant_id).delete()
    db.session.commit()
    return deleted > 0
