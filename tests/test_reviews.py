import uuid

import pytest
from conftest import add_review, flashes, login

from restofind.app import services
from restofind.app.extensions import db
from restofind.app.models import Restaurant, Review


def review_count(app, restaurant_id):
    with app.app_context():
        return len(db.session.get(Restaurant, restaurant_id).reviews)


def test_create_review(app, client, restaurant_id, other_id):
    login(client, "other")
    before = review_count(app, restaurant_id)

    r = client.post(f"/restaurants/{restaurant_id}/reviews", data={"review[rating]": "3", "review[body]": "ok"})

    assert r.status_code == 302
    assert r.headers["Location"] == f"/restaurants/{restaurant_id}"
    assert ("success", "Successfully created a new review!") in flashes(client)
    assert review_count(app, restaurant_id) == before + 1
    with app.app_context():
        review = Review.query.one()
        assert (review.rating, review.body, review.author_id) == (3, "ok", other_id)


def test_create_review_from_json(app, client, restaurant_id, other_id):
    login(client, "other")
    r = client.post(f"/restaurants/{restaurant_id}/reviews", json={"review": {"rating": 3, "body": "ok"}})
    assert r.status_code == 302
    assert review_count(app, restaurant_id) == 1


@pytest.mark.parametrize("rating", ["0", "6", "2.5", "five"])
def test_invalid_rating_is_rejected(app, client, restaurant_id, other_id, rating):
    login(client, "other")
    r = client.post(f"/restaurants/{restaurant_id}/reviews", data={"review[rating]": rating, "review[body]": "ok"})
    assert r.status_code == 400
    assert b"review.rating" in r.data
    assert review_count(app, restaurant_id) == 0


def test_review_requires_login(client, restaurant_id):
    r = client.post(f"/restaurants/{restaurant_id}/reviews", data={"review[rating]": "3", "review[body]": "ok"})
    assert r.headers["Location"] == "/login"
    with client.session_transaction() as sess:
        assert sess["return_to"] == f"/restaurants/{restaurant_id}/reviews"


def test_review_on_missing_restaurant(client, other_id):
    login(client, "other")
    r = client.post(f"/restaurants/{uuid.uuid4()}/reviews", data={"review[rating]": "3", "review[body]": "ok"})
    assert r.headers["Location"] == "/restaurants"
    assert ("error", "Couldn't find that restaurant!") in flashes(client)


def test_missing_restaurant_wins_over_bad_payload(client, other_id):
    login(client, "other")
    r = client.post(f"/restaurants/{uuid.uuid4()}/reviews", data={})
    assert r.status_code == 302


def test_author_deletes_review(app, client, restaurant_id, other_id):
    review_id = add_review(app, restaurant_id, other_id)
    login(client, "other")

    r = client.post(f"/restaurants/{restaurant_id}/reviews/{review_id}?_method=DELETE")

    assert r.headers["Location"] == f"/restaurants/{restaurant_id}"
    assert ("success", "Successfully deleted the review!") in flashes(client)
    assert review_count(app, restaurant_id) == 0


def test_non_author_cannot_delete_review(app, client, restaurant_id, owner_id, other_id):
    # Owning the restaurant does not grant rights over other people's reviews
    review_id = add_review(app, restaurant_id, other_id)
    login(client, "owner")

    r = client.delete(f"/restaurants/{restaurant_id}/reviews/{review_id}")

    assert r.headers["Location"] == f"/restaurants/{restaurant_id}"
    assert ("error", "You do not have permission to do that!") in flashes(client)
    assert review_count(app, restaurant_id) == 1


def test_missing_review_redirects_to_index(client, restaurant_id, other_id):
    login(client, "other")
    r = client.delete(f"/restaurants/{restaurant_id}/reviews/{uuid.uuid4()}")
    assert r.headers["Location"] == "/restaurants"
    assert ("error", "Couldn't find that review!") in flashes(client)


def test_review_is_only_found_under_its_own_restaurant(app, client, restaurant_id, other_id):
    with app.app_context():
        elsewhere = Restaurant(title="Elsewhere", location="X", price=1, description="d", author_id=other_id)
        db.session.add(elsewhere)
        db.session.commit()
        elsewhere_id = elsewhere.id
    review_id = add_review(app, restaurant_id, other_id)
    login(client, "other")

    r = client.delete(f"/restaurants/{elsewhere_id}/reviews/{review_id}")

    assert r.headers["Location"] == "/restaurants"
    assert ("error", "Couldn't find that review!") in flashes(client)
    assert review_count(app, restaurant_id) == 1


def test_show_lists_reviews(app, client, restaurant_id, other_id):
    add_review(app, restaurant_id, other_id, rating=5, body="Loved the brisket")
    r = client.get(f"/restaurants/{restaurant_id}")
    assert b"Loved the brisket" in r.data
    assert b"By other" in r.data


def test_delete_of_review_removed_mid_request(app, client, restaurant_id, other_id, monkeypatch):
    review_id = add_review(app, restaurant_id, other_id)
    delete_review = services.delete_review

    def remove_first(target_restaurant_id, target_review_id):
        Review.query.filter_by(id=target_review_id).delete()
        db.session.commit()
        return delete_review(target_restaurant_id, target_review_id)

    monkeypatch.setattr(services, "delete_review", remove_first)
    login(client, "other")

    r = client.delete(f"/restaurants/{restaurant_id}/reviews/{review_id}")

    assert r.status_code == 302
    assert r.headers["Location"] == f"/restaurants/{restaurant_id}"
    assert ("error", "Couldn't find that review!") in flashes(client)
    assert review_count(app, restaurant_id) == 0
