from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterator, Mapping

from flask import g, request
from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate

from restofind.app.common.errors import AppError

_KEY_PARTS = re.compile(r"[^\[\]]+")
_INTEGER = re.compile(r"^\s*[-+]?\d+\s*$")


class _Base(Schema):
    class Meta:
        unknown = EXCLUDE


class RestaurantFields(_Base):
    title = fields.String(required=True, validate=validate.Length(min=1))
    location = fields.String(required=True, validate=validate.Length(min=1))
    price = fields.Float(required=True, validate=validate.Range(min=0))
    description = fields.String(required=True, validate=validate.Length(min=1))


class RestaurantSchema(_Base):
    restaurant = fields.Nested(RestaurantFields, required=True)


class ReviewFields(_Base):
    rating = fields.Integer(required=True, strict=True, validate=validate.Range(min=1, max=5))
    body = fields.String(required=True, validate=validate.Length(min=1))

    @pre_load
    def coerce_rating(self, data, **kwargs):
        # Form posts send "3"; anything that is not a whole number stays as-is and fails
        if isinstance(data, dict) and isinstance(data.get("rating"), str) and _INTEGER.match(data["rating"]):
            data = dict(data, rating=int(data["rating"]))
        return data


class ReviewSchema(_Base):
    review = fields.Nested(ReviewFields, required=True)


class RegistrationSchema(_Base):
    username = fields.String(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=1))


def unflatten_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Turn ``restaurant[title]=x`` style keys into nested dicts."""
    data: Dict[str, Any] = {}
    for raw_key, value in form.items():
        parts = _KEY_PARTS.findall(raw_key)
        if not parts:
            continue
        node = data
        for part in parts[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                break
            node = child
        else:
            node[parts[-1]] = value
    return data


def request_payload() -> Any:
    if request.is_json:
        return request.get_json(silent=True)
    return unflatten_form(request.form)


def iter_error_messages(errors: Any, path: str = "") -> Iterator[str]:
    if isinstance(errors, dict):
        for key, value in errors.items():
            yield from iter_error_messages(value, f"{path}.{key}" if path else str(key))
    elif isinstance(errors, (list, tuple)):
        for item in errors:
            yield from iter_error_messages(item, path)
    else:
        yield f"{path}: {errors}" if path else str(errors)


def load_or_abort(schema: Schema, data: Any) -> Dict[str, Any]:
    """Validate ``data``; every violation ends up in one 400 message."""
    try:
        return schema.load(data if data is not None else {})
    except ValidationError as err:
        raise AppError.client(", ".join(iter_error_messages(err.messages))) from err


def validate_body(schema: Schema, name: str) -> Callable[[], None]:
    def guard() -> None:
        g.payload = load_or_abort(schema, request_payload())

    guard.__name__ = f"validate_{name}"
    return guard


validate_restaurant = validate_body(RestaurantSchema(), "restaurant")
validate_review = validate_body(ReviewSchema(), "review")
