"""Helpers for JSON-carrying command and event fields."""

import json


def parse_json(value, default=None):
    """Decode a Text field that holds JSON; already-decoded values pass through."""
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return json.loads(value)
    return value


def patch_selector(updated_fields):
    """Return ``should_apply(field, value)`` for a partial update.

    A field is applied when the event lists it in ``updated_fields`` or when
    it carries a non-empty value.
    """
    listed = set(parse_json(updated_fields, default=[]) or [])

    def should_apply(field: str, value) -> bool:
        return field in listed or value not in (None, "")

    return should_apply
