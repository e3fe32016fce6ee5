"""
Relation field accessors.

The back office returns every relation field (category, branch, salesMethod,
company, parent, ...) either as a bare id string or as a populated object,
depending on which endpoint populated it:

- "64f0c2..."                                  (bare id)
- {"_id": "64f0c2...", "name": "Delivery"}     (populated)
- None / missing                               (no relation)

All code reads relation fields through these helpers instead of checking the
shape ad hoc.
"""
from typing import Any, Dict, Optional


def ref_id(value: Any) -> Optional[str]:
    """
    Resolve a relation field to its id.

    - None or "" -> None
    - "abc" -> "abc"
    - {"_id": "abc", ...} or {"id": "abc", ...} -> "abc"
    - an object with an `id` attribute (schema instance) -> str(value.id)
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        raw = value.get("_id") or value.get("id")
        return str(raw) if raw else None
    raw = getattr(value, "id", None)
    return str(raw) if raw else None


def ref_object(value: Any) -> Optional[Dict[str, Any]]:
    """Return the populated object for a relation field, or None when it is a bare id or missing."""
    if isinstance(value, dict):
        return value
    return None


def ref_name(value: Any, fallback: str = "") -> str:
    """
    Display name for a relation field.
    Populated objects give their name; bare ids give the id itself (what the
    console shows when the endpoint did not populate the field).
    """
    obj = ref_object(value)
    if obj is not None:
        name = obj.get("name")
        if name:
            return str(name)
        return ref_id(obj) or fallback
    rid = ref_id(value)
    return rid if rid else fallback


def same_ref(a: Any, b: Any) -> bool:
    """True if both relation fields resolve to the same non-empty id."""
    a_id = ref_id(a)
    return a_id is not None and a_id == ref_id(b)
