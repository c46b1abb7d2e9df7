"""Filter matching and update operators for the local document engine.

Filters follow the familiar document-database shape::

    {"owner": user_id}                              # exact match
    {"tags": "news"}                                # list field contains value
    {"item": {"$in": [a, b]}}                       # operator match
    {"$or": [{"user1": a}, {"user2": a}]}          # logical combination
"""

from typing import Any, Mapping

from markgraph.doc_store.base import Document, Filter

_MISSING = object()


class UnsupportedOperatorError(ValueError):
    """Raised for filter or update operators the engine does not implement."""


def _equals(value: Any, expected: Any) -> bool:
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _in(value: Any, candidates: Any) -> bool:
    if isinstance(value, list):
        return any(v in candidates for v in value)
    return value in candidates


def _match_operators(value: Any, conditions: Mapping[str, Any]) -> bool:
    for operator, operand in conditions.items():
        if operator == "$eq":
            ok = value is not _MISSING and _equals(value, operand)
        elif operator == "$ne":
            ok = value is _MISSING or not _equals(value, operand)
        elif operator == "$in":
            ok = value is not _MISSING and _in(value, operand)
        elif operator == "$nin":
            ok = value is _MISSING or not _in(value, operand)
        elif operator == "$exists":
            ok = (value is not _MISSING) == bool(operand)
        else:
            raise UnsupportedOperatorError(f"Unsupported filter operator: {operator}")
        if not ok:
            return False
    return True


def _is_operator_dict(condition: Any) -> bool:
    return (
        isinstance(condition, Mapping)
        and len(condition) > 0
        and all(key.startswith("$") for key in condition)
    )


def matches(document: Document, filter: Filter) -> bool:
    """Check whether ``document`` satisfies ``filter``. An empty filter matches everything."""
    for key, condition in filter.items():
        if key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif key == "$and":
            if not all(matches(document, sub) for sub in condition):
                return False
        elif key.startswith("$"):
            raise UnsupportedOperatorError(f"Unsupported filter operator: {key}")
        else:
            value = document.get(key, _MISSING)
            if _is_operator_dict(condition):
                if not _match_operators(value, condition):
                    return False
            elif value is _MISSING or not _equals(value, condition):
                return False
    return True


def _pull_matches(element: Any, condition: Any) -> bool:
    if _is_operator_dict(condition):
        return _match_operators(element, condition)
    return element == condition


def apply_update(document: Document, update: Mapping[str, Any]) -> bool:
    """Apply update operators to ``document`` in place.

    Supports ``$set``, ``$unset``, ``$addToSet`` (with optional ``$each``) and
    ``$pull`` (with a value or an operator condition such as ``$in``).

    Returns:
        True if the document changed
    """
    changed = False
    for operator, fields in update.items():
        if operator == "$set":
            for field, value in fields.items():
                if document.get(field, _MISSING) != value:
                    document[field] = value
                    changed = True
        elif operator == "$unset":
            for field in fields:
                if field in document:
                    del document[field]
                    changed = True
        elif operator == "$addToSet":
            for field, value in fields.items():
                values = value["$each"] if _is_operator_dict(value) else [value]
                current = document.setdefault(field, [])
                for v in values:
                    if v not in current:
                        current.append(v)
                        changed = True
        elif operator == "$pull":
            for field, condition in fields.items():
                current = document.get(field)
                if not isinstance(current, list):
                    continue
                kept = [v for v in current if not _pull_matches(v, condition)]
                if len(kept) != len(current):
                    document[field] = kept
                    changed = True
        else:
            raise UnsupportedOperatorError(f"Unsupported update operator: {operator}")
    return changed
