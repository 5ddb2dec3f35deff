"""
Rule-based validation of submitted fields.

Rules are strings, optionally with an argument after a colon:

    POST_RULES = {"title": ["required", "string", "max:255"]}

``validate`` either returns the cleaned fields or raises ``ValidationError``
with human-readable messages keyed by field name.
"""

from typing import Any, Callable, Mapping, Sequence

from crud_blog.errors import ValidationError

Rules = Mapping[str, Sequence[str]]

POST_RULES: Rules = {
    "title": ["required", "string", "max:255"],
    "body": ["required", "string"],
}

COMMENT_RULES: Rules = {
    "body": ["required", "string", "max:2000"],
}


def _label(field: str) -> str:
    return field.replace("_", " ")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required(field: str, value: Any, arg: str) -> str | None:
    if _is_blank(value):
        return f"The {_label(field)} field is required."
    return None


def _string(field: str, value: Any, arg: str) -> str | None:
    if not isinstance(value, str):
        return f"The {_label(field)} field must be a string."
    return None


def _max(field: str, value: Any, arg: str) -> str | None:
    if isinstance(value, str) and len(value) > int(arg):
        return f"The {_label(field)} field must not be greater than {arg} characters."
    return None


def _min(field: str, value: Any, arg: str) -> str | None:
    if isinstance(value, str) and len(value) < int(arg):
        return f"The {_label(field)} field must be at least {arg} characters."
    return None


RULES: dict[str, Callable[[str, Any, str], str | None]] = {
    "required": _required,
    "string": _string,
    "max": _max,
    "min": _min,
}


def check_field(field: str, value: Any, field_rules: Sequence[str]) -> list[str]:
    messages: list[str] = []
    for rule in field_rules:
        name, _, arg = rule.partition(":")
        check = RULES.get(name)
        if check is None:
            raise ValueError(f"Unknown validation rule {rule!r} for field {field!r}")

        message = check(field, value, arg)
        if message:
            messages.append(message)
            if name == "required":
                # nothing else is worth saying about a missing value
                break
    return messages


def validate(rules: Rules, data: Mapping[str, Any], partial: bool = False) -> dict[str, Any]:
    """
    Checks ``data`` against ``rules``.

    Only fields named in ``rules`` come back; strings are stripped. With
    ``partial=True`` fields absent from ``data`` are skipped instead of
    failing ``required`` (PATCH semantics).
    """
    errors: dict[str, list[str]] = {}
    cleaned: dict[str, Any] = {}

    for field, field_rules in rules.items():
        if partial and field not in data:
            continue

        value = data.get(field)
        if isinstance(value, str):
            value = value.strip()

        if "required" not in field_rules and _is_blank(value):
            continue

        messages = check_field(field, value, field_rules)
        if messages:
            errors[field] = messages
        else:
            cleaned[field] = value

    if errors:
        raise ValidationError(errors, data)
    return cleaned
