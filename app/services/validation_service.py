# app/services/validation_service.py

from typing import Mapping

from app.core.rules import (
    CONFIRM_FIELD,
    MSG_PASSWORDS_MISMATCH,
    FieldRule,
    check_field,
    has_confirmation,
    normalize,
    passwords_match,
)
from app.schemas.form import FieldError


def validate_fields(fields: Mapping[str, object], rules: tuple[FieldRule, ...]) -> list[FieldError]:
    """
    Run every rule against the raw request fields.

    Returns one FieldError per failing field (first failing check wins), in
    rule order. The password confirmation is checked last, and only when the
    confirmation field has not already failed on its own.
    """
    errors: list[FieldError] = []

    for rule in rules:
        message = check_field(rule, fields.get(rule.field))
        if message:
            errors.append(FieldError(param=rule.field, msg=message))

    if has_confirmation(rules) and not any(e.param == CONFIRM_FIELD for e in errors):
        if not passwords_match(fields.get("password"), fields.get(CONFIRM_FIELD)):
            errors.append(FieldError(param=CONFIRM_FIELD, msg=MSG_PASSWORDS_MISMATCH))

    return errors


def sanitize_fields(fields: Mapping[str, object], rules: tuple[FieldRule, ...]) -> dict[str, str]:
    """Known fields only, trimmed where the rule says so. Passwords are left as sent."""
    return {
        rule.field: normalize(rule, fields.get(rule.field))
        for rule in rules
        if rule.field != CONFIRM_FIELD
    }
