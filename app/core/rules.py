# app/core/rules.py
"""
Field rule table for the registration forms.

Every field maps to an ordered tuple of checks. The first failing check wins,
so each field yields at most one message. The password confirmation is a
cross-field check and is evaluated after all single-field rules.
"""

import re
from datetime import date, datetime
from typing import Callable, NamedTuple, Optional

from email_validator import EmailNotValidError, validate_email

# ==========================================================
# VARIANTS
# ==========================================================
VARIANT_BASIC = "basic"
VARIANT_SELLER = "seller"

# ==========================================================
# CONSTANTS
# ==========================================================
GENDERS = ("male", "female", "prefer not to say")
GOVT_ID_TYPES = ("Aadhar", "PAN", "Driving License", "Passport")

MIN_AGE = 18

PHONE_RE = re.compile(r"^[6-9]\d{9}$")
PINCODE_RE = re.compile(r"^\d{6}$")
GSTIN_RE = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")

ATTACHMENT_FIELD = "idProof"
CONFIRM_FIELD = "confirmPassword"

MSG_ATTACHMENT_REQUIRED = "ID proof document is required"
MSG_PASSWORDS_MISMATCH = "Passwords do not match"


class Check(NamedTuple):
    predicate: Callable[[str], bool]
    message: str


class FieldRule(NamedTuple):
    field: str
    label: str
    checks: tuple[Check, ...]
    required: bool = True
    trim: bool = False


# ----------------------------------------------------------
# Predicates
# ----------------------------------------------------------
def min_length(n: int) -> Callable[[str], bool]:
    return lambda value: len(value) >= n


def matches(pattern: re.Pattern) -> Callable[[str], bool]:
    return lambda value: pattern.match(value) is not None


def one_of(choices: tuple[str, ...]) -> Callable[[str], bool]:
    return lambda value: value in choices


def is_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def has_password_classes(value: str) -> bool:
    return (
        any(c.islower() for c in value)
        and any(c.isupper() for c in value)
        and any(c.isdigit() for c in value)
    )


def parse_dob(value: str) -> Optional[date]:
    """Accepts `YYYY-MM-DD` (what a date input sends) or a full ISO timestamp."""
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def age_on(dob: date, today: date) -> int:
    """Whole years between dob and today; the birthday itself counts."""
    years = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        years -= 1
    return years


def is_adult(value: str, today: Optional[date] = None) -> bool:
    dob = parse_dob(value)
    if dob is None:
        return False
    return age_on(dob, today or date.today()) >= MIN_AGE


def passwords_match(password: Optional[str], confirm: Optional[str]) -> bool:
    return password == confirm


# ==========================================================
# RULE TABLE
# ==========================================================
NAME_RULE = FieldRule(
    "name", "Name",
    (Check(min_length(3), "Name must be at least 3 characters long"),),
    trim=True,
)

EMAIL_RULE = FieldRule(
    "email", "Email",
    (Check(is_email, "Please provide a valid email address"),),
    trim=True,
)

PASSWORD_RULE = FieldRule(
    "password", "Password",
    (
        Check(has_password_classes, "Password must include uppercase, lowercase, and number"),
        Check(min_length(6), "Password must be at least 6 characters"),
    ),
)

PHONE_RULE = FieldRule(
    "phone", "Phone",
    (Check(matches(PHONE_RE), "Invalid phone number"),),
    trim=True,
)

GENDER_RULE = FieldRule(
    "gender", "Gender",
    (Check(one_of(GENDERS), "Select a valid gender"),),
)

DOB_RULE = FieldRule(
    "dob", "Date of birth",
    (
        Check(lambda v: parse_dob(v) is not None, "Invalid date of birth"),
        Check(is_adult, "You must be at least 18 years old"),
    ),
    trim=True,
)

ADDRESS_RULE = FieldRule(
    "address", "Address",
    (Check(min_length(5), "Address must be at least 5 characters"),),
    trim=True,
)

PINCODE_RULE = FieldRule(
    "pincode", "Pincode",
    (Check(matches(PINCODE_RE), "Invalid pincode"),),
    trim=True,
)

GOVT_ID_TYPE_RULE = FieldRule(
    "govtIdType", "Govt ID type",
    (Check(one_of(GOVT_ID_TYPES), "Invalid Govt ID Type"),),
)

GOVT_ID_NUMBER_RULE = FieldRule(
    "govtIdNumber", "Govt ID number",
    (Check(min_length(5), "Enter a valid ID number"),),
    trim=True,
)


def gst_rule(required: bool) -> FieldRule:
    return FieldRule(
        "gstNo", "GST number",
        (Check(matches(GSTIN_RE), "Invalid GSTIN format"),),
        required=required,
        trim=True,
    )


CONFIRM_PASSWORD_RULE = FieldRule(
    CONFIRM_FIELD, "Confirm password",
    (),
)

BASIC_RULES: tuple[FieldRule, ...] = (NAME_RULE, EMAIL_RULE, PASSWORD_RULE)


def seller_rules(gst_required: bool = False) -> tuple[FieldRule, ...]:
    return (
        NAME_RULE,
        EMAIL_RULE,
        PHONE_RULE,
        GENDER_RULE,
        DOB_RULE,
        ADDRESS_RULE,
        PINCODE_RULE,
        GOVT_ID_TYPE_RULE,
        GOVT_ID_NUMBER_RULE,
        gst_rule(gst_required),
        PASSWORD_RULE,
        CONFIRM_PASSWORD_RULE,
    )


def get_rule_set(variant: str, gst_required: bool = False) -> tuple[FieldRule, ...]:
    if variant == VARIANT_BASIC:
        return BASIC_RULES
    if variant == VARIANT_SELLER:
        return seller_rules(gst_required)
    raise ValueError(f"Unknown form variant: {variant}")


def has_confirmation(rules: tuple[FieldRule, ...]) -> bool:
    return any(rule.field == CONFIRM_FIELD for rule in rules)


# ==========================================================
# EVALUATION
# ==========================================================
def normalize(rule: FieldRule, value) -> str:
    if value is None:
        return ""
    value = str(value)
    return value.strip() if rule.trim else value


def check_field(rule: FieldRule, value) -> Optional[str]:
    """Return the first failing message for `value`, or None when it passes."""
    value = normalize(rule, value)

    if value == "":
        if rule.required:
            return f"{rule.label} is required"
        return None

    for check in rule.checks:
        if not check.predicate(value):
            return check.message
    return None
