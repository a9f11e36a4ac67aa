# app/client/validator.py

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from typing import Optional

from app.core import rules
from app.core.rules import (
    CONFIRM_FIELD,
    MSG_ATTACHMENT_REQUIRED,
    MSG_PASSWORDS_MISMATCH,
    VARIANT_BASIC,
    VARIANT_SELLER,
)


def _apply(rule: rules.FieldRule, value: str) -> str:
    message = rules.check_field(rule, value)
    if message:
        raise ValueError(message)
    return value


def _none_as_empty(value):
    # A cleared input arrives as None and reads as an empty field
    return "" if value is None else value


# ------------------------------------------------------------
# ATTACHMENT (file picked in the form, not yet uploaded)
# ------------------------------------------------------------
class AttachmentDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes = b""
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


# ------------------------------------------------------------
# BASIC DRAFT
# ------------------------------------------------------------
class BasicDraft(BaseModel):
    model_config = ConfigDict(validate_default=True)

    name: str = ""
    email: str = ""
    password: str = ""

    _blank = field_validator("name", "email", "password", mode="before")(_none_as_empty)

    @field_validator("name", "email", "password")
    @classmethod
    def check_rule(cls, v: str, info: ValidationInfo):
        return _apply(_BASIC_BY_FIELD[info.field_name], v)


# ------------------------------------------------------------
# SELLER DRAFT
# ------------------------------------------------------------
class SellerDraft(BaseModel):
    model_config = ConfigDict(validate_default=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    gender: str = ""
    dob: str = ""
    address: str = ""
    pincode: str = ""
    govtIdType: str = ""
    govtIdNumber: str = ""
    gstNo: str = ""
    password: str = ""
    confirmPassword: str = ""
    idProof: Optional[AttachmentDraft] = None

    _blank = field_validator(
        "name", "email", "phone", "gender", "dob", "address", "pincode",
        "govtIdType", "govtIdNumber", "gstNo", "password", "confirmPassword",
        mode="before",
    )(_none_as_empty)

    @field_validator(
        "name", "email", "phone", "gender", "dob", "address", "pincode",
        "govtIdType", "govtIdNumber", "password", "confirmPassword",
    )
    @classmethod
    def check_rule(cls, v: str, info: ValidationInfo):
        return _apply(_SELLER_BY_FIELD[info.field_name], v)

    @field_validator("gstNo")
    @classmethod
    def check_gst(cls, v: str, info: ValidationInfo):
        gst_required = bool((info.context or {}).get("gst_required", False))
        return _apply(rules.gst_rule(gst_required), v)

    @field_validator("idProof")
    @classmethod
    def check_attachment(cls, v: Optional[AttachmentDraft]):
        if v is None or v.size == 0:
            raise ValueError(MSG_ATTACHMENT_REQUIRED)
        return v


_BASIC_BY_FIELD = {rule.field: rule for rule in rules.BASIC_RULES}
_SELLER_BY_FIELD = {rule.field: rule for rule in rules.seller_rules()}

DRAFT_MODELS = {
    VARIANT_BASIC: BasicDraft,
    VARIANT_SELLER: SellerDraft,
}


def _message(error: dict) -> str:
    # ValueError raised in a validator arrives as ctx["error"]
    ctx_error = (error.get("ctx") or {}).get("error")
    return str(ctx_error) if ctx_error is not None else error["msg"]


def validate_draft(draft: dict, variant: str = VARIANT_SELLER, gst_required: bool = False) -> dict[str, str]:
    """
    Validate the whole draft before anything is sent.

    Returns {} when valid, otherwise {field: first failing message} for every
    failing field. The draft dict is only read, never modified.
    """
    model = DRAFT_MODELS[variant]
    errors: dict[str, str] = {}

    try:
        model.model_validate(draft, context={"gst_required": gst_required})
    except ValidationError as e:
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "__all__"
            errors.setdefault(field, _message(err))

    # Cross-field post pass
    if variant == VARIANT_SELLER and CONFIRM_FIELD not in errors:
        if draft.get("password", "") != draft.get(CONFIRM_FIELD, ""):
            errors[CONFIRM_FIELD] = MSG_PASSWORDS_MISMATCH

    return errors
