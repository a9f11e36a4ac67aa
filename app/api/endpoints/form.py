# app/api/endpoints/form.py

import json

from fastapi import APIRouter, Depends, Request, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.api.deps import get_app_settings, get_db_session
from app.core.config import Settings
from app.core.exceptions import FieldValidationError, FormError, InvalidBodyError
from app.core.rate_limiter import enforce_form_rate_limit
from app.core.rules import ATTACHMENT_FIELD, VARIANT_BASIC, VARIANT_SELLER, get_rule_set
from app.core.storage import discard_attachment, save_attachment
from app.schemas.form import SubmitResponse
from app.services.submission_service import create_submission
from app.services.validation_service import sanitize_fields, validate_fields

router = APIRouter(
    prefix="/api/form",
    tags=["Form"]
)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


# ------------------------------------------------------------
# BODY PARSING
# ------------------------------------------------------------
async def read_json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidBodyError()

    if not isinstance(body, dict):
        raise InvalidBodyError()
    return body


def split_form(form) -> tuple[dict, UploadFile | None]:
    """Plain fields go to the field map; the idProof part goes to its own slot."""
    fields = {}
    upload = None

    for key, value in form.multi_items():
        if key == ATTACHMENT_FIELD:
            if not isinstance(value, str):
                upload = value
            continue
        if isinstance(value, str):
            fields.setdefault(key, value)

    return fields, upload


# ------------------------------------------------------------
# SUBMIT FORM (PUBLIC)
# ------------------------------------------------------------
@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SubmitResponse,
    dependencies=[Depends(enforce_form_rate_limit)],
)
async def submit_form(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
):
    """
    JSON body -> basic variant. Multipart (or urlencoded) body -> seller
    variant with a required idProof file.

    Order: attachment extraction, field validation, single insert.
    Nothing is persisted when any step fails.
    """
    content_type = request.headers.get("content-type", "").lower()
    attachment = None

    if content_type.startswith(FORM_CONTENT_TYPES):
        variant = VARIANT_SELLER
        form = await request.form()
        fields, upload = split_form(form)
        try:
            attachment = await save_attachment(upload, settings)
        except FormError as e:
            logger.warning(f"Rejected seller submission: {e.message}")
            raise
    else:
        variant = VARIANT_BASIC
        fields = await read_json_body(request)

    rules = get_rule_set(variant, gst_required=settings.GST_REQUIRED)

    try:
        errors = validate_fields(fields, rules)
        if errors:
            logger.info(f"Validation errors: {[(e.param, e.msg) for e in errors]}")
            raise FieldValidationError(errors)

        record = await create_submission(
            session,
            variant=variant,
            fields=sanitize_fields(fields, rules),
            attachment=attachment,
        )

    except Exception:
        await discard_attachment(attachment, settings)
        raise

    logger.success(f"Form submitted ({variant}): {record.id}")

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=SubmitResponse(id=record.id).model_dump(mode="json"),
    )
