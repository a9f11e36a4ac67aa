# app/services/submission_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from loguru import logger
from typing import Optional
import uuid

from app.core.exceptions import StoreError
from app.core.rules import parse_dob
from app.core.security import hash_password
from app.models.submission import FormSubmission, utcnow
from app.schemas.form import AttachmentMeta

# Wire name -> column name for the plain seller fields
SELLER_COLUMNS = {
    "phone": "phone",
    "gender": "gender",
    "address": "address",
    "pincode": "pincode",
    "govtIdType": "govt_id_type",
    "govtIdNumber": "govt_id_number",
    "gstNo": "gst_no",
}


# ------------------------------------------------------------
# BUILD RECORD
# ------------------------------------------------------------
def build_submission(
    variant: str,
    fields: dict,
    attachment: Optional[AttachmentMeta] = None,
) -> FormSubmission:
    """
    Map validated, sanitized fields onto a record.

        - password is hashed, confirmPassword never reaches this point
        - dob is stored as a date
        - empty optional fields are stored as NULL
        - attachment is stored as metadata only
    """
    now = utcnow()

    record = FormSubmission(
        variant=variant,
        name=fields["name"],
        email=fields["email"],
        password_hash=hash_password(fields["password"]),
        created_at=now,
        updated_at=now,
    )

    for wire_name, column in SELLER_COLUMNS.items():
        value = fields.get(wire_name)
        if value:
            setattr(record, column, value)

    if fields.get("dob"):
        record.dob = parse_dob(fields["dob"])

    if attachment is not None:
        record.id_proof = attachment.model_dump(by_alias=True)

    return record


# ------------------------------------------------------------
# STORE RECORD (single atomic insert)
# ------------------------------------------------------------
async def create_submission(
    session: AsyncSession,
    variant: str,
    fields: dict,
    attachment: Optional[AttachmentMeta] = None,
) -> FormSubmission:
    record = build_submission(variant, fields, attachment)
    session.add(record)

    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Error submitting form")
        raise StoreError()

    # Committed: the id and timestamps were set before the insert, so no re-read
    return record


# ------------------------------------------------------------
# GET SUBMISSION BY ID
# ------------------------------------------------------------
async def get_submission(session: AsyncSession, submission_id: uuid.UUID) -> FormSubmission | None:
    result = await session.execute(select(FormSubmission).where(FormSubmission.id == submission_id))
    return result.scalar_one_or_none()
