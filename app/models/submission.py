# app/models/submission.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON, Date, DateTime, String, Text
from datetime import date, datetime, timezone
from typing import Optional
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FormSubmission(SQLModel, table=True):
    """
    One accepted registration. Written once, never updated or deleted.
    The attachment binary lives on disk; only its metadata is kept here.
    """
    __tablename__ = "form_submissions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    variant: str = Field(sa_column=Column(String, nullable=False))

    name: str = Field(sa_column=Column(String, nullable=False))
    email: str = Field(sa_column=Column(String, nullable=False))
    password_hash: str = Field(sa_column=Column(String, nullable=False))

    # Seller fields
    phone: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    gender: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    dob: Optional[date] = Field(default=None, sa_column=Column(Date, nullable=True))
    address: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    pincode: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    govt_id_type: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    govt_id_number: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    gst_no: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))

    id_proof: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
