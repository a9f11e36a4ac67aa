# app/schemas/form.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID
from datetime import date, datetime


# ------------------------------------------------------------
# FIELD ERROR (one entry of a 400 {errors: [...]} response)
# ------------------------------------------------------------
class FieldError(BaseModel):
    type: str = "field"
    param: str
    msg: str
    location: str = "body"


# ------------------------------------------------------------
# ATTACHMENT METADATA (persisted inside the record)
# ------------------------------------------------------------
class AttachmentMeta(BaseModel):
    original_name: str = Field(serialization_alias="originalName")
    stored_name: str = Field(serialization_alias="storedName")
    content_type: str = Field(serialization_alias="contentType")
    size: int
    path: str


# ------------------------------------------------------------
# SUBMIT RESPONSE (201)
# ------------------------------------------------------------
class SubmitResponse(BaseModel):
    message: str = "Form submitted"
    id: UUID


# ------------------------------------------------------------
# SUBMISSION READ (record rendered with its wire field names)
# ------------------------------------------------------------
class SubmissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    variant: str

    name: str
    email: str
    phone: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    govt_id_type: Optional[str] = Field(default=None, serialization_alias="govtIdType")
    govt_id_number: Optional[str] = Field(default=None, serialization_alias="govtIdNumber")
    gst_no: Optional[str] = Field(default=None, serialization_alias="gstNo")
    id_proof: Optional[dict] = Field(default=None, serialization_alias="idProof")

    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")
