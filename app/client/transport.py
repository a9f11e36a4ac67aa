# app/client/transport.py

import httpx
from enum import Enum
from loguru import logger
from pydantic import BaseModel
from typing import Any, Optional

from app.core.rules import ATTACHMENT_FIELD

FORM_ENDPOINT = "/api/form"


class SubmissionStatus(str, Enum):
    Submitted = "submitted"
    Rejected = "rejected"
    NetworkError = "network_error"


class SubmissionResult(BaseModel):
    status: SubmissionStatus
    status_code: Optional[int] = None
    message: Optional[str] = None
    # Server field errors, exactly as sent: [{param, msg, ...}, ...]
    errors: Optional[list[dict[str, Any]]] = None
    submission_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SubmissionStatus.Submitted

    def field_errors(self) -> dict[str, str]:
        """Server errors keyed by field, first message per field."""
        mapped: dict[str, str] = {}
        for err in self.errors or []:
            mapped.setdefault(err.get("param"), err.get("msg"))
        return mapped


class FormClient:
    """
    Sends one validated draft to POST /api/form.

    Without an attachment the body is JSON; with one it is multipart with the
    file under `idProof`. No retries; timeouts are httpx defaults.
    """

    def __init__(self, base_url: str, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url
        self.transport = transport

    def build_request_kwargs(self, draft: dict) -> dict:
        attachment = draft.get(ATTACHMENT_FIELD)
        fields = {k: v for k, v in draft.items() if k != ATTACHMENT_FIELD}

        if attachment is None:
            return {"json": fields}

        return {
            "data": {k: "" if v is None else str(v) for k, v in fields.items()},
            "files": {
                ATTACHMENT_FIELD: (attachment.filename, attachment.content, attachment.content_type)
            },
        }

    async def submit(self, draft: dict) -> SubmissionResult:
        kwargs = self.build_request_kwargs(draft)

        async with httpx.AsyncClient(base_url=self.base_url, transport=self.transport) as client:
            try:
                response = await client.post(FORM_ENDPOINT, **kwargs)
            except httpx.TransportError as e:
                logger.error(f"Error submitting form: {e}")
                return SubmissionResult(
                    status=SubmissionStatus.NetworkError,
                    message="Network error or server not responding.",
                )

        return self.interpret(response)

    @staticmethod
    def interpret(response: httpx.Response) -> SubmissionResult:
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_success:
            return SubmissionResult(
                status=SubmissionStatus.Submitted,
                status_code=response.status_code,
                message=data.get("message"),
                submission_id=data.get("id"),
            )

        if isinstance(data.get("errors"), list):
            return SubmissionResult(
                status=SubmissionStatus.Rejected,
                status_code=response.status_code,
                errors=data["errors"],
            )

        return SubmissionResult(
            status=SubmissionStatus.Rejected,
            status_code=response.status_code,
            message=data.get("error") or data.get("message") or "Submission failed",
        )
