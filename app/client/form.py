# app/client/form.py

from loguru import logger

from app.client.transport import FormClient, SubmissionResult, SubmissionStatus
from app.client.validator import validate_draft
from app.core.rules import VARIANT_BASIC, VARIANT_SELLER

BASIC_FIELDS = ("name", "email", "password")
SELLER_FIELDS = (
    "name", "email", "phone", "gender", "dob", "address", "pincode",
    "govtIdType", "govtIdNumber", "gstNo", "password", "confirmPassword",
)


def empty_draft(variant: str) -> dict:
    if variant == VARIANT_BASIC:
        return {field: "" for field in BASIC_FIELDS}
    draft = {field: "" for field in SELLER_FIELDS}
    draft["idProof"] = None
    return draft


class RegistrationForm:
    """
    Client-side form state: the draft, per-field errors, and the
    submitting/success flags. The draft is reset only after a successful
    submission.
    """

    def __init__(self, client: FormClient, variant: str = VARIANT_SELLER, gst_required: bool = False):
        self.client = client
        self.variant = variant
        self.gst_required = gst_required
        self.draft = empty_draft(variant)
        self.errors: dict[str, str] = {}
        self.message: str | None = None
        self.submitting = False
        self.success = False

    def set_field(self, field: str, value) -> None:
        self.draft = {**self.draft, field: value}

    async def submit(self) -> SubmissionResult | None:
        """
        Returns None when nothing was sent (client validation failed, or a
        submission is already in flight).
        """
        if self.submitting:
            logger.debug("Submit ignored: a submission is already in flight")
            return None

        self.success = False
        self.message = None

        errors = validate_draft(self.draft, self.variant, gst_required=self.gst_required)
        if errors:
            self.errors = errors
            return None

        self.errors = {}
        self.submitting = True
        try:
            result = await self.client.submit(self.draft)
        finally:
            self.submitting = False

        if result.status == SubmissionStatus.Submitted:
            self.success = True
            self.draft = empty_draft(self.variant)
        elif result.errors is not None:
            self.errors = result.field_errors()
        else:
            self.message = result.message

        return result
