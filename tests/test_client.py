import asyncio
import json
import httpx
import pytest
from httpx import ASGITransport

from app.client.form import RegistrationForm
from app.client.transport import FormClient, SubmissionStatus
from app.client.validator import AttachmentDraft

ATTACHMENT = AttachmentDraft(filename="pan.pdf", content=b"%PDF-1.4 data", content_type="application/pdf")


def counting_transport(handler):
    calls = []

    def wrapped(request: httpx.Request):
        calls.append(request)
        return handler(request)

    return httpx.MockTransport(wrapped), calls


# ------------------------------------------------------------
# REQUEST ENCODING
# ------------------------------------------------------------
def test_json_body_without_attachment(basic_fields):
    kwargs = FormClient("http://testserver").build_request_kwargs(basic_fields)
    assert kwargs == {"json": basic_fields}


def test_multipart_body_with_attachment(seller_fields):
    kwargs = FormClient("http://testserver").build_request_kwargs({**seller_fields, "idProof": ATTACHMENT})

    assert kwargs["data"]["name"] == "Asha Verma"
    assert "idProof" not in kwargs["data"]
    assert kwargs["files"]["idProof"] == ("pan.pdf", b"%PDF-1.4 data", "application/pdf")


# ------------------------------------------------------------
# AGAINST THE REAL APP
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_submit_seller_against_app(app, seller_fields):
    client = FormClient("http://testserver", transport=ASGITransport(app=app))
    result = await client.submit({**seller_fields, "idProof": ATTACHMENT})

    assert result.status == SubmissionStatus.Submitted
    assert result.ok
    assert result.status_code == 201
    assert result.submission_id


@pytest.mark.asyncio
async def test_server_field_errors_are_surfaced_unmodified(app):
    client = FormClient("http://testserver", transport=ASGITransport(app=app))
    result = await client.submit({"name": "Al", "email": "a@b.com", "password": "abc"})

    assert result.status == SubmissionStatus.Rejected
    assert result.status_code == 400
    assert {e["param"] for e in result.errors} == {"name", "password"}
    assert set(result.field_errors()) == {"name", "password"}


@pytest.mark.asyncio
async def test_single_message_is_surfaced(app, seller_fields):
    empty = AttachmentDraft(filename="pan.pdf", content=b"")
    client = FormClient("http://testserver", transport=ASGITransport(app=app))

    result = await client.submit({**seller_fields, "idProof": empty})

    assert result.status == SubmissionStatus.Rejected
    assert result.errors is None
    assert result.message == "ID proof file is required"


# ------------------------------------------------------------
# NETWORK FAILURE
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_network_failure_is_distinct(basic_fields):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = FormClient("http://testserver", transport=httpx.MockTransport(refuse))
    result = await client.submit(basic_fields)

    assert result.status == SubmissionStatus.NetworkError
    assert result.errors is None
    assert result.status_code is None


# ------------------------------------------------------------
# FORM STATE
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_client_validation_blocks_network():
    transport, calls = counting_transport(lambda r: httpx.Response(201, json={"message": "Form submitted"}))
    form = RegistrationForm(FormClient("http://testserver", transport=transport), variant="basic")
    form.set_field("name", "Al")

    result = await form.submit()

    assert result is None
    assert calls == []
    assert set(form.errors) == {"name", "email", "password"}
    assert form.draft["name"] == "Al"


@pytest.mark.asyncio
async def test_success_resets_draft(basic_fields):
    transport, calls = counting_transport(
        lambda r: httpx.Response(201, json={"message": "Form submitted", "id": "abc"})
    )
    form = RegistrationForm(FormClient("http://testserver", transport=transport), variant="basic")
    for field, value in basic_fields.items():
        form.set_field(field, value)

    result = await form.submit()

    assert result.ok
    assert len(calls) == 1
    assert json.loads(calls[0].content) == basic_fields
    assert form.success is True
    assert form.errors == {}
    assert form.draft == {"name": "", "email": "", "password": ""}


@pytest.mark.asyncio
async def test_rejection_keeps_draft_and_maps_errors(basic_fields):
    body = {"errors": [{"type": "field", "param": "email", "msg": "Email already used", "location": "body"}]}
    transport, _ = counting_transport(lambda r: httpx.Response(400, json=body))
    form = RegistrationForm(FormClient("http://testserver", transport=transport), variant="basic")
    for field, value in basic_fields.items():
        form.set_field(field, value)

    await form.submit()

    assert form.success is False
    assert form.errors == {"email": "Email already used"}
    assert form.draft["email"] == basic_fields["email"]


@pytest.mark.asyncio
async def test_seller_form_sends_multipart(seller_fields):
    transport, calls = counting_transport(lambda r: httpx.Response(201, json={"message": "Form submitted"}))
    form = RegistrationForm(FormClient("http://testserver", transport=transport))
    for field, value in seller_fields.items():
        form.set_field(field, value)
    form.set_field("idProof", ATTACHMENT)

    await form.submit()

    assert len(calls) == 1
    assert calls[0].headers["content-type"].startswith("multipart/form-data")
    assert form.draft["idProof"] is None


@pytest.mark.asyncio
async def test_second_submit_ignored_while_in_flight(basic_fields):
    release = asyncio.Event()
    calls = []

    async def slow(request):
        calls.append(request)
        await release.wait()
        return httpx.Response(201, json={"message": "Form submitted", "id": "abc"})

    form = RegistrationForm(FormClient("http://testserver", transport=httpx.MockTransport(slow)), variant="basic")
    for field, value in basic_fields.items():
        form.set_field(field, value)

    first = asyncio.create_task(form.submit())
    while not form.submitting:
        await asyncio.sleep(0)

    assert await form.submit() is None

    release.set()
    result = await first

    assert result.ok
    assert len(calls) == 1
    assert form.submitting is False


# ------------------------------------------------------------
# RESPONSE CLASSIFICATION
# ------------------------------------------------------------
@pytest.mark.parametrize("response", [
    httpx.Response(502, text="<html>Bad Gateway</html>"),
    httpx.Response(500, json=["unexpected"]),
    httpx.Response(503),
])
def test_unreadable_error_body_is_generic_rejection(response):
    result = FormClient.interpret(response)

    assert result.status == SubmissionStatus.Rejected
    assert result.status_code == response.status_code
    assert result.errors is None
    assert result.message == "Submission failed"


def test_success_without_json_body_is_submitted():
    result = FormClient.interpret(httpx.Response(201, text="ok"))

    assert result.status == SubmissionStatus.Submitted
    assert result.submission_id is None


def test_error_message_fallback_order():
    result = FormClient.interpret(httpx.Response(400, json={"message": "Bad request"}))
    assert result.message == "Bad request"
