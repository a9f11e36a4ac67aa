import pytest
from starlette.requests import Request

from app.core.rate_limiter import build_limiter, get_real_ip, limiter_storage_uri


def make_request(headers: dict | None = None, client=("10.0.0.5", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/form",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


@pytest.mark.parametrize("headers, expected", [
    ({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}, "203.0.113.7"),
    ({"X-Real-IP": "198.51.100.4"}, "198.51.100.4"),
    ({}, "10.0.0.5"),
])
def test_get_real_ip(headers, expected):
    assert get_real_ip(make_request(headers)) == expected


def test_storage_uri_defaults_to_memory(settings):
    assert limiter_storage_uri(settings) == "memory://"


def test_storage_uri_uses_tls_outside_dev(settings):
    dev = settings.model_copy(update={"REDIS_URL": "redis://cache:6379/0"})
    prod = dev.model_copy(update={"ENV": "prod"})

    assert limiter_storage_uri(dev) == "redis://cache:6379/0"
    assert limiter_storage_uri(prod) == "rediss://cache:6379/0"


def test_build_limiter_follows_settings(settings):
    enabled = build_limiter(settings.model_copy(update={"RATE_LIMIT_ENABLED": True}))
    disabled = build_limiter(settings)

    assert enabled.enabled is True
    assert disabled.enabled is False
