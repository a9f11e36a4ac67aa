from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address
from loguru import logger

from app.core.config import Settings
from app.core.exceptions import RateLimitedError

FORM_LIMIT_SCOPE = "form"


# ----------------------------------------------------------------
# 1. CLIENT IP IDENTIFICATION
# ----------------------------------------------------------------
def get_real_ip(request):
    """
    Client IP behind proxies: X-Forwarded-For (leftmost), then X-Real-IP,
    then the socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


# ----------------------------------------------------------------
# 2. STORAGE SELECTION
# ----------------------------------------------------------------
def limiter_storage_uri(settings: Settings) -> str:
    """Redis when REDIS_URL is set (TLS outside dev), otherwise process memory."""
    if not settings.REDIS_URL:
        return "memory://"

    uri = settings.REDIS_URL
    if settings.ENV != "dev" and uri.startswith("redis://"):
        uri = "rediss://" + uri[len("redis://"):]
    return uri


# ----------------------------------------------------------------
# 3. ONE LIMITER PER APP
# ----------------------------------------------------------------
def build_limiter(settings: Settings) -> Limiter:
    uri = limiter_storage_uri(settings)

    try:
        limiter = Limiter(
            key_func=get_real_ip,
            storage_uri=uri,
            enabled=settings.RATE_LIMIT_ENABLED,
        )
    except Exception as e:
        logger.error(f"Rate limiter storage unavailable ({e}), using in-memory counters")
        return Limiter(key_func=get_real_ip, enabled=settings.RATE_LIMIT_ENABLED)

    backend = "memory" if uri == "memory://" else "redis"
    logger.info(f"Rate limiter ready: {backend} storage, enabled={limiter.enabled}")
    return limiter


# ----------------------------------------------------------------
# 4. FORM SUBMISSION LIMIT (route dependency)
# ----------------------------------------------------------------
async def enforce_form_rate_limit(request: Request) -> None:
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return

    item = parse(request.app.state.settings.FORM_RATE_LIMIT)
    client_ip = get_real_ip(request)

    allowed = await run_in_threadpool(limiter.limiter.hit, item, FORM_LIMIT_SCOPE, client_ip)
    if not allowed:
        logger.warning(f"Rate limit hit by {client_ip}: {item}")
        raise RateLimitedError()
