import logging
import secrets

from fastapi import Request

from config import settings

logger = logging.getLogger(__name__)


def validate_api_key(request: Request) -> bool:
    """Check the consumer-app API key header against the configured key."""
    expected = (settings.API_KEY or "").strip()
    if not expected:
        if settings.is_development:
            logger.warning("API key validation skipped in development mode")
            return True
        return False

    header_name = (settings.API_KEY_HEADER or "").strip() or "x-api-key"
    provided = request.headers.get(header_name)
    if not provided:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
