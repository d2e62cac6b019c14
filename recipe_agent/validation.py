"""Input checks that run before any network or model call."""
import base64
import binascii
from urllib.parse import urlparse

from recipe_agent.errors import InputError

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
MAX_IMAGE_BYTES = 10 * 1024 * 1024


def validate_url(url: str) -> str:
    """Return the stripped URL if it is absolute http(s) with a host, else raise InputError."""
    candidate = (url or "").strip()
    try:
        parsed = urlparse(candidate)
    except ValueError:
        raise InputError("Invalid URL provided") from None
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InputError("Invalid URL provided")
    return candidate


def validate_image(image_b64: str, mime_type: str) -> bytes:
    """Check type allow-list, base64 well-formedness and decoded size. Returns the decoded bytes."""
    if mime_type not in ALLOWED_IMAGE_TYPES:
        raise InputError(
            f"Invalid image type {mime_type!r}. Allowed: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}"
        )
    if not image_b64:
        raise InputError("Image data is empty")
    # Cheap upper bound before decoding: 4 base64 chars encode 3 bytes
    if len(image_b64) * 3 // 4 > MAX_IMAGE_BYTES + 3:
        raise InputError("Image too large. Maximum size is 10MB")
    try:
        data = base64.b64decode(image_b64, validate=True)
    except (binascii.Error, ValueError):
        raise InputError("Image data is not valid base64") from None
    if not data:
        raise InputError("Image data is empty")
    if len(data) > MAX_IMAGE_BYTES:
        raise InputError("Image too large. Maximum size is 10MB")
    return data
