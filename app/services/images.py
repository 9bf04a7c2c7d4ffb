import re
from typing import Optional, Tuple
from urllib.parse import urlparse

from app.core.config import settings

MAX_IMAGE_SIZE_MB = 5
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp", "image/jpg")
TRUSTED_IMAGE_HOSTS = (
    "firebasestorage.googleapis.com",
    "storage.googleapis.com",
)


def _trusted_hosts() -> Tuple[str, ...]:
    return TRUSTED_IMAGE_HOSTS + (urlparse(settings.S3_BASE_URL).hostname,)


def is_valid_image_url(url: Optional[str]) -> bool:
    """Data URIs, URLs with an image extension, or URLs on a trusted host."""
    if not url:
        return False
    if re.match(r"^data:image/", url, re.IGNORECASE):
        return True
    if re.search(r"\.(jpg|jpeg|png|webp|gif|svg)(\?.*)?$", url, re.IGNORECASE):
        return True

    hostname = urlparse(url).hostname
    if not hostname:
        return False
    return any(hostname == domain or hostname.endswith("." + domain) for domain in _trusted_hosts())


def validate_image_file(content_type: Optional[str], size: int) -> Optional[str]:
    """Return an error message for an unacceptable upload, None when valid."""
    if content_type not in ALLOWED_IMAGE_TYPES:
        return "Unsupported file type. Please choose a JPG, PNG or WebP image."
    if size > MAX_IMAGE_SIZE_MB * 1024 * 1024:
        return f"File is too large. The maximum size is {MAX_IMAGE_SIZE_MB} MB."
    return None
