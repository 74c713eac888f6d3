"""Record id and timestamp helpers shared by the models."""

from datetime import datetime, timezone
import secrets
import string

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_record_id() -> str:
    """Generate a short public record id (9 base36 characters)."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
