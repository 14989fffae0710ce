"""Common validation helpers for user use cases."""

from app.domain.exceptions import ValidationError


def normalize_email(email: str) -> str:
    """Return a lower-cased address or raise ``ValidationError``."""

    normalized = (email or "").strip()
    if normalized.count("@") != 1:
        raise ValidationError("A valid email address is required")

    local_part, domain = normalized.split("@", 1)
    if not local_part or "." not in domain:
        raise ValidationError("A valid email address is required")

    return f"{local_part}@{domain.lower()}".lower()
