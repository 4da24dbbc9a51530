"""Structural checks and masking for AWS credential values.

These checks only look at the shape of the values. AWS itself does not enforce
them, but a wrong length or prefix almost always means a copy/paste mistake.
"""
from typing import Any

from postbox.config import Settings

ACCESS_KEY_ID_LENGTH = 20
ACCESS_KEY_ID_PREFIXES = ("AKIA", "ASIA")
SECRET_ACCESS_KEY_LENGTH = 40

NOT_SET = "not set"


def access_key_id_warnings(access_key_id: str | None) -> list[str]:
    if not access_key_id:
        return []
    warnings = []
    if len(access_key_id) != ACCESS_KEY_ID_LENGTH:
        warnings.append(
            f"Access Key ID should be {ACCESS_KEY_ID_LENGTH} characters, got {len(access_key_id)}"
        )
    if not access_key_id.startswith(ACCESS_KEY_ID_PREFIXES):
        warnings.append(f"Access Key ID should start with {' or '.join(ACCESS_KEY_ID_PREFIXES)}")
    return warnings


def secret_access_key_warnings(raw_secret: str | None) -> list[str]:
    """Check the secret as it was configured, before any stripping."""
    if raw_secret is None or not raw_secret.strip():
        return []
    warnings = []
    secret = raw_secret.strip()
    if len(secret) != SECRET_ACCESS_KEY_LENGTH:
        warnings.append(
            f"Secret Access Key should be {SECRET_ACCESS_KEY_LENGTH} characters, got {len(secret)}"
        )
    if raw_secret != secret:
        warnings.append("Secret Access Key has leading or trailing spaces!")
    return warnings


def is_valid_access_key_id(access_key_id: str | None) -> bool:
    return bool(access_key_id) and not access_key_id_warnings(access_key_id)


def is_valid_secret_access_key(raw_secret: str | None) -> bool:
    return bool(raw_secret) and not secret_access_key_warnings(raw_secret)


def mask_access_key_id(access_key_id: str | None, visible: int = 8) -> str:
    if not access_key_id:
        return NOT_SET
    return f"{access_key_id[:visible]}***"


def mask_secret(secret: str | None) -> str:
    if not secret:
        return NOT_SET
    return f"set ({len(secret)} chars)"


def credential_context(settings: Settings) -> dict[str, Any]:
    """Masked credential details safe to return alongside an authentication failure."""
    access_key_id = settings.access_key_id
    secret = settings.secret_access_key
    return {
        "region": settings.region or NOT_SET,
        "accessKeyIdPrefix": f"{access_key_id[:8]}..." if access_key_id else NOT_SET,
        "secretKeyLength": len(secret) if secret else 0,
    }
