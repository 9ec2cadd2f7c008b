"""Utility functions for masking sensitive data in logs and outputs."""

from typing import Any, Dict, Optional, Set

DEFAULT_SENSITIVE_KEYS = frozenset(
    {
        "password",
        "new_password",
        "client_secret",
        "access_token",
        "refresh_token",
        "token",
        "secret",
    }
)


def mask_email(email: str) -> str:
    """
    Mask email address for logging purposes.

    Example: user@example.com -> u***@e***.com

    Args:
        email: Email address to mask

    Returns:
        Masked email address
    """
    if not email or "@" not in email:
        return "***"

    parts = email.split("@")
    if len(parts) != 2:
        return "***"

    local, domain = parts

    # Mask local part: keep first character
    masked_local = local[0] + "***" if local else "***"

    # Mask domain: keep first character before dot
    domain_parts = domain.split(".")
    if len(domain_parts) >= 2 and domain_parts[0]:
        masked_domain = domain_parts[0][0] + "***." + ".".join(domain_parts[1:])
    else:
        masked_domain = "***"

    return f"{masked_local}@{masked_domain}"


def mask_identifier(identifier: str) -> str:
    """
    Mask a login identifier (email address or user name).

    Example: @alice:example.org -> @a***

    Args:
        identifier: Identifier to mask

    Returns:
        Masked identifier
    """
    if "@" in identifier.lstrip("@"):
        return mask_email(identifier)
    if not identifier:
        return "***"
    if identifier.startswith("@") and len(identifier) > 1:
        return identifier[:2] + "***"
    return identifier[0] + "***"


def mask_secret(secret: Optional[str], visible: int = 4) -> str:
    """
    Mask a secret keeping only its last characters.

    Example: 1b4e28ba-2fa1-11d2 -> ***11d2

    Args:
        secret: Secret to mask
        visible: Number of trailing characters left visible

    Returns:
        Masked secret
    """
    if not secret or len(secret) <= visible * 2:
        return "***"
    return "***" + secret[-visible:]


def mask_sensitive_dict(
    data: Dict[str, Any], sensitive_keys: Optional[Set[str]] = None
) -> Dict[str, Any]:
    """
    Mask sensitive values in a request or response body for logging.

    Args:
        data: Dictionary with potentially sensitive data
        sensitive_keys: Set of keys to mask (uses defaults if None)

    Returns:
        New dictionary with masked sensitive values
    """
    keys = DEFAULT_SENSITIVE_KEYS if sensitive_keys is None else sensitive_keys
    masked_data: Dict[str, Any] = {}

    for key, value in data.items():
        if key.lower() in keys:
            masked_data[key] = "********"
        elif key.lower() in {"email", "address"} and isinstance(value, str):
            masked_data[key] = mask_email(value)
        elif isinstance(value, dict):
            masked_data[key] = mask_sensitive_dict(value, sensitive_keys)
        elif isinstance(value, list):
            masked_data[key] = [
                mask_sensitive_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            masked_data[key] = value

    return masked_data
