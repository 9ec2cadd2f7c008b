"""Utility functions module."""

from .masking import mask_email, mask_identifier, mask_secret, mask_sensitive_dict

__all__ = [
    "mask_email",
    "mask_identifier",
    "mask_secret",
    "mask_sensitive_dict",
]
