"""
Secret Masking Utilities

Keeps capture tokens out of log output.
"""

from typing import Any, Dict, Iterable


def mask_token(token: str) -> str:
    """
    Mask a token for display (show last 4 characters).

    Args:
        token: The token to mask

    Returns:
        Masked string like "••••••••abcd"
    """
    if not token or len(token) < 8:
        return "••••••••"

    return "••••••••" + token[-4:]


def mask_config(config: Dict[str, Any], credential_fields: Iterable[str]) -> Dict[str, Any]:
    """Return a copy of a connection config with credential fields masked."""
    masked = dict(config)
    for name in credential_fields:
        if isinstance(masked.get(name), str):
            masked[name] = mask_token(masked[name])
    return masked
