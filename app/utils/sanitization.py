import html
from typing import Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def validate_and_sanitize_input(value: Optional[str], max_length: int = 500) -> str:
    """
    Validate and sanitize free text (request details, line item descriptions, notes).

    Args:
        value: Input string to validate
        max_length: Maximum allowed length

    Returns:
        Stripped, HTML-escaped string ("" for empty input)

    Raises:
        ValueError: If input is too long
    """
    if not value:
        return ""

    value = str(value).strip()

    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    # Strip control characters except newlines and tabs
    value = "".join(ch for ch in value if ch in "\n\t" or ord(ch) >= 32)

    return html.escape(value, quote=True)
