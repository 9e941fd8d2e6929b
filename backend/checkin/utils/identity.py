import re
from typing import Optional

PHONE = "phone"
NAME = "name"

_NON_DIGITS = re.compile(r"\D")

def normalize_phone(raw: Optional[str]) -> Optional[str]:
    """Reduce a phone number to its 10 digits, or None if it has another length"""
    if raw is None:
        return None
    digits = _NON_DIGITS.sub("", str(raw))
    # "+1 (555) 123-4567" style numbers carry the NANP country code
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        return None
    return digits

def normalize_name(raw: Optional[str]) -> Optional[str]:
    """Case-insensitive name key: trimmed, lowercased, inner whitespace collapsed"""
    if raw is None:
        return None
    key = " ".join(str(raw).split()).lower()
    return key or None

def normalize_identity(raw: Optional[str], mode: str) -> Optional[str]:
    if mode == PHONE:
        return normalize_phone(raw)
    if mode == NAME:
        return normalize_name(raw)
    raise ValueError(f"Unknown identity mode: {mode}")

def format_phone(key: str) -> str:
    """(555) 123-4567 for 10-digit keys; anything else is returned untouched"""
    if len(key) == 10 and key.isdigit():
        return f"({key[:3]}) {key[3:6]}-{key[6:]}"
    return key
