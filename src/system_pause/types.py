"""Principal identifiers shared by the controller and managed resources."""

from __future__ import annotations

import re

Principal = str

ZERO_ADDRESS: Principal = "0x" + "0" * 40

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: object) -> bool:
    return isinstance(value, str) and bool(_ADDRESS_PATTERN.match(value))


def normalize(value: str | None) -> Principal:
    """Return ``value`` lower-cased so identities compare by equality.

    ``None`` and the empty string collapse to :data:`ZERO_ADDRESS`.
    """

    if not value:
        return ZERO_ADDRESS
    return value.lower()


def is_null(value: str | None) -> bool:
    return normalize(value) == ZERO_ADDRESS


def same_principal(left: str | None, right: str | None) -> bool:
    return normalize(left) == normalize(right)


__all__ = ["Principal", "ZERO_ADDRESS", "is_address", "is_null", "normalize", "same_principal"]
