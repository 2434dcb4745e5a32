"""Value normalizers shared by the models, the CSV interchange and the CLI.

Numeric input is never fatal in this package: anything that cannot be read
as a finite number becomes ``0``. Client names are compared through a single
key function so roster merges and prior-day merges agree on identity.
"""

from __future__ import annotations

import math
import re
import uuid
from typing import Any

_LOCAL_AMOUNT_RE = re.compile(r"^[+-]?[\d.]*(,\d*)?$")


def generate_id() -> str:
    """Return a new opaque identifier for transactions and delivery rows."""

    return uuid.uuid4().hex


def to_amount(raw: Any) -> float:
    """Coerce ``raw`` into a finite float, defaulting to ``0.0``.

    Accepts ints/floats and numeric strings (``"1500"``, ``" -20.5 "``).
    Booleans, ``None``, blanks, NaN/inf and unparsable text all map to zero.
    """

    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, int | float):
        value = float(raw)
    else:
        s = str(raw).strip()
        if not s:
            return 0.0
        try:
            value = float(s)
        except ValueError:
            return 0.0
    return value if math.isfinite(value) else 0.0


def to_optional_amount(raw: Any) -> float | None:
    """Like :func:`to_amount` but keeps ``None`` (used for manual overrides)."""

    if raw is None:
        return None
    if isinstance(raw, str) and not raw.strip():
        return None
    return to_amount(raw)


def parse_local_amount(text: str) -> float:
    """Parse an amount typed in ``es-AR`` style (``1.234,50`` → ``1234.5``).

    Dots are thousands separators and the comma is the decimal mark. Input
    that does not look like a local amount falls back to :func:`to_amount`.
    """

    s = (text or "").strip().replace("$", "").replace(" ", "")
    if not s:
        return 0.0
    if "," in s or s.count(".") > 1 or re.fullmatch(r"[+-]?\d{1,3}(\.\d{3})+", s):
        if _LOCAL_AMOUNT_RE.fullmatch(s):
            return to_amount(s.replace(".", "").replace(",", "."))
    return to_amount(s)


def format_amount(value: float) -> str:
    """Render an amount for CSV output without losing precision.

    Integral values drop the fractional part (``1500``); others use the
    shortest round-tripping representation (``12.5``).
    """

    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def normalize_client(name: str | None) -> str:
    """Return the identity key for a client name (trimmed, lower-cased)."""

    return (name or "").strip().lower()


__all__ = [
    "format_amount",
    "generate_id",
    "normalize_client",
    "parse_local_amount",
    "to_amount",
    "to_optional_amount",
]
