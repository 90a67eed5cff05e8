"""Safe extraction helpers shared by the nutrition provider adapters."""

import math
from collections.abc import Mapping, Sequence

from scanmycarbs.domain.nutrition import MacroProfile

_ZERO_TOKENS = {"traces", "trace", "-", "tr"}


def to_float(value: object) -> float | None:
    """Parse a provider value into a finite float, or None when unusable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().lower().lstrip("<>~ ").replace(",", ".")
        if not cleaned:
            return None
        if cleaned in _ZERO_TOKENS:
            return 0.0
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def extract_number(source: Mapping[str, object], keys: Sequence[str]) -> float:
    """Return the first parsable value among ``keys``, clamped to >= 0.

    Unparsable values fall through to the next key; when no key yields a
    number the result is 0.
    """
    for key in keys:
        number = to_float(source.get(key))
        if number is not None:
            return max(number, 0.0)
    return 0.0


def first_text(source: Mapping[str, object], keys: Sequence[str]) -> str | None:
    """Return the first non-blank string or number among ``keys``."""
    for key in keys:
        value = source.get(key)
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, int | float):
            return str(value)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def is_invalid_record(name: str | None, macros: MacroProfile) -> bool:
    """A record without a name and without any macro value is unusable."""
    return not name and all(
        value == 0
        for value in (macros.calories, macros.protein_g, macros.fat_g, macros.carbs_g)
    )
