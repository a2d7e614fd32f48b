"""
Field value transforms applied to raw CSV strings
"""

from typing import Any, Union

from schemas.descriptor import (
    FieldTransform,
    NumericTransform,
    SeparatorJoinTransform,
    UppercaseTransform,
)

Number = Union[int, float]


def apply_transform(transform: FieldTransform, value: Any) -> Any:
    """
    Apply a field transform to a single value.

    Raises:
        ValueError: If the value cannot be transformed
    """
    if isinstance(transform, NumericTransform):
        return to_number(value, as_float=transform.as_float)
    elif isinstance(transform, UppercaseTransform):
        return to_uppercase(value, remove=transform.remove)
    elif isinstance(transform, SeparatorJoinTransform):
        return join_separated(value, transform.separator, transform.join_separator)
    else:
        raise ValueError(f"Unknown transform: {transform!r}")


def to_number(value: Any, as_float: bool = False) -> Number:
    """
    Parse a number, treating blank cells as zero.

    "1,234" -> 1234, "" -> 0, "12.5" -> 12.5
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, (int, float)):
        return float(value) if as_float else value

    text = str(value).strip().replace(",", "")
    if text == "":
        return 0.0 if as_float else 0

    if as_float or "." in text or "e" in text.lower():
        number = float(text)
        if not as_float and number.is_integer() and "." not in text:
            return int(number)
        return number
    return int(text)


def to_uppercase(value: Any, remove: str = "") -> str:
    """Drop the ``remove`` characters, strip and uppercase. "B.M.W." -> "BMW" """
    text = str(value)
    if remove:
        text = text.translate({ord(ch): None for ch in remove})
    return text.strip().upper()


def join_separated(value: Any, separator: str, join_separator: str = None) -> str:
    """Normalise spacing around a separator. "Saloon / Sports" -> "Saloon/Sports" """
    joiner = separator if join_separator is None else join_separator
    return joiner.join(part.strip() for part in str(value).split(separator))
