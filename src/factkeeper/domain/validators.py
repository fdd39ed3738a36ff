"""Field-name validation for the closed set of collectible facts. No I/O."""

from __future__ import annotations

from factkeeper.domain.state import FieldName

KNOWN_FIELDS: tuple[str, ...] = tuple(f.value for f in FieldName)


class UnknownFieldError(ValueError):
    """A field name outside Name, Age, Bio, Children."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown field: {name!r} (expected one of {', '.join(KNOWN_FIELDS)})")
        self.name = name


def parse_field_name(value: str) -> FieldName | None:
    """Return the FieldName for an exact button label, or None."""
    try:
        return FieldName(value)
    except ValueError:
        return None


def validate_field_name(value: str | FieldName) -> FieldName:
    """Return the FieldName or raise UnknownFieldError."""
    if isinstance(value, FieldName):
        return value
    field = parse_field_name(value)
    if field is None:
        raise UnknownFieldError(value)
    return field
