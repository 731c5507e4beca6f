"""Exception types shared across the Monte Carlo core."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """
    Malformed or incomplete configuration record.

    Raised while parsing potentials, bonds, catalogs or moves. The offending
    key is kept so callers can point the user at the right place in the input.

    Attributes:
        key: Name of the offending key (may be a dotted path).
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        if key is not None:
            message = f"{message} (key: '{key}')"
        super().__init__(message)


class InvariantViolation(AssertionError):
    """
    A structural invariant of the simulation state does not hold.

    This always indicates a programming error in the caller (for example an
    out-of-range group index or two spaces sharing particle storage) and is
    never recovered from.
    """


def require(record: dict, key: str, kind: type = float, context: str = ""):
    """
    Fetch a required field from a configuration record.

    Args:
        record: Configuration mapping.
        key: Required key.
        kind: Type the value is converted to.
        context: Prefix used in the error key, e.g. ``"harmonic"``.

    Returns:
        The converted value.

    Raises:
        ConfigurationError: If the key is missing or cannot be converted.
    """
    path = f"{context}.{key}" if context else key
    if not isinstance(record, dict) or key not in record:
        raise ConfigurationError("missing required field", key=path)
    try:
        return kind(record[key])
    except (TypeError, ValueError) as err:
        raise ConfigurationError(
            f"cannot convert {record[key]!r} to {kind.__name__}", key=path
        ) from err


def optional(record: dict, key: str, default, kind: type = float, context: str = ""):
    """
    Fetch an optional field, falling back to `default` when absent.

    Raises:
        ConfigurationError: If the key is present but cannot be converted.
    """
    if isinstance(record, dict) and key in record:
        return require(record, key, kind, context)
    return default
