from __future__ import annotations

import typing


class SpearmintError(Exception):
    pass


class ConfigurationError(SpearmintError, ValueError):
    """Invalid factory configuration, detected before or instead of generating a value."""


class UnresolvableCycleError(SpearmintError, RuntimeError):
    pass


class UnresolvableTypeError(SpearmintError, TypeError):
    pass


class PathStateError(SpearmintError, RuntimeError):
    """Generation path entered and exited out of order."""


class ConstructionError(SpearmintError, RuntimeError):
    def __init__(self, message: str, *, target: object = None, field: str | None = None) -> None:
        super().__init__(message)
        self.target = target
        self.field = field

    @classmethod
    def for_field(cls, target: object, field: str) -> typing.Self:
        return cls(f'Failed to set field "{field}" on {target}.', target=target, field=field)
