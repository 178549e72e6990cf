"""Exceptions raised by the prize wheel draw subsystem."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a catalog, rule table or campaign definition is malformed."""


class UnknownRewardCode(ConfigurationError, KeyError):
    """Raised when a reward code cannot be located in the catalog.

    Attributes
    ----------
    code : str
        The reward code that was looked up.
    """

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Reward code {code!r} is not present in the catalog")

    def __str__(self) -> str:
        return self.args[0]


__all__ = ["ConfigurationError", "UnknownRewardCode"]
