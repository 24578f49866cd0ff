"""Exceptions raised by the SteamCircle engine and its front end."""
from typing import Optional


class SteamCircleError(Exception):
    """Base class for every error the engine raises on purpose."""


class AccountNotFoundError(SteamCircleError):
    """The human-entered identifier could not be resolved to an account."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Steam account not found: {identifier}")
        self.identifier = identifier


class PrivateProfileError(SteamCircleError):
    """The account's own game library is not visible.

    Raised only for the primary account of a request; for friends the same
    condition is handled as data.
    """

    def __init__(self, account_id: str) -> None:
        super().__init__(f"Steam profile {account_id} is private or its game details are hidden")
        self.account_id = account_id


class CatalogError(SteamCircleError):
    """Unexpected upstream failure that cannot be recovered locally."""

    def __init__(self, message: str, reason: Optional[str] = None) -> None:
        super().__init__(message)
        self.reason = reason


class ConfigError(SteamCircleError):
    """Configuration file or environment is missing or invalid."""
