"""
Application-level exceptions.

Startup errors (ConfigError, StartupError) abort process startup. Validation
errors fail the current job. Ledger errors fail the current operation; only
LedgerTransportError with a server status is retried by the ledger client.
"""

from __future__ import annotations


class RewardsGoblinError(Exception):
    """Base class for all Rewards Goblin errors."""


class ConfigError(RewardsGoblinError):
    """Required configuration missing or malformed."""


class StartupError(RewardsGoblinError):
    """Service bootstrap failed (credential, ACL or achievement catalog)."""


class WalletValidationError(RewardsGoblinError):
    """Wallet address did not match any supported chain format."""


class UnknownEventTypeError(RewardsGoblinError):
    """Reward event type has no routing entry."""


class LedgerError(RewardsGoblinError):
    """Failure talking to, or reading from, the ledger process."""


class LedgerTransportError(LedgerError):
    """
    HTTP or network failure on a compute/messenger unit round trip.

    status_code is None for network-level failures (connect, read timeout).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_server_error(self) -> bool:
        """True when the remote endpoint signalled an internal failure (5xx)."""
        return self.status_code is not None and self.status_code >= 500


class LedgerStateParseError(LedgerError):
    """Ledger state payload missing or malformed."""

