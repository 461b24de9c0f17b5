"""
Errors raised by the LifeStream SDK.

Every failure the runner can hit is a LifeStreamError, so the CLI needs a
single handler. web3.py errors are wrapped at the contract binding with
`raise ... from err` so the remote detail is kept.
"""

from typing import Optional


class LifeStreamError(RuntimeError):
    """Base class for LifeStream failures."""


class ConfigurationError(LifeStreamError):
    """Contract address, ABI or run parameter missing or unusable."""


class AuthorizationError(LifeStreamError):
    """Wallet refused (or could not provide) an account to sign with."""


class SubmissionError(LifeStreamError):
    """A state-changing call was rejected, reverted or never confirmed."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class QueryError(LifeStreamError):
    """A read-only contract call failed."""


class NotFoundError(LifeStreamError):
    """Expected on-chain data is absent (e.g. the account owns no goals)."""
