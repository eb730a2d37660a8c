"""Exception taxonomy for USDC Payroll.

Fatal errors (:class:`ConfigurationError`, :class:`AccountResolutionError`,
:class:`BatchInProgressError`) abort the whole operation. Per-employee errors
(:class:`EncodingError`, :class:`TransactionSubmissionError`) are captured
into that employee's ``PaymentResult`` and never stop a batch.
:class:`BalanceQueryError` is turned into an "unavailable" balance snapshot
by callers that display balances.
"""

from __future__ import annotations


class PayrollError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(PayrollError):
    """Required configuration (usually credentials) is missing or invalid."""


class AccountResolutionError(PayrollError):
    """The wallet service could not look up or create the signing account."""


class EncodingError(PayrollError, ValueError):
    """A recipient address or amount cannot be encoded as a token transfer."""


class TransactionSubmissionError(PayrollError):
    """The wallet service rejected or failed to submit a transaction."""


class BalanceQueryError(PayrollError):
    """Token balances could not be fetched or had an unexpected shape."""


class BatchInProgressError(PayrollError):
    """A payroll batch is already running on this disburser."""
