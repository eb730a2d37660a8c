"""USDC Payroll - pay an employee roster in USDC through a custodial wallet.

Resolves a CDP-managed signing account, encodes ERC-20 ``transfer`` calls,
submits them one at a time against the rate-limited wallet API, and reports
a per-employee result for every payment.
"""

__version__ = "0.1.0"
