"""Custodial wallet service layer.

The payroll core talks to the wallet service only through
:class:`BaseWalletService`; :class:`usdc_payroll.wallet.cdp.CdpWalletService`
is the Coinbase Developer Platform implementation.
"""

from usdc_payroll.wallet.base import BaseWalletService
from usdc_payroll.wallet.networks import NETWORKS, Network, get_network, list_network_names

__all__ = [
    "BaseWalletService",
    "NETWORKS",
    "Network",
    "get_network",
    "list_network_names",
]
