"""Network definitions for the chains the wallet service can pay on."""

from __future__ import annotations

from dataclasses import dataclass

from usdc_payroll.errors import ConfigurationError


@dataclass(frozen=True)
class Network:
    """An EVM network as named by the wallet service."""

    name: str
    chain_id: int
    usdc_address: str
    explorer_url: str

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_url}/tx/{tx_hash}"

    def address_url(self, address: str) -> str:
        return f"{self.explorer_url}/address/{address}"


NETWORKS: dict[str, Network] = {
    "base-sepolia": Network(
        name="base-sepolia",
        chain_id=84532,
        usdc_address="0x036CbD53842c5426634e7929541eC2318f3dCF7e",
        explorer_url="https://sepolia.basescan.org",
    ),
    "base": Network(
        name="base",
        chain_id=8453,
        usdc_address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        explorer_url="https://basescan.org",
    ),
}


def get_network(name: str) -> Network:
    """Get a network by name. Raises ``ConfigurationError`` if not found."""
    if name not in NETWORKS:
        raise ConfigurationError(
            f"Unknown network '{name}'. Available: {list_network_names()}"
        )
    return NETWORKS[name]


def list_network_names() -> list[str]:
    """Return the names of all supported networks."""
    return list(NETWORKS.keys())
