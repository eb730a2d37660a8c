"""Configuration system for USDC Payroll.

Loads payroll config from ``.usdc-payroll/config.yaml``, supports environment
variable expansion, and falls back to defaults plus the standard CDP
environment variables when no config file exists.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from usdc_payroll.errors import ConfigurationError
from usdc_payroll.wallet.networks import Network, get_network


# ---------------------------------------------------------------------------
# Environment-variable expansion helper
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with their environment values.

    If the variable is not set the placeholder is left as-is so that
    validation can catch it later.
    """

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_env_recursive(obj: object) -> object:
    """Walk an arbitrary nested structure and expand env vars in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _expand_env_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_recursive(item) for item in obj]
    return obj


def _is_unset(value: str) -> bool:
    """True for empty values and placeholders whose variable was not set."""
    return not value.strip() or bool(_ENV_VAR_RE.fullmatch(value.strip()))


# ---------------------------------------------------------------------------
# Pydantic v2 models
# ---------------------------------------------------------------------------

_CREDENTIAL_PLACEHOLDERS = {
    "api_key_id": "${CDP_API_KEY_ID}",
    "api_key_secret": "${CDP_API_KEY_SECRET}",
    "wallet_secret": "${CDP_WALLET_SECRET}",
}


class CdpCredentials(BaseModel):
    """Coinbase Developer Platform API credentials."""

    api_key_id: str = ""        # ${CDP_API_KEY_ID}
    api_key_secret: str = ""    # ${CDP_API_KEY_SECRET}
    wallet_secret: str = ""     # ${CDP_WALLET_SECRET}, needed to sign

    def missing(self, *, signing: bool = False) -> list[str]:
        """Names of the credential fields that are not set."""
        required = ["api_key_id", "api_key_secret"]
        if signing:
            required.append("wallet_secret")
        return [name for name in required if _is_unset(getattr(self, name))]

    def require(self, *, signing: bool = False) -> None:
        """Raise ``ConfigurationError`` unless every needed credential is set."""
        missing = self.missing(signing=signing)
        if missing:
            env_names = ", ".join(
                _CREDENTIAL_PLACEHOLDERS[name][2:-1] for name in missing
            )
            raise ConfigurationError(
                f"CDP API credentials not found: {', '.join(missing)}. "
                f"Set {env_names} or add them to config.yaml."
            )


class TokenConfig(BaseModel):
    """The stablecoin being paid out."""

    symbol: str = "USDC"
    decimals: int = Field(default=6, ge=0)
    contract_address: Optional[str] = None  # None = the network's USDC contract


class PayrollConfig(BaseModel):
    """Root configuration object for a payroll deployment."""

    name: str = "Payroll"
    network: str = "base-sepolia"
    account_name: str = "my-trading-account"
    expected_address: Optional[str] = None  # mismatch is logged, never enforced
    pacing_seconds: float = Field(default=2.0, ge=0)
    roster_path: str = "employees.json"
    token: TokenConfig = Field(default_factory=TokenConfig)
    cdp: CdpCredentials = Field(default_factory=CdpCredentials)

    def get_network(self) -> Network:
        return get_network(self.network)

    def token_contract(self) -> str:
        """The token contract address transfers are sent to."""
        return self.token.contract_address or self.get_network().usdc_address


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def get_root_dir(base: Path | None = None) -> Path:
    """Return the ``.usdc-payroll/`` directory (no auto-create).

    Parameters
    ----------
    base:
        Parent directory that contains (or will contain) the root folder.
        Defaults to the current working directory.
    """
    if base is None:
        base = Path.cwd()
    return base / ".usdc-payroll"


def get_config_path(base: Path | None = None) -> Path:
    return get_root_dir(base) / "config.yaml"


def build_config(raw_data: dict | None = None) -> PayrollConfig:
    """Validate raw config data, filling CDP credentials from the environment.

    Credential fields left out of *raw_data* default to their ``${CDP_*}``
    placeholders, so a deployment can run with no config file at all.
    """
    data = dict(raw_data or {})
    cdp = dict(data.get("cdp") or {})
    for key, placeholder in _CREDENTIAL_PLACEHOLDERS.items():
        cdp.setdefault(key, placeholder)
    data["cdp"] = cdp
    expanded = _expand_env_recursive(data)
    try:
        return PayrollConfig.model_validate(expanded)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid payroll configuration: {exc}") from exc


def load_config(path: Path | None = None) -> PayrollConfig:
    """Load and validate payroll configuration from a YAML file.

    Environment variable placeholders (``${VAR}``) are expanded before
    validation. A missing file yields the defaults.
    """
    if path is None or not path.exists():
        return build_config()
    raw_text = path.read_text(encoding="utf-8")
    try:
        raw_data = yaml.safe_load(raw_text) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(raw_data, dict):
        raise ConfigurationError(f"{path} must contain a YAML mapping.")
    return build_config(raw_data)


def save_config(config: PayrollConfig, path: Path) -> None:
    """Serialize a :class:`PayrollConfig` to a YAML file.

    Credentials are written as ``${CDP_*}`` placeholders, never as secrets.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="python", exclude_none=True)
    data["cdp"] = dict(_CREDENTIAL_PLACEHOLDERS)
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)
