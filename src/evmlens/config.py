"""Configuration defaults, overridable through the environment."""

import os
from typing import Optional

DEFAULT_RPC_URLS = {
    "mainnet": "https://ethereum.publicnode.com",
    "sepolia": "https://ethereum-sepolia.publicnode.com",
    "holesky": "https://ethereum-holesky.publicnode.com",
    "local": "http://localhost:8545",
}
DEFAULT_NETWORK = "mainnet"
DEFAULT_RPC_TIMEOUT = 30
DEFAULT_LOG_LEVEL = "WARNING"

RPC_URL_ENV = "EVMLENS_RPC_URL"
LOG_LEVEL_ENV = "EVMLENS_LOG_LEVEL"
NO_COLOR_ENV = "NO_COLOR"


def resolve_rpc_url(rpc_url: Optional[str] = None, network: Optional[str] = None) -> str:
    """
    Pick the RPC endpoint: explicit URL, then $EVMLENS_RPC_URL, then the
    network's public default.
    """
    if rpc_url:
        return rpc_url
    env_url = os.environ.get(RPC_URL_ENV)
    if env_url:
        return env_url
    network = network or DEFAULT_NETWORK
    if network not in DEFAULT_RPC_URLS:
        raise ValueError(
            f"Unsupported network: {network}. Supported networks: {', '.join(DEFAULT_RPC_URLS)}"
        )
    return DEFAULT_RPC_URLS[network]


def default_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)


def color_disabled_by_env() -> bool:
    # https://no-color.org: any non-empty value disables color
    return bool(os.environ.get(NO_COLOR_ENV))
