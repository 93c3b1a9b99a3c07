"""
Configuration loading.

Settings come from environment variables, optionally seeded from a
``.env`` file.  Variables already present in the environment win over
the file.

Variables:
  ALCHEMY_API_KEY        - key for the Alchemy mainnet endpoint
  TENDERLY_RPC_URL       - forked network used by the signing lessons
  RPC_URL                - overrides both endpoints
  PRIVATE_KEY            - skips the interactive key prompt when set
  LEARNETHER_TX_TIMEOUT  - seconds to wait for a receipt (default: 120)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError

ALCHEMY_MAINNET_URL = "https://eth-mainnet.g.alchemy.com/v2/{api_key}"
DEFAULT_TX_TIMEOUT = 120.0

PLACEHOLDER_PREFIXES = ("YOUR", "REPLACE")


def load_environment(env_path: Optional[Path] = None) -> Optional[Path]:
    """
    Load a ``.env`` file into ``os.environ`` without overriding existing values.

    Args:
        env_path: Explicit file to load.  Defaults to the nearest ``.env``
            found from the current directory upwards.

    Returns:
        The file that was loaded, or None if there was none.
    """
    if env_path is None:
        found = find_dotenv(usecwd=True)
        if not found:
            return None
        env_path = Path(found)

    if not env_path.exists():
        return None

    load_dotenv(env_path, override=False)
    return env_path


def is_placeholder(value: str) -> bool:
    """
    True for template values such as ``YOUR_API_KEY``, ``<key>`` or
    ``https://host/YOUR_ACCESS_KEY``.  Real values that merely contain
    "your" (``https://rpc.yourchain.io``) are kept.
    """
    if value.startswith("<") and value.endswith(">"):
        return True
    last_segment = value.rstrip("/").rsplit("/", 1)[-1]
    return any(part.upper().startswith(PLACEHOLDER_PREFIXES) for part in (value, last_segment))


def get_env(name: str) -> Optional[str]:
    """Return a variable's value, treating blanks and placeholders as unset."""
    value = os.environ.get(name, "").strip()
    if not value or is_placeholder(value):
        return None
    return value


def require_env(name: str) -> str:
    value = get_env(name)
    if value is None:
        raise ConfigError(f"{name} is not set. Add it to your environment or .env file.")
    return value


def validate_rpc_url(url: str) -> str:
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"RPC URL must start with http:// or https://, got {url!r}")
    return url


def mainnet_rpc_url() -> str:
    """Endpoint for the read-only lessons: RPC_URL, else Alchemy mainnet."""
    override = get_env("RPC_URL")
    if override:
        return validate_rpc_url(override)
    api_key = require_env("ALCHEMY_API_KEY")
    return ALCHEMY_MAINNET_URL.format(api_key=api_key)


def fork_rpc_url() -> str:
    """Endpoint for the signing lessons: RPC_URL, else TENDERLY_RPC_URL."""
    override = get_env("RPC_URL")
    if override:
        return validate_rpc_url(override)
    return validate_rpc_url(require_env("TENDERLY_RPC_URL"))


def tx_timeout() -> float:
    raw = get_env("LEARNETHER_TX_TIMEOUT")
    if raw is None:
        return DEFAULT_TX_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigError(f"LEARNETHER_TX_TIMEOUT must be a number, got {raw!r}") from None
    if timeout <= 0:
        raise ConfigError(f"LEARNETHER_TX_TIMEOUT must be positive, got {raw!r}")
    return timeout


def describe_environment() -> dict[str, Optional[str]]:
    """Masked view of the recognised variables, for ``learnether info``."""
    names = ("ALCHEMY_API_KEY", "TENDERLY_RPC_URL", "RPC_URL", "PRIVATE_KEY", "LEARNETHER_TX_TIMEOUT")
    view: dict[str, Optional[str]] = {}
    for name in names:
        value = get_env(name)
        if value is None:
            view[name] = None
        elif name == "PRIVATE_KEY":
            view[name] = "set"
        elif name == "ALCHEMY_API_KEY":
            view[name] = value[:4] + "…" if len(value) > 8 else "…"
        elif name.endswith("_URL"):
            # Hosted endpoints embed access keys in the path
            parts = urlsplit(value)
            view[name] = f"{parts.scheme}://{parts.netloc}/…"
        else:
            view[name] = value
    return view
