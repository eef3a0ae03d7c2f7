"""
Client configuration loaded from the environment.

Environment variables:
- PERCOLATOR_RPC_URL          (default: Solana mainnet-beta public endpoint)
- PERCOLATOR_PROGRAM_ID       (no default)
- PERCOLATOR_SLAB_ADDRESS     (no default)
- PERCOLATOR_COLLATERAL_MINT  (default: the PERC mint)

Empty or whitespace-only values mean "use the default".
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from solders.pubkey import Pubkey

from ..errors import ConfigError

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_COLLATERAL_MINT = "A16Gd8AfaPnG6rohE6iPFDf6mr9gk519d6aMUJAperc"

ENV_RPC_URL = "PERCOLATOR_RPC_URL"
ENV_PROGRAM_ID = "PERCOLATOR_PROGRAM_ID"
ENV_SLAB_ADDRESS = "PERCOLATOR_SLAB_ADDRESS"
ENV_COLLATERAL_MINT = "PERCOLATOR_COLLATERAL_MINT"


@dataclass(frozen=True)
class ClientConfig:
    rpc_url: str = DEFAULT_RPC_URL
    program_id: Optional[Pubkey] = None
    slab_address: Optional[Pubkey] = None
    collateral_mint: Pubkey = Pubkey.from_string(DEFAULT_COLLATERAL_MINT)

    def require_program_id(self) -> Pubkey:
        if self.program_id is None:
            raise ConfigError(f"{ENV_PROGRAM_ID} is not set")
        return self.program_id

    def require_slab_address(self) -> Pubkey:
        if self.slab_address is None:
            raise ConfigError(f"{ENV_SLAB_ADDRESS} is not set")
        return self.slab_address


def _env_str(environ: Mapping[str, str], name: str, default: str) -> str:
    raw = environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _env_pubkey(environ: Mapping[str, str], name: str, default: str) -> Optional[Pubkey]:
    text = _env_str(environ, name, default)
    if not text:
        return None
    try:
        return Pubkey.from_string(text)
    except ValueError as exc:
        raise ConfigError(f"{name} is not a valid base58 address: {text!r}") from exc


def load_config(environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
    """Build a ``ClientConfig`` from *environ* (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    return ClientConfig(
        rpc_url=_env_str(env, ENV_RPC_URL, DEFAULT_RPC_URL),
        program_id=_env_pubkey(env, ENV_PROGRAM_ID, ""),
        slab_address=_env_pubkey(env, ENV_SLAB_ADDRESS, ""),
        collateral_mint=_env_pubkey(env, ENV_COLLATERAL_MINT, DEFAULT_COLLATERAL_MINT),
    )
