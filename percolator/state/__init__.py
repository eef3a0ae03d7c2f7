"""Slab layout, decoder and account table reader.

Public API:
- `decode_slab(buf) -> SlabSnapshot`
- `decode_header / decode_config / decode_risk_params / decode_engine`
- `iter_accounts(buf, engine, params=None, *, use_bitmap=True)`
- `scan_accounts(buf, params=None)` (full-scan fallback)
- `decode_account(buf, index, params=None)`
"""

from .accounts import (
    decode_account,
    find_accounts_by_owner,
    find_lp,
    iter_accounts,
    scan_accounts,
    table_capacity,
)
from .slab import (
    bitmap_words,
    decode_config,
    decode_engine,
    decode_header,
    decode_risk_params,
    decode_slab,
    is_used_bitmap,
    used_indices,
    validate_slab,
)
from .types import (
    Account,
    AccountKind,
    Direction,
    EngineState,
    Header,
    MarketConfig,
    RiskParams,
    SlabSnapshot,
)

__all__ = [
    "decode_slab",
    "decode_header",
    "decode_config",
    "decode_risk_params",
    "decode_engine",
    "validate_slab",
    "bitmap_words",
    "is_used_bitmap",
    "used_indices",
    "decode_account",
    "iter_accounts",
    "scan_accounts",
    "table_capacity",
    "find_accounts_by_owner",
    "find_lp",
    "Account",
    "AccountKind",
    "Direction",
    "EngineState",
    "Header",
    "MarketConfig",
    "RiskParams",
    "SlabSnapshot",
]
