"""
Instruction encoding, account roles and derived addresses for the slab program
"""

from .accounts import ACCOUNT_ROLES, AccountRole, account_roles, build_account_metas, build_instruction
from .instructions import (
    CRANK_NO_CALLER,
    OP_LAYOUTS,
    Op,
    OpLayout,
    decode_instruction,
    encode_instruction,
    op_layout,
    resolve_op,
)
from .pda import derive_ata, derive_lp_pda, derive_pyth_price_feed, derive_vault_authority

__all__ = [
    "ACCOUNT_ROLES",
    "AccountRole",
    "account_roles",
    "build_account_metas",
    "build_instruction",
    "CRANK_NO_CALLER",
    "OP_LAYOUTS",
    "Op",
    "OpLayout",
    "decode_instruction",
    "encode_instruction",
    "op_layout",
    "resolve_op",
    "derive_ata",
    "derive_lp_pda",
    "derive_pyth_price_feed",
    "derive_vault_authority",
]
