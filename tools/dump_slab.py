#!/usr/bin/env python3
"""
Offline slab inspector: decode a saved slab account and print it as JSON.

Reads bytes from a file (raw, or base64 as returned by getAccountInfo with
``encoding=base64``); never touches the network.

Example:
  python3 tools/dump_slab.py slab.bin --section engine
  python3 tools/dump_slab.py slab.b64 --base64 --section positions
"""

from __future__ import annotations

import argparse
import base64
import binascii
import json
import logging
import sys
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from solders.pubkey import Pubkey

from percolator.core.oracle import display_price_e6
from percolator.core.trading_math import liquidation_price, mark_pnl
from percolator.errors import DecodeError
from percolator.state.accounts import iter_accounts
from percolator.state.slab import decode_slab

SECTIONS = ("header", "config", "params", "engine", "accounts", "positions", "all")

logger = logging.getLogger("dump_slab")


def _jsonable(value: Any) -> Any:
    if isinstance(value, Pubkey):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if isinstance(value, Enum):
        return value.name.lower()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _jsonable(getattr(value, f.name)) for f in fields(value)}
    return value


def _read_input(path: Path, is_base64: bool) -> bytes:
    raw = path.read_bytes()
    if not is_base64:
        return raw
    try:
        return base64.b64decode(b"".join(raw.split()), validate=True)
    except binascii.Error as exc:
        raise DecodeError(f"input is not valid base64: {exc}") from exc


def _positions(buf: bytes, snap, *, use_bitmap: bool) -> list[dict]:
    price = display_price_e6(snap.config)
    mm_bps = snap.params.maintenance_margin_bps
    out = []
    for idx, acct in iter_accounts(buf, snap.engine, snap.params, use_bitmap=use_bitmap):
        if acct.position_size == 0:
            continue
        # reserved_entry_price is the trade-open price; entry_price resets every crank.
        trade_entry = acct.reserved_entry_price or acct.entry_price
        out.append(
            {
                "index": idx,
                "owner": str(acct.owner),
                "kind": acct.kind.name.lower(),
                "direction": acct.direction.value if acct.direction else None,
                "position_size": acct.position_size,
                "trade_entry_price_e6": trade_entry,
                "oracle_price_e6": price,
                "mark_pnl": mark_pnl(acct.position_size, trade_entry, price),
                "capital": acct.capital,
                "liquidation_price_e6": liquidation_price(
                    acct.entry_price, acct.capital, acct.position_size, mm_bps
                ),
            }
        )
    return out


def build_report(buf: bytes, section: str, *, use_bitmap: bool = True) -> dict:
    snap = decode_slab(buf)
    report: dict[str, Any] = {}
    if section in ("header", "all"):
        report["header"] = _jsonable(snap.header)
    if section in ("config", "all"):
        report["config"] = _jsonable(snap.config)
    if section in ("params", "all"):
        report["params"] = _jsonable(snap.params)
    if section in ("engine", "all"):
        report["engine"] = _jsonable(snap.engine)
    if section in ("accounts", "all"):
        report["accounts"] = [
            {"index": idx, **_jsonable(acct)}
            for idx, acct in iter_accounts(buf, snap.engine, snap.params, use_bitmap=use_bitmap)
        ]
    if section in ("positions", "all"):
        report["positions"] = _positions(buf, snap, use_bitmap=use_bitmap)
    return report


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Decode a saved Percolator slab and print JSON")
    parser.add_argument("path", type=Path, help="File holding the slab account data")
    parser.add_argument("--base64", action="store_true", help="Input file is base64 text")
    parser.add_argument("--section", choices=SECTIONS, default="all")
    parser.add_argument("--full-scan", action="store_true", help="Ignore the used-slot bitmap")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        buf = _read_input(args.path, args.base64)
        report = build_report(buf, args.section, use_bitmap=not args.full_scan)
    except DecodeError as exc:
        print(f"[dump-slab] state unavailable: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"[dump-slab] cannot read {args.path}: {exc}", file=sys.stderr)
        return 1

    logger.debug("decoded %d bytes from %s", len(buf), args.path)
    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
