#!/usr/bin/env python3
"""
Land Registry — Entry Point
===========================

Walks one parcel through the full transfer cycle and prints its record.

Usage:
    python main.py                          # default identities
    LOG_LEVEL=INFO python main.py           # show registry log lines
    LAND_REGISTRY_ADMIN=0x... python main.py
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from land_registry.config import build_registry, load_settings
from land_registry.exceptions import RegistryError
from land_registry.models import LandRecord

load_dotenv()


# ─── Demo Identities ─────────────────────────────────────────────────

SELLER = "0x7f585d7a9751a7388909ed940e29732306a98f0c"
BUYER = "0x1111111111111111111111111111111111111111"
OUTBID = "0x2222222222222222222222222222222222222222"


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72


# ─── Pretty Printer ─────────────────────────────────────────────────


def print_record(record: LandRecord) -> None:
    """Print a land record with its chain of title."""
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  LAND RECORD #{record.id}{_RESET}")
    print(f"{'=' * _WIDTH}")
    print(f"  Plot:        {record.plot_number}")
    print(f"  Location:    {record.area}, {record.district}, {record.city}, {record.state}")
    print(f"  Size:        {record.area_sq_yd:,} sq yd")
    print(f"  Owner:       {_BOLD}{record.owner}{_RESET}")
    print(f"  Status:      {record.status.value}")
    print(f"{'─' * _WIDTH}")
    print(f"  {_BOLD}OWNERSHIP HISTORY ({len(record.ownership_history)}){_RESET}")
    for i, entry in enumerate(record.ownership_history, start=1):
        print(f"    {i}. {entry.owner}  {_DIM}{entry.timestamp.isoformat()}{_RESET}")
    print(f"{'=' * _WIDTH}\n")


def _step(label: str) -> None:
    print(f"  {_GREEN}✓{_RESET} {label}")


# ─── Main ────────────────────────────────────────────────────────────


def main():
    """Register, list, request and approve, then show the result."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("\n  Starting Land Registry demo...\n")
    registry = build_registry(load_settings())

    try:
        land_id = registry.register_land(
            "PLT-001", "Andheri", "Mumbai", "Mumbai", "Maharashtra", 500, caller=SELLER
        )
        _step(f"Registered land #{land_id} to {SELLER}")

        registry.put_land_for_sale(land_id, caller=SELLER)
        _step("Listed for sale")

        registry.request_transfer(land_id, caller=OUTBID)
        registry.request_transfer(land_id, caller=BUYER)
        _step(f"Transfer requested by {BUYER} (replacing {OUTBID})")

        registry.approve_transfer(land_id, caller=SELLER)
        _step("Transfer approved")

        registry.verify_integrity()
    except RegistryError as exc:
        print(f"\n  {_RED}{_BOLD}[{exc.code}]{_RESET} {exc}")
        sys.exit(1)

    print_record(registry.get_land(land_id))
    sys.exit(0)


if __name__ == "__main__":
    main()
