#!/usr/bin/env python
"""
Resolve one barcode from the command line and print the trace and rules.

Usage:
    python scripts/debug_resolution.py 7501000000010
    python scripts/debug_resolution.py 7501000000010 --snapshot data/sample_snapshot.json
"""
import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from pricelist_resolver.backend import open_backend
from pricelist_resolver.config import configure_logging, get_settings
from pricelist_resolver.engine import ProductResolver, build_filter
from pricelist_resolver.errors import BackendError


async def debug(barcode: str, settings):
    async with open_backend(settings) as backend:
        print(f"Backend: {backend.describe()}")
        resolver = ProductResolver(backend)
        result = await resolver.resolve(barcode)

    if result is None:
        print(f"\nNo product found for barcode {barcode}")
        return 1

    print(f"\n--- {result.product_name} (list price {result.list_price}) ---")
    print(result.get_trace_text())

    if result.active_pricelist_ids:
        print("\nScope filter:")
        print(build_filter(result.active_pricelist_ids, result.variant_id, result.template_id, result.category_id))

    print("\nRules by scope:")
    print(json.dumps(result.buckets.to_dict(), indent=2))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Resolve the price-list rules for a barcode")
    parser.add_argument("barcode")
    parser.add_argument("--snapshot", type=Path, help="Use a JSON snapshot instead of the configured backend")
    args = parser.parse_args()

    settings = get_settings()
    if args.snapshot:
        settings = replace(settings, backend='snapshot', snapshot_path=args.snapshot)
    configure_logging(settings.log_level)

    try:
        code = asyncio.run(debug(args.barcode, settings))
    except BackendError as e:
        print(f"\nBackend error: {e}")
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
