#!/usr/bin/env python3
"""
Probe every quote source for one asset.

Queries CoinGecko and then each fallback exchange directly (no aggregation,
no cache) and prints what each one answered or how it failed. Useful when
adding symbols or checking why an asset keeps landing on a fallback.

Usage examples:
  python scripts/probe_sources.py scroll
  python scripts/probe_sources.py taiko --providers okx,bybit --timeout 5
  python scripts/probe_sources.py newcoin --symbols-file symbols.json --skip-primary
"""

import argparse
import asyncio
import sys

from core.errors import MarketDataError
from core.provider_chain import DEFAULT_FALLBACK_ORDER, ProviderChain
from core.symbols import SymbolTable
from exchanges.coingecko import CoinGeckoClient


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Probe the primary source and fallback exchanges for one asset.")
    p.add_argument("asset_id", help="CoinGecko coin id (e.g., scroll, starknet)")
    p.add_argument("--providers", default=",".join(DEFAULT_FALLBACK_ORDER), help="Comma-separated fallback order")
    p.add_argument("--symbols-file", default=None, help="JSON file merged over the default symbol table")
    p.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds")
    p.add_argument("--api-key", default=None, help="CoinGecko demo API key")
    p.add_argument("--skip-primary", action="store_true", help="Only query the fallback exchanges")
    return p.parse_args()


async def probe(args: argparse.Namespace) -> int:
    failures = 0

    if not args.skip_primary:
        async with CoinGeckoClient(api_key=args.api_key, timeout=args.timeout) as primary:
            try:
                quote = await primary.fetch_coin_data(args.asset_id)
                print(
                    f"[OK]   coingecko price={quote.price:.4f} change={quote.change_pct_24h:.2f}% "
                    f"mc={quote.market_cap_usd:.2f} fdv={quote.fdv_usd:.2f} vol={quote.volume_usd_24h:.2f}"
                )
            except MarketDataError as e:
                failures += 1
                print(f"[FAIL] coingecko {e}")

    names = [n.strip() for n in args.providers.split(",") if n.strip()]
    chain = ProviderChain.from_names(names, timeout=args.timeout)
    table = SymbolTable.from_file(args.symbols_file)
    if args.asset_id not in table.asset_ids():
        print(f"[Warn] {args.asset_id} has no exchange symbols; known: {', '.join(table.asset_ids())}")
    symbols = table.get(args.asset_id)

    try:
        for provider in chain:
            symbol = symbols.for_provider(provider.name)
            if not symbol:
                print(f"[SKIP] {provider.name} no symbol configured")
                continue
            try:
                price, change = await provider.get_price_and_change(symbol)
                print(f"[OK]   {provider.name} {symbol} price={price:.4f} change={change:.2f}%")
            except MarketDataError as e:
                failures += 1
                print(f"[FAIL] {provider.name} {symbol} {getattr(e, 'kind', 'error')}: {e}")
    finally:
        await chain.shutdown_all()

    return 1 if failures else 0


def main() -> int:
    args = parse_args()
    try:
        return asyncio.run(probe(args))
    except ValueError as e:
        print(f"[Error] {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
