"""
Exchange Symbol Table

Maps each asset id to its trading-pair symbols on the fallback exchanges.
The table is an injected object owned by whoever builds the aggregator;
updates replace the whole mapping in one assignment, so a reader always sees
either the old table or the new one.

Custom symbols can be supplied as JSON and are merged over the defaults:

    {
      "scroll": {"binance": "SCRUSDT", "okx": "SCR-USDT", "bybit": "SCRUSDT", "bitget": "SCRUSDT"},
      "newcoin": {"okx": "NEW-USDT"}
    }
"""

import json
from pathlib import Path
from typing import Dict, Mapping, Optional

from pydantic import ValidationError

from core.logging import get_logger
from core.schemas import ExchangeSymbolSet


logger = get_logger(__name__)


DEFAULT_SYMBOLS: Dict[str, ExchangeSymbolSet] = {
    "starknet": ExchangeSymbolSet(binance="STRKUSDT", okx="STRK-USDT", bybit="STRKUSDT", bitget="STRKUSDT"),
    "zksync": ExchangeSymbolSet(binance="ZKUSDT", okx="ZK-USDT", bybit="ZKUSDT", bitget="ZKUSDT"),
    "taiko": ExchangeSymbolSet(binance="TAIKOUSDT", okx="TAIKO-USDT", bybit="TAIKOUSDT", bitget="TAIKOUSDT"),
    "scroll": ExchangeSymbolSet(binance="SCRUSDT", okx="SCR-USDT", bybit="SCRUSDT", bitget="SCRUSDT"),
    "movement": ExchangeSymbolSet(binance="MOVEUSDT", okx="MOVE-USDT", bybit="MOVEUSDT", bitget="MOVEUSDT"),
    "polyhedra-network": ExchangeSymbolSet(binance="ZKJUSDT", okx="ZKJ-USDT", bybit="ZKJUSDT", bitget="ZKJUSDT"),
    "linea": ExchangeSymbolSet(binance="LINEAUSDT", okx="LINEA-USDT", bybit="LINEAUSDT", bitget="LINEAUSDT"),
}

_EMPTY = ExchangeSymbolSet()


class SymbolTable:
    """
    Read-mostly store of asset id -> ExchangeSymbolSet.

    Example:
        >>> table = SymbolTable()
        >>> table.get("scroll").for_provider("okx")
        'SCR-USDT'
        >>> table.get("unknown").for_provider("okx")
        ''
    """

    def __init__(self, symbols: Optional[Mapping[str, ExchangeSymbolSet]] = None):
        self._symbols: Dict[str, ExchangeSymbolSet] = dict(DEFAULT_SYMBOLS if symbols is None else symbols)

    @classmethod
    def from_file(cls, path: Optional[str]) -> "SymbolTable":
        """Defaults merged with the JSON file at `path` (if any)."""
        table = cls()
        if path:
            table.load_json(path)
        else:
            logger.info("No custom symbols file specified, using defaults")
        return table

    def get(self, asset_id: str) -> ExchangeSymbolSet:
        """Symbols for an asset; an empty set when the asset is unknown."""
        return self._symbols.get(asset_id, _EMPTY)

    def asset_ids(self):
        return sorted(self._symbols)

    def replace(self, symbols: Mapping[str, ExchangeSymbolSet]) -> None:
        """Swap in a complete new table."""
        self._symbols = dict(symbols)

    def load_json(self, path: str) -> None:
        """
        Merge symbols from a JSON file over the current table.

        A missing file is not an error (defaults stay in place).

        Raises:
            ValueError: If the file is not a JSON object of symbol sets
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.warning(f"Symbols file {path} not found, using defaults")
            return

        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Symbols file {path} is not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise ValueError(f"Symbols file {path} must contain a JSON object")

        merged = dict(self._symbols)
        try:
            for asset_id, entry in raw.items():
                merged[asset_id] = ExchangeSymbolSet.model_validate(entry)
        except ValidationError as e:
            raise ValueError(f"Symbols file {path} has an invalid entry: {e}") from e

        self.replace(merged)
        logger.info(f"Loaded {len(raw)} custom symbol set(s) from {path}")

    def __len__(self) -> int:
        return len(self._symbols)
