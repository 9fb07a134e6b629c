"""
CONFIG ENGINE (ENGINE-0)
Load, validate, and expose the static position list

RESPONSIBILITIES:
- Load YAML configuration files
- Validate configuration integrity
- Expose read-only typed objects

RULES:
❌ No defaults for required position fields
❌ No hardcoded positions
✅ Fail fast on invalid config
✅ Deterministic output (file order is portfolio order)
"""

import yaml
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Tuple
from dataclasses import dataclass

from app.domain.models import Position


REQUIRED_FIELDS = ("id", "name", "ticker", "sector", "quantity", "buy_price")


@dataclass(frozen=True)
class PortfolioUniverse:
    """Collection of all configured positions"""
    positions: Tuple[Position, ...]

    @property
    def tickers(self) -> List[str]:
        """Distinct tickers in portfolio order"""
        return list(dict.fromkeys(p.ticker for p in self.positions))

    def get_position(self, position_id: int) -> Position:
        """Get position by id"""
        for position in self.positions:
            if position.id == position_id:
                return position
        raise ValueError(f"Position not found: {position_id}")


class ConfigEngine:
    """
    Configuration Engine
    Single source of truth for the position list
    """

    def __init__(self, config_dir: Path, positions_file: str = "positions.yml"):
        """Initialize with config directory"""
        self.config_dir = config_dir
        self.positions_file = positions_file
        self._universe: PortfolioUniverse = None

    def load_all(self) -> None:
        """Load all configuration files"""
        self._load_positions()
        self._validate_all()

    def _load_positions(self) -> None:
        """Load positions from positions.yml"""
        positions_path = self.config_dir / self.positions_file
        if not positions_path.exists():
            raise FileNotFoundError(f"Positions config not found: {positions_path}")

        with open(positions_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        entries = data.get('positions')
        if not isinstance(entries, list) or not entries:
            raise ValueError(f"No positions defined in {positions_path}")

        self._universe = PortfolioUniverse(
            positions=tuple(self._parse_position(entry) for entry in entries)
        )

    @staticmethod
    def _parse_position(entry: Dict[str, Any]) -> Position:
        missing = [field for field in REQUIRED_FIELDS if entry.get(field) in (None, "")]
        if missing:
            raise ValueError(f"Position entry missing fields {missing}: {entry}")

        try:
            buy_price = Decimal(str(entry['buy_price']))
        except InvalidOperation:
            raise ValueError(f"Invalid buy_price for position {entry['id']}: {entry['buy_price']!r}")
        if not buy_price.is_finite():
            raise ValueError(f"Invalid buy_price for position {entry['id']}: {entry['buy_price']!r}")

        quantity = entry['quantity']
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError(f"Quantity must be a whole number for position {entry['id']}: {quantity!r}")

        return Position(
            id=int(entry['id']),
            name=str(entry['name']),
            ticker=str(entry['ticker']).strip().upper(),
            sector=str(entry['sector']),
            quantity=quantity,
            buy_price=buy_price,
        )

    def _validate_all(self) -> None:
        """Validate all configurations"""
        ids = [p.id for p in self._universe.positions]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate position ids found in configuration")

    # Public getters

    @property
    def universe(self) -> PortfolioUniverse:
        """Get portfolio universe"""
        if self._universe is None:
            raise RuntimeError("Config not loaded. Call load_all() first")
        return self._universe

    @property
    def positions(self) -> Tuple[Position, ...]:
        return self.universe.positions
