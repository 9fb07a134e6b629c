"""
Domain Models Package
Export all domain entities
"""

from .portfolio import (
    PortfolioTotals,
    Position,
    SectorSummary,
    ValuationRecord,
)

__all__ = [
    "PortfolioTotals",
    "Position",
    "SectorSummary",
    "ValuationRecord",
]
