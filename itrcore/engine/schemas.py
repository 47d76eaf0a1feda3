"""
schemas.py — TaxEngine result contracts (pydantic v2).

Defines:
  - Regime               ("old" | "new")
  - TaxCalculationResult (full computation for one regime)
  - RegimeComparison     (both regimes + the cheaper one)

These are pure projections of the input records: nothing here is edited by hand.
Relief and taxes-paid figures live on records.schemas.TaxSummary instead.
"""
from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict


class Regime(str, Enum):
    old = "old"
    new = "new"


class TaxCalculationResult(BaseModel):
    """
    Complete computation for a single regime.

    Computation sequence:
      1. total_income        = enabled income sub-records only
      2. total_deductions    = capped Chapter VI-A total (always 0 in the new regime)
      3. taxable_income      = max(0, total_income - total_deductions)
      4. tax_before_relief   = marginal slab tax
      5. surcharge           = flat band rate × tax_before_relief
      6. education_cess      = 4% of (tax_before_relief + surcharge)
      7. total_tax_liability = tax_before_relief + surcharge + education_cess
    """
    model_config = ConfigDict(extra="forbid")

    total_income: float
    total_deductions: float
    taxable_income: float
    tax_before_relief: float
    surcharge: float
    education_cess: float
    total_tax_liability: float


class RegimeComparison(BaseModel):
    """Output of compare_regimes(). Ties go to the old regime."""
    model_config = ConfigDict(extra="forbid")

    old: TaxCalculationResult
    new: TaxCalculationResult
    better: Literal["old", "new"]

    @property
    def savings(self) -> float:
        """Liability difference between the two regimes (never negative)."""
        return abs(self.old.total_tax_liability - self.new.total_tax_liability)

    def for_regime(self, regime: Regime | str) -> TaxCalculationResult:
        return self.old if Regime(regime) is Regime.old else self.new


__all__ = [
    "Regime",
    "TaxCalculationResult",
    "RegimeComparison",
]
