"""
summary.py — Tax summary step.

Reads the income and deduction sections, compares regimes, layers
relief under Section 89 and taxes already paid on top of the chosen regime's
figures, and writes the resulting taxSummary section back into the store.

Sign convention: refund_or_payable = taxes paid - tax after relief.
  > 0 → refund due
  < 0 → tax payable
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from itrcore.engine.schemas import Regime, RegimeComparison
from itrcore.engine.tax_engine import compare_regimes
from itrcore.records.schemas import (
    Deductions,
    IncomeDetails,
    Section,
    TaxSummary,
    Verification,
)
from itrcore.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


def total_tds(income: IncomeDetails) -> float:
    """TDS withheld across all employers; 0 when salary income is switched off."""
    salary = income.salary_income
    if not salary.has_income:
        return 0.0
    return sum(employer.tds_deducted or 0.0 for employer in salary.employers)


def build_tax_summary(
    income: IncomeDetails,
    deductions: Deductions,
    regime: Optional[Regime | str] = None,
    relief_under_89: float = 0.0,
    advance_tax_paid: float = 0.0,
    self_assessment_tax: float = 0.0,
    verification: Optional[Verification] = None,
    comparison: Optional[RegimeComparison] = None,
) -> TaxSummary:
    """
    Compose the taxSummary section.

    regime=None selects whichever regime compare_regimes() found cheaper.
    A precomputed comparison may be passed in to avoid recomputing it.
    """
    comparison = comparison or compare_regimes(income, deductions)
    chosen = Regime(regime) if regime is not None else Regime(comparison.better)
    calc = comparison.for_regime(chosen)

    tds = total_tds(income)
    tax_after_relief = calc.total_tax_liability - relief_under_89
    total_paid = tds + advance_tax_paid + self_assessment_tax

    return TaxSummary(
        regime=chosen.value,
        total_income=calc.total_income,
        total_deductions=calc.total_deductions,
        taxable_income=calc.taxable_income,
        tax_before_relief=calc.tax_before_relief,
        relief_under_89=relief_under_89,
        tax_after_relief=round(tax_after_relief, 2),
        surcharge=calc.surcharge,
        education_cess=calc.education_cess,
        total_tax_liability=calc.total_tax_liability,
        advance_tax_paid=advance_tax_paid,
        tds_deducted=round(tds, 2),
        self_assessment_tax=self_assessment_tax,
        refund_or_payable=round(total_paid - tax_after_relief, 2),
        verification=verification,
    )


def refresh_tax_summary(
    store: RecordStore,
    regime: Optional[Regime | str] = None,
    **overrides: Any,
) -> Optional[TaxSummary]:
    """
    Recompute the taxSummary section from the stored income + deductions and
    save it back.

    Returns None (and writes nothing) until both incomeDetails and deductions
    are present. Relief, advance tax, self-assessment tax and verification
    already stored in taxSummary are kept unless passed in `overrides`.
    Raises pydantic.ValidationError if a stored section does not validate.
    """
    snapshot = store.load()
    raw_income = snapshot.get(Section.income_details.value)
    raw_deductions = snapshot.get(Section.deductions.value)
    if raw_income is None or raw_deductions is None:
        logger.info("Tax summary skipped — income or deductions section missing")
        return None

    income = IncomeDetails.model_validate(raw_income)
    deductions = Deductions.model_validate(raw_deductions)

    previous = TaxSummary.model_validate(snapshot.get(Section.tax_summary.value) or {})
    kwargs: dict[str, Any] = {
        "relief_under_89": previous.relief_under_89,
        "advance_tax_paid": previous.advance_tax_paid,
        "self_assessment_tax": previous.self_assessment_tax,
        "verification": previous.verification,
    }
    kwargs.update({name: value for name, value in overrides.items() if value is not None})

    summary = build_tax_summary(income, deductions, regime=regime, **kwargs)
    store.save({Section.tax_summary.value: summary.to_record()})
    logger.info("Tax summary refreshed regime=%s", summary.regime)
    return summary


__all__ = ["total_tds", "build_tax_summary", "refresh_tax_summary"]
