"""
ITR Tax Engine — AY 2024-25
Pure Python, deterministic. Same input → same output. No I/O, no stored state.

Two regimes, differing only in slab tables:
  Old: 2.5L/5L/10L breakpoints (4 slabs)
  New: 3L/6L/9L/12L/15L breakpoints (6 slabs), deductions forced to zero

Absent numeric fields are treated as zero (`value or 0.0`). Callers hand in
records that already passed schema validation; nothing here raises on them.
"""
from __future__ import annotations

from itrcore.engine.schemas import Regime, RegimeComparison, TaxCalculationResult
from itrcore.records.schemas import Deductions, IncomeDetails, PropertyUnit

# ===========================================================================
# DEDUCTION CAP CONSTANTS
# ===========================================================================

CAP_80C = 150_000   # Combined 80C bucket, re-applied here whatever the per-field caps

# ===========================================================================
# SURCHARGE + CESS
# ===========================================================================

CESS_RATE = 0.04

# (taxable_income ceiling, rate) — a single rate applies to the WHOLE base tax
# once the income crosses the previous ceiling. Not marginal.
SURCHARGE_BANDS: list[tuple[float, float]] = [
    (5_000_000,    0.00),   # up to 50L: nil
    (10_000_000,   0.10),   # 50L–1Cr: 10%
    (20_000_000,   0.15),   # 1Cr–2Cr: 15%
    (50_000_000,   0.25),   # 2Cr–5Cr: 25%
    (float("inf"), 0.37),   # >5Cr: 37%
]

# ===========================================================================
# SLAB TABLES — list[tuple[lower, upper, rate_percent]]
# ===========================================================================

OLD_REGIME_SLABS: list[tuple[float, float, float]] = [
    (0,         250_000,      0),    # 0–2.5L: 0%
    (250_000,   500_000,      5),    # 2.5–5L: 5%
    (500_000,   1_000_000,    20),   # 5–10L: 20%
    (1_000_000, float("inf"), 30),   # >10L: 30%
]

NEW_REGIME_SLABS: list[tuple[float, float, float]] = [
    (0,         300_000,      0),    # 0–3L: 0%
    (300_000,   600_000,      5),    # 3–6L: 5%
    (600_000,   900_000,      10),   # 6–9L: 10%
    (900_000,   1_200_000,    15),   # 9–12L: 15%
    (1_200_000, 1_500_000,    20),   # 12–15L: 20%
    (1_500_000, float("inf"), 30),   # >15L: 30%
]

REGIME_SLABS: dict[Regime, list[tuple[float, float, float]]] = {
    Regime.old: OLD_REGIME_SLABS,
    Regime.new: NEW_REGIME_SLABS,
}


# ===========================================================================
# INCOME
# ===========================================================================

def _net_property_income(unit: PropertyUnit) -> float:
    net = (
        (unit.annual_value or 0.0)
        - (unit.municipal_tax or 0.0)
        - (unit.interest_on_loan or 0.0)
        - (unit.other_expenses or 0.0)
    )
    return max(net, 0.0)   # loss from one property never offsets other income


def calculate_total_income(income: IncomeDetails) -> float:
    """
    Sum every ENABLED income sub-record. A sub-record whose has_income gate is
    False contributes nothing, even if its nested fields are populated.

      salary:          gross_salary across employers
      house property:  net income per property, each floored at 0
      capital gains:   short-term + long-term (exempt LTCG is informational)
      other sources:   interest + dividend + other
    """
    total = 0.0

    salary = income.salary_income
    if salary.has_income:
        total += sum(employer.gross_salary or 0.0 for employer in salary.employers)

    house = income.house_property_income
    if house.has_income:
        total += sum(_net_property_income(unit) for unit in house.properties)

    gains = income.capital_gains
    if gains.has_income:
        total += (gains.short_term_gains or 0.0) + (gains.long_term_gains or 0.0)

    other = income.other_sources
    if other.has_income:
        total += (
            (other.interest_income or 0.0)
            + (other.dividend_income or 0.0)
            + (other.other_income or 0.0)
        )

    return total


# ===========================================================================
# DEDUCTIONS
# ===========================================================================

def _bucket_total(bucket) -> float:
    return sum(value or 0.0 for value in bucket.model_dump().values())


def calculate_total_deductions(deductions: Deductions) -> float:
    """
    Chapter VI-A total.

    80C:   bucket total capped at CAP_80C
    80D:   bucket total, no combined cap
    80E:   education loan interest, uncapped
    80TTA: savings interest (cap enforced upstream, not re-checked)
    80U:   disability (cap enforced upstream, not re-checked)
    80G:   sum of each donation's precomputed qualifying_amount
    """
    ded_80c = min(_bucket_total(deductions.section_80c), CAP_80C)
    ded_80d = _bucket_total(deductions.section_80d)

    other = deductions.other_deductions
    ded_80e = other.section_80e or 0.0
    ded_80tta = other.section_80tta or 0.0
    ded_80u = other.section_80u or 0.0
    ded_80g = sum(donation.qualifying_amount or 0.0 for donation in other.section_80g)

    return ded_80c + ded_80d + ded_80e + ded_80tta + ded_80u + ded_80g


# ===========================================================================
# SLAB TAX, SURCHARGE, CESS
# ===========================================================================

def calculate_tax(taxable_income: float, regime: Regime | str = Regime.old) -> float:
    """
    Marginal slab tax. Each slab whose lower bound is below taxable_income taxes
    min(taxable_income - lower, upper - lower) at its rate; slabs are summed.
    """
    tax = 0.0
    for lower, upper, rate in REGIME_SLABS[Regime(regime)]:
        if taxable_income > lower:
            slab_income = min(taxable_income - lower, upper - lower)
            tax += slab_income * rate / 100
    return tax


def calculate_surcharge(taxable_income: float, base_tax: float) -> float:
    """Flat band rate on the whole base tax. Band ceilings are inclusive."""
    for ceiling, rate in SURCHARGE_BANDS:
        if taxable_income <= ceiling:
            return base_tax * rate
    return base_tax * SURCHARGE_BANDS[-1][1]


def calculate_education_cess(tax_plus_surcharge: float) -> float:
    return tax_plus_surcharge * CESS_RATE


# ===========================================================================
# COMPLETE CALCULATION — public API
# ===========================================================================

def calculate_complete_tax(
    income: IncomeDetails,
    deductions: Deductions,
    regime: Regime | str = Regime.old,
) -> TaxCalculationResult:
    """
    Full computation for one regime.

    The new regime allows no deductions at all: total_deductions is 0 there
    regardless of what calculate_total_deductions() would return.
    """
    regime = Regime(regime)

    # Step 1: Income
    total_income = calculate_total_income(income)

    # Step 2: Deductions (regime rule, not a data issue)
    total_deductions = 0.0 if regime is Regime.new else calculate_total_deductions(deductions)

    # Step 3: Taxable income (never negative)
    taxable_income = max(total_income - total_deductions, 0.0)

    # Step 4: Slab tax
    tax_before_relief = calculate_tax(taxable_income, regime)

    # Step 5: Surcharge (on slab tax)
    surcharge = calculate_surcharge(taxable_income, tax_before_relief)

    # Step 6: Cess (on slab tax + surcharge)
    education_cess = calculate_education_cess(tax_before_relief + surcharge)

    # Step 7: Final liability
    total_tax_liability = tax_before_relief + surcharge + education_cess

    return TaxCalculationResult(
        total_income=round(total_income, 2),
        total_deductions=round(total_deductions, 2),
        taxable_income=round(taxable_income, 2),
        tax_before_relief=round(tax_before_relief, 2),
        surcharge=round(surcharge, 2),
        education_cess=round(education_cess, 2),
        total_tax_liability=round(total_tax_liability, 2),
    )


def compare_regimes(income: IncomeDetails, deductions: Deductions) -> RegimeComparison:
    """Run both regimes. Lower-or-equal liability wins; ties go to the old regime."""
    old = calculate_complete_tax(income, deductions, Regime.old)
    new = calculate_complete_tax(income, deductions, Regime.new)
    better = "old" if old.total_tax_liability <= new.total_tax_liability else "new"
    return RegimeComparison(old=old, new=new, better=better)
