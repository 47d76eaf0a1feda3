"""
Demo record fixtures for itrcore tests — AY 2024-25 slabs.

Section dicts use the persisted (camelCase) wire format, exactly as the form
layer would save them. Expected values are hand-computed in the comments.
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Asha — one employer, ₹12L gross, nothing else
# ---------------------------------------------------------------------------
ASHA_INCOME: dict[str, Any] = {
    "salaryIncome": {
        "hasIncome": True,
        "employers": [
            {
                "id": "emp-1",
                "employerName": "Acme Pvt Ltd",
                "employerPan": "AAACA1234F",
                "grossSalary": 1_200_000,
                "basicSalary": 600_000,
                "hra": 240_000,
                "otherAllowances": 360_000,
                "professionalTax": 2_400,
                "tdsDeducted": 150_000,
                "fromDate": "2023-04-01",
                "toDate": "2024-03-31",
            }
        ],
    },
    "housePropertyIncome": {"hasIncome": False, "properties": []},
    "capitalGains": {"hasIncome": False, "shortTermGains": 0, "longTermGains": 0, "exemptLongTermGains": 0},
    "otherSources": {"hasIncome": False, "interestIncome": 0, "dividendIncome": 0, "otherIncome": 0},
}
ASHA_DEDUCTIONS: dict[str, Any] = {
    "section80C": {},
    "section80D": {},
    "otherDeductions": {"section80E": 0, "section80G": [], "section80TTA": 0, "section80U": 0},
}
# OLD: taxable=1200000, slab: 0+12500+100000+60000=172500, surcharge=0
#      cess=6900, total=179400
# NEW: taxable=1200000, slab: 0+15000+30000+45000=90000, cess=3600, total=93600
ASHA_EXPECTED: dict[str, Any] = dict(
    old_total=179_400,
    new_total=93_600,
    better="new",
)

# ---------------------------------------------------------------------------
# Vikram — salary + two properties + capital gains, heavy deductions
# ---------------------------------------------------------------------------
VIKRAM_INCOME: dict[str, Any] = {
    "salaryIncome": {
        "hasIncome": True,
        "employers": [
            {"id": "emp-1", "employerName": "First Co", "grossSalary": 600_000, "tdsDeducted": 20_000},
            {"id": "emp-2", "employerName": "Second Co", "grossSalary": 400_000, "tdsDeducted": 10_000},
        ],
    },
    "housePropertyIncome": {
        "hasIncome": True,
        "properties": [
            # net = 300000 - 20000 - 50000 - 30000 = 200000
            {"id": "prop-1", "propertyType": "let-out", "address": "12 MG Road",
             "annualValue": 300_000, "municipalTax": 20_000, "interestOnLoan": 50_000, "otherExpenses": 30_000},
            # net = 100000 - 200000 = -100000 → floored at 0
            {"id": "prop-2", "propertyType": "self-occupied", "address": "4 Lake View",
             "annualValue": 100_000, "municipalTax": 0, "interestOnLoan": 200_000, "otherExpenses": 0},
        ],
    },
    # exempt LTCG is informational only
    "capitalGains": {"hasIncome": True, "shortTermGains": 50_000, "longTermGains": 100_000,
                     "exemptLongTermGains": 100_000},
    # gate off — 30000 interest must NOT count
    "otherSources": {"hasIncome": False, "interestIncome": 30_000, "dividendIncome": 0, "otherIncome": 0},
}
VIKRAM_DEDUCTIONS: dict[str, Any] = {
    # 100000 + 100000 + 50000 = 250000 → capped at 150000
    "section80C": {"ppf": 100_000, "elss": 100_000, "epf": 50_000},
    # 25000 + 50000 = 75000, uncapped in aggregate
    "section80D": {"healthInsuranceSelf": 25_000, "healthInsuranceParents": 50_000},
    "otherDeductions": {
        "section80E": 40_000,
        "section80TTA": 10_000,
        "section80U": 75_000,
        "section80G": [
            # qualifying = 10000 × 50% = 5000
            {"id": "don-1", "doneeInstitution": "City Relief Fund", "amount": 10_000,
             "deductionPercentage": "50", "qualifyingAmount": 5_000},
            # qualifying = 20000 × 100% = 20000
            {"id": "don-2", "doneeInstitution": "PM Relief Fund", "amount": 20_000,
             "deductionPercentage": "100", "qualifyingAmount": 20_000},
        ],
    },
}
# income = 1000000 + 200000 + 150000 = 1350000
# deductions = 150000 + 75000 + 40000 + 10000 + 75000 + 25000 = 375000
# OLD: taxable=975000, slab: 12500+20%*475000=107500, cess=4300, total=111800
# NEW: taxable=1350000, slab: 15000+30000+45000+20%*150000=120000, cess=4800, total=124800
VIKRAM_EXPECTED: dict[str, Any] = dict(
    total_income=1_350_000,
    total_deductions=375_000,
    old_total=111_800,
    new_total=124_800,
    better="old",
)

DEMO_RECORDS: dict[str, dict[str, Any]] = {
    "asha": {"income": ASHA_INCOME, "deductions": ASHA_DEDUCTIONS, "expected": ASHA_EXPECTED},
    "vikram": {"income": VIKRAM_INCOME, "deductions": VIKRAM_DEDUCTIONS, "expected": VIKRAM_EXPECTED},
}
