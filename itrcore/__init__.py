"""
itrcore — computation and persistence core of the ITR filing flow.

Re-exports the public API so callers can write `from itrcore import RecordStore`.
"""
from itrcore.engine.schemas import Regime, RegimeComparison, TaxCalculationResult
from itrcore.engine.summary import build_tax_summary, refresh_tax_summary, total_tds
from itrcore.engine.tax_engine import (
    calculate_complete_tax,
    calculate_education_cess,
    calculate_surcharge,
    calculate_tax,
    calculate_total_deductions,
    calculate_total_income,
    compare_regimes,
)
from itrcore.records.schemas import Deductions, IncomeDetails, RecordSnapshot, Section, TaxSummary
from itrcore.storage.record_store import RecordStore, StoreState
from itrcore.storage.substrate import FileSubstrate, MemorySubstrate, RedisSubstrate, StorageError

__version__ = "0.1.0"

__all__ = [
    "Regime",
    "RegimeComparison",
    "TaxCalculationResult",
    "build_tax_summary",
    "refresh_tax_summary",
    "total_tds",
    "calculate_complete_tax",
    "calculate_education_cess",
    "calculate_surcharge",
    "calculate_tax",
    "calculate_total_deductions",
    "calculate_total_income",
    "compare_regimes",
    "Deductions",
    "IncomeDetails",
    "RecordSnapshot",
    "Section",
    "TaxSummary",
    "RecordStore",
    "StoreState",
    "FileSubstrate",
    "MemorySubstrate",
    "RedisSubstrate",
    "StorageError",
]
