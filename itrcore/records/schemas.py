"""
schemas.py — ITR record data contracts (pydantic v2).

Defines:
  - Section enum        (top-level snapshot keys, one per form step)
  - PersonalDetails     (identity, address, bank accounts)
  - IncomeDetails       (salary / house property / capital gains / other sources)
  - Deductions          (80C bucket, 80D bucket, other deductions + 80G donations)
  - TaxSummary          (engine figures + relief / taxes paid, written by the summary step)
  - RecordSnapshot      (typed view over the persisted snapshot; every section optional)

WIRE FORMAT:
  Attributes are snake_case in Python, camelCase on the wire (alias_generator).
  The persisted JSON document is keyed by the camelCase names, e.g.
  {"incomeDetails": {"salaryIncome": {"hasIncome": true, "employers": [...]}}}.
  Models accept both spellings on input (populate_by_name=True).

All monetary fields are annual INR, non-negative, default 0. Each income
sub-record has a has_income gate which defaults to False.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

PAN_PATTERN = r"^[A-Z]{5}[0-9]{4}[A-Z]$"
AADHAAR_PATTERN = r"^[0-9]{12}$"
PHONE_PATTERN = r"^[6-9]\d{9}$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class Section(str, Enum):
    personal_details = "personalDetails"
    income_details = "incomeDetails"
    deductions = "deductions"
    tax_summary = "taxSummary"


class RecordModel(BaseModel):
    """Base for every record: camelCase aliases, unknown keys ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_record(self) -> dict:
        """JSON-compatible dict keyed by wire (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True)


def _money(description: str = "", **kwargs):
    return Field(default=0, ge=0, description=description, **kwargs)


# ---------------------------------------------------------------------------
# Personal details
# ---------------------------------------------------------------------------

class Address(RecordModel):
    flat_no: str = ""
    building: Optional[str] = None
    area: str = ""
    city: str = ""
    state: str = ""
    pincode: str = Field(default="", max_length=6)
    country: str = "India"


class BankAccount(RecordModel):
    id: str
    bank_name: str = ""
    account_number: str = ""
    ifsc_code: str = Field(default="", max_length=11)
    account_type: Literal["savings", "current", "salary", "other"] = "savings"
    # Exactly one primary account is assumed upstream; not checked here.
    is_primary: bool = False


class PersonalDetails(RecordModel):
    first_name: str = ""
    middle_name: Optional[str] = None
    last_name: str = ""
    pan: Optional[str] = Field(default=None, pattern=PAN_PATTERN)
    aadhaar: Optional[str] = Field(default=None, pattern=AADHAAR_PATTERN)
    date_of_birth: str = ""
    gender: Optional[Literal["male", "female", "other"]] = None
    marital_status: Optional[Literal["single", "married", "divorced", "widowed"]] = None
    father_name: str = ""
    mother_name: str = ""
    nationality: str = "Indian"
    residential: Literal["resident", "non-resident", "not-ordinarily-resident"] = "resident"
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    address: Address = Field(default_factory=Address)
    bank_accounts: List[BankAccount] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Income details
# ---------------------------------------------------------------------------

class Employer(RecordModel):
    id: str
    employer_name: str = ""
    employer_pan: Optional[str] = Field(default=None, pattern=PAN_PATTERN)
    gross_salary: Optional[float] = _money("Annual gross salary — the only field counted in total income.")
    basic_salary: Optional[float] = _money()
    hra: Optional[float] = _money()
    other_allowances: Optional[float] = _money()
    professional_tax: Optional[float] = _money()
    tds_deducted: Optional[float] = _money("TDS withheld by this employer — summed by the summary step.")
    from_date: str = ""
    to_date: str = ""


class PropertyType(str, Enum):
    self_occupied = "self-occupied"
    let_out = "let-out"
    deemed_let_out = "deemed-let-out"


class PropertyUnit(RecordModel):
    """
    One house property. Net contribution to income is
    annual_value - municipal_tax - interest_on_loan - other_expenses, floored at 0.
    """
    id: str
    property_type: PropertyType = PropertyType.self_occupied
    address: str = ""
    annual_value: Optional[float] = _money()
    municipal_tax: Optional[float] = _money()
    interest_on_loan: Optional[float] = _money()
    other_expenses: Optional[float] = _money()


class SalaryIncome(RecordModel):
    has_income: bool = False
    employers: List[Employer] = Field(default_factory=list)


class HousePropertyIncome(RecordModel):
    has_income: bool = False
    properties: List[PropertyUnit] = Field(default_factory=list)


class CapitalGains(RecordModel):
    has_income: bool = False
    short_term_gains: Optional[float] = _money()
    long_term_gains: Optional[float] = _money()
    exempt_long_term_gains: Optional[float] = _money("Informational only; not added to total income.")


class OtherSources(RecordModel):
    has_income: bool = False
    interest_income: Optional[float] = _money()
    dividend_income: Optional[float] = _money()
    other_income: Optional[float] = _money()


class IncomeDetails(RecordModel):
    salary_income: SalaryIncome = Field(default_factory=SalaryIncome)
    house_property_income: HousePropertyIncome = Field(default_factory=HousePropertyIncome)
    capital_gains: CapitalGains = Field(default_factory=CapitalGains)
    other_sources: OtherSources = Field(default_factory=OtherSources)


# ---------------------------------------------------------------------------
# Deductions
# ---------------------------------------------------------------------------

class Section80C(RecordModel):
    """Per-field caps are checked upstream; the engine caps the bucket total at 1,50,000."""
    life_insurance: Optional[float] = _money(le=150_000)
    epf: Optional[float] = _money(le=150_000)
    ppf: Optional[float] = _money(le=150_000)
    elss: Optional[float] = _money(le=150_000)
    nsc: Optional[float] = _money(le=150_000)
    home_loan_principal: Optional[float] = _money(le=150_000)
    tuition_fees: Optional[float] = _money(le=150_000)
    other_80c: Optional[float] = _money(le=150_000, alias="other80C")


class Section80D(RecordModel):
    """No combined cap is applied when the engine aggregates this bucket."""
    health_insurance_self: Optional[float] = _money(le=25_000)
    health_insurance_family: Optional[float] = _money(le=25_000)
    health_insurance_parents: Optional[float] = _money(le=50_000)
    preventive_health_checkup: Optional[float] = _money(le=5_000)


def qualifying_amount_for(amount: float, deduction_percentage: str) -> float:
    """Deduction-eligible share of a donation: amount × percentage / 100."""
    return (amount or 0.0) * int(deduction_percentage) / 100


class Donation(RecordModel):
    id: str
    donee_institution: str = ""
    donee_address: str = ""
    donee_pan: Optional[str] = Field(default=None, pattern=PAN_PATTERN)
    amount: Optional[float] = _money()
    deduction_percentage: Literal["50", "100"] = "100"
    qualifying_amount: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def derive_qualifying_amount(self) -> "Donation":
        """Fill qualifying_amount from amount and percentage when the caller left it out."""
        if self.qualifying_amount is None:
            self.qualifying_amount = qualifying_amount_for(self.amount, self.deduction_percentage)
        return self


class OtherDeductions(RecordModel):
    # Explicit aliases: to_camel would produce "section80e" rather than "section80E".
    section_80e: Optional[float] = _money("Education loan interest — uncapped.", alias="section80E")
    section_80g: List[Donation] = Field(default_factory=list, alias="section80G")
    section_80tta: Optional[float] = _money(le=10_000, alias="section80TTA")
    section_80u: Optional[float] = _money(le=125_000, alias="section80U")


class Deductions(RecordModel):
    section_80c: Section80C = Field(default_factory=Section80C, alias="section80C")
    section_80d: Section80D = Field(default_factory=Section80D, alias="section80D")
    other_deductions: OtherDeductions = Field(default_factory=OtherDeductions)


# ---------------------------------------------------------------------------
# Tax summary (written back by the summary step)
# ---------------------------------------------------------------------------

class Verification(RecordModel):
    place: str = ""
    date: str = ""
    declaration_accepted: bool = False


class TaxSummary(RecordModel):
    """
    Summary-step output. The first seven figures are a projection of the engine's
    TaxCalculationResult; relief and taxes-paid figures are layered on top.
    refund_or_payable > 0 is a refund, < 0 is tax payable.
    """
    regime: Literal["old", "new"] = "old"
    total_income: float = 0
    total_deductions: float = 0
    taxable_income: float = 0
    tax_before_relief: float = 0
    relief_under_89: float = Field(default=0, ge=0, alias="reliefUnder89")
    tax_after_relief: float = 0
    surcharge: float = 0
    education_cess: float = 0
    total_tax_liability: float = 0
    advance_tax_paid: float = Field(default=0, ge=0)
    tds_deducted: float = Field(default=0, ge=0)
    self_assessment_tax: float = Field(default=0, ge=0)
    refund_or_payable: float = 0
    verification: Optional[Verification] = None


# ---------------------------------------------------------------------------
# RecordSnapshot — typed view over the persisted document
# ---------------------------------------------------------------------------

class RecordSnapshot(RecordModel):
    """Union of all sections; any subset may be absent."""
    personal_details: Optional[PersonalDetails] = None
    income_details: Optional[IncomeDetails] = None
    deductions: Optional[Deductions] = None
    tax_summary: Optional[TaxSummary] = None


__all__ = [
    "Section",
    "RecordModel",
    "Address",
    "BankAccount",
    "PersonalDetails",
    "Employer",
    "PropertyType",
    "PropertyUnit",
    "SalaryIncome",
    "HousePropertyIncome",
    "CapitalGains",
    "OtherSources",
    "IncomeDetails",
    "Section80C",
    "Section80D",
    "Donation",
    "OtherDeductions",
    "Deductions",
    "Verification",
    "TaxSummary",
    "RecordSnapshot",
    "qualifying_amount_for",
]
