"""
Statutory tax schedules with validation and versioning.

A schedule bundles every rate table the payroll calculator needs for one tax
year. Schedules are immutable; a change in the law is a new schedule
registered alongside the old one, selected by year or by effective date.
"""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.config import settings
from ..core.errors import InvalidInputError, TaxConfigError

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

class TaxBand(_Frozen):
    """One progressive PAYE band; ``upper=None`` is the open top band."""
    lower: Decimal = Field(ge=0)
    upper: Optional[Decimal] = None
    rate: Decimal = Field(ge=0, le=1)

    @property
    def label(self) -> str:
        if self.upper is None:
            return f"Above KES {self.lower:,.0f}"
        return f"KES {self.lower:,.0f} - {self.upper:,.0f}"

class NHIFBracket(_Frozen):
    lower: Decimal = Field(ge=0)
    upper: Optional[Decimal] = None
    amount: Decimal = Field(ge=0)

def _check_contiguous(rows: Sequence, kind: str):
    if not rows:
        raise TaxConfigError(f"{kind}: at least one row is required")
    if rows[0].lower != 0:
        raise TaxConfigError(f"{kind}: first row must start at 0, got {rows[0].lower}")
    for prev, nxt in zip(rows, rows[1:]):
        if prev.upper is None:
            raise TaxConfigError(f"{kind}: only the last row may be open-ended")
        if prev.upper < prev.lower:
            raise TaxConfigError(f"{kind}: row {prev.lower}-{prev.upper} is inverted")
        if prev.upper + 1 != nxt.lower:
            raise TaxConfigError(f"{kind}: gap or overlap between {prev.upper} and {nxt.lower}")
    if rows[-1].upper is not None:
        raise TaxConfigError(f"{kind}: last row must be open-ended")

class TaxSchedule(_Frozen):
    """Monthly Kenyan statutory rates for one tax year."""
    year: str
    effective_date: date
    paye_bands: Tuple[TaxBand, ...]
    nhif_brackets: Tuple[NHIFBracket, ...]
    nssf_tier_1_limit: Decimal = Field(gt=0)
    nssf_tier_2_limit: Decimal = Field(gt=0)
    nssf_rate: Decimal = Field(ge=0, le=1)
    housing_levy_rate: Decimal = Field(ge=0, le=1)
    personal_relief: Decimal = Field(ge=0)
    insurance_relief_rate: Decimal = Field(ge=0, le=1)
    insurance_relief_max: Decimal = Field(ge=0)
    pension_cap: Decimal = Field(ge=0)
    disability_exemption_rate: Decimal = Field(ge=0, le=1)

    @model_validator(mode="after")
    def _validate_tables(self):
        _check_contiguous(self.paye_bands, "PAYE bands")
        _check_contiguous(self.nhif_brackets, "NHIF brackets")
        if self.nssf_tier_2_limit < self.nssf_tier_1_limit:
            raise TaxConfigError("NSSF tier II limit is below tier I limit")
        return self

    @property
    def nssf_max_contribution(self) -> Decimal:
        return self.nssf_tier_2_limit * self.nssf_rate

def _bands(rows: List[tuple]) -> Tuple[TaxBand, ...]:
    return tuple(TaxBand(lower=Decimal(lo), upper=None if hi is None else Decimal(hi), rate=Decimal(r)) for lo, hi, r in rows)

def _brackets(rows: List[tuple]) -> Tuple[NHIFBracket, ...]:
    return tuple(NHIFBracket(lower=Decimal(lo), upper=None if hi is None else Decimal(hi), amount=Decimal(a)) for lo, hi, a in rows)

# Kenya, monthly figures in force for 2024 (Finance Act 2023, NSSF Act phase two)
KENYA_2024 = TaxSchedule(
    year="2024",
    effective_date=date(2024, 2, 1),
    paye_bands=_bands([
        (0, 24000, "0.10"),
        (24001, 32333, "0.25"),
        (32334, 500000, "0.30"),
        (500001, 800000, "0.325"),
        (800001, None, "0.35"),
    ]),
    nhif_brackets=_brackets([
        (0, 5999, 150),
        (6000, 7999, 300),
        (8000, 11999, 400),
        (12000, 14999, 500),
        (15000, 19999, 600),
        (20000, 24999, 750),
        (25000, 29999, 850),
        (30000, 34999, 900),
        (35000, 39999, 950),
        (40000, 44999, 1000),
        (45000, 49999, 1100),
        (50000, 59999, 1200),
        (60000, 69999, 1300),
        (70000, 79999, 1400),
        (80000, 89999, 1500),
        (90000, 99999, 1600),
        (100000, None, 1700),
    ]),
    nssf_tier_1_limit=Decimal("7000"),
    nssf_tier_2_limit=Decimal("36000"),
    nssf_rate=Decimal("0.06"),
    housing_levy_rate=Decimal("0.015"),
    personal_relief=Decimal("2400"),
    insurance_relief_rate=Decimal("0.15"),
    insurance_relief_max=Decimal("5000"),
    pension_cap=Decimal("20000"),
    disability_exemption_rate=Decimal("0.5"),
)

class TaxScheduleRegistry:
    """Schedules keyed by year, with lookup by effective date."""

    def __init__(self, schedules: Sequence[TaxSchedule] = ()):
        self._schedules: Dict[str, TaxSchedule] = {}
        for s in schedules:
            self.register(s)

    def register(self, schedule: TaxSchedule) -> TaxSchedule:
        """Add or replace the schedule for ``schedule.year``."""
        self._schedules[schedule.year] = schedule
        return schedule

    def years(self) -> List[str]:
        return sorted(self._schedules)

    def get(self, year: Optional[str] = None) -> TaxSchedule:
        """Schedule for ``year``; the configured ``TAX_YEAR`` when omitted."""
        key = year or settings.TAX_YEAR
        if key not in self._schedules:
            raise InvalidInputError(f"No tax schedule registered for year {key!r}")
        return self._schedules[key]

    def effective_on(self, on: date) -> TaxSchedule:
        """Latest schedule whose effective date is on or before ``on``."""
        valid = [s for s in self._schedules.values() if s.effective_date <= on]
        if not valid:
            raise InvalidInputError(f"No tax schedule in force on {on.isoformat()}")
        return max(valid, key=lambda s: s.effective_date)

registry = TaxScheduleRegistry([KENYA_2024])

def get_schedule(year: Optional[str] = None) -> TaxSchedule:
    return registry.get(year)
