"""
Statutory deductions charged on gross salary: NHIF, NSSF and the housing levy.
"""
from bisect import bisect_right
from decimal import Decimal

from ..core.errors import InvalidInputError
from ..core.utils import Number, round_shillings, to_decimal
from .config import TaxSchedule

def _gross(gross_salary: Number) -> Decimal:
    gross = to_decimal(gross_salary)
    if gross < 0:
        raise InvalidInputError(f"Gross salary must be >= 0, got {gross}")
    return gross

def calculate_nhif(gross_salary: Number, schedule: TaxSchedule) -> Decimal:
    """Flat amount of the bracket the salary falls in.

    A salary between two whole-shilling brackets (e.g. 5999.50) belongs to the
    lower one. The first bracket starts at 0, so a zero salary still pays its
    minimum.
    """
    gross = _gross(gross_salary)
    brackets = schedule.nhif_brackets
    idx = bisect_right([b.lower for b in brackets], gross) - 1
    return brackets[idx].amount

def calculate_nssf(gross_salary: Number, schedule: TaxSchedule) -> Decimal:
    """Employee share: tier I up to the lower earnings limit, tier II up to the upper."""
    gross = _gross(gross_salary)
    tier_1 = min(gross, schedule.nssf_tier_1_limit) * schedule.nssf_rate
    tier_2_base = max(Decimal("0"), min(gross, schedule.nssf_tier_2_limit) - schedule.nssf_tier_1_limit)
    tier_2 = tier_2_base * schedule.nssf_rate
    return round_shillings(tier_1 + tier_2)

def calculate_housing_levy(gross_salary: Number, schedule: TaxSchedule) -> Decimal:
    return round_shillings(_gross(gross_salary) * schedule.housing_levy_rate)

def calculate_insurance_relief(premium: Number, schedule: TaxSchedule) -> Decimal:
    relief = to_decimal(premium) * schedule.insurance_relief_rate
    return min(relief, schedule.insurance_relief_max)
