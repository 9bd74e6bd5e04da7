
from dataclasses import dataclass, asdict, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..core.schemas import PAYEInput
from ..core.utils import Number, get_logger, round_shillings, to_decimal
from .bands import BandTax, slice_progressive
from .config import TaxSchedule, get_schedule
from .statutory import (
    calculate_housing_levy,
    calculate_insurance_relief,
    calculate_nhif,
    calculate_nssf,
)

logger = get_logger("tax.payroll")

ZERO = Decimal("0")

@dataclass(frozen=True)
class PAYEResult:
    gross_salary: Decimal
    taxable_income: Decimal

    # deductions
    paye: Decimal
    nhif: Decimal
    nssf: Decimal
    housing_levy: Decimal
    pension: Decimal

    # reliefs
    personal_relief: Decimal
    insurance_relief: Decimal

    gross_tax: Decimal
    tax_relief: Decimal
    net_tax: Decimal

    total_deductions: Decimal
    net_salary: Decimal
    # income minus deductions before the floor; negative when deductions exceed pay
    unfloored_net_salary: Decimal

    tax_by_band: List[BandTax] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)

class KenyanPayroll:
    def __init__(self, schedule: Optional[TaxSchedule] = None):
        self.schedule = schedule or get_schedule()

    def compute_paye(self, taxable_income: Number):
        """Gross tax on taxable income, before reliefs."""
        return slice_progressive(self.schedule.paye_bands, taxable_income)

    def compute_nssf(self, gross: Number) -> Decimal:
        return calculate_nssf(gross, self.schedule)

    def compute_nhif(self, gross: Number) -> Decimal:
        return calculate_nhif(gross, self.schedule)

    def compute_housing_levy(self, gross: Number) -> Decimal:
        return calculate_housing_levy(gross, self.schedule)

    def _deductible_pension(self, pension: Decimal) -> Decimal:
        cap = self.schedule.pension_cap
        if pension > cap:
            logger.warning("pension contribution %s exceeds the %s cap; deducting %s", pension, cap, cap)
            return cap
        return pension

    def calculate_net_salary(self, data: PAYEInput) -> PAYEResult:
        s = self.schedule
        gross = data.gross_salary
        pension = self._deductible_pension(data.pension)

        # statutory deductions depend on gross salary only
        nhif = self.compute_nhif(gross)
        nssf = self.compute_nssf(gross)
        housing_levy = self.compute_housing_levy(gross)

        # allowances are not taxable; NSSF and pension are pre-tax
        taxable_income = max(ZERO, gross + data.benefits - pension - nssf)
        sliced = self.compute_paye(taxable_income)
        gross_tax = sliced.total_tax

        personal_relief = s.personal_relief
        insurance_relief = calculate_insurance_relief(data.insurance, s)
        tax_relief = personal_relief + insurance_relief

        net_tax = max(ZERO, gross_tax - tax_relief)
        if data.disability:
            # exemption applies to tax left after relief
            net_tax = round_shillings(net_tax * s.disability_exemption_rate)

        total_deductions = net_tax + nhif + nssf + housing_levy + pension
        unfloored_net_salary = gross + data.allowances + data.benefits - total_deductions
        net_salary = max(ZERO, unfloored_net_salary)

        return PAYEResult(
            gross_salary=gross,
            taxable_income=taxable_income,
            paye=net_tax,
            nhif=nhif,
            nssf=nssf,
            housing_levy=housing_levy,
            pension=pension,
            personal_relief=personal_relief,
            insurance_relief=insurance_relief,
            gross_tax=gross_tax,
            tax_relief=tax_relief,
            net_tax=net_tax,
            total_deductions=total_deductions,
            net_salary=net_salary,
            unfloored_net_salary=unfloored_net_salary,
            tax_by_band=sliced.per_band,
        )

    def payroll_breakdown(self, gross: Number) -> Dict[str, Decimal]:
        r = self.calculate_net_salary(PAYEInput(gross_salary=to_decimal(gross)))
        return {"Gross": r.gross_salary, "PAYE": r.paye, "NSSF": r.nssf, "NHIF": r.nhif,
                "HousingLevy": r.housing_levy, "Net": r.net_salary}

    def run_payroll(self, inputs: Iterable[PAYEInput]) -> pd.DataFrame:
        """One payslip row per input, band breakdown left out."""
        rows = []
        for data in inputs:
            slip = self.calculate_net_salary(data).to_dict()
            slip.pop("tax_by_band")
            rows.append(slip)
        columns = [f for f in PAYEResult.__dataclass_fields__ if f != "tax_by_band"]
        return pd.DataFrame(rows, columns=columns)

def calculate_net_salary(data: PAYEInput, schedule: Optional[TaxSchedule] = None) -> PAYEResult:
    return KenyanPayroll(schedule).calculate_net_salary(data)
