"""
Loan ledger: simple interest accrued to date, outstanding balance and due status.

Interest is never compounded and keeps accruing until ``now``:
``principal * rate/100 * days_elapsed/365``.
"""
from dataclasses import dataclass, asdict, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from ..core.config import settings
from ..core.schemas import Loan, LoanPayment, LoanStatus, LoanType
from ..core.utils import as_date, decimal_sum

ZERO = Decimal("0")
DAYS_PER_YEAR = Decimal("365")

@dataclass(frozen=True)
class LoanLedgerResult:
    loan_id: str
    total_paid: Decimal
    accrued_interest: Decimal
    total_with_interest: Decimal
    outstanding_balance: Decimal
    is_overdue: bool
    days_until_due: Optional[int]

    def to_dict(self):
        return asdict(self)

def _own_payments(loan: Loan, payments: Iterable[LoanPayment]) -> List[LoanPayment]:
    return [p for p in payments if p.loan_id is None or p.loan_id == loan.id]

def compute_loan_ledger(loan: Loan, payments: Iterable[LoanPayment], now: Union[date, datetime, None] = None) -> LoanLedgerResult:
    today = as_date(now)
    years_elapsed = max(ZERO, Decimal((today - loan.date_issued).days) / DAYS_PER_YEAR)
    accrued_interest = loan.principal_amount * (loan.interest_rate / 100) * years_elapsed
    total_with_interest = loan.principal_amount + accrued_interest
    total_paid = decimal_sum(p.amount for p in _own_payments(loan, payments))

    days_until_due = None
    is_overdue = False
    if loan.due_date is not None and loan.status is LoanStatus.ACTIVE:
        days_until_due = (loan.due_date - today).days
        is_overdue = days_until_due < 0

    return LoanLedgerResult(
        loan_id=loan.id,
        total_paid=total_paid,
        accrued_interest=accrued_interest,
        total_with_interest=total_with_interest,
        outstanding_balance=max(ZERO, total_with_interest - total_paid),
        is_overdue=is_overdue,
        days_until_due=days_until_due,
    )

def reconcile_loan_status(loan: Loan, payments: Iterable[LoanPayment], now: Union[date, datetime, None] = None) -> LoanStatus:
    """Status the loan should hold once its payments changed.

    Paid when payments cover principal plus interest to date, active
    otherwise. Defaulted and forgiven loans keep their status.
    """
    if loan.status in (LoanStatus.DEFAULTED, LoanStatus.FORGIVEN):
        return loan.status
    ledger = compute_loan_ledger(loan, payments, now)
    if ledger.total_paid >= ledger.total_with_interest:
        return LoanStatus.PAID
    return LoanStatus.ACTIVE

@dataclass(frozen=True)
class LoanSummary:
    total_lent: Decimal = ZERO
    total_borrowed: Decimal = ZERO
    overdue: List[LoanLedgerResult] = field(default_factory=list)
    upcoming: List[LoanLedgerResult] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)

def summarize_loans(loans: Iterable[Loan], payments: Iterable[LoanPayment], now: Union[date, datetime, None] = None,
                    window_days: Optional[int] = None) -> LoanSummary:
    """Outstanding exposure of active loans, overdue ones and those due soon.

    Payments are matched to loans by ``loan_id``.
    """
    window = settings.UPCOMING_WINDOW_DAYS if window_days is None else window_days
    by_loan = {}
    for p in payments:
        by_loan.setdefault(p.loan_id, []).append(p)
    active = [(loan, compute_loan_ledger(loan, by_loan.get(loan.id, []), now))
              for loan in loans if loan.status is LoanStatus.ACTIVE]
    upcoming = [r for _, r in active if r.days_until_due is not None and 0 <= r.days_until_due <= window]
    return LoanSummary(
        total_lent=decimal_sum(r.outstanding_balance for loan, r in active if loan.type is LoanType.LENT),
        total_borrowed=decimal_sum(r.outstanding_balance for loan, r in active if loan.type is LoanType.BORROWED),
        overdue=[r for _, r in active if r.is_overdue],
        upcoming=sorted(upcoming, key=lambda r: r.days_until_due),
    )
