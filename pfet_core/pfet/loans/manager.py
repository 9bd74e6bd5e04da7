"""
Loan book: loans with their payments, keeping loan status in step with payments.
"""
import threading
import uuid
from datetime import date, datetime
from typing import Dict, List, Union

from ..core.errors import DuplicateRecordError, InvalidInputError, RecordNotFoundError
from ..core.schemas import Loan, LoanPayment
from ..core.utils import get_logger
from .ledger import LoanLedgerResult, LoanSummary, compute_loan_ledger, reconcile_loan_status, summarize_loans

logger = get_logger("loans.manager")

class LoanBook:
    def __init__(self):
        # one lock for the book: a payment change, its recompute and the status
        # write happen as a single step
        self._lock = threading.Lock()
        self._loans: Dict[str, Loan] = {}
        self._payments: Dict[str, List[LoanPayment]] = {}

    def get(self, loan_id: str) -> Loan:
        try:
            return self._loans[loan_id]
        except KeyError:
            raise RecordNotFoundError(f"loan {loan_id} not found")

    def list_loans(self) -> List[Loan]:
        return list(self._loans.values())

    def payments(self, loan_id: str) -> List[LoanPayment]:
        self.get(loan_id)
        return sorted(self._payments.get(loan_id, []), key=lambda p: p.payment_date)

    def add_loan(self, loan: Loan) -> Loan:
        with self._lock:
            if loan.id in self._loans:
                raise DuplicateRecordError(f"loan {loan.id} already exists")
            self._loans[loan.id] = loan
            self._payments.setdefault(loan.id, [])
            return loan

    def update_loan(self, loan_id: str, **changes) -> Loan:
        if changes.get("id", loan_id) != loan_id:
            raise InvalidInputError("loan id cannot be changed")
        with self._lock:
            loan = self.get(loan_id).revise(**changes)
            self._loans[loan_id] = loan
            return loan

    def delete_loan(self, loan_id: str) -> Loan:
        """Remove the loan together with its payments."""
        with self._lock:
            loan = self.get(loan_id)
            del self._loans[loan_id]
            self._payments.pop(loan_id, None)
            return loan

    def _reconcile(self, loan: Loan, now) -> Loan:
        status = reconcile_loan_status(loan, self._payments[loan.id], now)
        if status is not loan.status:
            logger.info("loan %s status %s -> %s", loan.id, loan.status.value, status.value)
            loan = loan.model_copy(update={"status": status})
            self._loans[loan.id] = loan
        return loan

    def add_payment(self, loan_id: str, payment: LoanPayment, now: Union[date, datetime, None] = None) -> Loan:
        """Record a payment and return the loan with its status reconciled."""
        with self._lock:
            loan = self.get(loan_id)
            payment = payment.model_copy(update={"id": payment.id or str(uuid.uuid4()), "loan_id": loan_id})
            self._payments[loan_id].append(payment)
            return self._reconcile(loan, now)

    def remove_payment(self, loan_id: str, payment_id: str, now: Union[date, datetime, None] = None) -> Loan:
        with self._lock:
            loan = self.get(loan_id)
            kept = [p for p in self._payments[loan_id] if p.id != payment_id]
            if len(kept) == len(self._payments[loan_id]):
                raise RecordNotFoundError(f"payment {payment_id} not found on loan {loan_id}")
            self._payments[loan_id] = kept
            return self._reconcile(loan, now)

    def ledger(self, loan_id: str, now: Union[date, datetime, None] = None) -> LoanLedgerResult:
        return compute_loan_ledger(self.get(loan_id), self._payments.get(loan_id, []), now)

    def summary(self, now: Union[date, datetime, None] = None) -> LoanSummary:
        all_payments = [p for ps in self._payments.values() for p in ps]
        return summarize_loans(self.list_loans(), all_payments, now)
