"""
Account book: money accounts whose balances follow the income and expenses
linked to them.
"""
import threading
import uuid
from decimal import Decimal
from typing import Dict, List, Optional

from ..core.errors import DuplicateRecordError, InvalidInputError, RecordNotFoundError
from ..core.schemas import Account, Expense, Income
from ..core.utils import decimal_sum, get_logger

logger = get_logger("accounts.manager")

class AccountBook:
    """Accounts with the income and expense records that move their balances.

    Adding a linked record and adjusting the balance happen under the book
    lock; removing the record reverses its effect.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._accounts: Dict[str, Account] = {}
        self._expenses: Dict[str, Expense] = {}
        self._incomes: Dict[str, Income] = {}

    def get(self, account_id: str) -> Account:
        try:
            return self._accounts[account_id]
        except KeyError:
            raise RecordNotFoundError(f"account {account_id} not found")

    def list_accounts(self) -> List[Account]:
        return list(self._accounts.values())

    def expenses(self) -> List[Expense]:
        return sorted(self._expenses.values(), key=lambda e: e.date)

    def incomes(self) -> List[Income]:
        return sorted(self._incomes.values(), key=lambda i: i.date)

    @property
    def total_balance(self) -> Decimal:
        return decimal_sum(a.balance for a in self._accounts.values())

    def default_account(self) -> Optional[Account]:
        """The account flagged as default, else the first one added."""
        for a in self._accounts.values():
            if a.is_default:
                return a
        return next(iter(self._accounts.values()), None)

    def add_account(self, account: Account) -> Account:
        with self._lock:
            if account.id in self._accounts:
                raise DuplicateRecordError(f"account {account.id} already exists")
            if account.balance < 0:
                raise InvalidInputError(f"Opening balance cannot be negative, got {account.balance}")
            self._accounts[account.id] = account
            return account

    def update_account(self, account_id: str, **changes) -> Account:
        """Edit account details; the balance only moves through linked records."""
        if changes.get("id", account_id) != account_id or "balance" in changes:
            raise InvalidInputError("account id and balance cannot be edited directly")
        with self._lock:
            account = self.get(account_id).revise(**changes)
            self._accounts[account_id] = account
            return account

    def set_default(self, account_id: str) -> Account:
        with self._lock:
            self.get(account_id)
            for a in list(self._accounts.values()):
                self._accounts[a.id] = a.model_copy(update={"is_default": a.id == account_id})
            return self._accounts[account_id]

    def delete_account(self, account_id: str) -> Account:
        """Remove the account; its records stay, unlinked."""
        with self._lock:
            account = self.get(account_id)
            del self._accounts[account_id]
            for store in (self._expenses, self._incomes):
                for rid, r in list(store.items()):
                    if r.account_id == account_id:
                        store[rid] = r.model_copy(update={"account_id": None})
            return account

    def _move(self, account_id: Optional[str], delta: Decimal):
        if account_id is None:
            return
        account = self.get(account_id)
        self._accounts[account_id] = account.model_copy(update={"balance": account.balance + delta})
        logger.debug("account %s balance %s -> %s", account_id, account.balance, account.balance + delta)

    def _add(self, store: Dict, record, sign: int):
        with self._lock:
            if record.account_id is not None:
                self.get(record.account_id)
            record = record.model_copy(update={"id": record.id or str(uuid.uuid4())})
            if record.id in store:
                raise DuplicateRecordError(f"record {record.id} already exists")
            store[record.id] = record
            self._move(record.account_id, sign * record.amount)
            return record

    def _remove(self, store: Dict, record_id: str, sign: int):
        with self._lock:
            try:
                record = store.pop(record_id)
            except KeyError:
                raise RecordNotFoundError(f"record {record_id} not found")
            self._move(record.account_id, -sign * record.amount)
            return record

    def add_expense(self, expense: Expense) -> Expense:
        """Store the expense and debit its account, if any."""
        return self._add(self._expenses, expense, -1)

    def remove_expense(self, expense_id: str) -> Expense:
        return self._remove(self._expenses, expense_id, -1)

    def add_income(self, income: Income) -> Income:
        """Store the income and credit its account, if any."""
        return self._add(self._incomes, income, 1)

    def remove_income(self, income_id: str) -> Income:
        return self._remove(self._incomes, income_id, 1)
