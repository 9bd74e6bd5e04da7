"""
Domain records consumed by the calculators.
Validation happens at construction: out-of-range values raise
``pydantic.ValidationError`` instead of being clamped.
"""
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pfet.core.config import settings

class Record(BaseModel):
    """Immutable record; edits go through ``model_copy``/``revise``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    def revise(self, **changes):
        """Return a validated copy with ``changes`` applied."""
        return type(self).model_validate({**self.model_dump(), **changes})

class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

class LoanType(str, Enum):
    LENT = "lent"
    BORROWED = "borrowed"

class LoanStatus(str, Enum):
    ACTIVE = "active"
    PAID = "paid"
    DEFAULTED = "defaulted"
    FORGIVEN = "forgiven"

class AccountType(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    SACCO = "sacco"

class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class GoalCategory(str, Enum):
    SAVINGS = "savings"
    INVESTMENT = "investment"
    DEBT_PAYOFF = "debt_payoff"
    PURCHASE = "purchase"
    EMERGENCY_FUND = "emergency_fund"
    OTHER = "other"

class PAYEInput(Record):
    gross_salary: Decimal = Field(ge=0)
    allowances: Decimal = Field(Decimal("0"), ge=0, description="Non-taxable")
    benefits: Decimal = Field(Decimal("0"), ge=0, description="Taxable benefits in kind")
    pension: Decimal = Field(Decimal("0"), ge=0, description="Tax-deductible contribution")
    insurance: Decimal = Field(Decimal("0"), ge=0, description="Premium eligible for relief")
    disability: bool = False

class Account(Record):
    id: str
    name: str = Field(min_length=1, max_length=100)
    type: AccountType = AccountType.PRIMARY
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    # opening balance; later expenses may take it below zero
    balance: Decimal = Decimal("0")
    is_default: bool = False

class Expense(Record):
    id: Optional[str] = None
    amount: Decimal = Field(gt=0)
    date: dt.date
    category_id: Optional[str] = None
    account_id: Optional[str] = None
    description: Optional[str] = None

class Income(Record):
    id: Optional[str] = None
    amount: Decimal = Field(gt=0)
    date: dt.date
    category_id: Optional[str] = None
    account_id: Optional[str] = None
    description: Optional[str] = None

class Budget(Record):
    id: str
    category_id: str
    amount: Decimal = Field(gt=0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: dt.date
    end_date: Optional[dt.date] = None
    alert_threshold: Decimal = Field(default_factory=lambda: Decimal(str(settings.DEFAULT_ALERT_THRESHOLD)), ge=0, le=100)

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self

class LoanPayment(Record):
    id: Optional[str] = None
    loan_id: Optional[str] = None
    amount: Decimal = Field(gt=0)
    payment_date: dt.date
    notes: Optional[str] = None

class Loan(Record):
    id: str
    type: LoanType
    person_name: str = Field(min_length=1)
    person_contact: Optional[str] = None
    principal_amount: Decimal = Field(gt=0)
    interest_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    date_issued: dt.date
    due_date: Optional[dt.date] = None
    status: LoanStatus = LoanStatus.ACTIVE
    notes: Optional[str] = None

class GoalContribution(Record):
    id: Optional[str] = None
    goal_id: Optional[str] = None
    amount: Decimal = Field(gt=0)
    contribution_date: dt.date
    notes: Optional[str] = None

class Goal(Record):
    id: str
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    target_amount: Decimal = Field(gt=0)
    current_amount: Decimal = Field(Decimal("0"), ge=0)
    target_date: Optional[dt.date] = None
    category: GoalCategory = GoalCategory.SAVINGS
    priority: GoalPriority = GoalPriority.MEDIUM
    status: GoalStatus = GoalStatus.ACTIVE
