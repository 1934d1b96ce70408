# data_models.py
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Booking:
    """One party's claim on one calendar day of the spot."""
    id: int
    date: date
    occupant: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class BillingPeriod:
    """Half-open interval [start, end) spanning exactly one month."""
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


@dataclass(frozen=True)
class PeriodStatus:
    """Persisted paid flag for the period with these bounds."""
    start_date: date
    end_date: date
    is_paid: bool = False
    id: Optional[int] = None


@dataclass(frozen=True)
class Settlement:
    used_days: int
    usage_amount: float
    remainder_amount: float
    is_paid: bool = False


@dataclass(frozen=True)
class PeriodSummary:
    period: BillingPeriod
    settlement: Settlement
    is_current: bool = False


@dataclass(frozen=True)
class BillingTerms:
    """The contract: who shares the spot and what it costs."""
    daily_rate: float
    monthly_rent: float
    contract_start: date
    occupants: Tuple[str, str]
    rate_payer: str
    currency: str = "CHF"

    @property
    def other_party(self) -> str:
        return next(name for name in self.occupants if name != self.rate_payer)


@dataclass(frozen=True)
class CalendarCell:
    date: date
    in_current_month: bool
