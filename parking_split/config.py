# config.py
import logging
import os
from typing import Mapping

from dotenv import load_dotenv

from parking_split.data_models import BillingTerms
from parking_split.dates import parse_date

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./parking_split.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def load_terms(env: Mapping[str, str] = os.environ) -> BillingTerms:
    """Reads the contract terms from the environment and checks they make sense."""
    occupants = tuple(name.strip() for name in env.get("OCCUPANTS", "najani,ali").split(",") if name.strip())
    if len(occupants) != 2 or occupants[0] == occupants[1]:
        raise ValueError(f"OCCUPANTS must name exactly two different parties, got {occupants!r}.")

    rate_payer = env.get("RATE_PAYING_OCCUPANT", occupants[1]).strip()
    if rate_payer not in occupants:
        raise ValueError(f"RATE_PAYING_OCCUPANT {rate_payer!r} is not one of {occupants!r}.")

    daily_rate = float(env.get("DAILY_RATE", "2.5"))
    monthly_rent = float(env.get("MONTHLY_RENT", "50"))
    if daily_rate < 0 or monthly_rent < 0:
        raise ValueError("DAILY_RATE and MONTHLY_RENT must not be negative.")

    return BillingTerms(
        daily_rate=daily_rate,
        monthly_rent=monthly_rent,
        contract_start=parse_date(env.get("CONTRACT_START_DATE", "2025-11-10")),
        occupants=occupants,
        rate_payer=rate_payer,
        currency=env.get("CURRENCY", "CHF"),
    )


TERMS = load_terms()


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
