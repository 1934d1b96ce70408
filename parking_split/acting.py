# acting.py
# Which party a caller acts as. There are no accounts: the choice is a cookie
# the caller sets for themselves, and either party may be chosen.
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from pydantic import BaseModel

from parking_split.config import TERMS
from parking_split.data_models import BillingTerms

ACTING_COOKIE = "acting_as"


class ActingAs(BaseModel):
    occupant: str


def get_terms() -> BillingTerms:
    return TERMS


# Used by API calls and page loads alike
async def get_acting_occupant(
    acting_as: Optional[str] = Cookie(None),
    terms: BillingTerms = Depends(get_terms),
) -> str:
    if acting_as is None:
        return terms.occupants[0]
    if acting_as not in terms.occupants:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown party {acting_as!r}.",
        )
    return acting_as
