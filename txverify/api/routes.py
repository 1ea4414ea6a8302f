"""Payment verification routes."""

from decimal import Decimal
from functools import lru_cache
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from ..config import get_settings
from ..engine import VerificationEngine, build_engine
from ..logging_config import get_logger
from ..models import VerificationRequest
from .auth import CurrentCaller
from .rate_limit import limiter, verify_rate_limit

logger = get_logger("txverify.api.payments")

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


class VerifyRequest(BaseModel):
    """Caller's claim: this transaction paid this amount in this currency."""

    transaction_id: str = Field(..., alias="transactionId")
    currency: str
    expected_amount: Decimal = Field(..., alias="expectedAmount")

    class Config:
        populate_by_name = True


class VerifyResponse(BaseModel):
    verified: bool
    confirmations: int
    status: Literal["confirmed", "pending", "failed"]
    message: str


@lru_cache
def get_engine() -> VerificationEngine:
    """Engine singleton built from settings at first use."""
    return build_engine(get_settings())


Engine = Annotated[VerificationEngine, Depends(get_engine)]


@router.post("/verify", response_model=VerifyResponse)
@limiter.limit(verify_rate_limit)
async def verify_payment(
    request: Request,
    body: VerifyRequest,
    caller: CurrentCaller,
    engine: Engine,
):
    """
    Verify an on-chain payment by transaction id.

    Always answers 200 once the evaluation completes, including "failed"
    verdicts; "pending" verdicts should be polled again later.
    """
    verdict = await engine.verify(
        VerificationRequest(
            transaction_id=body.transaction_id,
            currency=body.currency,
            expected_amount=body.expected_amount,
        ),
        caller_id=caller.caller_id,
    )
    return VerifyResponse(**verdict.to_dict())
