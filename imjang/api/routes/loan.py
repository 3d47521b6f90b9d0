"""Loan calculator routes."""

from fastapi import APIRouter, Depends, HTTPException

from imjang.api.deps import get_loan_history_store, get_side_channel
from imjang.api.schemas import (
    LoanCalculateRequest,
    LoanCalculationResponse,
    LoanResultResponse,
    RangeAllocationResponse,
    RangeRequest,
)
from imjang.config import settings
from imjang.core.session import Session
from imjang.data.base import LoanHistoryStore
from imjang.data.side_channel import BestEffortQueue
from imjang.engine.affordability import (
    asset_for_slider,
    compute_affordability,
    compute_range_allocation,
    default_range_asset,
    ltv_rate_for_buyer,
    ltv_rate_from_percent,
)
from imjang.engine.validation import InvalidInputError, validate_loan_request
from imjang.models.loan import LoanResult, LoanSnapshot, RangeAllocation

router = APIRouter(prefix="/api/v1/loan", tags=["loan"])


def result_to_response(result: LoanResult) -> LoanResultResponse:
    return LoanResultResponse(
        max_loan_amount=result.max_loan_amount,
        down_payment=result.down_payment,
        additional_fund_needed=result.additional_fund_needed,
        monthly_payment=result.monthly_payment,
        is_affordable=result.is_affordable,
        ltv_rate=round(result.ltv_rate * 100),
        annual_rate=result.terms.annual_rate,
        term_years=result.terms.term_years,
    )


def allocation_to_response(alloc: RangeAllocation) -> RangeAllocationResponse:
    return RangeAllocationResponse(
        price=alloc.price,
        ltv_percent=alloc.ltv_percent,
        max_loan_amount=alloc.max_loan_amount,
        actual_asset=alloc.actual_asset,
        actual_loan_amount=alloc.actual_loan_amount,
        asset_ratio=alloc.asset_ratio,
        loan_ratio=alloc.loan_ratio,
        monthly_payment=alloc.monthly_payment,
        total_interest=alloc.total_interest,
        annual_rate=alloc.terms.annual_rate,
        term_years=alloc.terms.term_years,
    )


def range_for_price(
    price: float,
    asset: float | None,
    slider_percent: float | None,
    is_first_time_buyer: bool,
) -> RangeAllocation:
    """Range-slider allocation; the first-time-buyer toggle only affects this view."""
    if slider_percent is not None:
        chosen = asset_for_slider(price, slider_percent)
    else:
        chosen = default_range_asset(price, asset)
    return compute_range_allocation(
        price, chosen, ltv_rate_for_buyer(is_first_time_buyer), settings.range_terms()
    )


@router.post("/calculate", response_model=LoanResultResponse)
async def calculate(
    req: LoanCalculateRequest,
    ctx: Session,
    history: LoanHistoryStore = Depends(get_loan_history_store),
    queue: BestEffortQueue = Depends(get_side_channel),
):
    """Standalone calculator: loan at the LTV ceiling, 30-year terms by default.

    The result is returned right away; saving it to the user's history runs in
    the background and never fails the request.
    """
    try:
        asset, price = validate_loan_request(req.asset, req.price)
        result = compute_affordability(
            asset, price, ltv_rate_from_percent(req.ltv_rate), settings.calculator_terms()
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    queue.submit(history.save(ctx, LoanSnapshot.from_result(result)), name="save-loan-calculation")
    return result_to_response(result)


@router.get("/history", response_model=list[LoanCalculationResponse])
async def history(
    ctx: Session,
    store: LoanHistoryStore = Depends(get_loan_history_store),
):
    """Most recent calculations of the signed-in user (empty when anonymous)."""
    rows = await store.recent(ctx, limit=settings.history_limit)
    return [LoanCalculationResponse.model_validate(r) for r in rows]


@router.post("/range", response_model=RangeAllocationResponse)
async def range_allocation(req: RangeRequest):
    """Capital/loan split for an arbitrary price."""
    alloc = range_for_price(req.price, req.asset, req.slider_percent, req.is_first_time_buyer)
    return allocation_to_response(alloc)
