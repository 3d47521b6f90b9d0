"""LTV affordability calculator.

Two variants share the same math:
    compute_affordability     loan fixed at the LTV ceiling (standalone calculator)
    compute_range_allocation  user-chosen capital/loan split, floored at the ceiling

All amounts are in whatever unit the caller supplies (the app uses 억원).
"""

from imjang.config import settings
from imjang.engine.debt import annuity_payment, total_interest
from imjang.engine.validation import InvalidInputError
from imjang.models.loan import LoanInputs, LoanResult, LoanTerms, LtvRegime, RangeAllocation

REGULATED_LTV = 0.40
UNREGULATED_LTV = 0.70
LTV_RATES = (REGULATED_LTV, UNREGULATED_LTV)

DEFAULT_ASSET_SHARE = 0.6


def ltv_rate_for(regime: LtvRegime) -> float:
    return REGULATED_LTV if regime is LtvRegime.REGULATED else UNREGULATED_LTV


def ltv_rate_for_buyer(is_first_time_buyer: bool) -> float:
    """LTV used by the range slider: first-time buyers get the relaxed ceiling."""
    return UNREGULATED_LTV if is_first_time_buyer else REGULATED_LTV


def ltv_rate_from_percent(percent: int | float) -> float:
    """Map a stored 40/70 percentage onto an exact ceiling."""
    rate = percent / 100
    for allowed in LTV_RATES:
        if abs(rate - allowed) < 1e-9:
            return allowed
    raise InvalidInputError("ltv_rate", f"must be 40 or 70, got {percent}")


def _check_ltv(ltv_rate: float) -> None:
    if ltv_rate not in LTV_RATES:
        raise InvalidInputError("ltv_rate", f"must be one of {LTV_RATES}, got {ltv_rate}")


def compute_affordability(
    asset: float,
    price: float,
    ltv_rate: float,
    terms: LoanTerms | None = None,
) -> LoanResult:
    """Maximum loan, down payment, shortfall and monthly payment for a purchase.

    Args:
        asset: Capital the buyer already has (>= 0)
        price: Property price (> 0, validated upstream)
        ltv_rate: 0.40 or 0.70
        terms: Rate and term; defaults to settings.calculator_terms() (4% over 30 years)
    """
    _check_ltv(ltv_rate)
    terms = terms or settings.calculator_terms()

    max_loan_amount = price * ltv_rate
    down_payment = price - max_loan_amount
    additional_fund_needed = max(0.0, down_payment - asset)
    payment = annuity_payment(max_loan_amount, terms.monthly_rate, terms.months)

    return LoanResult(
        asset=asset,
        price=price,
        ltv_rate=ltv_rate,
        max_loan_amount=max_loan_amount,
        down_payment=down_payment,
        additional_fund_needed=additional_fund_needed,
        monthly_payment=payment,
        terms=terms,
    )


def compute_from_inputs(inputs: LoanInputs, terms: LoanTerms | None = None) -> LoanResult:
    """Resolve the LTV ceiling from the regime (first-time buyers relax it) and compute."""
    if inputs.is_first_time_buyer:
        ltv_rate = UNREGULATED_LTV
    else:
        ltv_rate = ltv_rate_for(inputs.ltv_regime)
    return compute_affordability(inputs.principal_asset, inputs.property_price, ltv_rate, terms)


def compute_range_allocation(
    price: float,
    asset: float,
    ltv_rate: float,
    terms: LoanTerms | None = None,
) -> RangeAllocation:
    """Split a purchase into capital and loan from the slider's asset amount.

    The loan never drops below the LTV ceiling amount, even when the chosen
    asset would cover more of the price.
    """
    _check_ltv(ltv_rate)
    terms = terms or settings.range_terms()

    max_loan_amount = price * ltv_rate
    actual_asset = min(asset, price)
    actual_loan_amount = max(max_loan_amount, price - actual_asset)

    asset_ratio = actual_asset / price * 100
    loan_ratio = actual_loan_amount / price * 100

    payment = annuity_payment(actual_loan_amount, terms.monthly_rate, terms.months)

    return RangeAllocation(
        price=price,
        ltv_rate=ltv_rate,
        max_loan_amount=max_loan_amount,
        actual_asset=actual_asset,
        actual_loan_amount=actual_loan_amount,
        asset_ratio=min(100.0, max(0.0, asset_ratio)),
        loan_ratio=min(100.0, max(0.0, loan_ratio)),
        monthly_payment=payment,
        total_interest=total_interest(payment, terms.months, actual_loan_amount),
        terms=terms,
    )


def asset_for_slider(price: float, percent: float) -> float:
    """Asset amount for a slider position given as percent of the price."""
    percent = min(100.0, max(0.0, percent))
    return min(price, price * percent / 100)


def default_range_asset(price: float, current_asset: float | None = None) -> float:
    """Starting slider asset: the user's known capital, else 60% of the price."""
    return current_asset or price * DEFAULT_ASSET_SHARE
