"""CLI for the LTV loan calculator.

Usage:
    python -m imjang.loan_cli --asset 3.5 --price 15.5 --ltv 70
    python -m imjang.loan_cli --price 15.5 --range --slider 30 --first-time
    python -m imjang.loan_cli --asset 10 --price 15.5 --ltv 40 --term-years 20

Amounts are in 억원 (100,000,000 KRW).
"""

import argparse
import sys

from imjang.config import settings
from imjang.engine.affordability import (
    asset_for_slider,
    compute_affordability,
    compute_range_allocation,
    default_range_asset,
    ltv_rate_for_buyer,
    ltv_rate_from_percent,
)
from imjang.engine.validation import InvalidInputError, validate_loan_request
from imjang.models.loan import LoanResult, LoanTerms, RangeAllocation

MANWON_PER_EOK = 10000


def format_eok(amount: float) -> str:
    """3.25 -> '3억 2,500만원'."""
    manwon = round(amount * MANWON_PER_EOK)
    eok, rest = divmod(manwon, MANWON_PER_EOK)
    if eok == 0:
        return f"{rest:,}만원"
    if rest == 0:
        return f"{eok:,}억원"
    return f"{eok:,}억 {rest:,}만원"


def format_manwon(amount: float) -> str:
    """Monthly amounts: 0.0518 (억) -> '518만원'."""
    return f"{round(amount * MANWON_PER_EOK):,}만원"


def print_result(result: LoanResult) -> None:
    t = result.terms
    print(f"\n{'=' * 50}")
    print(f"  대출 계산 결과 (LTV {round(result.ltv_rate * 100)}%)")
    print(f"{'=' * 50}")
    print(f"  최대 대출 가능 금액:  {format_eok(result.max_loan_amount)}")
    print(f"  필요 자기자본:        {format_eok(result.down_payment)}")
    if result.additional_fund_needed > 0:
        print(f"  추가 필요 자금:       {format_eok(result.additional_fund_needed)}")
    print(f"  월 상환액 ({t.term_years}년, {t.annual_rate:.1%}):  {format_manwon(result.monthly_payment)}")
    print()
    if result.is_affordable:
        print("  현재 자산으로 구매 가능합니다.")
    else:
        print(f"  현재 자산으로는 부족합니다. 추가로 {format_eok(result.additional_fund_needed)}이 필요합니다.")
    print()


def print_allocation(alloc: RangeAllocation) -> None:
    t = alloc.terms
    print(f"\n{'=' * 50}")
    print(f"  자본금 / 대출금 배분 (LTV {alloc.ltv_percent}%)")
    print(f"{'=' * 50}")
    print(f"  자본금:    {format_eok(alloc.actual_asset)}  ({alloc.asset_ratio:.1f}%)")
    print(f"  대출금:    {format_eok(alloc.actual_loan_amount)}  ({alloc.loan_ratio:.1f}%)")
    print(f"  월납입금:  {format_manwon(alloc.monthly_payment)}  ({t.term_years}년)")
    print(f"  이자총액:  {format_eok(alloc.total_interest)}")
    print()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="LTV loan affordability calculator")
    parser.add_argument("--asset", default="", help="Current asset in 억원 (default: 0)")
    parser.add_argument("--price", required=True, help="Apartment price in 억원")
    parser.add_argument("--ltv", type=int, choices=[40, 70], default=70, help="LTV ceiling percent (default: 70)")
    parser.add_argument("--range", action="store_true", help="Show the capital/loan split instead")
    parser.add_argument("--slider", type=float, help="Slider position, percent of price paid in cash (range mode)")
    parser.add_argument("--first-time", action="store_true", help="First-time buyer, relaxed 70%% LTV (range mode)")
    parser.add_argument("--rate", type=float, default=settings.annual_interest_rate, help="Annual rate, e.g. 0.04")
    parser.add_argument("--term-years", type=int, help="Loan term in years")

    args = parser.parse_args(argv)

    try:
        asset, price = validate_loan_request(args.asset, args.price)
    except InvalidInputError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    if args.range:
        terms = LoanTerms(args.rate, args.term_years or settings.range_term_years)
        chosen = asset_for_slider(price, args.slider) if args.slider is not None else default_range_asset(price, asset)
        print_allocation(compute_range_allocation(price, chosen, ltv_rate_for_buyer(args.first_time), terms))
    else:
        terms = LoanTerms(args.rate, args.term_years or settings.calculator_term_years)
        print_result(compute_affordability(asset, price, ltv_rate_from_percent(args.ltv), terms))
    return 0


if __name__ == "__main__":
    sys.exit(main())
