"""Loan affordability data types."""

from dataclasses import dataclass
from enum import Enum


class LtvRegime(Enum):
    REGULATED = "regulated"      # designated region, 40% ceiling
    UNREGULATED = "unregulated"  # 70% ceiling


@dataclass(frozen=True)
class LoanTerms:
    annual_rate: float  # e.g. 0.04 for 4%
    term_years: int

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate / 12

    @property
    def months(self) -> int:
        return self.term_years * 12


@dataclass(frozen=True)
class LoanInputs:
    principal_asset: float
    property_price: float
    ltv_regime: LtvRegime
    is_first_time_buyer: bool = False


@dataclass(frozen=True)
class LoanResult:
    """Output of the standalone calculator. Amounts share the unit of the inputs."""
    asset: float
    price: float
    ltv_rate: float
    max_loan_amount: float
    down_payment: float
    additional_fund_needed: float
    monthly_payment: float
    terms: LoanTerms

    @property
    def is_affordable(self) -> bool:
        return self.additional_fund_needed == 0


@dataclass(frozen=True)
class RangeAllocation:
    """Capital/loan split chosen on a record's range slider."""
    price: float
    ltv_rate: float
    max_loan_amount: float
    actual_asset: float
    actual_loan_amount: float
    asset_ratio: float  # 0-100
    loan_ratio: float   # 0-100
    monthly_payment: float
    total_interest: float
    terms: LoanTerms

    @property
    def ltv_percent(self) -> int:
        return round(self.ltv_rate * 100)


@dataclass(frozen=True)
class LoanSnapshot:
    """What gets written to the calculation history."""
    current_asset: float
    apartment_price: float
    ltv_rate: int  # 40 | 70
    max_loan_amount: float

    @classmethod
    def from_result(cls, result: LoanResult) -> "LoanSnapshot":
        return cls(
            current_asset=result.asset,
            apartment_price=result.price,
            ltv_rate=round(result.ltv_rate * 100),
            max_loan_amount=result.max_loan_amount,
        )
