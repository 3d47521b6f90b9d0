"""Level-payment amortization.

Pure functions: float in, float out. No I/O.
"""


def annuity_payment(principal: float, monthly_rate: float, months: int) -> float:
    """Fixed monthly installment that fully repays `principal` over `months`."""
    if months <= 0:
        raise ValueError(f"months must be positive, got {months}")
    if principal <= 0:
        return 0.0
    if monthly_rate == 0:
        return principal / months

    # M = P * [r(1+r)^n] / [(1+r)^n - 1]
    factor = (1 + monthly_rate) ** months
    return principal * monthly_rate * factor / (factor - 1)


def total_interest(payment: float, months: int, principal: float) -> float:
    """Interest paid over the life of the loan."""
    return payment * months - principal
