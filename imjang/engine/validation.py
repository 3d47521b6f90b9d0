"""Input parsing for the calculator forms.

The calculator functions assume clean numbers; everything typed by a user
passes through here first.
"""

import math
import re

_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class InvalidInputError(ValueError):
    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


def parse_amount(raw: str | float | int | None) -> float:
    """Parse a free-text amount. Empty or unparsable input becomes 0.

    Mirrors browser parseFloat: the longest numeric prefix wins, so "3.5억"
    reads as 3.5.
    """
    if raw is None:
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        match = _NUMERIC_PREFIX.match(raw)
        if not match:
            return 0.0
        value = float(match.group(0))
    if not math.isfinite(value):
        return 0.0
    return value


def validate_loan_request(asset_raw, price_raw) -> tuple[float, float]:
    """Return (asset, price) or raise InvalidInputError."""
    asset = parse_amount(asset_raw)
    price = parse_amount(price_raw)

    if price == 0:
        raise InvalidInputError("price", "아파트 금액을 입력해주세요")
    if price < 0:
        raise InvalidInputError("price", "must be positive")
    if asset < 0:
        raise InvalidInputError("asset", "must not be negative")
    return asset, price
