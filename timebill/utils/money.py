from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from timebill.core.exceptions import BusinessException

CENT = Decimal("0.01")
MINUTES_PER_HOUR = Decimal(60)


def to_decimal(value: Any) -> Decimal:
    """Coerce DB/float/int values to Decimal without binary float artifacts."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Any) -> Decimal:
    """Round to two places, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def amount_for_minutes(total_minutes: int, hourly_rate: Any) -> Decimal:
    """(minutes / 60) * rate, rounded to cents."""
    return round_money(Decimal(int(total_minutes)) * to_decimal(hourly_rate) / MINUTES_PER_HOUR)


def require_hourly_rate(client: Any) -> Decimal:
    rate: Optional[Any] = getattr(client, "hourly_rate", None)
    if rate is None:
        raise BusinessException(
            f"Client {client.id} has no hourly rate",
            code="missing_hourly_rate",
            details={"client_id": client.id},
        )
    return to_decimal(rate)
