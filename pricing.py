from decimal import ROUND_FLOOR, Decimal
from typing import Iterable, NamedTuple

from schemas import CartItem, SystemConfig

KHR_STEP = 100
VND_STEP = 1000
KHR_SYMBOL = "៛"
VND_SYMBOL = "₫"


class PriceDisplay(NamedTuple):
    usd: str
    khr: str
    vnd: str
    combined: str


def _round_to_step(amount: float, rate: float, step: int) -> int:
    # half-way values round toward +infinity: floor(x / step + 0.5) * step
    value = Decimal(str(amount)) * Decimal(str(rate)) / step
    return int((value + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)) * step


def format_usd(amount: float) -> str:
    return f"${amount:.2f}"


def format_price(usd_amount: float, khr_rate: float, vnd_rate: float) -> PriceDisplay:
    """Render a USD amount as USD, Riel (nearest 100) and Dong (nearest 1000)."""
    usd = format_usd(usd_amount)
    khr = f"{_round_to_step(usd_amount, khr_rate, KHR_STEP):,}{KHR_SYMBOL}"
    vnd = f"{_round_to_step(usd_amount, vnd_rate, VND_STEP):,}{VND_SYMBOL}"
    return PriceDisplay(usd=usd, khr=khr, vnd=vnd, combined=f"{usd} / {khr} / {vnd}")


def format_price_for(config: SystemConfig, usd_amount: float) -> PriceDisplay:
    return format_price(usd_amount, config.exchange_rate_khr, config.exchange_rate_vnd)

# --------------
# Order totals
# --------------

def line_total(item: CartItem) -> float:
    return item.line_total


def calc_order_total(items: Iterable[CartItem]) -> float:
    return round(sum(line_total(i) for i in items), 2)


def totals_match(expected: float, actual: float) -> bool:
    return abs(round(expected, 2) - round(actual, 2)) < 0.005
