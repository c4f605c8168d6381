"""
Outbound hand-off to the support Telegram account.

After checkout the customer gets a deep link carrying a pre-filled order
message. Nothing here tracks delivery: the order is already committed before
the link is built.
"""

import logging
import webbrowser
from datetime import datetime
from typing import Callable
from urllib.parse import quote

from pricing import format_usd
from schemas import Order, SystemConfig

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 32


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%H:%M:%S %d/%m/%Y")


def order_message(order: Order) -> str:
    lines = [
        f"🔥 ĐƠN HÀNG MỚI {order.display_code}",
        SEPARATOR,
        f"👤 Khách: {order.customer_name}",
        f"📞 LH: {order.contact_method.value} - {order.contact_value}",
    ]
    if order.delivery_address:
        lines.append(f"📍 Đ/C: {order.delivery_address}")
    lines.append(SEPARATOR)
    for idx, item in enumerate(order.items, start=1):
        lines.append(f"{idx}. {item.name} (x{item.quantity}) - {format_usd(item.line_total)}")
        if item.selected_toppings:
            lines.append("   + " + ", ".join(t.name for t in item.selected_toppings))
        if item.note:
            lines.append(f"   Note: {item.note}")
    lines += [
        SEPARATOR,
        f"💰 TỔNG CỘNG: {format_usd(order.total_amount)}",
        f"⏰ Thời gian: {format_timestamp(order.created_at)}",
    ]
    return "\n".join(lines)


def telegram_link(order: Order, config: SystemConfig) -> str:
    return f"https://t.me/{config.telegram_username}?text={quote(order_message(order), safe='')}"


def open_handoff(order: Order, config: SystemConfig,
                 opener: Callable[[str], bool] = webbrowser.open) -> bool:
    """Try to open the deep link. Failures are reported, the order is untouched."""
    link = telegram_link(order, config)
    try:
        opened = bool(opener(link))
    except Exception:
        logger.exception("could not open hand-off link for order %s", order.id)
        return False
    if not opened:
        logger.warning("hand-off link for order %s was not opened", order.id)
    return opened
