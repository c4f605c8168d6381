# Fixed-width text receipt for the kitchen printer. Read-only over one order.

import textwrap
from typing import List

from handoff import format_timestamp
from pricing import format_price_for, format_usd
from schemas import Order, SystemConfig

RECEIPT_WIDTH = 32


def _center(text: str, width: int) -> List[str]:
    return [line.center(width).rstrip() for line in textwrap.wrap(text, width) or [""]]


def _row(left: str, right: str, width: int) -> List[str]:
    room = width - len(right) - 1
    wrapped = textwrap.wrap(left, room) or [""]
    lines = [wrapped[0].ljust(room) + " " + right]
    lines += wrapped[1:]
    return lines


def render_receipt(order: Order, config: SystemConfig, width: int = RECEIPT_WIDTH) -> str:
    rule = "-" * width
    lines: List[str] = []
    lines += _center(config.store_name.upper(), width)
    lines += _center(config.store_address, width)
    lines += _center(f"Hotline: {config.store_phone}", width)
    lines.append(rule)

    lines.append("HÓA ĐƠN THANH TOÁN")
    lines.append(f"Mã ĐH: {order.display_code}")
    lines.append(f"Ngày: {format_timestamp(order.created_at)}")
    if order.customer_name:
        lines += textwrap.wrap(f"Khách: {order.customer_name}", width)
    if order.contact_value:
        lines += textwrap.wrap(f"LH: {order.contact_value}", width)
    if order.delivery_address:
        lines += textwrap.wrap(f"Đ/C: {order.delivery_address}", width)
    lines.append(rule)

    for item in order.items:
        lines += _row(f"{item.quantity}x {item.name}", format_usd(item.line_total), width)
        if item.selected_toppings:
            lines += textwrap.wrap("+ " + ", ".join(t.name for t in item.selected_toppings), width,
                                   initial_indent="  ", subsequent_indent="    ")
        if item.note:
            lines += textwrap.wrap(f"({item.note})", width, initial_indent="  ", subsequent_indent="  ")
    lines.append(rule)

    prices = format_price_for(config, order.total_amount)
    lines += _row("TỔNG USD:", prices.usd, width)
    lines += _row("Quy đổi KHR:", prices.khr, width)
    lines += _row("Quy đổi VND:", prices.vnd, width)
    lines.append("")
    lines += _center("Cảm ơn quý khách đã ủng hộ!", width)
    lines += _center("Hẹn gặp lại!", width)
    return "\n".join(lines)
