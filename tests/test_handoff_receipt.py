from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

from handoff import open_handoff, order_message, telegram_link
from receipt import render_receipt
from schemas import ContactMethod
from seed import default_config
from conftest import make_item, make_order


def _order():
    items = [make_item(price=2.5, quantity=2, topping_prices=[0.5]), make_item(price=1.0, name="Bánh Plan")]
    items[1].note = "không đường"
    return make_order(
        items,
        id="k3m9abcd1",
        created_at=datetime(2026, 3, 5, 14, 30, 0, tzinfo=timezone.utc),
        contact_method=ContactMethod.TELEGRAM,
        contact_value="@lan",
        delivery_address="12 Lê Lợi",
    )


def test_order_message_contents():
    text = order_message(_order())
    assert text.startswith("🔥 ĐƠN HÀNG MỚI #BCD1")
    assert "👤 Khách: Lan" in text
    assert "📞 LH: Telegram - @lan" in text
    assert "📍 Đ/C: 12 Lê Lợi" in text
    assert "1. Trà Sữa (x2) - $6.00" in text
    assert "   + topping 0" in text
    assert "   Note: không đường" in text
    assert "💰 TỔNG CỘNG: $7.00" in text
    assert "⏰ Thời gian: 14:30:00 05/03/2026" in text


def test_telegram_link_round_trips_message():
    order = _order()
    link = telegram_link(order, default_config())
    parsed = urlparse(link)
    assert parsed.netloc == "t.me"
    assert parsed.path == "/SupportFoodExpress"
    assert parse_qs(parsed.query)["text"][0] == order_message(order)


def test_open_handoff_failure_is_reported():
    def broken(url):
        raise OSError("no browser")

    assert open_handoff(_order(), default_config(), opener=broken) is False
    assert open_handoff(_order(), default_config(), opener=lambda url: True) is True


def test_receipt_layout():
    text = render_receipt(_order(), default_config())
    lines = text.splitlines()
    assert all(len(line) <= 32 for line in lines)
    assert lines[0].strip() == "FOODEXPRESS"
    assert "Mã ĐH: #BCD1" in lines
    assert any(line.startswith("2x Trà Sữa") and line.endswith("$6.00") for line in lines)
    assert any(line.startswith("TỔNG USD:") and line.endswith("$7.00") for line in lines)
    assert any(line.endswith("28,700៛") for line in lines)
    assert any(line.endswith("175,000₫") for line in lines)
    assert "(không đường)" in text
