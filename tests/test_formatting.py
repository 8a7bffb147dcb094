from alfajr.formatting import (
    customer_line,
    customer_list,
    format_bytes,
    orders_text,
    profile_text,
    stats_text,
)
from alfajr.models import Customer


def test_format_bytes():
    assert format_bytes(0) == "0 Bytes"
    assert format_bytes(1000) == "1000 Bytes"
    assert format_bytes(1024) == "1 KB"
    assert format_bytes(1536) == "1.5 KB"
    assert format_bytes(5 * 1024 * 1024) == "5 MB"


def test_customer_line_truncates_long_notes():
    customer = Customer.create("Ahmad", "0700", customer_id="12345678")
    customer.notes = "x" * 60
    line = customer_line(customer)
    assert line.startswith("[1234] Ahmad - 0700")
    assert "/show_12345678" in line
    assert ("x" * 50 + "...") in line
    assert ("x" * 51) not in line


def test_customer_line_placeholders():
    customer = Customer(id="", name="", phone="")
    assert customer_line(customer).startswith("[----] بدون نام - بدون شماره")


def test_empty_list_text():
    assert customer_list([], empty_text="none") == "none"


def test_profile_contains_sections():
    customer = Customer.create("Ahmad", "0700", customer_id="12345678")
    customer.set_measurement("قد", "44")
    customer.set_yakhun("ملی")
    customer.set_price("1500")
    customer.add_order("two shirts")
    text = profile_text(customer)
    assert "12345678" in text
    assert "قد: 44" in text
    assert "یخن: ملی" in text
    assert "1500 افغانی" in text
    assert "two shirts" in text


def test_orders_text_empty():
    assert orders_text(Customer.create("Ahmad", "0700")) == "هیچ سفارشی"


def test_stats_text():
    text = stats_text({"total_customers": 3, "total_orders": 5, "db_size": 2048})
    assert "مشتریان: 3" in text
    assert "سفارش‌ها: 5" in text
    assert "2 KB" in text
