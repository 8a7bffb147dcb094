from alfajr.labels import LabelBuilder, render_label_html, render_label_text
from alfajr.models import Customer


def make_customer() -> Customer:
    customer = Customer.create("Ahmad <b>", "0700", customer_id="12345678")
    customer.set_measurement("قد", "44")
    customer.set_yakhun("ملی")
    customer.set_price("1500")
    return customer


def test_html_label_is_rtl_and_escaped():
    html = render_label_html(make_customer())
    assert 'dir="rtl"' in html
    assert "Ahmad &lt;b&gt;" in html
    assert "<b>" not in html.split("<body", 1)[1]
    assert "1500 افغانی" in html
    assert "ملی" in html


def test_blank_values_render_as_dash():
    text = render_label_text(Customer.create("Ahmad", "0700"))
    assert "آستین: -" in text
    assert "قیمت: -" in text


def test_zero_price_renders_as_dash():
    customer = Customer.create("Ahmad", "0700")
    customer.set_price("0")
    assert "قیمت: -" in render_label_text(customer)
    assert "0 افغانی" not in render_label_html(customer)


def test_builder_writes_file(tmp_path):
    builder = LabelBuilder(tmp_path / "labels")
    path = builder.build(make_customer())
    assert path.name == "label-12345678.html"
    assert "ملی" in path.read_text(encoding="utf-8")
