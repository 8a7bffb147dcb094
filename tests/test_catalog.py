import pytest

from alfajr.catalog import (
    DELIVERY_DAYS,
    MEASUREMENT_FIELDS,
    YAKHUN_MODELS,
    field_label,
    numbered,
    resolve_measurement_field,
    resolve_option,
)
from alfajr.errors import ValidationError


def test_shop_vocabularies_have_expected_sizes():
    assert len(MEASUREMENT_FIELDS) == 17
    assert len(YAKHUN_MODELS) == 7
    assert len(DELIVERY_DAYS) == 7
    assert MEASUREMENT_FIELDS[0] == "قد"


def test_resolve_option_by_name_and_index():
    assert resolve_option("ملی", YAKHUN_MODELS) == "ملی"
    assert resolve_option("  آف   دار ", YAKHUN_MODELS) == "آف دار"
    assert resolve_option("2", YAKHUN_MODELS) == "چپه یخن"
    assert resolve_option("۳", YAKHUN_MODELS) == "پاکستانی"


def test_resolve_option_ignores_zero_width_non_joiner():
    assert resolve_option("سهشنبه", DELIVERY_DAYS) == "سه‌شنبه"


@pytest.mark.parametrize("value", ["", "0", "99", "گرد"])
def test_resolve_option_rejects_unknown(value):
    with pytest.raises(ValidationError):
        resolve_option(value, YAKHUN_MODELS)


def test_measurement_field_accepts_spaces():
    assert resolve_measurement_field("دور سینه") == "دور_سینه"
    assert resolve_measurement_field("قد") == "قد"
    with pytest.raises(ValidationError):
        resolve_measurement_field("کمر")


def test_field_label_and_numbering():
    assert field_label("دم_پاچه") == "دم پاچه"
    assert numbered(["a", "b"]) == "1. a\n2. b"
