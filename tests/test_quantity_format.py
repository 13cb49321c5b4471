import pytest

from quantity_format import format_quantity, parse_quantity, scale_quantity


@pytest.mark.parametrize("value", [0, 0.125, 0.25, 0.33, 0.5, 0.625, 0.67, 0.75, 0.875, 1.5, 2.0])
def test_format_then_parse_returns_the_value(value):
    quantity, remainder = parse_quantity(format_quantity(value))
    assert remainder == ""
    assert abs(quantity - value) < 0.02


@pytest.mark.parametrize(
    "value, expected",
    [
        (1.0, "1"),
        (2.04, "2"),
        (0.5, "½"),
        (1.5, "1½"),
        (0.333, "⅓"),
        (2.25, "2¼"),
        (0.125, "⅛"),
        (0.9, "0.9"),
        (1.9, "1.9"),
    ],
)
def test_format_quantity_display(value, expected):
    assert format_quantity(value) == expected


def test_format_quantity_absorbs_float_drift():
    assert format_quantity(1 / 3) == "⅓"
    assert format_quantity(0.1 + 0.2 + 0.2) == "½"


def test_format_none_is_empty():
    assert format_quantity(None) == ""


def test_parse_whole_plus_ascii_fraction():
    assert parse_quantity("1 1/2 cups flour") == (1.5, "cups flour")


def test_parse_priority_glyph_then_ascii_fraction_then_number():
    assert parse_quantity("½ tsp salt") == (0.5, "tsp salt")
    assert parse_quantity("3/4 cup sugar") == (0.75, "cup sugar")
    assert parse_quantity("2½ cups milk") == (2.5, "cups milk")
    assert parse_quantity("1.5 kg beef") == (1.5, "kg beef")


def test_parse_without_leading_number_keeps_text():
    assert parse_quantity("salt to taste") == (None, "salt to taste")
    assert parse_quantity("") == (None, "")
    assert parse_quantity(None) == (None, "")


def test_scale_then_unscale_is_stable():
    quantity = 0.75
    for multiplier in (3, 0.5, 1.5, 4):
        scaled = scale_quantity(quantity, multiplier)
        assert round(scale_quantity(scaled, 1 / multiplier), 2) == 0.75


def test_scale_none_stays_none():
    assert scale_quantity(None, 2) is None
