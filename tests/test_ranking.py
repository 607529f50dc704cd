import pytest

from famprice.errors import IncompleteRecordError
from famprice.models import Product
from famprice.ranking import (
    badge_for,
    describe_quantities,
    format_registered_date,
    format_unit_price,
    rank_products,
)


def _product(pid, ppu, category="toilet", **kwargs):
    return Product(id=pid, name=pid, category=category, price_per_unit=ppu, **kwargs)


def test_stable_sort_for_ties():
    products = [_product("C", 0.9), _product("A", 0.5), _product("B", 0.5)]

    ranked = rank_products(products, "toilet")

    assert [r.product.id for r in ranked] == ["A", "B", "C"]
    assert [r.rank for r in ranked] == [1, 2, 3]
    assert ranked[0].badge == "🏆 最安"
    assert ranked[0].badge_class == "gold"
    assert ranked[1].badge == "2位"


def test_filters_by_category():
    products = [_product("T", 0.5), _product("S", 0.3, category="tissue")]
    assert [r.product.id for r in rank_products(products, "tissue")] == ["S"]


def test_badges():
    assert badge_for(1) == ("🏆 最安", "gold")
    assert badge_for(2) == ("2位", "silver")
    assert badge_for(3) == ("3位", "bronze")
    assert badge_for(4) == ("4位", "normal")
    assert badge_for(12) == ("12位", "normal")


def test_legacy_price_per_meter_is_used_for_sorting():
    products = [
        _product("new", 0.7),
        Product(id="old", name="old", category="toilet", price_per_meter=0.6),
    ]
    ranked = rank_products(products, "toilet")
    assert [r.product.id for r in ranked] == ["old", "new"]
    assert ranked[0].unit_price == 0.6


def test_incomplete_records_go_last_without_rank():
    products = [
        _product("missing", None),
        _product("zero", 0),
        _product("cheap", 0.4),
        _product("dear", 0.8),
    ]

    ranked = rank_products(products, "toilet")

    assert [r.product.id for r in ranked] == ["cheap", "dear", "missing", "zero"]
    assert [r.rank for r in ranked] == [1, 2, None, None]
    assert ranked[2].badge == "未計算"
    assert ranked[2].unit_price is None


def test_require_unit_price():
    with pytest.raises(IncompleteRecordError):
        _product("x", None).require_unit_price()
    assert _product("y", 0.5).require_unit_price() == 0.5


def test_display_helpers():
    toilet = Product(
        category="toilet", price=1200, length=30, multiplier=2.0, rolls=8,
        price_per_unit=0.833, unit="m",
    )
    tissue = Product(category="tissue", price=300, sheets_per_box=150, boxes=5)

    assert describe_quantities(toilet) == "¥1,200 ・ 30m × 2倍 ・ 8本"
    assert describe_quantities(tissue) == "¥300 ・ 150組 ・ 5箱"
    assert format_unit_price(toilet) == "0.83 円/m"
    assert format_unit_price(Product(price_per_unit=0.4, unit="組")) == "0.40 円/組"


def test_registered_date():
    product = Product(registered_at="2025-06-15T03:00:00.000Z")
    assert format_registered_date(product) in ("6月15日", "6月14日")
    assert format_registered_date(Product()) == ""
    assert format_registered_date(Product(registered_at="not a date")) == ""
