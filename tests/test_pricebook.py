import pytest

from conftest import FlakyStore, ListSource, RecordingNotifier

from famprice.errors import ValidationError
from famprice.models import AppState, ProductInput
from famprice.pricebook import PriceBook
from famprice.ranking import describe_quantities, format_unit_price


def _toilet(name="エリエール", price=400, **kwargs):
    values = {"length": 30, "multiplier": 2, "rolls": 8}
    values.update(kwargs)
    return ProductInput(name=name, price=price, category="toilet", **values)


def _tissue(name="ネピア", price=300, **kwargs):
    values = {"pairs_per_box": 150, "boxes": 5}
    values.update(kwargs)
    return ProductInput(name=name, price=price, category="tissue", **values)


def test_add_toilet(book, store, notifier):
    product = book.add(_toilet(store="イオン"))

    assert product.id == "1"
    assert product.total_amount == 480
    assert product.price_per_unit == 0.833
    assert product.unit == "m"
    assert product.registered_at.endswith("Z")
    assert notifier.toasts == ["追加しました ✓"]

    saved = store.load_all()[0]
    assert saved["store"] == "イオン"
    assert "id" not in store._records["1"]


def test_add_defaults_multiplier_to_one(book):
    product = book.add(_toilet(multiplier=None, price=360, rolls=12))
    assert product.multiplier == 1
    assert product.total_amount == 360
    assert product.price_per_unit == 1.0


def test_add_requires_name_and_price(book, store, notifier):
    assert book.add(_toilet(name="  ")) is None
    assert book.add(_toilet(price=None)) is None
    assert notifier.toasts == ["商品名と価格を入力してください"] * 2
    assert store.load_all() == []


def test_add_rejects_zero_length(book, store, notifier):
    assert book.add(_toilet(length=0)) is None
    assert notifier.toasts == ["長さを入力してください"]
    assert book.products == []


def test_add_rejects_zero_boxes(book, notifier):
    assert book.add(_tissue(boxes=0)) is None
    assert notifier.toasts == ["必要な項目を入力してください"]


def test_add_requires_user(store):
    notifier = RecordingNotifier()
    book = PriceBook(store, notifier, AppState(user_id=None))
    assert book.add(_toilet()) is None
    assert notifier.toasts == ["ログインしてください"]


def test_add_save_failure():
    notifier = RecordingNotifier()
    book = PriceBook(FlakyStore(), notifier, AppState(user_id="u"))
    assert book.add(_tissue()) is None
    assert notifier.toasts == ["保存に失敗しました"]
    assert book.products == []


def test_edit_recalculates_and_keeps_registered_at(book, store, notifier):
    product = book.add(_toilet())
    registered_at = product.registered_at

    updated = book.edit(product.id, _toilet(price=480, multiplier=1))

    assert updated.price_per_unit == 2.0
    assert updated.total_amount == 240
    assert updated.registered_at == registered_at
    assert book.products == [updated]
    assert store.load_all()[0]["pricePerUnit"] == 2.0
    assert store.load_all()[0]["registeredAt"] == registered_at
    assert notifier.toasts[-1] == "更新しました ✓"


def test_edit_keeps_category(book):
    product = book.add(_tissue())
    updated = book.edit(product.id, ProductInput(
        name="ネピア", price=600, category="toilet", pairs_per_box=150, boxes=5,
    ))
    assert updated.category == "tissue"
    assert updated.price_per_unit == 0.8


def test_edit_invalid_input_changes_nothing(book, notifier):
    product = book.add(_toilet())
    assert book.edit(product.id, _toilet(rolls=0)) is None
    assert notifier.toasts[-1] == "必要な項目を入力してください"
    assert book.products[0].price_per_unit == 0.833


def test_delete(store, notifier):
    notifier.answers = [True]
    book = PriceBook(store, notifier, AppState(user_id="u"))
    product = book.add(_toilet())

    assert book.delete(product.id) is True
    assert book.products == []
    assert store.load_all() == []
    assert notifier.confirms == ["削除しますか？"]


def test_delete_cancelled(book, notifier):
    product = book.add(_toilet())
    assert book.delete(product.id) is False
    assert len(book.products) == 1


def test_clear_category(store, notifier):
    book = PriceBook(store, notifier, AppState(user_id="u"))
    book.add(_toilet())
    book.add(_toilet(name="スコッティ"))
    book.add(_tissue())
    notifier.answers = [True]

    assert book.clear_category("toilet") == 2
    assert notifier.confirms == ["トイレットペーパーのデータを全て削除しますか？"]
    assert [p.category for p in book.products] == ["tissue"]
    assert [r["category"] for r in store.load_all()] == ["tissue"]


def test_clear_empty_category(book, notifier):
    assert book.clear_category("tissue") == 0
    assert notifier.toasts == ["削除する商品がありません"]
    assert notifier.confirms == []


def test_load_normalizes_and_drops_kitchen(store, notifier):
    store.save({"name": "旧", "price": 400, "category": "toilet", "pricePerMeter": 0.85})
    store.save({"name": "台所", "price": 200, "category": "kitchen"})
    store.save({"name": "新", "price": 300, "category": "tissue", "pairsPerBox": 150, "boxes": 5})
    book = PriceBook(store, notifier, AppState(user_id="u"))

    products = book.load()

    assert [p.name for p in products] == ["旧", "新"]
    assert products[0].price_per_unit == 0.85
    assert products[1].price_per_unit == 0.4


def test_load_failure_starts_empty():
    notifier = RecordingNotifier()
    book = PriceBook(FlakyStore(fail_ops=("load",)), notifier, AppState(user_id="u"))
    assert book.load() == []
    assert notifier.toasts == ["データの読み込みに失敗しました"]


def test_ranking_uses_active_category(book):
    book.add(_toilet(name="高い", price=800))
    book.add(_toilet(name="安い", price=300))
    book.add(_tissue())

    assert [r.product.name for r in book.ranking()] == ["安い", "高い"]
    book.select_category("tissue")
    assert [r.product.name for r in book.ranking()] == ["ネピア"]


def test_select_unknown_category(book):
    with pytest.raises(ValidationError):
        book.select_category("kitchen")


def test_store_suggestions(book):
    book.add(_toilet(store="イオン"))
    book.add(_toilet(name="B", store="ウエルシア"))
    book.add(_toilet(name="C", store="イオン"))
    book.add(_toilet(name="D", store=" "))
    book.add(_toilet(name="E", store="AEON Style"))

    assert book.store_suggestions() == ["イオン", "ウエルシア", "AEON Style"]
    assert book.store_suggestions("aeon") == ["AEON Style"]


def test_migrate_legacy_appends_to_working_set(store):
    notifier = RecordingNotifier(answers=[True])
    source = ListSource([{"name": "旧", "price": 400, "length": 30, "multiplier": 2, "rolls": 8}])
    book = PriceBook(store, notifier, AppState(user_id="u"), legacy_sources=[source])

    result = book.migrate_legacy()

    assert result.migrated == 1
    assert [r.product.name for r in book.ranking("toilet")] == ["旧"]
    assert book.products[0].price_per_unit == 0.833


def test_load_accepts_numeric_strings(store, notifier):
    store.save({"name": "旧", "price": "400", "category": "toilet", "pricePerUnit": "0.833"})
    store.save({"name": "新", "price": 300, "category": "toilet", "pricePerUnit": 0.5, "unit": "m"})
    book = PriceBook(store, notifier, AppState(user_id="u"))

    book.load()
    ranked = book.ranking("toilet")

    assert [r.product.name for r in ranked] == ["新", "旧"]
    assert [r.rank for r in ranked] == [1, 2]
    old = ranked[1].product
    assert old.price == 400.0
    assert old.price_per_unit == 0.833
    assert format_unit_price(old) == "0.83 円/m"
    assert describe_quantities(old).startswith("¥400")


def test_edit_drops_legacy_fields(store, notifier):
    store.save({
        "name": "旧ネピア", "price": 300, "category": "tissue",
        "sheetsPerBox": 300, "boxes": 5, "pricePerUnit": 0.2, "unit": "枚",
    })
    book = PriceBook(store, notifier, AppState(user_id="u"))
    product = book.load()[0]

    updated = book.edit(product.id, _tissue(price=600))

    assert updated.sheets_per_box is None
    assert updated.unit == "組"
    assert updated.id == product.id
    assert book.products[0].to_dict() == store.load_all()[0]
