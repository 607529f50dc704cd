"""商品の登録・編集・削除とランキング"""

import logging
from typing import Optional, Sequence

from .calculator import MSG_NAME_PRICE, calculate
from .errors import PersistenceError, ValidationError
from .migration import MigrationOrchestrator, MigrationResult
from .models import (
    CATEGORIES, CATEGORY_LABELS, TISSUE, TOILET,
    AppState, Product, ProductInput, now_iso,
)
from .normalizer import normalize_records
from .notify import Notifier
from .ranking import RankedProduct, rank_products
from .store.base import LegacySource, ProductStore

logger = logging.getLogger(__name__)


class PriceBook:
    """1ユーザー分の価格帳

    状態 (AppState) を持ち、保存先と通知先は外から渡す。
    """

    def __init__(
        self,
        store: ProductStore,
        notifier: Notifier,
        state: Optional[AppState] = None,
        legacy_sources: Sequence[LegacySource] = (),
    ):
        self.store = store
        self.notifier = notifier
        self.state = state or AppState()
        self.legacy_sources = list(legacy_sources)

    @property
    def products(self) -> list[Product]:
        return self.state.products

    # ── 読み込み ──

    def load(self) -> list[Product]:
        """保存先から全件読み込み、旧形式を補正して作業セットにする"""
        try:
            raw = self.store.load_all()
        except PersistenceError as e:
            logger.error("読み込みに失敗しました: %s", e)
            self.notifier.toast("データの読み込みに失敗しました")
            raw = []
        self.state.products = [Product.from_dict(r) for r in normalize_records(raw)]
        return self.state.products

    def select_category(self, category: str) -> None:
        if category not in CATEGORIES:
            raise ValidationError(f"不明なカテゴリです: {category}")
        self.state.category = category

    # ── 登録・編集 ──

    def _build(self, entry: ProductInput, category: str) -> dict:
        """入力値を検証して保存用レコードを作る。ValidationError を送出。"""
        name = (entry.name or "").strip()
        if not name or not entry.price:
            raise ValidationError(MSG_NAME_PRICE)

        record = {
            "name": name,
            "store": (entry.store or "").strip(),
            "price": entry.price,
            "memo": (entry.memo or "").strip(),
            "category": category,
        }

        if category == TOILET:
            multiplier = entry.multiplier or 1
            result = calculate(
                category, entry.price,
                length=entry.length, multiplier=multiplier, rolls=entry.rolls,
            )
            record.update({
                "length": entry.length,
                "multiplier": multiplier,
                "rolls": entry.rolls,
            })
        elif category == TISSUE:
            result = calculate(
                category, entry.price,
                pairs_per_box=entry.pairs_per_box, boxes=entry.boxes,
            )
            record.update({
                "pairsPerBox": entry.pairs_per_box,
                "boxes": entry.boxes,
            })
        else:
            raise ValidationError(f"不明なカテゴリです: {category}")

        record.update({
            "totalAmount": result.total_amount,
            "pricePerUnit": result.price_per_unit,
            "unit": result.unit,
        })
        return record

    def _signed_in(self) -> bool:
        if self.state.user_id:
            return True
        self.notifier.toast("ログインしてください")
        return False

    def add(self, entry: ProductInput) -> Optional[Product]:
        """商品を登録する。失敗時はトーストを出して None。"""
        if not self._signed_in():
            return None

        try:
            record = self._build(entry, entry.category)
        except ValidationError as e:
            self.notifier.toast(str(e))
            return None
        record["registeredAt"] = now_iso()

        try:
            product_id = self.store.save(record)
        except PersistenceError as e:
            logger.error("保存に失敗しました: %s", e)
            self.notifier.toast("保存に失敗しました")
            return None

        product = Product.from_dict(record)
        product.id = product_id
        self.state.products.append(product)
        self.notifier.toast("追加しました ✓")
        return product

    def edit(self, product_id: str, entry: ProductInput) -> Optional[Product]:
        """既存の商品を入力値で置き換える。カテゴリと登録日時は変えない。"""
        current = self.state.find(product_id)
        if current is None:
            self.notifier.toast("商品が見つかりません")
            return None

        try:
            record = self._build(entry, current.category)
        except ValidationError as e:
            self.notifier.toast(str(e))
            return None
        if current.registered_at:
            record["registeredAt"] = current.registered_at

        try:
            self.store.update(product_id, record)
        except PersistenceError as e:
            logger.error("更新に失敗しました: %s", e)
            self.notifier.toast("更新に失敗しました")
            return None

        updated = Product.from_dict({**record, "id": product_id})
        index = self.state.products.index(current)
        self.state.products[index] = updated
        self.notifier.toast("更新しました ✓")
        return updated

    # ── 削除 ──

    def delete(self, product_id: str) -> bool:
        if not self.notifier.confirm("削除しますか？"):
            return False
        try:
            self.store.delete(product_id)
        except PersistenceError as e:
            logger.error("削除に失敗しました: %s", e)
            self.notifier.toast("削除に失敗しました")
            return False
        self.state.products = [p for p in self.state.products if p.id != product_id]
        self.notifier.toast("削除しました")
        return True

    def clear_category(self, category: Optional[str] = None) -> int:
        """カテゴリの商品を全て削除し、削除件数を返す"""
        if not self._signed_in():
            return 0

        category = category or self.state.category
        count = len(self.state.in_category(category))
        if count == 0:
            self.notifier.toast("削除する商品がありません")
            return 0

        label = CATEGORY_LABELS.get(category, category)
        if not self.notifier.confirm(f"{label}のデータを全て削除しますか？"):
            return 0
        try:
            self.store.delete_by_category(category)
        except PersistenceError as e:
            logger.error("一括削除に失敗しました: %s", e)
            self.notifier.toast("削除に失敗しました")
            return 0
        self.state.products = [p for p in self.state.products if p.category != category]
        self.notifier.toast("削除しました")
        return count

    # ── 表示 ──

    def ranking(self, category: Optional[str] = None) -> list[RankedProduct]:
        return rank_products(self.state.products, category or self.state.category)

    def store_suggestions(self, query: str = "") -> list[str]:
        """登録済みの店舗名（重複なし・登録順）を部分一致で絞り込む"""
        stores = []
        for product in self.state.products:
            store = product.store
            if store and store.strip() and store not in stores:
                stores.append(store)
        query = query.lower()
        return [s for s in stores if query in s.lower()]

    # ── 旧データ移行 ──

    def migrate_legacy(self) -> MigrationResult:
        orchestrator = MigrationOrchestrator(
            self.store, self.notifier, self.state, self.legacy_sources,
        )
        return orchestrator.run()
