"""旧データの移行

ローカルに残った旧データ（JSON配列・組み込みDB）を現在の保存先へ1回だけ移す。

- 移行前にユーザーへ確認する
- (name, price, category) が同じレコードは重複としてスキップ
- 保存に失敗したら中断し、旧データは消さない（再実行できるように）
- 保存済みのレコードは巻き戻さない
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import PersistenceError
from .models import KITCHEN, TOILET, AppState, Product, now_iso
from .normalizer import normalize_record
from .notify import Notifier
from .store.base import LegacySource, ProductStore

logger = logging.getLogger(__name__)

# 値があるときだけ引き継ぐ項目
OPTIONAL_KEYS = (
    "length", "multiplier", "rolls",
    "pairsPerBox", "sheetsPerBox", "boxes",
    "totalAmount", "unit", "pricePerUnit", "pricePerMeter",
)

STATUS_NOTHING = "nothing"
STATUS_MIGRATED = "migrated"
STATUS_DECLINED = "declined"
STATUS_CLEARED = "cleared"
STATUS_FAILED = "failed"


@dataclass
class MigrationResult:
    status: str
    found: int = 0
    migrated: int = 0
    skipped: int = 0
    error: Optional[str] = None


def build_migrated_record(legacy: dict, registered_at: Optional[str] = None) -> dict:
    """旧レコードから保存用のレコードを組み立てる"""
    record = {
        "name": legacy.get("name") or "名称不明",
        "store": legacy.get("store") or "",
        "price": legacy.get("price") or 0,
        "memo": legacy.get("memo") or "",
        "category": legacy.get("category") or TOILET,
        "registeredAt": legacy.get("registeredAt") or registered_at or now_iso(),
    }
    for key in OPTIONAL_KEYS:
        if legacy.get(key) is not None:
            record[key] = legacy[key]

    record = normalize_record(record)
    if record.get("pricePerUnit"):
        record.pop("pricePerMeter", None)
    return record


def confirm_message(count: int) -> str:
    return (
        "📦 旧データが見つかりました！\n\n"
        f"{count}件の商品データをクラウドに移行しますか？\n\n"
        "※移行後、ローカルデータは削除されます"
    )


class MigrationOrchestrator:
    """旧データ移行の実行役"""

    def __init__(
        self,
        store: ProductStore,
        notifier: Notifier,
        state: AppState,
        sources: Sequence[LegacySource],
    ):
        self.store = store
        self.notifier = notifier
        self.state = state
        self.sources = list(sources)

    def gather(self) -> list[dict]:
        """全ての旧データを順番に連結して返す"""
        records = []
        for source in self.sources:
            found = source.read()
            logger.debug("%s: %d 件", source.name, len(found))
            records.extend(found)
        return records

    def clear_sources(self) -> None:
        for source in self.sources:
            source.clear()

    def run(self) -> MigrationResult:
        legacy_records = self.gather()
        if not legacy_records:
            return MigrationResult(STATUS_NOTHING)

        found = len(legacy_records)
        if not self.notifier.confirm(confirm_message(found)):
            return self._declined(found)

        migrated = 0
        skipped = 0
        registered_at = now_iso()
        try:
            for legacy in legacy_records:
                if legacy.get("category") == KITCHEN:
                    skipped += 1
                    continue

                record = build_migrated_record(legacy, registered_at)
                product = Product.from_dict(record)
                if self._exists(product):
                    skipped += 1
                    continue

                product.id = self.store.save(record)
                self.state.products.append(product)
                migrated += 1
        except PersistenceError as e:
            detail = e.detail or str(e)
            logger.error("移行に失敗しました (%d 件移行済み): %s", migrated, detail)
            self.notifier.alert(
                f"❌ 移行エラー\n\n{detail}\n\n保存先の設定を確認してください"
            )
            self.notifier.toast("移行に失敗しました")
            return MigrationResult(STATUS_FAILED, found, migrated, skipped, detail)

        self.clear_sources()
        logger.info("移行完了: %d 件移行, %d 件スキップ", migrated, skipped)
        self.notifier.toast(f"✅ {migrated}件のデータを移行しました")
        return MigrationResult(STATUS_MIGRATED, found, migrated, skipped)

    def _exists(self, product: Product) -> bool:
        key = product.dedupe_key
        return any(p.dedupe_key == key for p in self.state.products)

    def _declined(self, found: int) -> MigrationResult:
        """移行しない場合も、次回また聞かれないように削除を提案する"""
        if self.notifier.confirm(
            "ローカルデータを削除しますか？\n（削除しないと次回も確認されます）"
        ):
            self.clear_sources()
            self.notifier.toast("ローカルデータを削除しました")
            return MigrationResult(STATUS_CLEARED, found)
        return MigrationResult(STATUS_DECLINED, found)
