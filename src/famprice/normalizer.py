"""保存レコードの正規化

古いスキーマで保存されたレコードを現行形式に補正する。

判定は優先順位つき（上が優先）:
1. 旧フィールド pricePerMeter をそのまま pricePerUnit に採用
2. price / totalAmount から再計算
3. トイレットペーパーの length × multiplier × rolls から再計算
4. ティッシュの pairsPerBox (旧 sheetsPerBox) × boxes から再計算
5. どれにも当たらなければ未計算のまま残す
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .calculator import tissue_total, toilet_total, unit_price
from .models import KITCHEN, UNIT_METER, UNIT_PAIR, UNIT_SHEET, to_float

logger = logging.getLogger(__name__)


# ── レコード形状 ──

@dataclass(frozen=True)
class Canonical:
    """pricePerUnit が設定済み"""
    price_per_unit: float


@dataclass(frozen=True)
class LegacyPricePerMeter:
    price_per_meter: float


@dataclass(frozen=True)
class PricedTotal:
    price: float
    total_amount: float


@dataclass(frozen=True)
class ToiletQuantities:
    price: float
    length: float
    multiplier: float
    rolls: float


@dataclass(frozen=True)
class TissueQuantities:
    price: float
    per_box: float
    boxes: float
    unit: str  # pairsPerBox なら "組", sheetsPerBox なら "枚"


@dataclass(frozen=True)
class Incomplete:
    """単価を求める材料がない"""


RecordShape = Union[
    Canonical, LegacyPricePerMeter, PricedTotal,
    ToiletQuantities, TissueQuantities, Incomplete,
]


def _present(record: dict, key: str) -> Optional[float]:
    """キーが存在し 0 以外の数値なら値を返す"""
    value = to_float(record.get(key))
    if not value:
        return None
    return value


def classify(record: dict) -> RecordShape:
    """レコードの形状を判定する"""
    ppu = _present(record, "pricePerUnit")
    if ppu is not None:
        return Canonical(ppu)

    ppm = _present(record, "pricePerMeter")
    if ppm is not None:
        return LegacyPricePerMeter(ppm)

    price = _present(record, "price")
    if price is None:
        return Incomplete()

    total = _present(record, "totalAmount")
    if total is not None and total > 0:
        return PricedTotal(price, total)

    length = _present(record, "length")
    multiplier = _present(record, "multiplier")
    rolls = _present(record, "rolls")
    if length is not None and multiplier is not None and rolls is not None:
        if toilet_total(length, multiplier, rolls) > 0:
            return ToiletQuantities(price, length, multiplier, rolls)

    boxes = _present(record, "boxes")
    pairs = _present(record, "pairsPerBox")
    sheets = _present(record, "sheetsPerBox")
    if boxes is not None and (pairs is not None or sheets is not None):
        if pairs is not None:
            per_box, unit = pairs, UNIT_PAIR
        else:
            per_box, unit = sheets, UNIT_SHEET
        if tissue_total(per_box, boxes) > 0:
            return TissueQuantities(price, per_box, boxes, unit)

    return Incomplete()


def normalize_record(record: dict) -> dict:
    """1件のレコードを正規化した新しい dict を返す。

    pricePerUnit が設定済みのレコードはそのまま（同じ内容のコピー）返す。
    """
    result = dict(record)
    shape = classify(record)

    if isinstance(shape, Canonical):
        return result

    if isinstance(shape, LegacyPricePerMeter):
        result["pricePerUnit"] = shape.price_per_meter
    elif isinstance(shape, PricedTotal):
        result["pricePerUnit"] = unit_price(shape.price, shape.total_amount)
    elif isinstance(shape, ToiletQuantities):
        total = toilet_total(shape.length, shape.multiplier, shape.rolls)
        result["totalAmount"] = total
        result["pricePerUnit"] = unit_price(shape.price, total)
        result["unit"] = UNIT_METER
    elif isinstance(shape, TissueQuantities):
        total = tissue_total(shape.per_box, shape.boxes)
        result["totalAmount"] = total
        result["pricePerUnit"] = unit_price(shape.price, total)
        result["unit"] = shape.unit
    elif isinstance(shape, Incomplete):
        logger.debug("単価を補完できません: id=%s name=%s", record.get("id"), record.get("name"))
        return result
    else:
        raise TypeError(f"unknown record shape: {shape!r}")

    logger.debug(
        "補完: id=%s %s -> pricePerUnit=%s",
        record.get("id"), type(shape).__name__, result["pricePerUnit"],
    )
    return result


def normalize_records(records: Iterable[dict]) -> list[dict]:
    """複数レコードを正規化する。旧カテゴリ kitchen は除外。"""
    normalized = []
    dropped = 0
    for record in records:
        if record.get("category") == KITCHEN:
            dropped += 1
            continue
        normalized.append(normalize_record(record))
    if dropped:
        logger.info("旧カテゴリ %s のレコードを %d 件除外しました", KITCHEN, dropped)
    return normalized
