"""カテゴリ別の単価ランキング"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .errors import IncompleteRecordError
from .models import TISSUE, TOILET, UNIT_METER, Product

logger = logging.getLogger(__name__)

INCOMPLETE_BADGE = "未計算"


@dataclass(frozen=True)
class RankedProduct:
    """ランキング1行分"""
    product: Product
    rank: Optional[int]          # 未計算レコードは None
    badge: str
    badge_class: str             # gold / silver / bronze / normal / incomplete
    unit_price: Optional[float]


def badge_for(rank: int) -> tuple[str, str]:
    """順位 → (バッジ文言, バッジ種別)"""
    if rank == 1:
        return "🏆 最安", "gold"
    if rank == 2:
        return "2位", "silver"
    if rank == 3:
        return "3位", "bronze"
    return f"{rank}位", "normal"


def rank_products(products: Iterable[Product], category: str) -> list[RankedProduct]:
    """指定カテゴリの商品を単価の安い順に並べる。

    同じ単価は元の並び順を保つ（安定ソート）。単価を計算できない
    レコードは順位なしで末尾に置く。
    """
    complete: list[tuple[float, Product]] = []
    incomplete: list[Product] = []

    for product in products:
        if product.category != category:
            continue
        try:
            complete.append((product.require_unit_price(), product))
        except IncompleteRecordError as e:
            logger.warning("%s", e)
            incomplete.append(product)

    complete.sort(key=lambda pair: pair[0])

    ranked = []
    for index, (price, product) in enumerate(complete):
        rank = index + 1
        badge, badge_class = badge_for(rank)
        ranked.append(RankedProduct(product, rank, badge, badge_class, price))

    for product in incomplete:
        ranked.append(RankedProduct(product, None, INCOMPLETE_BADGE, "incomplete", None))

    return ranked


# ── 表示用 ──

def _num(value) -> str:
    """整数値なら小数点なしで表示"""
    if value is None:
        return "?"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_unit_price(product: Product) -> str:
    value = product.unit_price or 0
    return f"{value:.2f} 円/{product.unit or UNIT_METER}"


def format_price(price) -> str:
    if price is None:
        return "¥?"
    if float(price).is_integer():
        return f"¥{int(price):,}"
    return f"¥{price:,}"


def describe_quantities(product: Product) -> str:
    """価格と数量の要約（例: "¥400 ・ 30m × 2倍 ・ 8本"）"""
    price = format_price(product.price)
    if product.category == TOILET:
        return (
            f"{price} ・ {_num(product.length)}m × {_num(product.multiplier)}倍"
            f" ・ {_num(product.rolls)}本"
        )
    if product.category == TISSUE:
        per_box = product.pairs_per_box or product.sheets_per_box
        return f"{price} ・ {_num(per_box)}組 ・ {_num(product.boxes)}箱"
    return price


def format_registered_date(product: Product) -> str:
    """登録日を "10月19日" 形式で返す（ローカル時刻）"""
    if not product.registered_at:
        return ""
    try:
        dt = datetime.fromisoformat(product.registered_at.replace("Z", "+00:00"))
    except (ValueError, TypeError, AttributeError):
        return ""
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return f"{dt.month}月{dt.day}日"
