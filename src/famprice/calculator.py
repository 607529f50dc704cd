"""単価計算"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .errors import ValidationError
from .models import TISSUE, TOILET, UNIT_METER, UNIT_PAIR

MSG_REQUIRED = "必要な項目を入力してください"
MSG_NAME_PRICE = "商品名と価格を入力してください"
MSG_LENGTH = "長さを入力してください"

_THOUSANDTH = Decimal("0.001")


@dataclass(frozen=True)
class UnitPrice:
    total_amount: float
    price_per_unit: float
    unit: str


def round3(value: float) -> float:
    """小数第3位に四捨五入する。

    Decimal(value) は float の正確な2進値なので、JS の
    parseFloat(x.toFixed(3)) と同じ結果になる。
    """
    return float(Decimal(value).quantize(_THOUSANDTH, rounding=ROUND_HALF_UP))


def toilet_total(length: float, multiplier: float, rolls: float) -> float:
    return length * multiplier * rolls


def tissue_total(pairs_per_box: float, boxes: float) -> float:
    return pairs_per_box * boxes


def unit_price(price: float, total_amount: float) -> float:
    return round3(price / total_amount)


def calculate(
    category: str,
    price: Optional[float],
    *,
    length: Optional[float] = None,
    multiplier: Optional[float] = None,
    rolls: Optional[float] = None,
    pairs_per_box: Optional[float] = None,
    boxes: Optional[float] = None,
) -> UnitPrice:
    """カテゴリ別の入力値から総量・単価・単位を求める。

    Args:
        category: "toilet" または "tissue"
        price: 支払った合計金額
        length, multiplier, rolls: トイレットペーパーの長さ(m)・倍巻き・ロール数
        pairs_per_box, boxes: ティッシュの1箱あたり組数・箱数

    Returns:
        UnitPrice

    Raises:
        ValidationError: 価格や数量が未入力・0以下のとき
    """
    if not price or price <= 0:
        raise ValidationError(MSG_NAME_PRICE)

    if category == TOILET:
        if not length or length <= 0:
            raise ValidationError(MSG_LENGTH)
        total = toilet_total(length, multiplier or 0, rolls or 0)
        unit = UNIT_METER
    elif category == TISSUE:
        total = tissue_total(pairs_per_box or 0, boxes or 0)
        unit = UNIT_PAIR
    else:
        raise ValidationError(f"不明なカテゴリです: {category}")

    if total <= 0:
        raise ValidationError(MSG_REQUIRED)

    return UnitPrice(
        total_amount=total,
        price_per_unit=unit_price(price, total),
        unit=unit,
    )
