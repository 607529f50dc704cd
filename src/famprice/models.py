"""famprice データモデル定義"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Optional

from .errors import IncompleteRecordError

TOILET = "toilet"
TISSUE = "tissue"
KITCHEN = "kitchen"  # 旧データのみに存在するカテゴリ（正規化で除外）

CATEGORIES = (TOILET, TISSUE)

CATEGORY_LABELS = {
    TOILET: "トイレットペーパー",
    TISSUE: "ティッシュ",
}

UNIT_METER = "m"
UNIT_PAIR = "組"
UNIT_SHEET = "枚"  # 旧ティッシュ単位

# 属性名 → 保存ドキュメントのキー
FIELD_KEYS = {
    "id": "id",
    "name": "name",
    "store": "store",
    "price": "price",
    "memo": "memo",
    "category": "category",
    "registered_at": "registeredAt",
    "length": "length",
    "multiplier": "multiplier",
    "rolls": "rolls",
    "pairs_per_box": "pairsPerBox",
    "sheets_per_box": "sheetsPerBox",
    "boxes": "boxes",
    "total_amount": "totalAmount",
    "price_per_unit": "pricePerUnit",
    "unit": "unit",
    "price_per_meter": "pricePerMeter",
}


# 数値として扱う属性（旧データでは文字列で入っていることがある）
NUMERIC_FIELDS = (
    "price", "length", "multiplier", "rolls", "pairs_per_box",
    "sheets_per_box", "boxes", "total_amount", "price_per_unit",
    "price_per_meter",
)


def to_float(value) -> Optional[float]:
    """数値（または数値文字列）を float に変換。変換できなければ None。"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", ""))
    except (ValueError, TypeError):
        return None


def now_iso() -> str:
    """現在時刻を ISO 8601 (UTC, ミリ秒, 末尾Z) で返す"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def compact(record: dict, drop: tuple = ()) -> dict:
    """値が None のキー（と drop で指定したキー）を除いた dict を返す"""
    return {
        k: v for k, v in record.items()
        if v is not None and k not in drop
    }


@dataclass
class Product:
    """登録済み商品（1購入分）

    未設定の項目は None。to_dict() では None の項目を出力しない。
    """
    id: Optional[str] = None
    name: Optional[str] = None
    store: Optional[str] = None
    price: Optional[float] = None
    memo: Optional[str] = None
    category: Optional[str] = None
    registered_at: Optional[str] = None   # ISO format datetime
    # トイレットペーパー
    length: Optional[float] = None        # 1ロールの長さ (m)
    multiplier: Optional[float] = None    # 何倍巻き
    rolls: Optional[float] = None         # ロール数
    # ティッシュ
    pairs_per_box: Optional[float] = None
    sheets_per_box: Optional[float] = None  # 旧フィールド
    boxes: Optional[float] = None
    # 派生値
    total_amount: Optional[float] = None
    price_per_unit: Optional[float] = None
    unit: Optional[str] = None
    price_per_meter: Optional[float] = None  # 旧フィールド

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        """保存ドキュメントから生成する。数値項目の文字列は float に変換する。"""
        kwargs = {
            attr: data[key] for attr, key in FIELD_KEYS.items() if key in data
        }
        for attr in NUMERIC_FIELDS:
            if isinstance(kwargs.get(attr), str):
                kwargs[attr] = to_float(kwargs[attr])
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return compact({
            FIELD_KEYS[f.name]: getattr(self, f.name) for f in fields(self)
        })

    @property
    def unit_price(self) -> Optional[float]:
        """比較に使う単価。旧 pricePerMeter にフォールバックし、0 や未設定は None。"""
        return self.price_per_unit or self.price_per_meter or None

    @property
    def is_complete(self) -> bool:
        return self.unit_price is not None

    def require_unit_price(self) -> float:
        """単価を返す。計算できないレコードは IncompleteRecordError。"""
        value = self.unit_price
        if value is None:
            raise IncompleteRecordError(self)
        return value

    @property
    def dedupe_key(self) -> tuple:
        """移行時の重複判定キー (name, price, category)"""
        return (self.name, self.price, self.category)


@dataclass
class ProductInput:
    """登録・編集フォームの入力値"""
    name: str
    price: float
    category: str = TOILET
    store: str = ""
    memo: str = ""
    length: Optional[float] = None
    multiplier: Optional[float] = None
    rolls: Optional[float] = None
    pairs_per_box: Optional[float] = None
    boxes: Optional[float] = None


@dataclass
class AppState:
    """1セッション分のアプリ状態"""
    user_id: Optional[str] = None
    category: str = TOILET
    products: list[Product] = field(default_factory=list)

    def find(self, product_id: str) -> Optional[Product]:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def in_category(self, category: Optional[str] = None) -> list[Product]:
        category = category or self.category
        return [p for p in self.products if p.category == category]
