"""保存先インターフェース"""

from typing import Protocol


class ProductStore(Protocol):
    """商品レコードの保存先（ユーザー単位）"""

    def load_all(self) -> list[dict]:
        """全レコードを id 付きで返す"""
        ...

    def save(self, record: dict) -> str:
        """新規保存して採番された id を返す"""
        ...

    def update(self, product_id: str, record: dict) -> None:
        """id のレコードを丸ごと置き換える"""
        ...

    def delete(self, product_id: str) -> None:
        """存在しない id でもエラーにしない"""
        ...

    def delete_by_category(self, category: str) -> None:
        ...


class LegacySource(Protocol):
    """旧データの保存場所（読み取り後に削除する）"""
    name: str

    def read(self) -> list[dict]:
        ...

    def clear(self) -> None:
        ...
