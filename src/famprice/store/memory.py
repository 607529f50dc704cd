"""メモリ上の保存先（ローカル採番、バックエンドなし）"""

import copy

from ..models import compact


class MemoryProductStore:
    """プロセス内だけで保持する保存先"""

    def __init__(self):
        self._records: dict[str, dict] = {}
        self._counter = 0

    def load_all(self) -> list[dict]:
        return [
            {"id": product_id, **copy.deepcopy(record)}
            for product_id, record in self._records.items()
        ]

    def save(self, record: dict) -> str:
        self._counter += 1
        product_id = str(self._counter)
        self._records[product_id] = compact(copy.deepcopy(record), drop=("id",))
        return product_id

    def update(self, product_id: str, record: dict) -> None:
        self._records[product_id] = compact(copy.deepcopy(record), drop=("id",))

    def delete(self, product_id: str) -> None:
        self._records.pop(product_id, None)

    def delete_by_category(self, category: str) -> None:
        for product_id in [
            pid for pid, r in self._records.items() if r.get("category") == category
        ]:
            del self._records[product_id]
