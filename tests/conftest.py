import pytest

from famprice.errors import PersistenceError
from famprice.models import AppState
from famprice.pricebook import PriceBook
from famprice.store import MemoryProductStore


class RecordingNotifier:
    """通知を記録し、confirm には用意した答えを順に返す"""

    def __init__(self, answers=()):
        self.answers = list(answers)
        self.toasts = []
        self.confirms = []
        self.alerts = []

    def toast(self, message):
        self.toasts.append(message)

    def confirm(self, message):
        self.confirms.append(message)
        if not self.answers:
            return False
        return self.answers.pop(0)

    def alert(self, message):
        self.alerts.append(message)


class FlakyStore(MemoryProductStore):
    """save が指定回数成功した後に失敗する保存先"""

    def __init__(self, fail_after=0, fail_ops=("save",)):
        super().__init__()
        self.fail_after = fail_after
        self.fail_ops = fail_ops
        self.saves = 0

    def _maybe_fail(self, op):
        if op in self.fail_ops:
            raise PersistenceError(op, "permission-denied")

    def load_all(self):
        self._maybe_fail("load")
        return super().load_all()

    def save(self, record):
        if "save" in self.fail_ops and self.saves >= self.fail_after:
            raise PersistenceError("save", "permission-denied")
        self.saves += 1
        return super().save(record)

    def update(self, product_id, record):
        self._maybe_fail("update")
        return super().update(product_id, record)

    def delete(self, product_id):
        self._maybe_fail("delete")
        return super().delete(product_id)

    def delete_by_category(self, category):
        self._maybe_fail("delete_by_category")
        return super().delete_by_category(category)


class ListSource:
    """メモリ上の旧データ"""

    def __init__(self, records, name="list"):
        self.records = list(records)
        self.name = name
        self.cleared = 0

    def read(self):
        return list(self.records)

    def clear(self):
        self.records = []
        self.cleared += 1


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store():
    return MemoryProductStore()


@pytest.fixture
def book(store, notifier):
    return PriceBook(store, notifier, AppState(user_id="user-1"))
