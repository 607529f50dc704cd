"""商品レコード SQLite 保存先"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Optional

from ..errors import PersistenceError
from ..models import compact

logger = logging.getLogger(__name__)

DB_PATH = Path.cwd() / "famprice.db"


class SqliteProductStore:
    """ユーザー単位の商品データベース

    レコード本体は JSON 文字列で保存し、id は AUTOINCREMENT の連番。
    """

    def __init__(self, db_path: Optional[Path] = None, user_id: str = "local"):
        self.db_path = Path(db_path) if db_path else DB_PATH
        self.user_id = user_id
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._conn = sqlite3.connect(str(self.db_path))
            except sqlite3.Error as e:
                raise PersistenceError("connect", str(e)) from e
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_db(self):
        """テーブル作成"""
        try:
            self.conn.executescript("""
                CREATE TABLE IF NOT EXISTS products (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    category TEXT DEFAULT '',
                    data TEXT NOT NULL,
                    created_at TEXT DEFAULT (datetime('now', 'localtime')),
                    updated_at TEXT DEFAULT (datetime('now', 'localtime'))
                );

                CREATE INDEX IF NOT EXISTS idx_products_user_category
                    ON products(user_id, category);
            """)
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError("init", str(e)) from e

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    @staticmethod
    def _payload(record: dict) -> str:
        return json.dumps(compact(record, drop=("id",)), ensure_ascii=False)

    @staticmethod
    def _row_id(product_id: str) -> Optional[int]:
        try:
            return int(product_id)
        except (TypeError, ValueError):
            return None

    # ── 読み込み ──

    def load_all(self) -> list[dict]:
        try:
            rows = self.conn.execute(
                "SELECT id, data FROM products WHERE user_id = ? ORDER BY id",
                (self.user_id,),
            ).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError("load", str(e)) from e

        records = []
        for row in rows:
            try:
                data = json.loads(row["data"])
            except json.JSONDecodeError:
                logger.warning("壊れたレコードを読み飛ばしました: id=%s", row["id"])
                continue
            records.append({"id": str(row["id"]), **data})
        return records

    # ── 書き込み ──

    def save(self, record: dict) -> str:
        try:
            cur = self.conn.execute(
                "INSERT INTO products (user_id, category, data) VALUES (?, ?, ?)",
                (self.user_id, record.get("category") or "", self._payload(record)),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError("save", str(e)) from e
        return str(cur.lastrowid)

    def update(self, product_id: str, record: dict) -> None:
        """id のレコードを丸ごと置き換える（なければ作成）"""
        row_id = self._row_id(product_id)
        if row_id is None:
            raise PersistenceError("update", f"invalid id: {product_id!r}")
        try:
            self.conn.execute("""
                INSERT INTO products (id, user_id, category, data)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    category = excluded.category,
                    data = excluded.data,
                    updated_at = datetime('now', 'localtime')
                WHERE products.user_id = excluded.user_id
            """, (
                row_id, self.user_id, record.get("category") or "",
                self._payload(record),
            ))
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError("update", str(e)) from e

    def delete(self, product_id: str) -> None:
        row_id = self._row_id(product_id)
        if row_id is None:
            return
        try:
            self.conn.execute(
                "DELETE FROM products WHERE id = ? AND user_id = ?",
                (row_id, self.user_id),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError("delete", str(e)) from e

    def delete_by_category(self, category: str) -> None:
        try:
            self.conn.execute(
                "DELETE FROM products WHERE user_id = ? AND category = ?",
                (self.user_id, category),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError("delete_by_category", str(e)) from e
