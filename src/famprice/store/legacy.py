"""旧データの読み出し元

- LocalStorageSource: キー "toilet-products" の JSON 配列（ファイル1つ）
- LegacyDatabaseSource: 組み込みDB "FamProductsDB" の products テーブル

どちらも存在しなければ空扱い。移行後に削除する。
"""

import json
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

LOCAL_STORAGE_KEY = "toilet-products"
LEGACY_DB_NAME = "FamProductsDB"
LEGACY_TABLE = "products"


class LocalStorageSource:
    """キー1つに保存された JSON 配列"""

    def __init__(self, data_dir: Path, key: str = LOCAL_STORAGE_KEY):
        self.key = key
        self.path = Path(data_dir) / f"{key}.json"
        self.name = f"localStorage:{key}"

    def read(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("%s を読み込めません: %s", self.path, e)
            return []
        if not isinstance(data, list):
            logger.warning("%s が配列ではありません", self.path)
            return []
        return [r for r in data if isinstance(r, dict)]

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("%s を削除できません: %s", self.path, e)


class LegacyDatabaseSource:
    """組み込みDBのキー付きテーブル (key INTEGER PRIMARY KEY, value TEXT)"""

    def __init__(
        self,
        data_dir: Path,
        db_name: str = LEGACY_DB_NAME,
        table: str = LEGACY_TABLE,
    ):
        self.path = Path(data_dir) / f"{db_name}.sqlite3"
        self.table = table
        self.name = f"{db_name}/{table}"

    def read(self) -> list[dict]:
        if not self.path.exists():
            return []

        # 読み取り専用で開く（存在しないファイルを作らない）
        uri = f"{self.path.resolve().as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True)
        except sqlite3.Error as e:
            logger.warning("%s を開けません: %s", self.path, e)
            return []

        try:
            exists = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
                (self.table,),
            ).fetchone()
            if not exists:
                return []
            rows = conn.execute(
                f'SELECT value FROM "{self.table}" ORDER BY key'
            ).fetchall()
        except sqlite3.Error as e:
            logger.warning("%s を読み込めません: %s", self.name, e)
            return []
        finally:
            conn.close()

        records = []
        for (value,) in rows:
            try:
                record = json.loads(value)
            except (TypeError, json.JSONDecodeError):
                logger.warning("%s の壊れたレコードを読み飛ばしました", self.name)
                continue
            if isinstance(record, dict):
                records.append(record)
        return records

    def clear(self) -> None:
        """データベースごと削除"""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("%s を削除できません: %s", self.path, e)
