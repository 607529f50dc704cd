"""
Firestore 保存先 (REST API)

users/{uid}/products コレクションを Firestore の REST API で読み書きする。

APIフロー:
1. GET    .../users/{uid}/products            一覧 (pageToken でページング)
2. POST   .../users/{uid}/products            新規作成 → ドキュメント名から id を取得
3. PATCH  .../users/{uid}/products/{id}       丸ごと置き換え (updateMask なし)
4. DELETE .../users/{uid}/products/{id}       削除
5. POST   .../users/{uid}:runQuery            category で絞り込み → 1件ずつ削除
"""

import logging
from typing import Optional

import requests

from ..errors import PersistenceError
from ..models import compact

logger = logging.getLogger(__name__)

BASE_URL = "https://firestore.googleapis.com/v1"

USER_AGENT = "famprice/0.1 (+requests)"

PAGE_SIZE = 300


# ── 値のエンコード ──

def encode_value(value) -> dict:
    """Python の値を Firestore の Value 形式に変換"""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    return {"stringValue": str(value)}


def decode_value(value: dict):
    """Firestore の Value 形式を Python の値に変換"""
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "timestampValue" in value:
        return value["timestampValue"]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    return None


def encode_fields(record: dict) -> dict:
    return {k: encode_value(v) for k, v in compact(record, drop=("id",)).items()}


def decode_fields(fields: dict) -> dict:
    return {k: decode_value(v) for k, v in fields.items()}


def document_id(name: str) -> str:
    """ドキュメント名 (projects/.../products/abc) の末尾を id として返す"""
    return name.rsplit("/", 1)[-1]


class FirestoreProductStore:
    """Firestore REST API の保存先"""

    def __init__(
        self,
        project_id: str,
        id_token: str,
        user_id: str,
        timeout: float = 10,
    ):
        """
        Args:
            project_id: Firebase プロジェクトID
            id_token: Firebase Auth の ID トークン (Bearer)
            user_id: ログインユーザーの uid
            timeout: リクエストのタイムアウト秒
        """
        self.project_id = project_id
        self.id_token = id_token
        self.user_id = user_id
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept-Charset": "UTF-8",
        })

    @property
    def documents_url(self) -> str:
        return f"{BASE_URL}/projects/{self.project_id}/databases/(default)/documents"

    @property
    def user_path(self) -> str:
        return f"{self.documents_url}/users/{self.user_id}"

    @property
    def collection_url(self) -> str:
        return f"{self.user_path}/products"

    def _auth_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.id_token}",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        operation: str,
        method: str,
        url: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
        allow_missing: bool = False,
    ):
        try:
            resp = self._session.request(
                method, url,
                headers=self._auth_headers(),
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            if allow_missing and resp.status_code == 404:
                return None
            resp.raise_for_status()
            if not resp.content:
                return {}
            return resp.json()
        except requests.RequestException as e:
            raise PersistenceError(operation, str(e)) from e
        except ValueError as e:
            raise PersistenceError(operation, f"invalid response: {e}") from e

    # ── 読み込み ──

    def load_all(self) -> list[dict]:
        records = []
        page_token = None
        while True:
            params = {"pageSize": PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            data = self._request("load", "GET", self.collection_url, params=params)
            for doc in data.get("documents", []):
                records.append({
                    "id": document_id(doc["name"]),
                    **decode_fields(doc.get("fields", {})),
                })
            page_token = data.get("nextPageToken")
            if not page_token:
                break
        return records

    # ── 書き込み ──

    def save(self, record: dict) -> str:
        data = self._request(
            "save", "POST", self.collection_url,
            json_body={"fields": encode_fields(record)},
        )
        name = data.get("name")
        if not name:
            raise PersistenceError("save", f"document name missing: {data}")
        return document_id(name)

    def update(self, product_id: str, record: dict) -> None:
        """updateMask を付けない PATCH はドキュメント全体の置き換え"""
        self._request(
            "update", "PATCH", f"{self.collection_url}/{product_id}",
            json_body={"fields": encode_fields(record)},
        )

    def delete(self, product_id: str) -> None:
        self._request(
            "delete", "DELETE", f"{self.collection_url}/{product_id}",
            allow_missing=True,
        )

    def delete_by_category(self, category: str) -> None:
        results = self._request(
            "delete_by_category", "POST", f"{self.user_path}:runQuery",
            json_body={
                "structuredQuery": {
                    "from": [{"collectionId": "products"}],
                    "where": {
                        "fieldFilter": {
                            "field": {"fieldPath": "category"},
                            "op": "EQUAL",
                            "value": {"stringValue": category},
                        }
                    },
                }
            },
        )
        # runQuery は結果の配列を返す（該当なしでも document のない要素が1つ入る）
        for item in results or []:
            doc = item.get("document")
            if doc:
                self.delete(document_id(doc["name"]))
