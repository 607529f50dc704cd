"""設定の読み込み (.env / 環境変数)"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .store import (
    FirestoreProductStore,
    LegacyDatabaseSource,
    LocalStorageSource,
    SqliteProductStore,
)

BACKEND_SQLITE = "sqlite"
BACKEND_FIRESTORE = "firestore"
BACKENDS = (BACKEND_SQLITE, BACKEND_FIRESTORE)


@dataclass
class Settings:
    data_dir: Path
    backend: str = BACKEND_SQLITE
    db_path: Optional[Path] = None
    user_id: str = "local"
    firestore_project_id: Optional[str] = None
    firestore_id_token: Optional[str] = None
    request_timeout: float = 10
    log_level: str = "WARNING"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """.env を読み込んでから環境変数で Settings を作る"""
    load_dotenv(env_file)

    data_dir = Path(os.getenv("FAMPRICE_DATA_DIR") or Path.cwd())
    db_path = os.getenv("FAMPRICE_DB_PATH")

    timeout_raw = os.getenv("FAMPRICE_REQUEST_TIMEOUT", "10")
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ConfigError(f"FAMPRICE_REQUEST_TIMEOUT が数値ではありません: {timeout_raw}")

    backend = (os.getenv("FAMPRICE_BACKEND") or BACKEND_SQLITE).strip().lower()
    if backend not in BACKENDS:
        raise ConfigError(f"FAMPRICE_BACKEND は {' / '.join(BACKENDS)} のいずれかです: {backend}")

    return Settings(
        data_dir=data_dir,
        backend=backend,
        db_path=Path(db_path) if db_path else data_dir / "famprice.db",
        user_id=os.getenv("FAMPRICE_USER_ID") or "local",
        firestore_project_id=os.getenv("FIRESTORE_PROJECT_ID"),
        firestore_id_token=os.getenv("FIRESTORE_ID_TOKEN"),
        request_timeout=timeout,
        log_level=(os.getenv("FAMPRICE_LOG_LEVEL") or "WARNING").upper(),
    )


def build_store(settings: Settings):
    """設定に応じた保存先を作る"""
    if settings.backend == BACKEND_FIRESTORE:
        if not settings.firestore_project_id or not settings.firestore_id_token:
            raise ConfigError(
                ".env に FIRESTORE_PROJECT_ID / FIRESTORE_ID_TOKEN を設定してください。"
            )
        return FirestoreProductStore(
            project_id=settings.firestore_project_id,
            id_token=settings.firestore_id_token,
            user_id=settings.user_id,
            timeout=settings.request_timeout,
        )
    return SqliteProductStore(settings.db_path, user_id=settings.user_id)


def build_legacy_sources(settings: Settings) -> list:
    return [
        LocalStorageSource(settings.data_dir),
        LegacyDatabaseSource(settings.data_dir),
    ]
