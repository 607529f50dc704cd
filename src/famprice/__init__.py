"""famprice - トイレットペーパー・ティッシュの単価比較ツール"""

__version__ = "0.1.0"

from famprice.calculator import UnitPrice, calculate, round3
from famprice.errors import (
    ConfigError,
    FamPriceError,
    IncompleteRecordError,
    PersistenceError,
    ValidationError,
)
from famprice.migration import MigrationOrchestrator, MigrationResult
from famprice.models import AppState, Product, ProductInput
from famprice.normalizer import normalize_record, normalize_records
from famprice.pricebook import PriceBook
from famprice.ranking import RankedProduct, rank_products

__all__ = [
    "AppState",
    "ConfigError",
    "FamPriceError",
    "IncompleteRecordError",
    "MigrationOrchestrator",
    "MigrationResult",
    "PersistenceError",
    "PriceBook",
    "Product",
    "ProductInput",
    "RankedProduct",
    "UnitPrice",
    "ValidationError",
    "calculate",
    "normalize_record",
    "normalize_records",
    "rank_products",
    "round3",
]
