"""famprice 例外定義"""


class FamPriceError(Exception):
    """famprice の基底例外"""


class ValidationError(FamPriceError):
    """入力値エラー（必須項目の欠落・0以下の数量など）

    メッセージはそのままユーザーに表示する。
    """


class PersistenceError(FamPriceError):
    """保存先の読み書きエラー"""
    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Persistence Error [{operation}]: {detail}")


class IncompleteRecordError(FamPriceError):
    """単価を計算できないレコード（致命的ではない）"""
    def __init__(self, product):
        self.product = product
        super().__init__(
            f"単価を計算できません: {product.name or '名称不明'} (id={product.id})"
        )


class ConfigError(FamPriceError):
    """設定エラー"""
