"""リクエストデータの検証エラー"""


class ValidationError(ValueError):
    """入力データが不正な場合のエラー"""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field
