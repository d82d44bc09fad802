# services/errors.py


class TaskServiceError(Exception):
    """タスク系サービスの基底例外"""


class TaskNotFoundError(TaskServiceError):
    """存在しない、または他ユーザーのタスク（両者は区別しない）"""


class UnauthorizedError(TaskServiceError):
    """呼び出し元のユーザーIDが解決できない"""


class TaskValidationError(TaskServiceError):
    """入力値が業務ルールに違反している"""


class AttachmentStorageError(TaskServiceError):
    """添付ファイルの書き込みに失敗した"""
