# backend/fieldbook/errors.py
# サービス層の例外（HTTP ステータスと利用者向けメッセージを持つ）

class FieldbookError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AccessDenied(FieldbookError):
    status_code = 403
    default_message = "You don't have permission to enter data for this village"


class AccessResolutionFailed(FieldbookError):
    """The assigned villages could not be loaded (store unavailable)."""

    status_code = 503
    default_message = "Failed to fetch assigned villages"


class DuplicateAssignment(FieldbookError):
    status_code = 409
    default_message = "This worker is already assigned to this village"


class NotFound(FieldbookError):
    status_code = 404
    default_message = "Not found"


class Conflict(FieldbookError):
    status_code = 409
    default_message = "Conflicting record"


class StoreFailure(FieldbookError):
    status_code = 500
    default_message = "Failed to save data"


class InvalidInput(FieldbookError):
    status_code = 400
    default_message = "Please fill in all required fields"
