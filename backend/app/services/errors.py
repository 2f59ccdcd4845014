"""
errors.py — Failure types raised by the service layer

Every service failure is a ServiceError carrying the HTTP status and the
message shown to the caller. The app-level exception handler in main.py turns
it into `{"success": false, "error": message}`.

- ValidationError    400  bad / missing input, raised before any datastore call
- PersistenceError   500  datastore call failed; the cause is logged, not shown
- SoftFailure        500  datastore reported `success: false`; its message is shown
- NotificationError  n/a  secondary notification failed; logged only
"""

GENERIC_SERVER_ERROR = "サーバーエラーが発生しました"
FETCH_FAILED_MESSAGE = "データの取得に失敗しました"


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str = GENERIC_SERVER_ERROR):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class PersistenceError(ServiceError):
    status_code = 500


class SoftFailure(ServiceError):
    status_code = 500


class NotificationError(ServiceError):
    status_code = 500
