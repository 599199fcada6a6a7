"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Custom exceptions for the UTPS system. These provide
             specific error codes and HTTP status codes for validation,
             workflow and payroll violations.
-------------------------------------------------------------------------
"""
from typing import Optional


class PayrollException(Exception):
    """Base exception for all UTPS specific errors."""

    error_code: str = "ERR_UTPS_GENERIC"
    default_message: str = "Đã xảy ra lỗi trong hệ thống tính lương."
    status_code: int = 400

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None) -> None:
        """
        Initialize UTPS exception.

        Args:
            message: Custom error message. If None, uses default_message.
            details: Additional context dictionary for the API response.
        """
        self.message = str(message or self.default_message)
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# Input and record exceptions
class ValidationFailedException(PayrollException):
    """Raised when input data is missing, malformed or out of range."""

    error_code = "ERR_VALIDATION"
    default_message = "Dữ liệu không hợp lệ."


class RecordNotFoundException(PayrollException):
    """Raised when a referenced record does not exist."""

    error_code = "ERR_NOT_FOUND"
    default_message = "Không tìm thấy dữ liệu."
    status_code = 404


class DuplicateRecordException(PayrollException):
    """Raised when a record would duplicate an existing active record."""

    error_code = "ERR_DUPLICATE"
    default_message = "Dữ liệu đã tồn tại."
    status_code = 409


class DependencyExistsException(PayrollException):
    """Raised when a record cannot be deleted because other records use it."""

    error_code = "ERR_DEPENDENCY_EXISTS"
    default_message = "Không thể xóa vì còn dữ liệu liên quan."


class VersionConflictException(PayrollException):
    """Raised when the client edits a stale version of a record."""

    error_code = "ERR_VERSION_CONFLICT"
    default_message = "Dữ liệu đã bị thay đổi bởi người khác. Vui lòng tải lại."
    status_code = 409


# Workflow exceptions
class WorkflowTransitionException(PayrollException):
    """Raised when an invalid state transition is attempted."""

    error_code = "ERR_INVALID_TRANSITION"
    default_message = "Không thể chuyển sang trạng thái này."


class ImmutableRecordException(PayrollException):
    """Raised when a paid or superseded record is modified."""

    error_code = "ERR_IMMUTABLE_RECORD"
    default_message = "Bản ghi này không thể chỉnh sửa."


class ScheduleConflictException(PayrollException):
    """Raised when a class schedule overlaps another for the same teacher or room."""

    error_code = "ERR_SCHEDULE_CONFLICT"
    default_message = "Lịch giảng dạy bị trùng."
    status_code = 409


# Payroll exceptions
class NoAssignmentsException(PayrollException):
    """Raised when a salary calculation would have no teaching assignments."""

    error_code = "ERR_NO_ASSIGNMENTS"
    default_message = "Không tìm thấy phân công giảng dạy nào cho giảng viên trong kỳ này."


class CalculationFailedException(PayrollException):
    """Raised when the salary calculation engine fails part way."""

    error_code = "ERR_CALCULATION_FAILED"
    default_message = "Lỗi khi tính lương."
    status_code = 500
