"""Progress store domain exceptions."""

from pathlib import Path

from bingers.core.domain.exceptions import DomainException


class ProgressStoreError(DomainException):
    """Base error for loading and saving user data."""

    error_code = "PROGRESS_STORE_ERROR"


class UserDataReadError(ProgressStoreError):
    """Raised when the user data file exists but cannot be read."""

    error_code = "USER_DATA_READ_ERROR"

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Unable to read user data from {path}: {reason}")


class UserDataDecodeError(ProgressStoreError):
    """Raised when the user data file is not a valid document."""

    error_code = "USER_DATA_DECODE_ERROR"

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Unable to deserialize user data from {path}: {reason}")


class UserDataVersionMismatchError(ProgressStoreError):
    """Raised when the user data was written by a newer build."""

    error_code = "USER_DATA_VERSION_MISMATCH"

    def __init__(self, path: Path, expected: int, actual: int):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"User data version mismatch in {path} "
            f"[expected: <= {expected}, actual: {actual}]; "
            "the data was written by a newer version of bingers"
        )


class UserDataWriteError(ProgressStoreError):
    """Raised when the user data file cannot be written."""

    error_code = "USER_DATA_WRITE_ERROR"

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Unable to write user data to {path}: {reason}")
