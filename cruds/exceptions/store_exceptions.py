from typing import Optional


class StorageException(RuntimeError):
    def __init__(self, message: str = None, cause: BaseException = None):
        super(StorageException, self).__init__(message)
        self.message = message
        self.cause = cause


class BadResponseException(StorageException):
    def __init__(self, message: str = None, cause: BaseException = None):
        super(BadResponseException, self).__init__(message, cause)


class ServiceUnavailableException(StorageException):
    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, cause)


class TimeoutException(ServiceUnavailableException):
    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, cause)


class DatabaseDoesNotExistException(StorageException):
    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, cause)


class ConcurrencyException(StorageException):
    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.expected_change_vector: Optional[str] = None
        self.actual_change_vector: Optional[str] = None
