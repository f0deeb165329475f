from cruds.exceptions.exceptions import (
    ValidationException,
    NotModifiedException,
    UserDoesNotExistException,
    PostDoesNotExistException,
)
from cruds.exceptions.store_exceptions import (
    StorageException,
    BadResponseException,
    ServiceUnavailableException,
    TimeoutException,
    DatabaseDoesNotExistException,
    ConcurrencyException,
)
