from cruds.exceptions import (
    ValidationException,
    NotModifiedException,
    UserDoesNotExistException,
    PostDoesNotExistException,
    StorageException,
    BadResponseException,
    ServiceUnavailableException,
    TimeoutException,
    DatabaseDoesNotExistException,
    ConcurrencyException,
)
from cruds.exceptions.exception_dispatcher import ExceptionDispatcher
from cruds.users.models import User, Post
from cruds.users.store import UserStore
