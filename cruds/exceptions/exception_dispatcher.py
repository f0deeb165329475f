from __future__ import annotations

import http
from typing import Iterator, Optional

import requests
from ravendb.exceptions.exceptions import (
    AllTopologyNodesDownException,
    AuthorizationException,
    DatabaseDoesNotExistException as RavenDatabaseDoesNotExistException,
    TimeoutException as RavenTimeoutException,
    UnsuccessfulRequestException,
)
from ravendb.exceptions.raven_exceptions import (
    RavenException,
    ConcurrencyException as RavenConcurrencyException,
)

from cruds.exceptions.store_exceptions import (
    StorageException,
    ConcurrencyException,
    DatabaseDoesNotExistException,
    ServiceUnavailableException,
    TimeoutException,
)


class ExceptionDispatcher:
    """
    Turns whatever the RavenDB client raised while executing a command into a StorageException.

    The client often re-raises transport failures as a bare RuntimeError, so the whole
    __cause__/__context__ chain is searched before falling back to the response status code.
    """

    # errors the client can raise out of RequestExecutor.execute_command
    CLIENT_ERRORS = (
        RavenException,
        RavenDatabaseDoesNotExistException,
        RavenTimeoutException,
        AllTopologyNodesDownException,
        AuthorizationException,
        UnsuccessfulRequestException,
        RuntimeError,
        ValueError,
        IOError,
    )

    __UNAVAILABLE_CODES = (
        http.HTTPStatus.SERVICE_UNAVAILABLE,
        http.HTTPStatus.BAD_GATEWAY,
        http.HTTPStatus.GATEWAY_TIMEOUT,
        http.HTTPStatus.REQUEST_TIMEOUT,
    )

    @staticmethod
    def get(e: BaseException, url: str, status_code: Optional[int] = None) -> StorageException:
        for error in ExceptionDispatcher.__chain(e):
            if isinstance(error, RavenConcurrencyException):
                return ConcurrencyException(f"Change vector mismatch on {url}: {error}", e)
            if isinstance(error, RavenDatabaseDoesNotExistException):
                return DatabaseDoesNotExistException(f"Database '{error}' does not exist ({url})", e)
            if isinstance(error, (requests.Timeout, RavenTimeoutException)):
                return TimeoutException(f"The request for {url} timed out: {error}", e)
            if isinstance(error, (requests.ConnectionError, AllTopologyNodesDownException)):
                return ServiceUnavailableException(f"Couldn't reach the server for {url}: {error}", e)

        if status_code in ExceptionDispatcher.__UNAVAILABLE_CODES:
            return ServiceUnavailableException(f"The server at {url} responded with status code: {status_code}", e)

        message = f"{e}" if status_code is None else f"{e}. The server at {url} responded with status code: {status_code}"
        return StorageException(message, e)

    @staticmethod
    def __chain(e: BaseException) -> Iterator[BaseException]:
        seen = set()
        while e is not None and id(e) not in seen:
            seen.add(id(e))
            yield e
            e = e.__cause__ or e.__context__
