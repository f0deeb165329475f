import unittest

import requests
from ravendb.exceptions.exceptions import DatabaseDoesNotExistException as RavenDatabaseDoesNotExistException
from ravendb.exceptions.raven_exceptions import ConcurrencyException as RavenConcurrencyException

from cruds.exceptions.exception_dispatcher import ExceptionDispatcher
from cruds.exceptions.store_exceptions import (
    StorageException,
    ConcurrencyException,
    DatabaseDoesNotExistException,
    ServiceUnavailableException,
    TimeoutException,
)


def raised_while_handling(cause: BaseException, error: BaseException) -> BaseException:
    try:
        try:
            raise cause
        except type(cause):
            raise error
    except type(error) as e:
        return e


class TestExceptionDispatcher(unittest.TestCase):
    def test_transport_errors_found_behind_runtime_error(self):
        error = raised_while_handling(requests.ReadTimeout("read timed out"), RuntimeError("Received unsuccessful response"))
        exception = ExceptionDispatcher.get(error, "load 'users/1'")
        self.assertIsInstance(exception, TimeoutException)
        self.assertIs(error, exception.cause)

        error = raised_while_handling(requests.ConnectionError("refused"), RuntimeError("Received unsuccessful response"))
        exception = ExceptionDispatcher.get(error, "load 'users/1'")
        self.assertIsInstance(exception, ServiceUnavailableException)
        self.assertNotIsInstance(exception, TimeoutException)

    def test_client_exceptions(self):
        self.assertIsInstance(
            ExceptionDispatcher.get(RavenDatabaseDoesNotExistException("missing"), "load"), DatabaseDoesNotExistException
        )
        self.assertIsInstance(ExceptionDispatcher.get(RavenConcurrencyException("stale"), "patch"), ConcurrencyException)

    def test_status_codes(self):
        for status_code in (502, 503, 504, 408):
            exception = ExceptionDispatcher.get(RuntimeError("failed"), "patch", status_code)
            self.assertIsInstance(exception, ServiceUnavailableException, msg=status_code)

        exception = ExceptionDispatcher.get(RuntimeError("Script error"), "patch 'users/1'", 500)
        self.assertIs(StorageException, type(exception))
        self.assertIn("500", exception.message)
        self.assertIn("Script error", exception.message)

    def test_cyclic_chain_terminates(self):
        first, second = RuntimeError("first"), RuntimeError("second")
        first.__context__, second.__context__ = second, first
        self.assertIs(StorageException, type(ExceptionDispatcher.get(first, "load")))


if __name__ == "__main__":
    unittest.main()
