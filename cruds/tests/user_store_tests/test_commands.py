import datetime
import unittest
from unittest import mock

import requests
from ravendb.documents.operations.patch import PatchRequest, PatchStatus

from cruds.tests.test_base import TestBase
from cruds.users.commands import GetUserCommand, PatchUserCommand, PutUserCommand
from cruds.users.store import ADD_POSTS_SCRIPT, DELETE_POST_SCRIPT


class TestCommands(TestBase):
    def setUp(self):
        super(TestCommands, self).setUp()
        self.requests_executor = self.store.get_request_executor()
        command = PutUserCommand("users|", {"username": "tira", "posts": [], "@metadata": {"@collection": "Users"}})
        self.requests_executor.execute_command(command)
        self.change_vector = command.result.change_vector

    def test_put_returns_key_and_change_vector(self):
        command = PutUserCommand("users|", {"username": "dima", "posts": []})
        self.requests_executor.execute_command(command)
        self.assertEqual("users/2", command.result.key)
        self.assertEqual(self.server.change_vector_of("users/2"), command.result.change_vector)

    def test_get_missing_user_has_no_result(self):
        command = GetUserCommand.for_user("users/2")
        self.requests_executor.execute_command(command)
        self.assertIsNone(command.result)

    def test_timeout_is_sent_in_seconds(self):
        command = GetUserCommand.for_user("users/1", datetime.timedelta(milliseconds=250))
        self.requests_executor.execute_command(command)
        self.assertEqual(0.25, self.last_request.timeout)
        self.assertEqual("tira", command.result.results[0]["username"])

    def test_zero_timeout_is_not_dropped(self):
        session = mock.Mock(spec=requests.Session)
        session.cert = None
        request = requests.Request("GET", "http://127.0.0.1:8080/databases/cruds/docs?id=users/1")

        GetUserCommand.for_user("users/1", datetime.timedelta(0)).send(session, request)
        self.assertEqual(0, session.request.call_args[1]["timeout"])

        GetUserCommand.for_user("users/1").send(session, request)
        self.assertIsNone(session.request.call_args[1]["timeout"])

    def test_patch_with_change_vector_skips_on_mismatch(self):
        patch = PatchRequest(ADD_POSTS_SCRIPT, {"posts": [{"Id": "p1", "title": "", "body": "", "likes": 0}]})

        command = PatchUserCommand(self.store.conventions, "users/1", patch, "A:0-stale")
        self.requests_executor.execute_command(command)
        self.assertEqual(PatchStatus.SKIPPED, command.result.status)
        self.assertEqual(["true"], self.last_request.query["skipPatchIfChangeVectorMismatch"])
        self.assertEqual([], self.server.get("users/1")["posts"])

        command = PatchUserCommand(self.store.conventions, "users/1", patch, self.change_vector)
        self.requests_executor.execute_command(command)
        self.assertEqual(PatchStatus.PATCHED, command.result.status)
        self.assertEqual(["p1"], [post["Id"] for post in self.server.get("users/1")["posts"]])

    def test_patch_without_change_vector_sends_no_condition(self):
        command = PatchUserCommand(self.store.conventions, "users/1", PatchRequest(DELETE_POST_SCRIPT, {"post_id": "p1"}))
        self.requests_executor.execute_command(command)

        self.assertEqual(PatchStatus.NOT_MODIFIED, command.result.status)
        self.assertNotIn("If-Match", self.last_request.headers)
        self.assertNotIn("skipPatchIfChangeVectorMismatch", self.last_request.query)


if __name__ == "__main__":
    unittest.main()
