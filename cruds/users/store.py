from __future__ import annotations

import dataclasses
import datetime
import http
import logging
from typing import Optional, Sequence

from ravendb import DocumentStore
from ravendb.documents.operations.patch import PatchRequest, PatchStatus
from ravendb.http.raven_command import RavenCommand

from cruds.exceptions.exception_dispatcher import ExceptionDispatcher
from cruds.exceptions.exceptions import (
    ValidationException,
    UserDoesNotExistException,
    PostDoesNotExistException,
)
from cruds.exceptions.store_exceptions import BadResponseException, ConcurrencyException
from cruds.users.commands import GetUserCommand, PatchUserCommand, PutUserCommand
from cruds.users.models import User, Post

MAX_ID_LENGTH = 512
SERVER_GENERATED_ID_SUFFIX = "|"

# Array changes run on the server inside a single document patch.
ADD_POSTS_SCRIPT = """
if (!this.posts) {
    this.posts = [];
}
for (var i = 0; i < args.posts.length; i++) {
    this.posts.push(args.posts[i]);
}
"""

UPDATE_POST_SCRIPT = """
var posts = this.posts || [];
for (var i = 0; i < posts.length; i++) {
    if (posts[i].Id === args.post_id) {
        posts[i] = args.post;
        break;
    }
}
"""

DELETE_POST_SCRIPT = """
if (this.posts) {
    this.posts = this.posts.filter(function (post) { return post.Id !== args.post_id; });
}
"""


class UserStore:
    """
    Reads and writes User documents together with the posts embedded in them.

    Every method is a single round trip to the server (update_post needs a second read only to tell
    a missing post from an unchanged one). Nothing is retried: errors reach the caller as
    ValidationException, a NotModifiedException subclass or a StorageException subclass.
    """

    logger = logging.getLogger("user_store")

    def __init__(self, store: DocumentStore, database: Optional[str] = None):
        if store is None:
            raise ValueError("Store cannot be None")
        self._store = store
        self._database = database

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def _id_prefix(self) -> str:
        conventions = self._store.conventions
        return conventions.transform_class_collection_name_to_document_id_prefix(conventions.get_collection_name(User))

    def insert(self, user: User, timeout: Optional[datetime.timedelta] = None) -> User:
        if user is None:
            raise ValidationException("User cannot be None")
        if user.Id:
            raise ValidationException(f"User already has id '{user.Id}', ids are assigned by the server on insert")
        for post in user.posts:
            post.validate()
        timeout = self._effective_timeout(timeout)

        conventions = self._store.conventions
        document = user.to_json()
        document["@metadata"] = {
            "@collection": conventions.get_collection_name(User),
            "Raven-Python-Type": conventions.get_python_class_name(User),
        }

        command = PutUserCommand(self._id_prefix + SERVER_GENERATED_ID_SUFFIX, document, timeout)
        self._execute(command, "insert user")

        if command.result is None or not command.result.key:
            raise BadResponseException("Server did not return the id of the inserted user")

        self.logger.info(f"Inserted user '{command.result.key}' with {len(user.posts)} post(s)")
        return dataclasses.replace(
            user, posts=list(user.posts), Id=command.result.key, change_vector=command.result.change_vector
        )

    def find_by_id(self, user_id: str, timeout: Optional[datetime.timedelta] = None) -> User:
        self.validate_user_id(user_id)
        timeout = self._effective_timeout(timeout)

        command = GetUserCommand.for_user(user_id, timeout)
        self._execute(command, f"load '{user_id}'")

        if command.result is None or not command.result.results or command.result.results[0] is None:
            raise UserDoesNotExistException(f"User '{user_id}' does not exist", user_id)

        user = User.from_json(command.result.results[0])
        if user.Id is None:
            user.Id = user_id
        return user

    def add_posts(
        self,
        user_id: str,
        posts: Sequence[Post],
        timeout: Optional[datetime.timedelta] = None,
        change_vector: Optional[str] = None,
    ) -> None:
        """
        Appends posts, in the given order, to the end of the user's posts.
        An empty sequence is rejected since it could never modify the user.
        """
        self.validate_user_id(user_id)
        if posts is None or isinstance(posts, (Post, str)):
            raise ValidationException("Posts must be a sequence of Post")
        posts = list(posts)
        if not posts:
            raise ValidationException("Posts must contain at least one Post")
        for post in posts:
            post.validate()
        timeout = self._effective_timeout(timeout)

        patch = PatchRequest(ADD_POSTS_SCRIPT, {"posts": [post.to_json() for post in posts]})
        status = self._patch(user_id, patch, timeout, change_vector)

        if status == PatchStatus.DOCUMENT_DOES_NOT_EXIST:
            raise UserDoesNotExistException(f"Cannot add posts, user '{user_id}' does not exist", user_id)
        if status != PatchStatus.PATCHED:
            raise BadResponseException(f"Unexpected patch status '{status}' when adding posts to '{user_id}'")

        self.logger.info(f"Added {len(posts)} post(s) to user '{user_id}'")

    def update_post(
        self,
        user_id: str,
        post_id: str,
        post: Post,
        timeout: Optional[datetime.timedelta] = None,
        change_vector: Optional[str] = None,
    ) -> PatchStatus:
        """
        Replaces the post matching post_id with post. The replacement's Id is stored as given.

        Returns PatchStatus.PATCHED when the user changed and PatchStatus.NOT_MODIFIED when the
        post was found but already equal to the replacement.
        """
        self.validate_user_id(user_id)
        self.__validate_post_id(post_id)
        if post is None:
            raise ValidationException("Post cannot be None")
        post.validate()
        timeout = self._effective_timeout(timeout)

        patch = PatchRequest(UPDATE_POST_SCRIPT, {"post_id": post_id, "post": post.to_json()})
        status = self._patch(user_id, patch, timeout, change_vector)

        if status == PatchStatus.DOCUMENT_DOES_NOT_EXIST:
            raise UserDoesNotExistException(f"Cannot update post, user '{user_id}' does not exist", user_id)

        if status == PatchStatus.NOT_MODIFIED:
            user = self.find_by_id(user_id, timeout)
            if not any(existing.Id == post_id for existing in user.posts):
                raise PostDoesNotExistException(
                    f"Cannot update post, user '{user_id}' has no post '{post_id}'", user_id, post_id
                )
            self.logger.debug(f"Post '{post_id}' of user '{user_id}' is already up to date")
            return PatchStatus.NOT_MODIFIED

        if status != PatchStatus.PATCHED:
            raise BadResponseException(f"Unexpected patch status '{status}' when updating '{user_id}'")

        self.logger.info(f"Updated post '{post_id}' of user '{user_id}'")
        return PatchStatus.PATCHED

    def delete_post(
        self,
        user_id: str,
        post_id: str,
        timeout: Optional[datetime.timedelta] = None,
        change_vector: Optional[str] = None,
    ) -> None:
        self.validate_user_id(user_id)
        self.__validate_post_id(post_id)
        timeout = self._effective_timeout(timeout)

        patch = PatchRequest(DELETE_POST_SCRIPT, {"post_id": post_id})
        status = self._patch(user_id, patch, timeout, change_vector)

        if status == PatchStatus.DOCUMENT_DOES_NOT_EXIST:
            raise UserDoesNotExistException(f"Cannot delete post, user '{user_id}' does not exist", user_id)
        # filtering out nothing leaves the document as it was
        if status == PatchStatus.NOT_MODIFIED:
            raise PostDoesNotExistException(
                f"Cannot delete post, user '{user_id}' has no post '{post_id}'", user_id, post_id
            )
        if status != PatchStatus.PATCHED:
            raise BadResponseException(f"Unexpected patch status '{status}' when deleting from '{user_id}'")

        self.logger.info(f"Deleted post '{post_id}' of user '{user_id}'")

    def validate_user_id(self, user_id: str) -> str:
        """
        Checks that user_id is a well formed id of a stored user, e.g. 'users/1'.
        The prefix is matched case-insensitively, the way the server compares ids.
        """
        if not isinstance(user_id, str) or not user_id or user_id.isspace():
            raise ValidationException(f"User id must be a non-empty string, got {user_id!r}")

        if len(user_id.encode("utf-8")) > MAX_ID_LENGTH:
            raise ValidationException(f"User id '{user_id[:32]}...' is longer than {MAX_ID_LENGTH} bytes")

        if any(c.isspace() for c in user_id):
            raise ValidationException(f"User id '{user_id}' cannot contain whitespace")

        prefix = self._id_prefix + self._store.conventions.identity_parts_separator
        if not user_id.lower().startswith(prefix.lower()) or len(user_id) == len(prefix):
            raise ValidationException(f"User id '{user_id}' is not of the form '{prefix}<identifier>'")

        if user_id.endswith(SERVER_GENERATED_ID_SUFFIX):
            raise ValidationException(f"User id '{user_id}' is an identity request, not a document id")

        return user_id

    def _effective_timeout(self, timeout: Optional[datetime.timedelta]) -> Optional[datetime.timedelta]:
        if timeout is not None:
            if timeout <= datetime.timedelta(0):
                raise ValidationException(f"Timeout must be positive, got {timeout}")
            return timeout

        # the client's conventions use timedelta.min for "no timeout"
        default = self._store.get_request_executor(self._database).default_timeout
        if default is None or default <= datetime.timedelta(0):
            return None
        return default

    def _patch(
        self,
        user_id: str,
        patch: PatchRequest,
        timeout: Optional[datetime.timedelta],
        change_vector: Optional[str],
    ) -> PatchStatus:
        command = PatchUserCommand(self._store.conventions, user_id, patch, change_vector, timeout)
        self._execute(command, f"patch '{user_id}'")

        if command.status_code == http.HTTPStatus.NOT_MODIFIED:
            return PatchStatus.NOT_MODIFIED

        if command.status_code == http.HTTPStatus.NOT_FOUND:
            return PatchStatus.DOCUMENT_DOES_NOT_EXIST

        if command.result is None:
            raise BadResponseException(f"Patch of '{user_id}' returned an empty response")

        if command.result.status == PatchStatus.SKIPPED:
            exception = ConcurrencyException(f"User '{user_id}' was modified after change vector '{change_vector}' was read")
            exception.expected_change_vector = change_vector
            raise exception

        return command.result.status

    def _execute(self, command: RavenCommand, action: str) -> None:
        request_executor = self._store.get_request_executor(self._database)
        try:
            request_executor.execute_command(command)
        except ExceptionDispatcher.CLIENT_ERRORS as e:
            exception = ExceptionDispatcher.get(e, action, command.status_code)
            self.logger.info(f"Failed to {action} on '{request_executor.url}'", exc_info=e)
            raise exception from e

    @staticmethod
    def __validate_post_id(post_id: str) -> None:
        if not isinstance(post_id, str) or not post_id:
            raise ValidationException(f"Post id must be a non-empty string, got {post_id!r}")
