from __future__ import annotations

import datetime
from typing import Optional

import requests
from ravendb.documents.commands.crud import GetDocumentsCommand, PutDocumentCommand
from ravendb.documents.conventions import DocumentConventions
from ravendb.documents.operations.patch import PatchOperation, PatchRequest


class DeadlineCommand:
    """
    Mixed in front of a RavenDB command so its ``timeout`` bounds the HTTP round trip.
    A None timeout waits for as long as the server takes.
    """

    timeout: Optional[datetime.timedelta]

    def send(self, session: requests.Session, request: requests.Request) -> requests.Response:
        return session.request(
            request.method,
            url=request.url,
            data=request.data,
            files=request.files,
            cert=session.cert,
            headers=request.headers,
            timeout=self.timeout.total_seconds() if self.timeout is not None else None,
        )


class PutUserCommand(DeadlineCommand, PutDocumentCommand):
    def __init__(self, key: str, document: dict, timeout: Optional[datetime.timedelta] = None):
        super().__init__(key, None, document)
        self.timeout = timeout


class GetUserCommand(DeadlineCommand, GetDocumentsCommand):
    @classmethod
    def for_user(cls, user_id: str, timeout: Optional[datetime.timedelta] = None) -> GetUserCommand:
        command = cls.from_single_id(user_id)
        command.timeout = timeout
        return command


class PatchUserCommand(DeadlineCommand, PatchOperation.PatchCommand):
    """
    Runs a patch script against one user document.

    With a change vector the patch is sent with If-Match and skipPatchIfChangeVectorMismatch,
    so a stale change vector comes back as PatchStatus.SKIPPED instead of a conflict response.
    """

    def __init__(
        self,
        conventions: DocumentConventions,
        user_id: str,
        patch: PatchRequest,
        change_vector: Optional[str] = None,
        timeout: Optional[datetime.timedelta] = None,
    ):
        super().__init__(conventions, user_id, change_vector, patch, None, change_vector is not None)
        self.timeout = timeout
