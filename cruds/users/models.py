from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from ravendb.primitives import constants

from cruds.exceptions.exceptions import ValidationException


@dataclass()
class Post:
    Id: str
    title: str = ""
    body: str = ""
    likes: int = 0

    @classmethod
    def new(cls, title: str = "", body: str = "", likes: int = 0) -> Post:
        return cls(uuid.uuid4().hex, title, body, likes)

    def validate(self) -> Post:
        if not isinstance(self.Id, str) or not self.Id:
            raise ValidationException(f"Post id must be a non-empty string, got {self.Id!r}")
        if isinstance(self.likes, bool) or not isinstance(self.likes, int) or self.likes < 0:
            raise ValidationException(f"Post '{self.Id}' likes must be a non-negative integer, got {self.likes!r}")
        return self

    def to_json(self) -> dict:
        return {"Id": self.Id, "title": self.title, "body": self.body, "likes": self.likes}

    @classmethod
    def from_json(cls, json_dict: dict) -> Post:
        return cls(
            json_dict.get("Id", None),
            json_dict.get("title", ""),
            json_dict.get("body", ""),
            json_dict.get("likes", 0),
        )


@dataclass()
class User:
    username: str = ""
    posts: List[Post] = field(default_factory=list)
    Id: Optional[str] = None
    change_vector: Optional[str] = field(default=None, compare=False)

    def to_json(self) -> dict:
        return {"username": self.username, "posts": [post.to_json() for post in self.posts]}

    @classmethod
    def from_json(cls, document: dict) -> User:
        metadata = document.get(constants.Documents.Metadata.KEY, {})
        return cls(
            document.get("username", ""),
            [Post.from_json(post) for post in document.get("posts") or []],
            metadata.get(constants.Documents.Metadata.ID, None),
            metadata.get(constants.Documents.Metadata.CHANGE_VECTOR, None),
        )
