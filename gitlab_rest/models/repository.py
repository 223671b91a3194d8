"""Repository records: commits, trees, diffs and refs."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from gitlab_rest.models.base import ResourceModel


class TreeEntryType(str, Enum):
    """Kind of a repository tree entry."""

    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"


class CommitRefType(str, Enum):
    """Which refs containing a commit are listed."""

    ALL = "all"
    BRANCH = "branch"
    TAG = "tag"


class Commit(ResourceModel):
    """A repository commit."""

    id: str
    short_id: str | None = None
    title: str | None = None
    message: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    authored_date: datetime | None = None
    committer_name: str | None = None
    committer_email: str | None = None
    committed_date: datetime | None = None
    created_at: datetime | None = None
    parent_ids: list[str] = Field(default_factory=list)
    web_url: str | None = None


class Tree(ResourceModel):
    """An entry of a repository tree listing."""

    id: str
    name: str
    type: TreeEntryType
    path: str
    mode: str | None = None


class Diff(ResourceModel):
    """Changes of one file in a commit."""

    diff: str = ""
    old_path: str
    new_path: str
    a_mode: str | None = None
    b_mode: str | None = None
    new_file: bool = False
    renamed_file: bool = False
    deleted_file: bool = False


class Ref(ResourceModel):
    """A branch or tag that contains a commit."""

    type: CommitRefType
    name: str
