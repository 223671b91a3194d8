"""Repository facade: trees, blobs, archives and commits of one project."""

from collections.abc import Iterable
from typing import TYPE_CHECKING

from gitlab_rest.fetch.client import BodyConsumer
from gitlab_rest.fetch.pagination import PaginatedSequence
from gitlab_rest.fetch.transport import escape_path_segment
from gitlab_rest.models.repository import Commit, CommitRefType, Diff, Ref, Tree
from gitlab_rest.query.models import CommitRefsQuery, GetCommitsRequest, TreeQuery


if TYPE_CHECKING:
    from gitlab_rest.api.client import GitLabClient


class RepositoryClient:
    """Repository endpoints of a single project.

    Only builds paths; every call goes through the owning client.
    """

    def __init__(self, client: "GitLabClient", project: int | str) -> None:
        """Initialize the facade.

        Args:
            client: Owning GitLab client.
            project: Numeric project id or namespaced path.
        """
        self._client = client
        self._project_path = f"/projects/{escape_path_segment(project)}"
        self._repo_path = f"{self._project_path}/repository"

    @property
    def tree(self) -> PaginatedSequence[Tree]:
        """Root tree of the default branch."""
        return self._client.get_all(f"{self._repo_path}/tree", Tree)

    def get_tree(
        self,
        path: str | None = None,
        ref: str | None = None,
        recursive: bool = False,
    ) -> PaginatedSequence[Tree]:
        """List a tree, optionally at a ref and recursively."""
        query = TreeQuery(path=path, ref=ref, recursive=True if recursive else None)
        return self._client.get_all(query.apply_to(f"{self._repo_path}/tree"), Tree)

    def get_raw_blob(self, sha: str, consumer: BodyConsumer) -> None:
        """Stream the raw content of a blob to ``consumer``."""
        self._client.stream(
            f"{self._repo_path}/blobs/{escape_path_segment(sha)}/raw", consumer
        )

    def get_archive(self, consumer: BodyConsumer) -> None:
        """Stream an archive of the repository to ``consumer``."""
        self._client.stream(f"{self._repo_path}/archive", consumer)

    @property
    def commits(self) -> PaginatedSequence[Commit]:
        """Commits of the default branch."""
        return self._client.get_all(f"{self._repo_path}/commits", Commit)

    def get_commits(
        self,
        request: GetCommitsRequest | str | None = None,
        max_results: int = 0,
    ) -> Iterable[Commit]:
        """List commits of a branch or tag.

        Args:
            request: Filters, or just a ref name.
            max_results: Overrides ``request.max_results`` when positive.

        Returns:
            Lazy sequence of commits, capped at the requested count.
        """
        if request is None or isinstance(request, str):
            request = GetCommitsRequest(ref_name=request, max_results=max_results)
        elif max_results > 0:
            request = request.model_copy(update={"max_results": max_results})

        commits = self._client.get_all(
            request.apply_to(f"{self._repo_path}/commits"), Commit
        )
        if request.max_results <= 0:
            return commits
        return commits.take(request.max_results)

    def get_commit(self, sha: str) -> Commit:
        """Get one commit."""
        return self._client.get(
            f"{self._repo_path}/commits/{escape_path_segment(sha)}", Commit
        )

    def get_commit_diff(self, sha: str) -> PaginatedSequence[Diff]:
        """List the file changes of a commit."""
        return self._client.get_all(
            f"{self._repo_path}/commits/{escape_path_segment(sha)}/diff", Diff
        )

    def get_commit_refs(
        self,
        sha: str,
        ref_type: CommitRefType = CommitRefType.ALL,
    ) -> PaginatedSequence[Ref]:
        """List branches and/or tags containing a commit."""
        query = CommitRefsQuery(type=ref_type)
        path = f"{self._repo_path}/commits/{escape_path_segment(sha)}/refs"
        return self._client.get_all(query.apply_to(path), Ref)
