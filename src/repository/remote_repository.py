"""Remote repository capability and its GitHub adapter.

RemoteRepository is the narrow set of operations the sync engine needs from
a Git host. GitHubRepository implements it on top of APIWrapper and is the
only place where the host's JSON payloads are turned into typed records.
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from src.github_client.api_wrapper import APIWrapper
from src.github_client.errors import (
    APIAccessError,
    BinaryContentError,
    BranchNotFoundError,
    NotFoundError,
    RepositoryNotFoundError,
)
from .models import CommitRecord, RepositoryRef, TreeEntry

logger = logging.getLogger(__name__)

# Regular, non-executable file
BLOB_MODE = "100644"


class RemoteRepository(Protocol):
    """Operations the sync engine performs against a remote Git host.

    All methods may raise RemoteUnavailableError or NotFoundError. Reads are
    safe to retry; writes are not idempotent. create_commit followed by
    update_ref is not atomic: a failure in between leaves an unreferenced
    commit object on the host, which is harmless.
    """

    def resolve_by_id(self, repo_id: str) -> Optional[RepositoryRef]:
        ...

    def resolve_by_name(self, owner: str, name: str) -> Optional[RepositoryRef]:
        ...

    def get_head_commit(self, ref: RepositoryRef) -> CommitRecord:
        ...

    def get_commit(self, ref: RepositoryRef, sha: str) -> CommitRecord:
        ...

    def get_tree_recursive(self, ref: RepositoryRef, tree_sha: str) -> List[TreeEntry]:
        ...

    def read_blob(self, ref: RepositoryRef, blob_sha: str) -> str:
        ...

    def create_blob(self, ref: RepositoryRef, content: str) -> str:
        ...

    def create_tree(
        self,
        ref: RepositoryRef,
        base_tree_sha: str,
        entries: List[Tuple[str, str]],
    ) -> str:
        ...

    def create_commit(
        self,
        ref: RepositoryRef,
        tree_sha: str,
        parent_sha: str,
        message: str,
    ) -> CommitRecord:
        ...

    def update_ref(self, ref: RepositoryRef, new_commit_sha: str) -> None:
        ...

    def create_repository(self, name: str) -> RepositoryRef:
        ...

    def delete_repository(self, ref: RepositoryRef) -> None:
        ...

    def get_owner(self) -> str:
        ...


class GitHubRepository:
    """RemoteRepository implementation backed by the GitHub REST API.

    Attributes:
        api: APIWrapper used for all HTTP calls

    Example:
        >>> remote = GitHubRepository(APIWrapper(Authenticator()))
        >>> ref = remote.resolve_by_id("123456")
        >>> head = remote.get_head_commit(ref)
    """

    def __init__(self, api: APIWrapper):
        self.api = api
        self._owner: Optional[str] = None

    # === Payload translation ===

    @staticmethod
    def _to_ref(data: Dict[str, Any]) -> RepositoryRef:
        # Sync always targets "main", whatever the host reports as default
        return RepositoryRef(
            id=str(data["id"]),
            owner=data["owner"]["login"],
            name=data["name"],
            html_url=data.get("html_url", ""),
        )

    @staticmethod
    def _to_commit(data: Dict[str, Any]) -> CommitRecord:
        author = data.get("author") or {}
        return CommitRecord(
            sha=data["sha"],
            message=data.get("message", ""),
            author_date=author.get("date", ""),
            tree_sha=data["tree"]["sha"],
        )

    # === Resolution ===

    def resolve_by_id(self, repo_id: str) -> Optional[RepositoryRef]:
        """Look up a repository by id.

        Returns:
            RepositoryRef, or None if the id no longer resolves
        """
        try:
            return self._to_ref(self.api.get_repository_by_id(repo_id))
        except NotFoundError:
            logger.debug(f"Repository id {repo_id} does not resolve")
            return None

    def resolve_by_name(self, owner: str, name: str) -> Optional[RepositoryRef]:
        """Look up a repository by owner and name, None if absent."""
        try:
            return self._to_ref(self.api.get_repository(owner, name))
        except NotFoundError:
            return None

    def get_owner(self) -> str:
        """Return the login of the authenticated user (cached)."""
        if self._owner is None:
            self._owner = self.api.get_authenticated_user()["login"]
        return self._owner

    # === Reads ===

    def get_head_commit(self, ref: RepositoryRef) -> CommitRecord:
        """Read the commit at the tip of the default branch.

        Raises:
            BranchNotFoundError: If the branch does not exist (an empty
                repository answers 404 or 409 on the ref)
        """
        try:
            ref_data = self.api.get_ref(ref.owner, ref.name, ref.default_branch)
        except NotFoundError as e:
            raise BranchNotFoundError(ref.full_name, ref.default_branch) from e
        except APIAccessError as e:
            if e.status_code == 409:
                raise BranchNotFoundError(ref.full_name, ref.default_branch) from e
            raise

        return self.get_commit(ref, ref_data["object"]["sha"])

    def get_commit(self, ref: RepositoryRef, sha: str) -> CommitRecord:
        """Read a specific commit."""
        try:
            return self._to_commit(self.api.get_commit(ref.owner, ref.name, sha))
        except NotFoundError as e:
            raise NotFoundError(f"Commit {sha} in {ref.full_name}") from e

    def get_tree_recursive(self, ref: RepositoryRef, tree_sha: str) -> List[TreeEntry]:
        """List every entry under a tree.

        Directories and submodules are returned with is_file=False.
        """
        data = self.api.get_tree(ref.owner, ref.name, tree_sha, recursive=True)
        if data.get("truncated"):
            logger.warning(
                f"Tree listing for {ref.full_name} was truncated by the host; "
                f"some files will be missing"
            )
        return [
            TreeEntry(
                path=item["path"],
                blob_sha=item["sha"],
                is_file=item.get("type") == "blob",
            )
            for item in data.get("tree", [])
        ]

    def read_blob(self, ref: RepositoryRef, blob_sha: str) -> str:
        """Download a blob and decode it as UTF-8 text.

        Raises:
            BinaryContentError: If the blob is not valid UTF-8
        """
        data = self.api.get_blob(ref.owner, ref.name, blob_sha)
        content = data.get("content", "")
        if data.get("encoding") == "base64":
            raw = base64.b64decode(content)
        else:
            raw = content.encode("utf-8")

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BinaryContentError(blob_sha) from e

    # === Writes ===

    def create_blob(self, ref: RepositoryRef, content: str) -> str:
        return self.api.create_blob(ref.owner, ref.name, content)["sha"]

    def create_tree(
        self,
        ref: RepositoryRef,
        base_tree_sha: str,
        entries: List[Tuple[str, str]],
    ) -> str:
        """Create a tree layered over base_tree_sha.

        Args:
            ref: Target repository
            base_tree_sha: Tree the new entries are applied on top of
            entries: (path, blob_sha) pairs, all written as regular files

        Returns:
            SHA of the new tree
        """
        tree = [
            {"path": path, "mode": BLOB_MODE, "type": "blob", "sha": blob_sha}
            for path, blob_sha in entries
        ]
        return self.api.create_tree(ref.owner, ref.name, base_tree_sha, tree)["sha"]

    def create_commit(
        self,
        ref: RepositoryRef,
        tree_sha: str,
        parent_sha: str,
        message: str,
    ) -> CommitRecord:
        data = self.api.create_commit(ref.owner, ref.name, message, tree_sha, [parent_sha])
        return self._to_commit(data)

    def update_ref(self, ref: RepositoryRef, new_commit_sha: str) -> None:
        self.api.update_ref(ref.owner, ref.name, ref.default_branch, new_commit_sha)

    # === Repository lifecycle ===

    def create_repository(self, name: str) -> RepositoryRef:
        """Create an auto-initialised repository so the default branch exists."""
        data = self.api.create_repository(name, auto_init=True)
        logger.info(f"Created repository {data.get('full_name', name)}")
        return self._to_ref(data)

    def delete_repository(self, ref: RepositoryRef) -> None:
        """Delete a repository.

        Raises:
            RepositoryNotFoundError: If the repository is already gone
        """
        try:
            self.api.delete_repository(ref.owner, ref.name)
        except NotFoundError as e:
            raise RepositoryNotFoundError(ref.full_name) from e
        logger.info(f"Deleted repository {ref.full_name}")
