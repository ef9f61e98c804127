"""Repository references: parse the target registry repo and normalize local remotes."""

import re

from pydantic import BaseModel

from vulcan_prd.errors import InvalidRepoFormat

_GITHUB_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+)")
_SSH_REMOTE_RE = re.compile(r"^git@github\.com:([^/]+)/(.+?)(\.git)?$")
_GIT_SUFFIX_RE = re.compile(r"\.git$")


class RepoRef(BaseModel):
    """Owner and name of a GitHub repository."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repo_ref(ref: str) -> RepoRef:
    """Parse "owner/repo" or a URL containing github.com/owner/repo.

    A trailing ".git" on the repository name is dropped.

    Raises:
        InvalidRepoFormat: For any other shape.
    """
    value = (ref or "").strip()
    if "github.com/" in value:
        match = _GITHUB_URL_RE.search(value)
        if match:
            return RepoRef(owner=match.group(1), repo=_GIT_SUFFIX_RE.sub("", match.group(2)))
        raise InvalidRepoFormat(ref)
    parts = value.split("/")
    if len(parts) == 2 and all(p.strip() for p in parts):
        owner, name = parts
        name = _GIT_SUFFIX_RE.sub("", name)
        if name:
            return RepoRef(owner=owner, repo=name)
    raise InvalidRepoFormat(ref)


def normalize_remote_url(raw: str | None) -> str | None:
    """Canonical https form of a git remote URL.

    git@github.com:owner/repo.git -> https://github.com/owner/repo;
    https remotes lose a trailing .git; other schemes are returned as is.
    """
    if not raw:
        return None
    remote = raw.strip()
    if not remote:
        return None
    if remote.startswith("git@"):
        match = _SSH_REMOTE_RE.match(remote)
        if match:
            return f"https://github.com/{match.group(1)}/{match.group(2)}"
    if remote.startswith("https://"):
        return _GIT_SUFFIX_RE.sub("", remote)
    return remote
