"""GitHub API adapter."""

import base64
import logging
from typing import Any, Dict

import requests

from vulcan_prd.adapters.base import (
    GitPlatformError,
    PermissionDenied,
    RemoteRepositoryClient,
    RepoAccessError,
)
from vulcan_prd.models import PR, AccessReport

LOG = logging.getLogger("vulcan_prd.adapters.github")

TOKEN_HELP = (
    "To fix this:\n"
    "1. Ensure your GitHub token has the 'repo' scope (for private repos) "
    "or 'public_repo' scope (for public repos)\n"
    "2. Verify you have write access to {repo}\n"
    "3. If the repo is private, make sure your token has access to it\n"
    "4. Create a new token at https://github.com/settings/tokens with appropriate permissions"
)


def _pr_from_api(data: Dict[str, Any]) -> PR:
    head = data.get("head") or {}
    base = data.get("base") or {}
    return PR(
        number=data["number"],
        title=data.get("title") or "",
        body=data.get("body") or "",
        head_branch=head.get("ref", ""),
        base_branch=base.get("ref", ""),
        state=data.get("state", "open"),
        html_url=data.get("html_url"),
    )


def _decode_content(data: Dict[str, Any]) -> str | None:
    """Decode a contents API payload; None for directories and symlinks."""
    if not isinstance(data, dict) or "content" not in data:
        return None
    encoding = data.get("encoding", "base64")
    if encoding != "base64":
        return data["content"]
    return base64.b64decode(data["content"]).decode("utf-8")


class GitHubAdapter(RemoteRepositoryClient):
    """GitHub REST v3 implementation."""

    def __init__(self, token: str, api_url: str = "https://api.github.com", timeout: int = 30) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        resp = self._session.request(method, url, params=params, json=json, timeout=self._timeout)
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except Exception:
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}", resp.status_code)
        return resp

    def get_default_branch(self, repo: str) -> str:
        data = self._request("GET", f"/repos/{repo}").json()
        return data.get("default_branch", "main")

    def get_file_content(self, repo: str, path: str, ref: str | None = None) -> str | None:
        params = {"ref": ref} if ref else None
        try:
            resp = self._request("GET", f"/repos/{repo}/contents/{path}", params=params)
        except GitPlatformError as e:
            if e.status_code == 404:
                return None
            if e.status_code in (401, 403):
                raise PermissionDenied(
                    f"Permission denied accessing {repo}. "
                    "Ensure your GitHub token has read access to the repository. "
                    f"Original error: {e}",
                    e.status_code,
                ) from e
            raise
        return _decode_content(resp.json())

    def _get_file_sha(self, repo: str, path: str, branch: str) -> str | None:
        try:
            resp = self._request("GET", f"/repos/{repo}/contents/{path}", params={"ref": branch})
        except GitPlatformError as e:
            if e.status_code == 404:
                return None
            raise
        data = resp.json()
        return data.get("sha") if isinstance(data, dict) else None

    def create_branch(self, repo: str, branch_name: str, base_branch: str) -> None:
        try:
            ref_resp = self._request("GET", f"/repos/{repo}/git/ref/heads/{base_branch}")
            sha = ref_resp.json()["object"]["sha"]
            self._request(
                "POST",
                f"/repos/{repo}/git/refs",
                json={"ref": f"refs/heads/{branch_name}", "sha": sha},
            )
        except GitPlatformError as e:
            if e.status_code in (401, 403, 404):
                if e.status_code in (401, 403):
                    head = f"Permission denied: Your GitHub token doesn't have write access to {repo}"
                else:
                    head = f"Repository not found or not accessible: {repo}"
                raise RepoAccessError(
                    f"{head}\n\n{TOKEN_HELP.format(repo=repo)}\n\nOriginal error: {e}",
                    e.status_code,
                ) from e
            raise
        LOG.info("Created branch %s from %s in %s", branch_name, base_branch, repo)

    def create_or_update_file(
        self,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str,
    ) -> None:
        try:
            sha = self._get_file_sha(repo, path, branch)
            payload: Dict[str, Any] = {
                "message": message,
                "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
                "branch": branch,
            }
            if sha:
                payload["sha"] = sha
            self._request("PUT", f"/repos/{repo}/contents/{path}", json=payload)
        except GitPlatformError as e:
            if e.status_code in (401, 403, 404):
                raise PermissionDenied(
                    f"Permission denied: Cannot write to {repo}. "
                    "Ensure your GitHub token has write access. "
                    f"Original error: {e}",
                    e.status_code,
                ) from e
            raise
        LOG.info("%s %s on %s", "Updated" if sha else "Created", path, branch)

    def create_pr(
        self,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> PR:
        resp = self._request(
            "POST",
            f"/repos/{repo}/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )
        return _pr_from_api(resp.json())

    def verify_access(self, repo: str) -> AccessReport:
        try:
            data = self._request("GET", f"/repos/{repo}").json()
        except GitPlatformError as e:
            if e.status_code == 404:
                return AccessReport(
                    has_read=False,
                    has_write=False,
                    error=f"Repository {repo} not found or not accessible",
                )
            if e.status_code in (401, 403):
                return AccessReport(
                    has_read=False,
                    has_write=False,
                    error="Token is invalid or lacks required permissions",
                )
            return AccessReport(has_read=False, has_write=False, error=str(e))

        permissions = data.get("permissions")
        if isinstance(permissions, dict):
            if permissions.get("push"):
                return AccessReport(has_read=True, has_write=True)
            return AccessReport(has_read=True, has_write=False, error="Token lacks write permissions")

        branch = data.get("default_branch", "main")
        try:
            self._request("GET", f"/repos/{repo}/git/ref/heads/{branch}")
        except GitPlatformError as e:
            if e.status_code == 403:
                return AccessReport(has_read=True, has_write=False, error="Token lacks write permissions")
            return AccessReport(has_read=True, has_write=False, error=str(e))
        return AccessReport(has_read=True, has_write=True)
