"""Read local git configuration (remote origin URL) for source repo auto-detection."""

import logging
import subprocess
from pathlib import Path

LOG = logging.getLogger("vulcan_prd.git")


class GitRunnerError(Exception):
    """Raised when a git command fails."""

    pass


def _run_git(args: list[str], cwd: Path, log: logging.Logger | None = None) -> str:
    """Run git command and return stripped stdout; raise GitRunnerError on non-zero exit."""
    cmd = ["git"] + args
    try:
        proc = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, timeout=60)
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip()
        if log:
            log.debug("Git %s failed: %s", args, err)
        raise GitRunnerError(f"git {' '.join(args)}: {err}") from e
    except FileNotFoundError as e:
        raise GitRunnerError("git not found") from e
    except subprocess.TimeoutExpired as e:
        raise GitRunnerError(f"git {' '.join(args)}: timed out") from e
    return (proc.stdout or "").strip()


def get_git_remote_url(repo_dir: Path | None = None) -> str | None:
    """Return remote.origin.url of the repository at repo_dir, or None.

    Best-effort: any failure (not a repo, no origin, git missing) gives None.
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    try:
        url = _run_git(["config", "--get", "remote.origin.url"], cwd=cwd, log=LOG)
    except (GitRunnerError, OSError) as e:
        LOG.debug("No git remote detected in %s: %s", cwd, e)
        return None
    return url or None
