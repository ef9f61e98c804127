"""
Publish a PRD to the central registry repo: one branch, two file writes, one PR.

Sequence: validate -> resolve name and source repo -> resolve target repo ->
compute path -> read and upsert registry.json -> branch name -> PR text ->
(dry run stops here) -> create branch -> write PRD -> write registry -> open PR.

Every error is caught in publish() and returned as PublishResult.error.
Nothing is rolled back: if a step fails after the branch was created, the
branch (and any files already written to it) stay on the remote.
"""

import binascii
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field

from vulcan_prd.adapters.base import GitPlatformError, PermissionDenied, RemoteRepositoryClient
from vulcan_prd.config import RegistryConfig
from vulcan_prd.errors import NameExtractionFailed, RegistryReadFailed, ValidationFailed
from vulcan_prd.git import get_git_remote_url
from vulcan_prd.models import FileChange, PublishRequest, PublishResult, RegistryEntry
from vulcan_prd.naming import branch_name, branch_timestamp, prd_path
from vulcan_prd.registry import UpsertOutcome, dump_registry, load_registry, recovered_registry, upsert
from vulcan_prd.repo_ref import RepoRef, normalize_remote_url, parse_repo_ref
from vulcan_prd.validator import extract_product_name, validate

LOG = logging.getLogger("vulcan_prd.publisher")


class PublishPlan(BaseModel):
    """Everything publish() would send to the remote, computed without mutating it."""

    repo: RepoRef
    base_branch: str
    product_name: str
    source_repo: str | None = None
    prd_path: str
    branch: str
    title: str
    body: str
    outcome: UpsertOutcome
    files: list[FileChange]
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_update(self) -> bool:
        return self.outcome.is_update


def _read_document(path: str) -> str:
    # Bytes are decoded without newline translation so the PRD is copied verbatim
    try:
        return Path(path).read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationFailed([f"Failed to read file: {e}"]) from e


def _resolve_source_repo(explicit: str | None) -> str | None:
    if explicit:
        return explicit
    return normalize_remote_url(get_git_remote_url())


def build_pr_title(product_name: str, is_update: bool) -> str:
    return f"{'Update' if is_update else 'Add'} PRD: {product_name}"


def build_pr_body(
    product_name: str,
    domain: str,
    path: str,
    is_update: bool,
    owner_team: str | None = None,
    source_repo: str | None = None,
    tags: list[str] | None = None,
    registry_path: str = "registry.json",
) -> str:
    """Markdown PR description; optional metadata lines are left out when empty."""
    verb = "Update" if is_update else "Add"
    lines = [f"## {verb} PRD: {product_name}", "", f"**Domain:** {domain}"]
    if owner_team:
        lines.append(f"**Owner Team:** {owner_team}")
    if source_repo:
        lines.append(f"**Source Repo:** {source_repo}")
    if tags:
        lines.append(f"**Tags:** {', '.join(tags)}")
    lines += [
        "",
        f"This PR {'updates' if is_update else 'adds'} a data product PRD to the central repository.",
        "",
        "### Changes",
        f"- {'Updated' if is_update else 'Added'} PRD file: `{path}`",
        f"- Updated `{registry_path}` with PRD metadata",
        "",
        "### Next Steps",
        "- Review PRD content",
        "- Merge PR to add to index",
        "- PRD will be automatically indexed after merge",
    ]
    return "\n".join(lines) + "\n"


def plan_publish(
    request: PublishRequest,
    client: RemoteRepositoryClient,
    config: RegistryConfig | None = None,
    now: datetime | None = None,
) -> PublishPlan:
    """Compute the branch, PR text and file writes for a publish.

    Reads the PRD file, the local git remote and the remote registry.json;
    performs no remote mutation.

    Raises:
        ValidationFailed: Document unreadable or structurally invalid.
        NameExtractionFailed: No product name given and none in the document.
        InvalidRepoFormat: Target repo reference is malformed.
        RegistryReadFailed: registry.json could not be fetched.
        PermissionDenied: Token cannot read the registry repo.
    """
    config = config or RegistryConfig()
    now = now or datetime.now(UTC)

    content = _read_document(request.file)
    result = validate(content)
    if not result.valid:
        raise ValidationFailed(result.messages)

    product_name = request.product_name or extract_product_name(content)
    if not product_name:
        raise NameExtractionFailed()

    source_repo = _resolve_source_repo(request.source_repo)
    repo = parse_repo_ref(request.prd_repo or config.default_repo)
    base_branch = request.base_branch or config.base_branch
    path = prd_path(request.domain, product_name, config.prds_dir)

    try:
        raw = client.get_file_content(repo.full_name, config.registry_path, ref=base_branch)
    except PermissionDenied:
        raise
    except GitPlatformError as e:
        raise RegistryReadFailed(
            f"Failed to read {config.registry_path} from {repo.full_name}@{base_branch}: {e}"
        ) from e
    except (UnicodeDecodeError, binascii.Error) as e:
        loaded = recovered_registry(f"{config.registry_path} could not be decoded as UTF-8 text ({e})")
    else:
        loaded = load_registry(raw)
    warnings = []
    if loaded.recovered:
        warnings.append(f"Existing {config.registry_path} was unreadable and has been reinitialized: {loaded.reason}")
    if loaded.skipped:
        warnings.append(
            f"Dropped {len(loaded.skipped)} malformed {config.registry_path} entries: {'; '.join(loaded.skipped)}"
        )

    candidate = RegistryEntry(
        product_name=product_name,
        domain=request.domain,
        owner_team=request.owner_team or "",
        source_repo=source_repo or "",
        prd_path=path,
        tags=list(request.tags or []),
    )
    outcome = upsert(loaded.registry, candidate, now=now)
    is_update = outcome.is_update

    branch = branch_name(request.domain, product_name, branch_timestamp(now))
    verb = "Update" if is_update else "Add"
    files = [
        FileChange(
            path=path,
            content=content,
            message=f"{verb} PRD: {request.domain}/{product_name}",
        ),
        FileChange(
            path=config.registry_path,
            content=dump_registry(outcome.registry),
            message=f"Update registry for PRD: {request.domain}/{product_name}",
        ),
    ]

    return PublishPlan(
        repo=repo,
        base_branch=base_branch,
        product_name=product_name,
        source_repo=source_repo,
        prd_path=path,
        branch=branch,
        title=build_pr_title(product_name, is_update),
        body=build_pr_body(
            product_name,
            request.domain,
            path,
            is_update,
            owner_team=request.owner_team,
            source_repo=source_repo,
            tags=request.tags,
            registry_path=config.registry_path,
        ),
        outcome=outcome,
        files=files,
        warnings=warnings,
    )


def publish(
    request: PublishRequest,
    client: RemoteRepositoryClient,
    config: RegistryConfig | None = None,
    now: datetime | None = None,
) -> PublishResult:
    """Publish a PRD and open a pull request; never raises."""
    plan: PublishPlan | None = None
    try:
        plan = plan_publish(request, client, config=config, now=now)
        if request.dry_run:
            LOG.info("Dry run: would open %r on %s from %s", plan.title, plan.repo.full_name, plan.branch)
            return _result(plan, dry_run=True)

        repo = plan.repo.full_name
        client.create_branch(repo, plan.branch, plan.base_branch)
        try:
            for change in plan.files:
                client.create_or_update_file(repo, change.path, change.content, change.message, plan.branch)
            pr = client.create_pr(repo, plan.title, plan.body, plan.branch, plan.base_branch)
        except Exception:
            LOG.error("Publish stopped after creating branch %s in %s; branch left in place", plan.branch, repo)
            raise
        LOG.info("Opened PR #%s: %s", pr.number, pr.html_url)
        return _result(plan, pr_url=pr.html_url, pr_number=pr.number)
    except Exception as e:
        LOG.debug("Publish failed", exc_info=True)
        return PublishResult(
            success=False,
            error=str(e) or type(e).__name__,
            dry_run=request.dry_run,
            prd_path=plan.prd_path if plan else None,
            branch=plan.branch if plan else None,
            warnings=plan.warnings if plan else [],
        )


def _result(plan: PublishPlan, **kwargs) -> PublishResult:
    return PublishResult(
        success=True,
        prd_path=plan.prd_path,
        branch=plan.branch,
        is_update=plan.is_update,
        warnings=plan.warnings,
        **kwargs,
    )
