"""vulcan-prd entry point.

Commands:
    publish   - open a PR adding or updating a PRD in the central registry repo
    verify    - check that the token can read and write the registry repo
    validate  - check a local PRD file (and optionally a PRD answers file)

Usage: vulcan-prd publish -d analytics [-f docs/prd.md] [--dry-run]
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from vulcan_prd import __version__
from vulcan_prd.adapters.github import GitHubAdapter
from vulcan_prd.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from vulcan_prd.errors import InvalidRepoFormat
from vulcan_prd.logging import PrdLogging
from vulcan_prd.models import PublishRequest
from vulcan_prd.publisher import publish
from vulcan_prd.repo_ref import parse_repo_ref
from vulcan_prd.validator import validate_answers, validate_file

LOG = logging.getLogger("vulcan_prd.main")

TOKEN_HELP = """\
Error: GITHUB_TOKEN (or GH_TOKEN) environment variable is required

Set it with:
  export GITHUB_TOKEN=ghp_your_token_here

Or use GitHub CLI:
  export GITHUB_TOKEN=$(gh auth token)"""


def parse_tags(raw: str | None) -> list[str] | None:
    """Split comma-separated tags, trimming whitespace and dropping empties."""
    if not raw:
        return None
    tags = [t.strip() for t in raw.split(",")]
    return [t for t in tags if t] or None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vulcan-prd",
        description="Publish Vulcan data product PRDs to the central repository",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Path to YAML config file (optional)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress at INFO level")
    sub = parser.add_subparsers(dest="command", required=True)

    pub = sub.add_parser("publish", help="Publish a PRD to the central repository")
    pub.add_argument("-d", "--domain", required=True, help="Business domain (analytics, platform, marketing, ...)")
    pub.add_argument("-f", "--file", default=None, help="Path to PRD markdown file (default: docs/prd.md)")
    pub.add_argument("-n", "--name", default=None, help="Product name (default: read from the PRD title)")
    pub.add_argument("-o", "--owner-team", default=None, help="Owner team name")
    pub.add_argument("-s", "--source-repo", default=None, help="Source repository URL (default: git remote origin)")
    pub.add_argument("-t", "--tags", default=None, help="Comma-separated tags")
    pub.add_argument("-r", "--repo", default=None, help="Central PRD repo, owner/repo or URL")
    pub.add_argument("-b", "--base-branch", default=None, help="Base branch for the PR (default: main)")
    pub.add_argument("--dry-run", action="store_true", help="Compute changes without touching the remote")

    ver = sub.add_parser("verify", help="Check token access to the central repository")
    ver.add_argument("-r", "--repo", default=None, help="Central PRD repo, owner/repo or URL")

    val = sub.add_parser("validate", help="Validate a PRD file locally")
    val.add_argument("-f", "--file", default=None, help="Path to PRD markdown file (default: docs/prd.md)")
    val.add_argument("--answers", type=Path, default=None, help="YAML/JSON file with structured PRD answers")
    return parser


def cmd_publish(args: argparse.Namespace, config: AppConfig) -> int:
    token = config.github_token_resolved
    if not token:
        print(TOKEN_HELP, file=sys.stderr)
        return 1

    file = args.file or config.registry.default_file
    if not Path(file).is_file():
        print(f"Error: PRD file not found: {file}", file=sys.stderr)
        return 1

    domain = args.domain.lower()
    known = config.registry.known_domains
    if known and domain not in known:
        print(f'Warning: Domain "{domain}" is not in standard list: {", ".join(known)}', file=sys.stderr)

    tags = parse_tags(args.tags)
    print("Publishing PRD...")
    print(f"   File: {file}")
    print(f"   Domain: {domain}")
    if args.owner_team:
        print(f"   Owner: {args.owner_team}")
    if args.source_repo:
        print(f"   Source: {args.source_repo}")
    if tags:
        print(f"   Tags: {', '.join(tags)}")
    print()

    request = PublishRequest(
        file=file,
        domain=domain,
        product_name=args.name,
        owner_team=args.owner_team,
        source_repo=args.source_repo,
        tags=tags,
        prd_repo=args.repo or config.registry.default_repo,
        base_branch=args.base_branch or config.registry.base_branch,
        dry_run=args.dry_run,
    )
    client = GitHubAdapter(token, api_url=config.github.api_url, timeout=config.github.timeout)
    result = publish(request, client, config=config.registry)

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if not result.success:
        print("Failed to publish PRD:", file=sys.stderr)
        print(f"   {result.error}", file=sys.stderr)
        return 1

    action = "update" if result.is_update else "add"
    if result.dry_run:
        print(f"Dry run: would {action} {result.prd_path}")
        print(f"   Branch: {result.branch}")
        print("No changes were made.")
        return 0

    print("PRD published successfully!")
    print()
    print(f"PR #{result.pr_number}: {result.pr_url}")
    print()
    print("Your PRD is ready for review. Once merged, it will be automatically indexed.")
    return 0


def cmd_verify(args: argparse.Namespace, config: AppConfig) -> int:
    token = config.github_token_resolved
    if not token:
        print(TOKEN_HELP, file=sys.stderr)
        return 1
    try:
        repo = parse_repo_ref(args.repo or config.registry.default_repo)
    except InvalidRepoFormat as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    client = GitHubAdapter(token, api_url=config.github.api_url, timeout=config.github.timeout)
    report = client.verify_access(repo.full_name)
    print(f"Repository: {repo.full_name}")
    print(f"   Read:  {'yes' if report.has_read else 'no'}")
    print(f"   Write: {'yes' if report.has_write else 'no'}")
    if report.error:
        print(f"   {report.error}", file=sys.stderr)
    return 0 if report.has_read and report.has_write else 1


def cmd_validate(args: argparse.Namespace, config: AppConfig) -> int:
    file = args.file or config.registry.default_file
    result = validate_file(file)
    if result.valid:
        print(f"{file}: OK")
    else:
        for message in result.messages:
            print(f"{file}: {message}", file=sys.stderr)

    ok = result.valid
    if args.answers is not None:
        try:
            answers = yaml.safe_load(args.answers.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            print(f"{args.answers}: failed to load answers: {e}", file=sys.stderr)
            return 1
        if not isinstance(answers, dict):
            print(f"{args.answers}: answers must be a mapping", file=sys.stderr)
            return 1
        check = validate_answers(answers)
        if check.ok:
            print(f"{args.answers}: OK")
        else:
            if check.missing:
                print(f"{args.answers}: missing {', '.join(check.missing)}", file=sys.stderr)
            for err in check.errors:
                print(f"{args.answers}: {err.field}: {err.message}", file=sys.stderr)
        ok = ok and check.ok
    return 0 if ok else 1


COMMANDS = {
    "publish": cmd_publish,
    "verify": cmd_verify,
    "validate": cmd_validate,
}


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch to the subcommand."""
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    PrdLogging(config.logging, verbose=args.verbose).setup()

    try:
        return COMMANDS[args.command](args, config)
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        LOG.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
