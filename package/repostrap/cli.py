"""
Repostrap CLI module.

Provides the main entry point for the repostrap command.
"""

import argparse
import json
import sys

from . import __version__
from .api import GitHubAPI, verify_token
from .config import Config
from .errors import BootstrapError
from .pipeline import ProvisioningPipeline, derive_public_name
from .prompt import Prompter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repostrap",
        description=(
            "Create a private/public GitHub repository pair and store a fresh "
            "SSH deploy key as a repository secret"
        ),
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"repostrap {__version__}"
    )
    parser.add_argument("--org", help="GitHub organization (default: $REPOSTRAP_ORG)")
    parser.add_argument("--owner", help="Repository owner, if different from the organization")
    parser.add_argument("--repo", help="Private repository name, e.g. widgets-private")
    parser.add_argument("--secret-name", help="Name of the repository secret (default: SSH_DEPLOY_KEY)")
    parser.add_argument("--title", help="Deploy key title")
    parser.add_argument("--api-url", help="GitHub API base URL")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default: 5)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be created without actually creating"
    )
    parser.add_argument("--yes", "-y", action="store_true", help="Skip the confirmation prompt")
    return parser


def gather_config(args, prompter: Prompter, environ=None) -> Config:
    """Merge environment, flags and prompted answers into a validated Config."""
    config = Config.from_env(environ).with_overrides(
        org=args.org,
        owner=args.owner,
        secret_name=args.secret_name,
        api_url=args.api_url,
        timeout=args.timeout,
    )
    if not config.token and not args.dry_run:
        config = config.with_overrides(token=prompter.ask_secret("GitHub Auth Token"))
    if not config.org:
        config = config.with_overrides(org=prompter.ask("GitHub Organization"))
    if args.dry_run and not config.token:
        config = config.with_overrides(token="dry-run")
    return config.validate()


def main(argv=None, prompter: Prompter = None, environ=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    prompter = prompter or Prompter()

    try:
        config = gather_config(args, prompter, environ)
        private_name = args.repo or prompter.ask("Private Repository Name")
        public_name = derive_public_name(private_name, config.private_suffix)
    except BootstrapError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    summary = config.to_summary()
    summary["private_repository"] = private_name
    summary["public_repository"] = public_name

    print("=" * 50)
    print("Repository Bootstrap")
    print("=" * 50)
    print(json.dumps(summary, indent=4))
    print(f"Mode: {'DRY RUN' if args.dry_run else 'LIVE'}")
    print("=" * 50)

    if not args.yes and not args.dry_run:
        try:
            proceed = prompter.confirm("Proceed?", default=True)
        except BootstrapError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if not proceed:
            print("Aborted.")
            return 1

    api = None
    try:
        if not args.dry_run:
            login = verify_token(config)
            print(f"Authenticated as {login}")
            api = GitHubAPI(config)
        pipeline = ProvisioningPipeline(
            api,
            config,
            private_name,
            deploy_key_title=args.title,
            dry_run=args.dry_run,
        )
    except BootstrapError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print()
    report = pipeline.run()
    print()
    print("=" * 50)

    if not report.ok:
        print(f"Bootstrap failed at step '{report.failed_step}'", file=sys.stderr)
        print(f"Error: {report.error}", file=sys.stderr)
        if report.orphaned_repositories:
            print("Repositories created before the failure (not rolled back):", file=sys.stderr)
            for name in report.orphaned_repositories:
                print(f"  - {name}", file=sys.stderr)
        return 1

    print("Bootstrap complete!")
    if report.repository_urls:
        print()
        print("Repositories created:")
        for url in report.repository_urls:
            print(f"  {url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
