"""Command line interface for Hotfix Builder."""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .cli_error_display import CLIErrorDisplay
from .config import Config, ConfigManager, RepositoryConfig
from .engine import HotfixPlan, ReplaySequencer
from .errors import HotfixError
from .services.hotfix_service import HotfixService, parse_change_request_numbers

# Module-level imports for test mocking
from .api_clients.github_client import GitHubAPIClient
from .services.git_replay_service import GitReplayService
from .services.github_cli import get_active_repository, get_github_token

logger = logging.getLogger(__name__)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load_config(ctx: click.Context, main_branch: Optional[str]) -> Config:
    config_manager: ConfigManager = ctx.obj["config_manager"]
    config_manager.load()
    return config_manager.update_config(main_branch=main_branch)


def _resolve_repository(config: Config) -> RepositoryConfig:
    if config.repository is not None:
        return config.repository
    return get_active_repository(Path.cwd())


def _create_service(config: Config, with_replay: bool) -> Tuple[HotfixService, GitHubAPIClient]:
    token = get_github_token(config.github)
    repository = _resolve_repository(config)
    api_client = GitHubAPIClient(config.github, token)
    replay_service = GitReplayService(Path.cwd(), config.git) if with_replay else None
    service = HotfixService(config, repository, api_client, replay_service=replay_service)
    return service, api_client


def _plan_table(plan: HotfixPlan) -> Table:
    table = Table(title="Hotfix commits in replay order")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Pull Request", style="cyan")
    table.add_column("Main branch", style="green")
    table.add_column("PR commit", style="yellow")
    table.add_column("Message")
    for position, step in enumerate(ReplaySequencer().steps(plan), 1):
        table.add_row(
            str(position),
            step.change_request.label,
            step.match.mainline_commit.short_id,
            step.match.pr_commit.short_id,
            step.match.pr_commit.subject,
        )
    return table


def _fail(ctx: click.Context, error: HotfixError) -> None:
    logger.debug(f"Hotfix run failed: {error!r}")
    CLIErrorDisplay().display_error(error, show_technical_details=ctx.obj.get("verbose", False))
    sys.exit(1)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(dir_okay=False),
    help="Config file path (default: .hotfix-builder/config.json, searched upwards)",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="hotfix-builder")
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool):
    """Build hotfix branches from merged GitHub pull requests.

    \b
    The commits of each pull request are found again on the main branch
    (where they have new SHAs) by their message and author date, ordered by
    merge date and cherry-picked onto a new branch cut from a release branch.

    \b
    EXAMPLES:
      hotfix-builder plan -p "#42,#164"
      hotfix-builder create -r release/1.4 -n hotfix/1.4.1 -p "#42,#164"

    \b
    AUTHENTICATION:
      GITHUB_TOKEN is used when set, otherwise the token of 'gh auth login'.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)

    if config:
        ctx.obj["config_manager"] = ConfigManager(Path(config))
    else:
        ctx.obj["config_manager"] = ConfigManager.create_with_backtrack()


@cli.command()
@click.option(
    "--pull-requests",
    "-p",
    required=True,
    help="Comma-separated list of pull requests, e.g. '#42,#164'",
)
@click.option("--main-branch", "-m", help="Branch the pull requests were merged into")
@click.option("--markdown", is_flag=True, help="Also print the pull request summary table")
@click.pass_context
def plan(ctx: click.Context, pull_requests: str, main_branch: Optional[str], markdown: bool):
    """Show which main branch commits a hotfix would cherry-pick.

    Nothing is changed locally or on GitHub.
    """
    try:
        numbers = parse_change_request_numbers(pull_requests)
        config = _load_config(ctx, main_branch)
        service, api_client = _create_service(config, with_replay=False)
        with api_client:
            hotfix_plan = service.build_plan(numbers)
    except HotfixError as e:
        _fail(ctx, e)
        return

    console.print(_plan_table(hotfix_plan))
    console.print("\nReplay sequence:", style="bold")
    for commit_id in ReplaySequencer().sequence(hotfix_plan):
        console.print(commit_id)

    if markdown:
        click.echo("")
        click.echo(service.summarize(hotfix_plan))


@cli.command()
@click.option("--release-branch", "-r", required=True, help="Release branch to add the hotfix to")
@click.option("--hotfix-name", "-n", required=True, help="Name of the hotfix branch")
@click.option(
    "--pull-requests",
    "-p",
    required=True,
    help="Comma-separated list of pull requests, e.g. '#42,#164'",
)
@click.option("--main-branch", "-m", help="Branch to cherry-pick from")
@click.pass_context
def create(
    ctx: click.Context,
    release_branch: str,
    hotfix_name: str,
    pull_requests: str,
    main_branch: Optional[str],
):
    """Create the hotfix branch, push it and open a pull request."""

    def report_progress(commit_id: str, position: int, total: int) -> None:
        console.print(f"🍒 [{position}/{total}] git cherry-pick {commit_id}", style="dim")

    try:
        numbers = parse_change_request_numbers(pull_requests)
        config = _load_config(ctx, main_branch)
        service, api_client = _create_service(config, with_replay=True)

        console.print(f"Repository: {service.repository.full_name}")
        console.print(f"Creating hotfix {hotfix_name} based on {release_branch}.")
        console.print(
            f"Cherry-picking commits of PRs '{pull_requests}' from branch '{config.main_branch}'"
        )

        with api_client:
            result = service.create_hotfix(
                numbers,
                hotfix_name=hotfix_name,
                release_branch=release_branch,
                progress_callback=report_progress,
            )
    except HotfixError as e:
        _fail(ctx, e)
        return

    console.print(_plan_table(result.plan))
    console.print(f"✅ Successfully created PR: {result.pull_request_url}", style="green")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
