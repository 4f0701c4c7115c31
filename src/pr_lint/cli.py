"""Command-line interface using Click."""

import json
import os
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from . import __version__
from .api import PRLintAPI, LintResult
from .config import AppConfig, ConfigManager
from .github.client import GitHubAPIError
from .models.change_set import ChangeSetRequest


class ToolError(click.ClickException):
    """Tool-side error; exits with 2 so CI can tell it apart from lint failures."""
    exit_code = 2


def _load_config(config_path: Optional[str]) -> AppConfig:
    try:
        config = AppConfig.from_yaml(config_path) if config_path else AppConfig.from_env()
        # Validates and configures logging
        ConfigManager(config)
    except (ValueError, FileNotFoundError, TypeError, yaml.YAMLError) as e:
        raise ToolError(f"Invalid configuration: {e}")
    return config


def _pr_number_from_event() -> Optional[int]:
    """Read the PR number from the GitHub Actions event payload, if any."""
    event_path = os.getenv("GITHUB_EVENT_PATH")
    if not event_path or not os.path.exists(event_path):
        return None
    try:
        with open(event_path, 'r', encoding='utf-8') as f:
            event = json.load(f)
    except (OSError, ValueError) as e:
        raise ToolError(f"Cannot read event payload {event_path}: {e}")
    if not isinstance(event, dict):
        raise ToolError(f"Event payload {event_path} is not a JSON object")
    pull_request = event.get('pull_request') or {}
    return pull_request.get('number')


def _emit(result: LintResult, output_format: str) -> None:
    if output_format == 'json':
        click.echo(json.dumps(result.report.to_dict(), indent=2, ensure_ascii=False))
    elif output_format == 'markdown':
        click.echo(result.comment_body)
    else:
        for line in result.annotations:
            click.echo(line)


@click.group()
@click.version_option(version=__version__, prog_name="pr-lint")
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              help='YAML config file (default: environment variables)')
@click.option('--project-root', type=click.Path(file_okay=False, exists=True), default='.',
              show_default=True, help='Checkout used for companion file lookups')
@click.option('--format', 'output_format', type=click.Choice(['annotations', 'json', 'markdown']),
              default='annotations', show_default=True, help='Output format')
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], project_root: str, output_format: str):
    """Rule-based pull request linter."""
    ctx.ensure_object(dict)
    ctx.obj['config'] = _load_config(config_path)
    ctx.obj['project_root'] = project_root
    ctx.obj['output_format'] = output_format


@cli.command()
@click.argument('payload', type=click.File('r', encoding='utf-8'))
@click.pass_context
def check(ctx: click.Context, payload):
    """Lint a ChangeSet given as a JSON file ('-' for stdin)."""
    try:
        request = ChangeSetRequest.model_validate_json(payload.read())
    except ValidationError as e:
        raise ToolError(f"Invalid change set payload: {e}")

    api = PRLintAPI(config=ctx.obj['config'], project_root=ctx.obj['project_root'])
    result = api.lint_change_set(request.to_change_set())

    _emit(result, ctx.obj['output_format'])
    ctx.exit(result.exit_code)


@cli.command()
@click.option('--repo', 'repository', envvar='GITHUB_REPOSITORY', required=True,
              help='Repository as owner/name (default: $GITHUB_REPOSITORY)')
@click.option('--pr', 'pr_number', type=int, default=None,
              help='Pull request number (default: from the Actions event payload)')
@click.option('--post/--no-post', default=False, help='Publish the summary comment on the PR')
@click.pass_context
def github(ctx: click.Context, repository: str, pr_number: Optional[int], post: bool):
    """Fetch a pull request from GitHub and lint it."""
    pr_number = pr_number or _pr_number_from_event()
    if not pr_number:
        raise click.UsageError("No PR number given and none found in GITHUB_EVENT_PATH")

    config = ctx.obj['config']
    if not config.github.token:
        raise ToolError("GITHUB_TOKEN is required for the github command")

    api = PRLintAPI(config=config, project_root=ctx.obj['project_root'])
    try:
        result = api.lint_pull_request(repository, pr_number, post_comment=post)
    except (GitHubAPIError, ValueError) as e:
        raise ToolError(str(e))

    _emit(result, ctx.obj['output_format'])
    if result.comment_url:
        click.echo(f"Summary comment: {result.comment_url}", err=True)
    ctx.exit(result.exit_code)


def main():
    """Entry point for the pr-lint command."""
    cli(obj={})


if __name__ == '__main__':
    main()
