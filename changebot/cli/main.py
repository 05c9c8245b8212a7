"""Main CLI entry point for Changebot."""

import logging
import os
import sys

import click
import git

from .. import __version__
from ..changelog import (
    ChangelogGenerator,
    EmojiReconciler,
    PullRequestSummarizer,
    get_changelog_by_tag,
)
from ..config import get_config, Config
from ..git import GitRepository
from ..github import GitHubClient
from ..llm import ChatClient


def resolve_secret(value, fallback, prompt_text):
    """Pick a credential from the option, the configuration, or an interactive prompt.

    Exits with an error when the prompt is answered with an empty value.
    """
    secret = value or fallback
    if not secret or not secret.strip():
        secret = click.prompt(prompt_text, hide_input=True, default='', show_default=False)
    if not secret or not secret.strip():
        click.echo(f"Error: {prompt_text} is required.", err=True)
        sys.exit(1)
    return secret.strip()


def build_generator(config: Config, openai_key: str, github_key: str, logger: logging.Logger) -> ChangelogGenerator:
    """Wire GitHub and chat clients into a ChangelogGenerator."""
    llm = ChatClient(
        openai_key,
        model=config.model,
        base_url=config.openai_base_url,
        timeout=config.request_timeout,
        logger=logger,
    )
    github = GitHubClient(github_key, timeout=config.request_timeout, logger=logger)

    return ChangelogGenerator(
        github,
        PullRequestSummarizer(llm, config.max_attempts, config.retry_delay, logger),
        EmojiReconciler(llm, config.max_attempts, config.retry_delay, logger),
        workers=config.workers,
        max_attempts=config.max_attempts,
        retry_delay=config.retry_delay,
        logger=logger,
    )


@click.command()
@click.option('--tag', '-t', help='Target tag version. Defaults to the latest tag.')
@click.option('--repo', '-r', help='Path to the repository directory. Defaults to the current working directory.')
@click.option('--openai-key', '-o', help='OpenAI API key. Defaults to the OPENAI_API_KEY environment variable.')
@click.option('--github-key', '-g', help='GitHub personal access token. Defaults to the GITHUB_API_KEY environment variable.')
@click.option('--model', '-m', help='Chat model to use (overrides configuration)')
@click.option('--workers', '-w', type=click.IntRange(min=1), help='Number of pull requests processed concurrently')
@click.option('--config-file', '-c', help='Path to JSON configuration file')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.version_option(version=__version__, prog_name="changebot")
def cli(tag, repo, openai_key, github_key, model, workers, config_file, debug):
    """Generate a Markdown changelog for a tag from its merged pull requests."""

    # Setup logging
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger('changebot')

    try:
        config = get_config(config_file)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    overrides = {k: v for k, v in {'model': model, 'workers': workers}.items() if v is not None}
    if overrides:
        config = config.model_copy(update=overrides)

    repo_path = repo or os.getcwd()
    try:
        repository = GitRepository(repo_path, logger)
    except (git.InvalidGitRepositoryError, git.NoSuchPathError):
        click.echo(f"Error: {repo_path} is not a git repository", err=True)
        sys.exit(1)

    tag = tag or repository.latest_tag()
    if not tag:
        click.echo("No tags found in the repository.")
        return

    openai_key = resolve_secret(openai_key, config.openai_api_key, "OpenAI API key")
    github_key = resolve_secret(github_key, config.github_token, "GitHub personal access token")

    generator = build_generator(config, openai_key, github_key, logger)

    logger.info(f"Creating changelog for tag: {tag}")
    result = get_changelog_by_tag(repository, generator, tag)

    if result.failed:
        click.echo(f"Error: {result.message}", err=True)
        sys.exit(1)

    if result.message:
        click.echo(result.message)
        return

    click.echo(result.markdown, nl=False)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == '__main__':
    main()
