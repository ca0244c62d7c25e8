"""Agent Cookbook CLI - Command Line Interface."""

import asyncio
import signal
import sys
from contextlib import suppress
from pathlib import Path

import click
from loguru import logger

from agentcookbook import __version__
from agentcookbook.agentic.streaming.simulator import SCENARIOS
from agentcookbook.settings import settings

SIMULATE_HELP = "Replay a scripted session instead of calling the agent service"


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


@click.group()
@click.version_option(__version__)
@click.option("--log-level", default=None, help="Log level (default: LOG__LEVEL or INFO)")
def cli(log_level: str | None):
    """Cookbook - recipes for consuming a streaming agent session."""
    _configure_logging(log_level or settings.log.level)


def _overrides(model: str | None, max_turns: int | None) -> dict:
    overrides: dict = {}
    if model:
        overrides["model"] = model
    if max_turns is not None:
        overrides["max_turns"] = max_turns
    return overrides


@cli.command()
@click.option("--simulate", "-S", is_flag=False, flag_value="basic", default=None,
              type=click.Choice(SCENARIOS), help=SIMULATE_HELP)
@click.option("--model", "-m", help="Model to use (opus, sonnet, haiku)")
@click.option("--max-turns", type=click.IntRange(min=1), help="Max tool invocations before stopping")
def basic(simulate: str | None, model: str | None, max_turns: int | None):
    """
    List files in the current directory and describe them.

    Examples:
        cookbook basic
        cookbook basic --simulate
    """
    from agentcookbook.agentic.runner import BASIC_PROMPT, basic_options

    options = basic_options(**_overrides(model, max_turns))
    click.echo("🤖 Starting Basic Agent Demo\n")
    sys.exit(asyncio.run(_run(BASIC_PROMPT, options, simulate=simulate, verbose_tools=True)))


@cli.command()
@click.argument("directory", default=".")
@click.option("--advanced", "-a", is_flag=True, help="Structured JSON output with a security sub-agent")
@click.option("--simulate", "-S", is_flag=False, flag_value="auto", default=None,
              type=click.Choice(("auto",) + SCENARIOS), help=SIMULATE_HELP)
@click.option("--model", "-m", help="Model to use (opus, sonnet, haiku)")
@click.option("--max-turns", type=click.IntRange(min=1), help="Max tool invocations before stopping")
@click.option("--options", "options_file", type=click.Path(exists=True, dir_okay=False),
              help="YAML file with session options")
def review(
    directory: str,
    advanced: bool,
    simulate: str | None,
    model: str | None,
    max_turns: int | None,
    options_file: str | None,
):
    """
    Review the code in DIRECTORY for bugs, security, performance and style.

    Examples:
        cookbook review ./src
        cookbook review ./src --advanced
        cookbook review ./src --advanced --simulate
        cookbook review ./src --advanced --simulate invalid
    """
    from agentcookbook.agentic.runner import review_options, review_prompt
    from agentcookbook.agentic.schema import AgentOptions, options_from_yaml_file
    from agentcookbook.agentic.streaming.formatters import format_banner

    if options_file:
        base = options_from_yaml_file(options_file)
        options = AgentOptions.model_validate({**base.model_dump(), **_overrides(model, max_turns)})
    else:
        options = review_options(advanced=advanced, **_overrides(model, max_turns))

    if simulate == "auto":
        simulate = "structured" if advanced else "review"

    title = "🔍 Code Review Agent (Advanced)" if advanced else "🔍 Code Review Agent (Simple)"
    click.echo(format_banner(title, str(Path(directory))))

    if advanced:
        click.echo("⚙️  Configuration:")
        click.echo(f"   Model: {options.model}")
        click.echo(f"   Output: {'Structured JSON' if options.output_contract else 'Text'}")
        click.echo(f"   Sub-agents: {', '.join(options.agents) or 'none'}\n")

    sys.exit(asyncio.run(_run(
        review_prompt(directory, advanced=advanced),
        options,
        simulate=simulate,
        directory=directory,
        verbose_tools=advanced,
        label="Review",
        show_review=advanced,
    )))


async def _run(
    prompt: str,
    options,
    *,
    simulate: str | None,
    directory: str = ".",
    verbose_tools: bool,
    label: str = "Done",
    show_review: bool = False,
) -> int:
    """Run a session, print progress and the outcome, return the exit code."""
    from agentcookbook.agentic.runner import run_session
    from agentcookbook.agentic.streaming.formatters import (
        RULE,
        format_error,
        format_event,
        format_outcome,
        format_review,
    )
    from agentcookbook.exceptions import CookbookError
    from agentcookbook.models.review import ReviewResult

    def on_event(event, state):
        line = format_event(event, state, verbose_tools=verbose_tools)
        if line is not None:
            click.echo(line)

    # Ctrl-C stops the session between events
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    with suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, cancel.set)

    try:
        result = await run_session(
            prompt,
            options,
            simulate=simulate,
            directory=directory,
            on_event=on_event,
            cancel=cancel,
        )
    except CookbookError as e:
        click.echo(format_error(e), err=True)
        return 1
    finally:
        with suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)

    outcome = result.outcome
    click.echo(f"\n{RULE}")
    click.echo(format_outcome(
        outcome,
        tool_count=len(result.tool_invocations),
        total_cost_usd=result.total_cost_usd,
        warnings=result.warnings,
        label=label,
    ))
    click.echo(RULE)

    if not outcome.is_success:
        if outcome.detail and "ANTHROPIC_API_KEY" in outcome.detail:
            click.echo(format_error(outcome.detail), err=True)
        if show_review:
            click.echo("\n❌ No results returned", err=True)
        return 1

    if show_review:
        click.echo(format_review(ReviewResult.model_validate(outcome.payload)))
    return 0


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
