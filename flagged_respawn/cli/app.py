import asyncio
import logging

import typer

from flagged_respawn import config, providers
from flagged_respawn.bridge import ProcessBridge, terminate_like
from flagged_respawn.decision import decide, require_argv, require_flags
from flagged_respawn.lib.remover import remove
from flagged_respawn.lib.reorder import reorder

from . import output
from .errors import error_feedback

app = typer.Typer(invoke_without_command=True, add_completion=False, no_args_is_help=False)

ARGV = typer.Argument(..., help="Argument vector to inspect, after `--`.")
FLAG = typer.Option(None, "--flag", "-f", help="Recognized launcher flag (repeatable).")
PROVIDER = typer.Option(None, "--provider", "-p", help="Flag provider: v8 or config.")
JSON = typer.Option(False, "--json", "-j", help="Output in JSON format.")


def resolve_flags(flag: list[str] | None, provider: str | None) -> list[str]:
    """Combine --flag options with the provider's flags (or the configured provider)."""
    flags = list(flag or [])
    provider = provider or config.load_config().provider
    if provider:
        flags.extend(providers.get_provider(provider)())
    return require_flags(flags)


@app.callback(invoke_without_command=True)
def common_options_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log decisions and spawns."),
):
    """Relaunch a program with its launcher flags moved in front of the script."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="[flagged-respawn] %(message)s")

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command(name="reorder")
@error_feedback
def reorder_cmd(
    argv: list[str] = ARGV,
    flag: list[str] = FLAG,
    provider: str = PROVIDER,
    json_output: bool = JSON,
):
    """Print argv with recognized flags moved right after the executable."""
    flags = resolve_flags(flag, provider)
    output.echo_argv(reorder(flags, argv), json_output)


@app.command(name="remove")
@error_feedback
def remove_cmd(
    argv: list[str] = ARGV,
    flag: list[str] = FLAG,
    provider: str = PROVIDER,
    json_output: bool = JSON,
):
    """Print argv without recognized flags."""
    flags = resolve_flags(flag, provider)
    output.echo_argv(remove(flags, argv), json_output)


@app.command(name="needed")
@error_feedback
def needed_cmd(
    argv: list[str] = ARGV,
    flag: list[str] = FLAG,
    provider: str = PROVIDER,
    json_output: bool = JSON,
):
    """Report whether argv needs a respawn. Exits 1 when it does."""
    flags = resolve_flags(flag, provider)
    decision = decide(flags, argv)
    if json_output:
        argv_out = decision.launch_argv or decision.argv
        typer.echo(output.out_json({"needed": decision.needed, "argv": argv_out}))
    else:
        typer.echo("needed" if decision.needed else "not needed")
    if decision.needed:
        raise typer.Exit(1)


@app.command(name="run")
@error_feedback
def run_cmd(
    argv: list[str] = ARGV,
    flag: list[str] = FLAG,
    provider: str = PROVIDER,
    force: list[str] = typer.Option(None, "--force", help="Flag to inject before the program (repeatable)."),
    no_respawn: bool = typer.Option(False, "--no-respawn", help="Run argv verbatim."),
):
    """Run argv with recognized flags first and exit like it does."""
    flags = resolve_flags(flag, provider)
    argv = require_argv(argv)
    forbid_flag = config.load_config().forbid_flag
    decision = decide(flags, argv, forced=force or None, forbid=no_respawn, forbid_flag=forbid_flag)
    if decision.needed:
        launch = decision.launch_argv
    else:
        launch = [arg for arg in argv if arg != forbid_flag]

    result = asyncio.run(ProcessBridge().run(launch))
    terminate_like(result)


@app.command(name="flags")
@error_feedback
def flags_cmd(
    provider: str = typer.Argument("v8", help="Flag provider: v8 or config."),
    json_output: bool = JSON,
):
    """List the flags a provider recognizes."""
    flags = providers.get_provider(provider)()
    if json_output:
        typer.echo(output.out_json(flags))
        return
    for name in flags:
        typer.echo(name)


def main() -> None:
    """Entry point for flagged-respawn command."""
    app()
