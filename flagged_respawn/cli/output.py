import json as json_lib
import shlex

import typer


def out_json(data) -> str:
    return json_lib.dumps(data, indent=2)


def echo_argv(argv: list[str], json_output: bool = False) -> None:
    if json_output:
        typer.echo(out_json(argv))
    else:
        typer.echo(shlex.join(argv))
