import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import click

from treefind.config.parser import ConfigurationError, create_config_template, load_config
from treefind.errors import PathResolutionError
from treefind.models.config import LOG_LEVELS, OutputFormat, WalkerConfig, WalkStrategy
from treefind.models.search_request import SearchRequest
from treefind.tools.dir_walker import DirectoryWalker
from treefind.tools.output import create_sink

logger = logging.getLogger(__name__)


def split_arguments(
    arguments: Sequence[str], path_option: str | None
) -> tuple[list[str], list[str], str]:
    """
    Separate positional arguments into target names and the search path.

    Unrecognized options reach us as positional arguments and are returned
    separately. Without ``--path`` the last positional argument is the path.

    Returns:
        (target_names, unknown_options, path)
    """
    unknown = [arg for arg in arguments if arg.startswith("-") and len(arg) > 1]
    positional = [arg for arg in arguments if arg not in unknown]

    if path_option is not None:
        return positional, unknown, path_option

    if not positional:
        raise click.UsageError("Missing PATH: give it as the last argument or with --path.")

    return positional[:-1], unknown, positional[-1]


def configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _write_config_template(ctx: click.Context, param: click.Parameter, value: Path | None):
    if value is None or ctx.resilient_parsing:
        return
    try:
        create_config_template(value)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Wrote settings template to {value}")
    ctx.exit(0)


@click.command(
    "treefind",
    context_settings={"ignore_unknown_options": True, "help_option_names": ["-h", "--help"]},
)
@click.argument("arguments", nargs=-1, type=click.UNPROCESSED, metavar="NAME... PATH")
@click.option("-R", "--recursive", is_flag=True, help="Descend into subdirectories.")
@click.option("-i", "--ignore-case", is_flag=True, help="Compare names case-insensitively.")
@click.option(
    "-n",
    "--name",
    "extra_names",
    multiple=True,
    help="Target name taken as given, even when it starts with a dash. Repeatable.",
)
@click.option(
    "--path",
    "-p",
    "path_option",
    help="Directory to search. When given, every positional argument is a target name.",
    default=None,
)
@click.option(
    "--strategy",
    type=click.Choice([strategy.value for strategy in WalkStrategy]),
    default=None,
    help="Join each subdirectory worker before the next (sequential) or start sibling batches (fanout).",
)
@click.option(
    "--max-concurrent",
    type=click.IntRange(min=1),
    default=None,
    help="Sibling workers per batch with --strategy fanout.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice([fmt.value for fmt in OutputFormat]),
    default=None,
    help="Match output format.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Diagnostics written to stderr.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, file_okay=True, path_type=Path),
    default=None,
    help="YAML settings file.",
)
@click.option(
    "--write-config",
    type=click.Path(dir_okay=False, file_okay=True, path_type=Path),
    callback=_write_config_template,
    expose_value=False,
    is_eager=True,
    help="Write a settings template to this file and exit.",
)
@click.option("--summary", is_flag=True, help="Print walk statistics to stderr when done.")
def main(
    arguments: Sequence[str],
    recursive: bool,
    ignore_case: bool,
    extra_names: Sequence[str],
    path_option: str | None,
    strategy: str | None,
    max_concurrent: int | None,
    output_format: str | None,
    log_level: str | None,
    config_path: Path | None,
    summary: bool,
):
    """
    Search a directory tree for files named NAME.

    Each match is printed as '<worker id> : <name> : <full path>'.
    """
    try:
        config = load_config(config_path).config
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    overrides = {
        "strategy": strategy,
        "max_concurrent": max_concurrent,
        "output_format": output_format,
        "log_level": log_level,
    }
    config = WalkerConfig.from_dict(
        {**config.to_dict(), **{key: value for key, value in overrides.items() if value is not None}}
    )
    configure_logging(config.get_log_level())
    logger.debug(f"Using {config}")

    target_names, unknown, raw_path = split_arguments(arguments, path_option)
    target_names.extend(extra_names)
    for option in unknown:
        click.echo(f"unknown option: {option}", err=True)

    try:
        request = SearchRequest.create(
            raw_path,
            target_names,
            recursive=recursive or config.recursive,
            ignore_case=ignore_case or config.ignore_case,
        )
    except PathResolutionError as e:
        raise click.ClickException(str(e)) from e

    walker = DirectoryWalker(config=config, sink=create_sink(config.output_format))
    result = walker.walk(request)

    if summary:
        click.echo(str(result), err=True)


if __name__ == "__main__":
    main()
