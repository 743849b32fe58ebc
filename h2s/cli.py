"""CLI entry point for the h2s tool."""

import logging
import logging.handlers
import sys

import click

from h2s.config import ConfigError, H2sConfig, load_config
from h2s.errors import H2sError, UsageError
from h2s.models import AddressFamily, RunConfig, SetTarget, TableLocator
from h2s.output import EVENT_LOGGER, print_progress, render
from h2s.preflight import run_preflight
from h2s.sync import sync_hostnames

logger = logging.getLogger(__name__)
events = logging.getLogger(EVENT_LOGGER)

RECORD_TYPES = ("A", "AAAA")
FORMATS = ("table", "json")

_LOG_FORMAT = "%(levelname)s: %(message)s"


class _Command(click.Command):
    """Command whose argument errors exit with status 1 instead of 2."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise


@click.command(
    cls=_Command,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--debug", "-d", is_flag=True, help="Enable debug output.")
@click.option(
    "--quiet", "-q", is_flag=True, help="Minimize output in case of success."
)
@click.option(
    "--type",
    "-t",
    "record_type",
    default=None,
    type=click.Choice(RECORD_TYPES, case_sensitive=False),
    help="'A' for IPv4 or 'AAAA' for IPv6 (default: AAAA).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    default="table",
    type=click.Choice(FORMATS, case_sensitive=False),
    show_default=True,
    help="Format of the final report.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to YAML config file (default: ~/.h2s/config.yaml).",
)
@click.argument("args", nargs=-1, metavar="[[TABLETYPE TABLENAME] SETNAME] HOSTNAMES")
@click.pass_context
def main(
    ctx: click.Context,
    debug: bool,
    quiet: bool,
    record_type: str | None,
    output_format: str,
    config_path: str | None,
    args: tuple[str, ...],
) -> None:
    """Add the IPs of the given hostname(s) to an nftables set.

    HOSTNAMES is one or more comma-separated hostnames.  Every address
    is refreshed in the set, so an existing element gets a new timeout.

    Example: h2s inet filter myset myhost1.example.com,myhost2.example.com
    """
    try:
        cfg = load_config(config_path)
    except (ConfigError, FileNotFoundError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    try:
        _configure_logging(cfg, debug)
    except OSError as exc:
        click.echo(f"Error: cannot open log sink: {exc}", err=True)
        sys.exit(1)
    logger.debug("Config loaded: %s", cfg)

    run_config = build_run_config(ctx, cfg, record_type, args)

    try:
        run_preflight(run_config)
        report = sync_hostnames(
            run_config,
            on_refresh=None if quiet else print_progress,
        )
    except H2sError as exc:
        events.error("%s", exc)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if not quiet:
        render(report, output_format.lower())


def build_run_config(
    ctx: click.Context,
    cfg: H2sConfig,
    record_type: str | None,
    args: tuple[str, ...],
) -> RunConfig:
    """Combine config defaults with the command line into a ``RunConfig``.

    Positional arguments are ``[[TABLETYPE TABLENAME] SETNAME] HOSTNAMES``;
    the table and set fall back to the config file.

    Raises:
        UsageError: If the positional arguments don't fit that shape or
            no set name is available, or a hostname, table or set
            name is malformed.
    """
    if not args:
        raise UsageError("No hostname provided as command line argument", ctx=ctx)
    if len(args) == 3:
        raise UsageError(
            "You need to provide tabletype, tablename, setname, and hostname(s)",
            ctx=ctx,
        )
    if len(args) > 4:
        raise UsageError("Too many arguments provided", ctx=ctx)

    hostnames = split_hostnames(args[-1])
    if not hostnames:
        raise UsageError("No hostname provided as command line argument", ctx=ctx)
    for hostname in hostnames:
        if hostname.startswith(("-", "+")):
            raise UsageError(f"Invalid hostname '{hostname}'", ctx=ctx)

    set_name = args[-2] if len(args) >= 2 else cfg.set_name
    if not set_name:
        raise UsageError("No name for nftables set provided", ctx=ctx)

    try:
        if len(args) == 4:
            table = TableLocator(kind=args[0], name=args[1])
        else:
            table = cfg.table_locator
        target = SetTarget(table=table, set_name=set_name)
    except ValueError as exc:
        raise UsageError(str(exc), ctx=ctx) from exc

    family = AddressFamily.from_record_type(record_type or cfg.record_type)

    return RunConfig(
        family=family,
        target=target,
        hostnames=hostnames,
        dig_binary=cfg.dig_binary,
        nft_binary=cfg.nft_binary,
    )


def split_hostnames(text: str) -> tuple[str, ...]:
    """Split a comma-separated hostname list, dropping empty items."""
    return tuple(h.strip() for h in text.split(",") if h.strip())


class _SkipEvents(logging.Filter):
    """Keep user-facing event records off stderr; they are echoed already."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not record.name.startswith(EVENT_LOGGER)


def _configure_logging(cfg: H2sConfig, debug: bool) -> None:
    """Set up stderr logging plus the optional file and syslog sinks.

    stderr shows warnings (everything with ``--debug``).  The sinks also
    receive the progress and error lines shown to the user.
    """
    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if debug else logging.WARNING)
    console.addFilter(_SkipEvents())
    handlers: list[logging.Handler] = [console]

    if cfg.log_file:
        file_handler = logging.FileHandler(cfg.log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s h2s " + _LOG_FORMAT)
        )
        handlers.append(file_handler)

    if cfg.syslog:
        syslog_handler = logging.handlers.SysLogHandler(address="/dev/log")
        syslog_handler.setFormatter(logging.Formatter("h2s: %(message)s"))
        handlers.append(syslog_handler)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=_LOG_FORMAT,
        handlers=handlers,
    )
