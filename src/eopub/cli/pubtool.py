"""
pubtool - Pub File Command-Line Interface
=========================================

Inspect, validate, convert and rewrite Endless Online pub files.

Commands
--------
- **info**: Show the header and decode status
- **list**: List records as a table
- **dump**: Show every field of one or all records
- **export**: Write records to JSON
- **import**: Build a pub file from JSON
- **validate**: Report truncation, trailing bytes and checksum problems
- **rewrite**: Decode and re-encode a file

The file kind is detected from the magic tag unless ``--format`` is given.

Usage Examples
--------------
    $ pubtool info dat001.eif
    $ pubtool list -v dtn001.enf
    $ pubtool dump --id 3 dat001.eif
    $ pubtool export dat001.eif -o items.json
    $ pubtool import items.json -o dat001.eif --format item
    $ pubtool validate --verify-checksum dsl001.esf
    $ pubtool rewrite dat001.eif -o fixed.eif --strict

Environment
-----------
EOPUB_OVERFLOW, EOPUB_VERIFY_CHECKSUM, EOPUB_ENCODING and EOPUB_VERSION
set the defaults (see ``PubConfig.from_env``).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from eopub import __version__
from eopub.cli.errors import ExitCode, handle_cli_exception
from eopub.config import PubConfig
from eopub.pub import (
    FORMATS,
    DecodeResult,
    OverflowPolicy,
    PubFormat,
    PubRecord,
    detect_format,
    export_json,
    get_format,
    import_json,
)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores verbosity and the codec configuration read from the environment.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.config: PubConfig = PubConfig()

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)

FORMAT_CHOICE = click.Choice(sorted(FORMATS), case_sensitive=False)

# Columns shown by "list" after id and name
LIST_COLUMNS: dict[str, tuple[str, ...]] = {
    "item": ("type", "graphic", "weight"),
    "npc": ("type", "level", "hp"),
    "class": ("parent_type", "stat_group"),
    "skill": ("type", "tp_cost", "sp_cost"),
}


def _load(
    path: Path,
    format_name: Optional[str],
    config: PubConfig,
) -> tuple[PubFormat, DecodeResult]:
    """Read a pub file with the requested or detected format."""
    data = path.read_bytes()
    fmt = get_format(format_name) if format_name else detect_format(data)
    return fmt, fmt.decode(data, config)


def _field_value(record: PubRecord, name: str) -> str:
    value = getattr(record, name, "")
    return str(int(value)) if isinstance(value, int) else str(value)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@click.version_option(__version__, "--version", "-V", prog_name="pubtool")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Endless Online pub file tool.

    Reads and writes item (EIF), NPC (ENF), class (ECF) and skill (ESF)
    files.

    \b
    Examples:
      pubtool info dat001.eif
      pubtool export dat001.eif -o items.json
      pubtool import items.json -o dat001.eif --format item
    """
    ctx.verbose = verbose
    ctx.config = PubConfig.from_env()
    ctx.setup_logging()


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument("pub_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-f", "--format", "format_name", type=FORMAT_CHOICE, help="File kind (default: detect)")
@pass_context
def cmd_info(ctx: Context, pub_file: Path, format_name: Optional[str]) -> None:
    """
    Show header fields and decode status of a pub file.

    \b
    Example:
      pubtool info dat001.eif
    """
    try:
        fmt, result = _load(pub_file, format_name, ctx.config)
        pub = result.pub

        click.echo(f"File:         {pub_file}")
        click.echo(f"Format:       {fmt.magic} ({fmt.kind})")
        click.echo(f"Checksum:     {pub.checksum1} {pub.checksum2}")
        click.echo(f"Declared:     {pub.declared_count} records")
        click.echo(f"Decoded:      {len(pub)} records ({len(pub.entries())} entries)")
        click.echo(f"Version:      {pub.version}")
        click.echo(f"Status:       {result.status.value}")
        if result.trailing_bytes:
            click.echo(f"Trailing:     {result.trailing_bytes} bytes")
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# List Command
# =============================================================================

@main.command("list")
@click.argument("pub_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-f", "--format", "format_name", type=FORMAT_CHOICE, help="File kind (default: detect)")
@click.option("-v", "--verbose", "detailed", is_flag=True, help="Show a summary after the table")
@pass_context
def cmd_list(ctx: Context, pub_file: Path, format_name: Optional[str], detailed: bool) -> None:
    """
    List the records of a pub file.

    \b
    Output format:
      ID    Name                  type  graphic  weight
      1     Gold                     1        2       0
    """
    try:
        fmt, result = _load(pub_file, format_name, ctx.config)
        columns = LIST_COLUMNS[fmt.kind]

        header = f"{'ID':<6}{'Name':<24}" + "".join(f"{c:>12}" for c in columns)
        click.echo(header)
        click.echo("-" * len(header))

        for record in result.pub.entries():
            row = f"{record.record_id:<6}{record.name:<24}"
            row += "".join(f"{_field_value(record, c):>12}" for c in columns)
            click.echo(row)

        if detailed:
            click.echo("-" * len(header))
            click.echo(f"Total: {len(result.pub.entries())} {fmt.kind} records")
            if result.pub.has_eof():
                click.echo("Ends with eof sentinel")
            if not result.is_complete:
                click.echo(f"Truncated: {result.pub.declared_count} records declared")
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Dump Command
# =============================================================================

@main.command("dump")
@click.argument("pub_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-f", "--format", "format_name", type=FORMAT_CHOICE, help="File kind (default: detect)")
@click.option("--id", "record_id", type=int, help="Only this record (1-based)")
@pass_context
def cmd_dump(ctx: Context, pub_file: Path, format_name: Optional[str], record_id: Optional[int]) -> None:
    """Show every field of one or all records."""
    try:
        fmt, result = _load(pub_file, format_name, ctx.config)

        if record_id is not None:
            record = result.pub.get(record_id)
            if record is None:
                raise click.BadParameter(
                    f"no record {record_id} (file has {len(result.pub)})",
                    param_hint="--id",
                )
            records = [record]
        else:
            records = result.pub.entries()

        for record in records:
            click.echo(f"[{record.record_id}] {record.get_display_name()}")
            values = record.to_dict()
            values.pop("record_id", None)
            values.pop("name", None)
            if record.is_eof:
                continue
            for name, value in values.items():
                click.echo(f"  {name:<24} {value if isinstance(value, str) else int(value)}")
            for alias in fmt.schema.alias_names():
                click.echo(f"  {alias:<24} {int(getattr(record, alias))}")
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Export / Import Commands
# =============================================================================

@main.command("export")
@click.argument("pub_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output JSON file path (required)",
)
@click.option("-f", "--format", "format_name", type=FORMAT_CHOICE, help="File kind (default: detect)")
@click.option("--no-aliases", is_flag=True, help="Omit item alias names")
@pass_context
def cmd_export(
    ctx: Context,
    pub_file: Path,
    output: Path,
    format_name: Optional[str],
    no_aliases: bool,
) -> None:
    """Write the records of a pub file to JSON."""
    try:
        fmt, result = _load(pub_file, format_name, ctx.config)
        export_json(result.pub, output, include_aliases=not no_aliases)
        click.echo(f"Exported {len(result.pub)} {fmt.kind} records to {output}")
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


@main.command("import")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output pub file path (required)",
)
@click.option("-f", "--format", "format_name", type=FORMAT_CHOICE, required=True, help="File kind")
@click.option("--add-eof/--no-add-eof", default=True, help="Append the eof sentinel if missing (default: on)")
@click.option("--strict", is_flag=True, help="Reject values that do not fit their field")
@pass_context
def cmd_import(
    ctx: Context,
    json_file: Path,
    output: Path,
    format_name: str,
    add_eof: bool,
    strict: bool,
) -> None:
    """Build a pub file from a JSON array of records."""
    try:
        fmt = get_format(format_name)
        config = ctx.config
        if strict:
            config = config.replace(overflow=OverflowPolicy.STRICT)

        pub = import_json(json_file, fmt.record_class, version=config.version)
        if add_eof:
            pub.with_eof()
        fmt.write_file(pub, output, config)
        click.echo(f"Created {output} ({len(pub)} records)")
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Validate Command
# =============================================================================

@main.command("validate")
@click.argument("pub_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-f", "--format", "format_name", type=FORMAT_CHOICE, help="File kind (default: detect)")
@click.option("--verify-checksum", is_flag=True, help="Check the stored header checksum")
@pass_context
def cmd_validate(
    ctx: Context,
    pub_file: Path,
    format_name: Optional[str],
    verify_checksum: bool,
) -> None:
    """
    Check a pub file for problems.

    Exits with status 1 if the file is truncated, has trailing bytes or
    (with --verify-checksum) a wrong checksum.
    """
    try:
        config = ctx.config
        if verify_checksum:
            config = config.replace(verify_checksum=True)
        fmt, result = _load(pub_file, format_name, config)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    problems = list(result.warnings)
    if not result.pub.has_eof():
        click.echo("Note: file does not end with an eof record")

    if problems:
        click.echo(f"{pub_file}: INVALID ({fmt.magic})", err=True)
        for problem in problems:
            click.echo(f"  - {problem}", err=True)
        sys.exit(ExitCode.PUB_ERROR)

    click.echo(f"{pub_file}: OK ({fmt.magic}, {len(result.pub.entries())} records)")


# =============================================================================
# Rewrite Command
# =============================================================================

@main.command("rewrite")
@click.argument("pub_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output pub file path (required)",
)
@click.option("-f", "--format", "format_name", type=FORMAT_CHOICE, help="File kind (default: detect)")
@click.option("--strict", is_flag=True, help="Reject values that do not fit their field")
@pass_context
def cmd_rewrite(
    ctx: Context,
    pub_file: Path,
    output: Path,
    format_name: Optional[str],
    strict: bool,
) -> None:
    """
    Decode a pub file and encode it again.

    Recomputes the record count and checksum. A truncated input is
    written with the records that could be read.
    """
    try:
        config = ctx.config
        if strict:
            config = config.replace(overflow=OverflowPolicy.STRICT)
        fmt, result = _load(pub_file, format_name, config)
        fmt.write_file(result.pub, output, config)
        click.echo(f"Rewrote {pub_file} -> {output} ({len(result.pub)} records)")
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


if __name__ == "__main__":
    main()
