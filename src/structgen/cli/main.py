"""Main CLI entry point for structgen.

Converts input files into Go struct declarations from the command line.
"""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from structgen import __version__
from structgen.engine.conversion_engine import ConversionEngine
from structgen.options.base import ConversionOptions, Dialect, TagStyle
from structgen.options.loader import OptionsLoader, load_options
from structgen.render.renderer import GO_TYPES
from structgen.schemas.base import InputFormat
from structgen.schemas.dialects import known_types
from structgen.schemas.parser import SchemaParser

console = Console()

FORMAT_CHOICES = [f.value for f in InputFormat]
DIALECT_CHOICES = [d.value for d in Dialect]
TAG_STYLE_CHOICES = [s.value for s in TagStyle]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="structgen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """structgen - Generate Go structs from JSON, YAML, SQL, Protobuf, XML and CSV.

    Every input is parsed into one canonical schema and rendered as Go
    struct declarations with serialization tags.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)


@cli.command()
@click.argument("input_path", type=click.Path(allow_dash=True))
@click.option("--format", "-f", "input_format", type=click.Choice(FORMAT_CHOICES), help="Input format (detected from the extension if not given)")
@click.option("--dialect", "-d", type=click.Choice(DIALECT_CHOICES), help="SQL dialect for type mapping")
@click.option("--tag-style", "-t", type=click.Choice(TAG_STYLE_CHOICES), help="Tag style")
@click.option("--pointer/--no-pointer", default=None, help="Render every non-array field as a pointer")
@click.option("--root-name", "-r", help="Name of the root struct for JSON, YAML and CSV input")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="YAML options file")
@click.option("--output", "-o", type=click.Path(), help="Output file (stdout if not specified)")
@click.pass_context
def convert(
    ctx: click.Context,
    input_path: str,
    input_format: str | None,
    dialect: str | None,
    tag_style: str | None,
    pointer: bool | None,
    root_name: str | None,
    config_path: str | None,
    output: str | None,
) -> None:
    """Convert an input file into Go structs.

    INPUT_PATH is the file to convert, or - to read standard input.

    \b
    Examples:
      structgen convert users.sql -d postgres -t gorm
      structgen convert payload.json -r Payload -o payload.go
      cat schema.proto | structgen convert - -f proto
    """
    verbose = ctx.obj.get("verbose", False)

    try:
        content, input_format = _read_input(input_path, input_format)
        options = _build_options(config_path, dialect, tag_style, pointer, root_name)

        result = ConversionEngine().convert(content, input_format, options)

        if output:
            with open(output, "w") as f:
                f.write(result)
            console.print(f"[green]Wrote Go structs to {output}[/green]")
        else:
            click.echo(result, nl=False)

    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        sys.exit(1)


@cli.command()
@click.argument("input_path", type=click.Path(allow_dash=True))
@click.option("--format", "-f", "input_format", type=click.Choice(FORMAT_CHOICES), help="Input format (detected from the extension if not given)")
@click.pass_context
def validate(ctx: click.Context, input_path: str, input_format: str | None) -> None:
    """Validate an input file without converting it.

    INPUT_PATH is the file to check, or - to read standard input.
    """
    try:
        content, input_format = _read_input(input_path, input_format)
    except Exception as e:
        console.print(f"[red]Error loading file: {escape(str(e))}[/red]")
        sys.exit(1)

    result = ConversionEngine().validate(content, input_format)
    name = "<stdin>" if input_path == "-" else input_path

    if result.is_valid:
        console.print(f"{name}: [green]VALID[/green] ({input_format})")
        return

    console.print(f"{name}: [red]INVALID[/red] ({input_format})")
    location = ""
    if result.line is not None:
        location = f" at line {result.line}"
        if result.column is not None:
            location += f", column {result.column}"
    console.print(f"  [red]ERROR[/red]: {escape(result.error or '')}{location}")
    sys.exit(1)


@cli.command()
@click.option("--dialect", "-d", type=click.Choice(DIALECT_CHOICES), default=Dialect.MYSQL.value, help="SQL dialect")
@click.pass_context
def list_types(ctx: click.Context, dialect: str) -> None:
    """List the SQL types a dialect understands."""
    table = Table(title=f"{dialect} types")
    table.add_column("SQL type", style="cyan")
    table.add_column("Canonical", style="green")
    table.add_column("Go type")

    for sql_type, canonical in sorted(known_types(dialect).items()):
        table.add_row(sql_type, canonical.value, GO_TYPES[canonical])

    console.print(table)


@cli.command()
@click.option("--output", "-o", type=click.Path(), default="structgen.yaml", help="Output file path")
@click.option("--dialect", "-d", type=click.Choice(DIALECT_CHOICES), default=Dialect.MYSQL.value, help="SQL dialect")
@click.option("--tag-style", "-t", type=click.Choice(TAG_STYLE_CHOICES), default=TagStyle.PLAIN.value, help="Tag style")
@click.pass_context
def init_config(ctx: click.Context, output: str, dialect: str, tag_style: str) -> None:
    """Initialize a new options file.

    Creates a YAML file with every option set to its default.
    """
    options = ConversionOptions(dialect=dialect, tag_style=tag_style)
    OptionsLoader().save_file(options, output)
    console.print(f"[green]Created options file: {output}[/green]")


def _read_input(input_path: str, input_format: str | None) -> tuple[str, str]:
    """Read the input text and settle its format."""
    if input_path == "-":
        if input_format is None:
            raise click.UsageError("--format is required when reading standard input")
        return click.get_text_stream("stdin").read(), input_format

    with open(input_path) as f:
        content = f.read()
    if input_format is None:
        input_format = SchemaParser.detect_format(input_path).value
    return content, input_format


def _build_options(
    config_path: str | None,
    dialect: str | None,
    tag_style: str | None,
    pointer: bool | None,
    root_name: str | None,
) -> ConversionOptions:
    """Merge the options file (if any) with command line overrides."""
    base = load_options(config_path) if config_path else ConversionOptions()
    overrides = {
        "dialect": dialect,
        "tag_style": tag_style,
        "use_pointer_for_nullable": pointer,
        "root_name": root_name,
    }
    data = base.to_dict()
    data.update({key: value for key, value in overrides.items() if value is not None})
    return ConversionOptions(**data)


if __name__ == "__main__":
    cli()
