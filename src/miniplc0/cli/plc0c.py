"""
plc0c - miniplc0 Compiler Command-Line Interface
================================================

This module implements the command-line interface for the miniplc0
compiler.

Usage Examples
--------------
Basic compilation:
    $ plc0c program.plc0

With output file:
    $ plc0c program.plc0 -o program.s0

Compile and execute on the reference stack machine:
    $ plc0c --run program.plc0

Token dump:
    $ plc0c --tokens program.plc0

Verbose mode:
    $ plc0c -v program.plc0
"""

import logging
from pathlib import Path
from typing import Optional

import click

from miniplc0 import __version__
from miniplc0.cli.errors import handle_cli_exception
from miniplc0.compiler import Compiler, CompilerOptions
from miniplc0.vm import StackMachine


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output listing file (default: input.s0)",
)
@click.option(
    "-n", "--numbered",
    is_flag=True,
    help="Prefix each listing line with its instruction index",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "--run",
    is_flag=True,
    help="Execute the program on the reference stack machine instead of "
         "writing a listing",
)
@click.option(
    "--encoding",
    default="utf-8",
    show_default=True,
    help="Source file encoding",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="plc0c")
def main(
    input_file: Path,
    output: Optional[Path],
    numbered: bool,
    tokens: bool,
    run: bool,
    encoding: str,
    verbose: bool,
) -> None:
    """
    Compile a miniplc0 program to stack machine instructions.

    INPUT_FILE is the miniplc0 source file to compile.

    The listing has one instruction per line (e.g. "LIT 1", "STO 0").
    Compilation stops at the first error, which is reported with its
    line and column.

    \b
    Examples:
        plc0c prog.plc0              # Outputs prog.s0
        plc0c prog.plc0 -o out.s0    # Specify output file
        plc0c -n prog.plc0           # Numbered listing
        plc0c --run prog.plc0        # Compile and execute
        plc0c --tokens prog.plc0     # Dump tokens
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".s0")

    options = CompilerOptions(encoding=encoding, numbered_listing=numbered)

    try:
        if verbose:
            click.echo(f"Compiling {input_file}...")

        compiler = Compiler(options)
        result = compiler.compile_file(input_file)
        result.raise_if_error()

        # Token dump mode
        if tokens:
            for token in result.tokens:
                click.echo(repr(token))
            return

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens")
            click.echo(f"Emitted: {len(result.instructions)} instructions")

        # Execute mode
        if run:
            machine = StackMachine(
                result.instructions,
                on_output=lambda value: click.echo(value),
            )
            machine.run()
            return

        logger.debug(f"Writing {len(result.instructions)} instructions to {output}")
        output.write_text(result.listing())
        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
