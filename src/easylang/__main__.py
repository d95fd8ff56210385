## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# easylang — A tiny imperative scripting language with functions and recursion.
#

import sys
from dataclasses import dataclass

import click

from .errors import EasyError, EasyParseError
from .parser import format_parse_error_context
from .formatting import write_without_ansi
from .interpreter import DEFAULT_MAX_DEPTH

from . import api


@dataclass(frozen=True)
class RuntimeConfig:
    verbose: int
    plain: bool
    max_depth: int


class EasyRunner:
    def __init__(self, config: RuntimeConfig):
        self.config = config
        if config.plain:
            sys.stderr.write = write_without_ansi(sys.stderr.write)

    def _report(self, message: str, detail: str, exc_type: str, context: str = '') -> None:
        print(f'\033[30;43m {message} \033[0m {detail} (Exception: \033[33m{exc_type}\033[0m)\n{context}', file=sys.stderr)

    def _handle_exception(self, exc: EasyError, filename: str, source: str) -> None:
        if isinstance(exc, EasyParseError):
            context = format_parse_error_context(filename, exc.line, exc.column, exc.token, source=source)
            context += f"\n\033[90m{exc.message}\033[0m\n"
            self._report("SYNTAX ERROR.", f"Parsing `\033[97m{filename}\033[0m` caused a problem!", type(exc).__name__, context)
        else:
            where = f" at line \033[97m{exc.line}\033[0m" if exc.line is not None else ""
            detail = f"Running `\033[97m{filename}\033[0m` failed{where}: {exc.message}"
            self._report("RUNTIME ERROR.", detail, type(exc).__name__)

    def execute(self, source: str, filename: str) -> int:
        runtime = api.Runtime(max_depth=self.config.max_depth, verbosity=self.config.verbose)
        try:
            runtime.run(source, filename=filename)
        except EasyError as exc:
            sys.stdout.flush()
            self._handle_exception(exc, filename, source)
            return 1
        return 0


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.option('--verbose', '-v', default=0, count=True, help='Trace function calls (-v) and statements (-vv) to stderr.')
@click.option('--plain', '-p', is_flag=True, help='Strip ANSI color codes from diagnostics.')
@click.option('--max-depth', type=click.IntRange(min=1), default=DEFAULT_MAX_DEPTH, show_default=True,
              envvar='EASYLANG_MAX_DEPTH', help='Maximum nesting of function calls before a runtime error.')
@click.pass_context
def cli(ctx: click.Context, script, verbose: int, plain: bool, max_depth: int) -> None:
    """Run the easylang program in SCRIPT (use - for stdin)."""
    runner = EasyRunner(RuntimeConfig(verbose=verbose, plain=plain, max_depth=max_depth))
    source = script.read()
    ctx.exit(runner.execute(source, script.name or '<STDIN>'))


def main(argv: list[str] | None = None) -> None:
    cli.main(args=argv, prog_name='easylang')


if __name__ == "__main__":
    main()
