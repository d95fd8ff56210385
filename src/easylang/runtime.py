## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import sys
import threading
from typing import Any, TextIO
from contextlib import contextmanager

from .nodes import StatementList
from .errors import EasyRecursionError
from .parser import parse
from .library import FunctionTable
from .environment import Environment
from .interpreter import Evaluator, DEFAULT_MAX_DEPTH


# Python frames consumed per nested call, with headroom for deeply nested expressions.
_FRAMES_PER_CALL = 40


# The recursion limit is process-wide, so overlapping runtimes share one raised limit:
# it covers the largest active budget and drops back only when the last one exits.
_BUDGET_LOCK = threading.Lock()
_ACTIVE_LIMITS: list[int] = []
_BASELINE_LIMIT = None


def _apply_limit() -> None:
    sys.setrecursionlimit(max([_BASELINE_LIMIT, *_ACTIVE_LIMITS]))


@contextmanager
def _recursion_budget(max_depth: int):
    global _BASELINE_LIMIT
    limit = max_depth * _FRAMES_PER_CALL + 1000
    with _BUDGET_LOCK:
        if not _ACTIVE_LIMITS:
            _BASELINE_LIMIT = sys.getrecursionlimit()
        _ACTIVE_LIMITS.append(limit)
        _apply_limit()
    try:
        yield
    finally:
        with _BUDGET_LOCK:
            _ACTIVE_LIMITS.remove(limit)
            _apply_limit()


class Runtime:
    """Interpreter state for one program: global scope, function table and I/O streams.

    Runtimes are independent of each other; several can run side by side. Repeated
    calls to `run()` on the same runtime share its globals and functions.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None, stderr: TextIO | None = None,
                 max_depth: int = DEFAULT_MAX_DEPTH, verbosity: int = 0):
        if max_depth < 1:
            raise ValueError("max_depth must be a positive number of calls.")
        self.stdin, self.stdout, self.stderr = stdin, stdout, stderr
        self.max_depth = max_depth
        self.verbosity = verbosity
        self.env = Environment()
        self.functions = FunctionTable()

    # Execution ───────────────────────────────────────────────────────────────────────────────
    def run(self, source: str, filename: str | None = None) -> Any:
        # Parsing recurses once per nesting level of the source, so it needs the budget too.
        with _recursion_budget(self.max_depth):
            program = parse(source, filename=filename)
        return self.execute(program)

    def execute(self, program: StatementList) -> Any:
        evaluator = Evaluator(self.env, self.functions,
                              stdin=self.stdin or sys.stdin, stdout=self.stdout or sys.stdout,
                              stderr=self.stderr or sys.stderr,
                              max_depth=self.max_depth, verbosity=self.verbosity)
        with _recursion_budget(self.max_depth):
            try:
                out = evaluator.execute(program)
            except RecursionError as exc:
                if isinstance(exc, EasyRecursionError): raise
                raise EasyRecursionError("Host recursion limit reached before the call depth budget.") from None
        return out.value

    # Introspection ───────────────────────────────────────────────────────────────────────────
    def get_variable(self, name: str) -> Any:
        return self.env.globals.vars[name.lower()]

    def list_functions(self) -> dict[str, tuple[str, ...]]:
        return {name: self.functions.lookup(name).params for name in self.functions}
