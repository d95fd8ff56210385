## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import math
from typing import Any, TextIO
from collections import namedtuple

from .nodes import (
    Node, StatementList, SetStmt, PrintStmt, ReadStmt, IfStmt, WhileStmt, FunctionStmt, ReturnStmt,
    BinaryExpr, NumberExpr, StringExpr, VarExpr, CallExpr,
)
from .errors import (
    EasyNameError, EasyTypeError, EasyArityError, EasyZeroDivisionError, EasyInputError, EasyRecursionError,
)
from .library import FunctionTable
from .environment import Environment
from .formatting import format_value, format_number, format_item, type_name


# Result of executing a statement; `returned` is set once a `return` fires and stays set
# while the value travels outward through every enclosing list and loop.
class Outcome(namedtuple('Outcome', ['value', 'returned'])):
    __slots__ = ()

NOTHING = Outcome(None, False)

DEFAULT_MAX_DEPTH = 500


## OPERATORS
def op_sub(b: float, a: float) -> float: return b - a
def op_add(b: float, a: float) -> float: return b + a
def op_mul(b: float, a: float) -> float: return b * a
def op_lt(b: float, a: float) -> float: return 1.0 if b < a else 0.0
def op_lte(b: float, a: float) -> float: return 1.0 if b <= a else 0.0
def op_gt(b: float, a: float) -> float: return 1.0 if b > a else 0.0
def op_gte(b: float, a: float) -> float: return 1.0 if b >= a else 0.0
def op_equal(b: float, a: float) -> float: return 1.0 if b == a else 0.0
def op_differ(b: float, a: float) -> float: return 1.0 if b != a else 0.0
def op_and(b: float, a: float) -> float: return 1.0 if b != 0.0 and a != 0.0 else 0.0

def op_rem(b: float, a: float) -> float:
    try:
        return math.fmod(b, a)
    except ValueError:  # Zero divisor or infinite dividend, as C's fmod.
        return math.nan

OPERATORS = {
    '+': op_add, '-': op_sub, '*': op_mul, '%': op_rem,
    '<': op_lt, '<=': op_lte, '>': op_gt, '>=': op_gte, '==': op_equal, '!=': op_differ,
    'and': op_and,
}


def parse_number(text: str) -> float | None:
    """Return the value of `text` if the whole (stripped) line reads as a number.

    Decimals, exponents, `inf` and `nan` are accepted, as are hex literals like `0x1f`.
    Digit-group underscores are not.
    """
    text = text.strip()
    if not text or '_' in text:
        return None
    try:
        return float(text)
    except ValueError:
        pass
    try:
        return float.fromhex(text) if '0x' in text.lower() else None
    except ValueError:
        return None


def _concat_text(value) -> str:
    return value if isinstance(value, str) else format_number(value or 0.0)


class Evaluator:
    def __init__(self, env: Environment, functions: FunctionTable, stdin: TextIO, stdout: TextIO, stderr: TextIO,
                 max_depth: int = DEFAULT_MAX_DEPTH, verbosity: int = 0):
        self.env = env
        self.functions = functions
        self.stdin, self.stdout, self.stderr = stdin, stdout, stderr
        self.max_depth = max_depth
        self.verbosity = verbosity
        self.depth = 0

    def _trace(self, node: Node, text: str) -> None:
        print(f"\033[90m{node.line:>4} :\033[0m  {'  ' * self.depth}{text}", file=self.stderr)

    # Statements ─────────────────────────────────────────────────────────────────────────────
    def execute(self, node: Node) -> Outcome:
        if self.verbosity >= 2 and not isinstance(node, StatementList):
            self._trace(node, f"\033[36m{type(node).__name__}\033[0m")

        match node:
            case StatementList(statements=statements):
                out = NOTHING
                for stmt in statements:
                    out = self.execute(stmt)
                    if out.returned: break
                return out

            case SetStmt(name=name, expr=expr):
                value = self.evaluate(expr)
                self.env.set(name, value)
                return Outcome(value, False)

            case PrintStmt(expr=expr):
                value = self.evaluate(expr)
                if value is not None:
                    self.stdout.write(format_value(value) + '\n')
                return NOTHING

            case ReadStmt(name=name):
                return Outcome(self._read(name, node.line), False)

            case IfStmt(cond=cond, body=body, else_body=else_body):
                test = self.evaluate(cond)
                if not isinstance(test, float):
                    raise EasyTypeError(f"Condition must be numeric, got {type_name(test)}.", line=node.line)
                if test != 0.0:
                    return self.execute(body)
                return self.execute(else_body) if else_body is not None else NOTHING

            case WhileStmt(cond=cond, body=body):
                out = NOTHING
                # Unlike `if`, a non-numeric condition simply ends the loop.
                while isinstance(test := self.evaluate(cond), float) and test != 0.0:
                    out = self.execute(body)
                    if out.returned: break
                return out

            case FunctionStmt(name=name, params=params, body=body):
                self.functions.define(name, params, body, line=node.line)
                return NOTHING

            case ReturnStmt(expr=expr):
                return Outcome(0.0 if expr is None else self.evaluate(expr), True)

        raise NotImplementedError(f"Unexpected statement node `{type(node).__name__}`.")

    def _read(self, name: str, line: int) -> Any:
        text = self.stdin.readline()
        if not text:
            raise EasyInputError(f"Input error while reading `{name}`: no more lines.", line=line)
        text = text.removesuffix('\n').removesuffix('\r')
        value = parse_number(text)
        value = text if value is None else value
        self.env.set(name, value)
        return value

    # Expressions ────────────────────────────────────────────────────────────────────────────
    def evaluate(self, node: Node) -> Any:
        match node:
            case NumberExpr(value=value) | StringExpr(value=value):
                return value

            case VarExpr(name=name):
                try:
                    return self.env.get(name)
                except KeyError:
                    raise EasyNameError(f"Undefined variable `{name}`.", line=node.line) from None

            case CallExpr():
                return self._call(node)

            case BinaryExpr(op=op, left=left, right=right):
                b, a = self.evaluate(left), self.evaluate(right)
                if op == '+' and (isinstance(b, str) or isinstance(a, str)):
                    return _concat_text(b) + _concat_text(a)
                if not isinstance(b, float) or not isinstance(a, float):
                    raise EasyTypeError(f"Numeric operation `{op}` on non-numeric types "
                                        f"({type_name(b)} {op} {type_name(a)}).", line=node.line)
                if op == '/':
                    if a == 0.0:
                        raise EasyZeroDivisionError("Division by zero.", line=node.line)
                    return b / a
                return OPERATORS[op](b, a)

        raise NotImplementedError(f"Unexpected expression node `{type(node).__name__}`.")

    def _call(self, node: CallExpr) -> Any:
        if (fn := self.functions.lookup(node.name)) is None:
            raise EasyNameError(f"Undefined function `{node.name}`.", line=node.line)
        if fn.arity != len(node.args):
            raise EasyArityError(f"Function `{fn.name}` expects {fn.arity} args, got {len(node.args)}.", line=node.line)
        if self.depth >= self.max_depth:
            raise EasyRecursionError(f"Maximum call depth of {self.max_depth} exceeded in `{fn.name}`.",
                                     line=node.line, depth=self.depth)

        # Arguments see the caller's scope only; parameters are bound after the push.
        args = [self.evaluate(arg) for arg in node.args]
        if self.verbosity >= 1:
            self._trace(node, f"\033[97m{fn.name}\033[0m({', '.join(format_item(a) for a in args)})")

        self.env.push()
        self.depth += 1
        try:
            for param, value in zip(fn.params, args):
                self.env.set(param, value)
            out = self.execute(fn.body)
        finally:
            self.depth -= 1
            self.env.pop()

        if self.verbosity >= 1:
            self._trace(node, f"\033[90m{fn.name} ⇒\033[0m {format_item(out.value)}")
        return out.value
