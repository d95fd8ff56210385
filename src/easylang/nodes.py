## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from dataclasses import dataclass, field


@dataclass
class Node:
    line: int = field(default=0, kw_only=True, compare=False)


## STATEMENTS
@dataclass
class StatementList(Node):
    statements: list[Node] = field(default_factory=list)

@dataclass
class SetStmt(Node):
    name: str
    expr: Node

@dataclass
class PrintStmt(Node):
    expr: Node

@dataclass
class ReadStmt(Node):
    name: str

@dataclass
class IfStmt(Node):
    cond: Node
    body: StatementList
    else_body: StatementList | None = None

@dataclass
class WhileStmt(Node):
    cond: Node
    body: StatementList

@dataclass
class FunctionStmt(Node):
    name: str
    params: tuple[str, ...]
    body: StatementList

@dataclass
class ReturnStmt(Node):
    expr: Node | None = None


## EXPRESSIONS
@dataclass
class BinaryExpr(Node):
    op: str
    left: Node
    right: Node

@dataclass
class NumberExpr(Node):
    value: float

@dataclass
class StringExpr(Node):
    value: str

@dataclass
class VarExpr(Node):
    name: str

@dataclass
class CallExpr(Node):
    name: str
    args: list[Node] = field(default_factory=list)
