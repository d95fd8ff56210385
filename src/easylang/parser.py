## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import lark

from .lexer import Lexer, STATEMENT_STARTERS
from .errors import EasyParseError
from .nodes import (
    Node, StatementList, SetStmt, PrintStmt, ReadStmt, IfStmt, WhileStmt, FunctionStmt, ReturnStmt,
    BinaryExpr, NumberExpr, StringExpr, VarExpr, CallExpr,
)


COMPARISONS = {'LT': '<', 'LE': '<=', 'GT': '>', 'GE': '>=', 'EQ': '==', 'NE': '!='}
ADDITIVE = {'PLUS': '+', 'MINUS': '-'}
MULTIPLICATIVE = {'STAR': '*', 'SLASH': '/', 'PERCENT': '%'}

_DESCRIPTIONS = {'EOF': 'end of input', 'NEWLINE': 'newline', 'UNKNOWN': 'unknown character'}


def describe(tok: lark.Token) -> str:
    if tok.type in ('IDENT', 'NUMBER'):
        return f"{tok.type.lower()} `{tok.value}`"
    if tok.type == 'STRING':
        return f'string "{tok.value}"'
    if tok.type in _DESCRIPTIONS:
        label = _DESCRIPTIONS[tok.type]
        return f"{label} `{tok.value}`" if tok.type == 'UNKNOWN' else label
    return f"`{tok.value}`"


def _is_else(tok: lark.Token) -> bool:
    return tok.type == 'IDENT' and tok.value == 'else'


class Parser:
    """Recursive descent over a one-token lookahead window into the lexer."""

    def __init__(self, source: str, filename: str | None = None):
        self.filename = filename
        self.lexer = Lexer(source)
        self.current: lark.Token = self.lexer.next()

    # Token helpers ──────────────────────────────────────────────────────────────────────────
    def peek(self) -> lark.Token:
        return self.current

    def advance(self) -> lark.Token:
        tok, self.current = self.current, self.lexer.next()
        return tok

    def accept(self, kind: str) -> lark.Token | None:
        return self.advance() if self.current.type == kind else None

    def expect(self, kind: str, what: str) -> lark.Token:
        if self.current.type != kind:
            self.error(f"expected {what} but found {describe(self.current)}")
        return self.advance()

    def error(self, message: str):
        tok = self.current
        raise EasyParseError(f"Parse error: {message}", filename=self.filename,
                             line=tok.line, column=tok.column, token=tok.value)

    def skip_newlines(self) -> None:
        while self.current.type == 'NEWLINE':
            self.advance()

    def expect_terminator(self) -> None:
        tok = self.current
        if tok.type in ('DOT', 'NEWLINE'):
            self.advance()
        elif tok.type in STATEMENT_STARTERS or tok.type in ('END', 'EOF', 'RBRACE') or _is_else(tok):
            return
        else:
            self.error(f"expected '.' or newline but found {describe(tok)}")

    # Statements ─────────────────────────────────────────────────────────────────────────────
    def parse_program(self) -> StatementList:
        program = self.parse_statements()
        if self.current.type != 'EOF':
            self.error(f"unexpected {describe(self.current)}")
        return program

    def parse_statements(self) -> StatementList:
        block = StatementList(line=self.current.line)
        while True:
            self.skip_newlines()
            tok = self.current
            if tok.type in ('EOF', 'END', 'THEN', 'DO', 'RBRACE') or _is_else(tok):
                break
            if (stmt := self.parse_statement()) is not None:
                block.statements.append(stmt)
        return block

    def parse_statement(self) -> Node | None:
        tok = self.current
        match tok.type:
            case 'SET':
                self.advance()
                name = self.expect('IDENT', "identifier after 'set'").value
                self.expect('TO', "'to'")
                stmt = SetStmt(name, self.parse_expression(), line=tok.line)
            case 'PRINT':
                self.advance()
                stmt = PrintStmt(self.parse_expression(), line=tok.line)
            case 'READ':
                self.advance()
                stmt = ReadStmt(self.expect('IDENT', "identifier after 'read'").value, line=tok.line)
            case 'IF':
                stmt = self.parse_if()
            case 'WHILE':
                stmt = self.parse_while()
            case 'FUNCTION':
                return self.parse_function()
            case 'RETURN':
                stmt = self.parse_return()
            case 'DOT':
                self.advance()
                return None
            case _:
                # A bare expression is shorthand for printing it.
                stmt = PrintStmt(self.parse_expression(), line=tok.line)
        self.expect_terminator()
        return stmt

    def parse_if(self) -> IfStmt:
        line = self.advance().line
        cond = self.parse_compare()
        self.expect('THEN', "'then'")
        body, else_body = self.parse_statements(), None
        if _is_else(self.current):
            self.advance()
            else_body = self.parse_statements()
        self.expect('END', "'end' to close if")
        return IfStmt(cond, body, else_body, line=line)

    def parse_while(self) -> WhileStmt:
        line = self.advance().line
        cond = self.parse_compare()
        self.expect('DO', "'do'")
        body = self.parse_statements()
        self.expect('END', "'end' to close while")
        return WhileStmt(cond, body, line=line)

    def parse_function(self) -> FunctionStmt:
        line = self.advance().line
        name = self.expect('IDENT', "identifier after 'function'").value
        self.expect('LPAREN', "'('")
        params = []
        if self.current.type != 'RPAREN':
            params.append(self.expect('IDENT', "parameter name").value)
            while self.accept('COMMA'):
                params.append(self.expect('IDENT', "parameter name").value)
        self.expect('RPAREN', "')'")
        self.skip_newlines()
        self.expect('LBRACE', "'{'")
        body = self.parse_statements()
        self.expect('RBRACE', "'}'")
        return FunctionStmt(name, tuple(params), body, line=line)

    def parse_return(self) -> ReturnStmt:
        line = self.advance().line
        tok = self.current
        if tok.type in ('DOT', 'NEWLINE', 'RBRACE', 'END', 'EOF') or _is_else(tok):
            return ReturnStmt(None, line=line)
        return ReturnStmt(self.parse_expression(), line=line)

    # Expressions ────────────────────────────────────────────────────────────────────────────
    def parse_compare(self) -> Node:
        node = self.parse_expression()
        if (op := COMPARISONS.get(self.current.type)) is not None:
            line = self.advance().line
            node = BinaryExpr(op, node, self.parse_expression(), line=line)
        while self.current.type == 'AND':
            line = self.advance().line
            node = BinaryExpr('and', node, self.parse_compare(), line=line)
        return node

    def parse_expression(self) -> Node:
        node = self.parse_term()
        while (op := ADDITIVE.get(self.current.type)) is not None:
            line = self.advance().line
            node = BinaryExpr(op, node, self.parse_term(), line=line)
        return node

    def parse_term(self) -> Node:
        node = self.parse_factor()
        while (op := MULTIPLICATIVE.get(self.current.type)) is not None:
            line = self.advance().line
            node = BinaryExpr(op, node, self.parse_factor(), line=line)
        return node

    def parse_factor(self) -> Node:
        tok = self.current
        match tok.type:
            case 'NUMBER':
                self.advance()
                return NumberExpr(float(tok.value), line=tok.line)
            case 'STRING':
                self.advance()
                return StringExpr(tok.value, line=tok.line)
            case 'IDENT':
                self.advance()
                if not self.accept('LPAREN'):
                    return VarExpr(tok.value, line=tok.line)
                args = []
                if self.current.type != 'RPAREN':
                    args.append(self.parse_expression())
                    while self.accept('COMMA'):
                        args.append(self.parse_expression())
                self.expect('RPAREN', "')'")
                return CallExpr(tok.value, args, line=tok.line)
            case 'LPAREN':
                self.advance()
                node = self.parse_expression()
                self.expect('RPAREN', "')'")
                return node
            case 'MINUS':
                self.advance()
                return BinaryExpr('-', NumberExpr(0.0, line=tok.line), self.parse_factor(), line=tok.line)
        self.error(f"unexpected {describe(tok)} in expression")


def parse(source: str, filename: str | None = None) -> StatementList:
    parser = Parser(source, filename=filename)
    try:
        return parser.parse_program()
    except RecursionError:
        tok = parser.current
        raise EasyParseError("Parse error: program nested too deeply", filename=filename,
                             line=tok.line, column=tok.column, token=tok.value) from None


def format_parse_error_context(filename, line, column, token_value, source=None):
    lines = source.splitlines(keepends=True) if source is not None else open(filename, 'r').readlines()
    start_line, end_line = max(0, line - 3), min(len(lines), line + 2)
    result = [f"\033[97m  File \"{filename}\", line {line}\033[0m"]

    for i in range(start_line, end_line):
        line_content = lines[i].rstrip('\r\n')
        line_color = '\033[90m'
        if i+1 == line:
            line_color = '\033[97m'
            width = max(len(token_value or ''), 1)
            if column and 0 < column <= len(line_content):
                line_content = (
                    line_content[:column-1] +
                    f"\033[48;5;30m\033[1;97m{line_content[column-1:column+width-1]}\033[0m" +
                    line_content[column+width-1:]
                )
        result.append(f"{line_color}{i+1:>5} |\033[0m {line_content}")
    return '\n' + '\n'.join(result) + '\n'
