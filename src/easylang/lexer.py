## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
from typing import Iterator

import lark


TERMINALS = r"""start: token*
?token: WORD | STRING | NEWLINE | LE | GE | EQ | NE | LT | GT
      | PLUS | MINUS | STAR | SLASH | PERCENT | LPAREN | RPAREN
      | LBRACE | RBRACE | COMMA | UNKNOWN

STRING: /"(?:[^"\\]|\\[\s\S]?)*"?/
WORD: /[A-Za-z0-9_.]+/
NEWLINE: /\r\n?|\n/
LE: "<="
GE: ">="
EQ: "=="
NE: "!="
LT: "<"
GT: ">"
PLUS: "+"
MINUS: "-"
STAR: "*"
SLASH: "/"
PERCENT: "%"
LPAREN: "("
RPAREN: ")"
LBRACE: "{"
RBRACE: "}"
COMMA: ","
UNKNOWN.-1: /./s

COMMENT: /#[^\r\n]*/
BLANK: /[ \t]+/

%ignore COMMENT
%ignore BLANK
"""

KEYWORDS = frozenset(('set', 'print', 'read', 'if', 'then', 'end', 'while', 'do', 'to', 'and', 'function', 'return'))

# Tokens at which a statement may end without an explicit `.` or newline.
STATEMENT_STARTERS = frozenset(('SET', 'PRINT', 'READ', 'IF', 'WHILE', 'FUNCTION', 'RETURN'))

_NUMBER_RE = re.compile(r'\d*\.?\d*')
_STRING_RE = re.compile(r'"((?:[^"\\]|\\[\s\S]?)*)"?')

_TOKENIZER = None


def _tokenizer() -> lark.Lark:
    global _TOKENIZER
    if _TOKENIZER is None:
        _TOKENIZER = lark.Lark(TERMINALS, parser='lalr', lexer='basic')
    return _TOKENIZER


def _slice(tok: lark.Token, kind: str, value: str, offset: int) -> lark.Token:
    start = tok.start_pos + offset
    return lark.Token(kind, value, start_pos=start, line=tok.line, column=tok.column + offset,
                      end_line=tok.line, end_column=tok.column + offset + len(value), end_pos=start + len(value))


def _classify_word(tok: lark.Token) -> Iterator[lark.Token]:
    text = tok.value
    start, end = 0, len(text.rstrip('.'))
    # Dots around a word terminate statements (`end.`, `.print`) unless they belong to a number like `.25`.
    while start < end and text[start] == '.' and not _NUMBER_RE.fullmatch(text[start:end]):
        start += 1
    for offset in range(start):
        yield _slice(tok, 'DOT', '.', offset)

    if start < end:
        word = text[start:end]
        if _NUMBER_RE.fullmatch(word):
            yield _slice(tok, 'NUMBER', word, start)
        elif (lower := word.lower()) in KEYWORDS:
            yield _slice(tok, lower.upper(), lower, start)
        else:
            yield _slice(tok, 'IDENT', lower, start)

    for offset in range(end, len(text)):
        yield _slice(tok, 'DOT', '.', offset)


def _shift_lines(tok: lark.Token, source: str, extra: int) -> lark.Token:
    """Move `tok` down by `extra` lines, recomputing its column from the nearest line break."""
    start = tok.start_pos
    column = start - max(source.rfind('\n', 0, start), source.rfind('\r', 0, start))
    end_line = (tok.end_line or tok.line) + extra
    return lark.Token(tok.type, tok.value, start_pos=start, line=tok.line + extra, column=column,
                      end_line=end_line, end_column=column + len(tok.value), end_pos=tok.end_pos)


def tokenize(source: str) -> Iterator[lark.Token]:
    """Yield classified tokens for `source`, ending with a single EOF token."""
    last, lone_cr = None, 0
    for tok in _tokenizer().lex(source):
        # lark counts only `\n` as a line break, so old-Mac `\r` endings are added on top.
        last = _shift_lines(tok, source, lone_cr) if lone_cr else tok
        if last.type == 'WORD':
            yield from _classify_word(last)
        elif last.type == 'STRING':
            yield lark.Token.new_borrow_pos('STRING', _STRING_RE.fullmatch(last.value).group(1), last)
        else:
            yield last
        if last.type == 'NEWLINE' and last.value == '\r':
            lone_cr += 1

    line = 1 if last is None else (last.end_line or last.line) + (last.value == '\r')
    yield lark.Token('EOF', '', line=line, column=0)


class Lexer:
    """Pull-style wrapper so the parser can ask for one token at a time."""

    def __init__(self, source: str):
        self.source = source
        self.line = 1
        self._tokens = tokenize(source)
        self._eof = None

    def next(self) -> lark.Token:
        if self._eof is not None:
            return self._eof
        tok = next(self._tokens)
        if tok.type == 'EOF':
            self._eof = tok
        self.line = tok.line
        return tok

    def __iter__(self) -> Iterator[lark.Token]:
        while (tok := self.next()).type != 'EOF':
            yield tok
        yield tok
