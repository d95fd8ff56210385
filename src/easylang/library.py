## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Iterator
from dataclasses import dataclass, field

from .nodes import StatementList
from .errors import EasyRedefinitionError


@dataclass(frozen=True)
class FunctionDef:
    name: str
    params: tuple[str, ...]
    body: StatementList

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass
class FunctionTable:
    """Append-only registry of user functions, keyed by their lowercased name."""
    functions: dict[str, FunctionDef] = field(default_factory=dict)

    def define(self, name: str, params, body: StatementList, *, line: int | None = None) -> FunctionDef:
        if name in self.functions:
            raise EasyRedefinitionError(f"Function `{name}` already defined.", line=line)
        self.functions[name] = fn = FunctionDef(name, tuple(params), body)
        return fn

    def lookup(self, name: str) -> FunctionDef | None:
        return self.functions.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.functions

    def __len__(self) -> int:
        return len(self.functions)

    def __iter__(self) -> Iterator[str]:
        return iter(self.functions)
