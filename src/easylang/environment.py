## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Any, Iterator
from dataclasses import dataclass, field


@dataclass(eq=False)
class Scope:
    vars: dict[str, Any] = field(default_factory=dict)
    parent: 'Scope | None' = None

    def chain(self) -> Iterator['Scope']:
        scope = self
        while scope is not None:
            yield scope
            scope = scope.parent


class Environment:
    """Stack of binding frames, where each pushed frame's parent is the frame that was
    active when it was pushed.  Names therefore resolve along the live call stack
    (dynamic scoping) rather than along where a function was written.
    """

    def __init__(self):
        self.globals = Scope()
        self.current = self.globals

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.current.chain()) - 1

    def push(self) -> Scope:
        self.current = Scope(parent=self.current)
        return self.current

    def pop(self) -> Scope:
        if self.current is self.globals:
            raise IndexError("Cannot pop the global scope.")
        scope, self.current = self.current, self.current.parent
        scope.vars.clear()
        return scope

    def lookup(self, name: str) -> Scope | None:
        """Return the innermost scope binding `name`, or None if nothing does."""
        return next((s for s in self.current.chain() if name in s.vars), None)

    def get(self, name: str) -> Any:
        if (scope := self.lookup(name)) is None:
            raise KeyError(name)
        return scope.vars[name]

    def set(self, name: str, value: Any) -> None:
        # Only the innermost frame is ever written; ancestors' bindings are shadowed.
        self.current.vars[name] = value

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None
