## easylang — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from .errors import *
from .parser import parse
from .runtime import Runtime


def run(source: str, filename: str | None = None, **kwargs):
    """Run `source` in a fresh runtime and return the value of its last statement."""
    return Runtime(**kwargs).run(source, filename=filename)
