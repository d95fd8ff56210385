## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re


def format_number(x: float) -> str:
    """Shortest general form, matching C's `%g` (6 significant digits)."""
    return '%g' % x


def format_value(value) -> str:
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    return ''


def type_name(value) -> str:
    if isinstance(value, float): return 'number'
    if isinstance(value, str): return 'string'
    return 'none'


def format_item(value) -> str:
    """Representation used by traces and error messages, where strings are quoted."""
    if isinstance(value, str):
        return '"' + value.replace('"', '\\"') + '"'
    if value is None:
        return 'none'
    return format_number(value)


def write_without_ansi(write_fn):
    """Wrapper function that strips ANSI codes before calling the original writer."""
    ansi_re = re.compile(r'\033\[[0-9;]*m')
    return lambda text: write_fn(ansi_re.sub('', text))
