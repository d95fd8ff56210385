## easylang — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import io
import math
import re

import pytest

from easylang.api import Runtime
from easylang.errors import (
    EasyRuntimeError, EasyNameError, EasyTypeError, EasyArityError, EasyZeroDivisionError,
    EasyRedefinitionError, EasyInputError,
)
from easylang.interpreter import parse_number, op_rem


def run(source: str, stdin: str = '') -> str:
    out = io.StringIO()
    Runtime(stdin=io.StringIO(stdin), stdout=out).run(source)
    return out.getvalue()


## PRINTING
@pytest.mark.parametrize("source, expected", [
    ("print 3", "3\n"),
    ("print 3.5", "3.5\n"),
    ("print 1 / 3", "0.333333\n"),
    ("print 1000000 * 10", "1e+07\n"),
    ("print 0 - 2.25", "-2.25\n"),
    ('print "raw \\n text"', "raw \\n text\n"),
])
def test_print_uses_general_number_format(source, expected):
    assert run(source) == expected


def test_print_of_no_value_writes_nothing():
    assert run("function f() { }\nprint f()\nprint 1") == "1\n"


## STRINGS
def test_plus_concatenates_once_a_string_is_involved():
    assert run('print "a" + 1 + "b"') == "a1b\n"
    assert run('print 1 + 2 + "x"') == "3x\n"
    assert run('print "x" + 1 + 2') == "x12\n"
    assert run('print "pi=" + 3.25') == "pi=3.25\n"


@pytest.mark.parametrize("source", ['print "a" - 1', 'print 2 * "b"', 'print "a" / "b"'])
def test_other_operators_reject_strings(source):
    with pytest.raises(EasyTypeError):
        run(source)


## ARITHMETIC & COMPARISONS
def test_comparisons_yield_one_or_zero():
    src = """
    set a to 2
    if a == 2 then print 1 end
    if a != 2 then print 2 else print 3 end
    if a >= 2 and a <= 2 and a > 1 and a < 3 then print 4 end
    """
    assert run(src) == "1\n3\n4\n"


def test_division_by_zero_is_fatal():
    with pytest.raises(EasyZeroDivisionError) as exc_info:
        run("print 1\n\nprint 5 / 0")
    assert exc_info.value.line == 3


def test_remainder_by_zero_is_nan():
    assert run("print 5 % 0") == "nan\n"
    assert run("print 7 % 3") == "1\n"
    assert run("print 0 - 7 % 3") == "-1\n"


def test_op_rem_follows_fmod_sign_rules():
    assert op_rem(-7.0, 3.0) == -1.0
    assert op_rem(7.0, -3.0) == 1.0


def test_and_evaluates_both_operands():
    src = """
    function side() {
        print "side"
        return 0
    }
    if 0 and side() then print "yes" else print "no" end
    """
    assert run(src) == "side\nno\n"


## CONTROL FLOW
def test_if_requires_a_number():
    assert run('if 1 then print "yes" end') == "yes\n"
    assert run('if 0 then print "yes" end') == ""
    with pytest.raises(EasyTypeError):
        run('if "1" then print "yes" end')


def test_while_loops_until_zero():
    src = "set i to 0. while i < 3 do print i. set i to i + 1. end"
    assert run(src) == "0\n1\n2\n"


def test_while_stops_silently_on_a_string_condition():
    assert run('while "x" do print 1 end\nprint 2') == "2\n"


def test_nested_return_unwinds_all_enclosing_blocks():
    src = """
    function first_over(limit) {
        set i to 0
        while i < 100 do
            set i to i + 1
            if i > limit then
                if 1 then return i end
                print "after inner return"
            end
            print "tick"
        end
        print "unreachable"
        return -1
    }
    print first_over(2)
    print "done"
    """
    assert run(src) == "tick\ntick\n3\ndone\n"


def test_function_without_return_yields_last_statement_value():
    assert run("function f() { set a to 5 }\nprint f()") == "5\n"
    assert run("function g() { return }\nprint g()") == "0\n"


def test_top_level_return_stops_the_program():
    assert run("print 1\nreturn\nprint 2") == "1\n"


## FUNCTIONS & SCOPES
def test_fibonacci_recursion():
    src = """
    function fib(n) {
        if n<=1 then return n end.
        return fib(n-1)+fib(n-2).
    }
    print fib(6)
    """
    assert run(src) == "8\n"


def test_tower_of_hanoi_moves_in_recursive_order():
    src = """
    function hanoi(n, src, dst, via) {
        if n > 0 then
            hanoi(n - 1, src, via, dst)
            print "Move disk " + n + " from " + src + " to " + dst
            hanoi(n - 1, via, dst, src)
        end
    }
    hanoi(3, "A", "C", "B")
    """
    assert run(src).splitlines() == [
        "Move disk 1 from A to C",
        "Move disk 2 from A to B",
        "Move disk 1 from C to B",
        "Move disk 3 from A to C",
        "Move disk 1 from B to A",
        "Move disk 2 from B to C",
        "Move disk 1 from A to C",
    ]


def test_wrong_arity_is_fatal():
    with pytest.raises(EasyArityError):
        run("function f(a, b) { return a }\nprint f(1)")
    with pytest.raises(EasyArityError):
        run("function f(a, b) { return a }\nprint f(1, 2, 3)")


def test_undefined_names_are_fatal():
    with pytest.raises(EasyNameError) as exc_info:
        run("print 1\nprint missing")
    assert exc_info.value.line == 2
    with pytest.raises(EasyNameError):
        run("print nothing()")


def test_redefinition_is_fatal():
    with pytest.raises(EasyRedefinitionError):
        run("function f() { return 1 }\nfunction F() { return 2 }")


def test_callee_sees_the_callers_locals():
    src = """
    function show() { print secret }
    function outer() {
        set secret to "from caller"
        show()
    }
    outer()
    """
    assert run(src) == "from caller\n"
    with pytest.raises(EasyNameError):
        run(src + "\nshow()")


def test_assignment_never_mutates_an_outer_binding():
    src = """
    set x to 1
    function f() {
        set x to x + 1
        return x
    }
    print f()
    print x
    """
    assert run(src) == "2\n1\n"


def test_arguments_are_evaluated_in_the_callers_scope():
    src = """
    set n to 10
    function g(n, m) { return n + m }
    print g(1, n)
    """
    assert run(src) == "11\n"


def test_functions_defined_inside_functions_are_global_and_permanent():
    src = """
    function outer() {
        function inner() { return 7 }
        return inner()
    }
    print outer()
    print inner()
    """
    assert run(src) == "7\n7\n"
    with pytest.raises(EasyRedefinitionError):
        run(src + "\nprint outer()")


## INPUT
def test_read_binds_numbers_and_strings():
    src = "read a. read b. read c. print a + 1. print b. print c + 1"
    assert run(src, stdin="42\nhello world\n  7 \n") == "43\nhello world\n8\n"


def test_read_keeps_the_raw_line_for_strings():
    assert run("read s\nprint s + \"|\"", stdin="  padded 1 \r\n") == "  padded 1 |\n"


def test_read_without_input_is_fatal():
    with pytest.raises(EasyInputError):
        run("read x", stdin="")


@pytest.mark.parametrize("text, expected", [
    ("12", 12.0), (" -3.5 ", -3.5), (".5", 0.5), ("1e3", 1000.0),
    ("inf", math.inf), ("-Infinity", -math.inf), ("0x10", 16.0), ("-0X1p4", -16.0),
    ("abc", None), ("", None), ("1_000", None), ("3 4", None), ("0xg", None), ("1p4", None),
])
def test_parse_number(text, expected):
    assert parse_number(text) == expected


def test_read_binds_special_values_as_numbers():
    assert math.isnan(parse_number(" nan\n"))
    assert run("read x\nprint x * 2", stdin="0x10\n") == "32\n"
    assert run("read x\nprint x + 1", stdin="inf\n") == "inf\n"


def test_all_runtime_errors_share_a_base_class():
    for source in ("print x", "print 1/0", "if \"s\" then end", "read v"):
        with pytest.raises(EasyRuntimeError):
            run(source)


## TRACING
def test_verbose_tracing_reports_calls_and_results():
    err = io.StringIO()
    rt = Runtime(stdout=io.StringIO(), stderr=err, verbosity=1)
    rt.run("function twice(x) { return x * 2 }\nset y to twice(4)")
    text = re.sub(r'\033\[[0-9;]*m', '', err.getvalue())
    assert "twice(4)" in text
    assert "twice ⇒ 8" in text
