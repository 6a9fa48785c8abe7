"""
Tests for the Selve interpreter.

These tests run source text end to end through the lexer, parser and
interpreter, and check the resulting values, printed output and errors.
"""

import io

import pytest
from selve.ast_nodes import Comment, Identifier, NumericLiteral, Program, UnaryExpr
from selve.environment import create_global_environment
from selve.errors import EvalError, ParseError, ScopeError, SelveError
from selve.interpreter import Interpreter, evaluate, run
from selve.values import (
    NULL,
    TRUE,
    FunctionValue,
    NumberValue,
    ObjectValue,
    display,
)


def run_with_output(source, **kwargs):
    out = io.StringIO()
    env = create_global_environment(out=out)
    result = run(source, env, **kwargs)
    return result, out.getvalue()


class TestArithmetic:
    """Test integer arithmetic."""

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("1 + 2", 3),
            ("10 - 4 - 3", 3),
            ("2 + 3 * 4", 14),
            ("(2 + 3) * 4", 20),
            ("50 / 2", 25),
            ("7 / 2", 3),
            ("-7 / 2", -3),
            ("7 / -2", -3),
            ("7 % 3", 1),
            ("-7 % 3", -1),
            ("7 % -3", 1),
            ("-(2 + 3)", -5),
            ("123456789 * 987654321", 121932631112635269),
        ],
    )
    def test_integer_results(self, source, expected):
        assert run(source) == NumberValue(expected)

    def test_division_by_zero(self):
        with pytest.raises(EvalError, match="Division by zero"):
            run("1 / 0")

    def test_modulo_by_zero(self):
        with pytest.raises(EvalError, match="Division by zero"):
            run("1 % 0")

    def test_non_numeric_operands(self):
        """Arithmetic on booleans or objects is an error."""
        with pytest.raises(EvalError, match="Unsupported operand types for \\+: boolean and number"):
            run("true + 1")
        with pytest.raises(EvalError, match="Unsupported operand types"):
            run("let o = {}; o * 2")

    def test_unary_minus_on_object(self):
        with pytest.raises(EvalError, match="unary -"):
            run("let o = {}; -o")


class TestBindings:
    """Test let, const and reassignment."""

    def test_program_value_is_last_statement(self):
        assert run("let x = 5; x + 1") == NumberValue(6)

    def test_empty_program_is_null(self):
        assert run("") == NULL

    def test_comment_does_not_change_result(self):
        """A trailing comment leaves the last value alone."""
        assert run("let x = 5\nx // five") == NumberValue(5)

    def test_let_without_value_is_null(self):
        assert run("let x; x") == NULL

    def test_reassignment(self):
        assert run("let x = 1; x = x + 41; x") == NumberValue(42)

    def test_assignment_returns_value(self):
        assert run("let a = 0; let b = 0; a = b = 7; a + b") == NumberValue(14)

    def test_reassign_constant(self):
        with pytest.raises(ScopeError, match="Cannot reassign to constant x"):
            run("const x = 1; x = 2;")

    def test_redeclare(self):
        with pytest.raises(ScopeError, match="Cannot redeclare variable x"):
            run("let x = 1; let x = 2;")

    def test_undeclared_assignment(self):
        with pytest.raises(ScopeError, match="Cannot resolve y"):
            run("y = 2")

    def test_invalid_assignment_target(self):
        with pytest.raises(EvalError, match="Invalid assignment target"):
            run("1 = 2")

    def test_builtin_values(self):
        assert run("true") == TRUE
        assert run("null") == NULL


class TestObjects:
    """Test object literals and member access."""

    def test_object_literal(self):
        value = run("let foo = 1; const bar = { x: 100, y: 32, foo, baz: { z: true } }; bar")
        assert isinstance(value, ObjectValue)
        assert display(value) == "{ x: 100, y: 32, foo: 1, baz: { z: true } }"

    def test_shorthand_requires_declared_name(self):
        with pytest.raises(ScopeError, match="Cannot resolve missing"):
            run("let o = { missing };")

    def test_field_access(self):
        assert run("let p = { x: 3, y: 4 }; p.x * p.y") == NumberValue(12)

    def test_nested_field_access(self):
        assert run("let o = { a: { b: { c: 9 } } }; o.a.b.c") == NumberValue(9)

    def test_computed_access_uses_display_text(self):
        """o[1] reads the property named "1"; identifiers evaluate first."""
        program = "let o = { x: 5 }; let k = 1; o[k]"
        with pytest.raises(EvalError, match="Object has no property '1'"):
            run(program)

    def test_missing_property(self):
        with pytest.raises(EvalError, match="Object has no property 'z'"):
            run("let o = { x: 1 }; o.z")

    def test_property_of_non_object(self):
        with pytest.raises(EvalError, match="Cannot read property 'x' of number"):
            run("let n = 1; n.x")

    def test_member_assignment(self):
        """Existing properties can be updated in place."""
        result, _ = run_with_output("let p = { x: 1 }; p.x = 10; p.x")
        assert result == NumberValue(10)

    def test_member_assignment_is_shared(self):
        """Objects are references: aliases see the update."""
        assert run("let a = { x: 1 }; let b = a; b.x = 2; a.x") == NumberValue(2)

    def test_member_assignment_unknown_property(self):
        with pytest.raises(EvalError, match="Cannot assign to unknown property 'y'"):
            run("let p = { x: 1 }; p.y = 2")

    def test_member_assignment_on_non_object(self):
        with pytest.raises(EvalError, match="Cannot set property 'x' of null"):
            run("let p; p.x = 2")

    def test_const_object_properties_can_change(self):
        """const prevents rebinding, not property updates."""
        assert run("const p = { x: 1 }; p.x = 3; p.x") == NumberValue(3)


class TestFunctions:
    """Test declarations, calls and closures."""

    def test_call_returns_last_statement(self):
        source = """
            fn add(x, y) {
                let result = x + y;
                result
            }
            add(2, 3)
        """
        assert run(source) == NumberValue(5)

    def test_declaration_returns_function(self):
        value = run("fn f() { 1 }")
        assert isinstance(value, FunctionValue)
        assert display(value) == "<fn f>"

    def test_empty_body_returns_null(self):
        assert run("fn noop() {}\nnoop()") == NULL

    def test_print_inside_function(self):
        source = """
            fn add(x, y) {
                let result = x + y;
                print(result);
                result
            }
            add(40, 2)
        """
        result, output = run_with_output(source)
        assert result == NumberValue(42)
        assert output == "42\n"

    def test_nested_print(self):
        """print(print(5)) prints 5 and then null."""
        _, output = run_with_output("print(print(5));")
        assert output == "5\nnull\n"

    def test_print_program_from_comments_example(self):
        source = """
            // this is a comment!
            let foo = 50 / 2;

            // this does stuff
            print(40 * 2 + foo); // so does this!
        """
        _, output = run_with_output(source)
        assert output == "105\n"

    def test_closure_captures_scope(self):
        source = """
            fn make_counter() {
                let count = 0;
                fn next() {
                    count = count + 1;
                    count
                }
                next
            }
            const counter = make_counter();
            counter();
            counter();
            counter()
        """
        assert run(source) == NumberValue(3)

    def test_recursion(self):
        """Functions see their own name; recursion stops via the call limit."""
        source = """
            fn forever(n) {
                forever(n + 1)
            }
            forever(0)
        """
        with pytest.raises(EvalError, match="Maximum call depth exceeded"):
            run(source, max_call_depth=20)

    def test_functions_see_later_top_level_names(self):
        source = """
            fn show() { limit * 2 }
            let limit = 21;
            show()
        """
        assert run(source) == NumberValue(42)

    def test_parameters_are_local(self):
        source = """
            let x = 1;
            fn f(x) { x = x + 100; x }
            f(5) + x
        """
        assert run(source) == NumberValue(106)

    def test_higher_order_function(self):
        source = """
            fn twice(f, x) { f(f(x)) }
            fn inc(n) { n + 1 }
            twice(inc, 5)
        """
        assert run(source) == NumberValue(7)

    def test_function_in_object(self):
        source = """
            fn area(w, h) { w * h }
            let shape = { area, w: 3, h: 4 };
            shape.area(shape.w, shape.h)
        """
        assert run(source) == NumberValue(12)

    def test_chained_call(self):
        source = """
            fn outer() {
                fn inner(x) { x * 10 }
                inner
            }
            outer()(4)
        """
        assert run(source) == NumberValue(40)

    def test_arity_mismatch(self):
        with pytest.raises(EvalError, match="Function add expects 2 arguments but got 1"):
            run("fn add(a, b) { a + b }\nadd(1)")

    def test_functions_are_constant(self):
        with pytest.raises(ScopeError, match="Cannot reassign to constant f"):
            run("fn f() { 1 }\nf = 2")

    def test_call_non_function(self):
        with pytest.raises(EvalError, match="Value is not a function: 5"):
            run("let x = 5; x()")

    def test_arguments_evaluated_before_callee(self):
        """Argument side effects happen even if the callee is invalid."""
        out = io.StringIO()
        env = create_global_environment(out=out)
        with pytest.raises(EvalError):
            run("let x = 1; x(print(7))", env)
        assert out.getvalue() == "7\n"

    def test_time_is_callable(self):
        assert isinstance(run("time()"), NumberValue)


class TestInterpreterApi:
    """Test the Python-level entry points."""

    def test_evaluate_single_node(self):
        env = create_global_environment()
        assert evaluate(NumericLiteral("7"), env) == NumberValue(7)

    def test_evaluate_program_skips_comments(self):
        env = create_global_environment()
        program = Program(body=(NumericLiteral("1"), Comment("done")))
        assert evaluate(program, env) == NumberValue(1)

    def test_environment_persists_between_runs(self):
        env = create_global_environment()
        run("let x = 2;", env)
        assert run("x * 21", env) == NumberValue(42)

    def test_failed_run_keeps_earlier_declarations(self):
        env = create_global_environment()
        with pytest.raises(SelveError):
            run("let a = 1; a / 0", env)
        assert env.lookup("a") == NumberValue(1)

    def test_depth_resets_after_error(self):
        """A failed deep call does not leak depth into the next execution."""
        interpreter = Interpreter(max_call_depth=5)
        env = create_global_environment()
        from selve.parser import parse

        with pytest.raises(EvalError):
            interpreter.execute(parse("fn f(n) { f(n) }\nf(1)"), env)
        assert interpreter.execute(parse("fn g() { 3 }\ng()"), env) == NumberValue(3)

    def test_unknown_identifier(self):
        env = create_global_environment()
        with pytest.raises(ScopeError):
            evaluate(Identifier("nope"), env)

    def test_deeply_nested_source_is_a_parse_error(self):
        with pytest.raises(ParseError, match="Expression nested too deeply"):
            run("-" * 3000 + "1")

    def test_evaluate_deep_node(self):
        """evaluate() reports a too-deep tree like execute() does."""
        expr = NumericLiteral("1")
        for _ in range(5000):
            expr = UnaryExpr("-", expr)
        with pytest.raises(EvalError, match="Maximum call depth exceeded"):
            evaluate(expr, create_global_environment())
