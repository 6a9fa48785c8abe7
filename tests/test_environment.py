"""
Tests for Selve scopes and the global environment.
"""

import io

import pytest
from selve.environment import Environment, create_global_environment
from selve.errors import ScopeError
from selve.values import FALSE, NULL, TRUE, NativeFunctionValue, NumberValue


class TestGlobalEnvironment:
    """Test the builtins every program sees."""

    def test_builtin_constants(self):
        """true, false and null are predeclared."""
        env = create_global_environment()
        assert env.lookup("true") == TRUE
        assert env.lookup("false") == FALSE
        assert env.lookup("null") == NULL

    def test_builtins_are_constant(self):
        """Builtins cannot be reassigned."""
        env = create_global_environment()
        with pytest.raises(ScopeError, match="Cannot reassign to constant true"):
            env.assign("true", FALSE)

    def test_unknown_name(self):
        """Looking up an undeclared name fails with the scope message."""
        env = create_global_environment()
        with pytest.raises(ScopeError) as excinfo:
            env.lookup("foo")
        assert str(excinfo.value) == "Cannot resolve foo since it doesnt exist"

    def test_print_writes_each_argument_on_its_own_line(self):
        """print renders every argument with display()."""
        out = io.StringIO()
        env = create_global_environment(out=out)
        print_fn = env.lookup("print")
        assert isinstance(print_fn, NativeFunctionValue)

        result = print_fn.function([NumberValue(1), TRUE, NULL], env)

        assert result == NULL
        assert out.getvalue() == "1\ntrue\nnull\n"

    def test_time_returns_milliseconds(self):
        """time() is a positive number of milliseconds."""
        env = create_global_environment()
        value = env.lookup("time").function([], env)
        assert isinstance(value, NumberValue)
        assert value.value > 1_600_000_000_000


class TestScopes:
    """Test declare, assign and resolve across nested scopes."""

    def test_declare_and_lookup(self):
        env = Environment()
        env.declare("x", NumberValue(1))
        assert env.lookup("x") == NumberValue(1)

    def test_redeclare_in_same_scope(self):
        """The same name twice in one scope is an error."""
        env = Environment()
        env.declare("x", NumberValue(1))
        with pytest.raises(ScopeError, match="Cannot redeclare variable x"):
            env.declare("x", NumberValue(2))

    def test_shadowing_in_child_scope(self):
        """A child scope can declare a name its parent already has."""
        parent = Environment()
        parent.declare("x", NumberValue(1))
        child = Environment(parent=parent)
        child.declare("x", NumberValue(2))

        assert child.lookup("x") == NumberValue(2)
        assert parent.lookup("x") == NumberValue(1)

    def test_assign_updates_owning_scope(self):
        """Assignment from a child rebinds the parent's variable."""
        parent = Environment()
        parent.declare("x", NumberValue(1))
        child = Environment(parent=parent)

        child.assign("x", NumberValue(5))

        assert parent.lookup("x") == NumberValue(5)
        assert "x" not in child.variables

    def test_assign_constant(self):
        env = Environment()
        env.declare("x", NumberValue(1), constant=True)
        with pytest.raises(ScopeError, match="Cannot reassign to constant x"):
            env.assign("x", NumberValue(2))

    def test_assign_undeclared(self):
        env = Environment()
        with pytest.raises(ScopeError, match="Cannot resolve y since it doesnt exist"):
            env.assign("y", NumberValue(2))

    def test_resolve_returns_owner(self):
        parent = Environment()
        parent.declare("x", NumberValue(1), constant=True)
        child = Environment(parent=parent)

        assert child.resolve("x") is parent
        assert child.is_constant("x")

    def test_names_innermost_first(self):
        parent = Environment()
        parent.declare("a", NULL)
        parent.declare("b", NULL)
        child = Environment(parent=parent)
        child.declare("b", NULL)
        child.declare("c", NULL)

        assert child.names() == ["b", "c", "a"]
