import math

import pytest

from fuzzyrules.antecedent import Antecedent
from fuzzyrules.errors import ConfigurationError, InvariantError, RuleSyntaxError
from fuzzyrules.expression import Operator, Proposition
from fuzzyrules.hedges import Not, Very, fold_hedges
from fuzzyrules.norms import AlgebraicProduct, Maximum, Minimum
from fuzzyrules.terms import Activated


def _loaded(engine, text):
    antecedent = Antecedent(text)
    antecedent.load(engine)
    return antecedent


def _degree(engine, text, conjunction=None, disjunction=None):
    return _loaded(engine, text).activation_degree(conjunction, disjunction)


def test_single_proposition_tree(xyz_engine):
    antecedent = _loaded(xyz_engine, "x is A")
    assert isinstance(antecedent.expression, Proposition)
    assert antecedent.expression.variable is xyz_engine.variable("x")
    assert antecedent.expression.term is xyz_engine.variable("x").get_term("A")
    assert antecedent.expression.hedges == []


def test_operator_children_pop_right_then_left(xyz_engine):
    root = _loaded(xyz_engine, "x is A and y is B").expression
    assert isinstance(root, Operator)
    assert root.name == "and"
    assert root.left.variable.name == "x"
    assert root.right.variable.name == "y"


def test_hedges_are_recorded_in_written_order(xyz_engine):
    proposition = _loaded(xyz_engine, "x is not very A").expression
    assert proposition.hedges == [Not(), Very()]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("x is A", 0.6),
        ("x is very A", 0.36),
        ("x is not A", 0.4),
        # not(very(0.6))
        ("x is not very A", 1.0 - 0.36),
        # very(not(0.6))
        ("x is very not A", 0.4 * 0.4),
        ("x is somewhat A", math.sqrt(0.6)),
    ],
)
def test_hedge_chain_applies_innermost_first(xyz_engine, text, expected):
    assert _degree(xyz_engine, text) == pytest.approx(expected)


def test_fold_matches_nested_application():
    hedges = [Not(), Very(), Not()]
    assert fold_hedges(hedges, 0.3) == pytest.approx(1.0 - (1.0 - 0.3) ** 2)


def test_conjunction_and_disjunction(xyz_engine):
    assert _degree(xyz_engine, "x is A and y is B", Minimum(), Maximum()) == pytest.approx(0.4)
    assert _degree(xyz_engine, "x is A or y is B", Minimum(), Maximum()) == pytest.approx(0.6)
    assert _degree(xyz_engine, "x is A and y is B", AlgebraicProduct(), None) == pytest.approx(0.24)


def test_parentheses_change_grouping(xyz_engine):
    # x is low = 0.4; (A or B) and low = 0.4, A or (B and low) = 0.6
    grouped = "(x is A or y is B) and x is low"
    nested = "x is A or (y is B and x is low)"
    assert _degree(xyz_engine, grouped, Minimum(), Maximum()) == pytest.approx(0.4)
    assert _degree(xyz_engine, nested, Minimum(), Maximum()) == pytest.approx(0.6)


def test_disabled_variable_is_zero(xyz_engine):
    xyz_engine.variable("x").enabled = False
    assert _degree(xyz_engine, "x is A") == 0.0
    assert _degree(xyz_engine, "x is not A") == 0.0
    assert _degree(xyz_engine, "x is any") == 0.0
    assert _degree(xyz_engine, "x is A or y is B", None, Maximum()) == pytest.approx(0.4)


def test_any_ignores_value_and_term(xyz_engine):
    xyz_engine.variable("x").value = math.nan
    assert _degree(xyz_engine, "x is any") == 1.0
    assert _degree(xyz_engine, "x is not any") == pytest.approx(0.0)


def test_any_terminates_the_proposition(xyz_engine):
    root = _loaded(xyz_engine, "x is any and y is B").expression
    assert root.left.term is None
    with pytest.raises(RuleSyntaxError, match="expected variable or logical operator, but found <A>"):
        _loaded(xyz_engine, "x is any A")


def test_nan_value_propagates(xyz_engine):
    xyz_engine.variable("x").value = math.nan
    assert math.isnan(_degree(xyz_engine, "x is very A"))


def test_output_variable_reads_back_accumulator(xyz_engine):
    z = xyz_engine.variable("z")
    c = z.get_term("C")
    z.fuzzy_output.append(Activated(c, 0.3, Minimum()))
    z.fuzzy_output.append(Activated(c, 0.5, Minimum()))
    z.fuzzy_output.append(Activated(z.get_term("D"), 0.9, Minimum()))
    assert _degree(xyz_engine, "z is C") == pytest.approx(0.5)
    assert _degree(xyz_engine, "z is very C") == pytest.approx(0.25)

    z.fuzzy_output.aggregation = None
    assert _degree(xyz_engine, "z is C") == pytest.approx(0.8)


def test_missing_conjunction_names_rule(xyz_engine):
    antecedent = _loaded(xyz_engine, "x is A and y is B")
    with pytest.raises(ConfigurationError, match=r"\[conjunction error\]") as info:
        antecedent.activation_degree(None, Maximum())
    assert "x is A and y is B" in str(info.value)


def test_missing_disjunction_names_rule(xyz_engine):
    antecedent = _loaded(xyz_engine, "x is A or y is B")
    with pytest.raises(ConfigurationError, match=r"\[disjunction error\]") as info:
        antecedent.activation_degree(Minimum(), None)
    assert "x is A or y is B" in str(info.value)


def test_missing_connective_reports_every_leftover(xyz_engine):
    antecedent = Antecedent("x is A y is B")
    with pytest.raises(RuleSyntaxError, match="unable to parse the following expressions") as info:
        antecedent.load(xyz_engine)
    assert info.value.leftovers == ["x is A", "y is B"]
    assert not antecedent.is_loaded()


@pytest.mark.parametrize(
    "text, message",
    [
        ("", "antecedent is empty"),
        ("w is A", "expected variable or logical operator, but found <w>"),
        ("x A", "expected keyword <is>, but found <A>"),
        ("x is Q", "expected hedge or term, but found <Q>"),
        ("x is B", "expected hedge or term, but found <B>"),
        ("x is", "expected hedge or term after <is>"),
        ("x is very", "expected hedge or term after <very>"),
        ("x", "expected keyword <is> after <x>"),
        ("x is A and", "logical operator <and> expects at least two operands, but found <1>"),
        ("x is A or )", "no matching"),
    ],
)
def test_syntax_errors(xyz_engine, text, message):
    antecedent = Antecedent(text)
    with pytest.raises(RuleSyntaxError, match=message.replace("(", r"\(").replace(")", r"\)")):
        antecedent.load(xyz_engine)
    assert not antecedent.is_loaded()


@pytest.mark.parametrize(
    "text, position",
    [
        ("x is A and y is Q", 6),
        ("(x is A) or y is Q", 8),
        ("x is A and (y is B or y is Q)", 11),
    ],
)
def test_error_position_counts_source_tokens(xyz_engine, text, position):
    with pytest.raises(RuleSyntaxError) as info:
        Antecedent(text).load(xyz_engine)
    assert info.value.token == "Q"
    assert info.value.position == position


def test_failed_reload_unloads(xyz_engine):
    antecedent = _loaded(xyz_engine, "x is A")
    with pytest.raises(RuleSyntaxError):
        antecedent.load(xyz_engine, "x is nothing")
    assert not antecedent.is_loaded()


def test_unloaded_evaluation_is_invariant_error():
    with pytest.raises(InvariantError):
        Antecedent("x is A").activation_degree(Minimum(), Maximum())


@pytest.mark.parametrize(
    "text",
    [
        "x is A and y is B",
        "x is A or (y is B and x is very low)",
        "(x is A or y is B) and x is not low",
        "x is any or y is somewhat B",
    ],
)
def test_infix_round_trip(xyz_engine, text):
    original = _loaded(xyz_engine, text)
    reparsed = _loaded(xyz_engine, original.to_infix())
    assert reparsed.expression == original.expression


def test_renderings(xyz_engine):
    antecedent = _loaded(xyz_engine, "x is A or (y is B and x is very low)")
    assert antecedent.to_infix() == "x is A or (y is B and x is very low)"
    assert antecedent.to_prefix() == "or x is A and y is B x is very low"
    assert antecedent.to_postfix() == "x is A y is B x is very low and or"
    assert str(antecedent) == antecedent.to_infix()


def test_copy_owns_a_fresh_tree(xyz_engine):
    antecedent = _loaded(xyz_engine, "x is A and y is very B")
    clone = antecedent.copy()
    assert clone.expression == antecedent.expression
    assert clone.expression is not antecedent.expression
    assert clone.expression.right is not antecedent.expression.right
    clone.expression.right.hedges.clear()
    assert antecedent.expression.right.hedges == [Very()]
