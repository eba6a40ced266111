import logging

import pytest

from fuzzyrules.activation import General
from fuzzyrules.errors import ConfigurationError, InvariantError, RuleSyntaxError
from fuzzyrules.norms import AlgebraicProduct, Maximum, Minimum
from fuzzyrules.rule import Rule, RuleBlock
from fuzzyrules.terms import Activated


def test_product_conjunction_fires_into_accumulator(xyz_engine):
    rule = Rule.create("if x is A and y is B then z is C", xyz_engine)
    degree = rule.activate_with(AlgebraicProduct(), Maximum())
    assert degree == pytest.approx(0.24)
    assert rule.activation_degree == pytest.approx(0.24)

    rule.trigger(Minimum())
    z = xyz_engine.output_variable("z")
    assert rule.is_triggered()
    assert len(z.fuzzy_output) == 1
    activated = z.fuzzy_output.terms[0]
    assert activated.term is z.get_term("C")
    assert activated.degree == pytest.approx(0.24)
    assert activated.implication == Minimum()
    assert str(activated) == "Minimum(0.24,C)"


def test_weight_scales_degree(xyz_engine):
    rule = Rule.create("if x is A then z is C with 0.5", xyz_engine)
    assert rule.weight == 0.5
    assert rule.activate_with(None, None) == pytest.approx(0.3)


def test_comment_is_ignored(xyz_engine):
    rule = Rule.create("if x is A then z is C  # prefer C when x is A", xyz_engine)
    assert rule.is_loaded()
    assert str(rule) == "if x is A then z is C"


def test_str_reconstructs_rule(xyz_engine):
    rule = Rule.create("if (x is A)   and y is very B then z is C and z is D with 0.25", xyz_engine)
    assert str(rule) == "if x is A and y is very B then z is C and z is D with 0.25"


@pytest.mark.parametrize(
    "text, message",
    [
        ("", "keyword <if> not found in rule"),
        ("x is A then z is C", "expected keyword <if>, but found <x>"),
        ("if x is A", "keyword <then> not found in rule"),
        ("if x is A then z is C with", "expected numeric weight after <with>"),
        ("if x is A then z is C with heavy", "expected numeric weight, but found <heavy>"),
        ("if x is A then z is C with 0.5 extra", "unexpected token <extra> after the weight"),
        ("if x is A then x is A", "consequent expected output variable, but found <x>"),
        ("if w is A then z is C", "expected variable or logical operator, but found <w>"),
    ],
)
def test_parse_errors(xyz_engine, text, message):
    rule = Rule(text)
    with pytest.raises(RuleSyntaxError, match=message):
        rule.parse(xyz_engine)
    assert not rule.is_loaded()
    assert not rule.antecedent.is_loaded()
    assert not rule.consequent.is_loaded()


def test_part_errors_report_the_whole_rule(xyz_engine):
    text = "if x is A then z is nowhere"
    with pytest.raises(RuleSyntaxError) as info:
        Rule.create(text, xyz_engine)
    assert info.value.text == text
    assert info.value.token == "nowhere"


def test_load_returns_error_instead_of_raising(xyz_engine, caplog):
    rule = Rule("if x is A then z")
    with caplog.at_level(logging.WARNING, logger="rule"):
        error = rule.load(xyz_engine)
    assert isinstance(error, RuleSyntaxError)
    assert str(error).startswith("[syntax error]")
    assert not rule.is_loaded()
    assert "Rule not loaded" in caplog.text

    rule.text = "if x is A then z is C"
    assert rule.load(xyz_engine) is None
    assert rule.is_loaded()


def test_failed_parse_keeps_previous_weight(xyz_engine):
    rule = Rule("if x is A then z is C with 0.5")
    rule.parse(xyz_engine)
    rule.text = "if x is A then z is C with 0.7 junk"
    assert rule.load(xyz_engine) is not None
    assert rule.weight == 0.5


def test_disabled_rule_is_evaluated_but_not_triggered(xyz_engine):
    rule = Rule.create("if x is A then z is C", xyz_engine)
    rule.enabled = False
    assert rule.activate_with(None, None) == pytest.approx(0.6)
    rule.trigger(Minimum())
    assert not rule.is_triggered()
    assert xyz_engine.output_variable("z").fuzzy_output.is_empty()


def test_deactivate_resets_state(xyz_engine):
    rule = Rule.create("if x is A then z is C", xyz_engine)
    rule.compute_degree(None, None)
    rule.fire(Minimum())
    rule.reset_fired_state()
    assert rule.activation_degree == 0.0
    assert not rule.triggered


def test_unloaded_rule_cannot_be_evaluated():
    rule = Rule("if x is A then z is C")
    with pytest.raises(InvariantError):
        rule.activate_with(Minimum(), Maximum())
    with pytest.raises(InvariantError):
        rule.trigger(Minimum())


def test_copy_is_independent(xyz_engine):
    rule = Rule.create("if x is A and y is B then z is C", xyz_engine)
    clone = rule.copy()
    assert clone.antecedent.expression == rule.antecedent.expression
    assert clone.antecedent.expression is not rule.antecedent.expression
    clone.unload()
    assert rule.is_loaded()
    assert clone.consequent.conclusions == []
    assert rule.consequent.conclusions[0].variable is xyz_engine.output_variable("z")


def test_copy_shares_variables(xyz_engine):
    clone = Rule.create("if x is A then z is C", xyz_engine).copy()
    assert clone.antecedent.expression.variable is xyz_engine.input_variable("x")
    assert clone.consequent.conclusions[0].term is xyz_engine.output_variable("z").get_term("C")


def _block(engine, *texts, **kwargs):
    block = RuleBlock(
        "block", [Rule(t) for t in texts],
        conjunction=Minimum(), disjunction=Maximum(), implication=Minimum(), **kwargs,
    )
    return block


def test_block_load_rules_skips_bad_rules(xyz_engine):
    block = _block(xyz_engine, "if x is A then z is C", "if x is then z is C", "if y is B then z is D")
    errors = block.load_rules(xyz_engine)
    assert len(errors) == 1
    assert errors[0].text == "if x is then z is C"
    assert [r.is_loaded() for r in block.rules] == [True, False, True]


def test_block_activate_requires_strategy(xyz_engine):
    block = _block(xyz_engine, "if x is A then z is C")
    block.load_rules(xyz_engine)
    with pytest.raises(ConfigurationError, match="requires an activation method"):
        block.activate()


def test_disabled_block_is_noop(xyz_engine):
    block = _block(xyz_engine, "if x is A then z is C", activation=General(), enabled=False)
    block.load_rules(xyz_engine)
    block.activate()
    assert xyz_engine.output_variable("z").fuzzy_output.is_empty()


def test_block_activate_general(xyz_engine):
    block = _block(xyz_engine, "if x is A then z is C", "if y is B then z is D", activation=General())
    block.load_rules(xyz_engine)
    block.activate()
    z = xyz_engine.output_variable("z")
    assert z.fuzzy_output.terms == [
        Activated(z.get_term("C"), pytest.approx(0.6), Minimum()),
        Activated(z.get_term("D"), pytest.approx(0.4), Minimum()),
    ]
    assert block.degrees() == pytest.approx([0.6, 0.4])


def test_block_reload_and_copy(xyz_engine):
    block = _block(xyz_engine, "if x is A then z is C", activation=General())
    block.load_rules(xyz_engine)
    clone = block.copy()
    assert clone.rules[0] is not block.rules[0]
    assert clone.activation == block.activation
    assert clone.activation is not block.activation
    block.unload_rules()
    assert clone.rules[0].is_loaded()
    assert block.reload_rules(xyz_engine) == []
    assert block.rules[0].is_loaded()
