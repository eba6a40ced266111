# tests/conftest.py
import pytest

from fuzzyrules.activation import General, Last
from fuzzyrules.defuzzifier import WeightedAverage
from fuzzyrules.engine import Engine
from fuzzyrules.norms import AlgebraicProduct, Maximum, Minimum
from fuzzyrules.rule import Rule, RuleBlock
from fuzzyrules.terms import Constant, Triangle
from fuzzyrules.variables import InputVariable, OutputVariable


@pytest.fixture
def xyz_engine():
    """
    Two inputs and one output, no rule blocks.

    x = 0.6 gives A = 0.6, y = 0.4 gives B = 0.4 (rising edges of [0, 1, 2]).
    """
    x = InputVariable("x", 0.0, 1.0, [Triangle("A", 0.0, 1.0, 2.0), Triangle("low", -1.0, 0.0, 1.0)])
    y = InputVariable("y", 0.0, 1.0, [Triangle("B", 0.0, 1.0, 2.0)])
    z = OutputVariable(
        "z", 0.0, 1.0, [Constant("C", 0.8), Constant("D", 0.2)],
        aggregation=Maximum(), defuzzifier=WeightedAverage(),
    )
    x.value = 0.6
    y.value = 0.4
    return Engine("xyz", [x, y], [z])


@pytest.fixture
def graded_engine():
    """
    One input whose Constant terms r1, r2, r3 always have degrees 0.2, 0.9, 0.5,
    and three rules R1..R3 reading them, all concluding on z.
    """
    x = InputVariable("x", 0.0, 1.0, [Constant("r1", 0.2), Constant("r2", 0.9), Constant("r3", 0.5)])
    x.value = 0.0
    z = OutputVariable(
        "z", 0.0, 10.0, [Constant("C", 10.0)],
        aggregation=Maximum(), defuzzifier=WeightedAverage(),
    )
    block = RuleBlock(
        "graded",
        [Rule("if x is r1 then z is C"), Rule("if x is r2 then z is C"), Rule("if x is r3 then z is C")],
        conjunction=Minimum(),
        disjunction=Maximum(),
        implication=Minimum(),
        activation=Last(1, 0.0),
    )
    engine = Engine("graded", [x], [z], [block])
    assert engine.load_rules() == []
    return engine


@pytest.fixture
def feedback_engine():
    """z is concluded by the first rule and read back by the second one."""
    x = InputVariable("x", 0.0, 1.0, [Constant("high", 0.7)])
    x.value = 0.0
    z = OutputVariable("z", 0.0, 1.0, [Constant("C", 1.0)], aggregation=Maximum(),
                       defuzzifier=WeightedAverage())
    w = OutputVariable("w", 0.0, 1.0, [Constant("D", 1.0)], aggregation=Maximum(),
                       defuzzifier=WeightedAverage())
    block = RuleBlock(
        "feedback",
        [Rule("if x is high then z is C"), Rule("if z is C then w is D")],
        conjunction=AlgebraicProduct(),
        disjunction=Maximum(),
        implication=Minimum(),
        activation=General(),
    )
    engine = Engine("feedback", [x], [z, w], [block])
    assert engine.load_rules() == []
    return engine
