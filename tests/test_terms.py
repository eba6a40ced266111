import math

import pytest

from fuzzyrules.errors import ConfigurationError
from fuzzyrules.norms import AlgebraicProduct, Maximum, Minimum
from fuzzyrules.terms import (
    Activated,
    Aggregated,
    Binary,
    Constant,
    Gaussian,
    Linear,
    Ramp,
    Rectangle,
    Trapezoid,
    Triangle,
)
from fuzzyrules.variables import InputVariable


@pytest.fixture
def theta():
    """An input variable with simple, clear membership functions."""
    return InputVariable(
        "theta", -1.0, 1.0,
        [Triangle("ZERO", -0.5, 0.0, 0.5), Triangle("POS", 0.0, 0.5, 1.0)],
    )


def test_triangle_membership_function():
    zero = Triangle("ZERO", -0.5, 0.0, 0.5)
    assert zero.membership(0.0) == pytest.approx(1.0)
    assert zero.membership(-0.25) == pytest.approx(0.5)
    assert zero.membership(-0.5) == pytest.approx(0.0)
    assert zero.membership(0.5) == pytest.approx(0.0)
    assert zero.membership(-1.0) == pytest.approx(0.0)
    assert zero.membership(1.0) == pytest.approx(0.0)


def test_triangle_shoulder():
    left = Triangle("L", 0.0, 0.0, 1.0)
    assert left.membership(0.0) == pytest.approx(1.0)
    assert left.membership(0.25) == pytest.approx(0.75)


def test_trapezoid_membership_function():
    trap = Trapezoid("T", 0.0, 1.0, 2.0, 4.0)
    assert trap.membership(0.5) == pytest.approx(0.5)
    assert trap.membership(1.5) == pytest.approx(1.0)
    assert trap.membership(3.0) == pytest.approx(0.5)
    assert trap.membership(5.0) == pytest.approx(0.0)


def test_invalid_shape_params():
    with pytest.raises(ValueError, match="Invalid triangle params"):
        Triangle("bad", 1.0, 0.0, 2.0)
    with pytest.raises(ValueError, match="Invalid trapezoid params"):
        Trapezoid("bad", 0.0, 2.0, 1.0, 3.0)


@pytest.mark.parametrize(
    "term, x, expected",
    [
        (Rectangle("r", 0.0, 1.0), 0.5, 1.0),
        (Rectangle("r", 0.0, 1.0), 1.5, 0.0),
        (Ramp("up", 0.0, 10.0), 2.5, 0.25),
        (Ramp("up", 0.0, 10.0), 12.0, 1.0),
        (Ramp("down", 10.0, 0.0), 2.5, 0.75),
        (Gaussian("g", 0.0, 1.0), 0.0, 1.0),
        (Gaussian("g", 0.0, 1.0), 1.0, math.exp(-0.5)),
        (Binary("b", 0.5, 1.0), 0.7, 1.0),
        (Binary("b", 0.5, 1.0), 0.3, 0.0),
        (Triangle("h", 0.0, 1.0, 2.0, height=0.5), 1.0, 0.5),
    ],
)
def test_shapes(term, x, expected):
    assert term.membership(x) == pytest.approx(expected)


@pytest.mark.parametrize("term", [Triangle("t", 0, 1, 2), Ramp("r", 0, 1), Gaussian("g", 0, 1)])
def test_nan_input_gives_nan(term):
    assert math.isnan(term.membership(math.nan))


def test_ramp_tsukamoto_inverts_membership():
    ramp = Ramp("up", 0.0, 10.0)
    assert ramp.tsukamoto(0.25, 0.0, 10.0) == pytest.approx(2.5)
    assert ramp.membership(ramp.tsukamoto(0.6, 0.0, 10.0)) == pytest.approx(0.6)


def test_configure_and_parameters():
    term = Triangle("t")
    term.configure("0 0.5 1")
    assert term.parameters() == "0 0.5 1"
    term.configure("0 0.5 1 0.8")
    assert term.height == pytest.approx(0.8)
    assert term.parameters() == "0 0.5 1 0.8"
    term.configure("")
    assert term.parameters() == "0 0.5 1 0.8"


def test_parameters_keep_full_precision():
    term = Triangle("t", 0.0, 0.1234, 1 / 3)
    clone = Triangle("clone")
    clone.configure(term.parameters())
    assert clone.parameters() == term.parameters()
    assert clone.membership(0.1234) == term.membership(0.1234) == 1.0


def test_configure_too_few_parameters():
    with pytest.raises(ConfigurationError, match="term <Trapezoid> requires <4> parameters"):
        Trapezoid("t").configure("0 1 2")


def test_configure_non_numeric():
    with pytest.raises(ValueError, match="conversion error"):
        Ramp("r").configure("0 high")


def test_constant():
    term = Constant("c")
    term.configure("2.5")
    assert term.membership(math.nan) == 2.5
    assert term.parameters() == "2.5"


def test_linear_reads_engine_inputs(xyz_engine):
    term = Linear("lin", [2.0, -1.0, 0.5], xyz_engine)
    # 2*0.6 - 1*0.4 + 0.5
    assert term.membership(math.nan) == pytest.approx(1.3)


def test_linear_coefficient_count(xyz_engine):
    term = Linear("lin", [1.0, 2.0], xyz_engine)
    with pytest.raises(ConfigurationError, match="expects 3 coefficients"):
        term.membership(0.0)
    with pytest.raises(ConfigurationError, match="found 4"):
        Linear("lin", [1.0, 2.0, 3.0, 4.0], xyz_engine).membership(0.0)
    with pytest.raises(ConfigurationError, match="requires a reference to the engine"):
        Linear("lin", [1.0]).membership(0.0)


def test_fuzzify_single_activation(theta):
    result = theta.fuzzify(-0.25)
    assert result == {"ZERO": pytest.approx(0.5)}


def test_fuzzify_multiple_activation(theta):
    result = theta.fuzzify(0.25)
    assert result["ZERO"] == pytest.approx(0.5)
    assert result["POS"] == pytest.approx(0.5)


def test_fuzzify_peak_activation(theta):
    result = theta.fuzzify(0.5)
    assert "ZERO" not in result
    assert result["POS"] == pytest.approx(1.0)


def test_highest_membership(theta):
    assert theta.highest_membership(0.4).name == "POS"
    assert theta.highest_membership(-0.9) is None


def test_get_term_invalid_name(theta):
    with pytest.raises(KeyError):
        theta.get_term("nonexistent")


def test_activated_membership_uses_implication():
    term = Triangle("t", 0.0, 1.0, 2.0)
    assert Activated(term, 0.3, Minimum()).membership(1.0) == pytest.approx(0.3)
    assert Activated(term, 0.3, AlgebraicProduct()).membership(0.5) == pytest.approx(0.15)
    with pytest.raises(ConfigurationError, match="implication operator needed"):
        Activated(term, 0.3).membership(1.0)


def test_activated_is_immutable():
    activated = Activated(Constant("c", 1.0), 0.5, Minimum())
    with pytest.raises(AttributeError):
        activated.degree = 0.7


def test_aggregated_degree_matches_term_identity():
    a = Constant("same", 1.0)
    b = Constant("same", 1.0)
    aggregated = Aggregated("out", 0.0, 1.0, Maximum())
    aggregated.append(Activated(a, 0.4, Minimum()))
    aggregated.append(Activated(b, 0.9, Minimum()))
    aggregated.append(Activated(a, 0.6, Minimum()))
    assert aggregated.activation_degree(a) == pytest.approx(0.6)
    assert aggregated.activation_degree(b) == pytest.approx(0.9)
    assert aggregated.activation_degree(Constant("other")) == 0.0
    assert aggregated.highest_activated_term().degree == pytest.approx(0.9)
    assert str(aggregated) == "Minimum(0.4,same) + Minimum(0.9,same) + Minimum(0.6,same)"

    aggregated.clear()
    assert aggregated.is_empty()
    assert aggregated.highest_activated_term() is None


def test_aggregated_membership():
    low = Triangle("low", 0.0, 0.0, 1.0)
    high = Triangle("high", 0.0, 1.0, 1.0)
    aggregated = Aggregated("out", 0.0, 1.0, Maximum())
    aggregated.append(Activated(low, 0.3, Minimum()))
    aggregated.append(Activated(high, 0.8, Minimum()))
    assert aggregated.membership(0.0) == pytest.approx(0.3)
    assert aggregated.membership(1.0) == pytest.approx(0.8)
    assert aggregated.membership(0.5) == pytest.approx(0.5)
