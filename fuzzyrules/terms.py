"""
Linguistic terms (membership functions) and the output accumulator.

A term maps a crisp value to a degree of membership. Input variables fuzzify
their value through their terms; rules name terms in their propositions. When a
rule fires, each of its conclusions becomes an Activated entry (term, degree,
implication) appended to the output variable's Aggregated accumulator, which
the defuzzifier later reduces to a crisp value.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from fuzzyrules import op
from fuzzyrules.errors import ConfigurationError
from fuzzyrules.factory import TERMS
from fuzzyrules.norms import SNorm, TNorm

terms_log = logging.getLogger("fuzzifier")


class Term:
    """
    Base term.

    Attributes:
        name (str): The name used in rule text.
        height (float): Scales the membership function, usually 1.0.
    """

    required = 0
    is_monotonic = False

    def __init__(self, name: str = "", height: float = 1.0):
        self.name = name
        self.height = height

    def membership(self, x: float) -> float:
        raise NotImplementedError

    def _values(self) -> List[float]:
        return []

    def _set_values(self, values: Sequence[float]) -> None:
        pass

    def parameters(self) -> str:
        """Space separated parameters; height is appended only if not 1.0."""
        values = [op.fmt_exact(v) for v in self._values()]
        if not op.is_eq(self.height, 1.0):
            values.append(op.fmt_exact(self.height))
        return " ".join(values)

    def configure(self, parameters: str) -> None:
        """
        Configures the term from a space separated parameter string.

        A trailing extra value is read as the height. An empty string leaves
        the term unchanged.
        """
        tokens = parameters.split()
        if not tokens:
            return
        if len(tokens) < self.required:
            raise ConfigurationError(
                f"term <{type(self).__name__}> requires <{self.required}> parameters"
            )
        values = [op.to_float(t) for t in tokens]
        self._set_values(values[: self.required])
        if len(values) > self.required:
            self.height = values[self.required]

    def update_reference(self, engine) -> None:
        """Hook for terms that read other variables (see Linear)."""

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, {self.parameters()!r})"


class Triangle(Term):
    """
    Triangular membership function.

    Args:
        a (float): Left foot (zero membership).
        b (float): Peak (membership = height).
        c (float): Right foot (zero membership).
    """

    required = 3

    def __init__(self, name="", a=math.nan, b=math.nan, c=math.nan, height=1.0):
        super().__init__(name, height)
        self._set_values([a, b, c])

    def _values(self):
        return [self.a, self.b, self.c]

    def _set_values(self, values):
        a, b, c = values
        if not any(math.isnan(v) for v in values) and not a <= b <= c:
            raise ValueError(f"Invalid triangle params [{a}, {b}, {c}]")
        self.a, self.b, self.c = a, b, c

    def membership(self, x: float) -> float:
        a, b, c = self.a, self.b, self.c
        if math.isnan(x):
            return math.nan
        if x < a or x > c:
            return 0.0
        if x == b:
            return self.height * 1.0
        # left half rt triangle
        if x < b:
            return self.height * ((x - a) / (b - a) if b - a > 0 else 1.0)
        # right half rt triangle
        return self.height * ((c - x) / (c - b) if c - b > 0 else 1.0)


class Trapezoid(Term):
    """
    Trapezoidal membership function.

    Args:
        a, d (float): The bases (zero membership).
        b, c (float): The top (membership = height).
    """

    required = 4

    def __init__(self, name="", a=math.nan, b=math.nan, c=math.nan, d=math.nan, height=1.0):
        super().__init__(name, height)
        self._set_values([a, b, c, d])

    def _values(self):
        return [self.a, self.b, self.c, self.d]

    def _set_values(self, values):
        a, b, c, d = values
        if not any(math.isnan(v) for v in values) and not a <= b <= c <= d:
            raise ValueError(f"Invalid trapezoid params [{a}, {b}, {c}, {d}]")
        self.a, self.b, self.c, self.d = a, b, c, d

    def membership(self, x: float) -> float:
        a, b, c, d = self.a, self.b, self.c, self.d
        if math.isnan(x):
            return math.nan
        if x < a or x > d:
            return 0.0
        if b <= x <= c:
            return self.height * 1.0
        if x < b:
            return self.height * ((x - a) / (b - a) if b - a > 0 else 1.0)
        return self.height * ((d - x) / (d - c) if d - c > 0 else 1.0)


class Rectangle(Term):
    required = 2

    def __init__(self, name="", start=math.nan, end=math.nan, height=1.0):
        super().__init__(name, height)
        self.start, self.end = start, end

    def _values(self):
        return [self.start, self.end]

    def _set_values(self, values):
        self.start, self.end = values

    def membership(self, x):
        if math.isnan(x):
            return math.nan
        if op.is_ge(x, self.start) and op.is_le(x, self.end):
            return self.height * 1.0
        return 0.0


class Ramp(Term):
    """
    Monotonic edge rising from start to end (or falling when end < start).

    Being monotonic, a Ramp can be inverted, which is what Tsukamoto
    defuzzification relies on.
    """

    required = 2
    is_monotonic = True

    def __init__(self, name="", start=math.nan, end=math.nan, height=1.0):
        super().__init__(name, height)
        self.start, self.end = start, end

    def _values(self):
        return [self.start, self.end]

    def _set_values(self, values):
        self.start, self.end = values

    def membership(self, x):
        if math.isnan(x):
            return math.nan
        if op.is_eq(self.start, self.end):
            return 0.0
        if self.start < self.end:
            if op.is_le(x, self.start):
                return 0.0
            if op.is_ge(x, self.end):
                return self.height * 1.0
            return self.height * (x - self.start) / (self.end - self.start)
        if op.is_ge(x, self.start):
            return 0.0
        if op.is_le(x, self.end):
            return self.height * 1.0
        return self.height * (self.start - x) / (self.start - self.end)

    def tsukamoto(self, degree: float, minimum: float, maximum: float) -> float:
        """Crisp value at which this ramp reaches the given degree."""
        return op.scale(degree / self.height, 0.0, 1.0, self.start, self.end)


class Gaussian(Term):
    required = 2

    def __init__(self, name="", mean=math.nan, sd=math.nan, height=1.0):
        super().__init__(name, height)
        self.mean, self.sd = mean, sd

    def _values(self):
        return [self.mean, self.sd]

    def _set_values(self, values):
        self.mean, self.sd = values

    def membership(self, x):
        if math.isnan(x):
            return math.nan
        return self.height * math.exp(-((x - self.mean) ** 2) / (2.0 * self.sd * self.sd))


class Binary(Term):
    """Step edge: full membership from start towards direction, zero elsewhere."""

    required = 2

    def __init__(self, name="", start=math.nan, direction=math.nan, height=1.0):
        super().__init__(name, height)
        self.start, self.direction = start, direction

    def _values(self):
        return [self.start, self.direction]

    def _set_values(self, values):
        self.start, self.direction = values

    def membership(self, x):
        if math.isnan(x):
            return math.nan
        if self.direction > self.start and op.is_ge(x, self.start):
            return self.height * 1.0
        if self.direction < self.start and op.is_le(x, self.start):
            return self.height * 1.0
        return self.height * 0.0


class Constant(Term):
    """Takagi-Sugeno zero-order consequent: membership is the constant itself."""

    required = 1

    def __init__(self, name="", value=math.nan):
        super().__init__(name)
        self.value = value

    def _values(self):
        return [self.value]

    def _set_values(self, values):
        (self.value,) = values

    def configure(self, parameters):
        # No height for constants.
        tokens = parameters.split()
        if tokens:
            self.value = op.to_float(tokens[0])

    def membership(self, x):
        return self.value


class Linear(Term):
    """
    Takagi-Sugeno first-order consequent:

        membership = c1*v1 + c2*v2 + ... + cn*vn + k

    where v1..vn are the current values of the engine's input variables, in
    declaration order. Exactly one coefficient per input variable plus the
    constant k is required; any other count raises ConfigurationError when the
    term is evaluated.
    """

    def __init__(self, name="", coefficients: Optional[Sequence[float]] = None, engine=None):
        super().__init__(name)
        self.coefficients = list(coefficients or [])
        self.engine = engine

    def _values(self):
        return list(self.coefficients)

    def configure(self, parameters):
        self.coefficients = [op.to_float(t) for t in parameters.split()]

    def update_reference(self, engine):
        self.engine = engine

    def membership(self, x):
        if self.engine is None:
            raise ConfigurationError(f"term <{self.name}> requires a reference to the engine")
        inputs = self.engine.input_variables
        if len(self.coefficients) != len(inputs) + 1:
            raise ConfigurationError(
                f"term <{self.name}> expects {len(inputs) + 1} coefficients "
                f"(one per input variable plus a constant), found {len(self.coefficients)}"
            )
        result = self.coefficients[-1]
        for coefficient, variable in zip(self.coefficients, inputs):
            result += coefficient * variable.value
        return result


@dataclass(frozen=True)
class Activated:
    """
    A single firing of a rule conclusion: the term it names, the degree it
    fired with, and the implication operator that shapes it.
    """

    term: Term
    degree: float
    implication: Optional[TNorm] = None

    def membership(self, x: float) -> float:
        if self.implication is None:
            raise ConfigurationError(
                f"implication operator needed to activate term <{self.term.name}>"
            )
        return self.implication.compute(self.term.membership(x), self.degree)

    def __str__(self):
        implication = self.implication.name if self.implication is not None else "none"
        return f"{implication}({op.fmt(self.degree)},{self.term.name})"


class Aggregated:
    """
    Output accumulator: the ordered Activated entries produced by the rules
    during one evaluation cycle.

    It is reset once per cycle by the engine (OutputVariable.clear_fuzzy_output()) and only
    appended to while the rule blocks are activated.

    Attributes:
        name (str): Name of the owning output variable.
        minimum, maximum (float): Range of the owning output variable.
        aggregation (Optional[SNorm]): Operator folding entries of the same term.
        terms (List[Activated]): The entries, in firing order.
    """

    def __init__(self, name: str = "", minimum: float = math.nan, maximum: float = math.nan,
                 aggregation: Optional[SNorm] = None):
        self.name = name
        self.minimum = minimum
        self.maximum = maximum
        self.aggregation = aggregation
        self.terms: List[Activated] = []

    def append(self, activated: Activated) -> None:
        self.terms.append(activated)

    def clear(self) -> None:
        self.terms.clear()

    def is_empty(self) -> bool:
        return not self.terms

    def activation_degree(self, term: Term) -> float:
        """Aggregated degree of every entry whose term is `term`."""
        result = 0.0
        for activated in self.terms:
            if activated.term is term:
                if self.aggregation is not None:
                    result = self.aggregation.compute(result, activated.degree)
                else:
                    result += activated.degree
        return result

    def highest_activated_term(self) -> Optional[Activated]:
        highest = None
        for activated in self.terms:
            if op.is_gt(activated.degree, 0.0) and (
                highest is None or activated.degree > highest.degree
            ):
                highest = activated
        return highest

    def membership(self, x: float) -> float:
        if not self.terms:
            return 0.0
        if self.aggregation is None:
            raise ConfigurationError(
                f"aggregation operator needed to aggregate variable <{self.name}>"
            )
        result = 0.0
        for activated in self.terms:
            result = self.aggregation.compute(result, activated.membership(x))
        return result

    def __len__(self):
        return len(self.terms)

    def __str__(self):
        return " + ".join(str(t) for t in self.terms)


for _cls in (Triangle, Trapezoid, Rectangle, Ramp, Gaussian, Binary, Constant, Linear):
    TERMS.register(_cls.__name__, _cls)
