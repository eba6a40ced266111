"""
T-norms and S-norms: the binary operators behind "and", "or", implication and
aggregation.

A rule block holds three of them (conjunction, disjunction, implication) and
every output variable's accumulator holds one for aggregation. All operate on
degrees in [0, 1].
"""

from fuzzyrules import op
from fuzzyrules.factory import SNORMS, TNORMS


class Norm:
    """Base class for binary operators over membership degrees."""

    def compute(self, a: float, b: float) -> float:
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self):
        return self.name


class TNorm(Norm):
    """Fuzzy intersection (and, implication)."""


class SNorm(Norm):
    """Fuzzy union (or, aggregation)."""


# ----------------------------------------------------------------------------
# T-norms
# ----------------------------------------------------------------------------
class Minimum(TNorm):
    def compute(self, a, b):
        return min(a, b)


class AlgebraicProduct(TNorm):
    def compute(self, a, b):
        return a * b


class BoundedDifference(TNorm):
    def compute(self, a, b):
        return max(0.0, a + b - 1.0)


class DrasticProduct(TNorm):
    def compute(self, a, b):
        if op.is_eq(max(a, b), 1.0):
            return min(a, b)
        return 0.0


class EinsteinProduct(TNorm):
    def compute(self, a, b):
        return (a * b) / (2.0 - (a + b - a * b))


class HamacherProduct(TNorm):
    def compute(self, a, b):
        if op.is_eq(a + b, 0.0):
            return 0.0
        return (a * b) / (a + b - a * b)


class NilpotentMinimum(TNorm):
    def compute(self, a, b):
        if op.is_gt(a + b, 1.0):
            return min(a, b)
        return 0.0


# ----------------------------------------------------------------------------
# S-norms
# ----------------------------------------------------------------------------
class Maximum(SNorm):
    def compute(self, a, b):
        return max(a, b)


class AlgebraicSum(SNorm):
    def compute(self, a, b):
        return a + b - (a * b)


class BoundedSum(SNorm):
    def compute(self, a, b):
        return min(1.0, a + b)


class DrasticSum(SNorm):
    def compute(self, a, b):
        if op.is_eq(min(a, b), 0.0):
            return max(a, b)
        return 1.0


class EinsteinSum(SNorm):
    def compute(self, a, b):
        return (a + b) / (1.0 + a * b)


class HamacherSum(SNorm):
    def compute(self, a, b):
        if op.is_eq(a * b, 1.0):
            return 1.0
        return (a + b - 2.0 * a * b) / (1.0 - a * b)


class NilpotentMaximum(SNorm):
    def compute(self, a, b):
        if op.is_lt(a + b, 1.0):
            return max(a, b)
        return 1.0


class NormalizedSum(SNorm):
    def compute(self, a, b):
        return (a + b) / max(1.0, a + b)


class UnboundedSum(SNorm):
    def compute(self, a, b):
        return a + b


for _cls in (Minimum, AlgebraicProduct, BoundedDifference, DrasticProduct,
             EinsteinProduct, HamacherProduct, NilpotentMinimum):
    TNORMS.register(_cls.__name__, _cls)

for _cls in (Maximum, AlgebraicSum, BoundedSum, DrasticSum, EinsteinSum,
             HamacherSum, NilpotentMaximum, NormalizedSum, UnboundedSum):
    SNORMS.register(_cls.__name__, _cls)
