"""
Antecedent of a rule: parsing into an expression tree and computing its
activation degree.

Grammar (after the leading "if" has been stripped):

    variable is [hedge]* term [(and|or) variable is [hedge]* term]*

where "variable is [hedge]* any" ends a proposition without a term and
parentheses group sub-expressions.

Parsing happens in two steps. postfix.to_postfix_positions() rewrites the text to
postfix order; then a single left-to-right scan over the postfix tokens, driven
by the set of token classes currently acceptable, pushes propositions onto a
stack and reduces the top two entries whenever a connective is read.

    1) after a variable comes "is"
    2) after "is" comes a hedge or a term
    3) after a hedge comes a hedge or a term ("any" behaves like a term)
    4) after a term comes a variable or a connective
"""

import enum
import logging
import math
from typing import List, Optional

from fuzzyrules.errors import ConfigurationError, InvariantError, RuleSyntaxError
from fuzzyrules.expression import IS, Expression, Operator, Proposition
from fuzzyrules.factory import HEDGES
from fuzzyrules.hedges import Any, fold_hedges
from fuzzyrules.norms import SNorm, TNorm
from fuzzyrules.postfix import AND, OR, to_postfix_positions
from fuzzyrules.variables import INPUT, OUTPUT

antecedent_log = logging.getLogger("antecedent")


class Expect(enum.Flag):
    """Token classes the antecedent scanner accepts next."""

    VARIABLE = enum.auto()
    IS = enum.auto()
    HEDGE = enum.auto()
    TERM = enum.auto()
    AND_OR = enum.auto()


class Antecedent:
    """
    Attributes:
        text (str): The antecedent text, without "if".
        expression (Optional[Expression]): Root of the parsed tree, None while
            unloaded.
    """

    def __init__(self, text: str = ""):
        self.text = text
        self.expression: Optional[Expression] = None

    def is_loaded(self) -> bool:
        return self.expression is not None

    def unload(self) -> None:
        self.expression = None

    # ------------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------------
    def load(self, engine, text: Optional[str] = None) -> None:
        """
        Parses the antecedent and stores its expression tree.

        Args:
            engine: Provides find_variable(name) for input and output variables.
            text (Optional[str]): New antecedent text; defaults to self.text.

        Raises:
            RuleSyntaxError: If the text is malformed. The antecedent is left
                unloaded.
        """
        self.unload()
        if text is not None:
            self.text = text
        antecedent_log.debug("Antecedent: %s", self.text)
        if not self.text.strip():
            raise RuleSyntaxError("antecedent is empty", self.text)

        postfix = to_postfix_positions(self.text)
        antecedent_log.debug("Postfix: %s", " ".join(token for _, token in postfix))

        state = Expect.VARIABLE
        stack: List[Expression] = []
        proposition: Optional[Proposition] = None
        token = ""
        position = 0

        for position, token in postfix:
            if Expect.VARIABLE in state:
                variable = engine.find_variable(token)
                if variable is not None:
                    proposition = Proposition(variable)
                    stack.append(proposition)
                    state = Expect.IS
                    antecedent_log.debug("Token <%s> is variable", token)
                    continue

            if Expect.IS in state and token == IS:
                state = Expect.HEDGE | Expect.TERM
                antecedent_log.debug("Token <%s> is keyword", token)
                continue

            if Expect.HEDGE in state and HEDGES.has(token):
                hedge = HEDGES.construct(token)
                proposition.hedges.append(hedge)
                if isinstance(hedge, Any):
                    state = Expect.VARIABLE | Expect.AND_OR
                else:
                    state = Expect.HEDGE | Expect.TERM
                antecedent_log.debug("Token <%s> is hedge", token)
                continue

            if Expect.TERM in state and proposition.variable.has_term(token):
                proposition.term = proposition.variable.get_term(token)
                state = Expect.VARIABLE | Expect.AND_OR
                antecedent_log.debug("Token <%s> is term", token)
                continue

            if Expect.AND_OR in state and token in (AND, OR):
                if len(stack) < 2:
                    raise RuleSyntaxError(
                        f"logical operator <{token}> expects at least two operands, "
                        f"but found <{len(stack)}>",
                        self.text, token, position, expected="two operands",
                    )
                right = stack.pop()
                left = stack.pop()
                operator = Operator(token, left, right)
                stack.append(operator)
                state = Expect.VARIABLE | Expect.AND_OR
                antecedent_log.debug("Subtree: (%s) (%s)", left, right)
                continue

            # If reached this point, there was an error
            if Expect.VARIABLE in state or Expect.AND_OR in state:
                expected = "variable or logical operator"
            elif Expect.IS in state:
                expected = f"keyword <{IS}>"
            else:
                expected = "hedge or term"
            raise RuleSyntaxError(
                f"expected {expected}, but found <{token}>",
                self.text, token, position, expected=expected,
            )

        if not (Expect.VARIABLE in state or Expect.AND_OR in state):
            expected = f"keyword <{IS}>" if Expect.IS in state else "hedge or term"
            raise RuleSyntaxError(
                f"expected {expected} after <{token}>",
                self.text, token, position, expected=expected,
            )

        if len(stack) != 1:
            leftovers = [self.to_infix(node) for node in stack]
            raise RuleSyntaxError(
                f"unable to parse the following expressions: <{' '.join(leftovers)}>",
                self.text, leftovers=leftovers,
                expected="logical operator" if stack else "proposition",
            )
        self.expression = stack.pop()

    # ------------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------------
    def activation_degree(
        self,
        conjunction: Optional[TNorm],
        disjunction: Optional[SNorm],
        node: Optional[Expression] = None,
    ) -> float:
        """
        Computes the degree to which the antecedent holds.

        Args:
            conjunction (Optional[TNorm]): Operator for "and" nodes.
            disjunction (Optional[SNorm]): Operator for "or" nodes.
            node (Optional[Expression]): Subtree to evaluate; the root by default.

        Returns:
            float: Degree in [0, 1], or NaN if a term produced NaN.
        """
        if not self.is_loaded():
            raise InvariantError(f"[antecedent error] antecedent <{self.text}> is not loaded")
        if node is None:
            node = self.expression

        if isinstance(node, Proposition):
            return self._proposition_degree(node)

        if isinstance(node, Operator):
            if node.left is None or node.right is None:
                raise InvariantError("[syntax error] left and right operands cannot be None")
            if node.name == AND:
                if conjunction is None:
                    raise ConfigurationError(
                        f"the following rule requires a conjunction operator:\n{self.text}",
                        prefix="conjunction error",
                    )
                return conjunction.compute(
                    self.activation_degree(conjunction, disjunction, node.left),
                    self.activation_degree(conjunction, disjunction, node.right),
                )
            if node.name == OR:
                if disjunction is None:
                    raise ConfigurationError(
                        f"the following rule requires a disjunction operator:\n{self.text}",
                        prefix="disjunction error",
                    )
                return disjunction.compute(
                    self.activation_degree(conjunction, disjunction, node.left),
                    self.activation_degree(conjunction, disjunction, node.right),
                )
            raise InvariantError(f"[syntax error] operator <{node.name}> not recognized")

        raise InvariantError(
            f"[expression error] unknown instance of Expression <{type(node).__name__}>"
        )

    @staticmethod
    def _proposition_degree(proposition: Proposition) -> float:
        variable = proposition.variable
        if not variable.is_enabled():
            return 0.0

        # "x is [hedges] any": the value and term are never consulted.
        if proposition.ends_with_any():
            *outer, any_hedge = proposition.hedges
            return fold_hedges(outer, any_hedge.hedge(math.nan))

        if variable.kind == INPUT:
            result = proposition.term.membership(variable.value)
        elif variable.kind == OUTPUT:
            result = variable.fuzzy_output.activation_degree(proposition.term)
        else:
            raise InvariantError(f"variable <{variable.name}> is neither input nor output")
        return fold_hedges(proposition.hedges, result)

    # ------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------
    def _check_loaded(self):
        if not self.is_loaded():
            raise InvariantError(f"[antecedent error] antecedent <{self.text}> is not loaded")

    def to_infix(self, node: Optional[Expression] = None) -> str:
        """Infix text; nested connectives are wrapped in parentheses."""
        if node is None:
            self._check_loaded()
            node = self.expression
        if isinstance(node, Proposition):
            return str(node)
        if isinstance(node, Operator):
            left = self.to_infix(node.left)
            right = self.to_infix(node.right)
            if isinstance(node.left, Operator):
                left = f"({left})"
            if isinstance(node.right, Operator):
                right = f"({right})"
            return f"{left} {node.name} {right}"
        raise InvariantError(f"[expression error] unexpected class <{type(node).__name__}>")

    def to_prefix(self, node: Optional[Expression] = None) -> str:
        if node is None:
            self._check_loaded()
            node = self.expression
        if isinstance(node, Proposition):
            return str(node)
        if isinstance(node, Operator):
            return f"{node.name} {self.to_prefix(node.left)} {self.to_prefix(node.right)}"
        raise InvariantError(f"[expression error] unexpected class <{type(node).__name__}>")

    def to_postfix(self, node: Optional[Expression] = None) -> str:
        if node is None:
            self._check_loaded()
            node = self.expression
        if isinstance(node, Proposition):
            return str(node)
        if isinstance(node, Operator):
            return f"{self.to_postfix(node.left)} {self.to_postfix(node.right)} {node.name}"
        raise InvariantError(f"[expression error] unexpected class <{type(node).__name__}>")

    def copy(self) -> "Antecedent":
        """Independent antecedent with a freshly built tree."""
        result = Antecedent(self.text)
        if self.expression is not None:
            result.expression = self.expression.copy()
        return result

    def __str__(self):
        return self.to_infix() if self.is_loaded() else self.text
