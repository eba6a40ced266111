"""
Error kinds raised by the rule language and its evaluation.

    RuleSyntaxError    - malformed rule text; raised while loading a rule and
                         leaves the rule unloaded
    ConfigurationError - operators or strategy parameters missing or invalid;
                         raised at evaluation or configuration time
    InvariantError     - the engine itself is in an impossible state (e.g. an
                         unloaded antecedent was evaluated)
"""

from typing import List, Optional


class FuzzyError(Exception):
    """Base class of every error raised by fuzzyrules."""


class RuleSyntaxError(FuzzyError):
    """
    Raised when rule text cannot be parsed.

    Attributes:
        reason (str): Human readable description of the failure.
        text (str): The rule, antecedent or consequent text being parsed.
        token (Optional[str]): The offending token, if any.
        position (Optional[int]): 0-based index of the token in source order,
            counted within the rule, antecedent or consequent that was being
            scanned. Parentheses are tokens of their own.
        expected (Optional[str]): The token class the parser was waiting for.
        leftovers (List[str]): Unreduced subtrees left on the operand stack.
    """

    def __init__(
        self,
        reason: str,
        text: str = "",
        token: Optional[str] = None,
        position: Optional[int] = None,
        expected: Optional[str] = None,
        leftovers: Optional[List[str]] = None,
    ):
        self.reason = reason
        self.text = text
        self.token = token
        self.position = position
        self.expected = expected
        self.leftovers = list(leftovers or [])
        super().__init__(f"[syntax error] {reason}")

    def with_text(self, text: str) -> "RuleSyntaxError":
        """
        Returns a copy of this error reporting the full rule text. The position
        still counts within the antecedent or consequent that failed.
        """
        return RuleSyntaxError(
            self.reason, text, self.token, self.position, self.expected, self.leftovers
        )


class ConfigurationError(FuzzyError):
    """Raised when a required operator or parameter is missing or invalid."""

    def __init__(self, message: str, prefix: str = "configuration error"):
        self.prefix = prefix
        super().__init__(f"[{prefix}] {message}")


class InvariantError(FuzzyError):
    """Raised when the engine reaches a state that indicates a programming bug."""
