"""
Rewrites an antecedent from infix to postfix (reverse polish) order.

"and" and "or" are binary, left-associative operators of equal precedence;
parentheses group sub-expressions. Every other token (variables, "is", hedges,
terms) is an operand copied through verbatim, keeping its order relative to its
neighbours, so

    x is very A or (y is B and z is C)

becomes

    x is very A y is B z is C and or
"""

import logging
from typing import Dict, List, Tuple

from fuzzyrules.errors import RuleSyntaxError

postfix_log = logging.getLogger("antecedent")

AND = "and"
OR = "or"
OPEN = "("
CLOSE = ")"

# Equal precedence, so operators reduce strictly left to right.
PRECEDENCE: Dict[str, int] = {AND: 1, OR: 1}


def tokenize(text: str) -> List[str]:
    """Splits on whitespace, treating parentheses as tokens of their own."""
    spaced = text.replace(OPEN, f" {OPEN} ").replace(CLOSE, f" {CLOSE} ")
    return spaced.split()


def to_postfix_positions(text: str) -> List[Tuple[int, str]]:
    """
    Converts an infix antecedent to postfix order, keeping the source index of
    every token.

    Args:
        text (str): The antecedent without the leading "if".

    Returns:
        List[Tuple[int, str]]: (index in tokenize(text), token) pairs in
            postfix order, parentheses removed.

    Raises:
        RuleSyntaxError: If the parentheses do not balance.
    """
    output: List[Tuple[int, str]] = []
    stack: List[Tuple[int, str]] = []

    for position, token in enumerate(tokenize(text)):
        if token in PRECEDENCE:
            # Left associative: pop operators of greater or equal precedence.
            while stack and stack[-1][1] in PRECEDENCE and \
                    PRECEDENCE[stack[-1][1]] >= PRECEDENCE[token]:
                output.append(stack.pop())
            stack.append((position, token))
        elif token == OPEN:
            stack.append((position, token))
        elif token == CLOSE:
            while stack and stack[-1][1] != OPEN:
                output.append(stack.pop())
            if not stack:
                raise RuleSyntaxError(
                    f"closing parenthesis <{CLOSE}> has no matching <{OPEN}>",
                    text, token, position, expected=OPEN,
                )
            stack.pop()
        else:
            output.append((position, token))

    while stack:
        position, token = stack.pop()
        if token == OPEN:
            raise RuleSyntaxError(
                f"parenthesis <{OPEN}> is never closed", text, token, position,
                expected=CLOSE,
            )
        output.append((position, token))

    return output


def to_postfix_tokens(text: str) -> List[str]:
    """Same as to_postfix_positions(), without the source indexes."""
    return [token for _, token in to_postfix_positions(text)]


def to_postfix(text: str) -> str:
    """Same as to_postfix_tokens(), joined with single spaces."""
    postfix = " ".join(to_postfix_tokens(text))
    postfix_log.debug("Postfix: %s", postfix)
    return postfix
