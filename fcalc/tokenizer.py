"""Split an input line into typed tokens."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from fcalc.config import MAX_INPUT_LENGTH
from fcalc.errors import BraceMismatchError, InputTooLongError, TokenizeError

logger = logging.getLogger("fcalc.tokenizer")


class TokenKind(Enum):
    NUMBER = 'number'
    ADD = '+'
    SUB = '-'
    MUL = '*'
    DIV = '/'
    REM = '%'
    LEFT_BRACE = '('
    RIGHT_BRACE = ')'


SYMBOLS = {
    '+': TokenKind.ADD,
    '-': TokenKind.SUB,
    '*': TokenKind.MUL,
    '/': TokenKind.DIV,
    '%': TokenKind.REM,
    '(': TokenKind.LEFT_BRACE,
    ')': TokenKind.RIGHT_BRACE,
}

OPERATOR_KINDS = (TokenKind.ADD, TokenKind.SUB, TokenKind.MUL, TokenKind.DIV, TokenKind.REM)

# what strtod accepts in decimal form, plus inf/nan
NUMBER_RE = re.compile(
    r"""[+-]?(?:
        (?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?
        |inf(?:inity)?
        |nan
    )""",
    re.VERBOSE | re.IGNORECASE | re.ASCII,
)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: Optional[float] = None

    def __post_init__(self):
        if (self.kind is TokenKind.NUMBER) != (self.value is not None):
            raise ValueError(f"Token {self.kind.name} with value {self.value!r}")

    @property
    def symbol(self) -> str:
        return self.kind.value


def parse_number(field: str) -> Optional[float]:
    """Return the value of a numeric literal, or None if the whole field is not one."""
    if not NUMBER_RE.fullmatch(field):
        return None
    return float(field)


def tokenize(line: str, max_length: int = MAX_INPUT_LENGTH) -> List[Token]:
    """Tokenize one input line.

    Fields are separated by single spaces, so doubled, leading or trailing
    spaces produce empty fields, which are rejected. A brace count mismatch
    is reported in preference to a malformed field on the same line.

    ``max_length`` counts characters of the decoded line, not encoded bytes;
    longer lines are rejected before they are split.
    """
    if len(line) > max_length:
        logger.warning("Rejecting input of %d characters (limit %d)", len(line), max_length)
        raise InputTooLongError(len(line), max_length)

    fields = line.split(' ')
    opening = fields.count('(')
    closing = fields.count(')')
    if opening != closing:
        logger.debug("Unmatched braces found: %d opening, %d closing", opening, closing)
        raise BraceMismatchError(opening, closing)

    tokens: List[Token] = []
    for position, field in enumerate(fields):
        kind = SYMBOLS.get(field)
        if kind is not None:
            tokens.append(Token(kind))
            continue
        value = parse_number(field)
        if value is None:
            logger.debug("Failed to parse field %r at %d", field, position)
            raise TokenizeError(field, position)
        tokens.append(Token(TokenKind.NUMBER, value))
    return tokens
