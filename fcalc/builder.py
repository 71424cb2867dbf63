"""Build an expression tree from a token sequence.

Operator-precedence parsing with an explicit operand/operator stack. Each
parenthesised group is parsed by a recursive call on a fresh stack and
pushed back onto the enclosing stack as a single operand.

While collapsing, a stack always reads operand, operator, operand, ...,
operand from bottom to top, so every reduction pops exactly one
(right operand, operator, left operand) triple.
"""

import logging
from enum import Enum
from typing import List, Optional

from fcalc.config import CalcConfig, MAX_DEPTH
from fcalc.errors import NestingTooDeepError, StructureError
from fcalc.math_ast import Leaf, Node, OpNode, is_operand, priority
from fcalc.tokenizer import OPERATOR_KINDS, Token, TokenKind, tokenize

logger = logging.getLogger("fcalc.builder")


class CollapseResult(Enum):
    REDUCED = 'reduced'                  # one operand left on the stack
    BLOCKED = 'blocked'                  # stopped at a lower-priority operator
    STRUCTURE_ERROR = 'structure_error'


def collapse_stack(stack: List[Node], min_priority: int = 0) -> CollapseResult:
    """Reduce operand/operator/operand triples on top of ``stack``.

    Reduction stops when a single operand is left (REDUCED) or when the
    next operator has a priority below ``min_priority`` (BLOCKED); in the
    latter case the triple is pushed back untouched. A stack of the wrong
    shape gives STRUCTURE_ERROR and is left as it was found.
    """
    logger.debug("Collapsing stack of size %d (min priority %d)", len(stack), min_priority)
    while True:
        if len(stack) == 1:
            if is_operand(stack[-1]):
                return CollapseResult.REDUCED
            logger.debug("Dangling operator '%s' on stack", stack[-1].op)
            return CollapseResult.STRUCTURE_ERROR
        if len(stack) < 3:
            logger.debug("Unexpected stack size while collapsing: %d", len(stack))
            return CollapseResult.STRUCTURE_ERROR

        right = stack.pop()
        op = stack.pop()
        left = stack.pop()
        if not (is_operand(left) and is_operand(right)
                and isinstance(op, OpNode) and not op.is_complete()):
            logger.debug("Invalid operations found on stack")
            stack.extend((left, op, right))
            return CollapseResult.STRUCTURE_ERROR

        if priority(op) < min_priority:
            logger.debug("Stopping stack collapsing at lower-priority '%s'", op.op)
            stack.extend((left, op, right))
            return CollapseResult.BLOCKED

        op.left = left
        op.right = right
        stack.append(op)


class FormulaBuilder:
    """Turns one token sequence into one expression tree.

    ``pos`` is the cursor into ``tokens``; it is shared by every nesting
    level, and each level leaves it on the token that ended the level.
    """

    def __init__(self, tokens: List[Token], max_depth: int = MAX_DEPTH):
        self.tokens = tokens
        self.max_depth = max_depth
        self.pos = 0

    def build(self) -> Node:
        self.pos = 0
        stack: List[Node] = []
        root = self.build_ast(stack, depth=0)
        if self.pos != len(self.tokens):
            raise StructureError(f"Unexpected ')' at token {self.pos}")
        if len(stack) != 1:
            raise StructureError(f"Expected a single expression, found {len(stack)} nodes")
        return root

    def build_ast(self, stack: List[Node], depth: int) -> Node:
        """Parse tokens from the cursor until the end of input or a ')'.

        The closing ')' is not consumed; the caller that opened the group
        steps over it.
        """
        logger.debug("Entering level %d at token %d", depth, self.pos)
        prev_op: Optional[OpNode] = None

        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            logger.debug("Current pos: %d, token: %s, stack size: %d",
                         self.pos, token.symbol, len(stack))

            if token.kind is TokenKind.NUMBER:
                stack.append(Leaf(token.value))
            elif token.kind in OPERATOR_KINDS:
                new_op = OpNode(token.symbol)
                new_priority = priority(new_op)
                if prev_op is not None and priority(prev_op) >= new_priority:
                    self._collapse(stack, new_priority)
                stack.append(new_op)
                prev_op = new_op
            elif token.kind is TokenKind.LEFT_BRACE:
                stack.append(self._build_group(depth))
                continue
            elif token.kind is TokenKind.RIGHT_BRACE:
                break
            else:
                raise StructureError(f"Unsupported token {token.kind.name} at {self.pos}")
            self.pos += 1

        self._collapse(stack, 0)
        return stack[-1]

    def _build_group(self, depth: int) -> Node:
        if depth >= self.max_depth:
            raise NestingTooDeepError(self.max_depth)
        start = self.pos
        self.pos += 1
        node = self.build_ast([], depth + 1)
        if self.pos >= len(self.tokens):
            raise StructureError(f"'(' at token {start} is never closed")
        # step over the ')'
        self.pos += 1
        logger.debug("Adding collapsed sub-expression from tokens %d..%d", start, self.pos - 1)
        return node

    def _collapse(self, stack: List[Node], min_priority: int) -> None:
        if collapse_stack(stack, min_priority) is CollapseResult.STRUCTURE_ERROR:
            logger.debug("Failed to collapse stack for expression")
            raise StructureError(f"Malformed expression near token {self.pos}")


def build_expression(line: str, config: Optional[CalcConfig] = None) -> Node:
    """Tokenize and build ``line``; raises a FormulaError on any failure."""
    if config is None:
        config = CalcConfig()
    tokens = tokenize(line, config.max_input_length)
    return FormulaBuilder(tokens, config.max_depth).build()
