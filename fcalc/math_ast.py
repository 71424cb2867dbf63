# math_ast.py

import math
from typing import Optional

# ====== AST ======
class Node:
    pass

class Leaf(Node):
    def __init__(self, value: float):
        self.value = float(value)

    def __repr__(self):
        return f"Leaf({self.value!r})"

class OpNode(Node):
    """Binary operator node.

    Created without children by the builder and completed once both
    operands are known. Each node owns its children exclusively.
    """
    def __init__(self, op: str, left: Optional[Node] = None, right: Optional[Node] = None):
        if op not in PRIORITY:
            raise ValueError(f"Unknown operator: {op}")
        self.op = op
        self.left = left
        self.right = right

    def is_complete(self) -> bool:
        return self.left is not None and self.right is not None

    def __repr__(self):
        return f"OpNode({self.op!r}, {self.left!r}, {self.right!r})"

# higher binds tighter
PRIORITY = {
    '+': 0, '-': 0,
    '*': 1, '/': 1, '%': 1,
}


def priority(node: Node) -> int:
    if isinstance(node, OpNode):
        return PRIORITY[node.op]
    return 0

def is_operand(node: Node) -> bool:
    """A leaf or an operator node that already has both children."""
    if isinstance(node, Leaf):
        return True
    return isinstance(node, OpNode) and node.is_complete()


# ====== 評価 ======

def evaluate(node: Node) -> float:
    """Evaluate a tree bottom-up.

    Walks the tree post-order with an explicit stack, so a long chain such
    as ``1 + 1 + ... + 1`` (a tree as deep as it has operators) does not
    run into the interpreter's recursion limit.
    """
    values = []
    pending = [(node, False)]
    while pending:
        n, children_done = pending.pop()
        if isinstance(n, Leaf):
            values.append(n.value)
            continue
        if not isinstance(n, OpNode):
            raise ValueError(f"Unknown node type: {type(n).__name__}")
        if children_done:
            right = values.pop()
            left = values.pop()
            values.append(evaluate_binary(n.op, left, right))
            continue
        if not n.is_complete():
            raise ValueError(f"Operator '{n.op}' is missing an operand")
        # left is popped first, so its value lands below the right one
        pending.append((n, True))
        pending.append((n.right, False))
        pending.append((n.left, False))
    return values[0]

def evaluate_binary(op: str, left: float, right: float) -> float:
    if op == '+':
        return left + right
    if op == '-':
        return left - right
    if op == '*':
        return left * right
    if op == '/':
        return _divide(left, right)
    if op == '%':
        return _remainder(left, right)
    raise ValueError(f"Unknown operator: {op}")

def _divide(left: float, right: float) -> float:
    # IEEE 754: x/0 is a signed infinity, 0/0 is nan
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right

def _remainder(left: float, right: float) -> float:
    """Remainder of the operands truncated toward zero.

    The result takes the sign of the dividend, so ``-7 % 2`` is ``-1``.
    """
    if not (math.isfinite(left) and math.isfinite(right)):
        raise ValueError("Remainder of a non-finite value")
    dividend = math.trunc(left)
    divisor = math.trunc(right)
    if divisor == 0:
        raise ZeroDivisionError("Remainder by zero")
    rem = abs(dividend) % abs(divisor)
    return float(-rem if dividend < 0 else rem)


# ====== 文字列化 ======

def format_number(value: float) -> str:
    if math.isnan(value):
        return 'nan'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    return repr(float(value))

def to_string(node: Node) -> str:
    """Render a tree as space-delimited tokens.

    Parentheses are emitted only where precedence or left-to-right
    evaluation needs them, so the text builds back into the same tree.
    Post-order over an explicit stack, like ``evaluate``.
    """
    parts = []
    # (node, parent priority, is right child, children rendered)
    pending = [(node, -1, False, False)]
    while pending:
        n, parent_prec, is_right, children_done = pending.pop()
        if isinstance(n, Leaf):
            parts.append(format_number(n.value))
            continue
        if not isinstance(n, OpNode) or not n.is_complete():
            raise ValueError("Cannot render an incomplete expression")

        prec = PRIORITY[n.op]
        if not children_done:
            pending.append((n, parent_prec, is_right, True))
            pending.append((n.right, prec, True, False))
            pending.append((n.left, prec, False, False))
            continue
        right_str = parts.pop()
        left_str = parts.pop()
        s = f"{left_str} {n.op} {right_str}"
        need_paren = prec < parent_prec or (prec == parent_prec and is_right)
        parts.append(f"( {s} )" if need_paren else s)
    return parts[0]
