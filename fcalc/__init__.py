from fcalc.builder import build_expression
from fcalc.calculator import calculate
from fcalc.math_ast import evaluate

__all__ = ["build_expression", "calculate", "evaluate"]
