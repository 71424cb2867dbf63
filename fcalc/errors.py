"""Errors raised while turning a line of text into an expression tree."""


class FormulaError(ValueError):
    """Base class for every parse-time failure."""


class InputTooLongError(FormulaError):
    def __init__(self, length: int, max_length: int):
        super().__init__(f"Input of {length} characters exceeds the limit of {max_length}")
        self.length = length
        self.max_length = max_length


class TokenizeError(FormulaError):
    def __init__(self, field: str, position: int):
        super().__init__(f"Failed to parse token {field!r} at field {position}")
        self.field = field
        self.position = position


class BraceMismatchError(FormulaError):
    def __init__(self, opening: int, closing: int):
        super().__init__(f"Unmatched braces found: {opening} '(' and {closing} ')'")
        self.opening = opening
        self.closing = closing


class StructureError(FormulaError):
    """The token sequence does not form a well-shaped expression."""


class NestingTooDeepError(StructureError):
    def __init__(self, max_depth: int):
        super().__init__(f"Parentheses nested deeper than {max_depth} levels")
        self.max_depth = max_depth
