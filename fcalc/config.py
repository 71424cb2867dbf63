# config.py

from dataclasses import dataclass

# 1 Gi characters (str length, not UTF-8 bytes)
MAX_INPUT_LENGTH = 1024 * 1024 * 1024
MAX_DEPTH = 200


# ====== コンフィグ ======
@dataclass
class CalcConfig:
    max_input_length: int = MAX_INPUT_LENGTH
    max_depth: int = MAX_DEPTH          # 括弧のネストの上限
    prompt: str = "Please put the expression:"
    exit_word: str = "bye"
    verbose: bool = False

    def __post_init__(self):
        if self.max_input_length < 0:
            raise ValueError(f"max_input_length must be >= 0, got {self.max_input_length}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
