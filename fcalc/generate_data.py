#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# generate_data.py

import argparse
import math
import random
from dataclasses import dataclass, field
from typing import Iterator, Optional, Set, Tuple

from tqdm import tqdm

from fcalc.builder import build_expression
from fcalc.math_ast import Node, Leaf, OpNode, PRIORITY, evaluate, format_number


# ====== コンフィグ ======
@dataclass
class GenConfig:
    max_depth_cap: int = 6
    min_digits: int = 1
    max_digits: int = 2
    operators: Set[str] = field(default_factory=lambda: {'+', '-', '*', '/', '%'})  # 出現する演算子
    prob_paren: float = 0.15          # 不要な括弧を付ける確率
    prob_fraction: float = 0.3        # 小数のリテラルの確率
    prob_negative: float = 0.2
    seed: Optional[int] = None


@dataclass
class GeneratorResult:
    expr: str          # 空白区切りの式
    result: float      # 木から直接計算した値
    tree: Node
    depth: int


# ====== 生成 ======
def generate_leaf(cfg: GenConfig) -> Leaf:
    num_digits = random.randint(cfg.min_digits, cfg.max_digits)
    lower_bound = 10**(num_digits - 1) if num_digits > 1 else 0
    upper_bound = 10**num_digits - 1
    value = float(random.randint(lower_bound, upper_bound))
    if random.random() < cfg.prob_fraction:
        value += random.randint(1, 99) / 100
    if random.random() < cfg.prob_negative:
        value = -value
    return Leaf(value)


def _nonzero_divisor(cfg: GenConfig, current_depth: int) -> Node:
    for _ in range(10):
        right = generate_tree(cfg, current_depth + 1)
        try:
            val = evaluate(right)
        except (ZeroDivisionError, ValueError):
            continue
        if math.isfinite(val) and math.trunc(val) != 0:
            return right
    return Leaf(1.0)


def generate_tree(cfg: GenConfig, current_depth: int = 0) -> Node:
    # 葉を生成
    if current_depth >= cfg.max_depth_cap or (current_depth > 0 and random.random() < 0.5):
        return generate_leaf(cfg)

    op = random.choice(sorted(cfg.operators))
    left = generate_tree(cfg, current_depth + 1)
    if op in ('/', '%'):
        right = _nonzero_divisor(cfg, current_depth)
    else:
        right = generate_tree(cfg, current_depth + 1)
    return OpNode(op, left, right)


def tree_depth(node: Node) -> int:
    depth = 0
    pending = [(node, 0)]
    while pending:
        n, d = pending.pop()
        if isinstance(n, OpNode):
            pending.append((n.left, d + 1))
            pending.append((n.right, d + 1))
        else:
            depth = max(depth, d)
    return depth


def render(node: Node, cfg: GenConfig, parent_prec: int = -1, is_right: bool = False) -> str:
    """Like math_ast.to_string, with some redundant parentheses sprinkled in.

    Recursive; generated trees are at most ``cfg.max_depth_cap`` deep.
    """
    if isinstance(node, Leaf):
        s = format_number(node.value)
        if random.random() < cfg.prob_paren / 2:
            return f"( {s} )"
        return s

    prec = PRIORITY[node.op]
    left_str = render(node.left, cfg, prec, is_right=False)
    right_str = render(node.right, cfg, prec, is_right=True)
    s = f"{left_str} {node.op} {right_str}"
    need_paren = prec < parent_prec or (prec == parent_prec and is_right)
    if not need_paren and random.random() < cfg.prob_paren:
        need_paren = True
    return f"( {s} )" if need_paren else s


# ====== サンプル生成 ======
def generate_sample(cfg: GenConfig) -> GeneratorResult:
    while True:
        tree = generate_tree(cfg)
        try:
            result = evaluate(tree)
            break
        except (ZeroDivisionError, ValueError):
            continue

    return GeneratorResult(
        expr=render(tree, cfg),
        result=result,
        tree=tree,
        depth=tree_depth(tree),
    )


def stream_samples(cfg: GenConfig) -> Iterator[GeneratorResult]:
    if cfg.seed is not None:
        random.seed(cfg.seed)

    while True:
        yield generate_sample(cfg)


def same_value(a: float, b: float) -> bool:
    if math.isnan(a) or math.isnan(b):
        return math.isnan(a) and math.isnan(b)
    return a == b


def check_sample(sample: GeneratorResult) -> bool:
    """Build the sample's text back into a tree and compare the values."""
    try:
        value = evaluate(build_expression(sample.expr))
    except (ArithmeticError, ValueError):
        return False
    return same_value(value, sample.result)


def check_samples(cfg: GenConfig, num: int, show_progress: bool = True) -> Tuple[int, int]:
    sampler = stream_samples(cfg)
    correct = 0
    for _ in tqdm(range(num), disable=not show_progress, desc="checking"):
        sample = next(sampler)
        if check_sample(sample):
            correct += 1
        else:
            print(f" NG : expr {sample.expr} expected {sample.result}")
    return correct, num


# ====== 使い方デモ ======
def demo(n: int = 1, cfg: GenConfig | None = None) -> None:
    if cfg is None:
        cfg = GenConfig(max_depth_cap=4, seed=42)
    gen = stream_samples(cfg)
    for i in range(n):
        s = next(gen)
        print(f'{i:<6} depth {s.depth:<3} {s.expr} ; {s.result}')


def main(argv=None):
    parser = argparse.ArgumentParser(description="Emit random space-separated expressions, or check the parser against them.")
    parser.add_argument('--num', type=int, default=1, help='Number of samples to output.')
    parser.add_argument('--max-depth', type=int, default=4)
    parser.add_argument('--min-digits', type=int, default=1)
    parser.add_argument('--max-digits', type=int, default=3)
    parser.add_argument('--seed', type=int, default=42)
    parser.add_argument('--prob-paren', type=float, default=0.15)
    parser.add_argument('--prob-fraction', type=float, default=0.3)
    def parse_operators(op_str: str) -> set[str]:
        ops = set(op_str.split(','))
        unknown = ops - set(PRIORITY)
        if unknown:
            raise argparse.ArgumentTypeError(f"unknown operators: {','.join(sorted(unknown))}")
        return ops
    parser.add_argument('--operators', type=parse_operators, default='+,-,*,/,%',
                        help='Comma-separated list of operators to use (e.g., "+,-,*").')
    parser.add_argument('--check', type=int, default=0, metavar='N',
                        help='Parse N generated expressions and report how many evaluate to the expected value.')
    args = parser.parse_args(argv)
    cfg = GenConfig(max_depth_cap=args.max_depth,
                    min_digits=args.min_digits,
                    max_digits=args.max_digits,
                    seed=args.seed,
                    prob_paren=args.prob_paren,
                    prob_fraction=args.prob_fraction,
                    operators=set(args.operators))

    if args.check > 0:
        correct, total = check_samples(cfg, args.check)
        print(f"Total: {total}, Correct: {correct}, Accuracy: {correct/total:.2%}")
        return 0 if correct == total else 1

    demo(args.num, cfg)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
