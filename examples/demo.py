#!/usr/bin/env python3
"""
REBIND Feature Demonstration

This script demonstrates the major features of the REBIND library.
"""

import logging
import math

from rebind import (
    E, and_, or_, compose, format_node,
    is_constant_subtree, is_parameter_free,
    fold, fold_constants, replace_parameters, free_parameters,
    BinaryOp, Binary, EvaluationError, ArityMismatchError,
)


class Limits:
    max_total = 500
    min_age = 18


class Settings:
    limits = Limits()
    region = "EU"


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def demo_basic_usage():
    """Demonstrate building and calling predicates."""
    section("Basic Usage")

    x = E.param("x", int)
    positive = E.lambda_([x], E.op(">", x, 0))

    print(f"  Predicate: {format_node(positive)}")
    for value in (5, 0, -3):
        print(f"  positive({value}) => {positive(value)}")


def demo_composition():
    """Demonstrate and_/or_ composition."""
    section("Composition")

    x = E.param("x", int)
    y = E.param("y", int)
    positive = E.lambda_([x], E.op(">", x, 0))
    small = E.lambda_([y], E.op("<", y, 10))

    in_range = and_(positive, small)
    either = or_(positive, small)
    print(f"  and_: {format_node(in_range)}")
    print(f"  or_:  {format_node(either)}")

    for value in (-1, 5, 20):
        print(f"  x = {value:3}: and_ => {in_range(value)!s:5}  or_ => {either(value)}")

    xor = compose(positive, small, lambda a, b: Binary(BinaryOp.XOR, a, b))
    print(f"\n  Custom merge: {format_node(xor)}")

    try:
        a, b = E.params("a", "b")
        and_(positive, E.lambda_([a, b], E.op(">", a, b)))
    except ArityMismatchError as e:
        print(f"  Mismatched arity: {e}")


def demo_identity():
    """Demonstrate identity-based parameters."""
    section("Parameter Identity")

    x1 = E.param("x")
    x2 = E.param("x")
    tree = E.op("+", x1, x2)
    print(f"  Tree:           {format_node(tree)}")
    print(f"  With ids:       {format_node(tree, show_ids=True)}")

    target = E.param("t")
    rebound = replace_parameters({x1: target}, tree)
    print(f"  Replace first:  {format_node(rebound, show_ids=True)}")

    lam = E.lambda_([x1], tree)
    print(f"  Free in {format_node(lam)}: {[p.name for p in free_parameters(lam)]}")


def demo_classification():
    """Demonstrate sub-tree classification."""
    section("Classification")

    p = E.param("p")
    examples = [
        E.const(42),
        p,
        E.member(p, "address.zip"),
        E.member(E.const(Settings()), "limits.max_total"),
        E.static(math, "pi"),
        E.op("+", 1, 2),
    ]

    print(f"  {'node':32} {'constant':10} parameter-free")
    for node in examples:
        print(f"  {format_node(node):32} {is_constant_subtree(node)!s:10} "
              f"{is_parameter_free(node)}")


def demo_constant_folding():
    """Demonstrate folding constant sub-trees."""
    section("Constant Folding")

    print(f"  fold((+ 5 3)) => {format_node(fold(E.op('+', 5, 3)))}")

    order = E.param("order")
    limit = E.member(E.const(Settings()), "limits.max_total")
    check = E.lambda_([order], E.all_of(
        E.op("<=", E.member(order, "total"), limit),
        E.op("==", E.member(order, "region"), E.member(E.const(Settings()), "region")),
        E.op(">", E.member(order, "items"), E.op("*", 0, 10)),
    ))

    folded, trace = fold_constants(check, trace=True)
    print(f"\n  Before: {format_node(check)}")
    print(f"  After:  {format_node(folded)}")
    print(f"\n  {trace.summary()}")
    print(trace)

    order_data = {"total": 120, "region": "EU", "items": 3}
    print(f"\n  folded({order_data}) => {folded(order_data)}")


def demo_errors():
    """Demonstrate evaluation failures."""
    section("Errors")

    bad = E.op("/", 1, 0)
    try:
        fold(bad)
    except EvaluationError as e:
        print(f"  fold({format_node(e.node)}) failed: {e.__cause__!r}")

    x = E.param("x")
    result = fold_constants(E.op("+", x, bad))
    print(f"  fold_constants leaves it in place: {format_node(result)}")


def main():
    """Run all demonstrations."""
    logging.basicConfig(level=logging.WARNING)

    print("REBIND - Reusable Expression Binders")
    print("Feature Demonstration")

    demo_basic_usage()
    demo_composition()
    demo_identity()
    demo_classification()
    demo_constant_folding()
    demo_errors()

    print("\n" + "="*60)
    print(" Demo complete!")
    print("="*60)


if __name__ == "__main__":
    main()
