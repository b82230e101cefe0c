"""Functional programming utilities for pipeline composition."""

from typing import Callable, TypeVar
from functools import reduce

T = TypeVar('T')


def pipe_run(value: T, *funcs: Callable[[T], T]) -> T:
    """
    Apply functions sequentially to a value (left-to-right).

    Example:
        result = pipe_run(
            groups,
            build_step,
            resolve_step,
        )

    Equivalent to: resolve_step(build_step(groups))

    Args:
        value: Initial value to transform
        *funcs: Functions to apply sequentially

    Returns:
        Final transformed value
    """
    return reduce(lambda v, f: f(v), funcs, value)


def banner(title: str, verbose: bool = True):
    """Print a section banner in the console report."""
    if not verbose:
        return
    print("\n" + "=" * 60)
    print(title.upper())
    print("=" * 60)
