"""Shallow value classification and the strict-equality rule.

An atom's baseline type is whatever its classifier returns for the initial
value. shallow_type is deliberately coarse: lists, dicts and instances are
all "object", the same way a typeof check would see them. Pass exact_type
(or any callable returning a hashable tag) for a stricter contract.
"""

from __future__ import annotations

import inspect
import numbers
from typing import Callable, Hashable

Classifier = Callable[[object], Hashable]

SCALAR_TAGS = frozenset({"boolean", "number", "string"})


def shallow_type(value: object) -> str:
    """Coarse type tag: boolean, number, string, function or object."""
    # bool first: it is a numbers.Number too
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, numbers.Number):
        return "number"
    if isinstance(value, str):
        return "string"
    if callable(value) and not inspect.isclass(value):
        return "function"
    return "object"


def exact_type(value: object) -> type:
    return type(value)


def strictly_equal(a: object, b: object) -> bool:
    """Identity for containers and objects, == for scalars. Never deep."""
    if shallow_type(a) in SCALAR_TAGS and shallow_type(a) == shallow_type(b):
        # == before identity: a NaN object is never equal to itself
        return a == b
    return a is b
