"""Variable binding and unification for Datalog inference.

Datalog has no function symbols, so unification reduces to matching a
clause pattern position by position against one ground fact row while
extending a dictionary of bindings.

Bindings are never mutated: every successful match returns a fresh
dictionary, so alternative join branches can each extend the binding they
were handed without seeing one another's choices.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from .errors import ArityMismatchError
from .terms import BooleanConstant, StringConstant, Term, Variable

__all__ = [
    "Binding",
    "unify",
    "project",
]

# Variable name -> bound ground term
Binding = Mapping[str, Term]


def unify(
    pattern: Sequence[Term],
    row: Sequence[Term],
    binding: Binding,
) -> dict[str, Term] | None:
    """Try to match a clause pattern against a fact row.

    Args:
        pattern: Clause argument terms (variables and constants)
        row: Ground fact of the same arity
        binding: Existing variable bindings (left untouched)

    Returns:
        Extended bindings if the row matches, None otherwise

    Raises:
        ArityMismatchError: If pattern and row differ in length
    """
    if len(pattern) != len(row):
        raise ArityMismatchError(len(pattern), len(row))

    new_binding = dict(binding)

    for pat, val in zip(pattern, row):
        match pat:
            case Variable(name=name):
                bound = new_binding.get(name)
                if bound is None:
                    new_binding[name] = val
                elif bound != val:
                    return None
            case StringConstant() | BooleanConstant():
                if pat != val:
                    return None
            case _:
                raise TypeError(f"Unknown term in pattern: {pat!r}")

    return new_binding


def project(head: Sequence[Variable], binding: Binding) -> tuple[Term, ...] | None:
    """Build a head fact from bindings.

    Returns None if any head variable is unbound.
    """
    values = []
    for var in head:
        val = binding.get(var.name)
        if val is None:
            return None
        values.append(val)
    return tuple(values)
