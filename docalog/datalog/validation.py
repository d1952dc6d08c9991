"""Static checks run once on a program before evaluation."""

from __future__ import annotations

import logging

from .errors import UnboundHeadVariableError, UnknownRelationError
from .terms import Predicate, Program

__all__ = ["validate"]

logger = logging.getLogger(__name__)


def validate(program: Program) -> None:
    """Check that every predicate rule is well-formed.

    For each rule of each predicate (in declared order):
    - every clause must name a declared relation or predicate
    - every head variable must occur somewhere in the rule body

    A variable that only occurs inside a negated clause still counts as
    occurring. This is weaker than classical range restriction and is kept
    that way for compatibility with existing programs.

    Args:
        program: The program to check (not modified)

    Raises:
        UnknownRelationError: A clause names an undeclared relation
        UnboundHeadVariableError: A head variable is missing from a rule body
    """
    names = set(program.nodes)

    for name, node in program.nodes.items():
        if not isinstance(node, Predicate):
            continue

        for rule in node.rules:
            seen_vars: set[str] = set()

            for clause in rule:
                if clause.relation not in names:
                    raise UnknownRelationError(name, clause.relation)
                seen_vars.update(clause.variables())

            for arg in node.args:
                if arg.name not in seen_vars:
                    raise UnboundHeadVariableError(name, arg.name)

    logger.debug(
        f"Validated program with {len(program.relation_names())} relations "
        f"and {len(program.predicate_names())} predicates"
    )
