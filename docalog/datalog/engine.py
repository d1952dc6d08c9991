"""Naive bottom-up fixpoint evaluation with negation-as-failure.

Each round re-derives every predicate from scratch against the current
working store, in declared order. Relations updated earlier in a round are
visible to predicates evaluated later in the same round. The loop stops
when a whole round leaves every derived relation unchanged.

Because predicates are recomputed rather than only grown, a derived
relation can shrink between rounds: a fact produced while a negated
relation was still incomplete is retracted once that relation catches up.
Programs whose negation is not stratifiable are not detected; they either
settle on whatever fixpoint the declared order leads to or run into the
iteration cap.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterator, Mapping

from .errors import ExceededIterationsError
from .terms import Clause, Predicate, Program, Relation, Rule, Term
from .unification import project, unify

__all__ = [
    "MAX_ITERATIONS",
    "FixpointEvaluator",
    "evaluate",
]

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000


class FixpointEvaluator:
    """Evaluates programs to a fixpoint.

    The evaluator holds configuration only; all working state lives inside
    a single ``evaluate``/``rounds`` call, so one instance can be reused.
    """

    def __init__(self, max_iterations: int = MAX_ITERATIONS) -> None:
        """Initialize the evaluator.

        Args:
            max_iterations: Rounds allowed before giving up on convergence
        """
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        self.max_iterations = max_iterations
        self.iterations_run = 0

    def evaluate(self, program: Program) -> Program:
        """Run the program to a fixpoint.

        Args:
            program: Validated program; ``computed`` may hold a prior result

        Returns:
            New Program with the same nodes and the final computed relations

        Raises:
            ExceededIterationsError: If no fixpoint is reached within the cap
        """
        store: Mapping[str, Relation] = program.computed
        iterations = 0
        for iterations, snapshot in enumerate(self.rounds(program), start=1):
            store = snapshot
        self.iterations_run = iterations
        return program.with_computed(store)

    def rounds(self, program: Program) -> Iterator[Mapping[str, Relation]]:
        """Evaluate round by round, yielding a read-only snapshot after each.

        The last snapshot yielded is the fixpoint.

        Raises:
            ExceededIterationsError: If every allowed round still changed something
        """
        store: dict[str, Relation] = dict(program.computed)
        predicates = [(name, program.nodes[name]) for name in program.predicate_names()]

        for iteration in range(1, self.max_iterations + 1):
            changed = False
            for name, predicate in predicates:
                if self._update_predicate(name, predicate, program, store):
                    changed = True

            yield MappingProxyType(dict(store))

            if not changed:
                logger.debug(
                    f"Fixpoint reached in {iteration} rounds, "
                    f"{sum(len(r) for r in store.values())} derived facts"
                )
                return

        logger.warning(f"Max iterations ({self.max_iterations}) reached without a fixpoint")
        raise ExceededIterationsError(self.max_iterations)

    def _update_predicate(
        self,
        name: str,
        predicate: Predicate,
        program: Program,
        store: dict[str, Relation],
    ) -> bool:
        """Recompute one predicate and store it if it changed.

        A predicate not yet in the store compares as empty, so a predicate
        that has never derived anything stays absent and unresolvable.

        Returns:
            True if facts were added or removed
        """
        derived: dict[tuple[Term, ...], None] = {}
        for rule in predicate.rules:
            for binding in self._evaluate_rule(rule, program, store):
                fact = project(predicate.args, binding)
                if fact is not None:
                    derived.setdefault(fact)

        new_relation = Relation(tuple(derived))
        if store.get(name, Relation()).same_facts(new_relation):
            return False

        store[name] = new_relation
        return True

    def _evaluate_rule(
        self,
        rule: Rule,
        program: Program,
        store: Mapping[str, Relation],
    ) -> list[dict[str, Term]]:
        """Join the clauses of one rule left to right.

        Returns:
            All bindings that satisfy every clause
        """
        bindings: list[dict[str, Term]] = [{}]

        for clause in rule:
            relation = program.resolve(clause.relation, store)
            if relation is None:
                return []

            if clause.negated:
                bindings = [b for b in bindings if not _has_match(clause, relation, b)]
            else:
                bindings = _join(clause, relation, bindings)

            if not bindings:
                break

        return bindings


def _join(
    clause: Clause,
    relation: Relation,
    bindings: list[dict[str, Term]],
) -> list[dict[str, Term]]:
    results: list[dict[str, Term]] = []
    for binding in bindings:
        for row in relation:
            unified = unify(clause.terms, row, binding)
            if unified is not None:
                results.append(unified)
    return results


def _has_match(clause: Clause, relation: Relation, binding: dict[str, Term]) -> bool:
    return any(unify(clause.terms, row, binding) is not None for row in relation)


def evaluate(program: Program, max_iterations: int = MAX_ITERATIONS) -> Program:
    """Convenience function to evaluate a program to its fixpoint.

    Args:
        program: The validated program
        max_iterations: Rounds allowed before giving up

    Returns:
        New Program with ``computed`` populated
    """
    return FixpointEvaluator(max_iterations=max_iterations).evaluate(program)
