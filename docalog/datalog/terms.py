"""Term, clause, relation and program model for Datalog evaluation.

Every other part of the engine operates on this closed vocabulary:

- Terms: Variable, StringConstant, BooleanConstant (structural equality)
- Clause: one conjunct of a rule body, optionally negated
- Relation: a deduplicated, ordered collection of ground facts
- Predicate: head variables plus a list of rules (conjunctions of clauses)
- Program: declared nodes by name plus the computed relations

All types are frozen. Evaluation produces new values instead of mutating
the ones a caller handed in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Union

__all__ = [
    "Variable",
    "StringConstant",
    "BooleanConstant",
    "Term",
    "Fact",
    "Clause",
    "Rule",
    "Relation",
    "Predicate",
    "Node",
    "Program",
    "is_ground",
    "term_variables",
]


@dataclass(frozen=True)
class Variable:
    """A logic variable, by convention starting with an uppercase letter."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class StringConstant:
    """A string constant such as ``alice`` or ``"db-decision"``."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BooleanConstant:
    """A boolean constant, written ``true`` or ``false``."""

    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


# Closed union of term variants
Term = Union[Variable, StringConstant, BooleanConstant]

# A fact is a row of ground terms
Fact = tuple[Term, ...]


def is_ground(terms: Iterable[Term]) -> bool:
    """Check that no Variable occurs in ``terms``."""
    return not any(isinstance(t, Variable) for t in terms)


def term_variables(terms: Iterable[Term]) -> list[str]:
    """Variable names occurring in ``terms``, in order of first occurrence."""
    names: dict[str, None] = {}
    for t in terms:
        if isinstance(t, Variable):
            names.setdefault(t.name)
    return list(names)


@dataclass(frozen=True)
class Clause:
    """A single conjunct of a rule body.

    Attributes:
        relation: Name of the relation or predicate being matched
        terms: Argument pattern (variables and constants)
        negated: Whether this is a negation-as-failure clause
    """

    relation: str
    terms: tuple[Term, ...] = ()
    negated: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "terms", tuple(self.terms))

    @property
    def arity(self) -> int:
        return len(self.terms)

    def variables(self) -> list[str]:
        return term_variables(self.terms)

    def __str__(self) -> str:
        neg = "not " if self.negated else ""
        args = ", ".join(str(t) for t in self.terms)
        return f"{neg}{self.relation}({args})"


# A rule body is an ordered conjunction of clauses
Rule = tuple[Clause, ...]


@dataclass(frozen=True)
class Relation:
    """A named set of ground facts.

    Facts keep their insertion order but duplicates collapse, so building
    a relation from a list that repeats a fact is the same as inserting
    it once.
    """

    facts: tuple[Fact, ...] = ()

    def __post_init__(self) -> None:
        unique = dict.fromkeys(tuple(f) for f in self.facts)
        object.__setattr__(self, "facts", tuple(unique))

    def __len__(self) -> int:
        return len(self.facts)

    def __iter__(self) -> Iterator[Fact]:
        return iter(self.facts)

    def fact_set(self) -> frozenset[Fact]:
        return frozenset(self.facts)

    def same_facts(self, other: Relation) -> bool:
        """Order-insensitive comparison of the fact sets."""
        return self.fact_set() == other.fact_set()


@dataclass(frozen=True)
class Predicate:
    """A rule-defined relation.

    Attributes:
        args: Head variables, in argument order
        rules: Alternative rule bodies; each is a conjunction of clauses
    """

    args: tuple[Variable, ...]
    rules: tuple[Rule, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "rules", tuple(tuple(r) for r in self.rules))

    @property
    def arity(self) -> int:
        return len(self.args)


Node = Union[Relation, Predicate]


@dataclass(frozen=True)
class Program:
    """Declared nodes plus the most recently computed predicate relations.

    ``nodes`` keeps declaration order; the evaluator visits predicates in
    that order within every round. Both mappings are copied on construction
    and exposed read-only.
    """

    nodes: Mapping[str, Node] = field(default_factory=dict)
    computed: Mapping[str, Relation] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name, node in self.nodes.items():
            if not isinstance(node, (Relation, Predicate)):
                raise TypeError(f"Node '{name}' must be a Relation or Predicate, got {type(node).__name__}")
        for name, rel in self.computed.items():
            if not isinstance(rel, Relation):
                raise TypeError(f"Computed entry '{name}' must be a Relation, got {type(rel).__name__}")
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))
        object.__setattr__(self, "computed", MappingProxyType(dict(self.computed)))

    def predicate_names(self) -> list[str]:
        """Names of Predicate nodes in declared order."""
        return [name for name, node in self.nodes.items() if isinstance(node, Predicate)]

    def relation_names(self) -> list[str]:
        """Names of base Relation nodes in declared order."""
        return [name for name, node in self.nodes.items() if isinstance(node, Relation)]

    def resolve(self, name: str, computed: Mapping[str, Relation] | None = None) -> Relation | None:
        """Look up a relation by name: computed results first, then base facts.

        Args:
            name: Relation or predicate name
            computed: Derived relations to consult instead of ``self.computed``
        """
        if computed is None:
            computed = self.computed
        rel = computed.get(name)
        if rel is not None:
            return rel
        node = self.nodes.get(name)
        return node if isinstance(node, Relation) else None

    def with_computed(self, computed: Mapping[str, Relation]) -> Program:
        """Return a program with the same nodes and a replaced ``computed``."""
        return Program(nodes=self.nodes, computed=computed)
