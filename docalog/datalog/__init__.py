"""Datalog core: term model, validation, unification and fixpoint evaluation.

Programs are made of base relations (ground facts) and predicates (rules
with optional negation-as-failure). Evaluation is naive bottom-up: every
round recomputes each predicate from the current relations until nothing
changes.

Example usage:
    from docalog.datalog import parse_program, validate, evaluate

    program = parse_program('''
        parent(alice, bob).
        parent(bob, charlie).
        ancestor(X, Y) :- parent(X, Y).
        ancestor(X, Y) :- parent(X, Z), ancestor(Z, Y).
    ''')
    validate(program)
    result = evaluate(program)

    for fact in result.computed["ancestor"]:
        print(fact)
"""

from .terms import (
    Variable,
    StringConstant,
    BooleanConstant,
    Term,
    Fact,
    Clause,
    Rule,
    Relation,
    Predicate,
    Node,
    Program,
)
from .errors import (
    DatalogError,
    ProgramValidationError,
    UnknownRelationError,
    UnboundHeadVariableError,
    EvaluationError,
    ExceededIterationsError,
    ArityMismatchError,
    ParseError,
    ProgramConstructionError,
)
from .unification import (
    Binding,
    unify,
    project,
)
from .validation import validate
from .engine import (
    MAX_ITERATIONS,
    FixpointEvaluator,
    evaluate,
)
from .parser import (
    Token,
    tokenize,
    parse_program,
)
from .printer import (
    format_term,
    format_fact,
    format_clause,
    format_rule,
    format_program,
)

__all__ = [
    # Terms
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
    # Errors
    "DatalogError",
    "ProgramValidationError",
    "UnknownRelationError",
    "UnboundHeadVariableError",
    "EvaluationError",
    "ExceededIterationsError",
    "ArityMismatchError",
    "ParseError",
    "ProgramConstructionError",
    # Unification
    "Binding",
    "unify",
    "project",
    # Validation
    "validate",
    # Engine
    "MAX_ITERATIONS",
    "FixpointEvaluator",
    "evaluate",
    # Parsing
    "Token",
    "tokenize",
    "parse_program",
    # Printing
    "format_term",
    "format_fact",
    "format_clause",
    "format_rule",
    "format_program",
]
