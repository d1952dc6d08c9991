"""Exceptions raised while building, validating and evaluating programs."""

from __future__ import annotations

__all__ = [
    "DatalogError",
    "ProgramValidationError",
    "UnknownRelationError",
    "UnboundHeadVariableError",
    "EvaluationError",
    "ExceededIterationsError",
    "ArityMismatchError",
    "ParseError",
    "ProgramConstructionError",
]


class DatalogError(Exception):
    """Base class for all docalog errors."""


class ProgramValidationError(DatalogError, ValueError):
    """A program was rejected by static validation and must not be evaluated."""


class UnknownRelationError(ProgramValidationError):
    """A rule clause references a name that no node declares."""

    def __init__(self, predicate: str, relation: str) -> None:
        self.predicate = predicate
        self.relation = relation
        super().__init__(f"Unknown relation '{relation}' in predicate '{predicate}'")


class UnboundHeadVariableError(ProgramValidationError):
    """A head variable does not occur in any clause of the rule body."""

    def __init__(self, predicate: str, variable: str) -> None:
        self.predicate = predicate
        self.variable = variable
        super().__init__(
            f"Head variable '{variable}' is not properly bound in predicate '{predicate}'"
        )


class EvaluationError(DatalogError, RuntimeError):
    """Evaluation could not produce a result."""


class ExceededIterationsError(EvaluationError):
    """No fixpoint was reached within the iteration cap."""

    def __init__(self, max_iterations: int) -> None:
        self.max_iterations = max_iterations
        super().__init__(
            f"Exceeded maximum number of iterations ({max_iterations}), possible infinite loop"
        )


class ArityMismatchError(DatalogError, ValueError):
    """A clause pattern and a fact row have different lengths."""

    def __init__(self, pattern_arity: int, row_arity: int) -> None:
        self.pattern_arity = pattern_arity
        self.row_arity = row_arity
        super().__init__(
            f"Pattern arity {pattern_arity} does not match fact arity {row_arity}"
        )


class ParseError(DatalogError, ValueError):
    """Source text is not a well-formed program."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        self.line = line
        self.column = column
        loc = f" at line {line}, column {column}" if line is not None else ""
        super().__init__(f"{message}{loc}")


class ProgramConstructionError(DatalogError, ValueError):
    """Statements cannot be assembled into one consistent program."""
