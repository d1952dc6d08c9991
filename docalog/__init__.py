"""docalog: Datalog fixpoint evaluation with document-based inference checks.

Flow:
    source text -> parse_program -> Program
    documents -> build_program -> Program
    Program -> validate -> evaluate -> Program (computed populated)
            -> format_program / inference_statuses
"""

from docalog.datalog import (
    Variable,
    StringConstant,
    BooleanConstant,
    Clause,
    Relation,
    Predicate,
    Program,
    DatalogError,
    ProgramValidationError,
    UnknownRelationError,
    UnboundHeadVariableError,
    EvaluationError,
    ExceededIterationsError,
    ParseError,
    ProgramConstructionError,
    FixpointEvaluator,
    unify,
    validate,
    evaluate,
    parse_program,
    format_program,
)
from docalog.documents import (
    Document,
    Assumption,
    Inference,
    InferenceStatus,
    build_program,
    inference_statuses,
    markdown_to_document,
)

__all__ = [
    # Model
    "Variable",
    "StringConstant",
    "BooleanConstant",
    "Clause",
    "Relation",
    "Predicate",
    "Program",
    # Errors
    "DatalogError",
    "ProgramValidationError",
    "UnknownRelationError",
    "UnboundHeadVariableError",
    "EvaluationError",
    "ExceededIterationsError",
    "ParseError",
    "ProgramConstructionError",
    # Core
    "FixpointEvaluator",
    "unify",
    "validate",
    "evaluate",
    "parse_program",
    "format_program",
    # Documents
    "Document",
    "Assumption",
    "Inference",
    "InferenceStatus",
    "build_program",
    "inference_statuses",
    "markdown_to_document",
]
