"""Decision documents compiled to Datalog.

Flow:
    markdown -> markdown_to_document -> Document
    [Document, ...] -> build_program -> Program
    Program -> validate / evaluate -> inference_statuses
"""

from .schema import (
    Assumption,
    Inference,
    Document,
    InferenceStatus,
)
from .builder import (
    build_program,
    inference_statuses,
)
from .markdown import (
    markdown_to_document,
    parse_dependencies,
)

__all__ = [
    # Schema
    "Assumption",
    "Inference",
    "Document",
    "InferenceStatus",
    # Program construction
    "build_program",
    "inference_statuses",
    # Markdown
    "markdown_to_document",
    "parse_dependencies",
]
