"""Run markdown decision documents through the Datalog engine.

Example usage:
    from pathlib import Path
    from docalog.pipeline import run_markdown_pipeline

    print(run_markdown_pipeline(Path("example")))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from docalog.datalog import (
    DatalogError,
    FixpointEvaluator,
    MAX_ITERATIONS,
    Program,
    format_program,
    validate,
)
from docalog.documents import Document, build_program, markdown_to_document

__all__ = [
    "DEFAULT_PATTERN",
    "load_documents",
    "evaluate_documents",
    "run_markdown_pipeline",
]

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "**/*.logic.md"


def load_documents(paths: Iterable[Path]) -> list[Document]:
    """Read markdown files into documents, in the order given.

    Raises:
        OSError: If a file cannot be read
    """
    docs = []
    for path in paths:
        text = Path(path).read_text(encoding="utf-8")
        docs.append(markdown_to_document(text, Path(path).name))
    return docs


def evaluate_documents(
    documents: Iterable[Document],
    max_iterations: int = MAX_ITERATIONS,
) -> Program:
    """Build, validate and evaluate the program for ``documents``.

    Returns:
        The evaluated program

    Raises:
        DatalogError: If validation or evaluation fails
    """
    program = build_program(documents)
    validate(program)
    return FixpointEvaluator(max_iterations=max_iterations).evaluate(program)


def run_markdown_pipeline(
    root: Path,
    pattern: str = DEFAULT_PATTERN,
    max_iterations: int = MAX_ITERATIONS,
) -> str:
    """Evaluate every markdown document under ``root`` matching ``pattern``.

    Args:
        root: Directory to search
        pattern: Glob pattern relative to ``root``
        max_iterations: Evaluation round cap

    Returns:
        The rendered program followed by its inferred statements
    """
    paths = sorted(Path(root).glob(pattern))
    logger.info(f"Found {len(paths)} documents under {root} matching {pattern}")

    try:
        docs = load_documents(paths)
        evaluated = evaluate_documents(docs, max_iterations=max_iterations)
    except (OSError, ValidationError, DatalogError) as e:
        logger.error(f"Markdown pipeline failed: {e}")
        raise

    return format_program(evaluated)
