"""Read decision documents from markdown.

Recognized markdown:

    import backlog from './backlog.md';

    - [x] Postgres is an open source database     <- assumption, true
    - [ ] Postgres works with Node.js             <- assumption, false

    - We decided to go for Postgres               <- inference
      - `1 & 2`                                   <- its dependencies
    - We'll add a task to the backlog
      - `3 & $backlog`                            <- $name refers to a document

Assumptions are numbered from 1 in reading order; an inference takes the
next number after everything read before it.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .schema import Assumption, Document, Inference

__all__ = [
    "markdown_to_document",
    "parse_dependencies",
]

logger = logging.getLogger(__name__)

_IMPORT_RE = re.compile(r"""^\s*import\s+[\w$]+\s+from\s+['"]\./([\w.-]+?)\.md['"]\s*;?\s*$""")
_LIST_ITEM_RE = re.compile(r"^(\s*)[-*+]\s+(.*?)\s*$")
_TASK_RE = re.compile(r"^\[([ xX])\]\s+(.*)$")
_CODE_RE = re.compile(r"`([^`]*)`")


def parse_dependencies(expression: str) -> list[int | str]:
    """Parse a dependency expression like ``1 & 2 & $backlog``.

    Numbers become ints, ``$name`` becomes the document name, anything
    else is kept as a string id.
    """
    deps: list[int | str] = []
    for part in expression.split("&"):
        part = part.strip()
        if not part:
            continue
        if part.startswith("$"):
            deps.append(part[1:])
        elif part.isdigit():
            deps.append(int(part))
        else:
            deps.append(part)
    return deps


def markdown_to_document(markdown: str, file_name: str = "doc.md") -> Document:
    """Convert markdown text into a Document.

    Args:
        markdown: Markdown source
        file_name: File name; the document name is this without ``.md``

    Returns:
        The parsed Document
    """
    name = Path(file_name).name
    if name.endswith(".md"):
        name = name[: -len(".md")]

    imports: list[str] = []
    assumptions: list[Assumption] = []
    inferences: list[dict] = []

    top_indent: int | None = None
    current: dict | None = None

    for line in markdown.splitlines():
        m = _IMPORT_RE.match(line)
        if m:
            imports.append(m.group(1))
            continue

        m = _LIST_ITEM_RE.match(line)
        if not m:
            if line.strip():
                # Any other block ends the current list
                top_indent, current = None, None
            continue

        indent, text = len(m.group(1).expandtabs(4)), m.group(2)
        nested = top_indent is not None and indent > top_indent
        if not nested:
            top_indent, current = indent, None

        task = _TASK_RE.match(text)
        if task:
            assumptions.append(Assumption(
                id=len(assumptions) + 1,
                value=task.group(1) != " ",
                text=task.group(2).strip(),
            ))
            continue

        if nested:
            code = _CODE_RE.search(text)
            if current is not None and code and current["depends_on"] is None:
                current["depends_on"] = parse_dependencies(code.group(1))
            continue

        current = {
            "id": len(assumptions) + len(inferences) + 1,
            "text": text,
            "depends_on": None,
        }
        inferences.append(current)

    doc = Document(
        name=name,
        imports=imports,
        assumptions=assumptions,
        infer=[
            Inference(id=i["id"], text=i["text"], depends_on=i["depends_on"] or [])
            for i in inferences
        ],
    )
    logger.debug(
        f"Read document '{doc.name}': {len(doc.assumptions)} assumptions, "
        f"{len(doc.infer)} inferences"
    )
    return doc
