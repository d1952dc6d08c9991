"""Render programs and evaluation results back to Datalog source text.

Output of ``format_program`` parses back into an equivalent program:
string constants that would not lex as plain identifiers (or that collide
with a keyword) are double-quoted.
"""

from __future__ import annotations

import re
from typing import Sequence

from .terms import (
    BooleanConstant,
    Clause,
    Program,
    Relation,
    Rule,
    StringConstant,
    Term,
    Variable,
)

__all__ = [
    "format_term",
    "format_fact",
    "format_clause",
    "format_rule",
    "format_program",
]

_IDENTIFIER_RE = re.compile(r"[a-z][A-Za-z0-9_]*")
_KEYWORDS = frozenset({"not", "true", "false"})

INDENT = "    "


def format_term(term: Term) -> str:
    match term:
        case Variable(name=name):
            return name
        case BooleanConstant(value=value):
            return "true" if value else "false"
        case StringConstant(value=value):
            if _IDENTIFIER_RE.fullmatch(value) and value not in _KEYWORDS:
                return value
            escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
            return f'"{escaped}"'
        case _:
            raise TypeError(f"Unknown term: {term!r}")


def _format_atom(name: str, terms: Sequence[Term]) -> str:
    args = ", ".join(format_term(t) for t in terms)
    return f"{name}({args})"


def format_fact(name: str, fact: Sequence[Term]) -> str:
    """Render a computed fact as ``name(value, ...)`` without a trailing dot."""
    return _format_atom(name, fact)


def format_clause(clause: Clause) -> str:
    neg = "not " if clause.negated else ""
    return f"{neg}{_format_atom(clause.relation, clause.terms)}"


def format_rule(name: str, head: Sequence[Variable], rule: Rule) -> str:
    """Render one rule, one body clause per indented line."""
    body = f",\n{INDENT}".join(format_clause(c) for c in rule)
    return f"{_format_atom(name, head)} :-\n{INDENT}{body}."


def format_program(program: Program, include_computed: bool = True) -> str:
    """Render declared facts and rules, optionally followed by computed facts.

    Args:
        program: Program to render
        include_computed: Append the computed relations after a comment header

    Returns:
        Program text
    """
    sections: list[str] = []

    for name, node in program.nodes.items():
        if isinstance(node, Relation):
            lines = [f"{format_fact(name, fact)}." for fact in node]
        else:
            lines = [format_rule(name, node.args, rule) for rule in node.rules]
        if lines:
            sections.append("\n".join(lines))

    if include_computed:
        lines = ["% Inferred statements:"]
        for name, rel in program.computed.items():
            lines.extend(format_fact(name, fact) for fact in rel)
        sections.append("\n".join(lines))

    return "\n\n".join(sections) + "\n"
