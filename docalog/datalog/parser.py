"""Parser for the textual Datalog syntax.

Accepted syntax:

    % comments run to the end of the line
    parent(alice, bob).
    parent("Bob Smith", 'carol').
    flag(x, true).
    ancestor(X, Y) :- parent(X, Y).
    ancestor(X, Y) :- parent(X, Z), ancestor(Z, Y).
    orphan(X) :- person(X), not parent(P, X).

Lowercase identifiers and quoted strings are string constants, ``true`` and
``false`` are booleans and identifiers starting with an uppercase letter
are variables. There is no anonymous variable; a leading underscore is
not accepted. Facts for one name collect into a single Relation and rules
for one name into a single Predicate.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator

from .errors import ParseError, ProgramConstructionError
from .terms import (
    BooleanConstant,
    Clause,
    Fact,
    Node,
    Predicate,
    Program,
    Relation,
    Rule,
    StringConstant,
    Term,
    Variable,
    is_ground,
)

__all__ = [
    "Token",
    "tokenize",
    "parse_program",
]

logger = logging.getLogger(__name__)

KEYWORDS = frozenset({"not", "true", "false"})

_TOKEN_SPEC = [
    ("ws", r"[ \t\r\n]+"),
    ("comment", r"%[^\n]*"),
    ("arrow", r":-"),
    ("comma", r","),
    ("lparen", r"\("),
    ("rparen", r"\)"),
    ("dot", r"\."),
    ("variable", r"[A-Z][A-Za-z0-9_]*"),
    ("identifier", r"[a-z][A-Za-z0-9_]*"),
    ("string", r"\"(?:\\.|[^\"\\])*\"|'(?:\\.|[^'\\])*'"),
]
_TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_SPEC))

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


@dataclass(frozen=True)
class Token:
    """A lexical token with its 1-based source position."""

    type: str
    value: str
    line: int
    column: int


def tokenize(source: str) -> list[Token]:
    """Split source text into tokens, dropping whitespace and comments.

    Keywords (``not``, ``true``, ``false``) get their own token type only
    when they make up a whole identifier, so ``nothing`` stays an identifier.

    Raises:
        ParseError: On a character that starts no token
    """
    tokens: list[Token] = []
    line, line_start = 1, 0
    pos = 0

    while pos < len(source):
        m = _TOKEN_RE.match(source, pos)
        if m is None:
            raise ParseError(f"Unexpected character {source[pos]!r}", line, pos - line_start + 1)

        kind = m.lastgroup
        value = m.group()
        if kind == "identifier" and value in KEYWORDS:
            kind = value
        if kind not in ("ws", "comment"):
            tokens.append(Token(kind, value, line, pos - line_start + 1))

        newlines = value.count("\n")
        if newlines:
            line += newlines
            line_start = pos + value.rindex("\n") + 1
        pos = m.end()

    return tokens


def _unquote(raw: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), raw[1:-1])


@dataclass
class _FactStatement:
    name: str
    terms: Fact
    line: int


@dataclass
class _RuleStatement:
    name: str
    args: tuple[Variable, ...]
    clauses: Rule
    line: int


class _Parser:
    """Recursive descent over the token list."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def statements(self) -> Iterator[_FactStatement | _RuleStatement]:
        while self._peek() is not None:
            yield self._statement()

    def _peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _advance(self) -> Token:
        tok = self._peek()
        if tok is None:
            last = self._tokens[-1] if self._tokens else None
            raise ParseError(
                "Unexpected end of input",
                last.line if last else 1,
                last.column + len(last.value) if last else 1,
            )
        self._pos += 1
        return tok

    def _expect(self, kind: str) -> Token:
        tok = self._advance()
        if tok.type != kind:
            raise ParseError(f"Expected {kind}, found {tok.value!r}", tok.line, tok.column)
        return tok

    def _accept(self, kind: str) -> Token | None:
        tok = self._peek()
        if tok is not None and tok.type == kind:
            self._pos += 1
            return tok
        return None

    def _statement(self) -> _FactStatement | _RuleStatement:
        name_tok = self._expect("identifier")
        terms = self._arguments()

        if self._accept("dot"):
            fact = tuple(t for _, t in terms)
            if not is_ground(fact):
                tok, term = next((tok, t) for tok, t in terms if isinstance(t, Variable))
                raise ParseError(
                    f"Fact '{name_tok.value}' must be ground, found variable {term.name}",
                    tok.line,
                    tok.column,
                )
            return _FactStatement(name_tok.value, fact, name_tok.line)

        self._expect("arrow")
        for tok, term in terms:
            if not isinstance(term, Variable):
                raise ParseError(
                    f"Rule head '{name_tok.value}' arguments must be variables, found {tok.value!r}",
                    tok.line,
                    tok.column,
                )
        clauses = [self._clause()]
        while self._accept("comma"):
            clauses.append(self._clause())
        self._expect("dot")

        args = tuple(t for _, t in terms if isinstance(t, Variable))
        return _RuleStatement(name_tok.value, args, tuple(clauses), name_tok.line)

    def _clause(self) -> Clause:
        negated = self._accept("not") is not None
        name_tok = self._expect("identifier")
        terms = self._arguments()
        return Clause(name_tok.value, tuple(t for _, t in terms), negated=negated)

    def _arguments(self) -> list[tuple[Token, Term]]:
        if not self._accept("lparen"):
            return []
        if self._accept("rparen"):
            return []
        args = [self._term()]
        while self._accept("comma"):
            args.append(self._term())
        self._expect("rparen")
        return args

    def _term(self) -> tuple[Token, Term]:
        tok = self._advance()
        if tok.type == "variable":
            return tok, Variable(tok.value)
        if tok.type == "identifier":
            return tok, StringConstant(tok.value)
        if tok.type == "string":
            return tok, StringConstant(_unquote(tok.value))
        if tok.type in ("true", "false"):
            return tok, BooleanConstant(tok.type == "true")
        raise ParseError(f"Expected a term, found {tok.value!r}", tok.line, tok.column)


def _align_rule(
    name: str,
    declared: tuple[Variable, ...],
    head: tuple[Variable, ...],
    clauses: Rule,
) -> Rule:
    """Rename a rule's variables so its head matches the declared head.

    Body variables that are not head variables but happen to share a
    declared head name get a fresh suffix.
    """
    if head == declared:
        return clauses
    if len(head) != len(declared):
        raise ProgramConstructionError(
            f"Rule head arity {len(head)} for '{name}' does not match declared arity {len(declared)}"
        )

    mapping: dict[str, str] = {}
    for h, d in zip(head, declared):
        if mapping.setdefault(h.name, d.name) != d.name:
            raise ProgramConstructionError(
                f"Rule head for '{name}' repeats variable {h.name} where the declared head does not"
            )
    if len(set(mapping.values())) != len(mapping):
        raise ProgramConstructionError(
            f"Rule head for '{name}' cannot be aligned with declared head "
            f"({', '.join(v.name for v in declared)})"
        )

    body_vars = list(dict.fromkeys(v for c in clauses for v in c.variables()))
    used = set(mapping.values()) | set(body_vars)
    taken = set(mapping.values())
    for var in body_vars:
        if var in mapping:
            continue
        if var in taken:
            suffix = 1
            while f"{var}_{suffix}" in used:
                suffix += 1
            mapping[var] = f"{var}_{suffix}"
            used.add(mapping[var])
        else:
            mapping[var] = var

    def rename(term: Term) -> Term:
        if isinstance(term, Variable):
            return Variable(mapping[term.name])
        return term

    return tuple(
        Clause(c.relation, tuple(rename(t) for t in c.terms), negated=c.negated) for c in clauses
    )


def parse_program(source: str) -> Program:
    """Parse source text into a Program with empty ``computed``.

    Args:
        source: Program text

    Returns:
        Program whose nodes appear in order of first mention

    Raises:
        ParseError: If the text is not well-formed
        ProgramConstructionError: If a name is used both for facts and
            rules, or facts/rule heads disagree on arity
    """
    facts: dict[str, list[Fact]] = {}
    heads: dict[str, tuple[Variable, ...]] = {}
    rules: dict[str, list[Rule]] = {}
    order: list[str] = []

    for stmt in _Parser(tokenize(source)).statements():
        if isinstance(stmt, _FactStatement):
            if stmt.name in rules:
                raise ProgramConstructionError(
                    f"Predicate and relation name conflict: {stmt.name} (line {stmt.line})"
                )
            rows = facts.get(stmt.name)
            if rows is None:
                rows = facts[stmt.name] = []
                order.append(stmt.name)
            elif len(rows[0]) != len(stmt.terms):
                raise ProgramConstructionError(
                    f"Fact arity {len(stmt.terms)} for '{stmt.name}' does not match "
                    f"earlier arity {len(rows[0])} (line {stmt.line})"
                )
            rows.append(stmt.terms)
        else:
            if stmt.name in facts:
                raise ProgramConstructionError(
                    f"Predicate and relation name conflict: {stmt.name} (line {stmt.line})"
                )
            if stmt.name not in rules:
                heads[stmt.name] = stmt.args
                rules[stmt.name] = []
                order.append(stmt.name)
            rules[stmt.name].append(_align_rule(stmt.name, heads[stmt.name], stmt.args, stmt.clauses))

    nodes: dict[str, Node] = {}
    for name in order:
        if name in facts:
            nodes[name] = Relation(tuple(facts[name]))
        else:
            nodes[name] = Predicate(heads[name], tuple(rules[name]))

    logger.debug(f"Parsed {len(nodes)} nodes ({sum(len(r) for r in rules.values())} rules)")
    return Program(nodes=nodes)
