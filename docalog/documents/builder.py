"""Compile documents into a fixed-shape Datalog program.

The generated program exposes:

1. Base relations
   - doc(Doc)
   - assumption(Doc, Id, Value)
   - inference(Doc, Id)
   - inference_dependsOn(Doc, Id, Dependency)
   - equal(A, B) for true, false and "partial"

2. Predicates
   - inference_check(Doc, Id, Value): one fact per truth value reachable
     through the inference's dependencies
   - doc_check(Doc, Value): truth values of a document's assumptions
   - inference_check_mixed(Doc, Id): the inference reaches both values
   - inference_check_stratified(Doc, Id, Value): true, false or "partial"

An inference whose dependencies are all true checks as true, all false as
false, and a mix of both as "partial". The true and false branches negate
inference_check_mixed, which only resolves once some inference is mixed.
When no inference in the whole program is mixed, the stratified predicate
derives nothing at all.
"""

from __future__ import annotations

import logging
from typing import Iterable

from docalog.datalog.terms import (
    BooleanConstant,
    Clause,
    Node,
    Predicate,
    Program,
    Relation,
    StringConstant,
    Term,
    Variable,
)

from .schema import Document, InferenceStatus

__all__ = [
    "build_program",
    "inference_statuses",
]

logger = logging.getLogger(__name__)

PARTIAL = "partial"


def _v(name: str) -> Variable:
    return Variable(name)


def _s(value: int | str) -> StringConstant:
    return StringConstant(str(value))


def _b(value: bool) -> BooleanConstant:
    return BooleanConstant(value)


def _c(relation: str, *terms: Term, negated: bool = False) -> Clause:
    return Clause(relation, terms, negated=negated)


def build_program(documents: Iterable[Document]) -> Program:
    """Build the inference-checking program for a set of documents.

    Args:
        documents: Documents to include

    Returns:
        Program with empty ``computed``, ready for validation and evaluation
    """
    docs = list(documents)
    doc_names = {d.name for d in docs}
    _warn_unresolved_dependencies(docs, doc_names)

    nodes: dict[str, Node] = {}

    nodes["doc"] = Relation(tuple((_s(d.name),) for d in docs))

    nodes["assumption"] = Relation(tuple(
        (_s(d.name), _s(a.id), _b(a.value))
        for d in docs
        for a in d.assumptions
    ))

    nodes["inference"] = Relation(tuple(
        (_s(d.name), _s(i.id))
        for d in docs
        for i in d.infer
    ))

    nodes["inference_dependsOn"] = Relation(tuple(
        (_s(d.name), _s(i.id), _s(dep))
        for d in docs
        for i in d.infer
        for dep in i.depends_on
    ))

    doc, id_, dep, value = _v("Doc"), _v("Id"), _v("DependOnId"), _v("Value")
    inference_head = [
        _c("doc", doc),
        _c("inference", doc, id_),
        _c("inference_dependsOn", doc, id_, dep),
    ]

    nodes["inference_check"] = Predicate(
        (doc, id_, value),
        (
            # Depends on an assumption of the same document
            (*inference_head, _c("assumption", doc, dep, value)),
            # Depends on another inference of the same document
            (*inference_head, _c("inference", doc, dep), _c("inference_check", doc, dep, value)),
            # Depends on a whole (imported) document
            (*inference_head, _c("doc", dep), _c("doc_check", dep, value)),
        ),
    )

    nodes["doc_check"] = Predicate(
        (doc, value),
        ((_c("doc", doc), _c("assumption", doc, _v("Assumption"), value)),),
    )

    nodes["inference_check_mixed"] = Predicate(
        (doc, id_),
        ((
            _c("inference_check", doc, id_, _b(True)),
            _c("inference_check", doc, id_, _b(False)),
        ),),
    )

    nodes["equal"] = Relation((
        (_b(True), _b(True)),
        (_b(False), _b(False)),
        (_s(PARTIAL), _s(PARTIAL)),
    ))

    nodes["inference_check_stratified"] = Predicate(
        (doc, id_, value),
        (
            (
                _c("inference_check", doc, id_, _b(True)),
                _c("inference_check_mixed", doc, id_, negated=True),
                _c("equal", value, _b(True)),
            ),
            (
                _c("inference_check", doc, id_, _b(False)),
                _c("inference_check_mixed", doc, id_, negated=True),
                _c("equal", value, _b(False)),
            ),
            (
                _c("inference_check_mixed", doc, id_),
                _c("equal", value, _s(PARTIAL)),
            ),
        ),
    )

    logger.debug(f"Built program for {len(docs)} documents")
    return Program(nodes=nodes)


def _warn_unresolved_dependencies(docs: list[Document], doc_names: set[str]) -> None:
    for d in docs:
        local = d.local_ids()
        for inf in d.infer:
            for dep in inf.depends_on:
                key = str(dep)
                if key in local or key in doc_names:
                    continue
                logger.warning(
                    f"Inference {inf.id} in document '{d.name}' depends on unknown '{key}'"
                )
        for imported in d.imports:
            if imported not in doc_names:
                logger.warning(f"Document '{d.name}' imports unknown document '{imported}'")


def inference_statuses(program: Program) -> dict[tuple[str, str], InferenceStatus]:
    """Read the three-valued check result of every inference.

    Args:
        program: An evaluated program produced from ``build_program``

    Returns:
        Mapping of (document name, inference id) to its status
    """
    statuses: dict[tuple[str, str], InferenceStatus] = {}
    relation = program.computed.get("inference_check_stratified")
    if relation is None:
        return statuses

    for doc, id_, value in relation:
        if isinstance(value, BooleanConstant):
            status = InferenceStatus.TRUE if value.value else InferenceStatus.FALSE
        else:
            status = InferenceStatus(str(value))
        key = (str(doc), str(id_))
        if statuses.get(key, status) != status:
            status = InferenceStatus.PARTIAL
        statuses[key] = status

    return statuses
