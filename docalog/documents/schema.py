"""Pydantic models for decision documents.

A document records boolean assumptions and inferences that depend on
assumptions, on other inferences of the same document, or on whole
imported documents. Documents compile to a fixed Datalog program (see
``docalog.documents.builder``).

Example document (JSON):
    {
        "name": "db-decision",
        "import": ["backlog"],
        "assumptions": [
            {"id": 1, "value": true, "text": "Postgres is an open source database"},
            {"id": 2, "value": true, "text": "Postgres is free"}
        ],
        "infer": [
            {"id": 3, "text": "We decided to go for Postgres", "dependsOn": [1, 2]},
            {"id": 4, "text": "We'll add a task to the backlog", "dependsOn": [3, "backlog"]}
        ]
    }
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "Assumption",
    "Inference",
    "Document",
    "InferenceStatus",
]


class InferenceStatus(str, Enum):
    """Three-valued outcome of checking an inference."""

    TRUE = "true"
    FALSE = "false"
    PARTIAL = "partial"


class Assumption(BaseModel):
    """A boolean assumption, e.g. a checked or unchecked task-list item."""

    id: int | str = Field(..., description="Identifier, unique within the document")
    value: bool = Field(..., description="Whether the assumption holds")
    text: str = Field(default="", description="Human-readable statement")


class Inference(BaseModel):
    """A conclusion drawn from assumptions, inferences or other documents.

    Dependencies are ids of assumptions/inferences in the same document or
    names of other documents.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int | str = Field(..., description="Identifier, unique within the document")
    text: str = Field(default="", description="Human-readable statement")
    depends_on: list[int | str] = Field(
        default_factory=list,
        alias="dependsOn",
        description="Assumption/inference ids or document names this inference relies on",
    )


class Document(BaseModel):
    """A named collection of assumptions and inferences."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Document name, usually the file name without .md")
    imports: list[str] = Field(
        default_factory=list,
        alias="import",
        description="Names of documents this one imports",
    )
    assumptions: list[Assumption] = Field(default_factory=list)
    infer: list[Inference] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure document name is not blank."""
        if not v.strip():
            raise ValueError("Document name must not be empty")
        return v

    def local_ids(self) -> set[str]:
        """Ids of assumptions and inferences, as strings."""
        return {str(a.id) for a in self.assumptions} | {str(i.id) for i in self.infer}
