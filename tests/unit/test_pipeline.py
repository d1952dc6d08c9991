"""Unit tests for the markdown pipeline."""

import logging

import pytest

from docalog.datalog import UnknownRelationError
from docalog.pipeline import (
    DEFAULT_PATTERN,
    evaluate_documents,
    load_documents,
    run_markdown_pipeline,
)


BACKLOG_MD = "- [ ] We use Jira for our backlog\n"

DB_DECISION_MD = """
import backlog from './backlog.md';

- [x] Postgres is an open source database
- [x] Postgres is free
- [x] Postgres works with Node.js

- We decided to go for Postgres
  - `1 & 2 & 3`
- We'll add a task to the backlog
  - `4 & $backlog`
"""


@pytest.fixture
def doc_dir(tmp_path):
    (tmp_path / "backlog.md").write_text(BACKLOG_MD)
    sub = tmp_path / "decisions"
    sub.mkdir()
    (sub / "db-decition.md").write_text(DB_DECISION_MD)
    return tmp_path


class TestLoadDocuments:
    """Test reading files into documents."""

    def test_names_from_file_names(self, doc_dir):
        docs = load_documents([doc_dir / "backlog.md", doc_dir / "decisions" / "db-decition.md"])
        assert [d.name for d in docs] == ["backlog", "db-decition"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_documents([tmp_path / "missing.md"])


class TestRunMarkdownPipeline:
    """Test the end-to-end pipeline."""

    def test_renders_inferred_statements(self, doc_dir):
        output = run_markdown_pipeline(doc_dir, pattern="**/*.md")

        program_text, _, inferred = output.partition("% Inferred statements:\n")
        assert 'doc("db-decition").' in program_text
        assert "inference_check_stratified(Doc, Id, Value) :-" in program_text

        lines = inferred.splitlines()
        assert 'inference_check_stratified("db-decition", "4", true)' in lines
        assert 'inference_check_stratified("db-decition", "5", partial)' in lines

    def test_default_pattern(self, doc_dir):
        """Only *.logic.md files are picked up by default."""
        (doc_dir / "notes.logic.md").write_text("- [x] Noted\n")
        output = run_markdown_pipeline(doc_dir)
        assert DEFAULT_PATTERN == "**/*.logic.md"
        assert 'doc("notes.logic").' in output
        assert "db-decition" not in output

    def test_no_documents(self, tmp_path):
        output = run_markdown_pipeline(tmp_path)
        assert output.endswith("% Inferred statements:\n")

    def test_failure_logged_and_raised(self, doc_dir, caplog, monkeypatch):
        def broken_validate(program):
            raise UnknownRelationError("inference_check", "nowhere")

        monkeypatch.setattr("docalog.pipeline.validate", broken_validate)
        with caplog.at_level(logging.ERROR, logger="docalog.pipeline"):
            with pytest.raises(UnknownRelationError):
                run_markdown_pipeline(doc_dir, pattern="**/*.md")
        assert "Markdown pipeline failed" in caplog.text


class TestEvaluateDocuments:
    """Test evaluation without touching the filesystem."""

    def test_evaluate_documents(self, doc_dir):
        docs = load_documents(sorted(doc_dir.glob("**/*.md")))
        program = evaluate_documents(docs)
        assert "inference_check_stratified" in program.computed
