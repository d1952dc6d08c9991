"""Unit tests for the fixpoint evaluator.

Tests cover:
- Transitive closure
- Negation-as-failure and retraction
- Round-by-round behavior (monotonicity, confluence)
- Iteration cap
- Purity of evaluate
"""

from itertools import permutations

import pytest

from docalog.datalog import (
    ArityMismatchError,
    Clause,
    EvaluationError,
    ExceededIterationsError,
    FixpointEvaluator,
    Predicate,
    Program,
    Relation,
    StringConstant,
    Variable,
    evaluate,
    parse_program,
    validate,
)


def s(*values):
    """Fact of string constants."""
    return tuple(StringConstant(v) for v in values)


def facts(relation):
    return {tuple(str(t) for t in fact) for fact in relation}


def reorder(program, names):
    return Program(nodes={name: program.nodes[name] for name in names})


ANCESTOR_SOURCE = """
parent(alice, bob).
parent(bob, charlie).
parent(charlie, diana).
ancestor(X, Y) :- parent(X, Y).
ancestor(X, Y) :- parent(X, Z), ancestor(Z, Y).
"""


@pytest.fixture
def ancestor_program():
    program = parse_program(ANCESTOR_SOURCE)
    validate(program)
    return program


# ==============================================================================
# Positive Programs
# ==============================================================================


class TestTransitiveClosure:
    """Test recursive rule evaluation."""

    def test_ancestor(self, ancestor_program):
        result = evaluate(ancestor_program)
        assert facts(result.computed["ancestor"]) == {
            ("alice", "bob"),
            ("bob", "charlie"),
            ("charlie", "diana"),
            ("alice", "charlie"),
            ("bob", "diana"),
            ("alice", "diana"),
        }

    def test_only_predicates_computed(self, ancestor_program):
        result = evaluate(ancestor_program)
        assert list(result.computed) == ["ancestor"]
        assert dict(result.nodes) == dict(ancestor_program.nodes)

    def test_input_not_mutated(self, ancestor_program):
        nodes_before = dict(ancestor_program.nodes)
        evaluate(ancestor_program)
        assert dict(ancestor_program.nodes) == nodes_before
        assert dict(ancestor_program.computed) == {}

    def test_constant_in_rule_body(self):
        program = parse_program("""
            parent(alice, bob).
            parent(carol, dave).
            child_of_alice(Y) :- parent(alice, Y).
        """)
        result = evaluate(program)
        assert facts(result.computed["child_of_alice"]) == {("bob",)}

    def test_empty_predicate_is_not_stored(self):
        """A predicate that never derives anything stays out of computed."""
        program = parse_program("""
            p(a).
            q(X) :- p(X), p(b).
        """)
        result = evaluate(program)
        assert "q" not in result.computed

    def test_seeded_computed_is_recomputed(self, ancestor_program):
        """A stale prior result is replaced by the fixpoint."""
        stale = Relation((s("nobody", "nowhere"),))
        result = evaluate(ancestor_program.with_computed({"ancestor": stale}))
        assert ("nobody", "nowhere") not in facts(result.computed["ancestor"])
        assert len(result.computed["ancestor"]) == 6


# ==============================================================================
# Negation
# ==============================================================================


class TestNegation:
    """Test negation-as-failure."""

    def test_simple_negation(self):
        program = parse_program("""
            p(a).
            p(b).
            q(b).
            a(X) :- p(X), not q(X).
        """)
        result = evaluate(program)
        assert facts(result.computed["a"]) == {("a",)}

    @pytest.mark.parametrize("order", [
        ["p", "q", "s"],
        ["p", "s", "q"],
        ["s", "q", "p"],
    ])
    def test_negation_through_recursion(self, order):
        """s stays empty once q has absorbed p, whatever the declared order."""
        program = parse_program("""
            p(a).
            q(X) :- p(X).
            s(X) :- p(X), not q(X).
        """)
        result = evaluate(reorder(program, order))
        assert "s" not in result.computed
        assert facts(result.computed["q"]) == {("a",)}

    def test_stale_fact_retracted(self):
        """A fact derived against an incomplete negated relation is dropped later."""
        program = parse_program("""
            p(a).
            p(b).
            seed(b).
            q(X) :- p(X), seed(X).
            q(X) :- p(X), r(X).
            s(X) :- p(X), not q(X).
            r(X) :- p(X).
        """)
        snapshots = list(FixpointEvaluator().rounds(program))

        assert facts(snapshots[0]["q"]) == {("b",)}
        assert facts(snapshots[0]["s"]) == {("a",)}
        assert len(snapshots[-1]["s"]) == 0
        assert facts(snapshots[-1]["q"]) == {("a",), ("b",)}

    def test_negating_underived_predicate_blocks(self):
        """A rule negating a predicate that never derives anything yields nothing."""
        program = parse_program("""
            p(a).
            z(b).
            q(X) :- p(X), z(X).
            a(X) :- p(X), not q(X).
        """)
        result = evaluate(program)
        assert dict(result.computed) == {}

    def test_self_negation_settles_unresolved(self):
        """p never resolves, so its rule derives nothing and one round suffices."""
        program = parse_program("""
            d(a).
            p(X) :- d(X), not p(X).
        """)
        evaluator = FixpointEvaluator()
        result = evaluator.evaluate(program)
        assert "p" not in result.computed
        assert evaluator.iterations_run == 1

    def test_negated_constant_pattern(self):
        program = parse_program("""
            person(alice).
            person(bob).
            banned(bob, true).
            allowed(X) :- person(X), not banned(X, true).
        """)
        result = evaluate(program)
        assert facts(result.computed["allowed"]) == {("alice",)}


# ==============================================================================
# Rounds
# ==============================================================================


class TestRounds:
    """Test round-by-round evaluation."""

    def test_monotone_without_negation(self, ancestor_program):
        """Derived relations never shrink in a negation-free program."""
        sizes = {}
        for snapshot in FixpointEvaluator().rounds(ancestor_program):
            for name, rel in snapshot.items():
                assert len(rel) >= sizes.get(name, 0)
                sizes[name] = len(rel)

    def test_snapshots_are_read_only(self, ancestor_program):
        snapshot = next(iter(FixpointEvaluator().rounds(ancestor_program)))
        with pytest.raises(TypeError):
            snapshot["ancestor"] = Relation()

    def test_confluence_without_negation(self):
        """Every declared order reaches the same fixpoint."""
        program = parse_program("""
            edge(a, b).
            edge(b, c).
            edge(c, a).
            reach(X, Y) :- edge(X, Y).
            reach(X, Y) :- edge(X, Z), reach(Z, Y).
            cyclic(X) :- reach(X, X).
        """)
        results = set()
        for order in permutations(program.nodes):
            result = evaluate(reorder(program, order))
            results.add(frozenset(
                (name, frozenset(rel.facts)) for name, rel in result.computed.items()
            ))
        assert len(results) == 1

    def test_iterations_run(self, ancestor_program):
        evaluator = FixpointEvaluator()
        evaluator.evaluate(ancestor_program)
        assert evaluator.iterations_run > 1


# ==============================================================================
# Iteration Cap
# ==============================================================================


class TestIterationCap:
    """Test the iteration cap."""

    @pytest.fixture
    def oscillating(self):
        """p flips between empty and {a} once it starts out resolvable."""
        return Program(
            nodes={
                "d": Relation((s("a"),)),
                "p": Predicate(
                    (Variable("X"),),
                    ((Clause("d", (Variable("X"),)), Clause("p", (Variable("X"),), negated=True)),),
                ),
            },
            computed={"p": Relation()},
        )

    def test_exceeded_iterations(self, oscillating):
        with pytest.raises(ExceededIterationsError) as exc_info:
            evaluate(oscillating, max_iterations=10)
        assert exc_info.value.max_iterations == 10
        assert isinstance(exc_info.value, EvaluationError)

    def test_no_partial_result(self, oscillating):
        result = None
        with pytest.raises(ExceededIterationsError):
            result = FixpointEvaluator(max_iterations=5).evaluate(oscillating)
        assert result is None
        assert dict(oscillating.computed) == {"p": Relation()}

    def test_converging_on_last_round(self, ancestor_program):
        """A cap equal to the rounds needed is enough.

        The last allowed round may be the change-free one.
        """
        evaluator = FixpointEvaluator()
        evaluator.evaluate(ancestor_program)
        needed = evaluator.iterations_run

        result = FixpointEvaluator(max_iterations=needed).evaluate(ancestor_program)
        assert len(result.computed["ancestor"]) == 6

        with pytest.raises(ExceededIterationsError):
            FixpointEvaluator(max_iterations=needed - 1).evaluate(ancestor_program)

    def test_invalid_cap(self):
        with pytest.raises(ValueError, match="must be positive"):
            FixpointEvaluator(max_iterations=0)


# ==============================================================================
# Arity
# ==============================================================================


class TestArityMismatch:
    """Test clauses whose arity differs from their relation."""

    def test_evaluate_raises(self):
        program = parse_program("""
            p(a).
            q(X) :- p(X, Y).
        """)
        validate(program)
        with pytest.raises(ArityMismatchError) as exc_info:
            evaluate(program)
        assert exc_info.value.pattern_arity == 2
        assert exc_info.value.row_arity == 1

    def test_mismatch_against_derived_relation(self):
        program = parse_program("""
            p(a).
            q(X) :- p(X).
            r(X) :- q(X, X).
        """)
        with pytest.raises(ArityMismatchError):
            evaluate(program)
