"""Tests for dependency validation."""

import pytest

from taskdeps.graph.findings import (
    Cycle,
    DanglingReference,
    DuplicateDependency,
    Finding,
    FindingKind,
    PrematureCompletion,
    SelfReference,
    count_by_kind,
)
from taskdeps.graph.identifiers import NodeId
from taskdeps.graph.validator import find_cycles, is_consistent, validate
from tests.conftest import build_document, make_subtask, make_task


class TestEdgeProblems:
    """Tests for dangling, self and duplicate detection."""

    def test_clean_document(self, chain_document):
        assert validate(chain_document) == []
        assert is_consistent(chain_document)

    def test_empty_document(self):
        assert validate(build_document()) == []

    def test_dangling_reference(self):
        document = build_document(make_task(1), make_task(7, dependencies=[3]))
        findings = validate(document)
        assert findings == [DanglingReference(node=NodeId(7), bad_id=3)]
        assert findings[0].message == "task 7 depends on 3 (task 3 does not exist)"

    def test_malformed_reference_is_dangling(self):
        document = build_document(make_task(1, dependencies=["abc", "1.2.3"]))
        findings = validate(document)
        assert [f.kind for f in findings] == [FindingKind.DANGLING_REFERENCE] * 2
        assert "malformed identifier 'abc'" in findings[0].message

    def test_missing_subtask_is_dangling(self, subtask_document):
        subtask_document.get(NodeId(2)).dependencies.append("4.9")
        assert validate(subtask_document) == [DanglingReference(node=NodeId(2), bad_id="4.9")]

    def test_self_reference_reported_once(self):
        document = build_document(make_task(1, dependencies=[1, "1"]))
        assert validate(document) == [SelfReference(node=NodeId(1))]

    def test_subtask_self_reference_by_local_id(self):
        document = build_document(make_task(2, subtasks=[make_subtask(1, dependencies=[1])]))
        assert validate(document) == [SelfReference(node=NodeId(2, 1))]

    def test_duplicate_dependency(self):
        document = build_document(make_task(1), make_task(2, dependencies=[1, "1", 1]))
        findings = validate(document)
        assert findings == [
            DuplicateDependency(node=NodeId(2), id=NodeId(1)),
            DuplicateDependency(node=NodeId(2), id=NodeId(1)),
        ]

    def test_duplicate_via_different_spellings(self, subtask_document):
        # On 4.1, "4.2" and 2 both name the sibling 4.2
        subtask_document.get(NodeId(4, 1)).dependencies.extend(["4.2", 2])
        findings = validate(subtask_document)
        assert [f.kind for f in findings] == [
            FindingKind.DUPLICATE_DEPENDENCY,
            FindingKind.CYCLE,
        ]

    def test_validation_does_not_mutate(self):
        document = build_document(make_task(1, dependencies=[1, 9]))
        before = document.to_dict()
        validate(document)
        assert document.to_dict() == before


class TestCycles:
    """Tests for cycle detection."""

    def test_three_node_cycle(self):
        document = build_document(
            make_task(1, dependencies=[2]),
            make_task(2, dependencies=[3]),
            make_task(3, dependencies=[1]),
        )
        cycles = find_cycles(document)
        assert cycles == [Cycle(nodes=(NodeId(1), NodeId(2), NodeId(3)))]
        assert cycles[0].closing_edge == (NodeId(3), NodeId(1))
        assert cycles[0].path() == "1 → 2 → 3 → 1"

    def test_two_node_cycle(self):
        document = build_document(make_task(1, dependencies=[2]), make_task(2, dependencies=[1]))
        assert find_cycles(document) == [Cycle(nodes=(NodeId(1), NodeId(2)))]

    def test_self_reference_is_not_a_cycle(self):
        document = build_document(make_task(1, dependencies=[1]))
        assert find_cycles(document) == []

    def test_acyclic_diamond(self):
        document = build_document(
            make_task(1),
            make_task(2, dependencies=[1]),
            make_task(3, dependencies=[1]),
            make_task(4, dependencies=[2, 3]),
        )
        assert find_cycles(document) == []

    def test_cycle_through_subtask(self):
        document = build_document(
            make_task(1, dependencies=["2.2"]),
            make_task(2, subtasks=[make_subtask(2, dependencies=[1])]),
        )
        assert find_cycles(document) == [Cycle(nodes=(NodeId(1), NodeId(2, 2)))]

    def test_local_id_shadowing_task_is_self_reference(self):
        document = build_document(
            make_task(1, dependencies=["2.1"]),
            make_task(2, subtasks=[make_subtask(1, dependencies=[1])]),
        )
        assert validate(document) == [SelfReference(node=NodeId(2, 1))]
        assert find_cycles(document) == []

    def test_independent_cycles(self):
        document = build_document(
            make_task(1, dependencies=[2]),
            make_task(2, dependencies=[1]),
            make_task(3, dependencies=[4]),
            make_task(4, dependencies=[3]),
        )
        assert find_cycles(document) == [
            Cycle(nodes=(NodeId(1), NodeId(2))),
            Cycle(nodes=(NodeId(3), NodeId(4))),
        ]

    def test_long_chain_does_not_recurse(self):
        tasks = [make_task(1)] + [make_task(i, dependencies=[i - 1]) for i in range(2, 3001)]
        document = build_document(*tasks)
        document.get(NodeId(1)).dependencies.append(3000)
        cycles = find_cycles(document)
        assert len(cycles) == 1
        assert len(cycles[0].nodes) == 3000


class TestPrematureCompletion:
    """Tests for premature completion reporting."""

    def test_done_with_pending_dependency(self):
        document = build_document(make_task(1), make_task(2, status="done", dependencies=[1]))
        findings = validate(document)
        assert findings == [
            PrematureCompletion(node=NodeId(2), blocking_id=NodeId(1), blocking_status="pending")
        ]
        assert findings[0].message == "task 2 is done but dependency 1 is pending"
        assert not findings[0].is_structural

    def test_structural_only_consistency(self):
        document = build_document(make_task(1), make_task(2, status="done", dependencies=[1]))
        assert not is_consistent(document)
        assert is_consistent(document, include_status=False)

    def test_findings_order(self):
        document = build_document(
            make_task(1, status="done", dependencies=[2]),
            make_task(2, dependencies=[1, 8]),
        )
        kinds = [f.kind for f in validate(document)]
        assert kinds == [
            FindingKind.DANGLING_REFERENCE,
            FindingKind.CYCLE,
            FindingKind.PREMATURE_COMPLETION,
        ]

    def test_count_by_kind(self):
        document = build_document(make_task(1, dependencies=[1, 9]))
        counts = count_by_kind(validate(document))
        assert counts["dangling_reference"] == 1
        assert counts["self_reference"] == 1
        assert counts["cycle"] == 0


class TestFindingTypes:
    """Tests for the finding classes themselves."""

    def test_base_finding_is_abstract(self):
        with pytest.raises(TypeError):
            Finding()

    def test_concrete_finding_message(self):
        finding = SelfReference(node=NodeId(3))

        assert isinstance(finding, Finding)
        assert finding.is_structural
        assert finding.to_dict()["kind"] == "self_reference"
        assert "3" in finding.message
