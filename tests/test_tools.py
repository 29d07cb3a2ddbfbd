"""Tests for the dependency tools."""

from taskdeps.errors import ErrorCode
from taskdeps.tools import (
    add_dependency,
    fix_dependencies,
    list_tasks,
    next_tasks,
    remove_dependency,
    set_task_status,
    validate_dependencies,
)
from tests.conftest import MockContext, make_subtask, make_task


class TestValidateDependencies:
    """Tests for validate_dependencies."""

    def test_valid(self, mock_context):
        mock_context.write_tasks([make_task(1), make_task(2, dependencies=[1])])

        result = validate_dependencies()

        assert result["success"] is True
        assert result["data"]["valid"] is True
        assert result["data"]["message"] == "All dependencies are valid"

    def test_reports_findings_without_writing(self, mock_context):
        path = mock_context.write_tasks([make_task(1, dependencies=[1, 5])])
        before = path.read_text()

        result = validate_dependencies()

        data = result["data"]
        assert data["valid"] is False
        assert data["summary"]["dangling_reference"] == 1
        assert data["summary"]["self_reference"] == 1
        assert data["message"] == "Found 2 dependency issues"
        assert path.read_text() == before

    def test_missing_file(self, mock_context):
        result = validate_dependencies()

        assert result["success"] is False
        assert result["error"]["code"] == ErrorCode.TASKS_FILE_ERROR
        assert result["error"]["tool_name"] == "validate_dependencies"

    def test_explicit_file(self, mock_context):
        other = mock_context.project_root / "other.json"
        other.write_text('{"tasks": [{"id": 1, "title": "A", "dependencies": [4]}]}')

        result = validate_dependencies(file="other.json")

        assert result["data"]["valid"] is False


class TestFixDependencies:
    """Tests for fix_dependencies."""

    def test_fixes_and_saves(self, mock_context):
        mock_context.write_tasks([
            make_task(1, dependencies=[2]),
            make_task(2, dependencies=[3]),
            make_task(3, dependencies=[1]),
        ])

        result = fix_dependencies()

        data = result["data"]
        assert data["changed"] is True
        assert data["message"] == "Fixed 1 dependency issues"
        assert data["changes"][0]["message"] == "removed dependency 3 → 1 (breaks cycle 1 → 2 → 3 → 1)"
        assert mock_context.read_tasks()["tasks"][2]["dependencies"] == []

    def test_clean_file_not_rewritten(self, mock_context):
        path = mock_context.write_tasks([make_task(1)])
        before = path.read_text()

        result = fix_dependencies()

        assert result["data"]["message"] == "No dependency issues found"
        assert path.read_text() == before

    def test_flags_premature_completion(self, mock_context):
        mock_context.write_tasks([make_task(1), make_task(2, status="done", dependencies=[1])])

        result = fix_dependencies()

        data = result["data"]
        assert data["changed"] is False
        assert data["message"] == "No dependency issues found; 1 premature completions flagged"
        assert mock_context.read_tasks()["tasks"][1]["status"] == "done"

    def test_revert_premature_parameter(self, mock_context):
        mock_context.write_tasks([make_task(1), make_task(2, status="done", dependencies=[1])])

        result = fix_dependencies(revert_premature=True)

        assert result["data"]["changed"] is True
        assert mock_context.read_tasks()["tasks"][1]["status"] == "pending"

    def test_revert_premature_setting(self):
        with MockContext(revert_premature_completion=True, reset_status="review") as ctx:
            ctx.write_tasks([make_task(1), make_task(2, status="done", dependencies=[1])])

            fix_dependencies()

            assert ctx.read_tasks()["tasks"][1]["status"] == "review"


class TestEdgeTools:
    """Tests for add_dependency and remove_dependency."""

    def test_add(self, mock_context):
        mock_context.write_tasks([make_task(1), make_task(2)])

        result = add_dependency(id="2", depends_on="1")

        assert result["success"] is True
        assert result["data"]["message"] == "added dependency 2 → 1"
        assert mock_context.read_tasks()["tasks"][1]["dependencies"] == [1]

    def test_add_cycle_refused_without_writing(self, mock_context):
        path = mock_context.write_tasks([make_task(1), make_task(2, dependencies=[1])])
        before = path.read_text()

        result = add_dependency(id="1", depends_on="2")

        assert result["success"] is False
        assert result["error"]["code"] == ErrorCode.WOULD_CREATE_CYCLE
        assert result["error"]["recoverable"] is True
        assert path.read_text() == before

    def test_add_subtask_dependency(self, mock_context):
        mock_context.write_tasks([
            make_task(4, subtasks=[make_subtask(1), make_subtask(2)]),
        ])

        add_dependency(id="4.2", depends_on="4.1")

        assert mock_context.read_tasks()["tasks"][0]["subtasks"][1]["dependencies"] == [1]

    def test_remove(self, mock_context):
        mock_context.write_tasks([make_task(1), make_task(2, dependencies=[1])])

        result = remove_dependency(id="2", depends_on="1")

        assert result["data"]["message"] == "removed dependency 2 → 1"
        assert mock_context.read_tasks()["tasks"][1]["dependencies"] == []

    def test_remove_missing_edge(self, mock_context):
        mock_context.write_tasks([make_task(1), make_task(2)])

        result = remove_dependency(id="2", depends_on="1")

        assert result["error"]["code"] == ErrorCode.NODE_NOT_FOUND


class TestSetTaskStatus:
    """Tests for set_task_status."""

    def test_multiple_ids(self, mock_context):
        mock_context.write_tasks([
            make_task(1),
            make_task(2, subtasks=[make_subtask(1)]),
        ])

        result = set_task_status(id="1, 2.1", status="in-progress")

        assert result["data"]["updated"] == ["1", "2.1"]
        tasks = mock_context.read_tasks()["tasks"]
        assert tasks[0]["status"] == "in-progress"
        assert tasks[1]["subtasks"][0]["status"] == "in-progress"

    def test_premature_completion_refused(self, mock_context):
        mock_context.write_tasks([make_task(1), make_task(2, dependencies=[1])])

        result = set_task_status(id="2", status="done")

        assert result["error"]["code"] == ErrorCode.PREMATURE_COMPLETION
        assert mock_context.read_tasks()["tasks"][1]["status"] == "pending"

    def test_force(self, mock_context):
        mock_context.write_tasks([make_task(1), make_task(2, dependencies=[1])])

        result = set_task_status(id="2", status="done", force=True)

        assert result["success"] is True
        assert mock_context.read_tasks()["tasks"][1]["status"] == "done"

    def test_all_or_nothing(self, mock_context):
        path = mock_context.write_tasks([make_task(1)])
        before = path.read_text()

        result = set_task_status(id="1,9", status="in-progress")

        assert result["error"]["code"] == ErrorCode.NODE_NOT_FOUND
        assert path.read_text() == before

    def test_configured_statuses(self):
        with MockContext(statuses=["pending", "blocked", "done"]) as ctx:
            ctx.write_tasks([make_task(1)])

            assert set_task_status(id="1", status="blocked")["success"] is True
            result = set_task_status(id="1", status="review")

            assert result["error"]["code"] == ErrorCode.INVALID_STATUS

    def test_empty_id(self, mock_context):
        mock_context.write_tasks([make_task(1)])

        result = set_task_status(id=" , ", status="done")

        assert result["error"]["code"] == ErrorCode.NODE_NOT_FOUND


class TestNextTasks:
    """Tests for next_tasks."""

    def test_ready_tasks(self, mock_context):
        mock_context.write_tasks([
            make_task(1, status="done"),
            make_task(2, dependencies=[1]),
            make_task(3, dependencies=[2]),
            make_task(4),
        ])

        result = next_tasks()

        assert [t["id"] for t in result["data"]["tasks"]] == ["2", "4"]
        assert result["data"]["tasks"][0]["dependencies"] == ["1"]

    def test_limit(self, mock_context):
        mock_context.write_tasks([make_task(i) for i in range(1, 6)])

        result = next_tasks(limit=2)

        assert result["data"]["count"] == 2

    def test_nothing_ready(self, mock_context):
        mock_context.write_tasks([make_task(1, status="done")])

        assert next_tasks()["data"]["message"] == "No tasks are ready"


class TestListTasks:
    """Tests for list_tasks."""

    def test_lists_all_tasks(self, mock_context):
        mock_context.write_tasks([
            make_task(1, status="done"),
            make_task(2, dependencies=[1, 9]),
            make_task(3, status="review", dependencies=[2]),
        ])

        result = list_tasks()

        data = result["data"]
        assert result["success"] is True
        assert [t["id"] for t in data["tasks"]] == ["1", "2", "3"]
        # dangling 9 is not a resolved dependency
        assert data["tasks"][1]["dependencies"] == ["1"]
        assert data["by_status"] == {"done": 1, "pending": 1, "review": 1}
        assert data["message"] == "3 of 3 tasks listed"
        assert "subtasks" not in data["tasks"][0]

    def test_status_filter(self, mock_context):
        mock_context.write_tasks([
            make_task(1, status="done"),
            make_task(2),
            make_task(3, status="review"),
        ])

        data = list_tasks(status="pending, review")["data"]

        assert [t["id"] for t in data["tasks"]] == ["2", "3"]
        assert data["count"] == 2
        assert data["total"] == 3
        assert data["filter"] == ["pending", "review"]

    def test_with_subtasks(self, mock_context):
        mock_context.write_tasks([
            make_task(1, status="done"),
            make_task(
                2,
                subtasks=[make_subtask(1), make_subtask(2, status="done", dependencies=[1])],
            ),
        ])

        data = list_tasks(with_subtasks=True)["data"]

        subtasks = data["tasks"][1]["subtasks"]
        assert [s["id"] for s in subtasks] == ["2.1", "2.2"]
        assert subtasks[1]["status"] == "done"
        assert subtasks[1]["dependencies"] == ["2.1"]
        assert data["tasks"][0]["subtasks"] == []

    def test_does_not_write(self, mock_context):
        path = mock_context.write_tasks([make_task(1, dependencies=[1])])
        before = path.read_text()

        list_tasks()

        assert path.read_text() == before

    def test_duplicate_ids_reported(self, mock_context):
        mock_context.write_tasks([make_task(1), make_task(1)])

        result = list_tasks()

        assert result["success"] is False
        assert result["error"]["code"] == ErrorCode.TASKS_FILE_ERROR
        assert result["error"]["tool_name"] == "list_tasks"
