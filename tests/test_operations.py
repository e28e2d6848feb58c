"""Tests for the operation command table."""

from records.core.entity_store import KEEP
from records.core.filters import GroupFilter, SortKey, SortOrder
from records.core.operations import OPERATIONS, OperationResult, run_operation


class TestDispatch:
    """Tests for run_operation."""

    def test_unknown_operation(self, store):
        result = run_operation(store, "student.fly")
        assert not result.success
        assert "student.fly" in result.message

    def test_errors_become_failed_results(self, store):
        """Core errors never escape run_operation."""
        result = run_operation(store, "student.delete", student_id=5)
        assert not result.success
        assert result.message == "Студент не найден: 5"
        assert not result.mutated

    def test_validation_error_message(self, store):
        result = run_operation(store, "group.add", name="  ")
        assert result.message == "Поле не может быть пустым."
        assert store.groups == ()

    def test_every_operation_is_callable(self):
        assert all(callable(handler) for handler in OPERATIONS.values())
        assert "journal.matrix" in OPERATIONS


class TestMutations:
    """Tests for mutating handlers."""

    def test_add_student_with_new_group(self, store):
        result = run_operation(store, "student.add", name="Анна", new_group_name="ИВТ-21")
        assert result.success and result.mutated
        assert result.message == "Создана группа с ID 1.\nДобавлен студент с ID 1."
        assert store.get_student(1).group_id == 1

    def test_add_student_blank_name_creates_nothing(self, store):
        """The new group is not created when the student name is invalid."""
        result = run_operation(store, "student.add", name=" ", new_group_name="G")
        assert not result.success
        assert store.groups == ()

    def test_add_student_to_group(self, sample_store):
        result = run_operation(sample_store, "group.add_student", group_id=2, name="Новиков")
        assert result.success
        assert sample_store.get_student(result.data["student_id"]).group_id == 2

    def test_add_student_to_missing_group(self, sample_store):
        result = run_operation(sample_store, "group.add_student", group_id=9, name="X")
        assert not result.success
        assert len(sample_store.students) == 4

    def test_noop_edit_not_mutated(self, sample_store):
        """Unchanged edits succeed but do not ask for a save."""
        result = run_operation(sample_store, "student.edit", student_id=1, name=KEEP)
        assert result.success
        assert not result.mutated

    def test_delete_reports_cascade(self, sample_store):
        result = run_operation(sample_store, "student.delete", student_id=1)
        assert result.message == "Студент удален. Удалено связанных оценок: 3."
        assert result.data["cascade"].affected == 3

    def test_delete_group_message(self, sample_store):
        result = run_operation(sample_store, "group.delete", group_id=1)
        assert result.message == "Группа удалена. Студентов обновлено: 2."

    def test_add_grade_reports_attempt(self, sample_store):
        result = run_operation(sample_store, "grade.add", student_id=1, subject_id=1, value=5)
        assert result.message == "Добавлена оценка с ID 7 (попытка 3)."
        assert result.data["grade"].attempt == 3

    def test_add_grade_out_of_range(self, sample_store):
        result = run_operation(sample_store, "grade.add", student_id=1, subject_id=1, value=7)
        assert not result.success
        assert len(sample_store.grades) == 6


class TestViews:
    """Tests for read-only handlers."""

    def test_view_result_carries_lines(self, sample_store):
        result = run_operation(sample_store, "report.overall")
        assert result.success and not result.mutated
        assert result.lines == result.data["view"].render()

    def test_search(self, sample_store):
        result = run_operation(
            sample_store,
            "student.search",
            group_filter=GroupFilter.specific(1),
            sort_key=SortKey.AVERAGE,
            sort_order=SortOrder.DESC,
        )
        assert [r.student.id for r in result.data["results"]] == [1, 2]
        assert result.lines[0] == "Результаты (2):"

    def test_top_out_of_range_fails(self, sample_store):
        result = run_operation(sample_store, "report.top", n=10)
        assert not result.success

    def test_details(self, sample_store):
        result = run_operation(sample_store, "student.details")
        assert result.lines[0] == "Список студентов:"

    def test_journal_by_student_unknown(self, sample_store):
        result = run_operation(sample_store, "journal.by_student", student_id=99)
        assert result.message == "Студент не найден: 99"


class TestOperationResult:
    """Tests for OperationResult constructors."""

    def test_ok_and_fail(self):
        ok = OperationResult.ok("done", mutated=True, x=1)
        assert ok.success and ok.mutated and ok.data == {"x": 1}
        fail = OperationResult.fail("nope")
        assert not fail.success and fail.message == "nope"
