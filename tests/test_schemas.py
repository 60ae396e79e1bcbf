from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from todo_api.models import Priority
from todo_api.schemas import CreateTodoInput, FilterTodosInput, Todo, TodoPatch, UpdateTodoInput
from todo_api.utils import next_timestamp, parse_date_like, parse_timestamp


class TestCreateTodoInput:
    def test_defaults(self):
        data = CreateTodoInput(title="Minimal Todo")
        assert data.description is None
        assert data.due_date is None
        assert data.priority is None

    def test_priority_is_enum(self):
        data = CreateTodoInput(title="x", priority="Medium")
        assert data.priority is Priority.MEDIUM

    @pytest.mark.parametrize("bad", ["low", "URGENT", "", 3])
    def test_priority_outside_enum(self, bad):
        with pytest.raises(ValidationError):
            CreateTodoInput(title="x", priority=bad)

    def test_empty_title_message(self):
        with pytest.raises(ValidationError) as exc_info:
            CreateTodoInput(title="   ")
        assert "Title cannot be empty" in str(exc_info.value)

    def test_title_required(self):
        with pytest.raises(ValidationError):
            CreateTodoInput.model_validate({"description": "no title"})

    def test_explicit_nulls_accepted(self):
        data = CreateTodoInput.model_validate(
            {"title": "x", "description": None, "due_date": None, "priority": None}
        )
        assert data.description is None and data.due_date is None and data.priority is None


class TestUpdateTodoInput:
    def test_absent_fields_are_not_changes(self):
        data = UpdateTodoInput.model_validate({"id": 1, "title": "New"})
        assert data.changes() == {"title": "New"}

    def test_null_fields_are_changes(self):
        data = UpdateTodoInput.model_validate({"id": 1, "description": None, "due_date": None})
        assert data.changes() == {"description": None, "due_date": None}

    def test_id_is_not_a_change(self):
        assert UpdateTodoInput(id=7).changes() == {}

    def test_id_required(self):
        with pytest.raises(ValidationError):
            UpdateTodoInput.model_validate({"title": "No id"})

    def test_completed_cannot_be_null(self):
        with pytest.raises(ValidationError):
            UpdateTodoInput.model_validate({"id": 1, "completed": None})

    def test_patch_changes_carry_into_update(self):
        patch = TodoPatch.model_validate({"priority": None, "completed": True})
        update = UpdateTodoInput.model_validate({**patch.changes(), "id": 3})
        assert update.model_fields_set == {"id", "priority", "completed"}
        assert update.changes() == {"priority": None, "completed": True}


class TestFilterTodosInput:
    def test_empty(self):
        data = FilterTodosInput()
        assert data.completed is None and data.priority is None

    def test_values(self):
        data = FilterTodosInput.model_validate({"completed": True, "priority": "High"})
        assert data.completed is True
        assert data.priority is Priority.HIGH


class TestTodoNormalization:
    def test_store_strings_become_dates(self):
        todo = Todo.model_validate(
            {
                "id": 1,
                "title": "From SQLite",
                "description": None,
                "due_date": "2024-12-31",
                "completed": False,
                "priority": "Low",
                "created_at": "2025-01-01T10:00:00.000000+00:00",
                "updated_at": "2025-01-02T10:00:00.000000+00:00",
            }
        )
        assert todo.due_date == date(2024, 12, 31)
        assert todo.priority is Priority.LOW
        assert todo.created_at == datetime(2025, 1, 1, 10, tzinfo=timezone.utc)

    def test_naive_timestamps_are_utc(self):
        todo = Todo.model_validate(
            {
                "id": 1,
                "title": "Defaulted",
                "completed": False,
                "created_at": "2025-01-01 10:00:00",
                "updated_at": "2025-01-01 10:00:00",
            }
        )
        assert todo.created_at.tzinfo is not None
        assert todo.created_at == datetime(2025, 1, 1, 10, tzinfo=timezone.utc)


class TestDateHelpers:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, None),
            (date(2024, 2, 29), date(2024, 2, 29)),
            (datetime(2024, 2, 29, 23, 59), date(2024, 2, 29)),
            ("2024-02-29", date(2024, 2, 29)),
            (" 2024-02-29 ", date(2024, 2, 29)),
            ("2024-02-29T08:00:00", date(2024, 2, 29)),
            ("2024-02-29T22:00:00Z", date(2024, 2, 29)),
            (datetime(2024, 3, 1, 1, 0, tzinfo=timezone(timedelta(hours=5))), date(2024, 2, 29)),
        ],
    )
    def test_parse_date_like(self, value, expected):
        assert parse_date_like(value) == expected

    @pytest.mark.parametrize("value", ["not-a-date", "2024-13-01", 20240229, 1.5])
    def test_parse_date_like_rejects(self, value):
        with pytest.raises(ValueError):
            parse_date_like(value)

    def test_parse_timestamp_assumes_utc(self):
        assert parse_timestamp("2025-01-01T00:00:00").tzinfo is not None

    def test_next_timestamp_is_now_when_clock_moved(self):
        past = datetime(2000, 1, 1, tzinfo=timezone.utc)
        assert next_timestamp(past) > past + timedelta(days=365)

    def test_next_timestamp_after_future_value(self):
        future = datetime.now(timezone.utc) + timedelta(hours=1)
        assert next_timestamp(future) == future + timedelta(microseconds=1)
        assert next_timestamp(future.isoformat()) == future + timedelta(microseconds=1)
