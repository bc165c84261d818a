"""Tests for recording completed workouts."""

import threading
from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from sweatsync.core.errors import CompletionValidationError
from sweatsync.db.models import CompletedWorkout
from sweatsync.db.store import Store
from sweatsync.users.account_repository import AccountRepository
from sweatsync.workouts import recorder as recorder_module
from sweatsync.workouts.recorder import CompletionRecorder
from sweatsync.workouts.types import CompletionRequest

MONDAY = date(2024, 1, 1)


def _request(**overrides) -> CompletionRequest:
    body = {
        "date": "2024-01-01",
        "workout": {"name": "Push"},
        "exercises": [{"name": "Bench Press", "sets": [{"reps": 8, "weight": 135}], "notes": "felt good"}],
    }
    body.update(overrides)
    return CompletionRequest.model_validate(body)


def _row_count(store: Store, account_id: int) -> int:
    with store.session("test_count", account_id) as session:
        stmt = select(func.count()).select_from(CompletedWorkout).where(CompletedWorkout.account_id == account_id)
        return session.execute(stmt).scalar_one()


@pytest.fixture
def recorder(store: Store) -> CompletionRecorder:
    return CompletionRecorder(store)


def test_record_stores_one_row(recorder: CompletionRecorder, store: Store, make_account) -> None:
    account_id = make_account("athlete")

    record, created = recorder.record(account_id, _request())

    assert created is True
    assert record.date == MONDAY
    assert record.workout_name == "Push"
    assert record.exercises[0].name == "Bench Press"
    assert record.exercises[0].sets[0].reps == 8
    assert record.exercises[0].sets[0].weight == 135
    assert record.exercises[0].notes == "felt good"
    assert _row_count(store, account_id) == 1


def test_empty_exercise_list_is_rejected(recorder: CompletionRecorder, store: Store, make_account) -> None:
    account_id = make_account("lazy")

    with pytest.raises(CompletionValidationError, match="Date, workout, and exercises are required"):
        recorder.record(account_id, _request(exercises=[]))

    assert _row_count(store, account_id) == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"date": None},
        {"date": ""},
        {"workout": None},
        {"workout": {"name": "  "}},
        {"exercises": None},
    ],
)
def test_missing_required_fields_are_rejected(recorder: CompletionRecorder, store: Store, make_account, overrides) -> None:
    account_id = make_account("forgetful")

    with pytest.raises(CompletionValidationError):
        recorder.record(account_id, _request(**overrides))

    assert _row_count(store, account_id) == 0


def test_exercise_without_name_is_rejected(recorder: CompletionRecorder, store: Store, make_account) -> None:
    account_id = make_account("anon")

    with pytest.raises(CompletionValidationError, match="Exercise 2 must have a name"):
        recorder.record(
            account_id,
            _request(exercises=[{"name": "Squat", "sets": []}, {"name": " ", "sets": []}]),
        )

    assert _row_count(store, account_id) == 0


def test_exercise_with_no_sets_is_accepted(recorder: CompletionRecorder, make_account) -> None:
    account_id = make_account("skipper")

    record, created = recorder.record(account_id, _request(exercises=[{"name": "Plank", "sets": []}]))

    assert created is True
    assert record.exercises[0].sets == []


def test_timed_sets_are_stored(recorder: CompletionRecorder, make_account) -> None:
    account_id = make_account("planker")

    record, _ = recorder.record(
        account_id,
        _request(exercises=[{"name": "Plank", "sets": [{"duration": 45}, {"time": "60"}]}]),
    )

    assert [s.duration for s in record.exercises[0].sets] == [45, 60]
    assert record.exercises[0].sets[0].reps is None


def test_blank_form_values_are_missing_values(recorder: CompletionRecorder, make_account) -> None:
    account_id = make_account("formfiller")

    record, _ = recorder.record(
        account_id,
        _request(exercises=[{"name": "Curl", "sets": [{"reps": "10", "weight": ""}]}]),
    )

    assert record.exercises[0].sets[0].reps == 10
    assert record.exercises[0].sets[0].weight is None


def test_same_content_twice_creates_two_rows(recorder: CompletionRecorder, store: Store, make_account) -> None:
    account_id = make_account("twice")

    first, _ = recorder.record(account_id, _request())
    second, _ = recorder.record(account_id, _request())

    assert first.id != second.id
    assert _row_count(store, account_id) == 2


def test_idempotency_key_replay_returns_stored_row(recorder: CompletionRecorder, store: Store, make_account) -> None:
    account_id = make_account("retrier")

    first, first_created = recorder.record(account_id, _request(idempotencyKey="session-1"))
    replay, replay_created = recorder.record(account_id, _request(idempotencyKey="session-1"))

    assert first_created is True
    assert replay_created is False
    assert replay.id == first.id
    assert _row_count(store, account_id) == 1


def test_idempotency_keys_are_scoped_per_account(recorder: CompletionRecorder, store: Store, make_account) -> None:
    first = make_account("first")
    second = make_account("second")

    recorder.record(first, _request(idempotencyKey="shared"))
    _, created = recorder.record(second, _request(idempotencyKey="shared"))

    assert created is True
    assert _row_count(store, second) == 1


def test_set_mixing_reps_and_duration_is_invalid() -> None:
    with pytest.raises(ValidationError):
        _request(exercises=[{"name": "Odd", "sets": [{"reps": 5, "duration": 30}]}])


@pytest.mark.parametrize("bad_set", [{"reps": -1}, {"reps": 1001}, {"weight": 5000}, {"duration": 7200}])
def test_out_of_range_set_values_are_invalid(bad_set: dict) -> None:
    with pytest.raises(ValidationError):
        _request(exercises=[{"name": "Odd", "sets": [bad_set]}])


def test_key_committed_between_lookup_and_insert_is_a_replay(
    recorder: CompletionRecorder, store: Store, make_account, monkeypatch
) -> None:
    account_id = make_account("raced")
    first, _ = recorder.record(account_id, _request(idempotencyKey="retry-1"))

    real_lookup = recorder_module.find_by_idempotency_key
    calls = {"count": 0}

    def lookup_misses_once(session, account_id, idempotency_key):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return real_lookup(session, account_id, idempotency_key)

    monkeypatch.setattr(recorder_module, "find_by_idempotency_key", lookup_misses_once)

    replay, created = recorder.record(account_id, _request(idempotencyKey="retry-1"))

    assert created is False
    assert replay.id == first.id
    assert _row_count(store, account_id) == 1


def test_concurrent_retries_with_one_key_store_one_row(tmp_path) -> None:
    file_store = Store(f"sqlite:///{tmp_path / 'race.db'}").open()
    file_store.create_all()
    try:
        with file_store.session("create_account") as session:
            account_id = AccountRepository.create(session, "racer", "not-a-real-hash").id

        file_recorder = CompletionRecorder(file_store)
        barrier = threading.Barrier(8)
        results: list[tuple[int, bool]] = []
        errors: list[BaseException] = []

        def submit() -> None:
            barrier.wait()
            try:
                record, created = file_recorder.record(account_id, _request(idempotencyKey="k1"))
                results.append((record.id, created))
            except BaseException as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len({workout_id for workout_id, _ in results}) == 1
        assert [created for _, created in results].count(True) == 1
        assert _row_count(file_store, account_id) == 1
    finally:
        file_store.close()


def test_timed_set_notes_survive_the_round_trip(recorder: CompletionRecorder, make_account) -> None:
    account_id = make_account("timekeeper")

    record, _ = recorder.record(
        account_id,
        _request(exercises=[{"name": "Plank", "sets": [{"time": 45, "notes": "last one hard"}], "rpe": 9}]),
    )

    stored = record.exercises[0].model_dump(exclude_none=True)
    assert stored["sets"] == [{"duration": 45.0, "notes": "last one hard"}]
    assert stored["rpe"] == 9
