import pytest

from src.campus_ops.campus_ops.core.enums import RecordStatus
from src.campus_ops.campus_ops.core.exceptions import (
    InvalidDayError,
    InvalidScheduleError,
    NotFoundError,
    ScheduleConflictError,
    ValidationError,
)
from src.campus_ops.campus_ops.schedules.model import EntryCandidate


@pytest.fixture
def klass(classes_repo):
    return classes_repo.add(title="Class A", days=("Mon", "Wed"), start_time="14:00", end_time="18:00", room_number="12")


def _candidate(class_id, **overrides):
    fields = dict(
        class_id=class_id,
        teacher_id=1,
        subject="Maths",
        day="Mon",
        start_time="14:00",
        end_time="15:00",
        room="12",
    )
    fields.update(overrides)
    return EntryCandidate(**fields)


def test_create_entry_stores_full_day_name(timetable_service, timetable_repo, klass):
    entry_id = timetable_service.create_entry(_candidate(klass.class_id))

    assert timetable_repo.get_by_id(entry_id).day == "Monday"


def test_create_entry_conflict_lists_all_messages(timetable_service, klass):
    timetable_service.create_entry(_candidate(klass.class_id))

    with pytest.raises(ScheduleConflictError) as exc:
        timetable_service.create_entry(_candidate(klass.class_id, start_time="14:30", end_time="15:30"))

    assert exc.value.conflicts == [
        'Teacher already has "Maths" in Class A at 14:00-15:00',
        'Room "12" is already booked for "Maths" at 14:00-15:00',
    ]


def test_create_entry_validation(timetable_service, klass):
    with pytest.raises(InvalidScheduleError):
        timetable_service.create_entry(_candidate(klass.class_id, start_time="15:00", end_time="15:00"))
    with pytest.raises(InvalidDayError):
        timetable_service.create_entry(_candidate(klass.class_id, day="Someday"))
    with pytest.raises(ValidationError):
        timetable_service.create_entry(_candidate(klass.class_id, subject=" "))
    with pytest.raises(NotFoundError):
        timetable_service.create_entry(_candidate(999))


def test_update_entry_excludes_itself(timetable_service, timetable_repo, klass):
    entry_id = timetable_service.create_entry(_candidate(klass.class_id))

    timetable_service.update_entry(entry_id, end_time="15:30")

    assert timetable_repo.get_by_id(entry_id).end_time == "15:30"


def test_bulk_generate_is_all_or_nothing(timetable_service, timetable_repo, klass):
    existing = timetable_service.create_entry(_candidate(klass.class_id, teacher_id=7, room="99"))
    candidates = [
        _candidate(klass.class_id, day="Wed"),
        _candidate(klass.class_id, teacher_id=7, start_time="14:30", end_time="15:30"),
        _candidate(klass.class_id, day="Wed", start_time="16:00", end_time="17:00"),
    ]

    with pytest.raises(ScheduleConflictError) as exc:
        timetable_service.bulk_generate(klass.class_id, candidates)

    assert [b.index for b in exc.value.conflicts] == [1]
    assert list(timetable_repo.by_id) == [existing]
    assert timetable_repo.create_many_calls == 0


def test_bulk_generate_creates_everything_in_one_call(timetable_service, timetable_repo, klass):
    candidates = [
        _candidate(klass.class_id, room=None),
        _candidate(klass.class_id, day="Wed", start_time="16:00", end_time="17:00", room=None),
    ]

    ids = timetable_service.bulk_generate(klass.class_id, candidates)

    assert len(ids) == 2
    assert timetable_repo.create_many_calls == 1
    # room falls back to the class's room
    assert {timetable_repo.get_by_id(i).room for i in ids} == {"12"}


def test_bulk_generate_rejects_collisions_inside_the_batch(timetable_service, timetable_repo, klass):
    candidates = [
        _candidate(klass.class_id, start_time="09:00", end_time="10:00"),
        _candidate(klass.class_id, subject="Physics", start_time="09:30", end_time="10:30"),
    ]

    with pytest.raises(ScheduleConflictError) as exc:
        timetable_service.bulk_generate(klass.class_id, candidates)

    [batch_conflict] = exc.value.conflicts
    assert batch_conflict.index == 1
    assert batch_conflict.conflicts == (
        'Teacher is also given "Maths" at 09:00-10:00 (entry #1 of this batch)',
        'Room "12" is also booked for "Maths" at 09:00-10:00 (entry #1 of this batch)',
    )
    assert timetable_repo.by_id == {}
    assert timetable_repo.create_many_calls == 0


def test_bulk_generate_batch_room_clash_is_case_insensitive(timetable_service, klass):
    candidates = [
        _candidate(klass.class_id, teacher_id=1, room="Lab-1"),
        _candidate(klass.class_id, teacher_id=2, start_time="14:30", end_time="15:30", room="lab-1"),
    ]

    with pytest.raises(ScheduleConflictError) as exc:
        timetable_service.bulk_generate(klass.class_id, candidates)

    assert [b.index for b in exc.value.conflicts] == [1]
    assert exc.value.conflicts[0].conflicts == (
        'Room "lab-1" is also booked for "Maths" at 14:00-15:00 (entry #1 of this batch)',
    )


def test_bulk_generate_allows_back_to_back_and_other_days(timetable_service, klass):
    candidates = [
        _candidate(klass.class_id, start_time="09:00", end_time="10:00"),
        _candidate(klass.class_id, start_time="10:00", end_time="11:00"),
        _candidate(klass.class_id, day="Tue", start_time="09:00", end_time="10:00"),
    ]

    assert len(timetable_service.bulk_generate(klass.class_id, candidates)) == 3


def test_bulk_generate_requires_entries_and_class(timetable_service, klass):
    with pytest.raises(ValidationError):
        timetable_service.bulk_generate(klass.class_id, [])
    with pytest.raises(NotFoundError):
        timetable_service.bulk_generate(999, [_candidate(999)])


def test_list_entries_sorted_by_weekday_then_start(timetable_service, klass):
    timetable_service.create_entry(_candidate(klass.class_id, day="Wed", start_time="09:00", end_time="10:00"))
    timetable_service.create_entry(_candidate(klass.class_id, day="Mon", start_time="04:00 PM", end_time="05:00 PM"))
    timetable_service.create_entry(_candidate(klass.class_id, day="Mon", start_time="09:00", end_time="10:00"))

    entries = timetable_service.list_entries(class_id=klass.class_id)

    assert [(e.day, e.start_time) for e in entries] == [
        ("Monday", "09:00"),
        ("Monday", "04:00 PM"),
        ("Wednesday", "09:00"),
    ]


def test_inactive_entries_do_not_block(timetable_service, klass):
    entry_id = timetable_service.create_entry(_candidate(klass.class_id))
    timetable_service.update_entry(entry_id, status=RecordStatus.INACTIVE)

    timetable_service.create_entry(_candidate(klass.class_id))


def test_delete_and_clear(timetable_service, timetable_repo, klass):
    first = timetable_service.create_entry(_candidate(klass.class_id))
    timetable_service.create_entry(_candidate(klass.class_id, day="Wed"))

    timetable_service.delete_entry(first)
    with pytest.raises(NotFoundError):
        timetable_service.delete_entry(first)

    assert timetable_service.clear_class(klass.class_id) == 1
    assert timetable_repo.by_id == {}
