import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from fake_backend import make_appointment
from homeserve.errors import ResponseValidationError, ServerError
from homeserve.models import Appointment
from homeserve.services.appointment_service import AppointmentService
from homeserve.services.appointment_store import AppointmentStore, SyncStrategy

NOW = datetime.now(timezone.utc)


def _run(make_api, action, **store_kwargs):
    async def scenario():
        async with make_api() as api:
            store = AppointmentStore(AppointmentService(api), **store_kwargs)
            await store.refresh()
            result = await action(store)
            return store, result

    return asyncio.run(scenario())


async def _noop(store):
    return None


def _seed(backend):
    backend.add(make_appointment("tomorrow", status="confirmed", start=NOW + timedelta(days=1)))
    backend.add(make_appointment("next_week", status="pending", start=NOW + timedelta(days=7)))
    backend.add(make_appointment("last_week", status="completed", start=NOW - timedelta(days=7)))
    backend.add(make_appointment("yesterday_cancelled", status="cancelled", start=NOW - timedelta(days=1)))
    backend.add(make_appointment("future_cancelled", status="cancelled", start=NOW + timedelta(days=3)))
    backend.add(make_appointment("overdue", status="confirmed", start=NOW - timedelta(hours=3)))
    backend.add(make_appointment("running", status="in_progress", start=NOW - timedelta(hours=1)))
    backend.add(make_appointment("running_later", status="in_progress", start=NOW + timedelta(hours=1)))


def test_refresh_replaces_cache(backend, make_api):
    _seed(backend)
    store, _ = _run(make_api, _noop)
    assert len(store.appointments) == 8
    assert store.is_loading is False
    assert store.error is None


def test_refresh_failure_keeps_previous_cache(backend, make_api):
    backend.add(make_appointment("a1"))

    async def fail_then_refresh(store):
        backend.fail("GET", "/api/bookings", status=503, message="Down for maintenance")
        await store.refresh()

    store, _ = _run(make_api, fail_then_refresh)
    assert [item.id for item in store.appointments] == ["a1"]
    assert store.error == "Failed to load appointments. Please try again."
    assert store.is_loading is False


def test_get_by_id_is_a_pure_lookup(backend, make_api):
    backend.add(make_appointment("a1"))

    async def lookup(store):
        calls_before = len(backend.calls)
        found = store.get_by_id("a1")
        missing = store.get_by_id("zzz")
        return found, missing, len(backend.calls) - calls_before

    store, (found, missing, new_calls) = _run(make_api, lookup)
    assert found is store.appointments[0]
    assert missing is None
    assert new_calls == 0


def test_partitions_are_disjoint_and_sorted(backend, make_api):
    _seed(backend)
    store, _ = _run(make_api, _noop)
    upcoming = [item.id for item in store.upcoming(NOW)]
    past = [item.id for item in store.past(NOW)]

    assert not set(upcoming) & set(past)
    assert upcoming == ["tomorrow", "next_week"]
    assert past == ["future_cancelled", "running", "yesterday_cancelled", "last_week"]


def test_overdue_confirmed_appointment_is_listed_separately(backend, make_api):
    _seed(backend)
    store, _ = _run(make_api, _noop)
    assert [item.id for item in store.overdue(NOW)] == ["overdue"]
    assert "overdue" not in {item.id for item in store.past(NOW)}
    assert "overdue" not in {item.id for item in store.upcoming(NOW)}
    assert store.upcoming(NOW - timedelta(hours=4))[0].id == "overdue"


def test_booking_tomorrow_is_upcoming(backend, make_api):
    start = NOW + timedelta(days=1)

    async def book(store):
        return await store.book_appointment(
            {
                "providerId": 11,
                "serviceId": 1,
                "date": start.date().isoformat(),
                "startTime": start.isoformat(),
                "endTime": (start + timedelta(hours=2)).isoformat(),
                "location": "12 Long Street",
            }
        )

    store, created = _run(make_api, book)
    assert store.appointments == [created]
    store.patch_status(created.id, "confirmed")
    assert [item.id for item in store.upcoming()] == [created.id]
    assert store.past() == []


def test_cancel_patches_only_the_status(backend, make_api):
    backend.add(make_appointment("a1", status="confirmed"))
    backend.add(make_appointment("a2", status="pending"))

    async def cancel(store):
        before = store.get_by_id("a1")
        await store.cancel("a1")
        return before

    store, before = _run(make_api, cancel)
    after = store.get_by_id("a1")
    assert after.status == "cancelled"
    assert after.model_dump(exclude={"status"}) == before.model_dump(exclude={"status"})
    assert store.get_by_id("a2").status == "pending"
    # local patch: the list is not refetched after the write
    assert backend.count("GET", "/api/bookings") == 1


def test_complete_patches_status(backend, make_api):
    backend.add(make_appointment("a1", status="confirmed", start=NOW - timedelta(days=2)))

    async def complete(store):
        await store.complete("a1")

    store, _ = _run(make_api, complete)
    assert store.get_by_id("a1").status == "completed"
    assert [item.id for item in store.past()] == ["a1"]


def test_cancel_failure_reraises_and_clears_loading(backend, make_api):
    backend.add(make_appointment("a1"))
    backend.fail("POST", "/api/bookings/a1/cancel", status=409, message="Too late to cancel")

    async def cancel(store):
        with pytest.raises(ServerError):
            await store.cancel("a1")

    store, _ = _run(make_api, cancel)
    assert store.is_loading is False
    assert store.error == "Failed to cancel appointment. Please try again."
    assert store.get_by_id("a1").status == "confirmed"


def test_book_failure_reraises(backend, make_api):
    backend.fail("POST", "/api/bookings", status=422, message="Slot unavailable")

    async def book(store):
        with pytest.raises(ServerError):
            await store.book_appointment({"providerId": 1})

    store, _ = _run(make_api, book)
    assert store.appointments == []
    assert store.error == "Failed to book appointment. Please try again."


def test_submit_review_navigates_without_touching_cache(backend, make_api):
    backend.add(make_appointment("a1", status="completed"))
    visited = []

    async def review(store):
        snapshot = list(store.appointments)
        await store.submit_review({"appointmentId": "a1", "rating": 5, "review": "Spotless"})
        return snapshot

    store, snapshot = _run(make_api, review, navigate=visited.append)
    assert store.appointments == snapshot
    assert visited == ["/appointments"]
    assert backend.reviews[0]["rating"] == 5


def test_submit_review_failure_does_not_navigate(backend, make_api):
    backend.add(make_appointment("a1", status="completed"))
    backend.fail("POST", "/api/bookings/a1/rate", status=500)
    visited = []

    async def review(store):
        with pytest.raises(ServerError):
            await store.submit_review({"appointmentId": "a1", "rating": 2})

    store, _ = _run(make_api, review, navigate=visited.append)
    assert visited == []
    assert store.error == "Failed to submit review. Please try again."


def test_submit_review_with_out_of_range_rating_records_error(backend, make_api):
    backend.add(make_appointment("a1", status="completed"))
    visited = []

    async def review(store):
        with pytest.raises(ResponseValidationError) as excinfo:
            await store.submit_review({"appointmentId": "a1", "rating": 7, "review": "Great"})
        return excinfo.value

    store, error = _run(make_api, review, navigate=visited.append)
    assert error.kind == "validation"
    assert "rating" in error.errors
    assert store.error == "Failed to submit review. Please try again."
    assert store.is_loading is False
    assert visited == []
    assert backend.count("POST", "/api/bookings/a1/rate") == 0


def test_refetch_strategy_reloads_after_every_write(backend, make_api):
    backend.add(make_appointment("a1", status="confirmed"))

    async def cancel(store):
        await store.cancel("a1")

    store, _ = _run(make_api, cancel, strategy=SyncStrategy.REFETCH)
    assert backend.count("GET", "/api/bookings") == 2
    refreshed = store.get_by_id("a1")
    assert refreshed.status == "cancelled"
    assert refreshed.updated_at != datetime.fromisoformat("2026-01-01T08:00:00+00:00")


def test_naive_and_aware_start_times_compare(backend, make_api):
    naive_start = (datetime.now(timezone.utc) + timedelta(days=2)).replace(tzinfo=None)
    backend.add(make_appointment("naive", start=naive_start))
    store, _ = _run(make_api, _noop)
    assert isinstance(store.appointments[0], Appointment)
    assert [item.id for item in store.upcoming()] == ["naive"]
