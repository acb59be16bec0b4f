from datetime import date, timedelta

import pytest


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"redis": True}


class TestSlotsDay:
    def test_auto_assign_day(self, client, sample_salon, target_date):
        response = client.get("/slots/day", params={
            "salon_id": sample_salon["salon_id"],
            "service_id": sample_salon["service_id"],
            "date": target_date.isoformat(),
        })

        assert response.status_code == 200
        data = response.json()
        assert data["duration_minutes"] == 45
        assert data["slot_step_minutes"] == 15
        assert data["staff_id"] is None
        assert len(data["slots"]) == 38
        assert data["slots"][0]["start"] == f"{target_date.isoformat()}T10:00:00"
        assert data["slots"][0]["staff_id"] == sample_salon["anna_id"]

    def test_single_staff_day(self, client, sample_salon, target_date):
        response = client.get("/slots/day", params={
            "salon_id": sample_salon["salon_id"],
            "service_id": sample_salon["service_id"],
            "staff_id": sample_salon["boris_id"],
            "date": target_date.isoformat(),
        })

        assert response.status_code == 200
        starts = [slot["start"][11:16] for slot in response.json()["slots"]]
        assert "12:30" not in starts
        assert starts[-1] == "17:15"

    def test_past_date(self, client, sample_salon):
        response = client.get("/slots/day", params={
            "salon_id": sample_salon["salon_id"],
            "service_id": sample_salon["service_id"],
            "date": (date.today() - timedelta(days=1)).isoformat(),
        })

        assert response.status_code == 400

    def test_beyond_horizon(self, client, sample_salon):
        response = client.get("/slots/day", params={
            "salon_id": sample_salon["salon_id"],
            "service_id": sample_salon["service_id"],
            "date": (date.today() + timedelta(days=365)).isoformat(),
        })

        assert response.status_code == 400

    def test_unknown_service(self, client, sample_salon, target_date):
        response = client.get("/slots/day", params={
            "salon_id": sample_salon["salon_id"],
            "service_id": 999,
            "date": target_date.isoformat(),
        })

        assert response.status_code == 404


def test_calendar(client, sample_salon, target_date):
    response = client.get("/slots/calendar", params={
        "salon_id": sample_salon["salon_id"],
        "service_id": sample_salon["service_id"],
        "start_date": target_date.isoformat(),
        "end_date": (target_date + timedelta(days=2)).isoformat(),
    })

    assert response.status_code == 200
    data = response.json()
    assert len(data["days"]) == 3
    assert all(day["has_slots"] for day in data["days"])
    assert data["days"][0]["open_slots_count"] == 38
    assert data["min_lead_minutes"] == 15


class TestCreateBooking:
    def payload(self, sample_salon, at, start="12:00", **overrides):
        data = {
            "salon_id": sample_salon["salon_id"],
            "service_id": sample_salon["service_id"],
            "staff_id": sample_salon["anna_id"],
            "customer_name": "Maria",
            "customer_phone": "15551234567",
            "appointment_start": at(start).isoformat(),
        }
        data.update(overrides)
        return data

    def test_create_fills_end_from_service(self, client, sample_salon, at):
        response = client.post("/bookings/", json=self.payload(sample_salon, at))

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["appointment_end"] == at("12:45").isoformat()

    def test_double_booking_rejected(self, client, sample_salon, at):
        first = client.post("/bookings/", json=self.payload(sample_salon, at))
        assert first.status_code == 201

        second = client.post("/bookings/", json=self.payload(sample_salon, at, start="12:30"))

        assert second.status_code == 409
        assert second.json()["detail"]["reason"] == "OVERLAPS_EXISTING_BOOKING"

    def test_booked_slot_disappears_from_day(self, client, sample_salon, at, target_date):
        client.post("/bookings/", json=self.payload(sample_salon, at))

        response = client.get("/slots/day", params={
            "salon_id": sample_salon["salon_id"],
            "service_id": sample_salon["service_id"],
            "staff_id": sample_salon["anna_id"],
            "date": target_date.isoformat(),
        })

        starts = [slot["start"][11:16] for slot in response.json()["slots"]]
        assert "11:15" in starts
        assert "12:00" not in starts
        assert "12:45" in starts

    def test_cancelled_booking_does_not_block(self, client, sample_salon, at):
        client.post("/bookings/", json=self.payload(sample_salon, at, status="cancelled"))

        response = client.post("/bookings/", json=self.payload(sample_salon, at))

        assert response.status_code == 201

    def test_break_rejected(self, client, sample_salon, at):
        payload = self.payload(sample_salon, at, start="12:45", staff_id=sample_salon["boris_id"])

        response = client.post("/bookings/", json=payload)

        assert response.status_code == 409
        assert response.json()["detail"] == {
            "reason": "INSIDE_BREAK",
            "message": "This time overlaps break hours.",
        }

    def test_outside_hours_rejected(self, client, sample_salon, at):
        response = client.post("/bookings/", json=self.payload(sample_salon, at, start="19:30"))

        assert response.status_code == 409
        assert response.json()["detail"]["reason"] == "OUTSIDE_WORKING_HOURS"

    def test_inverted_range_rejected_for_any_status(self, client, sample_salon, at):
        payload = self.payload(sample_salon, at, status="cancelled", appointment_end=at("11:00").isoformat())

        response = client.post("/bookings/", json=payload)

        assert response.status_code == 409
        assert response.json()["detail"]["reason"] == "INVALID_RANGE"

    def test_unknown_staff(self, client, sample_salon, at):
        response = client.post("/bookings/", json=self.payload(sample_salon, at, staff_id=999))
        assert response.status_code == 400

    def test_lock_busy(self, client, sample_salon, at, fake_redis):
        fake_redis.held.add(f"booking_lock:{sample_salon['anna_id']}")

        response = client.post("/bookings/", json=self.payload(sample_salon, at))

        assert response.status_code == 503

    def test_lock_released_after_request(self, client, sample_salon, at, fake_redis):
        client.post("/bookings/", json=self.payload(sample_salon, at))
        assert fake_redis.held == set()


class TestValidateEndpoint:
    def test_ok(self, client, sample_salon, at):
        response = client.post("/bookings/validate", json={
            "salon_id": sample_salon["salon_id"],
            "staff_id": sample_salon["boris_id"],
            "start": at("10:00").isoformat(),
            "end": at("10:45").isoformat(),
        })

        assert response.status_code == 200
        assert response.json() == {"ok": True, "reason": None, "message": ""}

    def test_no_employee(self, client, sample_salon, at):
        response = client.post("/bookings/validate", json={
            "salon_id": sample_salon["salon_id"],
            "start": at("10:00").isoformat(),
            "end": at("10:45").isoformat(),
        })

        assert response.json()["reason"] == "NO_EMPLOYEE_SELECTED"

    def test_inverted_range(self, client, sample_salon, at):
        response = client.post("/bookings/validate", json={
            "salon_id": sample_salon["salon_id"],
            "staff_id": sample_salon["anna_id"],
            "start": at("11:00").isoformat(),
            "end": at("10:00").isoformat(),
        })

        assert response.json()["reason"] == "INVALID_RANGE"

    def test_snap_moves_into_hours(self, client, sample_salon, at):
        body = {
            "salon_id": sample_salon["salon_id"],
            "staff_id": sample_salon["anna_id"],
            "start": at("09:57").isoformat(),
            "end": at("10:42").isoformat(),
        }

        assert client.post("/bookings/validate", json=body).json()["reason"] == "OUTSIDE_WORKING_HOURS"
        assert client.post("/bookings/validate", json={**body, "snap": True}).json()["ok"] is True


class TestUpdateBooking:
    @pytest.fixture
    def booking_x(self, client, sample_salon, at):
        response = client.post("/bookings/", json={
            "salon_id": sample_salon["salon_id"],
            "service_id": sample_salon["service_id"],
            "staff_id": sample_salon["anna_id"],
            "customer_name": "Maria",
            "appointment_start": at("15:00").isoformat(),
            "appointment_end": at("15:30").isoformat(),
            "status": "confirmed",
        })
        assert response.status_code == 201
        return response.json()

    def test_validate_own_range_with_exclusion(self, client, sample_salon, at, booking_x):
        body = {
            "salon_id": sample_salon["salon_id"],
            "staff_id": sample_salon["anna_id"],
            "start": at("15:00").isoformat(),
            "end": at("15:30").isoformat(),
        }

        without = client.post("/bookings/validate", json=body).json()
        with_exclusion = client.post("/bookings/validate", json={**body, "exclude_booking_id": booking_x["id"]}).json()

        assert without["reason"] == "OVERLAPS_EXISTING_BOOKING"
        assert with_exclusion["ok"] is True

    def test_resize_over_itself(self, client, at, booking_x):
        response = client.patch(f"/bookings/{booking_x['id']}", json={
            "appointment_end": at("15:45").isoformat(),
        })

        assert response.status_code == 200
        assert response.json()["appointment_end"] == at("15:45").isoformat()

    def test_move_keeps_duration(self, client, at, booking_x):
        response = client.patch(f"/bookings/{booking_x['id']}", json={
            "appointment_start": at("16:00").isoformat(),
        })

        assert response.status_code == 200
        assert response.json()["appointment_end"] == at("16:30").isoformat()

    def test_move_onto_other_booking_rejected(self, client, sample_salon, at, booking_x):
        client.post("/bookings/", json={
            "salon_id": sample_salon["salon_id"],
            "service_id": sample_salon["service_id"],
            "staff_id": sample_salon["anna_id"],
            "customer_name": "Ivan",
            "appointment_start": at("17:00").isoformat(),
        })

        response = client.patch(f"/bookings/{booking_x['id']}", json={
            "appointment_start": at("17:15").isoformat(),
        })

        assert response.status_code == 409
        assert response.json()["detail"]["reason"] == "OVERLAPS_EXISTING_BOOKING"

    def test_reassign_into_break_rejected(self, client, sample_salon, at, booking_x):
        response = client.patch(f"/bookings/{booking_x['id']}", json={
            "staff_id": sample_salon["boris_id"],
            "appointment_start": at("13:15").isoformat(),
        })

        assert response.status_code == 409
        assert response.json()["detail"]["reason"] == "INSIDE_BREAK"

    def test_cancel_skips_validation(self, client, booking_x):
        response = client.patch(f"/bookings/{booking_x['id']}", json={"status": "cancelled"})

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_cancelled_booking_cannot_get_inverted_range(self, client, at, booking_x):
        client.patch(f"/bookings/{booking_x['id']}", json={"status": "cancelled"})

        response = client.patch(f"/bookings/{booking_x['id']}", json={
            "appointment_end": at("14:00").isoformat(),
        })

        assert response.status_code == 409
        assert response.json()["detail"]["reason"] == "INVALID_RANGE"
        assert client.get(f"/bookings/{booking_x['id']}").json()["appointment_end"] == at("15:30").isoformat()

    def test_reactivation_is_validated(self, client, sample_salon, at, booking_x):
        client.patch(f"/bookings/{booking_x['id']}", json={"status": "cancelled"})
        taken = client.post("/bookings/", json={
            "salon_id": sample_salon["salon_id"],
            "service_id": sample_salon["service_id"],
            "staff_id": sample_salon["anna_id"],
            "customer_name": "Ivan",
            "appointment_start": at("15:00").isoformat(),
        })
        assert taken.status_code == 201

        response = client.patch(f"/bookings/{booking_x['id']}", json={"status": "confirmed"})

        assert response.status_code == 409

    def test_not_found(self, client):
        assert client.patch("/bookings/999", json={"status": "cancelled"}).status_code == 404
        assert client.get("/bookings/999").status_code == 404

    def test_delete_not_allowed(self, client, booking_x):
        assert client.delete(f"/bookings/{booking_x['id']}").status_code == 405
