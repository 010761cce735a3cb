"""
Unit tests for the public RSVP workflow.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import text

from app.schemas.rsvp import RSVPSubmission
from core.config import Settings
from models.enums import RSVPStatus
from services.exceptions import (
    NotFoundError,
    InvalidInputError,
    CapacityExceededError,
    RSVPDeadlinePassedError,
    RSVPAlreadySubmittedError,
)
from services import capacity
from services.rsvp_service import submit_rsvp, get_invitation, rsvp_is_open


def make_settings(**overrides):
    values = {"POSTGRES_USER": "u", "POSTGRES_PASSWORD": "p", "POSTGRES_DB": "d"}
    values.update(overrides)
    return Settings(**values)


def confirm(plus_ones=0, dietary_notes=None):
    return RSVPSubmission(status=RSVPStatus.CONFIRMED, plus_ones=plus_ones, dietary_notes=dietary_notes)


def decline():
    return RSVPSubmission(status=RSVPStatus.DECLINED)


class TestSubmitRsvp:

    def test_confirm_records_answer(self, db_session, wedding, make_guest):
        make_guest(wedding, token="abc123")

        result = submit_rsvp(db_session, "abc123", confirm(plus_ones=1, dietary_notes="Vegetarian"))

        assert result.changed is True
        assert result.guest.rsvp_status == RSVPStatus.CONFIRMED
        assert result.guest.plus_ones == 1
        assert result.guest.dietary_notes == "Vegetarian"
        assert result.guest.responded_at is not None

    def test_repeating_confirmation_is_a_no_op(self, db_session, wedding, make_guest):
        make_guest(wedding, token="abc123")
        first = submit_rsvp(db_session, "abc123", confirm())
        responded_at = first.guest.responded_at

        second = submit_rsvp(db_session, "abc123", confirm())

        assert second.changed is False
        assert second.guest.rsvp_status == RSVPStatus.CONFIRMED
        assert second.guest.responded_at == responded_at
        assert second.message == "Your response was already recorded."

    def test_changing_answer_is_refused_by_default(self, db_session, wedding, make_guest):
        make_guest(wedding, token="abc123")
        submit_rsvp(db_session, "abc123", confirm())

        with pytest.raises(RSVPAlreadySubmittedError) as exc_info:
            submit_rsvp(db_session, "abc123", decline())

        assert exc_info.value.status_code == 409
        assert "already recorded as confirmed" in exc_info.value.message

    def test_changing_answer_allowed_when_configured(self, db_session, wedding, make_guest):
        make_guest(wedding, token="abc123")
        submit_rsvp(db_session, "abc123", confirm(plus_ones=2))

        result = submit_rsvp(db_session, "abc123", decline(), settings=make_settings(ALLOW_RSVP_CHANGES=True))

        assert result.changed is True
        assert result.guest.rsvp_status == RSVPStatus.DECLINED
        assert result.guest.plus_ones == 0

    def test_checked_in_guest_cannot_change(self, db_session, wedding, make_guest):
        guest = make_guest(wedding, token="abc123", rsvp_status=RSVPStatus.CONFIRMED)
        guest.mark_checked_in(datetime.now(timezone.utc))
        db_session.commit()

        with pytest.raises(RSVPAlreadySubmittedError):
            submit_rsvp(db_session, "abc123", decline(), settings=make_settings(ALLOW_RSVP_CHANGES=True))

    def test_decline_clears_plus_ones(self, db_session, wedding, make_guest):
        make_guest(wedding, token="abc123")

        result = submit_rsvp(db_session, "abc123", RSVPSubmission(status=RSVPStatus.DECLINED, plus_ones=3))

        assert result.guest.plus_ones == 0
        assert result.message == "Thank you for letting us know. You will be missed."

    def test_unknown_token(self, db_session):
        with pytest.raises(NotFoundError):
            submit_rsvp(db_session, "nope", confirm())

    def test_too_many_plus_ones(self, db_session, wedding, make_guest):
        make_guest(wedding, token="abc123")

        with pytest.raises(InvalidInputError):
            submit_rsvp(db_session, "abc123", confirm(plus_ones=6))

    def test_deadline_passed(self, db_session, planner, make_wedding, make_guest):
        wedding = make_wedding(
            planner,
            name="Past Deadline",
            rsvp_deadline=datetime(2020, 3, 1, tzinfo=timezone.utc),
        )
        make_guest(wedding, token="late")

        with pytest.raises(RSVPDeadlinePassedError) as exc_info:
            submit_rsvp(db_session, "late", confirm())

        assert "closed on March 01, 2020" in exc_info.value.message

    def test_capacity_full_refuses_confirmation(self, db_session, planner, make_wedding, make_guest):
        wedding = make_wedding(planner, guest_capacity=1)
        make_guest(wedding, name="First", rsvp_status=RSVPStatus.CONFIRMED)
        make_guest(wedding, name="Second", token="second")

        with pytest.raises(CapacityExceededError):
            submit_rsvp(db_session, "second", confirm())

    def test_capacity_full_still_allows_decline(self, db_session, planner, make_wedding, make_guest):
        wedding = make_wedding(planner, guest_capacity=1)
        make_guest(wedding, name="First", rsvp_status=RSVPStatus.CONFIRMED)
        make_guest(wedding, name="Second", token="second")

        result = submit_rsvp(db_session, "second", decline())

        assert result.guest.rsvp_status == RSVPStatus.DECLINED

    def test_unknown_token_checked_before_plus_ones(self, db_session):
        with pytest.raises(NotFoundError):
            submit_rsvp(db_session, "nope", confirm(plus_ones=9))

    def test_repeat_with_new_details_updates_them(self, db_session, wedding, make_guest):
        make_guest(wedding, token="abc123")
        first = submit_rsvp(db_session, "abc123", confirm(plus_ones=1))
        responded_at = first.guest.responded_at

        result = submit_rsvp(db_session, "abc123", confirm(plus_ones=2, dietary_notes="No nuts"))

        assert result.changed is True
        assert result.details_updated is True
        assert result.guest.rsvp_status == RSVPStatus.CONFIRMED
        assert result.guest.plus_ones == 2
        assert result.guest.dietary_notes == "No nuts"
        assert result.guest.responded_at == responded_at
        assert result.message == "Your RSVP details have been updated."

    def test_checked_in_guest_cannot_change_details(self, db_session, wedding, make_guest):
        guest = make_guest(wedding, token="abc123", rsvp_status=RSVPStatus.CONFIRMED)
        guest.mark_checked_in(datetime.now(timezone.utc))
        db_session.commit()

        with pytest.raises(RSVPAlreadySubmittedError):
            submit_rsvp(db_session, "abc123", confirm(plus_ones=3))


class TestLockedReads:
    """Rows are re-read once locked, so answers committed meanwhile are seen."""

    def test_answer_committed_while_waiting_is_not_overwritten(self, db_session, wedding, make_guest, monkeypatch):
        guest = make_guest(wedding, token="abc123")
        assert guest.rsvp_status == RSVPStatus.PENDING

        def lock_after_other_answer(db, wedding_id):
            db.connection().execute(
                text("UPDATE guests SET rsvp_status = 'confirmed' WHERE id = :id"),
                {"id": guest.id},
            )
            return capacity.lock_wedding(db, wedding_id)

        monkeypatch.setattr("services.rsvp_service.lock_wedding", lock_after_other_answer)

        with pytest.raises(RSVPAlreadySubmittedError) as exc_info:
            submit_rsvp(db_session, "abc123", decline())

        assert "already recorded as confirmed" in exc_info.value.message

    def test_lock_wedding_sees_committed_capacity(self, db_session, planner, make_wedding):
        wedding = make_wedding(planner, guest_capacity=100)

        db_session.connection().execute(
            text("UPDATE weddings SET guest_capacity = 2 WHERE id = :id"),
            {"id": wedding.id},
        )
        locked = capacity.lock_wedding(db_session, wedding.id)

        assert locked is wedding
        assert locked.guest_capacity == 2
        db_session.rollback()


class TestInvitation:

    def test_get_invitation(self, db_session, wedding, make_guest):
        make_guest(wedding, name="Robin", token="abc123")

        guest = get_invitation(db_session, "abc123")

        assert guest.name == "Robin"
        assert guest.wedding.name == "Alex & Sam"

    def test_rsvp_open_without_deadline(self, wedding):
        assert rsvp_is_open(wedding) is True

    def test_rsvp_open_before_deadline(self, planner, make_wedding):
        wedding = make_wedding(planner, rsvp_deadline=datetime.now(timezone.utc) + timedelta(days=30))

        assert rsvp_is_open(wedding) is True
