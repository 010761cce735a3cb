"""
Unit tests for day-of check-in.
"""

import pytest

from core.config import Settings
from models.enums import RSVPStatus
from services.checkin_service import check_in_guest
from services.exceptions import CheckInNotAllowedError, CapacityExceededError, NotFoundError


def make_settings(**overrides):
    values = {"POSTGRES_USER": "u", "POSTGRES_PASSWORD": "p", "POSTGRES_DB": "d"}
    values.update(overrides)
    return Settings(**values)


class TestCheckIn:

    def test_confirmed_guest_checks_in(self, db_session, wedding, make_guest):
        guest = make_guest(wedding, rsvp_status=RSVPStatus.CONFIRMED)

        result = check_in_guest(db_session, wedding, guest.id)

        assert result.already_checked_in is False
        assert result.warning is None
        assert result.guest.checked_in is True
        assert result.guest.checked_in_at is not None

    def test_second_check_in_is_a_no_op(self, db_session, wedding, make_guest):
        guest = make_guest(wedding, rsvp_status=RSVPStatus.CONFIRMED)
        first = check_in_guest(db_session, wedding, guest.id)
        checked_in_at = first.guest.checked_in_at

        second = check_in_guest(db_session, wedding, guest.id)

        assert second.already_checked_in is True
        assert second.guest.checked_in_at == checked_in_at

    @pytest.mark.parametrize("status", [RSVPStatus.PENDING, RSVPStatus.DECLINED])
    def test_unconfirmed_guest_is_refused(self, db_session, wedding, make_guest, status):
        guest = make_guest(wedding, rsvp_status=status)

        with pytest.raises(CheckInNotAllowedError) as exc_info:
            check_in_guest(db_session, wedding, guest.id)

        assert exc_info.value.status_code == 409
        db_session.refresh(guest)
        assert guest.checked_in is False

    def test_guest_of_other_wedding_not_found(self, db_session, planner, make_wedding, make_guest):
        first = make_wedding(planner, name="First")
        second = make_wedding(planner, name="Second")
        guest = make_guest(second, rsvp_status=RSVPStatus.CONFIRMED)

        with pytest.raises(NotFoundError):
            check_in_guest(db_session, first, guest.id)

    def test_capacity_blocks_by_default(self, db_session, planner, make_wedding, make_guest):
        wedding = make_wedding(planner, guest_capacity=1)
        first = make_guest(wedding, name="First", rsvp_status=RSVPStatus.CONFIRMED)
        second = make_guest(wedding, name="Second", rsvp_status=RSVPStatus.CONFIRMED)
        check_in_guest(db_session, wedding, first.id)

        with pytest.raises(CapacityExceededError):
            check_in_guest(db_session, wedding, second.id)

    def test_capacity_warns_in_warn_mode(self, db_session, planner, make_wedding, make_guest):
        wedding = make_wedding(planner, guest_capacity=1)
        first = make_guest(wedding, name="First", rsvp_status=RSVPStatus.CONFIRMED)
        second = make_guest(wedding, name="Second", rsvp_status=RSVPStatus.CONFIRMED)
        settings = make_settings(CHECKIN_CAPACITY_MODE="warn")
        check_in_guest(db_session, wedding, first.id, settings=settings)

        result = check_in_guest(db_session, wedding, second.id, settings=settings)

        assert result.guest.checked_in is True
        assert "1 of 1 guests already checked in" in result.warning
