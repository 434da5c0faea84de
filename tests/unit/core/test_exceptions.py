"""Unit tests for the domain exception hierarchy."""

import pytest

from petengine.core.exceptions import ErrorSeverity
from petengine.modules.shared.exceptions import (
    ChallengeAlreadyClaimedError,
    CooldownActiveError,
    InsufficientResourcesError,
    NotFoundError,
    PetEngineException,
    ValidationError,
    get_error_severity,
    is_transient_error,
    should_alert,
)


@pytest.mark.unit
class TestExceptions:
    def test_insufficient_resources_details(self):
        exc = InsufficientResourcesError("coins", 200, 150)

        assert exc.error_code == "INSUFFICIENT_COINS"
        assert exc.details["deficit"] == 50
        assert "need 200, have 150" in exc.message

    def test_not_found_code(self):
        exc = NotFoundError("Pet", 9)

        assert exc.error_code == "PET_NOT_FOUND"
        assert str(exc).startswith("[PET_NOT_FOUND] Pet not found: 9")

    def test_cooldown_is_retryable(self):
        exc = CooldownActiveError("feed", 42)

        assert is_transient_error(exc) is True
        assert exc.details["retry_after"] == 42

    def test_to_dict(self):
        data = ChallengeAlreadyClaimedError(5).to_dict()

        assert data["error_code"] == "CHALLENGE_ALREADY_CLAIMED"
        assert data["details"] == {"user_challenge_id": 5}
        assert data["is_retryable"] is False

    def test_all_domain_errors_share_a_base(self):
        assert isinstance(ValidationError("amount", "bad"), PetEngineException)

    @pytest.mark.parametrize(
        ("exc", "alert"),
        [
            (ValidationError("amount", "bad"), False),
            (PetEngineException("unexpected"), True),
            (RuntimeError("foreign"), True),
        ],
    )
    def test_should_alert(self, exc, alert):
        assert should_alert(exc) is alert

    def test_foreign_exception_severity(self):
        assert get_error_severity(KeyError("x")) is ErrorSeverity.ERROR
        assert is_transient_error(KeyError("x")) is False
