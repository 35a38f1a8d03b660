"""
Tests for verifybot/services/verification.py - VerificationService policy.
"""

import pytest

from verifybot.models.verification import RejectionReason
from verifybot.services.verification import VerificationService


def _attempt(service, channel_ok=True, owner=False, guild_id="g1"):
    return service.attempt_verify(
        guild_id,
        requester_id=100,
        username="Notch",
        is_guild_owner=owner,
        is_in_configured_channel=channel_ok,
    )


class TestAttemptVerify:
    """Eligibility rules for /verify."""

    @pytest.mark.parametrize("paused", [False, True])
    @pytest.mark.parametrize("channel_ok", [False, True])
    @pytest.mark.parametrize("owner", [False, True])
    def test_unconfigured_guild_is_always_rejected(self, verification_service, settings_service, paused, channel_ok, owner):
        settings_service.set_paused("g1", paused)

        outcome = _attempt(verification_service, channel_ok=channel_ok, owner=owner)

        assert outcome.approved is False
        assert outcome.reason is RejectionReason.NOT_CONFIGURED

    def test_scenario_a_approved_with_rename(self, verification_service):
        verification_service.configure_channel("g1", "C1")

        outcome = _attempt(verification_service, channel_ok=True)

        assert outcome.approved is True
        assert outcome.should_rename_target is True

    def test_scenario_b_wrong_channel(self, verification_service):
        verification_service.configure_channel("g1", "C1")

        outcome = _attempt(verification_service, channel_ok=False)

        assert outcome.approved is False
        assert outcome.reason is RejectionReason.WRONG_CHANNEL

    def test_scenario_c_paused_even_in_right_channel(self, verification_service):
        verification_service.configure_channel("g1", "C1")
        verification_service.pause("g1")

        outcome = _attempt(verification_service, channel_ok=True)

        assert outcome.approved is False
        assert outcome.reason is RejectionReason.PAUSED

    def test_owner_is_approved_without_rename(self, verification_service):
        verification_service.configure_channel("g1", "C1")

        outcome = _attempt(verification_service, owner=True)

        assert outcome.approved is True
        assert outcome.should_rename_target is False

    def test_channel_not_enforced(self, settings_service):
        service = VerificationService(settings_service, enforce_channel=False)
        service.configure_channel("g1", "C1")

        outcome = _attempt(service, channel_ok=False)

        assert outcome.approved is True


class TestConfiguration:

    def test_scenario_d_configure_channel_clears_pause(self, verification_service):
        verification_service.pause("g1")

        settings = verification_service.configure_channel("g1", "C9")

        assert settings.verify_channel_id == "C9"
        assert settings.verify_paused is False

    def test_pause_is_idempotent(self, verification_service, settings_service):
        verification_service.configure_channel("g1", "C1")
        once = verification_service.pause("g1")
        twice = verification_service.pause("g1")

        assert once.verify_paused is True
        assert twice.verify_paused is True
        assert once.verify_channel_id == twice.verify_channel_id
        assert settings_service.get("g1").verify_paused is True

    def test_resume(self, verification_service):
        verification_service.configure_channel("g1", "C1")
        verification_service.pause("g1")

        assert verification_service.resume("g1").verify_paused is False

    @pytest.mark.parametrize("username,valid", [
        ("Notch", True),
        ("jeb_", True),
        ("ab", False),
        ("a" * 17, False),
        ("bad name", False),
        ("", False),
    ])
    def test_username_validation(self, username, valid):
        assert VerificationService.is_valid_username(username) is valid


class TestShouldModerateMessage:

    def test_bots_are_never_moderated(self, verification_service):
        verification_service.configure_channel("g1", "C1")

        assert verification_service.should_moderate_message("g1", "C1", is_bot=True) is False

    def test_message_in_verify_channel_is_moderated(self, verification_service):
        verification_service.configure_channel("g1", "C1")

        assert verification_service.should_moderate_message("g1", "C1", is_bot=False) is True

    def test_other_channel_is_not_moderated(self, verification_service):
        verification_service.configure_channel("g1", "C1")

        assert verification_service.should_moderate_message("g1", "C2", is_bot=False) is False

    def test_paused_is_not_moderated(self, verification_service):
        verification_service.configure_channel("g1", "C1")
        verification_service.pause("g1")

        assert verification_service.should_moderate_message("g1", "C1", is_bot=False) is False

    def test_unconfigured_is_not_moderated(self, verification_service):
        assert verification_service.should_moderate_message("g1", "C1", is_bot=False) is False
