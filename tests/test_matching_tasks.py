from __future__ import annotations

from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings

from apps.matching.models import VibeMatch
from apps.matching.tasks import auto_match_active_users_task, run_auto_matching_task
from apps.notifications.models import Notification
from apps.profile.models import VibeProfile
from apps.social.models import VibeEcho

User = get_user_model()

def _seed_nearby_pair() -> tuple:
    ana = User.objects.create_user(username="ana", password="pass123")
    ben = User.objects.create_user(username="ben", password="pass123")
    VibeProfile.objects.create(
        user=ana, display_name="Ana", vibe_score=80, latitude=40.0, longitude=-73.0, is_online=True
    )
    VibeProfile.objects.create(
        user=ben, display_name="Ben", vibe_score=85, latitude=40.001, longitude=-73.001, is_online=True
    )
    for mood in ("happy", "happy"):
        VibeEcho.objects.create(author=ana, mood=mood)
    for mood in ("excited", "happy"):
        VibeEcho.objects.create(author=ben, mood=mood)
    return ana, ben

class AutoMatchingTaskTests(TestCase):
    def setUp(self) -> None:
        self.ana, self.ben = _seed_nearby_pair()

    def test_run_creates_one_match_and_notifies_both(self) -> None:
        with patch("apps.notifications.services.publish_event", return_value=True) as mocked_publish:
            result = run_auto_matching_task(self.ana.id)

        assert result["ok"] is True
        assert len(result["created"]) == 1
        match = VibeMatch.objects.get()
        assert match.compatibility_score > 0.6
        assert match.matching_reasons["distance_match"] is True
        assert match.rules_version == "v1"
        assert mocked_publish.call_count == 2

        to_ana = Notification.objects.get(user=self.ana)
        to_ben = Notification.objects.get(user=self.ben)
        assert to_ana.title == "New Match! 🎉"
        assert to_ana.message == "You matched with Ben (78% compatibility)"
        assert to_ben.message == "You matched with Ana (78% compatibility)"
        assert to_ben.payload["other_user_id"] == str(self.ana.id)

    def test_successful_run_is_logged_with_counts(self) -> None:
        with self.assertLogs("services.matching.service", level="INFO") as logs:
            result = run_auto_matching_task(self.ana.id)

        assert result["ok"] is True
        assert result["unpersisted"] == []
        [record] = [r for r in logs.records if r.getMessage() == "matching.run_complete"]
        assert record.user_id == str(self.ana.id)
        assert record.created_count == 1
        assert record.failed_count == 0

    def test_rerun_is_idempotent(self) -> None:
        run_auto_matching_task(self.ana.id)
        result = run_auto_matching_task(self.ana.id)
        reverse = run_auto_matching_task(self.ben.id)

        assert result["created"] == []
        assert reverse["created"] == []
        assert VibeMatch.objects.count() == 1
        assert Notification.objects.count() == 2

    def test_missing_profile_returns_generic_message(self) -> None:
        loner = User.objects.create_user(username="loner", password="pass123")

        result = run_auto_matching_task(loner.id)

        assert result["ok"] is False
        assert result["message"] == "We couldn't refresh your matches. Please try again."

    @override_settings(FEATURE_FLAGS={"realtime": False, "vibe_matching": False})
    def test_disabled_flag_skips_matching(self) -> None:
        assert run_auto_matching_task(self.ana.id) == {"ok": False, "disabled": True, "created": []}
        assert auto_match_active_users_task() == 0
        assert not VibeMatch.objects.exists()

    @override_settings(MATCH_RULES_VERSION="v2")
    def test_rules_version_setting_is_stored(self) -> None:
        run_auto_matching_task(self.ana.id)
        assert VibeMatch.objects.get().rules_version == "v2"

    def test_fan_out_over_active_profiles(self) -> None:
        queued = auto_match_active_users_task(active_hours=24)

        assert queued == 2
        assert VibeMatch.objects.count() == 1

class RunVibeMatchingCommandTests(TestCase):
    def setUp(self) -> None:
        self.ana, self.ben = _seed_nearby_pair()

    def test_explore_lists_without_saving(self) -> None:
        out = StringIO()
        call_command("run_vibe_matching", "--user", str(self.ana.id), "--explore", stdout=out)

        assert out.getvalue().startswith(f"{self.ben.id}\t0.78")
        assert not VibeMatch.objects.exists()

    def test_explore_needs_user(self) -> None:
        with self.assertRaises(CommandError):
            call_command("run_vibe_matching", "--explore")

    def test_matches_every_profile(self) -> None:
        out = StringIO()
        call_command("run_vibe_matching", stdout=out)

        assert "Created 1 matches for 2 users" in out.getvalue()
        assert VibeMatch.objects.count() == 1
