from __future__ import annotations

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from apps.matching.tasks import build_matching_service
from apps.profile.models import VibeProfile


class Command(BaseCommand):
    help = "Run vibe matching for one user or every profile; --explore only lists local suggestions."

    def add_arguments(self, parser):  # type: ignore[override]
        parser.add_argument("--user", type=int, help="User ID to match")
        parser.add_argument("--explore", action="store_true", help="List exploratory matches without saving.")
        parser.add_argument("--limit", type=int, default=None, help="Maximum matches per user")

    def handle(self, *args, **options):
        user_id = options.get("user")
        limit = options.get("limit")
        service = build_matching_service()

        if options.get("explore"):
            if not user_id:
                raise CommandError("--explore needs --user.")
            ranked = async_to_sync(service.find_local_matches)(str(user_id), limit=limit)
            for candidate in ranked.candidates:
                self.stdout.write(f"{candidate.user_id}\t{candidate.compatibility_score:.3f}")
            if ranked.skipped:
                self.stdout.write(self.style.WARNING(f"Skipped {len(ranked.skipped)} candidates"))
            return

        user_ids = [user_id] if user_id else list(VibeProfile.objects.values_list("user_id", flat=True))
        created = 0
        for uid in user_ids:
            outcome = async_to_sync(service.run_auto_matching)(str(uid), limit=limit)
            if not outcome.ok:
                self.stderr.write(f"{uid}: {outcome.message}")
            created += len(outcome.matches)
        self.stdout.write(self.style.SUCCESS(f"Created {created} matches for {len(user_ids)} users"))
