from __future__ import annotations

from django.db.models import Q

from apps.matching.models import VibeMatch


def mark_chat_started(match_id: int) -> bool:
    """Flag the match once either party opens a conversation. Returns False for unknown or inactive matches."""
    updated = VibeMatch.objects.filter(id=match_id, is_active=True, chat_started=False).update(chat_started=True)
    if updated:
        return True
    return VibeMatch.objects.filter(id=match_id, is_active=True, chat_started=True).exists()


def deactivate_matches_for_user(user_id: int) -> int:
    # soft delete; the pair keeps its row so it is never auto-matched again
    return VibeMatch.objects.filter(Q(user_a_id=user_id) | Q(user_b_id=user_id), is_active=True).update(
        is_active=False
    )
