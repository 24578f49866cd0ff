"""Achievement leaderboard across an account and its friends."""
from typing import List

from circle.fanout import DEFAULT_MAX_WORKERS, fan_out
from circle.models import LeaderboardEntry
from circle.services.achievement_service import AchievementService
from circle.services.base import (
    PRIVATE_PROFILE_NAME, UNKNOWN_NAME, CatalogService, display_name,
)

TOP_LEADERBOARD = 5


class LeaderboardService(CatalogService):
    """Ranks the primary account and its friends by unlocked achievements."""

    log_name = 'leaderboard'

    def __init__(self, client, max_workers: int = DEFAULT_MAX_WORKERS,
                 achievement_service: AchievementService = None) -> None:
        super().__init__(client, max_workers)
        self._achievements = achievement_service or AchievementService(client, max_workers)

    def build(self, account_id: str) -> List[LeaderboardEntry]:
        """Return the top five members by completed achievements.

        Members are the primary account followed by its friends; on equal
        scores that order is kept.  Every member that cannot be analysed is
        still listed with zero achievements.
        """
        friends = self._friend_ids(account_id)
        if not friends.ok:
            return []

        members = [account_id] + [f for f in friends.value if f != account_id]
        names = self._client.get_display_names(members)

        def _entry(member_id: str) -> LeaderboardEntry:
            is_me = member_id == account_id
            result = self._client.get_owned_titles(member_id)
            if result.is_private:
                return LeaderboardEntry(display_name(names, member_id, PRIVATE_PROFILE_NAME),
                                        member_id, 0, is_me)
            if not result.ok:
                self._log.info("Could not load games of %s: %s",
                               member_id, result.failure.value)
                return LeaderboardEntry(display_name(names, member_id, UNKNOWN_NAME),
                                        member_id, 0, is_me)
            stats = self._achievements.analyze(member_id, result.value)
            if stats.hidden:
                return LeaderboardEntry(display_name(names, member_id, PRIVATE_PROFILE_NAME),
                                        member_id, 0, is_me)
            return LeaderboardEntry(display_name(names, member_id, UNKNOWN_NAME),
                                    member_id, stats.completed_achievements, is_me)

        entries = fan_out(
            members, _entry,
            fallback=lambda member_id, exc: LeaderboardEntry(
                display_name(names, member_id, UNKNOWN_NAME), member_id, 0,
                member_id == account_id),
            max_workers=self._max_workers,
            thread_name_prefix='circle_board',
        )
        entries.sort(key=lambda e: e.completed_achievements, reverse=True)
        return entries[:TOP_LEADERBOARD]
