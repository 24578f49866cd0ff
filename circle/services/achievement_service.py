"""Per-account achievement statistics."""
from typing import List, Sequence

from circle.fanout import fan_out
from circle.models import (
    AchievementStats, FailureReason, FetchResult, OwnedTitle, RecentUnlock,
    TitleAchievementSummary,
)
from circle.services.base import CatalogService

TOP_BY_PROGRESS = 5
RECENT_UNLOCKS = 3


class AchievementService(CatalogService):
    """Computes completion statistics across every played title of an account.

    Achievement visibility is a profile-wide setting, so one lookup on the
    first played title decides whether the rest are worth fetching.
    """

    log_name = 'achievements'

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(self, account_id: str, titles: Sequence[OwnedTitle]) -> AchievementStats:
        """Return :class:`AchievementStats` for *account_id*.

        Args:
            account_id: SteamID64 of the account.
            titles:     That account's owned titles; unplayed ones are ignored.

        Returns:
            Stats, or ``AchievementStats.hidden_profile()`` when the probe is
            answered with ``FORBIDDEN``.
        """
        played = [t for t in titles if t.played]
        self._log.info("Processing %d played games of %s for achievements",
                       len(played), account_id)
        if not played:
            return AchievementStats()

        first = played[0]
        try:
            probe = self._client.get_achievements(account_id, first.title_id)
        except Exception as e:
            probe = FetchResult.failed(FailureReason.GENERIC, repr(e))
        if probe.failure is FailureReason.FORBIDDEN:
            self._log.info("Achievements of %s are hidden (403 on app %s)",
                           account_id, first.title_id)
            return AchievementStats.hidden_profile()
        if not probe.ok:
            # only FORBIDDEN marks the profile hidden
            self._log.warning("Visibility probe for %s on app %s failed (%s: %s); "
                              "failing open and continuing as visible", account_id,
                              first.title_id, probe.failure.value, probe.detail)

        rest = fan_out(
            played[1:],
            lambda title: self._summarize(title, self._client.get_achievements(
                account_id, title.title_id)),
            fallback=lambda title, exc: TitleAchievementSummary(title.title_id, title.name or ''),
            max_workers=self._max_workers,
            thread_name_prefix='circle_ach',
        )
        stats = self.aggregate([self._summarize(first, probe)] + rest)
        self._log.info("Found %d/%d unlocked achievements for %s",
                       stats.completed_achievements, stats.total_achievements, account_id)
        return stats

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    @staticmethod
    def aggregate(summaries: Sequence[TitleAchievementSummary]) -> AchievementStats:
        """Fold per-title summaries (in fan-out order) into account stats."""
        included = [s for s in summaries if s.total > 0]
        total = sum(s.total for s in included)
        completed = sum(s.completed for s in included)
        average = (sum(s.completion_percentage for s in included) / len(included)
                   if included else 0.0)

        # sorted() is stable, so equal percentages keep fan-out order
        top = sorted(included, key=lambda s: s.completion_percentage, reverse=True)

        return AchievementStats(
            total_achievements=total,
            completed_achievements=completed,
            completion_percentage=completed / total * 100 if total else 0.0,
            perfect_games=sum(1 for s in included if s.is_perfect),
            average_completion=average,
            hidden=False,
            top_by_progress=top[:TOP_BY_PROGRESS],
            recent_unlocks=recent_unlocks(included),
        )

    def _summarize(self, title: OwnedTitle, result: FetchResult) -> TitleAchievementSummary:
        name = title.name or ''
        if not result.ok:
            self._log.debug("No achievements for app %s: %s", title.title_id, result.detail)
            return TitleAchievementSummary(title.title_id, name)
        records = result.value or []
        return TitleAchievementSummary(
            title_id=title.title_id,
            title_name=name,
            total=len(records),
            completed=sum(1 for r in records if r.achieved),
            achievements=list(records),
        )


def recent_unlocks(summaries: Sequence[TitleAchievementSummary],
                   limit: int = RECENT_UNLOCKS) -> List[RecentUnlock]:
    """Newest unlocked achievements across *summaries*.

    Records without an unlock time sort after every dated one.
    """
    unlocked = [
        RecentUnlock(s.title_name, record)
        for s in summaries
        for record in s.achievements
        if record.achieved
    ]
    unlocked.sort(key=lambda u: (u.unlocked_at is None, -(u.unlocked_at or 0)))
    return unlocked[:limit]
