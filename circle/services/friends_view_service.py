"""The combined "friends view" request."""
from concurrent.futures import ThreadPoolExecutor

from circle.fanout import DEFAULT_MAX_WORKERS
from circle.models import FriendsReport
from circle.services.account_stats_service import calculate_account_stats, top_titles_by_playtime
from circle.services.achievement_service import AchievementService
from circle.services.base import CatalogService, require_titles
from circle.services.friend_service import DEFAULT_MIN_AVERAGE_HOURS, FriendService
from circle.services.leaderboard_service import LeaderboardService
from circle.services.overlap_service import OverlapService


class FriendsViewService(CatalogService):
    """Computes every friends-view section for one account.

    The primary library is fetched once; after that the achievement
    analysis, friend popularity, overlaps and leaderboard run side by side
    because none of them needs another's output.
    """

    log_name = 'view'

    def __init__(self, client, max_workers: int = DEFAULT_MAX_WORKERS,
                 min_average_hours: float = DEFAULT_MIN_AVERAGE_HOURS) -> None:
        super().__init__(client, max_workers)
        self.achievements = AchievementService(client, max_workers)
        self.friends = FriendService(client, max_workers, min_average_hours)
        self.overlaps = OverlapService(client, max_workers)
        self.leaderboard = LeaderboardService(client, max_workers, self.achievements)

    def build(self, account_id: str) -> FriendsReport:
        """Return a :class:`FriendsReport` for *account_id*.

        Raises:
            PrivateProfileError: the account's own library is not visible.
            CatalogError:        the library fetch failed for another reason.
        """
        titles = require_titles(self._client.get_owned_titles(account_id), account_id)
        self._log.info("Building friends view for %s (%d games)", account_id, len(titles))

        with ThreadPoolExecutor(max_workers=4, thread_name_prefix='circle_view') as executor:
            achievements = executor.submit(self.achievements.analyze, account_id, titles)
            popular = executor.submit(self.friends.popular_among_friends, account_id)
            overlaps = executor.submit(self.overlaps.friend_overlaps, account_id, titles)
            leaderboard = executor.submit(self.leaderboard.build, account_id)

            # .result() re-raises anything unexpected from a section
            return FriendsReport(
                account_id=account_id,
                account_stats=calculate_account_stats(titles),
                top_titles=top_titles_by_playtime(titles),
                achievements=achievements.result(),
                popular=popular.result(),
                overlaps=overlaps.result(),
                leaderboard=leaderboard.result(),
            )
