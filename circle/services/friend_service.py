"""Games that are popular among an account's friends."""
import threading
from typing import Dict, List, Sequence

from circle.fanout import DEFAULT_MAX_WORKERS, fan_out
from circle.models import MINUTES_IN_HOUR, FriendGameAggregate, FriendView, OwnedTitle
from circle.services.base import CatalogService

TOP_FRIEND_GAMES = 5
DEFAULT_MIN_AVERAGE_HOURS = 10


class TitleTally:
    """Thread-safe ``title_id → [name, friend_count, total_minutes]`` fold.

    Friend-fetch workers call :meth:`add_library` directly; the lock makes
    each insert-or-update atomic so concurrent sightings of one title never
    lose a count.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[int, list] = {}

    def add_library(self, titles: Sequence[OwnedTitle]) -> None:
        """Fold one friend's library in; duplicates inside it count once."""
        seen = {}
        for title in titles:
            seen.setdefault(title.title_id, title)
        with self._lock:
            for title_id, title in seen.items():
                entry = self._entries.get(title_id)
                if entry is None:
                    self._entries[title_id] = [title.name or '', 1, title.playtime_minutes]
                else:
                    entry[1] += 1
                    entry[2] += title.playtime_minutes

    def aggregates(self) -> List[FriendGameAggregate]:
        with self._lock:
            snapshot = {k: list(v) for k, v in self._entries.items()}
        return [
            FriendGameAggregate(
                title_id=title_id,
                title_name=name,
                friend_count=count,
                average_playtime_hours=minutes / count / MINUTES_IN_HOUR,
                total_playtime_hours=minutes / MINUTES_IN_HOUR,
            )
            for title_id, (name, count, minutes) in snapshot.items()
        ]


class FriendService(CatalogService):
    """Builds the "popular among friends" view for one account."""

    log_name = 'friends'

    def __init__(self, client, max_workers: int = DEFAULT_MAX_WORKERS,
                 min_average_hours: float = DEFAULT_MIN_AVERAGE_HOURS) -> None:
        """
        Args:
            client:            Catalog client.
            max_workers:       Concurrent friend-library fetches.
            min_average_hours: Games whose average friend playtime does not
                exceed this many hours are dropped as noise.
        """
        super().__init__(client, max_workers)
        self.min_average_hours = min_average_hours

    def popular_among_friends(self, account_id: str) -> FriendView:
        """Return the top games across the friends of *account_id*.

        Returns:
            ``FriendView.hidden_list()`` when the friend list is private,
            otherwise a visible view with at most five games.
        """
        friends = self._friend_ids(account_id)
        if friends.is_private:
            return FriendView.hidden_list()
        if not friends.ok or not friends.value:
            return FriendView.visible([])

        tally = TitleTally()

        def _fold_friend(friend_id: str) -> bool:
            result = self._client.get_owned_titles(friend_id)
            if not result.ok:
                self._log.warning("Excluding friend %s from game stats: %s",
                                  friend_id, result.failure.value)
                return False
            tally.add_library(result.value)
            return True

        folded = fan_out(friends.value, _fold_friend,
                         fallback=lambda friend_id, exc: False,
                         max_workers=self._max_workers,
                         thread_name_prefix='circle_friend')
        self._log.info("Aggregated libraries of %d/%d friends of %s",
                       sum(folded), len(folded), account_id)
        return FriendView.visible(self.rank(tally.aggregates()))

    def rank(self, aggregates: List[FriendGameAggregate]) -> List[FriendGameAggregate]:
        """Filter by the playtime threshold and order by popularity.

        Order: friend count desc, average hours desc, title id asc.
        """
        kept = [a for a in aggregates if a.average_playtime_hours > self.min_average_hours]
        kept.sort(key=lambda a: (-a.friend_count, -a.average_playtime_hours, a.title_id))
        return kept[:TOP_FRIEND_GAMES]
