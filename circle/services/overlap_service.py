"""Shared-game overlap between an account and each of its friends."""
from typing import List, Sequence

from circle.fanout import fan_out
from circle.models import FriendOverlap, OwnedTitle
from circle.services.base import UNKNOWN_NAME, CatalogService, display_name

TOP_OVERLAPS = 3
SAMPLE_TITLES = 3


class OverlapService(CatalogService):
    """Counts the games each friend shares with the primary account."""

    log_name = 'overlap'

    def friend_overlaps(self, account_id: str,
                        titles: Sequence[OwnedTitle]) -> List[FriendOverlap]:
        """Return the three friends sharing the most games with *account_id*.

        A friend whose library cannot be read is reported with zero shared
        games rather than dropped.

        Args:
            account_id: Primary SteamID64.
            titles:     The primary account's owned titles, fetched once by
                        the caller.
        """
        friends = self._friend_ids(account_id)
        if not friends.ok or not friends.value:
            return []
        friend_ids = list(friends.value)
        names = self._client.get_display_names(friend_ids)

        own_ids = {t.title_id for t in titles}
        by_playtime = sorted(titles, key=lambda t: t.playtime_minutes, reverse=True)

        def _overlap(friend_id: str) -> FriendOverlap:
            name = display_name(names, friend_id, UNKNOWN_NAME)
            result = self._client.get_owned_titles(friend_id)
            if not result.ok:
                self._log.info("Library of friend %s unavailable (%s); counting 0 shared",
                               friend_id, result.failure.value)
                return FriendOverlap(name, friend_id)
            shared = own_ids & {t.title_id for t in result.value}
            samples = [t.name or str(t.title_id) for t in by_playtime
                       if t.title_id in shared][:SAMPLE_TITLES]
            return FriendOverlap(name, friend_id, len(shared), samples)

        overlaps = fan_out(
            friend_ids, _overlap,
            fallback=lambda friend_id, exc: FriendOverlap(
                display_name(names, friend_id, UNKNOWN_NAME), friend_id),
            max_workers=self._max_workers,
            thread_name_prefix='circle_overlap',
        )
        overlaps.sort(key=lambda o: o.shared_count, reverse=True)
        return overlaps[:TOP_OVERLAPS]
