"""Library-wide statistics for a single account's game list."""
from typing import List, Sequence

from circle.models import MINUTES_IN_HOUR, AccountStats, OwnedTitle

TOP_TITLES = 5


def calculate_account_stats(titles: Sequence[OwnedTitle]) -> AccountStats:
    """Summarise an owned-title list.

    The average is taken over *played* titles only; the never-played
    percentage is ``0`` for an empty library.
    """
    total_games = len(titles)
    total_minutes = sum(t.playtime_minutes for t in titles)
    played = sum(1 for t in titles if t.played)
    never_played = total_games - played

    total_hours = total_minutes / MINUTES_IN_HOUR
    return AccountStats(
        total_games=total_games,
        total_playtime_minutes=total_minutes,
        played_games=played,
        never_played_games=never_played,
        total_playtime_hours=total_hours,
        average_playtime_hours=total_hours / played if played else 0.0,
        never_played_percentage=never_played * 100.0 / total_games if total_games else 0.0,
    )


def top_titles_by_playtime(titles: Sequence[OwnedTitle],
                           limit: int = TOP_TITLES) -> List[OwnedTitle]:
    """Most-played named titles, longest first (ties keep library order)."""
    played = [t for t in titles if t.played and t.name]
    played.sort(key=lambda t: t.playtime_minutes, reverse=True)
    return played[:limit]
