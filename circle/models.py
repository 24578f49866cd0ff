"""Result types produced by the catalog client and the aggregation services.

Everything here is transient: instances are built for one request and
discarded once the caller has rendered them.
"""
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

MINUTES_IN_HOUR = 60


class FailureReason(Enum):
    """Why a catalog call did not return data."""

    NOT_FOUND = 'not_found'
    FORBIDDEN = 'forbidden'          # private profile / hidden game details
    UNAUTHORIZED = 'unauthorized'    # hidden friend list
    TIMEOUT = 'timeout'
    GENERIC = 'generic'


# Reasons that mean "the owner restricted visibility" rather than "broken".
PRIVACY_REASONS = frozenset({FailureReason.FORBIDDEN, FailureReason.UNAUTHORIZED})


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one catalog call: either ``value`` or a ``failure`` reason."""

    value: Any = None
    failure: Optional[FailureReason] = None
    detail: str = ''

    @classmethod
    def success(cls, value: Any) -> 'FetchResult':
        return cls(value=value)

    @classmethod
    def failed(cls, reason: FailureReason, detail: str = '') -> 'FetchResult':
        return cls(failure=reason, detail=detail)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def is_private(self) -> bool:
        return self.failure in PRIVACY_REASONS


@dataclass(frozen=True)
class OwnedTitle:
    title_id: int
    name: Optional[str]
    playtime_minutes: int = 0
    recent_playtime_minutes: int = 0

    @property
    def played(self) -> bool:
        return self.playtime_minutes > 0


@dataclass(frozen=True)
class AchievementRecord:
    api_name: str
    display_name: str = ''
    description: str = ''
    achieved: bool = False
    unlocked_at: Optional[int] = None   # epoch seconds


@dataclass
class TitleAchievementSummary:
    """Achievement progress of one account in one title.

    ``total == 0`` means the title has no achievement schema or the lookup
    failed; such titles are left out of every aggregate.
    """

    title_id: int
    title_name: str
    total: int = 0
    completed: int = 0
    achievements: List[AchievementRecord] = field(default_factory=list)

    @property
    def is_perfect(self) -> bool:
        return self.total > 0 and self.completed == self.total

    @property
    def completion_percentage(self) -> float:
        return self.completed / self.total * 100 if self.total else 0.0


def format_age(unlocked_at: Optional[int], now: Optional[float] = None) -> str:
    """Render how long ago *unlocked_at* was, e.g. ``'3 days ago'``.

    Returns ``'unknown'`` when the timestamp is missing.
    """
    if not unlocked_at:
        return 'unknown'
    now = time.time() if now is None else now
    seconds = max(0, int(now - unlocked_at))
    if seconds < 60:
        return 'just now'
    for unit, size in (('year', 365 * 86400), ('month', 30 * 86400),
                       ('day', 86400), ('hour', 3600), ('minute', 60)):
        if seconds >= size:
            n = seconds // size
            return f"{n} {unit}{'s' if n != 1 else ''} ago"
    return 'just now'


@dataclass(frozen=True)
class RecentUnlock:
    """One unlocked achievement, tagged with the title it belongs to."""

    title_name: str
    achievement: AchievementRecord

    @property
    def unlocked_at(self) -> Optional[int]:
        return self.achievement.unlocked_at

    def age(self, now: Optional[float] = None) -> str:
        return format_age(self.unlocked_at, now)


@dataclass
class AchievementStats:
    total_achievements: int = 0
    completed_achievements: int = 0
    completion_percentage: float = 0.0
    perfect_games: int = 0
    average_completion: float = 0.0
    hidden: bool = False
    top_by_progress: List[TitleAchievementSummary] = field(default_factory=list)
    recent_unlocks: List[RecentUnlock] = field(default_factory=list)

    @classmethod
    def hidden_profile(cls) -> 'AchievementStats':
        """All-zero variant for accounts whose achievement data is private."""
        return cls(hidden=True)


@dataclass
class AccountStats:
    total_games: int = 0
    total_playtime_minutes: int = 0
    played_games: int = 0
    never_played_games: int = 0
    total_playtime_hours: float = 0.0
    average_playtime_hours: float = 0.0
    never_played_percentage: float = 0.0


@dataclass
class FriendGameAggregate:
    title_id: int
    title_name: str
    friend_count: int
    average_playtime_hours: float
    total_playtime_hours: float


@dataclass
class FriendView:
    """Popular-among-friends result.

    Either visible (possibly empty) ``games`` or hidden because the primary
    account's friend list is private. A hidden view never carries games.
    """

    games: List[FriendGameAggregate] = field(default_factory=list)
    is_hidden: bool = False

    @classmethod
    def visible(cls, games: List[FriendGameAggregate]) -> 'FriendView':
        return cls(games=list(games))

    @classmethod
    def hidden_list(cls) -> 'FriendView':
        return cls(is_hidden=True)


@dataclass
class FriendOverlap:
    friend_name: str
    friend_id: str
    shared_count: int = 0
    sample_titles: List[str] = field(default_factory=list)


@dataclass
class LeaderboardEntry:
    display_name: str
    account_id: str
    completed_achievements: int = 0
    is_current_user: bool = False


@dataclass
class FriendsReport:
    """Everything the friends view computes for one primary account."""

    account_id: str
    account_stats: AccountStats
    top_titles: List[OwnedTitle]
    achievements: AchievementStats
    popular: FriendView
    overlaps: List[FriendOverlap]
    leaderboard: List[LeaderboardEntry]

    @property
    def current_user_ranked(self) -> bool:
        """``True`` when the primary account made it into the leaderboard."""
        return any(e.is_current_user for e in self.leaderboard)

    def to_dict(self) -> Dict:
        return asdict(self)
