"""Aggregation services; import them from here rather than from their modules."""
from .account_stats_service import calculate_account_stats, top_titles_by_playtime
from .achievement_service import AchievementService
from .friend_service import FriendService, TitleTally
from .overlap_service import OverlapService
from .leaderboard_service import LeaderboardService
from .friends_view_service import FriendsViewService

__all__ = [
    'calculate_account_stats',
    'top_titles_by_playtime',
    'AchievementService',
    'FriendService',
    'TitleTally',
    'OverlapService',
    'LeaderboardService',
    'FriendsViewService',
]
