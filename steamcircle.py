#!/usr/bin/env python3
"""
SteamCircle - Steam friend network and achievement analytics
Shows library stats, achievement progress, games popular among your friends,
shared-game overlaps and a friends achievement leaderboard.
"""

import argparse
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from colorama import init, Fore, Style

from circle.errors import ConfigError, SteamCircleError
from circle.models import AccountStats, AchievementStats, FriendsReport, OwnedTitle
from circle.services import (
    AchievementService, FriendsViewService, calculate_account_stats, top_titles_by_playtime,
)
from circle.services.base import require_titles
from steam_client import SteamAPIClient, is_valid_steam_id

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root SteamCircle logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, str(level).upper(), logging.WARNING)
    logger = logging.getLogger('steamcircle')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


logger = setup_logging()

DEFAULT_CONFIG = {
    'api_timeout_seconds': 10,
    'max_workers': 8,
    'min_friend_average_hours': 10,
    'log_level': 'WARNING',
}


def minutes_to_hours(minutes: int) -> float:
    """Convert playtime from minutes to hours, rounded to 1 decimal place."""
    return round(minutes / 60, 1)


def is_placeholder_value(value: str) -> bool:
    """Check if a value is a template placeholder that should not be used for real API calls."""
    if not value or not isinstance(value, str):
        return True
    return value.startswith('YOUR_')


def load_config(config_path: str = 'config.json') -> Dict:
    """Load configuration from a JSON file with environment variable support.

    Environment variables take precedence over config file values:
    - STEAM_API_KEY overrides steam_api_key
    - STEAM_ID overrides steam_id

    The file may be absent when ``STEAM_API_KEY`` is set.

    Raises:
        ConfigError: unreadable file, placeholder key or invalid values.
    """
    config: Dict = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Error parsing config file '{config_path}': {e}")
        if not isinstance(config, dict):
            raise ConfigError(f"Config file '{config_path}' must contain a JSON object")
    elif not os.getenv('STEAM_API_KEY'):
        raise ConfigError(f"Config file '{config_path}' not found! Copy "
                          f"'config_template.json' to '{config_path}' or set STEAM_API_KEY.")

    if os.getenv('STEAM_API_KEY'):
        config['steam_api_key'] = os.getenv('STEAM_API_KEY')
    if os.getenv('STEAM_ID'):
        config['steam_id'] = os.getenv('STEAM_ID')

    for key, value in DEFAULT_CONFIG.items():
        config.setdefault(key, value)

    if is_placeholder_value(config.get('steam_api_key', '')):
        raise ConfigError("Please configure your Steam API key in config.json or set the "
                          "STEAM_API_KEY environment variable "
                          "(get one at https://steamcommunity.com/dev/apikey)")

    steam_id = config.get('steam_id', '')
    if steam_id and not is_placeholder_value(steam_id) and not is_valid_steam_id(steam_id):
        raise ConfigError(f"Invalid Steam ID format: {steam_id} (expected 17 digits)")

    timeout = config['api_timeout_seconds']
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError("'api_timeout_seconds' must be a positive number")
    workers = config['max_workers']
    if isinstance(workers, bool) or not isinstance(workers, int) or workers <= 0:
        raise ConfigError("'max_workers' must be a positive integer")
    if not isinstance(config['min_friend_average_hours'], (int, float)) \
            or config['min_friend_average_hours'] < 0:
        raise ConfigError("'min_friend_average_hours' must be non-negative")

    return config


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def print_account_stats(stats: AccountStats, top_titles: List[OwnedTitle]) -> None:
    print(f"\n{Fore.CYAN}{Style.BRIGHT}📊 Library Statistics")
    print(f"{Fore.GREEN}{'='*40}")
    print(f"{Fore.YELLOW}Total Games: {Fore.WHITE}{stats.total_games}")
    print(f"{Fore.YELLOW}Total Playtime: {Fore.WHITE}{stats.total_playtime_hours:,.0f} hours")
    print(f"{Fore.YELLOW}Average Playtime: {Fore.WHITE}{stats.average_playtime_hours:.1f} hours per played game")
    print(f"{Fore.YELLOW}Never Played: {Fore.WHITE}{stats.never_played_games} "
          f"({stats.never_played_percentage:.0f}%)")
    if top_titles:
        print(f"\n{Fore.CYAN}🎮 Top {len(top_titles)} games by playtime:")
        for i, title in enumerate(top_titles, 1):
            print(f"{Fore.YELLOW}{i}. {Fore.WHITE}{title.name} "
                  f"{Fore.CYAN}({minutes_to_hours(title.playtime_minutes)} hours)")
    print(f"{Fore.GREEN}{'='*40}\n")


def print_achievements(stats: AchievementStats) -> None:
    print(f"\n{Fore.CYAN}{Style.BRIGHT}🏆 Achievement Overview")
    print(f"{Fore.GREEN}{'='*40}")
    if stats.hidden:
        print(f"{Fore.RED}🔒 Achievement data is hidden")
        print(f"{Fore.YELLOW}Steam → Settings → Privacy → Game Details → Public")
        print(f"{Fore.GREEN}{'='*40}\n")
        return
    print(f"{Fore.YELLOW}Unlocked: {Fore.WHITE}{stats.completed_achievements:,}/"
          f"{stats.total_achievements:,} ({stats.completion_percentage:.1f}%)")
    print(f"{Fore.YELLOW}Perfect Games: {Fore.WHITE}{stats.perfect_games}")
    print(f"{Fore.YELLOW}Average Completion: {Fore.WHITE}{stats.average_completion:.1f}%")
    if stats.top_by_progress:
        print(f"\n{Fore.CYAN}🎯 Top games by achievement progress:")
        for i, s in enumerate(stats.top_by_progress, 1):
            print(f"{Fore.YELLOW}{i}. {Fore.WHITE}{s.title_name} – {s.completed}/{s.total} "
                  f"({s.completion_percentage:.0f}%)")
    if stats.recent_unlocks:
        print(f"\n{Fore.CYAN}🕒 Recently unlocked:")
        for unlock in stats.recent_unlocks:
            print(f"{Fore.WHITE}{unlock.achievement.display_name} {Fore.MAGENTA}[{unlock.title_name}] "
                  f"{Fore.CYAN}{unlock.age()}")
    print(f"{Fore.GREEN}{'='*40}\n")


def print_friends_report(report: FriendsReport) -> None:
    print_account_stats(report.account_stats, report.top_titles)
    print_achievements(report.achievements)

    print(f"{Fore.CYAN}{Style.BRIGHT}👥 Popular Among Friends")
    print(f"{Fore.GREEN}{'='*40}")
    if report.popular.is_hidden:
        print(f"{Fore.RED}🔒 Friend list is hidden")
    elif not report.popular.games:
        print(f"{Fore.YELLOW}No games found among friends.")
    for i, game in enumerate(report.popular.games, 1):
        print(f"{Fore.YELLOW}{i}. {Fore.WHITE}{game.title_name} {Fore.CYAN}– {game.friend_count} friends, "
              f"avg {game.average_playtime_hours:.1f} h, total {game.total_playtime_hours:,.0f} h")

    if report.overlaps:
        print(f"\n{Fore.CYAN}🤝 Most shared games:")
        for overlap in report.overlaps:
            sample = ', '.join(overlap.sample_titles)
            print(f"{Fore.WHITE}{overlap.friend_name}: {Fore.YELLOW}{overlap.shared_count} shared"
                  f"{Fore.CYAN}{' (' + sample + ')' if sample else ''}")

    if report.leaderboard:
        print(f"\n{Fore.CYAN}🥇 Achievement leaderboard:")
        for i, entry in enumerate(report.leaderboard, 1):
            marker = f" {Fore.GREEN}(you)" if entry.is_current_user else ''
            print(f"{Fore.YELLOW}{i}. {Fore.WHITE}{entry.display_name} – "
                  f"{entry.completed_achievements:,}{marker}")
        if not report.current_user_ranked and not report.achievements.hidden:
            print(f"{Fore.WHITE}… you: {report.achievements.completed_achievements:,}")
    print(f"{Fore.GREEN}{'='*40}\n")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='SteamCircle - Steam friend network and achievement analytics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 steamcircle.py                     # Friends view for steam_id from config
  python3 steamcircle.py -a gabelogannewell  # Friends view for a vanity name
  python3 steamcircle.py --stats             # Library statistics only
  python3 steamcircle.py --achievements      # Achievement overview only
        """
    )
    parser.add_argument('--config', '-c', default='config.json',
                        help='Path to config file (default: config.json)')
    parser.add_argument('--account', '-a', metavar='ID',
                        help='SteamID64 or vanity profile name (default: steam_id from config)')
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--stats', '-s', action='store_true',
                      help='Show library statistics and exit')
    mode.add_argument('--achievements', action='store_true',
                      help='Show the achievement overview and exit')
    mode.add_argument('--friends', '-f', action='store_true',
                      help='Show the full friends view (default)')
    parser.add_argument('--log-level', metavar='LEVEL',
                        help='Override log_level from config (DEBUG, INFO, WARNING, ...)')
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        setup_logging(args.log_level or config['log_level'])

        client = SteamAPIClient(config['steam_api_key'], timeout=config['api_timeout_seconds'])
        identifier = args.account or config.get('steam_id', '')
        if not identifier or is_placeholder_value(identifier):
            print(f"{Fore.RED}Error: no account given. Use --account or set steam_id in config.")
            sys.exit(1)
        account_id = client.resolve_account_id(identifier)
        print(f"{Fore.CYAN}👤 SteamID: {Fore.WHITE}{account_id}"
              f"{' (' + identifier + ')' if identifier != account_id else ''}")

        if args.stats or args.achievements:
            titles = require_titles(client.get_owned_titles(account_id), account_id)
            if args.stats:
                print_account_stats(calculate_account_stats(titles), top_titles_by_playtime(titles))
            else:
                service = AchievementService(client, max_workers=config['max_workers'])
                print_achievements(service.analyze(account_id, titles))
            return

        print(f"{Fore.YELLOW}Fetching friends data, this may take a moment...")
        view = FriendsViewService(client, max_workers=config['max_workers'],
                                  min_average_hours=config['min_friend_average_hours'])
        print_friends_report(view.build(account_id))
    except SteamCircleError as e:
        print(f"{Fore.RED}Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print(f"\n\n{Fore.YELLOW}Interrupted by user. Goodbye!")
    except Exception as e:
        logger.exception("Unexpected error")
        print(f"\n{Fore.RED}An unexpected error occurred: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
