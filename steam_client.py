"""
steam_client.py
===============
Steam Web API catalog client used by the SteamCircle engine.

Every data call returns a :class:`circle.models.FetchResult` instead of
raising, so the services can tell a private library (``FORBIDDEN``) from a
hidden friend list (``UNAUTHORIZED``) from a plain network failure and apply
their own policy to each.

HTTP status mapping
-------------------
* ``401`` → ``UNAUTHORIZED`` (Steam's answer for a hidden friend list)
* ``403`` → ``FORBIDDEN`` (private profile / hidden game details)
* ``404`` → ``NOT_FOUND``
* anything else that is not ``200`` → ``GENERIC``
* ``requests.Timeout`` → ``TIMEOUT``; other request errors → ``GENERIC``
"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, Iterable

import requests

from circle.errors import AccountNotFoundError, CatalogError
from circle.models import AchievementRecord, FailureReason, FetchResult, OwnedTitle

logger = logging.getLogger('steamcircle.steam')

_STEAM_ID_RE = re.compile(r'^\d{17}$')

VANITY_SUCCESS = 1
SUMMARIES_CHUNK = 100   # GetPlayerSummaries accepts at most 100 ids per call

_STATUS_REASONS = {
    401: FailureReason.UNAUTHORIZED,
    403: FailureReason.FORBIDDEN,
    404: FailureReason.NOT_FOUND,
}


def is_valid_steam_id(steam_id: str) -> bool:
    """Return ``True`` when *steam_id* looks like a 17-digit SteamID64."""
    if not steam_id or not isinstance(steam_id, str):
        return False
    return bool(_STEAM_ID_RE.match(steam_id))


class CatalogClient(ABC):
    """Interface the aggregation services depend on."""

    @abstractmethod
    def get_owned_titles(self, account_id: str) -> FetchResult:
        """Owned games of *account_id* as a list of :class:`OwnedTitle`."""

    @abstractmethod
    def get_achievements(self, account_id: str, title_id) -> FetchResult:
        """Achievements of *account_id* in *title_id* as :class:`AchievementRecord` list."""

    @abstractmethod
    def get_friend_ids(self, account_id: str) -> FetchResult:
        """SteamID64 strings of the account's friends."""

    @abstractmethod
    def get_display_names(self, account_ids: Iterable[str]) -> Dict[str, str]:
        """Best-effort ``{account_id: display name}``; missing ids are omitted."""


class SteamAPIClient(CatalogClient):
    """Client for the Steam Web API endpoints the engine needs.

    Args:
        api_key: Steam Web API key.
        timeout: Per-request timeout in seconds.
    """

    BASE_URL = "https://api.steampowered.com"

    def __init__(self, api_key: str, timeout: float = 10) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _get(self, path: str, params: Dict) -> FetchResult:
        """GET *path* and return the decoded JSON body as a FetchResult."""
        query = dict(params)
        query['key'] = self.api_key
        try:
            resp = self.session.get(f"{self.BASE_URL}{path}", params=query,
                                    timeout=self.timeout)
        except requests.Timeout as e:
            logger.debug("Timeout calling %s: %s", path, e)
            return FetchResult.failed(FailureReason.TIMEOUT, str(e))
        except requests.RequestException as e:
            logger.debug("Request to %s failed: %s", path, e)
            return FetchResult.failed(FailureReason.GENERIC, str(e))

        if resp.status_code != 200:
            reason = _STATUS_REASONS.get(resp.status_code, FailureReason.GENERIC)
            return FetchResult.failed(reason, f"HTTP {resp.status_code}")
        try:
            return FetchResult.success(resp.json())
        except ValueError as e:
            logger.debug("Undecodable response from %s: %s", path, e)
            return FetchResult.failed(FailureReason.GENERIC, 'invalid JSON')

    # ------------------------------------------------------------------
    # Catalog API
    # ------------------------------------------------------------------

    def resolve_account_id(self, identifier: str) -> str:
        """Turn a SteamID64 or vanity profile name into a SteamID64.

        Raises:
            AccountNotFoundError: Steam does not know the vanity name.
            CatalogError:         The lookup itself failed.
        """
        identifier = (identifier or '').strip()
        if is_valid_steam_id(identifier):
            return identifier
        if not identifier:
            raise AccountNotFoundError(identifier)

        result = self._get("/ISteamUser/ResolveVanityURL/v0001/",
                           {'vanityurl': identifier})
        if not result.ok:
            logger.error("Error resolving vanity URL %s: %s", identifier, result.detail)
            raise CatalogError("Error processing profile name.", result.failure.value)

        body = (result.value or {}).get('response', {})
        if body.get('success') == VANITY_SUCCESS and body.get('steamid'):
            logger.info("Resolved '%s' to SteamID %s", identifier, body['steamid'])
            return body['steamid']
        logger.warning("Vanity URL not found: %s", identifier)
        raise AccountNotFoundError(identifier)

    def get_owned_titles(self, account_id: str) -> FetchResult:
        result = self._get("/IPlayerService/GetOwnedGames/v0001/", {
            'steamid': account_id,
            'include_appinfo': 1,
            'include_played_free_games': 1,
            'format': 'json',
        })
        if not result.ok:
            return result

        body = (result.value or {}).get('response')
        # A private library comes back as 200 with an empty "response" object.
        if not body or body.get('games') is None:
            return FetchResult.failed(FailureReason.FORBIDDEN, 'game list not visible')

        titles = [
            OwnedTitle(
                title_id=int(g['appid']),
                name=g.get('name'),
                playtime_minutes=int(g.get('playtime_forever', 0) or 0),
                recent_playtime_minutes=int(g.get('playtime_2weeks', 0) or 0),
            )
            for g in body['games'] if 'appid' in g
        ]
        return FetchResult.success(titles)

    def get_achievements(self, account_id: str, title_id) -> FetchResult:
        result = self._get("/ISteamUserStats/GetPlayerAchievements/v0001/", {
            'steamid': account_id,
            'appid': title_id,
            'l': 'english',
        })
        if not result.ok:
            return result

        stats = (result.value or {}).get('playerstats') or {}
        if stats.get('success') is False:
            return FetchResult.failed(FailureReason.GENERIC,
                                      stats.get('error', 'success=false'))
        records = [
            AchievementRecord(
                api_name=a.get('apiname', ''),
                display_name=a.get('name') or a.get('apiname', ''),
                description=a.get('description', '') or '',
                achieved=a.get('achieved') == 1,
                unlocked_at=a.get('unlocktime') or None,
            )
            for a in stats.get('achievements') or []
        ]
        return FetchResult.success(records)

    def get_friend_ids(self, account_id: str) -> FetchResult:
        result = self._get("/ISteamUser/GetFriendList/v0001/", {
            'steamid': account_id,
            'relationship': 'friend',
            'format': 'json',
        })
        if not result.ok:
            return result
        friends = (result.value or {}).get('friendslist', {}).get('friends', [])
        return FetchResult.success([f['steamid'] for f in friends if f.get('steamid')])

    def get_display_names(self, account_ids: Iterable[str]) -> Dict[str, str]:
        ids = list(dict.fromkeys(account_ids))
        names: Dict[str, str] = {}
        for start in range(0, len(ids), SUMMARIES_CHUNK):
            chunk = ids[start:start + SUMMARIES_CHUNK]
            result = self._get("/ISteamUser/GetPlayerSummaries/v0002/", {
                'steamids': ','.join(chunk),
                'format': 'json',
            })
            if not result.ok:
                logger.warning("Player summaries fetch failed for %d ids: %s",
                               len(chunk), result.detail)
                continue
            for player in (result.value or {}).get('response', {}).get('players', []):
                sid = player.get('steamid')
                if sid and player.get('personaname'):
                    names[sid] = player['personaname']
        return names
