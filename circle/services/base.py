"""Base class shared by every catalog-backed service."""
import logging
from typing import Dict, List

from circle.errors import CatalogError, PrivateProfileError
from circle.fanout import DEFAULT_MAX_WORKERS
from circle.models import FetchResult, OwnedTitle

UNKNOWN_NAME = 'Unknown'
PRIVATE_PROFILE_NAME = 'Private Profile'


class CatalogService:
    """Holds the catalog client and fan-out bound for a concrete service.

    Sub-classes get a logger named ``steamcircle.<log_name>`` and helpers for
    the failure policies that several services share.
    """

    log_name = 'service'

    def __init__(self, client, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        """
        Args:
            client:      A ``steam_client.CatalogClient`` (or any object with
                ``get_owned_titles``, ``get_achievements``,
                ``get_friend_ids`` and ``get_display_names``).
            max_workers: Upper bound on concurrent catalog calls per fan-out.
        """
        self._client = client
        self._max_workers = max_workers
        self._log = logging.getLogger(f'steamcircle.{self.log_name}')

    def _friend_ids(self, account_id: str) -> FetchResult:
        """Fetch the friend list (deduplicated), logging anything other than success."""
        result = self._client.get_friend_ids(account_id)
        if result.ok:
            return FetchResult.success(list(dict.fromkeys(result.value or [])))
        if result.is_private:
            self._log.info("Friend list of %s is hidden", account_id)
        elif not result.ok:
            self._log.warning("Could not fetch friend list of %s: %s (%s)",
                              account_id, result.failure.value, result.detail)
        return result


def require_titles(result: FetchResult, account_id: str) -> List[OwnedTitle]:
    """Unwrap the primary account's title list or raise.

    Raises:
        PrivateProfileError: the library is not visible.
        CatalogError:        any other failure.
    """
    if result.ok:
        return result.value
    if result.is_private:
        raise PrivateProfileError(account_id)
    raise CatalogError(f"Could not fetch games for {account_id}: {result.detail}",
                       result.failure.value)


def display_name(names: Dict[str, str], account_id: str, default: str) -> str:
    """Look up *account_id* in a name map, falling back to *default*."""
    return names.get(account_id) or default
