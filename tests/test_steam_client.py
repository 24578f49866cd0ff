#!/usr/bin/env python3
"""
Tests for steam_client.SteamAPIClient: status mapping, response parsing and
vanity resolution.

Run with:
    python -m pytest tests/test_steam_client.py
"""
import os
import sys
import unittest
from unittest.mock import MagicMock, patch

import requests

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import steam_client
from circle.errors import AccountNotFoundError, CatalogError
from circle.models import FailureReason

STEAM_ID = '76561190000000001'


def _resp(status=200, payload=None):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload if payload is not None else {}
    return resp


class ClientTestCase(unittest.TestCase):

    def setUp(self):
        self.client = steam_client.SteamAPIClient('FAKE_KEY', timeout=3)

    def _patch_get(self, **kwargs):
        return patch.object(self.client.session, 'get', **kwargs)


class TestIsValidSteamId(unittest.TestCase):

    def test_valid(self):
        self.assertTrue(steam_client.is_valid_steam_id(STEAM_ID))

    def test_wrong_length(self):
        self.assertFalse(steam_client.is_valid_steam_id('7656119'))
        self.assertFalse(steam_client.is_valid_steam_id('765611900000000012'))

    def test_non_digit_and_empty(self):
        self.assertFalse(steam_client.is_valid_steam_id('7656119abcdefghij'))
        self.assertFalse(steam_client.is_valid_steam_id(''))
        self.assertFalse(steam_client.is_valid_steam_id(None))  # type: ignore[arg-type]


class TestTransport(ClientTestCase):

    def test_status_mapping(self):
        cases = {401: FailureReason.UNAUTHORIZED, 403: FailureReason.FORBIDDEN,
                 404: FailureReason.NOT_FOUND, 500: FailureReason.GENERIC,
                 429: FailureReason.GENERIC}
        for status, reason in cases.items():
            with self._patch_get(return_value=_resp(status)):
                result = self.client.get_friend_ids(STEAM_ID)
            self.assertFalse(result.ok)
            self.assertIs(result.failure, reason, status)

    def test_timeout_is_its_own_reason(self):
        with self._patch_get(side_effect=requests.Timeout("slow")):
            result = self.client.get_owned_titles(STEAM_ID)
        self.assertIs(result.failure, FailureReason.TIMEOUT)

    def test_network_error_is_generic(self):
        with self._patch_get(side_effect=requests.ConnectionError("down")):
            result = self.client.get_owned_titles(STEAM_ID)
        self.assertIs(result.failure, FailureReason.GENERIC)

    def test_invalid_json_is_generic(self):
        resp = _resp(200)
        resp.json.side_effect = ValueError("no json")
        with self._patch_get(return_value=resp):
            result = self.client.get_friend_ids(STEAM_ID)
        self.assertIs(result.failure, FailureReason.GENERIC)

    def test_key_and_timeout_are_sent(self):
        with self._patch_get(return_value=_resp(200, {'friendslist': {'friends': []}})) as get:
            self.client.get_friend_ids(STEAM_ID)
        _, kwargs = get.call_args
        self.assertEqual(kwargs['params']['key'], 'FAKE_KEY')
        self.assertEqual(kwargs['params']['steamid'], STEAM_ID)
        self.assertEqual(kwargs['timeout'], 3)


class TestGetOwnedTitles(ClientTestCase):

    def test_parses_games(self):
        payload = {'response': {'game_count': 2, 'games': [
            {'appid': 620, 'name': 'Portal 2', 'playtime_forever': 2720, 'playtime_2weeks': 30},
            {'appid': 440, 'name': 'Team Fortress 2', 'playtime_forever': 0},
        ]}}
        with self._patch_get(return_value=_resp(200, payload)):
            result = self.client.get_owned_titles(STEAM_ID)
        self.assertTrue(result.ok)
        self.assertEqual([t.title_id for t in result.value], [620, 440])
        self.assertEqual(result.value[0].playtime_minutes, 2720)
        self.assertEqual(result.value[0].recent_playtime_minutes, 30)
        self.assertEqual(result.value[1].recent_playtime_minutes, 0)

    def test_missing_games_means_private(self):
        with self._patch_get(return_value=_resp(200, {'response': {}})):
            result = self.client.get_owned_titles(STEAM_ID)
        self.assertIs(result.failure, FailureReason.FORBIDDEN)
        self.assertTrue(result.is_private)


class TestGetAchievements(ClientTestCase):

    def test_parses_records(self):
        payload = {'playerstats': {'success': True, 'achievements': [
            {'apiname': 'ACH1', 'name': 'First', 'description': 'd', 'achieved': 1,
             'unlocktime': 1700000000},
            {'apiname': 'ACH2', 'achieved': 0, 'unlocktime': 0},
        ]}}
        with self._patch_get(return_value=_resp(200, payload)) as get:
            result = self.client.get_achievements(STEAM_ID, 620)
        self.assertEqual(get.call_args[1]['params']['l'], 'english')
        first, second = result.value
        self.assertTrue(first.achieved)
        self.assertEqual(first.display_name, 'First')
        self.assertEqual(first.unlocked_at, 1700000000)
        self.assertFalse(second.achieved)
        self.assertIsNone(second.unlocked_at)
        self.assertEqual(second.display_name, 'ACH2')

    def test_forbidden(self):
        with self._patch_get(return_value=_resp(403)):
            result = self.client.get_achievements(STEAM_ID, 620)
        self.assertIs(result.failure, FailureReason.FORBIDDEN)

    def test_success_false_is_generic_failure(self):
        payload = {'playerstats': {'error': 'Requested app has no stats', 'success': False}}
        with self._patch_get(return_value=_resp(200, payload)):
            result = self.client.get_achievements(STEAM_ID, 620)
        self.assertIs(result.failure, FailureReason.GENERIC)
        self.assertIn('no stats', result.detail)

    def test_no_achievements_key_is_empty_success(self):
        with self._patch_get(return_value=_resp(200, {'playerstats': {'success': True}})):
            result = self.client.get_achievements(STEAM_ID, 620)
        self.assertTrue(result.ok)
        self.assertEqual(result.value, [])


class TestFriendsAndNames(ClientTestCase):

    def test_friend_ids(self):
        payload = {'friendslist': {'friends': [
            {'steamid': '76561190000000002', 'friend_since': 1},
            {'steamid': '76561190000000003', 'friend_since': 2},
        ]}}
        with self._patch_get(return_value=_resp(200, payload)):
            result = self.client.get_friend_ids(STEAM_ID)
        self.assertEqual(result.value, ['76561190000000002', '76561190000000003'])

    def test_hidden_friend_list(self):
        with self._patch_get(return_value=_resp(401)):
            result = self.client.get_friend_ids(STEAM_ID)
        self.assertIs(result.failure, FailureReason.UNAUTHORIZED)
        self.assertTrue(result.is_private)

    def test_display_names_are_chunked_by_100(self):
        ids = [str(76561190000000000 + i) for i in range(150)]
        payload = {'response': {'players': [{'steamid': ids[0], 'personaname': 'Alice'}]}}
        with self._patch_get(return_value=_resp(200, payload)) as get:
            names = self.client.get_display_names(ids)
        self.assertEqual(get.call_count, 2)
        first_chunk = get.call_args_list[0][1]['params']['steamids'].split(',')
        self.assertEqual(len(first_chunk), 100)
        self.assertEqual(names, {ids[0]: 'Alice'})

    def test_display_names_best_effort(self):
        with self._patch_get(return_value=_resp(500)):
            self.assertEqual(self.client.get_display_names([STEAM_ID]), {})


class TestResolveAccountId(ClientTestCase):

    def test_steam_id_passthrough(self):
        with self._patch_get() as get:
            self.assertEqual(self.client.resolve_account_id(STEAM_ID), STEAM_ID)
        get.assert_not_called()

    def test_vanity_success(self):
        payload = {'response': {'steamid': STEAM_ID, 'success': 1}}
        with self._patch_get(return_value=_resp(200, payload)):
            self.assertEqual(self.client.resolve_account_id('gaben'), STEAM_ID)

    def test_vanity_not_found(self):
        payload = {'response': {'success': 42, 'message': 'No match'}}
        with self._patch_get(return_value=_resp(200, payload)):
            with self.assertRaises(AccountNotFoundError):
                self.client.resolve_account_id('nobody_here')

    def test_vanity_lookup_failure(self):
        with self._patch_get(side_effect=requests.ConnectionError("down")):
            with self.assertRaises(CatalogError):
                self.client.resolve_account_id('gaben')


if __name__ == '__main__':
    unittest.main()
