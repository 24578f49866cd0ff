#!/usr/bin/env python3
"""
Tests for circle.services.overlap_service (shared games with friends).

Run with:
    python -m pytest tests/test_overlap.py
"""
import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fake_catalog import (
    FRIEND_A, FRIEND_B, FRIEND_C, FRIEND_D, PRIMARY,
    FakeCatalog, broken, forbidden, title, unauthorized,
)
from circle.services import OverlapService

PRIMARY_TITLES = [
    title(1, 'Portal 2', 100),
    title(2, 'Dota 2', 500),
    title(3, 'Skyrim', 300),
    title(4, 'Celeste', 50),
]


def _overlaps(catalog, titles=PRIMARY_TITLES):
    return OverlapService(catalog, max_workers=4).friend_overlaps(PRIMARY, titles)


class TestFriendOverlaps(unittest.TestCase):

    def test_top_three_with_samples_by_own_playtime(self):
        catalog = FakeCatalog(
            friends={PRIMARY: [FRIEND_A, FRIEND_B, FRIEND_C, FRIEND_D]},
            titles={
                FRIEND_A: [title(4), title(3), title(2), title(1), title(99)],
                FRIEND_B: [title(2)],
                FRIEND_C: forbidden(),
                FRIEND_D: [title(1), title(2), title(77)],
            },
            names={FRIEND_A: 'Alice', FRIEND_B: 'Bob', FRIEND_C: 'Carol', FRIEND_D: 'Dan'},
            jitter=True,
        )
        overlaps = _overlaps(catalog)
        self.assertEqual([(o.friend_name, o.shared_count) for o in overlaps],
                         [('Alice', 4), ('Dan', 2), ('Bob', 1)])
        self.assertEqual(overlaps[0].sample_titles, ['Dota 2', 'Skyrim', 'Portal 2'])
        self.assertEqual(overlaps[1].sample_titles, ['Dota 2', 'Portal 2'])

    def test_unreadable_friend_counts_zero(self):
        catalog = FakeCatalog(
            friends={PRIMARY: [FRIEND_A, FRIEND_B]},
            titles={FRIEND_A: forbidden()},
            names={FRIEND_A: 'Alice'},
        )
        overlaps = _overlaps(catalog)
        self.assertEqual([(o.friend_name, o.shared_count, o.sample_titles) for o in overlaps],
                         [('Alice', 0, []), ('Unknown', 0, [])])

    def test_ties_keep_friend_list_order(self):
        friends = [FRIEND_D, FRIEND_B, FRIEND_A, FRIEND_C]
        catalog = FakeCatalog(friends={PRIMARY: friends},
                              titles={f: [title(2)] for f in friends}, jitter=True)
        self.assertEqual([o.friend_id for o in _overlaps(catalog)], friends[:3])

    def test_names_fetched_in_one_batch(self):
        catalog = FakeCatalog(friends={PRIMARY: [FRIEND_A, FRIEND_B]},
                              titles={FRIEND_A: [], FRIEND_B: []})
        _overlaps(catalog)
        self.assertEqual(catalog.calls_to('names'), [('names', (FRIEND_A, FRIEND_B))])

    def test_no_friends_or_hidden_list(self):
        for friends in ([], unauthorized(), forbidden(), broken()):
            catalog = FakeCatalog(friends={PRIMARY: friends})
            self.assertEqual(_overlaps(catalog), [])
            self.assertEqual(catalog.calls_to('titles'), [])

    def test_empty_primary_library(self):
        catalog = FakeCatalog(friends={PRIMARY: [FRIEND_A]},
                              titles={FRIEND_A: [title(1), title(2)]})
        (overlap,) = _overlaps(catalog, titles=[])
        self.assertEqual(overlap.shared_count, 0)
        self.assertEqual(overlap.sample_titles, [])


if __name__ == '__main__':
    unittest.main()
