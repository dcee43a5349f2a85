import unittest
from datetime import date

from roster_sync.core.attendance import ActivityTier
from roster_sync.core.roster import UNKNOWN_RANK, StatusSorter, rank_for_tier
from roster_sync.services.sorting import sort_tab
from roster_sync.config import TabSettings
from roster_sync.store import MemorySource

TIERS = {tier.value: tier for tier in ActivityTier}


def _sorter(with_guest=True):
    return StatusSorter(
        tier_rank=lambda row: rank_for_tier(TIERS.get(row[2])),
        last_name=lambda row: row[0],
        first_name=lambda row: row[1],
        is_guest=(lambda row: row[3] == "Guest") if with_guest else None,
    )


class TestStatusSorter(unittest.TestCase):
    def test_guests_first_then_tier_then_name(self):
        rows = [
            ("Brown", "Bob", "Active", ""),
            ("adams", "Amy", "Inactive", ""),
            ("Zed", "Zoe", "Archive", "Guest"),
            ("Clark", "Cara", "Core", ""),
            ("Able", "Al", "Active", ""),
            ("Moss", "Max", "", ""),
        ]
        ordered = _sorter().sort(rows)
        self.assertEqual(
            [row[0] for row in ordered], ["Zed", "Clark", "Able", "Brown", "adams", "Moss"]
        )

    def test_without_guest_column_only_tiers_count(self):
        rows = [("Zed", "Zoe", "Archive", "Guest"), ("Clark", "Cara", "Core", "")]
        ordered = _sorter(with_guest=False).sort(rows)
        self.assertEqual([row[0] for row in ordered], ["Clark", "Zed"])

    def test_sorting_twice_is_a_no_op(self):
        rows = [
            ("Smith", "John", "Core", ""),
            ("smith", "john", "Core", ""),
            ("Doe", "Jane", "Active", "Guest"),
            ("Doe", "Jane", "Active", "Guest"),
        ]
        once = _sorter().sort(rows)
        self.assertEqual(_sorter().sort(once), once)

    def test_ties_keep_original_order(self):
        first = ("Smith", "John", "Core", "", 1)
        second = ("SMITH", "JOHN", "Core", "", 2)
        ordered = _sorter().sort([first, second])
        self.assertEqual(ordered, [first, second])

    def test_ranks(self):
        self.assertEqual(rank_for_tier(ActivityTier.CORE), 0)
        self.assertEqual(rank_for_tier(ActivityTier.ARCHIVE), 3)
        self.assertEqual(rank_for_tier(None), UNKNOWN_RANK)
        self.assertEqual(rank_for_tier(TIERS.get("Archived")), UNKNOWN_RANK)


class TestSortTab(unittest.TestCase):
    def setUp(self):
        self.tab = TabSettings(name="Appsheet Sunserv", last_name_column=2, first_name_column=3)
        self.tiers = {
            "zed_amy": ActivityTier.CORE,
            "cole_cat": ActivityTier.ACTIVE,
            "adams_ann": ActivityTier.ARCHIVE,
        }

    def test_rows_move_whole_and_blank_rows_go_last(self):
        source = MemorySource(
            "Appsheet Sunserv",
            [
                ["ID", "Last", "First"],
                [1, "Brown", "Bob"],
                [2, "Adams", "Ann"],
                [3, None, None],
                [4, "Zed", "Amy"],
                [5, "Cole", "Cat"],
            ],
        )

        self.assertTrue(sort_tab(source, self.tab, self.tiers))
        self.assertEqual(
            source.values()[1:],
            [[4, "Zed", "Amy"], [5, "Cole", "Cat"], [2, "Adams", "Ann"], [1, "Brown", "Bob"], [3, None, None]],
        )
        # already sorted: nothing is written
        self.assertFalse(sort_tab(source, self.tab, self.tiers))
        self.assertEqual(source.write_count, 1)

    def test_status_column_puts_guests_first(self):
        tab = TabSettings(name="Sunday Service", header_rows=1, status_column=5)
        source = MemorySource(
            "Sunday Service",
            [
                ["", "", "Last", "First", "Status"],
                [None, None, "Zed", "Amy", "Member"],
                [None, None, "Cole", "Cat", "Guest"],
            ],
        )
        sort_tab(source, tab, self.tiers)
        self.assertEqual([row[2] for row in source.values()[1:]], ["Cole", "Zed"])


if __name__ == "__main__":
    unittest.main()
