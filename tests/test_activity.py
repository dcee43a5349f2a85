import unittest
from datetime import date, timedelta

from roster_sync.core.attendance import (
    ActivityClassifier,
    ActivityTier,
    AttendanceRecord,
    months_before,
    tier_map,
)


def _records(days, last="Smith", first="John"):
    return [
        AttendanceRecord(
            person_id=1,
            first_name=first,
            last_name=last,
            event_name="Sunday Service",
            event_date=day,
        )
        for day in days
    ]


class TestMonthsBefore(unittest.TestCase):
    def test_clamps_to_month_end(self):
        self.assertEqual(months_before(date(2024, 3, 31), 1), date(2024, 2, 29))

    def test_crosses_year(self):
        self.assertEqual(months_before(date(2024, 1, 15), 12), date(2023, 1, 15))
        self.assertEqual(months_before(date(2024, 2, 10), 14), date(2022, 12, 10))


class TestActivityClassifier(unittest.TestCase):
    def setUp(self):
        self.today = date(2024, 6, 1)
        self.classifier = ActivityClassifier(self.today)

    def test_twelve_recent_records_is_core(self):
        yesterday = self.today - timedelta(days=1)
        days = [yesterday - timedelta(days=7 * n) for n in range(12)]
        stats = self.classifier.classify(_records(days))

        self.assertEqual(stats["smith_john"].count90, 12)
        self.assertEqual(stats["smith_john"].last_date, yesterday)
        self.assertEqual(stats["smith_john"].tier, ActivityTier.CORE)

    def test_recency_rule_wins_over_frequency(self):
        fourteen_months_ago = months_before(self.today, 14)
        self.assertEqual(self.classifier.tier_for(fourteen_months_ago, 12), ActivityTier.ARCHIVE)

    def test_active_and_inactive_thresholds(self):
        self.assertEqual(self.classifier.tier_for(self.today, 3), ActivityTier.ACTIVE)
        self.assertEqual(self.classifier.tier_for(self.today, 2), ActivityTier.INACTIVE)
        self.assertEqual(self.classifier.tier_for(None, 0), ActivityTier.INACTIVE)

    def test_window_includes_its_first_day(self):
        start = self.today - timedelta(days=90)
        stats = self.classifier.classify(_records([start, start - timedelta(days=1)]))
        self.assertEqual(stats["smith_john"].count90, 1)

    def test_exactly_twelve_months_is_not_archive(self):
        self.assertEqual(
            self.classifier.tier_for(months_before(self.today, 12), 0), ActivityTier.INACTIVE
        )

    def test_raw_records_count_not_event_days(self):
        same_day = [self.today] * 3
        stats = self.classifier.classify(_records(same_day))
        self.assertEqual(stats["smith_john"].tier, ActivityTier.ACTIVE)

    def test_records_need_both_names(self):
        stats = self.classifier.classify(_records([self.today], first=""))
        self.assertEqual(stats, {})

    def test_missing_people_default_to_inactive(self):
        stats = self.classifier.classify(_records([self.today]))
        self.assertEqual(self.classifier.tier_of(stats, "Doe", "Jane"), ActivityTier.INACTIVE)
        # lookup re-derives the strict key from the display name
        self.assertIs(
            self.classifier.tier_of(stats, " SMITH", "John Paul"), stats["smith_john"].tier
        )

    def test_tier_map(self):
        stats = self.classifier.classify(_records([self.today] * 12))
        self.assertEqual(tier_map(stats), {"smith_john": ActivityTier.CORE})


if __name__ == "__main__":
    unittest.main()
