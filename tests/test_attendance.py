"""
Unit tests for roster_sync.core.attendance collection and quarterly aggregation.
"""

import unittest
from datetime import date

from roster_sync.cells import Cell, to_cells
from roster_sync.core.attendance import (
    PASTORAL_CHECK_IN,
    AttendanceAggregator,
    AttendanceRecord,
    GridHeader,
    LogEntry,
    canonical_event_name,
    collect_grid,
    collect_pastoral_log,
    event_key,
    is_pastoral_check_in,
    quarter_of,
)
from roster_sync.core.identity import IdentityRegistry, RosterRow, RosterSnapshot


def _record(person_id, day, event="Sunday Service", last="Smith", first="John", source=""):
    return AttendanceRecord(
        person_id=person_id,
        first_name=first,
        last_name=last,
        event_name=event,
        event_date=day,
        source=source,
    )


class TestEventKey(unittest.TestCase):
    def test_sunday_service_labels_collapse(self):
        day = date(2024, 1, 7)
        self.assertEqual(event_key("Sunday Service", day), event_key(" sunday service 9am", day))

    def test_other_events_keep_their_name(self):
        self.assertEqual(event_key(" Picnic ", date(2024, 1, 7)), ("Picnic", date(2024, 1, 7)))

    def test_pastoral_relabel(self):
        self.assertEqual(canonical_event_name("Pastoral check -In"), PASTORAL_CHECK_IN)
        self.assertEqual(canonical_event_name("pastoral checkin"), PASTORAL_CHECK_IN)
        self.assertEqual(canonical_event_name("Bible Study"), "Bible Study")

    def test_quarter_boundaries(self):
        self.assertEqual(quarter_of(date(2024, 3, 31)), 1)
        self.assertEqual(quarter_of(date(2024, 4, 1)), 2)
        self.assertEqual(quarter_of(date(2024, 9, 30)), 3)
        self.assertEqual(quarter_of(date(2024, 10, 1)), 4)


class TestAttendanceAggregator(unittest.TestCase):
    def setUp(self):
        self.aggregator = AttendanceAggregator(date(2024, 12, 31))

    def test_same_service_from_two_sources_counts_once(self):
        records = [
            _record(1, date(2024, 1, 5), source="Sunday Service"),
            _record(1, date(2024, 1, 5), event="sunday service", source="Event Attendance"),
        ]
        (summary,) = self.aggregator.summarize(records, {"smith_john"})
        self.assertEqual(summary.q1, 1)
        self.assertEqual(summary.total, 1)

    def test_distinct_events_on_one_day_count_separately(self):
        records = [
            _record(1, date(2024, 1, 5)),
            _record(1, date(2024, 1, 5), event="Bible Study"),
        ]
        (summary,) = self.aggregator.summarize(records, set())
        self.assertEqual(summary.q1, 2)

    def test_quarters_partition_the_year(self):
        days = [
            date(2024, 1, 1),
            date(2024, 3, 31),
            date(2024, 4, 1),
            date(2024, 6, 30),
            date(2024, 7, 1),
            date(2024, 9, 30),
            date(2024, 10, 1),
            date(2024, 12, 31),
        ]
        (summary,) = self.aggregator.summarize([_record(1, day) for day in days], set())
        self.assertEqual((summary.q1, summary.q2, summary.q3, summary.q4), (2, 2, 2, 2))
        self.assertEqual(summary.total, len(days))

    def test_people_without_records_this_year_are_omitted(self):
        records = [_record(1, date(2023, 12, 31)), _record(2, date(2024, 2, 1), last="Doe", first="Jane")]
        summaries = self.aggregator.summarize(records, set())
        self.assertEqual([summary.person_id for summary in summaries], [2])

    def test_last_event_is_relabelled(self):
        records = [
            _record(1, date(2024, 1, 5)),
            _record(1, date(2024, 2, 9), event="Pastoral check -In"),
        ]
        (summary,) = self.aggregator.summarize(records, set())
        self.assertEqual(summary.last_event_date, date(2024, 2, 9))
        self.assertEqual(summary.last_event_name, PASTORAL_CHECK_IN)

    def test_last_sunday_service_uses_canonical_label(self):
        (summary,) = self.aggregator.summarize(
            [_record(1, date(2024, 2, 4), event="sunday service (2nd)")], set()
        )
        self.assertEqual(summary.last_event_name, "Sunday Service")

    def test_guest_flag_follows_directory_membership(self):
        records = [
            _record(1, date(2024, 1, 5)),
            _record(2, date(2024, 1, 5), last="Doe", first="Jane"),
        ]
        summaries = {s.person_id: s for s in self.aggregator.summarize(records, {"smith_john"})}
        self.assertEqual(summaries[1].guest_flag, "")
        self.assertFalse(summaries[1].is_guest)
        self.assertEqual(summaries[2].guest_flag, "Guest")


def _grid_snapshot(rows):
    snapshot = RosterSnapshot(tab="Event Attendance", first_data_row=5, width=5)
    for offset, values in enumerate(rows):
        snapshot.rows.append(
            RosterRow(
                row=5 + offset,
                last_name=values[0] or "",
                first_name=values[1] or "",
                cells=tuple(to_cells(values)),
            )
        )
    return snapshot


class TestCollectors(unittest.TestCase):
    def setUp(self):
        self.header = GridHeader(
            dates=to_cells([None, None, date(2024, 1, 7), date(2024, 1, 14), None]),
            event_names=to_cells([None, None, "Bible Study", "Post event name here", "Picnic"]),
            first_column=3,
        )

    def test_header_drops_placeholder_and_undated_columns(self):
        columns = self.header.columns()
        self.assertEqual([(c.column, c.event_name) for c in columns], [(3, "Bible Study")])

    def test_grid_without_name_row_uses_label(self):
        header = GridHeader(
            dates=to_cells([None, None, date(2024, 1, 7), "01/14/2024"]),
            event_names=None,
            first_column=3,
            event_label="Sunday Service",
        )
        self.assertEqual(
            [(c.event_date, c.event_name) for c in header.columns()],
            [(date(2024, 1, 7), "Sunday Service"), (date(2024, 1, 14), "Sunday Service")],
        )

    def test_ticked_cells_become_records(self):
        registry = IdentityRegistry()
        snapshot = _grid_snapshot(
            [
                ["Smith", "John", True, True, True],
                ["Doe", "Jane", False, None, None],
                ["Text", "Tick", "TRUE", None, None],
            ]
        )
        records = collect_grid(snapshot, self.header, registry)

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].event_name, "Bible Study")
        self.assertEqual(records[0].event_date, date(2024, 1, 7))
        # every named row resolves an ID, attended or not
        self.assertEqual(len(registry), 3)

    def test_pastoral_log_keeps_one_entry_per_person_and_day(self):
        registry = IdentityRegistry()
        entries = [
            LogEntry(2, "Doe", "Jane", Cell.of("Pastoral check -In"), Cell.of(date(2024, 2, 20))),
            LogEntry(3, "Doe", "Jane", Cell.of("pastoral checkin"), Cell.of("02/20/2024")),
            LogEntry(4, "Doe", "Jane", Cell.of("Pastoral Check-In"), Cell.of(date(2024, 3, 1))),
            LogEntry(5, "Doe", "Jane", Cell.of("Sunday Service"), Cell.of(date(2024, 3, 3))),
            LogEntry(6, "Doe", "Jane", Cell.of("Pastoral Check-In"), Cell.of("not a date")),
        ]
        records = collect_pastoral_log(entries, registry, source="Attendance Log")

        self.assertEqual([r.event_date for r in records], [date(2024, 2, 20), date(2024, 3, 1)])
        self.assertTrue(all(r.event_name == PASTORAL_CHECK_IN for r in records))

    def test_pastoral_log_ignores_labels_that_only_mention_a_check_in(self):
        registry = IdentityRegistry()
        entries = [
            LogEntry(2, "Doe", "Jane", Cell.of("Pastoral Check-In follow-up call"), Cell.of(date(2024, 3, 1))),
            LogEntry(3, "Doe", "Jane", Cell.of("Missed pastoral check in"), Cell.of(date(2024, 3, 2))),
        ]

        self.assertEqual(collect_pastoral_log(entries, registry, source="Attendance Log"), [])
        self.assertEqual(len(registry), 0)
        self.assertTrue(is_pastoral_check_in(" Pastoral check -In "))
        self.assertFalse(is_pastoral_check_in("Missed pastoral check in"))


if __name__ == "__main__":
    unittest.main()
