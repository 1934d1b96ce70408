import unittest
from datetime import date, timedelta

from parking_split.dates import (
    add_one_month,
    build_month_grid,
    format_date,
    month_label,
    parse_date,
    shift_month,
)


class TestFormatAndParse(unittest.TestCase):
    def test_format_pads_fields(self):
        self.assertEqual(format_date(date(2025, 3, 7)), "2025-03-07")

    def test_round_trip_over_two_years(self):
        day = date(2024, 1, 1)
        while day < date(2026, 1, 1):
            self.assertEqual(parse_date(format_date(day)), day)
            day += timedelta(days=1)

    def test_parse_rejects_malformed(self):
        for value in ["2025-11", "10.11.2025", "2025-13-01", "abcd-ef-gh"]:
            with self.assertRaises(ValueError):
                parse_date(value)


class TestAddOneMonth(unittest.TestCase):
    def test_keeps_day_of_month(self):
        self.assertEqual(add_one_month(date(2025, 11, 10)), date(2025, 12, 10))

    def test_crosses_year_end(self):
        self.assertEqual(add_one_month(date(2025, 12, 10)), date(2026, 1, 10))

    def test_overflow_rolls_into_following_month(self):
        self.assertEqual(add_one_month(date(2025, 1, 31)), date(2025, 3, 3))
        self.assertEqual(add_one_month(date(2024, 1, 31)), date(2024, 3, 2))
        self.assertEqual(add_one_month(date(2025, 3, 31)), date(2025, 5, 1))


class TestMonthGrid(unittest.TestCase):
    def test_november_2025_starts_on_monday_before_the_first(self):
        cells = build_month_grid(2025, 11)
        self.assertEqual(len(cells), 35)
        self.assertEqual(cells[0].date, date(2025, 10, 27))
        self.assertFalse(cells[0].in_current_month)
        self.assertEqual(cells[5].date, date(2025, 11, 1))
        self.assertTrue(cells[5].in_current_month)
        self.assertEqual(cells[-1].date, date(2025, 11, 30))

    def test_december_2025_pads_with_january(self):
        cells = build_month_grid(2025, 12)
        self.assertEqual(cells[0].date, date(2025, 12, 1))
        self.assertEqual(cells[-1].date, date(2026, 1, 4))
        self.assertEqual(sum(1 for c in cells if not c.in_current_month), 4)

    def test_month_fitting_exact_weeks_has_no_padding(self):
        cells = build_month_grid(2021, 2)
        self.assertEqual(len(cells), 28)
        self.assertTrue(all(c.in_current_month for c in cells))

    def test_full_weeks_monday_first_and_contiguous(self):
        for month in range(1, 13):
            cells = build_month_grid(2026, month)
            self.assertEqual(len(cells) % 7, 0)
            self.assertEqual(cells[0].date.weekday(), 0)
            self.assertEqual(cells[-1].date.weekday(), 6)
            for a, b in zip(cells, cells[1:]):
                self.assertEqual(b.date - a.date, timedelta(days=1))


class TestMonthNavigation(unittest.TestCase):
    def test_shift_month_wraps_years(self):
        self.assertEqual(shift_month(2025, 12, 1), (2026, 1))
        self.assertEqual(shift_month(2026, 1, -1), (2025, 12))
        self.assertEqual(shift_month(2025, 11, 14), (2027, 1))

    def test_month_label(self):
        self.assertEqual(month_label(2025, 11), "November 2025")


if __name__ == "__main__":
    unittest.main()
