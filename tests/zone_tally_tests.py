import unittest

from core.series import SampleSeries
from core.zone_tally import compute_zone_stats, compute_zone_tally
from hr_zones import (
    DEFAULT_ZONE_THRESHOLDS,
    HR_ZONE_ORDER,
    assign_zones,
    classify_hr_zone,
    get_zone_thresholds,
)


class HrZoneTests(unittest.TestCase):
    def test_default_boundaries_are_inclusive(self):
        self.assertEqual(classify_hr_zone(116), 'Zone 1')
        self.assertEqual(classify_hr_zone(117), 'Zone 2')
        self.assertEqual(classify_hr_zone(136), 'Zone 2')
        self.assertEqual(classify_hr_zone(155), 'Zone 3')
        self.assertEqual(classify_hr_zone(175), 'Zone 4')
        self.assertEqual(classify_hr_zone(176), 'Zone 5')

    def test_missing_heart_rate_has_no_zone(self):
        self.assertIsNone(classify_hr_zone(None))
        self.assertIsNone(classify_hr_zone(0))
        self.assertIsNone(classify_hr_zone('abc'))

    def test_max_hr_thresholds(self):
        thresholds = get_zone_thresholds(200)
        self.assertAlmostEqual(thresholds['Zone 1'], 120.0)
        self.assertAlmostEqual(thresholds['Zone 4'], 180.0)
        self.assertEqual(classify_hr_zone(185, thresholds), 'Zone 5')
        self.assertEqual(get_zone_thresholds(None), get_zone_thresholds(185))

    def test_assign_zones_with_custom_classifier(self):
        labels = assign_zones([100, 200], DEFAULT_ZONE_THRESHOLDS, lambda hr, bounds: 'Zone 3')
        self.assertEqual(labels, ['Zone 3', 'Zone 3'])


class ZoneTallyTests(unittest.TestCase):
    def test_time_is_booked_to_earlier_sample(self):
        series = SampleSeries.from_streams([0, 10, 25], zones=['Zone 1', 'Zone 3', 'Zone 5'])
        tally = compute_zone_tally(series)
        self.assertEqual(tally['Zone 1'], 10.0)
        self.assertEqual(tally['Zone 3'], 15.0)
        self.assertEqual(tally['Zone 5'], 0.0)
        self.assertEqual(list(tally), list(HR_ZONE_ORDER))

    def test_conservation_for_fully_labelled_series(self):
        times = [0.0, 0.5, 1.0, 1.0, 4.25, 9.0, 9.5, 30.0, 31.75]
        zones = ['Zone 1', 'Zone 2', 'Zone 5', 'Zone 5', 'Zone 3', 'Zone 4', 'Zone 2', 'Zone 1', None]
        series = SampleSeries.from_streams(times, zones=zones)
        tally = compute_zone_tally(series)
        self.assertAlmostEqual(sum(tally.values()), times[-1] - times[0], places=9)

    def test_unlabelled_samples_book_nothing(self):
        series = SampleSeries.from_streams([0, 10, 20, 30], zones=['Zone 2', None, 'Zone 2', 'Zone 4'])
        tally = compute_zone_tally(series)
        self.assertEqual(tally['Zone 2'], 20.0)
        self.assertEqual(sum(tally.values()), 20.0)

    def test_max_gap_caps_each_interval(self):
        series = SampleSeries.from_streams([0, 1, 61, 62], zones=['Zone 2'] * 4)
        self.assertEqual(compute_zone_tally(series)['Zone 2'], 62.0)
        self.assertEqual(compute_zone_tally(series, max_gap=10)['Zone 2'], 12.0)

    def test_short_series_is_all_zero(self):
        self.assertEqual(sum(compute_zone_tally(SampleSeries()).values()), 0.0)
        single = SampleSeries.from_streams([5], zones=['Zone 1'])
        self.assertEqual(sum(compute_zone_tally(single).values()), 0.0)


class ZoneStatsTests(unittest.TestCase):
    def test_stats_per_zone(self):
        series = SampleSeries.from_streams(
            [0, 10, 20, 30, 40],
            heart_rate=[110, 114, 150, 152, 160],
            zone_classifier=classify_hr_zone,
        )
        stats = {s.zone: s for s in compute_zone_stats(series)}

        self.assertEqual(len(stats), 5)
        self.assertEqual(stats['Zone 1'].count, 2)
        self.assertEqual(stats['Zone 1'].avg_hr, 112)
        self.assertEqual(stats['Zone 1'].min_hr, 110)
        self.assertEqual(stats['Zone 1'].seconds, 20.0)
        self.assertAlmostEqual(stats['Zone 1'].percent, 50.0)
        self.assertEqual(stats['Zone 3'].max_hr, 152)
        self.assertAlmostEqual(stats['Zone 3'].percent, 50.0)
        self.assertEqual(stats['Zone 4'].count, 1)
        self.assertEqual(stats['Zone 4'].seconds, 0.0)
        self.assertFalse(stats['Zone 5'].has_data)
        self.assertEqual(stats['Zone 5'].avg_hr, 0)
        self.assertEqual(stats['Zone 1'].name, 'Recovery')

    def test_percent_is_share_of_tallied_time(self):
        series = SampleSeries.from_streams(
            [0, 10, 20, 80, 90],
            heart_rate=[110, 150, None, 150, 150],
            zones=['Zone 1', 'Zone 3', None, 'Zone 3', 'Zone 3'],
        )
        stats = {s.zone: s for s in compute_zone_stats(series)}
        self.assertEqual(stats['Zone 1'].seconds, 10.0)
        self.assertEqual(stats['Zone 3'].seconds, 20.0)
        self.assertAlmostEqual(stats['Zone 1'].percent, 100.0 / 3)
        self.assertAlmostEqual(stats['Zone 3'].percent, 200.0 / 3)
        self.assertAlmostEqual(sum(s.percent for s in stats.values()), 100.0)

    def test_percent_with_capped_gaps(self):
        series = SampleSeries.from_streams([0, 1, 61, 62], heart_rate=[110, 110, 150, 150],
                                           zone_classifier=classify_hr_zone)
        tally = compute_zone_tally(series, max_gap=10)
        stats = {s.zone: s for s in compute_zone_stats(series, tally)}
        self.assertAlmostEqual(stats['Zone 1'].percent, 11.0 / 12.0 * 100.0)
        self.assertAlmostEqual(sum(s.percent for s in stats.values()), 100.0)

    def test_average_heart_rate_rounds_half_up(self):
        series = SampleSeries.from_streams([0, 1], heart_rate=[150, 151], zones=['Zone 3', 'Zone 3'])
        stats = {s.zone: s for s in compute_zone_stats(series)}
        self.assertEqual(stats['Zone 3'].avg_hr, 151)

    def test_stats_on_empty_series(self):
        stats = compute_zone_stats(SampleSeries())
        self.assertEqual([s.zone for s in stats], list(HR_ZONE_ORDER))
        self.assertTrue(all(not s.has_data and s.percent == 0.0 for s in stats))


if __name__ == "__main__":
    unittest.main()
