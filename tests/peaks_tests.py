import unittest

import numpy as np

from core.peaks import PeakSettings, detect_hill_peaks, prominence_after
from core.series import SampleSeries
from synthetic_tracks import profile_track, symmetric_hill_track


class HillPeakTests(unittest.TestCase):
    def test_single_symmetric_hill(self):
        peaks = detect_hill_peaks(symmetric_hill_track())
        self.assertEqual(len(peaks), 1)
        peak = peaks[0]
        self.assertEqual(peak.elapsed_time, 600.0)
        self.assertEqual(peak.altitude, 100.0)
        self.assertEqual(peak.heart_rate, 170)
        self.assertEqual(peak.index, 600)
        self.assertEqual(peak.distance, 1800.0)
        self.assertAlmostEqual(peak.prominence, 100.0)

    def test_flat_trace_has_no_peaks(self):
        series = profile_track([0, 1199], [250, 250], 1200)
        self.assertEqual(detect_hill_peaks(series), [])

    def test_sparse_series_has_no_peaks(self):
        series = SampleSeries.from_streams(
            [t * 60.0 for t in range(19)],
            heart_rate=[150] * 19,
            altitude=[0, 50, 100, 50, 0] * 3 + [0, 80, 0, 0],
        )
        self.assertEqual(detect_hill_peaks(series), [])

    def test_samples_missing_heart_rate_do_not_count(self):
        times = list(range(40))
        altitude = np.interp(times, [0, 20, 39], [0, 40, 0]).tolist()
        heart_rate = [150 if t % 2 == 0 else None for t in times]  # 20 valid samples
        series = SampleSeries.from_streams(times, heart_rate=heart_rate, altitude=altitude)
        self.assertEqual(len(detect_hill_peaks(series)), 1)

        heart_rate[0] = None  # 19 valid samples
        series = SampleSeries.from_streams(times, heart_rate=heart_rate, altitude=altitude)
        self.assertEqual(detect_hill_peaks(series), [])

    def test_spacing_keeps_first_of_close_summits(self):
        # Summits at 200 s and 290 s are 90 s apart; the one at 500 s is clear.
        series = profile_track(
            [0, 150, 200, 245, 290, 335, 450, 500, 550, 899],
            [0, 0, 50, 0, 50, 0, 0, 50, 0, 0],
            900,
        )
        peaks = detect_hill_peaks(series)
        self.assertEqual([p.elapsed_time for p in peaks], [200.0, 500.0])

    def test_minor_bump_is_rejected_by_prominence(self):
        # A 10 m bump on a long climb never drops 15 m within 5 minutes.
        series = profile_track(
            [0, 200, 260, 320, 900, 1100, 1400],
            [0, 60, 70, 60, 200, 0, 0],
            1400,
        )
        peaks = detect_hill_peaks(series)
        self.assertEqual([p.elapsed_time for p in peaks], [900.0])

    def test_plateau_keeps_first_sample(self):
        series = profile_track([0, 300, 600, 630, 930, 1199], [0, 0, 100, 100, 0, 0], 1200)
        peaks = detect_hill_peaks(series)
        self.assertEqual(len(peaks), 1)
        self.assertEqual(peaks[0].elapsed_time, 600.0)

    def test_properties_hold_on_noisy_terrain(self):
        rng = np.random.default_rng(7)
        times = np.arange(3600, dtype=float)
        altitude = 200 + 60 * np.sin(times / 180.0) + np.cumsum(rng.normal(0, 0.8, len(times)))
        series = SampleSeries.from_streams(
            times.tolist(),
            heart_rate=[150] * len(times),
            altitude=altitude.tolist(),
        )
        peaks = detect_hill_peaks(series)
        self.assertGreater(len(peaks), 0)
        for earlier, later in zip(peaks, peaks[1:]):
            self.assertGreater(later.elapsed_time, earlier.elapsed_time)
            self.assertGreaterEqual(later.elapsed_time - earlier.elapsed_time, 120.0)
        for peak in peaks:
            self.assertGreaterEqual(peak.prominence, 15.0)

    def test_custom_settings(self):
        series = profile_track([0, 100, 200, 300, 899], [0, 0, 10, 0, 0], 900)
        self.assertEqual(detect_hill_peaks(series), [])
        loose = PeakSettings(min_prominence=5.0)
        self.assertEqual([p.elapsed_time for p in detect_hill_peaks(series, loose)], [200.0])

    def test_prominence_window_is_bounded(self):
        times = [0.0, 100.0, 301.0]
        alts = [50.0, 45.0, 0.0]
        self.assertEqual(prominence_after(times, alts, 0, 300.0), 5.0)


if __name__ == "__main__":
    unittest.main()
