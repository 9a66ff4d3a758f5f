import unittest

from core.downsample import downsample, downsample_indices, downsample_stride
from core.series import Sample, SampleSeries


class DownsampleTests(unittest.TestCase):
    def test_stride_is_ceiling_of_ratio(self):
        self.assertEqual(downsample_stride(1000, 300), 4)
        self.assertEqual(downsample_stride(900, 300), 3)
        self.assertEqual(downsample_stride(10, 300), 1)
        self.assertEqual(downsample_stride(0, 300), 1)

    def test_keeps_exact_indices_from_first(self):
        items = list(range(1000))
        kept = downsample(items, 300)
        self.assertEqual(kept, list(range(0, 1000, 4)))
        self.assertEqual(kept[0], 0)
        self.assertLessEqual(len(kept), 300)

    def test_output_never_exceeds_budget(self):
        for n in (1, 7, 299, 300, 301, 599, 600, 601, 12345):
            for budget in (1, 2, 3, 50, 300):
                kept = list(downsample_indices(n, budget))
                self.assertLessEqual(len(kept), budget, (n, budget))
                self.assertEqual(kept[0], 0)
                self.assertTrue(all(b > a for a, b in zip(kept, kept[1:])))

    def test_short_input_is_returned_unchanged(self):
        series = SampleSeries([Sample(float(t)) for t in range(5)])
        self.assertIs(downsample(series, 10), series)
        self.assertEqual(downsample([1, 2, 3], 3), [1, 2, 3])

    def test_empty_input(self):
        self.assertEqual(downsample([], 10), [])
        self.assertEqual(len(downsample(SampleSeries(), 10)), 0)

    def test_series_in_series_out(self):
        series = SampleSeries([Sample(float(t), altitude=float(t)) for t in range(10)])
        kept = downsample(series, 3)
        self.assertIsInstance(kept, SampleSeries)
        self.assertEqual(kept.elapsed_times(), [0.0, 4.0, 8.0])

    def test_rejects_non_positive_budget(self):
        with self.assertRaises(ValueError):
            downsample([1, 2, 3], 0)


if __name__ == "__main__":
    unittest.main()
