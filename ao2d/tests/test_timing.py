import unittest
from unittest.mock import patch

from ao2d import timing
from ao2d.errors import TimingBinsError
from ao2d.esd import TimingResponse


class WeightedEventTimeTest(unittest.TestCase):

    def test_weighted_mean(self):
        time, res = timing.weighted_event_time([10., 20.], [1., 2.])
        # weights 1 and 1/4
        self.assertAlmostEqual(time, (10. + 20. / 4) / 1.25)
        self.assertAlmostEqual(res, 1. / 1.25 ** .5)

    def test_equal_resolutions(self):
        time, res = timing.weighted_event_time([1., 2., 3.], [2., 2., 2.])
        self.assertAlmostEqual(time, 2.)
        self.assertAlmostEqual(res, 2. / 3 ** .5)

    def test_no_estimates(self):
        self.assertEqual(timing.weighted_event_time([], []), (0., 0.))

    def test_bad_resolution(self):
        self.assertRaises(TimingBinsError, timing.weighted_event_time,
                          [1., 2.], [1., 0.])


class TimeMaskBitsTest(unittest.TestCase):

    def test_bits(self):
        self.assertEqual(timing.time_mask_bits(0), 0)
        self.assertEqual(timing.time_mask_bits(1), 0b101)
        self.assertEqual(timing.time_mask_bits(2), 0b110)
        self.assertEqual(timing.time_mask_bits(3), 0b111)
        self.assertEqual(timing.time_mask_bits(4), 0)


class EventTimeTest(unittest.TestCase):

    def test_event_time(self):
        response = TimingResponse([(0., 1., 10., 1., 0),
                                   (1., 2., 20., 2., 2)])
        time, res, mask = timing.event_time(response)
        self.assertAlmostEqual(time, (10. + 20. / 4) / 1.25)
        self.assertAlmostEqual(res, 1. / 1.25 ** .5)
        self.assertEqual(mask, 0b110)

    def test_evaluated_at_bin_center(self):
        response = TimingResponse([(0., 1., 10., 1., 1)])
        with patch.object(response, 'start_time',
                          return_value=5.) as mock_time:
            timing.start_times(response)
        mock_time.assert_called_once_with(.5)

    def test_no_bins(self):
        self.assertEqual(timing.event_time(TimingResponse()), (0., 0., 0))

    def test_too_many_bins(self):
        bins = [(i, i + 1, 0., 1., 0) for i in range(11)]
        self.assertRaises(TimingBinsError, timing.event_time,
                          TimingResponse(bins))

    def test_maximum_bins(self):
        bins = [(i, i + 1, 3., 1., 0) for i in range(10)]
        time, res, mask = timing.event_time(TimingResponse(bins))
        self.assertAlmostEqual(time, 3.)


if __name__ == '__main__':
    unittest.main()
