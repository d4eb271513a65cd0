# -*- coding: utf-8 -*-
"""
Unit tests for coincidence.utils
"""

import unittest

import neo
import numpy as np
import quantities as pq
from numpy.testing import assert_array_almost_equal, assert_array_equal

from coincidence import utils


class TestUtils(unittest.TestCase):

    def test_is_time_quantity(self):
        self.assertTrue(utils.is_time_quantity(1 * pq.ms))
        self.assertTrue(utils.is_time_quantity([1, 2] * pq.s, 3 * pq.ms))
        self.assertTrue(utils.is_time_quantity(
            neo.SpikeTrain([1] * pq.s, t_stop=2 * pq.s)))
        self.assertFalse(utils.is_time_quantity(1.))
        self.assertFalse(utils.is_time_quantity(1 * pq.mV))
        self.assertFalse(utils.is_time_quantity(None))
        self.assertTrue(utils.is_time_quantity(None, allow_none=True))

    def test_deprecated_alias(self):
        @utils.deprecated_alias(nbins='n_bins')
        def histogram_size(n_bins):
            return n_bins

        self.assertEqual(histogram_size(n_bins=3), 3)
        with self.assertWarns(DeprecationWarning):
            self.assertEqual(histogram_size(nbins=3), 3)
        self.assertRaises(TypeError, histogram_size, nbins=3, n_bins=3)

    def test_prepare_spiketrains_plain(self):
        times_a, times_b, dt = utils.prepare_spiketrains([1, 2], (3., 4.), 1)
        self.assertEqual(times_a.dtype, np.float64)
        self.assertEqual(times_b.dtype, np.float64)
        assert_array_equal(times_a, [1., 2.])
        assert_array_equal(times_b, [3., 4.])
        self.assertIsInstance(dt, float)
        self.assertEqual(dt, 1.)

    def test_prepare_spiketrains_units(self):
        spiketrain_a = neo.SpikeTrain([1., 2.], units='ms', t_stop=5.)
        spiketrain_b = neo.SpikeTrain([0.003, 0.004], units='s', t_stop=5.)
        times_a, times_b, dt = utils.prepare_spiketrains(
            spiketrain_a, spiketrain_b, 0.001 * pq.s)
        assert_array_almost_equal(times_a, [1., 2.])
        assert_array_almost_equal(times_b, [3., 4.])
        self.assertAlmostEqual(dt, 1.)

        times_a, times_b, dt = utils.prepare_spiketrains(
            [1., 2.] * pq.s, [1500., 2500.] * pq.ms, 10 * pq.ms)
        assert_array_almost_equal(times_b, [1.5, 2.5])
        self.assertAlmostEqual(dt, 0.01)

    def test_prepare_spiketrains_errors(self):
        spiketrain = neo.SpikeTrain([1., 2.], units='ms', t_stop=5.)
        self.assertRaises(TypeError, utils.prepare_spiketrains,
                          spiketrain, [1., 2.], 1 * pq.ms)
        self.assertRaises(TypeError, utils.prepare_spiketrains,
                          spiketrain, spiketrain, 1.)
        self.assertRaises(TypeError, utils.prepare_spiketrains,
                          [1., 2.], [1., 2.], 1 * pq.ms)
        self.assertRaises(TypeError, utils.prepare_spiketrains,
                          [1., 2.] * pq.mV, [1., 2.] * pq.mV, 1 * pq.ms)
        self.assertRaises(ValueError, utils.prepare_spiketrains,
                          [1., 2.], [1., 2.], -1.)
        self.assertRaises(ValueError, utils.prepare_spiketrains,
                          [1., 2.], [1., 2.], np.inf)
        self.assertRaises(ValueError, utils.prepare_spiketrains,
                          [1., 2.], [2., 1.], 1.)
        self.assertRaises(ValueError, utils.prepare_spiketrains,
                          [1., 2.], [[1.], [2.]], 1.)
        self.assertRaises(ValueError, utils.prepare_spiketrains,
                          [1., np.inf], [1., 2.], 1.)

    def test_check_n_bins(self):
        self.assertEqual(utils.check_n_bins(5), 5)
        self.assertEqual(utils.check_n_bins(np.int32(5)), 5)
        self.assertIsInstance(utils.check_n_bins(np.int64(5)), int)
        for n_bins in (0, -1, 2.5, 3., True, '3', None):
            self.assertRaises(ValueError, utils.check_n_bins, n_bins)

    def test_check_histogram_buffer(self):
        buffer = utils.check_histogram_buffer(None, 4)
        assert_array_equal(buffer, [0, 0, 0, 0])
        self.assertTrue(np.issubdtype(buffer.dtype, np.integer))

        out = np.arange(3)
        self.assertIs(utils.check_histogram_buffer(out, 3), out)
        self.assertRaises(ValueError, utils.check_histogram_buffer, out, 4)
        self.assertRaises(ValueError, utils.check_histogram_buffer,
                          np.zeros((3, 1), dtype=int), 3)
        self.assertRaises(TypeError, utils.check_histogram_buffer,
                          np.zeros(3), 3)
        self.assertRaises(TypeError, utils.check_histogram_buffer,
                          [0, 0, 0], 3)

    def test_package_version(self):
        import coincidence
        self.assertIsInstance(coincidence.__version__, str)
        self.assertTrue(coincidence.__version__)
        self.assertIs(coincidence.bin_overlap,
                      coincidence.overlap.bin_overlap)


if __name__ == '__main__':
    unittest.main()
