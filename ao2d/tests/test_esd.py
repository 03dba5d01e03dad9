import json
import os
import tempfile
import unittest
from unittest.mock import patch

import numpy as np

from ao2d import esd
from ao2d.storage import CALO_EMCAL, CALO_PHOS


EVENT = {'header': {'bunch_crossing': 1, 'orbit': 2, 'period': 3},
         'vertex': {'x': .1, 'y': .2, 'z': 1.5},
         'tracks': [{'alpha': .3, 'signed1pt': 1.2,
                     'tof_clusters': [{'channel': 7, 'matches': [
                         {'track_index': 0, 'dx': .5}]}]}],
         'phos_cells': [{'number': 3, 'amplitude': 1.}],
         'muon_tracks': [{'cluster_ids': [11]}],
         'muon_clusters': [{'id': 11, 'x': 2.}],
         'v0s': [{'positive': 0, 'negative': 1, 'on_fly': False}],
         'timing': [[0., 1., 10., 1., 0]],
         'mc': {'vertex': {'z': 1.4}, 'header': {'kind': 'pythia'},
                'particles': [{'pdg_code': 211}]}}


class EventTest(unittest.TestCase):

    def test_from_dict(self):
        event = esd.Event.from_dict(EVENT)
        self.assertEqual(event.header.orbit, 2)
        self.assertEqual(event.vertex.z, 1.5)
        self.assertEqual(event.tracks[0].alpha, .3)
        self.assertEqual(event.tracks[0].tof_clusters[0].matches[0].dx, .5)
        self.assertEqual(event.v0s[0].negative, 1)
        self.assertEqual(event.timing.n_momentum_bins, 1)
        self.assertEqual(event.mc.particles[0].pdg_code, 211)
        self.assertEqual(event.mc.particles[0].mother, (-1, -1))

    def test_defaults(self):
        event = esd.Event()
        self.assertIsNone(event.vertex)
        self.assertEqual(event.tracks, [])
        self.assertEqual(len(event.emcal_cells), 0)
        self.assertEqual(event.emcal_cells.type, CALO_EMCAL)
        self.assertEqual(event.phos_cells.type, CALO_PHOS)
        self.assertIsNone(event.zdc)
        self.assertIsNone(event.mc)
        self.assertEqual(event.header.bunch_crossing, 0)

    def test_calo_cells_type(self):
        event = esd.Event.from_dict(EVENT)
        self.assertEqual(event.phos_cells.type, CALO_PHOS)
        self.assertEqual([cell.number for cell in event.phos_cells], [3])
        event = esd.Event(phos_cells={'cells': [{'number': 1}]})
        self.assertEqual(event.phos_cells.type, CALO_PHOS)

    def test_find_muon_cluster(self):
        event = esd.Event.from_dict(EVENT)
        self.assertEqual(event.find_muon_cluster(11).x, 2.)
        self.assertIsNone(event.find_muon_cluster(12))

    def test_fixed_size_arrays(self):
        zdc = esd.ZDC()
        self.assertEqual(zdc.znc_tower_energy.shape, (5,))
        self.assertEqual(zdc.tdc_corrected.shape, (32, 4))
        vzero = esd.VZERO(adc=range(64))
        self.assertEqual(vzero.adc[63], 63.)
        self.assertEqual(vzero.width.shape, (64,))

    def test_track_covariance_default(self):
        np.testing.assert_array_equal(esd.Track().covariance, np.zeros(15))


class TimingResponseTest(unittest.TestCase):

    def test_bins(self):
        response = esd.TimingResponse([(0., 1., 10., 1., 1),
                                       (1., 3., 20., 2., 2)])
        self.assertEqual(response.n_momentum_bins, 2)
        self.assertEqual(response.max_momentum(1), 3.)
        self.assertEqual(response.start_time(.5), 10.)
        self.assertEqual(response.start_time_resolution(2.), 2.)
        self.assertEqual(response.start_time_mask(2.), 2)


class HasTracksTest(unittest.TestCase):

    def test_has_tracks(self):
        self.assertFalse(esd.has_tracks(esd.Event()))
        self.assertTrue(esd.has_tracks(esd.Event(tracks=[{}])))


class ReadEventsTest(unittest.TestCase):

    def setUp(self):
        fd, self.path = tempfile.mkstemp(suffix='.jsonl')
        with os.fdopen(fd, 'w') as dump:
            dump.write(json.dumps(EVENT) + '\n')
            dump.write('\n')
            dump.write(json.dumps({'tracks': [{}, {}]}) + '\n')

    def tearDown(self):
        os.remove(self.path)

    def test_read_events(self):
        events = list(esd.read_events(self.path))
        self.assertEqual(len(events), 2)
        self.assertEqual(events[0].header.period, 3)
        self.assertEqual(len(events[1].tracks), 2)

    def test_count_events(self):
        self.assertEqual(esd.count_events(self.path), 2)

    def test_utf8_dump(self):
        # a line holding only a non-breaking space counts as blank
        with open(self.path, 'a', encoding='utf-8') as dump:
            dump.write('\u00a0 \n')
        with patch('builtins.open', wraps=open) as mock_open:
            events = list(esd.read_events(self.path))
            n_events = esd.count_events(self.path)
        self.assertEqual(len(events), 2)
        self.assertEqual(n_events, 2)
        for call in mock_open.call_args_list:
            self.assertEqual(call[1]['encoding'], 'utf-8')


if __name__ == '__main__':
    unittest.main()
