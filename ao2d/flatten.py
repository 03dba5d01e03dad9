""" Flatten one event into rows of the output tables

    The :class:`EventFlattener` walks the records of an event and appends
    rows to each output table, in table order: the event itself, tracks
    (with their TOF clusters), calorimeter cells and triggers, muon tracks
    (each followed by its clusters), ZDC, VZERO, V0s, cascades and, for
    Monte Carlo, the generated particles.  Within a table the rows follow
    the order of the records in the event.

    Local indices are turned into run-wide identifiers with the offsets of
    the :class:`~ao2d.identifiers.IdentifierAllocator`, which the caller
    advances after the event with the counts returned by
    :meth:`EventFlattener.flatten`.

"""
from collections import namedtuple

import numpy as np

from .errors import (ConversionError, MissingClusterError,
                     MissingMCEventError, MissingVertexError)
from .generators import generator_bitmask
from .identifiers import offset_signed_index, pack_event_id
from .resolver import V0Index
from .storage import TRACK_COVARIANCE, TableKind, TaskMode
from .timing import event_time


EventCounts = namedtuple('EventCounts', ['tracks', 'muon_tracks', 'v0s',
                                         'on_fly_v0s', 'on_fly_cascades',
                                         'unmatched_cascades', 'rows'])


def pack_lower_triangle(matrix):
    """Get the lower triangle of a square matrix as a flat array

    Element (i, j), with j <= i, ends up at index ``i * (i + 1) / 2 + j``.

    """
    matrix = np.asarray(matrix, dtype=float)
    return matrix[np.tril_indices(len(matrix))]


class EventFlattener(object):

    """Turn events into rows of the output tables

    :param sink: :class:`~ao2d.sink.TableSink` receiving the rows.
    :param mode: :class:`~ao2d.storage.TaskMode`, Monte Carlo truth is
                 only converted in MC mode.

    """

    def __init__(self, sink, mode=TaskMode.STANDARD):
        self.sink = sink
        self.mode = mode

    def flatten(self, event, offsets):
        """Store all rows of one event

        :param event: the event, see :class:`ao2d.esd.Event`.
        :param offsets: :class:`~ao2d.identifiers.Offsets` before this
                        event.
        :return: :class:`EventCounts` with the number of tracks, muon
            tracks and V0s used for the identifiers, the number of
            skipped candidates and the number of rows per table.
        :raises MissingVertexError: if the event has no primary vertex.
        :raises MissingMCEventError: if MC truth is missing in MC mode.

        """
        if event.vertex is None:
            raise MissingVertexError('Vertex not defined for event %d' %
                                     offsets.collision)
        mc = self._get_mc_event(event)

        self._rows = {kind: 0 for kind in TableKind}
        self.store_event(event, mc)
        n_tracks = self.store_tracks(event, offsets)
        self.store_calo_cells(event, offsets)
        self.store_calo_triggers(event, offsets)
        n_muon_tracks = self.store_muon_tracks(event, offsets)
        self.store_zdc(event, offsets)
        self.store_vzero(event, offsets)
        daughters, on_fly_v0s = self.store_v0s(event, offsets)
        on_fly_cascades, unmatched = self.store_cascades(event, offsets,
                                                         daughters)
        if mc is not None:
            self.store_kinematics(mc, offsets)

        for kind in TableKind:
            self.sink.flush(kind)

        return EventCounts(n_tracks, n_muon_tracks, len(daughters),
                           on_fly_v0s, on_fly_cascades, unmatched,
                           self._rows)

    def _get_mc_event(self, event):
        if self.mode is not TaskMode.MC:
            return None
        if event.mc is None:
            raise MissingMCEventError('Could not retrieve MC event')
        if event.mc.vertex is None:
            raise MissingMCEventError('Could not retrieve MC vertex')
        return event.mc

    def _append(self, kind, row):
        self.sink.append(kind, row)
        self._rows[kind] += 1

    def store_event(self, event, mc=None):
        """Store the event row: id, primary vertex and event time"""

        header = event.header
        vertex = event.vertex
        if event.timing is not None:
            time, time_res, time_mask = event_time(event.timing)
        else:
            time, time_res, time_mask = 0., 0., 0

        row = {'event_id': pack_event_id(header.bunch_crossing, header.orbit,
                                         header.period),
               'x': vertex.x,
               'y': vertex.y,
               'z': vertex.z,
               'event_time': time,
               'event_time_res': time_res,
               'event_time_mask': time_mask}
        if mc is not None:
            row['generator_id'] = generator_bitmask(mc.header)
            row['mc_vtx_x'] = mc.vertex.x
            row['mc_vtx_y'] = mc.vertex.y
            row['mc_vtx_z'] = mc.vertex.z

        self._append(TableKind.EVENTS, row)

    def store_tracks(self, event, offsets):
        """Store the barrel tracks and their TOF clusters

        :return: number of tracks.

        """
        for idx, track in enumerate(event.tracks):
            covariance = track.covariance
            if len(covariance) != len(TRACK_COVARIANCE):
                raise ConversionError('Track %d has %d covariance entries, '
                                      'expected %d.' %
                                      (idx, len(covariance),
                                       len(TRACK_COVARIANCE)))

            row = {'collision_id': offsets.collision,
                   'x': track.x,
                   'alpha': track.alpha,
                   'y': track.y,
                   'z': track.z,
                   'snp': track.snp,
                   'tgl': track.tgl,
                   'signed1pt': track.signed1pt,
                   'tpc_inner_p': (track.tpc_inner_p
                                   if track.tpc_inner_p is not None else 0.),
                   'flags': track.status,
                   'its_cluster_map': track.its_cluster_map,
                   'tpc_ncls': track.tpc_ncls,
                   'trd_ntracklets': track.trd_ntracklets,
                   'its_chi2_ncl': (track.its_chi2 / track.its_ncls
                                    if track.its_ncls else 0.),
                   'tpc_chi2_ncl': (track.tpc_chi2 / track.tpc_ncls
                                    if track.tpc_ncls else 0.),
                   'trd_chi2': track.trd_chi2,
                   'tof_chi2': track.tof_chi2,
                   'tpc_signal': track.tpc_signal,
                   'trd_signal': track.trd_signal,
                   'tof_signal': track.tof_signal,
                   'length': track.length}
            row.update(zip(TRACK_COVARIANCE, covariance))
            if self.mode is TaskMode.MC:
                row['label'] = track.label
                row['tof_label'] = track.tof_label

            self.store_tof_clusters(track, idx, offsets)
            self._append(TableKind.TRACKS, row)

        return len(event.tracks)

    def store_tof_clusters(self, track, idx, offsets):
        """Store the TOF clusters matchable to a track

        The match belonging to this track gives the residuals and length.
        Without a match the residuals are 0 and the length ratio is -1.

        """
        n_clusters = len(track.tof_clusters)
        for cluster in track.tof_clusters:
            dx = dz = 0.
            length_ratio = -1.
            for match in cluster.matches:
                if match.track_index != idx:
                    continue
                dx = match.dx
                dz = match.dz
                if track.length > 0:
                    length_ratio = match.length / track.length
                break

            self._append(TableKind.TOF,
                         {'track_id': offsets.track + idx,
                          'tof_channel': cluster.channel,
                          'tof_ncls': n_clusters,
                          'dx': dx,
                          'dz': dz,
                          'tot': cluster.tot,
                          'length_ratio': length_ratio})

    def store_calo_cells(self, event, offsets):
        """Store the EMCAL cells followed by the PHOS cells"""

        for cells in (event.emcal_cells, event.phos_cells):
            for cell in cells:
                self._append(TableKind.CALO,
                             {'collision_id': offsets.collision,
                              'cell_number': cell.number,
                              'amplitude': cell.amplitude,
                              'time': cell.time,
                              'cell_type': 0 if cell.high_gain else 1,
                              'type': cells.type})

    def store_calo_triggers(self, event, offsets):
        for trigger in event.calo_triggers:
            self._append(TableKind.CALO_TRIGGER,
                         {'collision_id': offsets.collision,
                          'fastor_abs_id': trigger.fastor_abs_id,
                          'l0_amplitude': trigger.l0_amplitude,
                          'l1_time_sum': trigger.l1_time_sum,
                          'n_l0_times': trigger.n_l0_times,
                          'trigger_bits': trigger.trigger_bits,
                          'type': 1})

    def store_muon_tracks(self, event, offsets):
        """Store the muon tracks, each followed by its clusters

        Clusters refer to their track by the run-wide muon track id.

        :return: number of muon tracks.

        """
        for idx, muon in enumerate(event.muon_tracks):
            self._append(TableKind.MUON,
                         {'collision_id': offsets.collision,
                          'inverse_bending_momentum':
                              muon.inverse_bending_momentum,
                          'theta_x': muon.theta_x,
                          'theta_y': muon.theta_y,
                          'z': muon.z,
                          'bending_coor': muon.bending_coor,
                          'non_bending_coor': muon.non_bending_coor,
                          'covariances': pack_lower_triangle(muon.covariances),
                          'chi2': muon.chi2,
                          'chi2_match_trigger': muon.chi2_match_trigger})

            mu_track_id = offsets.muon + idx
            for cluster_id in muon.cluster_ids:
                cluster = event.find_muon_cluster(cluster_id)
                if cluster is None:
                    raise MissingClusterError('Muon track %d refers to '
                                              'unknown cluster %s.' %
                                              (idx, cluster_id))
                self._append(TableKind.MUON_CLUSTERS,
                             {'mu_track_id': mu_track_id,
                              'x': cluster.x,
                              'y': cluster.y,
                              'z': cluster.z,
                              'err_x': cluster.err_x,
                              'err_y': cluster.err_y,
                              'charge': cluster.charge,
                              'chi2': cluster.chi2})

        return len(event.muon_tracks)

    def store_zdc(self, event, offsets):
        zdc = event.zdc
        if zdc is None:
            return

        fired = 0
        hits = (zdc.zna_hit, zdc.znc_hit, zdc.zpa_hit, zdc.zpc_hit,
                zdc.zem1_hit, zdc.zem2_hit)
        for bit, hit in enumerate(hits):
            if hit:
                fired |= 1 << bit

        self._append(TableKind.ZDC,
                     {'collision_id': offsets.collision,
                      'zem1_energy': zdc.zem1_energy,
                      'zem2_energy': zdc.zem2_energy,
                      'znc_tower_energy': zdc.znc_tower_energy,
                      'zna_tower_energy': zdc.zna_tower_energy,
                      'zpc_tower_energy': zdc.zpc_tower_energy,
                      'zpa_tower_energy': zdc.zpa_tower_energy,
                      'znc_tower_energy_lr': zdc.znc_tower_energy_lr,
                      'zna_tower_energy_lr': zdc.zna_tower_energy_lr,
                      'zpc_tower_energy_lr': zdc.zpc_tower_energy_lr,
                      'zpa_tower_energy_lr': zdc.zpa_tower_energy_lr,
                      'zdc_tdc_corrected': zdc.tdc_corrected,
                      'fired': fired})

    def store_vzero(self, event, offsets):
        vzero = event.vzero
        if vzero is None:
            return

        self._append(TableKind.VZERO,
                     {'collision_id': offsets.collision,
                      'adc': vzero.adc,
                      'time': vzero.time,
                      'width': vzero.width})

    def store_v0s(self, event, offsets):
        """Store the offline V0s, on-the-fly V0s are skipped

        :return: list of the (positive, negative) daughter indices of the
                 stored V0s, in storage order, and the number of skipped
                 on-the-fly V0s.

        """
        daughters = []
        on_fly = 0
        for v0 in event.v0s:
            if v0.on_fly:
                on_fly += 1
                continue
            self._append(TableKind.V0S,
                         {'pos_track_id': offset_signed_index(v0.positive,
                                                              offsets.track),
                          'neg_track_id': offset_signed_index(v0.negative,
                                                              offsets.track)})
            daughters.append((v0.positive, v0.negative))

        return daughters, on_fly

    def store_cascades(self, event, offsets, daughters):
        """Store the offline cascades whose V0 was stored

        The V0 of a cascade is found by its daughter indices, see
        :class:`~ao2d.resolver.V0Index`.  Cascades without a matching V0
        are dropped.

        :param daughters: daughter indices of the stored V0s.
        :return: number of skipped on-the-fly cascades and the number of
                 dropped cascades without V0.

        """
        offline = [cascade for cascade in event.cascades
                   if not cascade.on_fly]
        on_fly = len(event.cascades) - len(offline)
        if not offline:
            return on_fly, 0

        v0_index = V0Index(daughters)
        unmatched = 0
        for cascade in offline:
            v0_id = v0_index.resolve(cascade.positive, cascade.negative,
                                     offsets.v0)
            if v0_id is None:
                unmatched += 1
                continue
            self._append(TableKind.CASCADES,
                         {'v0_id': v0_id,
                          'bachelor_id': offset_signed_index(cascade.bachelor,
                                                             offsets.track)})

        return on_fly, unmatched

    def store_kinematics(self, mc, offsets):
        """Store the generated particles

        Mothers and daughters keep their index within the event.

        """
        for particle in mc.particles:
            self._append(TableKind.KINEMATICS,
                         {'collision_id': offsets.collision,
                          'pdg_code': particle.pdg_code,
                          'mother': particle.mother,
                          'daughter': particle.daughter,
                          'px': particle.px,
                          'py': particle.py,
                          'pz': particle.pz,
                          'vx': particle.vx,
                          'vy': particle.vy,
                          'vz': particle.vz,
                          'vt': particle.vt})
