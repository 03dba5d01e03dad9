""" Event summary data (ESD) objects used as converter input

    The converter only needs the attributes of the classes in this module,
    any object offering the same attributes can be converted.  The classes
    correspond to the detector records of one event: tracks, calorimeter
    cells and triggers, muon tracks and clusters, ZDC and VZERO readouts,
    V0 and cascade candidates, the timing response and optional Monte
    Carlo truth.

    Objects refer to each other by their index within the event, never by
    reference:

    - a :class:`V0` and a :class:`Cascade` refer to daughter tracks by
      their index in :attr:`Event.tracks`.
    - a :class:`MuonTrack` refers to its clusters by
      :attr:`MuonCluster.id`.
    - a :class:`TOFMatch` refers to a track by its index.

    Events can be read from a JSON lines dump using :func:`read_events`.
    Each line holds one event, with the same keys as the keyword arguments
    of the classes below, e.g.::

        {"header": {"bunch_crossing": 1, "orbit": 2, "period": 3},
         "vertex": {"x": 0.1, "y": 0.2, "z": 1.5},
         "tracks": [{"alpha": 0.3, "signed1pt": 1.2}],
         "v0s": [{"positive": 0, "negative": 1, "on_fly": false}]}

"""
import json

import numpy as np

from .generators import GeneratorKind
from .storage import (CALO_EMCAL, CALO_PHOS, N_VZERO_CHANNELS, N_ZDC_TDC,
                      N_ZDC_TOWERS)


class Header(object):

    """Event header with the counters that identify the event"""

    def __init__(self, bunch_crossing=0, orbit=0, period=0):
        self.bunch_crossing = bunch_crossing
        self.orbit = orbit
        self.period = period


class Vertex(object):

    """Position of a (primary) vertex"""

    def __init__(self, x=0., y=0., z=0.):
        self.x = x
        self.y = y
        self.z = z


class TOFMatch(object):

    """A track that can be matched to a TOF cluster"""

    def __init__(self, track_index, dx=0., dz=0., length=0.):
        self.track_index = track_index
        self.dx = dx
        self.dz = dz
        self.length = length


class TOFCluster(object):

    """A TOF cluster with the tracks that could be matched to it"""

    def __init__(self, channel=0, tot=0., matches=()):
        self.channel = channel
        self.tot = tot
        self.matches = [_build(TOFMatch, match) for match in matches]


class Track(object):

    """A reconstructed barrel track

    :param covariance: the 15 independent covariance entries, in the
        order of :data:`ao2d.storage.TRACK_COVARIANCE`.
    :param tpc_inner_p: momentum at the inner wall of the TPC, None if
        the track did not reach the TPC.
    :param tof_clusters: :class:`TOFCluster` objects matchable to this
        track.

    """

    def __init__(self, x=0., alpha=0., y=0., z=0., snp=0., tgl=0.,
                 signed1pt=0., covariance=None, tpc_inner_p=None, status=0,
                 its_cluster_map=0, its_ncls=0, its_chi2=0., tpc_ncls=0,
                 tpc_chi2=0., trd_ntracklets=0, trd_chi2=0., tof_chi2=0.,
                 tpc_signal=0., trd_signal=0., tof_signal=0., length=0.,
                 label=-1, tof_label=(-1, -1, -1), tof_clusters=()):
        self.x = x
        self.alpha = alpha
        self.y = y
        self.z = z
        self.snp = snp
        self.tgl = tgl
        self.signed1pt = signed1pt
        if covariance is None:
            covariance = np.zeros(15)
        self.covariance = covariance
        self.tpc_inner_p = tpc_inner_p
        self.status = status
        self.its_cluster_map = its_cluster_map
        self.its_ncls = its_ncls
        self.its_chi2 = its_chi2
        self.tpc_ncls = tpc_ncls
        self.tpc_chi2 = tpc_chi2
        self.trd_ntracklets = trd_ntracklets
        self.trd_chi2 = trd_chi2
        self.tof_chi2 = tof_chi2
        self.tpc_signal = tpc_signal
        self.trd_signal = trd_signal
        self.tof_signal = tof_signal
        self.length = length
        self.label = label
        self.tof_label = tof_label
        self.tof_clusters = [_build(TOFCluster, cluster)
                             for cluster in tof_clusters]


class CaloCell(object):

    def __init__(self, number=0, amplitude=0., time=0., high_gain=True):
        self.number = number
        self.amplitude = amplitude
        self.time = time
        self.high_gain = high_gain


class CaloCells(object):

    """The fired cells of one calorimeter

    :param type: calorimeter type, :data:`~ao2d.storage.CALO_EMCAL` or
                 :data:`~ao2d.storage.CALO_PHOS`, common to all cells.

    """

    def __init__(self, type=CALO_EMCAL, cells=()):
        self.type = type
        self.cells = [_build(CaloCell, cell) for cell in cells]

    def __len__(self):
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)


class CaloTrigger(object):

    """A calorimeter trigger (FastOR) record

    :param fastor_abs_id: absolute FastOR index, as mapped by the
        calorimeter geometry from the trigger position.

    """

    def __init__(self, fastor_abs_id=0, l0_amplitude=0., l1_time_sum=0.,
                 n_l0_times=0, trigger_bits=0):
        self.fastor_abs_id = fastor_abs_id
        self.l0_amplitude = l0_amplitude
        self.l1_time_sum = l1_time_sum
        self.n_l0_times = n_l0_times
        self.trigger_bits = trigger_bits


class MuonCluster(object):

    """A muon chamber cluster, identified within the event by its id"""

    def __init__(self, id, x=0., y=0., z=0., err_x=0., err_y=0., charge=0.,
                 chi2=0.):
        self.id = id
        self.x = x
        self.y = y
        self.z = z
        self.err_x = err_x
        self.err_y = err_y
        self.charge = charge
        self.chi2 = chi2


class MuonTrack(object):

    """A muon spectrometer track

    :param covariances: full 5x5 covariance matrix.
    :param cluster_ids: ids of the :class:`MuonCluster` objects of this
                        track.

    """

    def __init__(self, inverse_bending_momentum=0., theta_x=0., theta_y=0.,
                 z=0., bending_coor=0., non_bending_coor=0.,
                 covariances=None, chi2=0., chi2_match_trigger=0.,
                 cluster_ids=()):
        self.inverse_bending_momentum = inverse_bending_momentum
        self.theta_x = theta_x
        self.theta_y = theta_y
        self.z = z
        self.bending_coor = bending_coor
        self.non_bending_coor = non_bending_coor
        if covariances is None:
            covariances = np.zeros((5, 5))
        self.covariances = covariances
        self.chi2 = chi2
        self.chi2_match_trigger = chi2_match_trigger
        self.cluster_ids = list(cluster_ids)


class ZDC(object):

    """Zero degree calorimeter readout"""

    def __init__(self, zem1_energy=0., zem2_energy=0., znc_tower_energy=None,
                 zna_tower_energy=None, zpc_tower_energy=None,
                 zpa_tower_energy=None, znc_tower_energy_lr=None,
                 zna_tower_energy_lr=None, zpc_tower_energy_lr=None,
                 zpa_tower_energy_lr=None, tdc_corrected=None,
                 zna_hit=False, znc_hit=False, zpa_hit=False, zpc_hit=False,
                 zem1_hit=False, zem2_hit=False):
        self.zem1_energy = zem1_energy
        self.zem2_energy = zem2_energy
        self.znc_tower_energy = _or_zeros(znc_tower_energy, N_ZDC_TOWERS)
        self.zna_tower_energy = _or_zeros(zna_tower_energy, N_ZDC_TOWERS)
        self.zpc_tower_energy = _or_zeros(zpc_tower_energy, N_ZDC_TOWERS)
        self.zpa_tower_energy = _or_zeros(zpa_tower_energy, N_ZDC_TOWERS)
        self.znc_tower_energy_lr = _or_zeros(znc_tower_energy_lr, N_ZDC_TOWERS)
        self.zna_tower_energy_lr = _or_zeros(zna_tower_energy_lr, N_ZDC_TOWERS)
        self.zpc_tower_energy_lr = _or_zeros(zpc_tower_energy_lr, N_ZDC_TOWERS)
        self.zpa_tower_energy_lr = _or_zeros(zpa_tower_energy_lr, N_ZDC_TOWERS)
        self.tdc_corrected = _or_zeros(tdc_corrected, N_ZDC_TDC)
        self.zna_hit = zna_hit
        self.znc_hit = znc_hit
        self.zpa_hit = zpa_hit
        self.zpc_hit = zpc_hit
        self.zem1_hit = zem1_hit
        self.zem2_hit = zem2_hit


class VZERO(object):

    """VZERO readout, one value per channel"""

    def __init__(self, adc=None, time=None, width=None):
        self.adc = _or_zeros(adc, N_VZERO_CHANNELS)
        self.time = _or_zeros(time, N_VZERO_CHANNELS)
        self.width = _or_zeros(width, N_VZERO_CHANNELS)


class V0(object):

    """A V0 candidate

    :param on_fly: True if found by the on-the-fly finder, False for the
                   offline finder.

    """

    def __init__(self, positive, negative, on_fly=False):
        self.positive = positive
        self.negative = negative
        self.on_fly = on_fly


class Cascade(object):

    """A cascade candidate: the daughters of its V0 and a bachelor track"""

    def __init__(self, positive, negative, bachelor, on_fly=False):
        self.positive = positive
        self.negative = negative
        self.bachelor = bachelor
        self.on_fly = on_fly


class TimingResponse(object):

    """Start time estimates of the event per momentum bin

    :param bins: list of (min momentum, max momentum, start time,
        resolution, mask) tuples.  Each momentum in the range of a bin
        gets the estimate of that bin.

    """

    def __init__(self, bins=()):
        self.bins = [tuple(b) for b in bins]

    @property
    def n_momentum_bins(self):
        return len(self.bins)

    def min_momentum(self, i):
        return self.bins[i][0]

    def max_momentum(self, i):
        return self.bins[i][1]

    def _bin_for(self, momentum):
        for b in self.bins:
            if b[0] <= momentum < b[1]:
                return b
        return self.bins[-1]

    def start_time(self, momentum):
        return self._bin_for(momentum)[2]

    def start_time_resolution(self, momentum):
        return self._bin_for(momentum)[3]

    def start_time_mask(self, momentum):
        return self._bin_for(momentum)[4]


class GeneratorHeader(object):

    """Header of an event generator, cocktails contain other headers"""

    def __init__(self, kind=GeneratorKind.GENERIC, headers=()):
        if isinstance(kind, str):
            kind = GeneratorKind[kind.upper()]
        self.kind = GeneratorKind(kind)
        self.headers = [_build(GeneratorHeader, header) for header in headers]


class MCParticle(object):

    """A generated particle, mothers and daughters are local indices"""

    def __init__(self, pdg_code=0, mother=(-1, -1), daughter=(-1, -1),
                 px=0., py=0., pz=0., vx=0., vy=0., vz=0., vt=0.):
        self.pdg_code = pdg_code
        self.mother = tuple(mother)
        self.daughter = tuple(daughter)
        self.px = px
        self.py = py
        self.pz = pz
        self.vx = vx
        self.vy = vy
        self.vz = vz
        self.vt = vt


class MCEvent(object):

    """Monte Carlo truth of an event"""

    def __init__(self, vertex=None, header=None, particles=()):
        self.vertex = _build(Vertex, vertex)
        if header is None:
            header = GeneratorHeader()
        self.header = _build(GeneratorHeader, header)
        self.particles = [_build(MCParticle, p) for p in particles]


class Event(object):

    """All detector records of one event

    Subdetector objects (zdc, vzero, timing, mc) may be None when the data
    is not available.  Lists default to empty.

    """

    def __init__(self, header=None, vertex=None, tracks=(), emcal_cells=None,
                 phos_cells=None, calo_triggers=(), muon_tracks=(),
                 muon_clusters=(), zdc=None, vzero=None, v0s=(), cascades=(),
                 timing=None, mc=None):
        self.header = _build(Header, header) or Header()
        self.vertex = _build(Vertex, vertex)
        self.tracks = [_build(Track, track) for track in tracks]
        self.emcal_cells = _calo_cells(emcal_cells, CALO_EMCAL)
        self.phos_cells = _calo_cells(phos_cells, CALO_PHOS)
        self.calo_triggers = [_build(CaloTrigger, t) for t in calo_triggers]
        self.muon_tracks = [_build(MuonTrack, t) for t in muon_tracks]
        self.muon_clusters = [_build(MuonCluster, c) for c in muon_clusters]
        self.zdc = _build(ZDC, zdc)
        self.vzero = _build(VZERO, vzero)
        self.v0s = [_build(V0, v0) for v0 in v0s]
        self.cascades = [_build(Cascade, cascade) for cascade in cascades]
        self.timing = _build(TimingResponse, timing)
        self.mc = _build(MCEvent, mc)

    def find_muon_cluster(self, cluster_id):
        """Get the muon cluster with this id, or None"""

        for cluster in self.muon_clusters:
            if cluster.id == cluster_id:
                return cluster
        return None

    @classmethod
    def from_dict(cls, data):
        return cls(**data)


def has_tracks(event):
    """Event cut: accept only events with reconstructed tracks"""

    return len(event.tracks) > 0


def read_events(path):
    """Read events from a JSON lines file

    :param path: path to the file, one JSON encoded event per line.
    :return: generator of :class:`Event` objects.

    """
    with open(path, encoding='utf-8') as source:
        for line in source:
            if not line.strip():
                continue
            yield Event.from_dict(json.loads(line))


def count_events(path):
    """Count the events in a JSON lines file, for the progressbar"""

    with open(path, encoding='utf-8') as source:
        return sum(1 for line in source if line.strip())


def _build(cls, value):
    """Create an instance from a dictionary, instances pass unchanged"""

    if isinstance(value, dict):
        return cls(**value)
    if isinstance(value, (list, tuple)) and cls is TimingResponse:
        return cls(value)
    return value


def _calo_cells(value, type):
    """Cells of one calorimeter, the type defaults to that calorimeter"""

    if value is None:
        return CaloCells(type)
    if isinstance(value, dict):
        return CaloCells(**dict({'type': type}, **value))
    if isinstance(value, (list, tuple)):
        return CaloCells(type, value)
    return value


def _or_zeros(values, shape):
    if values is None:
        return np.zeros(shape)
    return np.asarray(values, dtype=float)
