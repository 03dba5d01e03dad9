""" PyTables table descriptions for the flat AO2D output

    This module contains the table descriptions used by the converter to
    store the flattened event data in a HDF5 file.  There is one table for
    each :class:`TableKind`.  Tables refer to each other only through
    integer columns, which are unique within one conversion run:

    - ``collision_id`` is the row number of the owning event in the
      events table.
    - tracks are referred to by their row number in the tracks table
      (``pos_track_id``, ``neg_track_id``, ``bachelor_id``, ``track_id``).
    - ``mu_track_id`` is the row number in the muon tracks table.
    - ``v0_id`` is the row number in the V0s table.

    Some columns only exist when Monte Carlo truth is converted, these are
    listed in :data:`MC_COLUMNS`.

"""
import copy
import enum

import tables


class TaskMode(enum.Enum):

    """Conversion mode, decides which tables and columns are written"""

    STANDARD = 'standard'
    MC = 'mc'


class TableKind(enum.IntEnum):

    """The twelve output tables, in the order they are filled"""

    EVENTS = 0
    TRACKS = 1
    CALO = 2
    CALO_TRIGGER = 3
    MUON = 4
    MUON_CLUSTERS = 5
    ZDC = 6
    VZERO = 7
    V0S = 8
    CASCADES = 9
    TOF = 10
    KINEMATICS = 11


TABLE_NAMES = {
    TableKind.EVENTS: 'O2events',
    TableKind.TRACKS: 'O2tracks',
    TableKind.CALO: 'O2calo',
    TableKind.CALO_TRIGGER: 'O2caloTrigger',
    TableKind.MUON: 'O2muon',
    TableKind.MUON_CLUSTERS: 'O2muoncls',
    TableKind.ZDC: 'O2zdc',
    TableKind.VZERO: 'O2vzero',
    TableKind.V0S: 'O2v0s',
    TableKind.CASCADES: 'O2cascades',
    TableKind.TOF: 'O2tof',
    TableKind.KINEMATICS: 'O2kine'}

TABLE_TITLES = {
    TableKind.EVENTS: 'Event tree',
    TableKind.TRACKS: 'Barrel tracks',
    TableKind.CALO: 'Calorimeter cells',
    TableKind.CALO_TRIGGER: 'Calorimeter triggers',
    TableKind.MUON: 'MUON tracks',
    TableKind.MUON_CLUSTERS: 'MUON clusters',
    TableKind.ZDC: 'ZDC',
    TableKind.VZERO: 'VZERO',
    TableKind.V0S: 'V0s',
    TableKind.CASCADES: 'Cascades',
    TableKind.TOF: 'TOF hits',
    TableKind.KINEMATICS: 'Kinematics'}

#: Calorimeter type tags, as stored in the ``type`` column of O2calo
CALO_PHOS = 0
CALO_EMCAL = 1

#: Names of the 15 independent entries of a track covariance matrix, in
#: lower triangular order of the (y, z, snp, tgl, 1/pt) parameters.
TRACK_COVARIANCE = ('c_yy', 'c_zy', 'c_zz', 'c_snp_y', 'c_snp_z',
                    'c_snp_snp', 'c_tgl_y', 'c_tgl_z', 'c_tgl_snp',
                    'c_tgl_tgl', 'c_1pt_y', 'c_1pt_z', 'c_1pt_snp',
                    'c_1pt_tgl', 'c_1pt2_1pt2')

#: Number of channels in the fixed size subdetector arrays
N_ZDC_TOWERS = 5
N_ZDC_TDC = (32, 4)
N_VZERO_CHANNELS = 64


class Event(tables.IsDescription):

    """Store one accepted collision

    .. attribute:: event_id

        bunch crossing, orbit and period packed in a single integer, see
        :func:`~ao2d.identifiers.pack_event_id`.

    .. attribute:: x, y, z

        position of the primary vertex.

    .. attribute:: event_time, event_time_res

        event start time and its resolution, see :mod:`ao2d.timing`.

    .. attribute:: event_time_mask

        quality bits of the event start time.

    """
    event_id = tables.UInt64Col(pos=0)
    x = tables.Float32Col(pos=1)
    y = tables.Float32Col(pos=2)
    z = tables.Float32Col(pos=3)
    event_time = tables.Float32Col(pos=4)
    event_time_res = tables.Float32Col(pos=5)
    event_time_mask = tables.UInt8Col(pos=6)


class Track(tables.IsDescription):

    """Store barrel track parameters at the innermost update

    The covariance matrix of the track parameters is symmetric, only the
    15 independent entries are stored, named in :data:`TRACK_COVARIANCE`.

    """
    collision_id = tables.Int32Col(pos=0)
    x = tables.Float32Col(pos=1)
    alpha = tables.Float32Col(pos=2)
    y = tables.Float32Col(pos=3)
    z = tables.Float32Col(pos=4)
    snp = tables.Float32Col(pos=5)
    tgl = tables.Float32Col(pos=6)
    signed1pt = tables.Float32Col(pos=7)

    c_yy = tables.Float32Col(pos=8)
    c_zy = tables.Float32Col(pos=9)
    c_zz = tables.Float32Col(pos=10)
    c_snp_y = tables.Float32Col(pos=11)
    c_snp_z = tables.Float32Col(pos=12)
    c_snp_snp = tables.Float32Col(pos=13)
    c_tgl_y = tables.Float32Col(pos=14)
    c_tgl_z = tables.Float32Col(pos=15)
    c_tgl_snp = tables.Float32Col(pos=16)
    c_tgl_tgl = tables.Float32Col(pos=17)
    c_1pt_y = tables.Float32Col(pos=18)
    c_1pt_z = tables.Float32Col(pos=19)
    c_1pt_snp = tables.Float32Col(pos=20)
    c_1pt_tgl = tables.Float32Col(pos=21)
    c_1pt2_1pt2 = tables.Float32Col(pos=22)

    tpc_inner_p = tables.Float32Col(pos=23)
    flags = tables.UInt64Col(pos=24)
    its_cluster_map = tables.UInt8Col(pos=25)
    tpc_ncls = tables.UInt16Col(pos=26)
    trd_ntracklets = tables.UInt8Col(pos=27)
    its_chi2_ncl = tables.Float32Col(pos=28)
    tpc_chi2_ncl = tables.Float32Col(pos=29)
    trd_chi2 = tables.Float32Col(pos=30)
    tof_chi2 = tables.Float32Col(pos=31)
    tpc_signal = tables.Float32Col(pos=32)
    trd_signal = tables.Float32Col(pos=33)
    tof_signal = tables.Float32Col(pos=34)
    length = tables.Float32Col(pos=35)


class CaloCell(tables.IsDescription):

    """Store a fired calorimeter cell

    Both calorimeters share this table, they are distinguished by the
    :attr:`type` column (:data:`CALO_EMCAL` or :data:`CALO_PHOS`).
    :attr:`cell_type` is 0 for high gain and 1 for low gain.

    """
    collision_id = tables.Int32Col(pos=0)
    cell_number = tables.Int16Col(pos=1)
    amplitude = tables.Float32Col(pos=2)
    time = tables.Float32Col(pos=3)
    cell_type = tables.Int8Col(pos=4)
    type = tables.Int8Col(pos=5)


class CaloTrigger(tables.IsDescription):

    """Store calorimeter trigger (FastOR) information"""

    collision_id = tables.Int32Col(pos=0)
    fastor_abs_id = tables.Int16Col(pos=1)
    l0_amplitude = tables.Float32Col(pos=2)
    l1_time_sum = tables.Float32Col(pos=3)
    n_l0_times = tables.Int8Col(pos=4)
    trigger_bits = tables.Int32Col(pos=5)
    type = tables.Int8Col(pos=6)


class MuonTrack(tables.IsDescription):

    """Store muon spectrometer tracks

    .. attribute:: covariances

        lower triangle of the 5x5 covariance matrix, element (i, j) with
        j <= i is stored at index ``i * (i + 1) / 2 + j``.

    """
    collision_id = tables.Int32Col(pos=0)
    inverse_bending_momentum = tables.Float32Col(pos=1)
    theta_x = tables.Float32Col(pos=2)
    theta_y = tables.Float32Col(pos=3)
    z = tables.Float32Col(pos=4)
    bending_coor = tables.Float32Col(pos=5)
    non_bending_coor = tables.Float32Col(pos=6)
    covariances = tables.Float32Col(pos=7, shape=15)
    chi2 = tables.Float32Col(pos=8)
    chi2_match_trigger = tables.Float32Col(pos=9)


class MuonCluster(tables.IsDescription):

    """Store the clusters attached to muon tracks"""

    mu_track_id = tables.Int32Col(pos=0)
    x = tables.Float32Col(pos=1)
    y = tables.Float32Col(pos=2)
    z = tables.Float32Col(pos=3)
    err_x = tables.Float32Col(pos=4)
    err_y = tables.Float32Col(pos=5)
    charge = tables.Float32Col(pos=6)
    chi2 = tables.Float32Col(pos=7)


class Zdc(tables.IsDescription):

    """Store zero degree calorimeter data, one row per event

    .. attribute:: fired

        bit 0 ZNA, 1 ZNC, 2 ZPA, 3 ZPC, 4 ZEM1, 5 ZEM2.

    """
    collision_id = tables.Int32Col(pos=0)
    zem1_energy = tables.Float32Col(pos=1)
    zem2_energy = tables.Float32Col(pos=2)
    znc_tower_energy = tables.Float32Col(pos=3, shape=N_ZDC_TOWERS)
    zna_tower_energy = tables.Float32Col(pos=4, shape=N_ZDC_TOWERS)
    zpc_tower_energy = tables.Float32Col(pos=5, shape=N_ZDC_TOWERS)
    zpa_tower_energy = tables.Float32Col(pos=6, shape=N_ZDC_TOWERS)
    znc_tower_energy_lr = tables.Float32Col(pos=7, shape=N_ZDC_TOWERS)
    zna_tower_energy_lr = tables.Float32Col(pos=8, shape=N_ZDC_TOWERS)
    zpc_tower_energy_lr = tables.Float32Col(pos=9, shape=N_ZDC_TOWERS)
    zpa_tower_energy_lr = tables.Float32Col(pos=10, shape=N_ZDC_TOWERS)
    zdc_tdc_corrected = tables.Float32Col(pos=11, shape=N_ZDC_TDC)
    fired = tables.UInt8Col(pos=12)


class Vzero(tables.IsDescription):

    """Store VZERO data, one row per event"""

    collision_id = tables.Int32Col(pos=0)
    adc = tables.Float32Col(pos=1, shape=N_VZERO_CHANNELS)
    time = tables.Float32Col(pos=2, shape=N_VZERO_CHANNELS)
    width = tables.Float32Col(pos=3, shape=N_VZERO_CHANNELS)


class V0(tables.IsDescription):

    """Store offline V0 candidates by their daughter tracks

    The sign of the daughter ids is the sign of the original index.

    """
    pos_track_id = tables.Int32Col(pos=0)
    neg_track_id = tables.Int32Col(pos=1)


class Cascade(tables.IsDescription):

    """Store cascades by their V0 and bachelor track"""

    v0_id = tables.Int32Col(pos=0)
    bachelor_id = tables.Int32Col(pos=1)


class TofCluster(tables.IsDescription):

    """Store TOF clusters matched to barrel tracks"""

    track_id = tables.Int32Col(pos=0)
    tof_channel = tables.Int32Col(pos=1)
    tof_ncls = tables.Int16Col(pos=2)
    dx = tables.Float32Col(pos=3)
    dz = tables.Float32Col(pos=4)
    tot = tables.Float32Col(pos=5)
    length_ratio = tables.Float32Col(pos=6)


class Kinematics(tables.IsDescription):

    """Store generated particles

    Mother and daughter columns are particle indices local to the
    collision given by :attr:`collision_id`, -1 if there is none.

    """
    collision_id = tables.Int32Col(pos=0)
    pdg_code = tables.Int32Col(pos=1)
    mother = tables.Int32Col(pos=2, shape=2)
    daughter = tables.Int32Col(pos=3, shape=2)
    px = tables.Float32Col(pos=4)
    py = tables.Float32Col(pos=5)
    pz = tables.Float32Col(pos=6)
    vx = tables.Float32Col(pos=7)
    vy = tables.Float32Col(pos=8)
    vz = tables.Float32Col(pos=9)
    vt = tables.Float32Col(pos=10)


DESCRIPTIONS = {
    TableKind.EVENTS: Event,
    TableKind.TRACKS: Track,
    TableKind.CALO: CaloCell,
    TableKind.CALO_TRIGGER: CaloTrigger,
    TableKind.MUON: MuonTrack,
    TableKind.MUON_CLUSTERS: MuonCluster,
    TableKind.ZDC: Zdc,
    TableKind.VZERO: Vzero,
    TableKind.V0S: V0,
    TableKind.CASCADES: Cascade,
    TableKind.TOF: TofCluster,
    TableKind.KINEMATICS: Kinematics}

#: Columns only written when converting Monte Carlo
MC_COLUMNS = {
    TableKind.EVENTS: {
        'generator_id': tables.Int16Col(pos=7),
        'mc_vtx_x': tables.Float32Col(pos=8),
        'mc_vtx_y': tables.Float32Col(pos=9),
        'mc_vtx_z': tables.Float32Col(pos=10)},
    TableKind.TRACKS: {
        'label': tables.Int32Col(pos=36),
        'tof_label': tables.Int32Col(pos=37, shape=3)}}


def default_active_tables(mode):
    """Get the active flag of each table for a conversion mode

    :param mode: a :class:`TaskMode`.
    :return: dictionary with a boolean for each :class:`TableKind`.

    """
    active = {kind: True for kind in TableKind}
    if mode is not TaskMode.MC:
        active[TableKind.KINEMATICS] = False
    return active


def columns_for(kind, mode=TaskMode.STANDARD):
    """Get the column description of a table

    A new dictionary with copies of the columns is returned on every
    call, so the result can be modified (e.g. pruned) without affecting
    other tables.

    :param kind: a :class:`TableKind`.
    :param mode: a :class:`TaskMode`, MC columns are only included in
                 MC mode.
    :return: dictionary of column name to PyTables column.

    """
    columns = dict(DESCRIPTIONS[kind].columns)
    if mode is TaskMode.MC:
        columns.update(MC_COLUMNS.get(kind, {}))
    return {name: copy.copy(column) for name, column in columns.items()}


def column_names(columns):
    """Get column names ordered by their position"""

    return [name for name, _ in sorted(columns.items(),
                                       key=lambda item: item[1]._v_pos)]
