"""Convert event summary data to flat AO2D tables

The AO2D converter flattens reconstructed collision events (tracks,
calorimeter, muon, ZDC, VZERO, V0 and cascade candidates, and optional
Monte Carlo truth) into a set of column oriented HDF5 tables.  Objects in
an event refer to each other by local indices, in the tables these become
integer identifiers which are unique within one conversion run.

The following modules are included:

:mod:`~ao2d.converter`
    run a conversion, and the ``convert_esd`` script

:mod:`~ao2d.errors`
    fatal conversion errors

:mod:`~ao2d.esd`
    event summary data objects used as input

:mod:`~ao2d.flatten`
    flatten one event into table rows

:mod:`~ao2d.generators`
    event generator tagging for Monte Carlo

:mod:`~ao2d.identifiers`
    run-wide identifiers and packed event ids

:mod:`~ao2d.resolver`
    find the V0 of a cascade by its daughter tracks

:mod:`~ao2d.sink`
    buffer and store rows, prune columns

:mod:`~ao2d.storage`
    table descriptions

:mod:`~ao2d.tests`
    code tests

:mod:`~ao2d.timing`
    event start time from the timing response

:mod:`~ao2d.utils`
    commonly used functions such as a progressbar

"""

from . import (
    converter,
    errors,
    esd,
    flatten,
    generators,
    identifiers,
    resolver,
    sink,
    storage,
    timing,
    utils,
)
from .converter import AO2DConverter, convert_esd
from .esd import Event, read_events
from .identifiers import IdentifierAllocator
from .sink import TableSink
from .storage import TableKind, TaskMode
from .tests import run_tests

__all__ = [
    'AO2DConverter',
    'Event',
    'IdentifierAllocator',
    'TableKind',
    'TableSink',
    'TaskMode',
    'convert_esd',
    'converter',
    'errors',
    'esd',
    'flatten',
    'generators',
    'identifiers',
    'read_events',
    'resolver',
    'run_tests',
    'sink',
    'storage',
    'timing',
    'utils',
]
