""" Convert event summary data to flat AO2D tables

    The :class:`AO2DConverter` drives a conversion run: each event is
    (optionally) checked against the event cuts, flattened into rows of
    the output tables and the run-wide offsets are advanced.  At the end
    of the run the tables are flushed and the run statistics are stored as
    attributes of the output group.

    Example usage::

        >>> import tables

        >>> from ao2d.converter import AO2DConverter
        >>> from ao2d.esd import read_events

        >>> data = tables.open_file('/tmp/ao2d.h5', 'w')
        >>> converter = AO2DConverter(data, '/ao2d', use_event_cuts=True)
        >>> converter.run(read_events('/tmp/events.jsonl'))

    The ``convert_esd`` command line script converts a JSON lines event
    dump into a HDF5 file, see ``convert_esd --help``.

"""
import argparse
import logging
import os
import posixpath

import tables

from .errors import ConversionError
from .esd import count_events, has_tracks, read_events
from .flatten import EventFlattener
from .identifiers import IdentifierAllocator
from .sink import EVENTS_PER_CLUSTER, TableSink
from .storage import TABLE_NAMES, TableKind, TaskMode
from .utils import pbar


logger = logging.getLogger('ao2d.converter')


class ConversionStatistics(object):

    """Counters of a conversion run

    Besides the number of events and rows, the candidates which are not
    stored are counted: on-the-fly V0s and cascades, and cascades without
    a stored V0.

    """

    def __init__(self):
        self.n_events = 0
        self.n_accepted = 0
        self.n_rejected = 0
        self.n_on_fly_v0s = 0
        self.n_on_fly_cascades = 0
        self.n_unmatched_cascades = 0
        self.n_rows = {kind: 0 for kind in TableKind}

    def add(self, counts):
        """Add the counts of an accepted event

        :param counts: :class:`~ao2d.flatten.EventCounts` of the event.

        """
        self.n_accepted += 1
        self.n_on_fly_v0s += counts.on_fly_v0s
        self.n_on_fly_cascades += counts.on_fly_cascades
        self.n_unmatched_cascades += counts.unmatched_cascades
        for kind, n in counts.rows.items():
            self.n_rows[kind] += n

    def attributes(self):
        """Get the counters as attributes for the output group"""

        return {'n_events': self.n_events,
                'n_accepted': self.n_accepted,
                'n_rejected': self.n_rejected,
                'n_on_fly_v0s': self.n_on_fly_v0s,
                'n_on_fly_cascades': self.n_on_fly_cascades,
                'n_unmatched_cascades': self.n_unmatched_cascades,
                'n_rows': {TABLE_NAMES[kind]: n
                           for kind, n in self.n_rows.items()}}


class AO2DConverter(object):

    """Convert events into the flat output tables

    :param data: writeable PyTables file handle.
    :param output_path: path (as string) to the PyTables group (need not
                        exist) in which the tables will be created.
    :param mode: :class:`~ao2d.storage.TaskMode`.
    :param use_event_cuts: if True, only convert events accepted by
                           ``event_cuts``.
    :param event_cuts: callable taking an event, returns True to accept
                       it.  The default accepts events with tracks.
    :param prune: list of column names (or a string of space separated
                  names) to leave out of the tables.
    :param disabled: list of :class:`~ao2d.storage.TableKind` to skip.
    :param events_per_cluster: number of events between flushes to disk.
    :param suffix: if given, the tables are stored in a sub-group of
                   ``output_path`` with this name.
    :param progress: if True, show a progressbar while converting.

    """

    def __init__(self, data, output_path='/ao2d', mode=TaskMode.STANDARD,
                 use_event_cuts=False, event_cuts=has_tracks, prune=None,
                 disabled=(), events_per_cluster=EVENTS_PER_CLUSTER,
                 suffix=None, progress=False):
        if suffix:
            output_path = posixpath.join(output_path, suffix)
        self.data = data
        self.output_path = output_path
        self.mode = mode
        self.use_event_cuts = use_event_cuts
        self.event_cuts = event_cuts
        self.progress = progress

        active = {kind: False for kind in disabled}
        self.sink = TableSink(data, output_path, mode, active,
                              events_per_cluster)
        if prune:
            try:
                self.sink.prune_columns(prune)
            except ConversionError as exc:
                logger.error(str(exc))
                raise

        self.allocator = IdentifierAllocator()
        self.flattener = EventFlattener(self.sink, mode)
        self.statistics = ConversionStatistics()

    def run(self, events, n_events=None):
        """Convert all events and close the output tables

        :param events: iterable of events, see :class:`ao2d.esd.Event`.
        :param n_events: expected number of events, used for the
                         progressbar if ``events`` is a generator.

        """
        self.sink.prepare()
        logger.info('Converting events into %s (%s mode).', self.output_path,
                    self.mode.value)

        for event in pbar(events, length=n_events, show=self.progress):
            self.convert_event(event)

        self.close()

    def convert_event(self, event):
        """Convert a single event

        :return: True if the event was stored, False if it was rejected
                 by the event cuts.

        """
        self.statistics.n_events += 1
        if self.use_event_cuts and not self.event_cuts(event):
            self.statistics.n_rejected += 1
            return False

        offsets = self.allocator.offsets()
        try:
            counts = self.flattener.flatten(event, offsets)
        except ConversionError as exc:
            logger.error('Conversion failed at event %d: %s',
                         self.statistics.n_events - 1, exc)
            raise

        self.allocator.advance(counts.tracks, counts.muon_tracks, counts.v0s)
        self.sink.end_event()
        self.statistics.add(counts)

        if counts.unmatched_cascades:
            logger.warning('Dropped %d cascade(s) without V0 in collision %d.',
                           counts.unmatched_cascades, offsets.collision)
        logger.debug('Collision %d: %d tracks, %d muon tracks, %d V0s.',
                     offsets.collision, counts.tracks, counts.muon_tracks,
                     counts.v0s)
        return True

    def close(self):
        """Flush the tables and store the run statistics"""

        stats = self.statistics
        self.sink.close(**stats.attributes())
        logger.info('Converted %d of %d events (%d rejected).',
                    stats.n_accepted, stats.n_events, stats.n_rejected)
        logger.info('Skipped %d on-the-fly V0s, %d on-the-fly cascades and '
                    '%d cascades without V0.', stats.n_on_fly_v0s,
                    stats.n_on_fly_cascades, stats.n_unmatched_cascades)


def table_kind(name):
    """Get the table kind from a table name (O2tof) or kind name (tof)"""

    for kind, table_name in TABLE_NAMES.items():
        if name == table_name or name.upper() == kind.name:
            return kind
    raise ValueError('Unknown table: %s' % name)


def convert_esd(source, destination, output_path='/ao2d', suffix=None,
                mode=TaskMode.STANDARD, use_event_cuts=False, prune=None,
                disabled=(), events_per_cluster=EVENTS_PER_CLUSTER,
                overwrite=False, progress=False):
    """Convert a JSON lines event dump to a HDF5 file

    :param source: path of the event dump.
    :param destination: path of the HDF5 file to create.
    :param overwrite: if True, replace an existing destination.
    :raises ConversionError: if the conversion fails, the destination is
        removed in that case.

    The other parameters are passed to :class:`AO2DConverter`.

    """
    if os.path.exists(destination):
        if not overwrite:
            raise FileExistsError('Destination already exists, doing '
                                  'nothing: %s' % destination)
        os.remove(destination)

    n_events = count_events(source) if progress else None
    try:
        with tables.open_file(destination, 'w') as data:
            converter = AO2DConverter(data, output_path, mode,
                                      use_event_cuts, prune=prune,
                                      disabled=disabled,
                                      events_per_cluster=events_per_cluster,
                                      suffix=suffix, progress=progress)
            converter.run(read_events(source), n_events)
    except Exception:
        # a failed run leaves no partial output behind
        logger.error('Conversion of %s failed, removing %s.', source,
                     destination)
        os.remove(destination)
        raise

    return converter.statistics


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument('source', help="path of the JSON lines event dump")
    parser.add_argument('destination',
                        help="path of the HDF5 destination file")
    parser.add_argument('--group', default='/ao2d',
                        help="group in which the tables are created")
    parser.add_argument('--suffix',
                        help="name of a sub-group for the tables")
    parser.add_argument('--mode', default='standard',
                        choices=[mode.value for mode in TaskMode],
                        help="conversion mode, 'mc' also stores MC truth")
    parser.add_argument('--event-cuts', action='store_true',
                        help="skip events without reconstructed tracks")
    parser.add_argument('--prune', default='',
                        help="space separated list of columns to leave out")
    parser.add_argument('--disable', nargs='+', default=[], metavar='TABLE',
                        help="tables to leave out, e.g. O2tof or tof")
    parser.add_argument('--events-per-cluster', type=int,
                        default=EVENTS_PER_CLUSTER,
                        help="number of events between flushes to disk")
    parser.add_argument('--overwrite', action='store_true',
                        help='overwrite destination file it is already exists')
    parser.add_argument('--progress', action='store_true',
                        help='show progressbar during conversion')
    args = parser.parse_args()

    try:
        disabled = [table_kind(name) for name in args.disable]
    except ValueError as exc:
        parser.error(str(exc))

    logging.basicConfig(
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
        datefmt='%y%m%d_%H%M%S', level=logging.INFO)
    convert_esd(args.source, args.destination, args.group, args.suffix,
                TaskMode(args.mode), args.event_cuts, args.prune, disabled,
                args.events_per_cluster, args.overwrite, args.progress)


if __name__ == '__main__':
    main()
