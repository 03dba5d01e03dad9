""" Buffer rows and store them in the output tables

    The :class:`TableSink` owns the output tables of a conversion run.
    Rows are buffered per table with :meth:`TableSink.append` and written
    to the HDF5 table with :meth:`TableSink.flush`.  Every
    ``events_per_cluster`` events all tables are flushed to disk.

    Columns can be removed from the output with
    :meth:`TableSink.prune_columns`, but only before the tables are
    created.

    Example usage::

        >>> import tables
        >>> from ao2d.sink import TableSink
        >>> from ao2d.storage import TableKind

        >>> data = tables.open_file('/tmp/ao2d.h5', 'w')
        >>> sink = TableSink(data, '/ao2d')
        >>> sink.prune_columns('tpc_signal trd_signal')
        >>> sink.append(TableKind.V0S, {'pos_track_id': 1, 'neg_track_id': 2})
        >>> sink.flush(TableKind.V0S)
        >>> sink.close()

"""
import logging
import posixpath
import warnings

from .errors import PruneError
from .storage import (TABLE_NAMES, TABLE_TITLES, TableKind, TaskMode,
                      columns_for, default_active_tables)


#: Default number of events between flushes of the output tables
EVENTS_PER_CLUSTER = 1000

logger = logging.getLogger('ao2d.sink')


class TableSink(object):

    """Append-only output tables of one conversion run

    :param data: writeable PyTables file handle.
    :param output_path: path (as string) to the PyTables group (need not
                        exist) in which the tables will be created.
    :param mode: :class:`~ao2d.storage.TaskMode`, decides which tables
                 and columns exist.
    :param active: dictionary of :class:`~ao2d.storage.TableKind` to
                   boolean, overriding the default active flags.
    :param events_per_cluster: number of events between flushes to disk.

    """

    def __init__(self, data, output_path='/ao2d', mode=TaskMode.STANDARD,
                 active=None, events_per_cluster=EVENTS_PER_CLUSTER):
        if events_per_cluster < 1:
            raise ValueError('events_per_cluster must be at least 1.')

        self.data = data
        self.output_path = output_path
        self.mode = mode
        self.events_per_cluster = events_per_cluster

        self.active = default_active_tables(mode)
        if active is not None:
            self.active.update(active)
        self.columns = {kind: columns_for(kind, mode) for kind in TableKind}
        self.pruned = []

        self.tables = None
        self.n_events = 0
        self._buffers = {kind: [] for kind in TableKind}

    def is_active(self, kind):
        return self.active[kind]

    def prune_columns(self, names):
        """Remove columns from all active tables

        A column name may occur in several tables, it is removed from all
        of them.

        :param names: list of column names, or a string of space
                      separated column names.
        :raises PruneError: if a name is not a column of any active table
            (nothing is removed in that case), or if the tables already
            exist.

        """
        if isinstance(names, str):
            names = names.split()
        if not names:
            return
        if self.tables is not None:
            raise PruneError('Columns can not be pruned after the output '
                             'tables were created.', names)

        active_kinds = [kind for kind in TableKind if self.active[kind]]
        missing = [name for name in names
                   if not any(name in self.columns[kind]
                              for kind in active_kinds)]
        if missing:
            raise PruneError('Did not find column(s) to prune: %s' %
                             ', '.join(missing), missing)

        for name in names:
            for kind in active_kinds:
                if self.columns[kind].pop(name, None) is not None:
                    logger.debug('Pruned column %s from %s.', name,
                                 TABLE_NAMES[kind])
            self.pruned.append(name)

        for kind in active_kinds:
            if not self.columns[kind]:
                warnings.warn('All columns of %s were pruned, the table is '
                              'disabled.' % TABLE_NAMES[kind])
                self.active[kind] = False

    def prepare(self):
        """Create the output group and the active tables

        :raises tables.NodeError: if one of the tables already exists.

        """
        if self.tables is not None:
            return

        if self.output_path not in self.data:
            head, tail = posixpath.split(self.output_path.rstrip('/'))
            self.data.create_group(head, tail, createparents=True)

        self.tables = {}
        for kind in TableKind:
            if not self.active[kind]:
                continue
            self.tables[kind] = self.data.create_table(
                self.output_path, TABLE_NAMES[kind], self.columns[kind],
                TABLE_TITLES[kind], createparents=True)

        self.group = self.data.get_node(self.output_path)
        self.group._v_attrs.mode = self.mode.value
        self.group._v_attrs.pruned_columns = list(self.pruned)
        logger.info('Created %d output tables in %s.', len(self.tables),
                    self.output_path)

    def append(self, kind, row):
        """Buffer a row for a table

        :param kind: :class:`~ao2d.storage.TableKind` of the table.
        :param row: dictionary of column name to value.  Values for pruned
                    columns are ignored.

        """
        if not self.active[kind]:
            return
        if self.tables is None:
            self.prepare()
        self._buffers[kind].append(row)

    def flush(self, kind):
        """Write the buffered rows of a table to the HDF5 table"""

        rows = self._buffers[kind]
        if not rows or not self.active[kind]:
            return

        table = self.tables[kind]
        colnames = set(table.colnames)
        table_row = table.row
        for row in rows:
            for key, value in row.items():
                if key in colnames:
                    table_row[key] = value
                elif key not in self.pruned:
                    warnings.warn('Unsupported column %s for %s' %
                                  (key, TABLE_NAMES[kind]))
            table_row.append()
        self._buffers[kind] = []

    def end_event(self):
        """Count an event, flush all tables at the end of each cluster"""

        self.n_events += 1
        if not self.n_events % self.events_per_cluster:
            self._flush_tables()

    def close(self, **attrs):
        """Flush all tables and store attributes on the output group

        :param attrs: attributes to store, e.g. run statistics.

        """
        if self.tables is None:
            self.prepare()
        for kind in TableKind:
            self.flush(kind)
        self._flush_tables()
        for key, value in attrs.items():
            setattr(self.group._v_attrs, key, value)

    def _flush_tables(self):
        if self.tables is None:
            return
        for table in self.tables.values():
            table.flush()
