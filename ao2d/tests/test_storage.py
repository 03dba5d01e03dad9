import unittest

import tables

from ao2d import storage
from ao2d.storage import TableKind, TaskMode


class TableDefinitionsTest(unittest.TestCase):

    def test_every_kind_has_a_table(self):
        for kind in TableKind:
            self.assertIn(kind, storage.TABLE_NAMES)
            self.assertIn(kind, storage.TABLE_TITLES)
            self.assertIn(kind, storage.DESCRIPTIONS)

    def test_table_names(self):
        self.assertEqual(storage.TABLE_NAMES[TableKind.EVENTS], 'O2events')
        self.assertEqual(storage.TABLE_NAMES[TableKind.KINEMATICS], 'O2kine')
        self.assertEqual(len(set(storage.TABLE_NAMES.values())), 12)

    def test_track_covariance_columns(self):
        columns = storage.columns_for(TableKind.TRACKS)
        self.assertEqual(len(storage.TRACK_COVARIANCE), 15)
        for name in storage.TRACK_COVARIANCE:
            self.assertIn(name, columns)

    def test_column_positions_are_unique(self):
        for mode in TaskMode:
            for kind in TableKind:
                columns = storage.columns_for(kind, mode)
                positions = [column._v_pos for column in columns.values()]
                self.assertEqual(len(positions), len(set(positions)))


class ActiveTablesTest(unittest.TestCase):

    def test_standard_mode(self):
        active = storage.default_active_tables(TaskMode.STANDARD)
        self.assertFalse(active[TableKind.KINEMATICS])
        self.assertTrue(all(active[kind] for kind in TableKind
                            if kind is not TableKind.KINEMATICS))

    def test_mc_mode(self):
        active = storage.default_active_tables(TaskMode.MC)
        self.assertTrue(all(active.values()))


class ColumnsForTest(unittest.TestCase):

    def test_mc_columns_only_in_mc_mode(self):
        standard = storage.columns_for(TableKind.EVENTS, TaskMode.STANDARD)
        mc = storage.columns_for(TableKind.EVENTS, TaskMode.MC)
        self.assertNotIn('generator_id', standard)
        self.assertIn('generator_id', mc)
        self.assertIn('mc_vtx_z', mc)

        tracks = storage.columns_for(TableKind.TRACKS, TaskMode.MC)
        self.assertIn('label', tracks)
        self.assertIn('tof_label', tracks)

    def test_returns_new_dictionary(self):
        columns = storage.columns_for(TableKind.V0S)
        del columns['pos_track_id']
        self.assertIn('pos_track_id', storage.columns_for(TableKind.V0S))

    def test_column_names_ordered(self):
        columns = storage.columns_for(TableKind.EVENTS, TaskMode.MC)
        names = storage.column_names(columns)
        self.assertEqual(names[:3], ['event_id', 'x', 'y'])
        self.assertEqual(names[-1], 'mc_vtx_z')

    def test_column_types(self):
        columns = storage.columns_for(TableKind.EVENTS)
        self.assertIsInstance(columns['event_id'], tables.UInt64Col)
        self.assertIsInstance(columns['event_time_mask'], tables.UInt8Col)


if __name__ == '__main__':
    unittest.main()
