import unittest

from ao2d import identifiers
from ao2d.errors import ConversionError, IndexOverflowError
from ao2d.identifiers import IdentifierAllocator, Offsets


class IdentifierAllocatorTest(unittest.TestCase):

    def setUp(self):
        self.allocator = IdentifierAllocator()

    def test_starts_at_zero(self):
        self.assertEqual(self.allocator.offsets(), Offsets(0, 0, 0, 0))

    def test_advance(self):
        self.allocator.advance(tracks=3, muon_tracks=1, v0s=2)
        self.assertEqual(self.allocator.offsets(), Offsets(1, 3, 1, 2))
        self.allocator.advance(tracks=2, muon_tracks=0, v0s=0)
        self.assertEqual(self.allocator.offsets(), Offsets(2, 5, 1, 2))

    def test_track_offset_is_cumulative(self):
        counts = [4, 0, 7, 1]
        for count in counts:
            self.allocator.advance(count, 0, 0)
        self.assertEqual(self.allocator.offsets().track, sum(counts))
        self.assertEqual(self.allocator.offsets().collision, len(counts))

    def test_negative_count(self):
        self.allocator.advance(1, 1, 1)
        self.assertRaises(ConversionError, self.allocator.advance, 2, -1, 0)
        self.assertEqual(self.allocator.offsets(), Offsets(1, 1, 1, 1))

    def test_allocators_are_independent(self):
        self.allocator.advance(3, 0, 0)
        self.assertEqual(IdentifierAllocator().offsets().track, 0)


class OffsetSignedIndexTest(unittest.TestCase):

    def test_positive(self):
        self.assertEqual(identifiers.offset_signed_index(5, 10), 15)
        self.assertEqual(identifiers.offset_signed_index(0, 10), 10)

    def test_negative_keeps_sign(self):
        self.assertEqual(identifiers.offset_signed_index(-5, 10), -15)


class EventIdTest(unittest.TestCase):

    def test_pack(self):
        self.assertEqual(identifiers.pack_event_id(1, 0, 0), 1)
        self.assertEqual(identifiers.pack_event_id(0, 1, 0), 1 << 12)
        self.assertEqual(identifiers.pack_event_id(0, 0, 1), 1 << 36)

    def test_unpack(self):
        event_id = identifiers.pack_event_id(4095, 123456, 789)
        self.assertEqual(identifiers.unpack_event_id(event_id),
                         (4095, 123456, 789))

    def test_largest_fits_64_bits(self):
        event_id = identifiers.pack_event_id(2 ** 12 - 1, 2 ** 24 - 1,
                                             2 ** 28 - 1)
        self.assertEqual(event_id, 2 ** 64 - 1)

    def test_out_of_range(self):
        self.assertRaises(IndexOverflowError, identifiers.pack_event_id,
                          4096, 0, 0)
        self.assertRaises(IndexOverflowError, identifiers.pack_event_id,
                          0, 2 ** 24, 0)
        self.assertRaises(IndexOverflowError, identifiers.pack_event_id,
                          0, 0, -1)


if __name__ == '__main__':
    unittest.main()
