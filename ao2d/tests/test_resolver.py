import unittest

from ao2d import resolver
from ao2d.errors import IndexOverflowError
from ao2d.resolver import V0Index


class PackDaughtersTest(unittest.TestCase):

    def test_pack(self):
        self.assertEqual(resolver.pack_daughters(1, 9), (1 << 31) | 9)
        self.assertEqual(resolver.pack_daughters(0, 0), 0)

    def test_unpack(self):
        for pair in [(0, 0), (1, 9), (2 ** 31 - 1, 2 ** 31 - 1), (7, 0)]:
            key = resolver.pack_daughters(*pair)
            self.assertEqual(resolver.unpack_daughters(key), pair)

    def test_out_of_range(self):
        self.assertRaises(IndexOverflowError, resolver.pack_daughters,
                          2 ** 31, 0)
        self.assertRaises(IndexOverflowError, resolver.pack_daughters,
                          0, -1)


class V0IndexTest(unittest.TestCase):

    def test_find(self):
        index = V0Index([(5, 2), (1, 9)])
        self.assertEqual(len(index), 2)
        self.assertEqual(index.find(1, 9), 1)
        self.assertEqual(index.find(5, 2), 0)

    def test_no_match(self):
        index = V0Index([(5, 2), (1, 9)])
        self.assertIsNone(index.find(2, 5))
        self.assertIsNone(index.find(9, 1))
        self.assertIsNone(index.find(6, 0))

    def test_empty(self):
        index = V0Index([])
        self.assertEqual(len(index), 0)
        self.assertIsNone(index.find(1, 2))

    def test_duplicates_lowest_position(self):
        index = V0Index([(3, 4), (1, 2), (3, 4), (3, 4)])
        self.assertEqual(index.find(3, 4), 0)
        index = V0Index([(1, 2), (3, 4), (3, 4)])
        self.assertEqual(index.find(3, 4), 1)

    def test_resolve(self):
        index = V0Index([(5, 2), (1, 9)])
        self.assertEqual(index.resolve(1, 9, 10), 11)
        self.assertIsNone(index.resolve(1, 8, 10))

    def test_large_indices(self):
        large = 2 ** 31 - 1
        index = V0Index([(large, 0), (0, large), (large, large)])
        self.assertEqual(index.find(0, large), 1)
        self.assertEqual(index.find(large, large), 2)


if __name__ == '__main__':
    unittest.main()
