""" Match cascades to the V0 candidates of the same event

    A cascade does not refer to its V0 directly, it only stores the
    indices of the positive and negative daughter tracks of that V0.  The
    V0 is found by packing the two daughter indices of every V0 in a
    single integer key, sorting the keys and looking up the packed key of
    the cascade with a binary search.

    Example::

        >>> index = V0Index([(5, 2), (1, 9)])
        >>> index.find(1, 9)
        1
        >>> index.find(2, 5) is None
        True

"""
import numpy as np

from .errors import IndexOverflowError


#: Number of bits reserved for each daughter index in a packed key
INDEX_BITS = 31
INDEX_LIMIT = 1 << INDEX_BITS


def pack_daughters(positive, negative):
    """Pack the daughter track indices of a V0 in one key

    :param positive,negative: daughter indices, ``0 <= index < 2 ** 31``.
    :return: ``(positive << 31) | negative``.
    :raises IndexOverflowError: if an index is outside the 31 bit range.

    """
    for name, index in (('positive', positive), ('negative', negative)):
        if not 0 <= index < INDEX_LIMIT:
            raise IndexOverflowError('The %s daughter index %d does not fit '
                                     'in %d bits.' % (name, index, INDEX_BITS))
    return int(positive) << INDEX_BITS | int(negative)


def unpack_daughters(key):
    """Get the (positive, negative) daughter indices from a packed key"""

    key = int(key)
    return key >> INDEX_BITS, key & (INDEX_LIMIT - 1)


class V0Index(object):

    """Sorted lookup of V0 positions by their daughter indices

    :param daughters: sequence of (positive, negative) daughter index
                      pairs, one for each V0 in storage order.

    The sort is stable, so when several V0s share the same daughters the
    one with the lowest position is found.

    """

    def __init__(self, daughters):
        keys = np.array([pack_daughters(positive, negative)
                         for positive, negative in daughters],
                        dtype=np.uint64)
        self.order = np.argsort(keys, kind='stable')
        self.sorted_keys = keys[self.order]

    def __len__(self):
        return len(self.sorted_keys)

    def find(self, positive, negative):
        """Find the position of the V0 with these daughters

        :return: position in the original sequence, or None if there is
                 no V0 with exactly these daughters.

        """
        key = np.uint64(pack_daughters(positive, negative))
        idx = np.searchsorted(self.sorted_keys, key, side='left')
        if idx < len(self.sorted_keys) and self.sorted_keys[idx] == key:
            return int(self.order[idx])
        return None

    def resolve(self, positive, negative, offset):
        """Get the run-wide V0 id for a pair of daughters

        :param offset: V0 offset of the current event.
        :return: V0 id, or None if there is no match.

        """
        position = self.find(positive, negative)
        if position is None:
            return None
        return position + offset
