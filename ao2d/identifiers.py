""" Run-wide identifiers for rows in the flat tables

    Within an event objects refer to each other by their index in that
    event (the n-th track, the m-th muon track).  Once the rows of many
    events are concatenated these local indices are no longer unique.
    The :class:`IdentifierAllocator` keeps the running totals which turn
    a local index into an identifier that is unique within the run::

        >>> allocator = IdentifierAllocator()
        >>> allocator.advance(tracks=3, muon_tracks=0, v0s=1)
        >>> allocator.offsets().track + 1
        4

    Event identifiers are packed from the bunch crossing, orbit and period
    counters of the event header, see :func:`pack_event_id`.

"""
from collections import namedtuple

from .errors import ConversionError, IndexOverflowError


#: Bit widths of the fields in the packed event id, from low to high bits
BC_BITS = 12
ORBIT_BITS = 24
PERIOD_BITS = 28

Offsets = namedtuple('Offsets', ['collision', 'track', 'muon', 'v0'])


class IdentifierAllocator(object):

    """Running offsets used to make local indices unique within a run

    The counters are only changed by :meth:`advance`, which is called
    once at the end of each accepted event, when all rows of that event
    have been stored.  A new allocator starts at zero.

    """

    def __init__(self):
        self._offsets = Offsets(0, 0, 0, 0)

    def offsets(self):
        """Current offsets, to be added to the local indices of an event

        :return: :class:`Offsets` with the collision (row number of the
                 event), track, muon track and V0 offsets.

        """
        return self._offsets

    def advance(self, tracks, muon_tracks, v0s):
        """Advance all offsets past the rows of one event

        All counters are checked before any is changed, so the offsets
        are either all advanced or not changed at all.

        :param tracks: number of track rows stored for the event.
        :param muon_tracks: number of muon track rows stored.
        :param v0s: number of V0 rows stored.

        """
        counts = (tracks, muon_tracks, v0s)
        if any(count < 0 for count in counts):
            raise ConversionError('Offsets can not be advanced by negative '
                                  'counts: %s' % (counts,))
        collision, track, muon, v0 = self._offsets
        self._offsets = Offsets(collision + 1, track + tracks,
                                muon + muon_tracks, v0 + v0s)

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self._offsets)


def offset_signed_index(index, offset):
    """Offset an index while keeping its sign

    The sign of a daughter index carries a flag, so the offset is added to
    the absolute value and the sign is restored afterwards.  An index of 0
    is taken as positive.

    """
    magnitude = abs(index) + offset
    return -magnitude if index < 0 else magnitude


def pack_event_id(bunch_crossing, orbit, period):
    """Combine bunch crossing, orbit and period into one event id

    The bunch crossing is stored in the lowest 12 bits, the orbit in the
    next 24 bits and the period in the highest 28 bits.

    :raises IndexOverflowError: if a field does not fit its bits.

    """
    fields = (('bunch crossing', bunch_crossing, BC_BITS),
              ('orbit', orbit, ORBIT_BITS),
              ('period', period, PERIOD_BITS))
    for name, value, bits in fields:
        if not 0 <= value < 1 << bits:
            raise IndexOverflowError('The %s number %d does not fit in %d '
                                     'bits.' % (name, value, bits))

    return (int(bunch_crossing) | int(orbit) << BC_BITS |
            int(period) << (BC_BITS + ORBIT_BITS))


def unpack_event_id(event_id):
    """Split an event id into bunch crossing, orbit and period

    :return: tuple (bunch_crossing, orbit, period).

    """
    event_id = int(event_id)
    bunch_crossing = event_id & ((1 << BC_BITS) - 1)
    orbit = (event_id >> BC_BITS) & ((1 << ORBIT_BITS) - 1)
    period = event_id >> (BC_BITS + ORBIT_BITS)
    return bunch_crossing, orbit, period
