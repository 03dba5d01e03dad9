""" Tag events with the kind of event generator that produced them

    Monte Carlo events carry a generator header.  Its kind is stored as a
    bitmask in the ``generator_id`` column of the events table, one bit
    for each :class:`GeneratorKind`.  A cocktail of generators sets the
    bits of all generators it contains.

"""
import enum


class GeneratorKind(enum.IntEnum):

    """Known event generators, the value is the bit in the bitmask"""

    GENERIC = 0
    COCKTAIL = 1
    DPMJET = 2
    EPOS3 = 3
    EPOS = 4
    TUNED_PBPB = 5
    GEVSIM = 6
    HEPMC = 7
    HERWIG = 8
    HIJING = 9
    PYTHIA = 10
    TOY = 11


def generator_bitmask(header):
    """Get the generator bitmask for a generator header

    Every header is a generic generator header, so the GENERIC bit is
    always set, along with the bit of the header's own kind.  For a
    cocktail the bits of all sub-headers are included, recursively.

    :param header: generator header with a ``kind`` attribute (a
        :class:`GeneratorKind`) and, for cocktails, a ``headers`` list.
    :return: integer bitmask.

    """
    bits = 1 << GeneratorKind.GENERIC | 1 << GeneratorKind(header.kind)
    if header.kind == GeneratorKind.COCKTAIL:
        for sub_header in header.headers:
            bits |= generator_bitmask(sub_header)
    return bits


def generator_kinds(bitmask):
    """Get the generator kinds set in a bitmask"""

    return [kind for kind in GeneratorKind if bitmask & (1 << kind)]
