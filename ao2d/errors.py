""" Exceptions raised when a conversion can not continue

    Every error in this module is fatal for a conversion run: the
    converter logs it and re-raises, there is no retry or partial
    recovery.  Silent skips (rejected events, on-the-fly candidates,
    unmatched cascades) are not errors and are only counted.

"""


class ConversionError(Exception):

    """Base exception for all fatal conversion errors"""


class MissingVertexError(ConversionError):

    """An event has no primary vertex"""


class MissingMCEventError(ConversionError):

    """MC truth or the MC vertex is missing in MC mode"""


class TimingBinsError(ConversionError):

    """Unusable timing response

    Raised for more momentum bins than fit in the event time arrays, or
    for a bin with a non-positive resolution.

    """


class IndexOverflowError(ConversionError):

    """An index does not fit in the bits reserved for it"""


class MissingClusterError(ConversionError):

    """A muon track refers to a cluster that is not in the event"""


class PruneError(ConversionError):

    """A column can not be pruned

    Raised when a column in the prune list can not be found, or when
    pruning is requested after the tables were created.

    :param names: the column names that could not be pruned.

    """

    def __init__(self, message, names=()):
        self.names = list(names)
        super().__init__(message)
