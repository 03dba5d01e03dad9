""" Combine the start time estimates of the timing response

    The timing response gives an event start time and its resolution for
    a number of momentum bins.  These are combined into a single event
    time by an inverse-variance weighted mean.

"""
import numpy as np

from .errors import TimingBinsError


#: Maximum number of momentum bins, the size of the start time arrays
MAX_MOMENTUM_BINS = 10


def start_times(response):
    """Get the start time estimates of all momentum bins

    Each bin is evaluated at the center of its momentum range.

    :param response: timing response, see :class:`ao2d.esd.TimingResponse`.
    :return: arrays of times and resolutions, and the mask of the last bin.

    """
    n_bins = response.n_momentum_bins
    if n_bins > MAX_MOMENTUM_BINS:
        raise TimingBinsError('The timing response has %d momentum bins, '
                              'at most %d are supported.' %
                              (n_bins, MAX_MOMENTUM_BINS))

    times = np.zeros(n_bins)
    resolutions = np.zeros(n_bins)
    mask = 0
    for i in range(n_bins):
        momentum = (response.min_momentum(i) + response.max_momentum(i)) / 2.
        times[i] = response.start_time(momentum)
        resolutions[i] = response.start_time_resolution(momentum)
        mask = response.start_time_mask(momentum)

    return times, resolutions, mask


def weighted_event_time(times, resolutions):
    """Inverse-variance weighted mean of start times

    :param times: start time estimates.
    :param resolutions: their resolutions, must all be positive.
    :return: event time and its resolution, both 0 if there are no
             estimates.

    """
    times = np.asarray(times, dtype=float)
    resolutions = np.asarray(resolutions, dtype=float)
    if not len(times):
        return 0., 0.
    if (resolutions <= 0).any():
        raise TimingBinsError('Start time resolutions must be positive, '
                              'got %s.' % resolutions.tolist())

    weights = 1. / resolutions ** 2
    event_time = np.sum(weights * times) / np.sum(weights)
    event_time_res = 1. / np.sqrt(np.sum(weights))

    return float(event_time), float(event_time_res)


def time_mask_bits(mask):
    """Convert a start time mask to the stored quality bits

    Bit 0 and 1 copy the first two bits of the mask, bit 2 is set if
    either of them is set.

    """
    bits = 0
    if mask & 0x1:
        bits |= 1 << 0
    if mask & 0x2:
        bits |= 1 << 1
    if mask & 0x3:
        bits |= 1 << 2
    return bits


def event_time(response):
    """Get event time, resolution and quality bits from a timing response

    :return: tuple (time, resolution, mask bits).

    """
    times, resolutions, mask = start_times(response)
    time, resolution = weighted_event_time(times, resolutions)
    return time, resolution, time_mask_bits(mask)
