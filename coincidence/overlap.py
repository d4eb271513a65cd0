# -*- coding: utf-8 -*-
"""
This module counts and histograms coincidences between two spike trains: the
pairs of spikes, one from each train, that lie within `dt` of each other.

.. autosummary::
    :toctree: _toctree/overlap

    overlap_pairs
    count_overlap
    count_overlap_matrix
    bin_overlap
    bin2_overlap
    autocorrelation_histogram
    overlap_bin_edges

All functions rely on both input spike trains being sorted in ascending
order. The coincidence window ``[a - dt, a + dt]`` is closed on both ends, so
a spike compared against itself is always a coincidence.

:copyright: Copyright 2014-2024 by the coincidence team, see `AUTHORS.txt`.
:license: Modified BSD, see LICENSE.txt for details.
"""

import warnings
from collections import namedtuple

import numpy as np
import quantities as pq

from coincidence.utils import (check_histogram_buffer, check_n_bins,
                               deprecated_alias, is_time_quantity,
                               prepare_spiketrains)

DroppedPair = namedtuple("DroppedPair", ("delta", "bin_index"))


__all__ = [
    "DroppedPair",
    "overlap_pairs",
    "count_overlap",
    "count_overlap_matrix",
    "bin_overlap",
    "bin2_overlap",
    "autocorrelation_histogram",
    "overlap_bin_edges"
]

# Absolute tolerance for treating a time difference as equal to the edge of
# the histogram range.
BIN_EDGE_TOLERANCE = 1e-12

# Upper bound on the number of pairs held in memory at once while binning.
_MAX_PAIRS_PER_BLOCK = 2 ** 20

# Number of dropped pairs listed in a single warning message.
_MAX_REPORTED_DROPS = 10


def _window_bounds(times_a, times_b, dt):
    """
    For each spike in `times_a`, returns the index range ``[low, high)`` of
    the spikes in `times_b` that lie within ``[a - dt, a + dt]``.

    Both `low` and `high` are non-decreasing: spikes in `times_b` before
    `low[i]` are too early for every later spike of `times_a`. The cursors
    are found by binary search, O(n_a log n_b), rather than by advancing
    them one spike at a time.
    """
    low = np.searchsorted(times_b, times_a - dt, side='left')
    high = np.searchsorted(times_b, times_a + dt, side='right')
    return low, high


def _expand_pairs(low, high, offset=0):
    """
    Turns the windows ``[low, high)`` of the spikes ``offset``,
    ``offset + 1``, ... of train A into index pairs.
    """
    n_per_spike = high - low
    index_a = np.repeat(np.arange(offset, offset + len(low)), n_per_spike)
    # position of each pair inside its window, shifted to the window start
    window_starts = np.cumsum(n_per_spike) - n_per_spike
    index_b = np.arange(n_per_spike.sum()) + np.repeat(
        low - window_starts, n_per_spike)
    return index_a, index_b


def _window_pairs(times_a, times_b, dt):
    low, high = _window_bounds(times_a, times_b, dt)
    return _expand_pairs(low, high)


def _iter_window_pairs(times_a, times_b, dt, max_pairs=_MAX_PAIRS_PER_BLOCK):
    """
    Yields the coincident pairs in blocks of consecutive spikes of
    `times_a`, each block holding at most `max_pairs` pairs unless a single
    spike has more pairs than that.
    """
    low, high = _window_bounds(times_a, times_b, dt)
    pairs_until = np.cumsum(high - low)
    start = 0
    while start < len(times_a):
        pairs_before = pairs_until[start - 1] if start > 0 else 0
        stop = int(np.searchsorted(pairs_until, pairs_before + max_pairs,
                                   side='right'))
        stop = max(stop, start + 1)
        yield _expand_pairs(low[start:stop], high[start:stop], offset=start)
        start = stop


def overlap_pairs(spiketrain_a, spiketrain_b, dt):
    """
    Finds all pairs of spikes ``(i, j)`` such that
    ``|spiketrain_a[i] - spiketrain_b[j]| <= dt``.

    Parameters
    ----------
    spiketrain_a, spiketrain_b : neo.SpikeTrain or pq.Quantity or array-like
        Spike times sorted in ascending order. Either both carry time units
        or neither does.
    dt : pq.Quantity or float
        Half-width of the coincidence window. Must be a time quantity if the
        spike trains carry units.

    Returns
    -------
    index_a, index_b : np.ndarray
        Integer arrays of equal length; ``(index_a[k], index_b[k])`` is the
        k-th coincident pair. Pairs are ordered by `index_a`, then `index_b`.

    Raises
    ------
    ValueError
        If a spike train is not sorted or `dt` is negative.
    TypeError
        If the units of the inputs do not match.

    Examples
    --------
    >>> from coincidence.overlap import overlap_pairs
    >>> index_a, index_b = overlap_pairs([0., 1., 2.], [0.9, 2.1], dt=0.2)
    >>> index_a
    array([1, 2])
    >>> index_b
    array([0, 1])

    """
    times_a, times_b, dt = prepare_spiketrains(spiketrain_a, spiketrain_b, dt)
    return _window_pairs(times_a, times_b, dt)


def count_overlap(spiketrain_a, spiketrain_b, dt):
    """
    Counts the pairs of spikes, one from each train, whose time difference is
    at most `dt`.

    Every pair is counted independently: a spike in `spiketrain_a` that has
    two spikes of `spiketrain_b` within its window contributes two, and
    duplicate spike times are not merged.

    Parameters
    ----------
    spiketrain_a, spiketrain_b : neo.SpikeTrain or pq.Quantity or array-like
        Spike times sorted in ascending order.
    dt : pq.Quantity or float
        Half-width of the coincidence window, ``dt >= 0``.

    Returns
    -------
    int
        The number of coincident pairs. Zero if any of the trains is empty.

    Examples
    --------
    >>> import neo
    >>> import quantities as pq
    >>> from coincidence.overlap import count_overlap
    >>> st1 = neo.SpikeTrain([1.3, 7.56, 15.87, 28.23], units='ms', t_stop=50)
    >>> st2 = neo.SpikeTrain([1.02, 2.71, 28.46], units='ms', t_stop=50)
    >>> count_overlap(st1, st2, dt=0.5 * pq.ms)
    2

    """
    times_a, times_b, dt = prepare_spiketrains(spiketrain_a, spiketrain_b, dt)
    low, high = _window_bounds(times_a, times_b, dt)
    return int((high - low).sum())


def count_overlap_matrix(spiketrains, dt):
    """
    Calculates :func:`count_overlap` for every pair of spike trains in the
    input list.

    Parameters
    ----------
    spiketrains : list of neo.SpikeTrain or list of array-like
        N spike trains, each sorted in ascending order. Trains with units are
        rescaled to the units of the first one.
    dt : pq.Quantity or float
        Half-width of the coincidence window.

    Returns
    -------
    np.ndarray
        N x N integer matrix; entry ``[i, j]`` is the number of coincident
        pairs between trains `i` and `j`. The diagonal counts each train
        against itself and so is at least the number of its spikes.
    """
    if len(spiketrains) == 0:
        raise ValueError("At least one spike train is required")
    magnitudes = []
    for spiketrain in spiketrains:
        _, times, dt_magnitude = prepare_spiketrains(spiketrains[0],
                                                     spiketrain, dt)
        magnitudes.append(times)
    n_trains = len(magnitudes)
    counts = np.zeros((n_trains, n_trains), dtype=np.int64)
    for i in range(n_trains):
        for j in range(i, n_trains):
            low, high = _window_bounds(magnitudes[i], magnitudes[j],
                                       dt_magnitude)
            counts[i, j] = counts[j, i] = (high - low).sum()
    return counts


def _bin_indices(positions, deltas, min_value, max_value, n_bins,
                 tolerance):
    """
    Returns the bin numbers of `deltas`, given their `positions` in units of
    the bin width from `min_value`. Each bin is ``[low, high)`` except the
    last one, which is ``[low, high]``; deltas within `tolerance` of
    `min_value` or `max_value` are pulled into the first or the last bin.
    """
    bin_indices = np.floor(positions).astype(np.int64)
    at_max = (bin_indices == n_bins) & (
        np.abs(deltas - max_value) < tolerance)
    bin_indices[at_max] -= 1
    at_min = (bin_indices == -1) & (np.abs(deltas - min_value) < tolerance)
    bin_indices[at_min] += 1
    return bin_indices


def _accumulate(histogram, deltas, bin_indices):
    n_bins = len(histogram)
    valid = (bin_indices >= 0) & (bin_indices < n_bins)
    counts = np.bincount(bin_indices[valid], minlength=n_bins)
    histogram += counts.astype(histogram.dtype)
    return [DroppedPair(delta, index) for delta, index in
            zip(deltas[~valid].tolist(), bin_indices[~valid].tolist())]


def _histogram_pairs(times_a, times_b, dt, histogram, two_sided, tolerance,
                     max_pairs=_MAX_PAIRS_PER_BLOCK):
    """
    Bins the time differences of all coincident pairs into `histogram`,
    block by block, and returns the pairs that could not be binned.
    """
    n_bins = len(histogram)
    if two_sided:
        bin_width = 2 * dt / n_bins
        min_value = -dt
    else:
        bin_width = dt / n_bins
        min_value = 0.
    dropped = []
    for index_a, index_b in _iter_window_pairs(times_a, times_b, dt,
                                               max_pairs=max_pairs):
        deltas = times_b[index_b] - times_a[index_a]
        if two_sided:
            # same as (deltas + dt) / bin_width, but exact for a zero
            # difference
            positions = deltas / bin_width + n_bins / 2
        else:
            deltas = np.abs(deltas)
            positions = deltas / bin_width
        bin_indices = _bin_indices(positions, deltas, min_value, dt, n_bins,
                                   tolerance)
        dropped.extend(_accumulate(histogram, deltas, bin_indices))
    _warn_dropped(dropped, n_bins, tolerance)
    return dropped


def _warn_dropped(dropped, n_bins, tolerance):
    if dropped:
        listed = ", ".join(f"delta={pair.delta!r} bin={pair.bin_index}"
                           for pair in dropped[:_MAX_REPORTED_DROPS])
        if len(dropped) > _MAX_REPORTED_DROPS:
            listed += ", ..."
        warnings.warn(f"Dropped {len(dropped)} coincident pair(s) whose bin "
                      f"number falls outside [0, {n_bins - 1}] with "
                      f"tolerance={tolerance}: {listed}")


def _check_binning_window(dt):
    if dt == 0:
        raise ValueError("dt must be > 0 to build a histogram of time "
                         "differences")


@deprecated_alias(nbins='n_bins')
def bin_overlap(spiketrain_a, spiketrain_b, dt, n_bins, out=None,
                tolerance=BIN_EDGE_TOLERANCE, return_dropped=False):
    """
    Histograms the absolute time differences ``|b - a|`` of all coincident
    pairs into `n_bins` equal bins covering ``[0, dt]``.

    A difference that falls on an inner bin edge goes to the upper bin. A
    difference equal to `dt` (up to `tolerance`) goes to the last bin, which
    is closed on both ends. Pairs whose bin number still falls outside
    ``[0, n_bins - 1]`` are not counted; a warning lists them.

    Parameters
    ----------
    spiketrain_a, spiketrain_b : neo.SpikeTrain or pq.Quantity or array-like
        Spike times sorted in ascending order.
    dt : pq.Quantity or float
        Half-width of the coincidence window and upper edge of the
        histogram, ``dt > 0``.
    n_bins : int
        Number of histogram bins.
    out : np.ndarray, optional
        An integer array of shape ``(n_bins,)`` to accumulate the counts in.
        It is incremented in place, not reset. If None, a new zeroed array
        is allocated.
        Default: None
    tolerance : float, optional
        Absolute tolerance, in the units of `spiketrain_a`, for a time
        difference to be considered equal to the histogram edge.
        Default: 1e-12
    return_dropped : bool, optional
        If True, the list of pairs that could not be binned is returned
        alongside the histogram.
        Default: False

    Returns
    -------
    histogram : np.ndarray
        Counts of coincident pairs per bin; `out` if it was given.
    dropped : list of DroppedPair
        Only if `return_dropped` is True. The time difference and the bin
        number of every pair left out of the histogram.

    Raises
    ------
    ValueError
        If `dt` is not positive, `n_bins` is not a positive integer, or a
        spike train is not sorted.

    Warns
    -----
    UserWarning
        If any coincident pair was left out of the histogram.

    See Also
    --------
    bin2_overlap : the signed version, covering ``[-dt, dt]``
    overlap_bin_edges : the edges of the histogram bins

    Examples
    --------
    >>> from coincidence.overlap import bin_overlap
    >>> bin_overlap([1.0], [0.75, 1.0, 1.25], dt=0.5, n_bins=2)
    array([1, 2])

    """
    n_bins = check_n_bins(n_bins)
    histogram = check_histogram_buffer(out, n_bins)
    times_a, times_b, dt = prepare_spiketrains(spiketrain_a, spiketrain_b, dt)
    _check_binning_window(dt)

    dropped = _histogram_pairs(times_a, times_b, dt, histogram,
                               two_sided=False, tolerance=tolerance)
    if return_dropped:
        return histogram, dropped
    return histogram


@deprecated_alias(nbins='n_bins')
def bin2_overlap(spiketrain_a, spiketrain_b, dt, n_bins, out=None,
                 tolerance=BIN_EDGE_TOLERANCE, return_dropped=False):
    """
    Histograms the signed time differences ``b - a`` of all coincident pairs
    into `n_bins` equal bins covering ``[-dt, dt]``.

    This is the bidirectional version of :func:`bin_overlap`. Bins are
    ``[low, high)``, except the last one which is ``[low, high]``; time
    differences within `tolerance` of ``-dt`` and ``dt`` are put into the
    first and the last bin respectively. A zero time difference falls into
    bin ``n_bins // 2``, so when a spike train is correlated with itself
    every spike contributes one count to that bin.

    Parameters
    ----------
    spiketrain_a, spiketrain_b : neo.SpikeTrain or pq.Quantity or array-like
        Spike times sorted in ascending order.
    dt : pq.Quantity or float
        Half-width of the coincidence window, ``dt > 0``.
    n_bins : int
        Number of histogram bins.
    out : np.ndarray, optional
        An integer array of shape ``(n_bins,)`` that is incremented in place.
        Default: None
    tolerance : float, optional
        Absolute tolerance for a time difference to be considered equal to
        ``-dt`` or ``dt``.
        Default: 1e-12
    return_dropped : bool, optional
        If True, also return the pairs left out of the histogram.
        Default: False

    Returns
    -------
    histogram : np.ndarray
        Counts of coincident pairs per bin.
    dropped : list of DroppedPair
        Only if `return_dropped` is True.

    Raises
    ------
    ValueError
        If `dt` is not positive, `n_bins` is not a positive integer, or a
        spike train is not sorted.

    Warns
    -----
    UserWarning
        If any coincident pair was left out of the histogram.

    Examples
    --------
    >>> from coincidence.overlap import bin2_overlap
    >>> bin2_overlap([1.0], [0.75, 1.0, 1.25], dt=0.5, n_bins=4)
    array([0, 1, 1, 1])

    """
    n_bins = check_n_bins(n_bins)
    histogram = check_histogram_buffer(out, n_bins)
    times_a, times_b, dt = prepare_spiketrains(spiketrain_a, spiketrain_b, dt)
    _check_binning_window(dt)

    dropped = _histogram_pairs(times_a, times_b, dt, histogram,
                               two_sided=True, tolerance=tolerance)
    if return_dropped:
        return histogram, dropped
    return histogram


def autocorrelation_histogram(spiketrain, dt, n_bins,
                              tolerance=BIN_EDGE_TOLERANCE,
                              return_dropped=False):
    """
    Histograms the time differences between all pairs of spikes of a single
    spike train within ``[-dt, dt]``.

    Shortcut for ``bin2_overlap(spiketrain, spiketrain, dt, n_bins)``. Each
    spike is paired with itself, so bin ``n_bins // 2`` holds at least
    ``len(spiketrain)`` counts.
    """
    return bin2_overlap(spiketrain, spiketrain, dt, n_bins,
                        tolerance=tolerance, return_dropped=return_dropped)


def overlap_bin_edges(dt, n_bins, two_sided=False):
    """
    Returns the `n_bins` + 1 edges of the histograms built by
    :func:`bin_overlap` (``two_sided=False``) or :func:`bin2_overlap`
    (``two_sided=True``).

    Parameters
    ----------
    dt : pq.Quantity or float
        Half-width of the coincidence window, ``dt > 0``.
    n_bins : int
        Number of histogram bins.
    two_sided : bool, optional
        If True, the edges span ``[-dt, dt]``, otherwise ``[0, dt]``.
        Default: False

    Returns
    -------
    np.ndarray or pq.Quantity
        Bin edges, in the units of `dt` if it is a quantity.

    Examples
    --------
    >>> import quantities as pq
    >>> from coincidence.overlap import overlap_bin_edges
    >>> overlap_bin_edges(2 * pq.ms, n_bins=4, two_sided=True)
    array([-2., -1.,  0.,  1.,  2.]) * ms

    """
    n_bins = check_n_bins(n_bins)
    units = None
    if isinstance(dt, pq.Quantity):
        if not is_time_quantity(dt):
            raise TypeError(f"dt must be a time quantity, got {dt!r}")
        units = dt.units
        dt = dt.item()
    if not np.isfinite(dt) or dt <= 0:
        raise ValueError(f"dt must be > 0, found: {dt}")
    low = -dt if two_sided else 0.
    edges = np.linspace(low, dt, num=n_bins + 1)
    if units is not None:
        edges = pq.Quantity(edges, units=units)
    return edges
