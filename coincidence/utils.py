"""
.. autosummary::
    :toctree: _toctree/utils

    is_time_quantity
    deprecated_alias
"""

import numbers
import warnings
from functools import wraps

import neo
import numpy as np
import quantities as pq


__all__ = [
    "deprecated_alias",
    "is_time_quantity",
]


def deprecated_alias(**aliases):
    """
    A deprecation decorator constructor.

    Parameters
    ----------
    **aliases
        The key-value pairs of mapping old --> new argument names of a
        function.

    Returns
    -------
    callable
        A decorator for the specific mapping of deprecated argument names.

    Examples
    --------
    In the example below, `my_function(nbins)` signature is marked as
    deprecated (but still usable) and changed to `my_function(n_bins)`.

    >>> @deprecated_alias(nbins='n_bins')
    ... def my_function(n_bins):
    ...     pass

    """
    def deco(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            _rename_kwargs(func.__name__, kwargs, aliases)
            return func(*args, **kwargs)

        return wrapper

    return deco


def _rename_kwargs(func_name, kwargs, aliases):
    for old, new in aliases.items():
        if old in kwargs:
            if new in kwargs:
                raise TypeError(f"{func_name} received both '{old}' and "
                                f"'{new}'")
            warnings.warn(f"'{old}' is deprecated; use '{new}'",
                          DeprecationWarning)
            kwargs[new] = kwargs.pop(old)


def is_time_quantity(*quantities, allow_none=False):
    """
    Parameters
    ----------
    *quantities : pq.Quantity
         A scalar or array-like to check for being a Quantity with time units.
    allow_none : bool, optional
        Allow the input to be None or not.
        Default: False

    Returns
    -------
    bool
        Whether the input is a time Quantity (True) or not (False).
        If the input is None and `allow_none` is set to True, returns True.

    """
    for quantity in quantities:
        if allow_none and quantity is None:
            continue
        if not isinstance(quantity, pq.Quantity):
            return False
        if quantity.dimensionality.simplified != pq.s.dimensionality:
            return False
    return True


def _train_magnitude(spiketrain, units=None):
    """
    Returns the spike times of `spiketrain` as a 1-D float array, rescaled to
    `units` if the input carries units.
    """
    if isinstance(spiketrain, neo.SpikeTrain):
        spiketrain = spiketrain.times
    if isinstance(spiketrain, pq.Quantity):
        if not is_time_quantity(spiketrain):
            raise TypeError("Spike trains must have time units, got "
                            f"{spiketrain.dimensionality}")
        if units is not None:
            spiketrain = spiketrain.rescale(units)
        times = np.asarray(spiketrain.magnitude, dtype=np.float64)
    else:
        times = np.asarray(spiketrain, dtype=np.float64)
    if times.ndim != 1:
        raise ValueError("Spike trains must be one dimensional, got an "
                         f"array of shape {times.shape}")
    if not np.isfinite(times).all():
        raise ValueError("Spike times must be finite")
    if (np.diff(times) < 0).any():
        raise ValueError("Spike times must be sorted in ascending order")
    return times


def prepare_spiketrains(spiketrain_a, spiketrain_b, dt):
    """
    Converts a pair of spike trains and the coincidence window `dt` into
    plain float magnitudes in the units of `spiketrain_a`.

    Both trains must either carry time units (:class:`neo.SpikeTrain` or
    :class:`pq.Quantity`) or be plain array-likes. In the first case `dt`
    must be a time quantity, otherwise a plain number.

    Parameters
    ----------
    spiketrain_a, spiketrain_b : neo.SpikeTrain or pq.Quantity or array-like
        Ascending spike times.
    dt : pq.Quantity or float
        The coincidence window half-width.

    Returns
    -------
    times_a, times_b : np.ndarray
        Spike times as 1-D float arrays.
    dt : float
        The window half-width in the common units.

    Raises
    ------
    TypeError
        If the trains mix unit-carrying and plain inputs, if the units are
        not time units, or if `dt` does not match the trains.
    ValueError
        If a train is not one dimensional or not sorted, or if `dt` is
        negative or not finite.
    """
    with_units = [isinstance(st, (neo.SpikeTrain, pq.Quantity))
                  for st in (spiketrain_a, spiketrain_b)]
    if with_units[0] != with_units[1]:
        raise TypeError("Spike trains must either both carry time units or "
                        "both be plain arrays")
    if with_units[0]:
        if not is_time_quantity(spiketrain_a, spiketrain_b):
            raise TypeError("Spike trains must have time units")
        units = spiketrain_a.units
        if not is_time_quantity(dt):
            raise TypeError(f"dt must be a time quantity, got {dt!r}")
        dt = dt.rescale(units).item()
    else:
        units = None
        if isinstance(dt, pq.Quantity):
            raise TypeError("dt must be a plain number when the spike "
                            "trains carry no units")
        dt = float(dt)
    if not np.isfinite(dt) or dt < 0:
        raise ValueError(f"dt must be >= 0, found: {dt}")
    times_a = _train_magnitude(spiketrain_a, units=units)
    times_b = _train_magnitude(spiketrain_b, units=units)
    return times_a, times_b, dt


def check_n_bins(n_bins):
    """
    Returns `n_bins` as a Python int, raising a ValueError if it is not a
    positive integer.
    """
    if isinstance(n_bins, bool) or not isinstance(n_bins, numbers.Integral):
        raise ValueError(f"n_bins must be a positive integer, got {n_bins!r}")
    if n_bins <= 0:
        raise ValueError(f"n_bins must be a positive integer, got {n_bins}")
    return int(n_bins)


def check_histogram_buffer(out, n_bins):
    """
    Validates a caller-owned histogram buffer, or allocates a zeroed one when
    `out` is None.
    """
    if out is None:
        return np.zeros(n_bins, dtype=np.int64)
    if not isinstance(out, np.ndarray):
        raise TypeError("out must be a numpy array, got "
                        f"{type(out).__name__}")
    if out.shape != (n_bins,):
        raise ValueError(f"out must have shape ({n_bins},), got {out.shape}")
    if not np.issubdtype(out.dtype, np.integer):
        raise TypeError(f"out must have an integer dtype, got {out.dtype}")
    return out
