# -*- coding: utf-8 -*-
"""
coincidence counts and histograms the coincident spikes of pairs of spike
trains.

:copyright: Copyright 2014-2024 by the coincidence team, see `AUTHORS.txt`.
:license: Modified BSD, see LICENSE.txt for details.
"""

from . import (
    overlap,
    utils,
)

from .overlap import (
    DroppedPair,
    autocorrelation_histogram,
    bin2_overlap,
    bin_overlap,
    count_overlap,
    count_overlap_matrix,
    overlap_bin_edges,
    overlap_pairs,
)


def _get_version():
    import os
    coincidence_dir = os.path.dirname(__file__)
    with open(os.path.join(coincidence_dir, 'VERSION')) as version_file:
        version = version_file.read().strip()
    return version


__version__ = _get_version()
