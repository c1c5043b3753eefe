# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Apply stored slope and intercept to decoded voxel values

Values are computed as ``value * slope + inter`` in float64, then cast back
to the type of the buffer.  Integer results truncate toward zero and clip to
the range of the type.

Rescaling happens only when ``slope > 1`` or ``inter != 0``.  Slopes between
0 and 1 are therefore left unapplied; this matches the reader this package
replaces, and callers relying on the result should not change it casually.
"""

import numpy as np

from .datatypes import COMPONENT_DTYPES, UnsupportedComponentTypeError
from .imageglobals import logger


def needs_rescale(slope, inter):
    """True if `slope`, `inter` call for rescaling on read

    >>> needs_rescale(1, 0)
    False
    >>> needs_rescale(0.5, 0)
    False
    >>> needs_rescale(2, 0), needs_rescale(1, -1024)
    (True, True)
    """
    return bool(slope > 1 or inter != 0)


def rescale_buffer(buffer, slope, inter, component_type, pixel_layout='scalar', count=None):
    """Rescale first `count` values of `buffer` in place

    Parameters
    ----------
    buffer : ndarray
        writeable array of decoded values
    slope : float
    inter : float
    component_type : str
        component type of `buffer` values, see
        :data:`niftigeom.datatypes.COMPONENT_DTYPES`
    pixel_layout : str, optional
        only 'scalar' buffers are rescaled; others are returned unchanged
    count : None or int, optional
        number of values to rescale, in memory order; None for all

    Returns
    -------
    buffer : ndarray
        the input `buffer`, modified in place

    Raises
    ------
    UnsupportedComponentTypeError
        if `component_type` is not a numeric type for a scalar buffer

    Examples
    --------
    >>> arr = np.array([5, -3], dtype=np.int16)
    >>> rescale_buffer(arr, 2, 10, 'short')
    array([20,  4], dtype=int16)
    """
    if pixel_layout != 'scalar':
        logger.debug('not rescaling %s buffer', pixel_layout)
        return buffer
    if component_type not in COMPONENT_DTYPES:
        raise UnsupportedComponentTypeError(
            f'Cannot rescale values of component type {component_type!r}')
    flat = buffer.reshape(-1, order='A')
    if not np.shares_memory(flat, buffer) and flat.size:
        raise ValueError('Buffer must be contiguous to rescale in place')
    if count is not None:
        flat = flat[:count]
    work_dtype = np.complex128 if np.iscomplexobj(buffer) else np.float64
    values = flat.astype(work_dtype) * float(slope) + float(inter)
    if np.issubdtype(buffer.dtype, np.integer):
        info = np.iinfo(buffer.dtype)
        values = np.clip(np.trunc(values), info.min, info.max)
    flat[...] = values
    return buffer
