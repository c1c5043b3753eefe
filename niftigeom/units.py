# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Spatial and temporal units of the NIfTI ``xyzt_units`` byte

The byte packs two independent selectors: the spatial unit in bits 0-2 and
the temporal unit in bits 3-5.  Spacing read from ``pixdim`` is converted to
millimeters for the first three axes and to seconds for the fourth.

Unrecognized or unset units are common in real files, so they convert with
scale 1 (already mm or seconds) rather than raising.

>>> unit_scales(pack_xyzt_units('micron', 'msec'))
(0.001, 0.001)
"""

from types import MappingProxyType

import numpy as np

from .imageglobals import logger
from .volumeutils import Recoder

SPACE_UNIT_MASK = 0x07
TIME_UNIT_MASK = 0x38

unit_codes = Recoder(
    (  # code, label
        (0, 'unknown'),
        (1, 'meter'),
        (2, 'mm'),
        (3, 'micron'),
        (8, 'sec'),
        (16, 'msec'),
        (24, 'usec'),
        (32, 'hz'),
        (40, 'ppm'),
        (48, 'rads'),
    ),
    fields=('code', 'label'),
)

# scale factors to millimeters and seconds, by unit code
SPATIAL_SCALES = MappingProxyType({1: 1e3, 2: 1.0, 3: 1e-3})
TEMPORAL_SCALES = MappingProxyType({8: 1.0, 16: 1e-3, 24: 1e-6})


def split_xyzt_units(xyzt_units):
    """Split packed byte into (spatial code, temporal code)

    >>> split_xyzt_units(10)
    (2, 8)
    """
    xyzt_units = int(xyzt_units)
    return xyzt_units & SPACE_UNIT_MASK, xyzt_units & TIME_UNIT_MASK


def pack_xyzt_units(xyz=None, t=None):
    """Pack spatial and temporal unit codes or labels into one byte

    Parameters
    ----------
    xyz : None or int or str, optional
        spatial unit code or label; None gives 'unknown'
    t : None or int or str, optional
        temporal unit code or label; None gives 'unknown'

    Examples
    --------
    >>> pack_xyzt_units('mm', 'sec')
    10
    """
    xyz_code = 0 if xyz is None else unit_codes.code[xyz]
    t_code = 0 if t is None else unit_codes.code[t]
    if xyz_code & ~SPACE_UNIT_MASK:
        raise ValueError(f'{xyz!r} is not a spatial unit')
    if t_code & ~TIME_UNIT_MASK:
        raise ValueError(f'{t!r} is not a temporal unit')
    return xyz_code | t_code


def get_xyzt_units(xyzt_units):
    """Labels for spatial and temporal units in packed byte

    Codes with no label come back as ``'<unknown code N>'``.

    >>> get_xyzt_units(18)
    ('mm', 'msec')
    """
    labels = []
    for code in split_xyzt_units(xyzt_units):
        try:
            labels.append(unit_codes.label[code])
        except KeyError:
            labels.append(f'<unknown code {code}>')
    return tuple(labels)


def spatial_scale(space_code):
    """Factor converting spatial unit `space_code` to millimeters"""
    try:
        return SPATIAL_SCALES[space_code]
    except KeyError:
        if space_code:
            logger.debug('spatial unit code %d not recognized; assuming mm', space_code)
        return 1.0


def temporal_scale(time_code):
    """Factor converting temporal unit `time_code` to seconds"""
    try:
        return TEMPORAL_SCALES[time_code]
    except KeyError:
        if time_code:
            logger.debug('temporal unit code %d not recognized; assuming seconds', time_code)
        return 1.0


def unit_scales(xyzt_units):
    """Return (spatial scale, temporal scale) for packed units byte

    Parameters
    ----------
    xyzt_units : int
        packed unit byte from the header

    Returns
    -------
    spatial_scale : float
        multiplier taking spatial ``pixdim`` values to millimeters
    temporal_scale : float
        multiplier taking temporal ``pixdim`` values to seconds

    Examples
    --------
    >>> unit_scales(pack_xyzt_units('meter', 'usec'))
    (1000.0, 1e-06)
    >>> unit_scales(0)
    (1.0, 1.0)
    """
    space_code, time_code = split_xyzt_units(xyzt_units)
    return spatial_scale(space_code), temporal_scale(time_code)


def normalize_spacing(pixdim, xyzt_units, rank):
    """Spacing for the first `rank` axes, in millimeters and seconds

    Axes 0 to 2 scale by the spatial factor, axis 3 by the temporal factor,
    and higher axes are left as stored.  Zero or non-finite values become
    1 and negative values are made positive.

    Parameters
    ----------
    pixdim : sequence
        per-axis spacing, ``pixdim[1:]`` from the header; at least `rank`
        values
    xyzt_units : int
        packed units byte
    rank : int
        number of axes in use

    Returns
    -------
    spacing : (rank,) array

    Examples
    --------
    >>> normalize_spacing([2, 2, 3, 1500, 1], pack_xyzt_units('mm', 'msec'), 4)
    array([2. , 2. , 3. , 1.5])
    """
    spacing = np.array(pixdim[:rank], dtype=np.float64)
    if len(spacing) != rank:
        raise ValueError(f'Need {rank} spacing values, got {len(spacing)}')
    bad = ~np.isfinite(spacing) | (spacing == 0)
    if np.any(bad):
        logger.warning('spacing %s has zero or non-finite values; setting to 1', spacing)
        spacing[bad] = 1
    spacing = np.abs(spacing)
    xyz_scale, t_scale = unit_scales(xyzt_units)
    spacing[:3] *= xyz_scale
    spacing[3:4] *= t_scale
    return spacing
