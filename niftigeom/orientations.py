# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Orientation of voxel axes, from transforms and legacy orientation codes

Two conventions meet here.  NIfTI transforms map voxels to RAS+ space (x to
the Right, y Anterior, z Superior).  Direction cosines in
:class:`niftigeom.geometry.CanonicalGeometry` are in LPS+ space, so their x and
y components have the opposite sign to the NIfTI matrix.

Axis codes name the positive end of each voxel axis in RAS terms: the
tuple ``('L', 'A', 'S')`` means the first voxel axis increases to the Left,
the second to the Anterior, the third to the Superior.  ``None`` marks an
unknown axis.  The same labels, as the NIfTI orientation integers (see
:data:`orientation_codes`), pack into one integer with one byte per axis.

Orientation arrays (``ornt``) are as in :func:`io_orientation`: one row per
input axis giving (output axis, flip).
"""

from collections import namedtuple
from types import MappingProxyType

import numpy as np
import numpy.linalg as npl

from .affines import from_matvec, to_matvec
from .imageglobals import logger
from .volumeutils import Recoder


class OrientationError(Exception):
    pass


# NIfTI orientation integers; axcode is the label of the positive end
orientation_codes = Recoder(
    (  # code, label, axcode, niistring
        (0, 'unknown', None, 'NIFTI_UNKNOWN_ORIENT'),
        (1, 'L2R', 'R', 'NIFTI_L2R'),
        (2, 'R2L', 'L', 'NIFTI_R2L'),
        (3, 'P2A', 'A', 'NIFTI_P2A'),
        (4, 'A2P', 'P', 'NIFTI_A2P'),
        (5, 'I2S', 'S', 'NIFTI_I2S'),
        (6, 'S2I', 'I', 'NIFTI_S2I'),
    ),
    fields=('code', 'label', 'axcode', 'niistring'),
)

# Analyze 7.5 ``orient`` byte
analyze_orient_codes = Recoder(
    (  # code, label
        (0, 'transverse unflipped'),
        (1, 'coronal unflipped'),
        (2, 'sagittal unflipped'),
        (3, 'transverse flipped'),
        (4, 'coronal flipped'),
        (5, 'sagittal flipped'),
    ),
    fields=('code', 'label'),
)

# Axis codes for the supported legacy orientations.  Flipped and unknown
# variants all collapse to DEFAULT_LEGACY_AXCODES.
LEGACY_AXCODES = MappingProxyType({
    0: ('L', 'A', 'S'),
    2: ('A', 'S', 'L'),
})
DEFAULT_LEGACY_AXCODES = ('L', 'S', 'A')

#: bits per axis label in a packed orientation
ORIENTATION_FIELD_BITS = 8

_RAS_LABELS = tuple(zip('LPI', 'RAS'))
_LPS_FLIP = np.array([-1.0, -1.0, 1.0])

ResolvedOrientation = namedtuple(
    'ResolvedOrientation', ('direction', 'origin', 'slope', 'intercept', 'axcodes'))


def io_orientation(affine, tol=None):
    """Orientation of input axes in terms of output axes for `affine`

    Valid for an affine transformation from ``p`` dimensions to ``q``
    dimensions (``affine.shape == (q + 1, p + 1)``).

    Parameters
    ----------
    affine : (q+1, p+1) ndarray-like
       Transformation affine from ``p`` inputs to ``q`` outputs.
    tol : {None, float}, optional
       threshold below which SVD values of the affine are considered zero. If
       `tol` is None, and ``S`` is an array with singular values for `affine`,
       and ``eps`` is the epsilon value for datatype of ``S``, then `tol` set
       to ``S.max() * max((q, p)) * eps``

    Returns
    -------
    orientations : (p, 2) ndarray
       one row per input axis, where the first value in each row is the closest
       corresponding output axis. The second value in each row is 1 if the
       input axis is in the same direction as the corresponding output axis and
       -1 if it is in the opposite direction.  If a row is [np.nan, np.nan],
       which can happen when p > q, then this row should be considered dropped.

    Examples
    --------
    >>> io_orientation(np.diag([-2, 3, 4, 1]))
    array([[ 0., -1.],
           [ 1.,  1.],
           [ 2.,  1.]])
    """
    affine = np.asarray(affine)
    q, p = affine.shape[0] - 1, affine.shape[1] - 1
    # extract the underlying rotation, zoom, shear matrix
    RZS = affine[:q, :p]
    zooms = np.sqrt(np.sum(RZS * RZS, axis=0))
    # Zero zooms have all-zero columns, which we leave as they are
    zooms[zooms == 0] = 1
    RS = RZS / zooms
    # Polar decomposition, giving the closest shearless matrix R to RS
    P, S, Qs = npl.svd(RS, full_matrices=False)
    if tol is None:
        tol = S.max() * max(RS.shape) * np.finfo(S.dtype).eps
    keep = S > tol
    R = np.dot(P[:, keep], Qs[keep])
    # The row index of abs max R[:, N] is the output axis changing most as
    # input axis N changes.  Ties go to the lower output axis; used output
    # axes drop out of consideration for later input axes.
    ornt = np.ones((p, 2), dtype=np.int8) * np.nan
    for in_ax in range(p):
        col = R[:, in_ax]
        if not np.allclose(col, 0):
            out_ax = np.argmax(np.abs(col))
            ornt[in_ax, 0] = out_ax
            assert col[out_ax] != 0
            if col[out_ax] < 0:
                ornt[in_ax, 1] = -1
            else:
                ornt[in_ax, 1] = 1
            R[out_ax, :] = 0
    return ornt


def ornt2axcodes(ornt, labels=None):
    """Convert orientation `ornt` to labels for axis directions

    Parameters
    ----------
    ornt : (N,2) array-like
        orientation array - see io_orientation docstring
    labels : optional, None or sequence of (2,) sequences
        (2,) sequences are labels for (beginning, end) of output axis.
        If None, equivalent to ``(('L','R'),('P','A'),('I','S'))`` - that is -
        RAS axes.

    Returns
    -------
    axcodes : (N,) tuple
        labels for positive end of voxel axes.  Dropped axes get a label of
        None.

    Examples
    --------
    >>> ornt2axcodes([[1, 1],[0,-1],[2,1]], (('L','R'),('B','F'),('D','U')))
    ('F', 'L', 'U')
    """
    if labels is None:
        labels = _RAS_LABELS
    axcodes = []
    for axno, direction in np.asarray(ornt):
        if np.isnan(axno):
            axcodes.append(None)
            continue
        axint = int(np.round(axno))
        if axint != axno:
            raise ValueError(f'Non integer axis number {axno:f}')
        elif direction == 1:
            axcode = labels[axint][1]
        elif direction == -1:
            axcode = labels[axint][0]
        else:
            raise ValueError('Direction should be -1 or 1')
        axcodes.append(axcode)
    return tuple(axcodes)


def axcodes2ornt(axcodes, labels=None):
    """Convert axis codes `axcodes` to an orientation

    Parameters
    ----------
    axcodes : (N,) tuple
        axis codes - see ornt2axcodes docstring
    labels : optional, None or sequence of (2,) sequences
        (2,) sequences are labels for (beginning, end) of output axis.
        If None, equivalent to ``(('L','R'),('P','A'),('I','S'))`` - that is -
        RAS axes.

    Returns
    -------
    ornt : (N,2) array-like
        orientation array - see io_orientation docstring

    Examples
    --------
    >>> axcodes2ornt(('F', 'L', 'U'), (('L','R'),('B','F'),('D','U')))
    array([[ 1.,  1.],
           [ 0., -1.],
           [ 2.,  1.]])
    """
    labels = _RAS_LABELS if labels is None else labels
    allowed_labels = sum(map(list, labels), [None])
    if len(allowed_labels) != len(set(allowed_labels)):
        raise ValueError(f'Duplicate labels in {allowed_labels}')
    if not set(axcodes).issubset(allowed_labels):
        raise ValueError(f'Not all axis codes {list(axcodes)} in label set {allowed_labels}')
    n_axes = len(axcodes)
    ornt = np.ones((n_axes, 2), dtype=np.int8) * np.nan
    for code_idx, code in enumerate(axcodes):
        for label_idx, codes in enumerate(labels):
            if code is None:
                continue
            if code in codes:
                if code == codes[0]:
                    ornt[code_idx, :] = [label_idx, -1]
                else:
                    ornt[code_idx, :] = [label_idx, 1]
                break
    return ornt


def aff2axcodes(aff, labels=None, tol=None):
    """Axis direction codes for affine `aff`

    >>> aff = [[0,1,0,10],[-1,0,0,20],[0,0,1,30],[0,0,0,1]]
    >>> aff2axcodes(aff, (('L','R'),('B','F'),('D','U')))
    ('B', 'R', 'U')
    """
    ornt = io_orientation(aff, tol)
    return ornt2axcodes(ornt, labels)


def pack_orientation(axcodes):
    """Pack three axis codes into one integer

    Each axis takes one byte holding its NIfTI orientation integer: primary
    axis in bits 0-7, secondary in bits 8-15, tertiary in bits 16-23.

    >>> hex(pack_orientation(('L', 'A', 'S')))
    '0x50302'
    """
    axcodes = tuple(axcodes)
    if len(axcodes) != 3:
        raise OrientationError(f'Need three axis codes, got {axcodes}')
    packed = 0
    for i, code in enumerate(axcodes):
        packed |= orientation_codes.code[code] << (i * ORIENTATION_FIELD_BITS)
    return packed


def unpack_orientation(packed):
    """Axis codes from integer made by :func:`pack_orientation`

    Fields with values outside the orientation integers give None.

    >>> unpack_orientation(0x50302)
    ('L', 'A', 'S')
    """
    mask = (1 << ORIENTATION_FIELD_BITS) - 1
    axcodes = []
    for i in range(3):
        code = (int(packed) >> (i * ORIENTATION_FIELD_BITS)) & mask
        axcodes.append(orientation_codes.axcode.get(code))
    return tuple(axcodes)


def _complete_axcodes(axcodes):
    """Replace unknown and clashing axis codes with unused RAS axes

    The first code on each anatomical axis wins; later codes on the same axis
    and unknown codes take the positive end of the first unused axis.
    """
    used = set()
    kept = []
    for code in axcodes:
        ornt = None
        if code is not None:
            try:
                ornt = axcodes2ornt((code,))[0]
            except ValueError:
                pass
        if ornt is None or int(ornt[0]) in used:
            kept.append(None)
            continue
        used.add(int(ornt[0]))
        kept.append(code)
    free = [ax for ax in range(3) if ax not in used]
    completed = tuple(
        code if code is not None else _RAS_LABELS[free.pop(0)][1] for code in kept)
    if completed != tuple(axcodes):
        logger.warning('axis codes %s are not a valid orientation; using %s',
                       tuple(axcodes), completed)
    return completed


def axcodes2direction(axcodes):
    """LPS direction cosines for voxel axes labeled with `axcodes`

    Each label gives the RAS unit vector of that axis end; the x and y
    components then flip into LPS space.  The vectors are the columns of the
    returned matrix.

    Malformed codes (unknown or sharing an anatomical axis) resolve to the
    positive end of the first free axis, with a logged warning.

    Parameters
    ----------
    axcodes : sequence of 3 {None, 'L', 'R', 'P', 'A', 'I', 'S'}

    Returns
    -------
    direction : (3, 3) array

    Examples
    --------
    >>> axcodes2direction(('L', 'A', 'S'))
    array([[ 1.,  0.,  0.],
           [ 0., -1.,  0.],
           [ 0.,  0.,  1.]])
    """
    axcodes = _complete_axcodes(axcodes)
    ornt = axcodes2ornt(axcodes)
    direction = np.zeros((3, 3))
    for in_ax, (out_ax, flip) in enumerate(ornt):
        out_ax = int(out_ax)
        direction[out_ax, in_ax] = flip * _LPS_FLIP[out_ax]
    return direction


def direction2axcodes(direction, tol=None):
    """Nearest axis codes for LPS direction cosines `direction`

    The inverse of :func:`axcodes2direction` for permutation matrices.  For
    oblique directions, each voxel axis takes the label of the world axis it
    is closest to, in voxel axis order, without reusing a world axis.

    >>> direction2axcodes([[0, 0, -1], [-1, 0, 0], [0, 1, 0]])
    ('A', 'S', 'R')
    """
    ras = np.asarray(direction, dtype=np.float64) * _LPS_FLIP[:, None]
    return aff2axcodes(from_matvec(ras), tol=tol)


def resolve_orientation(header):
    """Direction cosines, origin and rescaling for a raw header

    Parameters
    ----------
    header : :class:`niftigeom.rawheader.RawHeader`
        or any object with the same transform, orientation and scaling
        attributes.

    Returns
    -------
    resolved : ResolvedOrientation
        ``direction`` (3, 3) LPS direction cosines, ``origin`` (3,) LPS
        position of the first voxel, ``slope`` and ``intercept`` to apply to
        stored values, and the ``axcodes`` the direction came from.

    Notes
    -----
    When both the qform and sform codes are 0, the header only has the legacy
    Analyze orientation byte.  The origin is then zero and the scaling is the
    identity.  Otherwise the qform (if its code is non-zero) or the sform
    gives the transform, whose rotation snaps to the nearest axis
    permutation.

    Examples
    --------
    >>> from niftigeom.rawheader import RawHeader
    >>> hdr = RawHeader((10, 10, 10))
    >>> hdr.analyze_orient = 0
    >>> res = resolve_orientation(hdr)
    >>> res.axcodes
    ('L', 'A', 'S')
    """
    qform_code = int(header.qform_code)
    sform_code = int(header.sform_code)
    if qform_code == 0 and sform_code == 0:
        orient = header.analyze_orient
        try:
            axcodes = LEGACY_AXCODES[orient]
        except KeyError:
            axcodes = DEFAULT_LEGACY_AXCODES
            if orient not in analyze_orient_codes:
                logger.debug('legacy orientation %s not recognized; using %s',
                             orient, axcodes)
        return ResolvedOrientation(axcodes2direction(axcodes), np.zeros(3), 1.0, 0.0, axcodes)
    affine = header.qform if qform_code > 0 else header.sform
    axcodes = _complete_axcodes(aff2axcodes(affine))
    direction = axcodes2direction(axcodes)
    _, trans = to_matvec(np.asarray(affine, dtype=np.float64))
    origin = trans * _LPS_FLIP
    slope, inter = _scaling(header.scl_slope, header.scl_inter)
    return ResolvedOrientation(direction, origin, slope, inter, axcodes)


def _scaling(slope, inter):
    slope = float(slope)
    inter = float(inter)
    if slope == 0 or not np.isfinite(slope):
        slope = 1.0
    if not np.isfinite(inter):
        logger.warning('rescale intercept %s is not finite; using 0', inter)
        inter = 0.0
    return slope, inter
