# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Build header transforms from direction cosines, origin and spacing

This is the inverse of :func:`niftigeom.orientations.resolve_orientation`.
The direction cosines are in LPS space; the header transforms are in RAS
space, so the x and y components change sign.  The axis vectors are made
orthogonal before use because the qform can only hold a rotation.

For a geometry whose direction is a signed permutation matrix, resolving the
synthesized header gives back the same direction, origin and spacing.
Oblique directions resolve to the nearest permutation.
"""

import numpy as np

from .affines import from_matvec, invert_affine, is_orthonormal, orthogonalize
from .imageglobals import logger
from .quaternions import mat2quat
from .rawheader import RawHeader
from .units import pack_xyzt_units

_LPS_FLIP = np.array([-1.0, -1.0, 1.0])

#: transform code marking synthesized transforms (scanner anatomical)
SYNTHESIZED_XFORM_CODE = 1


def synthesize_rotation(direction, rank=3):
    """Orthogonal RAS rotation matrix for LPS `direction` cosines

    Parameters
    ----------
    direction : (3, 3) array-like
        columns are the LPS unit vectors of the voxel axes
    rank : int, optional
        image rank.  For rank below 3 the third column of `direction` is
        ignored, and the third axis is the cross product of the first two.

    Returns
    -------
    R : (3, 3) array
        orthogonal matrix with the RAS axis vectors as columns

    Raises
    ------
    DegenerateGeometryError
        if the axis vectors cannot give a rotation

    Examples
    --------
    >>> R = synthesize_rotation(np.eye(3))
    >>> np.allclose(R, np.diag([-1, -1, 1]))
    True
    """
    direction = np.asarray(direction, dtype=np.float64)
    # axis vectors as rows
    vectors = np.zeros((3, 3))
    vectors[0] = direction[:, 0]
    vectors[1] = direction[:, 1]
    if rank > 2:
        vectors[2] = direction[:, 2]
    vectors *= _LPS_FLIP
    return orthogonalize(vectors).T


def synthesize_transforms(geometry):
    """Header transforms for `geometry`

    Parameters
    ----------
    geometry : :class:`niftigeom.geometry.CanonicalGeometry`

    Returns
    -------
    transforms : dict
        with keys:

        * ``qform`` - (4, 4) rotation and offset
        * ``sform`` - (4, 4) rotation scaled by spacing, and offset
        * ``qform_inverse``, ``sform_inverse`` - their inverses
        * ``quaternion`` - ``(b, c, d)``
        * ``qoffset`` - ``(x, y, z)``
        * ``qfac`` - 1 or -1

    Raises
    ------
    DegenerateGeometryError
        if the direction cosines give a singular transform
    """
    n_axes = 3 if geometry.rank > 2 else 2
    if not is_orthonormal(geometry.direction[:, :n_axes]):
        logger.warning('direction cosines %s are not orthonormal; using the '
                       'nearest orthogonal matrix', geometry.direction.tolist())
    R = synthesize_rotation(geometry.direction, geometry.rank)
    origin = np.zeros(3)
    origin[:len(geometry.origin)] = geometry.origin
    qoffset = origin * _LPS_FLIP
    qform = from_matvec(R, qoffset)
    zooms = np.ones(3)
    n_spatial = min(geometry.rank, 3)
    zooms[:n_spatial] = geometry.spacing[:n_spatial]
    sform = from_matvec(R * zooms, qoffset)
    # quaternion of the proper rotation; qfac records the reflection
    qfac = -1.0 if np.linalg.det(R) < 0 else 1.0
    proper = R.copy()
    proper[:, 2] *= qfac
    quaternion = mat2quat(proper)
    return {
        'qform': qform,
        'sform': sform,
        'qform_inverse': invert_affine(qform),
        'sform_inverse': invert_affine(sform),
        'quaternion': tuple(float(v) for v in quaternion[1:]),
        'qoffset': tuple(float(v) for v in qoffset),
        'qfac': qfac,
    }


def synthesize_header(geometry, header=None):
    """Fill header transforms, sizes and units from `geometry`

    Parameters
    ----------
    geometry : :class:`niftigeom.geometry.CanonicalGeometry`
    header : None or :class:`niftigeom.rawheader.RawHeader`, optional
        header to fill; None gives a new header.  The header changes only if
        synthesis succeeds.

    Returns
    -------
    header : :class:`niftigeom.rawheader.RawHeader`

    Examples
    --------
    >>> from niftigeom.geometry import CanonicalGeometry
    >>> geom = CanonicalGeometry((4, 5, 6), spacing=(2, 2, 3), origin=(10, 20, 30))
    >>> hdr = synthesize_header(geom)
    >>> hdr.qform_code, hdr.sform_code
    (1, 1)
    >>> hdr.get_qoffset()
    (-10.0, -20.0, 30.0)
    """
    transforms = synthesize_transforms(geometry)
    out = RawHeader(geometry.dimensions, pixdim=geometry.spacing)
    out.pixdim[0] = transforms['qfac']
    out.qform = transforms['qform']
    out.sform = transforms['sform']
    out.qform_code = SYNTHESIZED_XFORM_CODE
    out.sform_code = SYNTHESIZED_XFORM_CODE
    out.xyzt_units = pack_xyzt_units('mm', 'sec')
    out.scl_slope = 1.0
    out.scl_inter = 0.0
    out.descrip = str(geometry.metadata.get('file_notes', ''))
    if header is None:
        return out
    # Keep datatype, which the classifier sets separately
    out.datatype = header.datatype
    out.bitpix = header.bitpix
    out.data = header.data
    header.update_from(out)
    return header
