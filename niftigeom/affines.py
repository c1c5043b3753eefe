# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Utility routines for working with points and affine transforms"""

import numpy as np
import numpy.linalg as npl


class AffineError(ValueError):
    """Errors in calculating or using affines"""


class DegenerateGeometryError(AffineError):
    """Transform cannot be inverted, so cannot describe image space"""


def to_matvec(transform):
    """Split homogeneous `transform` into matrix and vector components

    >>> aff = np.diag([2, 3, 4, 1])
    >>> aff[:3,3] = [9, 10, 11]
    >>> to_matvec(aff)
    (array([[2, 0, 0],
           [0, 3, 0],
           [0, 0, 4]]), array([ 9, 10, 11]))
    """
    transform = np.asarray(transform)
    ndimin = transform.shape[0] - 1
    ndimout = transform.shape[1] - 1
    matrix = transform[0:ndimin, 0:ndimout]
    vector = transform[0:ndimin, ndimout]
    return matrix, vector


def from_matvec(matrix, vector=None):
    """Combine `matrix` and translation `vector` into homogeneous affine

    Parameters
    ----------
    matrix : (N, M) array-like
        linear part of the transform
    vector : None or (N,) array-like, optional
        translation; None gives zeros

    Returns
    -------
    xform : (N+1, M+1) array

    Examples
    --------
    >>> from_matvec(np.diag([2, 3, 4]), [9, 10, 11])
    array([[ 2,  0,  0,  9],
           [ 0,  3,  0, 10],
           [ 0,  0,  4, 11],
           [ 0,  0,  0,  1]])
    """
    matrix = np.asarray(matrix)
    nin, nout = matrix.shape
    t = np.zeros((nin + 1, nout + 1), matrix.dtype)
    t[0:nin, 0:nout] = matrix
    t[nin, nout] = 1.0
    if vector is not None:
        t[0:nin, nout] = vector
    return t


def _rank_tol(S, shape):
    return S.max() * max(shape) * np.finfo(S.dtype).eps


def orthogonalize(vectors, tol=None):
    """Closest orthogonal matrix to the unit-normalized rows of `vectors`

    Parameters
    ----------
    vectors : (3, 3) array-like
        rows are the axis vectors.  The third row may be all zero, in which
        case it is completed as the cross product of the first two.
    tol : None or float, optional
        singular values at or below `tol` mean the axes do not span 3D space.
        None gives a tolerance from the largest singular value and float
        precision.

    Returns
    -------
    ortho : (3, 3) array
        orthogonal matrix, with the same handedness as the input rows, from
        the polar decomposition of the normalized input.

    Raises
    ------
    DegenerateGeometryError
        if the first two rows are zero or non-finite, or the rows do not span
        3D space.

    Examples
    --------
    >>> R = orthogonalize([[2, 0, 0], [0.01, 1, 0], [0, 0, 0]])
    >>> np.allclose(R, [[1, -0.005, 0], [0.005, 1, 0], [0, 0, 1]], atol=1e-4)
    True
    """
    M = np.array(vectors, dtype=np.float64)
    if M.shape != (3, 3):
        raise AffineError(f'Need 3x3 matrix of axis vectors, got shape {M.shape}')
    if not np.all(np.isfinite(M)):
        raise DegenerateGeometryError('Axis vectors contain non-finite values')
    norms = np.sqrt(np.sum(M * M, axis=1))
    if np.any(norms[:2] == 0):
        raise DegenerateGeometryError('First two axis vectors must be non-zero')
    M[:2] /= norms[:2, None]
    if np.isclose(norms[2], 0):
        M[2] = np.cross(M[0], M[1])
        norms[2] = np.sqrt(M[2] @ M[2])
        if norms[2] == 0:
            raise DegenerateGeometryError('First two axis vectors are parallel')
    M[2] /= norms[2]
    # Polar decomposition: P @ Qs is the orthogonal factor of M
    P, S, Qs = npl.svd(M)
    if tol is None:
        tol = _rank_tol(S, M.shape)
    if S.min() <= tol:
        raise DegenerateGeometryError(f'Axis vectors do not span 3D space (singular values {S})')
    return P @ Qs


def invert_affine(affine):
    """Inverse of homogeneous `affine`

    Raises
    ------
    DegenerateGeometryError
        if the linear part of `affine` is singular to float precision.

    Examples
    --------
    >>> inv = invert_affine(np.diag([2., 4., 1., 1.]))
    >>> np.allclose(np.diag(inv), [0.5, 0.25, 1, 1])
    True
    """
    affine = np.asarray(affine, dtype=np.float64)
    rzs = affine[:-1, :-1]
    if not np.all(np.isfinite(affine)):
        raise DegenerateGeometryError('Affine contains non-finite values')
    S = npl.svd(rzs, compute_uv=False)
    if S.max() == 0 or S.min() <= _rank_tol(S, rzs.shape):
        raise DegenerateGeometryError(f'Affine is singular (singular values {S})')
    return npl.inv(affine)


def is_orthonormal(matrix, atol=1e-6):
    """True if `matrix` columns are unit length and mutually perpendicular

    >>> is_orthonormal(np.diag([1, -1, 1]))
    True
    >>> is_orthonormal([[1, 1, 0], [0, 1, 0], [0, 0, 1]])
    False
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if not np.all(np.isfinite(matrix)):
        return False
    return np.allclose(matrix.T @ matrix, np.eye(matrix.shape[1]), atol=atol)
