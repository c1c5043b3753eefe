# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Quaternions for the NIfTI qform

Quaternions here are 4-element sequences ``w, x, y, z``.  The NIfTI header
stores only ``x, y, z`` (as ``quatern_b, quatern_c, quatern_d``) of a unit
quaternion with ``w >= 0``; :func:`fillpositive` recovers ``w``.

The rotation matrices act on column vectors on the right: ``M @ v``.
"""

import numpy as np

MAX_FLOAT = np.longdouble
FLOAT_EPS = np.finfo(float).eps


def fillpositive(xyz, w2_thresh=None):
    """Compute unit quaternion from last 3 values

    Parameters
    ----------
    xyz : iterable
       iterable containing 3 values, corresponding to quaternion x, y, z
    w2_thresh : float, optional
       threshold to determine if w squared is non-zero.  If None (default)
       then w2_thresh set equal to 3 * ``np.finfo(xyz.dtype).eps``, if
       possible, otherwise 3 * ``np.finfo(np.float64).eps``

    Returns
    -------
    wxyz : array shape (4,)
         Full 4 values of quaternion

    Notes
    -----
    ``w**2 = 1 - (x**2 + y**2 + z**2)``.  Values of ``w**2`` within
    `w2_thresh` of 0 come from a rounded unit vector and give ``w = 0``;
    more negative values cannot be part of a unit quaternion and raise.

    Examples
    --------
    >>> wxyz = fillpositive([0, 0, 0])
    >>> np.all(wxyz == [1, 0, 0, 0])
    True
    >>> wxyz = fillpositive([1, 0, 0])  # Corner case; w is 0
    >>> np.all(wxyz == [0, 1, 0, 0])
    True
    """
    if len(xyz) != 3:
        raise ValueError('xyz should have length 3')
    if w2_thresh is None:
        try:  # trap errors for non-array, integer array
            w2_thresh = np.finfo(xyz.dtype).eps * 3
        except (AttributeError, ValueError):
            w2_thresh = FLOAT_EPS * 3
    xyz = np.asarray(xyz, dtype=MAX_FLOAT)
    w2 = 1.0 - xyz @ xyz
    if np.abs(w2) < np.abs(w2_thresh):
        w = 0
    elif w2 < 0:
        raise ValueError(f'w2 should be positive, but is {w2:e}')
    else:
        w = np.sqrt(w2)
    return np.r_[w, xyz]


def quat2mat(q):
    """Rotation matrix for quaternion `q`

    Parameters
    ----------
    q : 4 element array-like
       ``w, x, y, z``; need not be unit length.

    Returns
    -------
    M : (3,3) array
      Rotation matrix.  Identity for a quaternion of (near) zero length.

    Examples
    --------
    >>> M = quat2mat([0, 1, 0, 0])  # 180 degrees around x axis
    >>> np.allclose(M, np.diag([1, -1, -1]))
    True
    """
    w, x, y, z = q
    Nq = w * w + x * x + y * y + z * z
    if Nq < FLOAT_EPS:
        return np.eye(3)
    s = 2.0 / Nq
    X = x * s
    Y = y * s
    Z = z * s
    wX = w * X
    wY = w * Y
    wZ = w * Z
    xX = x * X
    xY = x * Y
    xZ = x * Z
    yY = y * Y
    yZ = y * Z
    zZ = z * Z
    return np.array(
        [
            [1.0 - (yY + zZ), xY - wZ, xZ + wY],
            [xY + wZ, 1.0 - (xX + zZ), yZ - wX],
            [xZ - wY, yZ + wX, 1.0 - (xX + yY)],
        ]
    )


def mat2quat(M):
    """Unit quaternion, with ``w >= 0``, for rotation matrix `M`

    Uses the eigenvector method of Bar-Itzhack, which finds the quaternion
    of the nearest rotation when `M` is not quite orthogonal.

    Bar-Itzhack, Itzhack Y. "New method for extracting the quaternion from a
    rotation matrix", AIAA Journal of Guidance, Control and Dynamics
    23(6):1085-1087, 2000

    Parameters
    ----------
    M : array-like
      3x3 rotation matrix

    Returns
    -------
    q : (4,) array
      ``w, x, y, z``

    Examples
    --------
    >>> q = mat2quat(np.eye(3))  # Identity rotation
    >>> np.allclose(q, [1, 0, 0, 0])
    True
    >>> q = mat2quat(np.diag([1, -1, -1]))
    >>> np.allclose(q, [0, 1, 0, 0])  # 180 degree rotn around axis 0
    True
    """
    # Qyx refers to the contribution of the y input vector component to
    # the x output vector component.
    Qxx, Qyx, Qzx, Qxy, Qyy, Qzy, Qxz, Qyz, Qzz = np.asarray(M).flat
    K = (
        np.array(
            [
                [Qxx - Qyy - Qzz, 0, 0, 0],
                [Qyx + Qxy, Qyy - Qxx - Qzz, 0, 0],
                [Qzx + Qxz, Qzy + Qyz, Qzz - Qxx - Qyy, 0],
                [Qyz - Qzy, Qzx - Qxz, Qxy - Qyx, Qxx + Qyy + Qzz],
            ]
        )
        / 3.0
    )
    # Use Hermitian eigenvectors, values for speed
    vals, vecs = np.linalg.eigh(K)
    # Select largest eigenvector, reorder to w,x,y,z quaternion
    q = vecs[[3, 0, 1, 2], np.argmax(vals)]
    if q[0] < 0:
        q *= -1
    return q


def isunit(q):
    """Return True if `q` is unit length within float tolerance"""
    return np.allclose(np.sqrt(np.dot(q, q)), 1)


def nearly_equivalent(q1, q2, rtol=1e-5, atol=1e-8):
    """Return True if `q1` and `q2` give near equivalent rotations

    ``q`` and ``-q`` describe the same rotation.

    >>> nearly_equivalent([0, 1, 0, 0], [0, -1, 0, 0])
    True
    """
    q1 = np.array(q1)
    q2 = np.array(q2)
    if np.allclose(q1, q2, rtol, atol):
        return True
    return np.allclose(q1 * -1, q2, rtol, atol)
