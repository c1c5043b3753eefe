# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##

import numpy as np
import pytest
from numpy.testing import assert_array_almost_equal, assert_array_equal

from ..affines import (
    AffineError,
    DegenerateGeometryError,
    from_matvec,
    invert_affine,
    is_orthonormal,
    orthogonalize,
    to_matvec,
)


def test_matrix_vector():
    for M, N in ((4, 4), (5, 4), (4, 5)):
        xform = np.zeros((M, N))
        xform[:-1, :] = np.random.normal(size=(M - 1, N))
        xform[-1, -1] = 1
        newmat, newvec = to_matvec(xform)
        mat = xform[:-1, :-1]
        vec = xform[:-1, -1]
        assert_array_equal(newmat, mat)
        assert_array_equal(newvec, vec)
        assert newvec.shape == (M - 1,)
        assert_array_equal(from_matvec(mat, vec), xform)
        # Default translation is zero
        no_trans = xform.copy()
        no_trans[:-1, -1] = 0
        assert_array_equal(from_matvec(mat), no_trans)
        assert_array_equal(from_matvec(mat, None), no_trans)
    # Check array-like works
    newmat, newvec = to_matvec(xform.tolist())
    assert_array_equal(newmat, mat)
    assert_array_equal(newvec, vec)
    assert_array_equal(from_matvec(mat.tolist(), vec.tolist()), xform)


def test_errors():
    assert issubclass(DegenerateGeometryError, AffineError)
    assert issubclass(AffineError, ValueError)


def test_orthogonalize():
    # Orthonormal rows come back as they are
    for vecs in (np.eye(3), np.diag([-1, -1, 1]), np.diag([1, 1, -1]), np.eye(3)[[2, 0, 1]]):
        assert_array_almost_equal(orthogonalize(vecs), vecs)
    # Row lengths do not matter
    assert_array_almost_equal(orthogonalize(np.diag([2, 0.5, 7])), np.eye(3))
    # Nearly orthogonal rows give the nearest orthogonal matrix
    vecs = np.array([[1, 0.01, 0], [0, 1, 0.02], [0, 0, 1]])
    R = orthogonalize(vecs)
    assert_array_almost_equal(R @ R.T, np.eye(3))
    assert np.linalg.det(R) > 0
    assert np.max(np.abs(R - vecs)) < 0.02
    # Handedness is kept
    vecs[2] *= -1
    R = orthogonalize(vecs)
    assert_array_almost_equal(R @ R.T, np.eye(3))
    assert np.linalg.det(R) < 0


def test_orthogonalize_third_axis():
    # Zero third row is filled from the first two
    assert_array_almost_equal(orthogonalize([[1, 0, 0], [0, 1, 0], [0, 0, 0]]), np.eye(3))
    assert_array_almost_equal(
        orthogonalize([[0, -3, 0], [1, 0, 0], [0, 0, 0]]), [[0, -1, 0], [1, 0, 0], [0, 0, 1]]
    )


@pytest.mark.parametrize(
    'vecs',
    [
        [[0, 0, 0], [0, 1, 0], [0, 0, 1]],
        [[1, 0, 0], [0, 0, 0], [0, 0, 1]],
        # parallel first two axes
        [[1, 0, 0], [2, 0, 0], [0, 0, 0]],
        # three axes in a plane
        [[1, 0, 0], [0, 1, 0], [1, 1, 0]],
        [[np.nan, 0, 0], [0, 1, 0], [0, 0, 1]],
        [[1, 0, 0], [0, 1, 0], [0, 0, np.inf]],
    ],
)
def test_orthogonalize_degenerate(vecs):
    with pytest.raises(DegenerateGeometryError):
        orthogonalize(vecs)


def test_orthogonalize_shape():
    with pytest.raises(AffineError):
        orthogonalize(np.eye(4))


def test_invert_affine():
    aff = from_matvec(np.diag([2, 4, 5]), [10, 20, 30])
    inv = invert_affine(aff)
    assert_array_almost_equal(inv @ aff, np.eye(4))
    assert_array_almost_equal(inv @ [10, 20, 30, 1], [0, 0, 0, 1])
    for bad in (np.diag([1, 0, 1, 1]), np.zeros((4, 4)), np.diag([1, np.nan, 1, 1])):
        with pytest.raises(DegenerateGeometryError):
            invert_affine(bad)


def test_is_orthonormal():
    assert is_orthonormal(np.eye(3))
    assert is_orthonormal(np.eye(3)[[1, 2, 0]] * [1, -1, 1])
    assert not is_orthonormal(np.diag([2, 1, 1]))
    assert not is_orthonormal(np.zeros((3, 3)))
    assert not is_orthonormal(np.diag([1, np.nan, 1]))
    # Only the given columns are checked
    assert is_orthonormal(np.eye(3)[:, :2])
    assert is_orthonormal(np.eye(3) + 1e-8)
    assert not is_orthonormal(np.eye(3) + 1e-8, atol=1e-10)
