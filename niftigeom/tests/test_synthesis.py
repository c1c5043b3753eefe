# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Tests for building header transforms from direction cosines"""

import logging

import numpy as np
import pytest
from numpy.testing import assert_array_almost_equal, assert_array_equal

from ..affines import DegenerateGeometryError
from ..geometry import CanonicalGeometry
from ..orientations import axcodes2direction, resolve_orientation
from ..rawheader import RawHeader
from ..synthesis import (
    SYNTHESIZED_XFORM_CODE,
    synthesize_header,
    synthesize_rotation,
    synthesize_transforms,
)
from ..units import get_xyzt_units
from .test_orientations import ALL_AXCODES

DIMS = (4, 5, 6, 7)
SPACING = (1.5, 2.0, 2.5, 3.0)
ORIGIN = (10.0, -20.0, 30.0)


def _rot_z(angle):
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]])


def _geometry(direction, rank=3, **kwargs):
    return CanonicalGeometry(DIMS[:rank],
                             spacing=SPACING[:rank],
                             direction=direction,
                             origin=ORIGIN[:min(rank, 3)],
                             **kwargs)


def test_synthesize_rotation():
    # LPS identity is RAS flip of x and y
    assert_array_almost_equal(synthesize_rotation(np.eye(3)), np.diag([-1, -1, 1]))
    # Improper directions stay improper
    R = synthesize_rotation(np.diag([1, 1, -1]))
    assert_array_almost_equal(R, np.diag([-1, -1, -1]))
    # For rank 2, third column ignored, completed as cross product
    R = synthesize_rotation(np.diag([1, 1, -1]), rank=2)
    assert_array_almost_equal(R, np.diag([-1, -1, 1]))
    R = synthesize_rotation(np.zeros((3, 3)) + np.eye(3) * [1, 1, 0], rank=2)
    assert_array_almost_equal(R, np.diag([-1, -1, 1]))
    # Columns are unit length whatever the input scaling
    R = synthesize_rotation(np.diag([2, 3, 4]))
    assert_array_almost_equal(R, np.diag([-1, -1, 1]))


@pytest.mark.parametrize('rank', [2, 3, 4])
@pytest.mark.parametrize('axcodes', ALL_AXCODES)
def test_permutation_round_trip(axcodes, rank):
    direction = axcodes2direction(axcodes)
    geom = _geometry(direction, rank)
    hdr = synthesize_header(geom)
    assert hdr.get_data_shape() == DIMS[:rank]
    assert_array_almost_equal(hdr.get_zooms(), SPACING[:rank])
    res = resolve_orientation(hdr)
    n_origin = min(rank, 3)
    assert_array_almost_equal(res.origin[:n_origin], ORIGIN[:n_origin], 6)
    if rank > 2:
        assert_array_almost_equal(res.direction, direction, 6)
        return
    # Rank 2 keeps the first two axes; the third is their cross product
    assert_array_almost_equal(res.direction[:, :2], direction[:, :2], 6)
    assert_array_almost_equal(res.direction[:, 2],
                              np.cross(direction[:, 0], direction[:, 1]), 6)
    assert res.origin[2] == 0


def test_transforms_identity():
    geom = CanonicalGeometry((4, 5, 6), spacing=(2, 3, 4), origin=ORIGIN)
    xforms = synthesize_transforms(geom)
    exp_qform = np.array([[-1, 0, 0, -10],
                          [0, -1, 0, 20],
                          [0, 0, 1, 30],
                          [0, 0, 0, 1]])
    assert_array_almost_equal(xforms['qform'], exp_qform)
    exp_sform = exp_qform * [2, 3, 4, 1]
    assert_array_almost_equal(xforms['sform'], exp_sform)
    assert xforms['qoffset'] == (-10.0, 20.0, 30.0)
    assert xforms['qfac'] == 1
    # 180 degrees around z
    assert_array_almost_equal(np.abs(xforms['quaternion']), [0, 0, 1])
    assert_array_almost_equal(xforms['qform_inverse'] @ xforms['qform'], np.eye(4))
    assert_array_almost_equal(xforms['sform_inverse'] @ xforms['sform'], np.eye(4))


def test_transforms_improper():
    # Flipping the LPS x axis gives a left-handed RAS rotation
    geom = CanonicalGeometry((4, 5, 6), direction=np.diag([-1, 1, 1]))
    xforms = synthesize_transforms(geom)
    assert xforms['qfac'] == -1
    assert_array_almost_equal(xforms['qform'][:3, :3], np.diag([1, -1, 1]))
    # quaternion is of the proper rotation with the third column negated
    assert_array_almost_equal(np.abs(xforms['quaternion']), [1, 0, 0])
    hdr = synthesize_header(geom)
    assert hdr.pixdim[0] == -1
    assert hdr.get_qfac() == -1
    assert_array_almost_equal(np.abs(hdr.get_qform_quaternion()), [1, 0, 0])


def test_header_fields():
    geom = _geometry(np.eye(3), rank=4, metadata={'file_notes': 'synthetic'})
    hdr = synthesize_header(geom)
    assert hdr.qform_code == SYNTHESIZED_XFORM_CODE == 1
    assert hdr.sform_code == 1
    assert get_xyzt_units(hdr.xyzt_units) == ('mm', 'sec')
    assert (hdr.scl_slope, hdr.scl_inter) == (1.0, 0.0)
    assert hdr.descrip == 'synthetic'
    assert hdr.get_qoffset() == (-10.0, 20.0, 30.0)
    # spacing goes into the sform, not the qform
    assert_array_almost_equal(np.diag(hdr.sform)[:3], [-1.5, -2.0, 2.5])
    assert_array_almost_equal(np.diag(hdr.qform)[:3], [-1, -1, 1])
    assert_array_almost_equal(hdr.get_scaled_qform(), hdr.sform)
    assert_array_almost_equal(hdr.get_qform_inverse() @ hdr.qform, np.eye(4))
    assert_array_almost_equal(hdr.get_sform_inverse() @ hdr.sform, np.eye(4))


def test_rank_one():
    geom = CanonicalGeometry((10,), spacing=(2.5,), origin=(5,))
    hdr = synthesize_header(geom)
    assert hdr.get_data_shape() == (10,)
    assert hdr.get_zooms() == (2.5,)
    assert hdr.get_qoffset() == (-5.0, 0.0, 0.0)
    # Only the first axis has spacing in the sform
    assert_array_almost_equal(np.diag(hdr.sform), [-2.5, -1, 1, 1])


def test_oblique_snaps():
    # 10 degree rotation keeps origin, snaps direction
    direction = _rot_z(np.deg2rad(10))
    geom = _geometry(direction)
    hdr = synthesize_header(geom)
    # The transforms hold the oblique rotation
    assert_array_almost_equal(hdr.qform[:3, :3], np.diag([-1, -1, 1]) @ direction)
    res = resolve_orientation(hdr)
    assert_array_equal(res.direction, np.eye(3))
    assert_array_almost_equal(res.origin, ORIGIN)


@pytest.mark.parametrize('direction', [
    np.zeros((3, 3)),
    np.array([[0, 1, 0], [0, 0, 0], [0, 0, 1]]),  # zero first column
    np.array([[1, 0, 0], [0, 0, 0], [0, 0, 1]]),  # zero second column
    np.array([[1, 1, 0], [0, 0, 0], [0, 0, 1]]),  # parallel first two
    np.array([[1, 0, 1], [0, 1, 0], [0, 0, 0]]),  # third parallel to first
    np.array([[np.nan, 0, 0], [0, 1, 0], [0, 0, 1]]),
])
def test_degenerate_direction(direction):
    geom = CanonicalGeometry((2, 3, 4), direction=direction)
    with pytest.raises(DegenerateGeometryError):
        synthesize_header(geom)
    # A header to fill is left alone
    hdr = RawHeader((9, 9), pixdim=(7, 7), descrip='keep')
    orig = hdr.copy()
    with pytest.raises(DegenerateGeometryError):
        synthesize_header(geom, hdr)
    assert hdr == orig


def test_rank2_parallel_axes():
    geom = CanonicalGeometry((2, 3), direction=[[1, 1, 0], [0, 0, 0], [0, 0, 1]])
    with pytest.raises(DegenerateGeometryError):
        synthesize_header(geom)


def test_non_orthonormal_warns(caplog):
    direction = np.eye(3)
    direction[0, 1] = 0.05
    geom = _geometry(direction)
    with caplog.at_level(logging.WARNING, logger='niftigeom.global'):
        hdr = synthesize_header(geom)
    assert 'not orthonormal' in caplog.text
    # nearest orthogonal matrix still resolves to identity
    assert_array_equal(resolve_orientation(hdr).direction, np.eye(3))
    caplog.clear()
    with caplog.at_level(logging.WARNING, logger='niftigeom.global'):
        synthesize_header(_geometry(np.eye(3)))
    assert caplog.text == ''


def test_fill_header():
    hdr = RawHeader((2, 2), datatype=4, bitpix=16)
    hdr.data = np.zeros((2, 2), dtype=np.int16)
    geom = _geometry(np.eye(3))
    out = synthesize_header(geom, hdr)
    assert out is hdr
    assert hdr.get_data_shape() == DIMS[:3]
    assert (hdr.datatype, hdr.bitpix) == (4, 16)
    assert_array_equal(hdr.data, np.zeros((2, 2)))
    assert hdr.qform_code == 1
