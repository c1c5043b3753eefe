# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Tests for reading and writing image geometry"""

from unittest import mock

import numpy as np
import pytest
from numpy.testing import assert_array_almost_equal, assert_array_equal

from ..affines import DegenerateGeometryError
from ..datatypes import UnsupportedComponentTypeError, UnsupportedPixelLayoutError
from ..filename_parser import InvalidFilenameError
from ..geometry import CanonicalGeometry
from ..geometryio import (
    INPUT_FILTER_NAME,
    READ_STATES,
    WRITE_STATES,
    NiftiGeometryIO,
    load,
    save,
)
from ..loadsave import HeaderReadFailure, read_header, write_image
from ..orientations import axcodes2direction
from ..rawheader import RawHeader
from ..units import pack_xyzt_units

SHAPE = (3, 4, 5)


class RecordingIO(NiftiGeometryIO):
    """Geometry IO keeping a record of its state changes"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.visited = []

    def _advance(self, state):
        super()._advance(state)
        self.visited.append(state)


def _geometry(**kwargs):
    params = dict(spacing=(1.5, 2.0, 2.5),
                  direction=axcodes2direction('ASL'),
                  origin=(10.0, -20.0, 30.0),
                  component_type='short')
    params.update(kwargs)
    return CanonicalGeometry(SHAPE, **params)


def _data(dtype=np.int16):
    return np.arange(np.prod(SHAPE)).reshape(SHAPE).astype(dtype)


def assert_geometry_matches(back, geom):
    assert back.dimensions == geom.dimensions
    assert_array_almost_equal(back.spacing, geom.spacing)
    assert_array_almost_equal(back.direction, geom.direction)
    assert_array_almost_equal(back.origin, geom.origin, 5)


def test_initial_state():
    gio = NiftiGeometryIO()
    assert gio.state == 'idle'
    assert READ_STATES[0] == WRITE_STATES[0] == 'idle'
    assert READ_STATES[-1] == WRITE_STATES[-1] == 'ready'


def test_read_state_sequence():
    raw = RawHeader(SHAPE)
    gio = RecordingIO(reader=mock.Mock(return_value=raw))
    gio.read_information('test.nii')
    assert gio.visited == list(READ_STATES[1:])
    assert gio.state == 'ready'
    # Each operation starts again from idle
    gio.visited = []
    gio.geometry_from_header(raw)
    assert gio.visited == list(READ_STATES[1:])


def test_write_state_sequence():
    gio = RecordingIO()
    gio.header_from_geometry(_geometry())
    assert gio.visited == list(WRITE_STATES[1:])
    assert gio.state == 'ready'


def test_legacy_transverse():
    # No transform codes; legacy orientation byte 0
    raw = RawHeader(SHAPE, pixdim=(2, 2, 4), analyze_orient=0, scl_slope=3, scl_inter=4)
    geom = NiftiGeometryIO().geometry_from_header(raw)
    assert_array_equal(geom.direction, np.diag([1, -1, 1]))
    assert_array_equal(geom.origin, [0, 0, 0])
    assert (geom.rescale_slope, geom.rescale_intercept) == (1.0, 0.0)
    assert_array_equal(geom.spacing, [2, 2, 4])
    assert geom.component_type == 'float'
    assert geom.pixel_layout == 'scalar'


def test_qform_and_sform():
    qform = np.eye(4)
    qform[:3, 3] = [-10, 20, 30]
    sform = np.diag([-2.0, -2, 2, 1])
    sform[:3, 3] = [-1, -2, -3]
    raw = RawHeader(SHAPE, qform_code=1, sform_code=2, qform=qform, sform=sform)
    gio = NiftiGeometryIO()
    # qform wins when its code is set
    geom = gio.geometry_from_header(raw)
    assert_array_equal(geom.direction, np.diag([-1, -1, 1]))
    assert_array_equal(geom.origin, [10, -20, 30])
    # otherwise the sform
    raw.qform_code = 0
    geom = gio.geometry_from_header(raw)
    assert_array_equal(geom.direction, np.eye(3))
    assert_array_equal(geom.origin, [1, 2, -3])


def test_metadata_and_units():
    raw = RawHeader(SHAPE + (6,), pixdim=(0.001, 0.002, 0.003, 500),
                    xyzt_units=pack_xyzt_units('meter', 'msec'),
                    datatype=4, bitpix=16, descrip='a note', scl_slope=2)
    raw.qform_code = 1
    geom = NiftiGeometryIO().geometry_from_header(raw)
    assert geom.dimensions == SHAPE + (6,)
    assert_array_almost_equal(geom.spacing, [1, 2, 3, 0.5])
    assert geom.origin.shape == (3,)
    assert geom.metadata == {
        'input_filter_name': INPUT_FILTER_NAME,
        'file_notes': 'a note',
        'on_disk_storage_type': 'int16',
    }
    assert (geom.component_type, geom.pixel_layout, geom.n_components) == ('short', 'scalar', 1)
    assert geom.rescale_slope == 2.0
    # Unsupported datatypes classify as unknown
    raw.datatype = 1024
    geom = NiftiGeometryIO().geometry_from_header(raw)
    assert (geom.component_type, geom.pixel_layout) == ('unknown', 'scalar')
    assert 'on_disk_storage_type' not in geom.metadata
    # RGB
    raw.datatype = 128
    geom = NiftiGeometryIO().geometry_from_header(raw)
    assert (geom.component_type, geom.pixel_layout, geom.n_components) == ('uchar', 'rgb', 3)
    assert geom.metadata['on_disk_storage_type'] == 'RGB'


def test_low_rank_origin():
    raw = RawHeader((7, 8), qform_code=1)
    raw.qform[:3, 3] = [-5, -6, 0]
    geom = NiftiGeometryIO().geometry_from_header(raw)
    assert geom.rank == 2
    assert_array_equal(geom.origin, [5, 6])


@pytest.mark.parametrize('rank', [0, 8])
def test_bad_rank(rank):
    raw = RawHeader(SHAPE)
    raw.dim[0] = rank
    gio = NiftiGeometryIO()
    with pytest.raises(HeaderReadFailure):
        gio.geometry_from_header(raw)
    assert gio.state == 'idle'


def test_reader_failure_resets_state():
    reader = mock.Mock(side_effect=HeaderReadFailure('test.nii is not recognized'))
    gio = NiftiGeometryIO(reader=reader)
    gio.header_from_geometry(_geometry())
    assert gio.state == 'ready'
    with pytest.raises(HeaderReadFailure):
        gio.read_information('test.nii')
    assert gio.state == 'idle'
    with pytest.raises(HeaderReadFailure):
        gio.read('test.nii')
    assert gio.state == 'idle'


def test_read_information_no_data():
    raw = RawHeader(SHAPE)
    reader = mock.Mock(return_value=raw)
    NiftiGeometryIO(reader=reader).read_information('test.nii')
    reader.assert_called_once_with('test.nii')
    reader = mock.Mock(return_value=raw)
    raw.data = np.zeros(SHAPE, dtype=np.float32)
    NiftiGeometryIO(reader=reader).read('test.nii')
    reader.assert_called_once_with('test.nii', include_data=True)


def test_header_from_geometry():
    geom = _geometry(metadata={'file_notes': 'notes'})
    hdr = NiftiGeometryIO().header_from_geometry(geom)
    assert hdr.get_data_shape() == SHAPE
    assert (hdr.datatype, hdr.bitpix) == (4, 16)
    assert (hdr.qform_code, hdr.sform_code) == (1, 1)
    assert hdr.descrip == 'notes'
    # Back again
    back = NiftiGeometryIO().geometry_from_header(hdr)
    assert_geometry_matches(back, geom)
    assert back.component_type == 'short'


@pytest.mark.parametrize('component_type, pixel_layout, code, bitpix', [
    ('char', 'scalar', 256, 8),
    ('uchar', 'scalar', 2, 8),
    ('ushort', 'scalar', 512, 16),
    ('int', 'scalar', 8, 32),
    ('uint', 'scalar', 768, 32),
    ('long', 'scalar', 8, 32),
    ('ulong', 'scalar', 768, 32),
    ('float', 'scalar', 16, 32),
    ('double', 'scalar', 64, 64),
    ('uchar', 'rgb', 128, 24),
])
def test_header_datatype(component_type, pixel_layout, code, bitpix):
    geom = _geometry(component_type=component_type, pixel_layout=pixel_layout)
    hdr = NiftiGeometryIO().header_from_geometry(geom)
    assert (hdr.datatype, hdr.bitpix) == (code, bitpix)


def test_fill_header():
    hdr = RawHeader((2, 2), datatype=64, bitpix=64)
    hdr.data = np.ones((2, 2))
    gio = NiftiGeometryIO()
    out = gio.header_from_geometry(_geometry(), hdr)
    assert out is hdr
    assert hdr.get_data_shape() == SHAPE
    assert (hdr.datatype, hdr.bitpix) == (4, 16)
    assert_array_equal(hdr.data, np.ones((2, 2)))


@pytest.mark.parametrize('kwargs, error', [
    (dict(component_type='longlong'), UnsupportedComponentTypeError),
    (dict(component_type='ulonglong'), UnsupportedComponentTypeError),
    (dict(component_type='complex'), UnsupportedComponentTypeError),
    (dict(component_type='unknown'), UnsupportedComponentTypeError),
    (dict(component_type='complex', pixel_layout='vector'), UnsupportedComponentTypeError),
    (dict(component_type='short', pixel_layout='vector'), UnsupportedPixelLayoutError),
    (dict(component_type='short', pixel_layout='rgb'), UnsupportedPixelLayoutError),
    (dict(direction=np.zeros((3, 3))), DegenerateGeometryError),
])
def test_write_errors(tmp_path, kwargs, error):
    geom = _geometry(**kwargs)
    hdr = RawHeader((2, 2), descrip='untouched')
    orig = hdr.copy()
    writer = mock.Mock()
    gio = NiftiGeometryIO(writer=writer)
    with pytest.raises(error):
        gio.header_from_geometry(geom, hdr)
    assert gio.state == 'idle'
    assert hdr == orig
    with pytest.raises(error):
        gio.write_information(geom, 'test.nii', hdr)
    assert hdr == orig
    with pytest.raises(error):
        gio.write(geom, _data(), str(tmp_path / 'test.nii'))
    assert gio.state == 'idle'
    writer.assert_not_called()
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize('fname', ['test.dat', 'test', '.nii', 'test.img.gz'])
def test_invalid_filename(tmp_path, fname):
    writer = mock.Mock()
    gio = NiftiGeometryIO(writer=writer)
    hdr = RawHeader((2, 2), descrip='untouched')
    orig = hdr.copy()
    with pytest.raises(InvalidFilenameError):
        gio.write_information(_geometry(), fname, hdr)
    assert hdr == orig
    assert gio.state == 'idle'
    with pytest.raises(InvalidFilenameError):
        gio.write(_geometry(), _data(), str(tmp_path / fname))
    writer.assert_not_called()
    assert not gio.can_write_file(fname)
    assert not gio.can_read_file(fname)


def test_write_information():
    hdr = RawHeader((2, 2))
    gio = NiftiGeometryIO()
    out = gio.write_information(_geometry(), 'test.hdr', hdr)
    assert out is hdr
    assert gio.state == 'ready'
    assert hdr.get_data_shape() == SHAPE
    assert isinstance(gio.write_information(_geometry(), 'test.nii.gz'), RawHeader)


def test_write_calls_writer():
    writer = mock.Mock()
    gio = RecordingIO(writer=writer)
    data = _data()
    gio.write(_geometry(), data, 'test.nii')
    assert gio.visited == list(WRITE_STATES[1:])
    assert writer.call_count == 1
    raw, out_data, fname = writer.call_args[0]
    assert raw.datatype == 4
    assert out_data is data
    assert fname == 'test.nii'


@pytest.mark.parametrize('fname', ['test.nii', 'test.nii.gz', 'test.hdr', 'TEST.IMG'])
def test_save_load(tmp_path, fname):
    geom = _geometry(metadata={'file_notes': 'round trip'})
    data = _data()
    path = tmp_path / fname
    save(geom, data, path)
    gio = NiftiGeometryIO()
    assert gio.can_read_file(path)
    assert gio.can_write_file(path)
    back, back_data = load(path)
    assert_geometry_matches(back, geom)
    assert back.component_type == 'short'
    assert back.metadata['file_notes'] == 'round trip'
    assert back.metadata['input_filter_name'] == 'NiftiGeometryIO'
    assert back.metadata['on_disk_storage_type'] == 'int16'
    assert (back.rescale_slope, back.rescale_intercept) == (1.0, 0.0)
    assert_array_equal(back_data, data)
    info = gio.read_information(path)
    assert_geometry_matches(info, geom)
    assert gio.state == 'ready'


def test_save_load_4d(tmp_path):
    shape = SHAPE + (2,)
    geom = CanonicalGeometry(shape, spacing=(1, 1, 1, 2.5),
                             component_type='float')
    data = np.random.normal(size=shape).astype(np.float32)
    save(geom, data, tmp_path / 'four.nii')
    back, back_data = load(tmp_path / 'four.nii')
    assert back.dimensions == shape
    assert_array_almost_equal(back.spacing, [1, 1, 1, 2.5])
    assert_array_equal(back.direction, np.eye(3))
    assert_array_equal(back_data, data)


def test_long_written_as_int(tmp_path):
    geom = _geometry(component_type='long')
    save(geom, _data(np.int64), tmp_path / 'long.nii')
    back, back_data = load(tmp_path / 'long.nii')
    assert back.component_type == 'int'
    assert back_data.dtype == np.dtype(np.int32)
    assert_array_equal(back_data, _data())


def test_read_rescales(tmp_path):
    raw = RawHeader(SHAPE, pixdim=(1, 1, 1), sform_code=1, scl_slope=2, scl_inter=1,
                    datatype=4, bitpix=16)
    path = tmp_path / 'scaled.nii'
    write_image(raw, _data(), path)
    geom, data = load(path)
    assert (geom.rescale_slope, geom.rescale_intercept) == (2.0, 1.0)
    # Stored type is kept
    assert data.dtype == np.dtype(np.int16)
    assert_array_equal(data, _data() * 2 + 1)
    # Slopes at or below 1 with no intercept leave the data alone
    raw.scl_slope, raw.scl_inter = 0.5, 0
    write_image(raw, _data(), path)
    geom, data = load(path)
    assert geom.rescale_slope == 0.5
    assert_array_equal(data, _data())


def test_read_unknown_datatype(tmp_path):
    # int64 on disk has no component type, so cannot be rescaled
    raw = RawHeader(SHAPE, pixdim=(1, 1, 1), qform_code=1, scl_slope=2,
                    datatype=1024, bitpix=64)
    path = tmp_path / 'int64.nii'
    write_image(raw, _data(np.int64), path)
    gio = NiftiGeometryIO()
    with pytest.raises(UnsupportedComponentTypeError):
        gio.read(path)
    assert gio.state == 'idle'
    # Without scaling the values come back as stored
    geom = gio.read_information(path)
    assert (geom.component_type, geom.pixel_layout) == ('unknown', 'scalar')
    assert geom.rescale_slope == 2.0
    raw.scl_slope = 1
    write_image(raw, _data(np.int64), path)
    geom, data = gio.read(path)
    assert gio.state == 'ready'
    assert data.dtype == np.dtype(np.int64)
    assert_array_equal(data, _data())


def test_read_rgb(tmp_path):
    geom = _geometry(component_type='uchar', pixel_layout='rgb', n_components=3)
    rgb = np.zeros(SHAPE + (3,), dtype=np.uint8)
    rgb[..., 1] = 255
    save(geom, rgb, tmp_path / 'rgb.nii')
    back, data = load(tmp_path / 'rgb.nii')
    assert (back.component_type, back.pixel_layout, back.n_components) == ('uchar', 'rgb', 3)
    assert_array_equal(data['G'], 255)
    assert_array_equal(data['R'], 0)


def test_load_failures(tmp_path):
    with pytest.raises(HeaderReadFailure):
        load(tmp_path / 'missing.nii')
    (tmp_path / 'junk.nii').write_bytes(b'\x00' * 400)
    with pytest.raises(HeaderReadFailure):
        load(tmp_path / 'junk.nii')
    gio = NiftiGeometryIO()
    assert not gio.can_read_file(tmp_path / 'junk.nii')
    assert not gio.can_read_file(tmp_path / 'missing.nii')
    # Writeable name, even if the file is not there yet
    assert gio.can_write_file(tmp_path / 'missing.nii')


def test_written_header_reads_back(tmp_path):
    # The file header records the synthesized transforms
    geom = _geometry()
    save(geom, _data(), tmp_path / 'check.nii')
    raw = read_header(tmp_path / 'check.nii')
    assert (raw.qform_code, raw.sform_code) == (1, 1)
    assert_array_almost_equal(raw.qform[:3, 3], [-10, 20, 30], 5)
    zooms = np.sqrt(np.sum(raw.sform[:3, :3] ** 2, axis=0))
    assert_array_almost_equal(zooms, [1.5, 2.0, 2.5])
