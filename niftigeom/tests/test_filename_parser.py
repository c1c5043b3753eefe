# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Tests for filename container"""

import pathlib

import pytest

from ..filename_parser import (
    InvalidFilenameError,
    _stringify_path,
    filename_kind,
    is_complete_filename,
    parse_filename,
    splitext_addext,
    types_filenames,
)


def test_filenames():
    types_exts = (('image', '.img'), ('header', '.hdr'))
    for t_fname in ('test.img', 'test.hdr'):
        tfns = types_filenames(t_fname, types_exts)
        assert tfns == {'image': 'test.img', 'header': 'test.hdr'}
    # No extension, or an empty one
    for t_fname in ('test', 'test.'):
        with pytest.raises(InvalidFilenameError):
            types_filenames(t_fname, types_exts)
    # enforcing extensions raises an error for bad extension
    with pytest.raises(InvalidFilenameError):
        types_filenames('test.funny', types_exts)
    # trailing suffixes are carried over
    tfns = types_filenames('test.img.gz', types_exts, ('.gz',))
    assert tfns == {'image': 'test.img.gz', 'header': 'test.hdr.gz'}
    # Default extensions are the header / image pair
    tfns = types_filenames('/path/brain.hdr')
    assert tfns == {'header': '/path/brain.hdr', 'image': '/path/brain.img'}


def test_filenames_case():
    types_exts = (('image', '.img'), ('header', '.hdr'))
    # Upper case extension carries over
    tfns = types_filenames('test.IMG', types_exts)
    assert tfns == {'image': 'test.IMG', 'header': 'test.HDR'}
    tfns = types_filenames('test.HDR', types_exts)
    assert tfns == {'image': 'test.IMG', 'header': 'test.HDR'}
    # Mixed case gives the extensions as listed
    tfns = types_filenames('test.Img', types_exts)
    assert tfns == {'image': 'test.img', 'header': 'test.hdr'}
    # Case of the stem does not matter
    tfns = types_filenames('TEST.img', types_exts)
    assert tfns == {'image': 'TEST.img', 'header': 'TEST.hdr'}


def test_parse_filename():
    types_exts = (('t1', 'ext1'), ('t2', 'ext2'))
    exp_in_outs = (
        (('/path/fname.funny', ()), ('/path/fname', '.funny', None, None)),
        (('/path/fnameext2', ()), ('/path/fname', 'ext2', None, 't2')),
        (('/path/fnameext2', ('.gz',)), ('/path/fname', 'ext2', None, 't2')),
        (('/path/fnameext2.gz', ('.gz',)), ('/path/fname', 'ext2', '.gz', 't2')),
    )
    for inps, exps in exp_in_outs:
        pth, sufs = inps
        res = parse_filename(pth, types_exts, sufs)
        assert res == exps
    # Matching is case-insensitive, returning the found case
    assert parse_filename('/path/fnameEXT2.GZ', types_exts, ('.gz',)) == (
        '/path/fname', 'EXT2', '.GZ', 't2')


def test_splitext_addext():
    res = splitext_addext('fname.ext.gz')
    assert res == ('fname', '.ext', '.gz')
    res = splitext_addext('/path/fname.ext.gz')
    assert res == ('/path/fname', '.ext', '.gz')
    res = splitext_addext('/path/fname.ext')
    assert res == ('/path/fname', '.ext', '')
    res = splitext_addext('fname.ext.foo', ('.foo', '.bar'))
    assert res == ('fname', '.ext', '.foo')
    res = splitext_addext('fname.ext.FOO', ('.foo', '.bar'))
    assert res == ('fname', '.ext', '.FOO')
    # case sensitive for suffix is not required
    res = splitext_addext('fname.NII.GZ')
    assert res == ('fname', '.NII', '.GZ')
    # edge cases
    res = splitext_addext('.nii')
    assert res == ('', '.nii', '')
    res = splitext_addext('...nii')
    assert res == ('..', '.nii', '')
    res = splitext_addext('.')
    assert res == ('.', '', '')
    res = splitext_addext('..')
    assert res == ('..', '', '')
    res = splitext_addext('...')
    assert res == ('...', '', '')
    res = splitext_addext('fname')
    assert res == ('fname', '', '')


@pytest.mark.parametrize('filename, kind', [
    ('brain.nii', 'single'),
    ('brain.nii.gz', 'single'),
    ('BRAIN.NII.GZ', 'single'),
    ('/data/sub-01/brain.Nii', 'single'),
    ('brain.hdr', 'pair'),
    ('brain.img', 'pair'),
    ('brain.HDR', 'pair'),
    ('/data/brain.IMG', 'pair'),
    ('dotted.name.nii', 'single'),
])
def test_filename_kind(filename, kind):
    assert filename_kind(filename) == kind
    assert filename_kind(pathlib.Path(filename)) == kind
    assert is_complete_filename(filename)


@pytest.mark.parametrize('filename', [
    'brain.dat',
    'brain',
    'brain.',
    '.nii',
    '/data/.nii.gz',
    '.hdr',
    'brain.img.gz',
    'brain.hdr.gz',
    'brain.nii.bz2',
    'brain.gz',
    '',
])
def test_bad_filename_kind(filename):
    with pytest.raises(InvalidFilenameError):
        filename_kind(filename)
    assert not is_complete_filename(filename)


def test_stringify_path():
    res = _stringify_path(pathlib.Path('./dir/brain.nii'))
    assert res == 'dir/brain.nii'
    res = _stringify_path('~/brain.nii')
    assert res == str(pathlib.Path('~/brain.nii').expanduser())
    assert _stringify_path('/path/brain.nii') == '/path/brain.nii'
