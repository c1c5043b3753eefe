# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Read and write header records and voxel data for image files"""
from __future__ import annotations

import typing as ty

import numpy as np

from .datatypes import as_rgb, rgb_dtype
from .filename_parser import (
    InvalidFilenameError,
    _stringify_path,
    filename_kind,
    is_complete_filename,
    types_filenames,
)
from .nifti1 import AnalyzeHeader, Nifti1Header, Nifti1PairHeader
from .openers import Opener
from .rawheader import HeaderDataError, ImageFileError, RawHeader
from .volumeutils import array_from_file, array_to_file
from .wrapstruct import WrapStructError

if ty.TYPE_CHECKING:  # pragma: no cover
    from .filename_parser import FileSpec

__all__ = [
    'HeaderReadFailure',
    'is_complete_filename',
    'is_recognized_format',
    'read_header',
    'write_image',
]

class HeaderReadFailure(ImageFileError):
    """File is missing, unreadable or has no valid header"""


def _image_filenames(filename: str) -> tuple[str, str]:
    """(header filename, image filename) for `filename`"""
    if filename_kind(filename) == 'single':
        return filename, filename
    names = types_filenames(filename)
    return names['header'], names['image']


def _sniff_header_class(binaryblock: bytes):
    if len(binaryblock) < AnalyzeHeader.sizeof_hdr:
        return None
    magic = Nifti1Header(binaryblock, check=False)['magic'].item()
    if magic == Nifti1Header.single_magic:
        return Nifti1Header
    if magic == Nifti1Header.pair_magic:
        return Nifti1PairHeader
    if AnalyzeHeader.may_contain_header(binaryblock):
        return AnalyzeHeader
    return None


def _read_binaryblock(hdr_fname: str) -> bytes:
    with Opener(hdr_fname) as fobj:
        return fobj.read(AnalyzeHeader.sizeof_hdr)


def is_recognized_format(filename: FileSpec) -> bool:
    """True if `filename` names a readable NIfTI-1 or Analyze header

    Only reads the header; the data file need not exist.
    """
    try:
        hdr_fname, _ = _image_filenames(_stringify_path(filename))
        binaryblock = _read_binaryblock(hdr_fname)
    except (InvalidFilenameError, OSError, EOFError):
        return False
    return _sniff_header_class(binaryblock) is not None


def read_header(filename: FileSpec, include_data: bool = False) -> RawHeader:
    """Read header, and optionally voxel data, from `filename`

    Parameters
    ----------
    filename : str or os.PathLike
        ``.nii``, ``.nii.gz``, ``.hdr`` or ``.img`` filename; either file of
        a pair gives the pair.
    include_data : bool, optional
        If True, also read the voxel data into ``data`` of the returned
        header, in native byte order.  Data with a datatype code that has no
        numpy equivalent comes back as raw ``bitpix // 8`` byte records.

    Returns
    -------
    header : :class:`niftigeom.rawheader.RawHeader`

    Raises
    ------
    HeaderReadFailure
        if the file is missing, the filename has the wrong extension, or the
        header or data cannot be read.
    """
    filename = _stringify_path(filename)
    msg = f'{filename} is not recognized as a NIFTI file'
    try:
        hdr_fname, img_fname = _image_filenames(filename)
        binaryblock = _read_binaryblock(hdr_fname)
        klass = _sniff_header_class(binaryblock)
        if klass is None:
            raise HeaderReadFailure(msg)
        hdr = klass(binaryblock, check=False)
        hdr.check_fix()
        raw = hdr.as_raw()
        if include_data:
            raw.data = _read_data(hdr, raw, img_fname)
    except (InvalidFilenameError, HeaderDataError, WrapStructError, ValueError, OSError,
            EOFError) as err:
        raise HeaderReadFailure(f'{msg}: {err}') from err
    return raw


def _read_data(hdr, raw, img_fname):
    dtype = hdr.get_data_dtype()
    if dtype is None:
        n_bytes = raw.bytes_per_voxel
        if n_bytes <= 0:
            raise HeaderDataError(f'Cannot read data with bitpix {raw.bitpix}')
        dtype = np.dtype(f'V{n_bytes}')
    shape = hdr.get_data_shape()
    with Opener(img_fname) as fobj:
        data = array_from_file(shape, dtype, fobj, hdr.get_data_offset())
    return data.astype(dtype.newbyteorder('='), copy=False)


def write_image(raw: RawHeader, data, filename: FileSpec) -> None:
    """Write header `raw` and voxel `data` to `filename`

    ``.nii`` and ``.nii.gz`` filenames give a single file, with data starting
    at byte 352.  ``.hdr`` and ``.img`` filenames give a header / image pair.

    Parameters
    ----------
    raw : :class:`niftigeom.rawheader.RawHeader`
    data : array-like
        voxel data with the shape of `raw`; stored as the datatype of `raw`.
        For RGB datatypes, (..., 3) uint8 arrays are accepted.
    filename : str or os.PathLike

    Raises
    ------
    InvalidFilenameError
        for filenames without one of the extensions above
    HeaderDataError
        if the datatype of `raw` cannot be written, or `data` has the wrong
        shape
    """
    filename = _stringify_path(filename)
    single = filename_kind(filename) == 'single'
    klass = Nifti1Header if single else Nifti1PairHeader
    hdr = klass.from_raw(raw)
    out_dtype = hdr.get_data_dtype()
    if out_dtype is None:
        raise HeaderDataError(f'Cannot write data with datatype code {raw.datatype}')
    data = np.asanyarray(data)
    if out_dtype == rgb_dtype:
        data = as_rgb(data)
    shape = raw.get_data_shape()
    if data.shape != shape:
        raise HeaderDataError(f'Data shape {data.shape} does not match header shape {shape}')
    if single:
        with Opener(filename, 'wb') as fobj:
            hdr.write_to(fobj)
            array_to_file(data, fobj, out_dtype, hdr.get_data_offset())
        return
    names = types_filenames(filename)
    with Opener(names['header'], 'wb') as fobj:
        hdr.write_to(fobj)
    with Opener(names['image'], 'wb') as fobj:
        array_to_file(data, fobj, out_dtype, hdr.get_data_offset())
