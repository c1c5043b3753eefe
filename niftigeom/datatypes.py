# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""On-disk datatype codes and image component types

:data:`data_type_codes` lists every NIfTI-1 datatype code with its numpy
dtype.  Only some of these have a matching image component type; the
classification functions map between the two:

================  ==========  ==============  ============
on-disk code      component   pixel layout    components
================  ==========  ==============  ============
int8 (256)        char        scalar          1
uint8 (2)         uchar       scalar          1
int16 (4)         short       scalar          1
uint16 (512)      ushort      scalar          1
int32 (8)         int         scalar          1
uint32 (768)      uint        scalar          1
float32 (16)      float       scalar          1
float64 (64)      double      scalar          1
RGB (128)         uchar       rgb             3
================  ==========  ==============  ============

Reading a code outside the table is allowed; the image then has component
type 'unknown' and a scalar pixel layout, so its values cannot be rescaled.
Writing a component type or pixel layout outside the table raises.

>>> classify_datatype(512)
('ushort', 'scalar', 1)
>>> datatype_for('uchar', 'rgb')
(128, 3)
"""

from types import MappingProxyType

import numpy as np

from .volumeutils import make_dt_codes


class UnsupportedComponentTypeError(Exception):
    """Component type has no on-disk datatype, or cannot be rescaled"""


class UnsupportedPixelLayoutError(Exception):
    """Pixel layout other than scalar or 3 component RGB"""


rgb_dtype = np.dtype([('R', 'u1'), ('G', 'u1'), ('B', 'u1')])
rgba_dtype = np.dtype([('R', 'u1'), ('G', 'u1'), ('B', 'u1'), ('A', 'u1')])

_dtdefs = (  # code, label, dtype definition, niistring
    (0, 'none', np.void, ''),
    (1, 'binary', np.void, ''),
    (2, 'uint8', np.uint8, 'NIFTI_TYPE_UINT8'),
    (4, 'int16', np.int16, 'NIFTI_TYPE_INT16'),
    (8, 'int32', np.int32, 'NIFTI_TYPE_INT32'),
    (16, 'float32', np.float32, 'NIFTI_TYPE_FLOAT32'),
    (32, 'complex64', np.complex64, 'NIFTI_TYPE_COMPLEX64'),
    (64, 'float64', np.float64, 'NIFTI_TYPE_FLOAT64'),
    (128, 'RGB', rgb_dtype, 'NIFTI_TYPE_RGB24'),
    (255, 'all', np.void, ''),
    (256, 'int8', np.int8, 'NIFTI_TYPE_INT8'),
    (512, 'uint16', np.uint16, 'NIFTI_TYPE_UINT16'),
    (768, 'uint32', np.uint32, 'NIFTI_TYPE_UINT32'),
    (1024, 'int64', np.int64, 'NIFTI_TYPE_INT64'),
    (1280, 'uint64', np.uint64, 'NIFTI_TYPE_UINT64'),
    (1536, 'float128', np.void, 'NIFTI_TYPE_FLOAT128'),
    (1792, 'complex128', np.complex128, 'NIFTI_TYPE_COMPLEX128'),
    (2048, 'complex256', np.void, 'NIFTI_TYPE_COMPLEX256'),
    (2304, 'RGBA', rgba_dtype, 'NIFTI_TYPE_RGBA32'),
)

# Make full code alias bank, including dtype column
data_type_codes = make_dt_codes(_dtdefs)

#: numpy dtype for each component type
COMPONENT_DTYPES = MappingProxyType({
    'char': np.dtype(np.int8),
    'uchar': np.dtype(np.uint8),
    'short': np.dtype(np.int16),
    'ushort': np.dtype(np.uint16),
    'int': np.dtype(np.int32),
    'uint': np.dtype(np.uint32),
    'long': np.dtype(np.int64),
    'ulong': np.dtype(np.uint64),
    'longlong': np.dtype(np.longlong),
    'ulonglong': np.dtype(np.ulonglong),
    'float': np.dtype(np.float32),
    'double': np.dtype(np.float64),
    'complex': np.dtype(np.complex128),
})

PIXEL_LAYOUTS = ('scalar', 'rgb', 'rgba', 'vector', 'unknown')

# on-disk code -> (component type, pixel layout, number of components)
_CLASSIFIED = MappingProxyType({
    256: ('char', 'scalar', 1),
    2: ('uchar', 'scalar', 1),
    4: ('short', 'scalar', 1),
    512: ('ushort', 'scalar', 1),
    8: ('int', 'scalar', 1),
    768: ('uint', 'scalar', 1),
    16: ('float', 'scalar', 1),
    64: ('double', 'scalar', 1),
    128: ('uchar', 'rgb', 3),
})

# (component type, pixel layout) -> on-disk code
_ENCODINGS = MappingProxyType({
    (comp, layout): code for code, (comp, layout, _) in _CLASSIFIED.items()})

# component types that write as a narrower on-disk integer
_WRITE_ALIASES = MappingProxyType({'long': 'int', 'ulong': 'uint'})

UNKNOWN_CLASSIFICATION = ('unknown', 'scalar', 1)


def classify_datatype(code):
    """Component type, pixel layout and component count for on-disk `code`

    Codes outside the supported table give ``('unknown', 'scalar', 1)``;
    the caller decides whether it can use such an image.

    >>> classify_datatype(16)
    ('float', 'scalar', 1)
    >>> classify_datatype(1024)
    ('unknown', 'scalar', 1)
    """
    return _CLASSIFIED.get(int(code), UNKNOWN_CLASSIFICATION)


def datatype_for(component_type, pixel_layout='scalar'):
    """On-disk code and bytes per voxel for `component_type`, `pixel_layout`

    Parameters
    ----------
    component_type : str
        one of the keys of :data:`COMPONENT_DTYPES` (or 'unknown')
    pixel_layout : str, optional
        'scalar' or 'rgb'

    Returns
    -------
    code : int
        NIfTI datatype code
    bytes_per_voxel : int

    Raises
    ------
    UnsupportedComponentTypeError
        for component types with no on-disk equivalent
    UnsupportedPixelLayoutError
        for pixel layouts other than scalar, and RGB of anything but uchar

    Examples
    --------
    >>> datatype_for('long')
    (8, 4)
    """
    if component_type in _WRITE_ALIASES:
        component_type = _WRITE_ALIASES[component_type]
    if (component_type, 'scalar') not in _ENCODINGS:
        raise UnsupportedComponentTypeError(
            f'Component type {component_type!r} has no on-disk datatype')
    if pixel_layout not in ('scalar', 'rgb'):
        raise UnsupportedPixelLayoutError(f'Unsupported pixel layout {pixel_layout!r}')
    try:
        code = _ENCODINGS[(component_type, pixel_layout)]
    except KeyError:
        raise UnsupportedPixelLayoutError(
            f'Pixel layout {pixel_layout!r} needs uchar components, '
            f'not {component_type!r}') from None
    return code, data_type_codes.dtype[code].itemsize


def component_type_for_dtype(dtype):
    """Component type, pixel layout and component count for numpy `dtype`

    >>> component_type_for_dtype(np.int16)
    ('short', 'scalar', 1)
    >>> component_type_for_dtype(rgb_dtype)
    ('uchar', 'rgb', 3)
    >>> component_type_for_dtype(np.int64)
    ('long', 'scalar', 1)
    """
    dtype = np.dtype(dtype)
    if dtype.fields is not None:
        if dtype == rgb_dtype:
            return ('uchar', 'rgb', 3)
        if dtype == rgba_dtype:
            return ('uchar', 'rgba', 4)
        return ('unknown', 'unknown', 1)
    native = dtype.newbyteorder('=')
    for name, comp_dtype in COMPONENT_DTYPES.items():
        if native == comp_dtype:
            return (name, 'scalar', 1)
    return UNKNOWN_CLASSIFICATION


def storage_type_name(code):
    """Name of the in-memory storage type for on-disk `code`

    Gives the numpy dtype name, or 'RGB' for 3 component color, or None for
    codes outside the supported table.

    >>> storage_type_name(4)
    'int16'
    >>> storage_type_name(128)
    'RGB'
    """
    code = int(code)
    if code not in _CLASSIFIED:
        return None
    if _CLASSIFIED[code][1] == 'rgb':
        return 'RGB'
    return data_type_codes.dtype[code].name


def dtype_for_datatype(code):
    """numpy dtype to decode voxels stored with on-disk `code`

    Returns None when `code` is unknown or has no numpy equivalent.
    """
    try:
        dtype = data_type_codes.dtype[int(code)]
    except KeyError:
        return None
    if dtype.itemsize == 0:
        return None
    return dtype


def as_rgb(data):
    """View (..., 3) uint8 `data` as RGB records; pass RGB records through

    >>> as_rgb(np.zeros((2, 3), dtype=np.uint8)).shape
    (2,)
    """
    data = np.asarray(data)
    if data.dtype == rgb_dtype:
        return data
    if data.dtype != np.uint8 or data.shape[-1:] != (3,):
        raise UnsupportedPixelLayoutError(
            f'RGB data should be uint8 with last axis length 3, not {data.dtype} '
            f'with shape {data.shape}')
    return np.ascontiguousarray(data).view(rgb_dtype)[..., 0]
