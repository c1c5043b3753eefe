# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Read and write image geometry through NIfTI-1 headers

:class:`NiftiGeometryIO` runs each read or write as a fixed sequence of
steps, recording the step reached in its ``state`` attribute.

Read: ``idle -> header_ingested -> classified -> orientation_resolved ->
units_normalized -> ready``

Write: ``idle -> geometry_collected -> synthesized -> classified -> ready``

Every operation starts from ``idle``.  If a step raises, the state goes back
to ``idle`` and the error propagates; nothing is returned or written, and a
header passed in to be filled is left as it was.

>>> from niftigeom.geometry import CanonicalGeometry
>>> gio = NiftiGeometryIO()
>>> geom = CanonicalGeometry((4, 4, 4), spacing=(1, 1, 2), component_type='short')
>>> hdr = gio.header_from_geometry(geom)
>>> gio.state
'ready'
>>> gio.geometry_from_header(hdr).spacing
array([1., 1., 2.])
"""

from contextlib import contextmanager

from .datatypes import classify_datatype, datatype_for, storage_type_name
from .filename_parser import filename_kind, is_complete_filename
from .geometry import CanonicalGeometry
from .imageglobals import logger
from .loadsave import HeaderReadFailure, is_recognized_format, read_header, write_image
from .orientations import resolve_orientation
from .scaling import needs_rescale, rescale_buffer
from .synthesis import synthesize_header
from .units import normalize_spacing

READ_STATES = (
    'idle',
    'header_ingested',
    'classified',
    'orientation_resolved',
    'units_normalized',
    'ready',
)
WRITE_STATES = (
    'idle',
    'geometry_collected',
    'synthesized',
    'classified',
    'ready',
)

#: value of the 'input_filter_name' metadata entry for geometry read here
INPUT_FILTER_NAME = 'NiftiGeometryIO'


class NiftiGeometryIO:
    """Convert between headers in files and :class:`CanonicalGeometry`

    Parameters
    ----------
    reader : callable, optional
        ``reader(filename, include_data=False)`` returning a
        :class:`niftigeom.rawheader.RawHeader`, or raising
        :class:`HeaderReadFailure`
    writer : callable, optional
        ``writer(raw_header, data, filename)``
    recognizer : callable, optional
        ``recognizer(filename)`` returning True for readable files
    """

    def __init__(self, reader=read_header, writer=write_image,
                 recognizer=is_recognized_format):
        self.reader = reader
        self.writer = writer
        self.recognizer = recognizer
        self.state = 'idle'

    def _advance(self, state):
        logger.debug('%s: %s -> %s', self.__class__.__name__, self.state, state)
        self.state = state

    @contextmanager
    def _operation(self, name):
        self.state = 'idle'
        logger.debug('%s: starting %s', self.__class__.__name__, name)
        try:
            yield
        except Exception:
            logger.debug('%s: %s failed at %s', self.__class__.__name__, name, self.state)
            self.state = 'idle'
            raise

    def can_read_file(self, filename):
        """True if `filename` has an image extension and a readable header"""
        return is_complete_filename(filename) and self.recognizer(filename)

    def can_write_file(self, filename):
        """True if `filename` has an image extension and a non-empty stem"""
        return is_complete_filename(filename)

    # Read path

    def _geometry_from_raw(self, raw):
        self._advance('header_ingested')
        component_type, pixel_layout, n_components = classify_datatype(raw.datatype)
        if component_type == 'unknown':
            logger.debug('datatype code %d has no component type', raw.datatype)
        self._advance('classified')
        resolved = resolve_orientation(raw)
        self._advance('orientation_resolved')
        rank = raw.rank
        if not 1 <= rank <= 7:
            raise HeaderReadFailure(f'Header rank {rank} should be 1 to 7')
        spacing = normalize_spacing(raw.pixdim[1:], raw.xyzt_units, rank)
        self._advance('units_normalized')
        metadata = {
            'input_filter_name': INPUT_FILTER_NAME,
            'file_notes': raw.descrip,
        }
        storage_type = storage_type_name(raw.datatype)
        if storage_type is not None:
            metadata['on_disk_storage_type'] = storage_type
        return CanonicalGeometry(
            raw.get_data_shape(),
            spacing=spacing,
            direction=resolved.direction,
            origin=resolved.origin[:min(rank, 3)],
            rescale_slope=resolved.slope,
            rescale_intercept=resolved.intercept,
            component_type=component_type,
            pixel_layout=pixel_layout,
            n_components=n_components,
            metadata=metadata,
        )

    def geometry_from_header(self, raw):
        """:class:`CanonicalGeometry` for header record `raw`"""
        with self._operation('geometry_from_header'):
            geometry = self._geometry_from_raw(raw)
            self._advance('ready')
        return geometry

    def read_information(self, filename):
        """Read geometry, but not data, from `filename`

        Raises
        ------
        HeaderReadFailure
            if the file has no readable header
        """
        with self._operation('read_information'):
            raw = self.reader(filename)
            geometry = self._geometry_from_raw(raw)
            self._advance('ready')
        return geometry

    def read(self, filename):
        """Read geometry and voxel data from `filename`

        Stored values are rescaled when the header slope is above 1 or the
        intercept is non-zero; the data keeps its stored type.  Other
        slopes, and RGB data, are returned as stored.

        Returns
        -------
        geometry : :class:`CanonicalGeometry`
        data : ndarray

        Raises
        ------
        UnsupportedComponentTypeError
            if the data needs rescaling but its datatype has no component type
        """
        with self._operation('read'):
            raw = self.reader(filename, include_data=True)
            geometry = self._geometry_from_raw(raw)
            data = raw.data
            if needs_rescale(geometry.rescale_slope, geometry.rescale_intercept):
                data = rescale_buffer(data,
                                      geometry.rescale_slope,
                                      geometry.rescale_intercept,
                                      geometry.component_type,
                                      geometry.pixel_layout)
            self._advance('ready')
        return geometry, data

    # Write path

    def _header_from_geometry(self, geometry, header=None):
        self._advance('geometry_collected')
        out = synthesize_header(geometry)
        self._advance('synthesized')
        code, bytes_per_voxel = datatype_for(geometry.component_type, geometry.pixel_layout)
        out.datatype = code
        out.bitpix = bytes_per_voxel * 8
        self._advance('classified')
        if header is None:
            return out
        out.data = header.data
        header.update_from(out)
        return header

    def header_from_geometry(self, geometry, header=None):
        """Header record for `geometry`

        Parameters
        ----------
        geometry : :class:`CanonicalGeometry`
        header : None or :class:`niftigeom.rawheader.RawHeader`, optional
            header to fill.  It changes only if the whole conversion succeeds.

        Raises
        ------
        DegenerateGeometryError
            if the direction cosines cannot give a transform
        UnsupportedComponentTypeError, UnsupportedPixelLayoutError
            if the image type has no on-disk datatype
        """
        with self._operation('header_from_geometry'):
            header = self._header_from_geometry(geometry, header)
            self._advance('ready')
        return header

    def write_information(self, geometry, filename, header=None):
        """Header record for writing `geometry` to `filename`

        Checks `filename` before anything else, so an invalid filename
        leaves `header` untouched.

        Raises
        ------
        InvalidFilenameError
            for filenames without an image extension
        """
        with self._operation('write_information'):
            filename_kind(filename)
            header = self._header_from_geometry(geometry, header)
            self._advance('ready')
        return header

    def write(self, geometry, data, filename):
        """Write `geometry` and voxel `data` to `filename`

        The writer is only called once the filename, geometry and datatype
        have all been checked.
        """
        with self._operation('write'):
            filename_kind(filename)
            raw = self._header_from_geometry(geometry)
            self.writer(raw, data, filename)
            self._advance('ready')


def load(filename):
    """Geometry and data of image in `filename`

    Returns
    -------
    geometry : :class:`CanonicalGeometry`
    data : ndarray
    """
    return NiftiGeometryIO().read(filename)


def save(geometry, data, filename):
    """Save `geometry` and `data` to `filename`"""
    NiftiGeometryIO().write(geometry, data, filename)
