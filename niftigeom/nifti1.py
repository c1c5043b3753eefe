# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Read / write access to the binary Analyze 7.5 and NIfTI-1 headers

Both headers are 348 bytes.  The Analyze header has a legacy ``orient``
byte and no transforms; the NIfTI-1 header replaces the end of the Analyze
header with the qform and sform transforms, scaling, units and a magic
string: ``n+1`` for a single ``.nii`` file, ``ni1`` for a ``.hdr`` / ``.img``
pair.

The header classes convert to and from :class:`niftigeom.rawheader.RawHeader`
with :meth:`AnalyzeHeader.as_raw` and :meth:`AnalyzeHeader.from_raw`.
"""

import numpy as np

from .batteryrunners import Report
from .datatypes import data_type_codes
from .quaternions import fillpositive, quat2mat
from .rawheader import HeaderDataError, RawHeader
from .volumeutils import Recoder, native_code, swapped_code
from .wrapstruct import LabeledWrapStruct

# Sub-parts of standard analyze header from
# Mayo dbh.h file
header_key_dtd = [
    ('sizeof_hdr', 'i4'),
    ('data_type', 'S10'),
    ('db_name', 'S18'),
    ('extents', 'i4'),
    ('session_error', 'i2'),
    ('regular', 'S1'),
    ('hkey_un0', 'S1'),
]
image_dimension_dtd = [
    ('dim', 'i2', (8,)),
    ('vox_units', 'S4'),
    ('cal_units', 'S8'),
    ('unused1', 'i2'),
    ('datatype', 'i2'),
    ('bitpix', 'i2'),
    ('dim_un0', 'i2'),
    ('pixdim', 'f4', (8,)),
    ('vox_offset', 'f4'),
    ('funused1', 'f4'),
    ('funused2', 'f4'),
    ('funused3', 'f4'),
    ('cal_max', 'f4'),
    ('cal_min', 'f4'),
    ('compressed', 'i4'),
    ('verified', 'i4'),
    ('glmax', 'i4'),
    ('glmin', 'i4'),
]
data_history_dtd = [
    ('descrip', 'S80'),
    ('aux_file', 'S24'),
    ('orient', 'S1'),
    ('originator', 'S10'),
    ('generated', 'S10'),
    ('scannum', 'S10'),
    ('patient_id', 'S10'),
    ('exp_date', 'S10'),
    ('exp_time', 'S10'),
    ('hist_un0', 'S3'),
    ('views', 'i4'),
    ('vols_added', 'i4'),
    ('start_field', 'i4'),
    ('field_skip', 'i4'),
    ('omax', 'i4'),
    ('omin', 'i4'),
    ('smax', 'i4'),
    ('smin', 'i4'),
]

analyze_header_dtype = np.dtype(header_key_dtd + image_dimension_dtd + data_history_dtd)

# nifti1 flat header definition for Analyze-like first 348 bytes
# first number in comments indicates offset in file header in bytes
header_dtd = [
    ('sizeof_hdr', 'i4'),      # 0; must be 348
    ('data_type', 'S10'),      # 4; unused
    ('db_name', 'S18'),        # 14; unused
    ('extents', 'i4'),         # 32; unused
    ('session_error', 'i2'),   # 36; unused
    ('regular', 'S1'),         # 38; unused
    ('dim_info', 'u1'),        # 39; MRI slice ordering code
    ('dim', 'i2', (8,)),       # 40; data array dimensions
    ('intent_p1', 'f4'),       # 56; first intent parameter
    ('intent_p2', 'f4'),       # 60; second intent parameter
    ('intent_p3', 'f4'),       # 64; third intent parameter
    ('intent_code', 'i2'),     # 68; NIFTI intent code
    ('datatype', 'i2'),        # 70; it's the datatype
    ('bitpix', 'i2'),          # 72; number of bits per voxel
    ('slice_start', 'i2'),     # 74; first slice index
    ('pixdim', 'f4', (8,)),    # 76; grid spacings (units below)
    ('vox_offset', 'f4'),      # 108; offset to data in image file
    ('scl_slope', 'f4'),       # 112; data scaling slope
    ('scl_inter', 'f4'),       # 116; data scaling intercept
    ('slice_end', 'i2'),       # 120; last slice index
    ('slice_code', 'u1'),      # 122; slice timing order
    ('xyzt_units', 'u1'),      # 123; units of pixdim[1..4]
    ('cal_max', 'f4'),         # 124; max display intensity
    ('cal_min', 'f4'),         # 128; min display intensity
    ('slice_duration', 'f4'),  # 132; time for 1 slice
    ('toffset', 'f4'),         # 136; time axis shift
    ('glmax', 'i4'),           # 140; unused
    ('glmin', 'i4'),           # 144; unused
    ('descrip', 'S80'),        # 148; any text
    ('aux_file', 'S24'),       # 228; auxiliary filename
    ('qform_code', 'i2'),      # 252; xform code
    ('sform_code', 'i2'),      # 254; xform code
    ('quatern_b', 'f4'),       # 256; quaternion b param
    ('quatern_c', 'f4'),       # 260; quaternion c param
    ('quatern_d', 'f4'),       # 264; quaternion d param
    ('qoffset_x', 'f4'),       # 268; quaternion x shift
    ('qoffset_y', 'f4'),       # 272; quaternion y shift
    ('qoffset_z', 'f4'),       # 276; quaternion z shift
    ('srow_x', 'f4', (4,)),    # 280; 1st row affine transform
    ('srow_y', 'f4', (4,)),    # 296; 2nd row affine transform
    ('srow_z', 'f4', (4,)),    # 312; 3rd row affine transform
    ('intent_name', 'S16'),    # 328; name or meaning of data
    ('magic', 'S4'),           # 344; must be 'ni1\0' or 'n+1\0'
]

# Full header numpy dtype
header_dtype = np.dtype(header_dtd)

# Transform (qform, sform) codes
xform_codes = Recoder(
    (  # code, label, niistring
        (0, 'unknown', 'NIFTI_XFORM_UNKNOWN'),
        (1, 'scanner', 'NIFTI_XFORM_SCANNER_ANAT'),
        (2, 'aligned', 'NIFTI_XFORM_ALIGNED_ANAT'),
        (3, 'talairach', 'NIFTI_XFORM_TALAIRACH'),
        (4, 'mni', 'NIFTI_XFORM_MNI_152'),
    ),
    fields=('code', 'label', 'niistring'),
)

DESCRIP_LENGTH = 80


def _encode_descrip(descrip):
    # Leave room for the terminating null
    return str(descrip).encode('latin-1', errors='replace')[:DESCRIP_LENGTH - 1]


class AnalyzeHeader(LabeledWrapStruct):
    """Class for basic Analyze 7.5 header"""

    template_dtype = analyze_header_dtype
    _data_type_codes = data_type_codes
    _field_recoders = {'datatype': data_type_codes}
    # fixed size of header in bytes
    sizeof_hdr = 348

    @classmethod
    def guessed_endian(klass, hdr):
        """Guess intended endianness from mapping-like ``hdr``

        ``dim[0]`` should be between 1 and 7 for the native byte order.  A
        zero ``dim[0]`` needs a tie breaker: a ``sizeof_hdr`` that looks like
        byteswapped 348 means swapped.

        >>> from niftigeom.volumeutils import native_code, swapped_code
        >>> hdr_data = np.zeros((), dtype=analyze_header_dtype)
        >>> AnalyzeHeader.guessed_endian(hdr_data) == native_code
        True
        >>> hdr_data['sizeof_hdr'] = 1543569408
        >>> AnalyzeHeader.guessed_endian(hdr_data) == swapped_code
        True
        >>> hdr_data['dim'][0] = 3
        >>> AnalyzeHeader.guessed_endian(hdr_data) == native_code
        True
        """
        dim0 = int(hdr['dim'][0])
        if dim0 == 0:
            if hdr['sizeof_hdr'].byteswap() == klass.sizeof_hdr:
                return swapped_code
            return native_code
        elif 1 <= dim0 <= 7:
            return native_code
        return swapped_code

    @classmethod
    def default_structarr(klass, endianness=None):
        """Return header data for empty header with given endianness"""
        hdr_data = super().default_structarr(endianness)
        hdr_data['sizeof_hdr'] = klass.sizeof_hdr
        hdr_data['dim'] = 1
        hdr_data['dim'][0] = 0
        hdr_data['pixdim'] = 1
        hdr_data['datatype'] = 16  # float32
        hdr_data['bitpix'] = 32
        return hdr_data

    def get_data_shape(self):
        """Shape of the image data from ``dim``

        >>> hdr = AnalyzeHeader()
        >>> hdr.get_data_shape()
        (0,)
        """
        dims = self._structarr['dim']
        ndims = int(dims[0])
        if ndims == 0:
            return (0,)
        return tuple(int(d) for d in dims[1:ndims + 1])

    def get_data_dtype(self):
        """numpy dtype of the voxel data, in the header byte order

        Returns None for datatype codes without a numpy equivalent.
        """
        code = int(self._structarr['datatype'])
        try:
            dtype = self._data_type_codes.dtype[code]
        except KeyError:
            return None
        if dtype.itemsize == 0:
            return None
        return dtype.newbyteorder(self.endianness)

    def get_data_offset(self):
        """Byte offset of voxel data in the image file"""
        return int(self._structarr['vox_offset'])

    def get_orient_code(self):
        """Legacy orientation byte; 0 (transverse unflipped) if unset

        >>> hdr = AnalyzeHeader()
        >>> hdr.get_orient_code()
        0
        >>> hdr.set_orient_code(2)
        >>> hdr.get_orient_code()
        2
        """
        orient = self._structarr['orient'].item()
        if not orient:
            return 0
        return orient[0]

    def set_orient_code(self, code):
        code = int(code)
        if not 0 <= code <= 255:
            raise HeaderDataError(f'Orientation code should fit in one byte, not {code}')
        self._structarr['orient'] = bytes([code])

    def as_raw(self):
        """:class:`RawHeader` with the fields of this header"""
        hdr = self._structarr
        raw = RawHeader()
        raw.dim = np.array(hdr['dim'], dtype=np.int64)
        raw.pixdim = np.array(hdr['pixdim'], dtype=np.float64)
        raw.datatype = int(hdr['datatype'])
        raw.bitpix = int(hdr['bitpix'])
        raw.descrip = hdr['descrip'].item().decode('latin-1')
        self._set_raw_geometry(raw)
        return raw

    def _set_raw_geometry(self, raw):
        raw.qform_code = 0
        raw.sform_code = 0
        raw.analyze_orient = self.get_orient_code()

    @classmethod
    def from_raw(klass, raw, endianness=None):
        """New header of this class holding the fields of `raw`

        Parameters
        ----------
        raw : :class:`RawHeader`
        endianness : None or str, optional
            endian code for the new header; None for native

        Returns
        -------
        hdr : header of class `klass`
        """
        obj = klass(endianness=endianness)
        hdr = obj._structarr
        hdr['dim'] = raw.dim
        hdr['pixdim'] = raw.pixdim
        hdr['datatype'] = raw.datatype
        hdr['bitpix'] = raw.bitpix
        hdr['descrip'] = _encode_descrip(raw.descrip)
        obj._set_geometry_fields(raw)
        return obj

    def _set_geometry_fields(self, raw):
        orient = 0 if raw.analyze_orient is None else raw.analyze_orient
        self.set_orient_code(orient)

    @classmethod
    def _get_checks(klass):
        """Return sequence of check functions for this class"""
        return (klass._chk_sizeof_hdr,
                klass._chk_datatype,
                klass._chk_bitpix,
                klass._chk_pixdims)

    """ Check functions in format expected by BatteryRunner class """

    @classmethod
    def _chk_sizeof_hdr(klass, hdr, fix=False):
        rep = Report(HeaderDataError)
        if hdr['sizeof_hdr'] == klass.sizeof_hdr:
            return hdr, rep
        rep.problem_level = 30
        rep.problem_msg = 'sizeof_hdr should be ' + str(klass.sizeof_hdr)
        if fix:
            hdr['sizeof_hdr'] = klass.sizeof_hdr
            rep.fix_msg = 'set sizeof_hdr to ' + str(klass.sizeof_hdr)
        return hdr, rep

    @classmethod
    def _chk_datatype(klass, hdr, fix=False):
        # Unknown codes are allowed through; the image gets an unknown
        # component type
        rep = Report(HeaderDataError)
        code = int(hdr['datatype'])
        try:
            dtype = klass._data_type_codes.dtype[code]
        except KeyError:
            rep.problem_level = 30
            rep.problem_msg = 'data code %d not recognized' % code
        else:
            if dtype.itemsize == 0:
                rep.problem_level = 30
                rep.problem_msg = 'data code %d not supported' % code
            else:
                return hdr, rep
        if fix:
            rep.fix_msg = 'not attempting fix'
        return hdr, rep

    @classmethod
    def _chk_bitpix(klass, hdr, fix=False):
        rep = Report(HeaderDataError)
        code = int(hdr['datatype'])
        try:
            dt = klass._data_type_codes.dtype[code]
        except KeyError:
            rep.problem_level = 10
            rep.problem_msg = 'no valid datatype to fix bitpix'
            if fix:
                rep.fix_msg = 'no way to fix bitpix'
            return hdr, rep
        bitpix = dt.itemsize * 8
        if bitpix == 0 or bitpix == hdr['bitpix']:
            return hdr, rep
        rep.problem_level = 10
        rep.problem_msg = 'bitpix does not match datatype'
        if fix:
            hdr['bitpix'] = bitpix  # inplace modification
            rep.fix_msg = 'setting bitpix to match datatype'
        return hdr, rep

    @staticmethod
    def _chk_pixdims(hdr, fix=False):
        rep = Report(HeaderDataError)
        pixdims = hdr['pixdim']
        spat_dims = pixdims[1:4]
        if not np.any(spat_dims <= 0):
            return hdr, rep
        neg_dims = spat_dims < 0
        zero_dims = spat_dims == 0
        pmsgs = []
        fmsgs = []
        if np.any(zero_dims):
            level = 30
            pmsgs.append('pixdim[1,2,3] should be non-zero')
            if fix:
                spat_dims[zero_dims] = 1
                fmsgs.append('setting 0 dims to 1')
        if np.any(neg_dims):
            level = 35
            pmsgs.append('pixdim[1,2,3] should be positive')
            if fix:
                spat_dims = np.abs(spat_dims)
                fmsgs.append('setting to abs of pixdim values')
        rep.problem_level = level
        rep.problem_msg = ' and '.join(pmsgs)
        if fix:
            pixdims[1:4] = spat_dims
            rep.fix_msg = ' and '.join(fmsgs)
        return hdr, rep

    @classmethod
    def may_contain_header(klass, binaryblock):
        """True if `binaryblock` has ``sizeof_hdr`` 348 in either byte order"""
        if len(binaryblock) < klass.sizeof_hdr:
            return False
        hdr_struct = np.ndarray(shape=(), dtype=analyze_header_dtype,
                                buffer=binaryblock[:klass.sizeof_hdr])
        bs_hdr_struct = hdr_struct.byteswap()
        return klass.sizeof_hdr in (hdr_struct['sizeof_hdr'], bs_hdr_struct['sizeof_hdr'])


class Nifti1Header(AnalyzeHeader):
    """Class for NIfTI1 header

    The NIfTI1 header has many more coded fields than the simpler Analyze
    variants.  NIfTI1 headers also have extensions; these are skipped on
    read and not written.
    """

    # Copies of module level definitions
    template_dtype = header_dtype
    _field_recoders = {
        'datatype': data_type_codes,
        'qform_code': xform_codes,
        'sform_code': xform_codes,
    }

    # data scaling capabilities
    has_data_slope = True
    has_data_intercept = True

    # Extension class; should implement __call__ for construction, and
    # ``from_fileobj`` for reading from file

    # Signal whether this is single (header + data) file
    is_single = True

    # Default voxel data offsets for single and pair
    pair_vox_offset = 0
    single_vox_offset = 352

    # Magics for single and pair
    pair_magic = b'ni1'
    single_magic = b'n+1'

    # Quaternion threshold near 0, based on float32 precision
    quaternion_threshold = -np.finfo(np.float32).eps * 3

    def write_to(self, fileobj):
        """Write header, then the extension flag for single files

        The four bytes after a single file header flag extensions; they are
        written as zero, meaning no extensions.
        """
        super().write_to(fileobj)
        if self.is_single:
            fileobj.write(b'\x00' * 4)

    @classmethod
    def default_structarr(klass, endianness=None):
        """Create empty header binary block with given endianness"""
        hdr_data = super().default_structarr(endianness)
        if klass.is_single:
            hdr_data['magic'] = klass.single_magic
            hdr_data['vox_offset'] = klass.single_vox_offset
        else:
            hdr_data['magic'] = klass.pair_magic
        hdr_data['scl_slope'] = 1
        return hdr_data

    def get_qform_quaternion(self):
        """Compute quaternion from b, c, d of quaternion

        Fills a value by assuming this is a unit quaternion
        """
        hdr = self._structarr
        bcd = [hdr['quatern_b'], hdr['quatern_c'], hdr['quatern_d']]
        # Adjust threshold to precision of stored values in header
        return fillpositive(bcd, self.quaternion_threshold)

    def get_qfac(self):
        """qfac from ``pixdim[0]``; values other than -1 count as 1"""
        return -1.0 if self._structarr['pixdim'][0] == -1 else 1.0

    def get_qform(self, coded=False):
        """4x4 rotation and offset from the qform fields, without voxel sizes

        Parameters
        ----------
        coded : bool, optional
            If True, return {affine or None}, and qform code.  None means the
            qform code is 0.

        Examples
        --------
        >>> hdr = Nifti1Header()
        >>> np.all(hdr.get_qform() == np.eye(4))
        True
        """
        hdr = self._structarr
        code = int(hdr['qform_code'])
        if code == 0 and coded:
            return None, 0
        R = quat2mat(self.get_qform_quaternion())
        R[:, 2] *= self.get_qfac()
        out = np.eye(4)
        out[:3, :3] = R
        out[:3, 3] = [hdr['qoffset_x'], hdr['qoffset_y'], hdr['qoffset_z']]
        if coded:
            return out, code
        return out

    def set_qform(self, affine, code=None):
        """Set qform fields from a 4x4 rotation and offset

        Parameters
        ----------
        affine : None or (4, 4) array-like
            rotation (proper or improper) and offset; columns are normalized
            and made orthogonal.  None only sets the code.
        code : None, str or int, optional
            None keeps the current code, or gives 0 when `affine` is None.
        """
        hdr = self._structarr
        if code is None:
            code = 0 if affine is None else int(hdr['qform_code'])
        else:
            code = self._field_recoders['qform_code'][code]
        hdr['qform_code'] = code
        if affine is None:
            return
        raw = RawHeader(qform=affine)
        hdr['quatern_b'], hdr['quatern_c'], hdr['quatern_d'] = raw.get_qform_quaternion()
        hdr['qoffset_x'], hdr['qoffset_y'], hdr['qoffset_z'] = raw.get_qoffset()
        hdr['pixdim'][0] = raw.get_qfac()

    def get_sform(self, coded=False):
        """Return 4x4 affine matrix from sform parameters in header"""
        hdr = self._structarr
        code = int(hdr['sform_code'])
        if code == 0 and coded:
            return None, 0
        out = np.eye(4)
        out[0, :] = hdr['srow_x'][:]
        out[1, :] = hdr['srow_y'][:]
        out[2, :] = hdr['srow_z'][:]
        if coded:
            return out, code
        return out

    def set_sform(self, affine, code=None):
        """Set sform rows from 4x4 `affine`; `code` as for :meth:`set_qform`

        >>> hdr = Nifti1Header()
        >>> hdr.set_sform(np.diag([1, 2, 3, 1]), 'aligned')
        >>> hdr.get_value_label('sform_code')
        'aligned'
        """
        hdr = self._structarr
        if code is None:
            code = 0 if affine is None else int(hdr['sform_code'])
        else:
            code = self._field_recoders['sform_code'][code]
        hdr['sform_code'] = code
        if affine is None:
            return
        affine = np.asarray(affine)
        if not affine.shape == (4, 4):
            raise TypeError('Need 4x4 affine to set')
        hdr['srow_x'][:] = affine[0, :]
        hdr['srow_y'][:] = affine[1, :]
        hdr['srow_z'][:] = affine[2, :]

    def get_slope_inter(self):
        """Stored scale slope and intercept"""
        hdr = self._structarr
        return float(hdr['scl_slope']), float(hdr['scl_inter'])

    def set_slope_inter(self, slope, inter=0.0):
        self._structarr['scl_slope'] = slope
        self._structarr['scl_inter'] = inter

    def _set_raw_geometry(self, raw):
        hdr = self._structarr
        raw.qform_code = int(hdr['qform_code'])
        raw.sform_code = int(hdr['sform_code'])
        raw.qform = self.get_qform()
        raw.sform = self.get_sform()
        raw.pixdim[0] = self.get_qfac()
        raw.analyze_orient = None
        raw.xyzt_units = int(hdr['xyzt_units'])
        raw.scl_slope, raw.scl_inter = self.get_slope_inter()

    def _set_geometry_fields(self, raw):
        hdr = self._structarr
        self.set_qform(raw.qform, raw.qform_code)
        self.set_sform(raw.sform, raw.sform_code)
        hdr['xyzt_units'] = raw.xyzt_units
        self.set_slope_inter(raw.scl_slope, raw.scl_inter)
        hdr['vox_offset'] = self.single_vox_offset if self.is_single else self.pair_vox_offset

    ''' Checks only below here '''

    @classmethod
    def _get_checks(klass):
        # We need to return our own versions of - e.g. chk_datatype, to
        # pick up the Nifti datatypes from our class
        return (klass._chk_sizeof_hdr,
                klass._chk_datatype,
                klass._chk_bitpix,
                klass._chk_pixdims,
                klass._chk_qfac,
                klass._chk_magic,
                klass._chk_offset,
                klass._chk_qform_code,
                klass._chk_sform_code)

    @staticmethod
    def _chk_qfac(hdr, fix=False):
        rep = Report(HeaderDataError)
        if hdr['pixdim'][0] in (-1, 1):
            return hdr, rep
        rep.problem_level = 20
        rep.problem_msg = 'pixdim[0] (qfac) should be 1 (default) or -1'
        if fix:
            hdr['pixdim'][0] = 1
            rep.fix_msg = 'setting qfac to 1'
        return hdr, rep

    @staticmethod
    def _chk_magic(hdr, fix=False):
        rep = Report(HeaderDataError)
        magic = hdr['magic'].item()
        if magic in (hdr.pair_magic, hdr.single_magic):
            return hdr, rep
        rep.problem_msg = f'magic string {magic.decode("latin-1")!r} is not valid'
        rep.problem_level = 45
        if fix:
            rep.fix_msg = 'leaving as is, but future errors are likely'
        return hdr, rep

    @staticmethod
    def _chk_offset(hdr, fix=False):
        rep = Report(HeaderDataError)
        # for ease of later string formatting, use scalar of byte string
        magic = hdr['magic'].item()
        offset = hdr['vox_offset'].item()
        if offset == 0:
            return hdr, rep
        if magic == hdr.single_magic and offset < hdr.single_vox_offset:
            rep.problem_level = 40
            rep.problem_msg = 'vox offset %d too low for single file nifti1' % offset
            if fix:
                hdr['vox_offset'] = hdr.single_vox_offset
                rep.fix_msg = f'setting to minimum value of {hdr.single_vox_offset}'
            return hdr, rep
        if not offset % 16:
            return hdr, rep
        # SPM uses memory mapping to read the data, and
        # apparently this has to start on 16 byte boundaries
        rep.problem_msg = f'vox offset (={offset:g}) not divisible by 16, not SPM compatible'
        rep.problem_level = 30
        if fix:
            rep.fix_msg = 'leaving at current value'
        return hdr, rep

    @classmethod
    def _chk_qform_code(klass, hdr, fix=False):
        return klass._chk_xform_code('qform_code', hdr, fix)

    @classmethod
    def _chk_sform_code(klass, hdr, fix=False):
        return klass._chk_xform_code('sform_code', hdr, fix)

    @classmethod
    def _chk_xform_code(klass, code_type, hdr, fix):
        # utility method for sform and qform codes
        rep = Report(HeaderDataError)
        code = int(hdr[code_type])
        recoder = klass._field_recoders[code_type]
        if code in recoder.value_set():
            return hdr, rep
        rep.problem_level = 30
        rep.problem_msg = '%s %d not valid' % (code_type, code)
        if fix:
            hdr[code_type] = 0
            rep.fix_msg = 'setting to 0'
        return hdr, rep

    @classmethod
    def may_contain_header(klass, binaryblock):
        """True if `binaryblock` has a NIfTI-1 magic string"""
        if len(binaryblock) < klass.sizeof_hdr:
            return False
        hdr_struct = np.ndarray(shape=(), dtype=header_dtype,
                                buffer=binaryblock[:klass.sizeof_hdr])
        return hdr_struct['magic'].item() in (klass.pair_magic, klass.single_magic)


class Nifti1PairHeader(Nifti1Header):
    """Class for NIfTI1 pair header"""

    # Signal whether this is single (header + data) file
    is_single = False
