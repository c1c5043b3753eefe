# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Binary header blocks as wrapped numpy structured arrays

:class:`WrapStruct` holds a zero-dimensional structured array with one field
per header field, and gives:

* mapping access to the fields (``hdr['dim']``, ``hdr.keys()``)
* ``from_fileobj`` and ``write_to`` for reading and writing the raw block
* endianness guessing on read
* header checks with fixes, run on construction (see
  :mod:`niftigeom.batteryrunners`)

:class:`LabeledWrapStruct` adds printing of coded fields by their labels.

Checks run when a header is built from a binary block, unless ``check=False``.
Problems at or above :attr:`niftigeom.imageglobals.error_level` raise; all
problems are logged to :attr:`niftigeom.imageglobals.logger`.
"""
import numpy as np

from . import imageglobals
from .batteryrunners import BatteryRunner
from .volumeutils import endian_codes, native_code, pretty_mapping, swapped_code


class WrapStructError(Exception):
    pass


class WrapStruct:
    # placeholder datatype
    template_dtype = np.dtype([('integer', 'i2')])

    def __init__(self, binaryblock=None, endianness=None, check=True):
        """Initialize from binary data block

        Parameters
        ----------
        binaryblock : {None, bytes} optional
            binary block to set into object.  None gives the default block.
        endianness : {None, '<', '>', other endian code} optional
            endianness of `binaryblock`; guessed from the data if None.
        check : bool, optional
            Whether to run the header checks on `binaryblock`.

        Examples
        --------
        >>> wstr = WrapStruct()
        >>> wstr.endianness == native_code
        True
        >>> wstr['integer'] = 1
        >>> int(wstr['integer'])
        1
        """
        if binaryblock is None:
            self._structarr = self.__class__.default_structarr(endianness)
            return
        if len(binaryblock) != self.template_dtype.itemsize:
            raise WrapStructError('Binary block is wrong size')
        wstr = np.ndarray(shape=(), dtype=self.template_dtype, buffer=binaryblock)
        if endianness is None:
            endianness = self.__class__.guessed_endian(wstr)
        else:
            endianness = endian_codes[endianness]
        if endianness != native_code:
            dt = self.template_dtype.newbyteorder(endianness)
            wstr = np.ndarray(shape=(), dtype=dt, buffer=binaryblock)
        self._structarr = wstr.copy()
        if check:
            self.check_fix()

    @classmethod
    def from_fileobj(klass, fileobj, endianness=None, check=True):
        """Read block from `fileobj` at current position"""
        raw_str = fileobj.read(klass.template_dtype.itemsize)
        return klass(raw_str, endianness, check)

    @property
    def binaryblock(self):
        """Header contents as bytes"""
        return self._structarr.tobytes()

    def write_to(self, fileobj):
        """Write binary block to `fileobj` at current position"""
        fileobj.write(self.binaryblock)

    @property
    def endianness(self):
        """Endian code of the contained binary data (read only)"""
        if self._structarr.dtype.isnative:
            return native_code
        return swapped_code

    def copy(self):
        return self.__class__(self.binaryblock, self.endianness, check=False)

    def __eq__(self, other):
        """Equal if binary blocks match after allowing for byte order"""
        this_end = self.endianness
        this_bb = self.binaryblock
        try:
            other_end = other.endianness
            other_bb = other.binaryblock
        except AttributeError:
            return False
        if this_end == other_end:
            return this_bb == other_bb
        other_bb = other._structarr.byteswap().tobytes()
        return this_bb == other_bb

    def __ne__(self, other):
        return not self == other

    def __getitem__(self, item):
        return self._structarr[item]

    def __setitem__(self, item, value):
        self._structarr[item] = value

    def __iter__(self):
        return iter(self.keys())

    def keys(self):
        return list(self.template_dtype.names)

    def values(self):
        data = self._structarr
        return [data[key] for key in self.template_dtype.names]

    def items(self):
        return zip(self.keys(), self.values())

    def get(self, k, d=None):
        return self._structarr[k] if k in self.keys() else d

    def check_fix(self, logger=None, error_level=None):
        """Run checks with fixes, logging and maybe raising

        Parameters
        ----------
        logger : None or logging.Logger
            Default is :attr:`niftigeom.imageglobals.logger`
        error_level : None or int
            Problems with level >= `error_level` raise.  Default is
            :attr:`niftigeom.imageglobals.error_level`
        """
        if logger is None:
            logger = imageglobals.logger
        if error_level is None:
            error_level = imageglobals.error_level
        battrun = BatteryRunner(self.__class__._get_checks())
        self, reports = battrun.check_fix(self)
        for report in reports:
            report.log_raise(logger, error_level)

    @classmethod
    def guessed_endian(klass, mapping):
        """Guess intended endianness from field values in `mapping`"""
        raise NotImplementedError

    @classmethod
    def default_structarr(klass, endianness=None):
        """Return zeroed structured array with given endianness"""
        dt = klass.template_dtype
        if endianness is not None:
            endianness = endian_codes[endianness]
            dt = dt.newbyteorder(endianness)
        return np.zeros((), dtype=dt)

    @property
    def structarr(self):
        """Structured array holding the fields (read only)"""
        return self._structarr

    def __str__(self):
        summary = f"{self.__class__} object, endian='{self.endianness}'"
        return '\n'.join([summary, pretty_mapping(self)])

    @classmethod
    def _get_checks(klass):
        """Sequence of check functions for this class"""
        return ()


class LabeledWrapStruct(WrapStruct):
    """WrapStruct with coded fields that print as labels"""

    _field_recoders = {}

    def get_value_label(self, fieldname):
        """Label for the code in coded field `fieldname`

        Raises
        ------
        ValueError
            if `fieldname` is not a coded field.
        """
        if fieldname not in self._field_recoders:
            raise ValueError(f'{fieldname} not a coded field')
        code = int(self._structarr[fieldname])
        try:
            return self._field_recoders[fieldname].label[code]
        except KeyError:
            return f'<unknown code {code}>'

    def __str__(self):
        summary = f"{self.__class__} object, endian='{self.endianness}'"

        def _getter(obj, key):
            try:
                return obj.get_value_label(key)
            except ValueError:
                return obj[key]

        return '\n'.join([summary, pretty_mapping(self, _getter)])
