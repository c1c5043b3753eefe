# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Code tables and array file helpers for analyze-like headers"""

import sys

import numpy as np

sys_is_le = sys.byteorder == 'little'
native_code = '<' if sys_is_le else '>'
swapped_code = '>' if sys_is_le else '<'

_endian_codes = (  # numpy code, aliases
    ('<', 'little', 'l', 'le', 'L', 'LE'),
    ('>', 'big', 'BIG', 'b', 'be', 'B', 'BE'),
    (native_code, 'native', 'n', 'N', '=', '|', 'i', 'I'),
    (swapped_code, 'swapped', 's', 'S', '!'),
)


class Recoder:
    """Map codes and their aliases onto one or more canonical columns

    Each entry in `codes` is a sequence of equivalent values; the column names
    in `fields` give access to the value in that column for any alias.

    >>> units = Recoder(((2, 'mm', 'millimeter'), (8, 'sec', 'second')),
    ...                 fields=('code', 'label'))
    >>> units.code['millimeter']
    2
    >>> units.label[8]
    'sec'
    >>> units['second']
    8
    """

    def __init__(self, codes, fields=('code',), map_maker=dict):
        """Create recoder

        Parameters
        ----------
        codes : sequence of sequences
            Each sequence defines values that are equivalent; it should be at
            least as long as `fields`
        fields : sequence of str, optional
            names of the columns
        map_maker : callable, optional
            constructor for the mapping holding each column.  Needs only
            ``__getitem__, __setitem__, keys, values``.
        """
        self.fields = tuple(fields)
        self.field1 = {}  # placeholder for check below
        for name in fields:
            if name in self.__dict__:
                raise KeyError(f'Input name {name} already in object dict')
            self.__dict__[name] = map_maker()
        self.field1 = self.__dict__[fields[0]]
        self.add_codes(codes)

    def add_codes(self, code_syn_seqs):
        """Add sequences of equivalent values

        After the call, ``self.<field>[alias] == seq[field_index]`` for every
        alias in each sequence ``seq``.
        """
        for code_syns in code_syn_seqs:
            for alias in code_syns:
                for field_ind, field_name in enumerate(self.fields):
                    self.__dict__[field_name][alias] = code_syns[field_ind]

    def __getitem__(self, key):
        """Value in the first column for `key`"""
        return self.field1[key]

    def __contains__(self, key):
        try:
            self.field1[key]
        except KeyError:
            return False
        return True

    def keys(self):
        """All codes and aliases"""
        return self.field1.keys()

    def value_set(self, name=None):
        """Set of values in column `name` (default first column)

        >>> codes = ((1, 'one'), (2, 'two'), (1, 'repeat value'))
        >>> Recoder(codes).value_set() == {1, 2}
        True
        """
        d = self.field1 if name is None else self.__dict__[name]
        return set(d.values())


endian_codes = Recoder(_endian_codes)


class DtypeMapper:
    """Mapping that also finds numpy dtype keys by equality

    dtypes that compare equal need not hash equal, so a plain dict can miss a
    dtype key.  On a failed lookup with a dtype key, compare against all the
    dtype keys stored so far.
    """

    def __init__(self):
        self._dict = {}
        self._dtype_keys = []

    def keys(self):
        return self._dict.keys()

    def values(self):
        return self._dict.values()

    def __setitem__(self, key, value):
        self._dict[key] = value
        if hasattr(key, 'subdtype'):
            self._dtype_keys.append(key)

    def __getitem__(self, key):
        try:
            return self._dict[key]
        except KeyError:
            pass
        if hasattr(key, 'subdtype'):
            for dt in self._dtype_keys:
                if key == dt:
                    return self._dict[dt]
        raise KeyError(key)


def pretty_mapping(mapping, getterfunc=None):
    """Make string listing `mapping` keys and values in aligned columns

    Parameters
    ----------
    mapping : mapping
       iterating over keys
    getterfunc : None or callable, optional
       ``getterfunc(mapping, key)`` returns the value to print for `key`.
       Default is ``mapping[key]``.

    Examples
    --------
    >>> print(pretty_mapping({'qform_code': 1, 'magic': b'n+1'}))
    qform_code  : 1
    magic       : b'n+1'
    """
    if getterfunc is None:
        getterfunc = lambda obj, key: obj[key]
    mxlen = max(len(str(name)) for name in mapping)
    fmt = '%%-%ds  : %%s' % mxlen
    out = []
    for name in mapping:
        value = getterfunc(mapping, name)
        out.append(fmt % (name, value))
    return '\n'.join(out)


def make_dt_codes(codes_seqs):
    """Create datatype code Recoder from (code, label, numpy type, ...) rows

    Parameters
    ----------
    codes_seqs : sequence of sequences
       each of length 3 or 4 (all the same length): datatype code, label,
       numpy type and, optionally, the NIfTI string for the code (e.g.
       "NIFTI_TYPE_FLOAT32").

    Returns
    -------
    rec : ``Recoder`` instance
       with columns ``code, label, type, [niistring,] dtype, sw_dtype``.
       Native and byte swapped versions of each dtype are aliases of the
       code.
    """
    fields = ['code', 'label', 'type']
    len0 = len(codes_seqs[0])
    if len0 not in (3, 4):
        raise ValueError('Sequences must be length 3 or 4')
    if len0 == 4:
        fields.append('niistring')
    dt_codes = []
    for seq in codes_seqs:
        if len(seq) != len0:
            raise ValueError('Sequences must all have the same length')
        this_dt = np.dtype(seq[2])
        code_syns = list(seq) + [this_dt, this_dt.newbyteorder(swapped_code)]
        dt_codes.append(code_syns)
    return Recoder(dt_codes, fields + ['dtype', 'sw_dtype'], DtypeMapper)


def array_from_file(shape, in_dtype, infile, offset=0, order='F'):
    """Read array of `shape` and `in_dtype` from `infile` starting at `offset`

    Returns a writeable array that owns its memory, so the caller may rescale
    it in place after `infile` is closed.

    Examples
    --------
    >>> from io import BytesIO
    >>> bio = BytesIO(b'\\x00' * 4 + np.arange(6, dtype='<i2').tobytes())
    >>> array_from_file((2, 3), np.dtype('<i2'), bio, offset=4)
    array([[0, 2, 4],
           [1, 3, 5]], dtype=int16)
    """
    in_dtype = np.dtype(in_dtype)
    if offset:
        infile.seek(offset)
    n_bytes = int(np.prod(shape)) * in_dtype.itemsize
    data_bytes = infile.read(n_bytes)
    n_read = len(data_bytes)
    if n_read != n_bytes:
        fname = getattr(infile, 'name', 'object')
        raise OSError(f'Expected {n_bytes} bytes, got {n_read} bytes from {fname}\n'
                      ' - could the file be damaged?')
    arr = np.ndarray(shape, in_dtype, buffer=data_bytes, order=order)
    return arr.copy(order=order)


def array_to_file(data, fileobj, out_dtype=None, offset=0, order='F'):
    """Write `data` to `fileobj` at `offset` as `out_dtype`, in `order`

    Pads with zeros from the current position up to `offset` if the file
    object cannot seek forward past its end.

    Examples
    --------
    >>> from io import BytesIO
    >>> bio = BytesIO()
    >>> array_to_file(np.array([[1, 2], [3, 4]]), bio, np.dtype('<u1'))
    >>> bio.getvalue()
    b'\\x01\\x03\\x02\\x04'
    """
    data = np.asanyarray(data)
    if out_dtype is None:
        out_dtype = data.dtype
    out_dtype = np.dtype(out_dtype)
    pos = fileobj.tell()
    if offset > pos:
        fileobj.write(b'\x00' * (offset - pos))
    elif offset < pos:
        fileobj.seek(offset)
    fileobj.write(data.astype(out_dtype, copy=False).tobytes(order=order))
