# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Classify image filenames and make header / image filename pairs

``.nii`` and ``.nii.gz`` name single files holding header and data.
``.hdr`` and ``.img`` name one of a header / image pair.  Extensions match
without regard to case.
"""
from __future__ import annotations

import os
import pathlib
import typing as ty

if ty.TYPE_CHECKING:  # pragma: no cover
    FileSpec = ty.Union[str, os.PathLike]
    ExtensionSpec = tuple[str, ty.Optional[str]]


class InvalidFilenameError(Exception):
    pass


#: extensions of single files, with the compressed suffixes allowed after them
SINGLE_EXTS = ('.nii',)
SINGLE_SUFFIXES = ('.gz',)
#: (file type, extension) for header / image pairs
PAIR_TYPES_EXTS = (('header', '.hdr'), ('image', '.img'))


def _stringify_path(filepath_or_buffer: FileSpec) -> str:
    """Attempt to convert a path-like object to a string.

    Parameters
    ----------
    filepath_or_buffer : str or os.PathLike

    Returns
    -------
    str_filepath_or_buffer : str
    """
    return pathlib.Path(filepath_or_buffer).expanduser().as_posix()


def types_filenames(
    template_fname: FileSpec,
    types_exts: ty.Sequence[ExtensionSpec] = PAIR_TYPES_EXTS,
    trailing_suffixes: ty.Sequence[str] = (),
) -> dict[str, str]:
    """Return filenames with standard extensions from template name

    The typical case is returning image and header filenames for a pair,
    from either of the two filenames.  The case of the found extension
    carries over to the other extensions when it is all upper or all lower
    case.

    Parameters
    ----------
    template_fname : str or os.PathLike
       template filename; must have one of the extensions in `types_exts`.
    types_exts : sequence of sequences, optional
       sequence of (name, extension) str sequences defining type to
       extension mapping.
    trailing_suffixes : sequence of strings, optional
        suffixes that should be ignored when looking for
        extensions

    Returns
    -------
    types_fnames : dict
       dict with types as keys, and generated filenames as values.

    Examples
    --------
    >>> tfns = types_filenames('/path/test.IMG')
    >>> tfns == {'header': '/path/test.HDR', 'image': '/path/test.IMG'}
    True
    """
    template_fname = _stringify_path(template_fname)
    filename, found_ext, ignored, guessed_name = parse_filename(
        template_fname, types_exts, trailing_suffixes
    )
    if guessed_name is None:
        raise InvalidFilenameError(
            f'File extension "{found_ext}" was not in '
            f'expected list: {[e for t, e in types_exts]}'
        )
    proc_ext: ty.Callable[[str], str] = lambda s: s
    if found_ext == found_ext.upper():
        proc_ext = str.upper
    elif found_ext == found_ext.lower():
        proc_ext = str.lower
    tfns = {}
    for name, ext in types_exts:
        fname = filename + proc_ext(ext)
        if ignored:
            fname += ignored
        tfns[name] = fname
    return tfns


def parse_filename(
    filename: FileSpec,
    types_exts: ty.Sequence[ExtensionSpec],
    trailing_suffixes: ty.Sequence[str],
) -> tuple[str, str, ty.Optional[str], ty.Optional[str]]:
    """Split filename into fileroot, extension, trailing suffix; guess type.

    Matching is case-insensitive.

    Returns
    -------
    pth : str
       path with any matching extensions or trailing suffixes removed
    ext : str
       If there were any matching extensions, in `types_exts` return
       that; otherwise return extension derived from
       ``os.path.splitext``.
    trailing : str
       If there were any matching `trailing_suffixes` return that
       matching suffix, otherwise None
    guessed_type : str
       If we found a matching extension in `types_exts` return the
       corresponding ``type``

    Examples
    --------
    >>> types_exts = (('t1', 'ext1'),('t2', 'ext2'))
    >>> parse_filename('/path/fname.funny', types_exts, ())
    ('/path/fname', '.funny', None, None)
    >>> parse_filename('/path/fnameext2.gz', types_exts, ('.gz',))
    ('/path/fname', 'ext2', '.gz', 't2')
    """
    filename = _stringify_path(filename)
    ignored = None
    for ext in trailing_suffixes:
        if _iendswith(filename, ext):
            extpos = -len(ext)
            ignored = filename[extpos:]
            filename = filename[:extpos]
            break
    guessed_name = None
    found_ext = None
    for name, type_ext in types_exts:
        if type_ext and _iendswith(filename, type_ext):
            extpos = -len(type_ext)
            found_ext = filename[extpos:]
            filename = filename[:extpos]
            guessed_name = name
            break
    else:
        filename, found_ext = os.path.splitext(filename)
    return (filename, found_ext, ignored, guessed_name)


def _iendswith(whole: str, end: str) -> bool:
    return whole.lower().endswith(end.lower())


def splitext_addext(
    filename: FileSpec,
    addexts: ty.Sequence[str] = SINGLE_SUFFIXES,
) -> tuple[str, str, str]:
    """Split ``/pth/fname.ext.gz`` into ``/pth/fname, .ext, .gz``

    where ``.gz`` may be any of passed `addext` trailing suffixes.

    Examples
    --------
    >>> splitext_addext('fname.ext.gz')
    ('fname', '.ext', '.gz')
    >>> splitext_addext('fname.ext')
    ('fname', '.ext', '')
    """
    filename = _stringify_path(filename)
    for ext in addexts:
        if _iendswith(filename, ext):
            extpos = -len(ext)
            filename, addext = filename[:extpos], filename[extpos:]
            break
    else:
        addext = ''
    # os.path.splitext() behaves unexpectedly when filename starts with '.'
    extpos = filename.rfind('.')
    if extpos < 0 or filename.strip('.') == '':
        root, ext = filename, ''
    else:
        root, ext = filename[:extpos], filename[extpos:]
    return (root, ext, addext)


def filename_kind(filename: FileSpec) -> str:
    """'single' for ``.nii`` / ``.nii.gz``, 'pair' for ``.hdr`` / ``.img``

    Raises
    ------
    InvalidFilenameError
        for any other extension, a compressed suffix on a pair filename, or
        an empty file stem.

    Examples
    --------
    >>> filename_kind('brain.NII.gz')
    'single'
    >>> filename_kind('/data/brain.img')
    'pair'
    """
    root, ext, addext = splitext_addext(filename)
    if not ext:
        raise InvalidFilenameError(f'No file extension in "{filename}"')
    if os.path.basename(root) in ('', '.'):
        raise InvalidFilenameError(f'Empty file name before extension in "{filename}"')
    ext = ext.lower()
    if ext in SINGLE_EXTS:
        return 'single'
    if ext in [e for _, e in PAIR_TYPES_EXTS] and not addext:
        return 'pair'
    raise InvalidFilenameError(
        f'File extension "{ext}{addext}" is not one of .nii, .nii.gz, .hdr, .img')


def is_complete_filename(filename: FileSpec) -> bool:
    """True if `filename` has an image extension and a non-empty stem

    >>> is_complete_filename('scan.nii.gz'), is_complete_filename('.nii')
    (True, False)
    """
    try:
        filename_kind(filename)
    except InvalidFilenameError:
        return False
    return True
