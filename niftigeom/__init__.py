# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Geometry of NIfTI-1 and Analyze images

Converts between the transforms, units and orientation codes stored in
NIfTI-1 / Analyze 7.5 headers and a direction cosine model of image geometry
in LPS space, and applies the stored intensity scaling.

Quickstart
==========

::

   import niftigeom as ng

   geometry, data = ng.load('my_file.nii.gz')
   print(geometry.direction, geometry.origin, geometry.spacing)
   ng.save(geometry, data, 'my_file_copy.hdr')
"""

__version__ = '1.0.0'

# module imports
from . import imageglobals, orientations, units
from .affines import AffineError, DegenerateGeometryError
from .datatypes import UnsupportedComponentTypeError, UnsupportedPixelLayoutError
from .filename_parser import InvalidFilenameError
from .geometry import CanonicalGeometry
from .geometryio import NiftiGeometryIO, load, save
from .loadsave import HeaderReadFailure, read_header, write_image
from .rawheader import HeaderDataError, ImageFileError, RawHeader
from .wrapstruct import WrapStructError


def test(label=None, verbose=1, extra_argv=None, doctests=False):
    """Run tests for niftigeom using pytest

    Parameters
    ----------
    label : None
        Unused.
    verbose: int, optional
        Verbosity value for test outputs. Positive values increase verbosity, and
        negative values decrease it. Default is 1.
    extra_argv : list, optional
        List with any extra arguments to pass to pytest.
    doctests: bool, optional
        If True, run doctests in module. Default is False.

    Returns
    -------
    code : ExitCode
        Returns the result of running the tests as a ``pytest.ExitCode`` enum
    """
    import pytest

    args = []
    if label is not None:
        raise NotImplementedError('Labels cannot be set at present')
    verbose = int(verbose)
    if verbose > 0:
        args.append('-' + 'v' * verbose)
    elif verbose < 0:
        args.append('-' + 'q' * -verbose)
    if extra_argv:
        args.extend(extra_argv)
    if doctests:
        args.append('--doctest-modules')
    args.extend(['--pyargs', 'niftigeom'])
    return pytest.main(args=args)
