# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""In-memory header record passed between file I/O and geometry conversion

:class:`RawHeader` holds the geometric fields of a NIfTI-1 or Analyze header
as plain Python and numpy values, independent of byte order or on-disk
layout.  The binary codec lives in :mod:`niftigeom.nifti1`.

The ``qform`` matrix is the single record of the quaternion transform.  It
holds the rotation (determinant +1 or -1) and the offset, without voxel
sizes.  Quaternion parameters come from the matrix when asked for, so they
cannot drift out of step with it.
"""

import numpy as np

from .affines import from_matvec, invert_affine, orthogonalize, to_matvec
from .quaternions import fillpositive, mat2quat, quat2mat


class HeaderDataError(Exception):
    """Class to indicate error in getting or setting header data"""


class ImageFileError(Exception):
    pass


MAX_RANK = 7


class RawHeader:
    """Geometric fields of an image header

    Parameters
    ----------
    shape : sequence of int, optional
        voxel counts; the length is the rank (1 to 7)
    pixdim : None or sequence of float, optional
        spacing for each axis in `shape`; None gives 1 for each axis
    qform_code, sform_code : int, optional
        transform authority codes; 0 means the transform is absent
    qform : None or (4, 4) array-like, optional
        rotation plus offset, no voxel sizes; None gives the identity
    sform : None or (4, 4) array-like, optional
        voxel to mm affine; None gives the identity
    analyze_orient : None or int, optional
        legacy Analyze orientation byte; None where the file has no such field
    xyzt_units : int, optional
        packed units byte
    scl_slope, scl_inter : float, optional
    datatype : int, optional
        on-disk datatype code
    bitpix : int, optional
        bits per voxel
    descrip : str, optional
    """

    def __init__(self,
                 shape=(1,),
                 pixdim=None,
                 qform_code=0,
                 sform_code=0,
                 qform=None,
                 sform=None,
                 analyze_orient=None,
                 xyzt_units=0,
                 scl_slope=1.0,
                 scl_inter=0.0,
                 datatype=16,
                 bitpix=32,
                 descrip=''):
        self.dim = np.ones(8, dtype=np.int64)
        self.pixdim = np.ones(8, dtype=np.float64)
        self.set_data_shape(shape)
        if pixdim is not None:
            self.set_zooms(pixdim)
        self.qform_code = int(qform_code)
        self.sform_code = int(sform_code)
        self.qform = np.eye(4) if qform is None else np.array(qform, dtype=np.float64)
        self.sform = np.eye(4) if sform is None else np.array(sform, dtype=np.float64)
        self.analyze_orient = analyze_orient
        self.xyzt_units = int(xyzt_units)
        self.scl_slope = float(scl_slope)
        self.scl_inter = float(scl_inter)
        self.datatype = int(datatype)
        self.bitpix = int(bitpix)
        self.descrip = descrip
        self.data = None

    @property
    def rank(self):
        return int(self.dim[0])

    @property
    def bytes_per_voxel(self):
        return self.bitpix // 8

    def get_data_shape(self):
        """Voxel counts for the axes in use

        >>> RawHeader((3, 4, 5)).get_data_shape()
        (3, 4, 5)
        """
        return tuple(int(d) for d in self.dim[1:self.rank + 1])

    def set_data_shape(self, shape):
        """Set rank and voxel counts from `shape`

        Axes after the rank get voxel count 1.
        """
        shape = tuple(shape)
        ndims = len(shape)
        if not 1 <= ndims <= MAX_RANK:
            raise HeaderDataError(f'Rank should be 1 to {MAX_RANK}, not {ndims}')
        values = np.array(shape)
        if np.any(values < 0) or not np.all(values == np.round(values)):
            raise HeaderDataError(f'Shape {shape} should be non-negative integers')
        self.dim[:] = 1
        self.dim[0] = ndims
        self.dim[1:ndims + 1] = values

    def get_zooms(self):
        """Raw spacing for the axes in use"""
        return tuple(float(z) for z in self.pixdim[1:self.rank + 1])

    def set_zooms(self, zooms):
        zooms = tuple(zooms)
        if len(zooms) != self.rank:
            raise HeaderDataError(f'Expecting {self.rank} zoom values for rank {self.rank}')
        self.pixdim[1:self.rank + 1] = zooms

    def get_qform_quaternion(self):
        """Quaternion ``(b, c, d)`` of the qform rotation

        The rotation comes from the normalized columns of the qform, with the
        third column negated when the determinant is negative (see
        :meth:`get_qfac`).  Non-orthogonal matrices give the quaternion of
        the nearest rotation.
        """
        R = self._proper_rotation()
        quat = mat2quat(R)
        return tuple(float(v) for v in quat[1:])

    def get_qoffset(self):
        """Offset ``(x, y, z)`` of the qform"""
        return tuple(float(v) for v in self.qform[:3, 3])

    def get_qfac(self):
        """Handedness factor: -1 if the qform rotation is improper, else 1

        >>> RawHeader(qform=np.diag([1, 1, -1, 1])).get_qfac()
        -1.0
        """
        M = self.qform[:3, :3]
        return -1.0 if np.linalg.det(M) < 0 else 1.0

    def set_qform_quaternion(self, bcd, qoffset=(0, 0, 0), qfac=1.0, w2_thresh=None):
        """Set the qform from quaternion parameters

        Parameters
        ----------
        bcd : sequence of 3 floats
            ``quatern_b, quatern_c, quatern_d``
        qoffset : sequence of 3 floats, optional
        qfac : {1, -1}, optional
            -1 negates the third column of the rotation
        w2_thresh : None or float, optional
            passed to :func:`niftigeom.quaternions.fillpositive`

        Examples
        --------
        >>> hdr = RawHeader()
        >>> hdr.set_qform_quaternion((1, 0, 0), (10, 20, 30))
        >>> np.allclose(hdr.qform, [[1, 0, 0, 10], [0, -1, 0, 20], [0, 0, -1, 30], [0, 0, 0, 1]])
        True
        """
        quat = fillpositive(np.asarray(bcd, dtype=np.float64), w2_thresh)
        R = quat2mat(quat).astype(np.float64)
        if qfac not in (1, -1):
            raise HeaderDataError(f'qfac should be 1 or -1, not {qfac}')
        R[:, 2] *= qfac
        self.qform = from_matvec(R, np.asarray(qoffset, dtype=np.float64))

    def _proper_rotation(self):
        M, _ = to_matvec(self.qform)
        M = np.array(M, dtype=np.float64)
        if np.linalg.det(M) < 0:
            M[:, 2] *= -1
        return orthogonalize(M.T).T

    def get_qform_inverse(self):
        """Inverse of the qform; raises ``DegenerateGeometryError`` if singular"""
        return invert_affine(self.qform)

    def get_sform_inverse(self):
        """Inverse of the sform; raises ``DegenerateGeometryError`` if singular"""
        return invert_affine(self.sform)

    def get_scaled_qform(self):
        """qform with voxel sizes, as stored in files read by other tools

        >>> hdr = RawHeader((2, 3, 4), pixdim=(2, 3, 4))
        >>> np.diag(hdr.get_scaled_qform()).tolist()
        [2.0, 3.0, 4.0, 1.0]
        """
        zooms = np.ones(3)
        n = min(self.rank, 3)
        zooms[:n] = np.abs(self.pixdim[1:n + 1])
        zooms[zooms == 0] = 1
        M, t = to_matvec(self.qform)
        return from_matvec(M * zooms, t)

    def copy(self):
        """Deep copy of header, including any data array"""
        other = self.__class__.__new__(self.__class__)
        other.update_from(self)
        return other

    def update_from(self, other):
        """Copy every field of `other` into this header"""
        self.dim = np.array(other.dim, dtype=np.int64)
        self.pixdim = np.array(other.pixdim, dtype=np.float64)
        self.qform_code = int(other.qform_code)
        self.sform_code = int(other.sform_code)
        self.qform = np.array(other.qform, dtype=np.float64)
        self.sform = np.array(other.sform, dtype=np.float64)
        self.analyze_orient = other.analyze_orient
        self.xyzt_units = int(other.xyzt_units)
        self.scl_slope = float(other.scl_slope)
        self.scl_inter = float(other.scl_inter)
        self.datatype = int(other.datatype)
        self.bitpix = int(other.bitpix)
        self.descrip = other.descrip
        self.data = None if other.data is None else np.array(other.data)

    def __eq__(self, other):
        if not isinstance(other, RawHeader):
            return NotImplemented
        return (
            np.array_equal(self.dim, other.dim)
            and np.array_equal(self.pixdim, other.pixdim)
            and self.qform_code == other.qform_code
            and self.sform_code == other.sform_code
            and np.array_equal(self.qform, other.qform)
            and np.array_equal(self.sform, other.sform)
            and self.analyze_orient == other.analyze_orient
            and self.xyzt_units == other.xyzt_units
            and self.scl_slope == other.scl_slope
            and self.scl_inter == other.scl_inter
            and self.datatype == other.datatype
            and self.bitpix == other.bitpix
            and self.descrip == other.descrip
        )

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __repr__(self):
        return (f'{self.__class__.__name__}(shape={self.get_data_shape()}, '
                f'pixdim={self.get_zooms()}, qform_code={self.qform_code}, '
                f'sform_code={self.sform_code}, datatype={self.datatype})')
