# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Image geometry in physical LPS space"""

import numpy as np

from .affines import is_orthonormal
from .datatypes import PIXEL_LAYOUTS

MAX_RANK = 7


class CanonicalGeometry:
    """Voxel grid, spacing, direction cosines and value scaling of an image

    Parameters
    ----------
    dimensions : sequence of int
        voxel counts; the length gives the rank (1 to 7)
    spacing : None or sequence of float, optional
        distance between voxel centers along each axis, mm for axes 0-2 and
        seconds for axis 3.  None gives 1 for each axis.
    direction : None or (3, 3) array-like, optional
        columns are the unit vectors of the first three voxel axes in LPS
        space.  None gives the identity.
    origin : None or sequence of float, optional
        LPS position of the first voxel, ``min(rank, 3)`` values.  None gives
        zeros.
    rescale_slope, rescale_intercept : float, optional
    component_type : str, optional
        see :data:`niftigeom.datatypes.COMPONENT_DTYPES`, or 'unknown'
    pixel_layout : str, optional
        one of :data:`niftigeom.datatypes.PIXEL_LAYOUTS`
    n_components : int, optional
    metadata : None or dict, optional
    """

    def __init__(self,
                 dimensions,
                 spacing=None,
                 direction=None,
                 origin=None,
                 rescale_slope=1.0,
                 rescale_intercept=0.0,
                 component_type='unknown',
                 pixel_layout='scalar',
                 n_components=1,
                 metadata=None):
        self.dimensions = tuple(int(d) for d in dimensions)
        rank = len(self.dimensions)
        if not 1 <= rank <= MAX_RANK:
            raise ValueError(f'Rank should be 1 to {MAX_RANK}, not {rank}')
        if spacing is None:
            spacing = np.ones(rank)
        self.spacing = np.array(spacing, dtype=np.float64)
        if self.spacing.shape != (rank,):
            raise ValueError(f'Need {rank} spacing values, got {self.spacing.shape}')
        if direction is None:
            direction = np.eye(3)
        self.direction = np.array(direction, dtype=np.float64)
        if self.direction.shape != (3, 3):
            raise ValueError(f'Direction should be 3x3, not {self.direction.shape}')
        n_origin = min(rank, 3)
        if origin is None:
            origin = np.zeros(n_origin)
        self.origin = np.array(origin, dtype=np.float64)
        if self.origin.shape != (n_origin,):
            raise ValueError(f'Need {n_origin} origin values, got {self.origin.shape}')
        if pixel_layout not in PIXEL_LAYOUTS:
            raise ValueError(f'Pixel layout should be one of {PIXEL_LAYOUTS}')
        self.rescale_slope = float(rescale_slope)
        self.rescale_intercept = float(rescale_intercept)
        self.component_type = component_type
        self.pixel_layout = pixel_layout
        self.n_components = int(n_components)
        self.metadata = {} if metadata is None else dict(metadata)

    @property
    def rank(self):
        return len(self.dimensions)

    def is_orthogonal(self, atol=1e-6):
        """True if `direction` is orthonormal and non-singular

        >>> CanonicalGeometry((2, 2, 2)).is_orthogonal()
        True
        >>> CanonicalGeometry((2, 2), direction=np.zeros((3, 3))).is_orthogonal()
        False
        """
        return is_orthonormal(self.direction, atol)

    def copy(self):
        return self.__class__(
            self.dimensions,
            self.spacing,
            self.direction,
            self.origin,
            self.rescale_slope,
            self.rescale_intercept,
            self.component_type,
            self.pixel_layout,
            self.n_components,
            self.metadata,
        )

    def __eq__(self, other):
        if not isinstance(other, CanonicalGeometry):
            return NotImplemented
        return (
            self.dimensions == other.dimensions
            and np.array_equal(self.spacing, other.spacing)
            and np.array_equal(self.direction, other.direction)
            and np.array_equal(self.origin, other.origin)
            and self.rescale_slope == other.rescale_slope
            and self.rescale_intercept == other.rescale_intercept
            and self.component_type == other.component_type
            and self.pixel_layout == other.pixel_layout
            and self.n_components == other.n_components
            and self.metadata == other.metadata
        )

    __hash__ = None

    def __repr__(self):
        return (f'{self.__class__.__name__}(dimensions={self.dimensions}, '
                f'spacing={self.spacing.tolist()}, origin={self.origin.tolist()}, '
                f'component_type={self.component_type!r}, '
                f'pixel_layout={self.pixel_layout!r})')
