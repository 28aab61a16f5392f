# Copyright 2024 The isomip Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Horizontal and vertical grids consumed by the initialization routines."""

import dataclasses

import numpy as np
from isomip import constants


@dataclasses.dataclass(frozen=True, kw_only=True)
class HorizontalGrid:
  """A structured horizontal grid, including halos.

  Fields are laid out (x, y) over the data domain, which is the compute domain
  padded by `halo_width` cells on each side.
  """

  # Cell-center coordinates in grid units, shape (nxd, nyd).
  geo_lon_t: np.ndarray
  geo_lat_t: np.ndarray
  # Conversion factor from grid units to horizontal lengths [L ~> m].  Must be
  # positive for Cartesian axis units.
  grid_unit_to_L: float  # pylint: disable=invalid-name
  # The maximum depth of the ocean [Z ~> m].
  max_depth: float
  halo_width: int = 0

  def __post_init__(self):
    if self.geo_lon_t.shape != self.geo_lat_t.shape:
      raise ValueError(
          f'Coordinate shapes differ: {self.geo_lon_t.shape} vs'
          f' {self.geo_lat_t.shape}.'
      )
    if self.geo_lon_t.ndim != 2:
      raise ValueError(
          f'Coordinates must be 2D, got shape {self.geo_lon_t.shape}.'
      )
    nxd, nyd = self.geo_lon_t.shape
    if min(nxd, nyd) <= 2 * self.halo_width:
      raise ValueError(
          f'Grid of shape {(nxd, nyd)} is too small for halo width'
          f' {self.halo_width}.'
      )

  @property
  def shape(self) -> tuple[int, int]:
    """Shape of the data domain."""
    return self.geo_lon_t.shape

  @property
  def compute_slice(self) -> tuple[slice, slice]:
    """Index of the compute domain within the data domain."""
    hw = self.halo_width
    nxd, nyd = self.shape
    return slice(hw, nxd - hw), slice(hw, nyd - hw)

  @property
  def compute_shape(self) -> tuple[int, int]:
    nxd, nyd = self.shape
    return nxd - 2 * self.halo_width, nyd - 2 * self.halo_width


@dataclasses.dataclass(frozen=True, kw_only=True)
class VerticalGrid:
  """The vertical grid: layer count and layer target densities."""

  # Target potential density of each layer, top to bottom [R ~> kg m-3].
  rlay: np.ndarray
  # A minimum layer thickness used with isopycnal coordinates [Z ~> m].
  angstrom_z: float = constants.ANGSTROM

  def __post_init__(self):
    if self.rlay.ndim != 1 or self.rlay.size < 1:
      raise ValueError(
          f'rlay must be a non-empty 1D array, got shape {self.rlay.shape}.'
      )

  @property
  def nz(self) -> int:
    return int(self.rlay.size)


def uniform_grid(
    domain: tuple[float, float], n: int, halo_width: int
) -> tuple[np.ndarray, np.ndarray]:
  """Sets up a grid with n cells within the specified domain.

  The domain ends are on faces.  The face that aligns with domain[0] is the
  first non-halo face on the left, while the face that aligns with domain[1] is
  the first halo face on the right (if halos are included).

  E.g., with halo_width = 1 and n = 6:

        v <-- domain[0]         v <-- domain[1]
    | o | o | o | o | o | o | o | o
    ^ ^                         ^ ^
    halos                       halos

  Args:
    domain: Tuple of the left and right ends of the domain.
    n: The number of cells in the domain, excluding halos.
    halo_width: The halo width.

  Returns:
    A 2-tuple of arrays containing the coordinates of the cell centers and the
    coordinates of the left faces, both including halos.
  """
  dx = (domain[1] - domain[0]) / n
  n_total_with_halos = n + 2 * halo_width
  x_faces = domain[0] + dx * (np.arange(n_total_with_halos) - halo_width)
  x_nodes = x_faces + dx / 2
  return x_nodes, x_faces


def uniform_horizontal_grid(
    domain_x: tuple[float, float],
    domain_y: tuple[float, float],
    nx: int,
    ny: int,
    max_depth: float,
    grid_unit_to_L: float = 1.0,  # pylint: disable=invalid-name
    halo_width: int = 0,
) -> HorizontalGrid:
  """Creates a uniformly spaced Cartesian grid."""
  x_c, _ = uniform_grid(domain_x, nx, halo_width)
  y_c, _ = uniform_grid(domain_y, ny, halo_width)
  lon, lat = np.meshgrid(x_c, y_c, indexing='ij')
  return HorizontalGrid(
      geo_lon_t=lon,
      geo_lat_t=lat,
      grid_unit_to_L=grid_unit_to_L,
      max_depth=max_depth,
      halo_width=halo_width,
  )
