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

"""Initial layer thicknesses of the ISOMIP configuration."""

from typing import TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
from isomip import coordinate_mode as coordinate_mode_lib
from isomip import eos
from isomip import grid as grid_lib
from isomip import param_file as param_file_lib
from isomip import profiles
from isomip import unit_scaling

Array: TypeAlias = jax.Array
CoordinateMode: TypeAlias = coordinate_mode_lib.CoordinateMode
ConfigurationError: TypeAlias = param_file_lib.ConfigurationError

_MODULE = 'ISOMIP_initialize_thickness'


def read_coordinate_mode(
    param_file: param_file_lib.ParamFile, module: str, do_not_log: bool = False
) -> CoordinateMode:
  name = param_file.get_param(
      module,
      'REGRIDDING_COORDINATE_MODE',
      default=coordinate_mode_lib.DEFAULT_COORDINATE_MODE,
      desc='Coordinate mode for vertical regridding.',
      do_not_log=do_not_log,
  )
  return coordinate_mode_lib.coordinate_mode(name)


def read_min_thickness(
    param_file: param_file_lib.ParamFile,
    module: str,
    us: unit_scaling.UnitScale,
    do_not_log: bool = False,
) -> float:
  return param_file.get_param(
      module,
      'MIN_THICKNESS',
      default=1.0e-3,
      desc='Minimum layer thickness',
      units='m',
      scale=us.m_to_Z,
      do_not_log=do_not_log,
  )


def isopycnal_interfaces(
    rlay: Array, rho_sur: float, rho_bot: float, max_depth: float
) -> Array:
  """Notional resting interface heights of isopycnal layers.

  Interfaces sit where the density, interpolated linearly in depth between
  `rho_sur` at the surface and `rho_bot` at `max_depth`, equals the mean of
  the target densities of the adjacent layers.

  Args:
    rlay: The target density of each layer [R ~> kg m-3], shape (nz,).
    rho_sur: The surface density [R ~> kg m-3].
    rho_bot: The density at `max_depth` [R ~> kg m-3].
    max_depth: The maximum depth of the model [Z ~> m].

  Returns:
    The interface heights [Z ~> m], shape (nz + 1,), from 0 at the surface to
    `-max_depth` at the bottom, bounded by both.
  """
  rho_range = rho_bot - rho_sur
  if rho_range <= 0.0:
    logging.warning(
        'Non-positive density range %s between the surface and the bottom.',
        rho_range,
    )
  rlay = jnp.asarray(rlay)
  e_interior = -max_depth * (0.5 * (rlay[:-1] + rlay[1:]) - rho_sur) / rho_range
  e_interior = jnp.clip(e_interior, -max_depth, 0.0)
  e0 = jnp.concatenate([
      jnp.zeros((1,), e_interior.dtype),
      e_interior,
      jnp.full((1,), -max_depth, e_interior.dtype),
  ])
  logging.debug('Notional interface heights: %s', e0)
  return e0


def zstar_interfaces(nz: int, max_depth: float) -> Array:
  """Interface heights evenly spaced between 0 and `-max_depth`, (nz + 1,)."""
  return -max_depth * jnp.arange(nz + 1) / nz


def thicknesses_from_interfaces(
    e0: Array, depth_tot: Array, min_thickness: float
) -> Array:
  """Layer thicknesses from target interfaces, with a thickness floor.

  Each column is built from the bottom up: the bottom interface is pinned at
  `-depth_tot`, and each interface above sits at its target height unless that
  would leave the layer below it thinner than `min_thickness`, in which case
  that layer is given exactly `min_thickness`.

  Args:
    e0: Target interface heights [Z ~> m], shape (nz + 1,).  The last (bottom)
      entry is replaced by the column depth.
    depth_tot: The total depth of each column [Z ~> m], shape (...).
    min_thickness: The minimum layer thickness [Z ~> m].

  Returns:
    The layer thicknesses [Z ~> m], shape (..., nz), index 0 at the top.
  """

  def step(eta_below: Array, e_k: Array) -> tuple[Array, Array]:
    # h_k >= min_thickness even where `eta_below + min_thickness` rounds to
    # `eta_below`.
    h_k = jnp.maximum(e_k - eta_below, min_thickness)
    eta = jnp.maximum(e_k, eta_below + min_thickness)
    return eta, h_k

  eta_bottom = -jnp.asarray(depth_tot)
  e_top = jnp.asarray(e0[:-1], dtype=eta_bottom.dtype)
  _, h = jax.lax.scan(step, eta_bottom, e_top, reverse=True)
  return jnp.moveaxis(h, 0, -1)


def column_thicknesses(
    mode: CoordinateMode,
    depth_tot: Array,
    max_depth: float,
    vgrid: grid_lib.VerticalGrid,
    min_thickness: float,
    rho_sur: float | None = None,
    rho_bot: float | None = None,
    routine: str = _MODULE,
) -> Array:
  """Layer thicknesses [Z ~> m] of each column for a vertical coordinate.

  Args:
    mode: The vertical coordinate.
    depth_tot: The total depth of each column [Z ~> m], shape (...).
    max_depth: The maximum depth of the model [Z ~> m].
    vgrid: The vertical grid.
    min_thickness: The minimum thickness of z* layers [Z ~> m].
    rho_sur: The surface density [R ~> kg m-3], for isopycnal coordinates.
    rho_bot: The bottom density [R ~> kg m-3], for isopycnal coordinates.
    routine: The name of the calling routine, for error messages.

  Returns:
    The thicknesses, shape (..., nz).

  Raises:
    ConfigurationError: If the coordinate is not supported.
  """
  nz = vgrid.nz
  if mode in (CoordinateMode.LAYER, CoordinateMode.RHO):
    if rho_sur is None or rho_bot is None:
      raise ValueError('Isopycnal thicknesses need rho_sur and rho_bot.')
    e0 = isopycnal_interfaces(vgrid.rlay, rho_sur, rho_bot, max_depth)
    return thicknesses_from_interfaces(e0, depth_tot, vgrid.angstrom_z)
  elif mode in (CoordinateMode.ZSTAR, CoordinateMode.SIGMA_SHELF_ZSTAR):
    e0 = zstar_interfaces(nz, max_depth)
    return thicknesses_from_interfaces(e0, depth_tot, min_thickness)
  elif mode == CoordinateMode.SIGMA:
    depth_tot = jnp.asarray(depth_tot)
    return jnp.repeat(depth_tot[..., jnp.newaxis] / nz, nz, axis=-1)
  else:
    raise ConfigurationError(
        f'{routine}: Unrecognized i.c. setup {mode.value} - set'
        ' REGRIDDING_COORDINATE_MODE'
    )


def initialize_thickness(
    h: Array,
    depth_tot: Array,
    grid: grid_lib.HorizontalGrid,
    vgrid: grid_lib.VerticalGrid,
    param_file: param_file_lib.ParamFile,
    eqn_of_state: eos.EquationOfState,
    us: unit_scaling.UnitScale = unit_scaling.UnitScale(),
    just_read: bool = False,
) -> Array:
  """Initial layer thicknesses of the ISOMIP configuration.

  Args:
    h: The layer thicknesses allocated by the host [Z ~> m], shape
      (nxd, nyd, nz).  Only the compute domain is set.
    depth_tot: The nominal total depth of the ocean [Z ~> m], (nxd, nyd).
    grid: The horizontal grid.
    vgrid: The vertical grid.
    param_file: The run-time parameters.
    eqn_of_state: The equation of state, for isopycnal coordinates.
    us: The dimensional unit scaling.
    just_read: If true, only read the parameters and return `h` itself.

  Returns:
    The initialized thicknesses, or `h` itself if `just_read`.

  Raises:
    ConfigurationError: If the vertical coordinate is not supported.
  """
  if not just_read:
    logging.info('%s: setting thickness', _MODULE)

  min_thickness = read_min_thickness(param_file, _MODULE, us, just_read)
  mode = read_coordinate_mode(param_file, _MODULE, just_read)

  rho_sur = rho_bot = None
  if mode in (CoordinateMode.LAYER, CoordinateMode.RHO):
    targets = profiles.read_isomip_ts(param_file, _MODULE, us, just_read)
    if just_read:
      return h
    rho_sur, rho_bot = targets.densities(eqn_of_state)
    logging.debug('Surface density %s, bottom density %s', rho_sur, rho_bot)
  elif mode in (
      CoordinateMode.ZSTAR,
      CoordinateMode.SIGMA_SHELF_ZSTAR,
      CoordinateMode.SIGMA,
  ):
    if just_read:
      return h
  else:
    raise ConfigurationError(
        f'{_MODULE}: Unrecognized i.c. setup {mode.value} - set'
        ' REGRIDDING_COORDINATE_MODE'
    )

  cs = grid.compute_slice
  h_c = column_thicknesses(
      mode,
      jnp.asarray(depth_tot)[cs],
      grid.max_depth,
      vgrid,
      min_thickness,
      rho_sur,
      rho_bot,
  )
  return h.at[cs].set(h_c.astype(h.dtype))
