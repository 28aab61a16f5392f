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

"""Sponge layer near the open boundary of the ISOMIP configuration."""

from typing import TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
from isomip import constants
from isomip import file_io
from isomip import grid as grid_lib
from isomip import isomip_types
from isomip import param_file as param_file_lib
from isomip import profiles
from isomip import sponge_registry
from isomip import temperature_salinity
from isomip import thermo_vars
from isomip import thickness
from isomip import unit_scaling

Array: TypeAlias = jax.Array
ConfigurationError: TypeAlias = param_file_lib.ConfigurationError

_MODULE = 'ISOMIP_initialize_sponges'


def damping_rate(
    grid: grid_lib.HorizontalGrid,
    depth_tot: Array,
    min_depth: float,
    tnudg: float,
) -> Array:
  """The inverse damping time [T-1 ~> s-1] of the sponge.

  The rate ramps up linearly from 0 at x = 790 to 1 / `tnudg` at x = 800 (in
  grid units), and vanishes elsewhere and over land.

  Args:
    grid: The horizontal grid.
    depth_tot: The total depth of the ocean [Z ~> m], shape `grid.shape`.
    min_depth: The minimum ocean depth [Z ~> m].
    tnudg: The nudging time scale [T ~> s].

  Returns:
    The damping rate, shape `grid.shape`, zero outside the compute domain.
  """
  cs = grid.compute_slice
  x = jnp.asarray(grid.geo_lon_t[cs], dtype=isomip_types.f_dtype)
  depth = jnp.asarray(depth_tot)[cs]
  in_band = (x >= constants.SPONGE_X_START) & (x <= constants.SPONGE_X_END)
  ramp = jnp.maximum(
      0.0,
      (x - constants.SPONGE_X_START)
      / (constants.SPONGE_X_END - constants.SPONGE_X_START),
  )
  idamp_c = jnp.where(in_band & (depth > min_depth), ramp / tnudg, 0.0)
  idamp = jnp.zeros(grid.shape, dtype=idamp_c.dtype)
  return idamp.at[cs].set(idamp_c)


def _to_data_domain(
    grid: grid_lib.HorizontalGrid, f: Array, var_name: str, path: str
) -> Array:
  """Places a field read over the compute domain into the data domain."""
  if f.shape[:2] == grid.shape:
    return f
  if f.shape[:2] != grid.compute_shape:
    raise ConfigurationError(
        f'{_MODULE}: Variable {var_name} in {path} has horizontal shape'
        f' {f.shape[:2]}, expected {grid.compute_shape}.'
    )
  f_full = jnp.zeros(grid.shape + f.shape[2:], dtype=f.dtype)
  return f_full.at[grid.compute_slice].set(f)


def _check_levels(f: Array, num_levels: int, var_name: str, path: str):
  if f.shape[-1] != num_levels:
    raise ConfigurationError(
        f'{_MODULE}: Variable {var_name} in {path} has {f.shape[-1]} levels,'
        f' expected {num_levels}.'
    )


def _configure_ale_sponge(
    grid: grid_lib.HorizontalGrid,
    vgrid: grid_lib.VerticalGrid,
    tv: thermo_vars.ThermoVars,
    depth_tot: Array,
    idamp: Array,
    targets: profiles.SurfaceBottomTS,
    mode: thickness.CoordinateMode,
    min_thickness: float,
) -> sponge_registry.ALESponge:
  """Builds the target thicknesses and T/S analytically."""
  rho_sur, rho_bot = targets.densities(tv.eqn_of_state)
  logging.debug(
      'Sponge surface density %s, bottom density %s', rho_sur, rho_bot
  )

  cs = grid.compute_slice
  depth_c = jnp.asarray(depth_tot)[cs]
  dz_c = thickness.column_thicknesses(
      mode,
      depth_c,
      grid.max_depth,
      vgrid,
      min_thickness,
      rho_sur,
      rho_bot,
      routine=_MODULE,
  )
  t_c, s_c = temperature_salinity.linear_temperature_salinity(
      dz_c, depth_c, targets, grid.max_depth
  )

  shape_3d = grid.shape + (vgrid.nz,)
  dz = jnp.zeros(shape_3d, dz_c.dtype).at[cs].set(dz_c)
  sponge = sponge_registry.initialize_ale_sponge(idamp, dz, grid)
  if tv.T is not None:
    t_target = jnp.zeros(shape_3d, t_c.dtype).at[cs].set(t_c)
    sponge.set_up_field(t_target, tv.T, 'temp', 'temperature', 'degC s-1')
  if tv.S is not None:
    s_target = jnp.zeros(shape_3d, s_c.dtype).at[cs].set(s_c)
    sponge.set_up_field(s_target, tv.S, 'salt', 'salinity', 'g kg-1 s-1')
  return sponge


def _configure_layer_sponge(
    grid: grid_lib.HorizontalGrid,
    vgrid: grid_lib.VerticalGrid,
    tv: thermo_vars.ThermoVars,
    idamp: Array,
    param_file: param_file_lib.ParamFile,
    us: unit_scaling.UnitScale,
) -> sponge_registry.LayerSponge:
  """Reads the target interface heights and T/S from a file."""
  inputdir = param_file.get_param(_MODULE, 'INPUTDIR', default='.')
  inputdir = file_io.slasher(inputdir)
  sponge_file = param_file.get_param(
      _MODULE,
      'ISOMIP_SPONGE_FILE',
      desc='The name of the file with the state to damp toward.',
      fail_if_missing=True,
  )
  temp_var = param_file.get_param(
      _MODULE,
      'SPONGE_PTEMP_VAR',
      default='Temp',
      desc='The name of the potential temperature variable in the sponge file.',
  )
  salt_var = param_file.get_param(
      _MODULE,
      'SPONGE_SALT_VAR',
      default='Salt',
      desc='The name of the salinity variable in the sponge file.',
  )
  eta_var = param_file.get_param(
      _MODULE,
      'SPONGE_ETA_VAR',
      default='eta',
      desc='The name of the interface height variable in the sponge file.',
  )

  filename = inputdir + sponge_file
  if not file_io.file_exists(filename):
    raise ConfigurationError(f'{_MODULE}: Unable to open {filename}')

  eta = file_io.read_variable(filename, eta_var, us.m_to_Z)
  eta = _to_data_domain(grid, eta, eta_var, filename)
  _check_levels(eta, vgrid.nz + 1, eta_var, filename)
  sponge = sponge_registry.initialize_layer_sponge(idamp, eta, grid)
  if tv.T is not None:
    t_target = file_io.read_variable(filename, temp_var, us.degC_to_C)
    t_target = _to_data_domain(grid, t_target, temp_var, filename)
    _check_levels(t_target, vgrid.nz, temp_var, filename)
    sponge.set_up_field(t_target, tv.T, 'temp', 'temperature', 'degC s-1')
  if tv.S is not None:
    s_target = file_io.read_variable(filename, salt_var, us.ppt_to_S)
    s_target = _to_data_domain(grid, s_target, salt_var, filename)
    _check_levels(s_target, vgrid.nz, salt_var, filename)
    sponge.set_up_field(s_target, tv.S, 'salt', 'salinity', 'g kg-1 s-1')
  return sponge


def configure_sponges(
    grid: grid_lib.HorizontalGrid,
    vgrid: grid_lib.VerticalGrid,
    tv: thermo_vars.ThermoVars,
    depth_tot: Array,
    param_file: param_file_lib.ParamFile,
    use_ale: bool,
    controls: sponge_registry.SpongeControls,
    us: unit_scaling.UnitScale = unit_scaling.UnitScale(),
) -> sponge_registry.SpongeControls:
  """Sets up the sponge of the ISOMIP configuration.

  With `use_ale`, the target layer thicknesses and T/S are built analytically,
  from the sponge-specific surface and bottom targets.  Otherwise the target
  interface heights and T/S are read from `ISOMIP_SPONGE_FILE`.

  Args:
    grid: The horizontal grid.
    vgrid: The vertical grid.
    tv: The thermodynamic state of the host, whose T and S (where present)
      are registered as damped fields.
    depth_tot: The total depth of the ocean [Z ~> m], shape `grid.shape`.
    param_file: The run-time parameters.
    use_ale: If true, set up the ALE sponge; otherwise the layer sponge.
    controls: The host's sponge control structures, which must be unset.  The
      configured sponge is stored in it.
    us: The dimensional unit scaling.

  Returns:
    `controls`, with either its `ale` or its `layer` sponge set.

  Raises:
    ConfigurationError: If a sponge is already configured, the nudging time is
      not positive, the vertical coordinate is not supported, or the sponge
      file cannot be opened.
  """
  if controls.is_configured:
    raise ConfigurationError(
        f'{_MODULE}: called with an associated control structure.'
    )
  logging.info('%s: setting sponges', _MODULE)

  param_file.log_version(_MODULE)
  tnudg = param_file.get_param(
      _MODULE,
      'ISOMIP_TNUDG',
      default=0.0,
      desc='Nudging time scale for sponge layers',
      units='days',
      scale=constants.SECONDS_PER_DAY * us.s_to_T,
  )
  targets = profiles.read_sponge_ts(param_file, _MODULE, us)
  min_thickness = thickness.read_min_thickness(param_file, _MODULE, us)
  mode = thickness.read_coordinate_mode(param_file, _MODULE)
  min_depth = param_file.get_param(
      _MODULE,
      'MINIMUM_DEPTH',
      default=0.0,
      desc='The minimum depth of the ocean.',
      units='m',
      scale=us.m_to_Z,
  )

  if tnudg <= 0.0:
    raise ConfigurationError(
        f'{_MODULE}: ISOMIP_TNUDG must be positive to use a sponge, got'
        f' {tnudg}.'
    )

  idamp = damping_rate(grid, depth_tot, min_depth, tnudg)

  if use_ale:
    controls.ale = _configure_ale_sponge(
        grid, vgrid, tv, depth_tot, idamp, targets, mode, min_thickness
    )
  else:
    controls.layer = _configure_layer_sponge(
        grid, vgrid, tv, idamp, param_file, us
    )
  return controls
