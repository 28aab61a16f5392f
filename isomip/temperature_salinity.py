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

"""Initial temperature and salinity of the ISOMIP configuration.

For coordinates other than pure isopycnal layers, T and S vary linearly in
depth between their surface and bottom targets.  With isopycnal layers, T and
S start from the linear profile and then either S or T is adjusted so that the
density of each layer approaches its target density.
"""

from typing import TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
from isomip import constants
from isomip import eos
from isomip import grid as grid_lib
from isomip import param_file as param_file_lib
from isomip import profiles
from isomip import thickness
from isomip import unit_scaling

Array: TypeAlias = jax.Array
CoordinateMode: TypeAlias = thickness.CoordinateMode
ConfigurationError: TypeAlias = param_file_lib.ConfigurationError

_MODULE = 'ISOMIP_initialize_temperature_salinity'


def linear_temperature_salinity(
    h: Array,
    depth_tot: Array,
    targets: profiles.SurfaceBottomTS,
    max_depth: float,
) -> tuple[Array, Array]:
  """T and S at the layer centers, linear in height.

  Layers are stacked up from the bottom of each column, so a column that is
  shallower than `max_depth` samples only the upper part of the profile.

  Args:
    h: Layer thicknesses [Z ~> m], shape (..., nz).
    depth_tot: The total depth of each column [Z ~> m], shape (...).
    targets: The surface and bottom targets.
    max_depth: The depth at which the bottom targets are reached [Z ~> m].

  Returns:
    A tuple (T, S), each of shape (..., nz).
  """
  z_mid = profiles.layer_mid_heights(h, depth_tot)
  return targets.linear_profile(z_mid, max_depth)


def fit_layer_densities(
    t0: Array,
    s0: Array,
    rlay: Array,
    eqn_of_state: eos.EquationOfState,
    fit_salinity: bool,
    drho_ds_ref: float,
    drho_dt_ref: float,
    num_iterations: int = constants.DENSITY_FIT_ITERATIONS,
) -> tuple[Array, Array]:
  """Adjusts S (or T) so that each layer's density approaches its target.

  The first guess shifts the top layer's value by the density mismatch of
  each layer, divided by the reference derivative.  Then a fixed number of
  Newton steps is taken, using the derivative of the equation of state at the
  current state.  The pressure is taken to be zero throughout.

  Args:
    t0: The linear temperature profile [C ~> degC], shape (..., nz).
    s0: The linear salinity profile [S ~> ppt], shape (..., nz).
    rlay: The target densities [R ~> kg m-3], shape (nz,).
    eqn_of_state: The equation of state.
    fit_salinity: If true, S is adjusted and T is kept at `t0`; otherwise T is
      adjusted and S is kept at `s0`.
    drho_ds_ref: The reference derivative of density with salinity
      [R S-1 ~> kg m-3 ppt-1].
    drho_dt_ref: The reference derivative of density with temperature
      [R C-1 ~> kg m-3 degC-1].
    num_iterations: The number of Newton steps.

  Returns:
    A tuple (T, S), each of shape (..., nz).  Fitted salinities are never
    negative.
  """
  rlay = jnp.asarray(rlay, dtype=t0.dtype)
  p = jnp.zeros_like(t0)
  rho_top = eqn_of_state.density(t0[..., :1], s0[..., :1], p[..., :1])

  if fit_salinity:

    def body_s(i: int, s: Array) -> Array:
      del i
      rho = eqn_of_state.density(t0, s, p)
      _, drho_ds = eqn_of_state.density_derivs(t0, s, p)
      return jnp.maximum(0.0, s + (rlay - rho) / drho_ds)

    s_guess = jnp.maximum(0.0, s0[..., :1] + (rlay - rho_top) / drho_ds_ref)
    s = jax.lax.fori_loop(0, num_iterations, body_s, s_guess)
    return t0, s
  else:

    def body_t(i: int, t: Array) -> Array:
      del i
      rho = eqn_of_state.density(t, s0, p)
      drho_dt, _ = eqn_of_state.density_derivs(t, s0, p)
      return t + (rlay - rho) / drho_dt

    t_guess = t0[..., :1] + (rlay - rho_top) / drho_dt_ref
    t = jax.lax.fori_loop(0, num_iterations, body_t, t_guess)
    return t, s0


def initialize_temperature_salinity(
    T: Array,  # pylint: disable=invalid-name
    S: Array,  # pylint: disable=invalid-name
    h: Array,
    depth_tot: Array,
    grid: grid_lib.HorizontalGrid,
    vgrid: grid_lib.VerticalGrid,
    param_file: param_file_lib.ParamFile,
    eqn_of_state: eos.EquationOfState,
    us: unit_scaling.UnitScale = unit_scaling.UnitScale(),
    just_read: bool = False,
) -> tuple[Array, Array]:
  """Initial temperature and salinity of the ISOMIP configuration.

  Args:
    T: The potential temperature allocated by the host [C ~> degC], shape
      (nxd, nyd, nz).
    S: The salinity allocated by the host [S ~> ppt], shape (nxd, nyd, nz).
    h: The layer thicknesses [Z ~> m], shape (nxd, nyd, nz).
    depth_tot: The nominal total depth of the ocean [Z ~> m], (nxd, nyd).
    grid: The horizontal grid.
    vgrid: The vertical grid.
    param_file: The run-time parameters.
    eqn_of_state: The equation of state.
    us: The dimensional unit scaling.
    just_read: If true, only read the parameters and return `T` and `S`
      themselves.

  Returns:
    A tuple (T, S) with the compute domain set, or the inputs themselves if
    `just_read`.

  Raises:
    ConfigurationError: If the vertical coordinate is not supported, or a
      required parameter is missing.
  """
  if not just_read:
    logging.info('%s: setting temperature and salinity', _MODULE)

  mode = thickness.read_coordinate_mode(param_file, _MODULE, just_read)
  targets = profiles.read_isomip_ts(param_file, _MODULE, us, just_read)
  max_depth = grid.max_depth
  cs = grid.compute_slice

  if mode in (
      CoordinateMode.RHO,
      CoordinateMode.ZSTAR,
      CoordinateMode.SIGMA_SHELF_ZSTAR,
      CoordinateMode.SIGMA,
  ):
    if just_read:
      return T, S
    t_c, s_c = linear_temperature_salinity(
        jnp.asarray(h)[cs], jnp.asarray(depth_tot)[cs], targets, max_depth
    )
  elif mode == CoordinateMode.LAYER:
    fit_salinity = param_file.get_param(
        _MODULE,
        'FIT_SALINITY',
        default=False,
        desc=(
            'If true, accept the prescribed temperature and fit the salinity;'
            ' otherwise take salinity and fit temperature.'
        ),
        do_not_log=just_read,
    )
    drho_ds_ref = param_file.get_param(
        _MODULE,
        'DRHO_DS',
        default=0.0,
        desc='Partial derivative of density with salinity.',
        units='kg m-3 PSU-1',
        scale=us.kg_m3_to_R * us.S_to_ppt,
        fail_if_missing=not just_read,
        do_not_log=just_read,
    )
    drho_dt_ref = param_file.get_param(
        _MODULE,
        'DRHO_DT',
        default=0.0,
        desc='Partial derivative of density with temperature.',
        units='kg m-3 K-1',
        scale=us.kg_m3_to_R * us.C_to_degC,
        fail_if_missing=not just_read,
        do_not_log=just_read,
    )
    param_file.get_param(
        _MODULE,
        'T_REF',
        default=0.0,
        desc='A reference temperature used in initialization.',
        units='degC',
        scale=us.degC_to_C,
        fail_if_missing=not just_read,
        do_not_log=just_read,
    )
    param_file.get_param(
        _MODULE,
        'S_REF',
        default=35.0,
        desc='A reference salinity used in initialization.',
        units='PSU',
        scale=us.ppt_to_S,
        do_not_log=just_read,
    )
    if just_read:
      return T, S

    # The first guess is the linear profile sampled at the layer-center depths
    # below the surface, rather than above the bottom.
    h_c = jnp.asarray(h)[cs]
    t0, s0 = targets.linear_profile(-profiles.layer_mid_depths(h_c), max_depth)
    t_c, s_c = fit_layer_densities(
        t0,
        s0,
        vgrid.rlay,
        eqn_of_state,
        fit_salinity,
        drho_ds_ref,
        drho_dt_ref,
    )
  else:
    raise ConfigurationError(
        f'{_MODULE}: Unrecognized i.c. setup {mode.value} - set'
        ' REGRIDDING_COORDINATE_MODE'
    )

  return T.at[cs].set(t_c.astype(T.dtype)), S.at[cs].set(s_c.astype(S.dtype))
