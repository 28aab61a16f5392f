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

"""Surface and bottom temperature/salinity targets and linear profiles."""

import dataclasses
from typing import TypeAlias

import jax
import jax.numpy as jnp
from isomip import eos
from isomip import param_file as param_file_lib
from isomip import unit_scaling

Array: TypeAlias = jax.Array


@dataclasses.dataclass(frozen=True)
class SurfaceBottomTS:
  """Temperatures [C ~> degC] and salinities [S ~> ppt] at the surface and at
  the maximum depth of the model."""

  t_sur: float
  s_sur: float
  t_bot: float
  s_bot: float

  def densities(self, eqn_of_state: eos.EquationOfState) -> tuple[float, float]:
    """Surface and bottom densities [R ~> kg m-3] at zero pressure."""
    rho_sur = float(eqn_of_state.density(self.t_sur, self.s_sur, 0.0))
    rho_bot = float(eqn_of_state.density(self.t_bot, self.s_bot, 0.0))
    return rho_sur, rho_bot

  def linear_profile(self, z: Array, max_depth: float) -> tuple[Array, Array]:
    """Temperature and salinity affine in height, from the surface targets at
    z = 0 to the bottom targets at z = -max_depth.

    Args:
      z: Heights relative to the surface [Z ~> m], positive upward.
      max_depth: The maximum depth of the model [Z ~> m].

    Returns:
      A tuple (T, S) of arrays shaped like `z`.
    """
    dt_dz = (self.t_sur - self.t_bot) / max_depth
    ds_dz = (self.s_sur - self.s_bot) / max_depth
    return self.t_sur + dt_dz * z, self.s_sur + ds_dz * z


def read_isomip_ts(
    param_file: param_file_lib.ParamFile,
    module: str,
    us: unit_scaling.UnitScale,
    do_not_log: bool = False,
) -> SurfaceBottomTS:
  """Reads the surface and bottom targets of the initial state."""
  t_sur = param_file.get_param(
      module,
      'ISOMIP_T_SUR',
      default=-1.9,
      desc='Temperature at the surface (interface)',
      units='degC',
      scale=us.degC_to_C,
      do_not_log=do_not_log,
  )
  s_sur = param_file.get_param(
      module,
      'ISOMIP_S_SUR',
      default=33.8,
      desc='Salinity at the surface (interface)',
      units='ppt',
      scale=us.ppt_to_S,
      do_not_log=do_not_log,
  )
  t_bot = param_file.get_param(
      module,
      'ISOMIP_T_BOT',
      default=-1.9,
      desc='Temperature at the bottom (interface)',
      units='degC',
      scale=us.degC_to_C,
      do_not_log=do_not_log,
  )
  s_bot = param_file.get_param(
      module,
      'ISOMIP_S_BOT',
      default=34.55,
      desc='Salinity at the bottom (interface)',
      units='ppt',
      scale=us.ppt_to_S,
      do_not_log=do_not_log,
  )
  return SurfaceBottomTS(t_sur=t_sur, s_sur=s_sur, t_bot=t_bot, s_bot=s_bot)


def read_sponge_ts(
    param_file: param_file_lib.ParamFile,
    module: str,
    us: unit_scaling.UnitScale,
) -> SurfaceBottomTS:
  """Reads the surface and bottom targets in the sponge region.

  They default to the reference temperature and salinity.
  """
  t_ref = param_file.get_param(
      module,
      'T_REF',
      default=10.0,
      desc='Reference temperature',
      units='degC',
      scale=us.degC_to_C,
      do_not_log=True,
  )
  s_ref = param_file.get_param(
      module,
      'S_REF',
      default=35.0,
      desc='Reference salinity',
      units='ppt',
      scale=us.ppt_to_S,
      do_not_log=True,
  )
  s_sur = param_file.get_param(
      module,
      'ISOMIP_S_SUR_SPONGE',
      default=us.S_to_ppt * s_ref,
      desc='Surface salinity in sponge layer.',
      units='ppt',
      scale=us.ppt_to_S,
  )
  s_bot = param_file.get_param(
      module,
      'ISOMIP_S_BOT_SPONGE',
      default=us.S_to_ppt * s_ref,
      desc='Bottom salinity in sponge layer.',
      units='ppt',
      scale=us.ppt_to_S,
  )
  t_sur = param_file.get_param(
      module,
      'ISOMIP_T_SUR_SPONGE',
      default=us.C_to_degC * t_ref,
      desc='Surface temperature in sponge layer.',
      units='degC',
      scale=us.degC_to_C,
  )
  t_bot = param_file.get_param(
      module,
      'ISOMIP_T_BOT_SPONGE',
      default=us.C_to_degC * t_ref,
      desc='Bottom temperature in sponge layer.',
      units='degC',
      scale=us.degC_to_C,
  )
  return SurfaceBottomTS(t_sur=t_sur, s_sur=s_sur, t_bot=t_bot, s_bot=s_bot)


def layer_mid_heights(h: Array, depth_tot: Array) -> Array:
  """Heights of the layer centers [Z ~> m], stacking layers up from the bottom.

  Args:
    h: Layer thicknesses [Z ~> m], shape (..., nz), with index 0 at the top.
    depth_tot: The total depth of each column [Z ~> m], shape (...).

  Returns:
    The heights of the layer centers, positive upward, shape (..., nz).
  """
  # Thickness of each layer plus all the layers below it.
  h_below_incl = jnp.cumsum(h[..., ::-1], axis=-1)[..., ::-1]
  return -depth_tot[..., jnp.newaxis] + h_below_incl - 0.5 * h


def layer_mid_depths(h: Array) -> Array:
  """Depths of the layer centers below the surface [Z ~> m], positive down."""
  return jnp.cumsum(h, axis=-1) - 0.5 * h
