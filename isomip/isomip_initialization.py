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

"""Initial state of the ISOMIP configuration, in a single pass."""

import dataclasses
import time
from typing import TypeAlias

from absl import flags
from absl import logging
import jax
import jax.numpy as jnp
from isomip import config
from isomip import eos
from isomip import grid as grid_lib
from isomip import isomip_types
from isomip import param_file as param_file_lib
from isomip import sponge
from isomip import sponge_registry
from isomip import temperature_salinity
from isomip import thermo_vars
from isomip import thickness
from isomip import topography
from isomip import unit_scaling

PARAM_FILE = flags.DEFINE_string(
    'isomip_param_file',
    '',
    'Path of a JSON file holding the run-time parameters.',
    allow_override=True,
)
CONFIG_DIR = flags.DEFINE_string(
    'isomip_config_dir',
    '',
    'Directory holding the `cfg.json` domain configuration.  If empty, the'
    ' default ISOMIP domain is used.',
    allow_override=True,
)

Array: TypeAlias = jax.Array


@dataclasses.dataclass(frozen=True)
class IsomipInitialState:
  """The initial fields, laid out over the data domain."""

  depth: Array  # Total depth of the ocean [Z ~> m], (nxd, nyd).
  h: Array  # Layer thicknesses [Z ~> m], (nxd, nyd, nz).
  T: Array  # Potential temperature [C ~> degC].  pylint: disable=invalid-name
  S: Array  # Salinity [S ~> ppt].  pylint: disable=invalid-name
  sponges: sponge_registry.SpongeControls | None = None


def _allocate(
    grid: grid_lib.HorizontalGrid, vgrid: grid_lib.VerticalGrid
) -> tuple[Array, Array, Array]:
  shape = grid.shape + (vgrid.nz,)
  dtype = isomip_types.f_dtype
  return (
      jnp.zeros(shape, dtype),
      jnp.zeros(shape, dtype),
      jnp.zeros(shape, dtype),
  )


def read_parameters(
    grid: grid_lib.HorizontalGrid,
    vgrid: grid_lib.VerticalGrid,
    param_file: param_file_lib.ParamFile,
    eqn_of_state: eos.EquationOfState,
    us: unit_scaling.UnitScale = unit_scaling.UnitScale(),
) -> None:
  """Reads the parameters of the initializers without setting any field.

  Raises:
    ConfigurationError: If the configuration is invalid.
  """
  h, temp, salt = _allocate(grid, vgrid)
  depth = jnp.zeros(grid.shape, isomip_types.f_dtype)
  thickness.initialize_thickness(
      h, depth, grid, vgrid, param_file, eqn_of_state, us, just_read=True
  )
  temperature_salinity.initialize_temperature_salinity(
      temp,
      salt,
      h,
      depth,
      grid,
      vgrid,
      param_file,
      eqn_of_state,
      us,
      just_read=True,
  )


def initialize_isomip(
    grid: grid_lib.HorizontalGrid,
    vgrid: grid_lib.VerticalGrid,
    param_file: param_file_lib.ParamFile,
    eqn_of_state: eos.EquationOfState,
    us: unit_scaling.UnitScale = unit_scaling.UnitScale(),
    use_sponge: bool = False,
    use_ale: bool = True,
    sponge_controls: sponge_registry.SpongeControls | None = None,
) -> IsomipInitialState:
  """Sets the topography, thicknesses, T and S, and optionally the sponge.

  The total depth of the ocean is the bottom depth; no ice shelf draft is
  subtracted from it.

  Args:
    grid: The horizontal grid.
    vgrid: The vertical grid.
    param_file: The run-time parameters.
    eqn_of_state: The equation of state.
    us: The dimensional unit scaling.
    use_sponge: If true, also configure the sponge.
    use_ale: If true, the sponge is an ALE sponge; otherwise a layer sponge.
    sponge_controls: The sponge control structures to configure.  New ones are
      created if not given.

  Returns:
    The initial state.
  """
  t_start = time.time()

  depth = topography.generate_topography(grid, param_file, grid.max_depth, us)
  h, temp, salt = _allocate(grid, vgrid)
  h = thickness.initialize_thickness(
      h, depth, grid, vgrid, param_file, eqn_of_state, us
  )
  temp, salt = temperature_salinity.initialize_temperature_salinity(
      temp, salt, h, depth, grid, vgrid, param_file, eqn_of_state, us
  )

  if use_sponge:
    if sponge_controls is None:
      sponge_controls = sponge_registry.SpongeControls()
    tv = thermo_vars.ThermoVars(eqn_of_state=eqn_of_state, T=temp, S=salt)
    sponge.configure_sponges(
        grid, vgrid, tv, depth, param_file, use_ale, sponge_controls, us
    )

  logging.info('ISOMIP initialization took %.3f s.', time.time() - t_start)
  return IsomipInitialState(
      depth=depth, h=h, T=temp, S=salt, sponges=sponge_controls
  )


def initialize_from_files(
    config_dir: str,
    param_path: str,
    eqn_of_state: eos.EquationOfState = eos.LinearEOS(),
    use_sponge: bool = False,
    use_ale: bool = True,
) -> IsomipInitialState:
  """Sets the initial state from a saved domain config and a parameter file.

  Args:
    config_dir: The directory holding `cfg.json`.  If empty, the default
      ISOMIP domain is used.
    param_path: The JSON parameter file.  If empty, all parameters take their
      default values.
    eqn_of_state: The equation of state.
    use_sponge: If true, also configure the sponge.
    use_ale: If true, the sponge is an ALE sponge; otherwise a layer sponge.

  Returns:
    The initial state.
  """
  if config_dir:
    cfgext = config.load_json(config_dir)
  else:
    cfgext = config.ConfigExternal()
  logging.info('Config: %s', cfgext)
  hgrid, vgrid = config.grids_from_config_external(cfgext)

  if param_path:
    param_file = param_file_lib.ParamFile.from_json_file(param_path)
  else:
    param_file = param_file_lib.ParamFile()

  read_parameters(hgrid, vgrid, param_file, eqn_of_state, cfgext.us)
  return initialize_isomip(
      hgrid,
      vgrid,
      param_file,
      eqn_of_state,
      cfgext.us,
      use_sponge=use_sponge,
      use_ale=use_ale,
  )


def initialize_from_flags(
    eqn_of_state: eos.EquationOfState = eos.LinearEOS(),
    use_sponge: bool = False,
    use_ale: bool = True,
) -> IsomipInitialState:
  """Sets the initial state from the domain and parameters given by flags."""
  return initialize_from_files(
      CONFIG_DIR.value,
      PARAM_FILE.value,
      eqn_of_state,
      use_sponge=use_sponge,
      use_ale=use_ale,
  )
