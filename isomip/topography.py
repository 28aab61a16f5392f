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

"""Bedrock topography of the ISOMIP configuration.

The bedrock is a 6th-order polynomial of the along-flow position, deepened by
a trough bounded by smooth side walls across the flow.  See
http://www.geosci-model-dev-discuss.net/8/9859/2015/gmdd-8-9859-2015.pdf
"""

from typing import TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
import numpy as np
from isomip import constants
from isomip import grid as grid_lib
from isomip import isomip_types
from isomip import param_file as param_file_lib
from isomip import unit_scaling

Array: TypeAlias = jax.Array
ParamFile: TypeAlias = param_file_lib.ParamFile

_MODULE = 'ISOMIP_initialize_topography'


def bedrock_along_flow(xtil: Array, us: unit_scaling.UnitScale) -> Array:
  """Along-flow bedrock profile [Z ~> m] at normalized position `xtil`."""
  b0 = constants.BEDROCK_B0 * us.m_to_Z
  b2 = constants.BEDROCK_B2 * us.m_to_Z
  b4 = constants.BEDROCK_B4 * us.m_to_Z
  b6 = constants.BEDROCK_B6 * us.m_to_Z
  return b0 + b2 * xtil**2 + b4 * xtil**4 + b6 * xtil**6


def trough_across_flow(
    y: Array, dc: float, wc: float, ly: float, fc: float
) -> Array:
  """Deepening of the bedrock by the trough [Z ~> m] at cross-flow `y`."""
  return dc / (1.0 + jnp.exp(-2.0 * (y - 0.5 * ly - wc) / fc)) + dc / (
      1.0 + jnp.exp(2.0 * (y - 0.5 * ly + wc) / fc)
  )


def generate_topography(
    grid: grid_lib.HorizontalGrid,
    param_file: ParamFile,
    max_depth: float,
    us: unit_scaling.UnitScale = unit_scaling.UnitScale(),
) -> Array:
  """Computes the ocean bottom depth of the ISOMIP configuration.

  The formula is purely local, so it is evaluated over the whole data domain,
  halos included.

  Args:
    grid: The horizontal grid.  Its axis units must be Cartesian.
    param_file: The run-time parameters.
    max_depth: The maximum depth of the model [Z ~> m].
    us: The dimensional unit scaling.

  Returns:
    The bottom depth D [Z ~> m], positive downward, of shape `grid.shape`.
    Depths are capped at `max_depth`; depths shallower than `MINIMUM_DEPTH` are
    set to half of `MINIMUM_DEPTH`, which marks them as land.

  Raises:
    ConfigurationError: If the grid axis units are not Cartesian.
  """
  logging.info('%s: setting topography', _MODULE)

  param_file.log_version(_MODULE)
  min_depth = param_file.get_param(
      _MODULE,
      'MINIMUM_DEPTH',
      default=0.0,
      desc='The minimum depth of the ocean.',
      units='m',
      scale=us.m_to_Z,
  )
  is_2d = param_file.get_param(
      _MODULE, 'ISOMIP_2D', default=False, desc='If true, use a 2D setup.'
  )
  bmax = param_file.get_param(
      _MODULE,
      'ISOMIP_MAX_BEDROCK',
      default=720.0,
      desc='Maximum depth of bedrock topography in the ISOMIP configuration.',
      units='m',
      scale=us.m_to_Z,
  )
  dc = param_file.get_param(
      _MODULE,
      'ISOMIP_TROUGH_DEPTH',
      default=500.0,
      desc=(
          'Depth of the trough compared with side walls in the ISOMIP'
          ' configuration.'
      ),
      units='m',
      scale=us.m_to_Z,
  )
  xbar = param_file.get_param(
      _MODULE,
      'ISOMIP_BEDROCK_LENGTH',
      default=300.0e3,
      desc=(
          'Characteristic along-flow length scale of the bedrock in the ISOMIP'
          ' configuration.'
      ),
      units='m',
      scale=us.m_to_L,
  )
  wc = param_file.get_param(
      _MODULE,
      'ISOMIP_TROUGH_WIDTH',
      default=24.0e3,
      desc='Half-width of the trough in the ISOMIP configuration.',
      units='m',
      scale=us.m_to_L,
  )
  ly = param_file.get_param(
      _MODULE,
      'ISOMIP_DOMAIN_WIDTH',
      default=80.0e3,
      desc='Domain width (across ice flow) in the ISOMIP configuration.',
      units='m',
      scale=us.m_to_L,
  )
  fc = param_file.get_param(
      _MODULE,
      'ISOMIP_SIDE_WIDTH',
      default=4.0e3,
      desc=(
          'Characteristic width of the side walls of the channel in the ISOMIP'
          ' configuration.'
      ),
      units='m',
      scale=us.m_to_L,
  )

  if grid.grid_unit_to_L <= 0.0:
    raise param_file_lib.ConfigurationError(
        f'{_MODULE}: ISOMIP topography is only set to work with Cartesian axis'
        ' units.'
    )

  dtype = isomip_types.f_dtype
  x = jnp.asarray(grid.geo_lon_t * grid.grid_unit_to_L, dtype=dtype)
  xtil = x / xbar
  bx = bedrock_along_flow(xtil, us)

  if is_2d:
    # A slice through the middle of the 3D trough.
    by = 2.0 * dc / (1.0 + np.exp(2.0 * wc / fc))
  else:
    y = jnp.asarray(grid.geo_lat_t * grid.grid_unit_to_L, dtype=dtype)
    by = trough_across_flow(y, dc, wc, ly, fc)

  depth = -jnp.maximum(bx + by, -bmax)
  depth = jnp.minimum(depth, max_depth)
  # Too-shallow points become land, flagged by half the minimum depth.
  depth = jnp.where(depth < min_depth, 0.5 * min_depth, depth)
  return depth
