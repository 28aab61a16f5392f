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

"""Domain configuration of the ISOMIP setup."""

import dataclasses

from absl import logging
import dataclasses_json
from etils import epath
import numpy as np
from isomip import constants
from isomip import file_io
from isomip import grid
from isomip import unit_scaling


@dataclasses.dataclass(frozen=True, kw_only=True)
class ConfigExternal(dataclasses_json.DataClassJsonMixin):
  """Config that is external to the initialization routines."""

  # Number of cells in each dimension (excluding halos).
  nx: int = 240
  ny: int = 40
  nz: int = 36
  # Domain end points in grid units.  The default ISOMIP domain spans
  # 320-800 km along the flow and 0-80 km across it.
  domain_x: tuple[float, float] = (320.0, 800.0)
  domain_y: tuple[float, float] = (0.0, 80.0)
  halo_width: int = 1
  # Length of one grid unit [m]; grid coordinates are in km by default.
  grid_unit_to_L: float = 1.0e3  # pylint: disable=invalid-name
  max_depth: float = 720.0  # [m].
  angstrom: float = constants.ANGSTROM  # [m].

  # Layer target densities.  If `rlay_path` is set, they are loaded from that
  # file (one value per line); otherwise they are spaced linearly from
  # `lightest_density` over `density_range`.
  rlay_path: str = ''
  lightest_density: float = 1027.51  # [kg m-3].
  density_range: float = 0.5  # [kg m-3].

  us: unit_scaling.UnitScale = unit_scaling.UnitScale()

  def __post_init__(self):
    if min(self.nx, self.ny, self.nz) < 1:
      raise ValueError(
          f'Grid sizes must be positive: {(self.nx, self.ny, self.nz)=}.'
      )
    if self.halo_width < 0:
      raise ValueError(f'halo_width must be >= 0, got {self.halo_width}.')
    if self.max_depth <= 0.0:
      raise ValueError(f'max_depth must be positive, got {self.max_depth}.')


def save_json(cfgext: ConfigExternal, output_dir: str):
  """Save a ConfigExternal to a JSON file."""
  logging.info('Saving config in json format')
  dirpath = epath.Path(output_dir)
  dirpath.mkdir(mode=0o775, parents=True, exist_ok=True)
  filepath = dirpath / 'cfg.json'
  filepath.write_text(cfgext.to_json(indent=2))


def load_json(output_dir: str) -> ConfigExternal:
  """Load a ConfigExternal from a JSON file."""
  path = epath.Path(output_dir) / 'cfg.json'
  return ConfigExternal.from_json(path.read_text())


def _layer_densities(cfgext: ConfigExternal) -> np.ndarray:
  """Target density of each layer, in kg m-3."""
  if cfgext.rlay_path:
    rlay = file_io.load_array_from_file(cfgext.rlay_path)
    assert len(rlay) == cfgext.nz, (
        f'Number of layer densities {len(rlay)} given in {cfgext.rlay_path}'
        f' does not match nz={cfgext.nz}.'
    )
    return rlay
  if cfgext.nz == 1:
    return np.array([cfgext.lightest_density])
  return cfgext.lightest_density + cfgext.density_range * np.arange(
      cfgext.nz
  ) / (cfgext.nz - 1)


def grids_from_config_external(
    cfgext: ConfigExternal,
) -> tuple[grid.HorizontalGrid, grid.VerticalGrid]:
  """Create the horizontal and vertical grids from a ConfigExternal."""
  us = cfgext.us
  hgrid = grid.uniform_horizontal_grid(
      cfgext.domain_x,
      cfgext.domain_y,
      cfgext.nx,
      cfgext.ny,
      max_depth=cfgext.max_depth * us.m_to_Z,
      grid_unit_to_L=cfgext.grid_unit_to_L * us.m_to_L,
      halo_width=cfgext.halo_width,
  )
  vgrid = grid.VerticalGrid(
      rlay=_layer_densities(cfgext) * us.kg_m3_to_R,
      angstrom_z=cfgext.angstrom * us.m_to_Z,
  )
  return hgrid, vgrid
