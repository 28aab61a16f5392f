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

"""Vertical coordinate modes of the regridding scheme."""

import enum
from isomip import param_file

ConfigurationError = param_file.ConfigurationError


class CoordinateMode(enum.Enum):
  """Vertical coordinate used by the regridding scheme."""

  LAYER = 'LAYER'  # Isopycnal layers, no regridding.
  ZSTAR = 'ZSTAR'  # Stretched geopotential z*.
  # z* in the open ocean, sigma under ice shelves.
  SIGMA_SHELF_ZSTAR = 'SIGMA_SHELF_ZSTAR'
  RHO = 'RHO'  # Continuous isopycnal.
  SIGMA = 'SIGMA'  # Terrain following.
  HYCOM1 = 'HYCOM1'  # HYCOM-like hybrid.
  HYBGEN = 'HYBGEN'  # HYCOM hybrid generator.
  ADAPTIVE = 'ADAPTIVE'  # Adaptive coordinate.


DEFAULT_COORDINATE_MODE = CoordinateMode.LAYER.value

# Alternative spellings accepted for some modes.
_ALIASES = {
    'Z*': CoordinateMode.ZSTAR,
}


def coordinate_mode(name: str) -> CoordinateMode:
  """Parses the name of a vertical coordinate, ignoring case and padding.

  Args:
    name: The name of the coordinate, e.g. 'Z*' or 'sigma'.

  Returns:
    The corresponding coordinate mode.

  Raises:
    ConfigurationError: If the name is not a recognized coordinate.
  """
  key = name.strip().upper()
  if key in _ALIASES:
    return _ALIASES[key]
  try:
    return CoordinateMode(key)
  except ValueError:
    raise ConfigurationError(
        f'coordinate_mode: Unrecognized choice of coordinate "{name}".'
    ) from None
