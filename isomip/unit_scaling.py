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

"""Dimensional rescaling factors.

Internal units can be rescaled away from mks for dimensional consistency
testing.  Units are noted with letters: Z for heights, L for horizontal
lengths, T for time, C for temperature, S for salinity and R for density, e.g.
a depth [Z ~> m].  With the default factors of 1, internal units are mks.
"""

import dataclasses

import dataclasses_json  # Used for JSON serialization.


@dataclasses.dataclass(frozen=True, kw_only=True)
class UnitScale(dataclasses_json.DataClassJsonMixin):
  """Factors converting mks values into internal units."""

  m_to_Z: float = 1.0  # pylint: disable=invalid-name
  m_to_L: float = 1.0  # pylint: disable=invalid-name
  s_to_T: float = 1.0  # pylint: disable=invalid-name
  degC_to_C: float = 1.0  # pylint: disable=invalid-name
  ppt_to_S: float = 1.0  # pylint: disable=invalid-name
  kg_m3_to_R: float = 1.0  # pylint: disable=invalid-name

  def __post_init__(self):
    for field in dataclasses.fields(self):
      if getattr(self, field.name) <= 0.0:
        raise ValueError(
            f'Unit scaling factor {field.name} must be positive, got'
            f' {getattr(self, field.name)}.'
        )

  @property
  def Z_to_m(self) -> float:  # pylint: disable=invalid-name
    return 1.0 / self.m_to_Z

  @property
  def L_to_m(self) -> float:  # pylint: disable=invalid-name
    return 1.0 / self.m_to_L

  @property
  def C_to_degC(self) -> float:  # pylint: disable=invalid-name
    return 1.0 / self.degC_to_C

  @property
  def S_to_ppt(self) -> float:  # pylint: disable=invalid-name
    return 1.0 / self.ppt_to_S
