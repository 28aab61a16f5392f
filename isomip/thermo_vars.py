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

"""Thermodynamic state of the host model."""

import dataclasses
from typing import TypeAlias

import jax
from isomip import eos

Array: TypeAlias = jax.Array


@dataclasses.dataclass(frozen=True)
class ThermoVars:
  """The thermodynamic fields carried by the host model.

  Absent fields are None, e.g. for a model without salinity.
  """

  eqn_of_state: eos.EquationOfState
  # Potential temperature [C ~> degC].
  T: Array | None = None  # pylint: disable=invalid-name
  # Salinity [S ~> ppt].
  S: Array | None = None  # pylint: disable=invalid-name
