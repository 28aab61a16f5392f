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

"""Registration of sponge columns and of the tracers they damp.

A sponge holds, for every column of the compute domain with a positive
damping rate, the damping rate and the target vertical geometry: interface
heights for the layer sponge, or layer thicknesses for the ALE sponge, whose
targets are remapped onto the model layers by the relaxation step.  Tracers
are then registered with a target profile per sponge column.  Applying the
relaxation each time step is left to the host model.
"""

import dataclasses
from typing import TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
import numpy as np
from isomip import grid as grid_lib
from isomip import param_file as param_file_lib

Array: TypeAlias = jax.Array


@dataclasses.dataclass(frozen=True)
class SpongeField:
  """A tracer damped toward a target profile in every sponge column."""

  name: str
  long_name: str
  units: str
  # Target values, shape (num_columns, nz).
  target: Array
  # The host's field that is damped, shape (nxd, nyd, nz).
  state: Array


class _ColumnSponge:
  """The sponge columns of the compute domain, shared by both sponges."""

  def __init__(self, idamp: Array, grid: grid_lib.HorizontalGrid):
    idamp = np.asarray(idamp)
    if idamp.shape != grid.shape:
      raise ValueError(
          f'Damping rate shape {idamp.shape} does not match the grid shape'
          f' {grid.shape}.'
      )
    cs = grid.compute_slice
    i_c, j_c = np.nonzero(idamp[cs] > 0.0)
    # Column indices in the data domain.
    self.i = i_c + grid.halo_width
    self.j = j_c + grid.halo_width
    self.idamp = jnp.asarray(idamp[self.i, self.j])
    self.fields: dict[str, SpongeField] = {}

  @property
  def num_columns(self) -> int:
    return int(self.i.size)

  def columns(self, f: Array) -> Array:
    """Extracts the sponge columns of a 3D field, shape (num_columns, nk)."""
    return jnp.asarray(f)[self.i, self.j, :]

  def set_up_field(
      self,
      target: Array,
      state: Array,
      name: str,
      long_name: str,
      units: str,
  ) -> SpongeField:
    """Registers the field `state` to be damped toward `target`.

    Args:
      target: The target values, shape (nxd, nyd, nz).
      state: The host's field that is damped, shape (nxd, nyd, nz).
      name: A short name for the field, unique within this sponge.
      long_name: A descriptive name for the field.
      units: The units of the damping tendency of the field.

    Returns:
      The registered field.

    Raises:
      ConfigurationError: If a field named `name` is already registered.
    """
    if name in self.fields:
      raise param_file_lib.ConfigurationError(
          f'set_up_field: Sponge field {name} is already registered.'
      )
    if np.shape(target)[:2] != np.shape(state)[:2]:
      raise ValueError(
          f'Target shape {np.shape(target)} and state shape'
          f' {np.shape(state)} of sponge field {name} differ.'
      )
    field = SpongeField(
        name=name,
        long_name=long_name,
        units=units,
        target=self.columns(target),
        state=state,
    )
    self.fields[name] = field
    logging.info(
        'Registered sponge field %s (%s) [%s] over %d columns.',
        name,
        long_name,
        units,
        self.num_columns,
    )
    return field


class LayerSponge(_ColumnSponge):
  """A sponge damping toward target interface heights, for layered models."""

  def __init__(self, idamp: Array, eta: Array, grid: grid_lib.HorizontalGrid):
    super().__init__(idamp, grid)
    # Target interface heights [Z ~> m], shape (num_columns, nz + 1).
    self.eta = self.columns(eta)

  @property
  def nz(self) -> int:
    return int(self.eta.shape[-1]) - 1


class ALESponge(_ColumnSponge):
  """A sponge whose targets are given on their own layer thicknesses."""

  def __init__(self, idamp: Array, dz: Array, grid: grid_lib.HorizontalGrid):
    super().__init__(idamp, grid)
    # Thicknesses of the target layers [Z ~> m], shape (num_columns, nz).
    self.dz = self.columns(dz)

  @property
  def nz(self) -> int:
    return int(self.dz.shape[-1])


@dataclasses.dataclass
class SpongeControls:
  """The sponge control structures of the host, unset until configured."""

  layer: LayerSponge | None = None
  ale: ALESponge | None = None

  @property
  def is_configured(self) -> bool:
    return self.layer is not None or self.ale is not None


def initialize_layer_sponge(
    idamp: Array, eta: Array, grid: grid_lib.HorizontalGrid
) -> LayerSponge:
  """Sets up a layer sponge from its damping rates and interface heights."""
  sponge = LayerSponge(idamp, eta, grid)
  logging.info('Layer sponge with %d columns.', sponge.num_columns)
  return sponge


def initialize_ale_sponge(
    idamp: Array, dz: Array, grid: grid_lib.HorizontalGrid
) -> ALESponge:
  """Sets up an ALE sponge from its damping rates and target thicknesses."""
  sponge = ALESponge(idamp, dz, grid)
  logging.info('ALE sponge with %d columns.', sponge.num_columns)
  return sponge
