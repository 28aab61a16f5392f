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

"""Equations of state for seawater.

The initialization routines only need the density and its partial derivatives
with respect to temperature and salinity, evaluated elementwise.
"""

import dataclasses
from typing import Protocol, TypeAlias

import jax
import jax.numpy as jnp

Array: TypeAlias = jax.Array


class EquationOfState(Protocol):
  """Density of seawater as a function of temperature, salinity, pressure."""

  def density(self, T: Array, S: Array, p: Array) -> Array:  # pylint: disable=invalid-name
    """Potential density [R ~> kg m-3] at T [C], S [S] and p [Pa]."""
    ...

  def density_derivs(
      self, T: Array, S: Array, p: Array  # pylint: disable=invalid-name
  ) -> tuple[Array, Array]:
    """Returns (drho_dT, drho_dS) at T, S, p."""
    ...


@dataclasses.dataclass(frozen=True)
class LinearEOS:
  """Density linear in temperature and salinity, independent of pressure."""

  rho_t0_s0: float = 1000.0  # Density at T=0, S=0 [kg m-3].
  drho_dt: float = -0.2  # [kg m-3 degC-1].
  drho_ds: float = 0.8  # [kg m-3 ppt-1].

  def density(self, T: Array, S: Array, p: Array) -> Array:  # pylint: disable=invalid-name
    del p
    return self.rho_t0_s0 + self.drho_dt * T + self.drho_ds * S

  def density_derivs(
      self, T: Array, S: Array, p: Array  # pylint: disable=invalid-name
  ) -> tuple[Array, Array]:
    del p
    shape = jnp.broadcast_shapes(jnp.shape(T), jnp.shape(S))
    return (
        jnp.full(shape, self.drho_dt, dtype=jnp.result_type(T, S, float)),
        jnp.full(shape, self.drho_ds, dtype=jnp.result_type(T, S, float)),
    )


@dataclasses.dataclass(frozen=True)
class SimplifiedEOS:
  """A nonlinear density with cabbeling and compressibility.

    rho = rho0 [1 - alpha dT - gamma/2 dT^2 + beta dS] [1 + kappa p]

  where dT = T - t0 and dS = S - s0.
  """

  rho0: float = 1027.0  # Reference density [kg m-3].
  t0: float = 0.0  # Reference temperature [degC].
  s0: float = 35.0  # Reference salinity [ppt].
  alpha: float = 1.67e-4  # Thermal expansion coefficient [degC-1].
  beta: float = 7.8e-4  # Haline contraction coefficient [ppt-1].
  gamma: float = 5.5e-6  # Cabbeling coefficient [degC-2].
  kappa: float = 4.4e-10  # Compressibility [Pa-1].

  def density(self, T: Array, S: Array, p: Array) -> Array:  # pylint: disable=invalid-name
    dt = T - self.t0
    ds = S - self.s0
    return (
        self.rho0
        * (1.0 - self.alpha * dt - 0.5 * self.gamma * dt**2 + self.beta * ds)
        * (1.0 + self.kappa * p)
    )

  def density_derivs(
      self, T: Array, S: Array, p: Array  # pylint: disable=invalid-name
  ) -> tuple[Array, Array]:
    dt = T - self.t0
    compression = self.rho0 * (1.0 + self.kappa * p)
    drho_dt = -compression * (self.alpha + self.gamma * dt)
    drho_ds = compression * self.beta * jnp.ones_like(S)
    return drho_dt, drho_ds
