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


import os
import re

from absl.testing import absltest
from absl.testing import parameterized
import jax
import jax.numpy as jnp
import numpy as np
from isomip import constants
from isomip import eos
from isomip import grid as grid_lib
from isomip import param_file
from isomip import sponge
from isomip import sponge_registry
from isomip import test_util
from isomip import thermo_vars

_NZ = 4


def _grid() -> grid_lib.HorizontalGrid:
  # Cell centers at x = 782.5, 787.5, 792.5 and 797.5 km in the compute
  # domain, with a halo of width 1.
  return grid_lib.uniform_horizontal_grid(
      (780.0, 800.0),
      (0.0, 4.0),
      4,
      2,
      max_depth=400.0,
      grid_unit_to_L=1.0e3,
      halo_width=1,
  )


def _thermo_vars(grid, with_temp=True, with_salt=True):
  shape = grid.shape + (_NZ,)
  return thermo_vars.ThermoVars(
      eqn_of_state=eos.LinearEOS(),
      T=jnp.zeros(shape) if with_temp else None,
      S=jnp.zeros(shape) if with_salt else None,
  )


class DampingRateTest(parameterized.TestCase):

  def test_damping_rate_ramps_across_band(self):
    # SETUP
    x = np.array([780.0, 790.0, 795.0, 800.0, 805.0])
    grid = test_util.grid_from_coordinates(
        x=x, y=[0.0, 1.0, 2.0], max_depth=100.0
    )
    depth_tot = jnp.full(grid.shape, 100.0)
    tnudg = constants.SECONDS_PER_DAY

    # ACTION
    idamp = sponge.damping_rate(grid, depth_tot, 0.0, tnudg)

    # VERIFICATION
    expected = np.array([0.0, 0.0, 0.5, 1.0, 0.0]) / tnudg
    for j in range(3):
      np.testing.assert_allclose(idamp[:, j], expected, rtol=1e-6, atol=0)

  def test_no_damping_over_land(self):
    # SETUP
    grid = test_util.grid_from_coordinates(
        x=[795.0, 798.0, 800.0], y=[0.0, 1.0, 2.0], max_depth=100.0
    )
    depth_tot = jnp.array([
        [100.0, 5.0, 10.0],
        [100.0, 100.0, 100.0],
        [10.0, 100.0, 11.0],
    ])

    # ACTION
    idamp = np.asarray(sponge.damping_rate(grid, depth_tot, 10.0, 1.0))

    # VERIFICATION
    np.testing.assert_array_equal(idamp[np.asarray(depth_tot) <= 10.0], 0.0)
    np.testing.assert_allclose(idamp[2, 2], 1.0, rtol=1e-6)
    # Non-decreasing across the band.
    self.assertTrue(np.all(np.diff(idamp[:, 1]) >= 0.0))

  def test_halo_has_no_damping(self):
    grid = test_util.grid_from_coordinates(
        x=[790.0, 795.0, 796.0, 800.0],
        y=[0.0, 1.0, 2.0],
        max_depth=100.0,
        halo_width=1,
    )
    idamp = np.asarray(
        sponge.damping_rate(grid, jnp.full(grid.shape, 100.0), 0.0, 1.0)
    )
    np.testing.assert_array_equal(idamp[-1], 0.0)
    np.testing.assert_array_equal(idamp[:, 0], 0.0)
    np.testing.assert_allclose(idamp[1:3, 1], [0.5, 0.6], rtol=1e-5)


class ConfigureSpongesTest(parameterized.TestCase):

  def _write_sponge_file(self, grid, with_time_dim=False) -> str:
    nx, ny = grid.compute_shape
    eta = test_util.tile_profile([0.0, -100.0, -200.0, -300.0, -400.0], nx, ny)
    temp = test_util.tile_profile([1.0, 0.0, -1.0, -1.5], nx, ny)
    salt = test_util.tile_profile([34.0, 34.2, 34.4, 34.6], nx, ny)
    input_dir = self.create_tempdir().full_path
    test_util.write_netcdf_fields(
        os.path.join(input_dir, 'sponge.nc'),
        {'Temp': temp, 'Salt': salt, 'eta': eta},
        with_time_dim=with_time_dim,
    )
    return input_dir

  @parameterized.parameters('ZSTAR', 'SIGMA', 'RHO', 'LAYER')
  def test_ale_sponge(self, mode):
    # SETUP
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    tv = _thermo_vars(grid)
    params = param_file.ParamFile({
        'ISOMIP_TNUDG': 2.0,
        'REGRIDDING_COORDINATE_MODE': mode,
        'ISOMIP_T_SUR_SPONGE': 1.0,
        'ISOMIP_T_BOT_SPONGE': -1.0,
        'ISOMIP_S_SUR_SPONGE': 33.0,
        'ISOMIP_S_BOT_SPONGE': 35.0,
    })
    controls = sponge_registry.SpongeControls()

    # ACTION
    result = sponge.configure_sponges(
        grid,
        vgrid,
        tv,
        jnp.full(grid.shape, 400.0),
        params,
        use_ale=True,
        controls=controls,
    )

    # VERIFICATION
    self.assertIs(result, controls)
    self.assertIsNone(controls.layer)
    ale = controls.ale
    # Two damped positions along x, two across.
    self.assertEqual(ale.num_columns, 4)
    np.testing.assert_allclose(
        np.sort(np.asarray(ale.idamp)),
        np.array([0.25, 0.25, 0.75, 0.75]) / (2.0 * constants.SECONDS_PER_DAY),
        rtol=1e-5,
    )
    np.testing.assert_allclose(ale.dz.sum(axis=-1), 400.0, rtol=1e-5)
    self.assertEqual(set(ale.fields), {'temp', 'salt'})
    self.assertEqual(ale.fields['temp'].units, 'degC s-1')
    self.assertEqual(ale.fields['salt'].long_name, 'salinity')
    self.assertEqual(ale.fields['salt'].units, 'g kg-1 s-1')
    self.assertIs(ale.fields['temp'].state, tv.T)

    # Targets are linear in height between the sponge surface and bottom
    # values.
    z_mid = (
        -400.0
        + jnp.cumsum(ale.dz[:, ::-1], axis=-1)[:, ::-1]
        - 0.5 * ale.dz
    )
    np.testing.assert_allclose(
        ale.fields['temp'].target, 1.0 + z_mid / 200.0, atol=1e-4
    )
    np.testing.assert_allclose(
        ale.fields['salt'].target, 33.0 - z_mid / 200.0, atol=1e-4
    )

  def test_ale_sponge_zstar_layers(self):
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    params = param_file.ParamFile(
        {'ISOMIP_TNUDG': 1.0, 'REGRIDDING_COORDINATE_MODE': 'ZSTAR'}
    )
    controls = sponge.configure_sponges(
        grid,
        vgrid,
        _thermo_vars(grid),
        jnp.full(grid.shape, 400.0),
        params,
        use_ale=True,
        controls=sponge_registry.SpongeControls(),
    )
    np.testing.assert_allclose(controls.ale.dz, 100.0, rtol=1e-6)
    # Targets default to the reference temperature and salinity.
    np.testing.assert_allclose(controls.ale.fields['temp'].target, 10.0)
    np.testing.assert_allclose(controls.ale.fields['salt'].target, 35.0)

  def test_only_present_tracers_are_registered(self):
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    params = param_file.ParamFile(
        {'ISOMIP_TNUDG': 1.0, 'REGRIDDING_COORDINATE_MODE': 'SIGMA'}
    )
    controls = sponge.configure_sponges(
        grid,
        vgrid,
        _thermo_vars(grid, with_salt=False),
        jnp.full(grid.shape, 400.0),
        params,
        use_ale=True,
        controls=sponge_registry.SpongeControls(),
    )
    self.assertEqual(set(controls.ale.fields), {'temp'})

  @parameterized.parameters(True, False)
  def test_layer_sponge_reads_file(self, with_time_dim):
    # SETUP
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    input_dir = self._write_sponge_file(grid, with_time_dim)
    params = param_file.ParamFile({
        'ISOMIP_TNUDG': 1.0,
        'INPUTDIR': input_dir,
        'ISOMIP_SPONGE_FILE': 'sponge.nc',
    })
    controls = sponge_registry.SpongeControls()

    # ACTION
    sponge.configure_sponges(
        grid,
        vgrid,
        _thermo_vars(grid),
        jnp.full(grid.shape, 400.0),
        params,
        use_ale=False,
        controls=controls,
    )

    # VERIFICATION
    self.assertIsNone(controls.ale)
    layer = controls.layer
    self.assertEqual(layer.num_columns, 4)
    self.assertEqual(layer.nz, _NZ)
    np.testing.assert_allclose(
        layer.eta,
        np.tile([0.0, -100.0, -200.0, -300.0, -400.0], (4, 1)),
        atol=1e-4,
    )
    np.testing.assert_allclose(
        layer.fields['temp'].target, np.tile([1.0, 0.0, -1.0, -1.5], (4, 1))
    )
    np.testing.assert_allclose(
        layer.fields['salt'].target,
        np.tile([34.0, 34.2, 34.4, 34.6], (4, 1)),
        rtol=1e-6,
    )
    self.assertEqual(params.logged['SPONGE_PTEMP_VAR'], 'Temp')

  def test_layer_sponge_missing_file_raises(self):
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    input_dir = self.create_tempdir().full_path
    params = param_file.ParamFile({
        'ISOMIP_TNUDG': 1.0,
        'INPUTDIR': input_dir,
        'ISOMIP_SPONGE_FILE': 'missing.nc',
    })
    with self.assertRaisesRegex(
        param_file.ConfigurationError,
        re.escape(
            f'Unable to open {os.path.join(input_dir, "missing.nc")}'
        ),
    ):
      sponge.configure_sponges(
          grid,
          vgrid,
          _thermo_vars(grid),
          jnp.full(grid.shape, 400.0),
          params,
          use_ale=False,
          controls=sponge_registry.SpongeControls(),
      )

  @parameterized.parameters('Temp', 'Salt')
  def test_layer_sponge_tracer_levels_must_match(self, bad_var):
    # SETUP
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    nx, ny = grid.compute_shape
    fields = {
        'Temp': test_util.tile_profile([1.0, 0.0, -1.0, -1.5], nx, ny),
        'Salt': test_util.tile_profile([34.0, 34.2, 34.4, 34.6], nx, ny),
        'eta': test_util.tile_profile(
            [0.0, -100.0, -200.0, -300.0, -400.0], nx, ny
        ),
    }
    fields[bad_var] = fields[bad_var][..., :-1]
    input_dir = self.create_tempdir().full_path
    test_util.write_netcdf_fields(
        os.path.join(input_dir, 'sponge.nc'), fields
    )
    params = param_file.ParamFile({
        'ISOMIP_TNUDG': 1.0,
        'INPUTDIR': input_dir,
        'ISOMIP_SPONGE_FILE': 'sponge.nc',
    })

    # ACTION & VERIFICATION
    with self.assertRaisesRegex(
        param_file.ConfigurationError,
        f'Variable {bad_var} in .* has 3 levels, expected 4',
    ):
      sponge.configure_sponges(
          grid,
          vgrid,
          _thermo_vars(grid),
          jnp.full(grid.shape, 400.0),
          params,
          use_ale=False,
          controls=sponge_registry.SpongeControls(),
      )

  def test_layer_sponge_requires_file_name(self):
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    params = param_file.ParamFile({'ISOMIP_TNUDG': 1.0})
    with self.assertRaisesRegex(
        param_file.ConfigurationError, 'ISOMIP_SPONGE_FILE'
    ):
      sponge.configure_sponges(
          grid,
          vgrid,
          _thermo_vars(grid),
          jnp.full(grid.shape, 400.0),
          params,
          use_ale=False,
          controls=sponge_registry.SpongeControls(),
      )

  @parameterized.parameters('ale', 'layer')
  def test_already_configured_raises(self, attr):
    # SETUP
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    controls = sponge_registry.SpongeControls()
    idamp = jnp.zeros(grid.shape)
    if attr == 'ale':
      controls.ale = sponge_registry.initialize_ale_sponge(
          idamp, jnp.ones(grid.shape + (_NZ,)), grid
      )
    else:
      controls.layer = sponge_registry.initialize_layer_sponge(
          idamp, jnp.ones(grid.shape + (_NZ + 1,)), grid
      )
    params = param_file.ParamFile({'ISOMIP_TNUDG': 1.0})

    # ACTION & VERIFICATION
    with self.assertRaisesRegex(
        param_file.ConfigurationError, 'associated control structure'
    ):
      sponge.configure_sponges(
          grid,
          vgrid,
          _thermo_vars(grid),
          jnp.full(grid.shape, 400.0),
          params,
          use_ale=True,
          controls=controls,
      )
    self.assertEmpty(params.read)

  def test_nudging_time_must_be_positive(self):
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    with self.assertRaisesRegex(
        param_file.ConfigurationError, 'ISOMIP_TNUDG must be positive'
    ):
      sponge.configure_sponges(
          grid,
          vgrid,
          _thermo_vars(grid),
          jnp.full(grid.shape, 400.0),
          param_file.ParamFile(),
          use_ale=True,
          controls=sponge_registry.SpongeControls(),
      )

  def test_unsupported_mode_raises_in_ale_sponge(self):
    grid = _grid()
    vgrid = grid_lib.VerticalGrid(rlay=np.linspace(1026.0, 1028.0, _NZ))
    params = param_file.ParamFile(
        {'ISOMIP_TNUDG': 1.0, 'REGRIDDING_COORDINATE_MODE': 'HYBGEN'}
    )
    with self.assertRaisesRegex(
        param_file.ConfigurationError,
        'ISOMIP_initialize_sponges: Unrecognized i.c. setup',
    ):
      sponge.configure_sponges(
          grid,
          vgrid,
          _thermo_vars(grid),
          jnp.full(grid.shape, 400.0),
          params,
          use_ale=True,
          controls=sponge_registry.SpongeControls(),
      )


if __name__ == '__main__':
  jax.config.update('jax_enable_x64', True)
  absltest.main()
