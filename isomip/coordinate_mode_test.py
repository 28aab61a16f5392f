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


from absl.testing import absltest
from absl.testing import parameterized
from isomip import coordinate_mode
from isomip import param_file

CoordinateMode = coordinate_mode.CoordinateMode


class CoordinateModeTest(parameterized.TestCase):

  @parameterized.parameters(
      ('LAYER', CoordinateMode.LAYER),
      ('Z*', CoordinateMode.ZSTAR),
      ('ZSTAR', CoordinateMode.ZSTAR),
      ('z*', CoordinateMode.ZSTAR),
      ('SIGMA_SHELF_ZSTAR', CoordinateMode.SIGMA_SHELF_ZSTAR),
      (' rho ', CoordinateMode.RHO),
      ('sigma', CoordinateMode.SIGMA),
      ('HYCOM1', CoordinateMode.HYCOM1),
      ('HYBGEN', CoordinateMode.HYBGEN),
      ('ADAPTIVE', CoordinateMode.ADAPTIVE),
  )
  def test_coordinate_mode_parses_names(self, name, expected):
    self.assertEqual(coordinate_mode.coordinate_mode(name), expected)

  def test_default_mode_is_layer(self):
    self.assertEqual(
        coordinate_mode.coordinate_mode(
            coordinate_mode.DEFAULT_COORDINATE_MODE
        ),
        CoordinateMode.LAYER,
    )

  def test_unknown_name_raises(self):
    with self.assertRaisesRegex(
        param_file.ConfigurationError, 'Unrecognized choice of coordinate'
    ):
      coordinate_mode.coordinate_mode('ISOPYCNAL')


if __name__ == '__main__':
  absltest.main()
