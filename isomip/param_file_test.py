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


import json

from absl.testing import absltest
from absl.testing import parameterized
from isomip import param_file


class ParamFileTest(parameterized.TestCase):

  def test_get_param_returns_set_value_rescaled(self):
    # SETUP
    params = param_file.ParamFile({'MINIMUM_DEPTH': 10.0})

    # ACTION
    min_depth = params.get_param(
        'mod', 'MINIMUM_DEPTH', default=0.0, units='m', scale=2.0
    )

    # VERIFICATION
    self.assertEqual(min_depth, 20.0)
    # The unscaled value is logged.
    self.assertEqual(params.logged, {'MINIMUM_DEPTH': 10.0})
    self.assertEqual(params.read, {'MINIMUM_DEPTH'})

  def test_get_param_scales_default(self):
    params = param_file.ParamFile()
    self.assertEqual(params.get_param('mod', 'X', default=3.0, scale=0.5), 1.5)

  @parameterized.parameters(True, 'ZSTAR')
  def test_booleans_and_strings_are_not_scaled(self, value):
    params = param_file.ParamFile({'KEY': value})
    self.assertEqual(params.get_param('mod', 'KEY', scale=7.0), value)

  def test_int_values_are_scaled_to_float(self):
    params = param_file.ParamFile({'KEY': 3})
    value = params.get_param('mod', 'KEY', scale=2.0)
    self.assertIsInstance(value, float)
    self.assertEqual(value, 6.0)

  def test_missing_required_param_raises_even_with_default(self):
    params = param_file.ParamFile()
    with self.assertRaisesRegex(
        param_file.ConfigurationError,
        'mod: Unable to find the required parameter DRHO_DS',
    ):
      params.get_param('mod', 'DRHO_DS', default=0.0, fail_if_missing=True)

  def test_missing_param_without_default_raises(self):
    params = param_file.ParamFile()
    with self.assertRaisesRegex(param_file.ConfigurationError, 'no default'):
      params.get_param('mod', 'KEY')

  def test_do_not_log_records_read_but_not_logged(self):
    # SETUP
    params = param_file.ParamFile({'KEY': 1.0})

    # ACTION
    params.get_param('mod', 'KEY', do_not_log=True)
    params.get_param('mod', 'OTHER', default='a', do_not_log=True)

    # VERIFICATION
    self.assertEmpty(params.logged)
    self.assertEqual(params.read, {'KEY', 'OTHER'})

  def test_each_param_is_logged_once(self):
    params = param_file.ParamFile({'KEY': 1.0})
    params.get_param('mod', 'KEY')
    params.get_param('other_mod', 'KEY', scale=2.0)
    self.assertEqual(params.logged, {'KEY': 1.0})

  def test_contains(self):
    params = param_file.ParamFile({'KEY': 1.0})
    self.assertIn('KEY', params)
    self.assertNotIn('OTHER', params)

  def test_from_json_file(self):
    # SETUP
    path = self.create_tempfile(
        content=json.dumps({'ISOMIP_2D': True, 'ISOMIP_TNUDG': 2.5})
    ).full_path

    # ACTION
    params = param_file.ParamFile.from_json_file(path)

    # VERIFICATION
    self.assertTrue(params.get_param('mod', 'ISOMIP_2D', default=False))
    self.assertEqual(params.get_param('mod', 'ISOMIP_TNUDG', scale=2.0), 5.0)

  def test_from_json_file_requires_an_object(self):
    path = self.create_tempfile(content='[1, 2, 3]').full_path
    with self.assertRaisesRegex(param_file.ConfigurationError, 'JSON object'):
      param_file.ParamFile.from_json_file(path)


if __name__ == '__main__':
  absltest.main()
