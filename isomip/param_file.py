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

"""Key-value run-time parameters.

A `ParamFile` answers lookups of named parameters with typed defaults,
rescaling of dimensional values into internal units, an optional requirement
that the parameter be set, and a "do not log" mode used by parameters-only
passes.  Each parameter actually used is logged once.
"""

from collections.abc import Mapping
import json
from typing import Any

from absl import logging
from etils import epath

_MISSING = object()


class ConfigurationError(ValueError):
  """A fatal error in the configuration of the run.

  None of these errors is recoverable; the run must be aborted.
  """

  pass


class ParamFile:
  """Run-time parameters, looked up by name."""

  def __init__(self, params: Mapping[str, Any] | None = None):
    self._params = dict(params or {})
    # Unscaled values of the parameters that have been logged.
    self.logged: dict[str, Any] = {}
    # Names of all the parameters that have been queried.
    self.read: set[str] = set()

  @classmethod
  def from_json_file(cls, path: str) -> 'ParamFile':
    """Load the parameters from a JSON file holding a single object."""
    contents = epath.Path(path).read_text()
    params = json.loads(contents)
    if not isinstance(params, dict):
      raise ConfigurationError(
          f'Parameter file {path} must contain a JSON object, got'
          f' {type(params).__name__}.'
      )
    logging.info('Loaded %d parameters from `%s`.', len(params), path)
    return cls(params)

  def __contains__(self, key: str) -> bool:
    return key in self._params

  def log_version(self, module: str, version: str = '') -> None:
    logging.info('Module %s, version %s', module, version or 'unknown')

  def get_param(
      self,
      module: str,
      key: str,
      default: Any = _MISSING,
      desc: str = '',
      units: str = '',
      scale: float = 1.0,
      fail_if_missing: bool = False,
      do_not_log: bool = False,
  ) -> Any:
    """Returns the value of parameter `key`, rescaled into internal units.

    Args:
      module: The name of the module requesting the parameter, used in logs
        and error messages.
      key: The name of the parameter.
      default: The value used if the parameter is not set.
      desc: A description of the parameter, for the log.
      units: The units of the parameter as it is set, for the log.
      scale: A factor multiplying numerical values (including the default) to
        convert them into internal units.  Booleans and strings are never
        scaled.
      fail_if_missing: If true, a missing parameter is a fatal error, even if a
        default is given.
      do_not_log: If true, the value is not logged.

    Returns:
      The (rescaled) value of the parameter.

    Raises:
      ConfigurationError: If the parameter is missing and either is required or
        has no default.
    """
    self.read.add(key)
    if key in self._params:
      value = self._params[key]
    elif fail_if_missing:
      raise ConfigurationError(
          f'{module}: Unable to find the required parameter {key}.'
      )
    elif default is _MISSING:
      raise ConfigurationError(
          f'{module}: Parameter {key} is not set and has no default.'
      )
    else:
      value = default

    if not do_not_log and key not in self.logged:
      self.logged[key] = value
      logging.info('%s: %s = %r ! [%s] %s', module, key, value, units, desc)

    return _rescale(value, scale)


def _rescale(value: Any, scale: float) -> Any:
  if isinstance(value, bool) or not isinstance(value, (int, float)):
    return value
  return float(value) * scale
