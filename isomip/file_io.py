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

"""Common file IO operations."""

from typing import TypeAlias

from absl import logging
from etils import epath
import jax
import jax.numpy as jnp
import netCDF4 as nc
import numpy as np
from isomip import isomip_types

Array: TypeAlias = jax.Array


def slasher(directory: str) -> str:
  """Returns `directory` with exactly one trailing slash appended if needed."""
  if not directory:
    return './'
  return directory if directory.endswith('/') else directory + '/'


def file_exists(path: str) -> bool:
  return epath.Path(path).is_file()


def load_from_path(path: str) -> str:
  """Attempt to load file pointed to by `path`.

  Args:
    path: The path to the file to load.

  Returns:
    The contents of the file.
  """
  contents = epath.Path(path).read_text()
  logging.info('Loaded file `%s` from file system.', path)
  return contents


def strip_line_comments(text: str, comment_marker: str) -> str:
  """Removes everything from `comment_marker` to the end of each line."""
  return '\n'.join(
      line.split(comment_marker, 1)[0] for line in text.splitlines()
  )


def load_array_from_file(path: str) -> np.ndarray:
  """Loads a 1D array from a text file and returns it as a numpy array.

  Each element of the array must be on its own line; `#` starts a comment.

  Args:
    path: The path to the file to load.

  Returns:
    A 1D numpy array of the data from the file.
  """
  contents = strip_line_comments(load_from_path(path), '#')
  values = [float(token) for token in contents.split()]
  return np.array(values, dtype=np.float64)


def read_variable(path: str, var_name: str, scale: float = 1.0) -> Array:
  """Reads a 3D variable from a netCDF file and rescales it.

  Variables are stored (z, y, x), or (time, z, y, x) in which case the first
  record is used.  They are returned laid out (x, y, z).

  Args:
    path: Full path of the netCDF file.
    var_name: The name of the variable to read.
    scale: A factor converting the stored values into internal units.

  Returns:
    The variable as an array of shape (nx, ny, nz).

  Raises:
    KeyError: If the file has no variable named `var_name`.
    ValueError: If the variable does not have 3 spatial dimensions.
  """
  with nc.Dataset(path, 'r') as ds:
    if var_name not in ds.variables:
      raise KeyError(f'Variable {var_name} not found in {path}.')
    val = ds[var_name][:].data
  if val.ndim == 4:
    val = val[0]
  if val.ndim != 3:
    raise ValueError(
        f'Variable {var_name} in {path} must be 3D (z, y, x), got shape'
        f' {val.shape}.'
    )
  logging.info('Read `%s` with shape %s from `%s`.', var_name, val.shape, path)
  return jnp.array(
      np.transpose(val, (2, 1, 0)) * scale, dtype=isomip_types.f_dtype
  )
