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

"""Commonly used constants of the ISOMIP configuration."""

SECONDS_PER_DAY = 86400.0  # [s].

# Default minimum layer thickness used with isopycnal coordinates [m].
ANGSTROM = 1e-10

# Coefficients of the 6th-order bedrock polynomial in the along-flow position
# normalized by the bedrock length scale [m].
BEDROCK_B0 = -150.0
BEDROCK_B2 = -728.8
BEDROCK_B4 = 343.91
BEDROCK_B6 = -50.57

# The sponge ramps up linearly between these two x positions, in grid units
# (km for the standard ISOMIP domain).
SPONGE_X_START = 790.0
SPONGE_X_END = 800.0

# Number of correction sweeps of the layer density fit.  No convergence test
# is applied; the sweep count is authoritative.
DENSITY_FIT_ITERATIONS = 6
