#!/usr/bin/env python3
#
# Copyright 2022 Max Planck Insitute Magdeburg
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
#
#
#
"""Static strings, numeric defaults and exceptions used in the phenomapping package

    Solvers and status codes

        SOLVER = 'solver'

        GLPK = 'glpk'

        OPTIMAL = 'optimal' # from optlang interface

        INFEASIBLE ='infeasible' # from optlang interface

        TIME_LIMIT = 'time_limit' # from optlang interface

        UNBOUNDED = 'unbounded' # from optlang interface

        TIME_LIMIT_W_SOL = 'time_limit_w_sols'

        ERROR = 'error'

    Variable types and constraint relations

        CONTINUOUS = 'C'

        BINARY = 'B'

        LEQ = '<'

        GEQ = '>'

        EQ = '='

    Variable and constraint tags of the TFA structure

        F_ = 'F_', R_ = 'R_', NF_ = 'NF_', FU_ = 'FU_', BU_ = 'BU_', LC_ = 'LC_'

        BFUSE = 'BFUSE', LCUSE = 'LCUSE'

    Analysis options

        FLAG_UPT, MIN_OBJ, MAX_OBJ, DRAINS_FOR_IMM, RXN_NO_THERMO, REACTION_DB,
        METAB_DATA, THERMO_BUILDER, GR_RATE, NUM_ALT, FIX_SIZE, T_LIMIT

        MAXIMIZE = 'maximize'

        MINIMIZE = 'minimize'
"""

# Solvers and status codes
SOLVER = 'solver'
GLPK = 'glpk'
from optlang.interface import OPTIMAL,    \
                              INFEASIBLE, \
                              TIME_LIMIT, \
                              UNBOUNDED

TIME_LIMIT_W_SOL = 'time_limit_w_sols'
ERROR = 'error'

# Variable types and constraint relations
CONTINUOUS = 'C'
BINARY = 'B'
LEQ = '<'
GEQ = '>'
EQ = '='

# TFA structure tags
F_ = 'F_'
R_ = 'R_'
NF_ = 'NF_'
FU_ = 'FU_'
BU_ = 'BU_'
LC_ = 'LC_'
BFUSE = 'BFUSE'
LCUSE = 'LCUSE'
CUT = 'CUT'

# Analysis options
FLAG_UPT = 'flag_upt'
MIN_OBJ = 'min_obj'
MAX_OBJ = 'max_obj'
DRAINS_FOR_IMM = 'drains_for_imm'
RXN_NO_THERMO = 'rxn_no_thermo'
REACTION_DB = 'reaction_db'
METAB_DATA = 'metab_data'
THERMO_BUILDER = 'thermo_builder'
GR_RATE = 'gr_rate'
NUM_ALT = 'num_alt'
FIX_SIZE = 'fix_size'
T_LIMIT = 'time_limit'
MAXIMIZE = 'maximize'
MINIMIZE = 'minimize'

# Numeric defaults
BIG_M_FLUX = 1000.0  # flux capacity bound of the use-variable coupling
BFUSE_THRESHOLD = 50.0  # drain flux cap when BFUSE = 0
ACTIVE_THRESHOLD = 0.98  # solver-noise tolerance for "indicator is on"
ROUND_DECIMALS = 5
DEFAULT_GR_RATE = 0.1 * 0.07
DEFAULT_NUM_ALT = 100
DEFAULT_OBJ_FRACTION = 0.9
DEFAULT_CONC_RANGE = (1e-8, 0.02)  # mol/L


class NameCollisionError(ValueError):
    """A variable or constraint name is already taken in the model"""


class InconsistentSolutionError(RuntimeError):
    """The solver returned a solution that contradicts the MILP formulation"""


class SolverError(RuntimeError):
    """The solver failed, hit its time limit without a solution or reported an unbounded problem"""
