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
"""Solver selection and optimization of TFA models"""

from cobra.core import Solution
from cobra import Configuration
from re import search
from numpy import nan, isnan
from pandas import Series
from phenomapping import avail_solvers
from phenomapping.names import *
import logging


def select_solver(solver=None) -> str:
    """Select a solver for subsequent MILP/LP computations

    If a solver is given and available, it is used. Otherwise the solver
    configured in the COBRA configuration is used if it is available. As a
    last resort, the first solver found at package initialization is
    returned.

    Example:
        solver = select_solver('glpk')

    Args:
        solver (optional (str)):
            A user preferred solver, that should be checked for availability.

    Returns:
        (str):
            The selected solver name.
    """
    if not avail_solvers:
        raise Exception('No solver available. Please install swiglpk.')
    if solver:
        if solver in avail_solvers:
            return solver
        logging.warning('Selected solver ' + solver + ' not available. Using ' + list(avail_solvers)[0] + " instead.")
    pattern = '(' + '|'.join(avail_solvers) + ')'
    cobra_conf = Configuration()
    if hasattr(cobra_conf, 'solver'):
        found = search(pattern, cobra_conf.solver.__name__)
        if found is not None:
            return found[0]
        logging.warning('Solver specified in cobra config (' + cobra_conf.solver.__name__ + ') unavailable')
    return list(avail_solvers)[0]


def optimize_tfa(model, **kwargs) -> Solution:
    """Solve the MILP/LP of a TFA model

    The objective f and the objective direction objtype of the model are used
    as they are. The model is not modified.

    Example:
        sol = optimize_tfa(model, solver='glpk')

    Args:
        model (phenomapping.TFAModel):
            A model with a TFA layer.

        solver (optional (str)):
            The solver backend.

        time_limit (optional (float)):
            Time limit in seconds, handed to the solver backend.

    Returns:
        (cobra.core.Solution):
            objective_value (in the direction of the model objective), status and
            the values of all TFA variables as a pandas Series indexed by variable
            name (field fluxes).
    """
    allowed_keys = {SOLVER, T_LIMIT}
    for key in kwargs:
        if key not in allowed_keys:
            raise ValueError('Key ' + key + ' is not supported.')
    solver = select_solver(kwargs.get(SOLVER))
    milp = model.to_milp(solver=solver, tlim=kwargs.get(T_LIMIT))
    x, min_cx, status = milp.solve()
    if status in [OPTIMAL, TIME_LIMIT_W_SOL]:
        objective_value = -min_cx if model.objtype == MAXIMIZE else min_cx
    else:
        objective_value = nan
        if status == UNBOUNDED:
            logging.warning('TFA problem of model ' + str(model.id) + ' is unbounded.')
    values = Series([v if isnan(v) or abs(v) >= 1e-11 else 0.0 for v in x], index=model.var_names, dtype=float)
    return Solution(objective_value=objective_value, status=status, fluxes=values)

