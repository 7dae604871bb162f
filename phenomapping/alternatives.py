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
"""Enumeration of alternative MILP solutions with integer cuts"""

import numpy as np
from typing import List, Tuple
from phenomapping import optimize_tfa
from phenomapping.names import *
import logging


def next_constraint_name(model, prefix) -> str:
    """First unused constraint name of the form <prefix>_<n>, n = 1, 2, ..."""
    n = 1
    while model.has_cons(prefix + '_' + str(n)):
        n += 1
    return prefix + '_' + str(n)


def add_integer_cut(model, ind, z) -> int:
    """Exclude the binary activation pattern z of the indicators ind (but not its sub- or supersets)

    The cut sum(z_i = 1: x_i) - sum(z_i = 0: x_i) <= sum(z) - 1 is violated by
    exactly the pattern z.

    Returns:
        (int):
            Row index of the cut.
    """
    if len(ind) != len(z):
        raise ValueError('One pattern entry per indicator is required.')
    row = {i: (1.0 if v else -1.0) for i, v in zip(ind, z)}
    name = next_constraint_name(model, CUT)
    return model.add_constraints([(name, LEQ, float(sum(z)) - 1.0, row)])[0]


def active_pattern(x, ind, threshold=ACTIVE_THRESHOLD) -> Tuple[int, ...]:
    """Binarize the indicator values of a solution vector (1 if above threshold)"""
    return tuple(int(x[i] > threshold) for i in ind)


def extract_active_indicators(model, x, ind, threshold=ACTIVE_THRESHOLD) -> List[str]:
    """Names of the indicators whose value in the solution vector x exceeds the threshold"""
    return [model.var_names[i] for i, v in zip(ind, active_pattern(x, ind, threshold)) if v]


def find_alternatives(model, num_alt, ind, **kwargs) -> Tuple[np.ndarray, object]:
    """Solve a MILP repeatedly, excluding each found indicator pattern with an integer cut

    The model is solved; if a solution exists, it is stored, and an integer cut
    that excludes its activation pattern of the indicators ind is added. This
    is repeated until num_alt solutions are found or the problem becomes
    infeasible. Infeasibility ends the search and is not an error. Any other
    status without a solution (solver error, unbounded problem, time limit)
    raises SolverError.

    Example:
        sols, model = find_alternatives(model, 10, ind_lcuse)

    Args:
        model (phenomapping.TFAModel):
            A model with MILP formulation. Cuts are added to it.

        num_alt (int):
            Maximum number of alternatives.

        ind (list of int):
            Indices of the binary indicators spanning the patterns.

        solver, time_limit (optional):
            Passed to optimize_tfa.

    Returns:
        (Tuple[numpy.ndarray, TFAModel]):
            The solutions as columns of a matrix (variables x alternatives) and
            the model including all cuts.
    """
    sols = []
    patterns = set()
    while len(sols) < num_alt:
        sol = optimize_tfa(model, **kwargs)
        if sol.status == INFEASIBLE:
            logging.info('No further alternative (problem infeasible).')
            break
        if sol.status not in [OPTIMAL, TIME_LIMIT_W_SOL]:
            raise SolverError('Solver returned status ' + str(sol.status) + ' at alternative ' + str(len(sols) + 1) +
                              ' after ' + str(len(sols)) + ' alternatives.')
        x = np.asarray(sol.fluxes.values, dtype=float)
        z = active_pattern(x, ind)
        if z in patterns:
            raise InconsistentSolutionError('Solver returned an excluded solution at alternative ' + str(len(sols) + 1) +
                                            '.')
        patterns.add(z)
        sols.append(x)
        logging.info('Alternative ' + str(len(sols)) + ' with objective value ' + str(sol.objective_value) + ' and ' +
                     str(sum(z)) + ' active indicators.')
        add_integer_cut(model, ind, z)
    logging.info(str(len(sols)) + ' alternatives found.')
    if sols:
        return np.column_stack(sols), model
    return np.zeros((model.num_vars, 0)), model
