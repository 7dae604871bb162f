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
"""Unified solver interface for LPs and MILPs (MILP_LP)"""

from numpy import inf
from scipy import sparse
from typing import List, Tuple
from phenomapping import avail_solvers, GLPK
from phenomapping.names import *
import logging


class MILP_LP(object):
    """Unified MILP and LP interface

    This class wraps the solver backends to offer consistent bindings for the
    construction of MILPs and LPs in a vector-matrix-based manner and their
    solution. TFA models are translated into this form by TFAModel.to_milp.

    Accepts a (mixed integer) linear problem in the form:
        minimize(c),
        subject to:
        A_ineq * x <= b_ineq,
        A_eq * x  = b_eq,
        lb <= x <= ub,
        forall(i) type(x_i) = vtype(i) (continous, binary, integer)

    Example:
        milp = MILP_LP(c=c, A_ineq=A_ineq, b_ineq=b_ineq, A_eq=A_eq, b_eq=b_eq, lb=lb, ub=ub, vtype=vtype)

    Args:
        c (list of float): (Default: None)
            The objective vector (Objective sense: minimization).

        A_ineq (sparse.csr_matrix): (Default: None)
            A coefficient matrix of the static inequalities.

        b_ineq (list of float): (Default: None)
            The right hand side of the static inequalities.

        A_eq (sparse.csr_matrix): (Default: None)
            A coefficient matrix of the static equalities.

        b_eq (list of float): (Default: None)
            The right hand side of the static equalities.

        lb (list of float): (Default: None)
            The lower variable bounds.

        ub (list of float): (Default: None)
            The upper variable bounds.

        vtype (str): (Default: None)
            A character string that specifies the type of each variable:
            'C'ontinous, 'B'inary or 'I'nteger

        solver (str): (Default: taken from avail_solvers)
            Solver backend that should be used. Currently 'glpk'.

        skip_checks (bool): (Default: False)
            Skip the dimension checks of vectors and matrices.

        tlim (float):
            Solution time limit in seconds. Handed to the backend as is.

    Returns:
        (MILP_LP):

        A MILP/LP solver interface class.
    """

    def __init__(self, **kwargs):
        allowed_keys = {'c', 'A_ineq', 'b_ineq', 'A_eq', 'b_eq', 'lb', 'ub', 'vtype', 'solver', 'skip_checks', 'tlim'}
        for key, value in kwargs.items():
            if key in allowed_keys:
                setattr(self, key, value)
            else:
                raise ValueError("Key " + key + " is not supported.")
        for key in allowed_keys:
            if key not in kwargs.keys():
                setattr(self, key, None)
        if self.solver is None:
            if len(avail_solvers) > 0:
                self.solver = list(avail_solvers)[0]
            else:
                raise Exception('No solver available. Please ensure that one of the following '\
                    'solvers is available in your Python environment: GLPK (swiglpk)')
        elif self.solver not in avail_solvers:
            raise Exception("Selected solver '" + self.solver + "' is not installed / set up correctly.")
        if self.A_ineq is not None:
            numvars = self.A_ineq.shape[1]
        elif self.A_eq is not None:
            numvars = self.A_eq.shape[1]
        else:
            logging.warning('Problem has no variables.')
            numvars = 0
        if self.c is None:
            self.c = [0.0] * numvars
        if self.A_ineq is None:
            self.A_ineq = sparse.csr_matrix((0, numvars))
        if self.b_ineq is None:
            self.b_ineq = []
        if self.A_eq is None:
            self.A_eq = sparse.csr_matrix((0, numvars))
        if self.b_eq is None:
            self.b_eq = []
        if self.lb is None:
            self.lb = [-inf] * numvars
        if self.ub is None:
            self.ub = [inf] * numvars
        if self.vtype is None:
            self.vtype = 'C' * numvars
        if not self.skip_checks:
            if not (self.A_ineq.shape[0] == len(self.b_ineq)):
                raise ValueError("A_ineq and b_ineq must have the same number of rows/elements")
            if not (self.A_eq.shape[0] == len(self.b_eq)):
                raise ValueError("A_eq and b_eq must have the same number of rows/elements")
            if not (self.A_ineq.shape[1]==numvars and self.A_eq.shape[1]==numvars and len(self.c)==numvars and \
                    len(self.lb)==numvars and len(self.ub)==numvars and len(self.vtype)==numvars):
                raise ValueError("A_eq, A_ineq, c, lb, ub, vtype must have the same number of columns/elements")
        self.A_ineq = sparse.csr_matrix(self.A_ineq).astype(float)
        self.A_eq = sparse.csr_matrix(self.A_eq).astype(float)
        self.c = [float(v) for v in self.c]
        self.b_ineq = [float(v) for v in self.b_ineq]
        self.b_eq = [float(v) for v in self.b_eq]
        self.lb = [float(v) for v in self.lb]
        self.ub = [float(v) for v in self.ub]
        if self.solver == GLPK:
            from phenomapping.glpk_interface import GLPK_MILP_LP
            self.backend = GLPK_MILP_LP(self.c, self.A_ineq, self.b_ineq, self.A_eq, self.b_eq, self.lb, self.ub,
                                        self.vtype)
        if self.tlim is None:
            self.set_time_limit(inf)
        else:
            self.set_time_limit(self.tlim)

    def solve(self) -> Tuple[List, float, float]:
        """Solve the MILP or LP

        Example:
            sol_x, optim, status = milp.solve()

        Returns:
            (Tuple[List, float, float])

            solution_vector, optimal_value, optimization_status
        """
        x, min_cx, status = self.backend.solve()
        if status in [OPTIMAL, TIME_LIMIT_W_SOL]:  # round integers
            x = [x[i] if self.vtype[i] == 'C' else int(round(x[i])) for i in range(len(x))]
        return x, min_cx, status

    def set_time_limit(self, t):
        """Set the computation time limit (in seconds)"""
        self.tlim = t
        self.backend.set_time_limit(t)
