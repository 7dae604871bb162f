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
"""GLPK solver interface for LP and MILP"""

from scipy import sparse
from numpy import nan, inf, isinf
from phenomapping.names import *
from typing import Tuple, List
from swiglpk import *
import logging


class GLPK_MILP_LP():
    """GLPK interface for MILP and LP

    Wrapper for the GLPK-Python API (swiglpk) that sets up a MILP or LP from
    vectors and sparse matrices:
        minimize(c),
        subject to:
        A_ineq * x <= b_ineq,
        A_eq * x  = b_eq,
        lb <= x <= ub,
        forall(i) type(x_i) = vtype(i) (continous, binary, integer)

    Big-M rows of the phenomapping MILPs are written explicitly into A_ineq,
    so no indicator constraint translation happens here.

    Example:
        glpk = GLPK_MILP_LP(c, A_ineq, b_ineq, A_eq, b_eq, lb, ub, vtype)
    """

    def __init__(self, c, A_ineq, b_ineq, A_eq, b_eq, lb, ub, vtype):
        self.glpk = glp_create_prob()
        # GLPK indexing starts with 1
        numvars = A_ineq.shape[1]
        self.ismilp = not all([v == 'C' for v in vtype])

        if numvars > 0:
            glp_add_cols(self.glpk, numvars)
        for i, v in enumerate(vtype):
            if v == 'C':
                glp_set_col_kind(self.glpk, i + 1, GLP_CV)
            elif v == 'I':
                glp_set_col_kind(self.glpk, i + 1, GLP_IV)
            elif v == 'B':
                glp_set_col_kind(self.glpk, i + 1, GLP_BV)
        for i in range(numvars):
            self._set_col_bounds(i, float(lb[i]), float(ub[i]))

        glp_set_obj_dir(self.glpk, GLP_MIN)
        self.set_objective(c)

        numrows = A_ineq.shape[0] + A_eq.shape[0]
        if numrows > 0:
            glp_add_rows(self.glpk, numrows)
            row_type = [GLP_UP] * len(b_ineq) + [GLP_FX] * len(b_eq)
            for i, (t, b) in enumerate(zip(row_type, b_ineq + b_eq)):
                if t == GLP_UP and isinf(b):
                    glp_set_row_bnds(self.glpk, i + 1, GLP_FR, -inf, float(b))
                else:
                    glp_set_row_bnds(self.glpk, i + 1, t, float(b), float(b))
            A = sparse.vstack((A_ineq, A_eq), 'coo')
            ia = intArray(A.nnz + 1)
            ja = intArray(A.nnz + 1)
            ar = doubleArray(A.nnz + 1)
            for i, row, col, data in zip(range(A.nnz), A.row, A.col, A.data):
                ia[i + 1] = int(row) + 1
                ja[i + 1] = int(col) + 1
                ar[i + 1] = float(data)
            if A.nnz:
                glp_load_matrix(self.glpk, A.nnz, ia, ja, ar)

        # LP simplex parameters
        self.lp_params = glp_smcp()
        glp_init_smcp(self.lp_params)
        self.max_tlim = self.lp_params.tm_lim
        self.lp_params.tol_bnd = 1e-9
        self.lp_params.msg_lev = 0
        # MILP parameters
        if self.ismilp:
            self.milp_params = glp_iocp()
            glp_init_iocp(self.milp_params)
            self.milp_params.presolve = 1
            self.milp_params.tol_int = 1e-12
            self.milp_params.tol_obj = 1e-9
            self.milp_params.msg_lev = 0

    def _set_col_bounds(self, i, l, u):
        if isinf(l) and isinf(u):
            glp_set_col_bnds(self.glpk, i + 1, GLP_FR, l, u)
        elif isinf(u):
            glp_set_col_bnds(self.glpk, i + 1, GLP_LO, l, u)
        elif isinf(l):
            glp_set_col_bnds(self.glpk, i + 1, GLP_UP, l, u)
        elif l < u:
            glp_set_col_bnds(self.glpk, i + 1, GLP_DB, l, u)
        else:
            glp_set_col_bnds(self.glpk, i + 1, GLP_FX, l, u)

    def solve(self) -> Tuple[List, float, float]:
        """Solve the MILP or LP

        Example:
            sol_x, optim, status = glpk.solve()

        Returns:
            (Tuple[List, float, float])

            solution_vector, optimal_value, optimization_status
        """
        numvars = glp_get_num_cols(self.glpk)
        try:
            min_cx, status, bool_tlim = self.solve_MILP_LP()
            if bool_tlim and status == GLP_FEAS:  # timeout with solution
                status = TIME_LIMIT_W_SOL
            elif status in [GLP_OPT, GLP_FEAS]:
                status = OPTIMAL
            elif bool_tlim and status == GLP_UNDEF:  # timeout without solution
                return [nan] * numvars, nan, TIME_LIMIT
            elif status in [GLP_INFEAS, GLP_NOFEAS]:
                return [nan] * numvars, nan, INFEASIBLE
            elif status in [GLP_UNBND, GLP_UNDEF]:
                return [nan] * numvars, -inf, UNBOUNDED
            else:
                raise Exception('Status code ' + str(status) + " not yet handled.")
            x = self.getSolution()
            x = [round(y, 12) for y in x]  # workaround, round to 12 decimals
            return x, round(min_cx, 12), status
        except Exception:
            logging.error('Error while running GLPK.')
            return [nan] * numvars, nan, ERROR

    def set_objective(self, c):
        """Set the objective function with a vector"""
        for i, c_i in enumerate(c):
            glp_set_obj_coef(self.glpk, i + 1, float(c_i))

    def set_time_limit(self, t):
        """Set the computation time limit (in seconds)"""
        if t * 1000 > self.max_tlim:
            tm_lim = self.max_tlim
        else:
            tm_lim = int(t * 1000)
        if self.ismilp:
            self.milp_params.tm_lim = tm_lim
        self.lp_params.tm_lim = tm_lim

    def getSolution(self) -> list:
        """Retrieve solution from GLPK backend"""
        if self.ismilp:
            return [glp_mip_col_val(self.glpk, i + 1) for i in range(glp_get_num_cols(self.glpk))]
        return [glp_get_col_prim(self.glpk, i + 1) for i in range(glp_get_num_cols(self.glpk))]

    def solve_MILP_LP(self) -> Tuple[float, int, bool]:
        """Trigger GLPK solution through backend"""
        starttime = glp_time()
        # MILP solving needs prior solution of the LP-relaxed problem, because occasionally
        # the MILP solver interface crashes when a problem is infeasible.
        prelim_status = glp_simplex(self.glpk, self.lp_params)
        # feasible LPs can fail initially but complete when presolved
        if prelim_status == GLP_EFAIL:
            self.lp_params.presolve = 1
            self.lp_params.meth = 3
            glp_simplex(self.glpk, self.lp_params)
            self.lp_params.presolve = 0
            self.lp_params.meth = 1
        status = glp_get_status(self.glpk)
        if self.ismilp and status not in [GLP_INFEAS, GLP_NOFEAS, GLP_UNBND]:
            glp_intopt(self.glpk, self.milp_params)
            status = glp_mip_status(self.glpk)
            opt = glp_mip_obj_val(self.glpk)
        else:
            opt = glp_get_obj_val(self.glpk)
        timelim_reached = glp_difftime(glp_time(), starttime) * 1000 >= self.lp_params.tm_lim
        return opt, status, timelim_reached
