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
"""Vector-matrix container for TFA models (TFAModel)"""

from copy import deepcopy
from typing import Dict, List
from pandas import DataFrame
from scipy import sparse
from cobra.util import create_stoichiometric_matrix
from phenomapping import MILP_LP
from phenomapping.names import *
import logging


class TFAModel(object):
    """A metabolic model together with its TFA constraint system

    The model consists of two layers. The stoichiometric layer describes the
    network (reactions, metabolites, stoichiometric matrix, reaction bounds and
    reaction objective). The TFA layer is the (mixed integer) linear problem
    built from it: named variables with bounds and types, named constraints
    with a relation and right hand side, a sparse coefficient matrix A with one
    row per constraint and one column per variable, an objective vector f and
    an objective direction.

    The TFA layer is append-only. Variables and constraints receive the next
    free index and keep it for the lifetime of the model, so indices returned
    by add_variables and add_constraints can be stored and reused by later
    MILP construction steps. Names are unique; a name that is already taken
    raises NameCollisionError and leaves the model untouched.

    Example:
        model = TFAModel.from_cobra(cobra_model)
        idx = model.add_variables([('BFUSE_R_EX_glc', 0, 1, 'B', 1)])

    Args:
        id (str):
            Identifier of the model.

        rxns, mets (list of str):
            Reaction and metabolite identifiers.

        S (sparse matrix):
            Stoichiometric matrix (metabolites x reactions).

        lb, ub, c (list of float):
            Reaction flux bounds and reaction objective coefficients.

        rxn_names, met_names (list of str):
            Human readable names of reactions and metabolites.
    """

    def __init__(self, id='', rxns=None, mets=None, S=None, lb=None, ub=None, c=None, rxn_names=None, met_names=None):
        self.id = id
        self.rxns = list(rxns) if rxns is not None else []
        self.mets = list(mets) if mets is not None else []
        if S is None:
            S = sparse.csc_matrix((len(self.mets), len(self.rxns)))
        self.S = sparse.csc_matrix(S, dtype=float)
        if self.S.shape != (len(self.mets), len(self.rxns)):
            raise ValueError('S must have one row per metabolite and one column per reaction.')
        self.lb = [float(v) for v in lb] if lb is not None else [0.0] * len(self.rxns)
        self.ub = [float(v) for v in ub] if ub is not None else [BIG_M_FLUX] * len(self.rxns)
        self.c = [float(v) for v in c] if c is not None else [0.0] * len(self.rxns)
        self.rxn_names = list(rxn_names) if rxn_names is not None else list(self.rxns)
        self.met_names = list(met_names) if met_names is not None else list(self.mets)
        self.reset_tfa()

    @classmethod
    def from_cobra(cls, model):
        """Build the stoichiometric layer of a TFAModel from a cobra.Model"""
        S = sparse.csc_matrix(create_stoichiometric_matrix(model))
        c = [r.objective_coefficient for r in model.reactions]
        return cls(id=model.id,
                   rxns=model.reactions.list_attr('id'),
                   mets=model.metabolites.list_attr('id'),
                   S=S,
                   lb=[r.lower_bound for r in model.reactions],
                   ub=[r.upper_bound for r in model.reactions],
                   c=c,
                   rxn_names=[r.name or r.id for r in model.reactions],
                   met_names=[m.name or m.id for m in model.metabolites])

    def reset_tfa(self):
        """Drop the TFA layer (variables, constraints and objective)"""
        self.var_names = []
        self.var_lb = []
        self.var_ub = []
        self.vartypes = []
        self.f = []
        self.objtype = MAXIMIZE
        self.constraint_names = []
        self.constraint_type = []
        self.rhs = []
        self.A = sparse.lil_matrix((0, 0))
        self._var_index = {}
        self._cons_index = {}

    @property
    def num_vars(self) -> int:
        return len(self.var_names)

    @property
    def num_cons(self) -> int:
        return len(self.constraint_names)

    @property
    def has_tfa(self) -> bool:
        return self.num_vars > 0

    def copy(self):
        return deepcopy(self)

    def var_index(self, name) -> int:
        return self._var_index[name]

    def cons_index(self, name) -> int:
        return self._cons_index[name]

    def has_var(self, name) -> bool:
        return name in self._var_index

    def has_cons(self, name) -> bool:
        return name in self._cons_index

    def add_variables(self, variables) -> List[int]:
        """Append variables to the TFA layer

        Args:
            variables (list of tuples):
                (name, lb, ub, vtype, objective weight). The objective weight may be
                omitted and defaults to 0. vtype is 'C' or 'B'.

        Returns:
            (list of int):
            The indices of the new variables, in input order.
        """
        variables = [tuple(v) for v in variables]
        names = [v[0] for v in variables]
        self._check_names(names, self._var_index, 'Variable')
        for v in variables:
            if len(v) not in (4, 5):
                raise ValueError('Variables are given as (name, lb, ub, vtype[, weight]), got ' + str(v) + '.')
            if v[3] not in (CONTINUOUS, BINARY):
                raise ValueError('Unknown variable type ' + str(v[3]) + ' of variable ' + v[0] + '.')
            if float(v[1]) > float(v[2]):
                raise ValueError('Lower bound of variable ' + v[0] + ' exceeds its upper bound.')
        first = self.num_vars
        for v in variables:
            self._var_index[v[0]] = self.num_vars
            self.var_names.append(v[0])
            self.var_lb.append(float(v[1]))
            self.var_ub.append(float(v[2]))
            self.vartypes.append(v[3])
            self.f.append(float(v[4]) if len(v) == 5 else 0.0)
        self.A.resize((self.num_cons, self.num_vars))
        return list(range(first, self.num_vars))

    def add_constraints(self, constraints) -> List[int]:
        """Append constraints to the TFA layer

        Args:
            constraints (list of tuples):
                (name, relation, rhs, row). relation is '<', '>' or '='. row is a dict
                mapping variable indices (or variable names) to coefficients.

        Returns:
            (list of int):
            The row indices of the new constraints, in input order.
        """
        constraints = [tuple(c) for c in constraints]
        names = [c[0] for c in constraints]
        self._check_names(names, self._cons_index, 'Constraint')
        rows = []
        for name, relation, _, row in constraints:
            if relation not in (LEQ, GEQ, EQ):
                raise ValueError('Unknown relation ' + str(relation) + ' in constraint ' + name + '.')
            rows.append(self._resolve_row(name, row))
        first = self.num_cons
        self.A.resize((first + len(constraints), self.num_vars))
        for k, ((name, relation, rhs, _), row) in enumerate(zip(constraints, rows)):
            self._cons_index[name] = first + k
            self.constraint_names.append(name)
            self.constraint_type.append(relation)
            self.rhs.append(float(rhs))
            for j, v in row.items():
                self.A[first + k, j] = v
        return list(range(first, self.num_cons))

    def _resolve_row(self, name, row) -> Dict[int, float]:
        resolved = {}
        for key, v in row.items():
            j = self._var_index.get(key) if isinstance(key, str) else int(key)
            if j is None or not 0 <= j < self.num_vars:
                raise ValueError('Constraint ' + name + ' references unknown variable ' + str(key) + '.')
            resolved[j] = resolved.get(j, 0.0) + float(v)
        return resolved

    def check_free_names(self, var_names=(), cons_names=()):
        """Raise NameCollisionError if any of the names is taken or repeated"""
        self._check_names(list(var_names), self._var_index, 'Variable')
        self._check_names(list(cons_names), self._cons_index, 'Constraint')

    @staticmethod
    def _check_names(names, index, kind):
        if len(set(names)) != len(names):
            dup = sorted({n for n in names if names.count(n) > 1})
            raise NameCollisionError(kind + ' names occur more than once: ' + ', '.join(dup))
        taken = [n for n in names if n in index]
        if taken:
            raise NameCollisionError(kind + ' names already exist in the model: ' + ', '.join(taken))

    def objective_indices(self) -> List[int]:
        """Indices of the variables that carry the objective (f == 1)"""
        return [i for i, v in enumerate(self.f) if v == 1]

    def clear_objective(self):
        self.f = [0.0] * self.num_vars

    def to_milp(self, solver=None, tlim=None) -> MILP_LP:
        """Translate the TFA layer into a MILP_LP (minimization, A_ineq * x <= b_ineq, A_eq * x = b_eq)"""
        A = self.A.tocsr()
        leq = [i for i, t in enumerate(self.constraint_type) if t == LEQ]
        geq = [i for i, t in enumerate(self.constraint_type) if t == GEQ]
        eq = [i for i, t in enumerate(self.constraint_type) if t == EQ]
        A_ineq = sparse.vstack((A[leq, :], -A[geq, :]), format='csr')
        b_ineq = [self.rhs[i] for i in leq] + [-self.rhs[i] for i in geq]
        if self.objtype == MAXIMIZE:
            c = [-v for v in self.f]
        else:
            c = list(self.f)
        return MILP_LP(c=c,
                       A_ineq=A_ineq,
                       b_ineq=b_ineq,
                       A_eq=A[eq, :],
                       b_eq=[self.rhs[i] for i in eq],
                       lb=self.var_lb,
                       ub=self.var_ub,
                       vtype=''.join(self.vartypes),
                       solver=solver,
                       tlim=tlim)

    def print_info(self) -> DataFrame:
        """Summarize the model size in a DataFrame and write it to the log"""
        info = DataFrame(columns=['value'])
        info.loc['id'] = self.id
        info.loc['num reactions'] = len(self.rxns)
        info.loc['num metabolites'] = len(self.mets)
        info.loc['num variables'] = self.num_vars
        info.loc['num binary variables'] = self.vartypes.count(BINARY)
        info.loc['num constraints'] = self.num_cons
        info.loc['objective direction'] = self.objtype
        info.index.name = 'key'
        logging.info('\n' + str(info))
        return info
