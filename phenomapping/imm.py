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
"""In silico minimal media (IMM) and minimal secretion (IMS)"""

from typing import List, Tuple
from phenomapping import optimize_tfa, conv_to_tfa, put_drains_forward, print_rxn_formula, \
                         add_net_flux_variables, load_constraints, add_suppression_indicators, \
                         find_alternatives, next_constraint_name, active_pattern, DisableLogger
from phenomapping.names import *
import logging


def analysis_imm(model, **kwargs) -> Tuple[object, List[Tuple[str, str]], object]:
    """Formulate the MILP for the in silico minimal media (or minimal secretion)

    The drains of the model are identified and oriented as consumption. For
    each drain, the uptake (R_<drain>) or, for the minimal secretion, the
    secretion (F_<drain>) receives a binary indicator BFUSE_<var> and a row

        BFMER_<i>:  <var> + 50 * BFUSE_<var> <= 50

    so that BFUSE = 1 blocks the drain and BFUSE = 0 caps it at 50. The
    objective variables of the model are bracketed in [min_obj, max_obj] and
    the number of blocked drains is maximized. The drains with BFUSE = 0 in a
    solution form a minimal medium (or minimal set of secreted products).

    Example:
        model, drains, modelpre = analysis_imm(tmodel, min_obj=0.1)
        sol = optimize_tfa(model)

    Args:
        model (phenomapping.TFAModel):
            A model with stoichiometric layer and, optionally, a TFA layer. A
            missing TFA layer is built with the thermo builder. The analysis works
            on a copy, the model itself is not modified.

        flag_upt (optional (bool)): (Default: True)
            True for the minimal media (uptakes), False for the minimal secretion.

        min_obj, max_obj (optional (float)): (Default: 90% and 100% of the optimum)
            Bounds of the objective variables. The optimum is only computed if a
            default is needed.

        drains_for_imm (optional (list of str)): (Default: all drains)
            Reactions to consider instead of all drains. Ignored with a warning
            if they are not all reactions of the model.

        rxn_no_thermo (optional (list of str)): (Default: all reactions)
            Reactions without thermodynamic constraints, handed to the thermo
            builder. If it covers all reactions, the TFA layer is rebuilt.

        reaction_db (optional (dict)):
            Thermodynamic database, handed to the thermo builder.

        metab_data (optional (dict)):
            Measurements, applied with load_constraints.

        thermo_builder (optional (function)): (Default: conv_to_tfa)
            Builds the TFA layer, called as thermo_builder(model, reaction_db, rxn_no_thermo).

        solver, time_limit (optional):
            Passed to optimize_tfa for the baseline optimization.

    Returns:
        (Tuple[TFAModel, list, TFAModel]):
            The model with the MILP formulation, the drains as a list of
            (variable name, label) where the label is the metabolite of the
            drain (or the reaction formula for user defined drains), and a copy
            of the model taken before the MILP formulation was added.
    """
    allowed_keys = {FLAG_UPT, MIN_OBJ, MAX_OBJ, DRAINS_FOR_IMM, RXN_NO_THERMO, REACTION_DB, METAB_DATA,
                    THERMO_BUILDER, SOLVER, T_LIMIT}
    for key in kwargs:
        if key not in allowed_keys:
            raise ValueError('Key ' + key + ' is not supported.')
    flag_upt = kwargs.get(FLAG_UPT, True)
    min_obj = kwargs.get(MIN_OBJ)
    max_obj = kwargs.get(MAX_OBJ)
    drains_for_imm = kwargs.get(DRAINS_FOR_IMM)
    rxn_no_thermo = kwargs.get(RXN_NO_THERMO)
    reaction_db = kwargs.get(REACTION_DB)
    metab_data = kwargs.get(METAB_DATA)
    thermo_builder = kwargs.get(THERMO_BUILDER, conv_to_tfa)
    solver_kwargs = {k: v for k, v in kwargs.items() if k in [SOLVER, T_LIMIT]}

    if min_obj is not None and max_obj is not None and min_obj > max_obj:
        raise ValueError('The lower bound of the objective (min_obj) is bigger than its upper bound (max_obj).')
    model = model.copy()
    if rxn_no_thermo is None:
        rxn_no_thermo = model.rxns
    rebuild = set(model.rxns) <= set(rxn_no_thermo)
    if not model.has_tfa:
        if rebuild:
            # rebuilt below, after the drains are oriented
            with DisableLogger():
                model = thermo_builder(model, reaction_db, rxn_no_thermo)
        else:
            logging.info('generating TFA structure')
            model = thermo_builder(model, reaction_db, rxn_no_thermo)
    if min_obj is None or max_obj is None:
        sol = optimize_tfa(model, **solver_kwargs)
        if sol.status == INFEASIBLE:
            raise ValueError('The model is not feasible. Default objective bounds cannot be derived.')
        if sol.status not in [OPTIMAL, TIME_LIMIT_W_SOL]:
            raise SolverError('Solver returned status ' + str(sol.status) + ' while deriving the objective bounds.')
        logging.info('Optimal objective value of the model: ' + str(sol.objective_value))
        if max_obj is None:
            max_obj = sol.objective_value
        if min_obj is None:
            min_obj = DEFAULT_OBJ_FRACTION * sol.objective_value
        if min_obj > max_obj:
            raise ValueError('The lower bound of the objective (min_obj) is bigger than its upper bound (max_obj).')

    logging.info('getting model drains')
    model, flag_change, drains, labels = put_drains_forward(model)
    if drains_for_imm:
        if all(r in model.rxns for r in drains_for_imm):
            drains = list(drains_for_imm)
            labels = print_rxn_formula(model, drains)
        else:
            logging.warning('Not all drains_for_imm were identified as drains or reactions. '
                            'The analysis will be done for all drains.')
    if not drains:
        raise ValueError('The model has no drains to analyse.')
    prefix = R_ if flag_upt else F_
    drains = [(prefix + d, l) for d, l in zip(drains, labels)]

    if flag_change or rebuild:
        if flag_change:
            logging.info('some drains had to be redefined -> reconvert to TFA')
        logging.info('generating TFA structure')
        model = thermo_builder(model, reaction_db, rxn_no_thermo)
    model = add_net_flux_variables(model)
    if metab_data:
        model = load_constraints(model, metab_data)
    modelpre = model.copy()

    obj = model.objective_indices()
    if not obj:
        raise ValueError('The model has no objective variable to bracket.')
    for i in obj:
        model.var_lb[i] = float(min_obj)
        model.var_ub[i] = float(max_obj)
    model.clear_objective()
    model.objtype = MAXIMIZE

    logging.info('defining MILP problem')
    add_suppression_indicators(model, [d for d, _ in drains],
                               cons_names=['BFMER_' + str(i + 1) for i in range(len(drains))])
    return model, drains, modelpre


def find_dp_min_mets(model, drains, num_alt=1, **kwargs) -> Tuple[List[List[Tuple[str, str]]], object]:
    """Enumerate alternative minimal media (or minimal secretions)

    Takes the output of analysis_imm and enumerates solutions with integer
    cuts. A drain is part of a medium if its indicator BFUSE_<var> is not
    active (at most 0.98) in the solution, the same test that defines the
    pattern excluded by each cut.

    Example:
        model, drains, _ = analysis_imm(tmodel)
        media, model = find_dp_min_mets(model, drains, 5, fix_size=True)

    Args:
        model (phenomapping.TFAModel):
            A model returned by analysis_imm. Cuts are added to it.

        drains (list of (str, str)):
            The drains returned by analysis_imm.

        num_alt (optional (int)): (Default: 1)
            Maximum number of alternatives.

        fix_size (optional (bool)): (Default: False)
            Only enumerate media of minimal size. The MILP is solved once and the
            number of blocked drains is bound to the optimum.

        solver, time_limit (optional):
            Passed to optimize_tfa.

    Returns:
        (Tuple[list, TFAModel]):
            Per alternative the (variable name, label) of the drains in the
            medium and the model with all cuts.
    """
    allowed_keys = {FIX_SIZE, SOLVER, T_LIMIT}
    for key in kwargs:
        if key not in allowed_keys:
            raise ValueError('Key ' + key + ' is not supported.')
    solver_kwargs = {k: v for k, v in kwargs.items() if k in [SOLVER, T_LIMIT]}
    ind = [model.var_index(BFUSE + '_' + d) for d, _ in drains]
    if kwargs.get(FIX_SIZE, False):
        sol = optimize_tfa(model, **solver_kwargs)
        if sol.status == INFEASIBLE:
            logging.info('No minimal medium found (problem infeasible).')
            return [], model
        if sol.status not in [OPTIMAL, TIME_LIMIT_W_SOL]:
            raise SolverError('Solver returned status ' + str(sol.status) + ' while sizing the minimal medium.')
        size = sum(active_pattern(sol.fluxes.values, ind))
        logging.info('Fixing the number of blocked drains to ' + str(size) + '.')
        model.add_constraints([(next_constraint_name(model, 'SIZE'), GEQ, size, {i: 1.0 for i in ind})])
    sols, model = find_alternatives(model, num_alt, ind, **solver_kwargs)
    media = []
    for k in range(sols.shape[1]):
        blocked = active_pattern(sols[:, k], ind)
        media.append([d for d, b in zip(drains, blocked) if not b])
    return media, model
