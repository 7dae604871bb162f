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
"""Bottleneck metabolites: concentration bounds that must be relaxed for growth"""

from pandas import DataFrame
from typing import List, Tuple
from phenomapping import find_alternatives, extract_active_indicators, add_relaxation_indicators
from phenomapping.names import *
import logging


def _lc_rows(lc_cons) -> List[Tuple[str, float, float]]:
    if isinstance(lc_cons, DataFrame):
        # two columns: the index holds the variable names
        return [(str(r[0]), float(r[1]), float(r[2])) for r in lc_cons.itertuples(index=lc_cons.shape[1] == 2)]
    return [(str(v), float(rlb), float(rub)) for v, rlb, rub in lc_cons]


def get_bot_neck_mets(model, lc_cons, **kwargs) -> Tuple[List[List[Tuple[str, str]]], object]:
    """Identify the metabolites whose concentration bounds limit growth

    The objective variables of the model are forced to at least the growth
    rate gr_rate. For every log concentration variable in lc_cons a binary
    indicator LCUSE_<var> is added. When it is 0, the variable is held within
    the bounds given in lc_cons; when it is 1, the variable falls back to its
    bounds in the model. The sum of the indicators is minimized, so the active
    indicators of a solution mark a minimal set of metabolites whose
    concentration data must be relaxed for the model to grow. Alternative sets
    are enumerated with integer cuts.

    Example:
        mets, model = get_bot_neck_mets(model, [('LC_atp_c', -14.0, -2.0)], gr_rate=0.05)

    Args:
        model (phenomapping.TFAModel):
            A model with TFA layer and log concentration variables. The model
            is modified in place.

        lc_cons (list of (str, float, float) or pandas.DataFrame):
            Variable name, lower bound and upper bound (log scale) to impose
            while the indicator is 0. A DataFrame either has these three columns or the variable
            names as index and the two bounds as columns. Rows whose variable is
            not in the model are skipped.

        gr_rate (optional (float)): (Default: 0.007)
            Minimal value of the objective variables.

        num_alt (optional (int)): (Default: 100)
            Maximum number of alternative sets.

        solver, time_limit (optional):
            Passed to optimize_tfa.

    Returns:
        (Tuple[list, TFAModel]):
            Per alternative a list of (metabolite id, metabolite name) of the
            metabolites whose indicator is active. The name is None if the
            variable does not belong to a metabolite of the model. Second, the
            model with indicators and integer cuts.
    """
    allowed_keys = {GR_RATE, NUM_ALT, SOLVER, T_LIMIT}
    for key in kwargs:
        if key not in allowed_keys:
            raise ValueError('Key ' + key + ' is not supported.')
    gr_rate = kwargs.get(GR_RATE, DEFAULT_GR_RATE)
    num_alt = kwargs.get(NUM_ALT, DEFAULT_NUM_ALT)
    solver_kwargs = {k: v for k, v in kwargs.items() if k in [SOLVER, T_LIMIT]}

    rows = _lc_rows(lc_cons)
    skipped = [v for v, _, _ in rows if not model.has_var(v)]
    if skipped:
        logging.warning(str(len(skipped)) + ' concentration variables are not in the model and are skipped: ' +
                        ', '.join(skipped[:10]))
    rows = [r for r in rows if model.has_var(r[0])]
    if not rows:
        raise ValueError('None of the concentration variables is in the model.')
    obj = model.objective_indices()
    if not obj:
        raise ValueError('The model has no objective variable to enforce the growth rate on.')
    targets = [v for v, _, _ in rows]
    # fail on name collisions before the growth bound is set
    model.check_free_names([LCUSE + '_' + t for t in targets],
                           [LCUSE + '_relax_' + t for t in targets] + [LCUSE + '_relax_2_' + t for t in targets])
    for i in obj:
        model.var_lb[i] = float(gr_rate)
        if model.var_ub[i] < model.var_lb[i]:
            logging.warning('Growth rate ' + str(gr_rate) + ' exceeds the upper bound of ' + model.var_names[i] + '.')
    model.clear_objective()

    logging.info('defining MILP problem')
    ind = add_relaxation_indicators(model, targets, [(rlb, rub) for _, rlb, rub in rows])
    for i in ind:
        model.f[i] = 1.0
    model.objtype = MINIMIZE

    logging.info('getting alternative solutions')
    sols, model = find_alternatives(model, num_alt, ind, **solver_kwargs)

    prefix = LCUSE + '_' + LC_
    bottleneck_mets = []
    for k in range(sols.shape[1]):
        active = extract_active_indicators(model, sols[:, k], ind)
        if not active:
            raise InconsistentSolutionError('Alternative ' + str(k + 1) + ' has no active indicator.')
        mets = []
        for name in active:
            met = name[len(prefix):] if name.startswith(prefix) else name[len(LCUSE) + 1:]
            if met in model.mets:
                mets.append((met, model.met_names[model.mets.index(met)]))
            else:
                logging.warning('Variable of indicator ' + name + ' does not belong to a metabolite of the model.')
                mets.append((met, None))
        bottleneck_mets.append(mets)
    logging.info(str(len(bottleneck_mets)) + ' alternative sets of bottleneck metabolites found.')
    return bottleneck_mets, model
