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
"""Binary indicators linked to continuous variables through big-M constraints

An indicator constraint z = 1 -> a * x <= b has no native representation in
the vector-matrix form of a TFA model. It is written as a big-M constraint
instead, in which the coefficient of the binary variable z shifts the bound
of the constraint:

    a * x + M * z <= b + M      (z = 1 -> a * x <= b)

The functions in this module add a binary indicator per target variable
together with its big-M rows. Names are checked before anything is added,
so an indicator never exists without its rows.
"""

from numpy import isinf
from typing import List
from phenomapping.names import *


def add_suppression_indicators(model, targets, tag=BFUSE, threshold=BFUSE_THRESHOLD, big_m=None, cons_names=None,
                               weight=1.0) -> List[int]:
    """Add one indicator per target that suppresses the target when set to 1

    For each target variable x an indicator z = <tag>_<x> and the row

        x + M * z <= threshold

    are added. z = 0 caps x at the threshold, z = 1 caps x at threshold - M.
    With the default M = threshold, z = 1 forces x <= 0 (no flux).

    Example:
        ind = add_suppression_indicators(model, ['R_EX_glc'], cons_names=['BFMER_1'])

    Args:
        model (phenomapping.TFAModel):
            The model to extend.

        targets (list of str):
            Names of the target variables.

        tag (optional (str)): (Default: 'BFUSE')
            Prefix of the indicator names.

        threshold (optional (float)): (Default: 50)
            Right hand side of the rows.

        big_m (optional (float)): (Default: threshold)
            Coefficient of the indicator.

        cons_names (optional (list of str)): (Default: '<tag>_<target>')
            Names of the rows.

        weight (optional (float)): (Default: 1)
            Objective weight of each indicator.

    Returns:
        (list of int):
            Indices of the indicators, in the order of targets.
    """
    if big_m is None:
        big_m = threshold
    target_idx = [model.var_index(t) for t in targets]
    var_names = [tag + '_' + t for t in targets]
    if cons_names is None:
        cons_names = [tag + '_' + t for t in targets]
    if len(cons_names) != len(targets):
        raise ValueError('One constraint name per target is required.')
    model.check_free_names(var_names, cons_names)
    ind = model.add_variables([(n, 0, 1, BINARY, weight) for n in var_names])
    model.add_constraints([(n, LEQ, threshold, {x: 1.0, z: big_m})
                           for n, x, z in zip(cons_names, target_idx, ind)])
    return ind


def add_relaxation_indicators(model, targets, relaxed_bounds, tag=LCUSE) -> List[int]:
    """Add one indicator per target that switches between natural and relaxed bounds

    For a target x with natural bounds (lb, ub) in the model and relaxed
    bounds (rlb, rub) an indicator z = <tag>_<x> and the rows

        <tag>_relax_<x>:    x + (rub - ub) * z <= rub
        <tag>_relax_2_<x>:  x + (rlb - lb) * z >= rlb

    are added. z = 1 recovers lb <= x <= ub, z = 0 permits rlb <= x <= rub.
    Coefficients and right hand sides are rounded to 5 decimals. All upper
    rows are appended before all lower rows.

    Example:
        ind = add_relaxation_indicators(model, ['LC_atp_c'], [(-14.0, -2.0)])

    Args:
        model (phenomapping.TFAModel):
            The model to extend.

        targets (list of str):
            Names of the target variables.

        relaxed_bounds (list of (float, float)):
            (rlb, rub) per target.

        tag (optional (str)): (Default: 'LCUSE')
            Prefix of the indicator and row names.

    Returns:
        (list of int):
            Indices of the indicators, in the order of targets.
    """
    if len(relaxed_bounds) != len(targets):
        raise ValueError('One pair of relaxed bounds per target is required.')
    target_idx = [model.var_index(t) for t in targets]
    for t, i in zip(targets, target_idx):
        if isinf(model.var_lb[i]) or isinf(model.var_ub[i]):
            raise ValueError('Variable ' + t + ' needs finite bounds to be relaxed.')
    var_names = [tag + '_' + t for t in targets]
    ub_names = [tag + '_relax_' + t for t in targets]
    lb_names = [tag + '_relax_2_' + t for t in targets]
    model.check_free_names(var_names, ub_names + lb_names)
    ind = model.add_variables([(n, 0, 1, BINARY) for n in var_names])
    model.add_constraints([(n, LEQ, round(rub, ROUND_DECIMALS), {x: 1.0, z: round(rub - model.var_ub[x], ROUND_DECIMALS)})
                           for n, x, z, (_, rub) in zip(ub_names, target_idx, ind, relaxed_bounds)])
    model.add_constraints([(n, GEQ, round(rlb, ROUND_DECIMALS), {x: 1.0, z: round(rlb - model.var_lb[x], ROUND_DECIMALS)})
                           for n, x, z, (rlb, _) in zip(lb_names, target_idx, ind, relaxed_bounds)])
    return ind
