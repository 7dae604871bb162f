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
"""Identification and orientation of drain (exchange) reactions"""

from typing import List, Tuple
from numpy import ones
from scipy import sparse
from phenomapping.names import *
import logging


def put_drains_forward(model) -> Tuple[object, bool, List, List]:
    """Orient all drains of a model as consumption of their metabolite

    A drain is a reaction with exactly one metabolite. Drains that are
    written as production (coefficient > 0, e.g. ' -> A') are flipped to
    consumption ('A -> ') and their bounds are mirrored. After this step the
    forward flux of a drain (F_<drain>) is a secretion and its reverse flux
    (R_<drain>) is an uptake.

    The stoichiometric layer is modified in place. A flipped drain makes an
    existing TFA layer stale, which is signalled by flag_change.

    Example:
        model, flag_change, drains, drain_mets = put_drains_forward(model)

    Returns:
        (Tuple[TFAModel, bool, list of str, list of str]):
            The model, whether any drain was flipped, the drain reaction ids and
            the ids of their metabolites.
    """
    S = model.S.tocsc()
    S.eliminate_zeros()
    drains, drain_mets, flipped = [], [], []
    for j, r in enumerate(model.rxns):
        col = S[:, j]
        if col.nnz != 1:
            continue
        drains.append(r)
        drain_mets.append(model.mets[col.indices[0]])
        if col.data[0] > 0:
            flipped.append(j)
    if flipped:
        sign = ones(len(model.rxns))
        sign[flipped] = -1.0
        for j in flipped:
            model.lb[j], model.ub[j] = -model.ub[j], -model.lb[j]
            model.c[j] = -model.c[j]
        model.S = (S @ sparse.diags(sign)).tocsc()
        logging.info('Redefined ' + str(len(flipped)) + ' drains as consumption: ' +
                     ', '.join(model.rxns[j] for j in flipped))
    return model, len(flipped) > 0, drains, drain_mets


def print_rxn_formula(model, rxns) -> List[str]:
    """Reaction equations of the given reactions, e.g. 'glc__D_e ->' or 'A + 2 B <=> C'"""
    S = model.S.tocsc()
    formulas = []
    for r in rxns:
        j = model.rxns.index(r)
        col = S[:, j]
        subs, prods = [], []
        for i, v in zip(col.indices, col.data):
            term = model.mets[i] if abs(v) == 1 else str(round(abs(v), 6)).rstrip('0').rstrip('.') + ' ' + model.mets[i]
            (subs if v < 0 else prods).append(term)
        arrow = ' <=> ' if model.lb[j] < 0 < model.ub[j] else ' -> '
        formulas.append((' + '.join(subs) + arrow + ' + '.join(prods)).strip())
    return formulas
