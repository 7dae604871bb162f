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
"""Construction of the TFA variables and constraints from the stoichiometric layer"""

from numpy import log, isinf
from typing import List
from phenomapping.names import *
import logging


def conv_to_tfa(model, reaction_db=None, rxn_no_thermo=None):
    """Build the TFA layer of a model without Gibbs energy constraints

    Every reaction is split into a forward (F_) and a reverse (R_) flux
    variable, each coupled to a binary use variable (FU_, BU_). The use
    variables exclude simultaneous forward and reverse flux. Mass balances
    are written over the net flux F_ - R_. The objective of the stoichiometric
    layer is carried over to the flux variables (f(F_) = c, f(R_) = -c) with
    direction maximize.

    Metabolites listed in reaction_db['metabolites'] receive a log
    concentration variable LC_<met> bounded by the logarithm of the
    concentration range (reaction_db['conc_range'] or 1e-8 to 0.02 mol/L).

    The generation of Gibbs energy constraints is not part of this function.
    Reactions that are not in rxn_no_thermo would need them, so they are
    rejected and must be converted by an external TFA builder.

    Example:
        tmodel = conv_to_tfa(model)

    Args:
        model (phenomapping.TFAModel):
            A model with stoichiometric layer. Any existing TFA layer is dropped.

        reaction_db (optional (dict)):
            Thermodynamic database. Only the keys 'metabolites' and 'conc_range'
            are read.

        rxn_no_thermo (optional (list of str)): (Default: all reactions)
            Reactions for which no thermodynamic constraints are generated.

    Returns:
        (phenomapping.TFAModel):
            A copy of the model with a fresh TFA layer.
    """
    if rxn_no_thermo is None:
        rxn_no_thermo = model.rxns
    with_thermo = [r for r in model.rxns if r not in set(rxn_no_thermo)]
    if with_thermo:
        raise ValueError(str(len(with_thermo)) + ' reactions require Gibbs energy constraints, which need an '
                         'external TFA builder (pass thermo_builder). First reactions: ' + ', '.join(with_thermo[:5]))
    tmodel = model.copy()
    tmodel.reset_tfa()

    variables = []
    for r, lb, ub, c in zip(tmodel.rxns, tmodel.lb, tmodel.ub, tmodel.c):
        variables += [(F_ + r, max(0.0, lb), max(0.0, ub), CONTINUOUS, c),
                      (R_ + r, max(0.0, -ub), max(0.0, -lb), CONTINUOUS, -c)]
    for r in tmodel.rxns:
        variables += [(FU_ + r, 0, 1, BINARY), (BU_ + r, 0, 1, BINARY)]
    tmodel.add_variables(variables)

    constraints = []
    S = tmodel.S.tocsr()
    for i, met in enumerate(tmodel.mets):
        row = {}
        for j, v in zip(S[i].indices, S[i].data):
            row[F_ + tmodel.rxns[j]] = v
            row[R_ + tmodel.rxns[j]] = -v
        constraints.append(('M_' + met, EQ, 0.0, row))
    for r in tmodel.rxns:
        f_ub = tmodel.var_ub[tmodel.var_index(F_ + r)]
        r_ub = tmodel.var_ub[tmodel.var_index(R_ + r)]
        f_M = BIG_M_FLUX if isinf(f_ub) else f_ub
        r_M = BIG_M_FLUX if isinf(r_ub) else r_ub
        constraints += [('UF_' + r, LEQ, 0.0, {F_ + r: 1.0, FU_ + r: -f_M}),
                        ('UR_' + r, LEQ, 0.0, {R_ + r: 1.0, BU_ + r: -r_M}),
                        ('SU_' + r, LEQ, 1.0, {FU_ + r: 1.0, BU_ + r: 1.0})]
    tmodel.add_constraints(constraints)

    if reaction_db and reaction_db.get('metabolites'):
        conc_lb, conc_ub = reaction_db.get('conc_range', DEFAULT_CONC_RANGE)
        lc_mets = [m for m in tmodel.mets if m in reaction_db['metabolites']]
        tmodel.add_variables([(LC_ + m, log(conc_lb), log(conc_ub), CONTINUOUS) for m in lc_mets])
        logging.info('Added ' + str(len(lc_mets)) + ' log concentration variables.')
    tmodel.objtype = MAXIMIZE
    logging.info('Generated TFA structure with ' + str(tmodel.num_vars) + ' variables and ' + str(tmodel.num_cons) +
                 ' constraints.')
    return tmodel


def get_all_var(model, tags) -> List[int]:
    """Indices of the TFA variables whose tag (the name part before the first '_') is in tags

    Example:
        ind_nf = get_all_var(model, ['NF'])
    """
    if isinstance(tags, str):
        tags = [tags]
    tags = set(tags)
    return [i for i, name in enumerate(model.var_names) if name.split('_', 1)[0] in tags]


def add_net_flux_variables(model):
    """Add net flux variables NF_<rxn> = F_<rxn> - R_<rxn> for all reactions that lack one"""
    missing = [(r, lb, ub) for r, lb, ub in zip(model.rxns, model.lb, model.ub) if not model.has_var(NF_ + r)]
    model.add_variables([(NF_ + r, lb, ub, CONTINUOUS) for r, lb, ub in missing])
    model.add_constraints([('NFC_' + r, EQ, 0.0, {NF_ + r: 1.0, F_ + r: -1.0, R_ + r: 1.0}) for r, _, _ in missing])
    logging.info('Added ' + str(len(missing)) + ' net flux variables.')
    return model


def load_constraints(model, data):
    """Apply measured bounds to TFA variables

    Args:
        model (phenomapping.TFAModel):
            A model with TFA layer.

        data (dict):
            Maps identifiers to (lb, ub). An identifier is either a TFA variable
            name, whose bounds are replaced, or a metabolite id with a log
            concentration variable LC_<met>, in which case (lb, ub) are
            concentrations in mol/L and are log-transformed.

    Returns:
        (phenomapping.TFAModel):
            The same model with updated bounds.
    """
    for key, (lb, ub) in data.items():
        if lb > ub:
            raise ValueError('Measured lower bound of ' + key + ' exceeds its upper bound.')
        if model.has_var(key):
            i = model.var_index(key)
            model.var_lb[i], model.var_ub[i] = float(lb), float(ub)
        elif model.has_var(LC_ + key):
            if lb <= 0:
                raise ValueError('Concentration bounds of ' + key + ' must be positive.')
            i = model.var_index(LC_ + key)
            model.var_lb[i], model.var_ub[i] = float(log(lb)), float(log(ub))
        else:
            logging.warning('No variable for measurement ' + key + ' in the model. Skipped.')
    return model
