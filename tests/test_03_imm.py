"""Test the in silico minimal media (IMM) and minimal secretion (IMS) analysis."""
import phenomapping as pm
from phenomapping.names import *
import logging
import pytest


def test_imm_formulation(model_small):
    """Test one indicator and one row per drain, objective and bracketing."""
    model = pm.TFAModel.from_cobra(model_small)
    model, drains, modelpre = pm.analysis_imm(model, min_obj=5.0, max_obj=15.0)
    assert ([d for d, _ in drains] == ['R_EX_A', 'R_EX_B', 'R_EX_D'])
    assert ([l for _, l in drains] == ['A', 'B', 'D'])
    ind = [model.var_index('BFUSE_' + d) for d, _ in drains]
    assert (all(model.vartypes[i] == BINARY for i in ind))
    assert ([i for i, v in enumerate(model.f) if v != 0] == ind)
    assert (all(model.f[i] == 1.0 for i in ind))
    assert (model.objtype == MAXIMIZE)
    assert (model.num_cons == modelpre.num_cons + 3)
    assert (model.num_vars == modelpre.num_vars + 3)
    for k, (d, _) in enumerate(drains):
        i = model.cons_index('BFMER_' + str(k + 1))
        assert (model.rhs[i] == 50.0)
        assert (model.A[i, model.var_index(d)] == 1.0)
        assert (model.A[i, ind[k]] == 50.0)
    i = model.var_index('F_BIO')
    assert ((model.var_lb[i], model.var_ub[i]) == (5.0, 15.0))
    # the snapshot keeps the objective and the free growth bounds
    assert (modelpre.f[i] == 1.0 and modelpre.var_lb[i] == 0.0)
    assert (len(pm.get_all_var(model, ['NF'])) == 6)


def test_ims_formulation(model_small):
    """Test the tagging of secretions."""
    model = pm.TFAModel.from_cobra(model_small)
    model, drains, _ = pm.analysis_imm(model, flag_upt=False, min_obj=5.0, max_obj=15.0)
    assert ([d for d, _ in drains] == ['F_EX_A', 'F_EX_B', 'F_EX_D'])
    assert (model.has_var('BFUSE_F_EX_D'))


def test_imm_bounds_misconfigured(model_small):
    """Test that min_obj > max_obj raises before the model is touched."""
    model = pm.TFAModel.from_cobra(model_small)
    S = model.S.toarray()
    with pytest.raises(ValueError):
        pm.analysis_imm(model, min_obj=2.0, max_obj=1.0)
    assert ((model.S.toarray() == S).all())
    assert (not model.has_tfa)


def test_imm_unknown_key(model_small):
    model = pm.TFAModel.from_cobra(model_small)
    with pytest.raises(ValueError):
        pm.analysis_imm(model, minobj=1.0)


def test_imm_drains_for_imm(model_small, caplog):
    """Test user defined drains and the fallback to all drains."""
    model = pm.TFAModel.from_cobra(model_small)
    model, drains, _ = pm.analysis_imm(model, min_obj=5.0, max_obj=15.0, drains_for_imm=['EX_A', 'R2'])
    assert (drains == [('R_EX_A', 'A <=>'), ('R_R2', 'B -> C')])
    model = pm.TFAModel.from_cobra(model_small)
    with caplog.at_level(logging.WARNING):
        model, drains, _ = pm.analysis_imm(model, min_obj=5.0, max_obj=15.0, drains_for_imm=['EX_A', 'notarxn'])
    assert ('drains_for_imm' in caplog.text)
    assert (len(drains) == 3)


def test_imm_metab_data(model_small):
    model = pm.TFAModel.from_cobra(model_small)
    model, _, modelpre = pm.analysis_imm(model, min_obj=5.0, max_obj=15.0, reaction_db={'metabolites': ['A']},
                                         metab_data={'NF_R2': (0.0, 1.0)})
    i = modelpre.var_index('NF_R2')
    assert (modelpre.var_ub[i] == 1.0)
    assert (modelpre.has_var('LC_A'))


def test_imm_custom_thermo_builder(model_small):
    """Test that the TFA layer is built by the given builder."""
    calls = []

    def builder(model, reaction_db, rxn_no_thermo):
        calls.append(rxn_no_thermo)
        return pm.conv_to_tfa(model, reaction_db, rxn_no_thermo)

    model = pm.TFAModel.from_cobra(model_small)
    pm.analysis_imm(model, min_obj=5.0, max_obj=15.0, thermo_builder=builder)
    assert (len(calls) == 2)


def test_imm_default_bounds(curr_solver, model_small):
    """Test the objective bounds derived from the maximal growth."""
    model = pm.TFAModel.from_cobra(model_small)
    model, drains, _ = pm.analysis_imm(model, solver=curr_solver)
    i = model.var_index('F_BIO')
    assert (round(model.var_lb[i], 6) == 18.0)
    assert (round(model.var_ub[i], 6) == 20.0)
    sol = pm.optimize_tfa(model, solver=curr_solver)
    assert (sol.status == OPTIMAL)
    # both substrates are needed, only the uptake of D can be blocked
    assert (round(sol.objective_value) == 1)
    assert (sol.fluxes['BFUSE_R_EX_D'] == 1)


def test_imm_infeasible_baseline(curr_solver, model_small):
    model_small.reactions.BIO.lower_bound = 30
    model = pm.TFAModel.from_cobra(model_small)
    with pytest.raises(ValueError):
        pm.analysis_imm(model, solver=curr_solver)


def test_find_dp_min_mets(curr_solver, model_small):
    """Test the enumeration of alternative minimal media of minimal size."""
    model = pm.TFAModel.from_cobra(model_small)
    model, drains, _ = pm.analysis_imm(model, min_obj=5.0, max_obj=15.0, solver=curr_solver)
    media, model = pm.find_dp_min_mets(model, drains, 5, fix_size=True, solver=curr_solver)
    assert (sorted(m for medium in media for m, _ in medium) == ['R_EX_A', 'R_EX_B'])
    assert (all(len(medium) == 1 for medium in media))
    assert (model.has_cons('SIZE_1'))
    assert (model.has_cons('CUT_1') and model.has_cons('CUT_2'))


def test_find_dp_min_mets_scripted(monkeypatch, scripted_solver, model_small):
    """Test that required drains are those with a blocked indicator of 0."""
    model = pm.TFAModel.from_cobra(model_small)
    model, drains, _ = pm.analysis_imm(model, min_obj=5.0, max_obj=15.0)
    monkeypatch.setattr(pm.alternatives, 'optimize_tfa', scripted_solver([(1, 0, 1), (0, 0, 1)], BFUSE))
    media, model = pm.find_dp_min_mets(model, drains, 3)
    assert (media == [[('R_EX_B', 'B')], [('R_EX_A', 'A'), ('R_EX_B', 'B')]])


def test_imm_leaves_input_unchanged(model_small):
    """Test that the input model keeps its stoichiometry and TFA layer."""
    tmodel = pm.conv_to_tfa(pm.TFAModel.from_cobra(model_small))
    S = tmodel.S.toarray()
    var_names, var_ub, num_cons = list(tmodel.var_names), list(tmodel.var_ub), tmodel.num_cons
    model, drains, _ = pm.analysis_imm(tmodel, min_obj=5.0, max_obj=15.0)
    assert ((tmodel.S.toarray() == S).all())
    assert (tmodel.var_names == var_names and tmodel.var_ub == var_ub and tmodel.num_cons == num_cons)
    # a second analysis on the same input tags the same uptakes
    model2, drains2, _ = pm.analysis_imm(tmodel, min_obj=5.0, max_obj=15.0)
    assert (drains2 == drains)
    i = model2.var_index('R_EX_B')
    assert ((model2.var_lb[i], model2.var_ub[i]) == (0.0, 10.0))
    assert (model.var_ub[model.var_index('R_EX_B')] == 10.0)


def test_imm_logs_single_build(model_small, caplog):
    """Test that the preliminary TFA build of a model without TFA layer is not logged."""
    model = pm.TFAModel.from_cobra(model_small)
    with caplog.at_level(logging.INFO):
        pm.analysis_imm(model, min_obj=5.0, max_obj=15.0)
    assert (caplog.text.count('Generated TFA structure') == 1)


def test_find_dp_min_mets_threshold(monkeypatch, scripted_solver, model_small):
    """Test that a drain is in the medium exactly when its indicator is not part of the excluded pattern."""
    model = pm.TFAModel.from_cobra(model_small)
    model, drains, _ = pm.analysis_imm(model, min_obj=5.0, max_obj=15.0)
    monkeypatch.setattr(pm.alternatives, 'optimize_tfa', scripted_solver([(0.7, 1, 1)], BFUSE))
    media, model = pm.find_dp_min_mets(model, drains, 2)
    assert (media == [[('R_EX_A', 'A')]])
    i = model.cons_index('CUT_1')
    assert ([model.A[i, model.var_index('BFUSE_' + d)] for d, _ in drains] == [-1.0, 1.0, 1.0])


def test_find_dp_min_mets_solver_failure(monkeypatch, scripted_solver, model_small):
    model = pm.TFAModel.from_cobra(model_small)
    model, drains, _ = pm.analysis_imm(model, min_obj=5.0, max_obj=15.0)
    monkeypatch.setattr(pm.alternatives, 'optimize_tfa', scripted_solver([ERROR], BFUSE))
    with pytest.raises(SolverError):
        pm.find_dp_min_mets(model, drains, 2)
