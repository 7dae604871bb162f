"""Test the big-M encoding of indicator variables."""
import phenomapping as pm
from phenomapping.names import *
import pytest


@pytest.fixture
def xmodel():
    """A model with one continuous variable x in [0, 100] that is maximized."""
    model = pm.TFAModel(id='x')
    model.add_variables([('x', 0, 100, CONTINUOUS, 1), ('y', -10, -2, CONTINUOUS)])
    return model


def test_suppression_rows(xmodel):
    """Test the row x + 50 * z <= 50 of a suppression indicator."""
    ind = pm.add_suppression_indicators(xmodel, ['x'], cons_names=['BFMER_1'])
    assert (xmodel.var_names[ind[0]] == 'BFUSE_x')
    assert (xmodel.vartypes[ind[0]] == BINARY)
    assert (xmodel.f[ind[0]] == 1.0)
    i = xmodel.cons_index('BFMER_1')
    assert (xmodel.constraint_type[i] == LEQ)
    assert (xmodel.rhs[i] == 50.0)
    assert (xmodel.A[i, xmodel.var_index('x')] == 1.0)
    assert (xmodel.A[i, ind[0]] == 50.0)


def test_suppression_custom_big_m(xmodel):
    ind = pm.add_suppression_indicators(xmodel, ['x'], tag='OFF', threshold=20.0, big_m=100.0, weight=0.0)
    i = xmodel.cons_index('OFF_x')
    assert ((xmodel.rhs[i], xmodel.A[i, ind[0]]) == (20.0, 100.0))
    assert (xmodel.f[ind[0]] == 0.0)


@pytest.mark.parametrize("z, x_max", [(1, 0.0), (0, 50.0)])
def test_suppression_solution(curr_solver, xmodel, z, x_max):
    """Test that z = 1 blocks x and z = 0 caps x at the threshold."""
    ind = pm.add_suppression_indicators(xmodel, ['x'])
    xmodel.clear_objective()
    xmodel.f[xmodel.var_index('x')] = 1.0
    xmodel.var_lb[ind[0]] = xmodel.var_ub[ind[0]] = z
    sol = pm.optimize_tfa(xmodel, solver=curr_solver)
    assert (sol.status == OPTIMAL)
    assert (round(sol.objective_value, 9) == x_max)


def test_relaxation_rows(xmodel):
    """Test the rounded rows of a relaxation indicator."""
    ind = pm.add_relaxation_indicators(xmodel, ['y'], [(-8.123456789, -4.0)])
    assert (xmodel.var_names[ind[0]] == 'LCUSE_y')
    assert (xmodel.f[ind[0]] == 0.0)
    i = xmodel.cons_index('LCUSE_relax_y')
    assert (xmodel.constraint_type[i] == LEQ)
    assert ((xmodel.rhs[i], xmodel.A[i, ind[0]]) == (-4.0, -2.0))
    i = xmodel.cons_index('LCUSE_relax_2_y')
    assert (xmodel.constraint_type[i] == GEQ)
    assert (xmodel.rhs[i] == -8.12346)
    assert (xmodel.A[i, ind[0]] == round(-8.123456789 + 10, 5))


def test_relaxation_row_order(xmodel):
    """Test that all upper rows precede all lower rows."""
    xmodel.add_variables([('w', -5, 5, CONTINUOUS)])
    pm.add_relaxation_indicators(xmodel, ['y', 'w'], [(-3, -2), (-1, 1)])
    assert (xmodel.constraint_names ==
            ['LCUSE_relax_y', 'LCUSE_relax_w', 'LCUSE_relax_2_y', 'LCUSE_relax_2_w'])


@pytest.mark.parametrize("z, bounds", [(1, (-10.0, -2.0)), (0, (-8.0, -4.0))])
def test_relaxation_solution(curr_solver, xmodel, z, bounds):
    """Test that z = 1 recovers the natural bounds and z = 0 imposes the given ones."""
    ind = pm.add_relaxation_indicators(xmodel, ['y'], [(-8.0, -4.0)])
    xmodel.var_lb[ind[0]] = xmodel.var_ub[ind[0]] = z
    xmodel.clear_objective()
    xmodel.f[xmodel.var_index('y')] = 1.0
    values = []
    for objtype in [MINIMIZE, MAXIMIZE]:
        xmodel.objtype = objtype
        sol = pm.optimize_tfa(xmodel, solver=curr_solver)
        values.append(round(sol.objective_value, 9))
    assert (tuple(values) == bounds)


def test_relaxation_needs_finite_bounds(xmodel):
    xmodel.add_variables([('u', 0, float('inf'), CONTINUOUS)])
    with pytest.raises(ValueError):
        pm.add_relaxation_indicators(xmodel, ['u'], [(0, 1)])
    assert (not xmodel.has_var('LCUSE_u'))


def test_indicator_collision(xmodel):
    """Test that a second indicator on the same target fails without mutation."""
    pm.add_suppression_indicators(xmodel, ['x'])
    num_vars, num_cons = xmodel.num_vars, xmodel.num_cons
    with pytest.raises(NameCollisionError):
        pm.add_suppression_indicators(xmodel, ['x'])
    with pytest.raises(NameCollisionError):
        pm.add_suppression_indicators(xmodel, ['y'], cons_names=['BFUSE_x'])
    assert ((xmodel.num_vars, xmodel.num_cons) == (num_vars, num_cons))
