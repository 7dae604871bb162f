import pytest
from numpy import nan, zeros
from pandas import Series
from cobra import Model, Reaction, Metabolite
from cobra.core import Solution
import phenomapping as pm
from phenomapping.names import *

# Initialize an empty list for solvers
solvers = []

# Add GLPK to the list if the swiglpk package is installed
try:
    import swiglpk
    solvers.append(GLPK)
except ImportError:
    pass  # GLPK is not installed


@pytest.fixture(params=solvers, scope="session")
def curr_solver(request: pytest.FixtureRequest) -> str:
    """Provide session-level fixture for parametrized solver names."""
    return request.param


@pytest.fixture
def scripted_solver():
    """Provide a factory for solver stand-ins that return a fixed sequence of indicator patterns.

    The indicators are the variables whose name starts with the given tag. A
    status string in place of a pattern is returned as a solve without solution.
    Once the patterns are exhausted, every further call is infeasible.
    """

    def factory(patterns, tag):
        calls = iter(patterns)
        record = []

        def optimize(model, **kwargs):
            record.append(model.num_cons)
            z = next(calls, INFEASIBLE)
            if isinstance(z, str):
                return Solution(nan, z, fluxes=Series(nan, index=model.var_names))
            ind = [i for i, n in enumerate(model.var_names) if n.startswith(tag + '_')]
            x = zeros(model.num_vars)
            x[ind] = z
            return Solution(float(sum(z)), OPTIMAL, fluxes=Series(x, index=model.var_names))

        optimize.calls = record
        return optimize

    return factory


def build_small_model():
    """Two substrates A and B, each sufficient for growth. The drain of B is written as production."""
    model = Model('small')
    a = Metabolite('A', name='glucose', compartment='c')
    b = Metabolite('B', name='xylose', compartment='c')
    c = Metabolite('C', name='precursor', compartment='c')
    d = Metabolite('D', name='biomass', compartment='c')
    reactions = [('EX_A', {a: -1}, -10, 1000), ('EX_B', {b: 1}, 0, 10), ('R1', {a: -1, c: 1}, 0, 1000),
                 ('R2', {b: -1, c: 1}, 0, 1000), ('BIO', {c: -1, d: 1}, 0, 1000), ('EX_D', {d: -1}, 0, 1000)]
    for rid, mets, lb, ub in reactions:
        r = Reaction(rid, lower_bound=lb, upper_bound=ub)
        model.add_reactions([r])
        r.add_metabolites(mets)
    model.objective = 'BIO'
    return model


@pytest.fixture
def model_small():
    """Small cobra model with three drains."""
    return build_small_model()


@pytest.fixture
def tmodel(model_small):
    """Small model with TFA layer and log concentration variables for A and C."""
    model = pm.TFAModel.from_cobra(model_small)
    return pm.conv_to_tfa(model, reaction_db={'metabolites': ['A', 'C']})


