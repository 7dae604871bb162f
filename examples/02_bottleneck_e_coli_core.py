from cobra.io import load_model
from numpy import log
from pandas import DataFrame
import phenomapping as pm
import logging

logging.basicConfig(level=logging.INFO)
model = load_model('e_coli_core')
mets = ['atp_c', 'adp_c', 'nad_c', 'nadh_c', 'glu__L_c', 'akg_c']
tmodel = pm.conv_to_tfa(pm.TFAModel.from_cobra(model), reaction_db={'metabolites': mets})
# high energy charge: atp/adp >= 10
tmodel.add_constraints([('ECHARGE', pm.GEQ, log(10), {'LC_atp_c': 1.0, 'LC_adp_c': -1.0})])

# measured concentration ranges (mol/L), ADP well above ATP
conc = {'atp_c': (1e-4, 5e-4), 'adp_c': (1e-3, 5e-3), 'nad_c': (1e-3, 3e-3), 'nadh_c': (5e-5, 1e-4),
        'glu__L_c': (5e-3, 0.01), 'akg_c': (1e-4, 1e-3)}
lc_cons = DataFrame({'lb': [log(v[0]) for v in conc.values()],
                     'ub': [log(v[1]) for v in conc.values()]},
                    index=[pm.LC_ + m for m in conc])
bottleneck_mets, _ = pm.get_bot_neck_mets(tmodel, lc_cons, gr_rate=0.1, num_alt=3)
for i, alt in enumerate(bottleneck_mets):
    print('alternative ' + str(i + 1) + ': ' + ', '.join(str(name) + ' (' + met + ')' for met, name in alt))
