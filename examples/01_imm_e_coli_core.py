from cobra.io import load_model
import phenomapping as pm
import logging

logging.basicConfig(level=logging.INFO)
model = load_model('e_coli_core')
tmodel = pm.conv_to_tfa(pm.TFAModel.from_cobra(model))

# minimal media for at least 50% of the maximal growth
sol = pm.optimize_tfa(tmodel)
imm_model, drains, modelpre = pm.analysis_imm(tmodel, min_obj=0.5 * sol.objective_value)
imm_model.print_info()
media, imm_model = pm.find_dp_min_mets(imm_model, drains, 5, fix_size=True)
for i, medium in enumerate(media):
    print('medium ' + str(i + 1) + ': ' + ', '.join(label for _, label in medium))

# minimal secretion
ims_model, drains, _ = pm.analysis_imm(tmodel, flag_upt=False, min_obj=0.5 * sol.objective_value)
secretions, _ = pm.find_dp_min_mets(ims_model, drains, 1)
print('secretion: ' + ', '.join(label for _, label in secretions[0]))
