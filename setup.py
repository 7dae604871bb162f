from setuptools import setup, find_packages

setup(
    name="phenomapping",
    version="0.1",
    url="https://github.com/EPFL-LCSB/phenomapping",
    description="MILP-based phenotype analyses on thermodynamics-based flux balance models",
    long_description=("Identification of in silico minimal media and minimal secretion, and of bottleneck metabolites "
                      "in concentration data, formulated as mixed-integer linear problems on top of TFA models"),
    long_description_content_type="text/plain",
    license="Apache License 2.0",
    python_requires=">=3.7",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=["cobra", "optlang", "swiglpk", "numpy", "scipy", "pandas"],
    extras_require={"test": ["pytest"]},
    classifiers=[
        "Intended Audience :: Science/Research", "Development Status :: 3 - Alpha", "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10", "Programming Language :: Python :: 3.11", "Programming Language :: Python :: 3.12",
        "Natural Language :: English", "Operating System :: OS Independent", "Topic :: Scientific/Engineering :: Bio-Informatics"
    ],
    keywords=["metabolism", "constraint-based", "mixed-integer", "thermodynamics", "minimal media"],
    zip_safe=False,
)
