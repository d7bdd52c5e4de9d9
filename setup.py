from setuptools import setup, find_packages

setup(
    name="molsim",
    version="0.1.0",
    description="Frame-by-frame trajectory access and RMSD analysis for molecular simulations",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "numpy",
        "matplotlib",
        "pyyaml",
        "tqdm",
    ],
    extras_require={
        "ovito": ["ovito"],
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'molsim-rmsd=molsim.cli:main',
        ],
    },
    python_requires=">=3.8",
)
