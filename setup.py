# setup.py

from setuptools import setup, find_packages

setup(
    name="isocorr",
    version="0.1.0",
    python_requires=">=3.9",
    description="isotopic overlap detection and correction for lipidomics MS1 quantitation",
    packages=find_packages(exclude=["tests*"]),
    install_requires=[
        "numpy",
        "matplotlib",
        "pandas",
        "pyyaml",
        "pyteomics",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
        ]
    }
)
