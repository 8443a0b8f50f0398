"""
Setup script for deexcitation_mc package.

Installation:
    pip install -e .
"""

from setuptools import setup, find_packages

setup(
    name="deexcitation_mc",
    version="0.1.0",
    description="Monte Carlo de-excitation of excited nuclei",
    packages=find_packages(include=["deexcitation_mc", "deexcitation_mc.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "scipy>=1.10",
        "matplotlib>=3.7",
        "numba>=0.58",
        "h5py>=3.8",
        "pyyaml>=6.0",
        "tqdm>=4.65",
    ],
    extras_require={
        "dev": ["pytest>=7.3"],
    },
)
