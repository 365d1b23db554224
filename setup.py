"""Package setup"""
from setuptools import find_packages, setup

setup(
    name="pyzimt",
    version="0.1.0",
    description="Psychoacoustic masking model for perceptual audio similarity",
    license="Apache-2.0",
    python_requires=">=3.8",
    packages=find_packages(include=["zimt", "zimt.*", "recipes", "recipes.*"]),
    package_data={"recipes": ["*/*.yaml"]},
    install_requires=[
        "hydra-core>=1.1.1",
        "numpy>=1.21.6",
        "omegaconf>=2.1.1",
        "scipy>=1.7.3",
        "tqdm>=4.62.3",
    ],
    extras_require={
        "tests": [
            "pytest",
        ],
    },
)
