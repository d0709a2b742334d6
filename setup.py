# setup.py - Package the simple estimator
from setuptools import setup, find_packages

setup(
    name="simple_estimator",
    version="0.1.0",
    description="Lookup-and-adapt estimator over a sparse 3D categorical weight table",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=["numpy"],
    extras_require={"test": ["pytest"]},
)
