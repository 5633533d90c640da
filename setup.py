# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from setuptools import setup, find_packages

setup(
    name="simflow",
    version="0.1.0",
    description="Compile, simulate and view Icarus Verilog testbenches, rebuilding only what changed",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["simflow", "simflow.*"]),
    install_requires=[
        "click>=8.1",
        "pydantic>=2.7",
        "pydantic-settings>=2.7",
        "PyYAML>=6.0",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Operating System :: Microsoft :: Windows",
    ],
    license="MIT",
    entry_points={
        'console_scripts': [
            'simflow=simflow.cli:main',
        ],
    },
    python_requires=">=3.10",
)
