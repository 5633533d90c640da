# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""simflow - staleness-driven compile/simulate/view pipeline for Icarus Verilog."""

__version__ = "0.1.0"
