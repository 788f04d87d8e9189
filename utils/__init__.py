"""Utility helpers shared across the project.

Submodules:
    logging   – JSON/plain log setup and the execution-time decorator.
    math      – half-up rounding and clamping used by the scorers.
"""
