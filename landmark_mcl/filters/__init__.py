"""
Localization filters.

This module provides the landmark based particle filter (Monte Carlo
localization) and its particle type.
"""

from .particle import ParticleFilter, Particle, LIKELIHOOD_FLOOR, EXPONENT_DENOMINATOR

__all__ = [
    'ParticleFilter',
    'Particle',
    'LIKELIHOOD_FLOOR',
    'EXPONENT_DENOMINATOR',
]
