"""
Pricing and Simulation Models.

This module provides:
- Black-Scholes prices, Greeks and implied parameters
- Quadrature pricing over a lognormal terminal distribution
- Lognormal price process simulation and calibration
"""

from .black_scholes import BlackScholes, OptionType
from .monte_carlo import MonteCarloPricer
from .normal_process import NormalProcess, parse_normal_process
