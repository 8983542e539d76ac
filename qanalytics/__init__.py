"""
qanalytics: Empirical Distributions, Option Pricing and Price Simulation

This package provides the numerical core of an options backtester:
robust distribution fitting, Black-Scholes pricing with implied
parameters, lognormal path simulation and P&L bookkeeping.
"""

__version__ = "1.0.0"
__author__ = "Quantitative Alpha Research Team"

from .config import OutlierSettings, OutliersMode
from .core import DistributionFitter, CorrelationFitter, GaussianQuadrature, PriceRecord
from .models import BlackScholes, OptionType, MonteCarloPricer, NormalProcess, parse_normal_process
from .portfolio import Instrument, Trade, Position, Strategy
