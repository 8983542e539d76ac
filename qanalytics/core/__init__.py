"""
Core statistics and numerical building blocks.
"""

from .fitter import DistributionFitter
from .correlation import CorrelationFitter
from .quadrature import GaussianQuadrature
from .iterators import LinearIterator, LogarithmicZeroToInfinityIterator
from .generators import Algorithm, NormalRandomGenerator
from .trading_calendar import PriceRecord
