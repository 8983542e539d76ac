"""
Diagnostic Visualizations.

- Empirical densities against their normal fit
- Simulated price paths
- Implied volatility round trips and Greeks profiles
"""

from .diagnostics import DiagnosticsPlotter
