"""
Diagnostic Plots for Fitted Distributions, Simulations and Pricers.

Figures:
    - Empirical density of a DistributionFitter against the fitted normal
    - Simulated NormalProcess price paths
    - Black-Scholes prices across strikes with the implied volatility
      recovered from each price (a flat line when the pricer is consistent)
    - Analytic delta and gamma profiles across spot
"""

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import matplotlib.pyplot as plt
from scipy.stats import norm

from ..core.fitter import DistributionFitter
from ..core.trading_calendar import PriceRecord
from ..models.black_scholes import BlackScholes, OptionType


Path = Union[Sequence[float], Sequence[PriceRecord]]


class DiagnosticsPlotter:
    """
    Diagnostic figures for the analytics library.

    Example:
        >>> plotter = DiagnosticsPlotter(style='light')
        >>> fig = plotter.plot_distribution(fitter, buckets=40)
        >>> fig = plotter.plot_implied_vol_check(OptionType.CALL, 100.0, strikes, 0.5)
    """

    def __init__(
        self,
        figsize: Tuple[int, int] = (12, 7),
        style: str = 'light',
        dpi: int = 120
    ):
        """
        Initialize plotter.

        Args:
            figsize: Default figure size
            style: 'dark' or 'light' theme
            dpi: Figure resolution
        """
        self.figsize = figsize
        self.style = style
        self.dpi = dpi

        if style == 'dark':
            plt.style.use('dark_background')
            self.bg_color = '#1a1a2e'
            self.text_color = '#ffffff'
            self.accent_colors = ['#00d4ff', '#ff6b6b', '#4ecdc4', '#ffe66d', '#95e1d3']
        else:
            plt.style.use('seaborn-v0_8-whitegrid')
            self.bg_color = '#ffffff'
            self.text_color = '#000000'
            self.accent_colors = ['#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd']

    def _finish(self, fig: plt.Figure, ax: plt.Axes, save_path: Optional[str]) -> plt.Figure:
        ax.set_facecolor(self.bg_color)
        fig.patch.set_facecolor(self.bg_color)
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=self.dpi, bbox_inches='tight',
                        facecolor=self.bg_color, edgecolor='none')
        return fig

    def plot_distribution(
        self,
        fitter: DistributionFitter,
        buckets: int = 50,
        title: str = "Empirical Density vs Fitted Normal",
        save_path: str = None
    ) -> plt.Figure:
        """
        Plot the histogram density of a sample set and its normal fit.

        Args:
            fitter: Non-empty sample set (compute() is called on it)
            buckets: Number of histogram intervals
            title: Plot title
            save_path: Optional save path

        Returns:
            matplotlib Figure
        """
        fitter.compute_histogram(buckets)
        frame = fitter.histogram_frame(density=True)

        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)
        ax.bar(frame['x'], frame['y'], width=fitter.dx, alpha=0.6,
               color=self.accent_colors[0], label='Empirical')

        if fitter.dev > 0.0:
            xs = np.linspace(fitter.min, fitter.max, 400)
            ax.plot(xs, norm.pdf(xs, fitter.mean, fitter.dev), color=self.accent_colors[1],
                    linewidth=2, label=f'N({fitter.mean:.4f}, {fitter.dev:.4f})')

        ax.set_xlabel('Value', fontsize=11, color=self.text_color)
        ax.set_ylabel('Density', fontsize=11, color=self.text_color)
        ax.set_title(title, fontsize=14, fontweight='bold', color=self.text_color)
        ax.legend(loc='upper right', fontsize=9)

        return self._finish(fig, ax, save_path)

    def plot_paths(
        self,
        paths: List[Path],
        title: str = "Simulated Price Paths",
        save_path: str = None
    ) -> plt.Figure:
        """
        Plot simulated paths (lists of spots or of PriceRecords).

        Args:
            paths: Paths to draw; None entries (aborted paths) are skipped
            title: Plot title
            save_path: Optional save path

        Returns:
            matplotlib Figure
        """
        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)

        for i, path in enumerate(p for p in paths if p):
            color = self.accent_colors[i % len(self.accent_colors)]
            if isinstance(path[0], PriceRecord):
                ax.plot([r.day for r in path], [r.price for r in path], color=color, linewidth=1)
            else:
                ax.plot(np.arange(len(path)), path, color=color, linewidth=1)

        ax.set_xlabel('Step', fontsize=11, color=self.text_color)
        ax.set_ylabel('Price', fontsize=11, color=self.text_color)
        ax.set_title(title, fontsize=14, fontweight='bold', color=self.text_color)

        return self._finish(fig, ax, save_path)

    def plot_implied_vol_check(
        self,
        option_type: OptionType,
        spot: float,
        strikes: np.ndarray,
        time_to_expiration: float,
        volatility: float = 0.2,
        interest_rate: float = 0.0,
        save_path: str = None
    ) -> plt.Figure:
        """
        Price a strip of options and recover the volatility from each price.

        Strikes where the implied search fails are left out of the vol line.

        Returns:
            matplotlib Figure
        """
        prices, implied = [], []
        for strike in strikes:
            bs = BlackScholes(option_type, spot, float(strike), time_to_expiration,
                              interest_rate, 0.0, volatility)
            price = bs.price()
            prices.append(price)
            vol = bs.implied_volatility(price)
            implied.append(np.nan if vol is None else vol * 100)

        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)
        ax.plot(strikes, prices, color=self.accent_colors[0], linewidth=2, label='Price')
        ax.set_xlabel('Strike', fontsize=11, color=self.text_color)
        ax.set_ylabel('Option Price', fontsize=11, color=self.text_color)

        ax2 = ax.twinx()
        ax2.plot(strikes, implied, color=self.accent_colors[1], linestyle='--',
                 linewidth=2, label='Implied Vol (%)')
        ax2.set_ylabel('Implied Volatility (%)', fontsize=11, color=self.text_color)
        ax2.set_ylim(0, max(volatility * 200, 1.0))

        ax.set_title(f'{option_type.value.title()} Prices and Implied Volatility\n'
                     f'S={spot:.0f}, T={time_to_expiration:.2f}, σ={volatility:.0%}',
                     fontsize=14, fontweight='bold', color=self.text_color)

        return self._finish(fig, ax, save_path)

    def plot_greeks(
        self,
        option_type: OptionType,
        spots: np.ndarray,
        strike: float,
        time_to_expiration: float,
        volatility: float = 0.2,
        save_path: str = None
    ) -> plt.Figure:
        """
        Plot analytic delta and gamma across spot.

        Returns:
            matplotlib Figure
        """
        deltas, gammas = [], []
        for spot in spots:
            bs = BlackScholes(option_type, float(spot), strike, time_to_expiration, volatility=volatility)
            deltas.append(bs.analytic_delta())
            gammas.append(bs.analytic_gamma())

        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)
        ax.plot(spots, deltas, color=self.accent_colors[0], linewidth=2, label='Delta')
        ax.set_xlabel('Spot', fontsize=11, color=self.text_color)
        ax.set_ylabel('Delta', fontsize=11, color=self.text_color)
        ax.axvline(strike, color=self.accent_colors[3], linestyle=':', alpha=0.7)

        ax2 = ax.twinx()
        ax2.plot(spots, gammas, color=self.accent_colors[2], linewidth=2, label='Gamma')
        ax2.set_ylabel('Gamma', fontsize=11, color=self.text_color)

        ax.set_title(f'Delta and Gamma (K={strike:.0f}, T={time_to_expiration:.2f})',
                     fontsize=14, fontweight='bold', color=self.text_color)

        return self._finish(fig, ax, save_path)
