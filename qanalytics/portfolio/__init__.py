"""
Trade and Position Accounting.

P&L bookkeeping for option and stock strategies:
- Trades against theoretical value
- Per-instrument positions
- Strategy aggregates (cost, profit, commissions)
"""

from .positions import Instrument, InstrumentType, Trade, Position, Strategy, theoretical_value
