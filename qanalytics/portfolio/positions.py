"""
Trade, Position and Strategy P&L Bookkeeping

Accounting model:
    - Trade: immutable execution record; profit against theoretical value
          P&L = -quantity·(price - tv)
    - Position: running (quantity, cost) of one instrument; closing it at a
      price flattens the quantity and realizes P&L = -cost
    - Strategy: owns an ordered list of trades and derives aggregate cost,
      P&L, commissions and per-instrument positions

Market conventions:
    - Buy at the ask, sell at the bid
    - An instrument's price is the mid when both sides are quoted,
      otherwise whichever side is available
"""

import copy
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from ..config import ZERO
from ..core.trading_calendar import count_trading_days
from ..models.black_scholes import BlackScholes, OptionType
from ..utils import get_logger, year_fraction

log = get_logger(__name__)


class InstrumentType(Enum):
    """Instrument type enumeration."""
    STOCK = 'stock'
    OPTION = 'option'


@dataclass
class Instrument:
    """
    A tradeable instrument with its current quotes.

    Attributes:
        type: Stock or option
        code: Unique instrument code
        is_call: Option flavour (None for stocks)
        maturity: Option expiry day (None for stocks)
        strike: Option strike (None for stocks)
        bid, ask: Current quotes, None when not quoted
    """
    type: InstrumentType
    code: str
    is_call: Optional[bool] = None
    maturity: Optional[date] = None
    strike: Optional[float] = None
    bid: Optional[float] = None
    ask: Optional[float] = None

    @classmethod
    def stock(cls, code: str, bid: float = None, ask: float = None) -> 'Instrument':
        return cls(InstrumentType.STOCK, code, bid=bid, ask=ask)

    @classmethod
    def option(cls, code: str, is_call: bool, maturity: date, strike: float,
               bid: float = None, ask: float = None) -> 'Instrument':
        return cls(InstrumentType.OPTION, code, is_call, maturity, strike, bid, ask)

    @property
    def is_option(self) -> bool:
        return self.type is InstrumentType.OPTION

    @property
    def price(self) -> Optional[float]:
        if self.bid is not None and self.ask is not None:
            return (self.bid + self.ask) / 2.0
        if self.bid is not None:
            return self.bid
        return self.ask

    @property
    def mid_price(self) -> Optional[float]:
        if self.bid is None or self.ask is None:
            return None
        return (self.bid + self.ask) / 2.0

    @property
    def spread(self) -> Optional[float]:
        if self.bid is None or self.ask is None:
            return None
        return self.ask - self.bid

    def set_price(self, price: float):
        self.bid = price
        self.ask = price

    def __str__(self) -> str:
        kind = 'OPT' if self.is_option else 'STK'
        bid = f"{self.bid:.2f}" if self.bid is not None else '-'
        ask = f"{self.ask:.2f}" if self.ask is not None else '-'
        return f"{kind} {self.code} B: {bid} A: {ask}"


def theoretical_value(
    instrument: Instrument,
    spot: float,
    day: date,
    volatility: float,
    interest_rate: float = 0.0,
    dividend_yield: float = 0.0
) -> float:
    """
    Black-Scholes value of an option (the spot itself for a stock).

    Args:
        instrument: Instrument to value
        spot: Underlying price on day
        day: Valuation day
        volatility: Annualized volatility
        interest_rate: Risk-free rate
        dividend_yield: Dividend yield

    Returns:
        Theoretical value per unit
    """
    if not instrument.is_option:
        return spot

    option_type = OptionType.CALL if instrument.is_call else OptionType.PUT
    t = year_fraction(count_trading_days(day, instrument.maturity))
    pricer = BlackScholes(option_type, spot, instrument.strike, t, interest_rate, dividend_yield, volatility)
    return pricer.price()


@dataclass(frozen=True)
class Trade:
    """
    Immutable execution record.

    Attributes:
        execution_day: Day the trade was done
        instrument: Traded instrument
        quantity: Signed quantity (positive buys)
        price: Market price paid or received
        tv: Theoretical value at execution
        commission: Fees, None when unknown
        label: Free-form tag
        is_static: Static trades are not delta-hedged
    """
    execution_day: date
    instrument: Instrument
    quantity: float
    price: float
    tv: float
    commission: Optional[float] = None
    label: Optional[str] = None
    is_static: bool = False

    @classmethod
    def create(
        cls,
        execution_day: date,
        instrument: Optional[Instrument],
        quantity: float,
        tv: Optional[float] = None
    ) -> Optional['Trade']:
        """
        Trade at the market: buy at the ask, sell at the bid.

        Returns:
            Trade, or None when the instrument or the needed quote is missing
        """
        if instrument is None:
            return None

        market_price = instrument.ask if quantity > 0.0 else instrument.bid
        if market_price is None:
            log.debug("No %s quote for %s", 'ask' if quantity > 0.0 else 'bid', instrument.code)
            return None

        return cls(execution_day, instrument, quantity, market_price, market_price if tv is None else tv)

    def profit(self) -> float:
        """Edge captured against theoretical value."""
        return -(self.quantity * (self.price - self.tv))

    def __str__(self) -> str:
        text = f"{self.instrument} E:{self.execution_day} Q:{self.quantity:.2f} P:{self.price:.2f}"
        if self.instrument.is_option:
            text += f" V:{self.tv:.2f}"
        return text


class Position:
    """
    Running quantity and cost of one instrument.

    Example:
        >>> position = Position()
        >>> position.add(10, 5.0)
        >>> position.close(6.0)
        10.0
    """

    def __init__(self, instrument: Optional[Instrument] = None):
        self.instrument = instrument
        self.total_quantity = 0.0
        self.total_cost = 0.0

    def reset(self):
        self.total_quantity = 0.0
        self.total_cost = 0.0

    def add(self, quantity: float, price: float):
        self.total_quantity += quantity
        self.total_cost += quantity * price

    def profit(self) -> float:
        return -self.total_cost

    def close(self, price: float) -> float:
        """Flatten at price and return the realized P&L."""
        self.add(-self.total_quantity, price)
        return self.profit()

    def close_bid_ask(self, bid: Optional[float], ask: Optional[float]) -> Optional[float]:
        """
        Flatten against the market: buy back at the ask, sell out at the bid.

        Returns:
            Realized P&L, or None when the needed side is not quoted
        """
        price = ask if -self.total_quantity > 0 else bid
        if price is None:
            return None
        return self.close(price)

    def evaluate_close(self, bid: Optional[float], ask: Optional[float] = None) -> Optional[float]:
        """P&L of closing now, without touching this position."""
        if ask is None:
            ask = bid
        return copy.copy(self).close_bid_ask(bid, ask)

    def __str__(self) -> str:
        prefix = f"{self.instrument.code} : " if self.instrument is not None else ''
        return f"{prefix}Q={self.total_quantity:.2f} P={self.total_cost:.2f}"


@dataclass
class Strategy:
    """
    An ordered list of trades and the P&L derived from them.

    Attributes:
        trades: Executions in order
        capital: Capital allocated to the strategy
        custom_values: Named numeric annotations
    """
    trades: List[Trade] = field(default_factory=list)
    capital: Optional[float] = None
    custom_values: Dict[str, float] = field(default_factory=dict)

    def add_trade(self, trade: Optional[Trade]) -> bool:
        if trade is None:
            return False
        self.trades.append(trade)
        return True

    def cost(self) -> float:
        return sum(trade.price * trade.quantity for trade in self.trades)

    def profit(self) -> float:
        return sum(trade.profit() for trade in self.trades)

    def compute_commission(self) -> Optional[float]:
        """Total commissions, None when no trade carries one."""
        commissions = [t.commission for t in self.trades if t.commission is not None]
        if not commissions:
            return None
        return sum(commissions)

    def position(self, code: str) -> Position:
        position = Position()
        for trade in self.trades:
            if trade.instrument.code == code:
                if position.instrument is None:
                    position.instrument = trade.instrument
                position.add(trade.quantity, trade.price)
        return position

    def positions(self) -> Dict[str, Position]:
        """Positions keyed by instrument code, in code order."""
        positions: Dict[str, Position] = {}
        for trade in self.trades:
            code = trade.instrument.code
            if code not in positions:
                positions[code] = Position(trade.instrument)
            positions[code].add(trade.quantity, trade.price)
        return dict(sorted(positions.items()))

    def non_zero_positions(self) -> Dict[str, Position]:
        return {
            code: position
            for code, position in self.positions().items()
            if abs(position.total_quantity) >= ZERO
        }

    def put_custom_value(self, tag: str, value: float):
        self.custom_values[tag] = float(value)

    def custom_value(self, tag: str) -> Optional[float]:
        return self.custom_values.get(tag)
