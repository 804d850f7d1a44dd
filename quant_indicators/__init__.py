"""
Quant Indicators - Technical Analysis and Backtesting Library

Technical indicators over bar series with exact decimal or fast float
arithmetic, memoized per-index evaluation, trading rules, a bar series
backtest runner and performance criteria.
"""

__version__ = "1.0.0"
__author__ = "AlphaTrade"
