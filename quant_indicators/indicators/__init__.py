"""
Technical indicators.

Every indicator maps a bar series index to a ``Num``. Concrete indicators
memoize their values through ``CachedIndicator``; ``NumericIndicator``
combines indicators with fluent arithmetic.
"""

from .base import (
    CachedIndicator,
    ConstantIndicator,
    Indicator,
    RecursiveCachedIndicator,
    as_indicator,
)
from .helpers import (
    AmountIndicator,
    CloseLocationValueIndicator,
    ClosePriceIndicator,
    GainIndicator,
    HighPriceIndicator,
    HighestValueIndicator,
    LossIndicator,
    LowPriceIndicator,
    LowestValueIndicator,
    MedianPriceIndicator,
    OpenPriceIndicator,
    PreviousValueIndicator,
    RunningTotalIndicator,
    SumIndicator,
    TrueRangeIndicator,
    TypicalPriceIndicator,
    VolumeIndicator,
)
from .averages import EMAIndicator, MMAIndicator, SMAIndicator, WMAIndicator
from .statistics import MeanDeviationIndicator, StandardDeviationIndicator, VarianceIndicator
from .volatility import ATRIndicator
from .numeric import BinaryOperationIndicator, NumericIndicator, UnaryOperationIndicator
from .oscillators import (
    CCIIndicator,
    MACDIndicator,
    ROCIndicator,
    RSIIndicator,
    StochasticOscillatorDIndicator,
    StochasticOscillatorKIndicator,
    WilliamsRIndicator,
)
from .aroon import AroonDownIndicator, AroonOscillatorIndicator, AroonUpIndicator
from .bollinger import (
    BollingerBandsLowerIndicator,
    BollingerBandsMiddleIndicator,
    BollingerBandsUpperIndicator,
    BollingerBandWidthIndicator,
    PercentBIndicator,
)
from .ichimoku import (
    IchimokuChikouSpanIndicator,
    IchimokuKijunSenIndicator,
    IchimokuLineIndicator,
    IchimokuSenkouSpanAIndicator,
    IchimokuSenkouSpanBIndicator,
    IchimokuTenkanSenIndicator,
)
from .keltner import (
    KeltnerChannelFacade,
    KeltnerChannelLowerIndicator,
    KeltnerChannelMiddleIndicator,
    KeltnerChannelUpperIndicator,
)
from .volume import (
    AccumulationDistributionIndicator,
    ChaikinMoneyFlowIndicator,
    IntradayIntensityIndicator,
    MVWAPIndicator,
    OnBalanceVolumeIndicator,
    VWAPIndicator,
)

__all__ = [
    "ATRIndicator",
    "AccumulationDistributionIndicator",
    "AmountIndicator",
    "AroonDownIndicator",
    "AroonOscillatorIndicator",
    "AroonUpIndicator",
    "BinaryOperationIndicator",
    "BollingerBandWidthIndicator",
    "BollingerBandsLowerIndicator",
    "BollingerBandsMiddleIndicator",
    "BollingerBandsUpperIndicator",
    "CCIIndicator",
    "CachedIndicator",
    "ChaikinMoneyFlowIndicator",
    "CloseLocationValueIndicator",
    "ClosePriceIndicator",
    "ConstantIndicator",
    "EMAIndicator",
    "GainIndicator",
    "HighPriceIndicator",
    "HighestValueIndicator",
    "IchimokuChikouSpanIndicator",
    "IchimokuKijunSenIndicator",
    "IchimokuLineIndicator",
    "IchimokuSenkouSpanAIndicator",
    "IchimokuSenkouSpanBIndicator",
    "IchimokuTenkanSenIndicator",
    "Indicator",
    "IntradayIntensityIndicator",
    "KeltnerChannelFacade",
    "KeltnerChannelLowerIndicator",
    "KeltnerChannelMiddleIndicator",
    "KeltnerChannelUpperIndicator",
    "LossIndicator",
    "LowPriceIndicator",
    "LowestValueIndicator",
    "MACDIndicator",
    "MMAIndicator",
    "MVWAPIndicator",
    "MeanDeviationIndicator",
    "MedianPriceIndicator",
    "NumericIndicator",
    "OnBalanceVolumeIndicator",
    "OpenPriceIndicator",
    "PercentBIndicator",
    "PreviousValueIndicator",
    "RecursiveCachedIndicator",
    "ROCIndicator",
    "RSIIndicator",
    "RunningTotalIndicator",
    "SMAIndicator",
    "StandardDeviationIndicator",
    "StochasticOscillatorDIndicator",
    "StochasticOscillatorKIndicator",
    "SumIndicator",
    "TrueRangeIndicator",
    "TypicalPriceIndicator",
    "UnaryOperationIndicator",
    "VWAPIndicator",
    "VarianceIndicator",
    "VolumeIndicator",
    "WMAIndicator",
    "WilliamsRIndicator",
    "as_indicator",
]
