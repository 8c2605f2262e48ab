"""
Congestion Prediction Module

Components:
- CongestionPredictor: Time-of-day congestion estimate for a location
- IntersectionForecaster: Hour-ahead congestion outlook for a signal
"""

from clearway.prediction.congestion_predictor import (
    CongestionPredictor,
    CongestionSample,
)

from clearway.prediction.intersection_forecast import (
    IntersectionForecaster,
    IntersectionForecast,
    ForecastPoint,
)


__all__ = [
    'CongestionPredictor',
    'CongestionSample',
    'IntersectionForecaster',
    'IntersectionForecast',
    'ForecastPoint',
]
