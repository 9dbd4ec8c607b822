"""Configuration for the analyzer and the correction stages."""

from autolut.config.operations import ParamSpec
from autolut.config.params import (
    AnalysisParams,
    ContrastParams,
    ExposureParams,
    SaturationParams,
    WhiteBalanceParams,
)

__all__ = [
    "ParamSpec",
    "AnalysisParams",
    "ExposureParams",
    "ContrastParams",
    "WhiteBalanceParams",
    "SaturationParams",
]
