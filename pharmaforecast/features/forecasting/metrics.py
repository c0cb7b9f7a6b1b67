"""In-sample fit metrics behind the forecast accuracy score.

Supported Metrics:
- WAPE: Weighted Absolute Percentage Error
- Accuracy score: 100 - WAPE, clipped to [0, 100]

WAPE is used rather than MAPE because daily pharmacy sales are
intermittent: many zero days would make MAPE undefined.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass
class MetricResult:
    """Result of a single metric calculation.

    Attributes:
        name: Name of the metric.
        value: Calculated value (nan for empty input, inf when undefined).
        n_samples: Number of samples used in calculation.
        warnings: Warnings generated during calculation.
    """

    name: str
    value: float
    n_samples: int
    warnings: list[str] = field(default_factory=lambda: [])


class MetricsCalculator:
    """Forecast fit metrics with explicit edge case handling."""

    @staticmethod
    def wape(
        actuals: np.ndarray[Any, np.dtype[np.floating[Any]]],
        predictions: np.ndarray[Any, np.dtype[np.floating[Any]]],
    ) -> MetricResult:
        """Weighted Absolute Percentage Error.

        Formula: sum(|A - F|) / sum(|A|) * 100

        Returns inf if the sum of actuals is zero.

        Args:
            actuals: Observed values.
            predictions: Fitted or predicted values.

        Returns:
            MetricResult with WAPE value.

        Raises:
            ValueError: If arrays have different lengths.
        """
        if len(actuals) == 0:
            return MetricResult(name="wape", value=np.nan, n_samples=0, warnings=["Empty array"])

        if len(actuals) != len(predictions):
            raise ValueError(
                f"Length mismatch: actuals={len(actuals)}, predictions={len(predictions)}"
            )

        sum_abs_error = float(np.sum(np.abs(actuals - predictions)))
        sum_abs_actual = float(np.sum(np.abs(actuals)))

        if sum_abs_actual == 0:
            return MetricResult(
                name="wape",
                value=float("inf"),
                n_samples=len(actuals),
                warnings=["Sum of actuals is zero; WAPE undefined"],
            )

        return MetricResult(
            name="wape",
            value=(sum_abs_error / sum_abs_actual) * 100.0,
            n_samples=len(actuals),
        )

    @classmethod
    def accuracy_score(
        cls,
        actuals: np.ndarray[Any, np.dtype[np.floating[Any]]],
        fitted: np.ndarray[Any, np.dtype[np.floating[Any]]],
    ) -> float:
        """Accuracy in [0, 100] derived from in-sample WAPE.

        All-zero actuals score 100 when the fit is also all zero, else 0.
        Empty input scores 0.
        """
        result = cls.wape(actuals, fitted)
        if np.isnan(result.value):
            return 0.0
        if np.isinf(result.value):
            return 100.0 if bool(np.all(fitted == 0)) else 0.0
        return float(np.clip(100.0 - result.value, 0.0, 100.0))
