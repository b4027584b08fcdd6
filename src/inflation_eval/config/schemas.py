"""Pydantic schemas for simulation batch files.

A batch YAML file lists the estimators to evaluate together with the
resampling strategy, trend injector and population estimator shared by all of
them. Components are referenced by registry ``kind`` plus keyword ``params``
and turned into objects by :mod:`inflation_eval.simulation.registry`.

Example
-------
.. code-block:: yaml

    estimators:
      - kind: total_cpi
      - kind: percentile_eq
        params: {q: 70}
    resampler: {kind: seasonal_iid}
    trend: {kind: random_walk}
    param_estimator: {kind: total_cpi}
    nsim: 1000
    traindate: "2019-12"
"""

from __future__ import annotations

from typing import Any

import pandas as pd
from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import DEFAULT_SEED

__all__ = [
    "BatchSpec",
    "ComponentSpec",
    "EvalPeriodSpec",
    "SimulationSpec",
]


def _check_month(value: str) -> str:
    try:
        pd.Period(value, freq="M")
    except (ValueError, TypeError) as exc:
        raise ValueError(f"'{value}' is not a valid month (expected YYYY-MM)") from exc
    return value


class ComponentSpec(BaseModel):
    """Reference to a registered component.

    Attributes
    ----------
    kind : str
        Registry key (e.g. ``"seasonal_iid"``, ``"exponential"``).
    params : dict
        Keyword arguments forwarded to the component constructor.
    """

    kind: str = Field(min_length=1, description="Registry key of the component")
    params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("kind")
    @classmethod
    def normalise_kind(cls, v: str) -> str:
        return v.strip().lower()


class EvalPeriodSpec(BaseModel):
    """Evaluation sub-period expressed as inclusive months."""

    start: str = Field(description="First month (YYYY-MM)")
    final: str = Field(description="Last month (YYYY-MM)")
    tag: str = Field(min_length=1)

    @field_validator("start", "final")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return _check_month(v)

    @model_validator(mode="after")
    def validate_order(self) -> "EvalPeriodSpec":
        if pd.Period(self.start, freq="M") > pd.Period(self.final, freq="M"):
            raise ValueError("start must not be after final")
        return self


class SimulationSpec(BaseModel):
    """Shared simulation parameters of one configuration."""

    resampler: ComponentSpec
    trend: ComponentSpec = Field(default_factory=lambda: ComponentSpec(kind="identity"))
    param_estimator: ComponentSpec = Field(
        default_factory=lambda: ComponentSpec(kind="total_cpi")
    )
    nsim: int = Field(gt=0, description="Replications per configuration")
    traindate: str = Field(description="Training cutoff month (YYYY-MM)")
    evalperiods: list[EvalPeriodSpec] | None = Field(
        default=None,
        description="Evaluation sub-periods; the default Guatemalan periods when omitted",
    )
    include_complete_period: bool = True
    seed: int = Field(default=DEFAULT_SEED, ge=0)

    @field_validator("traindate")
    @classmethod
    def validate_traindate(cls, v: str) -> str:
        return _check_month(v)


class BatchSpec(SimulationSpec):
    """A batch of configurations, one per estimator."""

    estimators: list[ComponentSpec] = Field(min_length=1)
    savetrajectories: bool = True
