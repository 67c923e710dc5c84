"""
Installation Cost Model
=======================

Formula
-------
Estimated_Cost = Distance_m x Cost_Per_Meter[installation_type]

Default rates (per meter, currency configurable):

* **aerial**       700   -- fiber strung on poles
* **underground**  1200  -- trenching and ducts
* **mixed**        950

An installation type missing from the rate table is a configuration
error; there is no fallback rate.

Complexity: O(1) per estimate.
"""

from __future__ import annotations

from typing import Mapping, Optional, Union

from .enums import InstallationType
from .errors import InvalidConfiguration

DEFAULT_RATES: dict[str, float] = {
    InstallationType.AERIAL.value: 700,
    InstallationType.UNDERGROUND.value: 1200,
    InstallationType.MIXED.value: 950,
}
DEFAULT_CURRENCY = "XAF"


def _key(installation_type: Union[str, InstallationType]) -> str:
    if isinstance(installation_type, InstallationType):
        return installation_type.value
    return installation_type


class CostModel:
    """Rate table used by the builder and the API layer."""

    def __init__(
        self,
        rates: Optional[Mapping[Union[str, InstallationType], float]] = None,
        currency: str = DEFAULT_CURRENCY,
    ):
        source = DEFAULT_RATES if rates is None else rates
        self.rates: dict[str, float] = {}
        for installation_type, rate in source.items():
            if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate <= 0:
                raise InvalidConfiguration(
                    f"Cost per meter for {_key(installation_type)!r} must be a "
                    f"positive number, got {rate!r}"
                )
            self.rates[_key(installation_type)] = rate
        self.currency = currency

    @property
    def installation_types(self) -> frozenset[str]:
        return frozenset(self.rates)

    def cost_per_meter(self, installation_type: Union[str, InstallationType]) -> float:
        try:
            return self.rates[_key(installation_type)]
        except (KeyError, TypeError):
            raise InvalidConfiguration(
                f"No cost per meter configured for installation type "
                f"{installation_type!r}"
            ) from None

    def estimate(
        self, distance_m: float, installation_type: Union[str, InstallationType]
    ) -> float:
        return distance_m * self.cost_per_meter(installation_type)


DEFAULT_COST_MODEL = CostModel()


def compute_cost(
    distance_m: float,
    installation_type: Union[str, InstallationType],
    cost_model: CostModel = DEFAULT_COST_MODEL,
) -> float:
    """Return ``distance_m x rate``; unknown types raise ``InvalidConfiguration``."""
    return cost_model.estimate(distance_m, installation_type)
