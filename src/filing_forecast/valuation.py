"""
valuation.py

Next-period free cash flow from predicted growth rates.

FCF = Revenue - Operating Costs - Taxes - Net Investments
      - Net Change in Working Capital

Each component is scaled by the growth the engine predicts for the tag that
reports it.
"""

from dataclasses import dataclass
from typing import Dict, Mapping


# Component -> tag whose growth drives it.
COMPONENT_TAGS = {
    'revenue': 'Revenues',
    'costs': 'CostsAndExpenses',
    'taxes': 'TaxesOther',
    'net_investments': 'InvestmentIncomeNonOperating',
    'assets': 'AssetsCurrent',
    'liabilities': 'LiabilitiesCurrent',
}


@dataclass
class CashFlowComponents:
    """Current-period values of the free cash flow components."""
    revenue: float
    costs: float
    taxes: float
    net_investments: float
    assets: float
    liabilities: float

    @property
    def working_capital(self) -> float:
        return self.assets - self.liabilities

    def grow(self, growths: Mapping[str, float]) -> "CashFlowComponents":
        """Scale every component by its growth factor (keyed by component name)."""
        missing = [name for name in COMPONENT_TAGS if name not in growths]
        if missing:
            raise ValueError(f"Missing growth for components: {missing}")
        return CashFlowComponents(**{
            name: getattr(self, name) * growths[name] for name in COMPONENT_TAGS
        })


def growths_by_component(
    predictions: Mapping[str, float],
    component_tags: Mapping[str, str] = COMPONENT_TAGS
) -> Dict[str, float]:
    """Re-key tag growth predictions by cash flow component."""
    return {component: predictions[tag] for component, tag in component_tags.items()}


def project_free_cash_flow(
    current: CashFlowComponents,
    growths: Mapping[str, float]
) -> float:
    """
    Free cash flow of the next period.

    Args:
        current: Current-period component values
        growths: Growth factor per component name (1.05 = +5%)

    Returns:
        Projected free cash flow
    """
    projected = current.grow(growths)
    change_in_working_capital = projected.working_capital - current.working_capital
    return (
        projected.revenue
        - projected.costs
        - projected.taxes
        - projected.net_investments
        - change_in_working_capital
    )
