"""Unit tests for filing_forecast.valuation."""

import pytest

from filing_forecast.valuation import (
    COMPONENT_TAGS,
    CashFlowComponents,
    growths_by_component,
    project_free_cash_flow,
)


@pytest.fixture
def current():
    return CashFlowComponents(
        revenue=1000.0,
        costs=600.0,
        taxes=100.0,
        net_investments=50.0,
        assets=400.0,
        liabilities=300.0,
    )


class TestCashFlowComponents:

    def test_working_capital(self, current):
        assert current.working_capital == 100.0

    def test_grow(self, current):
        growths = {name: 1.1 for name in COMPONENT_TAGS}
        grown = current.grow(growths)
        assert grown.revenue == pytest.approx(1100.0)
        assert grown.working_capital == pytest.approx(110.0)

    def test_grow_requires_every_component(self, current):
        with pytest.raises(ValueError, match="liabilities"):
            current.grow({name: 1.0 for name in COMPONENT_TAGS if name != 'liabilities'})


class TestFreeCashFlow:

    def test_flat_growth(self, current):
        growths = {name: 1.0 for name in COMPONENT_TAGS}
        # 1000 - 600 - 100 - 50 - 0
        assert project_free_cash_flow(current, growths) == pytest.approx(250.0)

    def test_working_capital_build_reduces_cash(self, current):
        growths = {name: 1.0 for name in COMPONENT_TAGS}
        growths['assets'] = 1.25
        # working capital 100 -> 200
        assert project_free_cash_flow(current, growths) == pytest.approx(150.0)

    def test_from_tag_predictions(self, current):
        predictions = {tag: 1.0 for tag in COMPONENT_TAGS.values()}
        predictions['Revenues'] = 1.05
        growths = growths_by_component(predictions)
        assert growths['revenue'] == 1.05
        assert project_free_cash_flow(current, growths) == pytest.approx(300.0)
