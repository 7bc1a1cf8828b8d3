"""Tests for portfolio summary aggregation."""

from __future__ import annotations

import pytest

from fundtrack.models import Position
from fundtrack.services.summary import PortfolioSummary, calculate_summary


def _position(shares, cost, nav, day_val=0.0, platform="Default"):
    return Position(
        code="000001",
        platform=platform,
        holding_shares=shares,
        cost_price=cost,
        current_nav=nav,
        day_change_val=day_val,
    )


def test_empty_portfolio_is_all_zero():
    assert calculate_summary([]) == PortfolioSummary()


def test_two_position_scenario():
    summary = calculate_summary(
        [
            _position(10, 1.0, 1.2, 0.5),
            _position(5, 2.0, 1.8, -0.3),
        ]
    )

    assert summary.total_assets == pytest.approx(21.0)
    assert summary.total_cost == pytest.approx(20.0)
    assert summary.holding_gain == pytest.approx(1.0)
    assert summary.holding_gain_pct == pytest.approx(5.0)
    assert summary.total_day_gain == pytest.approx(0.2)
    assert summary.total_day_gain_pct == pytest.approx(0.2 / 20.8 * 100)


def test_zero_cost_basis_gives_zero_percent():
    summary = calculate_summary([_position(10, 0.0, 1.5)])

    assert summary.holding_gain == pytest.approx(15.0)
    assert summary.holding_gain_pct == 0.0


def test_day_gain_pct_zero_when_previous_total_not_positive():
    summary = calculate_summary([_position(10, 1.0, 1.0, day_val=10.0)])

    assert summary.total_day_gain == 10.0
    assert summary.total_day_gain_pct == 0.0


def test_losses_are_signed():
    summary = calculate_summary([_position(100, 2.0, 1.5, day_val=-4.0)])

    assert summary.holding_gain == pytest.approx(-50.0)
    assert summary.holding_gain_pct == pytest.approx(-25.0)
    assert summary.total_day_gain_pct < 0


def test_order_independent():
    positions = [_position(10, 1.0, 1.2, 0.5), _position(5, 2.0, 1.8, -0.3), _position(7, 0.9, 1.1, 0.1)]

    forward = calculate_summary(positions)
    backward = calculate_summary(list(reversed(positions)))

    assert forward.total_assets == pytest.approx(backward.total_assets)
    assert forward.total_day_gain_pct == pytest.approx(backward.total_day_gain_pct)


def test_totals_are_additive():
    list_a = [_position(10, 1.0, 1.2, 0.5), _position(3, 4.0, 3.5, -1.0)]
    list_b = [_position(5, 2.0, 1.8, -0.3)]

    combined = calculate_summary(list_a + list_b)
    a = calculate_summary(list_a)
    b = calculate_summary(list_b)

    assert combined.total_assets == pytest.approx(a.total_assets + b.total_assets)
    assert combined.total_cost == pytest.approx(a.total_cost + b.total_cost)
    assert combined.total_day_gain == pytest.approx(a.total_day_gain + b.total_day_gain)


def test_accepts_generator_and_plain_objects():
    class Row:
        holding_shares = 2
        cost_price = 1
        current_nav = 3
        day_change_val = None

    summary = calculate_summary(row for row in [Row()])

    assert summary.total_assets == 6
    assert summary.total_day_gain == 0.0
