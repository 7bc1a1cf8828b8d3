"""Tests for saving entries as positions and platform filtering."""

from __future__ import annotations

import pytest

from fundtrack.config import BaseConfig
from fundtrack.errors import AccountError, InvalidNav, InvalidShares
from fundtrack.models import Position
from fundtrack.services.accounts import seed_default_accounts
from fundtrack.services.entry import EntryForm
from fundtrack.services.positions import delete_position, filter_by_platform, save_entry
from fundtrack.services.summary import calculate_summary


@pytest.fixture
def accounts(account_repo):
    seed_default_accounts(account_repo, BaseConfig.DEFAULT_ACCOUNTS)
    return account_repo


def test_save_new_entry(position_repo, accounts):
    form = EntryForm.for_new_position(2.0).on_amount_change("500").on_gain_change("100")

    position = save_entry(
        position_repo,
        form,
        accounts=accounts,
        code="161725",
        name="Liquor Index",
        platform="Alipay",
        day_change_pct=1.0,
    )

    assert position.id is not None
    assert position.holding_shares == pytest.approx(250.0)
    assert position.cost_price == pytest.approx(1.6)
    assert position.current_nav == 2.0
    assert position.day_change_val == pytest.approx(500 * 1.0 / 101.0)
    assert position.last_update is not None


def test_invalid_entry_writes_nothing(position_repo, accounts):
    with pytest.raises(InvalidShares):
        save_entry(position_repo, EntryForm(current_nav=1.0), accounts=accounts, code="X", platform="Default")
    with pytest.raises(InvalidNav):
        save_entry(
            position_repo,
            EntryForm(current_nav=0.0).on_shares_change("3"),
            accounts=accounts,
            code="X",
            platform="Default",
        )

    assert position_repo.list_all() == []


def test_unknown_platform_writes_nothing(position_repo, accounts):
    form = EntryForm.for_new_position(1.0).on_amount_change("10")

    with pytest.raises(AccountError, match="Nowhere"):
        save_entry(position_repo, form, accounts=accounts, code="000001", platform="Nowhere")

    assert position_repo.list_all() == []


def test_edit_onto_unknown_platform_keeps_stored_row(position_factory, position_repo, accounts):
    stored = position_factory(platform="Bank")

    form = EntryForm.from_position(stored).on_amount_change("300")
    with pytest.raises(AccountError):
        save_entry(position_repo, form, accounts=accounts, code=stored.code, platform="Nowhere", position_id=stored.id)

    unchanged = position_repo.get_by_id(stored.id)
    assert unchanged.platform == "Bank"
    assert unchanged.holding_shares == 100.0


def test_edit_existing_position_rederives_day_gain(position_factory, position_repo, accounts):
    stored = position_factory(holding_shares=100, cost_price=2.0, current_nav=2.5, day_change_pct=2.0, day_change_val=4.9)

    form = EntryForm.from_position(stored).on_amount_change("300")
    saved = save_entry(
        position_repo, form, accounts=accounts, code=stored.code, platform="Bank", position_id=stored.id
    )

    assert saved.id == stored.id
    assert saved.holding_shares == pytest.approx(120.0)
    assert saved.cost_price == pytest.approx(2.0)
    assert saved.platform == "Bank"
    assert saved.day_change_pct == 2.0
    assert saved.day_change_val == pytest.approx(300 * 2.0 / 102.0)
    assert saved.last_update == "2024-01-05"


def test_edit_missing_position(position_repo, accounts):
    form = EntryForm(current_nav=1.0).on_shares_change("1")

    with pytest.raises(LookupError):
        save_entry(position_repo, form, accounts=accounts, code="X", platform="Default", position_id=77)


def test_saved_day_gain_keeps_summary_consistent(position_repo, accounts):
    form = EntryForm.for_new_position(1.0).on_amount_change("1000")
    save_entry(position_repo, form, accounts=accounts, code="A", platform="Default", day_change_pct=5.0)

    summary = calculate_summary(position_repo.list_all())

    assert summary.total_day_gain_pct == pytest.approx(5.0)


def test_filter_by_platform():
    positions = [Position(code="A", platform="Alipay"), Position(code="B", platform="Bank")]

    assert [p.code for p in filter_by_platform(positions, "Bank")] == ["B"]
    assert len(filter_by_platform(positions, "All")) == 2
    assert len(filter_by_platform(positions, None)) == 2
    assert filter_by_platform(positions, "Nobody") == []


def test_delete_position(position_factory, position_repo):
    position = position_factory()

    delete_position(position_repo, position.id)

    assert position_repo.list_all() == []
