"""Tests for account services: seeding, rename cascade, protected delete."""

from __future__ import annotations

import pytest

from fundtrack.config import BaseConfig
from fundtrack.errors import AccountError
from fundtrack.models import Account
from fundtrack.services.accounts import (
    add_account,
    delete_account,
    platform_filters,
    rename_account,
    seed_default_accounts,
)


def test_seed_creates_protected_defaults_once(account_repo):
    created = seed_default_accounts(account_repo, BaseConfig.DEFAULT_ACCOUNTS)

    assert [a.name for a in created] == ["Default", "Alipay", "Tencent", "Bank", "Others"]
    assert all(a.is_default for a in created)
    assert seed_default_accounts(account_repo, BaseConfig.DEFAULT_ACCOUNTS) == []
    assert account_repo.count() == 5


def test_seed_skipped_when_user_accounts_exist(account_factory, account_repo):
    account_factory(name="Mine")

    assert seed_default_accounts(account_repo, ["Default"]) == []
    assert account_repo.count() == 1


def test_add_account_trims_and_rejects_duplicates(account_repo):
    account = add_account(account_repo, "  Futu  ")

    assert account.name == "Futu"
    assert account.is_default is False
    with pytest.raises(AccountError):
        add_account(account_repo, "Futu")
    with pytest.raises(AccountError):
        add_account(account_repo, "   ")


def test_rename_moves_positions(account_factory, account_repo, position_factory, position_repo):
    account = account_factory(name="Tencent")
    position_factory(platform="Tencent")

    moved = rename_account(account_repo, account.id, " LiCaiTong ")

    assert moved == 1
    assert position_repo.list_all()[0].platform == "LiCaiTong"


def test_rename_to_same_name_is_noop(account_factory, account_repo, position_factory):
    account = account_factory(name="Bank")
    position_factory(platform="Bank")

    assert rename_account(account_repo, account.id, "Bank") == 0


def test_rename_rejects_taken_or_blank_names(account_factory, account_repo):
    account = account_factory(name="Bank")
    account_factory(name="Others")

    with pytest.raises(AccountError):
        rename_account(account_repo, account.id, "Others")
    with pytest.raises(AccountError):
        rename_account(account_repo, account.id, "")
    with pytest.raises(AccountError):
        rename_account(account_repo, 999, "Anything")


def test_default_accounts_cannot_be_deleted(account_factory, account_repo):
    protected = account_factory(name="Default", is_default=True)
    custom = account_factory(name="Side")

    with pytest.raises(AccountError):
        delete_account(account_repo, protected.id)
    delete_account(account_repo, custom.id)

    assert [a.name for a in account_repo.list_all()] == ["Default"]


def test_delete_keeps_positions(account_factory, account_repo, position_factory, position_repo):
    custom = account_factory(name="Side")
    position_factory(platform="Side")

    delete_account(account_repo, custom.id)

    assert position_repo.list_all()[0].platform == "Side"


def test_platform_filters():
    assert platform_filters([Account(name="Default")]) == ["Default"]
    assert platform_filters([Account(name="Default"), Account(name="Bank")]) == ["All", "Default", "Bank"]
    assert platform_filters([]) == []
