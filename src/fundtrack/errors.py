"""Validation error taxonomy for FundTrack."""

from __future__ import annotations


class FundTrackError(Exception):
    """Base class for user-facing FundTrack failures."""


class EntryValidationError(FundTrackError, ValueError):
    """A position entry could not be committed."""


class InvalidNav(EntryValidationError):
    """The NAV attached to an entry is not positive."""

    def __init__(self, nav: float) -> None:
        super().__init__(f"Invalid NAV: {nav!r}")
        self.nav = nav


class InvalidShares(EntryValidationError):
    """The share count is missing, non-numeric or not positive."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Please enter a valid share count (got {raw!r}).")
        self.raw = raw


class DegenerateReturnSeries(FundTrackError, ValueError):
    """The terminal cumulative return is -100%, so the series cannot be rescaled."""


class AccountError(FundTrackError, ValueError):
    """An account operation was rejected."""
