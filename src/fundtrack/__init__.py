"""FundTrack fund-holdings tracker package."""

from __future__ import annotations

from .config import BaseConfig, DevConfig

__all__ = ["BaseConfig", "DevConfig"]
