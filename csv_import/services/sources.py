"""Import sources the client knows about.

Each source is a member of a closed enum; adding a source means adding a member
and its ``SourceInfo`` entry, never branching on a raw string id.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class SourceInfo:
    name: str
    description: str
    available: bool
    required_columns: tuple[str, ...] = ()


class ImportSource(str, enum.Enum):
    WALLET = "wallet"
    MINT = "mint"
    YNAB = "ynab"
    EXCEL = "excel"
    PERSONAL_CAPITAL = "personal_capital"

    @property
    def info(self) -> SourceInfo:
        return _SOURCE_INFO[self]

    @property
    def available(self) -> bool:
        return self.info.available

    @property
    def required_columns(self) -> tuple[str, ...]:
        return self.info.required_columns


# ---------------------------------------------------------------------------
# Source catalogue
# ---------------------------------------------------------------------------

# Required header columns of a Wallet by BudgetBakers export, in scan order
WALLET_REQUIRED_COLUMNS: tuple[str, ...] = (
    "account",
    "category",
    "currency",
    "amount",
    "type",
    "date",
)

_SOURCE_INFO: dict[ImportSource, SourceInfo] = {
    ImportSource.WALLET: SourceInfo(
        name="Wallet by BudgetBakers",
        description="Import from Wallet CSV export",
        available=True,
        required_columns=WALLET_REQUIRED_COLUMNS,
    ),
    ImportSource.MINT: SourceInfo(
        name="Mint",
        description="Import from Mint CSV export",
        available=False,
    ),
    ImportSource.YNAB: SourceInfo(
        name="YNAB (You Need A Budget)",
        description="Import from YNAB CSV export",
        available=False,
    ),
    ImportSource.EXCEL: SourceInfo(
        name="Excel / Google Sheets",
        description="Import from custom CSV format",
        available=False,
    ),
    ImportSource.PERSONAL_CAPITAL: SourceInfo(
        name="Personal Capital",
        description="Import from Personal Capital CSV",
        available=False,
    ),
}


def available_sources() -> list[ImportSource]:
    """Sources that can be imported today, in catalogue order."""
    return [source for source in ImportSource if source.available]


def default_source() -> ImportSource:
    """The first available source."""
    return available_sources()[0]
