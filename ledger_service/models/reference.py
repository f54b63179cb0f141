"""
Reference Entities

Accounts, categories, funds and people are owned by the administrative
module. The ledger only reads them: to join display names into
transaction views and to reject references that do not exist.

Inactive entities stay valid targets for historical transactions.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


NEUTRAL_COLOR = "#6b7280"


class ReferenceEntity(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200, alias="nome")
    active: bool = Field(default=True, alias="ativo")


class Account(ReferenceEntity):
    """Bank or cash account (conta bancária)."""


class Category(ReferenceEntity):
    """Financial category, shown with its color in reports."""

    color: str = Field(default=NEUTRAL_COLOR, alias="cor")


class Fund(ReferenceEntity):
    """Accounting fund, e.g. building fund or missions fund."""

    color: Optional[str] = Field(default=None, alias="cor")


class Person(ReferenceEntity):
    """Counterparty of a transaction (member, supplier, donor)."""

    name: str = Field(..., min_length=1, max_length=200, alias="nome_completo")
