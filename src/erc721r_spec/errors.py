"""ERC721R Python spec error codes and exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    # Success
    SUCCESS = 0x0000

    # Validation
    INVALID_FORMAT = 0x0100
    INVALID_TYPE = 0x0102
    INVALID_AMOUNT = 0x0105
    INVALID_ADDRESS = 0x0106
    INVALID_PAYLOAD = 0x0107
    NOT_PAYABLE = 0x0108

    # Authorization
    UNAUTHORIZED = 0x0200
    NOT_TOKEN_OWNER = 0x0203
    NOT_ON_ALLOW_LIST = 0x0207

    # Resource
    INSUFFICIENT_BALANCE = 0x0300
    INSUFFICIENT_VALUE = 0x0301
    CONTRACT_INSUFFICIENT_BALANCE = 0x0302
    MAX_SUPPLY_REACHED = 0x0304
    MINT_LIMIT_EXCEEDED = 0x0305

    # State
    ACCOUNT_NOT_FOUND = 0x0400
    TOKEN_NOT_FOUND = 0x0401
    ALREADY_REFUNDED = 0x0402
    OWNER_MINT_NOT_REFUNDABLE = 0x0403
    PUBLIC_SALE_INACTIVE = 0x0404
    PRESALE_INACTIVE = 0x0405
    REFUND_EXPIRED = 0x0406
    REFUND_PERIOD_ACTIVE = 0x0407
    CONTRACT_NOT_DEPLOYED = 0x0408
    CONTRACT_EXISTS = 0x0409
    LEAF_NOT_FOUND = 0x040A
    EMPTY_TREE = 0x040B
    INCORRECT_TOKEN_OWNER = 0x040C

    # Chain
    TIMESTAMP_TOO_OLD = 0x0604
    SNAPSHOT_NOT_FOUND = 0x0610

    # Internal
    NOT_IMPLEMENTED = 0xFF01
    UNKNOWN = 0xFFFF


# Revert reasons as the deployed contract reports them. Callers tell failures
# apart by these strings, so they must not change.
REVERT_REASONS: dict[ErrorCode, str] = {
    ErrorCode.INVALID_AMOUNT: "Mint zero quantity",
    ErrorCode.NOT_PAYABLE: "Function is not payable",
    ErrorCode.UNAUTHORIZED: "Ownable: caller is not the owner",
    ErrorCode.NOT_TOKEN_OWNER: "Not token owner",
    ErrorCode.NOT_ON_ALLOW_LIST: "Not on allow list",
    ErrorCode.INSUFFICIENT_BALANCE: "insufficient funds for value",
    ErrorCode.INSUFFICIENT_VALUE: "Not enough eth sent",
    ErrorCode.CONTRACT_INSUFFICIENT_BALANCE: "Address: insufficient balance",
    ErrorCode.MAX_SUPPLY_REACHED: "Max mint supply reached",
    ErrorCode.MINT_LIMIT_EXCEEDED: "Over mint limit",
    ErrorCode.TOKEN_NOT_FOUND: "Nonexistent token",
    ErrorCode.ALREADY_REFUNDED: "Already refunded",
    ErrorCode.OWNER_MINT_NOT_REFUNDABLE: "Freely minted NFTs cannot be refunded",
    ErrorCode.PUBLIC_SALE_INACTIVE: "Public sale is not active",
    ErrorCode.PRESALE_INACTIVE: "Presale is not active",
    ErrorCode.REFUND_EXPIRED: "Refund expired",
    ErrorCode.REFUND_PERIOD_ACTIVE: "Refund period not over",
    ErrorCode.CONTRACT_NOT_DEPLOYED: "contract not deployed",
    ErrorCode.CONTRACT_EXISTS: "contract already deployed",
    ErrorCode.LEAF_NOT_FOUND: "leaf not found",
    ErrorCode.EMPTY_TREE: "cannot build a tree from an empty leaf set",
    ErrorCode.INCORRECT_TOKEN_OWNER: "Transfer from incorrect owner",
}


@dataclass(frozen=True)
class SpecError(Exception):
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.name}({self.code:#06x}): {self.message}"

    @property
    def reason(self) -> str:
        """Revert reason string, as a caller matching on reasons sees it."""
        return self.message


# Allow Python's Exception machinery to set __traceback__/__context__/__cause__
# while keeping dataclass fields frozen (Python 3.13 contextlib compat).
_EXCEPTION_ATTRS = frozenset(("__traceback__", "__context__", "__cause__"))
_frozen_setattr = SpecError.__setattr__


def _spec_error_setattr(self: SpecError, name: str, value: object) -> None:
    if name in _EXCEPTION_ATTRS:
        object.__setattr__(self, name, value)
    else:
        _frozen_setattr(self, name, value)


SpecError.__setattr__ = _spec_error_setattr  # type: ignore[method-assign]


def err(code: ErrorCode, message: Optional[str] = None) -> SpecError:
    """Build a SpecError, defaulting the message to the code's revert reason."""
    if message is None:
        message = REVERT_REASONS.get(code, code.name.lower())
    return SpecError(code=code, message=message)
