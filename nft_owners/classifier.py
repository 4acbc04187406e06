import asyncio
from enum import Enum
from typing import Iterable

import aiohttp
from web3.exceptions import ContractLogicError, TimeExhausted, Web3RPCError

from nft_owners.errors import RpcCallTimeout, RpcRateLimitError

DEFAULT_ABSENCE_SIGNATURES = (
    "invalid token ID",             # OpenZeppelin 4.x require message
    "nonexistent token",            # OpenZeppelin 3.x / many forks
    "ERC721NonexistentToken",       # OpenZeppelin 5.x custom error name
    "0x7e273289",                   # ERC721NonexistentToken(uint256) selector
)

# ethers reports reverts as CALL_EXCEPTION, geth style nodes use JSON-RPC code 3
DEFAULT_REVERT_CODES = ("CALL_EXCEPTION", 3)

# public endpoints signal throttling with these JSON-RPC codes
RATE_LIMIT_CODES = (-32005, -32016, -32000, 10007)


class CallClass(str, Enum):
    PERMANENT_ABSENCE = "PERMANENT_ABSENCE"
    TRANSIENT = "TRANSIENT"
    UNCLASSIFIED = "UNCLASSIFIED"


class CallClassifier:
    def __init__(
        self,
        absence_signatures: Iterable[str] = DEFAULT_ABSENCE_SIGNATURES,
        revert_codes: Iterable = DEFAULT_REVERT_CODES,
    ):
        self.absence_signatures = tuple(
            s.strip().lower() for s in absence_signatures if s and s.strip()
        )
        self.revert_codes = tuple(revert_codes)

    def classify(self, error: BaseException) -> CallClass:
        if self.is_revert(error):
            text = self.describe(error).lower()
            if any(sig in text for sig in self.absence_signatures):
                return CallClass.PERMANENT_ABSENCE
            return CallClass.TRANSIENT

        if isinstance(error, (
            asyncio.TimeoutError,
            TimeoutError,
            TimeExhausted,
            ConnectionError,
            aiohttp.ClientError,
            RpcCallTimeout,
            RpcRateLimitError,
        )):
            return CallClass.TRANSIENT

        if self._rpc_code(error) in RATE_LIMIT_CODES:
            return CallClass.TRANSIENT

        return CallClass.UNCLASSIFIED

    def is_revert(self, error: BaseException) -> bool:
        if isinstance(error, ContractLogicError):
            return True
        code = getattr(error, "code", None)
        return code is not None and code in self.revert_codes

    @staticmethod
    def describe(error: BaseException) -> str:
        """
        Human readable message for diagnostics, including revert reason / data
        when the transport attaches them.
        """
        message = getattr(error, "message", None) or str(error) or type(error).__name__
        parts = [str(message)]
        for attr in ("reason", "data"):
            value = getattr(error, attr, None)
            if value and str(value) not in parts[0]:
                parts.append(str(value))
        return " | ".join(parts)

    @staticmethod
    def _rpc_code(error: BaseException):
        if isinstance(error, Web3RPCError) and isinstance(error.rpc_response, dict):
            return (error.rpc_response.get("error") or {}).get("code")
        if error.args and isinstance(error.args[0], dict):
            return error.args[0].get("code")
        return None
