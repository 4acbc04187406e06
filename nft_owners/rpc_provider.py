import json
from pathlib import Path

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3

from nft_owners.errors import SetupError
from nft_owners.logging import log


# -----------------------------
# ABI loading
# -----------------------------
def load_abi(path: str | Path) -> list:
    """
    Accepts a bare ABI list or a build artifact with an ``abi`` key
    (hardhat / truffle / foundry output).
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SetupError(f"ABI file not found: {path}") from None
    except (OSError, json.JSONDecodeError) as e:
        raise SetupError(f"Failed to load ABI from {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("abi")
    if not isinstance(data, list):
        raise SetupError(f"ABI in {path} is not a list of entries")

    has_owner_of = any(
        entry.get("type", "function") == "function" and entry.get("name") == "ownerOf"
        for entry in data
        if isinstance(entry, dict)
    )
    if not has_owner_of:
        raise SetupError(f"ABI in {path} has no ownerOf function")

    return data


# -----------------------------
# OwnerRpcClient
# one shared AsyncWeb3 + contract, reentrant across fetch tasks
# -----------------------------
class OwnerRpcClient:
    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        abi: list,
        *,
        timeout: float = 10.0,
    ):
        if not AsyncWeb3.is_address(str(contract_address).lower()):
            raise SetupError(f"Invalid contract address: {contract_address}")

        self.rpc_url = rpc_url
        self.contract_address = AsyncWeb3.to_checksum_address(str(contract_address).lower())
        self.w3 = AsyncWeb3(
            AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)},
                # ItemFetcher owns the retry budget; one attempt = one request
                exception_retry_configuration=None,
            )
        )
        self.contract = self.w3.eth.contract(address=self.contract_address, abi=abi)

    @classmethod
    def from_config(cls, cfg) -> "OwnerRpcClient":
        return cls(
            rpc_url=cfg.rpc_url,
            contract_address=cfg.contract_address,
            abi=load_abi(cfg.abi_path),
            timeout=cfg.rpc_call_timeout,
        )

    async def connect(self) -> int:
        """
        Fail fast before any token is scheduled. Returns the chain id.
        """
        try:
            connected = await self.w3.is_connected()
            if connected:
                chain_id = await self.w3.eth.chain_id
        except Exception as e:
            raise SetupError(f"RPC endpoint unreachable: {e}") from e
        if not connected:
            raise SetupError(f"Could not connect to RPC at {self.rpc_url.split('?')[0]}")

        log.info(
            "🔌 rpc_connected",
            extra={"chain_id": chain_id, "contract": self.contract_address},
        )
        return chain_id

    async def fetch_owner(self, token_id: int) -> str:
        owner = await self.contract.functions.ownerOf(token_id).call()
        return AsyncWeb3.to_checksum_address(owner)

    async def close(self):
        provider = self.w3.provider
        disconnect = getattr(provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
