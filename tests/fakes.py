import asyncio
import random
from collections import defaultdict

from web3.exceptions import ContractLogicError

from nft_owners.metrics import MetricsContext

INVALID_ID_REVERT = "execution reverted: ERC721: invalid token ID"


def owner_for(token_id: int) -> str:
    return f"0x{token_id:040x}"


def make_metrics() -> MetricsContext:
    return MetricsContext.for_job("0xtest", "unittest")


class RecordingSleep:
    """
    Stand-in for asyncio.sleep: remembers requested delays, yields once.
    """

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float):
        self.delays.append(delay)
        await asyncio.sleep(0)


class FakeOwnerTransport:
    """
    Deterministic ownerOf transport.

    - owners: token ids not listed otherwise resolve to owner_for(id)
    - absent: ids that revert with the invalid-token signature
    - flaky: id -> number of leading calls that fail with ConnectionError
    - broken: ids that fail with ConnectionError on every call
    - hang: id -> number of leading calls that never return
    - jitter: max seconds of random real delay per call (completion reordering)
    """

    def __init__(
        self,
        *,
        absent=(),
        flaky=None,
        broken=(),
        hang=None,
        jitter: float = 0.0,
        seed: int = 7,
    ):
        self.absent = set(absent)
        self.flaky = dict(flaky or {})
        self.broken = set(broken)
        self.hang = dict(hang or {})
        self.jitter = jitter
        self._rng = random.Random(seed)

        self.calls = defaultdict(int)
        self.events = []
        self.inflight = 0
        self.max_inflight = 0

    async def fetch_owner(self, token_id: int) -> str:
        self.calls[token_id] += 1
        n = self.calls[token_id]
        self.inflight += 1
        self.max_inflight = max(self.max_inflight, self.inflight)
        self.events.append(("start", token_id))
        try:
            if self.jitter:
                await asyncio.sleep(self._rng.uniform(0, self.jitter))
            if n <= self.hang.get(token_id, 0):
                await asyncio.Event().wait()
            if token_id in self.absent:
                raise ContractLogicError(INVALID_ID_REVERT)
            if token_id in self.broken:
                raise ConnectionError(f"rpc down #{n}")
            if n <= self.flaky.get(token_id, 0):
                raise ConnectionError(f"connection reset #{n}")
            return owner_for(token_id)
        finally:
            self.inflight -= 1
            self.events.append(("end", token_id))
