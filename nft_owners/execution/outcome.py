from dataclasses import dataclass
from typing import ClassVar, Union

from nft_owners.control import FetchStatus


# terminal result of one token, the unit handed to the result sink
@dataclass(frozen=True)
class Owned:
    token_id: int
    owner: str
    status: ClassVar[FetchStatus] = FetchStatus.SUCCEEDED


@dataclass(frozen=True)
class Absent:
    token_id: int
    status: ClassVar[FetchStatus] = FetchStatus.ABSENT


@dataclass(frozen=True)
class Failed:
    token_id: int
    reason: str
    status: ClassVar[FetchStatus] = FetchStatus.FAILED


Outcome = Union[Owned, Absent, Failed]
