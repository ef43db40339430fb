from dataclasses import dataclass
from typing import Any

from .ids import RequestId


@dataclass
class ProbeRequest:
    rid: RequestId
    payload: Any


@dataclass
class ProbeResponse:
    rid: RequestId
    sender: str
    payload: Any

    @classmethod
    def from_request(cls, request: ProbeRequest, sender: str, payload: Any):
        return cls(
            rid=request.rid,
            sender=sender,
            payload=payload,
        )
