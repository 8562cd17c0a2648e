"""
In-memory stand-ins for the controller connection.

FakeTransport answers each written command through a responder callable
and records what was written and how many exchanges overlapped.
ScriptedController is a responder that answers by command code.
"""

import asyncio
from collections import deque
from typing import Callable, Dict, List, Optional, Set

from clearcore.communication.transport import Transport
from clearcore.core.exceptions import TransportError

STX = b'\x02'
CR = b'\r'


def make_reply(device_type: bytes, index: int, payload: bytes) -> bytes:
    return STX + device_type + str(index).encode('ascii') + payload + CR


def echo_responder(command: bytes) -> bytes:
    """Reply with the command's own prefix and body, minus the terminator"""
    return command[:3] + command[3:-1] + CR


class ScriptedController:
    """Responder that answers by two-letter command code"""

    def __init__(self):
        self.replies: Dict[str, List[bytes]] = {}
        self.failures: Set[str] = set()
        self.calls: List[str] = []

    def script(self, code: str, *payloads: bytes) -> "ScriptedController":
        """Answer code with payloads in order; the last one repeats"""
        self.replies[code] = list(payloads)
        return self

    def fail(self, code: str) -> "ScriptedController":
        self.failures.add(code)
        return self

    def count(self, code: str) -> int:
        return self.calls.count(code)

    def __call__(self, command: bytes) -> bytes:
        prefix, code = command[:3], command[3:5].decode('ascii')
        self.calls.append(code)

        if code in self.failures:
            return prefix + b'?' + command[3:]

        queue = self.replies.get(code)
        if queue:
            payload = queue.pop(0) if len(queue) > 1 else queue[0]
        else:
            payload = command[3:-1]
        return prefix + payload + CR


class FakeTransport(Transport):
    """Transport that answers every write through a responder"""

    def __init__(self, responder: Optional[Callable[[bytes], bytes]] = None,
                 gate: Optional[asyncio.Event] = None):
        self.responder = responder or echo_responder
        self.gate = gate
        self.written: List[bytes] = []
        self.opened = False
        self.closed = False
        self.fail_on_write: Optional[Exception] = None
        self.fail_on_read: Optional[Exception] = None
        self.in_flight = 0
        self.max_in_flight = 0
        self._replies: deque = deque()

    def __repr__(self):
        return "FakeTransport()"

    async def open(self) -> None:
        self.opened = True
        self.closed = False

    async def close(self) -> None:
        self.opened = False
        self.closed = True

    def is_open(self) -> bool:
        return self.opened

    async def write(self, data: bytes) -> None:
        if self.fail_on_write is not None:
            raise self.fail_on_write
        self.written.append(data)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self._replies.append(self.responder(data))

    async def read_frame(self) -> bytes:
        if self.gate is not None:
            await self.gate.wait()
        # Give every other task a chance to run while a reply is pending
        await asyncio.sleep(0)
        if self.fail_on_read is not None:
            raise self.fail_on_read
        self.in_flight -= 1
        return self._replies.popleft()


def read_failure() -> TransportError:
    return TransportError("connection reset by peer", module="communication")


async def settle(rounds: int = 10) -> None:
    """Let every ready task run for a few scheduler rounds"""
    for _ in range(rounds):
        await asyncio.sleep(0)
