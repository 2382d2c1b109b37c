from __future__ import annotations

from queue import Queue
from typing import Protocol


class ThreadedProvider(Protocol):
    def start(self, out_queue: Queue) -> None: ...
    def stop(self) -> None: ...


class PollingProvider(Protocol):
    def poll(self, px, out_queue: Queue) -> None: ...


class HoldTracker:
    """押下状態の変化（立ち上がり・立ち下がり）だけを検出する"""

    def __init__(self) -> None:
        self.held = False

    def update(self, held: bool) -> bool:
        # 状態が変わったら True
        held = bool(held)
        changed = held != self.held
        self.held = held
        return changed
