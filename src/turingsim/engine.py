import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Self, TypeAlias

from turingsim.turing_machine import ACCEPT_STATE, START_STATE, Configuration, Tape, TransitionTable
from turingsim.validation import validate

logger = logging.getLogger(__name__)

PAUSE_KEY = "h"

PauseSignal: TypeAlias = Callable[[], str | None]
InputSource: TypeAlias = Callable[[], str]


class Status(StrEnum):
    RUNNING = "running"
    PAUSED = "paused"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def no_pause() -> None:
    return None


@dataclass
class Engine:
    """Steps a machine over its tape until it accepts or gets stuck.

    Iterating the engine yields the configuration at the start of every cycle.
    The symbol under the head is always the one at `tape.head + 1`. `poll` is
    checked once per cycle and must never block; when it returns `pause_key`
    the engine asks `reseed` for a new input and restarts on a fresh tape.
    """

    table: TransitionTable
    tape: Tape = field(default_factory=Tape)
    poll: PauseSignal = no_pause
    reseed: InputSource | None = None
    pause_key: str = PAUSE_KEY
    max_steps: int | None = None
    state: str = field(default=START_STATE, init=False)
    status: Status = field(default=Status.RUNNING, init=False)
    steps: int = field(default=0, init=False)

    @classmethod
    def load(cls, description: str, input: str = "", *, strict: bool = False, **kwargs: Any) -> Self:
        return cls(TransitionTable.from_spec(description, strict=strict), Tape(validate(input)), **kwargs)

    def configuration(self) -> Configuration:
        return self.tape.configuration(self.state)

    def __iter__(self) -> Iterator[Configuration]:
        while self.status is Status.RUNNING:
            yield self.configuration()
            self.step()

    def pause_requested(self) -> bool:
        key = self.poll()
        if key is None:
            return False
        if key != self.pause_key:
            logger.debug("Ignoring key %r", key)
            return False
        if self.reseed is None:
            logger.debug("Pause requested but no input source is available")
            return False
        return True

    def step(self) -> Status:
        if self.status is not Status.RUNNING:
            return self.status
        if self.pause_requested():
            self.status = Status.PAUSED
            self.restart(self.reseed())
            return self.status

        scanned = self.tape.head + 1
        self.tape.extend_to(scanned)
        action = self.table.lookup(self.state, self.tape.read(scanned))
        if self.state == ACCEPT_STATE:
            self.status = Status.ACCEPTED
        elif action is None:
            self.status = Status.REJECTED
        else:
            if self.max_steps is not None and self.steps >= self.max_steps:
                raise TimeoutError(self.steps)
            self.state, symbol, direction = action
            self.tape.write(scanned, symbol)
            self.tape.head = self.tape.move_head(direction, self.tape.head)
            self.steps += 1
        return self.status

    def restart(self, input: str) -> None:
        self.tape.initialize(validate(input))
        self.state = START_STATE
        self.status = Status.RUNNING
        self.steps = 0
        logger.debug("Restarted with tape %s", self.tape)

    def run(self, trace: Callable[[Configuration], object] = lambda config: None) -> Status:
        for config in self:
            trace(config)
        return self.status
