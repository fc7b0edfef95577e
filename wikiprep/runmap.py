"""Bit-history state machines: a neutral base and a run-length map."""

from __future__ import annotations


class State:
    """A state machine that stays in state 0 and predicts one half."""

    def init_probability(self, state: int) -> float:
        return 0.5

    def next(self, state: int, bit: int) -> int:
        return 0


def _build_run_table() -> tuple[int, ...]:
    table = []
    for index in range(512):
        state, bit = divmod(index, 2)
        if bit == 0:
            if state < 127:
                state += 1
            elif state >= 128:
                state = 0
        else:
            if state < 128:
                state = 128
            elif state < 255:
                state += 1
        table.append(state)
    return tuple(table)


class RunMap(State):
    """States 0..127 count runs of zeros, states 128..255 runs of ones."""

    _TABLE = _build_run_table()

    def init_probability(self, state: int) -> float:
        if state < 128:
            return (128.0 - state) / 256
        return state / 256.0

    def next(self, state: int, bit: int) -> int:
        return self._TABLE[state * 2 + bit]