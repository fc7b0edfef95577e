import pytest

from wikiprep.runmap import RunMap, State


def test_base_state_defaults():
    state = State()
    assert state.init_probability(17) == 0.5
    assert state.next(17, 1) == 0


@pytest.mark.parametrize(
    "state,bit,expected",
    [
        (0, 0, 1),
        (126, 0, 127),
        (127, 0, 127),
        (128, 0, 0),
        (200, 0, 0),
        (0, 1, 128),
        (127, 1, 128),
        (128, 1, 129),
        (254, 1, 255),
        (255, 1, 255),
    ],
)
def test_run_map_transitions(state, bit, expected):
    assert RunMap().next(state, bit) == expected


def test_run_map_init_probability():
    run_map = RunMap()
    assert run_map.init_probability(0) == 0.5
    assert run_map.init_probability(128) == 0.5
    assert run_map.init_probability(255) == 255 / 256.0


def test_run_map_stays_in_range():
    run_map = RunMap()
    for state in range(256):
        assert 0 < run_map.init_probability(state) <= 1
        for bit in (0, 1):
            assert 0 <= run_map.next(state, bit) <= 255