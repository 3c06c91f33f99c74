import asyncio
import time

import pytest

from common.test_utils import run_now
from common.utils.commands import Batch, Command, after, batch, immediate, in_thread
from common.utils.timer_logger import TimerLogger


def _message():
    return "tick"


def test_after_keeps_delay_and_name():
    command = after(1.5, _message)
    assert command.delay == 1.5
    assert command.name == "_message"
    assert not command.is_immediate


def test_after_rejects_negative_delay():
    with pytest.raises(ValueError):
        after(-1, _message)


def test_immediate_has_no_delay():
    command = immediate(_message, name="now")
    assert command.is_immediate
    assert command.name == "now"
    assert asyncio.run(command.run()) == "tick"


def test_after_waits_before_producing():
    command = after(0.05, _message)
    started = time.monotonic()
    assert asyncio.run(command.run()) == "tick"
    assert time.monotonic() - started >= 0.04


def test_run_awaits_coroutine_producers():
    async def produce():
        return "async tick"

    assert asyncio.run(immediate(produce).run()) == "async tick"


def test_in_thread_runs_blocking_call():
    def blocking(a, b):
        time.sleep(0.01)
        return a + b

    command = immediate(in_thread(blocking, 2, 3))
    assert command.name == "blocking"
    assert asyncio.run(command.run()) == 5


def test_batch_drops_none_and_flattens():
    first = immediate(_message, name="first")
    second = after(1, _message, name="second")
    third = after(2, _message, name="third")

    combined = batch(None, first, batch(second, third), None)

    assert isinstance(combined, Batch)
    assert [command.name for command in combined] == ["first", "second", "third"]
    assert len(combined) == 3


def test_batch_of_one_is_the_command():
    only = immediate(_message)
    assert batch(None, only) is only


def test_empty_batch_is_none():
    assert batch() is None
    assert batch(None, None) is None


def test_run_now_skips_delay():
    command = after(3600, _message)
    assert isinstance(command, Command)
    assert run_now(command) == "tick"


def test_timer_logger_rejects_unknown_names():
    with pytest.raises(ValueError):
        TimerLogger("not_a_timer")


def test_timer_logger_measures_duration():
    async def timed():
        async with TimerLogger("collect_cpu", metadata={"generation": 1}) as timer:
            await asyncio.sleep(0.01)
        return timer

    timer = asyncio.run(timed())
    assert timer.duration is not None
    assert timer.duration >= 0.005
