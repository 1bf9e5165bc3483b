import anyio
import pytest
from anyio.streams.memory import MemoryObjectReceiveStream

from reposync.enums import CommandEventType
from reposync.tracking import CommandEvent, CommandTracker, RunningCommands

pytestmark = pytest.mark.anyio


async def _drain(
    tracker: CommandTracker, events: MemoryObjectReceiveStream[CommandEvent]
) -> list[CommandEvent]:
    tracker.close()
    received: list[CommandEvent] = []
    async with events:
        async for event in events:
            received.append(event)
    return received


class TestTrack:
    async def test_emits_started_then_finished(self, tracker: CommandTracker) -> None:
        events = tracker.subscribe()

        async with tracker.track("git status") as command:
            assert tracker.running == (command,)

        received = await _drain(tracker, events)
        assert [e.event_type for e in received] == [
            CommandEventType.STARTED,
            CommandEventType.FINISHED,
        ]
        assert {e.id for e in received} == {command.id}
        assert received[1].succeeded is True
        assert received[1].duration_ms is not None
        assert received[1].duration_ms >= 0
        assert tracker.running == ()

    async def test_failure_still_finishes(self, tracker: CommandTracker) -> None:
        events = tracker.subscribe()

        with pytest.raises(RuntimeError, match="boom"):
            async with tracker.track("git fetch"):
                raise RuntimeError("boom")

        received = await _drain(tracker, events)
        assert received[-1].event_type == CommandEventType.FINISHED
        assert received[-1].succeeded is False
        assert tracker.running == ()

    async def test_ids_are_unique_across_trackers(self) -> None:
        first = CommandTracker()
        second = CommandTracker()

        async with first.track("a") as a, second.track("b") as b:
            assert a.id != b.id

    async def test_ids_increase(self, tracker: CommandTracker) -> None:
        async with tracker.track("a") as a:
            pass
        async with tracker.track("b") as b:
            pass

        assert b.id > a.id

    async def test_concurrent_commands_are_all_running(self, tracker: CommandTracker) -> None:
        seen: list[int] = []
        release = anyio.Event()

        async def run(name: str) -> None:
            async with tracker.track(name):
                seen.append(len(tracker.running))
                await release.wait()

        async with anyio.create_task_group() as tg:
            for name in ("a", "b", "c"):
                tg.start_soon(run, name)
            await anyio.wait_all_tasks_blocked()
            assert len(tracker.running) == 3
            release.set()

        assert tracker.running == ()


class TestSubscribers:
    async def test_every_subscriber_receives_every_event(self, tracker: CommandTracker) -> None:
        first = tracker.subscribe()
        second = tracker.subscribe()

        async with tracker.track("git status"):
            pass

        tracker.close()
        async with first, second:
            assert len([e async for e in first]) == 2
            assert len([e async for e in second]) == 2

    async def test_late_subscriber_sees_only_new_events(self, tracker: CommandTracker) -> None:
        async with tracker.track("before"):
            pass
        events = tracker.subscribe()
        async with tracker.track("after"):
            pass

        received = await _drain(tracker, events)
        assert {e.description for e in received} == {"after"}

    async def test_closed_subscriber_is_dropped(self, tracker: CommandTracker) -> None:
        events = tracker.subscribe()
        events.close()

        async with tracker.track("git status"):
            pass

        assert tracker.subscriber_count == 0

    async def test_full_buffer_drops_events_for_that_subscriber_only(
        self, tracker: CommandTracker
    ) -> None:
        slow = tracker.subscribe(max_buffer_size=1)
        fast = tracker.subscribe()

        async with tracker.track("git status"):
            pass

        assert tracker.subscriber_count == 2
        assert len(await _drain(tracker, fast)) == 2
        async with slow:
            assert len([e async for e in slow]) == 1


class TestRunningCommands:
    def test_apply_adds_and_removes(self) -> None:
        running = RunningCommands()
        running.apply(CommandEvent(CommandEventType.STARTED, 1, "git status", 10))
        running.apply(CommandEvent(CommandEventType.STARTED, 2, "git branch", 11))

        running.apply(CommandEvent(CommandEventType.FINISHED, 1, "git status", 20, 10.0, True))

        assert [c.id for c in running.commands] == [2]
        assert len(running) == 1

    def test_unknown_finished_event_is_ignored(self) -> None:
        running = RunningCommands()

        running.apply(CommandEvent(CommandEventType.FINISHED, 9, "git log", 20, 1.0, True))

        assert len(running) == 0

    async def test_consume_mirrors_tracker(self, tracker: CommandTracker) -> None:
        running = RunningCommands()
        events = tracker.subscribe()
        observed: list[int] = []

        async with anyio.create_task_group() as tg:
            tg.start_soon(running.consume, events)
            async with tracker.track("git status"):
                await anyio.wait_all_tasks_blocked()
                observed.append(len(running))
            await anyio.wait_all_tasks_blocked()
            observed.append(len(running))
            tracker.close()

        assert observed == [1, 0]
