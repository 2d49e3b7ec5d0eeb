"""
Tests for the rollback sweep.

Tests cover:
- Reverse-of-registration ordering
- Compensation failures isolated and logged, never raised
- Task context restored while a compensation runs
- Direct use of ExecutionEngine.rollback on a frame list
"""

import pytest
from structlog.testing import capture_logs

from deckhand.core.errors import RollbackFailure
from deckhand.core.logging import get_logger
from deckhand.execution import CallFrame, ExecutionEngine


class DeployFailed(Exception):
    pass


def _fail(message):
    def action():
        raise RuntimeError(message)

    return action


class TestSweepOrder:
    """Compensations run newest registration first."""

    def test_later_registration_compensated_first(self, engine, root):
        undone = []
        root.define_task("x", lambda e: e.on_rollback(lambda: undone.append("Rx")))

        def y(e):
            e.on_rollback(lambda: undone.append("Ry"))
            raise DeployFailed("y failed")

        root.define_task("y", y)

        def body(e):
            e.execute("x", root)
            e.execute("y", root)

        root.define_task("deploy", lambda e: e.transaction(lambda: body(e)))
        with pytest.raises(DeployFailed):
            engine.execute("deploy", root)
        assert undone == ["Ry", "Rx"]

    def test_many_registrations_fully_reversed(self, engine, root):
        undone = []
        names = [f"step{i}" for i in range(6)]
        for name in names:
            root.define_task(name, lambda e, n=name: e.on_rollback(lambda: undone.append(n)))

        def body(e):
            for name in names:
                e.execute(name, root)
            raise DeployFailed("last")

        root.define_task("deploy", lambda e: e.transaction(lambda: body(e)))
        with pytest.raises(DeployFailed):
            engine.execute("deploy", root)
        assert undone == list(reversed(names))

    def test_rolling_back_logged_per_task_in_order(self, engine, root, recorder):
        ns = root.namespace("app")
        ns.define_task("upload", lambda e: e.on_rollback(lambda: None))
        ns.define_task("symlink", lambda e: e.on_rollback(lambda: None))

        def body(e):
            e.execute("upload", ns)
            e.execute("symlink", ns)
            raise DeployFailed("restart failed")

        root.define_task("deploy", lambda e: e.transaction(lambda: body(e)))
        with pytest.raises(DeployFailed):
            engine.execute("deploy", root)

        rolling = [(lvl, fields) for lvl, ev, fields in recorder.records if ev == "rolling back"]
        assert rolling == [
            ("warning", {"task": "app:symlink"}),
            ("warning", {"task": "app:upload"}),
        ]


class TestSweepIsolation:
    """One failing compensation never stops the rest."""

    def test_failing_compensation_does_not_block_earlier_ones(self, engine, root, recorder):
        undone = []
        root.define_task("first", lambda e: e.on_rollback(lambda: undone.append("first")))
        root.define_task("second", lambda e: e.on_rollback(_fail("cannot undo second")))
        root.define_task("third", lambda e: e.on_rollback(lambda: undone.append("third")))

        def body(e):
            for name in ("first", "second", "third"):
                e.execute(name, root)
            raise DeployFailed("trigger")

        root.define_task("deploy", lambda e: e.transaction(lambda: body(e)))
        with pytest.raises(DeployFailed, match="trigger"):
            engine.execute("deploy", root)

        assert undone == ["third", "first"]
        assert recorder.find("rollback.failed") == [
            {
                "task": "second",
                "error_type": "RuntimeError",
                "error_message": "cannot undo second",
            }
        ]
        assert engine.call_frames == ()

    def test_all_compensations_failing_still_reraises_trigger(self, engine, root):
        root.define_task("a", lambda e: e.on_rollback(_fail("a")))
        root.define_task("b", lambda e: e.on_rollback(_fail("b")))

        def body(e):
            e.execute("a", root)
            e.execute("b", root)
            raise DeployFailed("original")

        root.define_task("deploy", lambda e: e.transaction(lambda: body(e)))
        with pytest.raises(DeployFailed, match="original"):
            engine.execute("deploy", root)
        assert not engine.in_transaction


class TestSweepContext:
    """Compensations see the task that registered them."""

    def test_current_task_during_compensation(self, engine, root):
        seen = []
        migrate = root.define_task(
            "migrate", lambda e: e.on_rollback(lambda: seen.append(engine.current_task))
        )

        def body(e):
            e.execute("migrate", root)
            raise DeployFailed("x")

        root.define_task("deploy", lambda e: e.transaction(lambda: body(e)))
        with pytest.raises(DeployFailed):
            engine.execute("deploy", root)
        assert seen == [migrate]

    def test_compensation_runs_above_the_transaction_owner(self, engine, root):
        stacks = []

        def migrate(e):
            e.on_rollback(lambda: stacks.append([f.task.name for f in engine.call_frames]))

        def body(e):
            e.execute("migrate", root)
            raise DeployFailed("x")

        root.define_task("migrate", migrate)
        root.define_task("deploy", lambda e: e.transaction(lambda: body(e)))
        with pytest.raises(DeployFailed):
            engine.execute("deploy", root)
        assert stacks == [["deploy", "migrate"]]

    def test_compensation_may_execute_tasks(self, engine, root):
        ran = []
        root.define_task("restore_backup", lambda e: ran.append("restore"))
        root.define_task(
            "migrate", lambda e: e.on_rollback(lambda: e.execute("restore_backup", root))
        )

        def body(e):
            e.execute("migrate", root)
            raise DeployFailed("x")

        root.define_task("deploy", lambda e: e.transaction(lambda: body(e)))
        with pytest.raises(DeployFailed):
            engine.execute("deploy", root)
        assert ran == ["restore"]


class TestRollbackDirect:
    """ExecutionEngine.rollback used on its own."""

    def test_returns_failures_in_sweep_order(self, engine, root):
        a = root.define_task("a", lambda e: None)
        b = root.define_task("b", lambda e: None)
        frames = [CallFrame(a, _fail("undo a")), CallFrame(b, _fail("undo b"))]

        failures = engine.rollback(frames)

        assert [f.task for f in failures] == ["b", "a"]
        assert all(isinstance(f, RollbackFailure) for f in failures)
        assert failures[0].error_type == "RuntimeError"
        assert failures[0].to_dict()["error_message"] == "undo b"
        assert engine.call_frames == ()

    def test_frames_without_action_are_skipped(self, engine, root, recorder):
        a = root.define_task("a", lambda e: None)
        assert engine.rollback([CallFrame(a)]) == []
        assert recorder.records == []

    def test_empty_registry_is_a_no_op(self, engine):
        assert engine.rollback([]) == []


class TestStructlogIntegration:
    """The default structlog logger receives the sweep events."""

    def test_capture_rollback_events(self, root):
        engine = ExecutionEngine(logger=get_logger("deckhand.test"))
        root.define_task("migrate", lambda e: e.on_rollback(_fail("no backup")))

        def body(e):
            e.execute("migrate", root)
            raise DeployFailed("x")

        root.define_task("deploy", lambda e: e.transaction(lambda: body(e)))

        with capture_logs() as logs:
            with pytest.raises(DeployFailed):
                engine.execute("deploy", root)

        events = [(entry["log_level"], entry["event"]) for entry in logs]
        assert ("info", "transaction.start") in events
        assert ("warning", "rolling back") in events
        assert ("error", "rollback.failed") in events
        failed = next(entry for entry in logs if entry["event"] == "rollback.failed")
        assert failed["task"] == "migrate"
        assert failed["error_message"] == "no backup"
