from unittest.mock import Mock

from comandas_shared.api_client import ApiError
from comandas_shared.services.order_saga import Saga, SagaStep


class TestSaga:

    def test_all_steps_succeed(self):
        saga = Saga(
            "ok",
            [SagaStep("uno", lambda: 1), SagaStep("dos", lambda: 2)],
        )

        result = saga.run()

        assert result.ok
        assert result.completed == ["uno", "dos"]
        assert result.results == {"uno": 1, "dos": 2}

    def test_failure_compensates_completed_steps_in_reverse(self):
        calls = []
        saga = Saga(
            "revert",
            [
                SagaStep("a", lambda: calls.append("a"), lambda: calls.append("undo a")),
                SagaStep("b", lambda: calls.append("b"), lambda: calls.append("undo b")),
                SagaStep("c", Mock(side_effect=ApiError("boom", 500))),
            ],
        )

        result = saga.run()

        assert not result.ok
        assert result.failed_step == "c"
        assert result.error.status == 500
        assert calls == ["a", "b", "undo b", "undo a"]
        assert result.compensated == ["b", "a"]
        assert not result.partial

    def test_step_without_compensation_leaves_partial_result(self):
        saga = Saga(
            "partial",
            [
                SagaStep("assign", lambda: None),
                SagaStep("status", Mock(side_effect=ApiError("boom", 502))),
            ],
        )

        result = saga.run()

        assert result.failed_step == "status"
        assert result.compensated == []
        assert result.partial

    def test_failed_compensation_is_recorded(self):
        saga = Saga(
            "broken revert",
            [
                SagaStep("occupy", lambda: None, Mock(side_effect=ApiError("down", 0))),
                SagaStep("create", Mock(side_effect=ApiError("bad", 400))),
            ],
        )

        result = saga.run()

        assert result.compensation_failures == ["occupy"]
        assert result.partial

    def test_later_steps_do_not_run_after_failure(self):
        later = Mock()
        saga = Saga(
            "stop",
            [
                SagaStep("first", Mock(side_effect=ApiError("bad", 400))),
                SagaStep("second", later),
            ],
        )

        saga.run()

        later.assert_not_called()
