"""
Tests for the poll-retry controller
"""

import threading

import pytest

from cws_client.exceptions import RemoteOperationError
from cws_client.models.responses import CwsResponse
from cws_client.services.poll_retry import PollRetryController, PollState, is_processing, poll

PROCESSING = CwsResponse(success=False, error_code=202, error_details="Certificate is being processed")
DONE = CwsResponse(success=True)
DENIED = CwsResponse(success=False, error_code=403, error_details="Access denied")


class ScriptedOperation:
    """Callable returning scripted responses, the last one repeats"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class TestIsProcessing:

    @pytest.mark.parametrize("code", [200, 202, 250, 299])
    def test_processing_codes(self, code):
        assert is_processing(code)

    @pytest.mark.parametrize("code", [None, 0, 199, 300, 403, 500])
    def test_other_codes(self, code):
        assert not is_processing(code)


class TestPollRetryController:
    """Test suite for the poll-retry state machine"""

    def test_immediate_success(self):
        """Test a successful first attempt never waits"""
        operation = ScriptedOperation(DONE)
        controller = PollRetryController(operation, max_attempts=5, interval=0)

        assert controller.run() is DONE
        assert operation.calls == 1
        assert controller.waits == 0
        assert controller.state is PollState.SUCCEEDED

    @pytest.mark.parametrize("k", [1, 3, 4])
    def test_processing_then_success(self, k):
        """Test k processing responses lead to k+1 calls and k waits"""
        operation = ScriptedOperation(*([PROCESSING] * k + [DONE]))
        controller = PollRetryController(operation, max_attempts=5, interval=0)

        assert controller.run() is DONE
        assert operation.calls == k + 1
        assert controller.waits == k

    def test_always_processing(self):
        """Test an operation that never finishes gets exactly max_attempts calls"""
        operation = ScriptedOperation(PROCESSING)
        controller = PollRetryController(operation, max_attempts=4, interval=0)

        with pytest.raises(RemoteOperationError, match="Certificate is being processed"):
            controller.run()
        assert operation.calls == 4
        assert controller.waits == 3
        assert controller.state is PollState.FAILED

    def test_non_processing_error_is_terminal(self):
        """Test errors outside [200, 300) fail after a single call"""
        operation = ScriptedOperation(DENIED)
        controller = PollRetryController(operation, max_attempts=5, interval=0)

        with pytest.raises(RemoteOperationError, match="Access denied"):
            controller.run()
        assert operation.calls == 1
        assert controller.waits == 0

    def test_error_message_without_details(self):
        res = CwsResponse(success=False, error_code=500)
        controller = PollRetryController(ScriptedOperation(res), max_attempts=1, interval=0)

        with pytest.raises(RemoteOperationError, match="code: 500"):
            controller.run()

    def test_operation_exception_propagates(self):
        def operation():
            raise RemoteOperationError("Null response from Certificate Web service.")

        with pytest.raises(RemoteOperationError, match="Null response"):
            PollRetryController(operation, max_attempts=3, interval=0).run()

    def test_external_scheduler(self):
        """Test stepping the controller by hand and honouring next_delay"""
        operation = ScriptedOperation(PROCESSING, DONE)
        controller = PollRetryController(operation, max_attempts=3, interval=7.5)

        assert controller.next_delay == 0.0
        assert controller.step() is PollState.PENDING
        assert controller.next_delay == 7.5
        assert controller.step() is PollState.SUCCEEDED
        assert controller.next_delay is None
        assert controller.result() is DONE

    def test_step_after_finish(self):
        controller = PollRetryController(ScriptedOperation(DONE), max_attempts=1, interval=0)
        controller.step()

        with pytest.raises(RuntimeError):
            controller.step()

    def test_result_while_pending(self):
        controller = PollRetryController(ScriptedOperation(DONE), max_attempts=1, interval=0)
        with pytest.raises(RuntimeError):
            controller.result()

    def test_wakeup_proceeds_immediately(self):
        """Test wakeup() cuts a long wait short instead of cancelling"""
        operation = ScriptedOperation(PROCESSING, DONE)
        controller = PollRetryController(operation, max_attempts=3, interval=60)
        result = {}

        def run():
            result['res'] = controller.run()

        worker = threading.Thread(target=run)
        worker.start()
        while controller.attempts < 1:
            worker.join(0.01)
        controller.wakeup()
        worker.join(5)

        assert not worker.is_alive()
        assert result['res'] is DONE
        assert operation.calls == 2

    @pytest.mark.parametrize("max_attempts, interval", [(0, 1), (3, -1)])
    def test_invalid_parameters(self, max_attempts, interval):
        with pytest.raises(ValueError):
            PollRetryController(ScriptedOperation(DONE), max_attempts=max_attempts, interval=interval)

    def test_poll_helper(self):
        operation = ScriptedOperation(PROCESSING, PROCESSING, DONE)
        assert poll(operation, max_attempts=3, interval=0) is DONE
        assert operation.calls == 3
