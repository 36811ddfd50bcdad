"""
src/orchestrator/loop.py

Orchestration loop: call the gateway, execute requested tools, feed results
back, repeat until the model answers or a guard stops the run.

Per iteration:
  - FinalAnswer           -> append assistant turn, stop (normal)
  - ToolCallsRequested([]) -> stop (empty_tool_call_anomaly), transcript untouched
  - ToolCallsRequested(..) -> append one assistant turn carrying every request,
                              then execute each request in order, appending a
                              tool-result turn and a ledger entry per request
  - GatewayError          -> stop (error), transcript untouched for that turn
"""


import logging
import threading
import time
from typing import Callable, Optional

from config import AgentSettings
from conversation.turns import AssistantTurn, ToolResultTurn, Transcript, UserTurn
from orchestrator.gateway import CompletionGateway, FinalAnswer, GatewayError, GenerationParams
from orchestrator.ledger import CallLedger
from orchestrator.models import LoopState, RunResult, Step, StopReason, ToolCallOutcome
from tools.executor import ToolExecutor
from tools.registry import ToolRegistry


logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Cooperative cancellation with an optional deadline.

    The loop checks it before each gateway call and as soon as a call returns;
    a running tool is never interrupted.
    """

    def __init__(self, deadline_seconds: Optional[float] = None, clock: Optional[Callable[[], float]] = None):

        self._event = threading.Event()
        self._clock = clock or time.monotonic
        self._deadline = self._clock() + deadline_seconds if deadline_seconds is not None else None

    def cancel(self) -> None:

        self._event.set()

    @property
    def cancelled(self) -> bool:

        if self._event.is_set():
            return True
        if self._deadline is not None and self._clock() >= self._deadline:
            self._event.set()
            return True

        return False


class Orchestrator:
    """
    One agent: a registry, a gateway and the settings to drive them.

    `run()` keeps its transcript, ledger and stop state in locals, so runs on
    one Orchestrator never share state, even when they overlap. `state` is
    RUNNING while at least one run is in progress.

    Usage:
        agent = Orchestrator(OpenAIGateway(gw), default_registry(), params=GenerationParams.from_settings(gw, settings))
        result = agent.run("Make the sum of 40 and 2")
        result.answer, result.ledger
    """

    def __init__(
            self,
            gateway: CompletionGateway,
            registry: ToolRegistry,
            *,
            params: GenerationParams,
            settings: Optional[AgentSettings] = None,
            clock: Callable[[], float] = time.perf_counter,
    ):

        self._gateway = gateway
        self._registry = registry
        self._executor = ToolExecutor(registry)
        self._params = params
        self._settings = settings or AgentSettings()
        self._clock = clock
        self._active_runs = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> LoopState:

        with self._lock:
            return LoopState.RUNNING if self._active_runs else LoopState.STOPPED

    # -------- Single iteration -------------------------------------------------

    def step(self, transcript: Transcript, *, cancel: Optional[CancellationToken] = None) -> Step:
        """
        Run one gateway call and whatever it asks for.

        Raises:
            GatewayError: the gateway failed; `transcript` is left as it was.
        """

        tools = self._registry.snapshot()
        response = self._gateway.complete(transcript, tools, self._params)

        if cancel is not None and cancel.cancelled:
            logger.info("Cancelled while waiting for the gateway; discarding response")
            return Step(transcript=transcript, stop=StopReason.CANCELLED)

        if isinstance(response, FinalAnswer):
            logger.info("Final answer received")
            return Step(
                transcript=transcript.append(AssistantTurn(text=response.text)),
                stop=StopReason.NORMAL,
                answer=response.text,
            )

        if not response.tool_calls:
            logger.warning("Gateway signalled tool calls but sent none")
            return Step(transcript=transcript, stop=StopReason.EMPTY_TOOL_CALLS)

        # The request must precede its results in the transcript.
        transcript = transcript.append(AssistantTurn(text=response.text, tool_calls=response.tool_calls))
        outcomes = []

        for call in response.tool_calls:
            logger.info("Executing %s with args %s", call.name, call.arguments)
            started = self._clock()
            result = self._executor.execute(call.name, call.arguments)
            duration = self._clock() - started

            payload = result.payload()
            transcript = transcript.append(ToolResultTurn(tool_call_id=call.id, payload=payload))
            outcomes.append(ToolCallOutcome(
                id=call.id,
                name=call.name,
                arguments=call.arguments,
                result=payload,
                ok=result.ok,
                duration=duration,
            ))
            logger.info("Result for %s (%s): %s", call.name, call.id, result.content())

        return Step(transcript=transcript, outcomes=tuple(outcomes))

    # -------- Full run ---------------------------------------------------------

    def run(
            self,
            user_text: str,
            *,
            transcript: Optional[Transcript] = None,
            cancel: Optional[CancellationToken] = None,
    ) -> RunResult:
        """
        Drive the loop to a stop.

        Args:
            user_text: The user's message, appended as the opening turn.
            transcript: Optional earlier history to continue from.
            cancel: Token to stop the run early; when omitted, one is created
                from `settings.deadline_seconds` (if set).

        Returns:
            RunResult with the stop reason, final transcript and ledger. Gateway
            failures are reported in `error`, never raised.
        """

        if cancel is None and self._settings.deadline_seconds is not None:
            cancel = CancellationToken(self._settings.deadline_seconds)

        if transcript is None:
            transcript = Transcript()
        transcript = transcript.append(UserTurn(text=user_text.strip()))
        ledger = CallLedger()
        iterations = 0
        answer: Optional[str] = None
        error: Optional[str] = None
        stop: Optional[StopReason] = None

        with self._lock:
            self._active_runs += 1

        try:
            while stop is None:
                if cancel is not None and cancel.cancelled:
                    stop = StopReason.CANCELLED
                    break
                if iterations >= self._settings.max_iterations:
                    logger.warning("Stopping after %d iterations without a final answer", iterations)
                    stop = StopReason.ITERATION_LIMIT
                    break

                iterations += 1
                logger.info("⏳ Completion request #%d", iterations)

                try:
                    step = self.step(transcript, cancel=cancel)
                except GatewayError as exc:
                    logger.error("🔴 Gateway error: %s", exc)
                    error = str(exc)
                    stop = StopReason.ERROR
                    break

                transcript = step.transcript
                for outcome in step.outcomes:
                    ledger.record(outcome)
                stop = step.stop
                answer = step.answer
        finally:
            with self._lock:
                self._active_runs -= 1

        logger.info("🟥 Run stopped: %s (%d tool calls)", stop.value, len(ledger))

        return RunResult(
            stop_reason=stop,
            transcript=transcript,
            ledger=ledger.close(),
            answer=answer,
            error=error,
            iterations=iterations,
        )
