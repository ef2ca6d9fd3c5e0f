# Role: Orchestrator for one planning request. It glues together:
# transcript normalization, per-user memory, the slot gate, the bounded engine/tool loop and plan finalization.
# The entry point never raises: every path ends in a well-formed AgentResponse.

from __future__ import annotations

import json
import logging
import secrets
import time
from typing import Any, Dict, List, Optional, Union

import trip_planner.config as config
from trip_planner.core.decision_logic import DecisionLogic
from trip_planner.core.fallback_handler import FallbackHandler
from trip_planner.core.handlers import build_default_registry, post_process_plan
from trip_planner.core.image_resolver import ImageResolver
from trip_planner.core.profile_extractor import ProfileExtractor
from trip_planner.core.slot_gate import SlotGate
from trip_planner.core.state_manager import InMemoryUserMemoryStore, UserMemoryStore
from trip_planner.core.tool_registry import ToolKind, ToolRegistry
from trip_planner.llm.reasoning_engine import ReasoningEngine
from trip_planner.models.decision import Action, Decision
from trip_planner.models.message import Message
from trip_planner.models.plan import Plan
from trip_planner.models.response import AgentResponse, ChatRequest
from trip_planner.models.slots import GateOutcome, Slots
from trip_planner.models.tool_call import ToolCall, ToolResult
from trip_planner.models.user_profile import UserMemory
from trip_planner.prompts.system_prompt import build_system_prompt
from trip_planner.utils.clarification import build_engine_slot_question, build_gate_question
from trip_planner.utils.transcript import normalize_messages

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"

PLAN_READY_TEXT = "Here is your personalized plan!"
EMPTY_REPLY_TEXT = "I'm ready to help plan your trip! Where would you like to go?"
OFFLINE_TEXT = "Sorry, the AI planner seems to be offline right now. Please try again in a moment."
SOFT_FAILURE_TEXT = (
    "I'm having trouble putting this plan together right now. Could you rephrase your request or try again?"
)
ERROR_TEXT = "A critical server error occurred. Please try again."

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    if n <= 0:
        return "0"
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(_BASE36[r])
    return "".join(reversed(digits))


def new_request_id() -> str:
    # Key line: base36 millisecond timestamp + short random suffix, e.g. "m1x2y3z4-k9q2ab".
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"{_base36(int(time.time() * 1000))}-{suffix}"


def parse_arguments(raw: Any, request_id: str = "-") -> Dict[str, Any]:
    """
    Tool arguments arrive as a dict or a JSON string. Anything that is not a JSON object becomes {}.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            parsed = json.loads(raw)
        except ValueError as e:
            logger.warning("[chat][%s] Failed to parse tool arguments (%s); using {}", request_id, e)
            return {}
        if isinstance(parsed, dict):
            return parsed
    logger.warning("[chat][%s] Tool arguments are not a JSON object (%s); using {}", request_id, type(raw).__name__)
    return {}


def _call_key(name: str, arguments: Dict[str, Any]) -> str:
    return f"{name}:{json.dumps(arguments, sort_keys=True, ensure_ascii=False, default=str)}"


def _is_error(result: Any) -> bool:
    return isinstance(result, dict) and "error" in result


def _render_result(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False, default=str)


class PlanOrchestrator:
    def __init__(
        self,
        engine: Optional[ReasoningEngine] = None,
        registry: Optional[ToolRegistry] = None,
        store: Optional[UserMemoryStore] = None,
        slot_gate: Optional[SlotGate] = None,
        profile_extractor: Optional[ProfileExtractor] = None,
        image_resolver: Optional[ImageResolver] = None,
        fallback_handler: Optional[FallbackHandler] = None,
        decision_logic: Optional[DecisionLogic] = None,
        max_turns: Optional[int] = None,
    ) -> None:
        # Key line: dependencies are injectable for testing/mocking; engine=None means "no engine configured".
        self.engine = engine
        self.image_resolver = image_resolver or ImageResolver()
        self.registry = registry or build_default_registry(image_resolver=self.image_resolver)
        self.store = store or InMemoryUserMemoryStore()
        self.slot_gate = slot_gate or SlotGate()
        self.profile_extractor = profile_extractor or ProfileExtractor()
        self.fallback_handler = fallback_handler or FallbackHandler(self.image_resolver, self.slot_gate)
        self.decision_logic = decision_logic or DecisionLogic()
        self._max_turns = max_turns

    @property
    def max_turns(self) -> int:
        return self._max_turns or config.MAX_AGENT_TURNS

    def handle_request(self, request: Union[ChatRequest, Dict[str, Any]]) -> AgentResponse:
        request_id = new_request_id()
        try:
            return self._handle(request, request_id)
        except Exception:
            # Key line: the entry point always answers; the traceback goes to the log with the request id.
            logger.exception("[chat][%s] Critical handler error", request_id)
            return AgentResponse.text(ERROR_TEXT)

    def _remember(self, user_id: str, history: List[Message], slots: Slots) -> UserMemory:
        def apply(memory: UserMemory) -> None:
            self.profile_extractor.update(memory.profile, history)
            if slots.destination:
                memory.last_destination = slots.destination
            memory.request_count += 1

        return self.store.mutate(user_id, apply)

    def _handle(self, request: Union[ChatRequest, Dict[str, Any]], request_id: str) -> AgentResponse:
        # 1) Normalize transcript, update user memory, derive slots
        # 2) No engine -> deterministic fallback flow
        # 3) Gate: dates / guests missing -> slot-request signal without calling the engine
        # 4) Otherwise run the bounded engine/tool loop
        if not isinstance(request, ChatRequest):
            request = ChatRequest.model_validate(request)
        user_id = request.user_id or ANONYMOUS_USER

        logger.info(
            "[chat][%s] POST /chat/travel, user=%s, messages=%d, engine=%s",
            request_id,
            user_id,
            len(request.messages),
            type(self.engine).__name__ if self.engine is not None else "none",
        )

        history = normalize_messages(request.messages)
        slots = self.slot_gate.derive(history)
        outcome = self.slot_gate.evaluate(slots)
        memory = self._remember(user_id, history, slots)

        if config.DEBUG:
            logger.debug("[chat][%s] --- FLOW DEBUG ---", request_id)
            logger.debug("[chat][%s] SLOTS: %s", request_id, slots)
            logger.debug("[chat][%s] GATE: %s", request_id, outcome.value)
            logger.debug("[chat][%s] PROFILE: %s", request_id, memory.profile.model_dump())

        if self.engine is None:
            logger.info("[chat][%s] No reasoning engine configured. Responding with fallback flow.", request_id)
            return self.fallback_handler.respond(slots, request_id=request_id)

        if outcome in (GateOutcome.DATE_NEEDED, GateOutcome.GUESTS_NEEDED):
            logger.info("[chat][%s] Gate -> %s", request_id, outcome.value)
            return AgentResponse.slot_request(build_gate_question(outcome, slots.destination), outcome.value)

        context = [Message(role="system", content=build_system_prompt(memory.profile, slots)), *history]
        return self._run_loop(context, request_id)

    def _run_loop(self, context: List[Message], request_id: str) -> AgentResponse:
        catalog = self.registry.catalog()
        memo: Dict[str, Any] = {}

        for turn in range(1, self.max_turns + 1):
            try:
                reply = self.engine.complete(context, catalog)
            except Exception as e:
                logger.error("[chat][%s] Reasoning engine call failed on turn %d: %s", request_id, turn, e)
                return AgentResponse.text(OFFLINE_TEXT)

            decision = self.decision_logic.decide(reply, self.registry, request_id=request_id)
            logger.info("[chat][%s] Turn %d/%d -> %s", request_id, turn, self.max_turns, decision.action.value)

            if decision.action == Action.SLOT_REQUEST:
                ai_text = decision.text or build_engine_slot_question(decision.signal_type)
                return AgentResponse.slot_request(ai_text, decision.signal_type)

            if decision.action == Action.TEXT:
                return AgentResponse.text(decision.text)

            if decision.action == Action.EMPTY:
                logger.info("[chat][%s] Engine returned neither text nor tool calls.", request_id)
                return AgentResponse.text(EMPTY_REPLY_TEXT)

            terminal = self._dispatch_batch(decision, context, memo, request_id)
            if terminal is not None:
                return terminal

        logger.warning("[chat][%s] Agent loop hit the bound (%d turns) without a final answer", request_id, self.max_turns)
        return AgentResponse.text(SOFT_FAILURE_TEXT)

    def _dispatch_batch(
        self,
        decision: Decision,
        context: List[Message],
        memo: Dict[str, Any],
        request_id: str,
    ) -> Optional[AgentResponse]:
        # 1) Parse arguments leniently; record the assistant turn with every proposed call
        # 2) Unknown tools are answered with an error result so the engine can correct itself
        # 3) Run known calls in emission order; a valid plan from the terminal tool ends the request
        # 4) Non-terminal results go back into the context (repeats reuse the first successful result)
        calls = [
            ToolCall(name=call.name, arguments=parse_arguments(call.arguments, request_id), id=call.id)
            for call in decision.tool_calls
        ]
        context.append(Message(role="assistant", content=decision.text or "", tool_calls=calls))

        for call in calls:
            spec = self.registry.get(call.name)
            if spec is None:
                logger.warning("[chat][%s] Skipping unknown tool %r", request_id, call.name)
                self._append_result(
                    context,
                    ToolResult(tool_call_id=call.id, name=call.name, content={"error": f"unknown tool '{call.name}'"}),
                )
                continue

            logger.info("[chat][%s] AI called tool: %s", request_id, call.name)

            if spec.kind == ToolKind.TERMINAL:
                result = self.registry.dispatch(call.name, call.arguments, request_id=request_id)
                if isinstance(result, Plan):
                    plan = post_process_plan(result, self.image_resolver, request_id=request_id)
                    return AgentResponse.plan_ready(PLAN_READY_TEXT, plan)
                # Rejected plan: the error goes back so the engine can correct its arguments.
                self._append_result(context, ToolResult(tool_call_id=call.id, name=call.name, content=result))
                continue

            key = _call_key(call.name, call.arguments)
            if key in memo:
                logger.info("[chat][%s] Reusing result of repeated call %s", request_id, call.name)
                result = memo[key]
            else:
                result = self.registry.dispatch(call.name, call.arguments, request_id=request_id)
                # Key line: failures are not remembered, so a retry reaches the handler again.
                if not _is_error(result):
                    memo[key] = result

            self._append_result(context, ToolResult(tool_call_id=call.id, name=call.name, content=result))

        return None

    @staticmethod
    def _append_result(context: List[Message], result: ToolResult) -> None:
        context.append(
            Message(
                role="tool",
                content=_render_result(result.content),
                tool_call_id=result.tool_call_id,
                name=result.name,
            )
        )
