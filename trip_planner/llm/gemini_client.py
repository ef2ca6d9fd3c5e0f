# Role: Gemini implementation of the reasoning engine. Centralizes model name, temperature, timeout and the
# mapping between our transcript (messages, tool calls, tool results) and Gemini contents/function calls.

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence

from google import genai
from google.genai import types

import trip_planner.config as config
from trip_planner.llm.reasoning_engine import EngineReply
from trip_planner.models.message import Message
from trip_planner.models.tool_call import ToolCall, new_tool_call_id

logger = logging.getLogger(__name__)


def _function_declaration(entry: Dict[str, Any]) -> types.FunctionDeclaration:
    params = entry.get("parameters") or {}
    # Key line: Gemini rejects an object schema with no properties; parameterless tools send none.
    if not params.get("properties"):
        params = None
    return types.FunctionDeclaration(
        name=entry["name"],
        description=entry.get("description") or "",
        parameters_json_schema=params,
    )


def _tool_response(content: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(content) if content else None
    except ValueError:
        parsed = content
    return parsed if isinstance(parsed, dict) else {"result": parsed}


def to_contents(context: Sequence[Message]) -> tuple[Optional[str], List[types.Content]]:
    # 1) system messages -> system_instruction
    # 2) user -> "user"; assistant (text and/or function calls) -> "model"
    # 3) consecutive tool results -> one "user" content of function responses
    # 4) tool results with no matching model function call -> plain user text
    system_parts: List[str] = []
    contents: List[types.Content] = []
    pending_responses: List[types.Part] = []
    call_names: Dict[str, str] = {}

    def flush_responses() -> None:
        if pending_responses:
            contents.append(types.Content(role="user", parts=list(pending_responses)))
            pending_responses.clear()

    for m in context:
        if m.role == "system":
            if m.content:
                system_parts.append(m.content)
            continue

        if m.role == "tool" and m.tool_call_id in call_names:
            pending_responses.append(
                types.Part(
                    function_response=types.FunctionResponse(
                        id=m.tool_call_id,
                        name=m.name or call_names[m.tool_call_id],
                        response=_tool_response(m.content),
                    )
                )
            )
            continue

        flush_responses()

        if m.role == "tool":
            # Key line: Gemini rejects a function response without its call, so orphans travel as text.
            if m.content:
                contents.append(types.Content(role="user", parts=[types.Part(text=f"Tool result: {m.content}")]))
            continue

        parts: List[types.Part] = []
        if m.content:
            parts.append(types.Part(text=m.content))
        if m.role == "assistant":
            for call in m.tool_calls:
                call_names[call.id] = call.name
                args = call.arguments if isinstance(call.arguments, dict) else {}
                parts.append(types.Part(function_call=types.FunctionCall(id=call.id, name=call.name, args=args)))
        if not parts:
            continue

        contents.append(types.Content(role="model" if m.role == "assistant" else "user", parts=parts))

    flush_responses()
    system_instruction = "\n\n".join(system_parts) or None
    return system_instruction, contents


def parse_response(resp: Any) -> EngineReply:
    texts: List[str] = []
    calls: List[ToolCall] = []

    candidates = getattr(resp, "candidates", None) or []
    content = getattr(candidates[0], "content", None) if candidates else None
    for part in (getattr(content, "parts", None) or []):
        fc = getattr(part, "function_call", None)
        if fc is not None and fc.name:
            calls.append(ToolCall(name=fc.name, arguments=dict(fc.args or {}), id=fc.id or new_tool_call_id()))
            continue
        text = getattr(part, "text", None)
        if text and not getattr(part, "thought", False):
            texts.append(text)

    return EngineReply(text="".join(texts).strip(), tool_calls=calls)


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.3,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        # Key lines:
        # - Reads secrets from env (no secrets in code).
        # - Every call is bounded by the HTTP timeout (milliseconds on the wire).
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise RuntimeError("Missing GEMINI_API_KEY in environment or .env")

        self.model_name = model or os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.temperature = temperature
        timeout = timeout_seconds if timeout_seconds is not None else config.LLM_TIMEOUT_SECONDS

        self.client = genai.Client(
            api_key=self.api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

    def complete(self, context: Sequence[Message], tool_catalog: List[Dict[str, Any]]) -> EngineReply:
        # 1) Map transcript -> Gemini contents
        # 2) One generate_content call with our declarations (no automatic function calling)
        # 3) Split the reply into text + proposed calls
        system_instruction, contents = to_contents(context)
        if not contents:
            raise ValueError("Context must contain at least one non-system message.")

        tools = None
        if tool_catalog:
            tools = [types.Tool(function_declarations=[_function_declaration(t) for t in tool_catalog])]

        gen_config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=self.temperature,
            tools=tools,
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
        )

        try:
            resp = self.client.models.generate_content(model=self.model_name, contents=contents, config=gen_config)
        except Exception as e:
            raise RuntimeError(f"Gemini API call failed: {e}") from e

        reply = parse_response(resp)
        logger.debug("Gemini reply: text=%d chars, calls=%s", len(reply.text), [c.name for c in reply.tool_calls])
        return reply


def default_reasoning_engine() -> Optional[GeminiClient]:
    # Key line: no key -> no engine; the orchestrator then answers through the deterministic fallback flow.
    if not os.getenv("GEMINI_API_KEY"):
        logger.warning("GEMINI_API_KEY is not set. Using the deterministic fallback flow.")
        return None
    return GeminiClient()
