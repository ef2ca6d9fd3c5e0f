# Role: Transcript normalizer. Turns whatever the client sent (dicts, pydantic objects, partial records)
# into the canonical ordered Message list. Never raises: bad records degrade to best-effort text.

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List, Mapping, Optional

from trip_planner.models.message import ALLOWED_ROLES, Message

logger = logging.getLogger(__name__)

PLAN_SNAPSHOT_MARKER = "[PLAN_SNAPSHOT]"


def _as_mapping(record: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(record, Mapping):
        return record
    if hasattr(record, "model_dump"):
        try:
            return record.model_dump()
        except Exception:
            return None
    if hasattr(record, "__dict__"):
        return vars(record)
    return None


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(value)


def _find_plan_payload(record: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    # Step: a prior plan may sit at payload / plan / signal.payload depending on the client.
    for key in ("payload", "plan"):
        value = record.get(key)
        if isinstance(value, Mapping):
            return value
    signal = record.get("signal")
    if isinstance(signal, Mapping) and isinstance(signal.get("payload"), Mapping):
        return signal["payload"]
    return None


def summarize_plan(plan: Mapping[str, Any]) -> str:
    # Key line: short text instead of the whole structure; the marker resets slot memory next turn.
    location = _to_text(plan.get("location")).strip() or "the requested destination"
    date_range = _to_text(plan.get("dateRange") or plan.get("date_range")).strip()
    summary = f"{PLAN_SNAPSHOT_MARKER} Delivered a travel plan for {location}"
    if date_range:
        summary += f" ({date_range})"
    return summary + "."


def normalize_message(record: Any) -> Optional[Message]:
    """
    Normalize a single record. Returns None for hidden entries and for values that are not records at all.
    """
    if isinstance(record, Message):
        return None if record.hidden else record

    data = _as_mapping(record)
    if data is None:
        if isinstance(record, str) and record.strip():
            return Message(role="user", content=record)
        logger.debug("Skipping non-record transcript entry: %r", record)
        return None

    if data.get("hidden"):
        return None

    raw_role = data.get("role")
    role = raw_role if raw_role in ALLOWED_ROLES else "user"

    raw_content = data.get("content")
    if raw_content is None:
        raw_content = data.get("text")
    content = _to_text(raw_content)

    if not content.strip():
        plan = _find_plan_payload(data)
        if plan is not None:
            content = summarize_plan(plan)

    if role == "tool":
        call_id = data.get("tool_call_id") or data.get("toolCallId")
        return Message(
            role="tool",
            content=content,
            tool_call_id=str(call_id) if call_id is not None else None,
            name=data.get("name") if isinstance(data.get("name"), str) else None,
        )

    return Message(role=role, content=content)


def normalize_messages(records: Optional[Iterable[Any]]) -> List[Message]:
    # 1) Drop hidden entries
    # 2) Coerce unknown roles to "user"
    # 3) Synthesize plan summaries where content is missing
    if records is None:
        return []
    if isinstance(records, (str, bytes, Mapping)):
        records = [records]

    out: List[Message] = []
    try:
        iterator = iter(records)
    except TypeError:
        logger.warning("Transcript is not iterable (%s); treating as empty", type(records).__name__)
        return out

    for record in iterator:
        try:
            msg = normalize_message(record)
        except Exception as e:
            # Key line: a single broken record must not sink the whole turn.
            logger.warning("Could not normalize transcript entry (%r); using best-effort text", e)
            text = _to_text(record)
            msg = Message(role="user", content=text) if text.strip() else None
        if msg is not None:
            out.append(msg)
    return out
