from trip_planner.models.message import Message
from trip_planner.utils.transcript import PLAN_SNAPSHOT_MARKER, normalize_messages, summarize_plan


def test_hidden_entries_are_dropped_and_roles_coerced():
    out = normalize_messages(
        [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "secret", "hidden": True},
            {"role": "narrator", "text": "from text field"},
        ]
    )
    assert [(m.role, m.content) for m in out] == [("user", "hi"), ("user", "from text field")]


def test_tool_entries_keep_call_id():
    out = normalize_messages([{"role": "tool", "toolCallId": "call_1", "content": {"ok": True}}])
    assert out[0].role == "tool"
    assert out[0].tool_call_id == "call_1"
    assert out[0].content == '{"ok": true}'


def test_plan_payload_becomes_snapshot_summary():
    out = normalize_messages(
        [{"role": "assistant", "signal": {"type": "planReady", "payload": {"location": "Rome", "dateRange": "Jun 1 - Jun 3"}}}]
    )
    assert out[0].role == "assistant"
    assert out[0].content.startswith(PLAN_SNAPSHOT_MARKER)
    assert "Rome" in out[0].content


def test_summarize_plan_without_location():
    assert summarize_plan({}) == f"{PLAN_SNAPSHOT_MARKER} Delivered a travel plan for the requested destination."


def test_malformed_records_never_raise():
    out = normalize_messages([None, 42, "plain text", {"role": "user", "content": None}, Message(role="user", content="ok")])
    contents = [m.content for m in out]
    assert "plain text" in contents
    assert "ok" in contents


def test_non_iterable_transcript_is_empty():
    assert normalize_messages(None) == []
    assert normalize_messages(5) == []
