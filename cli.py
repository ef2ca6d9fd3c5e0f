# Role: Local developer CLI to interact with PlanOrchestrator without the web UI.
# Keeps the transcript client-side (like the web client does) and prints replies, signals and plans.

from __future__ import annotations

import json
import uuid

import trip_planner.config
trip_planner.config.load_env()

from trip_planner.core.orchestrator import PlanOrchestrator
from trip_planner.llm.gemini_client import default_reasoning_engine


def _new_user_id() -> str:
    return f"cli-{uuid.uuid4().hex[:8]}"


def main() -> None:
    # 1) Create PlanOrchestrator (Gemini when GEMINI_API_KEY is set, fallback flow otherwise)
    # 2) Maintain a transcript and user id across turns
    # 3) Route user input -> orchestrator -> print assistant output (+ signal)
    print("Trip Planner CLI")
    print("Commands: /new (new conversation), /user (show user id), /exit")
    print("-" * 50)

    orchestrator = PlanOrchestrator(engine=default_reasoning_engine())
    user_id = _new_user_id()
    messages: list[dict] = []
    print(f"user_id: {user_id}")

    while True:
        try:
            user_message = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/new", "new"}:
            messages = []
            print("Started a new conversation.")
            continue

        if cmd in {"/user", "user"}:
            print(f"user_id: {user_id}")
            continue

        messages.append({"role": "user", "content": user_message})
        result = orchestrator.handle_request({"messages": messages, "userId": user_id})
        print(f"\nAssistant: {result.ai_text}")

        assistant_entry: dict = {"role": "assistant", "content": result.ai_text}
        if result.signal is not None:
            print(f"[signal] {result.signal.type}")
            if result.signal.payload is not None:
                plan = result.signal.payload.model_dump(by_alias=True)
                print(json.dumps(plan, indent=2, ensure_ascii=False))
                # Key line: the client keeps the plan; the normalizer turns it into a snapshot next turn.
                assistant_entry = {"role": "assistant", "signal": {"type": "planReady", "payload": plan}}
        messages.append(assistant_entry)


if __name__ == "__main__":
    main()
