#!/usr/bin/env python3
"""
Terminal chat client for the companion API (no extra deps beyond httpx).

  python scripts/chat_cli.py                # new session
  python scripts/chat_cli.py --session ID   # continue a session

Commands inside the prompt: /sessions, /new [title], /use ID, /rename TITLE,
/delete, /history, /mode friend|research|code, /quit.
"""
import argparse
import os

import httpx

API_URL = os.environ.get("COMPANION_API_URL", "http://localhost:5000/api")


class CompanionClient:
    """Thin wrapper over the HTTP surface."""

    def __init__(self, base_url: str = API_URL, timeout: float = 60.0) -> None:
        self._http = httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def chat(self, message: str, session_id: str | None, mode: str | None) -> dict:
        payload: dict = {"message": message}
        if session_id:
            payload["sessionId"] = session_id
        if mode:
            payload["mode"] = mode
        r = self._http.post("/chat", json=payload)
        # Failed chats still carry {response, mood, mode}
        return r.json()

    def sessions(self) -> list[dict]:
        r = self._http.get("/sessions")
        r.raise_for_status()
        return r.json()

    def create_session(self, title: str | None = None) -> dict:
        r = self._http.post("/sessions", json={"title": title} if title else {})
        r.raise_for_status()
        return r.json()

    def rename_session(self, session_id: str, title: str) -> None:
        self._http.patch(f"/sessions/{session_id}", json={"title": title}).raise_for_status()

    def delete_session(self, session_id: str) -> None:
        self._http.delete(f"/sessions/{session_id}").raise_for_status()

    def history(self, session_id: str) -> list[dict]:
        r = self._http.get(f"/history/{session_id}")
        r.raise_for_status()
        return r.json()


def _print_sessions(rows: list[dict]) -> None:
    if not rows:
        print("  (no sessions)")
    for s in rows:
        print(f"  {s['id']}  {s['title']!r}  messages={s.get('message_count', 0)}  updated={s.get('updated_at')}")


def _print_history(rows: list[dict]) -> None:
    for t in rows:
        who = "you" if t["role"] == "user" else "bot"
        print(f"  [{who}] {t['content']}")


def _handle_command(client: CompanionClient, line: str, state: dict) -> bool:
    """Run a /command. Returns False when the user wants to quit."""
    cmd, _, arg = line[1:].partition(" ")
    arg = arg.strip()
    if cmd in ("quit", "exit", "q"):
        return False
    if cmd == "sessions":
        _print_sessions(client.sessions())
    elif cmd == "new":
        created = client.create_session(arg or None)
        state["session_id"] = created["id"]
        print(f"  session {created['id']} ({created['title']})")
    elif cmd == "use":
        state["session_id"] = arg or None
    elif cmd == "rename" and state["session_id"]:
        client.rename_session(state["session_id"], arg)
    elif cmd == "delete" and state["session_id"]:
        client.delete_session(state["session_id"])
        state["session_id"] = None
    elif cmd == "history" and state["session_id"]:
        _print_history(client.history(state["session_id"]))
    elif cmd == "mode":
        state["mode"] = arg or None
    else:
        print("  unknown command or no session selected")
    return True


def main() -> int:
    parser = argparse.ArgumentParser(description="Chat with the companion from the terminal.")
    parser.add_argument("--session", default=None, help="session id to continue")
    parser.add_argument("--url", default=API_URL, help="API base URL (default: %(default)s)")
    args = parser.parse_args()

    client = CompanionClient(args.url)
    state: dict = {"session_id": args.session, "mode": None}
    print(f"Chat → {args.url}  (/quit to leave)")
    try:
        if not state["session_id"]:
            state["session_id"] = client.create_session()["id"]
        while True:
            try:
                line = input("> ").strip()
            except EOFError:
                break
            if not line:
                continue
            try:
                if line.startswith("/"):
                    if not _handle_command(client, line, state):
                        break
                    continue
                data = client.chat(line, state["session_id"], state["mode"])
                state["mode"] = data.get("mode") or state["mode"]
                print(f"[{data.get('mood')}/{data.get('mode')}] {data.get('response', '')}")
            except httpx.HTTPStatusError as e:
                print(f"API error {e.response.status_code}: {e.response.text[:500]}")
            except httpx.HTTPError as e:
                print(f"Error: {e}")
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
