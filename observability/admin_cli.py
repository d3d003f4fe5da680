"""Lightweight CLI helpers for inspecting completed interview sessions."""
from __future__ import annotations

import argparse
import json

from storage.sqlite import get_conn


def tail_sessions(limit: int = 20) -> None:
    with get_conn() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT start_time, id, visa_type, destination_country, overall_score, passed, ai_powered
            FROM interview_sessions
            ORDER BY start_time DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, session_id, visa_type, destination, score, passed, ai_powered = row
            verdict = "PASS" if passed else "FAIL"
            source = "ai" if ai_powered else "rules"
            print(f"[{ts}] {session_id} {visa_type}->{destination} score={score} {verdict} scoring={source}")


def show_session(session_id: str) -> None:
    with get_conn() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT questions_asked, improvements FROM interview_sessions WHERE id = ?",
            (session_id,),
        )
        row = cursor.fetchone()
        if row is None:
            print(f"session {session_id} not found")
            return
        for answer in json.loads(row[0]):
            flag = " FLAGGED" if answer.get("flagged") else ""
            print(f"{answer['question_id']}: {answer['scores']['total']}{flag} :: {answer['answer']}")
        for item in json.loads(row[1]):
            print(f"- {item}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-sessions", type=int, help="Show the latest completed sessions")
    parser.add_argument("--show", help="Print the answers of one session")
    args = parser.parse_args()

    if args.tail_sessions:
        tail_sessions(args.tail_sessions)
    if args.show:
        show_session(args.show)


if __name__ == "__main__":
    main()
