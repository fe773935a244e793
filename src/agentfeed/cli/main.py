#!/usr/bin/env python3
"""Entry point for the agentfeed CLI."""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections import deque
from pathlib import Path
from textwrap import dedent
from typing import Any

from agentfeed import __version__
from agentfeed.app.activity import ActivityConfigError, ActivityFeedService
from agentfeed.domain.activity import (
    ActivityEvent,
    ActivityEventError,
    ActivityEventType,
    ActivityQueryError,
    PersistenceError,
)
from agentfeed.settings import SETTINGS
from agentfeed.utils.telemetry import clear as telemetry_clear
from agentfeed.utils.telemetry import iter_events as telemetry_iter
from agentfeed.utils.telemetry import record_structured_event, summarize as telemetry_summarize

HELP_OVERVIEW = dedent(
    """
    Agent activity feed for a workspace.

    Examples:
      - agentfeed activity log --agent agent-1 --type claimed --project 42
      - agentfeed activity recent --limit 10 --json
      - agentfeed activity summary --agent agent-1
    """
)


def _default_project_path(path_arg: str | None) -> Path:
    if path_arg:
        return Path(path_arg).expanduser().resolve()
    return Path(os.getcwd())


def _build_feed_service() -> ActivityFeedService:
    return ActivityFeedService(SETTINGS)


def _print_event_line(event: ActivityEvent) -> None:
    parts = [event.timestamp, event.agent_id, event.event_type]
    if event.project_number is not None:
        parts.append(f"project #{event.project_number}")
    if event.issue_number is not None:
        parts.append(f"issue #{event.issue_number}")
    line = "  ".join(parts)
    if event.details:
        line = f"{line}  {event.details}"
    print(line)


def _activity_cmd(args: argparse.Namespace) -> int:
    project_path = _default_project_path(getattr(args, "path", None))
    action = args.activity_command
    as_json = bool(getattr(args, "json", False))
    service = _build_feed_service()

    try:
        if action == "log":
            event = service.record_activity(
                project_path,
                agent_id=args.agent,
                event_type=args.type,
                project_number=args.project,
                issue_number=args.issue,
                details=args.details,
                timestamp=args.timestamp,
            )
            if as_json:
                print(json.dumps(event.to_dict(), ensure_ascii=False, indent=2))
            else:
                print(f"Logged {event.event_type} for {event.agent_id}")
            payload: dict[str, Any] = {"event_type": event.event_type, "agent_id": event.agent_id}
        elif action == "recent":
            events = service.recent(
                project_path,
                args.limit,
                agents=args.agents,
                event_types=args.types,
            )
            if as_json:
                print(json.dumps([event.to_dict() for event in events], ensure_ascii=False, indent=2))
            elif not events:
                print("No activity recorded")
            else:
                for event in events:
                    _print_event_line(event)
            payload = {"returned": len(events)}
        elif action == "count":
            count = service.count(project_path)
            capacity = service.log_for(project_path).capacity
            if as_json:
                print(json.dumps({"count": count, "capacity": capacity}))
            else:
                print(f"{count}/{capacity} events retained")
            payload = {"count": count}
        elif action == "clear":
            service.clear(project_path)
            print("Activity log cleared")
            payload = {}
        elif action == "summary":
            feed = service.feed(
                project_path,
                args.limit,
                agents=args.agents,
                event_types=args.types,
            )
            print(json.dumps(feed, ensure_ascii=False, indent=2))
            payload = {"count": feed["count"], "returned": len(feed["recent"])}
        else:
            print("Unsupported activity command", file=sys.stderr)
            return 2
    except (ActivityEventError, ActivityQueryError) as exc:
        print(f"activity.{action}.invalid: {exc}", file=sys.stderr)
        return 2
    except ActivityConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"activity.{action}.persistence_failed: {exc}", file=sys.stderr)
        record_structured_event(
            SETTINGS,
            f"activity.{action}",
            level="error",
            status="failed",
            component="activity",
            payload={"error": str(exc)},
        )
        return 1

    record_structured_event(
        SETTINGS,
        f"activity.{action}",
        status="success",
        component="activity",
        payload=payload,
    )
    return 0


def _telemetry_cmd(args: argparse.Namespace) -> int:
    if args.telemetry_command == "report":
        recent = getattr(args, "recent", 0)
        if recent and recent > 0:
            events = list(deque(telemetry_iter(SETTINGS), maxlen=recent))
        else:
            events = list(telemetry_iter(SETTINGS))
        print(json.dumps(telemetry_summarize(events), indent=2, ensure_ascii=False))
        return 0
    if args.telemetry_command == "clear":
        telemetry_clear(SETTINGS)
        print("Telemetry log cleared")
        return 0
    if args.telemetry_command == "tail":
        for evt in deque(telemetry_iter(SETTINGS), maxlen=args.limit):
            print(json.dumps(evt, ensure_ascii=False))
        return 0
    print("Unsupported telemetry command", file=sys.stderr)
    return 2


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected integer, got {raw!r}") from exc
    if value < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return value


def _add_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--agent", dest="agents", action="append", default=None, help="Only events from this agent (repeatable)")
    parser.add_argument(
        "--type",
        dest="types",
        action="append",
        default=None,
        choices=ActivityEventType.values(),
        help="Only events of this type (repeatable)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentfeed",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"agentfeed {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    activity_cmd = sub.add_parser("activity", help="Record and inspect agent activity")
    activity_sub = activity_cmd.add_subparsers(dest="activity_command", required=True)

    log_cmd = activity_sub.add_parser("log", help="Append an activity event")
    log_cmd.add_argument("path", nargs="?", help="Workspace path (default: current directory)")
    log_cmd.add_argument("--agent", required=True, help="Agent identifier, e.g. agent-1")
    log_cmd.add_argument("--type", required=True, choices=ActivityEventType.values(), help="Event type")
    log_cmd.add_argument("--project", type=int, default=None, help="Project number")
    log_cmd.add_argument("--issue", type=int, default=None, help="Issue number")
    log_cmd.add_argument("--details", default=None, help="Free-text description")
    log_cmd.add_argument("--timestamp", default=None, help="ISO-8601 timestamp (default: now, UTC)")
    log_cmd.add_argument("--json", action="store_true", help="Print the stored event as JSON")
    log_cmd.set_defaults(func=_activity_cmd)

    recent_cmd = activity_sub.add_parser("recent", help="Show recent events, newest first")
    recent_cmd.add_argument("path", nargs="?", help="Workspace path (default: current directory)")
    recent_cmd.add_argument("--limit", type=_non_negative_int, default=None, help="Maximum events (default: capacity)")
    _add_filters(recent_cmd)
    recent_cmd.add_argument("--json", action="store_true")
    recent_cmd.set_defaults(func=_activity_cmd)

    count_cmd = activity_sub.add_parser("count", help="Number of retained events")
    count_cmd.add_argument("path", nargs="?", help="Workspace path (default: current directory)")
    count_cmd.add_argument("--json", action="store_true")
    count_cmd.set_defaults(func=_activity_cmd)

    clear_cmd = activity_sub.add_parser("clear", help="Remove all retained events")
    clear_cmd.add_argument("path", nargs="?", help="Workspace path (default: current directory)")
    clear_cmd.set_defaults(func=_activity_cmd)

    summary_cmd = activity_sub.add_parser("summary", help="Dashboard feed payload as JSON")
    summary_cmd.add_argument("path", nargs="?", help="Workspace path (default: current directory)")
    summary_cmd.add_argument("--limit", type=_non_negative_int, default=None)
    _add_filters(summary_cmd)
    summary_cmd.set_defaults(func=_activity_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect the local telemetry log")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)
    report_cmd = telemetry_sub.add_parser("report", help="Summarise telemetry events")
    report_cmd.add_argument("--recent", type=int, default=0, help="Only the last N events")
    report_cmd.set_defaults(func=_telemetry_cmd)
    tail_cmd = telemetry_sub.add_parser("tail", help="Print the last telemetry events")
    tail_cmd.add_argument("--limit", type=int, default=20)
    tail_cmd.set_defaults(func=_telemetry_cmd)
    telemetry_clear_cmd = telemetry_sub.add_parser("clear", help="Delete the telemetry log")
    telemetry_clear_cmd.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
