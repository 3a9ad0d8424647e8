#!/usr/bin/env python3
import argparse
import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from homeserve.appointment_utils import (  # noqa: E402
    can_book_again,
    can_cancel_appointment,
    can_leave_review,
    format_date,
    format_time_range,
    get_status_display_name,
)
from homeserve.errors import ApiError  # noqa: E402
from homeserve.models import Appointment  # noqa: E402
from homeserve.session import MarketplaceSession  # noqa: E402


def _row(appointment: Appointment) -> Dict[str, Any]:
    return {
        "id": appointment.id,
        "service": appointment.service_name,
        "provider": appointment.provider_name,
        "status": get_status_display_name(appointment),
        "date": format_date(appointment.start_time),
        "time": format_time_range(appointment.start_time, appointment.end_time),
        "actions": {
            "cancel": can_cancel_appointment(appointment),
            "review": can_leave_review(appointment),
            "book_again": can_book_again(appointment),
        },
    }


def build_report(upcoming: List[Appointment], past: List[Appointment]) -> Dict[str, Any]:
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "upcoming": [_row(item) for item in upcoming],
        "past": [_row(item) for item in past],
    }


def print_human(report: Dict[str, Any]) -> None:
    for section in ("upcoming", "past"):
        rows = report[section]
        print(f"{section.capitalize()} appointments: {len(rows)}")
        for row in rows:
            print(f"  - {row['date']} {row['time']} {row['service']} with {row['provider']} [{row['status']}]")


async def _collect(args: argparse.Namespace) -> Dict[str, Any]:
    async with MarketplaceSession(token=args.token or None, base_url=args.base_url or None) as session:
        if args.email:
            await session.auth.login({"email": args.email, "password": args.password})
        await session.appointments.refresh()
        if session.appointments.error:
            raise ApiError(session.appointments.error)
        return build_report(session.appointments.upcoming(), session.appointments.past())


def main() -> int:
    parser = argparse.ArgumentParser(description="Print the upcoming/past appointment partitions for a user.")
    parser.add_argument("--base-url", default="", help="Backend API base URL (defaults to BACKEND_URL/api).")
    parser.add_argument("--token", default="", help="Existing bearer token.")
    parser.add_argument("--email", default="", help="Log in with this email instead of a token.")
    parser.add_argument("--password", default="", help="Password for --email.")
    parser.add_argument("--json-out", default="", help="Optional path to write the JSON report.")
    args = parser.parse_args()

    try:
        report = asyncio.run(_collect(args))
    except ApiError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    print_human(report)
    if args.json_out:
        path = Path(args.json_out)
        path.write_text(json.dumps(report, indent=2) + "\n", encoding="utf-8")
        print(f"Wrote report: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
