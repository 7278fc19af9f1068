from __future__ import annotations

import argparse
import os
import sys

sys.path.append("/app")
sys.path.append(os.getcwd())

from app.services.dashboard_client import DashboardClient
from app.services.dashboard_view import build_dashboard_view


def main() -> None:
    p = argparse.ArgumentParser(description="Fetch a user's dashboard quizzes and print what the dashboard shows")
    p.add_argument("--user-id", required=True)
    p.add_argument("--token", default=os.environ.get("QUIZBOARD_TOKEN"), help="Bearer token (or QUIZBOARD_TOKEN)")
    p.add_argument("--base-url", default=None)
    p.add_argument("--path", default="/dashboard", help="Page path; affects the grid layout")
    args = p.parse_args()

    outcome = DashboardClient(token=args.token, base_url=args.base_url).fetch_dashboard_quizzes(args.user_id)
    view = build_dashboard_view(outcome, path=args.path)

    for card in view.info_cards:
        print(f"[{card.icon}] {card.label}: {card.number_of_items}")
    for section in view.sections:
        print(f"\n{section.title}")
        for c in section.quiz_list.cards:
            desc = f" - {c.description}" if c.description else ""
            print(f"  * {c.title} ({c.teacher_name}){desc}")
    if view.empty_message:
        print(view.empty_message)
    if view.status == "error":
        sys.exit(1)


if __name__ == "__main__":
    main()
