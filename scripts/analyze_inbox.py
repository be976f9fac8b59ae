from __future__ import annotations

import argparse
import asyncio
from typing import List, Optional

from dotenv import load_dotenv

from inbox_actions.actions.dispatcher import default_dispatcher
from inbox_actions.config.settings import load_settings
from inbox_actions.gmail.client import GmailClient, load_auth_config
from inbox_actions.models import ActionSuggestion, EmailAnalysis
from inbox_actions.pipeline.analysis import AnalysisService, OpenAIResponder
from inbox_actions.pipeline.grouping import group_by_sender


def best_suggestion(analysis: EmailAnalysis) -> Optional[ActionSuggestion]:
    if not analysis.suggestions:
        return None
    return max(analysis.suggestions, key=lambda s: s.confidence)


def print_analysis(analysis: EmailAnalysis) -> None:
    group = analysis.email_group
    print("----")
    print(f"Sender:  {group.sender_name} <{group.sender_email}>")
    print(f"Emails:  {group.total_count} ({group.unread_count} unread)")
    if not analysis.suggestions:
        print(f"[ANALYZE] no suggestions ({analysis.reasoning or 'empty response'})")
    for s in analysis.suggestions:
        print(f"[SUGGEST] {s.type:<8} {s.confidence:>3}%  {s.title}")
        if s.params:
            print(f"          params={s.params}")


async def run(args: argparse.Namespace) -> None:
    settings = load_settings()

    client = GmailClient(load_auth_config())
    client.connect()
    messages = client.fetch_messages(query=args.query, max_results=args.max_results)
    print(f"[FETCH] {len(messages)} messages for query={args.query!r}")

    groups = group_by_sender(messages)[: args.groups]
    print(f"[GROUP] analyzing {len(groups)} sender groups")

    service = AnalysisService(OpenAIResponder(model=args.model or settings.openai_model))
    analyses: List[EmailAnalysis] = []
    for group in groups:
        analysis = await service.analyze(group)
        print_analysis(analysis)
        analyses.append(analysis)

    if not args.execute:
        return

    dispatcher = default_dispatcher(settings)
    for analysis in analyses:
        suggestion = best_suggestion(analysis)
        if suggestion is None:
            continue
        target_ids = [m.id for m in analysis.email_group.messages]

        if args.dry_run:
            print(f"[DRY-RUN] would run type={suggestion.type} title={suggestion.title!r} emails={len(target_ids)}")
            continue

        result = await dispatcher.execute(
            suggestion,
            target_ids,
            access_token=client.access_token,
            messages=analysis.email_group.messages,
            debug=args.debug,
        )
        tag = "OK" if result.success else "FAIL"
        print(f"[{tag}] {suggestion.type}: {result.message}")
        if result.error:
            print(f"       error={result.error}")
        for line in result.debug or []:
            print(f"       {line}")


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Group inbox mail by sender and suggest follow-up actions."
    )
    parser.add_argument(
        "--query",
        dest="query",
        default="label:INBOX",
        help="Gmail search query used to pick messages.",
    )
    parser.add_argument(
        "--max-results",
        dest="max_results",
        type=int,
        default=50,
        help="Maximum number of messages to fetch.",
    )
    parser.add_argument(
        "--groups",
        dest="groups",
        type=int,
        default=5,
        help="Number of sender groups to analyze, largest first.",
    )
    parser.add_argument(
        "--model",
        dest="model",
        default="",
        help="OpenAI model (defaults to INBOX_ACTIONS_OPENAI_MODEL).",
    )
    parser.add_argument(
        "--execute",
        dest="execute",
        action="store_true",
        help="Run the highest-confidence suggestion of each group.",
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="With --execute, print what would run without calling Google APIs.",
    )
    parser.add_argument(
        "--debug",
        dest="debug",
        action="store_true",
        help="Include per-item failures in the printed debug trace.",
    )
    args = parser.parse_args()

    asyncio.run(run(args))


if __name__ == "__main__":
    main()
