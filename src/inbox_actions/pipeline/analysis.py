from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional, Protocol

from openai import AsyncOpenAI

from inbox_actions.extractors.event_time import resolve_event_time
from inbox_actions.extractors.suggestions import parse_suggestions
from inbox_actions.models import ActionSuggestion, EmailAnalysis, EmailGroup

logger = logging.getLogger(__name__)

MAX_PROMPT_MESSAGES = 5
MAX_BODY_CHARS = 500


class LLMClient(Protocol):
    async def complete(self, prompt: str) -> str: ...


class OpenAIResponder:
    """LLM collaborator backed by the OpenAI Responses API."""

    def __init__(self, model: str, client: Optional[AsyncOpenAI] = None) -> None:
        self._model = model
        self._client = client or AsyncOpenAI()

    async def complete(self, prompt: str) -> str:
        resp = await self._client.responses.create(
            model=self._model,
            input=[
                {
                    "role": "system",
                    "content": (
                        "You triage email for a busy person and propose concrete follow-up actions. "
                        "Return ONLY the JSON object requested by the user."
                    ),
                },
                {"role": "user", "content": prompt},
            ],
        )
        output_text = getattr(resp, "output_text", None)
        if not output_text:
            raise RuntimeError("OpenAI response was empty.")
        return output_text


def build_analysis_prompt(group: EmailGroup) -> str:
    blocks: List[str] = []
    for msg in group.messages[:MAX_PROMPT_MESSAGES]:
        lines = [
            f"Subject: {msg.subject}",
            f"Date: {msg.date}",
            f"Content: {msg.snippet}",
        ]
        if msg.body:
            lines.append(f"Body: {msg.body[:MAX_BODY_CHARS]}...")
        blocks.append("\n".join(lines))

    recent = "\n---\n".join(blocks)
    return (
        "Analyze these emails and suggest actions that would help the recipient.\n\n"
        f"SENDER: {group.sender_name} ({group.sender_email})\n"
        f"TOTAL MESSAGES: {group.total_count}\n"
        f"UNREAD: {group.unread_count}\n\n"
        f"RECENT MESSAGES:\n{recent}\n\n"
        "Suggest 1-3 specific actions from these categories:\n"
        "1. archive - emails are outdated or promotional\n"
        "2. calendar - emails mention a meeting, event or deadline\n"
        "3. drive - emails contain something worth keeping as a file\n"
        "4. docs - several emails are worth a written summary\n"
        "5. task - emails contain a todo or something to follow up on\n"
        "6. custom - any other automation opportunity\n\n"
        "For each suggestion give type, a short actionable title, a description of why, "
        "a confidence from 0 to 100 and action-specific params.\n\n"
        "Respond with JSON in exactly this shape:\n"
        "{\n"
        '  "suggestions": [\n'
        "    {\n"
        '      "type": "calendar",\n'
        '      "title": "Add meeting to calendar",\n'
        '      "description": "Email mentions a meeting on Friday at 2:00pm",\n'
        '      "confidence": 85,\n'
        '      "params": {"eventTitle": "Team Meeting", "eventDate": "2024-01-12", "time": "14:00"}\n'
        "    }\n"
        "  ]\n"
        "}"
    )


class AnalysisService:
    def __init__(
        self,
        llm: LLMClient,
        clock: Callable[[], datetime] = lambda: datetime.now().astimezone(),
    ) -> None:
        self._llm = llm
        self._clock = clock

    async def analyze(self, group: EmailGroup) -> EmailAnalysis:
        """Ask the model for suggestions; failures yield an empty analysis."""
        prompt = build_analysis_prompt(group)
        try:
            raw = await self._llm.complete(prompt)
        except Exception as exc:
            logger.error("Analysis of %s failed: %s: %s", group.sender_key, type(exc).__name__, exc)
            return EmailAnalysis(email_group=group, suggestions=[], reasoning="Analysis failed")

        suggestions = parse_suggestions(raw)
        logger.info("Analysis of %s produced %d suggestion(s)", group.sender_key, len(suggestions))
        return EmailAnalysis(
            email_group=group,
            suggestions=[self._with_event_date(s, group) for s in suggestions],
            reasoning=raw,
        )

    def _with_event_date(self, suggestion: ActionSuggestion, group: EmailGroup) -> ActionSuggestion:
        # Pin calendar suggestions to a concrete start so the user sees what will be booked.
        if suggestion.type != "calendar":
            return suggestion
        if suggestion.params.get("eventDate") or suggestion.params.get("date"):
            return suggestion
        context = suggestion.description or ""
        if group.messages:
            context = f"{context} {group.messages[0].snippet}".strip()
        params = dict(suggestion.params)
        params["eventDate"] = resolve_event_time(suggestion.params, context, self._clock())
        return replace(suggestion, params=params)
