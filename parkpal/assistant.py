from __future__ import annotations

import time
from typing import Optional

import requests
from loguru import logger

from parkpal.config import Settings
from parkpal.models import ChatMessage, RankedCandidate, UserLocation

NO_SPACES_TEXT = "There are no available spaces near the user's location or mentioned area."


class AssistantError(RuntimeError):
    pass


def _format_price(v: Optional[float]) -> str:
    if v is None:
        return "£?"
    return f"£{v:g}"


def summarize_spaces(results: list[RankedCandidate]) -> str:
    if not results:
        return NO_SPACES_TEXT

    lines: list[str] = []
    for i, r in enumerate(results, start=1):
        s = r.space
        parts = [
            f"{i}. {s.title or 'Parking space'}",
            f"{_format_price(s.price_per_day)}/day",
            s.address or s.location or s.postcode or "address on request",
        ]
        if r.distance is not None:
            parts.append(f"{r.distance:.1f} km away")
        lines.append(" - ".join(parts))
    return "\n".join(lines)


def build_system_prompt(summary: str, user_location: UserLocation | None = None) -> str:
    if user_location is not None:
        where = (
            "Their current location is:\n"
            f"- Latitude: {user_location.latitude}\n"
            f"- Longitude: {user_location.longitude}"
        )
    else:
        where = "Their current location is unknown."

    return (
        "You are a helpful assistant for Parkpal. The user is asking for parking help.\n\n"
        f"{where}\n\n"
        "Nearby available parking spaces:\n"
        f"{summary}\n\n"
        "Your job:\n"
        "- If there are spaces, briefly guide the user toward them.\n"
        "- If none are available, politely inform them and suggest trying a different location "
        "or checking back later.\n"
        '- Never mention "fetching" or "searching"; all data is already provided.\n'
        "- Be helpful, concise, and friendly. Use 1-2 sentences max."
    )


def _shorten_error_text(s: str, max_len: int = 240) -> str:
    if not s:
        return ""
    one_line = " ".join(s.replace("\r", " ").replace("\n", " ").split())
    if len(one_line) <= max_len:
        return one_line
    return one_line[:max_len] + "..."


def fallback_reply(results: list[RankedCandidate]) -> str:
    if not results:
        return (
            "I couldn't find any available spaces matching that. "
            "Try a different area or check back later."
        )
    best = results[0].space
    noun = "space" if len(results) == 1 else "spaces"
    return (
        f"I found {len(results)} available {noun}. "
        f"The top match is {best.title or 'a nearby space'} at "
        f"{_format_price(best.price_per_day)}/day."
    )


class ChatAssistant:
    """Frames ranked spaces for an OpenAI-compatible chat completion endpoint."""

    def __init__(self, settings: Settings):
        self.api_key = settings.openrouter_api_key
        self.base_url = settings.openrouter_base_url
        self.model = settings.openrouter_model
        self.timeout_s = settings.llm_timeout_s
        self.retries = settings.llm_retries
        self.backoff_s = settings.llm_retry_backoff_s

    def _complete(self, messages: list[dict[str, str]]) -> str:
        if not self.api_key:
            raise AssistantError("OPENROUTER_API_KEY is not set")

        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": 800,
            "temperature": 0.7,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        last_err: Optional[Exception] = None
        attempts = max(1, self.retries + 1)
        for i in range(attempts):
            try:
                resp = requests.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=payload,
                    timeout=self.timeout_s,
                )
                if resp.status_code != 200:
                    raise AssistantError(
                        f"completion failed: {resp.status_code} {_shorten_error_text(resp.text)}"
                    )
                data = resp.json() if resp.content else {}
                if not isinstance(data, dict):
                    raise AssistantError("completion response was not an object")
                choices = data.get("choices") or []
                content = ""
                if choices and isinstance(choices[0], dict):
                    content = ((choices[0].get("message") or {}).get("content") or "").strip()
                if not content:
                    raise AssistantError("completion returned no content")
                return content
            except (requests.RequestException, ValueError, AssistantError) as e:
                last_err = e
                if i < attempts - 1:
                    time.sleep(self.backoff_s * (i + 1))
                    continue
                break
        raise AssistantError(_shorten_error_text(str(last_err or "unknown")))

    def reply(
        self,
        message: str,
        conversation: list[ChatMessage],
        results: list[RankedCandidate],
        user_location: UserLocation | None = None,
    ) -> str:
        system_prompt = build_system_prompt(summarize_spaces(results), user_location)
        messages = [{"role": "system", "content": system_prompt}]
        messages += [{"role": m.role, "content": m.content} for m in conversation]
        messages.append({"role": "user", "content": message})

        try:
            return self._complete(messages)
        except AssistantError as e:
            logger.warning(f"LLM unavailable, using fallback reply: {e}")
            return fallback_reply(results)
