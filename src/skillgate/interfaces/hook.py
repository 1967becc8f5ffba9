"""Host adapter: one JSON record on stdin, rendered activation text on stdout."""

from __future__ import annotations

import asyncio
import json
import logging

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from skillgate.core.config import Settings
from skillgate.runtime.service import SkillActivationService, TurnOutcome

LOGGER = logging.getLogger(__name__)


class HookInput(BaseModel):
    """The subset of the host record the engine needs; other fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    session_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("session_id", "conversation_id", "sessionId"),
    )
    prompt: str = ""


def parse_hook_input(raw: str) -> HookInput:
    """Parse the host record.

    Raises:
        ValueError: If the record is not JSON or lacks a session id.
    """
    try:
        return HookInput.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ValueError(f"invalid hook input: {exc}") from exc


async def handle_hook(payload: HookInput, service: SkillActivationService) -> TurnOutcome:
    try:
        return await service.run_turn(payload.session_id, payload.prompt)
    finally:
        await service.aclose()


def run_hook(raw: str, settings: Settings) -> str:
    """Process one host record and return the text to print.

    Never raises: any failure is logged and yields empty output, leaving the
    ledger untouched.
    """
    try:
        payload = parse_hook_input(raw)
    except ValueError as exc:
        LOGGER.warning("Ignoring hook call: %s", exc)
        return ""

    try:
        service = SkillActivationService.from_settings(settings)
        outcome = asyncio.run(handle_hook(payload, service))
    except Exception:
        LOGGER.exception("Skill activation failed for %s; emitting nothing", payload.session_id)
        return ""
    return outcome.text


__all__ = ["HookInput", "handle_hook", "parse_hook_input", "run_hook"]
