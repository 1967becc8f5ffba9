"""Render an activation result for the host and commit it to the ledger."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from skillgate.observability.error_codes import DiagnosticCode
from skillgate.session.ledger import LedgerStore, merge_activated
from skillgate.skills.content import SkillContentLoader
from skillgate.skills.models import ActivationResult, Diagnostic

LOGGER = logging.getLogger(__name__)


@dataclass
class RenderedActivation:
    text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)


def activation_label(name: str, result: ActivationResult) -> str:
    """Why ``name`` is part of ``result.final_order``."""
    if name in result.promoted:
        return "promoted"
    if name in result.admitted:
        return "admitted"
    if name in result.affinity_added:
        return "affinity"
    return "dependency"


class ActivationEmitter:
    """Turn an :class:`ActivationResult` into host-facing text.

    Output layout::

        <activated-skills>
        Activated for this request: a (admitted), b (affinity)

        <skill name="a">
        ...
        </skill>
        </activated-skills>

        Also relevant, not activated: c, d
    """

    def __init__(self, content_loader: SkillContentLoader) -> None:
        self._content = content_loader

    def render(self, result: ActivationResult) -> RenderedActivation:
        rendered = RenderedActivation(text="")
        sections: list[str] = []

        if result.final_order:
            summary = ", ".join(
                f"{name} ({activation_label(name, result)})" for name in result.final_order
            )
            blocks = [f"Activated for this request: {summary}"]
            for name in result.final_order:
                blocks.append(self._render_skill(name, rendered.diagnostics))
            sections.append("<activated-skills>\n" + "\n\n".join(blocks) + "\n</activated-skills>")

        leftovers = _merge([*result.suggested, *result.manual_only])
        if leftovers:
            sections.append("Also relevant, not activated: " + ", ".join(leftovers))

        rendered.text = "\n\n".join(sections)
        return rendered

    def _render_skill(self, name: str, diagnostics: list[Diagnostic]) -> str:
        content = self._content.load(name)
        if content is None or not content.body:
            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.CONTENT_MISSING,
                    message=f"No content found for skill '{name}'",
                    subject=name,
                )
            )
            LOGGER.warning("No content found for skill %s", name)
            body = f"(Skill '{name}' has no content file.)"
        else:
            body = content.body
        return f'<skill name="{name}">\n{body}\n</skill>'

    def commit(
        self,
        ledger: LedgerStore,
        conversation_id: str,
        activated: Sequence[str],
        result: ActivationResult,
    ) -> list[Diagnostic]:
        """Append newly emitted names to the ledger.

        Nothing is written when the turn emitted nothing. A failed write is
        reported, not raised: the worst case is a re-activation next turn.
        """
        if not result.final_order:
            return []
        try:
            ledger.write(conversation_id, merge_activated(activated, result.final_order))
        except OSError as exc:
            LOGGER.warning("Failed to write session ledger for %s: %s", conversation_id, exc)
            return [
                Diagnostic(
                    code=DiagnosticCode.LEDGER_WRITE_FAILED,
                    message=str(exc),
                    subject=conversation_id,
                )
            ]
        return []


def _merge(names: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(names))


__all__ = ["ActivationEmitter", "RenderedActivation", "activation_label"]
