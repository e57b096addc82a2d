from __future__ import annotations

import re

from .models.profile import Offering, TenantProfile

NO_CONTEXT_AVAILABLE = "No brand context available. The tenant has not completed onboarding."

_WORD_RE = re.compile(r"[a-z0-9]+")
_STOPWORDS = frozenset(
    {"a", "an", "and", "are", "do", "for", "how", "is", "of", "on", "or", "our", "the", "to", "we", "what", "who", "with"}
)


def build_context(profile: TenantProfile | None) -> str:
    """Render the tenant profile as the text block used to ground model answers.

    Only populated fields are emitted, always in the same order, so the same
    profile yields the same block on every request.
    """
    if profile is None:
        return NO_CONTEXT_AVAILABLE

    lines: list[str] = []
    if profile.company_name:
        lines.append(f"Company: {profile.company_name}")
    if profile.industry:
        lines.append(f"Industry: {profile.industry}")
    if profile.tagline:
        lines.append(f"Tagline: {profile.tagline}")
    if profile.mission:
        lines.append(f"Mission: {profile.mission}")
    if profile.brand_voice:
        lines.append(f"Brand voice: {profile.brand_voice}")

    propositions = [item for item in profile.value_propositions if item]
    if propositions:
        lines.append("Value propositions:")
        lines.extend(f"- {item}" for item in propositions)

    if profile.offerings:
        lines.append("Offerings:")
        for offering in profile.offerings:
            lines.extend(_offering_lines(offering))

    if not lines:
        return NO_CONTEXT_AVAILABLE
    return "\n".join(["### ENTERPRISE RAG STORE", *lines])


def _offering_lines(offering: Offering) -> list[str]:
    heading = f"- {offering.name}"
    if offering.type:
        heading += f" ({offering.type})"
    lines = [heading]
    if offering.description:
        lines.append(f"  Description: {offering.description}")
    if offering.audience:
        lines.append(f"  Audience: {offering.audience}")
    features = [feature for feature in offering.features if feature]
    if features:
        lines.append(f"  Features: {', '.join(features)}")
    if offering.differentiator:
        lines.append(f"  Differentiator: {offering.differentiator}")
    return lines


def search_context(context: str, query: str) -> str:
    """Return the context lines that share a keyword with ``query``.

    Falls back to the whole context when nothing matches, so the model always
    receives some grounding.
    """
    if context == NO_CONTEXT_AVAILABLE:
        return context

    terms = {word for word in _WORD_RE.findall(query.lower()) if word not in _STOPWORDS}
    matches = [
        line
        for line in context.splitlines()
        if terms and terms & set(_WORD_RE.findall(line.lower()))
    ]
    return "\n".join(matches) if matches else context


__all__ = ["NO_CONTEXT_AVAILABLE", "build_context", "search_context"]
