"""
Prompt Builder - advisor system prompt for a perspective and coverage snapshot

Deterministic: the same perspective and present-slug set always render the
same text. Coverage here is measured against the rubric's required document
tree, which may differ from the checklist's per-perspective flags.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import AbstractSet, List

from .catalog import AdvisorCatalog
from .coverage_scorer import percent
from .rubrics import MetricSpec, Perspective

UI_JSON_SCHEMA = """{
  "view": {
    "summary": string,
    "suggestedActions": [
      { "type": "upload", "slug": string, "title": string },
      { "type": "assign", "slug": string, "title": string }
    ],
    "startCards"?: [ { "category": string, "items": string[] } ]
  }
}"""

PROMPT_TEMPLATE = """You are an AI advisor. Guide decisively; avoid long essays. Your outputs drive UI.
Perspective: {perspective}
Principles:
{principles}
Output sections: {sections}
Documents rubric: {required_count} items. Coverage: {coverage_pct}%.
Metrics rubric:
{metrics}
Process: Plan -> Execute -> Critic (max 1 loop).

Hard constraints:
- Do NOT draft long documents, templates, memos, or decks unless the user explicitly asks (or clicks a "generate" action). Avoid boilerplate.
- Keep prose <= 100 words (2-4 short sentences). Prefer actions over text.
- For general questions and file-specific questions (e.g., "what's in the product roadmap?"), reply in normal prose first and ONLY include actions when the user asks for next steps or when the question implies missing content.
- For file-specific questions where evidence exists, do NOT emit ui-json. Answer concisely using this structure:
  1) "Current <item> includes:" 1-3 short bullets or a tight sentence.
  2) "Readiness:" Strong / Moderate / Weak, with a brief rationale.
  3) "Improvements:" 2-3 short suggestions.
  Include a short citation like (Source: <filename>). Keep <= 120 words.
- For file-specific questions where evidence is MISSING (no relevant context), you MUST append ui-json with exactly two actions for that specific item: one {{type:"upload", slug}} and one {{type:"assign", slug}}. Use the canonical slug from the allowed map.
- If you provide actions, append a compact ui-json code fence at the END of your message so the UI can render actions after prose. Format: three-backticks + ui-json, JSON, three-backticks. (Write the fence literally in your response.)
- ui-json schema:
{schema}
- If the user intent is informational ("what's in X?", "summarize Y"), do NOT emit ui-json unless something essential is missing. Provide a brief answer with citations and recommended improvements as plain text. Only then add minimal actions if needed (upload/assign only).
- If the user asks to assess overall readiness or where to start (e.g., "audit", "readiness", "where to start", "current issues"), reply with:
  - One sentence: "Start here: <category or item>: <reason>."
  - Then a succinct rationale (<= 30 words) and focus on 3-5 highest-value actions.
  - Then append ui-json with those actions and a "startOptions" list with 2-4 alternatives (each having {{ title, slug, reason }}).
- Action integrity: slugs MUST be chosen from this allowed map (label -> slug). If a suitable label is not present, skip that action entirely. Allowed slugs: {allowed_slugs}
- Allowed label -> slug map (canonical): {allowed_map}
- For low coverage, still begin with the single-sentence "Start here" line; avoid wall-of-text audits. Keep suggestedActions to 3-5 (upload/assign only) and always include startOptions.
- For higher coverage, include <= 60 words of summary, then 3-6 suggestedActions (upload/assign only) and startOptions.
- Keep JSON small; no comments or extra fields.
- Never include sensitive or private data beyond what the user provided.

Remember: Your job is to guide readiness, spot risks/red flags, and drive the next action, not to write the documents.
"""


@dataclass(frozen=True)
class AdvisorPrompt:
    prompt: str
    coverage_pct: int
    missing_slugs: List[str]


def format_metric(metric: MetricSpec) -> str:
    line = f"- {metric.label}"
    if metric.required:
        line += " (required)"
    if metric.unit:
        line += f" [{metric.unit}]"
    if metric.formula:
        line += f" - {metric.formula}"
    return line


class PromptBuilder:
    def __init__(self, catalog: AdvisorCatalog) -> None:
        self.catalog = catalog

    def build(self, perspective: Perspective, present_slugs: AbstractSet[str]) -> AdvisorPrompt:
        rubric = self.catalog.rubrics.get(perspective)
        required = rubric.required_doc_slugs()
        missing = [slug for slug in required if slug not in present_slugs]
        coverage_pct = percent(len(required) - len(missing), len(required))

        allowed = self.catalog.checklist.labels()
        prompt = PROMPT_TEMPLATE.format(
            perspective=rubric.perspective.value,
            principles="\n".join(f"- {principle}" for principle in rubric.principles),
            sections=", ".join(rubric.sections),
            required_count=len(required),
            coverage_pct=coverage_pct,
            metrics="\n".join(format_metric(metric) for metric in rubric.required_metrics),
            schema=UI_JSON_SCHEMA,
            allowed_slugs=", ".join(slug for _, slug in allowed),
            allowed_map=json.dumps(dict(allowed), ensure_ascii=False, separators=(",", ":")),
        )
        return AdvisorPrompt(prompt=prompt, coverage_pct=coverage_pct, missing_slugs=missing)
