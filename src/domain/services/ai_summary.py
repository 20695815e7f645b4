"""Advisory AI read of an employee's self-assessment.

The summary is returned to the reviewer only; nothing is written back into
the record.
"""

from __future__ import annotations

import json

import structlog
from src.domain.models import Assessment
from src.libs.gpt_client import GPTClientError, GPTClientProtocol

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are an HR assistant helping a line manager prepare a performance review. "
    "Be concise, factual and neutral."
)


class SummaryUnavailableError(Exception):
    """Raised when the summary service cannot produce an analysis."""


def build_prompt(record: Assessment) -> str:
    kpis = [
        {
            "title": kpi.title,
            "selfRating": kpi.self_rating.value if kpi.self_rating else None,
            "selfComments": kpi.self_comments,
        }
        for kpi in record.kpis
    ]
    return (
        f"Analyze the following performance appraisal for "
        f"{record.employee_details.full_name or 'the employee'}.\n"
        "Provide a concise summary for the manager focusing on:\n"
        "1. Key achievements based on employee comments.\n"
        "2. Potential areas for development.\n"
        "3. A suggested overall rating based on the provided evidence.\n\n"
        "Employee Data:\n"
        f"KPIs: {json.dumps(kpis, ensure_ascii=False)}\n"
        f"Development Plan: {record.development_plan.self_comments}\n"
        f"Overall Self-Comments: {record.overall_performance.self_comments}\n"
    )


class AssessmentSummarizer:
    def __init__(self, client: GPTClientProtocol) -> None:
        self.client = client

    async def summarize(self, record: Assessment) -> str:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(record)},
        ]
        try:
            response = await self.client.chat_completion(messages, temperature=0.7)
        except GPTClientError as exc:
            await logger.awarning("ai_summary_failed", assessment_id=record.id, error=str(exc))
            raise SummaryUnavailableError(f"AI analysis unavailable: {exc}") from exc

        await logger.ainfo(
            "ai_summary_generated",
            assessment_id=record.id,
            model=response.model,
            latency_ms=response.latency_ms,
        )
        return response.content.strip() or "No analysis generated."
