"""
Simulation Audit Narrative for GridPilot X

Turns dispatch simulator telemetry into an HTML fragment written by Claude
(daily schedule, cost-optimal timeline, improvement suggestions).

analyze_simulation() never raises: on any failure the caller receives a
rendered error fragment it can drop straight into the page.
"""

import json
import logging
import re
from html import escape
from typing import Optional

import anthropic

from gridpilot.config import DEFAULT_MODEL, Settings
from gridpilot.models import SimulationParams, SimulationResult

logger = logging.getLogger(__name__)

PROJECT_NAME = "GridPilot X"
NODE_NAME = "AGRA-DEI"

MISSING_KEY_FRAGMENT = (
    "<div class='p-4 bg-red-50 text-red-600 rounded-lg border border-red-100 font-mono text-xs'>"
    "[SYSTEM ERROR] CRITICAL: Node connectivity failure. API Key not detected.</div>"
)

_HTML_FENCE = re.compile(r"```(?:html)?")


def _mean(values) -> float:
    values = list(values or [])
    return sum(values) / len(values) if values else 0.0


def format_data_for_prompt(result: SimulationResult, params: SimulationParams) -> str:
    """Compact JSON summary of a simulation run for the prompt."""
    summary = {
        "meta": {
            "project": PROJECT_NAME,
            "node": NODE_NAME,
            "scenario": params.get("scenario"),
            "weather": params.get("weather"),
            "cloudCoverAvg": f"{_mean(params.get('hourly_cloud')):.1f}",
            "tempCAvg": f"{_mean(params.get('hourly_temp')):.1f}",
        },
        "audit": result.get("audit", {}),
        "telemetry": [
            {
                "t": h["hour"],
                "load": round(h["adjusted_load_mw"], 3),
                "gen": round(h["solar_mw"], 3),
                "grid_in": round(h["grid_import_mw"], 3),
                "grid_out": round(h["grid_export_mw"], 3),
                "batt": round(h["battery_flow_mw"], 3),
                "soc": round(h["soc_state_percent"]),
                "price": h["price_inr"],
            }
            for h in result.get("hourly_data", [])
        ],
    }
    return json.dumps(summary)


def build_prompt(result: SimulationResult, params: SimulationParams) -> str:
    return f"""
**Role:** Lead Microgrid Systems Engineer.
**Objective:** Perform a Gap Analysis & Power Quality Audit for Agra Node.

**REQUIRED OUTPUT (HTML Only):**
1. **Daily Scheduling Algorithm Output:** Concisely list the 24h plan.
2. **Cost-Optimal Timeline:** Horizontal flexbox timeline.
3. **Scope of Improvement:** 2 concrete suggestions.

**Context Data:** {format_data_for_prompt(result, params)}

**Styling Rules:** Industrial Light theme. No Markdown.
"""


def error_fragment(message: str) -> str:
    return ("<div class=\"p-6 bg-slate-50 border border-brand-border rounded-lg text-brand-text\">"
            f"Analysis Unavailable. Error: {escape(message)}</div>")


async def analyze_simulation(
    result: SimulationResult,
    params: SimulationParams,
    settings: Optional[Settings] = None,
    client: Optional[anthropic.AsyncAnthropic] = None,
) -> str:
    """
    Ask Claude for an HTML audit of a simulation run. Never raises.

    Args:
        result: Simulator output (hourly telemetry + audit summary)
        params: Scenario parameters, including the weather arrays used
        settings: Configuration (defaults to Settings.from_env())
        client: Injected Anthropic client

    Returns:
        HTML fragment (analysis, or an error fragment)
    """
    settings = settings or Settings.from_env()

    if client is None:
        if not settings.anthropic_api_key:
            logger.error("[analyze_simulation] ANTHROPIC_API_KEY missing")
            return MISSING_KEY_FRAGMENT
        client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)

    try:
        prompt = build_prompt(result, params)
        logger.info(f"[analyze_simulation] Requesting audit narrative ({len(prompt)} chars)...")

        response = await client.messages.create(
            model=settings.model or DEFAULT_MODEL,
            max_tokens=4096,
            temperature=0.2,
            messages=[{"role": "user", "content": prompt}],
        )

        text = "".join(getattr(block, "text", "") or "" for block in (response.content or [])
                       if getattr(block, "type", None) == "text")
        html = _HTML_FENCE.sub("", text).strip()
        if not html:
            raise ValueError("Empty response from AI")

        logger.info(f"[analyze_simulation] [OK] {len(html)} chars of HTML")
        return html

    except Exception as e:
        logger.error(f"[analyze_simulation] Narrative failed: {e}", exc_info=True)
        return error_fragment(str(e) or type(e).__name__)
