"""Token usage bookkeeping for the optional LLM calls.

Records input/output token counts from anthropic SDK responses and
summarizes them overall, per pipeline component and per function, with a
cost estimate priced by model family.
"""

from __future__ import annotations

import datetime
from dataclasses import asdict, dataclass
from typing import Any, Callable

# ---------------------------------------------------------------------------
# Pricing (USD per million tokens), matched on model family
# ---------------------------------------------------------------------------
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "haiku": (1.00, 5.00),
    "sonnet": (3.00, 15.00),
    "opus": (15.00, 75.00),
}
DEFAULT_PRICING_FAMILY = "haiku"

# ---------------------------------------------------------------------------
# Registry: LLM function name -> pipeline component
# ---------------------------------------------------------------------------
LLM_FUNCTION_REGISTRY: dict[str, str] = {
    "generate_insight_narrative_llm": "Portfolio Advisor",
}
UNKNOWN_COMPONENT = "Unknown"


def _pricing_for(model: str) -> tuple[float, float]:
    name = (model or "").lower()
    for family, pricing in MODEL_PRICING.items():
        if family in name:
            return pricing
    return MODEL_PRICING[DEFAULT_PRICING_FAMILY]


def _compute_cost(input_tokens: int, output_tokens: int, model: str = "") -> float:
    """Cost in USD for a token count on the given model."""
    input_per_mtok, output_per_mtok = _pricing_for(model)
    return (input_tokens * input_per_mtok + output_tokens * output_per_mtok) / 1_000_000


@dataclass
class UsageRecord:
    function: str
    component: str
    model: str
    input_tokens: int
    output_tokens: int
    timestamp: str

    @property
    def cost_usd(self) -> float:
        return _compute_cost(self.input_tokens, self.output_tokens, self.model)


class TokenTracker:
    """Accumulates UsageRecords; append-only between resets."""

    def __init__(self) -> None:
        self._records: list[UsageRecord] = []

    def track(self, function_name: str, response: Any, model: str = "") -> None:
        """Record usage from an anthropic response.

        Responses without a usable `usage` block are ignored so bookkeeping
        can never break the call that produced them.
        """
        usage = getattr(response, "usage", None)
        try:
            input_tokens = int(usage.input_tokens)
            output_tokens = int(usage.output_tokens)
        except (AttributeError, TypeError, ValueError):
            return

        self._records.append(UsageRecord(
            function=function_name,
            component=LLM_FUNCTION_REGISTRY.get(function_name, UNKNOWN_COMPONENT),
            model=model or getattr(response, "model", "") or "",
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
        ))

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def get_summary(self) -> dict[str, Any]:
        """Overall totals and estimated cost."""
        total_input = sum(r.input_tokens for r in self._records)
        total_output = sum(r.output_tokens for r in self._records)
        return {
            "total_input_tokens": total_input,
            "total_output_tokens": total_output,
            "total_tokens": total_input + total_output,
            "estimated_cost_usd": round(sum(r.cost_usd for r in self._records), 4),
            "num_calls": len(self._records),
        }

    def _grouped(self, key: Callable[[UsageRecord], tuple], labels: tuple[str, ...]) -> list[dict[str, Any]]:
        groups: dict[tuple, dict[str, Any]] = {}
        for r in self._records:
            k = key(r)
            g = groups.setdefault(k, {
                **dict(zip(labels, k)),
                "input_tokens": 0,
                "output_tokens": 0,
                "calls": 0,
                "cost_usd": 0.0,
            })
            g["input_tokens"] += r.input_tokens
            g["output_tokens"] += r.output_tokens
            g["calls"] += 1
            g["cost_usd"] += r.cost_usd

        result = []
        for k in sorted(groups):
            g = groups[k]
            g["total_tokens"] = g["input_tokens"] + g["output_tokens"]
            g["cost_usd"] = round(g["cost_usd"], 4)
            result.append(g)
        return result

    def get_by_component(self) -> list[dict[str, Any]]:
        """Per-component totals, sorted by component name."""
        return self._grouped(lambda r: (r.component,), ("component",))

    def get_by_function(self) -> list[dict[str, Any]]:
        """Per-function totals, sorted by component then function."""
        return self._grouped(lambda r: (r.component, r.function), ("component", "function"))

    def records(self) -> list[dict[str, Any]]:
        return [asdict(r) for r in self._records]

    @property
    def has_records(self) -> bool:
        return bool(self._records)

    def reset(self) -> None:
        """Clear all records (useful for testing)."""
        self._records.clear()


# ---------------------------------------------------------------------------
# Module-level singleton and convenience function
# ---------------------------------------------------------------------------
tracker = TokenTracker()


def track(function_name: str, response: Any, model: str = "") -> None:
    """Convenience wrapper around the global tracker."""
    tracker.track(function_name, response, model)
