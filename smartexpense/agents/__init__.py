"""AI Agents package."""

from smartexpense.agents.advisor import (
    EMPTY_REPLY_MESSAGE,
    ERROR_MESSAGE,
    OFFLINE_MESSAGE,
    AiUnavailableError,
    FinancialAdvisor,
    build_tips_prompt,
    format_recent_activity,
)

__all__ = [
    "EMPTY_REPLY_MESSAGE",
    "ERROR_MESSAGE",
    "OFFLINE_MESSAGE",
    "AiUnavailableError",
    "FinancialAdvisor",
    "build_tips_prompt",
    "format_recent_activity",
]
