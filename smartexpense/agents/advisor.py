"""
AI Financial Advisor

Thin pass-through to Gemini that turns the current figures and the most
recent transactions into three short tips.

CRITICAL BOUNDARIES:
- The advisor only READS a snapshot of already-computed data
- It never writes to the record store or calls back into the session
- It never raises: no key -> offline message, provider failure -> fixed
  fallback message
"""

from typing import Optional, Sequence

import google.generativeai as genai
from tenacity import Retrying, stop_after_attempt, wait_exponential

from smartexpense.audit import AuditLogger
from smartexpense.config import AppSettings, GeminiSettings, get_settings
from smartexpense.errors import SmartExpenseError
from smartexpense.models.finance import FinancialStats, Transaction


OFFLINE_MESSAGE = (
    "AI insights are offline. Add a GEMINI_API_KEY to your .env file "
    "to get personalised tips."
)
ERROR_MESSAGE = "Start adding transactions to get AI-powered financial advice."
EMPTY_REPLY_MESSAGE = "Keep tracking your expenses to see detailed AI insights here!"


class AiUnavailableError(SmartExpenseError):
    """No credential configured, or the provider call failed."""

    user_message = "AI insights are unavailable right now."


def format_recent_activity(transactions: Sequence[Transaction], limit: int = 5) -> str:
    """'{date}: {type} of ${amount} in {category}' for the first `limit` entries."""
    return ", ".join(
        f"{t.date.isoformat()}: {t.type.value} of ${t.amount} in {t.category.value}"
        for t in list(transactions)[:limit]
    )


def build_tips_prompt(
    transactions: Sequence[Transaction],
    stats: FinancialStats,
    recent_count: int = 5,
    warning_ratio: float = 80.0,
) -> str:
    """Prompt asking for three actionable tips as a bulleted list."""
    prompt = f"""Act as a high-end financial advisor. Given the user's current financial status:
- Total Income: ${stats.total_income}
- Total Expense: ${stats.total_expense}
- Current Balance: ${stats.balance}
- Recent Activity: {format_recent_activity(transactions, recent_count)}

Provide 3 concise, highly actionable financial tips for this user.
Keep it professional yet encouraging. Format as a bulleted list.
If expenses are > {warning_ratio:g}% of income, add a serious but constructive warning."""

    if stats.expense_ratio > warning_ratio:
        prompt += (
            f"\nExpenses are currently {stats.expense_ratio:.0f}% of income: "
            "the warning is required."
        )
    return prompt


class FinancialAdvisor:
    """
    Generates tips with Gemini.

    A model object can be injected (tests); otherwise one is created on
    first use from GeminiSettings.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        app_settings: Optional[AppSettings] = None,
        model=None,
        audit_logger: Optional[AuditLogger] = None,
        retry_wait=None,
    ):
        self._settings = settings or get_settings().gemini
        self._app_settings = app_settings or get_settings().app
        self._model = model
        self._audit_logger = audit_logger
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=4)

    @property
    def is_online(self) -> bool:
        return self._model is not None or self._settings.is_configured

    def _get_model(self):
        """Configure Google Generative AI on first use."""
        if self._model is None:
            if not self._settings.is_configured:
                raise AiUnavailableError("GEMINI_API_KEY is not configured")
            try:
                genai.configure(api_key=self._settings.api_key)
                self._model = genai.GenerativeModel(
                    model_name=self._settings.model_name,
                    generation_config={
                        "temperature": self._settings.temperature,
                        "top_p": self._settings.top_p,
                    }
                )
            except Exception as e:
                raise AiUnavailableError(f"Gemini model setup failed: {e}") from e
        return self._model

    def _generate(self, prompt: str) -> str:
        model = self._get_model()
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._settings.max_retries),
                wait=self._retry_wait,
                reraise=True,
            ):
                with attempt:
                    response = model.generate_content(prompt)
        except Exception as e:
            raise AiUnavailableError(f"Gemini request failed: {e}") from e

        try:
            return (response.text or "").strip()
        except ValueError:
            # .text raises when the candidate was blocked or is empty
            return ""

    def get_financial_tips(
        self,
        transactions: Sequence[Transaction],
        stats: FinancialStats,
    ) -> str:
        """Three tips as a bulleted list, or one of the fixed fallback messages."""
        if not self.is_online:
            return OFFLINE_MESSAGE
        if not transactions:
            return ERROR_MESSAGE

        prompt = build_tips_prompt(
            transactions,
            stats,
            recent_count=self._app_settings.recent_transactions_for_tips,
            warning_ratio=self._app_settings.expense_warning_ratio,
        )

        try:
            text = self._generate(prompt)
        except AiUnavailableError as e:
            if self._audit_logger:
                self._audit_logger.log_external_service_error("gemini", e.message)
            return ERROR_MESSAGE

        return text or EMPTY_REPLY_MESSAGE
