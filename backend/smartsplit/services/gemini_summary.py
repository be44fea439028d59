"""
Gemini Summary Service for spending reports.
Uses Google's Gemini API to turn a user's group expenses into a short markdown summary.
"""
import json
from typing import Any, Dict, List, Optional

from google import genai

DISABLED_MESSAGE = "AI features are disabled. API key not configured."
NO_DATA_MESSAGE = "No group data available to generate a summary."
ERROR_MESSAGE = "There was an error generating the AI summary. Please try again later."

PROMPT_TEMPLATE = """
You are a financial analyst summarizing expense data from a Splitwise-like app.
The user's email is {email}.
Analyze the following expense data and provide a concise, insightful summary.
Focus on:
1. Overall spending habits across all groups.
2. The group with the most spending.
3. The top spending categories for the user.
4. Who is the biggest spender and who has contributed the least.
5. Provide a friendly and encouraging closing remark.

Do not just list the data, provide qualitative analysis. Format the output as clean markdown.

Here is the data in JSON format:
{data}
"""


class GeminiSummaryService:
    """Service for summarizing group spending with Gemini text models."""

    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.5-flash"):
        self.client = None
        self.model = model
        if not api_key:
            print("[Gemini] Warning: GEMINI_API_KEY or GOOGLE_API_KEY not configured. AI summaries disabled.")
            return
        try:
            self.client = genai.Client(api_key=api_key)
            print("[Gemini] Summary service initialized")
        except Exception as e:
            print(f"[Gemini] Warning: Failed to initialize Gemini client: {e}")

    def is_available(self) -> bool:
        return self.client is not None

    @staticmethod
    def build_prompt(user_email: str, report_data: List[Dict[str, Any]]) -> str:
        return PROMPT_TEMPLATE.format(email=user_email, data=json.dumps(report_data, indent=2))

    def generate_report_summary(self, user_email: str, report_data: List[Dict[str, Any]]) -> str:
        """
        Summarize the user's group spending.

        Returns:
            Markdown text, or a fixed explanatory message when the service is
            unavailable, there is no data, or every model fails.
        """
        if not self.is_available():
            return DISABLED_MESSAGE

        if not report_data:
            return NO_DATA_MESSAGE

        prompt = self.build_prompt(user_email, report_data)

        # Configured model first, then older fallbacks
        models_to_try = [self.model] + [
            m for m in ('gemini-2.0-flash', 'gemini-flash-latest') if m != self.model
        ]

        for model_name in models_to_try:
            try:
                response = self.client.models.generate_content(
                    model=model_name,
                    contents=prompt
                )
                if response and response.text:
                    return response.text
            except Exception as e:
                print(f"[Gemini] Model {model_name} failed: {str(e)[:100]}")
                continue

        return ERROR_MESSAGE


# Singleton instance
_summary_service = None

def get_summary_service(api_key: Optional[str] = None, model: str = "gemini-2.5-flash") -> GeminiSummaryService:
    """Get or create the singleton summary service instance."""
    global _summary_service
    if _summary_service is None:
        _summary_service = GeminiSummaryService(api_key=api_key, model=model)
    return _summary_service


def reset_summary_service():
    global _summary_service
    _summary_service = None
