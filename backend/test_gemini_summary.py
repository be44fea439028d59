"""Tests for the Gemini report summary service, with the SDK client stubbed out."""
from types import SimpleNamespace

from smartsplit.core import ActivityService
from smartsplit.expenses.models import Expense
from smartsplit.groups.models import Group
from smartsplit.services.gemini_summary import (
    DISABLED_MESSAGE, ERROR_MESSAGE, NO_DATA_MESSAGE, GeminiSummaryService,
)
from smartsplit.users.model import User


class FakeModels:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append(model)
        if model in self.failing:
            raise RuntimeError(f"{model} unavailable")
        return SimpleNamespace(text=f"summary from {model}")


def service_with(models):
    service = GeminiSummaryService(api_key=None, model="gemini-2.5-flash")
    service.client = SimpleNamespace(models=models)
    return service


REPORT = [{"group_name": "Goa", "members": ["a@example.com"], "expenses": []}]


def test_disabled_without_key():
    service = GeminiSummaryService(api_key=None)
    assert not service.is_available()
    assert service.generate_report_summary("a@example.com", REPORT) == DISABLED_MESSAGE


def test_no_data_message():
    assert service_with(FakeModels()).generate_report_summary("a@example.com", []) == NO_DATA_MESSAGE


def test_uses_configured_model_first():
    models = FakeModels()
    assert service_with(models).generate_report_summary("a@example.com", REPORT) == "summary from gemini-2.5-flash"
    assert models.calls == ["gemini-2.5-flash"]


def test_falls_back_when_a_model_fails():
    models = FakeModels(failing={"gemini-2.5-flash"})
    result = service_with(models).generate_report_summary("a@example.com", REPORT)
    assert result == "summary from gemini-2.0-flash"


def test_error_message_when_every_model_fails():
    models = FakeModels(failing={"gemini-2.5-flash", "gemini-2.0-flash", "gemini-flash-latest"})
    assert service_with(models).generate_report_summary("a@example.com", REPORT) == ERROR_MESSAGE


def test_report_data_only_covers_users_groups():
    users = [User(id="a", email="a@example.com"), User(id="b", email="b@example.com")]
    groups = [
        Group(id="g1", name="Goa", members=["a@example.com", "b@example.com"]),
        Group(id="g2", name="Office", members=["b@example.com"]),
    ]
    expenses = [
        Expense(id="e1", description="Villa", amount=90, paid_by="b", participants=["a", "b"],
                group_id="g1", category="Accommodation"),
        Expense(id="e2", description="Lunch", amount=20, paid_by="b", participants=["b"], group_id="g2"),
    ]
    data = ActivityService.report_data("a@example.com", users, groups, expenses)
    assert data == [{
        "group_name": "Goa",
        "members": ["a@example.com", "b@example.com"],
        "expenses": [{"description": "Villa", "amount": 90, "category": "Accommodation",
                      "paid_by": "b@example.com"}],
    }]
    prompt = GeminiSummaryService.build_prompt("a@example.com", data)
    assert "a@example.com" in prompt and "Villa" in prompt
