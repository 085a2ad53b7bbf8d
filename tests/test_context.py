"""Tests for the project context model and the wizard's view of it."""

import pytest
from pydantic import ValidationError

from saasfactory.core.config import UserConfig
from saasfactory.core.context import (
    IncomeProjection,
    ProjectContext,
    SaasIdea,
    create_default_context,
    display_name_for,
    infer_pricing,
    infer_saas_type,
    sanitize_project_name,
)
from saasfactory.wizard.context import WizardContext


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Acme App", "acme-app"),
        ("  --My__Great  SaaS!! ", "my-great-saas"),
        ("InvoicePing", "invoiceping"),
        ("!!!", ""),
    ],
)
def test_sanitize_project_name(raw: str, expected: str) -> None:
    assert sanitize_project_name(raw) == expected


def test_display_name_for() -> None:
    assert display_name_for("acme-app") == "Acme App"


def test_project_name_is_validated() -> None:
    with pytest.raises(ValidationError):
        ProjectContext(name="Not Valid", display_name="x")


def test_default_context_serializes_camel_case() -> None:
    project = create_default_context("acme-app", "Invoices for freelancers")
    data = project.model_dump(by_alias=True)
    assert data["displayName"] == "Acme App"
    assert data["saasType"] == "b2b"
    assert data["pricing"]["tiers"][1]["highlighted"] is True


def test_inference_from_idea() -> None:
    idea = SaasIdea(id="x", name="X", target_audience=["Small business owners"])
    assert infer_saas_type(idea) == "b2b"
    idea = SaasIdea(id="y", name="Y", target_audience=["Indie developers"])
    assert infer_saas_type(idea) == "tool"
    idea = SaasIdea(id="z", name="Z", target_audience=["Students"], income=IncomeProjection(model="usage-based"))
    assert infer_saas_type(idea) is None
    assert infer_pricing(idea) is None


def test_to_project_prefers_user_tagline_and_choices() -> None:
    ctx = WizardContext(user_config=UserConfig())
    ctx.name = "acme-app"
    ctx.description = "Invoices for freelancers, sent on time"
    ctx.pricing_type = "subscription"
    ctx.selected_features = ["reminders"]
    ctx.content.tagline = "AI tagline"
    ctx.tagline = "Mine"
    ctx.domain = "acme.com"
    project = ctx.to_project()
    assert project.pricing.type == "subscription"
    assert project.features.extras == ["reminders"]
    assert project.features.analytics == "plausible"
    assert project.content.tagline == "Mine"
    assert project.domain == "acme.com"
    # the wizard's own content is not mutated
    assert ctx.content.tagline == "AI tagline"
