"""Terminal and markdown rendering for discovered ideas and competitor research."""

from datetime import date
from pathlib import Path

from jinja2 import Environment
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from saasfactory.core.context import MarketResearch, SaasIdea

VERDICT_LABELS = {
    "strong": "STRONG OPPORTUNITY",
    "moderate": "MODERATE OPPORTUNITY",
    "weak": "WEAK OPPORTUNITY",
    "saturated": "SATURATED MARKET",
}
_VERDICT_STYLES = {"strong": "green", "moderate": "yellow", "weak": "red", "saturated": "red"}
_DIFFICULTY_STYLES = {
    "trivial": "green",
    "easy": "green",
    "moderate": "yellow",
    "challenging": "dark_orange",
    "complex": "red",
}

_REPORT_TEMPLATE = """\
# Market Research Report: {{ name }}

Generated by SaasFactory on {{ today }}

---

## Executive Summary

**Idea:** {{ r.idea_summary }}

**Market Validation Score:** {{ r.market_validation.score }}/10 - {{ verdict }}

{{ r.market_validation.reasoning }}
{% if r.market_size %}
**Estimated Market Size:** {{ r.market_size }}
{% endif %}
---

## Target Audience

{% for a in r.target_audience %}- {{ a }}
{% endfor %}
---

## Competitive Landscape
{% if not r.competitors %}
*No direct competitors identified. This could indicate a blue ocean opportunity or an untested market.*
{% endif %}
{% for c in r.competitors %}
### {{ loop.index }}. {{ c.name }}
{% if c.url %}
**Website:** [{{ c.url }}]({{ c.url }})
{% endif %}
{{ c.description }}
{% if c.pricing %}
**Pricing:** {{ c.pricing }}
{% endif %}{% if c.features %}
**Key Features:**
{% for f in c.features %}- {{ f }}
{% endfor %}{% endif %}{% if c.strengths %}
**Strengths:**
{% for s in c.strengths %}- {{ s }}
{% endfor %}{% endif %}{% if c.weaknesses %}
**Weaknesses:**
{% for w in c.weaknesses %}- {{ w }}
{% endfor %}{% endif %}
{% endfor %}
---

## Market Opportunities

{% for o in r.opportunities %}- {{ o }}
{% endfor %}
## Potential Risks

{% for x in r.risks %}- {{ x }}
{% endfor %}
## Feature Ideas

{% for f in r.feature_ideas %}{{ loop.index }}. {{ f }}
{% endfor %}
## Strategic Recommendations

{% for x in r.recommendations %}{{ loop.index }}. {{ x }}
{% endfor %}
## Next Steps

{{ next_steps }}

---

*This report was generated by SaasFactory using AI-powered market research.*
"""

_NEXT_STEPS = {
    "saturated": (
        "**Caution:** The market appears saturated. Before proceeding, consider:\n"
        "1. Finding a unique angle or niche\n"
        "2. Focusing on underserved audience segments\n"
        "3. Differentiating through superior UX or pricing"
    ),
    "weak": (
        "**Caution:** Market opportunity appears weak. Consider:\n"
        "1. Validating demand through customer interviews\n"
        "2. Building a waitlist before development\n"
        "3. Starting with an MVP to test assumptions"
    ),
}
_PROCEED = (
    "**Proceed with confidence.** Key actions:\n"
    "1. Focus on the identified opportunities\n"
    "2. Differentiate from competitors on key weaknesses\n"
    "3. Target the specific audience segments identified"
)

_env = Environment(keep_trailing_newline=True, autoescape=False)


def verdict_label(verdict: str | None) -> str:
    return VERDICT_LABELS.get((verdict or "").lower(), "MODERATE OPPORTUNITY")


def difficulty_stars(score: int) -> str:
    """More filled stars means easier to build."""
    score = max(1, min(5, score))
    return "★" * (6 - score) + "☆" * (score - 1)


def score_bar(score: int, width: int = 10) -> str:
    score = max(0, min(width, score))
    return "█" * score + "░" * (width - score)


def idea_hint(idea: SaasIdea) -> str:
    """One-line label used next to an idea in selection lists."""
    return (
        f"{difficulty_stars(idea.difficulty.score)} {idea.difficulty.label} | "
        f"{idea.market_opportunity.score}/10 market | {idea.income.monthly_potential}"
    )


def render_ideas_list(console: Console, ideas: list[SaasIdea]) -> None:
    table = Table(title="Discovered SaaS Ideas", title_style="bold magenta", show_lines=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Idea", style="bold")
    table.add_column("Difficulty")
    table.add_column("Market")
    table.add_column("Income", style="green")
    for index, idea in enumerate(ideas, start=1):
        diff_style = _DIFFICULTY_STYLES.get(idea.difficulty.label, "yellow")
        verdict_style = _VERDICT_STYLES.get(idea.market_opportunity.verdict, "yellow")
        table.add_row(
            str(index),
            Text.assemble((idea.name, "bold"), "\n", (f'"{idea.tagline}"', "dim")),
            Text.assemble(
                (f"{difficulty_stars(idea.difficulty.score)} {idea.difficulty.label}", diff_style),
                "\n",
                (idea.difficulty.estimated_hours, "dim"),
            ),
            Text(f"{idea.market_opportunity.score}/10 {idea.market_opportunity.verdict}", style=verdict_style),
            f"{idea.income.monthly_potential}\n({idea.income.model})",
        )
    console.print(table)


def render_idea_details(console: Console, idea: SaasIdea) -> None:
    market = idea.market_opportunity
    verdict_style = _VERDICT_STYLES.get(market.verdict, "yellow")
    console.print(f"\n[bold magenta]▸ {idea.name}[/]  [dim]\"{idea.tagline}\"[/]\n")
    console.print(f"[dim]Description:[/] {idea.description}")
    console.print(f"[dim]Problem solved:[/] {idea.problem_solved}")
    console.print(f"[dim]Target audience:[/] {', '.join(idea.target_audience)}")
    console.print(f"[dim]Core features:[/] {', '.join(idea.core_features)}\n")

    market_lines = [
        f"Score: [{verdict_style}]{market.score}/10 {score_bar(market.score)}[/]",
        f"Verdict: [{verdict_style}]{market.verdict.upper()}[/]",
        f"[dim]{market.reasoning}[/]",
    ]
    if market.competitors:
        market_lines.append(f"[dim]Competitors:[/] {', '.join(market.competitors)}")
    market_lines.append(f"[dim]Gap:[/] {market.gap}")
    console.print(Panel("\n".join(market_lines), title="Market Opportunity", border_style="magenta"))

    diff = idea.difficulty
    strengths = "\n".join(f"  [green]✓[/] {s}" for s in diff.ai_strengths)
    console.print(
        Panel(
            f"{difficulty_stars(diff.score)} {diff.label.upper()} ({diff.score}/5)\n"
            f"[dim]Estimated build time:[/] {diff.estimated_hours}\n"
            f"[dim]{diff.reasoning}[/]\n{strengths}",
            title="Build Difficulty",
            border_style="purple",
        )
    )

    marketing = idea.marketing
    tactics = "\n".join(f"  [cyan]{t.channel}[/]: {t.approach}" for t in marketing.tactics[:3])
    console.print(
        Panel(
            f"[dim]Channels:[/] {', '.join(marketing.primary_channels)}\n"
            f"[dim]Cost:[/] {marketing.estimated_cost} | "
            f"[dim]Time to first users:[/] {marketing.time_to_first_users}\n"
            f"{marketing.launch_strategy}" + (f"\n{tactics}" if tactics else ""),
            title="Marketing Strategy",
            border_style="green",
        )
    )

    income = idea.income
    revenue = f"\n[dim]Time to first revenue:[/] {income.time_to_first_revenue}" if income.time_to_first_revenue else ""
    console.print(
        Panel(
            f"[dim]Model:[/] {income.model}\n"
            f"[dim]Suggested pricing:[/] {income.suggested_pricing}\n"
            f"[bold green]Monthly potential: {income.monthly_potential}[/]{revenue}",
            title="Income Potential",
            border_style="yellow",
        )
    )
    if idea.sources:
        console.print("[dim]Sources researched: " + ", ".join(idea.sources[:5]) + "[/]")


def render_research_summary(console: Console, research: MarketResearch) -> None:
    validation = research.market_validation
    style = _VERDICT_STYLES.get(validation.verdict, "yellow")
    header = Group(
        Text.from_markup(f"[dim]Idea:[/] {research.idea_summary}"),
        Text.from_markup(
            f"[{style}]{validation.score}/10 [{score_bar(validation.score)}] {verdict_label(validation.verdict)}[/]"
        ),
        Text(validation.reasoning, style="dim"),
    )
    console.print(Panel(header, title="Market Research Results", border_style="magenta"))
    if research.market_size:
        console.print(f"[dim]Market size:[/] {research.market_size}")
    if research.target_audience:
        console.print(f"[dim]Target audience:[/] {', '.join(research.target_audience)}")

    table = Table(title=f"Competitors Found: {len(research.competitors)}", show_lines=True)
    table.add_column("Competitor", style="bold")
    table.add_column("Pricing")
    table.add_column("Features")
    for i, comp in enumerate(research.competitors, start=1):
        table.add_row(
            f"{i}. {comp.name}\n[cyan]{comp.url}[/]",
            comp.pricing or "",
            ", ".join(comp.features[:3]),
        )
    if research.competitors:
        console.print(table)

    for title, items, style in (
        ("Opportunities", research.opportunities, "green"),
        ("Risks", research.risks, "yellow"),
        ("Feature Ideas", research.feature_ideas[:5], "cyan"),
        ("Recommendations", research.recommendations, "magenta"),
    ):
        if items:
            console.print(f"[{style}]{title}:[/]")
            for item in items:
                console.print(f"  [{style}]•[/] {item}")


def research_one_liner(research: MarketResearch) -> str:
    v = research.market_validation
    return (
        f"Score: {v.score}/10 ({verdict_label(v.verdict)}) | {len(research.competitors)} competitors found | "
        f"{len(research.opportunities)} opportunities identified"
    )


def render_research_markdown(research: MarketResearch, project_name: str, today: date | None = None) -> str:
    verdict = research.market_validation.verdict
    return _env.from_string(_REPORT_TEMPLATE).render(
        name=project_name,
        today=(today or date.today()).isoformat(),
        r=research,
        verdict=verdict_label(verdict),
        next_steps=_NEXT_STEPS.get(verdict, _PROCEED),
    )


def write_research_report(research: MarketResearch, path: Path, project_name: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_research_markdown(research, project_name), encoding="utf-8")
    return path
