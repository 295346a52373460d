"""
Tests for the RoutingService implementation.

Covers keyword classification, strength matching, the priority/cost/order
tie-break and the auto-routing-disabled path.
"""
import pytest
from hypothesis import given, settings as hypothesis_settings, strategies as st

from aia_orchestrator.domains.providers import Provider, ProviderKind
from aia_orchestrator.domains.routing import RoutingCategory
from aia_orchestrator.domains.settings import OrchestrationSettings
from aia_orchestrator.exceptions import RoutingError
from aia_orchestrator.services.routing import RoutingService


@pytest.fixture
def routing_service():
    return RoutingService()


@pytest.fixture
def coding_and_creative(provider_factory):
    return [
        provider_factory(id="coder", name="Coder", strengths=["coding"], priority=50),
        provider_factory(id="writer", name="Writer", strengths=["creative"], priority=90),
    ]


class TestClassifyPrompt:
    @pytest.mark.parametrize(
        "prompt, category",
        [
            ("Write a Fibonacci function in Python", RoutingCategory.CODING),
            ("Solve this equation for x", RoutingCategory.MATH),
            ("Compare these two quarterly reports", RoutingCategory.ANALYSIS),
            ("Write me a poem about autumn", RoutingCategory.CREATIVE),
            ("What is on my todo list", RoutingCategory.TASK_MANAGEMENT),
            ("Give me a tldr of this article", RoutingCategory.SUMMARIZATION),
            ("Explain photosynthesis", RoutingCategory.RESEARCH),
            ("Hello there", RoutingCategory.CONVERSATION),
            ("C# generics question", RoutingCategory.CODING),
        ],
    )
    def test_categories(self, routing_service, prompt, category):
        assert routing_service.classify_prompt(prompt) == category

    def test_no_match(self, routing_service):
        assert routing_service.classify_prompt("Zebras gallop") is None
        assert routing_service.classify_prompt("") is None

    def test_keywords_match_whole_words(self, routing_service):
        # "this" contains "hi", "capital" contains "api"
        assert routing_service.classify_prompt("Is this the capital") is None

    def test_earlier_category_wins(self, routing_service):
        # "debug" is coding, "story" is creative; coding is checked first
        assert routing_service.classify_prompt("Debug my story generator") == RoutingCategory.CODING


class TestSelectProvider:
    def test_fibonacci_goes_to_coding_provider(self, routing_service, settings, coding_and_creative):
        chosen = routing_service.select_provider(
            "Write a Fibonacci function in Python", settings, coding_and_creative
        )
        assert chosen.id == "coder"

    def test_no_strength_match_uses_all_enabled(self, routing_service, settings, coding_and_creative):
        chosen = routing_service.select_provider("Solve this equation", settings, coding_and_creative)
        assert chosen.id == "writer"

    def test_unclassified_prompt_uses_priority(self, routing_service, settings, coding_and_creative):
        chosen = routing_service.select_provider("Zebras gallop", settings, coding_and_creative)
        assert chosen.id == "writer"

    def test_disabled_providers_ignored(self, routing_service, settings, provider_factory):
        providers = [
            provider_factory(id="off", strengths=["coding"], priority=100, enabled=False),
            provider_factory(id="on", priority=1),
        ]
        assert routing_service.select_provider("python code", settings, providers).id == "on"

    def test_cost_breaks_priority_ties(self, routing_service, settings, provider_factory):
        providers = [
            provider_factory(id="pricey", cost_per_million_tokens=15.0),
            provider_factory(id="cheap", cost_per_million_tokens=0.5),
        ]
        assert routing_service.select_provider("hello", settings, providers).id == "cheap"

    def test_registration_order_breaks_full_ties(self, routing_service, settings, provider_factory):
        providers = [provider_factory(id="first"), provider_factory(id="second")]
        assert routing_service.select_provider("hello", settings, providers).id == "first"

    def test_no_enabled_providers(self, routing_service, settings, provider_factory):
        with pytest.raises(RoutingError):
            routing_service.select_provider("hello", settings, [provider_factory(enabled=False)])
        with pytest.raises(RoutingError):
            routing_service.select_provider("hello", settings, [])

    def test_auto_routing_disabled_uses_default(self, routing_service, provider_factory):
        settings = OrchestrationSettings(enable_auto_routing=False)
        providers = [
            provider_factory(id="coder", strengths=["coding"], priority=100),
            provider_factory(id="default", is_default=True, priority=1),
        ]
        assert routing_service.select_provider("python code", settings, providers).id == "default"

    def test_auto_routing_disabled_without_default(self, routing_service, provider_factory):
        settings = OrchestrationSettings(enable_auto_routing=False)
        providers = [
            provider_factory(id="off", is_default=True, enabled=False),
            provider_factory(id="first"),
            provider_factory(id="second", priority=99),
        ]
        assert routing_service.select_provider("hi", settings, providers).id == "first"


provider_specs = st.lists(
    st.tuples(
        st.integers(min_value=0, max_value=100),
        st.sampled_from([0.0, 1.0, 2.5]),
        st.sets(st.sampled_from(["coding", "creative", "math", "research"])),
    ),
    min_size=1,
    max_size=5,
)


@hypothesis_settings(deadline=None)
@given(
    specs=provider_specs,
    prompt=st.sampled_from(
        ["Write python code", "A poem please", "Solve the integral", "Zebras", "Explain tides"]
    ),
)
def test_selection_is_deterministic_and_best_ranked(specs, prompt):
    service = RoutingService()
    settings = OrchestrationSettings()
    providers = [
        Provider(
            id=f"p{i}",
            name=f"P{i}",
            kind=ProviderKind.OPENAI,
            priority=priority,
            cost_per_million_tokens=cost,
            strengths=strengths,
        )
        for i, (priority, cost, strengths) in enumerate(specs)
    ]

    first = service.select_provider(prompt, settings, providers)
    second = service.select_provider(prompt, settings, list(providers))
    assert first.id == second.id

    category = service.classify_prompt(prompt)
    pool = [p for p in providers if category and category.value in p.strengths] or providers
    assert first in pool
    assert all(
        (first.priority, -first.cost_per_million_tokens) >= (p.priority, -p.cost_per_million_tokens)
        for p in pool
    )


@hypothesis_settings(deadline=None)
@given(prompt=st.text(max_size=60))
def test_single_default_returned_when_auto_routing_disabled(prompt):
    settings = OrchestrationSettings(enable_auto_routing=False)
    providers = [
        Provider(id="a", name="A", kind=ProviderKind.OPENAI, priority=99, strengths=["coding"]),
        Provider(id="b", name="B", kind=ProviderKind.OPENAI, is_default=True),
    ]
    assert RoutingService().select_provider(prompt, settings, providers).id == "b"
