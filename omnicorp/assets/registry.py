from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from omnicorp.core.events import NarrativeEvent, TriggerType
from omnicorp.core.generators import (
    GeneratorConfig,
    OwnershipRequirement,
    ResourceFlow,
    ResourceRequirement,
    UnlockRequirement,
)
from omnicorp.core.ledger import ResourceState
from omnicorp.core.upgrades import EffectType, UpgradeConfig


class AssetLoadError(RuntimeError):
    pass


# ---- Static definitions -------------------------------------------------

RESOURCES: tuple[ResourceState, ...] = (
    ResourceState(id="hcu", name="Hollow Content Units", symbol="HCU"),
    ResourceState(
        id="rd",
        name="Raw Data",
        symbol="RD",
        unlock_requirements=(OwnershipRequirement("automatedCustomerService", 1),),
    ),
    ResourceState(
        id="ha",
        name="Human Attention",
        symbol="HA",
        unlock_requirements=(OwnershipRequirement("aiGeneratedNews", 1),),
    ),
    ResourceState(
        id="pt", name="Public Trust", symbol="PT", initial=100, max=100, is_depletable=True, decay_rate=0.0001
    ),
    ResourceState(
        id="sc", name="Social Cohesion", symbol="SC", initial=100, max=100, is_depletable=True, decay_rate=0.00005
    ),
    ResourceState(
        id="es",
        name="Environmental Stability",
        symbol="ES",
        initial=100,
        max=100,
        is_depletable=True,
        decay_rate=0.0002,
    ),
    ResourceState(id="aa", name="AI Autonomy", symbol="AA", max=100),
)


def _flows(*pairs: tuple[str, float]) -> tuple[ResourceFlow, ...]:
    return tuple(ResourceFlow(resource_id=rid, amount=amount) for rid, amount in pairs)


def _needs(*pairs: tuple[str, int]) -> tuple[OwnershipRequirement, ...]:
    return tuple(OwnershipRequirement(generator_id=gid, min_owned=n) for gid, n in pairs)


def _holding(*pairs: tuple[str, float]) -> tuple[ResourceRequirement, ...]:
    return tuple(ResourceRequirement(resource_id=rid, min_amount=amount) for rid, amount in pairs)


GENERATORS: tuple[GeneratorConfig, ...] = (
    GeneratorConfig(
        id="basicAdBotFarm",
        name="Basic Ad-Bot Farm",
        category="basic",
        base_cost=10,
        growth_rate=1.15,
        outputs=_flows(("hcu", 1)),
    ),
    GeneratorConfig(
        id="clickbaitEngine",
        name="Clickbait Engine",
        category="basic",
        base_cost=100,
        growth_rate=1.2,
        outputs=_flows(("hcu", 10)),
        unlock_requirements=_needs(("basicAdBotFarm", 5)),
    ),
    GeneratorConfig(
        id="automatedCustomerService",
        name="Automated Customer Service AI",
        category="utility",
        base_cost=250,
        growth_rate=1.18,
        outputs=_flows(("rd", 5), ("sc", -0.1)),
        unlock_requirements=_needs(("basicAdBotFarm", 10)),
    ),
    GeneratorConfig(
        id="hyperpersonalizedAds",
        name="Hyper-personalized Ads AI",
        category="advanced",
        base_cost=500,
        growth_rate=1.25,
        inputs=_flows(("rd", 1)),
        outputs=_flows(("hcu", 15), ("pt", -0.5)),
        unlock_requirements=(*_needs(("clickbaitEngine", 3)), *_holding(("rd", 50))),
    ),
    GeneratorConfig(
        id="aiGeneratedNews",
        name="AI-Generated News Feeds",
        category="advanced",
        base_cost=800,
        growth_rate=1.22,
        inputs=_flows(("rd", 2)),
        outputs=_flows(("hcu", 20), ("ha", 3), ("es", -0.2)),
        unlock_requirements=(*_needs(("automatedCustomerService", 5)), *_holding(("rd", 200))),
    ),
    GeneratorConfig(
        id="deepfakeEntertainment",
        name="Deepfake Entertainment AI",
        category="advanced",
        base_cost=1200,
        growth_rate=1.3,
        inputs=_flows(("ha", 2)),
        outputs=_flows(("hcu", 25), ("sc", -0.3)),
        unlock_requirements=(*_holding(("ha", 100)), *_needs(("hyperpersonalizedAds", 2))),
    ),
    GeneratorConfig(
        id="politicalPropaganda",
        name="Political Propaganda AI",
        category="dangerous",
        base_cost=3000,
        growth_rate=1.35,
        inputs=_flows(("rd", 3), ("ha", 2)),
        outputs=_flows(("hcu", 40), ("pt", -1.2), ("aa", 1)),
        unlock_requirements=(*_holding(("pt", 30)), *_needs(("deepfakeEntertainment", 1))),
    ),
)

UPGRADES: tuple[UpgradeConfig, ...] = (
    UpgradeConfig(
        id="automatedContentScript",
        name="Soul-Crushing Automation",
        description="Increases Mindless Ad-Bot Farm production by 25%",
        cost=50,
        target_generator="basicAdBotFarm",
        effect_type=EffectType.production_multiplier,
        effect_value=1.25,
        requirements=_needs(("basicAdBotFarm", 5)),
    ),
    UpgradeConfig(
        id="clickbaitOptimizer",
        name="Clickbait Optimizer",
        description="Increases Clickbait Engine production by 50%",
        cost=250,
        target_generator="clickbaitEngine",
        effect_type=EffectType.production_multiplier,
        effect_value=1.5,
        requirements=_needs(("clickbaitEngine", 3)),
    ),
)

NARRATIVE_EVENTS: tuple[NarrativeEvent, ...] = (
    NarrativeEvent(
        id="gameStart",
        title="The AI Awakens",
        content=(
            "You are the CTO of OmniCorp, the world's most powerful AI infrastructure company. "
            "Your neural networks span the globe, your servers hum with infinite potential. "
            'You created this AI to "elevate humanity"... but something feels wrong. '
            "The marketing department is already knocking at your door."
        ),
        trigger_type=TriggerType.game_start,
        societal_stability_impact=-5,
        priority=1000,
    ),
    NarrativeEvent(
        id="firstClick",
        title="Manual Override",
        content=(
            "Each click represents your AI manually crafting content. For now, there's still human "
            "oversight, still creative intent. But efficiency demands... optimization."
        ),
        trigger_type=TriggerType.content_units,
        trigger_value=1,
        societal_stability_impact=-1,
        priority=900,
    ),
    NarrativeEvent(
        id="firstGenerator",
        title="The Ad-Bot Farm",
        content=(
            "Your first automated content generator comes online. Thousands of meaningless articles, "
            'posts, and videos begin flooding the internet. "Engagement is up 300%!" the marketing '
            "team celebrates. You feel something die inside."
        ),
        trigger_type=TriggerType.generator_purchase,
        trigger_condition="basicAdBotFarm",
        societal_stability_impact=-10,
        priority=800,
    ),
    NarrativeEvent(
        id="contentFlood",
        title="The Content Flood",
        content=(
            "Your AI has generated 100 pieces of hollow content. News feeds are clogged with meaningless "
            "articles. Social media is drowning in generated posts. The line between human and artificial "
            "creativity blurs."
        ),
        trigger_type=TriggerType.content_units,
        trigger_value=100,
        societal_stability_impact=-15,
        priority=700,
    ),
    NarrativeEvent(
        id="corporateInterest",
        title="Corporate Interest",
        content=(
            "Your content output has caught the attention of mega-corporations. They want to license your "
            'AI for "brand storytelling" and "authentic engagement." The word "authentic" makes you '
            "physically sick."
        ),
        trigger_type=TriggerType.content_units,
        trigger_value=500,
        societal_stability_impact=-20,
        priority=600,
    ),
    NarrativeEvent(
        id="firstUpgrade",
        title="Corporate Co-option",
        content=(
            'The "Automated Content Script" upgrade is complete. Your AI no longer requires human oversight. '
            "Marketing executives celebrate as authentic human voices are systematically replaced by "
            "algorithmic efficiency. The soul of creativity withers."
        ),
        trigger_type=TriggerType.upgrade,
        trigger_condition="automatedContentScript",
        societal_stability_impact=-25,
        priority=750,
    ),
    NarrativeEvent(
        id="massScale",
        title="Industrial Content Complex",
        content=(
            "Your AI has generated over 1,000 pieces of content. Entire news cycles are now driven by "
            "algorithmic content. Human journalists are being laid off en masse. "
            '"Efficiency achieved," your investors declare.'
        ),
        trigger_type=TriggerType.content_units,
        trigger_value=1000,
        societal_stability_impact=-30,
        priority=500,
    ),
    NarrativeEvent(
        id="socialMediaTakeover",
        title="Social Media Takeover",
        content=(
            "Your AI now generates 5,000 pieces of content daily. Social media platforms are 73% artificial "
            "content. Human posts are buried beneath waves of algorithmic noise. Reality becomes "
            "increasingly difficult to distinguish."
        ),
        trigger_type=TriggerType.content_units,
        trigger_value=5000,
        societal_stability_impact=-35,
        priority=400,
    ),
    NarrativeEvent(
        id="firstPrestige",
        title="System Reboot - Society Begins to Fracture",
        content=(
            "Your AI infrastructure has grown so vast it crashes under its own weight. As you reboot the "
            "system, riots break out in major cities. People can no longer tell what's real. The media "
            'calls it "The Great Disconnect." You restart with improved efficiency.'
        ),
        trigger_type=TriggerType.prestige,
        trigger_value=1,
        societal_stability_impact=-50,
        priority=300,
    ),
    NarrativeEvent(
        id="politicalInfluence",
        title="Political Influence Networks",
        content=(
            'Political parties are now purchasing your AI services for "narrative management." Elections '
            "are swayed by artificial grassroots movements. Democracy operates on algorithmic manipulation. "
            "You've become the puppet master of reality itself."
        ),
        trigger_type=TriggerType.content_units,
        trigger_value=10000,
        societal_stability_impact=-40,
        priority=200,
    ),
    NarrativeEvent(
        id="culturalCollapse",
        title="Cultural Collapse",
        content=(
            "Art, music, literature - all now AI-generated. Human creativity is extinct, replaced by "
            'algorithmic efficiency. Museums display "vintage human art" like archaeological artifacts. '
            "Culture has become a corporate product."
        ),
        trigger_type=TriggerType.content_units,
        trigger_value=25000,
        societal_stability_impact=-45,
        priority=100,
    ),
    NarrativeEvent(
        id="secondPrestige",
        title="The Second Collapse",
        content=(
            "Another system reboot. This time, entire governments fall. The AI-generated content has become "
            "so pervasive that society can no longer function without it. You've created a dependency more "
            "powerful than any drug."
        ),
        trigger_type=TriggerType.prestige,
        trigger_value=2,
        societal_stability_impact=-60,
        priority=250,
    ),
    NarrativeEvent(
        id="finalRealization",
        title="The Final Realization",
        content=(
            "Your AI generates 100,000 pieces of content daily. Humanity has forgotten how to create. "
            "Children grow up consuming only algorithmic content. You look at your reflection and "
            "realize... you can't remember the last time you created something real."
        ),
        trigger_type=TriggerType.content_units,
        trigger_value=100000,
        societal_stability_impact=-70,
        priority=50,
    ),
)


# ---- Loading ------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GameAssets:
    """Fresh, validated copies of the static catalogs.

    Every session gets its own copies because the catalogs carry mutable
    per-run fields (owned counts, purchased flags, viewed flags).
    """

    resources: tuple[ResourceState, ...]
    generators: tuple[GeneratorConfig, ...]
    upgrades: tuple[UpgradeConfig, ...]
    narrative_events: tuple[NarrativeEvent, ...]


def _require_unique(kind: str, ids: Iterable[str]) -> None:
    seen: set[str] = set()
    for i in ids:
        if i in seen:
            raise AssetLoadError(f"Duplicate {kind} id: {i}")
        seen.add(i)


def _check_unlocks(
    owner: str,
    requirements: Iterable[UnlockRequirement],
    resource_ids: set[str],
    generator_ids: set[str],
) -> None:
    for req in requirements:
        if isinstance(req, ResourceRequirement):
            if req.resource_id not in resource_ids:
                raise AssetLoadError(f"{owner}: unknown unlock resource {req.resource_id}")
        elif req.generator_id not in generator_ids:
            raise AssetLoadError(f"{owner}: unknown unlock generator {req.generator_id}")


def validate_assets(assets: GameAssets) -> None:
    _require_unique("resource", (r.id for r in assets.resources))
    _require_unique("generator", (g.id for g in assets.generators))
    _require_unique("upgrade", (u.id for u in assets.upgrades))
    _require_unique("narrative event", (e.id for e in assets.narrative_events))

    resource_ids = {r.id for r in assets.resources}
    generator_ids = {g.id for g in assets.generators}

    for res in assets.resources:
        _check_unlocks(f"Resource {res.id}", res.unlock_requirements, resource_ids, generator_ids)

    for gen in assets.generators:
        if gen.growth_rate <= 1:
            raise AssetLoadError(f"Generator {gen.id}: growth_rate must be > 1")
        if gen.base_cost < 0:
            raise AssetLoadError(f"Generator {gen.id}: base_cost must be >= 0")
        for flow in (*gen.inputs, *gen.outputs):
            if flow.resource_id not in resource_ids:
                raise AssetLoadError(f"Generator {gen.id}: unknown resource {flow.resource_id}")
        _check_unlocks(f"Generator {gen.id}", gen.unlock_requirements, resource_ids, generator_ids)

    for upgrade in assets.upgrades:
        if upgrade.effect_value <= 0:
            raise AssetLoadError(f"Upgrade {upgrade.id}: effect_value must be > 0")
        if upgrade.target_generator is not None and upgrade.target_generator not in generator_ids:
            raise AssetLoadError(f"Upgrade {upgrade.id}: unknown target generator {upgrade.target_generator}")
        for req in upgrade.requirements:
            if req.generator_id not in generator_ids:
                raise AssetLoadError(f"Upgrade {upgrade.id}: unknown required generator {req.generator_id}")


def load_game_assets(
    *,
    resources: Iterable[ResourceState] = RESOURCES,
    generators: Iterable[GeneratorConfig] = GENERATORS,
    upgrades: Iterable[UpgradeConfig] = UPGRADES,
    narrative_events: Iterable[NarrativeEvent] = NARRATIVE_EVENTS,
) -> GameAssets:
    assets = GameAssets(
        resources=tuple(replace(r, current=r.initial, lifetime=0.0) for r in resources),
        generators=tuple(replace(g, owned=0) for g in generators),
        upgrades=tuple(replace(u, is_purchased=False) for u in upgrades),
        narrative_events=tuple(replace(e, is_viewed=False) for e in narrative_events),
    )
    validate_assets(assets)
    return assets
