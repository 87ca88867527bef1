from __future__ import annotations

import pytest

from omnicorp.assets.registry import load_game_assets
from omnicorp.core.generators import GeneratorCatalog, GeneratorConfig, ResourceFlow
from omnicorp.core.ledger import ResourceLedger
from omnicorp.core.prestige import PrestigeState
from omnicorp.core.production import ProductionEngine
from omnicorp.core.upgrades import UpgradeCatalog
from omnicorp.game_session import GameSession


def test_no_generators_no_production(session: GameSession) -> None:
    assert session.production.rates() == {}
    assert session.production.production_rate() == 0.0
    assert session.production.step(1000) == {}


def test_basic_generator_output_scales_with_elapsed_time(session: GameSession) -> None:
    session.generators.restore_owned({"basicAdBotFarm": 3})

    assert session.production.production_rate() == pytest.approx(3.0)

    session.production.step(500)
    assert session.ledger.current == pytest.approx(1.5)
    assert session.ledger.lifetime_total == pytest.approx(1.5)


def test_non_positive_delta_is_a_no_op(session: GameSession) -> None:
    session.generators.restore_owned({"basicAdBotFarm": 3})
    assert session.production.step(0) == {}
    assert session.production.step(-100) == {}
    assert session.ledger.current == 0


def test_upgrade_and_prestige_multipliers_stack(session: GameSession) -> None:
    session.generators.restore_owned({"basicAdBotFarm": 4})
    session.upgrades.restore_purchased(["automatedContentScript"])
    session.prestige_state.level = 2

    # 4 owned * 1.25 upgrade * 1.25^2 prestige
    assert session.production.production_rate() == pytest.approx(4 * 1.25 * 1.5625)
    # The per-generator figure excludes global multipliers.
    assert session.production.generator_rate("basicAdBotFarm") == pytest.approx(5.0)


def test_generator_without_inputs_contributes_nothing(session: GameSession) -> None:
    session.generators.restore_owned({"hyperpersonalizedAds": 1})
    gen = session.generators.get("hyperpersonalizedAds")
    assert gen is not None

    assert session.ledger.amount("rd") == 0
    assert not session.production.can_operate(gen)

    # All-or-nothing: its pt drain is skipped too.
    assert session.production.rates() == {}


def test_consumption_is_never_multiplied(session: GameSession) -> None:
    session.generators.restore_owned({"hyperpersonalizedAds": 1})
    session.ledger.set_amount("rd", 50)
    session.prestige_state.level = 1

    rates = session.production.rates()
    assert rates["hcu"] == pytest.approx(15 * 1.25)
    assert rates["rd"] == pytest.approx(-1.0)
    assert rates["pt"] == pytest.approx(-0.5)

    session.production.step(1000)
    assert session.ledger.amount("rd") == pytest.approx(49.0)
    assert session.ledger.amount("pt") == pytest.approx(99.5)
    assert session.ledger.current == pytest.approx(18.75)


def test_input_gate_uses_one_tenth_of_a_second_of_demand(session: GameSession) -> None:
    session.generators.restore_owned({"hyperpersonalizedAds": 2})
    gen = session.generators.get("hyperpersonalizedAds")
    assert gen is not None

    # 1 rd/s per unit * 2 owned * 0.1 s
    session.ledger.set_amount("rd", 0.19)
    assert not session.production.can_operate(gen)

    session.ledger.set_amount("rd", 0.25)
    assert session.production.can_operate(gen)


def test_input_from_unknown_resource_blocks_generator() -> None:
    assets = load_game_assets()
    ledger = ResourceLedger(assets.resources)
    generators = GeneratorCatalog(
        [
            GeneratorConfig(
                id="ghost",
                name="Ghost",
                base_cost=1,
                growth_rate=1.1,
                inputs=(ResourceFlow("ectoplasm", 1),),
                outputs=(ResourceFlow("hcu", 100),),
                owned=1,
            )
        ],
        ledger=ledger,
    )
    upgrades = UpgradeCatalog([], ledger=ledger, generators=generators)
    engine = ProductionEngine(ledger=ledger, generators=generators, upgrades=upgrades, prestige=PrestigeState())

    assert engine.rates() == {}


def test_bounded_resources_clamp_during_step(session: GameSession) -> None:
    session.generators.restore_owned({"hyperpersonalizedAds": 10})
    session.ledger.set_amount("rd", 1_000)
    session.ledger.set_amount("pt", 1)

    session.production.step(1000)
    assert session.ledger.amount("pt") == 0
