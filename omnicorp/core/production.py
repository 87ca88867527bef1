from __future__ import annotations

from omnicorp.core.generators import GeneratorCatalog, GeneratorConfig
from omnicorp.core.ledger import ResourceLedger
from omnicorp.core.prestige import PrestigeState
from omnicorp.core.upgrades import UpgradeCatalog


# Inputs must cover one 100ms slice of consumption for a generator to run.
INPUT_WINDOW_SECONDS = 0.1


class ProductionEngine:
    """Turns owned generators into per-resource deltas.

    Rates are per second. A generator whose inputs cannot cover one input
    window contributes nothing at all for that tick. Upgrade-global and
    prestige multipliers scale production (positive deltas) only.
    """

    def __init__(
        self,
        *,
        ledger: ResourceLedger,
        generators: GeneratorCatalog,
        upgrades: UpgradeCatalog,
        prestige: PrestigeState,
    ) -> None:
        self._ledger = ledger
        self._generators = generators
        self._upgrades = upgrades
        self._prestige = prestige

    def can_operate(self, generator: GeneratorConfig) -> bool:
        for flow in generator.inputs:
            required = flow.amount * generator.owned * INPUT_WINDOW_SECONDS
            if self._ledger.amount(flow.resource_id) < required:
                return False
        return True

    def raw_deltas(self) -> dict[str, float]:
        """Signed per-second deltas before the global/prestige multipliers."""

        deltas: dict[str, float] = {}
        for gen in self._generators:
            if gen.owned <= 0:
                continue
            if not self.can_operate(gen):
                continue

            effective_rate = gen.owned * self._upgrades.generator_multiplier(gen.id)

            for flow in gen.inputs:
                deltas[flow.resource_id] = deltas.get(flow.resource_id, 0.0) - flow.amount * effective_rate
            for flow in gen.outputs:
                deltas[flow.resource_id] = deltas.get(flow.resource_id, 0.0) + flow.amount * effective_rate

        return deltas

    def apply_multipliers(self, deltas: dict[str, float]) -> dict[str, float]:
        multiplier = self._upgrades.global_multiplier() * self._prestige.global_multiplier
        return {rid: (d * multiplier if d > 0 else d) for rid, d in deltas.items()}

    def rates(self) -> dict[str, float]:
        return self.apply_multipliers(self.raw_deltas())

    def production_rate(self) -> float:
        """Net primary-currency income per second."""

        return self.rates().get(self._ledger.primary_id, 0.0)

    def generator_rate(self, generator_id: str) -> float:
        """Primary-currency output of one generator per second, before global multipliers."""

        gen = self._generators.get(generator_id)
        if gen is None or gen.owned <= 0:
            return 0.0
        per_unit = sum(f.amount for f in gen.outputs if f.resource_id == self._ledger.primary_id)
        return per_unit * gen.owned * self._upgrades.generator_multiplier(gen.id)

    def step(self, delta_ms: float) -> dict[str, float]:
        """Apply one tick of production and return what was applied."""

        if delta_ms <= 0:
            return {}

        seconds = delta_ms / 1000
        applied: dict[str, float] = {}
        for rid, rate in self.rates().items():
            change = rate * seconds
            if change != 0 and self._ledger.add_resource(rid, change):
                applied[rid] = change
        return applied
