from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from omnicorp.core.ledger import ResourceLedger


@dataclass(frozen=True, slots=True)
class ResourceFlow:
    """Per owned unit, per second."""

    resource_id: str
    amount: float


@dataclass(frozen=True, slots=True)
class OwnershipRequirement:
    generator_id: str
    min_owned: int


@dataclass(frozen=True, slots=True)
class ResourceRequirement:
    resource_id: str
    min_amount: float


UnlockRequirement = OwnershipRequirement | ResourceRequirement


@dataclass(slots=True)
class GeneratorConfig:
    id: str
    name: str
    base_cost: float
    growth_rate: float
    category: str = "basic"
    inputs: tuple[ResourceFlow, ...] = ()
    outputs: tuple[ResourceFlow, ...] = ()
    # Only drives the UI "unlocked" flag; purchase is never gated on it.
    unlock_requirements: tuple[UnlockRequirement, ...] = field(default_factory=tuple)
    owned: int = 0


class GeneratorCatalog:
    def __init__(self, generators: Iterable[GeneratorConfig], *, ledger: ResourceLedger) -> None:
        self._by_id: dict[str, GeneratorConfig] = {g.id: g for g in generators}
        self._ledger = ledger

    def __iter__(self) -> Iterator[GeneratorConfig]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, generator_id: str) -> GeneratorConfig | None:
        return self._by_id.get(generator_id)

    def owned(self, generator_id: str) -> int:
        gen = self._by_id.get(generator_id)
        return gen.owned if gen is not None else 0

    def cost(self, generator_id: str) -> int:
        """Price of the next unit: floor(base_cost * growth_rate ** owned). 0 if unknown."""

        gen = self._by_id.get(generator_id)
        if gen is None:
            return 0
        return math.floor(gen.base_cost * math.pow(gen.growth_rate, gen.owned))

    def can_purchase(self, generator_id: str) -> bool:
        if generator_id not in self._by_id:
            return False
        return self._ledger.can_afford(self.cost(generator_id))

    def purchase(self, generator_id: str) -> bool:
        gen = self._by_id.get(generator_id)
        if gen is None:
            return False

        # Priced from the pre-purchase count; a failed spend leaves `owned` alone.
        cost = self.cost(generator_id)
        if not self._ledger.spend(cost):
            return False

        gen.owned += 1
        return True

    def is_unlocked(self, generator_id: str) -> bool:
        gen = self._by_id.get(generator_id)
        if gen is None:
            return False
        return self.requirements_met(gen.unlock_requirements)

    def requirements_met(self, requirements: Iterable[UnlockRequirement]) -> bool:
        """True when every requirement holds against current counts and amounts."""

        for req in requirements:
            if isinstance(req, ResourceRequirement):
                if self._ledger.amount(req.resource_id) < req.min_amount:
                    return False
            elif self.owned(req.generator_id) < req.min_owned:
                return False
        return True

    def reset(self) -> None:
        for gen in self._by_id.values():
            gen.owned = 0

    def restore_owned(self, owned: Mapping[str, int]) -> None:
        """Apply saved counts. Ids no longer in the catalog are ignored."""

        for generator_id, count in owned.items():
            gen = self._by_id.get(generator_id)
            if gen is not None:
                gen.owned = max(0, int(count))

    def owned_counts(self) -> dict[str, int]:
        return {g.id: g.owned for g in self._by_id.values()}
