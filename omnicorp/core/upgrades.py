from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from omnicorp.core.generators import GeneratorCatalog, OwnershipRequirement
from omnicorp.core.ledger import ResourceLedger


class EffectType(StrEnum):
    production_multiplier = "production_multiplier"
    global_multiplier = "global_multiplier"


@dataclass(slots=True)
class UpgradeConfig:
    id: str
    name: str
    cost: float
    effect_type: EffectType
    effect_value: float
    target_generator: str | None = None
    description: str = ""
    requirements: tuple[OwnershipRequirement, ...] = field(default_factory=tuple)
    is_purchased: bool = False


class UpgradeCatalog:
    """One-shot purchasable modifiers and the multiplier products they yield."""

    def __init__(
        self,
        upgrades: Iterable[UpgradeConfig],
        *,
        ledger: ResourceLedger,
        generators: GeneratorCatalog,
    ) -> None:
        self._by_id: dict[str, UpgradeConfig] = {u.id: u for u in upgrades}
        self._ledger = ledger
        self._generators = generators

    def __iter__(self) -> Iterator[UpgradeConfig]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, upgrade_id: str) -> UpgradeConfig | None:
        return self._by_id.get(upgrade_id)

    def requirements_met(self, upgrade_id: str) -> bool:
        upgrade = self._by_id.get(upgrade_id)
        if upgrade is None:
            return False
        return self._generators.requirements_met(upgrade.requirements)

    def can_purchase(self, upgrade_id: str) -> bool:
        upgrade = self._by_id.get(upgrade_id)
        if upgrade is None:
            return False
        return (
            not upgrade.is_purchased
            and self._ledger.can_afford(upgrade.cost)
            and self.requirements_met(upgrade_id)
        )

    def purchase(self, upgrade_id: str) -> bool:
        if not self.can_purchase(upgrade_id):
            return False
        upgrade = self._by_id[upgrade_id]
        if not self._ledger.spend(upgrade.cost):
            return False
        upgrade.is_purchased = True
        return True

    def generator_multiplier(self, generator_id: str) -> float:
        multiplier = 1.0
        for upgrade in self._by_id.values():
            if (
                upgrade.is_purchased
                and upgrade.effect_type == EffectType.production_multiplier
                and upgrade.target_generator == generator_id
            ):
                multiplier *= upgrade.effect_value
        return multiplier

    def global_multiplier(self) -> float:
        """Product of purchased global upgrades. Prestige is applied separately."""

        multiplier = 1.0
        for upgrade in self._by_id.values():
            if upgrade.is_purchased and upgrade.effect_type == EffectType.global_multiplier:
                multiplier *= upgrade.effect_value
        return multiplier

    def reset(self) -> None:
        for upgrade in self._by_id.values():
            upgrade.is_purchased = False

    def restore_purchased(self, upgrade_ids: Iterable[str]) -> None:
        wanted = set(upgrade_ids)
        for upgrade in self._by_id.values():
            upgrade.is_purchased = upgrade.id in wanted

    def purchased_ids(self) -> list[str]:
        return [u.id for u in self._by_id.values() if u.is_purchased]
