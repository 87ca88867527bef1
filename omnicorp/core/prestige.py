from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from omnicorp.core.events import TriggerType
from omnicorp.core.generators import GeneratorCatalog
from omnicorp.core.ledger import ResourceLedger
from omnicorp.core.upgrades import UpgradeCatalog

if TYPE_CHECKING:
    from omnicorp.core.narrative import NarrativeEngine


logger = logging.getLogger(__name__)

PRESTIGE_BASE_MULTIPLIER = 1.25
PRESTIGE_THRESHOLD_BASE = 1000
PRESTIGE_THRESHOLD_GROWTH = 10


def prestige_multiplier(level: int) -> float:
    return PRESTIGE_BASE_MULTIPLIER**level


def prestige_threshold(level: int) -> float:
    return PRESTIGE_THRESHOLD_BASE * PRESTIGE_THRESHOLD_GROWTH**level


@dataclass(slots=True)
class PrestigeState:
    """Only `level` is stored; everything else derives from it."""

    level: int = 0

    @property
    def global_multiplier(self) -> float:
        return prestige_multiplier(self.level)

    @property
    def threshold(self) -> float:
        return prestige_threshold(self.level)

    @property
    def next_multiplier(self) -> float:
        return prestige_multiplier(self.level + 1)


@dataclass(frozen=True, slots=True)
class PrestigeInfo:
    level: int
    global_multiplier: float
    threshold: float
    can_prestige: bool
    next_multiplier: float


class PrestigeController:
    def __init__(
        self,
        *,
        state: PrestigeState,
        ledger: ResourceLedger,
        generators: GeneratorCatalog,
        upgrades: UpgradeCatalog,
        narrative: NarrativeEngine,
    ) -> None:
        self.state = state
        self._ledger = ledger
        self._generators = generators
        self._upgrades = upgrades
        self._narrative = narrative

    def can_prestige(self) -> bool:
        return self._ledger.current >= self.state.threshold

    def perform_prestige(self) -> bool:
        """Trade the current run for a permanent multiplier.

        Reset protocol, in order:
        1. fire the `prestige` narrative trigger with the level being left
        2. level += 1
        3. primary currency -> 0 (lifetime total kept)
        4. every generator owned -> 0, every upgrade unpurchased
        5. narrative pending queue cleared and content-units watermark zeroed;
           viewed events and societal stability carry over
        """

        if not self.can_prestige():
            return False

        old_level = self.state.level
        self._narrative.check_trigger(TriggerType.prestige, value=old_level)

        self.state.level = old_level + 1
        self._ledger.reset()
        self._generators.reset()
        self._upgrades.reset()
        self._narrative.reset_for_prestige()

        logger.info(
            "Prestige %d -> %d (multiplier %.4f)",
            old_level,
            self.state.level,
            self.state.global_multiplier,
        )
        return True

    def info(self) -> PrestigeInfo:
        return PrestigeInfo(
            level=self.state.level,
            global_multiplier=self.state.global_multiplier,
            threshold=self.state.threshold,
            can_prestige=self.can_prestige(),
            next_multiplier=self.state.next_multiplier,
        )
