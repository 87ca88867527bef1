from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from omnicorp.core.generators import UnlockRequirement


PRIMARY_RESOURCE_ID = "hcu"
PRIMARY_SYMBOL = "HCU"

# (threshold, divisor, suffix), largest first.
_MAGNITUDE_LADDER: tuple[tuple[float, float, str], ...] = (
    (1e15, 1e15, "Q"),
    (1e12, 1e12, "T"),
    (1e9, 1e9, "B"),
    (1e6, 1e6, "M"),
    (1e3, 1e3, "K"),
)
_EXPONENTIAL_THRESHOLD = 1e18


def format_amount(value: float, *, symbol: str = PRIMARY_SYMBOL) -> str:
    """Render a currency amount on the fixed magnitude ladder.

    >>> format_amount(1500)
    '1.50K HCU'
    >>> format_amount(12.3456)
    '12.35 HCU'
    """

    unit = f" {symbol}" if symbol else ""

    if value >= _EXPONENTIAL_THRESHOLD:
        return f"{value:.2e}{unit}"

    for threshold, divisor, suffix in _MAGNITUDE_LADDER:
        if value >= threshold:
            return f"{value / divisor:.2f}{suffix}{unit}"

    return f"{value:.2f}{unit}"


@dataclass(slots=True)
class ResourceState:
    id: str
    name: str
    symbol: str
    current: float = 0.0
    max: float | None = None
    is_depletable: bool = False
    # Fraction of `current` lost per tick; only meaningful when depletable.
    decay_rate: float = 0.0
    lifetime: float = 0.0
    initial: float = 0.0
    # UI visibility only; evaluated by the generator catalog.
    unlock_requirements: tuple[UnlockRequirement, ...] = field(default_factory=tuple)

    def clamp(self, value: float) -> float:
        if value < 0:
            return 0.0
        if self.max is not None and value > self.max:
            return self.max
        return value


class ResourceLedger:
    """Owns every resource quantity in the economy.

    The primary currency gets the short-form operations (`add`, `spend`,
    `can_afford`, `reset`); other resources go through the `*_resource`
    variants. No operation drives a quantity below zero.
    """

    def __init__(self, resources: Iterable[ResourceState], *, primary_id: str = PRIMARY_RESOURCE_ID) -> None:
        self._resources: dict[str, ResourceState] = {}
        for res in resources:
            res.current = res.clamp(res.current)
            self._resources[res.id] = res

        if primary_id not in self._resources:
            raise ValueError(f"Primary resource '{primary_id}' is not defined")
        self.primary_id = primary_id

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[ResourceState]:
        return iter(self._resources.values())

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._resources

    def get(self, resource_id: str) -> ResourceState | None:
        return self._resources.get(resource_id)

    def amount(self, resource_id: str) -> float:
        res = self._resources.get(resource_id)
        return res.current if res is not None else 0.0

    @property
    def primary(self) -> ResourceState:
        return self._resources[self.primary_id]

    @property
    def current(self) -> float:
        return self.primary.current

    @property
    def lifetime_total(self) -> float:
        return self.primary.lifetime

    # ------------------------------------------------------------------
    # Primary currency
    # ------------------------------------------------------------------

    def add(self, amount: float) -> None:
        self.add_resource(self.primary_id, amount)

    def spend(self, amount: float) -> bool:
        return self.spend_resource(self.primary_id, amount)

    def can_afford(self, amount: float) -> bool:
        return self.can_afford_resource(self.primary_id, amount)

    def reset(self) -> None:
        """Zero the primary currency. Lifetime total is kept."""

        self.primary.current = 0.0

    def format(self, amount: float | None = None) -> str:
        value = self.current if amount is None else amount
        return format_amount(value, symbol=self.primary.symbol)

    # ------------------------------------------------------------------
    # Any resource
    # ------------------------------------------------------------------

    def add_resource(self, resource_id: str, amount: float) -> bool:
        res = self._resources.get(resource_id)
        if res is None:
            return False
        res.current = res.clamp(res.current + amount)
        if amount > 0:
            res.lifetime += amount
        return True

    def spend_resource(self, resource_id: str, amount: float) -> bool:
        res = self._resources.get(resource_id)
        if res is None or res.current < amount:
            return False
        res.current = res.clamp(res.current - amount)
        return True

    def can_afford_resource(self, resource_id: str, amount: float) -> bool:
        res = self._resources.get(resource_id)
        return res is not None and res.current >= amount

    def set_amount(self, resource_id: str, amount: float, *, lifetime: float | None = None) -> None:
        """Overwrite a quantity when restoring a save."""

        res = self._resources.get(resource_id)
        if res is None:
            return
        res.current = res.clamp(amount)
        if lifetime is not None:
            res.lifetime = max(0.0, lifetime)

    def apply_decay(self) -> None:
        for res in self._resources.values():
            if res.is_depletable and res.decay_rate and res.current > 0:
                res.current = max(0.0, res.current - res.current * res.decay_rate)
