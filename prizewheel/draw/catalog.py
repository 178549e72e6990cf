"""Reward catalog: the ordered list of prizes painted on the wheel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Union

from .errors import ConfigurationError, UnknownRewardCode


@dataclass(frozen=True)
class Reward:
    """A single prize on the wheel.

    Attributes
    ----------
    code : str
        Unique coupon code handed to the customer once revealed.
    label : str
        Short text drawn on the wheel segment.
    """

    code: str
    label: str

    def __post_init__(self) -> None:
        if not isinstance(self.code, str) or not self.code.strip():
            raise ConfigurationError("Reward code must be a non-empty string")


@dataclass(frozen=True)
class Catalog:
    """Immutable ordered sequence of rewards.

    The position of a reward in the catalog is its wheel segment, so the order
    is part of the configuration and is never re-sorted.
    """

    rewards: tuple[Reward, ...]

    def __post_init__(self) -> None:
        rewards = tuple(self.rewards)
        if not rewards:
            raise ConfigurationError("Catalog must contain at least one reward")
        seen: set[str] = set()
        for reward in rewards:
            if reward.code in seen:
                raise ConfigurationError(f"Duplicate reward code {reward.code!r}")
            seen.add(reward.code)
        object.__setattr__(self, "rewards", rewards)

    @classmethod
    def from_items(
        cls, items: Iterable[Union[Reward, Mapping[str, str]]]
    ) -> "Catalog":
        """Build a catalog from rewards or ``{"code": ..., "label": ...}`` mappings.

        A missing label defaults to the code.
        """

        rewards: list[Reward] = []
        for item in items:
            if isinstance(item, Reward):
                rewards.append(item)
                continue
            try:
                code = item["code"]
            except (KeyError, TypeError) as exc:
                raise ConfigurationError(
                    f"Catalog entry {item!r} is missing a 'code'"
                ) from exc
            rewards.append(Reward(code=code, label=item.get("label") or code))
        return cls(tuple(rewards))

    def __len__(self) -> int:
        return len(self.rewards)

    def __iter__(self) -> Iterator[Reward]:
        return iter(self.rewards)

    def __getitem__(self, index: int) -> Reward:
        return self.rewards[index]

    def __contains__(self, code: object) -> bool:
        return any(reward.code == code for reward in self.rewards)

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(reward.code for reward in self.rewards)

    def index_of(self, code: str) -> int:
        """Return the segment index of ``code``.

        Raises
        ------
        UnknownRewardCode
            If no reward in the catalog carries ``code``.
        """
        for index, reward in enumerate(self.rewards):
            if reward.code == code:
                return index
        raise UnknownRewardCode(code)

    def get(self, code: str) -> Reward:
        """Return the reward registered under ``code``."""
        return self.rewards[self.index_of(code)]


__all__ = ["Catalog", "Reward"]
