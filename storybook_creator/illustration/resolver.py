"""
Deterministic placeholder illustrations derived from page descriptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from storybook_creator.story_generation import StoryDocument

SEED_MODULUS = 1000
DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 300

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


@dataclass(frozen=True)
class IllustrationRef:
    page_number: int
    seed: int
    url: str


class IllustrationReferenceBuilder(Protocol):
    def build(self, seed: int, width: int, height: int) -> str:
        ...


class PicsumReferenceBuilder:
    """Seeded Picsum Photos URLs: the same seed always returns the same picture."""

    def __init__(self, base_url: str = "https://picsum.photos") -> None:
        self._base_url = base_url.rstrip("/")

    def build(self, seed: int, width: int, height: int) -> str:
        return f"{self._base_url}/seed/{seed}/{width}/{height}"


class PlaceholderReferenceBuilder:
    """Flat colour-coded placeholder images labelled with their seed."""

    PALETTE = ("FF6B6B", "4ECDC4", "45B7D1", "FFA07A", "98D8C8")

    def __init__(self, base_url: str = "https://via.placeholder.com") -> None:
        self._base_url = base_url.rstrip("/")

    def build(self, seed: int, width: int, height: int) -> str:
        colour = self.PALETTE[seed % len(self.PALETTE)]
        return f"{self._base_url}/{width}x{height}/{colour}/FFFFFF?text=Seed+{seed}"


REFERENCE_BUILDERS: dict[str, type] = {
    "picsum": PicsumReferenceBuilder,
    "placeholder": PlaceholderReferenceBuilder,
}


def make_reference_builder(name: str, base_url: str | None = None) -> IllustrationReferenceBuilder:
    """
    Instantiate the builder registered under ``name``, optionally against another host.
    """
    try:
        builder_cls = REFERENCE_BUILDERS[name]
    except KeyError as exc:
        known = ", ".join(sorted(REFERENCE_BUILDERS))
        raise ValueError(f"Unknown illustration builder {name!r}; expected one of: {known}.") from exc
    if base_url:
        return builder_cls(base_url)
    return builder_cls()


def description_hash(text: str) -> int:
    """
    31-multiplier rolling hash over UTF-16 code units, wrapped to a signed 32-bit int.
    """
    encoded = text.encode("utf-16-le")
    value = 0
    for offset in range(0, len(encoded), 2):
        unit = encoded[offset] | (encoded[offset + 1] << 8)
        value = (value * 31 + unit) & _INT32_MASK
        if value & _INT32_SIGN:
            value -= 1 << 32
    return value


def description_seed(text: str) -> int:
    return abs(description_hash(text)) % SEED_MODULUS


class IllustrationResolver:
    """
    Maps every page of a story to an :class:`IllustrationRef`, in page order.

    Resolution is pure computation; identical descriptions always produce
    identical references.
    """

    def __init__(
        self,
        builder: IllustrationReferenceBuilder | None = None,
        *,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ) -> None:
        self._builder = builder or PicsumReferenceBuilder()
        self._width = width
        self._height = height

    def resolve(self, story: StoryDocument) -> tuple[IllustrationRef, ...]:
        refs = []
        for page in story.pages:
            seed = description_seed(page.illustration_description)
            refs.append(
                IllustrationRef(
                    page_number=page.page_number,
                    seed=seed,
                    url=self._builder.build(seed, self._width, self._height),
                )
            )
        return tuple(refs)
