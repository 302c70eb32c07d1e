"""
Pipeline for chaining asset effects.

Each effect consumes the previous effect's output. Canvas offsets add up, so
the final result still knows where the original image sits on the grown
canvas.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional
import logging
import re

from stickerstag.pixel_buffer import PixelBuffer
from .base import AssetEffect, EffectResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplacementRequest:
    """Identifies the asset a pipeline run regenerates.

    Passed explicitly to :meth:`Pipeline.run`; the request ends up in the
    metadata of the result so the caller can swap the new asset in for the
    old one.

    :ivar target_id: Identifier of the asset being replaced
    :ivar original_index: Position of the asset in its owning collection
    :ivar prior_label: Label of the asset before the edit, if any
    """
    target_id: str
    original_index: int
    prior_label: Optional[str] = None


@dataclass
class Pipeline:
    """Chain of asset effects applied in sequence."""
    effects: list[AssetEffect] = field(default_factory=list)

    def run(self, buffer: PixelBuffer, replacement: ReplacementRequest | None = None) -> EffectResult:
        """Apply all enabled effects in sequence.

        :param buffer: Source buffer, left unmodified
        :param replacement: Optional request to attach to the result
        :returns: Final buffer and the accumulated offset of the source origin
        """
        result = EffectResult(image=buffer.to_rgba(), offset_x=0, offset_y=0)
        for effect in self.effects:
            step = effect.apply(result.image)
            result = EffectResult(
                image=step.image,
                offset_x=result.offset_x + step.offset_x,
                offset_y=result.offset_y + step.offset_y,
            )
            logger.debug(f"{effect!r} -> {result.image!r}")
        if replacement is not None:
            result.image.metadata['replacement'] = asdict(replacement)
        result.image.metadata['effects'] = [e.effect_type for e in self.effects if e.enabled]
        return result

    @property
    def output_suffix(self) -> str:
        """Stage suffix of the last effect, used to name batch outputs."""
        for effect in reversed(self.effects):
            if effect.output_suffix:
                return effect.output_suffix
        return "out"

    def append(self, effect: AssetEffect) -> Pipeline:
        """Add effect to pipeline (chainable)."""
        self.effects.append(effect)
        return self

    def extend(self, effects: list[AssetEffect]) -> Pipeline:
        """Add multiple effects to pipeline (chainable)."""
        self.effects.extend(effects)
        return self

    def __len__(self) -> int:
        return len(self.effects)

    def __iter__(self):
        return iter(self.effects)

    def __getitem__(self, index: int) -> AssetEffect:
        return self.effects[index]

    def to_dict(self) -> dict[str, Any]:
        """Serialize pipeline to dictionary."""
        return {
            'type': 'Pipeline',
            'effects': [e.to_dict() for e in self.effects],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pipeline:
        """Deserialize pipeline from dictionary."""
        effects = [AssetEffect.from_dict(e) for e in data.get('effects', [])]
        return cls(effects=effects)

    @classmethod
    def parse(cls, text: str) -> Pipeline:
        """Parse an effect string into a pipeline.

        Examples:
            'cutout|stickerBorder(strokePx=24)'
            'cutout(tolerance=230, feather=1);bevel'

        Argument values stay strings; the effects parse and clamp them.
        """
        if not text:
            return cls()

        effects = []
        for part in re.split(r'[|;]', text):
            part = part.strip()
            if not part:
                continue
            match = re.fullmatch(r'(\w+)\s*(?:\((.*)\))?', part)
            if match is None:
                raise ValueError(f"Invalid effect syntax: {part}")
            name, args = match.group(1), match.group(2) or ''
            data: dict[str, Any] = {'type': name}
            for arg in args.split(','):
                if not arg.strip():
                    continue
                key, sep, value = arg.partition('=')
                if not sep:
                    raise ValueError(f"Expected key=value in {part!r}, got {arg.strip()!r}")
                data[key.strip()] = value.strip().strip('\'"')
            effects.append(AssetEffect.from_dict(data))
        return cls(effects=effects)
