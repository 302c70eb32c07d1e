"""
Base class for all asset effects.

Asset effects turn a cutout or sticker into the next stage of the asset
pipeline. Each effect:
- Takes an input :class:`~stickerstag.pixel_buffer.PixelBuffer` (RGB or RGBA)
- Returns a new RGBA buffer, possibly larger than the input
- Reports where the output sits relative to the input

Numeric parameters are clamped to their documented ranges when the effect is
constructed. Clamping is logged and emitted as a ParameterOutOfRange warning,
it never fails.

Use `to_dict()`/`from_dict()` for serialization, e.g. to hand effects to batch
worker processes.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Tuple, Type
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator

from stickerstag.params import clamp, clamp_int
from stickerstag.pixel_buffer import PixelBuffer


@dataclass
class EffectResult:
    """Output buffer of an asset effect, positioned against its input.

    Negative offsets mean the canvas grew to the left or top.
    """
    image: PixelBuffer
    offset_x: int = 0
    offset_y: int = 0


class AssetEffect(BaseModel):
    """
    Base class for all asset effects.

    Uses Pydantic for serialization with camelCase aliases.

    A concrete effect sets ``effect_type`` (its registry key and the
    ``type`` entry of its dump) and implements ``apply()``.

    Subclasses declare the valid range of numeric fields in ``_limits`` as
    ``field name -> (minimum, maximum, is_integer)``; None means unbounded.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
        arbitrary_types_allowed=True,
    )

    # Per-class, never dumped
    effect_type: ClassVar[str] = "base"
    display_name: ClassVar[str] = "Asset Effect"
    output_suffix: ClassVar[str] = ""
    VERSION: ClassVar[int] = 1
    _limits: ClassVar[Dict[str, Tuple[Optional[float], Optional[float], bool]]] = {}

    # effect_type -> subclass, filled by __init_subclass__
    _registry: ClassVar[Dict[str, Type['AssetEffect']]] = {}

    # Instance fields
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    enabled: bool = Field(default=True)

    # Written into every dump
    version: int = Field(default=1, alias='_version')
    type_name: str = Field(default='AssetEffect', alias='_type')

    def __init_subclass__(cls, **kwargs):
        """Make concrete subclasses available to from_dict()."""
        super().__init_subclass__(**kwargs)
        if hasattr(cls, 'effect_type') and cls.effect_type != "base":
            AssetEffect._registry[cls.effect_type] = cls

    def model_post_init(self, __context: Any) -> None:
        """Record the concrete class name for dumps."""
        self.type_name = self.__class__.__name__

    @model_validator(mode='before')
    @classmethod
    def _clamp_parameters(cls, data: Any) -> Any:
        """Clamp numeric parameters, accepting numbers or numeric strings."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, (minimum, maximum, integer) in cls._limits.items():
            field = cls.model_fields[name]
            key = field.alias if field.alias and field.alias in data else name
            if key not in data:
                continue
            default = field.get_default(call_default_factory=True)
            if integer:
                data[key] = clamp_int(name, data[key], minimum, maximum, default)
            else:
                data[key] = clamp(name, data[key], minimum, maximum, default)
        return data

    @abstractmethod
    def apply(self, buffer: PixelBuffer) -> EffectResult:
        """
        Apply the effect to a buffer.

        Args:
            buffer: Input buffer, left unmodified

        Returns:
            EffectResult with output buffer and offsets
        """
        pass

    def _passthrough(self, buffer: PixelBuffer) -> EffectResult:
        """Result of a disabled effect: an RGBA copy of the input."""
        return EffectResult(image=buffer.to_rgba(), offset_x=0, offset_y=0)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """
        Dump the effect as JSON-safe camelCase keys.

        Besides the parameters the dump carries ``type`` (registry key),
        ``id``, ``_version`` and ``_type`` (class name).
        """
        self.version = self.VERSION
        data = self.model_dump(by_alias=True, mode='json')
        data['type'] = self.effect_type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AssetEffect':
        """
        Build the registered effect a dump describes.

        Accepts 'type' as written by to_dict() and 'effect_type' for
        hand-written configurations.

        Raises:
            ValueError: If the effect type is unknown
        """
        effect_type = data.get('type') or data.get('effect_type', 'base')

        effect_class = cls._registry.get(effect_type)
        if effect_class is None:
            raise ValueError(f"Unknown effect type: {effect_type}")

        return effect_class.model_validate(data)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(enabled={self.enabled})"
