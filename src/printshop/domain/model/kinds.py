"""Closed vocabularies for garments, decoration services and print materials.

Garment types and print materials each have one escape variant
(``custom`` / ``other``) that carries a free-text label.  The pairing is
modelled as a small sum type so a label exists exactly when the escape
variant is chosen.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from printshop.domain.exceptions import ValidationError


class GarmentType(Enum):
    WITH_COLLAR = "with_collar"
    WITHOUT_COLLAR = "without_collar"
    UNIFORM_SHIRT = "uniform_shirt"
    UNIFORM = "uniform"
    UNIFORM_PANTS = "uniform_pants"
    BAG = "bag"
    COAT = "coat"
    CLOTH_VEST = "cloth_vest"
    REFLECTIVE_VEST = "reflective_vest"
    THICK_CAP = "thick_cap"
    SIMPLE_CAP = "simple_cap"
    TOWEL = "towel"
    SHEET = "sheet"
    KITCHEN_APRON = "kitchen_apron"
    CUSTOM = "custom"


GARMENT_TYPE_LABELS: dict[GarmentType, str] = {
    GarmentType.WITH_COLLAR: "Camisetes de Gola",
    GarmentType.WITHOUT_COLLAR: "Camisetes sem Gola",
    GarmentType.UNIFORM_SHIRT: "Camisas de Uniformes",
    GarmentType.UNIFORM: "Fardamentos",
    GarmentType.UNIFORM_PANTS: "Calças de Fardamentos",
    GarmentType.BAG: "Bolsos",
    GarmentType.COAT: "Batas",
    GarmentType.CLOTH_VEST: "Coletes de Pano",
    GarmentType.REFLECTIVE_VEST: "Coletes Refletores",
    GarmentType.THICK_CAP: "Bonés Grossos",
    GarmentType.SIMPLE_CAP: "Bonés Simples",
    GarmentType.TOWEL: "Toalhas",
    GarmentType.SHEET: "Lençóis",
    GarmentType.KITCHEN_APRON: "Aventais",
    GarmentType.CUSTOM: "Outros",
}


class ServiceType(Enum):
    EMBROIDERY = "embroidery"
    STAMPING = "stamping"
    DTF = "dtf"
    TRANSFER = "transfer"


SERVICE_TYPE_LABELS: dict[ServiceType, str] = {
    ServiceType.EMBROIDERY: "Bordado",
    ServiceType.STAMPING: "Estampagem",
    ServiceType.DTF: "DTF",
    ServiceType.TRANSFER: "Transfer",
}


class ServiceLocation(Enum):
    FRONT_RIGHT = "front_right"
    FRONT_LEFT = "front_left"
    BACK = "back"
    SLEEVE_LEFT = "sleeve_left"
    SLEEVE_RIGHT = "sleeve_right"
    CENTER_FRONT = "center_front"
    CENTER_BACK = "center_back"
    LEFT_SIDE = "left_side"
    RIGHT_SIDE = "right_side"
    TOP = "top"
    BOTTOM = "bottom"


SERVICE_LOCATION_LABELS: dict[ServiceLocation, str] = {
    ServiceLocation.FRONT_RIGHT: "Frente Direita",
    ServiceLocation.FRONT_LEFT: "Frente Esquerda",
    ServiceLocation.BACK: "Atrás",
    ServiceLocation.SLEEVE_LEFT: "Manga Esquerda",
    ServiceLocation.SLEEVE_RIGHT: "Manga Direita",
    ServiceLocation.CENTER_FRONT: "Centro Frente",
    ServiceLocation.CENTER_BACK: "Centro Atrás",
    ServiceLocation.LEFT_SIDE: "Lado Esquerdo",
    ServiceLocation.RIGHT_SIDE: "Lado Direito",
    ServiceLocation.TOP: "Topo",
    ServiceLocation.BOTTOM: "Base",
}


class MaterialType(Enum):
    VINYL_WHITE = "vinyl_white"
    VINYL_TRANSPARENT = "vinyl_transparent"
    VINYL_PERFORATED = "vinyl_perforated"
    VINYL_CUT = "vinyl_cut"
    BANNER_BLACK_WHITE = "banner_black_white"
    BACKLITE = "backlite"
    FLAG_FABRIC = "flag_fabric"
    OTHER = "other"


MATERIAL_LABELS: dict[MaterialType, str] = {
    MaterialType.VINYL_WHITE: "Vinil Branco",
    MaterialType.VINYL_TRANSPARENT: "Vinil Transparente",
    MaterialType.VINYL_PERFORATED: "Vinil Perfurado",
    MaterialType.VINYL_CUT: "Vinil de Corte",
    MaterialType.BANNER_BLACK_WHITE: "Banner Preto e Branco",
    MaterialType.BACKLITE: "Backlite",
    MaterialType.FLAG_FABRIC: "Tecido de Bandeira",
    MaterialType.OTHER: "Outros",
}


def parse_enum(enum_cls, raw, what: str):
    """Coerce ``raw`` (member or value string) into ``enum_cls``."""
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Unknown {what} '{raw}' (expected one of {allowed})") from None


def _clean_label(label: str | None) -> str | None:
    if label is None:
        return None
    label = label.strip()
    return label or None


@dataclass(frozen=True)
class GarmentKind:
    """Either a fixed garment type or ``custom`` with a free-text label."""

    kind: GarmentType
    label: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", parse_enum(GarmentType, self.kind, "garment type"))
        label = _clean_label(self.label)
        if self.kind is GarmentType.CUSTOM and label is None:
            raise ValidationError("A custom garment type requires a description")
        if self.kind is not GarmentType.CUSTOM and label is not None:
            raise ValidationError(
                f"Garment type '{self.kind.value}' does not take a custom description"
            )
        object.__setattr__(self, "label", label)

    @property
    def display_name(self) -> str:
        return self.label if self.label else GARMENT_TYPE_LABELS[self.kind]


@dataclass(frozen=True)
class Material:
    """Either a fixed print material or ``other`` with a free-text label."""

    kind: MaterialType
    label: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", parse_enum(MaterialType, self.kind, "material"))
        label = _clean_label(self.label)
        if self.kind is MaterialType.OTHER and label is None:
            raise ValidationError("Material 'other' requires a custom material description")
        if self.kind is not MaterialType.OTHER and label is not None:
            raise ValidationError(
                f"Material '{self.kind.value}' does not take a custom description"
            )
        object.__setattr__(self, "label", label)

    @property
    def display_name(self) -> str:
        return self.label if self.label else MATERIAL_LABELS[self.kind]
