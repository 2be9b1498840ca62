# core/layout.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from PIL import Image

from config.colors import SWATCHES, Color
from config.roi import ROI, ROISet
from core.draft_schema import BAN_SLOTS, PLAYER_SLOTS, TeamColor
from core.errors import LayoutError
from core.image_utils import crop_relative
from core.ocr_engine import extract_text


class RegionKind(str, Enum):
    # Composite regions (sampled from the frame, expand into leaves)
    TOP = "top"
    BANS = "bans"
    PICKS = "picks"
    # Leaf regions
    MAP_NAME = "map_name"
    TURN_INDICATOR = "turn_indicator"
    BAN_SLOT = "ban_slot"
    HERO_NAME = "hero_name"
    PLAYER_NAME = "player_name"


# Leaves that carry OCR text
_TEXT_KINDS = {RegionKind.MAP_NAME, RegionKind.HERO_NAME, RegionKind.PLAYER_NAME}


@dataclass(frozen=True)
class RegionId:
    kind: RegionKind
    team: Optional[TeamColor] = None
    index: Optional[int] = None
    variant: Optional[str] = None

    @classmethod
    def top(cls) -> "RegionId":
        return cls(RegionKind.TOP)

    @classmethod
    def bans(cls, team: TeamColor) -> "RegionId":
        return cls(RegionKind.BANS, team=team)

    @classmethod
    def picks(cls, team: TeamColor) -> "RegionId":
        return cls(RegionKind.PICKS, team=team)

    def with_variant(self, variant: str) -> "RegionId":
        return replace(self, variant=variant)

    def __str__(self) -> str:
        parts = ["draft", self.kind.value]
        if self.team is not None:
            parts.append(self.team.value)
        if self.index is not None:
            parts.append(str(self.index))
        if self.variant:
            parts.append(self.variant)
        return ".".join(parts)


@dataclass
class RegionResult:
    region: RegionId
    image: Image.Image
    ocr_text: Optional[str] = None
    swatches: Dict[str, List[Color]] = field(default_factory=dict)

    def colors(self, name: str) -> List[Color]:
        try:
            return self.swatches[name]
        except KeyError:
            raise LayoutError(f"swatch '{name}' not defined for region {self.region}") from None


class Layout(Protocol):
    def apply(self, region: RegionId, source: Image.Image) -> List[RegionResult]: ...


OcrFn = Callable[[Image.Image], str]


class RoiLayout:
    """
    Default layout: crops relative ROIs, OCRs text leaves, and attaches the
    reference swatches every leaf may be tested against.

    Composite regions are applied to the full frame; HERO_NAME/PLAYER_NAME
    regions with a variant are applied to their slot crop.
    """

    def __init__(
        self,
        rois: ROISet = ROI,
        swatches: Optional[Dict[str, List[Color]]] = None,
        ocr: Optional[OcrFn] = None,
        ocr_lang: str = "eng",
    ):
        self.rois = rois
        self.swatches = dict(SWATCHES.swatches if swatches is None else swatches)
        self._ocr = ocr or (lambda img: extract_text(img, lang=ocr_lang))

    def apply(self, region: RegionId, source: Image.Image) -> List[RegionResult]:
        kind = region.kind

        if kind is RegionKind.TOP:
            return [
                self._leaf(RegionId(RegionKind.MAP_NAME), source, self.rois.MAP_NAME),
                self._leaf(RegionId(RegionKind.TURN_INDICATOR), source, self.rois.TURN_INDICATOR),
            ]

        if kind is RegionKind.BANS:
            team = self._require_team(region)
            return [
                self._leaf(
                    RegionId(RegionKind.BAN_SLOT, team=team, index=i),
                    source,
                    self.rois.ban_slot(team, i),
                )
                for i in range(BAN_SLOTS)
            ]

        if kind is RegionKind.PICKS:
            team = self._require_team(region)
            results: List[RegionResult] = []
            for i in range(PLAYER_SLOTS):
                # Slot crops are sampled for color first, OCR happens per variant
                results.append(
                    self._leaf(
                        RegionId(RegionKind.HERO_NAME, team=team, index=i),
                        source,
                        self.rois.hero_name(team, i),
                        with_ocr=False,
                    )
                )
                results.append(
                    self._leaf(
                        RegionId(RegionKind.PLAYER_NAME, team=team, index=i),
                        source,
                        self.rois.player_name(team, i),
                        with_ocr=False,
                    )
                )
            return results

        if kind in (RegionKind.HERO_NAME, RegionKind.PLAYER_NAME) and region.variant:
            variants = (
                self.rois.HERO_NAME_VARIANTS
                if kind is RegionKind.HERO_NAME
                else self.rois.PLAYER_NAME_VARIANTS
            )
            roi = variants.get(region.variant)
            if roi is None:
                raise LayoutError(f"unknown variant for region {region}")
            return [self._leaf(region, source, roi)]

        raise LayoutError(f"region {region} cannot be applied directly")

    def _leaf(
        self,
        region: RegionId,
        source: Image.Image,
        roi: Tuple[float, float, float, float],
        *,
        with_ocr: bool = True,
    ) -> RegionResult:
        img = crop_relative(source, roi)
        text = None
        if with_ocr and region.kind in _TEXT_KINDS:
            text = self._ocr(img)
        return RegionResult(region=region, image=img, ocr_text=text, swatches=self.swatches)

    @staticmethod
    def _require_team(region: RegionId) -> TeamColor:
        if region.team is None:
            raise LayoutError(f"region {region} needs a team")
        return region.team


def first_result(results: Sequence[RegionResult], region: RegionId) -> RegionResult:
    if not results:
        raise LayoutError(f"layout returned nothing for region {region}")
    return results[0]
