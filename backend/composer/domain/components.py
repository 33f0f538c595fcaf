# composer/domain/components.py
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Tuple, TypedDict

from composer.domain.invariants.component import assert_component
from composer.domain.invariants.exceptions import InvariantViolation


@dataclass
class ComponentItem:
    """
    One placed component on a page.

    ``order`` is a sort key, not a list index. Equality is structural,
    which is what change tracking compares against.
    """
    id: str
    type: str
    content: Dict[str, Any] = field(default_factory=dict)
    settings: Dict[str, Any] = field(default_factory=dict)
    order: int = 0

    def payload(self) -> Dict[str, Any]:
        return {"content": self.content, "settings": self.settings}

    def clone(self) -> ComponentItem:
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "content": copy.deepcopy(self.content),
            "settings": copy.deepcopy(self.settings),
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ComponentItem:
        component_id = data["id"]
        return cls(
            id=component_id,
            type=data.get("type") or component_type_from_id(component_id),
            content=copy.deepcopy(dict(data.get("content") or {})),
            settings=copy.deepcopy(dict(data.get("settings") or {})),
            order=int(data.get("order", 0)),
        )


def component_type_from_id(component_id: str) -> str:
    """Type tag encoded in a ``{type}-{timestamp}`` id."""
    return component_id.split("-", 1)[0]


def validate_component(component: Any) -> bool:
    try:
        assert_component(component)
    except (InvariantViolation, AttributeError):
        return False
    return True


# -------------------------------------------------
# Per-type content / settings shapes
# -------------------------------------------------

class BannerContent(TypedDict, total=False):
    title: str
    subtitle: str
    image: str
    buttonText: str
    buttonLink: str


class BannerSettings(TypedDict, total=False):
    fullWidth: bool
    height: str  # small | medium | large
    textColor: str
    overlay: bool
    overlayOpacity: float


class Slide(TypedDict, total=False):
    title: str
    description: str
    image: str
    buttonText: str
    buttonLink: str


class SliderContent(TypedDict):
    slides: List[Slide]


class SliderSettings(TypedDict, total=False):
    autoplay: bool
    interval: int  # milliseconds
    showDots: bool
    showArrows: bool
    fullWidth: bool
    height: str
    animation: str  # fade | slide


class PromotionContent(TypedDict, total=False):
    title: str
    subtitle: str
    description: str
    image: str
    backgroundColor: str
    textColor: str
    ctaText: str
    ctaLink: str
    discount: str
    expiryDate: str  # ISO date


class PromotionSettings(TypedDict, total=False):
    fullWidth: bool
    layout: str  # horizontal | vertical
    rounded: bool
    showBadge: bool
    badgeText: str
    animateBadge: bool
    shadow: bool
    padding: str


class TextContent(TypedDict, total=False):
    title: str
    subtitle: str
    text: str
    alignment: str


class TextSettings(TypedDict, total=False):
    fullWidth: bool
    backgroundColor: str
    textColor: str
    padding: bool
    maxWidth: str


class NewsletterContent(TypedDict, total=False):
    title: str
    description: str
    buttonText: str
    placeholderText: str
    termsText: str


class NewsletterSettings(TypedDict, total=False):
    layout: str  # stacked | inline
    backgroundColor: str
    textColor: str
    buttonColor: str
    rounded: bool
    shadow: bool
    padding: str


class ImageContent(TypedDict, total=False):
    src: str
    alt: str
    caption: str


class ImageSettings(TypedDict, total=False):
    fullWidth: bool
    rounded: bool
    shadow: bool
    maxWidth: str
    aspectRatio: str
    objectFit: str


class VideoContent(TypedDict, total=False):
    videoUrl: str
    title: str
    description: str


class VideoSettings(TypedDict, total=False):
    fullWidth: bool
    maxWidth: str
    aspectRatio: str
    autoplay: bool
    muted: bool
    controls: bool
    loop: bool


class FeaturedProductsContent(TypedDict, total=False):
    title: str
    description: str
    productIds: List[str]
    viewAllLink: str
    viewAllText: str


class FeaturedProductsSettings(TypedDict, total=False):
    count: int
    columns: Dict[str, int]
    showPrice: bool
    showDescription: bool
    showButton: bool
    buttonText: str
    layout: str


class Testimonial(TypedDict):
    text: str
    author: str
    role: str


class TestimonialsContent(TypedDict, total=False):
    title: str
    description: str
    testimonials: List[Testimonial]


class TestimonialsSettings(TypedDict, total=False):
    layout: str
    slidesToShow: int
    autoplay: bool
    showDots: bool
    backgroundColor: str
    textColor: str
    rounded: bool
    shadow: bool


class HtmlContent(TypedDict):
    html: str


class HtmlSettings(TypedDict, total=False):
    fullWidth: bool
    maxWidth: str
    containerClass: str


# type tag -> (content shape, settings shape)
COMPONENT_SHAPES: Dict[str, Tuple[type, type]] = {
    "banner": (BannerContent, BannerSettings),
    "slider": (SliderContent, SliderSettings),
    "promotion": (PromotionContent, PromotionSettings),
    "text": (TextContent, TextSettings),
    "newsletter": (NewsletterContent, NewsletterSettings),
    "image": (ImageContent, ImageSettings),
    "video": (VideoContent, VideoSettings),
    "featured_products": (FeaturedProductsContent, FeaturedProductsSettings),
    "testimonials": (TestimonialsContent, TestimonialsSettings),
    "html": (HtmlContent, HtmlSettings),
}


# -------------------------------------------------
# Palette
# -------------------------------------------------

class PaletteEntry(NamedTuple):
    id: str
    name: str
    description: str


PALETTE: List[PaletteEntry] = [
    PaletteEntry("banner", "Banner", "Large image with a heading and a call-to-action button"),
    PaletteEntry("slider", "Slider", "Carousel of rotating slides"),
    PaletteEntry("promotion", "Promotion", "Highlight for a special offer"),
    PaletteEntry("newsletter", "Newsletter", "Newsletter sign-up form"),
    PaletteEntry("text", "Text", "Simple block of formatted text"),
    PaletteEntry("video", "Video", "Embedded video"),
    PaletteEntry("html", "HTML", "Custom HTML content"),
    PaletteEntry("testimonials", "Testimonials", "Customer reviews"),
    PaletteEntry("featured_products", "Featured products", "Selection of catalog products"),
    PaletteEntry("image", "Image", "Single image with caption"),
]
