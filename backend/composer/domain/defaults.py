# composer/domain/defaults.py
from __future__ import annotations

import copy
import logging
import time
from collections.abc import Mapping
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, TypedDict

from composer.domain.components import ComponentItem
from composer.domain.invariants.component import assert_component_type

logger = logging.getLogger(__name__)


class ComponentDefaults(TypedDict):
    content: Dict[str, Any]
    settings: Dict[str, Any]


class UnknownComponentType(LookupError):
    def __init__(self, component_type: str):
        super().__init__(f"No defaults registered for component type {component_type!r}")
        self.component_type = component_type


class DefaultsSource(Protocol):
    def get_component_defaults(self, component_type: str) -> Optional[ComponentDefaults]:
        ...


class ComponentDefaultsRegistry:
    """
    Maps a component type tag to the function building its initial payload.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, Callable[[], ComponentDefaults]] = {}

    def register(self, component_type: str):
        assert_component_type(component_type)

        def decorator(factory: Callable[[], ComponentDefaults]):
            self._factories[component_type] = factory
            return factory

        return decorator

    def get_component_defaults(self, component_type: str) -> ComponentDefaults:
        try:
            factory = self._factories[component_type]
        except KeyError:
            raise UnknownComponentType(component_type) from None

        return factory()

    def types(self) -> List[str]:
        return list(self._factories)

    def __contains__(self, component_type: object) -> bool:
        return component_type in self._factories


registry = ComponentDefaultsRegistry()


@registry.register("banner")
def banner_defaults() -> ComponentDefaults:
    return {
        "content": {
            "title": "Banner title",
            "subtitle": "Banner subtitle",
            "image": "/assets/logo.jpeg",
            "buttonText": "Learn more",
            "buttonLink": "/collections",
        },
        "settings": {
            "fullWidth": True,
            "height": "medium",
            "textColor": "#ffffff",
            "overlay": True,
            "overlayOpacity": 0.4,
        },
    }


@registry.register("slider")
def slider_defaults() -> ComponentDefaults:
    return {
        "content": {
            "slides": [
                {
                    "title": "Spring collection",
                    "description": "Discover our new collection",
                    "image": "/assets/logo.jpeg",
                    "buttonText": "Explore",
                    "buttonLink": "/collections/spring",
                },
                {
                    "title": "Free delivery",
                    "description": "On every order over 50€",
                    "image": "/assets/logo.jpeg",
                    "buttonText": "Order now",
                    "buttonLink": "/catalog",
                },
            ]
        },
        "settings": {
            "autoplay": True,
            "interval": 5000,
            "showDots": True,
            "showArrows": True,
            "fullWidth": True,
            "height": "medium",
            "animation": "fade",
        },
    }


def _expiry_date(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


@registry.register("promotion")
def promotion_defaults() -> ComponentDefaults:
    return {
        "content": {
            "title": "Special offer",
            "subtitle": "Limited time only",
            "description": "Make the most of this exceptional offer!",
            "image": "/assets/logo.jpeg",
            "backgroundColor": "#ff5252",
            "textColor": "#ffffff",
            "ctaText": "Shop the offer",
            "ctaLink": "/promotions",
            "discount": "-20%",
            "expiryDate": _expiry_date(7),
        },
        "settings": {
            "fullWidth": True,
            "layout": "horizontal",
            "rounded": True,
            "showBadge": True,
            "badgeText": "PROMO",
            "animateBadge": True,
            "shadow": True,
            "padding": "medium",
        },
    }


@registry.register("text")
def text_defaults() -> ComponentDefaults:
    return {
        "content": {
            "title": "Section title",
            "subtitle": "",
            "text": "<p>Enter your text here...</p>",
            "alignment": "left",
        },
        "settings": {
            "fullWidth": False,
            "backgroundColor": "transparent",
            "textColor": "#000000",
            "padding": True,
            "maxWidth": "lg",
        },
    }


@registry.register("newsletter")
def newsletter_defaults() -> ComponentDefaults:
    return {
        "content": {
            "title": "Subscribe to our newsletter",
            "description": "Be the first to hear about new offers and arrivals",
            "buttonText": "Subscribe",
            "placeholderText": "Your email address",
            "termsText": "By subscribing you agree to receive our newsletters.",
        },
        "settings": {
            "layout": "stacked",
            "backgroundColor": "#f3f4f6",
            "textColor": "#000000",
            "buttonColor": "#10b981",
            "rounded": True,
            "shadow": False,
            "padding": "medium",
        },
    }


@registry.register("image")
def image_defaults() -> ComponentDefaults:
    return {
        "content": {
            "src": "/assets/logo.jpeg",
            "alt": "Descriptive image",
            "caption": "",
        },
        "settings": {
            "fullWidth": False,
            "rounded": True,
            "shadow": False,
            "maxWidth": "md",
            "aspectRatio": "16/9",
            "objectFit": "cover",
        },
    }


@registry.register("video")
def video_defaults() -> ComponentDefaults:
    return {
        "content": {
            "videoUrl": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "title": "Video",
            "description": "",
        },
        "settings": {
            "fullWidth": False,
            "maxWidth": "lg",
            "aspectRatio": "16/9",
            "autoplay": False,
            "muted": True,
            "controls": True,
            "loop": False,
        },
    }


@registry.register("featured_products")
def featured_products_defaults() -> ComponentDefaults:
    return {
        "content": {
            "title": "Featured products",
            "description": "A hand-picked selection from our catalog",
            "productIds": [],
            "viewAllLink": "/catalog",
            "viewAllText": "View all products",
        },
        "settings": {
            "count": 3,
            "columns": {"sm": 1, "md": 2, "lg": 3},
            "showPrice": True,
            "showDescription": True,
            "showButton": True,
            "buttonText": "Add to cart",
            "layout": "grid",
        },
    }


@registry.register("testimonials")
def testimonials_defaults() -> ComponentDefaults:
    return {
        "content": {
            "title": "What our customers say",
            "description": "Reviews from our happy customers",
            "testimonials": [
                {
                    "text": "Outstanding service and beautiful products.",
                    "author": "Marie Dupont",
                    "role": "Loyal customer",
                },
                {
                    "text": "I warmly recommend them for their professionalism.",
                    "author": "Jean Martin",
                    "role": "Customer since 2023",
                },
            ],
        },
        "settings": {
            "layout": "grid",
            "slidesToShow": 1,
            "autoplay": True,
            "showDots": True,
            "backgroundColor": "#ffffff",
            "textColor": "#000000",
            "rounded": True,
            "shadow": True,
        },
    }


@registry.register("html")
def html_defaults() -> ComponentDefaults:
    return {
        "content": {
            "html": "<div style='text-align: center;'><p>Insert your custom HTML here</p></div>",
        },
        "settings": {
            "fullWidth": False,
            "maxWidth": "lg",
            "containerClass": "",
        },
    }


# -------------------------------------------------
# Fallback used when the registry cannot answer
# -------------------------------------------------
FALLBACK_DEFAULTS: Dict[str, ComponentDefaults] = {
    "banner": {
        "content": {
            "title": "Banner title",
            "subtitle": "Banner subtitle",
            "image": "/assets/logo.jpeg",
            "buttonText": "Learn more",
            "buttonLink": "/collections",
        },
        "settings": {
            "fullWidth": True,
            "height": "medium",
            "textColor": "#ffffff",
        },
    },
    "slider": {
        "content": {
            "slides": [
                {
                    "title": "Spring collection",
                    "description": "Discover our new collection",
                    "image": "/assets/logo.jpeg",
                },
                {
                    "title": "Free delivery",
                    "description": "On every order over 50€",
                    "image": "/assets/logo.jpeg",
                },
            ]
        },
        "settings": {
            "autoplay": True,
            "interval": 5000,
            "showDots": True,
        },
    },
    "promotion": {
        "content": {
            "title": "Special offer",
            "subtitle": "Limited time only",
            "description": "Make the most of this exceptional offer!",
            "image": "/assets/logo.jpeg",
            "backgroundColor": "#ff5252",
            "textColor": "#ffffff",
            "ctaText": "Shop the offer",
            "ctaLink": "/promotions",
            "discount": "-20%",
        },
        "settings": {
            "fullWidth": True,
            "layout": "horizontal",
            "rounded": True,
            "showBadge": True,
            "badgeText": "PROMO",
            "animateBadge": True,
            "shadow": True,
        },
    },
}


def fallback_defaults(component_type: str) -> ComponentDefaults:
    defaults = FALLBACK_DEFAULTS.get(component_type)
    if defaults is None:
        return {"content": {}, "settings": {}}

    defaults = copy.deepcopy(defaults)
    if component_type == "promotion":
        defaults["content"]["expiryDate"] = _expiry_date(7)
    return defaults


def resolve_defaults(component_type: str, source: Optional[DefaultsSource] = None) -> ComponentDefaults:
    """
    Initial ``{content, settings}`` for a new component. Never raises.

    The source may be out of sync with the types the editor offers; any
    failure or empty answer falls back to the hardcoded table.
    """
    source = source if source is not None else registry

    try:
        defaults = source.get_component_defaults(component_type)
    except UnknownComponentType:
        logger.warning("No registered defaults for %r, using fallback", component_type)
        return fallback_defaults(component_type)
    except Exception:
        logger.warning("Defaults lookup failed for %r, using fallback", component_type, exc_info=True)
        return fallback_defaults(component_type)

    if (
        not isinstance(defaults, Mapping)
        or not isinstance(defaults.get("content"), Mapping)
        or not isinstance(defaults.get("settings"), Mapping)
    ):
        logger.warning("Defaults source returned nothing usable for %r, using fallback", component_type)
        return fallback_defaults(component_type)

    return {
        "content": copy.deepcopy(dict(defaults["content"])),
        "settings": copy.deepcopy(dict(defaults["settings"])),
    }


def _now_millis() -> int:
    return int(time.time() * 1000)


def generate_component_id(
    component_type: str,
    taken: Iterable[str] = (),
    clock: Optional[Callable[[], int]] = None,
) -> str:
    """
    ``{type}-{millis}``. When the id is already in ``taken`` the timestamp
    is bumped until it is free.
    """
    assert_component_type(component_type)

    taken = set(taken)
    stamp = (clock or _now_millis)()
    component_id = f"{component_type}-{stamp}"

    while component_id in taken:
        stamp += 1
        component_id = f"{component_type}-{stamp}"

    return component_id


def new_component(
    component_type: str,
    *,
    order: int = 0,
    taken: Iterable[str] = (),
    source: Optional[DefaultsSource] = None,
) -> ComponentItem:
    defaults = resolve_defaults(component_type, source)
    return ComponentItem(
        id=generate_component_id(component_type, taken),
        type=component_type,
        content=defaults["content"],
        settings=defaults["settings"],
        order=order,
    )


def duplicate_component(component: ComponentItem, taken: Iterable[str] = ()) -> ComponentItem:
    duplicate = component.clone()
    duplicate.id = generate_component_id(component.type, taken)
    return duplicate
