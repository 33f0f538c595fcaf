# composer/domain/templates.py
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from composer.domain.components import ComponentItem
from composer.domain.defaults import DefaultsSource, generate_component_id, resolve_defaults


@dataclass(frozen=True)
class TemplateComponent:
    type: str
    content: Dict[str, Any] = field(default_factory=dict)
    settings: Dict[str, Any] = field(default_factory=dict)
    order: int = 0


@dataclass(frozen=True)
class PageTemplate:
    """A named, predefined component list. Ids are generated on application."""
    id: str
    name: str
    description: str
    components: Tuple[TemplateComponent, ...] = ()


@dataclass(frozen=True)
class ComponentPreset:
    """A single ready-made component: registry defaults plus overrides."""
    id: str
    type: str
    name: str
    description: str
    content: Dict[str, Any] = field(default_factory=dict)
    settings: Dict[str, Any] = field(default_factory=dict)


PAGE_TEMPLATES: Tuple[PageTemplate, ...] = (
    PageTemplate(
        id="template-homepage",
        name="Homepage",
        description="Homepage with a banner, featured products and testimonials",
        components=(
            TemplateComponent(
                type="banner",
                order=0,
                content={
                    "title": "Welcome to Flowery Haven",
                    "subtitle": "Flowers that tell your story",
                    "image": "https://images.unsplash.com/photo-1523694576729-787d637408d9?q=80&w=1974&auto=format&fit=crop",
                    "buttonText": "Discover our collections",
                    "buttonLink": "/collections",
                },
                settings={
                    "fullWidth": True,
                    "height": "large",
                    "textColor": "#ffffff",
                },
            ),
            TemplateComponent(
                type="featured_products",
                order=10,
                content={
                    "title": "Our popular products",
                    "description": "The products our customers love most",
                    "productIds": [],
                    "viewAllLink": "/catalog",
                    "viewAllText": "View all products",
                },
                settings={
                    "count": 3,
                    "columns": {"sm": 1, "md": 2, "lg": 3},
                    "showPrice": True,
                    "showDescription": True,
                    "showButton": True,
                    "buttonText": "Add to cart",
                    "layout": "grid",
                },
            ),
            TemplateComponent(
                type="testimonials",
                order=20,
                content={
                    "title": "Customer reviews",
                    "description": "What our customers say about us",
                    "testimonials": [
                        {
                            "text": "Gorgeous flowers for my wedding, I highly recommend them!",
                            "author": "Sophie Martin",
                            "role": "Delighted bride",
                        },
                        {
                            "text": "Flawless service and fast delivery, very satisfied.",
                            "author": "Thomas Dubois",
                            "role": "Loyal customer",
                        },
                    ],
                },
                settings={
                    "layout": "grid",
                    "slidesToShow": 2,
                    "autoplay": False,
                    "showDots": True,
                    "backgroundColor": "#f8f9fa",
                    "textColor": "#000000",
                    "rounded": True,
                    "shadow": True,
                },
            ),
        ),
    ),
    PageTemplate(
        id="template-about",
        name="About",
        description="About page with an introduction and the shop's values",
        components=(
            TemplateComponent(
                type="banner",
                order=0,
                content={
                    "title": "Our story",
                    "subtitle": "Who we are and what drives us",
                    "image": "https://images.unsplash.com/photo-1462530260150-c3b7c86a4faa?q=80&w=2069&auto=format&fit=crop",
                    "buttonText": "",
                    "buttonLink": "",
                },
                settings={
                    "fullWidth": True,
                    "height": "medium",
                    "textColor": "#ffffff",
                },
            ),
            TemplateComponent(
                type="text",
                order=10,
                content={
                    "title": "Our passion",
                    "subtitle": "Since 2016",
                    "text": (
                        "<p>Founded in 2016, Flowery Haven grew out of a passion for floral art "
                        "and the wish to create unique arrangements that tell a story.</p>"
                        "<p>We carefully select exceptional flowers, favouring local growers "
                        "and sustainable practices.</p>"
                    ),
                    "alignment": "center",
                },
                settings={
                    "fullWidth": False,
                    "backgroundColor": "#ffffff",
                    "textColor": "#000000",
                    "padding": True,
                    "maxWidth": "lg",
                },
            ),
        ),
    ),
    PageTemplate(
        id="template-contact",
        name="Contact",
        description="Contact page with shop details and a contact form",
        components=(
            TemplateComponent(
                type="banner",
                order=0,
                content={
                    "title": "Contact us",
                    "subtitle": "We are here to help",
                    "image": "https://images.unsplash.com/photo-1559963110-71b394e7494d?q=80&w=2070&auto=format&fit=crop",
                    "buttonText": "",
                    "buttonLink": "",
                },
                settings={
                    "fullWidth": True,
                    "height": "small",
                    "textColor": "#ffffff",
                },
            ),
            TemplateComponent(
                type="html",
                order=10,
                content={
                    "html": (
                        '<div style="display: flex; flex-wrap: wrap; gap: 2rem; justify-content: center;">'
                        '<div style="flex: 1 1 300px;"><h3>Details</h3>'
                        "<p><strong>Address:</strong> 123 Flower Street, 75001 Paris</p>"
                        "<p><strong>Phone:</strong> 01 23 45 67 89</p>"
                        "<p><strong>Email:</strong> contact@floweryhaven.com</p></div>"
                        '<div style="flex: 1 1 300px;"><h3>Contact form</h3>'
                        '<form style="display: flex; flex-direction: column; gap: 1rem;">'
                        '<input type="text" placeholder="Your name">'
                        '<input type="email" placeholder="Your email">'
                        '<textarea rows="5" placeholder="Your message"></textarea>'
                        '<button type="button">Send</button>'
                        "</form></div></div>"
                    ),
                },
                settings={
                    "fullWidth": False,
                    "maxWidth": "lg",
                    "containerClass": "",
                },
            ),
        ),
    ),
)


COMPONENT_PRESETS: Tuple[ComponentPreset, ...] = (
    ComponentPreset(
        id="banner-welcome",
        type="banner",
        name="Welcome banner",
        description="Full-width hero banner with a call to action",
        content={
            "title": "Welcome to Flowery Haven",
            "subtitle": "Fresh flowers arranged with passion for every occasion",
            "image": "/assets/logo.jpeg",
            "buttonText": "Discover our collections",
            "buttonLink": "/collections",
        },
        settings={"height": "large"},
    ),
    ComponentPreset(
        id="slider-highlights",
        type="slider",
        name="Shop highlights",
        description="Three slides presenting the shop's services",
        content={
            "slides": [
                {
                    "title": "Spring collection",
                    "description": "Discover our new seasonal arrangements",
                    "image": "/assets/logo.jpeg",
                },
                {
                    "title": "Express delivery",
                    "description": "Same-day delivery for orders placed before 2pm",
                    "image": "/assets/logo.jpeg",
                },
                {
                    "title": "Made to measure",
                    "description": "Custom creations for your special events",
                    "image": "/assets/logo.jpeg",
                },
            ]
        },
        settings={"autoplay": True, "interval": 4000, "showDots": True},
    ),
    ComponentPreset(
        id="promotion-spring",
        type="promotion",
        name="Spring offer",
        description="Seasonal promotion with a discount badge",
        content={
            "title": "Spring special offer",
            "subtitle": "Freshness collection",
            "description": (
                "Bouquets and arrangements designed to celebrate the return of sunny days. "
                "Enjoy an exceptional discount on the whole collection."
            ),
            "image": "/assets/logo.jpeg",
            "backgroundColor": "#16a34a",
            "textColor": "#ffffff",
            "ctaText": "See the offer",
            "ctaLink": "/promotions/spring",
            "discount": "-20%",
        },
        settings={"layout": "horizontal", "badgeText": "SPRING", "animateBadge": True},
    ),
)


class TemplateLibrary:
    def __init__(
        self,
        templates: Iterable[PageTemplate] = PAGE_TEMPLATES,
        presets: Iterable[ComponentPreset] = COMPONENT_PRESETS,
        defaults_source: Optional[DefaultsSource] = None,
    ):
        self._templates = {template.id: template for template in templates}
        self._presets = {preset.id: preset for preset in presets}
        self._defaults_source = defaults_source

    def get_page_templates(self) -> List[PageTemplate]:
        return list(self._templates.values())

    def get_template(self, template_id: str) -> Optional[PageTemplate]:
        return self._templates.get(template_id)

    def instantiate(self, template_id: str, taken: Iterable[str] = ()) -> Optional[List[ComponentItem]]:
        """
        Fresh components for a template, or None when it does not exist.
        """
        template = self.get_template(template_id)
        if template is None:
            return None

        taken = set(taken)
        components = []

        for entry in template.components:
            component_id = generate_component_id(entry.type, taken)
            taken.add(component_id)
            components.append(
                ComponentItem(
                    id=component_id,
                    type=entry.type,
                    content=copy.deepcopy(entry.content),
                    settings=copy.deepcopy(entry.settings),
                    order=entry.order,
                )
            )

        return components

    def get_component_presets(self) -> List[ComponentPreset]:
        return list(self._presets.values())

    def get_preset(self, preset_id: str) -> Optional[ComponentPreset]:
        return self._presets.get(preset_id)

    def build_preset(self, preset_id: str, taken: Iterable[str] = ()) -> Optional[ComponentItem]:
        preset = self.get_preset(preset_id)
        if preset is None:
            return None

        defaults = resolve_defaults(preset.type, self._defaults_source)

        return ComponentItem(
            id=generate_component_id(preset.type, taken),
            type=preset.type,
            content={**defaults["content"], **copy.deepcopy(preset.content)},
            settings={**defaults["settings"], **copy.deepcopy(preset.settings)},
            order=0,
        )


library = TemplateLibrary()
