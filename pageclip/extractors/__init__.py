"""Extraction sub-package: heuristic, template-agnostic clip metadata."""

from .heuristics import calc_link_density, is_description_candidate, score_contentyness
from .icons import Icon, IconRel, scrape_icon, scrape_icons
from .images import find_hero_img_urls, scrape_hero_img_urls
from .metadata import clean_title, scrape_description, scrape_site_name, scrape_title

__all__ = [
    "Icon",
    "IconRel",
    "calc_link_density",
    "clean_title",
    "find_hero_img_urls",
    "is_description_candidate",
    "scrape_description",
    "scrape_hero_img_urls",
    "scrape_icon",
    "scrape_icons",
    "scrape_site_name",
    "scrape_title",
    "score_contentyness",
]
