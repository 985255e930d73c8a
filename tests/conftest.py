"""Shared pytest fixtures for hyperpalette tests."""

import os

# Wide terminal so Rich does not wrap long tmp paths in CLI output.
os.environ.setdefault("COLUMNS", "200")

import pytest

from hyperpalette.config.options import PaletteOptions
from hyperpalette.core.controller import PaletteController
from hyperpalette.keybindings import KeyBindingService
from hyperpalette.models.items import Navigable
from palette_fixtures import SubstringSearcher, default_modes


@pytest.fixture
def key_bindings():
    return KeyBindingService()


@pytest.fixture
def make_palette(key_bindings):
    """Factory building a controller with the substring searcher and no debounce."""
    created = []

    def factory(modes=None, **options):
        options.setdefault("debounce", 0)
        palette = PaletteController(
            PaletteOptions(modes=modes if modes is not None else default_modes(), **options),
            key_bindings=key_bindings,
            searcher_factory=SubstringSearcher,
        )
        created.append(palette)
        return palette

    yield factory

    for palette in created:
        palette.destroy()


@pytest.fixture
def palette(make_palette):
    return make_palette()


@pytest.fixture
def pages():
    return [
        Navigable("/home", name="Home"),
        Navigable("/settings", name="Settings"),
        Navigable("/about", name="About"),
    ]
