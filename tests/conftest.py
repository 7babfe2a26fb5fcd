from __future__ import annotations

from pathlib import Path

import pytest
import reportlab

from nusharek.config import Settings, get_settings
from nusharek.report.fonts import FontResource, load_font_resource

VERA_PATH = Path(reportlab.__file__).parent / 'fonts' / 'Vera.ttf'
DEJAVU_CANDIDATES = (
    Path('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf'),
    Path('/usr/share/fonts/dejavu/DejaVuSans.ttf'),
)


@pytest.fixture(scope='session')
def vera_font() -> FontResource:
    """A real TrueType font without Arabic coverage, registered under a test name."""
    return load_font_resource(VERA_PATH.read_bytes(), str(VERA_PATH), name='NS-Test-Vera', require_arabic=False)


@pytest.fixture(scope='session')
def arabic_font_path() -> Path:
    for candidate in DEJAVU_CANDIDATES:
        if candidate.is_file():
            return candidate
    pytest.skip('no Arabic-capable system font available')


@pytest.fixture
def settings() -> Settings:
    return Settings(report_font_locations='', fallback_font_candidates='')


@pytest.fixture
def isolated_env(monkeypatch):
    monkeypatch.setenv('REPORT_FONT_LOCATIONS', '')
    monkeypatch.setenv('FALLBACK_FONT_CANDIDATES', '')
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
