from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path

import httpx
import pytest
import reportlab
from fontTools.ttLib import TTFont as FontToolsTTFont
from reportlab.pdfbase import pdfmetrics

from nusharek.report.fonts import (
    FONT_BUILTIN_FALLBACK,
    FontResourceCache,
    FontUnavailableError,
    fetch_font_bytes,
    load_font_resource,
    register_font,
    resolve_fallback_font,
)

VERA_PATH = Path(reportlab.__file__).parent / 'fonts' / 'Vera.ttf'
VERA_BOLD_PATH = Path(reportlab.__file__).parent / 'fonts' / 'VeraBd.ttf'


def _recording_transport(routes: dict[str, bytes], calls: list[str]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        body = routes.get(str(request.url))
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, content=body)

    return httpx.MockTransport(handler)


class TestLoadFontResource:
    def test_font_without_arabic_is_rejected(self):
        with pytest.raises(FontUnavailableError, match='Arabic'):
            load_font_resource(VERA_PATH.read_bytes(), str(VERA_PATH))

    def test_coverage_check_can_be_skipped(self):
        resource = load_font_resource(VERA_PATH.read_bytes(), 'vera', name='NS-Test-Load', require_arabic=False)
        assert resource.name == 'NS-Test-Load'
        assert resource.source == 'vera'

    def test_garbage_is_rejected(self):
        with pytest.raises(FontUnavailableError):
            load_font_resource(b'not a font at all', 'junk', require_arabic=False)

    def test_woff_is_converted(self):
        font = FontToolsTTFont(str(VERA_PATH))
        font.flavor = 'woff'
        buffer = io.BytesIO()
        font.save(buffer)
        woff = buffer.getvalue()
        assert woff[:4] == b'wOFF'

        resource = load_font_resource(woff, 'vera.woff', name='NS-Test-Woff', require_arabic=False)
        assert resource.data[:4] == b'\x00\x01\x00\x00'

    def test_register_is_idempotent(self, vera_font):
        assert register_font(vera_font) == 'NS-Test-Vera'
        assert register_font(vera_font) == 'NS-Test-Vera'
        assert 'NS-Test-Vera' in pdfmetrics.getRegisteredFontNames()

    def test_reused_name_with_other_bytes_gets_its_own_face(self):
        regular = load_font_resource(VERA_PATH.read_bytes(), 'vera', name='NS-Test-Swap', require_arabic=False)
        bold = load_font_resource(VERA_BOLD_PATH.read_bytes(), 'vera-bold', name='NS-Test-Swap', require_arabic=False)

        first = register_font(regular)
        second = register_font(bold)

        assert first == 'NS-Test-Swap'
        assert second != first
        assert second.startswith('NS-Test-Swap-')
        assert register_font(bold) == second
        assert register_font(regular) == first
        assert pdfmetrics.stringWidth('Wide', first, 10) != pdfmetrics.stringWidth('Wide', second, 10)


class TestFetch:
    def test_missing_local_file(self, tmp_path):
        async def run():
            async with httpx.AsyncClient() as client:
                await fetch_font_bytes(str(tmp_path / 'missing.ttf'), client)

        with pytest.raises(FileNotFoundError):
            asyncio.run(run())

    def test_local_file(self):
        async def run():
            async with httpx.AsyncClient() as client:
                return await fetch_font_bytes(str(VERA_PATH), client)

        assert asyncio.run(run()) == VERA_PATH.read_bytes()


class TestFontResourceCache:
    def test_exhaustion_returns_none_and_warns(self, tmp_path, caplog):
        calls: list[str] = []
        cache = FontResourceCache()
        locations = [
            'https://fonts.example.test/Amiri-Regular.ttf',
            str(tmp_path / 'missing.ttf'),
            str(VERA_PATH),
        ]
        with caplog.at_level(logging.WARNING, logger='nusharek.report.fonts'):
            result = asyncio.run(cache.acquire(locations, transport=_recording_transport({}, calls)))

        assert result is None
        assert cache.resource is None
        assert calls == ['https://fonts.example.test/Amiri-Regular.ttf']
        assert 'fallback mode' in caplog.text

    def test_malformed_url_falls_through_to_later_locations(self, tmp_path, caplog):
        locations = ['http://[::1', str(tmp_path / 'missing.ttf')]
        with caplog.at_level(logging.WARNING, logger='nusharek.report.fonts'):
            result = asyncio.run(FontResourceCache().acquire(locations))

        assert result is None
        assert 'fallback mode' in caplog.text

    def test_malformed_url_does_not_hide_a_usable_font(self, arabic_font_path: Path):
        cache = FontResourceCache()
        result = asyncio.run(cache.acquire(['http://[::1', str(arabic_font_path)]))

        assert result is not None
        assert result.source == str(arabic_font_path)

    def test_empty_location_list(self):
        assert asyncio.run(FontResourceCache().acquire([])) is None

    def test_first_usable_location_wins_and_is_cached(self, arabic_font_path: Path):
        calls: list[str] = []
        url = 'https://fonts.example.test/arabic.ttf'
        transport = _recording_transport({url: arabic_font_path.read_bytes()}, calls)
        cache = FontResourceCache()
        locations = ['https://fonts.example.test/broken.ttf', url]

        first = asyncio.run(cache.acquire(locations, transport=transport))
        second = asyncio.run(cache.acquire(locations, transport=transport))

        assert first is not None
        assert first.source == url
        assert second is first
        assert calls == ['https://fonts.example.test/broken.ttf', url]

    def test_clear_allows_retry(self, arabic_font_path: Path):
        cache = FontResourceCache()
        first = asyncio.run(cache.acquire([str(arabic_font_path)]))
        assert first is not None
        cache.clear()
        assert cache.resource is None


class TestFallbackFont:
    def test_builtin_when_nothing_exists(self, tmp_path):
        assert resolve_fallback_font([str(tmp_path / 'nope.ttf')]) == FONT_BUILTIN_FALLBACK

    def test_first_existing_candidate(self):
        assert resolve_fallback_font([str(VERA_PATH)]) == 'NS-Fallback'
