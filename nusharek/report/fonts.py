from __future__ import annotations

import asyncio
import hashlib
import io
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import httpx
from fontTools.ttLib import TTFont as FontToolsTTFont
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont


logger = logging.getLogger(__name__)

FONT_ARABIC_NAME = 'NS-Arabic'
FONT_FALLBACK_NAME = 'NS-Fallback'
FONT_BUILTIN_FALLBACK = 'Helvetica'

# Code points a font must map to be usable for shaped output: the four forms
# of beh, the lam-alef ligature, Arabic-Indic digits and the percent sign.
REQUIRED_CODEPOINTS = (
    tuple(range(0xFE8F, 0xFE93))
    + (0xFEFB, 0xFEFC)
    + tuple(range(0x0660, 0x066A))
    + (0x066A,)
)


class FontUnavailableError(RuntimeError):
    pass


@dataclass(frozen=True)
class FontResource:
    name: str
    source: str
    data: bytes = field(repr=False)


def _is_remote(location: str) -> bool:
    return location.startswith('http://') or location.startswith('https://')


def _safe_file(path: Path) -> Path | None:
    if path.exists() and path.is_file():
        return path
    return None


def _convert_woff_to_ttf(data: bytes, source: str) -> bytes:
    if data[:4] not in (b'wOFF', b'wOF2'):
        return data
    try:
        font = FontToolsTTFont(io.BytesIO(data))
        font.flavor = None
        buffer = io.BytesIO()
        font.save(buffer)
    except Exception as exc:
        raise FontUnavailableError(f'Failed to convert WOFF font {source}: {exc}') from exc
    return buffer.getvalue()


def _check_font_bytes(data: bytes, source: str, *, require_arabic: bool) -> None:
    try:
        inspected = FontToolsTTFont(io.BytesIO(data), lazy=True)
        has_outlines = 'glyf' in inspected
        cmap = inspected.getBestCmap() or {}
    except Exception as exc:
        raise FontUnavailableError(f'Unreadable font {source}: {exc}') from exc
    if not has_outlines:
        # ReportLab embeds TrueType outlines only
        raise FontUnavailableError(f'Font {source} has no TrueType outlines')
    if require_arabic:
        missing = [cp for cp in REQUIRED_CODEPOINTS if cp not in cmap]
        if missing:
            raise FontUnavailableError(
                f'Font {source} lacks {len(missing)} required Arabic code points (first U+{missing[0]:04X})'
            )


def load_font_resource(
    data: bytes,
    source: str,
    *,
    name: str = FONT_ARABIC_NAME,
    require_arabic: bool = True,
) -> FontResource:
    data = _convert_woff_to_ttf(data, source)
    _check_font_bytes(data, source, require_arabic=require_arabic)
    return FontResource(name=name, source=source, data=data)


_REGISTERED_DIGESTS: dict[str, str] = {}
_REGISTER_LOCK = threading.Lock()


def register_font(resource: FontResource) -> str:
    """Register ``resource`` with ReportLab and return the name to draw with.

    A name already bound to different font bytes is never rebound; the new
    face is registered under the name suffixed with its content digest.
    """
    digest = hashlib.sha1(resource.data).hexdigest()
    name = resource.name
    with _REGISTER_LOCK:
        if _REGISTERED_DIGESTS.get(name) == digest:
            return name
        if name in _REGISTERED_DIGESTS or name in pdfmetrics.getRegisteredFontNames():
            name = f'{resource.name}-{digest[:10]}'
            if _REGISTERED_DIGESTS.get(name) == digest:
                return name
        try:
            pdfmetrics.registerFont(TTFont(name, io.BytesIO(resource.data)))
        except Exception as exc:
            raise FontUnavailableError(f'Failed to register PDF font {name} from {resource.source}: {exc}') from exc
        _REGISTERED_DIGESTS[name] = digest
    return name


async def fetch_font_bytes(location: str, client: httpx.AsyncClient) -> bytes:
    if _is_remote(location):
        response = await client.get(location)
        response.raise_for_status()
        return response.content
    path = _safe_file(Path(location).expanduser())
    if path is None:
        raise FileNotFoundError(f'Font file not found: {location}')
    return await asyncio.to_thread(path.read_bytes)


class FontResourceCache:
    """Process-wide holder of the shaping-capable font.

    Loaded lazily by the first render that succeeds and never re-fetched
    afterwards. Failed acquisitions are not cached, so a later render retries.
    """

    def __init__(self) -> None:
        self._resource: FontResource | None = None
        self._lock = threading.Lock()

    @property
    def resource(self) -> FontResource | None:
        return self._resource

    def clear(self) -> None:
        with self._lock:
            self._resource = None

    async def acquire(
        self,
        locations: Iterable[str],
        *,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> FontResource | None:
        cached = self._resource
        if cached is not None:
            return cached

        candidates = [str(item).strip() for item in locations if str(item).strip()]
        errors: list[str] = []
        async with httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True) as client:
            for location in candidates:
                try:
                    data = await fetch_font_bytes(location, client)
                    resource = load_font_resource(data, location)
                    register_font(resource)
                except Exception as exc:
                    logger.info('Font location %s unusable: %s', location, exc)
                    errors.append(f'{location}: {exc}')
                    continue
                with self._lock:
                    if self._resource is None:
                        self._resource = resource
                    winner = self._resource
                logger.info('Loaded shaping font %s from %s', winner.name, winner.source)
                return winner

        logger.warning(
            'No shaping-capable font available after %d location(s); rendering in fallback mode. %s',
            len(candidates),
            '; '.join(errors),
        )
        return None


_DEFAULT_CACHE = FontResourceCache()


def default_font_cache() -> FontResourceCache:
    return _DEFAULT_CACHE


def resolve_fallback_font(candidates: Iterable[str]) -> str:
    for candidate in candidates:
        path = _safe_file(Path(candidate))
        if path is None:
            continue
        if FONT_FALLBACK_NAME in pdfmetrics.getRegisteredFontNames():
            return FONT_FALLBACK_NAME
        try:
            pdfmetrics.registerFont(TTFont(FONT_FALLBACK_NAME, str(path)))
            return FONT_FALLBACK_NAME
        except Exception as exc:
            logger.warning('Failed to register fallback PDF font from %s: %s', path, exc)
    return FONT_BUILTIN_FALLBACK
