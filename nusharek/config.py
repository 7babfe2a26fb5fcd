from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
        populate_by_name=True,
    )

    app_name: str = 'Nusharek Report Renderer'

    # Brand strings drawn on the cover and in the footer pass
    brand_name: str = 'منصة نُشارك'
    report_title: str = 'تقرير تقييم المشاركة المجتمعية'

    # Comma-separated, tried in order. Local paths or http(s) URLs.
    report_font_locations: str = Field(
        default=(
            'assets/fonts/Amiri-Regular.ttf,'
            'https://fonts.gstatic.com/s/amiri/v27/J7aRnpd8CGxBHqUp.ttf'
        ),
        validation_alias=AliasChoices('REPORT_FONT_LOCATIONS', 'NUSHAREK_FONT_LOCATIONS'),
    )
    font_fetch_timeout_seconds: float = 20.0
    # Used in fallback mode when no shaping-capable font could be loaded
    fallback_font_candidates: str = (
        '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf,'
        '/usr/share/fonts/dejavu/DejaVuSans.ttf'
    )

    report_style: str = Field(
        default='standard',
        validation_alias=AliasChoices('REPORT_STYLE', 'NUSHAREK_REPORT_STYLE'),
    )

    # Page geometry, millimetres
    pdf_page_margin: float = 18.0
    pdf_top_margin: float = 20.0
    pdf_footer_reserve: float = 18.0

    log_level: str = 'INFO'

    def font_locations(self) -> list[str]:
        return _split_csv(self.report_font_locations)

    def fallback_fonts(self) -> list[str]:
        return _split_csv(self.fallback_font_candidates)


def _split_csv(value: str) -> list[str]:
    items: list[str] = []
    for item in str(value or '').split(','):
        normalized = item.strip()
        if not normalized:
            continue
        items.append(normalized)
    return items


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
