from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from nusharek.config import get_settings
from nusharek.report.composer import ReportRenderError, render_report
from nusharek.report.styles import ReportStyleName
from nusharek.storage import read_json, write_bytes_atomic
from nusharek.text.normalizer import normalize
from nusharek.text.runs import render_text
from nusharek.types import AssessmentSummary, DimensionScore, Organization, ReportInput


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _load_report(path: Path, derive_insights: bool) -> ReportInput:
    payload = read_json(path)
    if not derive_insights:
        return ReportInput.model_validate(payload)
    organization = payload.get('organization')
    return ReportInput.from_scores(
        AssessmentSummary.model_validate(payload['summary']),
        [DimensionScore.model_validate(item) for item in payload.get('dimensions') or []],
        Organization.model_validate(organization) if organization else None,
    )


def cmd_render(args: argparse.Namespace) -> int:
    input_path = Path(args.input).expanduser().resolve()
    if not input_path.exists() or not input_path.is_file():
        _print_json({'status': 'error', 'message': f'Input not found: {input_path}'})
        return 2
    try:
        report = _load_report(input_path, args.derive_insights)
    except (ValueError, KeyError, ValidationError) as exc:
        _print_json({'status': 'error', 'message': f'Invalid report input: {exc}'})
        return 2

    try:
        rendered = asyncio.run(render_report(report, style=args.style))
    except ReportRenderError as exc:
        _print_json({'status': 'error', 'message': str(exc), 'retryable': True})
        return 1

    out_path = Path(args.out).expanduser() if args.out else Path.cwd() / rendered.filename
    if out_path.is_dir():
        out_path = out_path / rendered.filename
    write_bytes_atomic(out_path, rendered.content)
    _print_json(
        {
            'status': 'ok',
            'path': str(out_path),
            'filename': rendered.filename,
            'page_count': rendered.page_count,
            'fallback_mode': rendered.fallback_mode,
            'style': rendered.style,
            'bytes': len(rendered.content),
        }
    )
    return 0


def cmd_shape(args: argparse.Namespace) -> int:
    _print_json(
        {
            'logical': args.text,
            'normalized': normalize(args.text),
            'visual': render_text(args.text, args.fallback),
            'fallback_mode': bool(args.fallback),
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Nusharek assessment report renderer')
    sub = parser.add_subparsers(dest='command', required=True)

    render = sub.add_parser('render', help='Render a report PDF from a JSON ReportInput')
    render.add_argument('input', help='Path to the report input JSON')
    render.add_argument('--out', required=False, help='Output file or directory')
    render.add_argument(
        '--style',
        choices=[item.value for item in ReportStyleName],
        required=False,
        help='Report style (defaults to REPORT_STYLE)',
    )
    render.add_argument(
        '--derive-insights',
        action='store_true',
        help='Build strengths, opportunities and recommendations from the dimension scores',
    )
    render.set_defaults(func=cmd_render)

    shape = sub.add_parser('shape', help='Print the visual form of a string')
    shape.add_argument('text')
    shape.add_argument('--fallback', action='store_true', help='Normalize only, as in fallback mode')
    shape.set_defaults(func=cmd_shape)

    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
