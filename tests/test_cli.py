from __future__ import annotations

import json

from main import main


def _sample_input() -> dict:
    return {
        'summary': {'overall_score': 71, 'maturity': 'emerging', 'assessment_id': 'a1b2c3d4-9999'},
        'organization': {'name': 'جمعية البر', 'name_en': 'Al Birr'},
        'dimensions': [
            {'dimension_name': 'الحوكمة', 'order_index': 0, 'raw_score': 16, 'max_score': 20},
            {'dimension_name': 'الشراكات', 'order_index': 1, 'raw_score': 9, 'max_score': 20},
        ],
        'strengths': ['حوكمة واضحة'],
    }


class TestShapeCommand:
    def test_fallback_prints_normalized_text(self, isolated_env, capsys):
        assert main(['shape', 'النسبة 50%', '--fallback']) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload['visual'] == 'النسبة ٥٠٪'
        assert payload['normalized'] == 'النسبة ٥٠٪'
        assert payload['fallback_mode'] is True


class TestRenderCommand:
    def test_writes_pdf(self, isolated_env, tmp_path, capsys):
        source = tmp_path / 'input.json'
        source.write_text(json.dumps(_sample_input(), ensure_ascii=False), encoding='utf-8')

        assert main(['render', str(source), '--out', str(tmp_path), '--style', 'compact']) == 0
        payload = json.loads(capsys.readouterr().out)
        out = tmp_path / payload['filename']
        assert payload['status'] == 'ok'
        assert payload['fallback_mode'] is True
        assert payload['style'] == 'compact'
        assert payload['filename'].startswith('assessment-report-al-birr-')
        assert out.read_bytes().startswith(b'%PDF')

    def test_derive_insights(self, isolated_env, tmp_path, capsys):
        data = _sample_input()
        data.pop('strengths')
        source = tmp_path / 'scores.json'
        source.write_text(json.dumps(data, ensure_ascii=False), encoding='utf-8')
        out = tmp_path / 'report.pdf'

        assert main(['render', str(source), '--out', str(out), '--derive-insights']) == 0
        assert out.read_bytes().startswith(b'%PDF')

    def test_missing_input(self, isolated_env, tmp_path, capsys):
        assert main(['render', str(tmp_path / 'missing.json')]) == 2
        assert json.loads(capsys.readouterr().out)['status'] == 'error'

    def test_invalid_input(self, isolated_env, tmp_path, capsys):
        source = tmp_path / 'bad.json'
        source.write_text(json.dumps({'summary': {'overall_score': 'high'}}), encoding='utf-8')
        assert main(['render', str(source)]) == 2
