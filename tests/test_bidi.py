from __future__ import annotations

from nusharek.text.bidi import LTR_LEVEL, bidi_class, embedding_levels, reorder


class TestLevels:
    def test_arabic_is_odd(self):
        assert embedding_levels('سلام') == [1, 1, 1, 1]

    def test_latin_in_rtl_paragraph(self):
        assert embedding_levels('abc') == [2, 2, 2]

    def test_ltr_paragraph(self):
        assert embedding_levels('abc', LTR_LEVEL) == [0, 0, 0]

    def test_arabic_digits_are_raised(self):
        assert embedding_levels('ب ٥٠') == [1, 1, 2, 2]

    def test_trailing_whitespace_reset(self):
        assert embedding_levels('abc ')[-1] == 1

    def test_classes(self):
        assert bidi_class('ب') == 'AL'
        assert bidi_class('٥') == 'AN'
        assert bidi_class('5') == 'EN'
        assert bidi_class('\u2067') == 'RLI'


class TestReorder:
    def test_pure_arabic_is_reversed(self):
        assert reorder('سلام') == 'مالس'

    def test_latin_keeps_its_order(self):
        assert reorder('abc') == 'abc'

    def test_mixed_words(self):
        assert reorder('مرحبا abc') == 'abc ابحرم'

    def test_numbers_stay_left_to_right(self):
        assert reorder('العدد 123') == '123 ددعلا'

    def test_brackets_are_mirrored(self):
        assert reorder('أ (ب)') == '(ب) أ'

    def test_isolates_are_dropped(self):
        assert reorder('\u2067abc\u2069') == 'abc'

    def test_embedding_marks_are_dropped(self):
        out = reorder('\u202bب\u202c')
        assert out == 'ب'

    def test_lines_are_independent(self):
        assert reorder('سلام\nabc') == 'مالس\nabc'

    def test_ltr_base(self):
        assert reorder('abc سلام', base_level=LTR_LEVEL) == 'abc مالس'

    def test_empty(self):
        assert reorder('') == ''
