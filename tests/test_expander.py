"""Tests for expander module - turning blocks into front/back pairs."""

from srexplorer.config import SRSettings
from srexplorer.expander import expand, expand_cloze, split_inline, split_multiline
from srexplorer.models import CardType, FrontBackPair, RawQuestionBlock


def _block(card_type: CardType, text: str) -> RawQuestionBlock:
    return RawQuestionBlock(card_type=card_type, text=text, first_line=0, last_line=text.count("\n"))


class TestSingleLine:
    """Tests for single-line expansion."""

    def test_basic(self):
        pairs = expand(_block(CardType.SINGLE_LINE_BASIC, "Q::A"))
        assert pairs == [FrontBackPair(front="Q", back="A")]

    def test_basic_splits_at_first_separator(self):
        pairs = expand(_block(CardType.SINGLE_LINE_BASIC, "Q::A::B"))
        assert pairs == [FrontBackPair(front="Q", back="A::B")]

    def test_reversed(self):
        pairs = expand(_block(CardType.SINGLE_LINE_REVERSED, "Q:::A"))
        assert pairs == [
            FrontBackPair(front="Q", back="A"),
            FrontBackPair(front="A", back="Q"),
        ]

    def test_schedule_comment_stays_on_back(self):
        pairs = expand(_block(CardType.SINGLE_LINE_BASIC, "Q::A\n<!--SR:!2024-01-01,3,250-->"))
        assert pairs[0].front == "Q"
        assert pairs[0].back.startswith("A\n<!--SR:")

    def test_custom_separator(self):
        settings = SRSettings(single_line_card_separator="=>")
        pairs = expand(_block(CardType.SINGLE_LINE_BASIC, "Q=>A"), settings)
        assert pairs == [FrontBackPair(front="Q", back="A")]

    def test_missing_separator_is_degenerate(self):
        assert split_inline("no separator", "::") == ("no separator", "")


class TestMultiLine:
    """Tests for multi-line expansion."""

    def test_basic(self):
        pairs = expand(_block(CardType.MULTI_LINE_BASIC, "line1\n?\nline2"))
        assert pairs == [FrontBackPair(front="line1", back="line2")]

    def test_basic_multiple_lines_each_side(self):
        pairs = expand(_block(CardType.MULTI_LINE_BASIC, "a\nb\n?\nc\nd"))
        assert pairs == [FrontBackPair(front="a\nb", back="c\nd")]

    def test_separator_line_may_have_whitespace(self):
        assert split_multiline("a\n  ?  \nb", "?") == ("a", "b")

    def test_separator_inside_fence_still_splits(self):
        assert split_multiline("Front\n```\n?\n```\n?\nBack", "?") == ("Front\n```", "```\n?\nBack")

    def test_reversed(self):
        pairs = expand(_block(CardType.MULTI_LINE_REVERSED, "up\n??\ndown"))
        assert pairs == [
            FrontBackPair(front="up", back="down"),
            FrontBackPair(front="down", back="up"),
        ]

    def test_missing_separator_is_degenerate(self):
        pairs = expand(_block(CardType.MULTI_LINE_BASIC, "only\nlines"))
        assert pairs == [FrontBackPair(front="only\nlines", back="")]


class TestCloze:
    """Tests for cloze expansion."""

    def test_two_groups(self):
        text = "The {{c1::capital}} of France is {{c2::Paris}}."
        pairs = expand(_block(CardType.CLOZE, text))
        assert len(pairs) == 2
        assert pairs[0].front == "The [...] of France is Paris."
        assert pairs[0].back == "The capital of France is Paris."
        assert pairs[1].front == "The capital of France is [...]."
        assert pairs[1].back == "The capital of France is Paris."

    def test_hint_placeholder(self):
        pairs = expand_cloze("{{c1::Paris::city}} is in France")
        assert pairs == [FrontBackPair(front="[city] is in France", back="Paris is in France")]

    def test_order_follows_appearance_not_number(self):
        pairs = expand_cloze("{{c2::first}} then {{c1::second}}")
        assert pairs[0].front == "[...] then second"
        assert pairs[1].front == "first then [...]"

    def test_identical_markup_replaced_by_position(self):
        pairs = expand_cloze("{{c1::x}} and {{c1::x}}")
        assert [p.front for p in pairs] == ["[...] and x", "x and [...]"]
        assert all(p.back == "x and x" for p in pairs)

    def test_no_markup_gives_identity_pair(self):
        pairs = expand(_block(CardType.CLOZE, "plain ==highlight=="))
        assert pairs == [FrontBackPair(front="plain ==highlight==", back="plain ==highlight==")]

    def test_multiline_text(self):
        pairs = expand_cloze("Line one {{c1::a}}\nLine two {{c2::b}}")
        assert pairs[1].front == "Line one a\nLine two [...]"
        assert pairs[1].back == "Line one a\nLine two b"


class TestEveryTypeYieldsPairs:
    """Every block type produces at least one pair."""

    def test_all_types(self):
        for card_type in CardType:
            assert len(expand(_block(card_type, "x"))) >= 1
