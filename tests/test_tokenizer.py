"""
Tests for synthetic word timing.
"""

import pytest

from briefly.models import ScriptToken
from briefly.tokenizer import ScriptTokenizer, resolve_active_token, word_weight


class TestWordWeight:
    """Tests for the speaking weight heuristic."""

    def test_short_and_long_words(self):
        """Test words under four characters weigh less."""
        assert word_weight("a") == pytest.approx(0.6)
        assert word_weight("the") == pytest.approx(0.6)
        assert word_weight("news") == pytest.approx(1.0)

    def test_clause_and_sentence_bonuses(self):
        """Test punctuation adds pause weight."""
        assert word_weight("today,") == pytest.approx(1.5)
        assert word_weight("today.") == pytest.approx(2.5)
        assert word_weight("it,") == pytest.approx(1.1)
        assert word_weight("well-known") == pytest.approx(1.5)
        assert word_weight("what?!") == pytest.approx(2.5)

    def test_ordering(self):
        """Test a sentence-ending word outweighs a clause break, which outweighs a plain word."""
        assert word_weight("about.") > word_weight("about,") > word_weight("about") > word_weight("a")


class TestScriptTokenizer:
    """Tests for ScriptTokenizer.tokenize."""

    def test_hello_world(self):
        """Test two words share 3 seconds by weight 1.0 to 2.5."""
        tokens = ScriptTokenizer().tokenize("Hello world.", 3000)
        assert [t.word for t in tokens] == ["Hello", "world."]
        assert tokens[0].start_ms == 0
        assert tokens[0].end_ms == pytest.approx(857.142857, rel=1e-6)
        assert tokens[1].start_ms == pytest.approx(857.142857, rel=1e-6)
        assert tokens[1].end_ms == pytest.approx(3000)

    def test_durations_sum_to_total(self):
        """Test word durations add up to the segment duration."""
        text = "Good evening, and welcome to the briefing. Markets rallied; bonds fell!"
        tokens = ScriptTokenizer().tokenize(text, 5432.1)
        total = sum(t.end_ms - t.start_ms for t in tokens)
        assert total == pytest.approx(5432.1)
        assert len(tokens) == len(text.split())

    def test_tokens_are_contiguous(self):
        """Test each token starts where the previous one ended."""
        tokens = ScriptTokenizer().tokenize("one two three four five.", 1000)
        for prev, cur in zip(tokens, tokens[1:]):
            assert cur.start_ms == pytest.approx(prev.end_ms)

    def test_heavier_words_last_longer(self):
        """Test punctuation lengthens a word relative to its bare form."""
        tokens = ScriptTokenizer().tokenize("about about, about.", 1000)
        durations = [t.end_ms - t.start_ms for t in tokens]
        assert durations[0] < durations[1] < durations[2]

    def test_offset(self):
        """Test tokens are shifted by the preceding segments' duration."""
        tokens = ScriptTokenizer().tokenize("Next story.", 2000, offset_ms=1500)
        assert tokens[0].start_ms == pytest.approx(1500)
        assert tokens[-1].end_ms == pytest.approx(3500)

    def test_deterministic(self):
        """Test identical inputs give identical tokens."""
        tokenizer = ScriptTokenizer()
        assert tokenizer.tokenize("Same words here.", 900) == tokenizer.tokenize("Same words here.", 900)

    def test_empty_text(self):
        """Test blank text yields no tokens."""
        assert ScriptTokenizer().tokenize("   ", 1000) == []


class TestResolveActiveToken:
    """Tests for resolve_active_token."""

    TOKENS = [ScriptToken("Hello", 0, 100), ScriptToken("world.", 100, 300)]

    def test_inside_token(self):
        """Test the token containing the time is selected."""
        assert resolve_active_token(self.TOKENS, 0.05, 0.3) == 0
        assert resolve_active_token(self.TOKENS, 0.2, 0.3) == 1

    def test_boundary_belongs_to_next(self):
        """Test a token's end time belongs to the next token."""
        assert resolve_active_token(self.TOKENS, 0.1, 0.3) == 1

    def test_at_end_selects_last(self):
        """Test reaching the end keeps the last token active."""
        assert resolve_active_token(self.TOKENS, 0.3, 0.3) == 1
        assert resolve_active_token(self.TOKENS, 0.5, 0.3) == 1

    def test_gap_keeps_previous(self):
        """Test a time outside every token before the end keeps the previous index."""
        assert resolve_active_token(self.TOKENS, 0.35, 0.5, previous=0) == 0
        assert resolve_active_token(self.TOKENS, 0.35, 0.5) == -1

    def test_no_tokens(self):
        """Test an empty token list has no active index."""
        assert resolve_active_token([], 1.0, 2.0, previous=3) == -1
