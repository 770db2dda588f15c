# tests/test_substitution.py - Tests for the substitution engine
"""
Unit tests for TemplateBuffer and the placeholder helpers.
"""

import pytest
from ebpfgen.errors import PlaceholderNotFoundError
from ebpfgen.generator.substitution import TemplateBuffer, Token, find_unresolved


class TestReplaceFirst:
    """Test cases for single substitution"""

    def test_replaces_only_first_occurrence(self):
        """Test that later occurrences are left alone"""
        buf = TemplateBuffer("a TOKEN b TOKEN")
        buf.replace_first("TOKEN", "x")
        assert buf.text == "a x b TOKEN"

    def test_buffer_grows_and_shrinks(self):
        """Test replacements longer and shorter than the token"""
        buf = TemplateBuffer("[TOKEN]")
        buf.replace_first("TOKEN", "a much longer replacement")
        assert buf.text == "[a much longer replacement]"

        buf.replace_first("a much longer replacement", "")
        assert buf.text == "[]"

    def test_missing_token_raises(self):
        """Test that a missing token is reported"""
        buf = TemplateBuffer("nothing here")

        with pytest.raises(PlaceholderNotFoundError) as exc_info:
            buf.replace_first("TOKEN", "x")

        assert exc_info.value.token == "TOKEN"
        assert buf.text == "nothing here"

    def test_token_is_case_sensitive(self):
        """Test that matching is exact"""
        buf = TemplateBuffer("token")
        with pytest.raises(PlaceholderNotFoundError):
            buf.replace_first("TOKEN", "x")


class TestReplaceAll:
    """Test cases for all-occurrence substitution"""

    def test_replaces_every_occurrence(self):
        """Test that all occurrences are replaced and counted"""
        buf = TemplateBuffer("NAME(); /* NAME */ int NAME_x;")
        count = buf.replace_all("NAME", "openat")

        assert count == 3
        assert buf.text == "openat(); /* openat */ int openat_x;"

    def test_zero_occurrences_is_tolerated(self):
        """Test that a missing token is not an error"""
        buf = TemplateBuffer("unchanged")
        assert buf.replace_all("NAME", "x") == 0
        assert buf.text == "unchanged"

    def test_replacement_containing_token_is_not_rescanned(self):
        """Test that replacement text is not substituted again"""
        buf = TemplateBuffer("A A")
        buf.replace_all("A", "AA")
        assert buf.text == "AA AA"


class TestRepeatedBlock:
    """Test cases for repeated-block expansion"""

    def test_zero_count_removes_marker(self):
        """Test that count 0 removes the marker and inserts nothing"""
        buf = TemplateBuffer("begin MARK end")
        buf.replace_with_repeated_block("MARK", "block;", 0)
        assert buf.text == "begin  end"

    def test_inserts_exact_number_of_copies(self):
        """Test that N copies are inserted back to back"""
        buf = TemplateBuffer("begin MARK end")
        buf.replace_with_repeated_block("MARK", "block;", 3)
        assert buf.text == "begin block;block;block; end"

    def test_matches_sequential_single_replacements(self):
        """Test equivalence with N replace_first calls on N markers"""
        count = 4
        block = "read_and_submit();\n"

        expanded = TemplateBuffer("head\nMARK\ntail")
        expanded.replace_with_repeated_block("MARK", block, count)

        sequential = TemplateBuffer("head\n" + "MARK" * count + "\ntail")
        for _ in range(count):
            sequential.replace_first("MARK", block)

        assert expanded.text == sequential.text

    def test_only_first_marker_is_expanded(self):
        """Test that a single marker occurrence is consumed"""
        buf = TemplateBuffer("MARK|MARK")
        buf.replace_with_repeated_block("MARK", "x", 2)
        assert buf.text == "xx|MARK"

    def test_missing_marker_raises(self):
        """Test that a missing marker is reported"""
        with pytest.raises(PlaceholderNotFoundError):
            TemplateBuffer("no marker").replace_with_repeated_block("MARK", "x", 2)

    def test_negative_count_rejected(self):
        """Test that a negative count is rejected"""
        with pytest.raises(ValueError):
            TemplateBuffer("MARK").replace_with_repeated_block("MARK", "x", -1)


class TestReplaceWithChar:
    """Test cases for single-character substitution"""

    def test_integer_position(self):
        """Test that an argument slot is written as one digit"""
        buf = TemplateBuffer("get_arg(ctx, STR1)")
        buf.replace_with_char("STR1", 1)
        assert buf.text == "get_arg(ctx, 1)"

    def test_character_value(self):
        """Test that a one-character string is accepted"""
        buf = TemplateBuffer("x = STR2;")
        buf.replace_with_char("STR2", "5")
        assert buf.text == "x = 5;"

    def test_only_first_occurrence(self):
        """Test that one occurrence is replaced per call"""
        buf = TemplateBuffer("STR1 STR1")
        buf.replace_with_char("STR1", 0)
        assert buf.text == "0 STR1"

    @pytest.mark.parametrize("value", [10, -1, "12", ""])
    def test_values_that_do_not_fit_are_rejected(self, value):
        """Test that multi-character values are rejected"""
        with pytest.raises(ValueError):
            TemplateBuffer("STR1").replace_with_char("STR1", value)


class TestTokens:
    """Test cases for the token vocabulary"""

    def test_buffer_protocol(self):
        """Test len, contains and str of a buffer"""
        buf = TemplateBuffer("SYSCALL_NR SYSCALL_NR")
        assert len(buf) == len("SYSCALL_NR SYSCALL_NR")
        assert Token.SYSCALL_NR in buf
        assert buf.count(Token.SYSCALL_NR) == 2
        assert str(buf) == buf.text

    def test_find_unresolved(self):
        """Test that leftover tokens are listed in vocabulary order"""
        text = "x MY_OWN_PID y SYSCALL_NR"
        assert find_unresolved(text) == [Token.SYSCALL_NR, Token.MY_OWN_PID]

    def test_find_unresolved_clean_text(self):
        """Test that clean text has nothing unresolved"""
        assert find_unresolved("int main(void) { return 0; }") == []

    def test_interim_and_final_markers_are_distinct(self):
        """Test that neither packet marker contains the other"""
        assert Token.N_MINUS_2_PACKETS not in Token.N_MINUS_2_INTERIM
        assert Token.N_MINUS_2_INTERIM not in Token.N_MINUS_2_PACKETS
