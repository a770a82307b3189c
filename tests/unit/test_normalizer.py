"""
Unit tests for the table-driven field normalizer.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.core.transforms import FieldNormalizer, Vocabulary, VocabularyLoader

FIELDS = ["marital_status", "gender", "product_line", "country"]


class TestVocabulary:
    """Tests for a single vocabulary"""

    def test_codes_are_trimmed_and_case_folded(self):
        vocabulary = Vocabulary("gender", {"F": "Female", "M": "Male"})
        assert vocabulary.normalize(" f ") == "Female"
        assert vocabulary.normalize("m") == "Male"

    def test_unknown_null_and_blank_map_to_sentinel(self):
        vocabulary = Vocabulary("gender", {"F": "Female"})
        assert vocabulary.normalize("X") == "n/a"
        assert vocabulary.normalize(None) == "n/a"
        assert vocabulary.normalize("   ") == "n/a"

    def test_canonical_values_map_to_themselves(self):
        vocabulary = Vocabulary("country", {"DE": "Germany"}, canonical=["Canada"])
        assert vocabulary.normalize("Germany") == "Germany"
        assert vocabulary.normalize("canada") == "Canada"
        assert vocabulary.canonical_values == {"Germany", "Canada"}

    def test_custom_sentinel(self):
        vocabulary = Vocabulary("gender", {"F": "Female"}, sentinel="Unknown")
        assert vocabulary.normalize("?") == "Unknown"

    def test_empty_code_rejected(self):
        with pytest.raises(ValueError):
            Vocabulary("gender", {" ": "Blank"})


class TestShippedVocabularies:
    """Tests against config/vocabularies.yaml"""

    @pytest.mark.parametrize("field,raw,expected", [
        ("marital_status", "S", "Single"),
        ("marital_status", "m", "Married"),
        ("gender", "F", "Female"),
        ("gender", "Male", "Male"),
        ("product_line", "R ", "Road"),
        ("product_line", "s", "Other Sales"),
        ("country", "DE", "Germany"),
        ("country", "USA", "United States"),
        ("country", "US", "United States"),
        ("country", "Australia", "Australia"),
        ("country", "", "n/a"),
    ])
    def test_known_codes(self, normalizer, field, raw, expected):
        assert normalizer.normalize(field, raw) == expected

    @pytest.mark.parametrize("field", FIELDS)
    @given(raw=st.one_of(st.none(), st.text(max_size=12)))
    def test_property_closed_output(self, normalizer, field, raw):
        """Property test: output is always canonical or the sentinel, never None"""
        result = normalizer.normalize(field, raw)
        assert result is not None
        assert result in normalizer.canonical_values(field) | {normalizer.sentinel}

    @pytest.mark.parametrize("field", FIELDS)
    @given(raw=st.one_of(st.none(), st.text(max_size=12)))
    def test_property_idempotent(self, normalizer, field, raw):
        """Property test: normalizing a normalized value changes nothing"""
        once = normalizer.normalize(field, raw)
        assert normalizer.normalize(field, once) == once

    def test_unknown_field_raises(self, normalizer):
        with pytest.raises(KeyError):
            normalizer.normalize("shoe_size", "42")


class TestUnmappedValues:
    """Tests for vocabulary drift detection"""

    def test_counts_unrecognized_non_blank_values(self, normalizer):
        unmapped = normalizer.unmapped_values("gender", ["M", "X", " X", "", None, "Other"])
        assert unmapped == {"X": 2, "Other": 1}

    def test_canonical_values_are_recognized(self, normalizer):
        assert not normalizer.unmapped_values("country", ["Germany", "Canada", "DE"])


class TestVocabularyLoader:
    """Tests for loading vocabularies from YAML"""

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            VocabularyLoader(tmp_path / "missing.yaml")

    def test_missing_section_raises(self, tmp_path):
        path = tmp_path / "vocab.yaml"
        path.write_text("sentinel: n/a\n")
        with pytest.raises(ValueError, match="vocabularies"):
            VocabularyLoader(path).load()

    def test_missing_mappings_raises(self, tmp_path):
        path = tmp_path / "vocab.yaml"
        path.write_text("vocabularies:\n  gender:\n    canonical: [Female]\n")
        with pytest.raises(ValueError, match="mappings"):
            VocabularyLoader(path).load()

    def test_loads_custom_file(self, tmp_path):
        path = tmp_path / "vocab.yaml"
        path.write_text(
            "sentinel: Unknown\n"
            "vocabularies:\n"
            "  gender:\n"
            "    mappings:\n"
            "      F: Female\n"
        )
        normalizer = VocabularyLoader(path).load()

        assert isinstance(normalizer, FieldNormalizer)
        assert normalizer.normalize("gender", "f") == "Female"
        assert normalizer.normalize("gender", "?") == "Unknown"
