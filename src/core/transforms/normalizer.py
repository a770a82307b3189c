"""
Table-driven normalization of coded and free-text values.

Each normalized field has a vocabulary: a mapping from raw codes to
canonical values, loaded from YAML at startup. Lookups trim and case-fold
the raw value first. Anything the vocabulary does not recognize, null and
empty included, maps to the sentinel "n/a".

Expected YAML format:
```yaml
sentinel: n/a
vocabularies:
  marital_status:
    mappings:
      S: Single
      M: Married
  country:
    mappings:
      DE: Germany
    canonical:
      - Canada
```
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

DEFAULT_SENTINEL = "n/a"
DEFAULT_VOCABULARIES_PATH = Path(__file__).resolve().parents[2] / "config" / "vocabularies.yaml"


def _fold(value: Any) -> str | None:
    if value is None:
        return None
    text = value.strip() if isinstance(value, str) else str(value).strip()
    return text.casefold() or None


class Vocabulary:
    """
    Canonical vocabulary of one field.

    Canonical values always map to themselves, so normalizing an
    already-normalized value is a no-op.
    """

    def __init__(
        self,
        field_name: str,
        mappings: Mapping[str, str],
        canonical: Iterable[str] = (),
        sentinel: str = DEFAULT_SENTINEL,
    ):
        self.field_name = field_name
        self.sentinel = sentinel
        self.canonical_values = frozenset([*mappings.values(), *canonical])

        self._lookup: dict[str, str] = {}
        for value in self.canonical_values:
            self._lookup[value.casefold()] = value
        for code, value in mappings.items():
            folded = _fold(code)
            if folded is None:
                raise ValueError(f"Vocabulary '{field_name}' contains an empty code")
            self._lookup[folded] = value

    def normalize(self, value: Any) -> str:
        """Map a raw value to its canonical value, or the sentinel."""
        folded = _fold(value)
        if folded is None:
            return self.sentinel
        return self._lookup.get(folded, self.sentinel)

    def recognizes(self, value: Any) -> bool:
        folded = _fold(value)
        return folded is not None and folded in self._lookup

    def __repr__(self) -> str:
        return f"Vocabulary(field={self.field_name}, codes={len(self._lookup)})"


class FieldNormalizer:
    """
    Holds the vocabularies of every normalized field.

    normalize() is a pure function per field; it never returns None and never
    rejects a value.
    """

    def __init__(self, vocabularies: Mapping[str, Vocabulary], sentinel: str = DEFAULT_SENTINEL):
        self.vocabularies = dict(vocabularies)
        self.sentinel = sentinel

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "FieldNormalizer":
        """
        Build a normalizer from a parsed configuration mapping.

        Raises:
            ValueError: If the configuration is malformed
        """
        if not config or "vocabularies" not in config:
            raise ValueError("Vocabulary configuration must contain 'vocabularies' section")

        sentinel = config.get("sentinel", DEFAULT_SENTINEL)
        vocabularies = {}
        for field_name, definition in config["vocabularies"].items():
            if not isinstance(definition, Mapping) or "mappings" not in definition:
                raise ValueError(f"Vocabulary for field '{field_name}' must define 'mappings'")
            mappings = {str(code): str(value) for code, value in definition["mappings"].items()}
            canonical = [str(value) for value in definition.get("canonical", [])]
            vocabularies[field_name] = Vocabulary(field_name, mappings, canonical, sentinel)

        return cls(vocabularies, sentinel)

    def vocabulary(self, field_name: str) -> Vocabulary:
        try:
            return self.vocabularies[field_name]
        except KeyError:
            raise KeyError(f"No vocabulary configured for field '{field_name}'") from None

    def normalize(self, field_name: str, value: Any) -> str:
        return self.vocabulary(field_name).normalize(value)

    def canonical_values(self, field_name: str) -> frozenset[str]:
        return self.vocabulary(field_name).canonical_values

    def unmapped_values(self, field_name: str, values: Iterable[Any]) -> Counter:
        """
        Count non-blank raw values the vocabulary does not recognize.

        Used to surface vocabulary drift: a new source code silently
        collapsing to the sentinel.
        """
        vocabulary = self.vocabulary(field_name)
        unmapped: Counter = Counter()
        for value in values:
            if _fold(value) is not None and not vocabulary.recognizes(value):
                unmapped[str(value).strip()] += 1
        return unmapped


class VocabularyLoader:
    """Loads field vocabularies from a YAML configuration file."""

    def __init__(self, config_path: str | Path = DEFAULT_VOCABULARIES_PATH):
        """
        Initialize the vocabulary loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Vocabulary configuration file not found: {config_path}")

    def load(self) -> FieldNormalizer:
        with open(self.config_path) as f:
            config = yaml.safe_load(f)
        return FieldNormalizer.from_dict(config)
