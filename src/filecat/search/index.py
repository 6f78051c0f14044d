"""Word index mapping normalized name words to cataloged records."""

from __future__ import annotations

from typing import Dict, Iterator, List, Set, Tuple

from filecat.catalog.models import FileRecord, RecordId

from .text import extract_words


class WordIndex:
    """Map each normalized word of a record name to the identifiers carrying it.

    The index stores identifiers rather than records; the owning
    :class:`~filecat.catalog.store.RecordStore` resolves them.
    """

    def __init__(self) -> None:
        self._words: Dict[str, Set[RecordId]] = {}

    def __len__(self) -> int:
        return len(self._words)

    def __contains__(self, word: object) -> bool:
        return word in self._words

    def index_record(self, record: FileRecord) -> List[str]:
        """Add ``record`` to the bucket of every distinct word in its name.

        Re-indexing the same record is idempotent.

        Returns:
            List[str]: Distinct words the record was indexed under.
        """
        words = list(dict.fromkeys(extract_words(record.name)))
        for word in words:
            self._words.setdefault(word, set()).add(record.id)
        return words

    def lookup_word(self, word: str) -> Set[RecordId]:
        """Return the identifiers indexed under ``word`` (empty when unknown)."""
        return set(self._words.get(word, ()))

    def all_words(self) -> Iterator[Tuple[str, Set[RecordId]]]:
        """Iterate over every indexed word and its identifiers."""
        for word, bucket in self._words.items():
            yield word, set(bucket)


__all__ = ["WordIndex"]
