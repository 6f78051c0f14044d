"""Fuzzy search tests over the sample catalog."""

from __future__ import annotations

import pytest

from filecat.catalog import (
    DuplicateIdentifierError,
    FileRecord,
    InvalidArgumentError,
)
from filecat.catalog.samples import sample_records
from filecat.search import (
    FuzzyCatalog,
    SearchOptions,
    SearchResult,
    describe_relevance,
    format_results,
)


def _catalog() -> FuzzyCatalog:
    """Return a fuzzy catalog populated with the fifteen sample records."""

    catalog = FuzzyCatalog()
    catalog.add_many(sample_records())
    return catalog


def _ids(results: list[SearchResult]) -> list:
    return [result.record.id for result in results]


def test_indexed_name_search_tolerates_typos() -> None:
    results = _catalog().fuzzy_search_by_name_indexed("financial report", 0.6)

    assert _ids(results) == [1, 5]
    assert all(result.score >= 0.6 for result in results)
    assert results[0].score > results[1].score
    assert all(result.match_field == "name" for result in results)
    assert all(result.match_type == "fuzzy" for result in results)


def test_brute_force_name_search_matches_indexed_results_on_samples() -> None:
    catalog = _catalog()

    basic = catalog.fuzzy_search_by_name("financial report", 0.6)
    indexed = catalog.fuzzy_search_by_name_indexed("financial report", 0.6)

    assert _ids(basic) == _ids(indexed)
    assert "Company Logo.png" not in [result.record.name for result in basic]


def test_indexed_search_can_miss_what_exhaustive_search_finds() -> None:
    catalog = FuzzyCatalog()
    catalog.add(FileRecord(id=1, name="ab cd", type="document"))

    assert catalog.fuzzy_search_by_name_indexed("abcd", 0.6) == []

    exhaustive = catalog.fuzzy_search_by_name_indexed("abcd", 0.6, exhaustive=True)

    assert _ids(exhaustive) == [1]
    assert exhaustive[0].score == pytest.approx(0.8)


def test_indexed_search_without_words_scores_every_record() -> None:
    catalog = FuzzyCatalog()
    catalog.add(FileRecord(id=1, name="B", type="document"))
    catalog.add(FileRecord(id=2, name="zz top", type="document"))

    results = catalog.fuzzy_search_by_name_indexed("b", 0.5)

    assert _ids(results) == [1]
    assert results[0].match_type == "exact"
    assert results[0].score == 1.0


def test_name_search_ranks_ties_in_insertion_order() -> None:
    catalog = FuzzyCatalog()
    catalog.add(FileRecord(id="x", name="report a", type="document"))
    catalog.add(FileRecord(id="y", name="report b", type="document"))

    results = catalog.fuzzy_search_by_name_indexed("report c", 0.5)

    assert _ids(results) == ["x", "y"]
    assert results[0].score == results[1].score


def test_content_search_finds_quarterly_reports() -> None:
    results = _catalog().fuzzy_search_by_content("quarterly financial", 0.4)

    assert _ids(results) == [1, 5, 8, 10]
    assert all(result.match_type == "fuzzy" for result in results)
    assert all(result.score == pytest.approx(1 - 2 / 19) for result in results)
    assert 6 not in _ids(results)


def test_content_search_exact_phrase_scores_one() -> None:
    results = _catalog().fuzzy_search_by_content("Financial Results", 0.9)

    assert _ids(results) == [1, 5, 8, 10]
    assert all(result.score == 1.0 for result in results)
    assert all(result.match_type == "exact" for result in results)
    assert all(result.match_field == "content" for result in results)


def test_content_search_single_word_compares_each_word() -> None:
    results = _catalog().fuzzy_search_by_content("roadmp", 0.8)

    assert _ids(results) == [14]
    assert results[0].score == pytest.approx(1 - 1 / 7)


def test_content_search_skips_records_without_words() -> None:
    catalog = FuzzyCatalog()
    catalog.add(FileRecord(id=1, name="blank.txt", type="document", content="   "))

    assert catalog.fuzzy_search_by_content("anything", 0.0) == []


def test_combined_search_prefers_best_field_per_record() -> None:
    catalog = FuzzyCatalog()
    catalog.add(FileRecord(id=1, name="alpha beta.txt", type="document", content="alpha beta"))

    results = catalog.fuzzy_search_combined("alpha beta")

    assert len(results) == 1
    assert results[0].match_field == "content"
    assert results[0].match_type == "exact"
    assert results[0].score == 1.0


def test_combined_search_ranks_content_matches_for_finance() -> None:
    options = SearchOptions(name_threshold=0.5, content_threshold=0.3)

    results = _catalog().fuzzy_search_combined("finance", options)

    assert _ids(results)[:4] == [1, 5, 8, 10]
    assert all(result.match_field == "content" for result in results[:4])
    assert results[0].score == pytest.approx(1 - 3 / 9)


def test_combined_search_matches_tags_once_per_record() -> None:
    options = SearchOptions(include_names=False, include_content=False)

    results = _catalog().fuzzy_search_combined("branding", options)

    assert _ids(results) == [2]
    assert results[0].match_field == "tag"
    assert results[0].match_type == "exact"


def test_combined_search_tag_match_is_fuzzy_below_one() -> None:
    options = SearchOptions(include_names=False, include_content=False)

    results = _catalog().fuzzy_search_combined("roadmaps", options)

    assert _ids(results) == [14]
    assert results[0].match_type == "fuzzy"
    assert results[0].score == pytest.approx(1 - 1 / 8)


@pytest.mark.parametrize("term", ["report", "finance", "customer data", "2023", "x"])
def test_combined_search_respects_limit_and_uniqueness(term: str) -> None:
    options = SearchOptions(name_threshold=0.3, content_threshold=0.1, max_results=4)

    results = _catalog().fuzzy_search_combined(term, options)

    assert len(results) <= 4
    assert len(_ids(results)) == len(set(_ids(results)))
    scores = [result.score for result in results]
    assert scores == sorted(scores, reverse=True)


def test_combined_search_with_everything_disabled_is_empty() -> None:
    options = SearchOptions(include_names=False, include_content=False, include_tags=False)

    assert _catalog().fuzzy_search_combined("report", options) == []


@pytest.mark.parametrize("threshold", [-0.1, 1.5])
def test_out_of_range_thresholds_are_rejected(threshold: float) -> None:
    catalog = _catalog()

    with pytest.raises(InvalidArgumentError):
        catalog.fuzzy_search_by_name("report", threshold)
    with pytest.raises(InvalidArgumentError):
        catalog.fuzzy_search_by_name_indexed("report", threshold)
    with pytest.raises(ValueError):
        catalog.fuzzy_search_by_content("report", threshold)
    with pytest.raises(InvalidArgumentError):
        catalog.fuzzy_search_combined("report", SearchOptions(name_threshold=threshold))


def test_negative_max_results_is_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        _catalog().fuzzy_search_combined("report", SearchOptions(max_results=-1))


def test_rejected_insert_leaves_word_index_untouched() -> None:
    catalog = FuzzyCatalog()
    catalog.add(FileRecord(id=1, name="alpha", type="document"))

    with pytest.raises(DuplicateIdentifierError):
        catalog.add(FileRecord(id=1, name="gamma", type="document"))

    assert len(catalog) == 1
    assert "gamma" not in catalog.index
    assert catalog.fuzzy_search_by_name_indexed("gamma", 0.9) == []


def test_constructor_indexes_initial_records() -> None:
    catalog = FuzzyCatalog(sample_records())

    assert len(catalog) == 15
    assert catalog.index.lookup_word("financial") == {1, 5, 10}


def test_every_cataloged_record_is_reachable_by_indexed_search() -> None:
    catalog = FuzzyCatalog([FileRecord(id=1, name="Budget Plan.xlsx", type="spreadsheet")])

    assert not hasattr(catalog, "store")
    assert _ids(catalog.fuzzy_search_by_name("budget plan.xlsx", 0.9)) == [1]
    assert _ids(catalog.fuzzy_search_by_name_indexed("budget plan.xlsx", 0.9)) == [1]


def test_read_only_lookups_delegate_to_the_store() -> None:
    catalog = _catalog()

    assert 1 in catalog
    assert 99 not in catalog
    assert [record.id for record in catalog] == list(range(1, 16))
    assert catalog.get_by_id(99) is None
    assert catalog.find_by_exact_name(catalog.get_by_id(3).name).id == 3
    assert [record.id for record in catalog.find_by_type("document")] == [1, 5, 8, 10, 14, 15]
    assert catalog.storage_report().total_files == 15


def test_update_tags_is_visible_to_tag_search() -> None:
    catalog = _catalog()
    options = SearchOptions(include_names=False, include_content=False)

    catalog.update_tags([1], ["Q1-final"], ["Q1"])

    assert catalog.find_by_tag("Q1") == []
    assert _ids(catalog.fuzzy_search_combined("q1-final", options)) == [1]


@pytest.mark.parametrize(
    ("score", "label"),
    [
        (1.0, "Excellent match"),
        (0.95, "Excellent match"),
        (0.9, "Good match"),
        (0.85, "Good match"),
        (0.8, "Fair match"),
        (0.7, "Possible match"),
        (0.61, "Possible match"),
        (0.6, "Weak match"),
        (0.0, "Weak match"),
    ],
)
def test_describe_relevance_bands(score: float, label: str) -> None:
    assert describe_relevance(score) == label


def test_format_results_renders_display_rows() -> None:
    catalog = _catalog()
    results = catalog.fuzzy_search_by_content("quarterly financial", 0.4)
    bare = SearchResult(record=catalog.get_by_id(2), score=0.4321)

    rows = format_results([results[0], bare])

    assert rows[0].id == 1
    assert rows[0].similarity == "0.89"
    assert rows[0].match_details == "content (fuzzy)"
    assert rows[0].relevance == "Good match"
    assert rows[1].similarity == "0.43"
    assert rows[1].match_details == "unknown (fuzzy)"
    assert rows[1].relevance == "Weak match"
