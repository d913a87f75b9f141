import pytest

from course_utils.text_mining import (
    clean_corpus, document_term_matrix, find_assocs, find_freq_terms, remove_sparse_terms,
    sparsity, term_frequencies,
)

DOCS = [
    "The shark hunts swimmers in 1975!",
    "A shark, a boat and three hunters.",
    "Aliens hunt the crew of a space ship.",
    "Space pilots fight an empire in space.",
]


def test_clean_corpus_default_chain():
    cleaned = clean_corpus(DOCS)
    assert cleaned[0] == "shark hunts swimmers"
    assert cleaned[1] == "shark boat hunters"


def test_clean_corpus_steps_can_be_switched_off():
    cleaned = clean_corpus(DOCS[:1], lower=False, remove_numbers=False, remove_punctuation=False,
                           remove_stopwords=False)
    assert cleaned == ["The shark hunts swimmers in 1975!"]


def test_clean_corpus_stems_and_extra_stopwords():
    cleaned = clean_corpus(DOCS, stem=True, extra_stopwords=["Shark"])
    assert cleaned[0] == "hunt swimmer"
    assert cleaned[2] == "alien hunt crew space ship"


def test_clean_corpus_handles_missing_documents():
    assert clean_corpus([None, float("nan"), "  Hello   World  "]) == ["", "", "hello world"]


def test_document_term_matrix_counts():
    dtm = document_term_matrix(clean_corpus(DOCS))
    assert list(dtm.index) == ["doc1", "doc2", "doc3", "doc4"]
    assert list(dtm.columns) == sorted(dtm.columns)
    assert dtm.loc["doc4", "space"] == 2
    assert dtm.loc["doc1", "shark"] == 1


def test_tfidf_rows_are_unit_length():
    dtm = document_term_matrix(clean_corpus(DOCS), weighting="tfidf", doc_names=list("abcd"))
    assert ((dtm ** 2).sum(axis=1)).round(6).tolist() == [1.0] * 4


def test_unknown_weighting():
    with pytest.raises(ValueError):
        document_term_matrix(DOCS, weighting="bm25")


def test_sparsity_and_sparse_terms():
    dtm = document_term_matrix(clean_corpus(DOCS, stem=True))
    assert 0 < sparsity(dtm) < 1
    kept = remove_sparse_terms(dtm, 0.6)
    # only terms present in at least two of four documents survive
    assert set(kept.columns) == {"hunt", "shark", "space"}
    assert sparsity(kept) < sparsity(dtm)
    with pytest.raises(ValueError):
        remove_sparse_terms(dtm, 1.0)


def test_term_frequencies_ties_are_alphabetical():
    freq = term_frequencies(document_term_matrix(clean_corpus(DOCS, stem=True)))
    assert freq.name == "frequency"
    assert list(freq.index[:3]) == ["space", "hunt", "shark"]
    assert freq["space"] == 3


def test_find_freq_terms():
    dtm = document_term_matrix(clean_corpus(DOCS, stem=True))
    assert find_freq_terms(dtm, low=3) == ["space"]
    assert find_freq_terms(dtm, low=2, high=2) == ["hunt", "shark"]


def test_find_assocs():
    dtm = document_term_matrix(clean_corpus(DOCS, stem=True))
    assocs = find_assocs(dtm, "shark", corlimit=0.5)
    assert "boat" in assocs.index
    assert "shark" not in assocs.index
    assert (assocs >= 0.5).all()
    assert assocs.is_monotonic_decreasing
    with pytest.raises(KeyError):
        find_assocs(dtm, "dragon")
