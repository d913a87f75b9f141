"""
Text mining basics: corpus cleaning, document-term matrices, term statistics.

Cleaning runs as an ordered chain of small transformations, the same shape as
mapping functions over a corpus: lower-case, strip numbers, strip punctuation,
drop stop words, collapse whitespace, stem.
"""
import re
import string

import numpy as np
import pandas as pd
from nltk.stem import PorterStemmer
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS, CountVectorizer, TfidfVectorizer

# Terms shorter than three characters are dropped when building the matrix.
TOKEN_PATTERN = r"(?u)\b\w\w\w+\b"

_PUNCTUATION = re.compile(f"[{re.escape(string.punctuation)}‘’“”–—]")
_NUMBERS = re.compile(r"\d+")
_WHITESPACE = re.compile(r"\s+")

_stemmer = PorterStemmer()


def clean_corpus(docs, lower=True, remove_numbers=True, remove_punctuation=True,
                 remove_stopwords=True, stem=False, extra_stopwords=()):
    """Apply the cleaning chain to every document; returns a list of strings."""
    stopwords = set(ENGLISH_STOP_WORDS) | {w.lower() for w in extra_stopwords}
    cleaned = []
    for doc in docs:
        text = "" if doc is None or (isinstance(doc, float) and np.isnan(doc)) else str(doc)
        if lower:
            text = text.lower()
        if remove_numbers:
            text = _NUMBERS.sub(" ", text)
        if remove_punctuation:
            text = _PUNCTUATION.sub(" ", text)
        tokens = text.split()
        if remove_stopwords:
            tokens = [t for t in tokens if t.lower() not in stopwords]
        if stem:
            tokens = [_stemmer.stem(t, to_lowercase=False) for t in tokens]
        cleaned.append(_WHITESPACE.sub(" ", " ".join(tokens)).strip())
    return cleaned


def document_term_matrix(docs, weighting="tf", min_df=1, doc_names=None):
    """Documents as rows, terms as columns (alphabetical)."""
    if weighting == "tf":
        vectorizer = CountVectorizer(lowercase=False, token_pattern=TOKEN_PATTERN, min_df=min_df)
    elif weighting == "tfidf":
        vectorizer = TfidfVectorizer(lowercase=False, token_pattern=TOKEN_PATTERN, min_df=min_df)
    else:
        raise ValueError(f"weighting must be 'tf' or 'tfidf', got {weighting!r}")
    matrix = vectorizer.fit_transform(docs)
    index = doc_names if doc_names is not None else [f"doc{i + 1}" for i in range(matrix.shape[0])]
    return pd.DataFrame(matrix.toarray(), index=index, columns=vectorizer.get_feature_names_out())


def sparsity(dtm):
    """Share of zero cells in the matrix."""
    return float((dtm.to_numpy() == 0).mean())


def remove_sparse_terms(dtm, sparse):
    """Drop terms missing from at least a ``sparse`` share of documents."""
    if not 0 < sparse < 1:
        raise ValueError("sparse must be strictly between 0 and 1")
    absent = (dtm == 0).mean(axis=0)
    return dtm.loc[:, absent < sparse]


def term_frequencies(dtm):
    """Total weight per term, most frequent first (ties alphabetical)."""
    freq = dtm.sum(axis=0)
    order = sorted(freq.index, key=lambda t: (-freq[t], t))
    return freq[order].rename("frequency")


def find_freq_terms(dtm, low=0, high=np.inf):
    freq = dtm.sum(axis=0)
    return [t for t in dtm.columns if low <= freq[t] <= high]


def find_assocs(dtm, term, corlimit=0.5):
    """Terms whose document-wise correlation with ``term`` is at least ``corlimit``."""
    if term not in dtm.columns:
        raise KeyError(f"term {term!r} is not in the document-term matrix")
    corr = dtm.corrwith(dtm[term]).drop(term).dropna().round(2)
    corr = corr[corr >= corlimit]
    order = sorted(corr.index, key=lambda t: (-corr[t], t))
    return corr[order]
