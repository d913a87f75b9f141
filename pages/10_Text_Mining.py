"""Chapter 10: Text Mining -- Cleaning a corpus, document-term matrices and term statistics."""
import plotly.express as px
import streamlit as st

from course_utils.data_loader import DatasetNotFoundError, load_dataset
from course_utils.plotting import apply_common_layout, heatmap_chart
from course_utils.text_mining import (
    clean_corpus, document_term_matrix, find_assocs, find_freq_terms, remove_sparse_terms,
    sparsity, term_frequencies,
)
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, formula_box, insight_box, quiz,
    stop_on_missing_dataset, takeaways, warning_box,
)

# ── Header ───────────────────────────────────────────────────────────────────
chapter_header(10)
st.markdown(
    "Text is data that refuses to sit in columns. The classic bag-of-words recipe forces "
    "it to: clean every document the same way, cut it into words, and count. What comes "
    "out is a document-term matrix, one row per document and one column per word, and "
    "from there it is ordinary numeric data again. Our corpus is the one-sentence plot "
    "summary of each film in the movies table."
)

try:
    movies = load_dataset("movies")
except DatasetNotFoundError as err:
    stop_on_missing_dataset(err)

titles = movies["title"].tolist()
raw_docs = movies["overview"].tolist()

# ── 10.1 Cleaning ────────────────────────────────────────────────────────────
st.header("10.1  Cleaning the Corpus")

concept_box(
    "A Chain of Transformations",
    "Every document goes through the same ordered steps: lower-case it, strip numbers, "
    "strip punctuation, drop <b>stop words</b> (the, and, of...), collapse whitespace, "
    "and optionally <b>stem</b> each word to its root so that 'hunts', 'hunting' and "
    "'hunted' count as one term. The order matters: stop-word lists are lower-case, so "
    "lower-casing has to come first."
)

st.sidebar.subheader("Cleaning steps")
lower = st.sidebar.checkbox("Lower-case", value=True, key="tm_lower")
remove_numbers = st.sidebar.checkbox("Remove numbers", value=True, key="tm_numbers")
remove_punctuation = st.sidebar.checkbox("Remove punctuation", value=True, key="tm_punct")
remove_stopwords = st.sidebar.checkbox("Remove stop words", value=True, key="tm_stop")
stem = st.sidebar.checkbox("Stem words (Porter)", value=False, key="tm_stem")
extra = st.sidebar.text_input("Extra stop words (comma separated)", "", key="tm_extra")
extra_stopwords = [w.strip() for w in extra.split(",") if w.strip()]

docs = clean_corpus(
    raw_docs, lower=lower, remove_numbers=remove_numbers,
    remove_punctuation=remove_punctuation, remove_stopwords=remove_stopwords,
    stem=stem, extra_stopwords=extra_stopwords,
)

pick = st.selectbox("Inspect a document", titles, index=0, key="tm_doc")
i = titles.index(pick)
col1, col2 = st.columns(2)
with col1:
    st.markdown("**Before**")
    st.write(raw_docs[i])
with col2:
    st.markdown("**After**")
    st.write(docs[i] or "*(nothing left)*")

warning_box(
    "Stemming produces roots, not words: 'family' becomes 'famili'. That is fine for "
    "counting and matching, but remember to explain it before you show a stemmed word "
    "cloud to anyone."
)

# ── 10.2 Document-Term Matrix ────────────────────────────────────────────────
st.header("10.2  The Document-Term Matrix")

weighting = st.radio("Weighting", ["tf", "tfidf"], horizontal=True, key="tm_weighting",
                     format_func={"tf": "Term frequency", "tfidf": "TF-IDF"}.get)
dtm = document_term_matrix(docs, weighting=weighting, doc_names=titles)

col_a, col_b, col_c = st.columns(3)
col_a.metric("Documents", dtm.shape[0])
col_b.metric("Terms", dtm.shape[1])
col_c.metric("Sparsity", f"{sparsity(dtm):.1%}")

formula_box(
    "TF-IDF Weight",
    r"w_{t,d} = \text{tf}_{t,d} \times \left(\ln\frac{1 + N}{1 + \text{df}_t} + 1\right)",
    "Rows are then scaled to unit length. A term that appears in every document gets "
    "the smallest possible weight, however often it appears."
)

sparse = st.slider("Maximum allowed sparsity per term", 0.50, 0.99, 0.95, 0.01, key="tm_sparse")
reduced = remove_sparse_terms(dtm, sparse)
st.caption(
    f"Keeping terms that are absent from fewer than {sparse:.0%} of documents leaves "
    f"{reduced.shape[1]} of {dtm.shape[1]} terms; sparsity drops to "
    f"{sparsity(reduced) if reduced.shape[1] else 0:.1%}."
)

if reduced.shape[1]:
    st.plotly_chart(
        heatmap_chart(reduced.round(2), x_label="Term", y_label="Document",
                      title="Document-term matrix after removing sparse terms",
                      height=max(400, 22 * len(reduced)), color_scale="Blues"),
        use_container_width=True,
    )
else:
    st.info("No term is common enough at this threshold. Raise the maximum sparsity.")

insight_box(
    "Most cells of a document-term matrix are zero: any one plot summary uses a tiny "
    "fraction of the vocabulary. Dropping the rarest terms shrinks the matrix drastically "
    "and mostly removes words that could never generalise beyond one document."
)

# ── 10.3 Frequent Terms ──────────────────────────────────────────────────────
st.header("10.3  Frequent Terms")

tf = document_term_matrix(docs, weighting="tf", doc_names=titles)
freq = term_frequencies(tf)
top_n = st.slider("Terms to show", 5, min(30, len(freq)), min(15, len(freq)), key="tm_top")
top = freq.head(top_n).rename_axis("term").reset_index()
fig_freq = px.bar(top.iloc[::-1], x="frequency", y="term", orientation="h",
                  color_discrete_sequence=["#2E86C1"])
apply_common_layout(fig_freq, title="Most frequent terms", height=max(350, 24 * top_n))
st.plotly_chart(fig_freq, use_container_width=True)

low = st.slider("Minimum total count", 1, int(freq.max()), min(2, int(freq.max())), key="tm_low")
frequent = find_freq_terms(tf, low=low)
st.markdown(f"**{len(frequent)} terms appear at least {low} times:** " + ", ".join(frequent))

# ── 10.4 Associations ────────────────────────────────────────────────────────
st.header("10.4  Which Words Travel Together?")

st.markdown(
    "Two terms are associated when they tend to appear in the same documents. The "
    "measure is the Pearson correlation between their columns in the term-frequency "
    "matrix."
)

col_t, col_c = st.columns(2)
default_term = frequent[0] if frequent else freq.index[0]
term = col_t.selectbox("Term", list(freq.index), index=list(freq.index).index(default_term), key="tm_term")
corlimit = col_c.slider("Minimum correlation", 0.1, 1.0, 0.4, 0.05, key="tm_corlimit")
assocs = find_assocs(tf, term, corlimit=corlimit)
if len(assocs):
    st.dataframe(assocs.rename("correlation").rename_axis("term").reset_index(),
                 use_container_width=True, hide_index=True)
else:
    st.info(f"No term correlates with '{term}' at {corlimit:.2f} or more.")

st.subheader("Distinctive terms per genre")
by_genre = document_term_matrix(docs, weighting="tfidf", doc_names=titles)
by_genre = by_genre.groupby(movies["genre"].to_numpy()).sum()
genre = st.selectbox("Genre", sorted(by_genre.index), key="tm_genre")
st.markdown(", ".join(f"`{t}`" for t in term_frequencies(by_genre.loc[[genre]]).head(8).index))

code_example("""
from nltk.stem import PorterStemmer
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS, CountVectorizer

stemmer = PorterStemmer()
clean = [" ".join(stemmer.stem(w) for w in doc.lower().split() if w not in ENGLISH_STOP_WORDS)
         for doc in docs]

vec = CountVectorizer(token_pattern=r"(?u)\\b\\w\\w\\w+\\b")
dtm = pd.DataFrame(vec.fit_transform(clean).toarray(), columns=vec.get_feature_names_out())
dtm.sum().sort_values(ascending=False).head(10)     # most frequent terms
dtm.corrwith(dtm["alien"]).sort_values().tail(5)     # associations
""")

# ── Quiz & Takeaways ─────────────────────────────────────────────────────────
st.divider()

quiz(
    "A term appears in every document. Compared with a rarer term of the same count, its TF-IDF weight is...",
    ["Higher", "Lower", "The same", "Undefined"],
    correct_idx=1,
    explanation="IDF is smallest for terms that appear everywhere, because they do not distinguish documents.",
    key="q_tm_1",
)

quiz(
    "Removing sparse terms with a threshold of 0.95 keeps terms that...",
    [
        "Appear in at least 95% of documents",
        "Are missing from fewer than 95% of documents",
        "Have a TF-IDF weight above 0.95",
        "Appear at least 95 times",
    ],
    correct_idx=1,
    explanation="The threshold is a maximum sparsity per term: the share of documents the term is absent from.",
    key="q_tm_2",
)

takeaways([
    "Clean every document with the same ordered chain of transformations.",
    "The document-term matrix turns a corpus into ordinary numeric data.",
    "TF-IDF down-weights words that appear everywhere.",
    "Removing sparse terms shrinks the matrix and keeps the words that recur.",
    "Term associations are correlations between columns of the term-frequency matrix.",
])
