"""Chapter 9: The Supervised-Learning Workflow -- Split, preprocess, resample, tune, evaluate."""
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from course_utils.config import get_settings
from course_utils.constants import DATASETS
from course_utils.data_loader import dataset_picker, feature_picker
from course_utils.ml_helpers import (
    DEFAULT_GRIDS, MODEL_LABELS, MODELS, PREPROCESS_STEPS, RESAMPLING_METHODS,
    build_pipeline, classification_metrics, plot_confusion_matrix, resample, split_data,
    train_model, tune, variable_importance,
)
from course_utils.plotting import apply_common_layout
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, formula_box, insight_box, quiz,
    takeaways, warning_box,
)

RESAMPLING_LABELS = {
    "cv": "k-fold cross-validation",
    "repeatedcv": "Repeated k-fold cross-validation",
    "loocv": "Leave-one-out",
    "boot": "Bootstrap (out-of-bag)",
}

# Leave-one-out fits one model per row; larger training sets are subsampled.
LOOCV_MAX_ROWS = 200


@st.cache_data(show_spinner=False)
def run_resampling(model_name, preprocess, X, y, method, folds, repeats, seed):
    pipeline = build_pipeline(model_name, preprocess, seed)
    return resample(pipeline, X, y, method=method, folds=folds, repeats=repeats, seed=seed)


@st.cache_data(show_spinner=False)
def run_tuning(model_name, preprocess, X, y, folds, seed):
    pipeline = build_pipeline(model_name, preprocess, seed)
    search, results = tune(pipeline, DEFAULT_GRIDS[model_name], X, y, folds=folds, seed=seed)
    return results, search.best_params_, search.best_score_


# ── Header ───────────────────────────────────────────────────────────────────
chapter_header(9)
st.markdown(
    "Fitting a classifier is one line of code. Knowing whether it is any good takes the "
    "rest of the chapter. The workflow is always the same: hold out a test set and do not "
    "touch it, decide how to preprocess, estimate performance by resampling the training "
    "set, tune the knobs with that estimate, and only then look at the test set, once. "
    "scikit-learn gives us every piece; the `Pipeline` object is what keeps them in the "
    "right order."
)

# ── Load data ────────────────────────────────────────────────────────────────
settings = get_settings()
seed = settings.random_state
key, df = dataset_picker(options=["iris", "wine", "wine_quality"], key="sl_dataset")
df, features = feature_picker(df, key, key="sl_features")
target = DATASETS[key]["label"]

# ── 9.1 Split ────────────────────────────────────────────────────────────────
st.header("9.1  Hold Out a Test Set")

concept_box(
    "Training, Resampling and Test Data",
    "The <b>test set</b> is locked away until the very end. Every decision before that "
    "(which preprocessing, which model, which hyperparameters) is made on the "
    "<b>training set</b> alone, by repeatedly splitting it into analysis and assessment "
    "parts. Peeking at the test set to make a decision quietly turns it into training data."
)

test_pct = st.slider("Test set percentage", 10, 40, 20, 5, key="sl_test_pct")
stratify = st.checkbox("Stratify by the outcome", value=True, key="sl_stratify")
X_train, X_test, y_train, y_test, le = split_data(
    df, features, target, test_size=test_pct / 100, seed=seed, stratify=stratify,
)
class_names = [str(c) for c in le.classes_]

col1, col2, col3 = st.columns(3)
col1.metric("Training rows", f"{len(X_train):,}")
col2.metric("Test rows", f"{len(X_test):,}")
col3.metric("Classes", len(class_names))

balance = (
    df[target].astype(str).value_counts(normalize=True).rename("share").rename_axis(target)
    .reset_index()
)
fig_bal = px.bar(balance, x=target, y="share", color_discrete_sequence=["#2E86C1"])
apply_common_layout(fig_bal, title=f"Class balance of {target}", height=320)
st.plotly_chart(fig_bal, use_container_width=True)

if key == "wine_quality":
    warning_box(
        "Most red wines score 5 or 6. A model that always answers 5 is right about 43% "
        "of the time, so judge accuracy against that baseline and not against zero."
    )

# ── 9.2 Preprocess ───────────────────────────────────────────────────────────
st.header("9.2  Preprocessing Inside the Pipeline")

col_m, col_p = st.columns(2)
model_name = col_m.selectbox(
    "Model", list(MODELS), index=0, format_func=MODEL_LABELS.get, key="sl_model",
)
preprocess = tuple(col_p.multiselect(
    "Preprocessing steps", PREPROCESS_STEPS, default=["center", "scale"], key="sl_preprocess",
))
pipeline = build_pipeline(model_name, preprocess, seed)
st.code(" -> ".join(name for name, _ in pipeline.steps), language="text")

formula_box(
    "Centering and Scaling",
    r"z = \frac{x - \bar{x}_{\text{train}}}{s_{\text{train}}}",
    "The mean and standard deviation come from the training rows of each resample only."
)

warning_box(
    "Scaling the whole dataset before splitting leaks information about the test rows "
    "into the training step. Inside a Pipeline the scaler is refitted on every "
    "training fold, so the leak cannot happen."
)

# ── 9.3 Resample ─────────────────────────────────────────────────────────────
st.header("9.3  Estimating Performance by Resampling")

col_r1, col_r2, col_r3 = st.columns(3)
method = col_r1.selectbox(
    "Resampling method", RESAMPLING_METHODS, format_func=RESAMPLING_LABELS.get, key="sl_method",
)
folds = col_r2.slider("Folds", 3, 10, 5, key="sl_folds")
repeats = col_r3.slider("Repeats", 1, 25, 3, key="sl_repeats",
                        help="Used by repeated CV and by the bootstrap.")

X_res, y_res = X_train, y_train
if method == "loocv" and len(X_train) > LOOCV_MAX_ROWS:
    X_res, y_res = X_train.iloc[:LOOCV_MAX_ROWS], y_train[:LOOCV_MAX_ROWS]
    st.caption(f"Leave-one-out runs on the first {LOOCV_MAX_ROWS} training rows to keep the page responsive.")

with st.spinner(f"Running {RESAMPLING_LABELS[method].lower()}..."):
    scores = run_resampling(model_name, preprocess, X_res, y_res, method, folds, repeats, seed)

col_s1, col_s2, col_s3 = st.columns(3)
col_s1.metric("Resamples", len(scores))
col_s2.metric("Mean accuracy", f"{scores['accuracy'].mean():.3f}")
col_s3.metric("Std. deviation", f"{scores['accuracy'].std():.3f}")

fig_res = px.histogram(scores, x="accuracy", nbins=20, color_discrete_sequence=["#2A9D8F"])
apply_common_layout(fig_res, title="Accuracy across resamples", height=350)
st.plotly_chart(fig_res, use_container_width=True)

insight_box(
    "Leave-one-out scores are each 0 or 1, so the histogram has two bars and only the "
    "mean is meaningful. The bootstrap trains on as many rows as the full training set "
    "but sees only about 63% of the distinct rows, which makes it a little pessimistic."
)

# ── 9.4 Tune ─────────────────────────────────────────────────────────────────
st.header("9.4  Tuning Hyperparameters")

grid = DEFAULT_GRIDS[model_name]
st.markdown("Search grid: " + ", ".join(f"`{k}` in {v}" for k, v in grid.items()))

with st.spinner("Running hyperparameter grid..."):
    results, best_params, best_score = run_tuning(model_name, preprocess, X_train, y_train, folds, seed)

st.dataframe(results.round(4), use_container_width=True, hide_index=True)
best_display = {k.replace("model__", ""): v for k, v in best_params.items()}
st.success(f"Best cross-validated accuracy {best_score:.3f} with {best_display}")

param_cols = [c for c in results.columns if c not in ("mean_test_score", "std_test_score", "rank_test_score")]
if len(param_cols) == 1:
    p = param_cols[0]
    tuned = results.sort_values(p, kind="mergesort", na_position="last")
    fig_tune = go.Figure(go.Scatter(
        x=[str(v) if pd.notna(v) else "None" for v in tuned[p]],
        y=tuned["mean_test_score"], mode="lines+markers",
        error_y=dict(type="data", array=tuned["std_test_score"]),
        line=dict(color="#7209B7", width=2),
    ))
    fig_tune.update_layout(xaxis_title=p, yaxis_title="Mean CV accuracy", xaxis_type="category")
    apply_common_layout(fig_tune, title=f"Tuning curve for {p}", height=380)
    st.plotly_chart(fig_tune, use_container_width=True)

# ── 9.5 Evaluate ─────────────────────────────────────────────────────────────
st.header("9.5  One Look at the Test Set")

baseline = train_model(model_name, preprocess, X_train, y_train, seed)
final = build_pipeline(model_name, preprocess, seed).set_params(**best_params).fit(X_train, y_train)
baseline_acc = classification_metrics(y_test, baseline.predict(X_test), labels=class_names)["accuracy"]
metrics = classification_metrics(y_test, final.predict(X_test), labels=class_names)

col_e1, col_e2, col_e3 = st.columns(3)
col_e1.metric("Test accuracy, tuned", f"{metrics['accuracy']:.3f}",
              delta=f"{metrics['accuracy'] - baseline_acc:+.3f} vs defaults")
col_e2.metric("Test accuracy, default settings", f"{baseline_acc:.3f}")
col_e3.metric("Macro F1", f"{metrics['report']['macro avg']['f1-score']:.3f}")
st.plotly_chart(plot_confusion_matrix(metrics["confusion_matrix"], class_names), use_container_width=True)

st.subheader("Which features does the model rely on?")
with st.spinner("Computing permutation importance..."):
    importance = variable_importance(final, X_test, y_test, seed=seed, n_repeats=5)
fig_imp = px.bar(
    importance.iloc[::-1], x="importance", y="feature", error_x="std", orientation="h",
    color_discrete_sequence=["#E63946"],
)
apply_common_layout(fig_imp, title="Permutation importance (drop in test accuracy)", height=max(320, 30 * len(features)))
st.plotly_chart(fig_imp, use_container_width=True)

code_example("""
from sklearn.model_selection import GridSearchCV, StratifiedKFold, cross_val_score, train_test_split
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

X_train, X_test, y_train, y_test = train_test_split(X, y, test_size=0.2, stratify=y, random_state=42)
pipe = Pipeline([("scale", StandardScaler()), ("model", KNeighborsClassifier())])

cv = StratifiedKFold(n_splits=5, shuffle=True, random_state=42)
cross_val_score(pipe, X_train, y_train, cv=cv).mean()

search = GridSearchCV(pipe, {"model__n_neighbors": [3, 5, 7, 9]}, cv=cv).fit(X_train, y_train)
search.score(X_test, y_test)   # once, at the very end
""")

# ── Quiz & Takeaways ─────────────────────────────────────────────────────────
st.divider()

quiz(
    "You standardise the whole dataset, then run 5-fold cross-validation. What went wrong?",
    [
        "Nothing, scaling does not affect accuracy",
        "Each fold's assessment rows influenced the scaling used to train on that fold",
        "Cross-validation cannot be used with scaled data",
        "Five folds is too few",
    ],
    correct_idx=1,
    explanation="Preprocessing is part of the model; it must be fitted inside each resample.",
    key="q_sl_1",
)

quiz(
    "Why should the test set be used only once?",
    [
        "It is too small to use twice",
        "Any decision made by looking at it makes its score optimistic",
        "scikit-learn forbids it",
        "It makes training slower",
    ],
    correct_idx=1,
    explanation="Once you choose between options using the test score, it is no longer unseen data.",
    key="q_sl_2",
)

takeaways([
    "Split first; make every modelling decision on the training set.",
    "Put preprocessing inside a Pipeline so it is refitted in every resample.",
    "Resampling (k-fold, repeated CV, leave-one-out, bootstrap) estimates out-of-sample performance.",
    "Grid search picks hyperparameters using the resampling estimate, not the test set.",
    "Permutation importance asks how much the test score drops when one feature is shuffled.",
])
