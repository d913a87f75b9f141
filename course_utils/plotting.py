"""Shared Plotly plotting helpers."""
import plotly.express as px
import plotly.figure_factory as ff
import plotly.graph_objects as go
from scipy.cluster.hierarchy import linkage

from course_utils.constants import DATASETS


def apply_common_layout(fig, title=None, height=500):
    """Apply common layout settings to a Plotly figure."""
    fig.update_layout(
        template="plotly_white",
        height=height,
        title=title,
        title_x=0.5,
        margin=dict(t=60, b=40, l=60, r=40),
    )
    return fig


def color_map(dataset_key):
    """Return the discrete color map for a dataset's label column, if it has one."""
    return DATASETS[dataset_key]["colors"] or {}


def pretty_label(column):
    """Turn a snake_case column name into an axis label."""
    return column.replace("_", " ").capitalize()


def scatter_chart(df, x, y, color=None, dataset_key=None, title=None, height=500, opacity=0.7):
    """Create a scatter plot colored by a label column."""
    fig = px.scatter(
        df, x=x, y=y, color=color,
        color_discrete_map=color_map(dataset_key) if dataset_key else None,
        labels={x: pretty_label(x), y: pretty_label(y)},
        title=title, opacity=opacity,
    )
    return apply_common_layout(fig, title, height)


def heatmap_chart(data, x_label="", y_label="", title=None, height=500, color_scale="RdYlBu_r",
                  text_format=None):
    """Create a heatmap from a 2D array or DataFrame."""
    z = data.values if hasattr(data, "values") else data
    fig = go.Figure(data=go.Heatmap(
        z=z,
        x=data.columns.tolist() if hasattr(data, "columns") else None,
        y=data.index.tolist() if hasattr(data, "index") else None,
        colorscale=color_scale,
        text=z.round(2) if text_format else None,
        texttemplate=text_format,
    ))
    fig.update_layout(xaxis_title=x_label, yaxis_title=y_label)
    return apply_common_layout(fig, title, height)


def dendrogram_figure(X, labels=None, method="ward", metric="euclidean", threshold_ratio=0.7,
                      title=None, height=450):
    """Plotly dendrogram using SciPy's linkage with the chosen method."""
    Z = linkage(X, method=method, metric=metric)
    fig = ff.create_dendrogram(
        X,
        labels=labels,
        linkagefun=lambda x: linkage(x, method=method, metric=metric),
        color_threshold=threshold_ratio * max(Z[:, 2]),
    )
    fig.update_layout(xaxis_title="Observation", yaxis_title="Height")
    return apply_common_layout(fig, title, height)


def biplot_figure(scores, arrows, color=None, dataset_key=None, title="PCA Biplot", height=550):
    """Scatter of the first two PC scores with loading arrows overlaid."""
    fig = px.scatter(
        scores, x="PC1", y="PC2", color=color,
        color_discrete_map=color_map(dataset_key) if dataset_key else None,
        opacity=0.7,
    )
    for feature, row in arrows.iterrows():
        fig.add_annotation(
            x=row["PC1"], y=row["PC2"], ax=0, ay=0,
            xref="x", yref="y", axref="x", ayref="y",
            showarrow=True, arrowhead=2, arrowwidth=1.5, arrowcolor="#333333",
        )
        fig.add_annotation(
            x=row["PC1"] * 1.1, y=row["PC2"] * 1.1,
            text=feature, showarrow=False, font=dict(size=11, color="#333333"),
        )
    return apply_common_layout(fig, title, height)
