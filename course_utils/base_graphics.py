"""Matplotlib helpers for the base-graphics chapter: panels, overlays, annotations."""
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
from scipy.stats import gaussian_kde


def panel_grid(nrows, ncols, figsize=(10, 6)):
    """Multi-panel layout; returns the figure and a flat list of axes."""
    fig, axes = plt.subplots(nrows, ncols, figsize=figsize, squeeze=False)
    return fig, list(axes.ravel())


def scatter_with_fit(ax, x, y, groups=None, colors=None):
    """Points plus a least-squares line; returns (slope, intercept)."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if groups is None:
        ax.scatter(x, y, s=18, alpha=0.7, color="#2E86C1")
    else:
        groups = np.asarray(groups)
        for g in dict.fromkeys(groups):
            mask = groups == g
            color = (colors or {}).get(g)
            ax.scatter(x[mask], y[mask], s=18, alpha=0.7, label=str(g), color=color)
        ax.legend(frameon=False, fontsize=8)

    slope, intercept = np.polyfit(x, y, 1)
    xs = np.linspace(x.min(), x.max(), 50)
    ax.plot(xs, slope * xs + intercept, color="black", linewidth=1.5, linestyle="--")
    return slope, intercept


def annotate_extremes(ax, df, x, y, label, n=3):
    """Label the ``n`` rows with the largest ``y``."""
    top = df.nlargest(n, y)
    for _, row in top.iterrows():
        ax.annotate(
            str(row[label]), (row[x], row[y]),
            xytext=(4, 4), textcoords="offset points", fontsize=8,
        )
    return top


def hist_with_density(ax, values, bins=20, color="#2E86C1"):
    """Density-scaled histogram with a Gaussian KDE curve."""
    values = np.asarray(values, dtype=float)
    values = values[~np.isnan(values)]
    ax.hist(values, bins=bins, density=True, color=color, alpha=0.5, edgecolor="white")
    kde = gaussian_kde(values)
    xs = np.linspace(values.min(), values.max(), 200)
    ax.plot(xs, kde(xs), color="black", linewidth=1.5)
    return kde


def pairs_plot(df, columns, hue=None, colors=None, figsize=(9, 9)):
    """Scatter-plot matrix with histograms on the diagonal."""
    k = len(columns)
    fig, axes = plt.subplots(k, k, figsize=figsize, squeeze=False)
    groups = list(dict.fromkeys(df[hue])) if hue else [None]
    for r, row_col in enumerate(columns):
        for c, col_col in enumerate(columns):
            ax = axes[r, c]
            for g in groups:
                part = df if g is None else df[df[hue] == g]
                color = (colors or {}).get(g)
                if r == c:
                    ax.hist(part[row_col].dropna(), bins=15, alpha=0.5, color=color)
                else:
                    ax.scatter(part[col_col], part[row_col], s=6, alpha=0.6, color=color)
            if r == k - 1:
                ax.set_xlabel(col_col, fontsize=8)
            else:
                ax.set_xticklabels([])
            if c == 0:
                ax.set_ylabel(row_col, fontsize=8)
            else:
                ax.set_yticklabels([])
    fig.tight_layout()
    return fig
