"""
A layered plot specification rendered with plotly express.

The grammar of graphics builds a chart from independent components: data,
aesthetic mappings, a geometry, a statistical transformation, facets, a
coordinate system and a theme. ``LayeredPlot`` records each component as a
separate, chainable call and only turns them into a Plotly figure in
``render()``, so a chapter can add one layer at a time and show what changed.
"""
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Optional

import pandas as pd
import plotly.express as px

GEOMS = ["point", "line", "bar", "histogram", "box", "violin"]
STATS = ["identity", "count", "mean", "smooth"]
COORDS = ["cartesian", "flip", "log_x", "log_y", "fixed"]
THEMES = ["plotly_white", "plotly", "ggplot2", "seaborn", "simple_white", "plotly_dark"]


def _check(value, allowed, what):
    if value not in allowed:
        raise ValueError(f"{what} must be one of {allowed}, got {value!r}")


@dataclass(frozen=True)
class Aes:
    """Mapping from data columns to visual channels."""
    x: str
    y: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None


@dataclass(frozen=True)
class LayeredPlot:
    data: pd.DataFrame
    aes: Aes
    geom_kind: str = "point"
    stat_kind: str = "identity"
    facet_col: Optional[str] = None
    facet_row: Optional[str] = None
    facet_wrap: Optional[int] = None
    coord_kind: str = "cartesian"
    theme_name: str = "plotly_white"
    title: Optional[str] = None
    x_label: Optional[str] = None
    y_label: Optional[str] = None

    def geom(self, kind):
        _check(kind, GEOMS, "geom")
        return replace(self, geom_kind=kind)

    def stat(self, kind):
        _check(kind, STATS, "stat")
        return replace(self, stat_kind=kind)

    def facet(self, col=None, row=None, wrap=None):
        return replace(self, facet_col=col, facet_row=row, facet_wrap=wrap)

    def coord(self, kind):
        _check(kind, COORDS, "coord")
        return replace(self, coord_kind=kind)

    def theme(self, name):
        _check(name, THEMES, "theme")
        return replace(self, theme_name=name)

    def labs(self, title=None, x=None, y=None):
        return replace(self, title=title, x_label=x, y_label=y)

    def describe(self):
        """The seven grammar components in order, as display strings."""
        aes = {k: v for k, v in vars(self.aes).items() if v is not None}
        facets = {k: v for k, v in
                  (("col", self.facet_col), ("row", self.facet_row), ("wrap", self.facet_wrap))
                  if v is not None}
        return OrderedDict([
            ("data", f"{len(self.data):,} rows x {self.data.shape[1]} columns"),
            ("aesthetics", ", ".join(f"{k} = {v}" for k, v in aes.items())),
            ("geometry", self.geom_kind),
            ("statistics", self.stat_kind),
            ("facets", ", ".join(f"{k} = {v}" for k, v in facets.items()) or "none"),
            ("coordinates", self.coord_kind),
            ("theme", self.theme_name),
        ])

    def _group_columns(self):
        cols = [self.aes.x, self.aes.color, self.facet_col, self.facet_row]
        return list(dict.fromkeys(c for c in cols if c))

    def _transformed(self):
        """Apply the stat layer; returns (frame, y column)."""
        if self.stat_kind == "count":
            data = self.data.groupby(self._group_columns(), observed=True).size().reset_index(name="count")
            return data, "count"
        if self.stat_kind == "mean":
            if self.aes.y is None:
                raise ValueError("stat 'mean' needs a y aesthetic")
            data = (self.data.groupby(self._group_columns(), observed=True)[self.aes.y]
                    .mean().reset_index())
            return data, self.aes.y
        return self.data, self.aes.y

    def render(self):
        data, y = self._transformed()
        x = self.aes.x
        if self.coord_kind == "flip":
            x, y = y, x

        kwargs = dict(
            color=self.aes.color,
            facet_col=self.facet_col,
            facet_row=self.facet_row,
            template=self.theme_name,
            title=self.title,
        )
        if self.facet_wrap and self.facet_col and not self.facet_row:
            kwargs["facet_col_wrap"] = self.facet_wrap
        if self.coord_kind == "log_x":
            kwargs["log_x"] = True
        if self.coord_kind == "log_y":
            kwargs["log_y"] = True

        if self.geom_kind == "point":
            fig = px.scatter(data, x=x, y=y, size=self.aes.size,
                             trendline="ols" if self.stat_kind == "smooth" else None, **kwargs)
        elif self.geom_kind == "line":
            fig = px.line(data.sort_values(x), x=x, y=y, markers=True, **kwargs)
        elif self.geom_kind == "bar":
            fig = px.bar(data, x=x, y=y, barmode="group", **kwargs)
        elif self.geom_kind == "histogram":
            fig = px.histogram(data, x=x, y=y, barmode="overlay", opacity=0.7, **kwargs)
        elif self.geom_kind == "box":
            fig = px.box(data, x=x, y=y, **kwargs)
        else:
            fig = px.violin(data, x=x, y=y, box=True, **kwargs)

        if self.coord_kind == "fixed":
            fig.update_yaxes(scaleanchor="x", scaleratio=1)
        # Labels follow the aesthetics, so a flip moves them with the data.
        x_label, y_label = self.x_label, self.y_label
        if self.coord_kind == "flip":
            x_label, y_label = y_label, x_label
        labels = {}
        if x_label:
            labels["xaxis_title"] = x_label
        if y_label:
            labels["yaxis_title"] = y_label
        fig.update_layout(title_x=0.5, **labels)
        return fig


def ggplot(data, **mapping):
    """Start a plot: ``ggplot(df, x="a", y="b", color="c").geom("point")``."""
    return LayeredPlot(data=data, aes=Aes(**mapping))
