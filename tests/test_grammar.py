import pytest

from course_utils.grammar import COORDS, GEOMS, STATS, ggplot


def test_describe_lists_seven_components_in_order(iris):
    plot = ggplot(iris, x="sepal_length", y="petal_length", color="species").geom("point")
    desc = plot.describe()
    assert list(desc) == [
        "data", "aesthetics", "geometry", "statistics", "facets", "coordinates", "theme",
    ]
    assert desc["data"] == "150 rows x 5 columns"
    assert desc["aesthetics"] == "x = sepal_length, y = petal_length, color = species"
    assert desc["facets"] == "none"


def test_layers_return_new_plots(iris):
    base = ggplot(iris, x="sepal_length", y="petal_length")
    flipped = base.coord("flip")
    assert base.coord_kind == "cartesian"
    assert flipped.coord_kind == "flip"


@pytest.mark.parametrize("method, value", [("geom", "pie"), ("stat", "median"),
                                           ("coord", "polar"), ("theme", "solarized")])
def test_invalid_component_names(iris, method, value):
    plot = ggplot(iris, x="sepal_length")
    with pytest.raises(ValueError, match="must be one of"):
        getattr(plot, method)(value)


def test_count_stat_replaces_data_with_group_counts(iris):
    plot = ggplot(iris, x="species").geom("bar").stat("count")
    data, y = plot._transformed()
    assert y == "count"
    assert data["count"].tolist() == [50, 50, 50]


def test_mean_stat_needs_y(iris):
    with pytest.raises(ValueError):
        ggplot(iris, x="species").stat("mean").render()


def test_mean_stat(iris):
    data, y = ggplot(iris, x="species", y="petal_length").stat("mean")._transformed()
    assert y == "petal_length"
    assert data.set_index("species")["petal_length"]["setosa"] == pytest.approx(1.462)


def test_flip_swaps_axes(iris):
    fig = ggplot(iris, x="species", y="petal_length").geom("box").coord("flip").render()
    assert fig.data[0].x is not None
    assert fig.layout.xaxis.title.text == "petal_length"
    assert fig.layout.yaxis.title.text == "species"


def test_flip_moves_labels_with_their_aesthetics(iris):
    fig = (ggplot(iris, x="species", y="petal_length").geom("box").coord("flip")
           .labs(x="Species", y="Petal length (cm)").render())
    assert fig.layout.xaxis.title.text == "Petal length (cm)"
    assert fig.layout.yaxis.title.text == "Species"


def test_smooth_adds_trendline(iris):
    fig = ggplot(iris, x="sepal_length", y="petal_length").geom("point").stat("smooth").render()
    assert len(fig.data) == 2


def test_facets_and_labels(iris):
    fig = (ggplot(iris, x="sepal_length", y="petal_length", color="species")
           .facet(col="species").labs(title="Iris", x="Sepal", y="Petal").render())
    assert fig.layout.title.text == "Iris"
    assert fig.layout.xaxis.title.text == "Sepal"
    assert {a.text for a in fig.layout.annotations} == {
        "species=setosa", "species=versicolor", "species=virginica",
    }


@pytest.mark.parametrize("geom", GEOMS)
def test_every_geom_renders(iris, geom):
    y = None if geom == "histogram" else "petal_length"
    x = "species" if geom in ("bar", "box", "violin") else "sepal_length"
    fig = ggplot(iris, x=x, y=y).geom(geom).render()
    assert fig.data


def test_option_lists_are_exposed():
    assert "identity" in STATS
    assert "cartesian" in COORDS
