"""Shared constants: palettes, dataset metadata, chapter outline."""

SPECIES_COLORS = {
    "setosa": "#E63946",
    "versicolor": "#2A9D8F",
    "virginica": "#7209B7",
}

CULTIVAR_COLORS = {
    "class_0": "#E63946",
    "class_1": "#F4A261",
    "class_2": "#264653",
}

POKEMON_TYPE_COLORS = {
    "Grass": "#78C850",
    "Fire": "#F08030",
    "Water": "#6890F0",
    "Electric": "#F8D030",
    "Psychic": "#F85888",
    "Normal": "#A8A878",
    "Dragon": "#7038F8",
    "Ghost": "#705898",
    "Rock": "#B8A038",
    "Fighting": "#C03028",
    "Ice": "#98D8D8",
}

# Label column and numeric features for every dataset the loader knows about.
DATASETS = {
    "iris": {
        "title": "Iris measurements",
        "label": "species",
        "features": ["sepal_length", "sepal_width", "petal_length", "petal_width"],
        "colors": SPECIES_COLORS,
    },
    "wine": {
        "title": "Wine cultivars (chemical analysis)",
        "label": "cultivar",
        "features": [
            "alcohol", "malic_acid", "ash", "alcalinity_of_ash", "magnesium",
            "total_phenols", "flavanoids", "nonflavanoid_phenols", "proanthocyanins",
            "color_intensity", "hue", "od280_od315_of_diluted_wines", "proline",
        ],
        "colors": CULTIVAR_COLORS,
    },
    "pokemon": {
        "title": "Pokemon base stats",
        "label": "type1",
        "features": ["hp", "attack", "defense", "sp_atk", "sp_def", "speed"],
        "colors": POKEMON_TYPE_COLORS,
    },
    "wine_quality": {
        "title": "Red wine quality (UCI)",
        "label": "quality",
        "features": [
            "fixed_acidity", "volatile_acidity", "citric_acid", "residual_sugar",
            "chlorides", "free_sulfur_dioxide", "total_sulfur_dioxide", "density",
            "ph", "sulphates", "alcohol",
        ],
        "colors": None,
    },
    "movies": {
        "title": "Movie metadata",
        "label": "genre",
        "features": ["runtime_min", "rating"],
        "colors": None,
    },
}

BUNDLED_FILES = {
    "pokemon": "pokemon.csv",
    "movies": "movies.csv",
    "wine_quality": "winequality-red.csv",
}

SKLEARN_DATASETS = ["iris", "wine"]

# Datasets that have a usable numeric feature matrix for the modelling chapters.
NUMERIC_DATASETS = ["iris", "wine", "pokemon", "wine_quality"]

PART_TITLES = {
    "I": "Working with Tables",
    "II": "Dates and Times",
    "III": "Plotting",
    "IV": "Unsupervised Learning",
    "V": "Supervised Learning",
    "VI": "Text Mining",
    "VII": "Reactive Dashboards",
}

CHAPTERS = {
    1: ("Tabular Data Basics", "I"),
    2: ("Joins and Verbs", "I"),
    3: ("Dates and Times", "II"),
    4: ("Grammar of Graphics", "III"),
    5: ("Base Graphics", "III"),
    6: ("K-Means Clustering", "IV"),
    7: ("Hierarchical Clustering", "IV"),
    8: ("Principal Component Analysis", "IV"),
    9: ("Supervised Learning Workflow", "V"),
    10: ("Text Mining", "VI"),
    11: ("Reactive Dashboards", "VII"),
}
