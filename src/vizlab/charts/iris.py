from __future__ import annotations

from vizlab.preprocess.coerce import FieldSpec

ATTRIBUTES = ["sepal length", "sepal width", "petal length", "petal width"]
SPECIES = ["Iris-setosa", "Iris-versicolor", "Iris-virginica"]


def iris_field_spec() -> list[FieldSpec]:
    specs = [FieldSpec(source="class", kind="category", target="class")]
    specs.extend(FieldSpec(source=attribute, kind="number", policy="nan") for attribute in ATTRIBUTES)
    return specs


def check_attributes(names: tuple[str, ...] | list[str]) -> None:
    unknown = [name for name in names if name not in ATTRIBUTES]
    if unknown:
        raise ValueError(f"Unknown iris attributes: {', '.join(unknown)}")
