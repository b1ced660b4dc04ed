import json
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from wikibasefixtures.wikibase import WbiDataTypes

DEFAULT_LANGUAGE = "en"


class PlainLabel(BaseModel):
    """
    single label given as plain string
    """

    kind: Literal["plain"] = "plain"
    value: str
    language: str = DEFAULT_LANGUAGE

    def to_labels(self) -> dict[str, dict[str, str]]:
        return {self.language: {"language": self.language, "value": self.value}}


class LabelMap(BaseModel):
    """
    labels given as mapping from language code to label record
    """

    kind: Literal["map"] = "map"
    labels: dict[str, dict[str, Any]]

    def to_labels(self) -> dict[str, dict[str, Any]]:
        return dict(self.labels)


Label = Annotated[PlainLabel | LabelMap, Field(discriminator="kind")]


def as_label(label: str | Mapping[str, Any] | PlainLabel | LabelMap | None) -> PlainLabel | LabelMap | None:
    """
    Convert the given label argument into its tagged form
    :param label: plain string, mapping of language to label record or an already tagged label
    :return: tagged label or None if no label is given
    """
    if label is None or isinstance(label, PlainLabel | LabelMap):
        return label
    if isinstance(label, str):
        if label == "":
            return None
        return PlainLabel(value=label)
    if isinstance(label, Mapping):
        return LabelMap(labels=dict(label))
    raise TypeError(f"Unsupported label type: {type(label)}")


def build_item_draft(
    label: str | Mapping[str, Any] | PlainLabel | LabelMap | None = None, data: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """
    Build the entity data of a new item
    :param label: english label or mapping of all labels
    :param data: additional entity data. Overrides the labels on key collision
    :return: item draft
    """
    tagged_label = as_label(label)
    labels = tagged_label.to_labels() if tagged_label is not None else {}
    draft: dict[str, Any] = {"labels": labels}
    if data:
        draft.update(data)
    return draft


def build_property_draft(datatype: WbiDataTypes | str, data: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """
    Build the entity data of a new property
    :param datatype: datatype of the property
    :param data: additional entity data
    :return: property draft
    """
    if isinstance(datatype, WbiDataTypes):
        datatype = datatype.value
    draft: dict[str, Any] = {"datatype": datatype}
    if data:
        draft.update(data)
    return draft


def serialize_draft(draft: Mapping[str, Any]) -> str:
    return json.dumps(draft)
