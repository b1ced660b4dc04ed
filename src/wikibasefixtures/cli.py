import json
from pathlib import Path
from typing import Annotated

import typer
from rich import get_console

from wikibasefixtures.api import WikibaseApi
from wikibasefixtures.exceptions import (
    AuthenticationError,
    RemoteRequestError,
    UserLoginRequiredException,
)
from wikibasefixtures.model.config import WikibaseApiConfig, load_config
from wikibasefixtures.wikibase import WbiDataTypes

app = typer.Typer()
console = get_console()

STYLE_ERROR_MSG = "bold red"

ConfigOption = Annotated[
    Path | None,
    typer.Option(help="The configuration file defining the Wikibase. If not given the environment is used"),
]
CookieOption = Annotated[str | None, typer.Option(help="Value of the cpPosIndex cookie for chronology protection")]
DataOption = Annotated[str | None, typer.Option(help="Additional entity data as JSON object")]


def get_api(config: Path | None, cp_pos_index: str | None = None) -> WikibaseApi:
    """
    Get a logged-in WikibaseApi
    :param config: path of the config file
    :param cp_pos_index: value of the cpPosIndex cookie
    :return: WikibaseApi
    """
    if config is None:
        api_config = WikibaseApiConfig.from_environment()
    else:
        if not config.exists():
            console.print(f"Config {config} not found", style=STYLE_ERROR_MSG)
            raise typer.Abort()
        api_config = load_config(config)
    api = WikibaseApi(api_config)
    try:
        api.initialize(cp_pos_index)
    except UserLoginRequiredException:
        console.print("No user credentials configured", style=STYLE_ERROR_MSG)
        raise typer.Exit(code=1)
    except AuthenticationError as e:
        console.print(str(e), style=STYLE_ERROR_MSG)
        raise typer.Exit(code=1)
    return api


def parse_data(data: str | None) -> dict | None:
    """
    Parse the entity data option
    """
    if data is None:
        return None
    try:
        value = json.loads(data)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"Invalid JSON: {e}")
    if not isinstance(value, dict):
        raise typer.BadParameter("Entity data must be a JSON object")
    return value


@app.command(name="create-item")
def create_item(
    label: Annotated[str | None, typer.Option(help="English label of the item")] = None,
    data: DataOption = None,
    config: ConfigOption = None,
    cp_pos_index: CookieOption = None,
):
    """
    Create a new item
    """
    api = get_api(config, cp_pos_index)
    try:
        entity_id = api.create_item(label, parse_data(data))
    except RemoteRequestError as e:
        console.print(str(e), style=STYLE_ERROR_MSG)
        raise typer.Exit(code=1)
    console.print(entity_id)


@app.command(name="create-property")
def create_property(
    datatype: Annotated[WbiDataTypes, typer.Argument(help="datatype of the property")],
    data: DataOption = None,
    config: ConfigOption = None,
    cp_pos_index: CookieOption = None,
):
    """
    Create a new property
    """
    api = get_api(config, cp_pos_index)
    try:
        entity_id = api.create_property(datatype, parse_data(data))
    except RemoteRequestError as e:
        console.print(str(e), style=STYLE_ERROR_MSG)
        raise typer.Exit(code=1)
    console.print(entity_id)


@app.command(name="get-entity")
def get_entity(
    entity_id: Annotated[str, typer.Argument(help="id of the entity")],
    config: ConfigOption = None,
    cp_pos_index: CookieOption = None,
):
    """
    Show the json of an entity
    """
    api = get_api(config, cp_pos_index)
    try:
        entity = api.get_entity(entity_id)
    except RemoteRequestError as e:
        console.print(str(e), style=STYLE_ERROR_MSG)
        raise typer.Exit(code=1)
    if entity is None or "missing" in entity:
        console.print(f"Entity {entity_id} not found", style=STYLE_ERROR_MSG)
        raise typer.Exit(code=1)
    console.print_json(data=entity)


@app.command(name="protect")
def protect(
    entity_id: Annotated[str, typer.Argument(help="id of the entity")],
    config: ConfigOption = None,
    cp_pos_index: CookieOption = None,
):
    """
    Protect an entity so that only sysops can edit it
    """
    api = get_api(config, cp_pos_index)
    try:
        result = api.protect_entity(entity_id)
    except RemoteRequestError as e:
        console.print(str(e), style=STYLE_ERROR_MSG)
        raise typer.Exit(code=1)
    console.print_json(data=result)


@app.command(name="get-property")
def get_property(
    datatype: Annotated[WbiDataTypes, typer.Argument(help="datatype of the property")],
    config: ConfigOption = None,
    cp_pos_index: CookieOption = None,
):
    """
    Print the id of a property with the given datatype, creating it if WIKIBASE_PROPERTY_<DATATYPE> is not set
    """
    api = get_api(config, cp_pos_index)
    try:
        property_id = api.get_property(datatype)
    except RemoteRequestError as e:
        console.print(str(e), style=STYLE_ERROR_MSG)
        raise typer.Exit(code=1)
    console.print(property_id)


if __name__ == "__main__":
    app()
