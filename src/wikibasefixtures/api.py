import logging
from collections.abc import Callable, Mapping, MutableMapping
from functools import cache
from typing import Any

from wikibasefixtures.cache import PropertyIdCache
from wikibasefixtures.exceptions import EntityNotFoundError
from wikibasefixtures.model.config import WikibaseApiConfig
from wikibasefixtures.model.entity import (
    LabelMap,
    PlainLabel,
    build_item_draft,
    build_property_draft,
    serialize_draft,
)
from wikibasefixtures.session import WikibaseSession
from wikibasefixtures.wikibase import SYSOP_EDIT_PROTECTION, ApiActions, WbiDataTypes, WikibaseEntityTypes

logger = logging.getLogger(__name__)

SessionFactory = Callable[[WikibaseApiConfig, str | None], WikibaseSession]


def warn_implicit_initialization():
    logger.warning("WikibaseApi not initialized", stack_info=True)


class WikibaseApi:
    """
    Creates and queries wikibase entities for end-to-end tests.
    All requests go through one lazily created session.
    """

    def __init__(
        self,
        config: WikibaseApiConfig,
        property_cache: PropertyIdCache | MutableMapping[str, str] | None = None,
        session_factory: SessionFactory | None = None,
        on_implicit_initialize: Callable[[], None] | None = warn_implicit_initialization,
    ):
        """
        constructor
        :param config: wikibase api config
        :param property_cache: cache of the property ids per datatype or the store to back it. Defaults to the
        process environment
        :param session_factory: creates a logged-in session. Defaults to WikibaseSession.login_with
        :param on_implicit_initialize: called when a session is created because none was initialized before
        """
        self.config = config
        if not isinstance(property_cache, PropertyIdCache):
            property_cache = PropertyIdCache(store=property_cache)
        self.property_cache = property_cache
        self.session_factory: SessionFactory = session_factory or WikibaseSession.login_with
        self.on_implicit_initialize = on_implicit_initialize
        self._session: WikibaseSession | None = None

    @property
    def is_initialized(self) -> bool:
        return self._session is not None

    def initialize(self, cp_pos_index: str | None = None) -> WikibaseSession:
        """
        Log in and replace the current session
        :param cp_pos_index: value of the cpPosIndex cookie of the browser.
        Optional, but strongly recommended to have chronology protection.
        :return: new session
        """
        logger.debug(f"Initializing session for {self.config.mediawiki_api_url}")
        session = self.session_factory(self.config, cp_pos_index)
        self._session = session
        return session

    def get_session(self) -> WikibaseSession:
        """
        Get the current session. Initializes a new session if none exists.
        """
        if self._session is None:
            if self.on_implicit_initialize is not None:
                self.on_implicit_initialize()
            return self.initialize()
        return self._session

    def create_item(
        self,
        label: str | Mapping[str, Any] | PlainLabel | LabelMap | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        """
        Create an item
        :param label: Optional English label of the item or mapping containing all labels
        :param data: Optional data to populate the item with
        :return: id of the new item
        """
        item_data = build_item_draft(label, data)
        return self._create_entity(WikibaseEntityTypes.ITEM, item_data)

    def create_property(self, datatype: WbiDataTypes | str, data: Mapping[str, Any] | None = None) -> str:
        """
        Create a property
        :param datatype: datatype of the property
        :param data: Optional data to populate the property with
        :return: id of the new property
        """
        property_data = build_property_draft(datatype, data)
        return self._create_entity(WikibaseEntityTypes.PROPERTY, property_data)

    def _create_entity(self, entity_type: WikibaseEntityTypes, entity_data: dict[str, Any]) -> str:
        session = self.get_session()
        response = session.request(
            {
                "action": ApiActions.EDIT_ENTITY.value,
                "new": entity_type.value,
                "data": serialize_draft(entity_data),
                "token": session.edit_token,
            }
        )
        entity_id = response["entity"]["id"]
        logger.debug(f"Created {entity_type.value} {entity_id}")
        return entity_id

    def get_entity(self, entity_id: str) -> dict | None:
        """
        Get the entity data of the given id
        :param entity_id: id of the entity
        :return: entity json or None if the id is missing in the response
        """
        session = self.get_session()
        response = session.request(
            {
                "action": ApiActions.GET_ENTITIES.value,
                "ids": entity_id,
                "token": session.edit_token,
            }
        )
        return response.get("entities", {}).get(entity_id)

    def protect_entity(self, entity_id: str) -> dict:
        """
        Protect the page of the given entity so that only sysops can edit it
        :param entity_id: id of the entity
        :return: api response of the protect action
        """
        session = self.get_session()
        info_response = session.request(
            {
                "action": ApiActions.GET_ENTITIES.value,
                "ids": entity_id,
                "props": "info",
            }
        )
        entity_info = info_response.get("entities", {}).get(entity_id) or {}
        entity_title = entity_info.get("title")
        if entity_title is None:
            raise EntityNotFoundError(entity_id)
        logger.debug(f"Protecting {entity_title} ({SYSOP_EDIT_PROTECTION})")
        return session.request(
            {
                "action": ApiActions.PROTECT.value,
                "title": entity_title,
                "protections": SYSOP_EDIT_PROTECTION,
                "token": session.edit_token,
            }
        )

    def get_property(self, datatype: WbiDataTypes | str) -> str:
        """
        Get the id of a property with the given datatype. The property is created on first use.
        :param datatype: datatype of the property
        :return: property id
        """
        return self.property_cache.get_or_create(datatype, lambda: self.create_property(datatype))


@cache
def get_default_api() -> WikibaseApi:
    """
    Get the process wide WikibaseApi configured from the environment
    """
    return WikibaseApi(WikibaseApiConfig.from_environment())
