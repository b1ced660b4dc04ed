from enum import Enum

from wikibasefixtures import __version__

PROPERTY_ENV_PREFIX = "WIKIBASE_PROPERTY_"
CHRONOLOGY_PROTECTION_COOKIE = "cpPosIndex"
SYSOP_EDIT_PROTECTION = "edit=sysop"


def get_default_user_agent() -> str:
    """
    Get default user agent
    """
    return f"WikibaseFixtures/{__version__}"


class WbiDataTypes(str, Enum):
    """
    WikibaseIntegrator data types
    """

    STRING = "string"
    EXTERNAL_ID = "external-id"
    WIKIBASE_ITEM = "wikibase-item"
    TIME = "time"
    COMMONS_MEDIA = "commonsMedia"
    QUANTITY = "quantity"
    MONOLINGUALTEXT = "monolingualtext"
    GLOBE_COORDINATE = "globe-coordinate"
    ENTITY_SCHEMA = "entity-schema"
    URL = "url"
    PROPERTY = "wikibase-property"
    GEO_SHAPE = "geo-shape"
    TABUlAR_DATA = "tabular-data"
    MATH = "math"
    SENSE = "wikibase-sense"
    MUSICAL_NOTATION = "musical-notation"
    LEXEME = "wikibase-lexeme"
    FORM = "wikibase-form"
    LOCAL_MEDIA = "localMedia"
    EDTF = "edtf"


class WikibaseEntityTypes(str, Enum):
    """
    Entity types that can be created with wbeditentity
    """

    ITEM = "item"
    PROPERTY = "property"


class ApiActions(str, Enum):
    """
    MediaWiki API actions used by the fixtures
    """

    EDIT_ENTITY = "wbeditentity"
    GET_ENTITIES = "wbgetentities"
    PROTECT = "protect"
