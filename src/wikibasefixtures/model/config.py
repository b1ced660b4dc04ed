import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, HttpUrl, field_validator

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "http://localhost:8080"
DEFAULT_SCRIPT_PATH = "/w"


class WikibaseApiConfig(BaseModel):
    """
    configuration for a wikibase api
    """

    model_config = ConfigDict(extra="ignore")
    base_url: HttpUrl
    user: str | None = None
    password: str | None = None
    bot_password: str | None = None
    user_agent: str | None = None
    is_bot: bool = False

    @field_validator("user", "password", "bot_password", mode="before")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @property
    def mediawiki_api_url(self) -> str:
        """
        URL of the action API of the wiki
        """
        return f"{self.base_url.unicode_string().rstrip('/')}/api.php"

    @property
    def host(self) -> str | None:
        """
        Host of the wiki
        """
        return self.base_url.host

    def has_credentials(self) -> bool:
        """
        Returns True if a user with a password or bot password is configured
        """
        return self.user is not None and (self.password is not None or self.bot_password is not None)

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> "WikibaseApiConfig":
        """
        Build the configuration from the environment variables used by MediaWiki browser test suites
        :param environ: environment to read from. Defaults to os.environ
        :return: WikibaseApiConfig
        """
        if environ is None:
            environ = os.environ
        server = environ.get("MW_SERVER", DEFAULT_SERVER).rstrip("/")
        script_path = environ.get("MW_SCRIPT_PATH", DEFAULT_SCRIPT_PATH)
        logger.debug(f"Reading wikibase api config from environment (server: {server}{script_path})")
        return cls(
            base_url=f"{server}{script_path}",
            user=environ.get("MEDIAWIKI_USER"),
            password=environ.get("MEDIAWIKI_PASSWORD"),
            bot_password=environ.get("MEDIAWIKI_BOT_PASSWORD"),
            user_agent=environ.get("MEDIAWIKI_USER_AGENT"),
        )


def load_config(path: Path) -> WikibaseApiConfig:
    """
    load wikibase api configuration

    :param path: path to config file
    :return: Wikibase api configuration
    """
    with open(path) as stream:
        try:
            config_raw = yaml.safe_load(stream)
        except yaml.YAMLError as exc:
            logger.debug("Failed to parse config file")
            logger.error(exc)
            raise exc
    config = WikibaseApiConfig.model_validate(config_raw)
    return config
