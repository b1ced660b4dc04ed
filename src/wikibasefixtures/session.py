import logging
from datetime import datetime
from typing import Any

import requests
from wikibaseintegrator import wbi_login
from wikibaseintegrator.wbi_exceptions import MaxRetriesReachedException, MWApiError
from wikibaseintegrator.wbi_helpers import mediawiki_api_call_helper

from wikibasefixtures.exceptions import AuthenticationError, RemoteRequestError, UserLoginRequiredException
from wikibasefixtures.model.config import WikibaseApiConfig
from wikibasefixtures.wikibase import CHRONOLOGY_PROTECTION_COOKIE, get_default_user_agent

logger = logging.getLogger(__name__)

WbiLogin = wbi_login.Login | wbi_login.Clientlogin


def get_cookie_domain(host: str) -> str:
    """
    Get the cookie domain for the given host.
    Hosts without a dot (e.g. localhost) are matched by the cookie jar as "<host>.local"
    """
    if "." in host:
        return host
    return f"{host}.local"


class WikibaseSession:
    """
    Authenticated connection to the MediaWiki api of a wikibase
    """

    def __init__(self, login: WbiLogin, config: WikibaseApiConfig):
        self.login = login
        self.config = config

    @classmethod
    def login_with(cls, config: WikibaseApiConfig, cp_pos_index: str | None = None) -> "WikibaseSession":
        """
        Log in to the wikibase described by the given config
        :param config: wikibase api config
        :param cp_pos_index: value of the cpPosIndex cookie of the browser to keep the chronology protection
        :return: WikibaseSession
        """
        login = cls.get_wikibase_login(config)
        session = cls(login=login, config=config)
        if cp_pos_index:
            session.set_cookie(CHRONOLOGY_PROTECTION_COOKIE, cp_pos_index)
        return session

    @staticmethod
    def get_wikibase_login(config: WikibaseApiConfig) -> WbiLogin:
        """
        Get a login instance for the given wikibase configuration
        :param config:
        :return:
        """
        mediawiki_api_url = config.mediawiki_api_url
        user_agent = config.user_agent or get_default_user_agent()
        try:
            if config.user and config.bot_password:
                logger.debug(f"Using Bot password as authentication for {mediawiki_api_url}")
                login = wbi_login.Login(
                    user=config.user,
                    password=config.bot_password,
                    mediawiki_api_url=mediawiki_api_url,
                    user_agent=user_agent,
                )
            elif config.user and config.password:
                logger.debug(f"Using ClientLogin as authentication for {mediawiki_api_url}")
                login = wbi_login.Clientlogin(
                    user=config.user,
                    password=config.password,
                    mediawiki_api_url=mediawiki_api_url,
                    user_agent=user_agent,
                )
            else:
                raise UserLoginRequiredException()
        except wbi_login.LoginError as e:
            raise AuthenticationError(mediawiki_api_url, str(e)) from e
        except requests.exceptions.RequestException as e:
            raise AuthenticationError(mediawiki_api_url, str(e)) from e
        return login

    @property
    def edit_token(self) -> str:
        """
        csrf token of the logged-in user
        """
        try:
            return self.login.get_edit_token()
        except (MWApiError, requests.exceptions.RequestException) as e:
            raise AuthenticationError(self.config.mediawiki_api_url, str(e)) from e

    def set_cookie(self, name: str, value: str):
        """
        Set a cookie bound to the host of the wikibase
        """
        host = self.config.host or ""
        self.login.get_session().cookies.set(name, value, domain=get_cookie_domain(host), path="/")

    def request(self, params: dict[str, Any]) -> dict:
        """
        Send a single request to the MediaWiki api. Failed requests are not retried.
        :param params: api parameters
        :return: parsed json response
        """
        data = dict(params)
        data.setdefault("format", "json")
        action = data.get("action", "")
        start = datetime.now()
        try:
            response = mediawiki_api_call_helper(
                data=data,
                login=self.login,
                mediawiki_api_url=self.config.mediawiki_api_url,
                user_agent=self.config.user_agent or get_default_user_agent(),
                allow_anonymous=False,
                is_bot=self.config.is_bot,
                max_retries=1,
                retry_after=0,
            )
        except MWApiError as e:
            raise RemoteRequestError(action, str(e)) from e
        except MaxRetriesReachedException as e:
            raise RemoteRequestError(action, str(e)) from e
        except requests.exceptions.RequestException as e:
            raise RemoteRequestError(action, str(e)) from e
        logger.debug(f"API action {action} took {datetime.now() - start}")
        return response
