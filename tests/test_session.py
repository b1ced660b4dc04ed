import unittest
from unittest import mock

import requests
from requests.cookies import get_cookie_header
from wikibaseintegrator import wbi_login
from wikibaseintegrator.wbi_exceptions import MaxRetriesReachedException

from wikibasefixtures.exceptions import AuthenticationError, RemoteRequestError, UserLoginRequiredException
from wikibasefixtures.model.config import WikibaseApiConfig
from wikibasefixtures.session import WikibaseSession, get_cookie_domain


class TestWikibaseSession(unittest.TestCase):
    """
    Test WikibaseSession without contacting a wiki
    """

    def setUp(self):
        self.config = WikibaseApiConfig(base_url="http://localhost:8080/w", user="Admin", password="secret")
        self.login = mock.Mock()
        self.login.get_session.return_value = requests.Session()
        self.login.get_edit_token.return_value = "abc+\\"

    def test_get_cookie_domain(self):
        self.assertEqual(get_cookie_domain("localhost"), "localhost.local")
        self.assertEqual(get_cookie_domain("wiki.example.org"), "wiki.example.org")

    @mock.patch("wikibasefixtures.session.wbi_login.Clientlogin")
    def test_login_with_password(self, clientlogin):
        """
        test that a user password results in a client login
        """
        clientlogin.return_value = self.login
        session = WikibaseSession.login_with(self.config)
        self.assertIs(session.login, self.login)
        kwargs = clientlogin.call_args.kwargs
        self.assertEqual(kwargs["user"], "Admin")
        self.assertEqual(kwargs["password"], "secret")
        self.assertEqual(kwargs["mediawiki_api_url"], "http://localhost:8080/w/api.php")

    @mock.patch("wikibasefixtures.session.wbi_login.Login")
    def test_login_with_bot_password(self, login):
        """
        test that a bot password is preferred over the user password
        """
        login.return_value = self.login
        config = self.config.model_copy(update={"bot_password": "bot@secret"})
        WikibaseSession.login_with(config)
        self.assertEqual(login.call_args.kwargs["password"], "bot@secret")

    def test_login_without_credentials(self):
        config = WikibaseApiConfig(base_url="http://localhost:8080/w")
        with self.assertRaises(UserLoginRequiredException):
            WikibaseSession.login_with(config)

    @mock.patch("wikibasefixtures.session.wbi_login.Clientlogin")
    def test_login_rejected(self, clientlogin):
        """
        test that rejected credentials raise an AuthenticationError
        """
        clientlogin.side_effect = wbi_login.LoginError("Login failed. Incorrect username or password")
        with self.assertRaises(AuthenticationError) as context:
            WikibaseSession.login_with(self.config)
        self.assertIsInstance(context.exception.__cause__, wbi_login.LoginError)

    @mock.patch("wikibasefixtures.session.wbi_login.Clientlogin")
    def test_login_unreachable(self, clientlogin):
        clientlogin.side_effect = requests.exceptions.ConnectionError("Connection refused")
        with self.assertRaises(AuthenticationError):
            WikibaseSession.login_with(self.config)

    @mock.patch("wikibasefixtures.session.wbi_login.Clientlogin")
    def test_chronology_protection_cookie(self, clientlogin):
        """
        test that the cpPosIndex cookie is sent to the wiki
        """
        clientlogin.return_value = self.login
        session = WikibaseSession.login_with(self.config, cp_pos_index="1@1700000000")
        jar = session.login.get_session().cookies
        request = requests.Request("POST", self.config.mediawiki_api_url).prepare()
        self.assertEqual(get_cookie_header(jar, request), "cpPosIndex=1@1700000000")
        other_request = requests.Request("POST", "http://example.org/api.php").prepare()
        self.assertIsNone(get_cookie_header(jar, other_request))

    @mock.patch("wikibasefixtures.session.wbi_login.Clientlogin")
    def test_without_chronology_protection_cookie(self, clientlogin):
        clientlogin.return_value = self.login
        session = WikibaseSession.login_with(self.config)
        self.assertEqual(len(session.login.get_session().cookies), 0)

    def test_edit_token(self):
        session = WikibaseSession(login=self.login, config=self.config)
        self.assertEqual(session.edit_token, "abc+\\")

    @mock.patch("wikibasefixtures.session.mediawiki_api_call_helper")
    def test_request(self, helper):
        """
        test that requests are sent once through the wikibaseintegrator helper
        """
        helper.return_value = {"success": 1}
        session = WikibaseSession(login=self.login, config=self.config)
        params = {"action": "wbgetentities", "ids": "Q1"}
        self.assertEqual(session.request(params), {"success": 1})
        kwargs = helper.call_args.kwargs
        self.assertEqual(kwargs["data"]["format"], "json")
        self.assertEqual(kwargs["data"]["ids"], "Q1")
        self.assertIs(kwargs["login"], self.login)
        self.assertEqual(kwargs["max_retries"], 1)
        self.assertFalse(kwargs["allow_anonymous"])
        self.assertEqual(kwargs["mediawiki_api_url"], "http://localhost:8080/w/api.php")
        self.assertNotIn("format", params)

    @mock.patch("wikibasefixtures.session.mediawiki_api_call_helper")
    def test_request_failures(self, helper):
        """
        test that transport failures are raised as RemoteRequestError
        """
        session = WikibaseSession(login=self.login, config=self.config)
        for error in [requests.exceptions.ConnectionError("refused"), MaxRetriesReachedException("gave up")]:
            helper.side_effect = error
            with self.assertRaises(RemoteRequestError) as context:
                session.request({"action": "protect", "title": "Item:Q1"})
            self.assertEqual(context.exception.action, "protect")
            self.assertIs(context.exception.__cause__, error)


if __name__ == "__main__":
    unittest.main()
