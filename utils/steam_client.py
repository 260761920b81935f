import json
from ssl import SSLCertVerificationError, SSLError
from typing import Optional

import json5
import requests

from steampy.client import SteamClient
from steampy.exceptions import ApiException
from utils import static
from utils.logger import LogFilter, PluginLogger, handle_caught_exception
from utils.static import STEAM_ACCOUNT_INFO_FILE_PATH, STEAM_COMMUNITY_URL, WEB_REQUEST_TIMEOUT
from utils.tools import get_encoding

logger = PluginLogger('SteamClient')

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Accept-Language": "en-US,en;q=0.9",
}


class SteamWeb:
    """
    Raw access to steamcommunity.com over a requests session.

    ``fetch`` raises on network errors and non-2xx responses; retrying is left
    to the caller.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = WEB_REQUEST_TIMEOUT):
        self.timeout = timeout
        if session is None:
            self.session = requests.Session()
            self.session.headers.update(DEFAULT_HEADERS)
        else:
            # keep whatever headers the login session already negotiated
            self.session = session
            for key, value in DEFAULT_HEADERS.items():
                self.session.headers.setdefault(key, value)

    @property
    def session_id(self) -> Optional[str]:
        fallback = None
        for cookie in self.session.cookies:
            if cookie.name != "sessionid":
                continue
            if cookie.domain.lstrip(".") == "steamcommunity.com":
                return cookie.value
            fallback = fallback or cookie.value
        return fallback

    def fetch(self, url: str, method: str = "GET", data: Optional[dict] = None) -> str:
        logger.debug(f"{method} {url}")
        if method.upper() == "POST":
            response = self.session.post(url, data=data, timeout=self.timeout)
        else:
            response = self.session.get(url, params=data, timeout=self.timeout)
        logger.debug(f"{method} {url} {response.status_code}")
        response.raise_for_status()
        return response.text


def _setup_session(session: requests.Session, config: dict):
    if config.get("steam_login_ignore_ssl_error", False):
        logger.warning("Warning: SSL verification disabled. Ensure your network is trusted.")
        session.verify = False
        requests.packages.urllib3.disable_warnings()  # type: ignore
    else:
        session.verify = True

    if config.get("use_proxies", False):
        session.proxies = config["proxies"]
        logger.info("Steam proxy enabled")


def _check_proxy_availability(config: dict) -> bool:
    if not config.get("use_proxies", False):
        return True
    if not isinstance(config.get("proxies"), dict):
        logger.error("Invalid proxies format. Check your config.")
        return False
    logger.info("Checking proxy availability...")
    try:
        requests.get(STEAM_COMMUNITY_URL, proxies=config["proxies"], timeout=10)
        logger.info("Proxy reachable")
        return True
    except Exception as e:
        handle_caught_exception(e, known=True)
        logger.error("Proxy unreachable. Check config or set use_proxies=false")
        return False


def _load_steam_account_info() -> Optional[dict]:
    try:
        with open(STEAM_ACCOUNT_INFO_FILE_PATH, "r", encoding=get_encoding(STEAM_ACCOUNT_INFO_FILE_PATH)) as f:
            steam_account_info = json5.loads(f.read())
    except FileNotFoundError:
        logger.error("Missing " + STEAM_ACCOUNT_INFO_FILE_PATH + ". Add it first.")
        return None
    except Exception as e:
        handle_caught_exception(e, known=True)
        logger.error("Detected invalid format in " + STEAM_ACCOUNT_INFO_FILE_PATH + ". Check config file.")
        return None
    if not isinstance(steam_account_info, dict):
        logger.error("Invalid config structure. Check config file.")
        return None
    for key in ["steam_username", "steam_password", "shared_secret", "identity_secret"]:
        if not steam_account_info.get(key):
            logger.error(f"Key {key} in Steam account config is empty. Check config.")
            return None
    return steam_account_info


def login_to_steam(config: dict) -> Optional[SteamWeb]:
    """
    Log into Steam with username/password and return a SteamWeb sharing the
    logged-in session, so its sessionid cookie can be used for trade endpoints.
    """
    steam_account_info = _load_steam_account_info()
    if steam_account_info is None:
        return None
    if not _check_proxy_availability(config):
        return None

    username = steam_account_info["steam_username"]
    LogFilter.add_sensitive_data(steam_account_info["steam_password"])
    steam_guard = json.dumps(
        {
            "steamid": str(steam_account_info.get("steamid", "")),
            "shared_secret": steam_account_info["shared_secret"],
            "identity_secret": steam_account_info["identity_secret"],
        }
    )
    logger.info("Logging in to Steam with username/password...")
    try:
        client = SteamClient(api_key="")
        _setup_session(client._session, config)
        client.login(username, steam_account_info["steam_password"], steam_guard)
        if not client.is_session_alive():
            logger.error("Login failed")
            return None
    except (SSLCertVerificationError, SSLError, requests.exceptions.SSLError):
        logger.error("Login failed. SSL certificate verification error. If your network is trusted, set steam_login_ignore_ssl_error=true.")
        return None
    except (requests.exceptions.ConnectionError, TimeoutError):
        logger.error("Network error. Check your connection or proxy settings.")
        return None
    except ApiException as e:
        handle_caught_exception(e, known=True)
        logger.error("Login failed. Check network or possible Steam IP block.")
        return None
    except Exception as e:
        handle_caught_exception(e, known=True)
        logger.error("Login failed. Check the format and contents of " + STEAM_ACCOUNT_INFO_FILE_PATH + ".")
        return None

    logger.info("Username/password login succeeded")
    web = SteamWeb(session=client._session, timeout=config.get("inventory_fetcher", {}).get("request_timeout", WEB_REQUEST_TIMEOUT))
    static.STEAM_ACCOUNT_NAME = username
    if steam_account_info.get("steamid"):
        static.STEAM_64_ID = str(steam_account_info["steamid"])
    if web.session_id:
        LogFilter.add_sensitive_data(web.session_id)
    return web


def create_steam_web(config: dict) -> Optional[SteamWeb]:
    fetcher_config = config.get("inventory_fetcher", {})
    if fetcher_config.get("login", False):
        return login_to_steam(config)
    if not _check_proxy_availability(config):
        return None
    web = SteamWeb(timeout=fetcher_config.get("request_timeout", WEB_REQUEST_TIMEOUT))
    _setup_session(web.session, config)
    return web
