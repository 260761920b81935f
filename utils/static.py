import os
import sys

is_latest_version = True
no_pause = False

CURRENT_VERSION = "1.0.0"

LOGS_FOLDER = "logs"
CONFIG_FOLDER = "config"
CONFIG_FILE_PATH = os.path.join(CONFIG_FOLDER, "config.json5")
STEAM_ACCOUNT_INFO_FILE_PATH = os.path.join(CONFIG_FOLDER, "steam_account_info.json5")
BUILD_INFO = "Running from source"
if hasattr(sys, "_MEIPASS"):
    BUILD_INFO = "Unofficial binary build"

STEAM_ACCOUNT_NAME = "Not logged in"
STEAM_64_ID = "Not logged in"

STEAM_COMMUNITY_URL = "https://steamcommunity.com"
PROFILE_INVENTORY_URL = STEAM_COMMUNITY_URL + "/profiles/{steam_id}/inventory/"
INVENTORY_JSON_URL = STEAM_COMMUNITY_URL + "/profiles/{steam_id}/inventory/json/{app_id}/{context_id}/"
FOREIGN_INVENTORY_URL = (
    STEAM_COMMUNITY_URL
    + "/trade/{steam_id}/foreigninventory/?sessionid={session_id}&steamid={steam_id}&appid={app_id}&contextid={context_id}"
)

WEB_REQUEST_MAX_RETRIES = 3
WEB_REQUEST_TIME_BETWEEN_RETRIES_MS = 1000
WEB_REQUEST_TIMEOUT = 30
DEFAULT_MAX_WORKERS = 8
DEFAULT_MAX_PAGES = 50

DEFAULT_STEAM_ACCOUNT_JSON = """
{
  // Only needed when inventory_fetcher.login is true (foreign inventories need a Steam session)
  "steam_username": "",
  "steam_password": "",

  // Steam authenticator secrets
  "shared_secret": "",
  "identity_secret": "",

  // Steam ID (64-bit) of this account
  "steamid": ""
}
"""

DEFAULT_CONFIG_JSON = r"""
{
  // Whether to ignore SSL errors when talking to Steam. Do not disable SSL in normal cases.
  "steam_login_ignore_ssl_error": false,

  // Use a Steam-only proxy
  "use_proxies": false,

  // Local proxy address. Applied only to Steam. Ensure use_proxies=true first.
  "proxies": {
    "http": "http://127.0.0.1:7890",
    "https": "http://127.0.0.1:7890"
  },

  "notify_service": {
    // Notifiers in Apprise format. See https://github.com/caronc/apprise/wiki
    "notifiers": [],
    // Custom title. Empty uses default.
    "custom_title": "",
    // Include Steam account info
    "include_steam_info": true,
    // Blacklist words. If contained, the notification is suppressed.
    "blacklist_words": [
      "blacklist_word_1",
      "blacklist_word_2"
    ]
  },

  "inventory_fetcher": {
    // SteamID64 whose inventories are fetched. Can be overridden on the command line.
    "steamid": "",
    // Only fetch these app ids. Empty fetches every app the profile exposes.
    // Example: [440, 730]
    "app_ids": [],
    // Maximum number of inventories fetched at the same time
    "max_workers": 8,
    // Maximum number of pages followed for a single inventory
    "max_pages": 50,
    // Attempts per request before giving up
    "max_retries": 3,
    // Delay between attempts, in milliseconds
    "retry_delay_ms": 1000,
    // Timeout of a single HTTP request, in seconds
    "request_timeout": 30,
    // Log into Steam with config/steam_account_info.json5. Required for foreign inventories.
    "login": false,
    // Other users' inventories fetched through the trade endpoint after login
    // Example: [{"steamid": "7656119xxxxxxxxxx", "app_id": 440, "context_id": 2}]
    "foreign_inventories": []
  },

  // File log level: "debug"/"info"/"warning"/"error"
  "log_level": "debug",
  // Local log retention days
  "log_retention_days": 7,
  // If true, program exits without waiting for Enter
  "no_pause": false
}
"""
