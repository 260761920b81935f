import datetime
import json
import logging
import os
import platform
import re
import sys

import colorlog
import json5
import requests
from requests.exceptions import ConnectionError, ReadTimeout

import utils.static as static
from steampy.exceptions import ApiException, ConfirmationExpected, InvalidCredentials, LoginRequired
from utils.static import BUILD_INFO, CONFIG_FILE_PATH, CURRENT_VERSION, LOGS_FOLDER

sensitive_data = []
sensitive_keys = ["sessionid", "steamLoginSecure", "access_token", "refresh_token", "steam_password", "shared_secret", "identity_secret"]

if not os.path.exists(LOGS_FOLDER):
    os.mkdir(LOGS_FOLDER)


class LogFilter(logging.Filter):
    @staticmethod
    def add_sensitive_data(data):
        if data and data not in sensitive_data:
            sensitive_data.append(data)

    @staticmethod
    def sanitize(text):
        for sensitive in sensitive_data:
            text = text.replace(sensitive, "*" * len(sensitive))

        def mask_value(value):
            return "*" * len(value)

        # Mask sensitive JSON fields
        for key in sensitive_keys:
            pattern = rf'"{key}"\s*:\s*("(.*?)"|(\d+)|(true|false|null))'

            def replace_match(match):
                if match.group(2):
                    return f'"{key}": "{mask_value(match.group(2))}"'
                elif match.group(3):
                    return f'"{key}": {mask_value(match.group(3))}'
                return f'"{key}": {mask_value(match.group(4))}'

            text = re.sub(pattern, replace_match, text, flags=re.IGNORECASE)

        # Mask sensitive URL params
        for key in sensitive_keys:
            pattern = rf"({key}=)([^&\s]+)"

            def replace_url_match(match):
                return f"{match.group(1)}{mask_value(match.group(2))}"

            text = re.sub(pattern, replace_url_match, text, flags=re.IGNORECASE)
        return text

    def filter(self, record):
        # exceptions logged directly carry urls in their message and traceback
        record.msg = self.sanitize(record.getMessage())
        record.args = None
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self.sanitize(record.exc_text)
        return True


log_retention_days = None
log_level = None
try:
    with open(CONFIG_FILE_PATH, "r", encoding="utf-8") as f:
        config = json5.loads(f.read())
        if isinstance(config, dict):
            log_level = str(config.get("log_level", "DEBUG")).upper()
            log_retention_days = int(config.get("log_retention_days", 7))
except Exception:
    pass

if log_retention_days:
    for log_file in os.listdir(LOGS_FOLDER):
        if log_file.endswith(".log"):
            log_file_path = os.path.join(LOGS_FOLDER, log_file)
            if (datetime.datetime.now() - datetime.datetime.fromtimestamp(os.path.getmtime(log_file_path))) > datetime.timedelta(days=log_retention_days):
                os.remove(log_file_path)

logger = logging.getLogger()
logger.setLevel(0)
s_handler = logging.StreamHandler()
s_handler.setLevel(logging.INFO)
log_formatter_colored = colorlog.ColoredFormatter(
    fmt="%(log_color)s[%(asctime)s] - %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    log_colors={"DEBUG": "cyan", "INFO": "green", "WARNING": "yellow", "ERROR": "red", "CRITICAL": "bold_red"},
)
s_handler.setFormatter(log_formatter_colored)
log_formatter = logging.Formatter("[%(asctime)s] - %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S")
s_handler.addFilter(LogFilter())
logger.addHandler(s_handler)
f_handler = logging.FileHandler(os.path.join(LOGS_FOLDER, datetime.datetime.now().strftime("%Y-%m-%d-%H-%M-%S") + ".log"), encoding="utf-8")
if log_level and log_level.isdigit():
    f_handler.setLevel(int(log_level))
elif log_level == "INFO":
    f_handler.setLevel(logging.INFO)
elif log_level == "WARNING":
    f_handler.setLevel(logging.WARNING)
elif log_level == "ERROR":
    f_handler.setLevel(logging.ERROR)
else:
    f_handler.setLevel(logging.DEBUG)
f_handler.setFormatter(log_formatter)
f_handler.addFilter(LogFilter())
logger.addHandler(f_handler)
logger.addFilter(LogFilter())
logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
logging.getLogger("apprise").setLevel(logging.WARNING)
logging.getLogger("chardet").setLevel(logging.WARNING)
logger.debug(f"Steaminv {CURRENT_VERSION} started")
logger.debug(f"Running on {platform.system()} {platform.release()}({platform.version()})")
logger.debug(f"Python version: {sys.version}")
logger.debug(f"Build info: {BUILD_INFO}")
logger.debug("Logs are sanitized. Safe to share publicly.")


def handle_caught_exception(e: Exception, prefix: str = "", known: bool = False):
    plogger = logger
    if prefix and not prefix.endswith(" "):
        plogger = PluginLogger(prefix)
    if (not static.is_latest_version) and not known:
        plogger.warning("Your Steaminv version may be outdated. Update to the latest version and try again.")
    logger.debug(e, exc_info=True)

    if isinstance(e, requests.exceptions.SSLError):
        plogger.error("Proxy/VPN TLS issue. Change your proxy/VPN.")
    elif isinstance(e, requests.exceptions.ProxyError):
        plogger.error("Proxy error. Disable the proxy or check the proxies setting in config.")
    elif isinstance(e, requests.exceptions.HTTPError):
        status = e.response.status_code if e.response is not None else "unknown"
        if status == 429:
            plogger.error("Steam rate limit hit (HTTP 429). Wait a while before fetching again.")
        elif status == 403:
            plogger.error("Steam refused the request (HTTP 403). The inventory may be private.")
        else:
            plogger.error(f"Steam returned HTTP {status}.")
    elif isinstance(e, (ConnectionError, ConnectionResetError, ConnectionAbortedError, ConnectionRefusedError, ReadTimeout)):
        plogger.error("Network error. Check your connection.")
        plogger.error("This may be caused by a proxy or VPN. If you use one, disable it and try again.")
    elif isinstance(e, json.JSONDecodeError):
        plogger.error("Steam returned a response that is not valid JSON.")
    elif isinstance(e, InvalidCredentials):
        plogger.error("Invalid Steam credentials. Verify steam_account_info.json5, especially shared_secret.")
        plogger.error(str(e))
    elif isinstance(e, (ConfirmationExpected, LoginRequired)):
        plogger.error("Steam session expired. Restart Steaminv to log in again.")
    elif isinstance(e, ApiException):
        plogger.error("Steam API error. Details: " + str(e))
    else:
        if not known:
            plogger.error(
                f"Steaminv version: {CURRENT_VERSION}\nPython: {sys.version}\nSystem: {platform.system()} {platform.release()}({platform.version()})\nBuild: {BUILD_INFO}\n"
            )
            plogger.error("Unknown exception. Message: " + str(e) + ", Type: " + str(type(e)) + ". Please report it with the log file.")
        if BUILD_INFO == "Running from source":
            plogger.error(e, exc_info=True)


class PluginLogger:
    def __init__(self, pluginName):
        if "[" not in pluginName or "]" not in pluginName:
            self.pluginName = f"[{pluginName}]"
        else:
            self.pluginName = pluginName

    def debug(self, msg, *args, **kwargs):
        logger.debug(f"{self.pluginName} {msg}", *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        logger.info(f"{self.pluginName} {msg}", *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        logger.warning(f"{self.pluginName} {msg}", *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        logger.error(f"{self.pluginName} {msg}", *args, **kwargs)

    def critical(self, msg, *args, **kwargs):
        logger.critical(f"{self.pluginName} {msg}", *args, **kwargs)

    def log(self, level, msg, *args, **kwargs):
        logger.log(level, f"{self.pluginName} {msg}", *args, **kwargs)
