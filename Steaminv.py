import argparse
import os
import signal
import sys

import json5
from colorama import Fore, Style

import utils.static as static
from SteamInventoryApi import FetchOrchestrator, FetchRun
from utils.logger import handle_caught_exception, logger
from utils.notifier import send_notification
from utils.static import (BUILD_INFO, CONFIG_FILE_PATH, CONFIG_FOLDER,
                          CURRENT_VERSION, DEFAULT_CONFIG_JSON,
                          DEFAULT_STEAM_ACCOUNT_JSON,
                          STEAM_ACCOUNT_INFO_FILE_PATH)
from utils.steam_client import create_steam_web
from utils.tools import exit_code, get_encoding, pause

config = {}


def handle_global_exception(exc_type, exc_value, exc_traceback):
    logger.exception(
        "A fatal error occurred. Submit the latest log file with your report.",
        exc_info=(exc_type, exc_value, exc_traceback),
    )
    logger.error("Exiting due to a fatal error...")


# Return 0 for invalid files, 1 for first run, 2 for non-first run
def init_files_and_params() -> int:
    global config
    logger.info(f"Current version: {CURRENT_VERSION}   Build info: {BUILD_INFO}")
    logger.info("Initializing...")
    first_run = False
    if not os.path.exists(CONFIG_FOLDER):
        os.mkdir(CONFIG_FOLDER)
    if not os.path.exists(CONFIG_FILE_PATH):
        with open(CONFIG_FILE_PATH, "w", encoding="utf-8") as f:
            f.write(DEFAULT_CONFIG_JSON)
        logger.info("First run detected. Generated " + CONFIG_FILE_PATH + ". Fill it in and run again.")
        first_run = True
    else:
        with open(CONFIG_FILE_PATH, "r", encoding=get_encoding(CONFIG_FILE_PATH)) as f:
            try:
                config = json5.load(f)
            except Exception as e:
                handle_caught_exception(e, known=True)
                logger.error("Invalid " + CONFIG_FILE_PATH + " format. Check your config.")
                return 0
    if not os.path.exists(STEAM_ACCOUNT_INFO_FILE_PATH):
        with open(STEAM_ACCOUNT_INFO_FILE_PATH, "w", encoding="utf-8") as f:
            f.write(DEFAULT_STEAM_ACCOUNT_JSON)

    if first_run:
        return 1
    if not isinstance(config, dict):
        logger.error("Invalid " + CONFIG_FILE_PATH + " structure. Check your config.")
        return 0
    static.no_pause = config.get("no_pause", False)
    config.setdefault("steam_login_ignore_ssl_error", False)
    config.setdefault("use_proxies", False)
    config.setdefault("inventory_fetcher", {})
    return 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="Steaminv", description="Fetch every Steam inventory of a profile")
    parser.add_argument("steamid", nargs="?", help="SteamID64 of the profile. Defaults to inventory_fetcher.steamid")
    parser.add_argument("--app", dest="app_ids", type=int, action="append", help="Only fetch this app id (repeatable)")
    return parser.parse_args(argv)


def print_summary(run: FetchRun):
    aggregate = run.get_aggregate()
    apps = run.discovery.apps if run.discovery else {}
    for app_id, contexts in sorted(aggregate.items()):
        app_name = apps[app_id].name if app_id in apps else str(app_id)
        for context_id, inventory in sorted(contexts.items()):
            context = apps[app_id].contexts.get(context_id) if app_id in apps else None
            context_name = context.name if context and context.name else str(context_id)
            logger.info(
                f"{Style.BRIGHT}{app_name}{Style.RESET_ALL} / {context_name} ({app_id}/{context_id}): "
                f"{Fore.GREEN}{len(inventory.items)}{Style.RESET_ALL} item(s), {len(inventory.descriptions)} description(s)"
            )
    for pair in run.failed_pairs:
        logger.warning(f"{Fore.YELLOW}Inventory {pair} could not be fetched{Style.RESET_ALL}")


def fetch_foreign_inventories(orchestrator: FetchOrchestrator, run: FetchRun):
    for entry in config["inventory_fetcher"].get("foreign_inventories", []):
        try:
            orchestrator.add_foreign_inventory(run, entry["steamid"], int(entry["app_id"]), int(entry["context_id"]))
        except (KeyError, TypeError, ValueError) as e:
            handle_caught_exception(e, known=True)
            logger.error(f"Invalid foreign_inventories entry {entry}. Check your config.")


def main(argv=None):
    init_status = init_files_and_params()
    if init_status == 0:
        pause()
        return 1
    elif init_status == 1:
        pause()
        return 0

    args = parse_args(argv)
    fetcher_config = config["inventory_fetcher"]
    steam_id = args.steamid or str(fetcher_config.get("steamid", "")).strip()
    if not steam_id:
        logger.error("No SteamID given. Pass it on the command line or set inventory_fetcher.steamid in " + CONFIG_FILE_PATH + ".")
        pause()
        return 1
    app_ids = args.app_ids or fetcher_config.get("app_ids") or None

    web = create_steam_web(config)
    if web is None:
        send_notification("Could not connect to Steam. Program will stop.")
        pause()
        return 1

    orchestrator = FetchOrchestrator.from_config(web, config)
    run = orchestrator.fetch_inventories(steam_id, app_ids)
    run.wait()

    if run.is_private:
        logger.error(f"The inventory of {steam_id} is private, or the profile does not exist or could not be loaded.")
        send_notification(f"The inventory of {steam_id} is private", title="Inventory fetch failed")
        pause()
        return 1
    if not run.success:
        logger.error(f"Could not read the inventory list of {steam_id}.")
        send_notification(f"Could not read the inventory list of {steam_id}", title="Inventory fetch failed")
        pause()
        return 1

    if fetcher_config.get("foreign_inventories"):
        fetch_foreign_inventories(orchestrator, run)

    print_summary(run)
    total_items = sum(len(inventory.items) for contexts in run.get_aggregate().values() for inventory in contexts.values())
    send_notification(
        f"SteamID: {steam_id}\nInventories: {len(run.store)}\nItems: {total_items}\nFailed: {len(run.failed_pairs)}",
        title="Inventory fetch finished",
    )
    pause()
    return 0 if not run.failed_pairs else 2


def exit_app(signal_, frame):
    os._exit(exit_code.get())


if __name__ == "__main__":
    sys.excepthook = handle_global_exception
    signal.signal(signal.SIGINT, exit_app)
    try:
        exit_code.set(main())
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt detected. Exiting...")
    sys.exit(exit_code.get())
