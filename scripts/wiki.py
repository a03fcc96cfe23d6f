#!/usr/bin/env python3
"""
Scripto MediaWiki command-line tool

Talks to the wiki configured in config.json (or SCRIPTO_API_URL) through
WikiApiClient. The login session persists between runs in the configured
session file.

Usage:
    python scripts/wiki.py siteinfo
    python scripts/wiki.py login                   # SCRIPTO_USERNAME / SCRIPTO_PASSWORD or prompt
    python scripts/wiki.py page "Main Page" "Help:Contents"
    python scripts/wiki.py revisions "Main Page" --limit 10
    python scripts/wiki.py parse "Main Page" --plain
    python scripts/wiki.py edit "Sandbox" sandbox.wiki --summary "Update"
    python scripts/wiki.py sync pages/             # push every *.wiki file to its page
    python scripts/wiki.py watch "Sandbox" --unwatch
    python scripts/wiki.py protect "Sandbox" --level sysop --expiry "1 week"
    python scripts/wiki.py logout
"""

import argparse
import getpass
import json
import logging
import os
import sys
from pathlib import Path

from bs4 import BeautifulSoup

# Add project root to path for the scripto package
SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from scripto import WikiApiClient, WikiApiError, load_config, setup_logging
from scripto.filename_utils import iter_page_files

logger = logging.getLogger("scripto")


def html_to_text(html: str) -> str:
    """Strip rendered wiki HTML down to readable text."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["style", "script"]):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text("\n").splitlines())
    return "\n".join(line for line in lines if line)


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def page_summary(page) -> dict:
    return {
        "title": page.title,
        "pageid": page.pageid,
        "exists": page.exists,
        "actions": page.actions,
        "protection": page.protection,
        "revision": {
            "revid": page.revision.revid,
            "timestamp": page.revision.timestamp,
            "user": page.revision.user,
        } if page.revision else None,
    }


def cmd_siteinfo(client, args, config):
    print_json(client.get_site_info())


def cmd_userinfo(client, args, config):
    print_json(client.get_user_info())


def cmd_page(client, args, config):
    print_json([page_summary(page) for page in client.query_pages(args.titles)])


def cmd_revisions(client, args, config):
    for rev in client.query_revisions(args.title, limit=args.limit, offset=args.offset):
        minor = " m" if rev.minor else ""
        print(f"{rev.revid}  {rev.timestamp}  {rev.user}{minor}  ({rev.size} bytes)")


def cmd_parse(client, args, config):
    html = client.parse_page(args.title)
    print(html_to_text(html) if args.plain else html)


def cmd_compare(client, args, config):
    body = client.compare_revisions(args.from_rev, args.to_rev)
    print(html_to_text(body) if args.plain else body)


def cmd_login(client, args, config):
    username = os.environ.get("SCRIPTO_USERNAME") or input("Username: ")
    password = os.environ.get("SCRIPTO_PASSWORD") or getpass.getpass("Password: ")
    client.login(username, password)


def cmd_logout(client, args, config):
    client.logout()


def push_page(client, title: str, text: str, summary=None) -> bool:
    """
    Write text to a page after checking the user may create or edit it.

    Returns:
        True if a new revision was saved
    """
    page = client.query_page(title)
    created = client.page_is_created(page)
    needed = "edit" if created else "createpage"
    if not client.user_can(page, needed):
        raise WikiApiError(f'The user does not have the "{needed}" right on "{title}"')

    result = client.edit_page(title, text, summary=summary)
    return not result.get("nochange")


def cmd_edit(client, args, config):
    text = Path(args.file).read_text(encoding="utf-8")
    push_page(client, args.title, text, args.summary)


def cmd_sync(client, args, config):
    source_dir = Path(args.directory) if args.directory else config.source_dir
    logger.info(f"=== SYNC {source_dir} ===")

    saved = unchanged = failed = 0
    for title, path in iter_page_files(source_dir, config.extension):
        try:
            if push_page(client, title, path.read_text(encoding="utf-8"), args.summary):
                saved += 1
            else:
                unchanged += 1
        except WikiApiError as e:
            logger.error(f"FAILED to sync {title}: {e}")
            failed += 1

    logger.info(f"=== SYNC COMPLETE === Saved: {saved}, Unchanged: {unchanged}, Failed: {failed}")
    if failed:
        sys.exit(1)


def cmd_watch(client, args, config):
    if args.unwatch:
        client.unwatch_pages(args.titles)
    else:
        client.watch_pages(args.titles)


def cmd_protect(client, args, config):
    created = [t for t, page in zip(args.titles, client.query_pages(args.titles)) if page.exists]
    missing = [t for t in args.titles if t not in created]
    client.protect_pages(created, "edit", args.level, args.expiry, args.reason)
    client.protect_pages(missing, "create", args.level, args.expiry, args.reason)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scripto MediaWiki client")
    parser.add_argument("--config", help="Path to config.json")
    parser.add_argument("--log-dir", help="Directory for log files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests (DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("siteinfo", help="Show site information").set_defaults(func=cmd_siteinfo)
    sub.add_parser("userinfo", help="Show current user information").set_defaults(func=cmd_userinfo)

    p = sub.add_parser("page", help="Show page state")
    p.set_defaults(func=cmd_page)
    p.add_argument("titles", nargs="+")

    p = sub.add_parser("revisions", help="List page revisions, newest first")
    p.set_defaults(func=cmd_revisions)
    p.add_argument("title")
    p.add_argument("--limit", type=int)
    p.add_argument("--offset", type=int)

    p = sub.add_parser("parse", help="Render a page to HTML")
    p.set_defaults(func=cmd_parse)
    p.add_argument("title")
    p.add_argument("--plain", action="store_true", help="Print text instead of HTML")

    p = sub.add_parser("compare", help="Diff two revisions")
    p.set_defaults(func=cmd_compare)
    p.add_argument("from_rev", type=int)
    p.add_argument("to_rev", type=int)
    p.add_argument("--plain", action="store_true", help="Print text instead of HTML")

    sub.add_parser("login", help="Log in and persist the session").set_defaults(func=cmd_login)
    sub.add_parser("logout", help="Log out and clear the session").set_defaults(func=cmd_logout)

    p = sub.add_parser("edit", help="Replace a page's text with a file's contents")
    p.set_defaults(func=cmd_edit)
    p.add_argument("title")
    p.add_argument("file")
    p.add_argument("--summary")

    p = sub.add_parser("sync", help="Push every page file in a directory")
    p.set_defaults(func=cmd_sync)
    p.add_argument("directory", nargs="?")
    p.add_argument("--summary")

    p = sub.add_parser("watch", help="Watch (or unwatch) pages")
    p.set_defaults(func=cmd_watch)
    p.add_argument("titles", nargs="+")
    p.add_argument("--unwatch", action="store_true")

    p = sub.add_parser("protect", help="Protect pages (edit or create protection as appropriate)")
    p.set_defaults(func=cmd_protect)
    p.add_argument("titles", nargs="+")
    p.add_argument("--level", required=True, help='Group required, e.g. "sysop"; "all" lifts protection')
    p.add_argument("--expiry", default="infinite")
    p.add_argument("--reason")

    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except WikiApiError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    setup_logging(
        name="scripto",
        wiki_id=config.wiki_id,
        log_dir=args.log_dir or str(PROJECT_ROOT / "logs"),
        level="DEBUG" if args.verbose else None,
    )

    try:
        client = WikiApiClient.from_config(config, logger=logger.getChild(config.wiki_id))
        args.func(client, args, config)

    except WikiApiError as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
