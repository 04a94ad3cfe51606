# src/cli.py
from __future__ import annotations

import os
import sys
import json
import logging
import argparse
import traceback

# Ensure our package is importable regardless of CWD
sys.path.insert(0, os.path.dirname(__file__))

# ---------------------------
# Commands
# ---------------------------

def cmd_serve(port: int, host: str, debug: bool, wait: bool):
    from eventreg import config, create_app
    from eventreg.db.mongo import close_client, wait_for_mongo

    if not config.MONGODB_URI:
        raise SystemExit("FATAL: MONGODB_URI not configured in environment variables")

    if wait and not wait_for_mongo():
        raise SystemExit(2)

    app = create_app()
    logging.getLogger(__name__).info("Server running on %s:%d", host, port)
    try:
        app.run(host=host, port=port, debug=debug)
    finally:
        close_client()
        logging.getLogger(__name__).info("Server stopped")


def _store():
    from eventreg import config
    from eventreg.db.mongo import get_collection
    from eventreg.storage.registrations import RegistrationStore
    return RegistrationStore(get_collection(config.REGISTRATIONS_COLLECTION))


def cmd_db_ping() -> None:
    from eventreg.db.mongo import ping
    ok = ping()
    print("mongo ping:", "ok" if ok else "failed")
    if not ok:
        raise SystemExit(2)


def cmd_db_ensure_indexes() -> None:
    _store().ensure_indexes()
    print("indexes ok")


def cmd_registrations_list(limit: int | None):
    from eventreg.models.registration import to_public
    docs = _store().list_all()
    if limit:
        docs = docs[:limit]
    print(json.dumps([to_public(d) for d in docs], indent=2))


def cmd_registrations_count():
    print(json.dumps({"ok": True, "count": _store().count()}))


def cmd_events():
    from eventreg.services.admin import list_distinct_events
    print(json.dumps({"ok": True, "events": list_distinct_events(_store())}, indent=2))


# ---------------------------
# Parser / main
# ---------------------------

def main():
    from eventreg import config

    p = argparse.ArgumentParser(description="Event Registration CLI")
    p.add_argument("--log-level", default=config.LOG_LEVEL)
    sub = p.add_subparsers(dest="cmd", required=True)

    # serve
    sp = sub.add_parser("serve", help="Run Flask server")
    sp.add_argument("--port", type=int, default=config.PORT)
    sp.add_argument("--host", default=config.HOST)
    sp.add_argument("--debug", action="store_true")
    sp.add_argument("--no-wait", action="store_true", help="Do not wait for MongoDB before serving")
    sp.set_defaults(func=lambda a: cmd_serve(a.port, a.host, a.debug, not a.no_wait))

    # db
    sc = sub.add_parser("db", help="Database utilities")
    sc_sub = sc.add_subparsers(dest="dbcmd", required=True)
    scp = sc_sub.add_parser("ping", help="Ping MongoDB")
    scp.set_defaults(func=lambda a: cmd_db_ping())
    sci = sc_sub.add_parser("ensure-indexes", help="Create the registrations indexes")
    sci.set_defaults(func=lambda a: cmd_db_ensure_indexes())

    # registrations
    sr = sub.add_parser("registrations", help="Registration records")
    sr_sub = sr.add_subparsers(dest="regcmd", required=True)
    srl = sr_sub.add_parser("list", help="Dump registrations as JSON, newest first")
    srl.add_argument("--limit", type=int, default=None)
    srl.set_defaults(func=lambda a: cmd_registrations_list(a.limit))
    srn = sr_sub.add_parser("count", help="Number of registrations")
    srn.set_defaults(func=lambda a: cmd_registrations_count())

    # events
    ev = sub.add_parser("events", help="Print distinct event names in use")
    ev.set_defaults(func=lambda a: cmd_events())

    args = p.parse_args()
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except Exception as e:
        # Surface trace on CLI errors
        print("ERROR:", e)
        traceback.print_exc()
        raise SystemExit(1)


if __name__ == "__main__":
    main()
