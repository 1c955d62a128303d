from __future__ import annotations

import argparse

from ..domain.models import ConnectionPolicy


def _add_table(p: argparse.ArgumentParser) -> None:
    p.add_argument("--table", required=True, help="Table name, optionally schema qualified")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="crate-http", description="CrateDB client over the HTTP endpoint")
    # Connection options fall back to CRATE_* environment settings when omitted
    ap.add_argument("--url", action="append", default=[], help="Node URL; repeat for failover, in order")
    ap.add_argument("--user", default=None)
    ap.add_argument("--password", default=None)
    ap.add_argument("--policy", choices=[p.value for p in ConnectionPolicy], default=None)
    ap.add_argument("--schema", default=None, help="Default schema for unqualified table names")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ex = sub.add_parser("exec", help="Run one SQL statement")
    ex.add_argument("--sql", required=True)
    args = ex.add_mutually_exclusive_group()
    args.add_argument("--args", default="", help="JSON array of positional arguments")
    args.add_argument("--bulk-args", action="append", default=[], help="JSON array per bulk row; can repeat")
    ex.add_argument("--raw", action="store_true", help="Print the undecoded server reply")

    rf = sub.add_parser("refresh")
    _add_table(rf)

    sub.add_parser("schemata")
    sub.add_parser("nodes")

    bc = sub.add_parser("blob-create")
    _add_table(bc)
    bc.add_argument("--shards", type=int, default=-1)
    bc.add_argument("--replicas", type=int, default=-1)
    bc.add_argument("--path", default="", help="Storage path on the nodes")

    bd = sub.add_parser("blob-drop")
    _add_table(bd)

    bu = sub.add_parser("blob-upload")
    _add_table(bu)
    bu.add_argument("--file", required=True)

    for name in ("blob-exists", "blob-delete"):
        p = sub.add_parser(name)
        _add_table(p)
        p.add_argument("--key", required=True, help="SHA-1 hex digest of the blob")

    dl = sub.add_parser("blob-download")
    _add_table(dl)
    dl.add_argument("--key", required=True)
    dl.add_argument("--out", required=True, help="File the content is written to")

    return ap
