"""Tests for the command line entry points."""

import asyncio
import json

import pytest

from point_marker.cli import build_parser, read_version
from point_marker.core.sync import JsonFileRemoteStore


def test_subcommands_are_discovered():
    args = build_parser().parse_args(["show", "store", "photo", "--indent", "0"])
    assert callable(args.handler)
    assert (str(args.store_dir), args.project, args.indent) == ("store", "photo", 0)


def test_version_is_read():
    assert read_version().count(".") == 2


class TestShow:
    def test_prints_project(self, tmp_path, capsys):
        async def fill():
            store = JsonFileRemoteStore(tmp_path)
            await store.create_project_metadata("photo", "photo", 1600, 1200)
            await store.add_point("photo", "A", 20, 40, 0)

        asyncio.run(fill())
        args = build_parser().parse_args(["show", str(tmp_path), "photo"])
        args.handler(args)

        data = json.loads(capsys.readouterr().out)
        assert data["metadata"]["imageWidth"] == 1600
        assert data["points"] == [{"id": "A", "x": 20, "y": 40, "index": 0}]
        assert data["areas"] == []

    def test_missing_project_exits(self, tmp_path):
        args = build_parser().parse_args(["show", str(tmp_path), "nothing"])
        with pytest.raises(SystemExit):
            args.handler(args)
