import argparse

import pytest

from dashboard.adapter import ConfigAdapter
from dashboard.cli import _run


def _args(command: str, **kwargs) -> argparse.Namespace:
    return argparse.Namespace(command=command, debug=False, **kwargs)


@pytest.mark.asyncio
async def test_meta_prints_metadata(adapter: ConfigAdapter, network, capsys):
    network.stored = "a: 1"

    assert await _run(_args("meta"), adapter) == 0
    assert '"exists": true' in capsys.readouterr().out


@pytest.mark.asyncio
async def test_meta_fails_when_service_is_unreachable(adapter: ConfigAdapter, network, capsys):
    network.service_down = True

    assert await _run(_args("meta"), adapter) == 1
    assert '"exists"' not in capsys.readouterr().out


@pytest.mark.asyncio
async def test_save_uploads_file(adapter: ConfigAdapter, network, tmp_path):
    config_file = tmp_path / "conf.yml"
    config_file.write_text("a: 1\n", encoding="utf-8")

    assert await _run(_args("save", file=str(config_file)), adapter) == 0
    assert network.stored == "a: 1\n"


@pytest.mark.asyncio
async def test_rejected_save_exits_with_error(adapter: ConfigAdapter, network, tmp_path):
    network.token = "secret"
    config_file = tmp_path / "conf.yml"
    config_file.write_text("a: 1\n", encoding="utf-8")

    assert await _run(_args("save", file=str(config_file)), adapter) == 1
    assert network.stored is None
