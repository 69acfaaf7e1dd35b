from pathlib import Path

import pytest

from servedir import __main__ as cli
from servedir.config import ServerConfig
from servedir.utils.codec import Compression


@pytest.fixture
def started(monkeypatch: pytest.MonkeyPatch) -> list[ServerConfig]:
	res: list[ServerConfig] = []
	monkeypatch.setattr(cli, "run", res.append)
	return res


def test_bad_root(tmp_path: Path, started: list[ServerConfig]) -> None:
	assert cli.main([str(tmp_path / "missing")]) == 1
	assert started == []


def test_root_is_file(tmp_path: Path, started: list[ServerConfig]) -> None:
	(tmp_path / "file.txt").write_text("x")
	assert cli.main([str(tmp_path / "file.txt")]) == 1
	assert started == []


def test_options(tmp_path: Path, started: list[ServerConfig]) -> None:
	assert (
		cli.main(["-p", "9090", "-a", "brotli", "-H", "127.0.0.1", str(tmp_path)])
		== 0
	)
	(config,) = started
	assert config.root == tmp_path.resolve()
	assert config.port == 9090
	assert config.host == "127.0.0.1"
	assert config.compression is Compression.BROTLI
	assert config.methodStatus == 404


def test_unknown_algorithm_is_gzip(
	tmp_path: Path, started: list[ServerConfig]
) -> None:
	assert cli.main(["--algorithm", "zstd", "--strict-methods", str(tmp_path)]) == 0
	(config,) = started
	assert config.compression is Compression.GZIP
	assert config.methodStatus == 405


# EOF
