import logging

import pytest
from watchdog.events import DirModifiedEvent, FileModifiedEvent

from spells.__main__ import main
from spells.config import parse_config
from spells.watcher import ChangeHandler, build_all


def make_config(tmp_path, **extra):
    cfg = {
        "write": [
            {"src": "index.spl", "dst": "public/index.html"},
            {"src": "broken.spl", "dst": "public/broken.html"},
        ],
    }
    cfg.update(extra)
    return parse_config(cfg, tmp_path)


def test_build_all_skips_sources_that_fail(tmp_path, caplog):
    (tmp_path / "index.spl").write_text("h1 Hi\n")
    (tmp_path / "broken.spl").write_text("  h1 Hi\n")
    config = make_config(tmp_path)

    with caplog.at_level(logging.ERROR, logger="spells.watcher"):
        written = build_all(config)

    assert written == [tmp_path / "public" / "index.html"]
    assert (tmp_path / "public" / "index.html").read_text() == "<!DOCTYPE html><h1>Hi</h1>"
    assert not (tmp_path / "public" / "broken.html").exists()
    assert "Spells IndentationError (Line 1)" in caplog.text


def test_change_handler_rebuilds_watched_files(tmp_path):
    (tmp_path / "index.spl").write_text("p old\n")
    (tmp_path / "broken.spl").write_text("p fine\n")
    handler = ChangeHandler(make_config(tmp_path, pretty=True))

    (tmp_path / "index.spl").write_text("p new\n")
    handler.on_modified(FileModifiedEvent(str(tmp_path / "index.spl")))
    assert (tmp_path / "public" / "index.html").read_text() == "<!DOCTYPE html>\n<p>\nnew\n</p>\n"


def test_change_handler_ignores_other_events(tmp_path):
    (tmp_path / "index.spl").write_text("p x\n")
    (tmp_path / "broken.spl").write_text("p y\n")
    (tmp_path / "other.txt").write_text("")
    handler = ChangeHandler(make_config(tmp_path))

    handler.on_modified(FileModifiedEvent(str(tmp_path / "other.txt")))
    handler.on_modified(DirModifiedEvent(str(tmp_path)))
    assert not (tmp_path / "public").exists()


def test_main_once(tmp_path, monkeypatch):
    (tmp_path / "index.spl").write_text("p Hi\n")
    (tmp_path / "spells.yaml").write_text("write:\n  - src: index.spl\n    dst: out/index.html\n")
    monkeypatch.chdir(tmp_path)

    assert main(["spells.yaml", "--once"]) == 0
    assert (tmp_path / "out" / "index.html").read_text() == "<!DOCTYPE html><p>Hi</p>"


def test_main_once_reports_failures(tmp_path, monkeypatch):
    (tmp_path / "index.spl").write_text("p(oops\n")
    (tmp_path / "spells.yaml").write_text("write:\n  - src: index.spl\n    dst: out/index.html\n")
    monkeypatch.chdir(tmp_path)

    assert main(["spells.yaml", "--once"]) == 1


class StopRetrying(Exception):
    pass


def test_main_logs_config_errors_before_retrying(tmp_path, monkeypatch, caplog):
    (tmp_path / "spells.yaml").write_text("write: []\n")
    monkeypatch.chdir(tmp_path)

    def stop(seconds):
        raise StopRetrying(seconds)

    monkeypatch.setattr("spells.__main__.time.sleep", stop)
    with caplog.at_level(logging.ERROR, logger="spells.__main__"):
        with pytest.raises(StopRetrying):
            main(["spells.yaml"])

    assert "non-empty 'write'" in caplog.text
    assert "attempting to reload in 3 seconds" in caplog.text
