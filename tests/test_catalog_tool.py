import json
import logging

import polib
import pytest

from catalog_tool import CatalogTool, build_parser
from utils.config import ConfigManager


@pytest.fixture
def tool(tmp_path, capsys):
    config = ConfigManager(user_config_path=tmp_path / "user_config.json")

    def run(*argv):
        code = CatalogTool(config=config).run(build_parser().parse_args(list(argv)))
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return run


def test_select_to_file(tool, tmp_path, sample_po_file):
    out = tmp_path / "batch.po"
    code, _, _ = tool("select", str(sample_po_file), "--translated", "--range", "-2", "-o", str(out))
    assert code == 0
    pofile = polib.pofile(str(out))
    assert [e.msgid for e in pofile] == ["Hello", "OK"]


def test_select_json(tool, tmp_path, sample_po_file):
    out = tmp_path / "batch.json"
    code, _, _ = tool("select", str(sample_po_file), "--only-obsolete", "--json", "-o", str(out))
    assert code == 0
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert [e["key"] for e in payload["entries"]] == ["Removed"]


def test_contradictory_flags_exit_2(tool, sample_po_file):
    code, _, err = tool("select", str(sample_po_file), "--only-same", "--fuzzy")
    assert code == 2
    assert err.startswith("error: ")

    code, _, err = tool("select", str(sample_po_file), "--unset-fuzzy", "--clear-fuzzy")
    assert code == 2
    assert "mutually exclusive" in err


def test_parse_error_exit_1(tool, tmp_path):
    broken = tmp_path / "broken.po"
    broken.write_bytes(b'msgid "a\nmsgstr ""\n')
    code, _, err = tool("stat", str(broken))
    assert code == 1
    assert f"{broken}:1:" in err


def test_bad_range_exit_1(tool, sample_po_file):
    code, _, err = tool("select", str(sample_po_file), "--range", "5-3")
    assert code == 1
    assert "start is greater than end" in err


def test_missing_file_exit_1(tool, tmp_path):
    code, _, _ = tool("stat", str(tmp_path / "nope.po"))
    assert code == 1


def test_cat(tool, tmp_path, sample_po_file):
    other = tmp_path / "other.po"
    other.write_bytes(b'msgid "Hello"\nmsgstr "Bonjour"\n\nmsgid "Extra"\nmsgstr ""\n')
    out = tmp_path / "merged.po"
    code, _, _ = tool("cat", str(sample_po_file), str(other), "--no-obsolete", "-o", str(out))
    assert code == 0
    pofile = polib.pofile(str(out))
    assert pofile.find("Hello").msgstr == "你好"
    assert pofile.find("Extra") is not None
    assert pofile.obsolete_entries() == []


def test_compare(tool, tmp_path, sample_po_file):
    old = tmp_path / "old.po"
    old.write_bytes(b'msgid "Hello"\nmsgstr "Hi"\n')
    out = tmp_path / "review.po"
    code, _, err = tool("compare", str(old), str(sample_po_file), "-o", str(out))
    assert code == 0
    assert err.strip() == "6 new, 1 changed"
    assert len(polib.pofile(str(out))) == 7

    code, out_text, _ = tool("compare", "--stat", str(sample_po_file), str(sample_po_file))
    assert code == 0
    assert out_text == "Nothing changed.\n"


def test_compare_with_missing_old_file(tool, tmp_path, sample_po_file):
    code, out_text, _ = tool("compare", "--stat", str(tmp_path / "missing.po"), str(sample_po_file))
    assert code == 0
    assert out_text == "7 new\n"


def test_stat(tool, sample_po_file):
    code, out, _ = tool("stat", str(sample_po_file))
    assert code == 0
    assert out == "4 translated messages, 1 fuzzy translation, 1 untranslated message, 1 same message, 1 obsolete entry.\n"

    code, out, _ = tool("stat", "--msgfmt", str(sample_po_file))
    assert out == "5 translated messages, 1 fuzzy translation, 1 untranslated message.\n"


def test_check_and_compile(tool, tmp_path, sample_po_file):
    mo = tmp_path / "zh_CN.mo"
    code, out, _ = tool("check", str(sample_po_file), "--mo", str(mo))
    assert code == 0
    assert out.startswith(f"{sample_po_file}: 5 translated messages")
    assert polib.mofile(str(mo)).find("Hello").msgstr == "你好"


def test_check_rejects_json(tool, tmp_path):
    data = tmp_path / "catalog.json"
    data.write_text('{"entries": []}')
    code, _, err = tool("check", str(data))
    assert code == 2
    assert "expects catalog text" in err


def test_wrap_width_from_user_config(tmp_path, sample_po_file):
    user_path = tmp_path / "user_config.json"
    user_path.write_text(json.dumps({"serializer": {"wrap_width": 20}}))
    tool = CatalogTool(config=ConfigManager(user_config_path=user_path))
    assert tool.wrap_width == 20
    assert tool.json_indent == 2


def test_log_level_from_environment(tool, sample_po_file, monkeypatch):
    root = logging.getLogger("catalog_helper")
    monkeypatch.setenv("CATALOG_HELPER_LOG_LEVEL", "debug")
    try:
        code, _, _ = tool("stat", str(sample_po_file))
        assert code == 0
        assert root.level == logging.DEBUG

        code, _, _ = tool("--log-level", "ERROR", "stat", str(sample_po_file))
        assert code == 0
        assert root.level == logging.ERROR
    finally:
        root.setLevel(logging.WARNING)

    monkeypatch.setenv("CATALOG_HELPER_LOG_LEVEL", "loud")
    code, _, err = tool("stat", str(sample_po_file))
    assert code == 2
    assert "unknown log level" in err
