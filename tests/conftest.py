# Shared sample catalogs. SAMPLE_PO is written in the exact layout the
# serializer produces, so it must come back byte for byte.

import pytest

from catalog.entry import Catalog, Entry, Header
from catalog.parser import parse_catalog

SAMPLE_PO = '''# Demo translations.
# Copyright (C) 2024 Demo Authors
#
msgid ""
msgstr ""
"Project-Id-Version: demo 1.0\\n"
"Language: zh_CN\\n"
"MIME-Version: 1.0\\n"
"Content-Type: text/plain; charset=UTF-8\\n"
"Content-Transfer-Encoding: 8bit\\n"
"Plural-Forms: nplurals=2; plural=(n != 1);\\n"

#. Greeting shown at startup
#: src/main.c:10
msgid "Hello"
msgstr "你好"

#: src/main.c:20
msgid "World"
msgstr ""

#| msgid "Old %s"
#: src/main.c:30
#, fuzzy, c-format
msgid "New %s"
msgstr "新 %s"

msgid "OK"
msgstr "OK"

msgctxt "menu"
msgid "File"
msgstr "文件"

#: src/list.c:5
msgid "%d file"
msgid_plural "%d files"
msgstr[0] "%d 个文件"
msgstr[1] "%d 个文件"

# Translator note
msgid ""
"Line one\\n"
"Line two\\n"
msgstr ""
"第一行\\n"
"第二行\\n"

#~ msgid "Removed"
#~ msgstr "已删除"
'''


def make_catalog(*entries, header=None):
    return Catalog(header=header or Header(), entries=list(entries))


def entry(msgid, msgstr="", **kwargs):
    return Entry(msgid=msgid, msgstr=msgstr, **kwargs)


@pytest.fixture
def sample_po_bytes():
    return SAMPLE_PO.encode("utf-8")


@pytest.fixture
def sample_catalog(sample_po_bytes):
    return parse_catalog(sample_po_bytes, source="sample.po")


@pytest.fixture
def sample_po_file(tmp_path, sample_po_bytes):
    path = tmp_path / "zh_CN.po"
    path.write_bytes(sample_po_bytes)
    return path
