from catalog.entry import Header
from catalog.merger import merge_catalogs
from catalog.parser import parse_catalog

from conftest import entry, make_catalog


def _catalog_a():
    return make_catalog(entry("Hello", "A hello"), entry("Shared", "from A"),
                        header=Header(metadata={"Language": "a"}))


def _catalog_b():
    return make_catalog(entry("Shared", "from B", flags=["fuzzy"]), entry("World", "B world"),
                        header=Header(metadata={"Language": "b"}))


def test_first_occurrence_wins():
    merged = merge_catalogs([_catalog_a(), _catalog_b()])
    assert [(e.msgid, e.msgstr) for e in merged] == [
        ("Hello", "A hello"),
        ("Shared", "from A"),
        ("World", "B world"),
    ]
    assert merged.header.metadata == {"Language": "a"}


def test_merge_order_decides_shared_copy():
    ab = merge_catalogs([_catalog_a(), _catalog_b()])
    ba = merge_catalogs([_catalog_b(), _catalog_a()])
    assert ab.find("Shared").msgstr == "from A"
    assert ba.find("Shared").msgstr == "from B"
    assert [e.msgid for e in ba] == ["Shared", "World", "Hello"]
    assert sorted(e.key for e in ab) == sorted(e.key for e in ba)


def test_plural_source_is_part_of_identity():
    merged = merge_catalogs([
        make_catalog(entry("file", "Datei")),
        make_catalog(entry("file", msgid_plural="files", msgstr_plural=["Datei", "Dateien"])),
        make_catalog(entry("file", "dropped")),
    ])
    assert len(merged) == 2
    assert merged.entries[0].msgstr == "Datei"
    assert merged.entries[1].is_plural


def test_obsolete_first_copy_still_wins():
    merged = merge_catalogs([
        make_catalog(entry("a", "old", obsolete=True)),
        make_catalog(entry("a", "new")),
    ])
    assert len(merged) == 1
    assert merged.entries[0].obsolete


def test_header_from_first_non_empty_source():
    headerless = make_catalog(entry("x"))
    merged = merge_catalogs([headerless, _catalog_b(), _catalog_a()])
    assert merged.header.metadata == {"Language": "b"}

    comment_only = make_catalog(header=Header(comments=["# only a comment"]))
    assert merge_catalogs([comment_only, _catalog_a()]).header.comments == ["# only a comment"]


def test_merge_nothing():
    merged = merge_catalogs([])
    assert merged.header.is_empty
    assert merged.entries == []


def test_merge_parsed_catalogs(sample_catalog):
    extra = parse_catalog(b'msgid "Hello"\nmsgstr "Bonjour"\n\nmsgid "Extra"\nmsgstr "En plus"\n')
    merged = merge_catalogs([sample_catalog, extra])
    assert len(merged) == 9
    assert merged.find("Hello").msgstr == "你好"
    assert merged.entries[-1].msgid == "Extra"
