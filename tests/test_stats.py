from catalog.stats import CatalogStats, count_stats, format_msgfmt_statistics, format_stat_line

from conftest import entry, make_catalog


def test_count_stats(sample_catalog):
    assert count_stats(sample_catalog) == CatalogStats(translated=4, untranslated=1, same=1, fuzzy=1, obsolete=1)


def test_obsolete_entries_are_counted_apart():
    catalog = make_catalog(entry("a", ""), entry("b", "", obsolete=True), entry("c", "c", obsolete=True))
    assert count_stats(catalog) == CatalogStats(untranslated=1, obsolete=2)


def test_format_stat_line(sample_catalog):
    assert format_stat_line(count_stats(sample_catalog)) == (
        "4 translated messages, 1 fuzzy translation, 1 untranslated message, 1 same message, 1 obsolete entry."
    )
    assert format_stat_line(CatalogStats(translated=1, fuzzy=2, obsolete=3)) == (
        "1 translated message, 2 fuzzy translations, 3 obsolete entries."
    )


def test_format_msgfmt_statistics(sample_catalog):
    assert format_msgfmt_statistics(count_stats(sample_catalog)) == (
        "5 translated messages, 1 fuzzy translation, 1 untranslated message."
    )
    assert format_msgfmt_statistics(CatalogStats(same=1)) == "1 translated message."


def test_empty_catalog_report():
    stats = count_stats(make_catalog())
    assert format_stat_line(stats) == "0 translated messages."
    assert format_msgfmt_statistics(CatalogStats(obsolete=4)) == "0 translated messages."
