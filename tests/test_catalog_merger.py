from streamverse.models import Channel, ChannelHealth, ChannelStatus
from streamverse.services.catalog_merger import (
    CatalogMerger,
    Directory,
    alternative_score,
    by_category,
    find_alternatives,
    search
)


def ch(id, name=None, url="", **fields):
    return Channel(id=id, name=name or f"Channel {id}", url=url or f"http://x/{id}.m3u8", **fields)


def test_override_fills_an_empty_group():
    directory = CatalogMerger().merge([("A", [ch("1", group="")])], [ch("1", group="News")])

    assert directory.get("1").group == "News"


def test_later_source_overwrites_non_empty_fields():
    first = ch("1", name="Old", logo="http://img/old.png", group="News")
    second = ch("1", name="New", logo="", group="", country="FR")

    merged = CatalogMerger().merge([("A", [first]), ("B", [second])]).get("1")

    assert merged.name == "New"
    assert merged.logo == "http://img/old.png"
    assert merged.group == "News"
    assert merged.country == "FR"


def test_empty_group_never_downgrades():
    directory = CatalogMerger().merge([("A", [ch("1", group="Sport")]), ("B", [ch("1", group="")])])

    assert directory.get("1").group == "Sport"


def test_keeps_first_seen_order_and_unique_ids():
    sources = [
        ("A", [ch("1"), ch("2")]),
        ("B", [ch("3"), ch("1"), ch("4")]),
    ]

    directory = CatalogMerger().merge(sources)

    assert directory.ids() == ["1", "2", "3", "4"]
    assert len(directory) == 4


def test_overrides_are_marked_verified():
    directory = CatalogMerger().merge([("A", [ch("1"), ch("2")])], [ch("2"), ch("9")])

    assert directory.is_verified("2")
    assert directory.is_verified("9")
    assert not directory.is_verified("1")
    assert "9" in directory
    assert directory.verified_ids() == frozenset({"2", "9"})


def test_merge_is_idempotent():
    merger = CatalogMerger()
    sources = [
        ("A", [ch("1", group=""), ch("2", group="Kids")]),
        ("B", [ch("1", group="News"), ch("3")]),
    ]
    overrides = [ch("3", logo="http://img/3.png")]

    once = merger.merge(sources, overrides)
    again = merger.merge([("merged", once.channels())], [])

    assert again == once
    assert merger.merge(sources, overrides) == once


def test_directory_equality_uses_order():
    a = Directory({"1": ch("1"), "2": ch("2")})
    b = Directory({"2": ch("2"), "1": ch("1")})

    assert a != b


def test_by_category_uses_undefined_label():
    directory = CatalogMerger().merge([("A", [ch("1", group="News"), ch("2"), ch("3", group="News")])])

    groups = by_category(directory)

    assert list(groups) == ["News", "Undefined"]
    assert [c.id for c in groups["News"]] == ["1", "3"]
    assert [c.id for c in groups["Undefined"]] == ["2"]


def test_search_matches_name_and_group():
    directory = CatalogMerger().merge([("A", [
        ch("1", name="France 24", group="News"),
        ch("2", name="Cartoon", group="Kids"),
        ch("3", name="Euronews", group="Info"),
    ])])

    assert [c.id for c in search(directory, "news")] == ["1", "3"]
    assert [c.id for c in search(directory, "KIDS")] == ["2"]
    assert len(search(directory, "  ")) == 3


def test_alternatives_prefer_verified_and_similar_names():
    sources = [("A", [
        ch("tf1", name="TF1", group="France"),
        ch("tf1hd", name="TF1 HD", group="HD"),
        ch("fr2", name="France 2", group="France"),
        ch("cnn", name="CNN", group="News"),
        ch("fr3", name="France 3", group="France"),
    ])]
    directory = CatalogMerger().merge(sources, [ch("fr3", name="France 3", group="France")])

    alternatives = find_alternatives(directory, directory.get("tf1"), limit=5)

    ids = [c.id for c in alternatives]
    assert "tf1" not in ids
    assert "cnn" not in ids
    assert ids[0] == "fr3"
    assert set(ids) == {"fr3", "fr2", "tf1hd"}


def test_alternatives_respect_limit():
    directory = CatalogMerger().merge([("A", [ch(str(i), group="Same") for i in range(10)])])

    assert len(find_alternatives(directory, directory.get("0"), limit=3)) == 3


class Statuses:
    """Status provider backed by a plain dict"""

    def __init__(self, **statuses):
        self.statuses = statuses

    def get_status(self, channel_id):
        return self.statuses.get(channel_id)


def status(id, health, reliability):
    return ChannelStatus(id=id, url=f"http://x/{id}.m3u8", health=health, reliability=reliability)


def test_reliable_online_channel_outranks_a_closer_name():
    directory = CatalogMerger().merge([("A", [
        ch("tf1", name="TF1", group="France"),
        ch("tf1hd", name="TF1 HD", group="France"),
        ch("fr2", name="France 2", group="France"),
    ])])
    statuses = Statuses(
        tf1hd=status("tf1hd", ChannelHealth.OFFLINE, 20),
        fr2=status("fr2", ChannelHealth.ONLINE, 90),
    )

    ids = [c.id for c in find_alternatives(directory, directory.get("tf1"), validator=statuses)]

    assert ids == ["fr2", "tf1hd"]
    assert [c.id for c in find_alternatives(directory, directory.get("tf1"))] == ["tf1hd", "fr2"]


def test_verified_channels_still_come_first_with_statuses():
    sources = [("A", [
        ch("tf1", name="TF1", group="France"),
        ch("fr2", name="France 2", group="France"),
        ch("fr3", name="France 3", group="France"),
    ])]
    directory = CatalogMerger().merge(sources, [ch("fr3", name="France 3", group="France")])
    statuses = Statuses(
        fr2=status("fr2", ChannelHealth.ONLINE, 100),
        fr3=status("fr3", ChannelHealth.OFFLINE, 0),
    )

    ids = [c.id for c in find_alternatives(directory, directory.get("tf1"), validator=statuses)]

    assert ids == ["fr3", "fr2"]


def test_unchecked_channels_score_from_the_starting_reliability():
    checked = alternative_score(ch("a"), 0.5, Statuses(a=status("a", ChannelHealth.ONLINE, 50)))
    unchecked = alternative_score(ch("b"), 0.5, Statuses())

    assert unchecked == 50 * 0.6 + 0.5 * 30
    assert checked == unchecked + 10
