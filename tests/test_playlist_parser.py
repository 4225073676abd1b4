import random

import pytest

from streamverse.models import Channel
from streamverse.services.playlist_parser import PlaylistParser, parse_playlist


def test_parses_a_full_directive():
    text = '#EXTM3U\n#EXTINF:-1 tvg-id="tf1.fr" tvg-name="TF1" group-title="France",TF1\nhttp://x/tf1.m3u8'

    assert parse_playlist(text) == [
        Channel(id="tf1.fr", name="TF1", url="http://x/tf1.m3u8", logo="", group="France", country="", language="")
    ]


def test_synthesizes_distinct_ids_without_tvg_id():
    text = "\n".join([
        "#EXTM3U",
        "#EXTINF:-1,News",
        "http://x/news.m3u8",
        "#EXTINF:-1,News",
        "http://x/news.m3u8",
        "#EXTINF:-1,Sport",
        "http://x/sport.m3u8",
    ])

    channels = parse_playlist(text)

    ids = [c.id for c in channels]
    assert len(channels) == 3
    assert all(ids)
    assert len(set(ids)) == 3


def test_synthesized_ids_are_deterministic():
    text = "#EXTINF:-1,News\nhttp://x/news.m3u8\n#EXTINF:0,Music\nhttp://x/music.mp4"

    assert [c.id for c in parse_playlist(text)] == [c.id for c in parse_playlist(text)]


def test_orphan_directive_is_dropped():
    text = "\n".join([
        "#EXTM3U",
        '#EXTINF:-1 tvg-id="orphan",Orphan',
        '#EXTINF:-1 tvg-id="kept",Kept',
        "http://x/kept.m3u8",
    ])

    parser = PlaylistParser()
    channels = parser.parse(text)

    assert [c.id for c in channels] == ["kept"]
    assert parser.dropped == 1


def test_trailing_directive_without_locator_is_dropped():
    assert parse_playlist("#EXTM3U\n#EXTINF:-1,Lonely\n\n   \n") == []


def test_missing_attributes_default_to_empty():
    channel = parse_playlist("#EXTINF:-1 tvg-id=\"a\",Alpha\nhttp://x/a.ts")[0]

    assert channel.logo == ""
    assert channel.group == ""
    assert channel.country == ""
    assert channel.language == ""


def test_reads_logo_country_and_language():
    text = (
        '#EXTINF:-1 tvg-id="b" tvg-logo="http://img/b.png" tvg-country="FR" '
        'tvg-language="French" group-title="News",Beta\nhttp://x/b.ts'
    )

    channel = parse_playlist(text)[0]

    assert channel.logo == "http://img/b.png"
    assert channel.country == "FR"
    assert channel.language == "French"
    assert channel.group == "News"


def test_name_falls_back_to_tvg_name():
    channel = parse_playlist('#EXTINF:-1 tvg-name="Fallback Name",\nhttp://x/f.ts')[0]

    assert channel.name == "Fallback Name"


def test_nameless_entry_is_dropped():
    text = '#EXTINF:-1 tvg-id="x",\nhttp://x/x.ts\n#EXTINF:-1,Named\nhttp://x/n.ts'

    assert [c.name for c in parse_playlist(text)] == ["Named"]


def test_comment_lines_are_never_locators():
    text = "\n".join([
        "#EXTM3U x-tvg-url=\"http://epg\"",
        "#EXTINF:-1,Gamma",
        "#EXTVLCOPT:http-user-agent=Mozilla",
        "# just a note",
        "http://x/gamma.m3u8",
    ])

    channels = parse_playlist(text)

    assert len(channels) == 1
    assert channels[0].url == "http://x/gamma.m3u8"


def test_extgrp_supplies_missing_group():
    text = "#EXTINF:-1,Delta\n#EXTGRP:Movies\nhttp://x/delta.mp4"

    assert parse_playlist(text)[0].group == "Movies"


def test_group_title_wins_over_extgrp():
    text = '#EXTINF:-1 group-title="Kids",Delta\n#EXTGRP:Movies\nhttp://x/delta.mp4'

    assert parse_playlist(text)[0].group == "Kids"


def test_name_comes_after_last_comma_outside_quotes():
    text = '#EXTINF:-1 tvg-id="c" group-title="News, Weather",Channel Seven\nhttp://x/c.ts'

    channel = parse_playlist(text)[0]

    assert channel.name == "Channel Seven"
    assert channel.group == "News, Weather"


def test_malformed_duration_is_dropped():
    text = "#EXTINF:abc,Broken\nhttp://x/broken.ts\n#EXTINF:3.5,Fine\nhttp://x/fine.ts"

    assert [c.name for c in parse_playlist(text)] == ["Fine"]


def test_duplicate_tvg_ids_are_made_unique():
    text = '#EXTINF:-1 tvg-id="dup",One\nhttp://x/1.ts\n#EXTINF:-1 tvg-id="dup",Two\nhttp://x/2.ts'

    assert [c.id for c in parse_playlist(text)] == ["dup", "dup-2"]


def test_accepts_windows_line_endings_and_bom():
    text = "\ufeff#EXTM3U\r\n#EXTINF:-1 tvg-id=\"e\",Echo\r\nhttp://x/e.m3u8\r\n"

    channels = parse_playlist(text)

    assert [(c.id, c.url) for c in channels] == [("e", "http://x/e.m3u8")]


def test_collapses_whitespace_in_names():
    assert parse_playlist("#EXTINF:-1,  Foxtrot    HD \nhttp://x/f.ts")[0].name == "Foxtrot HD"


def test_preserves_input_order():
    text = "".join(f"#EXTINF:-1,Channel {i}\nhttp://x/{i}.ts\n" for i in range(20))

    assert [c.name for c in parse_playlist(text)] == [f"Channel {i}" for i in range(20)]


def test_magnet_locators_are_kept():
    channel = parse_playlist("#EXTINF:-1,Movie\nmagnet:?xt=urn:btih:abc")[0]

    assert channel.url == "magnet:?xt=urn:btih:abc"


@pytest.mark.parametrize("text", ["", "   ", "\n\n\t\n", "#EXTM3U", "#EXTM3U\n"])
def test_empty_input_yields_nothing(text):
    assert parse_playlist(text) == []


def test_never_raises_and_keeps_invariants_on_noise():
    rng = random.Random(1234)
    pieces = [
        "#EXTINF:", "#EXTINF:-1", "#EXTINF:-1,", ",", '"', "tvg-id=\"", "tvg-id=\"x\"",
        "tvg-name=\"N\"", "group-title=\"G", "#EXTM3U", "#EXTGRP:", "http://x/a.m3u8",
        "magnet:?xt=urn:btih:", " ", "\n", "\r\n", "name", "\t", "#", "=", "-1",
    ]

    for _ in range(300):
        text = "".join(rng.choice(pieces) for _ in range(rng.randint(0, 40)))
        channels = parse_playlist(text)

        ids = [c.id for c in channels]
        assert all(ids)
        assert len(set(ids)) == len(ids)
        assert all(c.name for c in channels)


@pytest.mark.parametrize("separator", ["\x85", "\u2028", "\x0b", "\x0c", "\x1c", "\x1e"])
def test_only_real_line_breaks_split_entries(separator):
    text = f'#EXTINF:-1 tvg-id="a",News{separator}Live\nhttp://x/a.m3u8'

    assert [(c.id, c.name, c.url) for c in parse_playlist(text)] == [("a", "News Live", "http://x/a.m3u8")]


def test_accepts_old_mac_line_endings():
    text = "#EXTM3U\r#EXTINF:-1,Echo\rhttp://x/e.m3u8\r"

    assert [(c.name, c.url) for c in parse_playlist(text)] == [("Echo", "http://x/e.m3u8")]
