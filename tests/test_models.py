import pytest

from streamverse.exceptions import InvalidChannelRecord, NoPlayableSource
from streamverse.models import Channel, PlaybackHandle, PlaybackState, TransportKind


def test_from_dict_reads_aliases_and_ignores_unknown_keys():
    channel = Channel.from_dict({
        "id": "fr2",
        "tvgName": "France 2",
        "url": "http://x/fr2.m3u8",
        "tvgLogo": "http://img/fr2.png",
        "category": "France",
        "quality": "HD",
    })

    assert channel == Channel(
        id="fr2", name="France 2", url="http://x/fr2.m3u8",
        logo="http://img/fr2.png", group="France"
    )


def test_from_dict_coerces_scalars_and_skips_nested_values():
    channel = Channel.from_dict({"id": 42, "name": " Answer ", "url": None, "group": {"nested": True}})

    assert channel.id == "42"
    assert channel.name == "Answer"
    assert channel.url == ""
    assert channel.group == ""


@pytest.mark.parametrize("record", [
    {"name": "No id"},
    {"id": "  ", "name": "Blank id"},
    {"id": "x"},
    {"id": "x", "name": ""},
    ["id", "name"],
    "channel",
    None,
])
def test_from_dict_rejects_invalid_records(record):
    with pytest.raises(InvalidChannelRecord):
        Channel.from_dict(record)


def test_overlay_keeps_values_and_the_id():
    base = Channel(id="a", name="Alpha", url="http://x/a.ts", logo="http://img/a.png", group="News")
    later = Channel(id="other", name="Alpha HD", url="", group="", country="FR")

    merged = base.overlay(later)

    assert merged == Channel(
        id="a", name="Alpha HD", url="http://x/a.ts",
        logo="http://img/a.png", group="News", country="FR"
    )


def test_to_dict_has_every_field():
    assert Channel(id="a", name="A", url="u").to_dict() == {
        "id": "a", "name": "A", "url": "u", "logo": "", "group": "", "country": "", "language": ""
    }


def test_handle_reports_the_effective_channel():
    channel = Channel(id="m", name="Movie", url="magnet:?xt=urn:btih:abc")
    handle = PlaybackHandle(transport_kind=TransportKind.PEER_SWARM, channel=channel, generation=1)

    assert handle.effective_channel is channel
    assert handle.channel_id == "m"
    assert not handle.is_live

    handle.effective_url = "blob:movie.mkv"
    handle.state = PlaybackState.PLAYING

    assert handle.effective_channel.url == "blob:movie.mkv"
    assert handle.effective_channel.id == "m"
    assert handle.is_live


def test_playback_errors_carry_reason_and_channel():
    channel = Channel(id="x", name="X", url="")
    error = NoPlayableSource("nothing to play", channel)

    assert error.reason == "NoPlayableSource"
    assert error.channel is channel
    assert str(error) == "nothing to play"
