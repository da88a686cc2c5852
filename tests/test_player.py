"""Tests for player response resolution and the stream extractor."""

import asyncio
import json
from datetime import date

import pytest

from tubepipe.core.errors import AgeRestrictedError, DownloadError, ParsingError
from tubepipe.extractors.player import (
    PlayerResponseResolver,
    fix_player_url,
    player_config,
)
from tubepipe.extractors.stream import StreamExtractor

VIDEO_ID = "abc123def45"
WATCH_URL = f"https://www.youtube.com/watch?v={VIDEO_ID}&disable_polymer=1"
SCRIPT_URL = "https://www.youtube.com/s/player/base.js"


def _watch_envelope(initial_data, player_response=None):
    player = {"playerResponse": player_response} if player_response is not None else {}
    return json.dumps([{"page": "watch"}, {}, player, {"response": initial_data}])


def _legacy_page(player_response):
    config = {
        "args": {"player_response": json.dumps(player_response)},
        "assets": {"js": "/s/player/base.js"},
    }
    return f"<html><script>var ytplayer = ytplayer || {{}};ytplayer.config = {json.dumps(config)};"


@pytest.fixture
def new_style(downloader, player_response, watch_initial_data):
    downloader.add(WATCH_URL, "<html></html>")
    downloader.add(WATCH_URL + "&pbj=1", _watch_envelope(watch_initial_data, player_response))
    return downloader


@pytest.fixture
def legacy_style(downloader, player_response, watch_initial_data, player_script, make_format):
    player_response["streamingData"]["adaptiveFormats"].append(
        make_format(
            251,
            audioQuality="AUDIO_QUALITY_LOW",
            signatureCipher="url=https%3A%2F%2Fex.com%2Fv&sp=sig&s=AAA",
        )
    )
    downloader.add(WATCH_URL, _legacy_page(player_response))
    downloader.add(WATCH_URL + "&pbj=1", _watch_envelope(watch_initial_data, {}))
    downloader.add(SCRIPT_URL, player_script)
    downloader.script_result = "DEC"
    return downloader


# --- player config helpers ---


def test_player_config_extracted(player_response):
    config = player_config(_legacy_page(player_response))
    assert config["assets"]["js"] == "/s/player/base.js"


def test_player_config_missing():
    with pytest.raises(ParsingError) as exc:
        player_config("<html>no player here</html>")
    assert exc.value.kind == ParsingError.MISSING


def test_fix_player_url():
    assert fix_player_url("//s.ytimg.com/base.js") == "https://s.ytimg.com/base.js"
    assert fix_player_url("/s/base.js") == "https://www.youtube.com/s/base.js"
    assert fix_player_url("https://x/base.js") == "https://x/base.js"


# --- PlayerResponseResolver ---


def test_resolve_inlined_player_response(new_style, player_response):
    resolved = asyncio.run(PlayerResponseResolver(new_style).resolve(VIDEO_ID))
    assert resolved.player_response == player_response
    assert not resolved.is_legacy
    assert SCRIPT_URL not in new_style.urls


def test_resolve_sends_client_headers(new_style):
    asyncio.run(PlayerResponseResolver(new_style).resolve(VIDEO_ID))
    headers = dict(new_style.requests)
    assert headers[WATCH_URL] == {}
    assert headers[WATCH_URL + "&pbj=1"] == {
        "X-YouTube-Client-Name": "1",
        "X-YouTube-Client-Version": "2.20200214.04.00",
    }


def test_resolve_legacy_fetches_script(legacy_style, player_script):
    resolved = asyncio.run(PlayerResponseResolver(legacy_style).resolve(VIDEO_ID))
    assert resolved.is_legacy
    assert resolved.player_script == player_script
    assert "streamingData" in resolved.player_response


def test_resolve_age_restricted(downloader):
    downloader.add(WATCH_URL, "<html></html>")
    downloader.add(WATCH_URL + "&pbj=1", json.dumps([{}, {}, {"response": {}}]))
    with pytest.raises(AgeRestrictedError):
        asyncio.run(PlayerResponseResolver(downloader).resolve(VIDEO_ID))
    assert SCRIPT_URL not in downloader.urls


def test_resolve_legacy_without_config(downloader, watch_initial_data):
    downloader.add(WATCH_URL, "<html></html>")
    downloader.add(WATCH_URL + "&pbj=1", _watch_envelope(watch_initial_data))
    with pytest.raises(ParsingError):
        asyncio.run(PlayerResponseResolver(downloader).resolve(VIDEO_ID))


def test_resolve_download_failure(downloader):
    with pytest.raises(DownloadError):
        asyncio.run(PlayerResponseResolver(downloader).resolve(VIDEO_ID))


# --- StreamExtractor streams ---


def test_stream_buckets(new_style):
    extractor = asyncio.run(StreamExtractor.create(new_style, VIDEO_ID))
    assert [s.itag for s in extractor.video_streams()] == [18]
    assert [s.itag for s in extractor.video_only_streams()] == [137]
    assert [s.itag for s in extractor.audio_streams()] == [140]
    assert new_style.scripts == []


def test_legacy_cipher_decrypted(legacy_style):
    extractor = asyncio.run(StreamExtractor.create(legacy_style, VIDEO_ID))
    urls = [s.url for s in extractor.audio_streams()]
    assert urls == ["https://cdn.example/140", "https://ex.com/v&sig=DEC"]
    assert len(legacy_style.scripts) == 1
    assert legacy_style.scripts[0].endswith(';decrypt("AAA")')


def test_decryption_program_built_once(legacy_style):
    extractor = asyncio.run(StreamExtractor.create(legacy_style, VIDEO_ID))
    extractor.audio_streams()
    extractor.audio_streams()
    assert extractor._player_script is None
    assert len(legacy_style.scripts) == 2
    assert legacy_style.scripts[0] == legacy_style.scripts[1]


def test_failed_decryption_gives_empty_signature(legacy_style):
    legacy_style.script_result = ""
    extractor = asyncio.run(StreamExtractor.create(legacy_style, VIDEO_ID))
    assert "https://ex.com/v&sig=" in [s.url for s in extractor.audio_streams()]


def test_cipher_without_script_gives_empty_signature(
    new_style, player_response, watch_initial_data, make_format
):
    player_response["streamingData"]["adaptiveFormats"].append(
        make_format(
            251, audioQuality="LOW", signatureCipher="url=https%3A%2F%2Fex.com%2Fv&sp=sig&s=A"
        )
    )
    new_style.add(WATCH_URL + "&pbj=1", _watch_envelope(watch_initial_data, player_response))
    extractor = asyncio.run(StreamExtractor.create(new_style, VIDEO_ID))
    assert "https://ex.com/v&sig=" in [s.url for s in extractor.audio_streams()]
    assert new_style.scripts == []


def test_missing_watch_contents(new_style, player_response):
    new_style.add(WATCH_URL + "&pbj=1", _watch_envelope({}, player_response))
    with pytest.raises(ParsingError):
        asyncio.run(StreamExtractor.create(new_style, VIDEO_ID))


# --- StreamExtractor metadata ---


@pytest.fixture
def extractor(new_style):
    return asyncio.run(StreamExtractor.create(new_style, VIDEO_ID))


def test_name(extractor):
    assert extractor.name() == "First video"


def test_description_from_rich_renderer(extractor):
    assert extractor.description() == ("Line one\nbold", True)


def test_description_html(extractor):
    assert extractor.description(as_html=True) == ("Line one<br/><b>bold</b>", True)


def test_description_falls_back_to_short(extractor):
    del extractor.secondary_info_renderer["description"]
    assert extractor.description() == ("Plain description", False)


def test_length_and_views(extractor):
    assert extractor.length() == 245
    assert extractor.view_count() == 1234


def test_ratings(extractor):
    assert extractor.like_count() == 100
    assert extractor.dislike_count() == 7


def test_ratings_disabled(extractor):
    del extractor.primary_info_renderer["sentimentBar"]
    extractor.player_response["videoDetails"]["allowRatings"] = False
    assert extractor.like_count() == -1


def test_ratings_missing_while_allowed(extractor):
    del extractor.primary_info_renderer["sentimentBar"]
    with pytest.raises(ParsingError):
        extractor.like_count()


def test_upload_date(extractor):
    assert extractor.textual_upload_date() == "2020-02-14"
    assert extractor.upload_date() == date(2020, 2, 14)


def test_uploader(extractor):
    assert extractor.uploader_name() == "Some Channel"
    assert extractor.uploader_url() == "https://www.youtube.com/channel/UCchannel0001"
    assert [t.url for t in extractor.uploader_avatars()] == ["https://yt3.ggpht.com/o"]


def test_video_thumbnails(extractor):
    assert [t.url for t in extractor.video_thumbnails()] == [
        "https://i.ytimg.com/vi/abc123def45/hq.jpg"
    ]


def test_related_drops_unknown_renderers(extractor):
    related = extractor.related()
    assert len(related) == 1
    assert related[0].video_id() == "rel00000001"
