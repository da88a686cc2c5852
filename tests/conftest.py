"""Shared test fixtures for tubepipe tests."""

import json

import pytest

from tubepipe.api.base import Downloader
from tubepipe.core.errors import DownloadError
from tubepipe.core.settings import ExtractorSettings


class FakeDownloader(Downloader):
    """Serves canned bodies by exact url and records every call."""

    def __init__(self, script_result="") -> None:
        self.pages: dict[str, str] = {}
        self.requests: list[tuple[str, dict]] = []
        self.scripts: list[str] = []
        # str, or a callable taking the program text
        self.script_result = script_result

    def add(self, url: str, body: str) -> None:
        self.pages[url] = body

    def add_envelope(self, url: str, response: dict, index: int = 1) -> None:
        envelope: list = [{"page": "browse"} for _ in range(index)]
        envelope.append({"response": response})
        self.pages[url] = json.dumps(envelope)

    async def fetch(self, url: str) -> str:
        return await self.fetch_with_headers(url, {})

    async def fetch_with_headers(self, url: str, headers: dict[str, str]) -> str:
        self.requests.append((url, dict(headers)))
        if url not in self.pages:
            raise DownloadError(f"GET {url} returned HTTP 404")
        return self.pages[url]

    def evaluate_script(self, source: str) -> str:
        self.scripts.append(source)
        if callable(self.script_result):
            return self.script_result(source)
        return self.script_result

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.requests]


@pytest.fixture
def downloader():
    return FakeDownloader()


@pytest.fixture
def settings():
    return ExtractorSettings()


@pytest.fixture
def player_script():
    return (
        "var Xy={ab:function(a,b){a.splice(0,b)},\n"
        "cd:function(a){a.reverse()}};\n"
        'Qz=function(a){a=a.split("");Xy.ab(a,1);Xy.cd(a,2);return a.join("")};\n'
        "var unrelated=function(){return 1};"
    )


@pytest.fixture
def video_renderer():
    return {
        "videoId": "abc123def45",
        "title": {"runs": [{"text": "First video"}]},
        "thumbnail": {
            "thumbnails": [{"url": "//i.ytimg.com/vi/abc123def45/default.jpg", "width": 120,
                            "height": 90}]
        },
        "lengthText": {"simpleText": "4:05"},
        "viewCountText": {"simpleText": "1,234 views"},
        "publishedTimeText": {"simpleText": "2 days ago"},
        "longBylineText": {
            "runs": [
                {
                    "text": "Some Channel",
                    "navigationEndpoint": {"browseEndpoint": {"browseId": "UCchannel0001"}},
                }
            ]
        },
    }


@pytest.fixture
def channel_renderer():
    return {
        "channelId": "UCchannel0002",
        "title": {"simpleText": "Another Channel"},
        "thumbnail": {"thumbnails": [{"url": "https://yt3.ggpht.com/a", "width": 88,
                                      "height": 88}]},
        "subscriberCountText": {"simpleText": "1.2M subscribers"},
        "videoCountText": {"runs": [{"text": "321"}, {"text": " videos"}]},
        "descriptionSnippet": {"runs": [{"text": "About "}, {"text": "things"}]},
    }


@pytest.fixture
def playlist_renderer():
    return {
        "playlistId": "PLlist0001",
        "title": {"simpleText": "A playlist"},
        "videoCount": "12",
        "shortBylineText": {"runs": [{"text": "Some Channel"}]},
        "thumbnails": [{"thumbnails": [{"url": "https://i.ytimg.com/p.jpg", "width": 1,
                                        "height": 1}]}],
    }


def _format(itag: int, **extra) -> dict:
    fmt = {
        "itag": itag,
        "bitrate": 1000 * itag,
        "quality": "medium",
        "mimeType": "video/mp4",
        "lastModified": "1580000000000000",
    }
    fmt.update(extra)
    return fmt


@pytest.fixture
def player_response():
    return {
        "videoDetails": {
            "videoId": "abc123def45",
            "title": "First video",
            "lengthSeconds": "245",
            "viewCount": "1234",
            "author": "Some Channel",
            "channelId": "UCchannel0001",
            "shortDescription": "Plain description",
            "allowRatings": True,
            "thumbnail": {
                "thumbnails": [
                    {"url": "//i.ytimg.com/vi/abc123def45/hq.jpg", "width": 480, "height": 360}
                ]
            },
        },
        "microformat": {"playerMicroformatRenderer": {"uploadDate": "2020-02-14"}},
        "streamingData": {
            "formats": [
                _format(18, url="https://cdn.example/18", height=360, width=640,
                        qualityLabel="360p", audioQuality="AUDIO_QUALITY_LOW"),
            ],
            "adaptiveFormats": [
                _format(137, url="https://cdn.example/137", height=1080, width=1920,
                        qualityLabel="1080p"),
                _format(140, url="https://cdn.example/140", mimeType="audio/mp4",
                        audioQuality="AUDIO_QUALITY_MEDIUM", audioChannels=2,
                        audioSampleRate="44100"),
            ],
        },
    }


@pytest.fixture
def make_format():
    return _format


@pytest.fixture
def watch_initial_data():
    return {
        "contents": {
            "twoColumnWatchNextResults": {
                "results": {
                    "results": {
                        "contents": [
                            {
                                "videoPrimaryInfoRenderer": {
                                    "title": {"runs": [{"text": "First video"}]},
                                    "viewCount": {
                                        "videoViewCountRenderer": {
                                            "viewCount": {"simpleText": "1,234 views"}
                                        }
                                    },
                                    "sentimentBar": {
                                        "sentimentBarRenderer": {"tooltip": "100 / 7"}
                                    },
                                }
                            },
                            {
                                "videoSecondaryInfoRenderer": {
                                    "description": {
                                        "runs": [
                                            {"text": "Line one\n"},
                                            {"text": "bold", "bold": True},
                                        ]
                                    },
                                    "owner": {
                                        "videoOwnerRenderer": {
                                            "title": {"runs": [{"text": "Some Channel"}]},
                                            "navigationEndpoint": {
                                                "browseEndpoint": {"browseId": "UCchannel0001"}
                                            },
                                            "thumbnail": {
                                                "thumbnails": [
                                                    {"url": "//yt3.ggpht.com/o", "width": 48,
                                                     "height": 48}
                                                ]
                                            },
                                        }
                                    },
                                }
                            },
                        ]
                    }
                },
                "secondaryResults": {
                    "secondaryResults": {
                        "results": [
                            {"compactVideoRenderer": {"videoId": "rel00000001"}},
                            {"compactAutoplayRenderer": {}},
                        ]
                    }
                },
            }
        }
    }
