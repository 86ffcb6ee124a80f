"""Builders for canned YouTube search payloads."""

import json


def video_renderer(
    video_id="vid00000001",
    title="A video",
    views="1,234 views",
    widths=(168, 360, 246),
    **extra,
):
    renderer = {
        "videoId": video_id,
        "title": {"runs": [{"text": title}]},
        "thumbnail": {
            "thumbnails": [
                {"url": f"https://i.ytimg.com/vi/{video_id}/{w}.jpg", "width": w, "height": w // 2}
                for w in widths
            ]
        },
        "viewCountText": {"simpleText": views},
        "lengthText": {"simpleText": "4:20"},
        "publishedTimeText": {"simpleText": "3 days ago"},
        "ownerText": {
            "runs": [
                {
                    "text": "Some Channel",
                    "navigationEndpoint": {
                        "browseEndpoint": {
                            "browseId": "UC1234567890abcdef",
                            "canonicalBaseUrl": "/@somechannel",
                        }
                    },
                }
            ]
        },
    }
    renderer.update(extra)
    return {"videoRenderer": renderer}


def playlist_renderer(playlist_id="PL0000000001", title="A playlist", count="12", **extra):
    renderer = {
        "playlistId": playlist_id,
        "title": {"simpleText": title},
        "videoCount": count,
        "shortBylineText": {
            "runs": [
                {
                    "text": "Playlist Owner",
                    "navigationEndpoint": {
                        "browseEndpoint": {"browseId": "UCowner", "canonicalBaseUrl": "/@owner"}
                    },
                }
            ]
        },
    }
    renderer.update(extra)
    return {"playlistRenderer": renderer}


def videos(count, prefix="vid"):
    return [video_renderer(video_id=f"{prefix}{i:08d}") for i in range(count)]


def continuation_item(token):
    return {
        "continuationItemRenderer": {
            "continuationEndpoint": {"continuationCommand": {"token": token}}
        }
    }


def item_section(items):
    return {"itemSectionRenderer": {"contents": list(items)}}


def search_document(
    items=(),
    token=None,
    estimated="1000",
    playlist_params=None,
    client_version=None,
):
    contents = [item_section(items)]
    if token:
        contents.append(continuation_item(token))

    data = {
        "estimatedResults": estimated,
        "contents": {
            "twoColumnSearchResultsRenderer": {
                "primaryContents": {"sectionListRenderer": {"contents": contents}}
            }
        },
    }
    if client_version:
        data["responseContext"] = {
            "serviceTrackingParams": [
                {"service": "GFEEDBACK", "params": [{"key": "logged_in", "value": "0"}]},
                {"service": "CSI", "params": [{"key": "cver", "value": client_version}]},
            ]
        }
    if playlist_params:
        filters = [
            {"searchFilterRenderer": {"navigationEndpoint": {"searchEndpoint": {"params": p}}}}
            for p in ("EgIIAQ%3D%3D", "EgIQAQ%3D%3D", playlist_params)
        ]
        data["header"] = {
            "searchHeaderRenderer": {
                "searchFilterButton": {
                    "buttonRenderer": {
                        "command": {
                            "openPopupAction": {
                                "popup": {
                                    "searchFilterOptionsDialogRenderer": {
                                        "groups": [
                                            {"searchFilterGroupRenderer": {"filters": []}},
                                            {"searchFilterGroupRenderer": {"filters": filters}},
                                        ]
                                    }
                                }
                            }
                        }
                    }
                }
            }
        }
    return data


def continuation_document(items=(), token=None):
    continuation_items = [item_section(items)]
    if token:
        continuation_items.append(continuation_item(token))
    return {
        "onResponseReceivedCommands": [
            {"appendContinuationItemsAction": {"continuationItems": continuation_items}}
        ]
    }


def html_page(data, client_version="2.20250101.00.00", prefix="var ytInitialData = "):
    return (
        "<html><head><script>var other = {\"unrelated\": true};</script></head><body>"
        f"<script>{prefix}{json.dumps(data)};</script>"
        f'<script>ytcfg.set({{"INNERTUBE_CONTEXT_CLIENT_VERSION":"{client_version}"}});</script>'
        "</body></html>"
    )
