import asyncio

import httpx
import pytest

from top_movies.errors import FetchError
from top_movies.services.feed_client import FeedClient
from top_movies.settings import Settings

from tests.factories import FEED_URL, failing_transport, feed_payload, feed_transport, make_movie


def _client(handler) -> FeedClient:
    return FeedClient(url=FEED_URL, timeout=1.0, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_feed_decodes_items_as_strings():
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(
            200,
            json={
                "items": [
                    {
                        "id": "tt0111161",
                        "rank": "1",
                        "title": "The Shawshank Redemption",
                        "fullTitle": "The Shawshank Redemption (1994)",
                        "year": "1994",
                        "image": "https://m.media-amazon.com/images/M/x._V1_UX128_.jpg",
                        "crew": "Frank Darabont (dir.), Tim Robbins, Morgan Freeman",
                        "imDbRating": "9.2",
                        "imDbRatingCount": "2651547",
                    }
                ],
                "errorMessage": "",
            },
        )

    client = _client(handler)
    movies = await client.fetch_feed()
    await client.close()

    assert requested == [FEED_URL]
    [movie] = movies
    assert movie.id == "tt0111161"
    assert movie.full_title == "The Shawshank Redemption (1994)"
    assert movie.rating_value == "9.2"
    assert movie.rating_count == "2651547"
    assert movie.rank == "1"


@pytest.mark.asyncio
async def test_fetch_feed_keeps_feed_order():
    movies = [make_movie("tt3", rank="3"), make_movie("tt1", rank="1")]
    client = FeedClient(url=FEED_URL, timeout=1.0, transport=feed_transport(movies))

    assert await client.fetch_feed() == movies
    await client.close()


@pytest.mark.asyncio
async def test_http_error_status_is_bad_response():
    client = FeedClient(url=FEED_URL, timeout=1.0, transport=failing_transport(500))

    with pytest.raises(FetchError) as exc_info:
        await client.fetch_feed()
    assert exc_info.value.kind == "bad_response"


@pytest.mark.asyncio
async def test_error_message_without_items_is_bad_response():
    client = _client(lambda request: httpx.Response(200, json={"items": [], "errorMessage": "Invalid API Key"}))

    with pytest.raises(FetchError) as exc_info:
        await client.fetch_feed()
    assert exc_info.value.kind == "bad_response"
    assert "Invalid API Key" in str(exc_info.value)


@pytest.mark.asyncio
async def test_empty_feed_is_not_an_error():
    client = _client(lambda request: httpx.Response(200, json=feed_payload([])))

    assert await client.fetch_feed() == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(200, json=[1, 2]),
        httpx.Response(200, json={"errorMessage": ""}),
        httpx.Response(200, json={"items": [{"id": "tt1", "title": "No other fields"}]}),
    ],
)
async def test_malformed_payload_is_decode_error(response: httpx.Response):
    client = _client(lambda request: response)

    with pytest.raises(FetchError) as exc_info:
        await client.fetch_feed()
    assert exc_info.value.kind == "decode"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc",
    [httpx.ConnectError("connection refused"), httpx.ReadTimeout("read timed out")],
)
async def test_transport_failures_are_network_errors(exc: Exception):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    client = _client(handler)

    with pytest.raises(FetchError) as exc_info:
        await client.fetch_feed()
    assert exc_info.value.kind == "network"


@pytest.mark.asyncio
async def test_slow_feed_times_out_as_network_error():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json=feed_payload([]))

    client = FeedClient(url=FEED_URL, timeout=0.05, transport=httpx.MockTransport(handler))

    with pytest.raises(FetchError) as exc_info:
        await client.fetch_feed()
    assert exc_info.value.kind == "network"


def test_feed_url_appends_api_key():
    settings = Settings(feed_base_url="https://tv-api.com/en/API/Top250Movies/", TV_API_KEY="k_123")
    assert settings.feed_url == "https://tv-api.com/en/API/Top250Movies/k_123"

    assert Settings(feed_base_url="https://feed.test/top").feed_url == "https://feed.test/top"
