"""Tests for the cursor-paginated HAL stream."""

from __future__ import annotations

import sys
import unittest
from itertools import islice
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from HalSearch.core.errors import (
    DescriptorFormatError,
    StreamStateError,
    TransportError,
    UnexpectedResponseError,
)
from HalSearch.core.models import HalResponse, StreamState
from HalSearch.sources.hal.stream import HalCursorStream


class _PagedBackend:
    """Fake Solr core holding documents with docid 0..total-1.

    Cursor marks are the next docid as a string.
    """

    def __init__(self, total: int, *, fail_on_request: int | None = None, status: int = 200) -> None:
        self.total = total
        self.fail_on_request = fail_on_request
        self.status = status
        self.urls: list[str] = []
        self.proxies: list[object] = []

    def get(self, url: str, *, proxies=None, timeout=None) -> HalResponse:
        del timeout
        self.urls.append(url)
        self.proxies.append(proxies)
        if len(self.urls) == self.fail_on_request:
            raise TransportError("connection reset")

        params = parse_qs(urlsplit(url).query)
        cursor = params["cursorMark"][0]
        rows = int(params["rows"][0])
        start = 0 if cursor == "*" else int(cursor)
        docs = [{"docid": i} for i in range(start, min(start + rows, self.total))]
        body = {
            "response": {"docs": docs, "numFound": self.total},
            "nextCursorMark": str(start + len(docs)),
        }
        return HalResponse(status=self.status, body=body)

    def params(self, index: int) -> dict[str, list[str]]:
        return parse_qs(urlsplit(self.urls[index]).query)


class TestCursorStreamDrain(unittest.TestCase):
    def test_full_drain_fetches_three_pages(self) -> None:
        backend = _PagedBackend(2500)
        stream = HalCursorStream(backend, {"structId_i": 1039}, rows=1000)

        counts: list[int] = []
        docids: list[int] = []
        for doc in stream:
            docids.append(doc["docid"])
            counts.append(stream.emitted_count)

        self.assertEqual(len(backend.urls), 3)
        self.assertEqual(docids, list(range(2500)))
        self.assertEqual(counts, list(range(1, 2501)))
        self.assertEqual(stream.state, StreamState.DONE)
        self.assertEqual(stream.emitted_count, 0)
        self.assertEqual(stream.total, 2500)

    def test_cursor_mark_is_echoed(self) -> None:
        backend = _PagedBackend(2500)
        list(HalCursorStream(backend, rows=1000))

        marks = [backend.params(i)["cursorMark"][0] for i in range(3)]
        self.assertEqual(marks, ["*", "1000", "2000"])

    def test_request_carries_fixed_paging_params(self) -> None:
        backend = _PagedBackend(5)
        list(HalCursorStream(backend, {"a": 1, "b": 2}, options={"fields": ["docid", "title_s"]}, rows=10))

        params = backend.params(0)
        self.assertEqual(params["wt"], ["json"])
        self.assertEqual(params["q"], ["(a:1) AND (b:2)"])
        self.assertEqual(params["sort"], ["docid asc"])
        self.assertEqual(params["rows"], ["10"])
        self.assertEqual(params["cursorMark"], ["*"])
        self.assertEqual(params["fl"], ["docid,title_s"])
        self.assertTrue(backend.urls[0].startswith("http://api.archives-ouvertes.fr/search/?"))

    def test_default_search_matches_all(self) -> None:
        backend = _PagedBackend(1)
        list(HalCursorStream(backend))
        self.assertEqual(backend.params(0)["q"], ["*:*"])

    def test_proxy_option_reaches_transport(self) -> None:
        backend = _PagedBackend(1)
        list(HalCursorStream(backend, options={"proxy": "http://proxy:3128"}))
        self.assertEqual(backend.proxies[0], {"http": "http://proxy:3128", "https": "http://proxy:3128"})

    def test_exact_multiple_of_page_size(self) -> None:
        backend = _PagedBackend(2000)
        docs = list(HalCursorStream(backend, rows=1000))
        self.assertEqual(len(docs), 2000)
        self.assertEqual(len(backend.urls), 2)

    def test_no_matches_ends_after_first_page(self) -> None:
        backend = _PagedBackend(0)
        stream = HalCursorStream(backend)

        self.assertEqual(list(stream), [])
        self.assertEqual(len(backend.urls), 1)
        self.assertEqual(stream.state, StreamState.DONE)

    def test_finished_stream_stays_exhausted(self) -> None:
        backend = _PagedBackend(3)
        stream = HalCursorStream(backend)
        list(stream)

        with self.assertRaises(StopIteration):
            next(stream)
        self.assertEqual(list(stream), [])
        self.assertEqual(len(backend.urls), 1)

    def test_total_is_captured_once(self) -> None:
        backend = _PagedBackend(25)
        stream = HalCursorStream(backend, rows=10)
        first = list(islice(stream, 10))
        backend.total = 1000

        rest = list(stream)
        # the index grew mid-scroll: the last page is delivered whole, then the
        # stream stops at the count it saw first instead of following the new one
        self.assertEqual(stream.total, 25)
        self.assertEqual(len(first) + len(rest), 30)
        self.assertEqual(len(backend.urls), 3)

    def test_empty_page_ends_stream_when_index_shrinks(self) -> None:
        backend = _PagedBackend(25)
        stream = HalCursorStream(backend, rows=10)
        first = list(islice(stream, 10))
        backend.total = 10

        rest = list(stream)
        self.assertEqual(len(first), 10)
        self.assertEqual(rest, [])
        self.assertEqual(stream.state, StreamState.DONE)


class TestCursorStreamBackpressure(unittest.TestCase):
    def test_no_request_before_first_pull(self) -> None:
        backend = _PagedBackend(2500)
        HalCursorStream(backend)
        self.assertEqual(backend.urls, [])

    def test_next_page_fetched_only_when_buffer_is_drained(self) -> None:
        backend = _PagedBackend(2500)
        stream = HalCursorStream(backend, rows=1000)

        next(stream)
        self.assertEqual(len(backend.urls), 1)
        list(islice(stream, 999))
        self.assertEqual(len(backend.urls), 1)
        self.assertEqual(stream.state, StreamState.IDLE)
        next(stream)
        self.assertEqual(len(backend.urls), 2)

    def test_consumer_stopping_halts_fetching(self) -> None:
        backend = _PagedBackend(2500)
        stream = HalCursorStream(backend, rows=1000)
        list(islice(stream, 1500))
        self.assertEqual(len(backend.urls), 2)

    def test_overlapping_pull_is_rejected(self) -> None:
        test = self

        class _ReentrantBackend(_PagedBackend):
            stream: HalCursorStream | None = None
            reentrant_errors = 0

            def get(self, url: str, *, proxies=None, timeout=None) -> HalResponse:
                test.assertEqual(self.stream.state, StreamState.FETCHING)
                try:
                    next(self.stream)
                except StreamStateError:
                    self.reentrant_errors += 1
                return super().get(url, proxies=proxies, timeout=timeout)

        backend = _ReentrantBackend(3)
        stream = HalCursorStream(backend)
        backend.stream = stream

        docs = list(stream)

        self.assertEqual(len(docs), 3)
        self.assertEqual(backend.reentrant_errors, 1)
        self.assertEqual(len(backend.urls), 1)


class TestCursorStreamErrors(unittest.TestCase):
    def test_failure_mid_scroll(self) -> None:
        backend = _PagedBackend(2500, fail_on_request=2)
        stream = HalCursorStream(backend, rows=1000)

        collected: list[dict] = []
        with self.assertRaises(TransportError):
            for doc in stream:
                collected.append(doc)

        self.assertEqual([doc["docid"] for doc in collected], list(range(1000)))
        self.assertEqual(len(backend.urls), 2)
        self.assertEqual(stream.state, StreamState.ERRORED)
        self.assertEqual(stream.emitted_count, 1000)

    def test_errored_stream_refuses_reuse(self) -> None:
        backend = _PagedBackend(2500, fail_on_request=2)
        stream = HalCursorStream(backend, rows=1000)
        with self.assertRaises(TransportError):
            list(stream)

        with self.assertRaises(StreamStateError):
            next(stream)
        self.assertEqual(len(backend.urls), 2)

    def test_non_success_status(self) -> None:
        backend = _PagedBackend(10, status=503)
        stream = HalCursorStream(backend)

        with self.assertRaises(UnexpectedResponseError) as ctx:
            next(stream)
        self.assertEqual(ctx.exception.status, 503)
        self.assertEqual(stream.state, StreamState.ERRORED)

    def test_malformed_body(self) -> None:
        class _BrokenBackend:
            def get(self, url, *, proxies=None, timeout=None):
                return HalResponse(status=200, body={"error": {"msg": "undefined field"}})

        stream = HalCursorStream(_BrokenBackend())
        with self.assertRaises(UnexpectedResponseError):
            next(stream)
        self.assertEqual(stream.state, StreamState.ERRORED)

    def test_missing_cursor_mark(self) -> None:
        class _NoCursorBackend:
            def get(self, url, *, proxies=None, timeout=None):
                return HalResponse(status=200, body={"response": {"docs": [{"docid": 1}], "numFound": 1}})

        stream = HalCursorStream(_NoCursorBackend())
        with self.assertRaises(UnexpectedResponseError):
            next(stream)

    def test_paging_options_are_rejected(self) -> None:
        for option in ("sort", "rows", "cursorMark", "start"):
            with self.subTest(option=option):
                with self.assertRaises(DescriptorFormatError):
                    HalCursorStream(_PagedBackend(1), options={option: "1"})

    def test_invalid_rows(self) -> None:
        with self.assertRaises(ValueError):
            HalCursorStream(_PagedBackend(1), rows=0)

    def test_invalid_descriptor_fails_at_construction(self) -> None:
        backend = _PagedBackend(1)
        with self.assertRaises(DescriptorFormatError):
            HalCursorStream(backend, {"a": None})
        self.assertEqual(backend.urls, [])


if __name__ == "__main__":
    unittest.main()
