"""
청커 테스트 - 커버리지, 중첩, 분리자 우선순위, 설정 오류
"""

import pytest

from cluster_summarizer.core.chunker import DocumentChunker, WindowTextSplitter, chunk
from cluster_summarizer.exceptions import ConfigError


def assert_covers(text, chunks, overlap):
    """청크 구간이 원문 전체를 빈틈없이 덮는지 확인"""
    assert chunks[0].start == 0
    assert chunks[-1].end == len(text)
    for chunk_, next_chunk in zip(chunks, chunks[1:]):
        assert next_chunk.start == chunk_.end - overlap
        assert next_chunk.start > chunk_.start
    for chunk_ in chunks:
        assert chunk_.text == text[chunk_.start:chunk_.end]


class TestWindowTextSplitter:

    def test_rejects_overlap_equal_to_chunk_size(self):
        with pytest.raises(ConfigError):
            WindowTextSplitter(chunk_size=10, chunk_overlap=10)

    def test_rejects_overlap_larger_than_chunk_size(self):
        with pytest.raises(ConfigError):
            WindowTextSplitter(chunk_size=10, chunk_overlap=20)

    def test_rejects_negative_overlap_and_zero_size(self):
        with pytest.raises(ConfigError):
            WindowTextSplitter(chunk_size=10, chunk_overlap=-1)
        with pytest.raises(ConfigError):
            WindowTextSplitter(chunk_size=0, chunk_overlap=0)

    def test_prefers_higher_priority_separator(self):
        """문단 구분이 윈도우 안에 있으면 공백보다 우선"""
        text = "aaaa bbbb\n\ncccc dddd eeee"
        splitter = WindowTextSplitter(chunk_size=18, chunk_overlap=0, separators=["\n\n", " "])
        assert splitter.split_text(text) == ["aaaa bbbb\n\n", "cccc dddd eeee"]

    def test_falls_back_to_lower_priority_separator(self):
        text = "aaaa bbbb cccc dddd"
        splitter = WindowTextSplitter(chunk_size=12, chunk_overlap=0, separators=["\n\n", " "])
        assert splitter.split_text(text) == ["aaaa bbbb ", "cccc dddd"]

    def test_hard_cut_without_separators(self):
        text = "x" * 25
        splitter = WindowTextSplitter(chunk_size=10, chunk_overlap=0, separators=["\n\n"])
        assert splitter.split_spans(text) == [(0, 10), (10, 20), (20, 25)]

    def test_empty_separator_forces_hard_cut(self):
        text = "aa bb cc dd"
        splitter = WindowTextSplitter(chunk_size=7, chunk_overlap=0, separators=["", " "])
        assert splitter.split_spans(text)[0] == (0, 7)

    def test_overlap_repeats_trailing_characters(self):
        text = "abcdefghijklmnopqrstuvwxyz"
        splitter = WindowTextSplitter(chunk_size=10, chunk_overlap=3, separators=[])
        parts = splitter.split_text(text)
        assert parts[0] == "abcdefghij"
        assert parts[1].startswith("hij")
        for previous, current in zip(parts, parts[1:]):
            assert current[:3] == previous[-3:]

    def test_separator_inside_overlap_is_ignored(self):
        """분리자가 overlap 구간 안에만 있으면 강제 분할 (무한 반복 방지)"""
        text = "ab cdefghijklmnop"
        splitter = WindowTextSplitter(chunk_size=8, chunk_overlap=4, separators=[" "])
        spans = splitter.split_spans(text)
        assert spans[0] == (0, 8)
        assert all(b[0] > a[0] for a, b in zip(spans, spans[1:]))

    def test_works_with_create_documents(self):
        splitter = WindowTextSplitter(chunk_size=12, chunk_overlap=0, separators=[" "])
        docs = splitter.create_documents(["aaaa bbbb cccc dddd"], metadatas=[{'source': 'x'}])
        assert [doc.page_content for doc in docs] == ["aaaa bbbb ", "cccc dddd"]
        assert all(doc.metadata['source'] == 'x' for doc in docs)


class TestDocumentChunker:

    def test_text_shorter_than_chunk_size_yields_single_chunk(self, token_estimator):
        text = "First paragraph.\n\nSecond paragraph.\n\nThird paragraph."
        chunks = chunk(text, chunk_size=1000, chunk_overlap=100, token_estimator=token_estimator)
        assert len(chunks) == 1
        assert chunks[0].index == 0
        assert chunks[0].text == text
        assert chunks[0].approx_token_count == 6

    def test_empty_text_yields_no_chunks(self, token_estimator):
        assert chunk("", chunk_size=10, chunk_overlap=2, token_estimator=token_estimator) == []

    @pytest.mark.parametrize("chunk_size,chunk_overlap", [(50, 0), (50, 10), (37, 36), (200, 150), (7, 1)])
    def test_full_coverage_and_contiguous_indices(self, token_estimator, chunk_size, chunk_overlap):
        text = (
            "Lorem ipsum dolor sit amet, consectetur adipiscing elit.\n\n"
            "Sed do eiusmod tempor incididunt ut labore et dolore magna aliqua.\n"
            "Ut enim ad minim veniam, quis nostrud exercitation ullamco.\t"
            "Duis aute irure dolor in reprehenderit in voluptate velit esse. " * 3
        )
        chunks = chunk(
            text,
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=["\n\n", "\n", "\t", " "],
            token_estimator=token_estimator,
        )
        assert [c.index for c in chunks] == list(range(len(chunks)))
        assert all(len(c.text) <= chunk_size for c in chunks)
        assert_covers(text, chunks, chunk_overlap)

    def test_paragraph_document_chunks_per_paragraph(self, token_estimator, paragraph_document):
        text = paragraph_document(12)
        chunks = chunk(
            text, chunk_size=100, chunk_overlap=0, separators=["\n\n", "\n", " "],
            token_estimator=token_estimator,
        )
        assert len(chunks) == 12
        assert chunks[3].text.startswith("Paragraph 03")

    def test_token_estimator_does_not_affect_splitting(self, paragraph_document):
        text = paragraph_document(5)
        first = DocumentChunker(100, 0, ["\n\n"], token_estimator=lambda t: 1).chunk(text)
        second = DocumentChunker(100, 0, ["\n\n"], token_estimator=len).chunk(text)
        assert [c.text for c in first] == [c.text for c in second]
        assert [c.approx_token_count for c in second] == [len(c.text) for c in second]
