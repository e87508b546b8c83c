"""
웹 문서 로더 테스트 (네트워크 호출 없음)
"""

from unittest.mock import patch

import pytest
import requests
from langchain_core.documents import Document

from cluster_summarizer.core.document_loader import WebDocumentLoader, clean_text
from cluster_summarizer.exceptions import LoadError

LOADER_PATH = "cluster_summarizer.core.document_loader.WebBaseLoader"


def test_clean_text_collapses_whitespace():
    raw = "  Title \t\t here  \n\n\n\n   body   line\n"
    assert clean_text(raw) == "Title here\n\nbody line"


def test_load_returns_cleaned_source_document():
    with patch(LOADER_PATH) as loader_cls:
        loader_cls.return_value.load.return_value = [
            Document(page_content="First   part\n\n\n\nSecond part", metadata={'source': 'x'}),
        ]
        document = WebDocumentLoader(timeout=5).load("https://example.com/article")

    assert document.text == "First part\n\nSecond part"
    assert document.source == "https://example.com/article"
    kwargs = loader_cls.call_args.kwargs
    assert kwargs['web_path'] == "https://example.com/article"
    assert kwargs['requests_kwargs'] == {'timeout': 5}


def test_load_failure_is_load_error():
    with patch(LOADER_PATH) as loader_cls:
        loader_cls.return_value.load.side_effect = ConnectionError("no route")
        with pytest.raises(LoadError) as exc_info:
            WebDocumentLoader().load("https://example.com/down")

    assert exc_info.value.url == "https://example.com/down"
    assert exc_info.value.stage == "load"


def test_empty_page_is_load_error():
    with patch(LOADER_PATH) as loader_cls:
        loader_cls.return_value.load.return_value = [Document(page_content="  \n\n ")]
        with pytest.raises(LoadError):
            WebDocumentLoader().load("https://example.com/blank")


def test_blank_url_is_rejected_without_request():
    with patch(LOADER_PATH) as loader_cls:
        with pytest.raises(LoadError):
            WebDocumentLoader().load("   ")
    loader_cls.assert_not_called()


def test_http_error_status_is_load_error():
    with patch(LOADER_PATH) as loader_cls:
        loader_cls.return_value.load.side_effect = requests.HTTPError("404 Client Error: Not Found")
        with pytest.raises(LoadError) as exc_info:
            WebDocumentLoader().load("https://example.com/missing")

    assert exc_info.value.url == "https://example.com/missing"
    assert isinstance(exc_info.value.__cause__, requests.HTTPError)
    kwargs = loader_cls.call_args.kwargs
    assert kwargs['raise_for_status'] is True


def test_block_elements_are_split_into_lines():
    with patch(LOADER_PATH) as loader_cls:
        loader_cls.return_value.load.return_value = [Document(page_content="Title\nFirst paragraph.")]
        document = WebDocumentLoader().load("https://example.com/post")

    assert loader_cls.call_args.kwargs['bs_get_text_kwargs'] == {'separator': '\n'}
    assert document.text == "Title\nFirst paragraph."
