"""
DocumentSummarizer 통합 인터페이스 테스트
"""

from unittest.mock import MagicMock, patch

import pytest
from langchain_core.messages import AIMessage

from cluster_summarizer.exceptions import ConfigError, LoadError
from cluster_summarizer.models.data_models import SourceDocument
from cluster_summarizer.summarizer import DocumentSummarizer


@pytest.fixture
def llm():
    model = MagicMock()
    model.invoke.return_value = AIMessage(content="  summary text  ")
    return model


@pytest.fixture
def loader(paragraph_document):
    web_loader = MagicMock()
    web_loader.load.side_effect = lambda url: SourceDocument(text=paragraph_document(8), source=url)
    return web_loader


@pytest.fixture
def summarizer(llm, fake_embeddings, loader, fast_config, token_estimator):
    return DocumentSummarizer(
        llm=llm,
        embeddings=fake_embeddings,
        config=fast_config,
        loader=loader,
        token_estimator=token_estimator,
    )


def test_summarize_url_loads_and_summarizes(summarizer, loader, llm):
    final = summarizer.summarize_url("https://example.com/post")

    loader.load.assert_called_once_with("https://example.com/post")
    assert final.text == "summary text"
    assert final.num_source_chunks == 8
    assert final.num_summarized_chunks == 5
    # map 5회 + reduce 1회
    assert llm.invoke.call_count == 6


def test_summarize_text_skips_loader(summarizer, loader, paragraph_document):
    final = summarizer.summarize_text(paragraph_document(3))
    loader.load.assert_not_called()
    assert final.num_summarized_chunks == 3


def test_overrides_apply_per_request(summarizer, paragraph_document):
    final = summarizer.summarize(text=paragraph_document(8), cluster_count=2)
    assert final.num_summarized_chunks == 2

    # 기본 설정은 그대로
    assert summarizer.summarize(text=paragraph_document(8)).num_summarized_chunks == 5


def test_separate_reduce_model(llm, fake_embeddings, loader, fast_config, token_estimator, paragraph_document):
    reduce_llm = MagicMock()
    reduce_llm.invoke.return_value = AIMessage(content="final")
    summarizer = DocumentSummarizer(
        llm=llm,
        embeddings=fake_embeddings,
        reduce_llm=reduce_llm,
        config=fast_config,
        loader=loader,
        token_estimator=token_estimator,
    )

    final = summarizer.summarize_text(paragraph_document(2))

    assert final.text == "final"
    assert reduce_llm.invoke.call_count == 1
    assert llm.invoke.call_count == 2


@pytest.mark.parametrize("kwargs", [{}, {'url': "https://example.com", 'text': "body"}])
def test_exactly_one_input_required(summarizer, kwargs):
    with pytest.raises(ConfigError):
        summarizer.summarize(**kwargs)


def test_invalid_override_is_config_error(summarizer, loader):
    with pytest.raises(ConfigError):
        summarizer.summarize(url="https://example.com", chunk_size=100, chunk_overlap=200)
    loader.load.assert_not_called()


def test_load_error_propagates(summarizer, loader, llm):
    loader.load.side_effect = LoadError("down", url="https://example.com")
    with pytest.raises(LoadError):
        summarizer.summarize_url("https://example.com")
    llm.invoke.assert_not_called()


class TestFromApiKey:

    def test_empty_key_is_config_error(self):
        with pytest.raises(ConfigError):
            DocumentSummarizer.from_api_key("")

    def test_models_are_built_without_client_retries(self):
        with patch("cluster_summarizer.summarizer.ChatOpenAI") as chat_cls, \
                patch("cluster_summarizer.summarizer.OpenAIEmbeddings") as embeddings_cls:
            summarizer = DocumentSummarizer.from_api_key("sk-test", model="gpt-4o-mini", reduce_model="gpt-4o")

        assert chat_cls.call_count == 2
        for call in chat_cls.call_args_list:
            assert call.kwargs['max_retries'] == 0
            assert call.kwargs['api_key'] == "sk-test"
        assert embeddings_cls.call_args.kwargs['max_retries'] == 0
        assert isinstance(summarizer, DocumentSummarizer)
