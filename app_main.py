"""
Streamlit 문서 요약 애플리케이션
Description: 클러스터 기반 map-reduce 웹 문서 요약 인터페이스
"""

import os
import warnings
import logging

# Streamlit secrets 경로 설정 (경고 방지)
os.environ['STREAMLIT_SECRETS_PATH'] = ''

# Python 경고 필터링
warnings.filterwarnings('ignore', message='.*st.cache is deprecated.*')

# Streamlit 로깅 레벨 조정 (secrets 메시지 숨김)
logging.getLogger('streamlit').setLevel(logging.ERROR)

import streamlit as st

st.set_page_config(
    page_title="문서 요약",
    page_icon="📝",
    layout="wide",
    initial_sidebar_state="expanded"
)

from typing import Optional, Callable, Dict, Any
import extra_streamlit_components as stx

from cluster_summarizer import (
    Config,
    DocumentSummarizer,
    FinalSummary,
    SummaryPipelineError,
    SummarizationError,
)

# CookieManager 초기화
cookie_manager = stx.CookieManager()


st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #1f77b4;
        text-align: center;
        margin-bottom: 2rem;
    }
    .summary-box {
        padding: 1rem;
        border-radius: 0.5rem;
        background-color: #f0f2f6;
        margin-bottom: 1rem;
    }
    .stProgress > div > div > div > div {
        background-color: #1f77b4;
    }
</style>
""", unsafe_allow_html=True)


def save_api_key_to_cookie(api_key: str) -> None:
    """API 키를 쿠키에 저장합니다."""
    cookie_manager.set('openai_api_key', api_key, expires_at=None)


def load_api_key_from_cookie() -> Optional[str]:
    """쿠키에서 API 키를 로드합니다."""
    return cookie_manager.get('openai_api_key')


def get_api_key() -> Optional[str]:
    """우선순위: 쿠키 > 환경변수"""
    cookie_key = load_api_key_from_cookie()
    if cookie_key:
        return cookie_key
    return Config.load_openai_api_key()


def display_api_key_input() -> None:
    """API 키 입력 UI를 표시하고 저장합니다."""
    st.warning("OpenAI API 키를 입력하세요")

    with st.form("api_key_form"):
        api_key_input = st.text_input(
            "OpenAI API Key",
            type="password",
            placeholder="sk-proj-...",
            help="API 키는 sk-로 시작합니다"
        )
        submit = st.form_submit_button("저장 및 시작", use_container_width=True)

        if submit and api_key_input:
            if not api_key_input.startswith('sk-') or len(api_key_input) < 20:
                st.error("유효하지 않은 API 키 형식입니다")
                return

            save_api_key_to_cookie(api_key_input)
            st.success("API 키 저장 완료")
            st.rerun()


def create_summary_progress_callback() -> tuple:
    """map 요약용 progress callback"""
    progress_bar = st.progress(0)
    status_text = st.empty()

    def callback(info: Dict[str, Any]) -> None:
        current = info['current_chunk']
        total = info['total_chunks']
        progress_bar.progress(current / total if total > 0 else 0)

        if info['status'] == 'completed':
            status_msg = (
                f"대표 청크 요약: ({current}/{total}) | 청크 {info['chunk_index']} | "
                f"압축률 {info['compression_ratio']:.1%} "
                f"({info['original_length']}→{info['summary_length']}자)"
            )
        elif info['status'] == 'failed':
            status_msg = f"요약 실패: {info.get('error', 'Unknown error')[:50]}"
        else:
            status_msg = f"요약 생성 중... ({current}/{total})"

        status_text.text(status_msg)

    return callback, progress_bar, status_text


def init_summarizer(
    api_key: str,
    summary_callback: Optional[Callable] = None
) -> DocumentSummarizer:
    """DocumentSummarizer 초기화 (callback 동적 등록)"""
    return DocumentSummarizer.from_api_key(
        api_key,
        summary_progress_callback=summary_callback,
    )


def display_summary(summary: FinalSummary) -> None:
    """최종 요약 표시"""
    col1, col2, col3 = st.columns(3)
    col1.metric("원문 청크", summary.num_source_chunks)
    col2.metric("요약 청크", summary.num_summarized_chunks)
    col3.metric("사용 비율", f"{summary.coverage_ratio:.0%}")

    st.markdown("### 요약")
    st.markdown(summary.text)

    with st.expander("대표 청크별 요약"):
        for partial in summary.partial_summaries:
            st.markdown(f"**청크 {partial.source_chunk_index}**")
            st.markdown(partial.text)
            st.divider()


def main():
    """메인 애플리케이션"""

    st.markdown('<p class="main-header">문서 요약</p>', unsafe_allow_html=True)

    api_key = get_api_key()

    with st.sidebar:
        st.header("설정")

        if api_key:
            st.success("API 키 로드됨")
            if st.button("API 키 변경", use_container_width=True):
                cookie_manager.delete('openai_api_key')
                st.rerun()
        else:
            display_api_key_input()
            st.stop()

        st.divider()

        st.subheader("파이프라인 설정")
        chunk_size = st.number_input("청크 크기 (문자)", min_value=500, value=Config.CHUNK_SIZE, step=500)
        chunk_overlap = st.number_input("오버랩 (문자)", min_value=0, value=Config.CHUNK_OVERLAP, step=100)
        cluster_count = st.slider("클러스터 수", min_value=1, max_value=30, value=Config.CLUSTER_COUNT)

        st.divider()
        st.subheader("시스템 정보")
        st.caption(f"**map 모델**: {Config.OPENAI_MODEL}")
        st.caption(f"**reduce 모델**: {Config.OPENAI_REDUCE_MODEL}")
        st.caption(f"**임베딩 모델**: {Config.OPENAI_EMBEDDING_MODEL}")

    tab1, tab2 = st.tabs(["URL 요약", "텍스트 요약"])

    with tab1:
        url = st.text_input("웹 페이지 URL", placeholder="https://example.com/article")
        url_button = st.button("URL 요약", use_container_width=True)

    with tab2:
        raw_text = st.text_area("원문", height=250)
        text_button = st.button("텍스트 요약", use_container_width=True)

    request = None
    if url_button and url:
        request = {'url': url}
    elif text_button and raw_text:
        request = {'text': raw_text}

    if request is None:
        st.stop()

    summary_callback, summary_progress, summary_status = create_summary_progress_callback()
    try:
        summarizer = init_summarizer(api_key, summary_callback=summary_callback)
        with st.spinner("요약 중..."):
            summary = summarizer.summarize(
                **request,
                chunk_size=int(chunk_size),
                chunk_overlap=int(chunk_overlap),
                cluster_count=int(cluster_count),
            )
        summary_progress.empty()
        summary_status.empty()
        display_summary(summary)

    except SummarizationError as e:
        location = f" (청크 {e.chunk_index})" if e.chunk_index is not None else ""
        timeout = " - 시간 초과" if e.timed_out else ""
        st.error(f"요약 실패 [{e.stage}]{location}{timeout}: {e}")
    except SummaryPipelineError as e:
        st.error(f"요약 실패 [{e.stage}]: {e}")

    st.divider()
    st.caption(
        f"클러스터 기반 map-reduce 요약 | 청크 크기: {int(chunk_size)}자 | "
        f"오버랩: {int(chunk_overlap)}자 | 클러스터: {int(cluster_count)}개"
    )


if __name__ == "__main__":
    main()
