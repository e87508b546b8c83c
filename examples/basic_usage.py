"""
DocumentSummarizer 사용 예제

웹 페이지와 원문 텍스트를 요약하는 기본 예제입니다.
"""

import sys

from cluster_summarizer import Config, DocumentSummarizer, SummaryPipelineError
from cluster_summarizer.utils import set_log_level


def main():
    set_log_level("INFO")

    api_key = Config.load_openai_api_key()
    if not api_key:
        print("OPENAI_API_KEY가 설정되지 않았습니다. .env 파일을 확인하세요.")
        return

    summarizer = DocumentSummarizer.from_api_key(api_key)

    # 1. 웹 페이지 요약
    print("="*60)
    print("1. 웹 페이지 요약")
    print("="*60)

    url = sys.argv[1] if len(sys.argv) > 1 else "https://en.wikipedia.org/wiki/K-means_clustering"

    try:
        summary = summarizer.summarize_url(url, cluster_count=5)
    except SummaryPipelineError as e:
        print(f"\n요약 실패 [{e.stage}]: {e}")
        return

    print(f"\n원문 청크: {summary.num_source_chunks}개, 요약 청크: {summary.num_summarized_chunks}개")
    print(f"대표 청크: {list(summary.selected_chunk_indices)}")
    print(f"\n요약:\n{summary.text}\n")

    # 2. 원문 텍스트 요약 (설정 덮어쓰기)
    print("="*60)
    print("2. 원문 텍스트 요약")
    print("="*60)

    text = "\n\n".join(partial.text for partial in summary.partial_summaries)
    short_summary = summarizer.summarize_text(
        text,
        chunk_size=1000,
        chunk_overlap=100,
        cluster_count=3,
    )
    print(f"\n요약:\n{short_summary.text}\n")


if __name__ == "__main__":
    main()
