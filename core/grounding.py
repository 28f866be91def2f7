"""
Grounding 메타데이터 파싱
File Search 응답의 grounding_chunks / grounding_supports에서 출처 정보 추출
"""


def _get(obj, name: str, camel: str | None = None):
    if obj is None:
        return None
    if isinstance(obj, dict):
        value = obj.get(name)
        if value is None and camel:
            value = obj.get(camel)
        return value
    return getattr(obj, name, None)


def _chunk_context(chunk):
    return _get(chunk, "retrieved_context", "retrievedContext")


def _chunk_title(chunk) -> str | None:
    return _get(_chunk_context(chunk), "title")


def extract_sources(metadata) -> list[dict]:
    """grounding_chunks에서 출처 목록 추출 (title 기준 중복 제거, 순서 유지)"""
    chunks = _get(metadata, "grounding_chunks", "groundingChunks")
    if not chunks:
        return []

    seen = set()
    sources = []
    for chunk in chunks:
        ctx = _chunk_context(chunk)
        if ctx is None:
            continue
        title = _get(ctx, "title") or ""
        if title in seen:
            continue
        seen.add(title)
        sources.append({
            "title": title,
            "text": _get(ctx, "text") or "",
            "store": _get(ctx, "file_search_store", "fileSearchStore") or "",
        })
    return sources


def map_supports_to_chunks(supports, chunks) -> dict[str, list[str]]:
    """응답 세그먼트 텍스트 → 근거 청크 title 목록"""
    mapping = {}
    if not supports or not chunks:
        return mapping

    for support in supports:
        titles = []
        for idx in _get(support, "grounding_chunk_indices", "groundingChunkIndices") or []:
            if 0 <= idx < len(chunks):
                title = _chunk_title(chunks[idx])
                if title:
                    titles.append(title)
        segment_text = _get(_get(support, "segment"), "text")
        if titles and segment_text:
            mapping[segment_text] = titles
    return mapping


def parse_response_sources(response) -> list[dict]:
    """generate_content 응답의 첫 candidate에서 출처 추출"""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    return extract_sources(getattr(candidates[0], "grounding_metadata", None))
