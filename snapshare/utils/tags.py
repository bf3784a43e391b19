import json
from typing import Iterable, List, Optional, Union


def normalize_tags(tags: Optional[Union[str, Iterable[str]]]) -> List[str]:
    """
    태그 입력을 정리된 리스트로 변환
    - 문자열 또는 각 항목을 쉼표로 분리
    - 앞뒤 공백 제거, 빈 값 제외, 중복 제거(입력 순서 유지)
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = [tags]
    result: List[str] = []
    for item in tags:
        for tag in (item or "").split(","):
            cleaned = tag.strip()
            if cleaned and cleaned not in result:
                result.append(cleaned)
    return result


def encode_tags(tags: Iterable[str]) -> str:
    """DB 저장용 JSON 문자열"""
    return json.dumps(list(tags), ensure_ascii=False)


def decode_tags(raw: Optional[str]) -> List[str]:
    """
    DB의 태그 컬럼을 리스트로 변환
    - JSON이 아닌 값(쉼표 구분 문자열)도 허용
    """
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return normalize_tags(raw)
    if isinstance(value, list):
        return [str(tag) for tag in value]
    return normalize_tags(str(value))


def encoded_fragment(tag: str) -> str:
    """
    태그가 DB의 JSON 문자열 안에 저장되는 형태 (앞뒤 따옴표 제외)
    - 따옴표/역슬래시가 포함된 태그도 저장된 그대로 부분 일치 검색 가능
    """
    return json.dumps(tag, ensure_ascii=False)[1:-1]


def tags_contain_any(raw: Optional[str], terms: Iterable[str]) -> bool:
    """
    저장된 태그 중 하나라도 검색 태그 중 하나를 포함하는지 (대소문자 무시)
    - JSON의 대괄호/따옴표/쉼표가 아닌 태그 값 자체만 비교
    """
    tag_values = [tag.lower() for tag in decode_tags(raw)]
    return any(term.lower() in tag for term in terms for tag in tag_values)
