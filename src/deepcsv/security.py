# -*- coding: utf-8 -*-
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional, Sequence

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_PHONE_RE = re.compile(r"\b(?:\+?\d{1,3}[- ]?)?(?:\d{2,4}[- ]?)\d{3,4}[- ]?\d{4}\b")
_CARD_RE = re.compile(r"\b(?:\d[ -]*?){13,19}\b")


@dataclass(frozen=True)
class RawLogPolicy:
    """CSV 원문 행(row) 로깅 정책.

    - 기본값: 원문 미로깅 ("REDACTED").
    - ``DEEPCSV_LOG_RAW=true`` 일 때만 앞부분 미리보기를 남긴다.
    """
    enabled: bool
    preview_chars: int = 200

    @staticmethod
    def from_env() -> "RawLogPolicy":
        enabled = os.getenv("DEEPCSV_LOG_RAW", "false").lower() == "true"
        try:
            preview_chars = int(os.getenv("DEEPCSV_LOG_PREVIEW_CHARS", "200"))
        except ValueError:
            preview_chars = 200
        return RawLogPolicy(enabled=enabled, preview_chars=max(0, preview_chars))


def mask_pii_text(text: str) -> str:
    """정규식 기반 PII 마스킹 (이메일, 전화번호, 카드번호)."""
    text = _EMAIL_RE.sub("[REDACTED_EMAIL]", text)
    text = _CARD_RE.sub("[REDACTED_CARD]", text)
    text = _PHONE_RE.sub("[REDACTED_PHONE]", text)
    return text


def safe_row_preview(tokens: Sequence[str], policy: Optional[RawLogPolicy] = None) -> str:
    """정책에 따라 레코드 미리보기 문자열을 반환.

    토큰 단위로 마스킹한 뒤 이어 붙이므로 필드 경계를 넘는 매칭은 없다.
    """
    if policy is None:
        policy = RawLogPolicy.from_env()
    if not policy.enabled:
        return "REDACTED"
    preview = ",".join(mask_pii_text(t) for t in tokens)
    if len(preview) > policy.preview_chars:
        return preview[: policy.preview_chars] + "..."
    return preview
