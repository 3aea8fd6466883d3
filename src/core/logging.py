"""
Run logging: 병합 실행 로그 생성/완료/저장

규칙:
- 병합 1회 = run log 1개 (성공/피드백/실패 모두)
- 이미지 바이트, base64, data URI는 기록 금지
- 실패 시 error_code + error_context 필수
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from src.core.ids import generate_run_id
from src.core.storage import atomic_write_json
from src.domain.errors import MergeError
from src.domain.schemas import EncodedImage, MergeOutcome, MergeRunLog

# =============================================================================
# Run Log Management
# =============================================================================


def create_run_log(model: str | None = None) -> MergeRunLog:
    """
    새 MergeRunLog 생성.

    Args:
        model: 요청 모델 ID

    Returns:
        초기화된 MergeRunLog
    """
    now = datetime.now(UTC).isoformat()

    return MergeRunLog(
        run_id=generate_run_id(),
        started_at=now,
        model=model,
        result="pending",
    )


def record_inputs(run_log: MergeRunLog, *images: EncodedImage) -> None:
    """입력 이미지 메타데이터 기록 (미디어 타입, 크기만)."""
    for role, image in zip(("base", "addition"), images, strict=False):
        run_log.inputs.append({
            "role": role,
            "media_type": image.media_type,
            "size": image.size,
        })


def complete_run_log(
    run_log: MergeRunLog,
    outcome: MergeOutcome | None = None,
    error: MergeError | None = None,
) -> None:
    """
    MergeRunLog 완료 처리.

    Args:
        run_log: MergeRunLog 인스턴스
        outcome: 성공 시 결과
        error: 실패 시 에러

    image_discarded는 병합 도중 services/merge.py가 직접 기록.
    """
    run_log.finished_at = datetime.now(UTC).isoformat()

    if outcome is not None:
        run_log.result = "success" if outcome.merged else "feedback"
        run_log.image_returned = outcome.merged or run_log.image_discarded
        run_log.text_length = len(outcome.text_response)
        return

    run_log.result = "failed"
    if error is not None:
        run_log.error_code = error.code
        run_log.error_context = {"message": error.message, **_jsonable(error.context)}


def save_run_log(run_log: MergeRunLog, logs_dir: Path) -> Path:
    """
    MergeRunLog를 파일로 저장.

    Args:
        run_log: MergeRunLog 인스턴스
        logs_dir: logs/ 디렉터리 경로

    Returns:
        저장된 파일 경로
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"run_{run_log.run_id}.json"
    atomic_write_json(log_path, run_log.to_dict())
    return log_path


def load_run_log(log_path: Path) -> dict[str, Any]:
    """Run log 파일 로드."""
    data: dict[str, Any] = json.loads(log_path.read_text(encoding="utf-8"))
    return data


def list_run_logs(logs_dir: Path) -> list[Path]:
    """
    logs/ 디렉터리의 모든 run log 파일 목록.

    Returns:
        로그 파일 경로 목록 (최신순)
    """
    if not logs_dir.exists():
        return []

    logs = list(logs_dir.glob("run_*.json"))
    logs.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return logs


def _jsonable(context: dict[str, Any]) -> dict[str, Any]:
    """JSON 직렬화 불가 값은 문자열로."""
    result: dict[str, Any] = {}
    for key, value in context.items():
        try:
            json.dumps(value)
            result[key] = value
        except (TypeError, ValueError):
            result[key] = str(value)
    return result
