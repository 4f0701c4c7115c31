"""
Report Data Models

린트 결과(Report) 관련 데이터 모델들
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
from pydantic import BaseModel


class Severity(Enum):
    """메시지 심각도"""
    MESSAGE = "message"
    WARNING = "warning"
    FAILURE = "failure"


@dataclass(frozen=True)
class ReportMessage:
    """개별 리포트 메시지"""
    text: str
    severity: Severity
    file: Optional[str] = None
    line: Optional[int] = None
    rule: Optional[str] = None
    internal: bool = False

    def __post_init__(self):
        """데이터 검증"""
        if not self.text.strip():
            raise ValueError("Message text cannot be empty")
        if self.line is not None and self.line <= 0:
            raise ValueError("Line number must be positive")
        if self.line is not None and self.file is None:
            raise ValueError("A line number requires a file")

    @property
    def location(self) -> str:
        """'file:line' 형식 위치 문자열"""
        if self.file is None:
            return ""
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"

    def to_dict(self) -> Dict:
        """(message, severity, file, line) 레코드로 변환"""
        return {
            'message': self.text,
            'severity': self.severity.value,
            'file': self.file,
            'line': self.line,
            'rule': self.rule,
            'internal': self.internal,
        }


def message(text: str, file: Optional[str] = None, line: Optional[int] = None) -> ReportMessage:
    """정보성 메시지 생성"""
    return ReportMessage(text=text, severity=Severity.MESSAGE, file=file, line=line)


def warning(
    text: str,
    file: Optional[str] = None,
    line: Optional[int] = None,
    internal: bool = False,
) -> ReportMessage:
    """경고 메시지 생성 (internal=True면 도구 내부 진단)"""
    return ReportMessage(text=text, severity=Severity.WARNING, file=file, line=line, internal=internal)


def failure(text: str, file: Optional[str] = None, line: Optional[int] = None) -> ReportMessage:
    """실패(머지 차단) 메시지 생성"""
    return ReportMessage(text=text, severity=Severity.FAILURE, file=file, line=line)


@dataclass(frozen=True)
class Report:
    """한 번의 평가 실행 결과 (불변)"""
    failures: Tuple[ReportMessage, ...] = ()
    warnings: Tuple[ReportMessage, ...] = ()
    messages: Tuple[ReportMessage, ...] = ()

    def __post_init__(self):
        """튜플로 고정"""
        object.__setattr__(self, 'failures', tuple(self.failures))
        object.__setattr__(self, 'warnings', tuple(self.warnings))
        object.__setattr__(self, 'messages', tuple(self.messages))

    @classmethod
    def empty(cls) -> "Report":
        """빈 리포트 생성"""
        return cls()

    def extend(self, entries: Iterable[ReportMessage]) -> "Report":
        """엔트리를 추가한 새 리포트 반환"""
        failures = list(self.failures)
        warnings = list(self.warnings)
        messages = list(self.messages)

        buckets = {
            Severity.FAILURE: failures,
            Severity.WARNING: warnings,
            Severity.MESSAGE: messages,
        }
        for entry in entries:
            buckets[entry.severity].append(entry)

        return Report(
            failures=tuple(failures),
            warnings=tuple(warnings),
            messages=tuple(messages),
        )

    @property
    def entries(self) -> Tuple[ReportMessage, ...]:
        """전체 엔트리 (failure, warning, message 순)"""
        return self.failures + self.warnings + self.messages

    @property
    def passed(self) -> bool:
        """머지 차단 여부"""
        return not self.failures

    @property
    def is_clean(self) -> bool:
        """경고와 실패가 모두 없는지 확인"""
        return not self.failures and not self.warnings

    @property
    def internal_errors(self) -> List[ReportMessage]:
        """도구 내부 진단 메시지들만 반환"""
        return [e for e in self.entries if e.internal]

    def for_file(self, file_path: str) -> List[ReportMessage]:
        """특정 파일 관련 엔트리 반환"""
        return [e for e in self.entries if e.file == file_path]

    def to_dict(self) -> Dict:
        """딕셔너리로 변환"""
        return {
            'passed': self.passed,
            'failures': [e.to_dict() for e in self.failures],
            'warnings': [e.to_dict() for e in self.warnings],
            'messages': [e.to_dict() for e in self.messages],
        }


class ReportMessageResponse(BaseModel):
    """API 응답용 ReportMessage 모델"""
    message: str
    severity: str
    file: Optional[str] = None
    line: Optional[int] = None
    rule: Optional[str] = None
    internal: bool = False


class ReportResponse(BaseModel):
    """API 응답용 Report 모델"""
    passed: bool
    failures: List[ReportMessageResponse]
    warnings: List[ReportMessageResponse]
    messages: List[ReportMessageResponse]

    @classmethod
    def from_report(cls, report: Report) -> "ReportResponse":
        """Report에서 응답 모델 생성"""
        return cls(**report.to_dict())
