"""
ChangeSet Data Models

Pull Request 변경사항 스냅샷 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
from pydantic import BaseModel, field_validator


@dataclass(frozen=True)
class ChangeSet:
    """PR 한 건의 변경 파일, diff, 메타데이터 스냅샷"""
    modified_files: Sequence[str] = ()
    added_files: Sequence[str] = ()
    lines_changed: int = 0
    diffs: Mapping[str, str] = field(default_factory=dict)
    title: str = ""
    description: str = ""
    deleted_files: Sequence[str] = ()
    labels: Sequence[str] = ()

    def __post_init__(self):
        """데이터 검증 및 불변 컨테이너로 변환"""
        if self.lines_changed < 0:
            raise ValueError("lines_changed must be non-negative")

        object.__setattr__(self, 'modified_files', tuple(self.modified_files))
        object.__setattr__(self, 'added_files', tuple(self.added_files))
        object.__setattr__(self, 'deleted_files', tuple(self.deleted_files))
        object.__setattr__(self, 'labels', tuple(self.labels))
        object.__setattr__(self, 'diffs', MappingProxyType(dict(self.diffs)))
        object.__setattr__(self, 'title', self.title or "")
        object.__setattr__(self, 'description', self.description or "")

    @property
    def changed_files(self) -> Tuple[str, ...]:
        """수정 + 추가된 파일 (순서 유지, 중복 제거)"""
        return tuple(dict.fromkeys(self.modified_files + self.added_files))

    @property
    def all_files(self) -> Tuple[str, ...]:
        """삭제된 파일까지 포함한 전체 경로"""
        return tuple(dict.fromkeys(self.changed_files + self.deleted_files))

    def touches(self, path: str) -> bool:
        """경로가 이번 변경에 포함되는지 확인"""
        return path in self.all_files

    def diff_for(self, path: str) -> str:
        """파일 diff 반환 (없으면 빈 문자열)"""
        return self.diffs.get(path, "")


# Pydantic models for API validation
class ChangeSetRequest(BaseModel):
    """API/CLI 요청용 ChangeSet 모델"""
    modified_files: List[str] = []
    added_files: List[str] = []
    deleted_files: List[str] = []
    lines_changed: int = 0
    diffs: Dict[str, str] = {}
    title: str = ""
    description: Optional[str] = ""
    labels: List[str] = []

    @field_validator('lines_changed')
    @classmethod
    def validate_lines_changed(cls, v):
        if v < 0:
            raise ValueError('lines_changed must be non-negative')
        return v

    @field_validator('modified_files', 'added_files', 'deleted_files')
    @classmethod
    def validate_paths(cls, v):
        if any(not path.strip() for path in v):
            raise ValueError('File paths cannot be empty')
        return v

    def to_change_set(self) -> ChangeSet:
        """불변 ChangeSet으로 변환"""
        return ChangeSet(
            modified_files=self.modified_files,
            added_files=self.added_files,
            deleted_files=self.deleted_files,
            lines_changed=self.lines_changed,
            diffs=self.diffs,
            title=self.title,
            description=self.description or "",
            labels=self.labels,
        )
