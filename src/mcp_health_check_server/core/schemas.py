"""Pydantic models for tool output and the published JSON schema."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from .models import CategoryScore, Issue, RemediationEntry, ScoringResult
from .remediation import get_remediation

SeverityName = Literal["critical", "warning", "info"]
CategoryName = Literal["power", "system", "storage", "network", "security", "performance"]


class RemediationModel(BaseModel):
    fix_kind: Literal["fixable", "manual", "hardware"] = Field(
        description="fixable: a command exists; manual: needs judgement; hardware: needs a part."
    )
    command: str | None = Field(default=None, description="Command the user can run, if any.")
    guide: str = Field(description="Step-by-step guidance.")

    @classmethod
    def from_entry(cls, entry: RemediationEntry) -> RemediationModel:
        return cls(fix_kind=entry.fix_kind.value, command=entry.command, guide=entry.guide)


class IssueModel(BaseModel):
    severity: SeverityName
    title: str
    detail: str = ""
    raw: str = Field(default="", description="Verbatim evidence from the report.")
    recommendation: str = ""
    category: CategoryName | None = None
    parser_name: str | None = Field(default=None, description="Parser that produced the issue.")
    remediation: RemediationModel | None = None

    @classmethod
    def from_issue(cls, issue: Issue, *, include_remediation: bool = False) -> IssueModel:
        remediation = None
        if include_remediation:
            entry = get_remediation(issue)
            remediation = RemediationModel.from_entry(entry) if entry else None
        return cls(
            severity=issue.severity.value,
            title=issue.title,
            detail=issue.detail,
            raw=issue.raw,
            recommendation=issue.recommendation,
            category=issue.category.value if issue.category else None,
            parser_name=issue.parser_name,
            remediation=remediation,
        )


class IssueCountsModel(BaseModel):
    critical: int = 0
    warning: int = 0
    info: int = 0


class CategoryScoreModel(BaseModel):
    score: int | None = Field(description="0-100, or null when no report covered the category.")
    has_data: bool
    issue_counts: IssueCountsModel
    parsers: list[str] = Field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: CategoryScore) -> CategoryScoreModel:
        return cls(
            score=entry.score,
            has_data=entry.has_data,
            issue_counts=IssueCountsModel(**entry.issue_counts.to_dict()),
            parsers=list(entry.parsers),
        )


class ScoringResultModel(BaseModel):
    global_score: int | None = Field(
        description="Weighted average over categories with data; null when there is none."
    )
    category_scores: dict[CategoryName, CategoryScoreModel]
    issues: list[IssueModel] = Field(default_factory=list)
    total_issue_counts: IssueCountsModel
    categories_with_data: int
    total_categories: int

    @classmethod
    def from_result(
        cls,
        result: ScoringResult,
        *,
        issues: list[Issue] | None = None,
        include_remediation: bool = False,
    ) -> ScoringResultModel:
        """Build from a ScoringResult; ``issues`` overrides the (possibly filtered) issue list."""
        selected = result.all_issues if issues is None else issues
        return cls(
            global_score=result.global_score,
            category_scores={
                cat.value: CategoryScoreModel.from_entry(entry)
                for cat, entry in result.category_scores.items()
            },
            issues=[
                IssueModel.from_issue(i, include_remediation=include_remediation)
                for i in selected
            ],
            total_issue_counts=IssueCountsModel(**result.total_issue_counts.to_dict()),
            categories_with_data=result.categories_with_data,
            total_categories=result.total_categories,
        )


class ReportOutcomeModel(BaseModel):
    filename: str
    parser: str | None = Field(description="Winning parser name, null if unrecognized.")
    category: CategoryName | None = None
    score: int | None = Field(default=None, description="Informational per-report score.")
    summary: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
