"""Application listing filters."""

from sqlalchemy import Select

from app.models.application import Application
from app.schemas.application import ApplicationCriteria


class ApplicationFilter:
    """Translates listing criteria into SQL clauses."""

    def __init__(self, criteria: ApplicationCriteria):
        self.criteria = criteria

    def conditions(self) -> list:
        """Return the WHERE clauses for every criterion that is set."""
        criteria = self.criteria
        clauses = []

        if criteria.status is not None:
            clauses.append(Application.status == criteria.status)
        if criteria.job_id is not None:
            clauses.append(Application.job_id == criteria.job_id)
        if criteria.user_id is not None:
            clauses.append(Application.user_id == criteria.user_id)
        if criteria.company_id is not None:
            clauses.append(Application.company_id == criteria.company_id)

        if criteria.min_score is not None:
            clauses.append(Application.match_score >= criteria.min_score)
        if criteria.max_score is not None:
            clauses.append(Application.match_score <= criteria.max_score)

        if criteria.viewed_only:
            clauses.append(Application.viewed_by_employer.is_(True))
        if criteria.bookmarked_only:
            clauses.append(Application.is_bookmarked.is_(True))
        if criteria.source:
            clauses.append(Application.source == criteria.source)

        if criteria.applied_after is not None:
            clauses.append(Application.applied_at >= criteria.applied_after)
        if criteria.applied_before is not None:
            clauses.append(Application.applied_at <= criteria.applied_before)

        return clauses

    def apply(self, query: Select) -> Select:
        conditions = self.conditions()
        if conditions:
            query = query.where(*conditions)
        return query

    def apply_sorting(self, query: Select) -> Select:
        """Order by the requested key; ``id`` breaks ties for stable pages."""
        if self.criteria.sort_by == "score_desc":
            return query.order_by(Application.match_score.desc(), Application.id.asc())
        if self.criteria.sort_by == "score_asc":
            return query.order_by(Application.match_score.asc(), Application.id.asc())
        return query.order_by(Application.applied_at.desc(), Application.id.desc())
